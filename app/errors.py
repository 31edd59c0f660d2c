"""
Error taxonomy for the API.

Two mechanisms, deliberately kept apart:

- ``Rejection`` is a plain value.  Malformed identifiers, missing fields,
  unknown resources and conflicts are ordinary outcomes of a request; the
  reconciler, the integrity checks and the services *return* them and the
  router turns them into an HTTP error response.
- ``StoreError`` is an exception.  It is raised only by the store adapter
  when the database itself fails, and it surfaces as a generic 500.
"""
import enum
from dataclasses import dataclass
from typing import Any

from fastapi import HTTPException


class RejectionKind(str, enum.Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"


_DEFAULT_STATUS = {
    RejectionKind.VALIDATION: 400,
    RejectionKind.NOT_FOUND: 404,
    RejectionKind.CONFLICT: 409,
}


@dataclass(frozen=True)
class Rejection:
    kind: RejectionKind
    message: str
    status_code: int

    @classmethod
    def invalid(cls, message: str) -> "Rejection":
        return cls(RejectionKind.VALIDATION, message, _DEFAULT_STATUS[RejectionKind.VALIDATION])

    @classmethod
    def not_found(cls, message: str) -> "Rejection":
        return cls(RejectionKind.NOT_FOUND, message, _DEFAULT_STATUS[RejectionKind.NOT_FOUND])

    @classmethod
    def conflict(cls, message: str, status_code: int = 409) -> "Rejection":
        return cls(RejectionKind.CONFLICT, message, status_code)


BAD_ID = Rejection.invalid("Bad request. Invalid ID.")


class StoreError(Exception):
    """The store adapter failed to execute a statement."""


def unwrap(outcome: Any) -> Any:
    """
    Return *outcome* unchanged, or raise the ``HTTPException`` matching it
    when it is a ``Rejection``.  Used by the routers.
    """
    if isinstance(outcome, Rejection):
        raise HTTPException(status_code=outcome.status_code, detail=outcome.message)
    return outcome
