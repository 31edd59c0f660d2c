"""
Mutation reconciler: decides what a write persists and what it returns.

Every resource kind is described by a ``ResourceSpec``: its client-writable
fields, the predicate each value must satisfy, how a value is converted for
storage and back, and whether it is shown in responses.  One shared
algorithm applies the four operation kinds to any resource:

- CREATE and REPLACE need every field present, non-null and valid.  Nothing
  is ever defaulted from the stored row.
- MERGE overrides only the fields that are present and non-null; the rest
  are carried over from the stored row.  At least one field must be
  supplied, and supplied fields must still be valid.
- DELETE only needs the stored row to exist.

``created_at`` survives every update untouched and ``updated_at`` is set
to *now* on every successful mutation.

Nothing in this module touches the store or keeps state between calls.
The caller fetches the current row, passes it in together with the clock
reading, and persists the ``Resolution.row`` it gets back, or relays the
``Rejection``.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Mapping

from app import tags as tag_codec
from app.errors import Rejection
from app.identifiers import validate_username
from app.security import hash_password


class Operation(str, enum.Enum):
    CREATE = "create"
    REPLACE = "replace"
    MERGE = "merge"
    DELETE = "delete"


# ---------------------------------------------------------------------------
# Field tables
# ---------------------------------------------------------------------------

def non_empty_text(value: Any) -> bool:
    return isinstance(value, str) and value != ""


def string_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(item, str) for item in value)


def username_text(value: Any) -> bool:
    """Usernames follow the path rule: non-blank once trimmed."""
    return validate_username(value) is not None


def _same(value: Any) -> Any:
    return value


@dataclass(frozen=True)
class FieldSpec:
    name: str
    is_valid: Callable[[Any], bool] = non_empty_text
    to_store: Callable[[Any], Any] = _same
    from_store: Callable[[Any], Any] = _same
    exposed: bool = True


@dataclass(frozen=True)
class ResourceSpec:
    label: str
    fields: tuple[FieldSpec, ...]
    # Column pointing at the owning resource.  Set from the path on CREATE,
    # immutable afterwards.
    parent_key: str | None = None

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(f.name for f in self.fields)


POST = ResourceSpec(
    label="Post",
    fields=(
        FieldSpec("title"),
        FieldSpec("content"),
        FieldSpec("category"),
        FieldSpec(
            "tags",
            is_valid=string_list,
            to_store=tag_codec.encode,
            from_store=tag_codec.decode,
        ),
    ),
)

COMMENT = ResourceSpec(
    label="Comment",
    fields=(FieldSpec("author"), FieldSpec("content")),
    parent_key="post_id",
)

USER = ResourceSpec(
    label="User",
    fields=(
        # Stored trimmed so the user stays addressable by /users/{username}.
        FieldSpec("username", is_valid=username_text, to_store=validate_username),
        FieldSpec("email"),
        FieldSpec("password", to_store=hash_password, exposed=False),
    ),
)


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Resolution:
    row: dict[str, Any]
    """Complete row state to persist, in storage form."""

    body: dict[str, Any]
    """Response representation of ``row``."""

    supplied: frozenset[str]
    """Fields whose value came from the payload."""


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    # SQLite hands back naive datetimes for DateTime(timezone=True) columns.
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# ---------------------------------------------------------------------------
# Algorithm
# ---------------------------------------------------------------------------

def check_parent(stored_parent_id: int, addressed_parent_id: int | None) -> Rejection | None:
    """
    A comment addressed under ``/posts/{p}/comments/{c}`` must belong to
    post ``p``.  A mismatch is refused, never corrected.
    """
    if stored_parent_id != addressed_parent_id:
        return Rejection.conflict(
            "Comment doesn't belong to the specified post!", status_code=400
        )
    return None


def supplied_fields(resource: ResourceSpec, payload: Mapping[str, Any]) -> dict[str, Any]:
    """Recognised fields that are present in *payload* with a non-null value."""
    return {
        name: payload[name]
        for name in resource.field_names
        if payload.get(name) is not None
    }


def check_payload(
    resource: ResourceSpec, operation: Operation, payload: Mapping[str, Any]
) -> Rejection | None:
    """
    Validate *payload* for *operation* without looking at stored state.

    Services call this before their first store access so that a hopeless
    request costs no queries; ``reconcile`` calls it again.
    """
    if operation is Operation.DELETE:
        return None

    supplied = supplied_fields(resource, payload)
    if operation is Operation.MERGE:
        if not supplied:
            return Rejection.invalid("PATCH request must contain at least one field!")
        required = [f for f in resource.fields if f.name in supplied]
    else:
        required = list(resource.fields)

    for f in required:
        if f.name not in supplied:
            if operation is Operation.REPLACE:
                return Rejection.invalid("PUT request missing required fields!")
            return Rejection.invalid("Missing fields or invalid format!")
        if not f.is_valid(supplied[f.name]):
            return Rejection.invalid(f"Invalid value for field '{f.name}'!")
    return None


def present(resource: ResourceSpec, row: Mapping[str, Any]) -> dict[str, Any]:
    """Turn a stored row into its response representation."""
    body: dict[str, Any] = {"id": row.get("id")}
    if resource.parent_key:
        body[resource.parent_key] = row[resource.parent_key]
    for f in resource.fields:
        if f.exposed:
            body[f.name] = f.from_store(row.get(f.name))
    body["created_at"] = as_utc(row["created_at"])
    body["updated_at"] = as_utc(row["updated_at"])
    return body


def reconcile(
    resource: ResourceSpec,
    operation: Operation,
    payload: Mapping[str, Any] | None = None,
    existing: Mapping[str, Any] | None = None,
    *,
    now: datetime,
    parent_id: int | None = None,
) -> Resolution | Rejection:
    """
    Compute the outcome of applying *operation* with *payload* to *existing*.

    For resources with a ``parent_key``, *parent_id* is the parent addressed
    by the request.  It becomes the row's parent on CREATE and must match
    the stored parent for every other operation.
    """
    payload = payload or {}

    rejection = check_payload(resource, operation, payload)
    if rejection is not None:
        return rejection

    if operation is not Operation.CREATE:
        if existing is None:
            return Rejection.not_found(f"{resource.label} wasn't found!")
        if resource.parent_key:
            rejection = check_parent(existing[resource.parent_key], parent_id)
            if rejection is not None:
                return rejection

    if operation is Operation.DELETE:
        return Resolution(row=dict(existing), body={}, supplied=frozenset())

    supplied = supplied_fields(resource, payload)
    row: dict[str, Any] = {}
    if existing is not None:
        row["id"] = existing["id"]

    for f in resource.fields:
        if f.name in supplied:
            row[f.name] = f.to_store(supplied[f.name])
        else:
            # Only MERGE gets here: check_payload rejects gaps otherwise.
            row[f.name] = existing[f.name]

    if resource.parent_key:
        row[resource.parent_key] = parent_id if existing is None else existing[resource.parent_key]

    row["created_at"] = now if existing is None else existing["created_at"]
    row["updated_at"] = now

    return Resolution(row=row, body=present(resource, row), supplied=frozenset(supplied))
