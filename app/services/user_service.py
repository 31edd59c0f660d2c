"""
User service: CRUD for users, addressed by username.

Passwords are hashed by the reconciler's field table and never leave
this module.  Username/email uniqueness is checked with one query per
write against every *other* user, so resubmitting your own values is
never a conflict.  The check and the write are separate statements; a
concurrent writer can still slip in between, in which case the unique
constraints reject the write as a store error.
"""
import logging
from typing import Any

from sqlalchemy import delete, insert, select, update

from app import reconciler
from app.errors import Rejection
from app.identifiers import validate_username
from app.integrity import find_user_conflict
from app.models import users
from app.reconciler import USER, Operation
from app.store import Store

logger = logging.getLogger(__name__)

BAD_USERNAME = Rejection.invalid("Bad request. Invalid username.")


async def _fetch(store: Store, username: str) -> dict[str, Any] | None:
    return await store.fetch_one(select(users).where(users.c.username == username))


async def list_users(store: Store) -> list[dict]:
    rows = await store.fetch_all(select(users).order_by(users.c.id))
    return [reconciler.present(USER, row) for row in rows]


async def get_user(store: Store, raw_username: str) -> dict | Rejection:
    username = validate_username(raw_username)
    if username is None:
        return BAD_USERNAME

    row = await _fetch(store, username)
    if row is None:
        return Rejection.not_found("User wasn't found!")
    return reconciler.present(USER, row)


async def create_user(store: Store, payload: dict) -> dict | Rejection:
    rejection = reconciler.check_payload(USER, Operation.CREATE, payload)
    if rejection is not None:
        return rejection

    outcome = reconciler.reconcile(USER, Operation.CREATE, payload, now=reconciler.utcnow())
    if isinstance(outcome, Rejection):
        return outcome

    conflict = await find_user_conflict(store, outcome.row["username"], outcome.row["email"])
    if conflict is not None:
        return conflict

    user_id = await store.insert(insert(users).values(**outcome.row))
    logger.info("Created user id=%s username=%r", user_id, outcome.row["username"])
    return {**outcome.body, "id": user_id}


async def update_user(
    store: Store, raw_username: str, payload: dict, operation: Operation
) -> dict | Rejection:
    """
    Apply a REPLACE (PUT) or MERGE (PATCH) to the user named *raw_username*.

    Only the username/email actually being written are checked for
    uniqueness, and the target row is excluded from that check.
    """
    username = validate_username(raw_username)
    if username is None:
        return BAD_USERNAME

    rejection = reconciler.check_payload(USER, operation, payload)
    if rejection is not None:
        return rejection

    existing = await _fetch(store, username)
    outcome = reconciler.reconcile(USER, operation, payload, existing, now=reconciler.utcnow())
    if isinstance(outcome, Rejection):
        return outcome

    row = outcome.row
    conflict = await find_user_conflict(
        store,
        username=row["username"] if "username" in outcome.supplied else None,
        email=row["email"] if "email" in outcome.supplied else None,
        exclude_id=row["id"],
    )
    if conflict is not None:
        logger.debug("Rejected %s of user %r: %s", operation.value, username, conflict.message)
        return conflict

    await store.execute(
        update(users)
        .where(users.c.id == row["id"])
        .values(
            username=row["username"],
            email=row["email"],
            password=row["password"],
            updated_at=row["updated_at"],
        )
    )
    logger.info("Updated user id=%s (%s: %s)", row["id"], operation.value, sorted(outcome.supplied))
    return outcome.body


async def delete_user(store: Store, raw_username: str) -> None | Rejection:
    username = validate_username(raw_username)
    if username is None:
        return BAD_USERNAME

    existing = await _fetch(store, username)
    outcome = reconciler.reconcile(USER, Operation.DELETE, existing=existing, now=reconciler.utcnow())
    if isinstance(outcome, Rejection):
        return outcome

    await store.execute(delete(users).where(users.c.id == existing["id"]))
    logger.info("Deleted user id=%s username=%r", existing["id"], username)
    return None
