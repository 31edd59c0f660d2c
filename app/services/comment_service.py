"""
Comment service: CRUD for comments, always addressed through their post.

A comment's ``post_id`` is fixed at creation.  Reads under the wrong post
answer 404, mutations under the wrong post answer 400 and leave the
comment untouched.
"""
import logging
from typing import Any

from sqlalchemy import delete, insert, select, update

from app import reconciler
from app.errors import BAD_ID, Rejection
from app.identifiers import validate_id
from app.integrity import ensure_post_exists
from app.models import comments
from app.reconciler import COMMENT, Operation
from app.store import Store

logger = logging.getLogger(__name__)


def _ids(raw_post_id: str, raw_comment_id: str) -> tuple[int, int] | None:
    post_id = validate_id(raw_post_id)
    comment_id = validate_id(raw_comment_id)
    if post_id is None or comment_id is None:
        return None
    return post_id, comment_id


async def _fetch(store: Store, comment_id: int) -> dict[str, Any] | None:
    return await store.fetch_one(select(comments).where(comments.c.id == comment_id))


async def list_comments(store: Store, raw_post_id: str) -> list[dict] | Rejection:
    post_id = validate_id(raw_post_id)
    if post_id is None:
        return BAD_ID

    missing = await ensure_post_exists(store, post_id)
    if missing is not None:
        return missing

    rows = await store.fetch_all(
        select(comments).where(comments.c.post_id == post_id).order_by(comments.c.id)
    )
    return [reconciler.present(COMMENT, row) for row in rows]


async def get_comment(store: Store, raw_post_id: str, raw_comment_id: str) -> dict | Rejection:
    ids = _ids(raw_post_id, raw_comment_id)
    if ids is None:
        return BAD_ID
    post_id, comment_id = ids

    row = await store.fetch_one(
        select(comments).where(comments.c.post_id == post_id, comments.c.id == comment_id)
    )
    if row is None:
        return Rejection.not_found("Comment wasn't found!")
    return reconciler.present(COMMENT, row)


async def create_comment(store: Store, raw_post_id: str, payload: dict) -> dict | Rejection:
    """
    Attach a new comment to the post at *raw_post_id*.

    The parent is looked up before the payload is examined, so a missing
    post answers 404 whatever the body contains.
    """
    post_id = validate_id(raw_post_id)
    if post_id is None:
        return BAD_ID

    missing = await ensure_post_exists(store, post_id)
    if missing is not None:
        return missing

    outcome = reconciler.reconcile(
        COMMENT, Operation.CREATE, payload, now=reconciler.utcnow(), parent_id=post_id
    )
    if isinstance(outcome, Rejection):
        return outcome

    comment_id = await store.insert(insert(comments).values(**outcome.row))
    logger.info("Created comment id=%s on post id=%s", comment_id, post_id)
    return {**outcome.body, "id": comment_id}


async def update_comment(
    store: Store,
    raw_post_id: str,
    raw_comment_id: str,
    payload: dict,
    operation: Operation,
) -> dict | Rejection:
    ids = _ids(raw_post_id, raw_comment_id)
    if ids is None:
        return BAD_ID
    post_id, comment_id = ids

    rejection = reconciler.check_payload(COMMENT, operation, payload)
    if rejection is not None:
        return rejection

    existing = await _fetch(store, comment_id)
    outcome = reconciler.reconcile(
        COMMENT, operation, payload, existing, now=reconciler.utcnow(), parent_id=post_id
    )
    if isinstance(outcome, Rejection):
        logger.debug("Rejected %s of comment %s: %s", operation.value, comment_id, outcome.message)
        return outcome

    row = outcome.row
    await store.execute(
        update(comments)
        .where(comments.c.id == comment_id)
        .values(author=row["author"], content=row["content"], updated_at=row["updated_at"])
    )
    logger.info("Updated comment id=%s (%s)", comment_id, operation.value)
    return outcome.body


async def delete_comment(store: Store, raw_post_id: str, raw_comment_id: str) -> None | Rejection:
    ids = _ids(raw_post_id, raw_comment_id)
    if ids is None:
        return BAD_ID
    post_id, comment_id = ids

    existing = await _fetch(store, comment_id)
    outcome = reconciler.reconcile(
        COMMENT, Operation.DELETE, existing=existing, now=reconciler.utcnow(), parent_id=post_id
    )
    if isinstance(outcome, Rejection):
        return outcome

    await store.execute(delete(comments).where(comments.c.id == comment_id))
    logger.info("Deleted comment id=%s from post id=%s", comment_id, post_id)
    return None
