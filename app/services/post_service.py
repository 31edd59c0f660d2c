"""
Post service: sequencing for the Post resource.

Design notes
------------
- Tags live in a single text column (see ``app.tags``); rows are decoded
  through ``reconciler.present`` on the way out, so every response shows
  ``tags`` as a list.
- Reads are never cached: each call re-fetches from the store.
- Writes are a single UPDATE/INSERT/DELETE of the complete row state the
  reconciler produced.  Validation failures return before the first
  statement is issued.
"""
import logging
from typing import Any

from sqlalchemy import delete, insert, or_, select, update

from app import reconciler
from app.errors import BAD_ID, Rejection
from app.identifiers import validate_id
from app.models import posts
from app.reconciler import POST, Operation
from app.store import Store

logger = logging.getLogger(__name__)


def _writable(row: dict[str, Any]) -> dict[str, Any]:
    """Columns an UPDATE rewrites: every client field plus ``updated_at``."""
    values = {name: row[name] for name in POST.field_names}
    values["updated_at"] = row["updated_at"]
    return values


async def _fetch(store: Store, post_id: int) -> dict[str, Any] | None:
    return await store.fetch_one(select(posts).where(posts.c.id == post_id))


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------

async def list_posts(store: Store) -> list[dict]:
    rows = await store.fetch_all(select(posts).order_by(posts.c.id))
    return [reconciler.present(POST, row) for row in rows]


async def search_posts(store: Store, term: str | None) -> list[dict]:
    """
    Return posts whose title, content, category or tag text contains
    *term*.  ``%`` and ``_`` in *term* match literally; an empty term
    matches everything.
    """
    q = select(posts).order_by(posts.c.id)
    if term:
        q = q.where(
            or_(
                posts.c.title.contains(term, autoescape=True),
                posts.c.content.contains(term, autoescape=True),
                posts.c.category.contains(term, autoescape=True),
                posts.c.tags.contains(term, autoescape=True),
            )
        )
    rows = await store.fetch_all(q)
    return [reconciler.present(POST, row) for row in rows]


async def get_post(store: Store, raw_id: str) -> dict | Rejection:
    post_id = validate_id(raw_id)
    if post_id is None:
        return BAD_ID

    row = await _fetch(store, post_id)
    if row is None:
        return Rejection.not_found("Post wasn't found!")
    return reconciler.present(POST, row)


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------

async def create_post(store: Store, payload: dict) -> dict | Rejection:
    outcome = reconciler.reconcile(POST, Operation.CREATE, payload, now=reconciler.utcnow())
    if isinstance(outcome, Rejection):
        return outcome

    post_id = await store.insert(insert(posts).values(**outcome.row))
    logger.info("Created post id=%s", post_id)
    return {**outcome.body, "id": post_id}


async def update_post(
    store: Store, raw_id: str, payload: dict, operation: Operation
) -> dict | Rejection:
    """Apply a REPLACE (PUT) or MERGE (PATCH) to the post at *raw_id*."""
    post_id = validate_id(raw_id)
    if post_id is None:
        return BAD_ID

    rejection = reconciler.check_payload(POST, operation, payload)
    if rejection is not None:
        logger.debug("Rejected %s of post %s: %s", operation.value, post_id, rejection.message)
        return rejection

    existing = await _fetch(store, post_id)
    outcome = reconciler.reconcile(
        POST, operation, payload, existing, now=reconciler.utcnow()
    )
    if isinstance(outcome, Rejection):
        return outcome

    await store.execute(
        update(posts).where(posts.c.id == post_id).values(**_writable(outcome.row))
    )
    logger.info("Updated post id=%s (%s: %s)", post_id, operation.value, sorted(outcome.supplied))
    return outcome.body


async def delete_post(store: Store, raw_id: str) -> None | Rejection:
    post_id = validate_id(raw_id)
    if post_id is None:
        return BAD_ID

    existing = await _fetch(store, post_id)
    outcome = reconciler.reconcile(POST, Operation.DELETE, existing=existing, now=reconciler.utcnow())
    if isinstance(outcome, Rejection):
        return outcome

    await store.execute(delete(posts).where(posts.c.id == post_id))
    logger.info("Deleted post id=%s", post_id)
    return None
