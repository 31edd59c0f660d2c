"""
Cross-resource integrity rules that need the store, checked before any
mutating statement.

Each check returns a ``Rejection`` when the rule is violated and None
otherwise.  Each runs one small query and is not protected against
concurrent writers.  The comment-to-post match needs no query and lives
in the reconciler.
"""
from sqlalchemy import and_, or_, select

from app.errors import Rejection
from app.models import posts, users
from app.store import Store


async def ensure_post_exists(store: Store, post_id: int) -> Rejection | None:
    row = await store.fetch_one(select(posts.c.id).where(posts.c.id == post_id))
    if row is None:
        return Rejection.not_found("Post wasn't found!")
    return None


async def find_user_conflict(
    store: Store,
    username: str | None = None,
    email: str | None = None,
    exclude_id: int | None = None,
) -> Rejection | None:
    """
    Refuse *username* / *email* if another user already has that username
    or that email.

    Only the values being written are checked, and the row identified by
    *exclude_id* (the user being updated) never conflicts with itself.
    """
    conditions = []
    if username is not None:
        conditions.append(users.c.username == username)
    if email is not None:
        conditions.append(users.c.email == email)
    if not conditions:
        return None

    clashes = or_(*conditions)
    if exclude_id is not None:
        clashes = and_(clashes, users.c.id != exclude_id)

    row = await store.fetch_one(select(users.c.id).where(clashes).limit(1))
    if row is not None:
        return Rejection.conflict("Username or email is already in use!")
    return None
