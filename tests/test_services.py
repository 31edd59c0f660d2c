"""
Direct service-layer tests: exercise the sequencing functions and the
store adapter against a live session, without HTTP in between.
"""
import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from app import database
from app.errors import Rejection, RejectionKind, StoreError
from app.integrity import ensure_post_exists, find_user_conflict
from app.models import posts, users
from app.reconciler import Operation
from app.security import verify_password
from app.services import comment_service, post_service, user_service
from app.store import Store

POST_PAYLOAD = {"title": "A", "content": "B", "category": "C", "tags": ["x", "y"]}


# ---------------------------------------------------------------------------
# post_service
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_list_posts_empty(store: Store):
    assert await post_service.list_posts(store) == []


@pytest.mark.asyncio
async def test_create_post_stores_flat_tags(store: Store):
    post = await post_service.create_post(store, POST_PAYLOAD)
    assert post["tags"] == ["x", "y"]

    row = await store.fetch_one(select(posts).where(posts.c.id == post["id"]))
    assert row["tags"] == "x,y"


@pytest.mark.asyncio
async def test_update_post_merge(store: Store):
    post = await post_service.create_post(store, POST_PAYLOAD)
    updated = await post_service.update_post(store, str(post["id"]), {"tags": ["z"]}, Operation.MERGE)
    assert updated["tags"] == ["z"]
    assert updated["title"] == "A"
    assert updated["updated_at"] > post["updated_at"]
    assert updated["created_at"] == post["created_at"]


@pytest.mark.asyncio
async def test_get_post_rejections(store: Store):
    bad = await post_service.get_post(store, "x")
    assert isinstance(bad, Rejection)
    assert bad.status_code == 400

    missing = await post_service.get_post(store, "12")
    assert isinstance(missing, Rejection)
    assert missing.kind is RejectionKind.NOT_FOUND


@pytest.mark.asyncio
async def test_delete_post(store: Store):
    post = await post_service.create_post(store, POST_PAYLOAD)
    assert await post_service.delete_post(store, str(post["id"])) is None
    assert await post_service.list_posts(store) == []


# ---------------------------------------------------------------------------
# comment_service
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_create_comment_and_list(store: Store):
    post = await post_service.create_post(store, POST_PAYLOAD)
    comment = await comment_service.create_comment(
        store, str(post["id"]), {"author": "ann", "content": "hi"}
    )
    assert comment["post_id"] == post["id"]

    listed = await comment_service.list_comments(store, str(post["id"]))
    assert [c["id"] for c in listed] == [comment["id"]]


@pytest.mark.asyncio
async def test_create_comment_on_missing_post(store: Store):
    outcome = await comment_service.create_comment(store, "9999", {"author": "a", "content": "b"})
    assert isinstance(outcome, Rejection)
    assert outcome.status_code == 404


# ---------------------------------------------------------------------------
# user_service
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_create_user_persists_hash(store: Store):
    user = await user_service.create_user(
        store, {"username": "alice", "email": "a@example.com", "password": "s3cret"}
    )
    assert "password" not in user

    row = await store.fetch_one(select(users).where(users.c.id == user["id"]))
    assert row["password"] != "s3cret"
    assert verify_password("s3cret", row["password"])


@pytest.mark.asyncio
async def test_replace_user_rehashes_password(store: Store):
    await user_service.create_user(
        store, {"username": "alice", "email": "a@example.com", "password": "old"}
    )
    await user_service.update_user(
        store,
        "alice",
        {"username": "alice", "email": "a@example.com", "password": "new"},
        Operation.REPLACE,
    )
    row = await store.fetch_one(select(users).where(users.c.username == "alice"))
    assert verify_password("new", row["password"])


# ---------------------------------------------------------------------------
# integrity
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_ensure_post_exists(store: Store):
    assert (await ensure_post_exists(store, 1)).status_code == 404
    post = await post_service.create_post(store, POST_PAYLOAD)
    assert await ensure_post_exists(store, post["id"]) is None


@pytest.mark.asyncio
async def test_find_user_conflict_excludes_target(store: Store):
    alice = await user_service.create_user(
        store, {"username": "alice", "email": "a@example.com", "password": "pw"}
    )
    bob = await user_service.create_user(
        store, {"username": "bob", "email": "b@example.com", "password": "pw"}
    )

    assert await find_user_conflict(store, "alice", "a@example.com", exclude_id=alice["id"]) is None
    assert (await find_user_conflict(store, "alice", None, exclude_id=bob["id"])).status_code == 409
    assert (await find_user_conflict(store, None, "b@example.com")).status_code == 409
    assert await find_user_conflict(store, "carol", "c@example.com") is None
    assert await find_user_conflict(store) is None


# ---------------------------------------------------------------------------
# store adapter
# ---------------------------------------------------------------------------

class _BrokenSession:
    async def execute(self, statement):
        raise OperationalError("SELECT 1", {}, Exception("connection lost"))


@pytest.mark.asyncio
async def test_store_wraps_database_failures():
    with pytest.raises(StoreError):
        await Store(_BrokenSession()).execute(select(posts))


class _CommitFailsSession:
    def __init__(self):
        self.rolled_back = False

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return False

    async def commit(self):
        raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

    async def rollback(self):
        self.rolled_back = True


@pytest.mark.asyncio
async def test_get_db_wraps_commit_failures(monkeypatch):
    session = _CommitFailsSession()
    monkeypatch.setattr(database, "async_session", lambda: session)

    dependency = database.get_db()
    assert await dependency.__anext__() is session
    with pytest.raises(StoreError):
        await dependency.__anext__()
    assert session.rolled_back


@pytest.mark.asyncio
async def test_store_reports_affected_rows(store: Store):
    await post_service.create_post(store, POST_PAYLOAD)
    await post_service.create_post(store, POST_PAYLOAD)
    result = await store.execute(posts.update().values(category="K"))
    assert result.affected == 2
    assert result.rows == []
