"""
Unit tests for the pure building blocks: tag codec, identifier
validation and the reconciler.  None of them touch the database, so the
per-test schema setup from the parent conftest is replaced by a no-op.
"""
from datetime import datetime, timedelta, timezone

import pytest


@pytest.fixture(autouse=True)
def setup_db():
    yield


@pytest.fixture
def now() -> datetime:
    return datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


@pytest.fixture
def earlier(now: datetime) -> datetime:
    return now - timedelta(days=1)
