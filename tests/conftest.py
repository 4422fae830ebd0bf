"""Shared test fixtures for rampa."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from rampa.config.schema import StorageConfig
from rampa.posts.models import Post
from rampa.posts.repository import PostRepository
from rampa.storage.memory import MemoryStore
from rampa.storage.sql import SqlStore, create_sql_store

BASE_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def memory_store() -> MemoryStore:
    """Empty in-process store."""
    return MemoryStore()


@pytest.fixture
async def sql_store() -> SqlStore:  # type: ignore[misc]
    """In-memory SQLite key-value store."""
    store = await create_sql_store(StorageConfig(url="sqlite+aiosqlite://"))
    yield store
    await store.close()


@pytest.fixture
def repo(memory_store: MemoryStore) -> PostRepository:
    """Repository over an empty store with demo seeding disabled."""
    return PostRepository(memory_store, seed=False)


@pytest.fixture
def make_post() -> Any:
    """Factory fixture for Post with sensible defaults.

    ``minutes`` offsets ``created_at`` from a fixed base time so tests can
    control ordering.
    """
    counter = iter(range(1, 10_000))

    def _make(*, minutes: int = 0, **overrides: Any) -> Post:
        n = next(counter)
        defaults: dict[str, Any] = {
            "id": f"post-{n}",
            "title": f"Lugar {n}",
            "description": "Entrada com degrau alto.",
            "accessibility_tags": ["Rampa"],
            "created_at": BASE_TIME + timedelta(minutes=minutes),
        }
        defaults.update(overrides)
        return Post(**defaults)

    return _make
