"""SQLAlchemy-backed key-value store.

One row per key in ``kv_entries``. Each operation runs in its own
session and commits before returning, so a completed ``set`` is durable
and visible to every later ``get``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from rampa.core.errors import PersistenceError
from rampa.storage.models import Base, KeyValueEntry

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

    from rampa.config.schema import StorageConfig

logger = logging.getLogger(__name__)


class SqlStore:
    """Async key-value store over a SQLAlchemy session factory."""

    def __init__(
        self,
        factory: async_sessionmaker[AsyncSession],
        engine: AsyncEngine | None = None,
    ) -> None:
        self._factory = factory
        self._engine = engine

    async def get(self, key: str) -> str | None:
        try:
            async with self._factory() as session:
                entry = await session.get(KeyValueEntry, key)
                return entry.value if entry is not None else None
        except SQLAlchemyError as e:
            msg = f"Cannot read key {key!r}: {e}"
            raise PersistenceError(msg) from e

    async def set(self, key: str, value: str) -> None:
        try:
            async with self._factory() as session:
                entry = await session.get(KeyValueEntry, key)
                if entry is None:
                    session.add(KeyValueEntry(key=key, value=value))
                else:
                    entry.value = value
                await session.commit()
        except SQLAlchemyError as e:
            msg = f"Cannot write key {key!r}: {e}"
            raise PersistenceError(msg) from e
        logger.debug("Wrote %d chars to %s", len(value), key)

    async def remove(self, key: str) -> None:
        try:
            async with self._factory() as session:
                await session.execute(
                    delete(KeyValueEntry).where(KeyValueEntry.key == key)
                )
                await session.commit()
        except SQLAlchemyError as e:
            msg = f"Cannot remove key {key!r}: {e}"
            raise PersistenceError(msg) from e

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()


async def create_sql_store(config: StorageConfig) -> SqlStore:
    """Create engine, ensure the table exists, and wrap it in a SqlStore."""
    url = config.url
    if "~" in url:
        url = url.replace("~", str(Path.home()))

    # Ensure parent directory exists for sqlite
    if url.startswith("sqlite"):
        db_path = url.split("///")[-1] if "///" in url else ""
        if db_path and db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    engine_kwargs: dict[str, object] = {}
    if url.startswith("sqlite"):
        if ":memory:" in url or url.endswith("://"):
            # In-memory SQLite needs StaticPool so all queries share
            # the same connection (and thus the same in-memory DB).
            from sqlalchemy.pool import StaticPool

            engine_kwargs["poolclass"] = StaticPool
            engine_kwargs["connect_args"] = {"check_same_thread": False}
        else:
            from sqlalchemy.pool import NullPool

            engine_kwargs["poolclass"] = NullPool
    else:
        engine_kwargs["pool_size"] = config.pool_size
        engine_kwargs["max_overflow"] = config.max_overflow
        engine_kwargs["pool_timeout"] = config.pool_timeout
        engine_kwargs["pool_recycle"] = config.pool_recycle
        engine_kwargs["pool_pre_ping"] = True

    engine = create_async_engine(url, **engine_kwargs)

    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    except SQLAlchemyError as e:
        await engine.dispose()
        msg = f"Cannot initialise key-value table: {e}"
        raise PersistenceError(msg) from e

    factory = async_sessionmaker(engine, expire_on_commit=False)
    return SqlStore(factory, engine)
