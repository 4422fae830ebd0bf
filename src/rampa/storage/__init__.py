"""Key-value persistence adapters."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rampa.storage.base import KeyValueStore
from rampa.storage.memory import MemoryStore
from rampa.storage.sql import SqlStore, create_sql_store

if TYPE_CHECKING:
    from rampa.config.schema import RampaConfig

__all__ = [
    "KeyValueStore",
    "MemoryStore",
    "SqlStore",
    "create_sql_store",
    "open_store",
]


async def open_store(config: RampaConfig) -> KeyValueStore:
    """Open the store selected by ``config.storage.backend``."""
    if config.storage.backend == "memory":
        return MemoryStore()
    return await create_sql_store(config.storage)
