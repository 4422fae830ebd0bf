"""Key-value store doubles for failure and race scenarios."""

from __future__ import annotations

from rampa.core.errors import PersistenceError
from rampa.storage.memory import MemoryStore


class FlakyStore(MemoryStore):
    """MemoryStore whose reads or writes can be switched to fail."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        super().__init__(initial)
        self.fail_reads = False
        self.fail_writes = False

    async def get(self, key: str) -> str | None:
        if self.fail_reads:
            msg = f"Cannot read key {key!r}: disk unavailable"
            raise PersistenceError(msg)
        return await super().get(key)

    async def set(self, key: str, value: str) -> None:
        if self.fail_writes:
            msg = f"Cannot write key {key!r}: disk full"
            raise PersistenceError(msg)
        await super().set(key, value)

    async def remove(self, key: str) -> None:
        if self.fail_writes:
            msg = f"Cannot remove key {key!r}: disk full"
            raise PersistenceError(msg)
        await super().remove(key)
