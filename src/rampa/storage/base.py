"""Key-value persistence interface.

Every store holds UTF-8 string blobs by string key. The post repository,
comment threads and profile store encode JSON before calling ``set`` and
decode after ``get``; adapters never interpret values.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class KeyValueStore(Protocol):
    """Protocol that all persistence adapters must satisfy.

    There is no locking or transaction spanning calls: two writers to the
    same key race and the last ``set`` wins.
    """

    async def get(self, key: str) -> str | None:
        """Return the value stored under *key*, or None if absent.

        Raises PersistenceError on failure.
        """
        ...

    async def set(self, key: str, value: str) -> None:
        """Store *value* under *key*, replacing any previous value.

        Raises PersistenceError on failure.
        """
        ...

    async def remove(self, key: str) -> None:
        """Delete *key*. Removing an absent key is not an error.

        Raises PersistenceError on failure.
        """
        ...

    async def close(self) -> None:
        """Release connections held by the adapter."""
        ...
