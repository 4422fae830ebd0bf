"""Exception hierarchy for rampa.

Every module imports from here. The hierarchy is:

    RampaError
    ├── ConfigError
    ├── StorageError
    │   ├── PersistenceError
    │   └── DecodeError(key)
    ├── ValidationError
    ├── PostNotFoundError(post_id)
    └── AuthenticationError

``DecodeError`` never reaches callers of the post and comment stores:
corrupted history is replaced with an empty collection. It is raised by
the low-level decoders so the recovery point is explicit.
"""

from __future__ import annotations


class RampaError(Exception):
    """Base exception for all rampa errors."""


# ─── Configuration Errors ─────────────────────────────────────


class ConfigError(RampaError):
    """Invalid configuration."""


# ─── Storage Errors ───────────────────────────────────────────


class StorageError(RampaError):
    """Key-value persistence layer error."""


class PersistenceError(StorageError):
    """The underlying store failed to read or write a key."""


class DecodeError(StorageError):
    """A persisted value is not the JSON shape the reader expects."""

    def __init__(self, key: str, message: str) -> None:
        self.key = key
        super().__init__(f"[{key}] {message}")


# ─── Domain Errors ────────────────────────────────────────────


class ValidationError(RampaError):
    """Caller-supplied data rejected before any I/O."""


class PostNotFoundError(RampaError):
    """No post with the given identifier."""

    def __init__(self, post_id: str) -> None:
        self.post_id = post_id
        super().__init__(f"Post not found: {post_id}")


class AuthenticationError(RampaError):
    """Login failed: unknown account or wrong password."""
