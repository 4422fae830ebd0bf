"""Core errors shared by every layer."""

from rampa.core.errors import (
    AuthenticationError,
    ConfigError,
    DecodeError,
    PersistenceError,
    PostNotFoundError,
    RampaError,
    StorageError,
    ValidationError,
)

__all__ = [
    "AuthenticationError",
    "ConfigError",
    "DecodeError",
    "PersistenceError",
    "PostNotFoundError",
    "RampaError",
    "StorageError",
    "ValidationError",
]
