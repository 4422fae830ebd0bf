"""Configuration loading and validation."""

from rampa.config.loader import load_config
from rampa.config.schema import (
    APIConfig,
    FeedConfig,
    LoggingConfig,
    RampaConfig,
    StorageConfig,
)

__all__ = [
    "APIConfig",
    "FeedConfig",
    "LoggingConfig",
    "RampaConfig",
    "StorageConfig",
    "load_config",
]
