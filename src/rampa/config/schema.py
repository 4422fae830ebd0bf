"""Pydantic models for rampa configuration."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class StorageConfig(BaseModel):
    """Key-value store backend and connection settings."""

    backend: Literal["sqlite", "memory"] = "sqlite"
    url: str = "sqlite+aiosqlite:///~/.local/share/rampa/rampa.db"
    posts_key: str = "posts"
    pool_size: int = 5
    max_overflow: int = 10
    pool_timeout: int = 30
    pool_recycle: int = 3600


class FeedConfig(BaseModel):
    """Post feed behaviour."""

    seed_demo_posts: bool = True
    default_filter: str = "all"


class APIConfig(BaseModel):
    """REST API server settings."""

    host: str = "127.0.0.1"
    port: int = 8080
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000", "http://localhost:8081"]
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    file: str = ""


class RampaConfig(BaseModel):
    """Top-level configuration for rampa."""

    storage: StorageConfig = Field(default_factory=StorageConfig)
    feed: FeedConfig = Field(default_factory=FeedConfig)
    api: APIConfig = Field(default_factory=APIConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
