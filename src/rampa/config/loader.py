"""Configuration loading for rampa.

Sources, lowest priority first:
    1. Model defaults in :mod:`rampa.config.schema`
    2. ``$XDG_CONFIG_HOME/rampa/config.toml`` (``~/.config`` by default)
    3. ``./rampa.toml`` in the working directory
    4. The file named by ``$RAMPA_CONFIG``
    5. The ``--config`` path passed by the CLI
    6. ``RAMPA_*`` environment variables for single settings
       (see :data:`ENV_SETTINGS`), so a deployment can point the store
       at another database without writing a file
    7. Programmatic overrides
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import Any

import pydantic

from rampa.core.errors import ConfigError

from .schema import RampaConfig

logger = logging.getLogger(__name__)

CONFIG_ENV = "RAMPA_CONFIG"

# env var -> (section, field)
ENV_SETTINGS: dict[str, tuple[str, str]] = {
    "RAMPA_STORAGE_BACKEND": ("storage", "backend"),
    "RAMPA_STORAGE_URL": ("storage", "url"),
    "RAMPA_POSTS_KEY": ("storage", "posts_key"),
    "RAMPA_SEED_DEMO_POSTS": ("feed", "seed_demo_posts"),
    "RAMPA_API_HOST": ("api", "host"),
    "RAMPA_API_PORT": ("api", "port"),
    "RAMPA_LOG_LEVEL": ("logging", "level"),
}


def _user_config_path() -> Path:
    xdg = os.environ.get("XDG_CONFIG_HOME", "")
    base = Path(xdg) if xdg else Path.home() / ".config"
    return base / "rampa" / "config.toml"


def _config_files(explicit: str | Path | None) -> list[Path]:
    """Existing config files in merge order.

    Raises ConfigError when ``$RAMPA_CONFIG`` or *explicit* names a file
    that does not exist; the implicit locations are simply skipped.
    """
    candidates = (_user_config_path(), Path.cwd() / "rampa.toml")
    files = [p for p in candidates if p.is_file()]

    env_path = os.environ.get(CONFIG_ENV)
    if env_path:
        if not Path(env_path).is_file():
            msg = f"{CONFIG_ENV} points to non-existent file: {env_path}"
            raise ConfigError(msg)
        files.append(Path(env_path))

    if explicit is not None:
        if not Path(explicit).is_file():
            msg = f"Config file not found: {explicit}"
            raise ConfigError(msg)
        files.append(Path(explicit))

    return files


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid TOML in {path}: {e}"
        raise ConfigError(msg) from e
    except OSError as e:
        msg = f"Cannot read config file {path}: {e}"
        raise ConfigError(msg) from e


def _env_settings() -> dict[str, dict[str, str]]:
    """Sections built from the ``RAMPA_*`` variables that are set.

    Values stay strings; pydantic coerces them (``"false"``, ``"9000"``).
    """
    sections: dict[str, dict[str, str]] = {}
    for var, (section, field) in ENV_SETTINGS.items():
        value = os.environ.get(var)
        if value:
            sections.setdefault(section, {})[field] = value
            logger.debug("%s.%s taken from %s", section, field, var)
    return sections


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into base. Override wins on conflicts."""
    merged = base.copy()
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(
    path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> RampaConfig:
    """Load and validate configuration.

    Args:
        path: Explicit config file path (highest file priority).
        overrides: Dict of overrides merged last (highest overall priority).

    Raises:
        ConfigError: On invalid TOML, missing files, or validation failure.
    """
    merged: dict[str, Any] = {}
    for config_file in _config_files(path):
        merged = _deep_merge(merged, _read_toml(config_file))
    merged = _deep_merge(merged, _env_settings())
    if overrides:
        merged = _deep_merge(merged, overrides)

    try:
        return RampaConfig.model_validate(merged)
    except pydantic.ValidationError as e:
        msg = f"Configuration validation failed: {e}"
        raise ConfigError(msg) from e
