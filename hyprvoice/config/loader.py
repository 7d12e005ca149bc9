"""Configuration loading for hyprvoice."""

from __future__ import annotations

import copy
import logging
import os
import sys
import tomllib
from pathlib import Path
from typing import Any

from hyprvoice.config.errors import (
    ConfigDecodeError,
    ConfigError,
    ConfigNotFoundError,
    LegacyConfigError,
)
from hyprvoice.config.migration import apply_migrations
from hyprvoice.config.types import DEFAULT_CONFIG, Config
from hyprvoice.providers import CONFIG_PROVIDER_GROQ_TRANSLATION

logger = logging.getLogger(__name__)

APP_DIR_NAME = "hyprvoice"
CONFIG_FILE_NAME = "config.toml"


def _user_config_dir() -> Path:
    """Get the platform's per-user configuration directory."""
    if sys.platform == "win32":
        appdata = os.environ.get("APPDATA")
        return Path(appdata) if appdata else Path.home() / "AppData" / "Roaming"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support"
    xdg = os.environ.get("XDG_CONFIG_HOME")
    return Path(xdg) if xdg else Path.home() / ".config"


def get_config_path() -> Path:
    """Get the path to config.toml, creating its directory if needed.

    Returns:
        <user config dir>/hyprvoice/config.toml

    Raises:
        ConfigError: If the directory cannot be created.
    """
    config_dir = _user_config_dir() / APP_DIR_NAME
    try:
        config_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ConfigError(f"failed to create config directory {config_dir}: {e}") from e
    return config_dir / CONFIG_FILE_NAME


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _table(document: dict[str, Any], name: str) -> dict[str, Any]:
    value = document.get(name)
    return value if isinstance(value, dict) else {}


def detect_legacy_keys(document: dict[str, Any]) -> list[str]:
    """List the retired keys a raw config document still defines.

    Args:
        document: Decoded TOML document, before defaults are merged.

    Returns:
        Dotted key names; empty for a current-format document.
    """
    found = []
    if "api_key" in _table(document, "transcription"):
        found.append("transcription.api_key")
    if "mode" in _table(document, "injection"):
        found.append("injection.mode")
    if "language" in _table(document, "general"):
        found.append("general.language")
    if _table(document, "transcription").get("provider") == CONFIG_PROVIDER_GROQ_TRANSLATION:
        found.append(f"transcription.provider={CONFIG_PROVIDER_GROQ_TRANSLATION}")
    return found


def _read_document(config_path: Path) -> dict[str, Any]:
    try:
        with open(config_path, "rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, UnicodeDecodeError) as e:
        raise ConfigDecodeError(config_path, e) from e
    except OSError as e:
        raise ConfigError(f"failed to read config file {config_path}: {e}") from e


def decode_document(document: dict[str, Any], config_path: Path | None = None) -> Config:
    """Turn a raw TOML document into a migrated, default-filled Config.

    Args:
        document: Decoded TOML document.
        config_path: Source path, used in error messages.

    Returns:
        The migrated Config. It is not validated.

    Raises:
        ConfigDecodeError: If a value has the wrong type or format.
    """
    merged = _deep_merge(copy.deepcopy(DEFAULT_CONFIG), document)
    try:
        config = Config.from_dict(merged)
    except (TypeError, ValueError) as e:
        raise ConfigDecodeError(config_path or Path("<memory>"), e) from e

    mode = _table(document, "injection").get("mode", "")
    legacy_key = _table(document, "transcription").get("api_key", "")
    return apply_migrations(
        config,
        injection_mode=mode if isinstance(mode, str) else "",
        legacy_api_key=legacy_key if isinstance(legacy_key, str) else "",
    )


def _load(config_path: Path | None) -> tuple[Config, list[str], Path]:
    if config_path is None:
        config_path = get_config_path()

    if not config_path.exists():
        logger.info("load_config: no config file at %s", config_path)
        raise ConfigNotFoundError(config_path)

    logger.info("load_config: loading configuration from %s", config_path)
    document = _read_document(config_path)
    legacy_keys = detect_legacy_keys(document)
    config = decode_document(document, config_path)
    return config, legacy_keys, config_path


def load_or_legacy(config_path: Path | None = None) -> tuple[Config, bool]:
    """Load the config file, reporting a retired schema instead of failing.

    Args:
        config_path: Optional override path. Defaults to get_config_path().

    Returns:
        (config, legacy) where legacy is True if retired keys were found.
        A legacy config is still migrated as far as is safe.

    Raises:
        ConfigNotFoundError: If the file does not exist.
        ConfigDecodeError: If the file cannot be decoded.
    """
    config, legacy_keys, path = _load(config_path)
    if legacy_keys:
        logger.warning("load_config: legacy keys in %s: %s", path, ", ".join(legacy_keys))
    return config, bool(legacy_keys)


def load_config(config_path: Path | None = None) -> Config:
    """Load the config file, failing if it is absent or legacy.

    This is the daemon's entry point: a missing or retired-schema file means
    setup has to run.

    Args:
        config_path: Optional override path. Defaults to get_config_path().

    Returns:
        Migrated, default-filled configuration (not validated).

    Raises:
        ConfigNotFoundError: If the file does not exist.
        LegacyConfigError: If the file uses retired keys.
        ConfigDecodeError: If the file cannot be decoded.
    """
    config, legacy_keys, path = _load(config_path)
    if legacy_keys:
        logger.warning("load_config: legacy configuration detected, setup required")
        raise LegacyConfigError(path, legacy_keys)
    logger.debug("load_config: configuration loaded from %s", path)
    return config


def load_or_create_config(config_path: Path | None = None) -> Config:
    """Load the config file, writing documented defaults first if absent.

    This is the setup entry point.

    Args:
        config_path: Optional override path. Defaults to get_config_path().

    Returns:
        Migrated, default-filled configuration (not validated).

    Raises:
        LegacyConfigError: If an existing file uses retired keys.
        ConfigDecodeError: If the file cannot be decoded.
    """
    if config_path is None:
        config_path = get_config_path()

    if not config_path.exists():
        from hyprvoice.config.saver import save_default_config

        logger.info("load_config: creating default config at %s", config_path)
        save_default_config(config_path)

    return load_config(config_path)
