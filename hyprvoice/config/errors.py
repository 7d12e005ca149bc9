"""Configuration error types for hyprvoice."""

from __future__ import annotations

from pathlib import Path
from typing import Any


class ConfigError(Exception):
    """Base class for configuration failures."""


class ConfigNotFoundError(ConfigError):
    """Raised when there is no usable config file and setup must run."""

    def __init__(self, path: Path | None = None, message: str | None = None) -> None:
        if message is None:
            message = f"config not found at {path}" if path else "config not found"
        super().__init__(f"{message}: run 'hyprvoice init-config'")
        self.path = path


class LegacyConfigError(ConfigNotFoundError):
    """Raised when the config file uses a retired schema."""

    def __init__(self, path: Path | None = None, keys: list[str] | None = None) -> None:
        self.legacy_keys = keys or []
        detail = ", ".join(self.legacy_keys) or "unknown"
        super().__init__(path, f"legacy configuration detected ({detail})")


class ConfigDecodeError(ConfigError):
    """Raised when the config file exists but cannot be decoded."""

    def __init__(self, path: Path, cause: Exception) -> None:
        super().__init__(f"failed to parse config file {path}: {cause}")
        self.path = path
        self.cause = cause


class ConfigValidationError(ConfigError):
    """Raised when a decoded config holds semantically invalid values.

    Attributes:
        field: Dotted path of the offending field (e.g. "recording.sample_rate").
        value: The rejected value.
    """

    def __init__(self, field: str, value: Any, message: str | None = None) -> None:
        if message is None:
            message = f"invalid {field}: {value!r}"
        super().__init__(message)
        self.field = field
        self.value = value
