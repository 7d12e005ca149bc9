"""Configuration loading, validation, saving, and hot reload for hyprvoice."""

from hyprvoice.config.types import (
    BACKEND_CLIPBOARD,
    BACKEND_KINDS,
    BACKEND_WTYPE,
    BACKEND_YDOTOOL,
    Config,
    DEFAULT_BACKENDS,
    DEFAULT_CONFIG,
    InjectionConfig,
    LLMConfig,
    MessageConfig,
    MessagesConfig,
    NotificationsConfig,
    ProviderConfig,
    RecordingConfig,
    TranscriptionConfig,
    format_duration,
    parse_duration,
)
from hyprvoice.config.errors import (
    ConfigDecodeError,
    ConfigError,
    ConfigNotFoundError,
    ConfigValidationError,
    LegacyConfigError,
)
from hyprvoice.config.loader import (
    _deep_merge,
    detect_legacy_keys,
    get_config_path,
    load_config,
    load_or_create_config,
    load_or_legacy,
)
from hyprvoice.config.migration import apply_migrations
from hyprvoice.config.validate import validate
from hyprvoice.config.convert import (
    resolve_api_key,
    resolve_llm_api_key,
    to_injection_config,
    to_llm_config,
    to_recording_config,
    to_transcriber_settings,
)
from hyprvoice.config.saver import save_config, save_default_config
from hyprvoice.config.manager import ConfigManager

__all__ = [
    # Types
    "BACKEND_CLIPBOARD",
    "BACKEND_KINDS",
    "BACKEND_WTYPE",
    "BACKEND_YDOTOOL",
    "Config",
    "DEFAULT_BACKENDS",
    "DEFAULT_CONFIG",
    "InjectionConfig",
    "LLMConfig",
    "MessageConfig",
    "MessagesConfig",
    "NotificationsConfig",
    "ProviderConfig",
    "RecordingConfig",
    "TranscriptionConfig",
    "format_duration",
    "parse_duration",
    # Errors
    "ConfigDecodeError",
    "ConfigError",
    "ConfigNotFoundError",
    "ConfigValidationError",
    "LegacyConfigError",
    # Loading
    "_deep_merge",
    "detect_legacy_keys",
    "get_config_path",
    "load_config",
    "load_or_create_config",
    "load_or_legacy",
    # Migration
    "apply_migrations",
    # Validation
    "validate",
    # Derived configs
    "resolve_api_key",
    "resolve_llm_api_key",
    "to_injection_config",
    "to_llm_config",
    "to_recording_config",
    "to_transcriber_settings",
    # Saving
    "save_config",
    "save_default_config",
    # Live config
    "ConfigManager",
]
