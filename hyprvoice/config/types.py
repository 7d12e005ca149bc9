"""Configuration type definitions and defaults for hyprvoice."""

from __future__ import annotations

import re
from dataclasses import MISSING, dataclass, field, fields
from typing import Any

# Known injection backends, in default fallback order
BACKEND_YDOTOOL = "ydotool"
BACKEND_WTYPE = "wtype"
BACKEND_CLIPBOARD = "clipboard"
BACKEND_KINDS = (BACKEND_YDOTOOL, BACKEND_WTYPE, BACKEND_CLIPBOARD)
DEFAULT_BACKENDS = [BACKEND_YDOTOOL, BACKEND_WTYPE, BACKEND_CLIPBOARD]

NOTIFICATION_TYPES = ("desktop", "log", "none")

DEFAULT_YDOTOOL_TIMEOUT = 5.0

_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")
_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


def parse_duration(value: str | int | float) -> float:
    """Parse a human-readable duration into seconds.

    Accepts strings such as "500ms", "5s", "5m" or "1m30s". Bare numbers are
    taken as seconds.

    Args:
        value: Duration string or number.

    Returns:
        Duration in seconds.

    Raises:
        ValueError: If the string is not a valid duration.
    """
    if isinstance(value, bool):
        raise ValueError(f"invalid duration: {value!r}")
    if isinstance(value, (int, float)):
        return float(value)
    text = value.strip()
    if text == "0":
        return 0.0
    sign = 1.0
    if text[:1] in ("-", "+"):
        sign = -1.0 if text[0] == "-" else 1.0
        text = text[1:]
    if not text:
        raise ValueError(f"invalid duration: {value!r}")
    total = 0.0
    pos = 0
    for match in _DURATION_PART.finditer(text):
        if match.start() != pos:
            raise ValueError(f"invalid duration: {value!r}")
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        pos = match.end()
    if pos != len(text):
        raise ValueError(f"invalid duration: {value!r}")
    return sign * total


def format_duration(seconds: float) -> str:
    """Format seconds as a duration string the loader can parse back."""
    ms = round(seconds * 1000)
    if ms == 0:
        return "0s"
    if ms < 0:
        return "-" + format_duration(-seconds)
    if ms < 1000:
        return f"{ms}ms"
    hours, rem = divmod(ms, 3_600_000)
    minutes, rem = divmod(rem, 60_000)
    parts = []
    if hours:
        parts.append(f"{hours}h")
    if minutes:
        parts.append(f"{minutes}m")
    if rem:
        parts.append(f"{rem / 1000:g}s")
    return "".join(parts)


def _from_table(cls: type, table: Any, path: str, durations: tuple[str, ...] = ()) -> dict[str, Any]:
    """Convert a decoded TOML table into constructor kwargs for a group.

    Unknown keys are ignored. Values must match the type of the field's
    default; duration fields are parsed from strings.

    Raises:
        TypeError: If a value has the wrong type.
        ValueError: If a duration string is malformed.
    """
    if table is None:
        return {}
    if not isinstance(table, dict):
        raise TypeError(f"{path}: expected a table, got {type(table).__name__}")
    kwargs: dict[str, Any] = {}
    for f in fields(cls):
        if f.name not in table:
            continue
        value = table[f.name]
        key = f"{path}.{f.name}"
        if f.name in durations:
            if not isinstance(value, (str, int, float)) or isinstance(value, bool):
                raise TypeError(f"{key}: expected a duration string")
            kwargs[f.name] = parse_duration(value)
            continue
        default = f.default if f.default is not MISSING else None
        if isinstance(default, bool):
            if not isinstance(value, bool):
                raise TypeError(f"{key}: expected a boolean")
        elif isinstance(default, int):
            if isinstance(value, bool) or not isinstance(value, int):
                raise TypeError(f"{key}: expected an integer")
        elif isinstance(default, str):
            if not isinstance(value, str):
                raise TypeError(f"{key}: expected a string")
        kwargs[f.name] = value
    return kwargs


def _string_list(value: Any, path: str) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise TypeError(f"{path}: expected a list of strings")
    return list(value)


@dataclass
class RecordingConfig:
    """Audio recording settings."""

    sample_rate: int = 0
    channels: int = 0
    format: str = ""
    buffer_size: int = 0
    device: str = ""  # empty = default microphone
    channel_buffer_size: int = 0
    timeout: float = 0.0  # seconds

    @classmethod
    def from_dict(cls, table: Any) -> RecordingConfig:
        return cls(**_from_table(cls, table, "recording", durations=("timeout",)))


@dataclass
class TranscriptionConfig:
    """Transcription provider settings."""

    provider: str = ""
    language: str = ""  # empty = auto-detect
    model: str = ""
    streaming: bool = False
    threads: int = 0  # 0 = auto
    api_key: str = ""  # retired location, still honoured by key resolution

    @classmethod
    def from_dict(cls, table: Any) -> TranscriptionConfig:
        return cls(**_from_table(cls, table, "transcription"))


@dataclass
class InjectionConfig:
    """Text injection settings: ordered backend chain plus per-backend timeouts."""

    backends: list[str] = field(default_factory=list)
    ydotool_timeout: float = 0.0
    wtype_timeout: float = 0.0
    clipboard_timeout: float = 0.0
    restore_clipboard: bool = True

    @classmethod
    def from_dict(cls, table: Any) -> InjectionConfig:
        kwargs = _from_table(
            cls, table, "injection", durations=("ydotool_timeout", "wtype_timeout", "clipboard_timeout")
        )
        if "backends" in kwargs:
            kwargs["backends"] = _string_list(kwargs["backends"], "injection.backends")
        return cls(**kwargs)

    def timeout_for(self, backend: str) -> float:
        """Return the configured timeout in seconds for a backend kind."""
        return {
            BACKEND_YDOTOOL: self.ydotool_timeout,
            BACKEND_WTYPE: self.wtype_timeout,
            BACKEND_CLIPBOARD: self.clipboard_timeout,
        }[backend]

    @property
    def uses_clipboard(self) -> bool:
        return BACKEND_CLIPBOARD in self.backends


@dataclass
class MessageConfig:
    """User override for one notification message."""

    title: str = ""
    body: str = ""

    @classmethod
    def from_dict(cls, table: Any, path: str) -> MessageConfig:
        return cls(**_from_table(cls, table, path))


@dataclass
class MessagesConfig:
    """Per-event notification message overrides."""

    recording_started: MessageConfig = field(default_factory=MessageConfig)
    transcribing: MessageConfig = field(default_factory=MessageConfig)
    llm_processing: MessageConfig = field(default_factory=MessageConfig)
    config_reloaded: MessageConfig = field(default_factory=MessageConfig)
    operation_cancelled: MessageConfig = field(default_factory=MessageConfig)
    recording_aborted: MessageConfig = field(default_factory=MessageConfig)
    injection_aborted: MessageConfig = field(default_factory=MessageConfig)
    injection_complete: MessageConfig = field(default_factory=MessageConfig)

    @classmethod
    def from_dict(cls, table: Any) -> MessagesConfig:
        if table is None:
            return cls()
        if not isinstance(table, dict):
            raise TypeError("notifications.messages: expected a table")
        kwargs = {
            f.name: MessageConfig.from_dict(table[f.name], f"notifications.messages.{f.name}")
            for f in fields(cls)
            if f.name in table
        }
        return cls(**kwargs)


@dataclass
class NotificationsConfig:
    """Notification settings."""

    enabled: bool = False
    type: str = ""  # "desktop", "log", "none"
    messages: MessagesConfig = field(default_factory=MessagesConfig)

    @classmethod
    def from_dict(cls, table: Any) -> NotificationsConfig:
        kwargs = _from_table(cls, table, "notifications")
        kwargs["messages"] = MessagesConfig.from_dict((table or {}).get("messages"))
        return cls(**kwargs)


@dataclass
class LLMPostProcessingConfig:
    """Text cleanup switches for LLM post-processing."""

    remove_stutters: bool = False
    add_punctuation: bool = False
    fix_grammar: bool = False
    remove_filler_words: bool = False

    def any_enabled(self) -> bool:
        return self.remove_stutters or self.add_punctuation or self.fix_grammar or self.remove_filler_words


@dataclass
class LLMCustomPromptConfig:
    enabled: bool = False
    prompt: str = ""


@dataclass
class LLMConfig:
    """LLM post-processing settings."""

    enabled: bool = False
    provider: str = ""
    model: str = ""
    post_processing: LLMPostProcessingConfig = field(default_factory=LLMPostProcessingConfig)
    custom_prompt: LLMCustomPromptConfig = field(default_factory=LLMCustomPromptConfig)

    @classmethod
    def from_dict(cls, table: Any) -> LLMConfig:
        kwargs = _from_table(cls, table, "llm")
        table = table or {}
        kwargs["post_processing"] = LLMPostProcessingConfig(
            **_from_table(LLMPostProcessingConfig, table.get("post_processing"), "llm.post_processing")
        )
        kwargs["custom_prompt"] = LLMCustomPromptConfig(
            **_from_table(LLMCustomPromptConfig, table.get("custom_prompt"), "llm.custom_prompt")
        )
        return cls(**kwargs)


@dataclass
class ProviderConfig:
    """Credentials for one provider."""

    api_key: str = ""


@dataclass
class Config:
    """Full application configuration."""

    recording: RecordingConfig = field(default_factory=RecordingConfig)
    transcription: TranscriptionConfig = field(default_factory=TranscriptionConfig)
    injection: InjectionConfig = field(default_factory=InjectionConfig)
    notifications: NotificationsConfig = field(default_factory=NotificationsConfig)
    llm: LLMConfig = field(default_factory=LLMConfig)
    providers: dict[str, ProviderConfig] = field(default_factory=dict)
    keywords: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, document: dict[str, Any]) -> Config:
        """Build a Config from a decoded TOML document.

        Raises:
            TypeError: If a value has the wrong type.
            ValueError: If a duration is malformed.
        """
        providers_table = document.get("providers") or {}
        if not isinstance(providers_table, dict):
            raise TypeError("providers: expected a table")
        providers = {
            name: ProviderConfig(**_from_table(ProviderConfig, table, f"providers.{name}"))
            for name, table in providers_table.items()
        }
        return cls(
            recording=RecordingConfig.from_dict(document.get("recording")),
            transcription=TranscriptionConfig.from_dict(document.get("transcription")),
            injection=InjectionConfig.from_dict(document.get("injection")),
            notifications=NotificationsConfig.from_dict(document.get("notifications")),
            llm=LLMConfig.from_dict(document.get("llm")),
            providers=providers,
            keywords=_string_list(document.get("keywords"), "keywords"),
        )


# Defaults merged under the user's file. injection.backends is deliberately
# absent so a missing chain goes through the injection mode migration.
DEFAULT_CONFIG: dict[str, Any] = {
    "recording": {
        "sample_rate": 16000,
        "channels": 1,
        "format": "s16",
        "buffer_size": 8192,
        "device": "",
        "channel_buffer_size": 30,
        "timeout": "5m",
    },
    "transcription": {
        "provider": "",
        "language": "",
        "model": "",
        "streaming": False,
        "threads": 0,
    },
    "injection": {
        "ydotool_timeout": "5s",
        "wtype_timeout": "5s",
        "clipboard_timeout": "3s",
        "restore_clipboard": True,
    },
    "notifications": {
        "enabled": True,
        "type": "desktop",
    },
    "llm": {
        "enabled": False,
        "provider": "",
        "model": "",
        "post_processing": {
            "remove_stutters": False,
            "add_punctuation": False,
            "fix_grammar": False,
            "remove_filler_words": False,
        },
        "custom_prompt": {
            "enabled": False,
            "prompt": "",
        },
    },
    "keywords": [],
}
