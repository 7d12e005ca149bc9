"""Configuration saving for hyprvoice."""

from __future__ import annotations

import copy
import json
import logging
import os
import re
from dataclasses import fields
from pathlib import Path

from hyprvoice.config.loader import decode_document, get_config_path
from hyprvoice.config.types import (
    DEFAULT_BACKENDS,
    DEFAULT_CONFIG,
    Config,
    ProviderConfig,
    format_duration,
)
from hyprvoice.providers import base_provider_name

logger = logging.getLogger(__name__)

_BARE_KEY = re.compile(r"[A-Za-z0-9_-]+")


def _str(value: str) -> str:
    """Quote a string as a TOML basic string."""
    # JSON escapes every control character except DEL, which TOML also forbids
    return json.dumps(value, ensure_ascii=False).replace("\x7f", "\\u007f")


def _key(name: str) -> str:
    return name if _BARE_KEY.fullmatch(name) else _str(name)


def _bool(value: bool) -> str:
    return "true" if value else "false"


def _list(values: list[str]) -> str:
    return "[" + ", ".join(_str(v) for v in values) + "]"


def _providers_to_write(config: Config) -> dict[str, ProviderConfig]:
    providers = dict(config.providers)
    # transcription.api_key is a retired key; persist it in the providers map instead
    legacy_key = config.transcription.api_key
    if legacy_key and config.transcription.provider:
        base = base_provider_name(config.transcription.provider)
        if not providers.get(base, ProviderConfig()).api_key:
            providers[base] = ProviderConfig(api_key=legacy_key)
    return providers


def render_config(config: Config) -> str:
    """Render a configuration as commented TOML."""
    lines = [
        "# Hyprvoice Configuration",
        "# Edit values as needed - changes are applied immediately without daemon restart.",
        "",
        "# Words and names to help transcription and LLM cleanup",
        f"keywords = {_list(config.keywords)}",
        "",
    ]

    rec = config.recording
    lines.append("# Audio Recording Configuration")
    lines.append("[recording]")
    lines.append(f"sample_rate = {rec.sample_rate}          # Audio sample rate in Hz (16000 recommended for speech)")
    lines.append(f"channels = {rec.channels}                 # 1 = mono, 2 = stereo")
    lines.append(f"format = {_str(rec.format)}               # Audio format (s16 = 16-bit signed integers)")
    lines.append(f"buffer_size = {rec.buffer_size}           # Internal buffer size in bytes")
    lines.append(f"device = {_str(rec.device)}                  # Audio device (empty = default microphone)")
    lines.append(f"channel_buffer_size = {rec.channel_buffer_size}     # Audio frames to buffer")
    lines.append(f"timeout = {_str(format_duration(rec.timeout))}  # Maximum recording duration (e.g. \"30s\", \"5m\")")
    lines.append("")

    tr = config.transcription
    lines.append("# Speech Transcription Configuration")
    lines.append("[transcription]")
    lines.append("# Provider: openai, groq-transcription, mistral-transcription, elevenlabs, deepgram, whisper-cpp")
    lines.append(f"provider = {_str(tr.provider)}")
    lines.append("# Model for the provider (e.g. openai=\"whisper-1\", whisper-cpp=\"base.en\")")
    lines.append(f"model = {_str(tr.model)}")
    lines.append("# Language code (empty for auto-detect, or \"en\", \"it\", \"es\", \"fr\", ...)")
    lines.append(f"language = {_str(tr.language)}")
    lines.append("# Use streaming mode if the model supports it")
    lines.append(f"streaming = {_bool(tr.streaming)}")
    lines.append("# CPU threads for local transcription (0 = auto)")
    lines.append(f"threads = {tr.threads}")
    lines.append("")

    inj = config.injection
    lines.append("# Text Injection Configuration")
    lines.append("[injection]")
    lines.append("# Ordered fallback chain, tried until one succeeds: ydotool, wtype, clipboard")
    lines.append(f"backends = {_list(inj.backends)}")
    lines.append(f"ydotool_timeout = {_str(format_duration(inj.ydotool_timeout))}")
    lines.append(f"wtype_timeout = {_str(format_duration(inj.wtype_timeout))}")
    lines.append(f"clipboard_timeout = {_str(format_duration(inj.clipboard_timeout))}")
    lines.append("# Put the previous clipboard contents back after typing")
    lines.append(f"restore_clipboard = {_bool(inj.restore_clipboard)}")
    lines.append("")

    notif = config.notifications
    lines.append("# Notification Configuration")
    lines.append("[notifications]")
    lines.append(f"enabled = {_bool(notif.enabled)}")
    lines.append(f"type = {_str(notif.type)}             # \"desktop\", \"log\" or \"none\"")
    lines.append("")
    for f in fields(notif.messages):
        message = getattr(notif.messages, f.name)
        if not message.title and not message.body:
            continue
        lines.append(f"[notifications.messages.{f.name}]")
        lines.append(f"title = {_str(message.title)}")
        lines.append(f"body = {_str(message.body)}")
        lines.append("")

    llm = config.llm
    lines.append("# LLM Post-Processing Configuration")
    lines.append("[llm]")
    lines.append(f"enabled = {_bool(llm.enabled)}")
    lines.append(f"provider = {_str(llm.provider)}           # \"openai\" or \"groq\"")
    lines.append(f"model = {_str(llm.model)}")
    lines.append("")
    lines.append("[llm.post_processing]")
    pp = llm.post_processing
    lines.append(f"remove_stutters = {_bool(pp.remove_stutters)}")
    lines.append(f"add_punctuation = {_bool(pp.add_punctuation)}")
    lines.append(f"fix_grammar = {_bool(pp.fix_grammar)}")
    lines.append(f"remove_filler_words = {_bool(pp.remove_filler_words)}")
    lines.append("")
    lines.append("[llm.custom_prompt]")
    lines.append(f"enabled = {_bool(llm.custom_prompt.enabled)}")
    lines.append(f"prompt = {_str(llm.custom_prompt.prompt)}")
    lines.append("")

    providers = _providers_to_write(config)
    lines.append("# API keys (or set OPENAI_API_KEY, GROQ_API_KEY, ... in the environment)")
    lines.append("[providers]")
    for name in sorted(providers):
        lines.append(f"[providers.{_key(name)}]")
        lines.append(f"api_key = {_str(providers[name].api_key)}")
    lines.append("")
    return "\n".join(lines)


def save_config(config: Config, config_path: Path | None = None) -> None:
    """Save configuration to a TOML file.

    The file is written to a temporary sibling and renamed into place so the
    config watcher never reads a half-written file.

    Args:
        config: Configuration to save.
        config_path: Path to config file. Defaults to get_config_path().
    """
    if config_path is None:
        config_path = get_config_path()

    config_path.parent.mkdir(parents=True, exist_ok=True)
    content = render_config(config)

    tmp_path = config_path.with_name(config_path.name + ".tmp")
    with open(tmp_path, "w", encoding="utf-8") as f:
        f.write(content)
    os.replace(tmp_path, config_path)
    logger.info("save_config: wrote %s", config_path)


def default_config() -> Config:
    """Build the documented default configuration written for new installs."""
    document = copy.deepcopy(DEFAULT_CONFIG)
    document["transcription"]["provider"] = "openai"
    document["transcription"]["model"] = "whisper-1"
    document["injection"]["backends"] = list(DEFAULT_BACKENDS)
    config = decode_document(document)
    # threads stays on auto in the file
    config.transcription.threads = 0
    return config


def save_default_config(config_path: Path | None = None) -> None:
    """Write the documented default configuration."""
    save_config(default_config(), config_path)
