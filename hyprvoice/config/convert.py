"""API key resolution and configs derived for the pipeline collaborators."""

from __future__ import annotations

import copy
import os
from dataclasses import dataclass, field

from hyprvoice.config.types import Config, InjectionConfig, RecordingConfig
from hyprvoice.providers import base_provider_name, env_var_for_provider


@dataclass(frozen=True)
class TranscriberSettings:
    """Settings handed to the transcription client."""

    provider: str
    model: str
    language: str
    api_key: str
    streaming: bool
    threads: int
    keywords: tuple[str, ...] = ()


@dataclass(frozen=True)
class LLMAdapterConfig:
    """Settings handed to the LLM post-processing client."""

    provider: str
    model: str
    api_key: str
    remove_stutters: bool
    add_punctuation: bool
    fix_grammar: bool
    remove_filler_words: bool
    custom_prompt: str = ""
    keywords: tuple[str, ...] = field(default=())


def resolve_api_key(config: Config, provider: str) -> str:
    """Resolve the API key for a transcription provider.

    Resolution order:
    1. providers.<base provider>.api_key
    2. transcription.api_key (retired location)
    3. The provider's environment variable

    Args:
        config: Configuration to read.
        provider: Provider identifier as written in transcription.provider.

    Returns:
        The API key, or "" if none of the sources has one.
    """
    base = base_provider_name(provider)
    entry = config.providers.get(base)
    if entry is not None and entry.api_key:
        return entry.api_key

    if config.transcription.api_key:
        return config.transcription.api_key

    env_var = env_var_for_provider(provider)
    if env_var:
        return os.environ.get(env_var, "")
    return ""


def resolve_llm_api_key(config: Config, provider: str) -> str:
    """Resolve the API key for an LLM provider (providers map, then environment)."""
    entry = config.providers.get(provider)
    if entry is not None and entry.api_key:
        return entry.api_key

    env_var = env_var_for_provider(provider)
    if env_var:
        return os.environ.get(env_var, "")
    return ""


def api_key_sources(config_provider: str) -> list[str]:
    """List the places resolve_api_key looks, for error messages."""
    sources = [f"providers.{base_provider_name(config_provider)}.api_key", "transcription.api_key"]
    env_var = env_var_for_provider(config_provider)
    if env_var:
        sources.append(f"environment variable {env_var}")
    return sources


def is_llm_enabled(config: Config) -> bool:
    """Return True if LLM post-processing is enabled and fully configured."""
    return config.llm.enabled and bool(config.llm.provider) and bool(config.llm.model)


def to_recording_config(config: Config) -> RecordingConfig:
    """Return an independent copy of the recording settings."""
    return copy.deepcopy(config.recording)


def to_injection_config(config: Config) -> InjectionConfig:
    """Return an independent copy of the injection settings."""
    return copy.deepcopy(config.injection)


def to_transcriber_settings(config: Config) -> TranscriberSettings:
    transcription = config.transcription
    return TranscriberSettings(
        provider=transcription.provider,
        model=transcription.model,
        language=transcription.language,
        api_key=resolve_api_key(config, transcription.provider),
        streaming=transcription.streaming,
        threads=transcription.threads,
        keywords=tuple(config.keywords),
    )


def to_llm_config(config: Config) -> LLMAdapterConfig:
    llm = config.llm
    custom_prompt = ""
    if llm.custom_prompt.enabled and llm.custom_prompt.prompt:
        custom_prompt = llm.custom_prompt.prompt
    return LLMAdapterConfig(
        provider=llm.provider,
        model=llm.model,
        api_key=resolve_llm_api_key(config, llm.provider) if llm.provider else "",
        remove_stutters=llm.post_processing.remove_stutters,
        add_punctuation=llm.post_processing.add_punctuation,
        fix_grammar=llm.post_processing.fix_grammar,
        remove_filler_words=llm.post_processing.remove_filler_words,
        custom_prompt=custom_prompt,
        keywords=tuple(config.keywords),
    )
