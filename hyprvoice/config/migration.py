"""In-memory migrations applied while loading a config file.

Every function here is additive and idempotent: running it on an already
migrated config changes nothing.
"""

from __future__ import annotations

import logging
import os

from hyprvoice.config.types import (
    BACKEND_CLIPBOARD,
    BACKEND_WTYPE,
    DEFAULT_BACKENDS,
    DEFAULT_YDOTOOL_TIMEOUT,
    Config,
    ProviderConfig,
)
from hyprvoice.providers import base_provider_name, get_provider, guess_provider_for_key

logger = logging.getLogger(__name__)

# Retired injection.mode values and the backend chains that replace them
INJECTION_MODE_BACKENDS: dict[str, list[str]] = {
    "clipboard": [BACKEND_CLIPBOARD],
    "type": [BACKEND_WTYPE],
    "fallback": [BACKEND_WTYPE, BACKEND_CLIPBOARD],
}


def migrate_injection_mode(config: Config, mode: str = "") -> None:
    """Fill injection.backends from a retired injection.mode value.

    Only acts when no backend chain is configured. Unknown or missing modes
    map to the full default chain. Also fills a missing ydotool timeout.
    """
    if config.injection.backends:
        return

    backends = INJECTION_MODE_BACKENDS.get(mode)
    if backends is None:
        backends = DEFAULT_BACKENDS
        if mode:
            logger.warning("config_migration: unknown injection.mode=%s, using default backends", mode)
    else:
        logger.info("config_migration: injection.mode=%s -> backends=%s", mode, backends)
    config.injection.backends = list(backends)

    if config.injection.ydotool_timeout == 0:
        config.injection.ydotool_timeout = DEFAULT_YDOTOOL_TIMEOUT


def migrate_transcription_api_key(config: Config, api_key: str) -> str | None:
    """Copy a retired transcription.api_key into the providers map.

    The target provider comes from transcription.provider when it names a
    known provider. Otherwise the key prefix is used as a guess ("sk-" for
    openai, "gsk_" for groq), which is a best-effort heuristic: keys without a
    recognizable prefix are left where they are.

    Returns:
        The provider name the key was stored under, or None.
    """
    if not api_key:
        return None

    provider = base_provider_name(config.transcription.provider)
    descriptor = get_provider(provider)
    if descriptor is None or not descriptor.requires_api_key:
        provider = guess_provider_for_key(api_key)
        if provider is None:
            logger.warning("config_migration: could not determine provider for transcription.api_key")
            return None
        logger.info("config_migration: guessed provider=%s from api key prefix", provider)

    existing = config.providers.get(provider)
    if existing is not None and existing.api_key:
        return provider

    config.providers[provider] = ProviderConfig(api_key=api_key)
    logger.info("config_migration: moved transcription.api_key to providers.%s", provider)
    return provider


def apply_llm_defaults(config: Config) -> None:
    """Turn on every post-processing option when none is set.

    All-false means the user never touched them, since the intended default
    is all-true.
    """
    pp = config.llm.post_processing
    if not pp.any_enabled():
        pp.remove_stutters = True
        pp.add_punctuation = True
        pp.fix_grammar = True
        pp.remove_filler_words = True


def default_thread_count() -> int:
    return max(1, (os.cpu_count() or 1) - 1)


def apply_threads_default(config: Config) -> None:
    """Set transcription.threads to max(1, cpu_count - 1) when zero."""
    if config.transcription.threads == 0:
        config.transcription.threads = default_thread_count()


def apply_migrations(config: Config, *, injection_mode: str = "", legacy_api_key: str = "") -> Config:
    """Run every safe migration and default fill on a freshly decoded config.

    Args:
        config: Decoded config, modified in place.
        injection_mode: Value of the retired injection.mode key, if any.
        legacy_api_key: Value of the retired transcription.api_key key, if any.
            Moved only when the target provider has no key of its own.

    Returns:
        The same config, for chaining.
    """
    migrate_injection_mode(config, injection_mode)
    migrate_transcription_api_key(config, legacy_api_key)
    apply_llm_defaults(config)
    apply_threads_default(config)
    return config
