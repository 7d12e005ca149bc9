"""Semantic validation of a decoded configuration."""

from __future__ import annotations

import logging

from hyprvoice.config.convert import api_key_sources, resolve_api_key, resolve_llm_api_key
from hyprvoice.config.errors import ConfigValidationError
from hyprvoice.config.types import BACKEND_KINDS, NOTIFICATION_TYPES, Config
from hyprvoice.providers import (
    ModelDescriptor,
    ModelNotFoundError,
    ModelType,
    base_provider_name,
    env_var_for_provider,
    get_model,
    get_provider,
    list_providers_with_llm,
    list_providers_with_transcription,
    models_of_type,
)

logger = logging.getLogger(__name__)

# Number of supported languages quoted in a language error
LANGUAGE_PREVIEW_COUNT = 5


def validate(config: Config) -> None:
    """Validate a configuration against the capability registry.

    Checks run in order (recording, transcription, llm, injection,
    notifications) and the first failure is raised.

    Args:
        config: Migrated configuration.

    Raises:
        ConfigValidationError: Naming the offending field and value.
    """
    _validate_recording(config)
    _validate_transcription(config)
    _validate_llm(config)
    _validate_injection(config)
    _validate_notifications(config)


def _positive(field: str, value: float) -> None:
    if value <= 0:
        raise ConfigValidationError(field, value)


def _validate_recording(config: Config) -> None:
    rec = config.recording
    _positive("recording.sample_rate", rec.sample_rate)
    _positive("recording.channels", rec.channels)
    _positive("recording.buffer_size", rec.buffer_size)
    _positive("recording.channel_buffer_size", rec.channel_buffer_size)
    if not rec.format:
        raise ConfigValidationError("recording.format", rec.format, "invalid recording.format: empty")
    _positive("recording.timeout", rec.timeout)


def _language_error(model: ModelDescriptor, language: str) -> ConfigValidationError:
    preview = ", ".join(model.supported_languages[:LANGUAGE_PREVIEW_COUNT])
    if len(model.supported_languages) > LANGUAGE_PREVIEW_COUNT:
        preview += ", ..."
    message = (
        f"invalid transcription.language: model {model.id!r} does not support "
        f"language {language!r} (supported: {preview})"
    )
    if model.docs_url:
        message += f"; see {model.docs_url}"
    return ConfigValidationError("transcription.language", language, message)


def _validate_transcription(config: Config) -> None:
    tr = config.transcription
    if not tr.provider:
        raise ConfigValidationError("transcription.provider", tr.provider, "invalid transcription.provider: empty")

    provider_name = base_provider_name(tr.provider)
    provider = get_provider(provider_name)
    if provider is None or not provider.supports_transcription:
        raise ConfigValidationError(
            "transcription.provider",
            tr.provider,
            f"unsupported transcription.provider: {tr.provider} "
            f"(must be one of {', '.join(list_providers_with_transcription())})",
        )

    if provider.requires_api_key:
        api_key = resolve_api_key(config, tr.provider)
        if not api_key:
            raise ConfigValidationError(
                "transcription.api_key",
                "",
                f"{provider.name} API key required: not found in {', '.join(api_key_sources(tr.provider))}",
            )
        if not provider.validate_api_key(api_key):
            logger.warning("config_validate: %s API key has an unexpected format", provider.name)

    if not tr.model:
        raise ConfigValidationError("transcription.model", tr.model, "invalid transcription.model: empty")

    try:
        model = get_model(provider_name, tr.model)
    except ModelNotFoundError:
        valid = ", ".join(m.id for m in models_of_type(provider, ModelType.TRANSCRIPTION))
        raise ConfigValidationError(
            "transcription.model",
            tr.model,
            f"invalid model for {tr.provider}: {tr.model} (must be one of {valid})",
        ) from None
    if model.type is not ModelType.TRANSCRIPTION:
        raise ConfigValidationError(
            "transcription.model", tr.model, f"invalid transcription.model: {tr.model} is not a transcription model"
        )

    if tr.language and not model.supports_language(tr.language):
        raise _language_error(model, tr.language)

    if tr.threads < 0:
        raise ConfigValidationError("transcription.threads", tr.threads)


def _validate_llm(config: Config) -> None:
    llm = config.llm
    if not llm.enabled:
        return

    if not llm.provider:
        raise ConfigValidationError("llm.provider", llm.provider, "llm.provider required when llm.enabled = true")
    if not llm.model:
        raise ConfigValidationError("llm.model", llm.model, "llm.model required when llm.enabled = true")

    provider = get_provider(llm.provider)
    if provider is None or not provider.supports_llm:
        raise ConfigValidationError(
            "llm.provider",
            llm.provider,
            f"invalid llm.provider: {llm.provider} (must be one of {', '.join(list_providers_with_llm())})",
        )

    try:
        model = get_model(llm.provider, llm.model)
    except ModelNotFoundError:
        valid = ", ".join(m.id for m in models_of_type(provider, ModelType.LLM))
        raise ConfigValidationError(
            "llm.model", llm.model, f"invalid llm.model for {llm.provider}: {llm.model} (must be one of {valid})"
        ) from None
    if model.type is not ModelType.LLM:
        raise ConfigValidationError(
            "llm.model", llm.model, f"invalid llm.model: {llm.model} is a transcription model, not an LLM"
        )

    if provider.requires_api_key and not resolve_llm_api_key(config, llm.provider):
        sources = [f"providers.{llm.provider}.api_key"]
        env_var = env_var_for_provider(llm.provider)
        if env_var:
            sources.append(f"environment variable {env_var}")
        raise ConfigValidationError(
            "llm.api_key",
            "",
            f"{provider.name} API key required for LLM: not found in {', '.join(sources)}",
        )


def _validate_injection(config: Config) -> None:
    inj = config.injection
    if not inj.backends:
        raise ConfigValidationError(
            "injection.backends", inj.backends, "invalid injection.backends: empty (must have at least one backend)"
        )
    for backend in inj.backends:
        if backend not in BACKEND_KINDS:
            raise ConfigValidationError(
                "injection.backends",
                backend,
                f"invalid injection.backends: unknown backend {backend!r} (must be {', '.join(BACKEND_KINDS)})",
            )
    _positive("injection.ydotool_timeout", inj.ydotool_timeout)
    _positive("injection.wtype_timeout", inj.wtype_timeout)
    _positive("injection.clipboard_timeout", inj.clipboard_timeout)


def _validate_notifications(config: Config) -> None:
    kind = config.notifications.type
    if kind not in NOTIFICATION_TYPES:
        raise ConfigValidationError(
            "notifications.type",
            kind,
            f"invalid notifications.type: {kind} (must be {', '.join(NOTIFICATION_TYPES)})",
        )
