"""Capability registry of transcription and LLM providers."""

from hyprvoice.providers.models import ModelDescriptor, ModelType, ProviderDescriptor
from hyprvoice.providers.registry import (
    CONFIG_PROVIDER_GROQ_TRANSCRIPTION,
    CONFIG_PROVIDER_GROQ_TRANSLATION,
    CONFIG_PROVIDER_MISTRAL_TRANSCRIPTION,
    ModelNotFoundError,
    base_provider_name,
    env_var_for_provider,
    get_model,
    get_provider,
    guess_provider_for_key,
    list_providers,
    list_providers_with_llm,
    list_providers_with_transcription,
    models_of_type,
)

__all__ = [
    # Descriptors
    "ModelDescriptor",
    "ModelType",
    "ProviderDescriptor",
    # Lookup
    "ModelNotFoundError",
    "get_model",
    "get_provider",
    "list_providers",
    "list_providers_with_llm",
    "list_providers_with_transcription",
    "models_of_type",
    # Names
    "CONFIG_PROVIDER_GROQ_TRANSCRIPTION",
    "CONFIG_PROVIDER_GROQ_TRANSLATION",
    "CONFIG_PROVIDER_MISTRAL_TRANSCRIPTION",
    "base_provider_name",
    "env_var_for_provider",
    "guess_provider_for_key",
]
