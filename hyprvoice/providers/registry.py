"""Static catalog of transcription and LLM providers.

The registry is built once at import time and never mutated afterwards, so
lookups are safe from any thread without locking.
"""

from __future__ import annotations

from hyprvoice.providers.languages import (
    DEEPGRAM_NOVA2_LANGUAGES,
    DEEPGRAM_NOVA3_LANGUAGES,
    ELEVENLABS_LANGUAGES,
    ENGLISH_ONLY,
    WHISPER_LANGUAGES,
)
from hyprvoice.providers.models import ModelDescriptor, ModelType, ProviderDescriptor

# Registry provider names
PROVIDER_OPENAI = "openai"
PROVIDER_GROQ = "groq"
PROVIDER_MISTRAL = "mistral"
PROVIDER_ELEVENLABS = "elevenlabs"
PROVIDER_DEEPGRAM = "deepgram"
PROVIDER_WHISPER_CPP = "whisper-cpp"

# Provider identifiers as written in transcription.provider
CONFIG_PROVIDER_GROQ_TRANSCRIPTION = "groq-transcription"
CONFIG_PROVIDER_GROQ_TRANSLATION = "groq-translation"  # retired
CONFIG_PROVIDER_MISTRAL_TRANSCRIPTION = "mistral-transcription"

_CONFIG_TO_REGISTRY = {
    CONFIG_PROVIDER_GROQ_TRANSCRIPTION: PROVIDER_GROQ,
    CONFIG_PROVIDER_GROQ_TRANSLATION: PROVIDER_GROQ,
    CONFIG_PROVIDER_MISTRAL_TRANSCRIPTION: PROVIDER_MISTRAL,
}


class ModelNotFoundError(LookupError):
    """Raised when a provider does not offer the requested model."""

    def __init__(self, provider: str, model_id: str) -> None:
        super().__init__(f"model {model_id!r} not found for provider {provider!r}")
        self.provider = provider
        self.model_id = model_id


def _transcription(
    provider: str,
    model_id: str,
    name: str,
    languages: tuple[str, ...],
    docs_url: str,
    description: str = "",
    *,
    streaming: bool = False,
    batch: bool = True,
    local: bool = False,
) -> ModelDescriptor:
    return ModelDescriptor(
        id=model_id,
        name=name,
        type=ModelType.TRANSCRIPTION,
        provider=provider,
        description=description,
        local=local,
        supports_batch=batch,
        supports_streaming=streaming,
        supported_languages=languages,
        docs_url=docs_url,
    )


def _llm(provider: str, model_id: str, name: str, description: str = "") -> ModelDescriptor:
    return ModelDescriptor(
        id=model_id,
        name=name,
        type=ModelType.LLM,
        provider=provider,
        description=description,
    )


_OPENAI_DOCS = "https://platform.openai.com/docs/guides/speech-to-text#supported-languages"
_GROQ_DOCS = "https://console.groq.com/docs/speech-to-text"
_MISTRAL_DOCS = "https://docs.mistral.ai/capabilities/audio/"
_ELEVENLABS_DOCS = "https://elevenlabs.io/docs/capabilities/speech-to-text"
_DEEPGRAM_DOCS = "https://developers.deepgram.com/docs/models-languages-overview"
_WHISPER_CPP_DOCS = "https://github.com/ggml-org/whisper.cpp#models"


def _whisper_cpp_models() -> tuple[ModelDescriptor, ...]:
    english = [
        ("tiny.en", "Tiny English", "Fastest but low accuracy, good for weak hardware"),
        ("base.en", "Base English", "Balanced speed and accuracy, recommended start"),
        ("small.en", "Small English", "Better accuracy, needs decent CPU"),
        ("medium.en", "Medium English", "Best English accuracy, needs good CPU/RAM"),
    ]
    multilingual = [
        ("tiny", "Tiny", "Multilingual; fastest but low accuracy"),
        ("base", "Base", "Multilingual; balanced speed and accuracy"),
        ("small", "Small", "Multilingual; better accuracy"),
        ("medium", "Medium", "Multilingual; high accuracy, needs good CPU/RAM"),
        ("large-v3", "Large V3", "Multilingual; best accuracy, slowest"),
    ]
    models = [
        _transcription(PROVIDER_WHISPER_CPP, mid, name, ENGLISH_ONLY, _WHISPER_CPP_DOCS, desc, local=True)
        for mid, name, desc in english
    ]
    models += [
        _transcription(PROVIDER_WHISPER_CPP, mid, name, WHISPER_LANGUAGES, _WHISPER_CPP_DOCS, desc, local=True)
        for mid, name, desc in multilingual
    ]
    return tuple(models)


_PROVIDERS: tuple[ProviderDescriptor, ...] = (
    ProviderDescriptor(
        name=PROVIDER_OPENAI,
        supports_transcription=True,
        supports_llm=True,
        requires_api_key=True,
        env_var="OPENAI_API_KEY",
        api_key_prefix="sk-",
        models=(
            _transcription(PROVIDER_OPENAI, "whisper-1", "Whisper 1", WHISPER_LANGUAGES, _OPENAI_DOCS,
                           "Reliable batch transcription"),
            _transcription(PROVIDER_OPENAI, "gpt-4o-transcribe", "GPT-4o Transcribe", WHISPER_LANGUAGES,
                           _OPENAI_DOCS, "Higher accuracy, realtime capable", streaming=True),
            _transcription(PROVIDER_OPENAI, "gpt-4o-mini-transcribe", "GPT-4o Mini Transcribe",
                           WHISPER_LANGUAGES, _OPENAI_DOCS, "Cheaper realtime transcription", streaming=True),
            _llm(PROVIDER_OPENAI, "gpt-4o-mini", "GPT-4o Mini", "Fast and cheap"),
            _llm(PROVIDER_OPENAI, "gpt-4o", "GPT-4o", "Best quality"),
            _llm(PROVIDER_OPENAI, "gpt-4-turbo", "GPT-4 Turbo"),
            _llm(PROVIDER_OPENAI, "gpt-3.5-turbo", "GPT-3.5 Turbo"),
        ),
        default_transcription_model="whisper-1",
        default_llm_model="gpt-4o-mini",
    ),
    ProviderDescriptor(
        name=PROVIDER_GROQ,
        supports_transcription=True,
        supports_llm=True,
        requires_api_key=True,
        env_var="GROQ_API_KEY",
        api_key_prefix="gsk_",
        models=(
            _transcription(PROVIDER_GROQ, "whisper-large-v3", "Whisper Large V3", WHISPER_LANGUAGES, _GROQ_DOCS,
                           "Best accuracy on Groq"),
            _transcription(PROVIDER_GROQ, "whisper-large-v3-turbo", "Whisper Large V3 Turbo", WHISPER_LANGUAGES,
                           _GROQ_DOCS, "Fastest, slightly lower accuracy"),
            _llm(PROVIDER_GROQ, "llama-3.3-70b-versatile", "Llama 3.3 70B", "High quality"),
            _llm(PROVIDER_GROQ, "llama-3.1-8b-instant", "Llama 3.1 8B", "Very fast"),
            _llm(PROVIDER_GROQ, "mixtral-8x7b-32768", "Mixtral 8x7B"),
        ),
        default_transcription_model="whisper-large-v3-turbo",
        default_llm_model="llama-3.3-70b-versatile",
    ),
    ProviderDescriptor(
        name=PROVIDER_MISTRAL,
        supports_transcription=True,
        supports_llm=False,
        requires_api_key=True,
        env_var="MISTRAL_API_KEY",
        models=(
            _transcription(PROVIDER_MISTRAL, "voxtral-mini-latest", "Voxtral Mini", WHISPER_LANGUAGES,
                           _MISTRAL_DOCS, "Strong on European languages"),
            _transcription(PROVIDER_MISTRAL, "voxtral-mini-2507", "Voxtral Mini 2507", WHISPER_LANGUAGES,
                           _MISTRAL_DOCS, "Pinned Voxtral release"),
        ),
        default_transcription_model="voxtral-mini-latest",
    ),
    ProviderDescriptor(
        name=PROVIDER_ELEVENLABS,
        supports_transcription=True,
        supports_llm=False,
        requires_api_key=True,
        env_var="ELEVENLABS_API_KEY",
        models=(
            _transcription(PROVIDER_ELEVENLABS, "scribe_v1", "Scribe v1", ELEVENLABS_LANGUAGES, _ELEVENLABS_DOCS,
                           "Best accuracy, 99 languages"),
            _transcription(PROVIDER_ELEVENLABS, "scribe_v2", "Scribe v2", ELEVENLABS_LANGUAGES, _ELEVENLABS_DOCS,
                           "Real-time capable", streaming=True),
        ),
        default_transcription_model="scribe_v1",
    ),
    ProviderDescriptor(
        name=PROVIDER_DEEPGRAM,
        supports_transcription=True,
        supports_llm=False,
        requires_api_key=True,
        env_var="DEEPGRAM_API_KEY",
        models=(
            _transcription(PROVIDER_DEEPGRAM, "nova-3", "Nova-3", DEEPGRAM_NOVA3_LANGUAGES, _DEEPGRAM_DOCS,
                           "Best accuracy, real-time", streaming=True),
            _transcription(PROVIDER_DEEPGRAM, "nova-2", "Nova-2", DEEPGRAM_NOVA2_LANGUAGES, _DEEPGRAM_DOCS,
                           "Fast, filler words", streaming=True),
        ),
        default_transcription_model="nova-3",
    ),
    ProviderDescriptor(
        name=PROVIDER_WHISPER_CPP,
        supports_transcription=True,
        supports_llm=False,
        requires_api_key=False,
        models=_whisper_cpp_models(),
        default_transcription_model="base.en",
    ),
)

_REGISTRY: dict[str, ProviderDescriptor] = {p.name: p for p in _PROVIDERS}


def get_provider(name: str) -> ProviderDescriptor | None:
    """Look up a provider by registry name.

    Args:
        name: Registry name such as "openai" or "whisper-cpp".

    Returns:
        The provider descriptor, or None if unknown.
    """
    return _REGISTRY.get(name)


def list_providers() -> list[str]:
    """Return all registry provider names in catalog order."""
    return [p.name for p in _PROVIDERS]


def list_providers_with_transcription() -> list[str]:
    return [p.name for p in _PROVIDERS if p.supports_transcription]


def list_providers_with_llm() -> list[str]:
    return [p.name for p in _PROVIDERS if p.supports_llm]


def models_of_type(provider: ProviderDescriptor | str, model_type: ModelType) -> list[ModelDescriptor]:
    """List a provider's models of one type, in catalog order.

    Args:
        provider: Provider descriptor or registry name.
        model_type: Model type to filter on.

    Returns:
        Matching models; empty when the provider is unknown.
    """
    if isinstance(provider, str):
        provider = get_provider(provider)
        if provider is None:
            return []
    return [m for m in provider.models if m.type is model_type]


def get_model(provider: str, model_id: str) -> ModelDescriptor:
    """Look up a model under a provider.

    Args:
        provider: Registry provider name.
        model_id: Model identifier.

    Returns:
        The model descriptor.

    Raises:
        ModelNotFoundError: If the provider or model is unknown.
    """
    descriptor = get_provider(provider)
    if descriptor is not None:
        for model in descriptor.models:
            if model.id == model_id:
                return model
    raise ModelNotFoundError(provider, model_id)


def base_provider_name(config_provider: str) -> str:
    """Map a transcription.provider identifier to its registry name.

    e.g. "groq-transcription" -> "groq", "mistral-transcription" -> "mistral".
    """
    return _CONFIG_TO_REGISTRY.get(config_provider, config_provider)


def env_var_for_provider(provider: str) -> str:
    """Return the API key environment variable for a provider, or ""."""
    descriptor = get_provider(base_provider_name(provider))
    if descriptor is None:
        return ""
    return descriptor.env_var


def guess_provider_for_key(api_key: str) -> str | None:
    """Guess which provider issued an API key from its prefix.

    Only providers with a distinctive key prefix take part, so this is a
    heuristic: keys without a known prefix return None.
    """
    for provider in _PROVIDERS:
        if provider.api_key_prefix and api_key.startswith(provider.api_key_prefix):
            return provider.name
    return None
