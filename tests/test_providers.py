"""Tests for the provider capability registry."""

from __future__ import annotations

import pytest

from hyprvoice.providers import (
    ModelDescriptor,
    ModelNotFoundError,
    ModelType,
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


class TestProviderLookup:
    """Tests for provider lookup and listing."""

    def test_get_known_provider(self):
        """Test that a registered provider is returned with its flags."""
        provider = get_provider("openai")

        assert provider is not None
        assert provider.supports_transcription is True
        assert provider.supports_llm is True
        assert provider.requires_api_key is True
        assert provider.env_var == "OPENAI_API_KEY"

    def test_get_unknown_provider_returns_none(self):
        """Test that an unknown name gives None rather than raising."""
        assert get_provider("nonexistent") is None

    def test_list_providers_in_catalog_order(self):
        """Test that every provider is listed, openai first."""
        providers = list_providers()

        assert providers[0] == "openai"
        assert set(providers) == {"openai", "groq", "mistral", "elevenlabs", "deepgram", "whisper-cpp"}

    def test_llm_providers(self):
        """Test that only providers with LLM models are listed for LLM use."""
        assert list_providers_with_llm() == ["openai", "groq"]

    def test_all_providers_transcribe(self):
        """Test that every provider offers transcription."""
        assert list_providers_with_transcription() == list_providers()

    def test_local_provider_needs_no_key(self):
        """Test that whisper-cpp is local and keyless."""
        provider = get_provider("whisper-cpp")

        assert provider.requires_api_key is False
        assert provider.is_local is True
        assert all(model.local for model in provider.models)


class TestModels:
    """Tests for model lookup."""

    def test_models_of_type_filters(self):
        """Test that transcription and LLM models are separated."""
        transcription = [m.id for m in models_of_type("openai", ModelType.TRANSCRIPTION)]
        llm = [m.id for m in models_of_type("openai", ModelType.LLM)]

        assert transcription == ["whisper-1", "gpt-4o-transcribe", "gpt-4o-mini-transcribe"]
        assert "gpt-4o-mini" in llm
        assert not set(transcription) & set(llm)

    def test_models_of_type_accepts_descriptor(self):
        """Test that a descriptor works as well as a name."""
        provider = get_provider("groq")
        assert models_of_type(provider, ModelType.TRANSCRIPTION) == models_of_type("groq", ModelType.TRANSCRIPTION)

    def test_models_of_type_unknown_provider(self):
        """Test that an unknown provider has no models."""
        assert models_of_type("nonexistent", ModelType.LLM) == []

    def test_get_model(self):
        """Test that a known model is returned."""
        model = get_model("whisper-cpp", "base.en")

        assert model.provider == "whisper-cpp"
        assert model.type is ModelType.TRANSCRIPTION
        assert model.local is True

    def test_get_model_not_found(self):
        """Test that an unknown model raises with the names attached."""
        with pytest.raises(ModelNotFoundError) as exc_info:
            get_model("openai", "whisper-9")

        assert exc_info.value.provider == "openai"
        assert exc_info.value.model_id == "whisper-9"

    def test_get_model_unknown_provider(self):
        """Test that an unknown provider also raises ModelNotFoundError."""
        with pytest.raises(ModelNotFoundError):
            get_model("nonexistent", "whisper-1")

    def test_streaming_flags(self):
        """Test streaming capability flags."""
        assert get_model("openai", "whisper-1").supports_streaming is False
        assert get_model("deepgram", "nova-3").supports_streaming is True
        assert get_model("deepgram", "nova-3").supports_both_modes is True


class TestSupportsLanguage:
    """Tests for ModelDescriptor.supports_language."""

    def test_auto_detect_always_supported(self):
        """Test that the empty code (auto-detect) is always accepted."""
        assert get_model("whisper-cpp", "tiny.en").supports_language("") is True

    def test_english_only_model(self):
        """Test that an English-only model rejects other languages."""
        model = get_model("whisper-cpp", "tiny.en")

        assert model.supports_language("en") is True
        assert model.supports_language("es") is False

    def test_multilingual_model(self):
        """Test that a multilingual model accepts listed codes."""
        model = get_model("whisper-cpp", "tiny")

        assert model.supports_language("es") is True
        assert model.supports_language("xx") is False

    def test_empty_table_supports_everything(self):
        """Test that a model without a language table accepts any code."""
        model = ModelDescriptor(id="m", name="M", type=ModelType.TRANSCRIPTION, provider="p")

        assert model.supports_language("xx") is True


class TestApiKeys:
    """Tests for API key helpers."""

    @pytest.mark.parametrize(
        "provider,key,expected",
        [
            ("openai", "sk-abc", True),
            ("openai", "gsk_abc", False),
            ("groq", "gsk_abc", True),
            ("mistral", "anything", True),
            ("mistral", "", False),
            ("whisper-cpp", "", True),
        ],
    )
    def test_validate_api_key(self, provider, key, expected):
        """Test key format checks per provider."""
        assert get_provider(provider).validate_api_key(key) is expected

    @pytest.mark.parametrize(
        "key,expected",
        [
            ("sk-abc123", "openai"),
            ("gsk_abc123", "groq"),
            ("abc123", None),
            ("", None),
        ],
    )
    def test_guess_provider_for_key(self, key, expected):
        """Test the key prefix heuristic."""
        assert guess_provider_for_key(key) == expected


class TestProviderNames:
    """Tests for config identifier to registry name mapping."""

    @pytest.mark.parametrize(
        "config_name,expected",
        [
            ("groq-transcription", "groq"),
            ("groq-translation", "groq"),
            ("mistral-transcription", "mistral"),
            ("openai", "openai"),
            ("whisper-cpp", "whisper-cpp"),
        ],
    )
    def test_base_provider_name(self, config_name, expected):
        """Test compound identifiers map to the registry provider."""
        assert base_provider_name(config_name) == expected

    def test_env_var_uses_base_name(self):
        """Test env var lookup through a compound identifier."""
        assert env_var_for_provider("groq-transcription") == "GROQ_API_KEY"
        assert env_var_for_provider("whisper-cpp") == ""
        assert env_var_for_provider("nonexistent") == ""
