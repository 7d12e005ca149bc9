"""Provider and model descriptors for the capability registry."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ModelType(Enum):
    """What a model produces."""

    TRANSCRIPTION = "transcription"
    LLM = "llm"


@dataclass(frozen=True)
class ModelDescriptor:
    """Capabilities of a single model offered by a provider."""

    id: str
    name: str
    type: ModelType
    provider: str
    description: str = ""
    local: bool = False
    supports_batch: bool = True
    supports_streaming: bool = False
    supported_languages: tuple[str, ...] = ()  # empty = every code
    docs_url: str = ""

    def supports_language(self, code: str) -> bool:
        """Check whether the model accepts a language code.

        Auto-detect (empty code) is always supported, as is any code for a
        model that does not declare a language table.

        Args:
            code: ISO-639-1 language code, or "" for auto-detect.

        Returns:
            True if the model can transcribe the language.
        """
        if code == "" or not self.supported_languages:
            return True
        return code in self.supported_languages

    @property
    def supports_both_modes(self) -> bool:
        return self.supports_batch and self.supports_streaming


@dataclass(frozen=True)
class ProviderDescriptor:
    """Identity and capability flags for a transcription/LLM provider."""

    name: str
    supports_transcription: bool
    supports_llm: bool
    requires_api_key: bool
    env_var: str = ""
    api_key_prefix: str = ""
    models: tuple[ModelDescriptor, ...] = field(default=())
    default_transcription_model: str = ""
    default_llm_model: str = ""

    def validate_api_key(self, key: str) -> bool:
        """Check the format of an API key for this provider.

        Providers that declare a key prefix require it; others only require a
        non-empty key. Providers without keys accept anything.
        """
        if not self.requires_api_key:
            return True
        if self.api_key_prefix:
            return key.startswith(self.api_key_prefix)
        return len(key) > 0

    @property
    def is_local(self) -> bool:
        return bool(self.models) and all(m.local for m in self.models)

    def default_model(self, model_type: ModelType) -> str:
        if model_type is ModelType.LLM:
            return self.default_llm_model
        return self.default_transcription_model
