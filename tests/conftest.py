"""Shared pytest fixtures for hyprvoice tests.

This module provides reusable fixtures for:
- Clipboard operations (pyperclip)
- Configuration files and decoded configs
- Provider API key environment isolation
- Fake injection backends
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

import pyperclip
import pytest

from hyprvoice.config import Config
from hyprvoice.config.loader import decode_document
from tests.helpers import FakeBackend, FakeClipboard

API_KEY_ENV_VARS = (
    "OPENAI_API_KEY",
    "GROQ_API_KEY",
    "MISTRAL_API_KEY",
    "ELEVENLABS_API_KEY",
    "DEEPGRAM_API_KEY",
)

VALID_CONFIG_TOML = """
[transcription]
provider = "openai"
model = "whisper-1"

[injection]
backends = ["ydotool", "wtype", "clipboard"]

[providers.openai]
api_key = "sk-test-key"
"""

LEGACY_CONFIG_TOML = """
[transcription]
provider = "openai"
model = "whisper-1"
api_key = "sk-legacy-key"

[injection]
mode = "fallback"
"""


# ============================================================================
# Environment Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def clean_api_key_env(monkeypatch):
    """Remove provider API keys from the environment for every test."""
    for name in API_KEY_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def config_path(tmp_path) -> Path:
    """Path for a config file that does not exist yet."""
    return tmp_path / "hyprvoice" / "config.toml"


@pytest.fixture
def valid_config_file(tmp_path) -> Path:
    """Create a temporary, valid config.toml.

    Returns:
        Path to the config file.
    """
    config_file = tmp_path / "config.toml"
    config_file.write_text(VALID_CONFIG_TOML)
    return config_file


@pytest.fixture
def legacy_config_file(tmp_path) -> Path:
    """Create a config.toml that uses retired keys.

    Returns:
        Path to the config file.
    """
    config_file = tmp_path / "config.toml"
    config_file.write_text(LEGACY_CONFIG_TOML)
    return config_file


@pytest.fixture
def valid_config() -> Config:
    """A decoded, migrated config that passes validation.

    Returns:
        Config built from VALID_CONFIG_TOML's values.
    """
    return decode_document(
        {
            "transcription": {"provider": "openai", "model": "whisper-1"},
            "injection": {"backends": ["ydotool", "wtype", "clipboard"]},
            "providers": {"openai": {"api_key": "sk-test-key"}},
        }
    )


# ============================================================================
# Clipboard Fixtures
# ============================================================================


@pytest.fixture
def mock_pyperclip(mocker) -> MagicMock:
    """Mock pyperclip module.

    Returns:
        Mock pyperclip with copy/paste tracking.
    """
    mock = mocker.patch("hyprvoice.injection.clipboard.pyperclip")
    mock.PyperclipException = pyperclip.PyperclipException
    mock.clipboard_content = ""

    def copy_side_effect(text):
        mock.clipboard_content = text

    mock.copy.side_effect = copy_side_effect
    mock.paste.side_effect = lambda: mock.clipboard_content

    return mock


@pytest.fixture
def fake_clipboard() -> FakeClipboard:
    """In-memory clipboard holding "original clipboard"."""
    clipboard = FakeClipboard("original clipboard")
    yield clipboard
    clipboard.close()


# ============================================================================
# Backend Fixtures
# ============================================================================


@pytest.fixture
def fake_backends() -> dict[str, FakeBackend]:
    """One working fake backend per kind.

    Returns:
        Dict of backend kind to FakeBackend.
    """
    return {
        "ydotool": FakeBackend("ydotool"),
        "wtype": FakeBackend("wtype"),
        "clipboard": FakeBackend("clipboard"),
    }
