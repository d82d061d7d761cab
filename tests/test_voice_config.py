"""Tests for environment-driven configuration."""

import pytest
from pydantic import ValidationError

from utils.voice_config import VoiceChatConfig


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for name in (
        "VOICE_LANGUAGE",
        "VOICE_CHAT_MODEL",
        "VOICE_CHAT_TEMPERATURE",
        "VOICE_MIN_AUDIO_BYTES",
        "VOICE_IDLE_TIMEOUT_SECONDS",
        "CORS_ORIGINS",
        "LOG_LEVEL",
        "PORT",
    ):
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    config = VoiceChatConfig()

    assert config.language == "id"
    assert config.chat_model == "gpt-4o-mini"
    assert config.min_audio_bytes == 1000
    assert config.idle_timeout_seconds is None
    assert config.cors_origins == ("*",)
    assert config.port == 3001


def test_overrides(monkeypatch):
    monkeypatch.setenv("VOICE_LANGUAGE", "en")
    monkeypatch.setenv("VOICE_CHAT_TEMPERATURE", "0.2")
    monkeypatch.setenv("VOICE_IDLE_TIMEOUT_SECONDS", "30")
    monkeypatch.setenv("CORS_ORIGINS", "http://localhost:3000, https://mall.example")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    config = VoiceChatConfig()

    assert config.language == "en"
    assert config.chat_temperature == 0.2
    assert config.idle_timeout_seconds == 30.0
    assert config.cors_origins == ("http://localhost:3000", "https://mall.example")
    assert config.log_level == "DEBUG"


def test_blank_values_fall_back_to_defaults(monkeypatch):
    monkeypatch.setenv("VOICE_LANGUAGE", "")
    monkeypatch.setenv("PORT", "")

    config = VoiceChatConfig()

    assert config.language == "id"
    assert config.port == 3001


def test_reads_dotenv_file(tmp_path):
    (tmp_path / ".env").write_text("VOICE_CHAT_MODEL=gpt-4o\nOPENAI_API_KEY=sk-test\n", encoding="utf-8")

    assert VoiceChatConfig().chat_model == "gpt-4o"


def test_field_names_accepted_in_code():
    config = VoiceChatConfig(idle_timeout_seconds=0.5, min_audio_bytes=10)

    assert config.idle_timeout_seconds == 0.5
    assert config.min_audio_bytes == 10


def test_zero_idle_timeout_disables_it(monkeypatch):
    monkeypatch.setenv("VOICE_IDLE_TIMEOUT_SECONDS", "0")

    assert VoiceChatConfig().idle_timeout_seconds is None


def test_config_is_frozen():
    config = VoiceChatConfig()

    with pytest.raises(ValidationError):
        config.port = 8080


@pytest.mark.parametrize(
    "name, value",
    [("PORT", "abc"), ("VOICE_CHAT_MAX_TOKENS", "0"), ("VOICE_TTS_SPEED", "-1"), ("VOICE_IDLE_TIMEOUT_SECONDS", "-5")],
)
def test_invalid_values_raise(monkeypatch, name, value):
    monkeypatch.setenv(name, value)

    with pytest.raises(ValidationError):
        VoiceChatConfig()
