"""Runtime configuration for the voice chat server.

Settings come from environment variables or a local ``.env`` file. Invalid
values fail at startup with a pydantic ``ValidationError``.
"""

from typing import Annotated, Optional, Tuple

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class VoiceChatConfig(BaseSettings):
    """Static settings for the voice chat server and its OpenAI gateways."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    # Speech-to-text
    transcribe_model: str = Field("whisper-1", alias="VOICE_TRANSCRIBE_MODEL")
    language: str = Field("id", alias="VOICE_LANGUAGE")

    # Chat completion
    chat_model: str = Field("gpt-4o-mini", alias="VOICE_CHAT_MODEL")
    chat_max_tokens: int = Field(500, ge=1, alias="VOICE_CHAT_MAX_TOKENS")
    chat_temperature: float = Field(0.7, ge=0.0, le=2.0, alias="VOICE_CHAT_TEMPERATURE")

    # Text-to-speech
    tts_model: str = Field("gpt-4o-mini-tts", alias="VOICE_TTS_MODEL")
    tts_voice: str = Field("nova", alias="VOICE_TTS_VOICE")
    tts_speed: float = Field(1.0, ge=0.25, le=4.0, alias="VOICE_TTS_SPEED")

    # Audio limits
    min_audio_bytes: int = Field(1000, ge=0, alias="VOICE_MIN_AUDIO_BYTES")
    max_upload_bytes: int = Field(25 * 1024 * 1024, ge=1, alias="VOICE_MAX_UPLOAD_BYTES")

    # 0 or unset disables the idle disconnect
    idle_timeout_seconds: Optional[float] = Field(None, ge=0.0, alias="VOICE_IDLE_TIMEOUT_SECONDS")

    # Server
    cors_origins: Annotated[Tuple[str, ...], NoDecode] = Field(("*",), alias="CORS_ORIGINS")
    host: str = Field("0.0.0.0", alias="HOST")
    port: int = Field(3001, ge=1, le=65535, alias="PORT")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _split_origins(cls, value):
        if isinstance(value, str):
            value = value.split(",")
        origins = tuple(origin.strip() for origin in value if origin and origin.strip())
        return origins or ("*",)

    @field_validator("idle_timeout_seconds")
    @classmethod
    def _zero_disables_timeout(cls, value: Optional[float]) -> Optional[float]:
        return value or None

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        return value.strip().upper()
