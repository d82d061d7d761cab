"""Text-to-speech helper returning encoded audio bytes."""

import logging
from dataclasses import dataclass

from openai import AsyncOpenAI

from services.realtime.errors import SynthesisFailed

log = logging.getLogger(__name__)

TTS_MODEL = "gpt-4o-mini-tts"
TTS_VOICE = "nova"  # alloy, echo, fable, onyx, nova, shimmer

MIME_TYPES = {
    "mp3": "audio/mpeg",
    "opus": "audio/ogg",
    "aac": "audio/aac",
    "flac": "audio/flac",
    "wav": "audio/wav",
}


@dataclass(frozen=True)
class SynthesizedSpeech:
    audio: bytes
    mime_type: str


class SpeechSynthesisService:
    """Convert assistant replies into speech with a fixed model and voice."""

    def __init__(
        self,
        client: AsyncOpenAI,
        *,
        model: str = TTS_MODEL,
        voice: str = TTS_VOICE,
        speed: float = 1.0,
        response_format: str = "mp3",
    ) -> None:
        if client is None:
            raise ValueError("AsyncOpenAI client is required.")
        if response_format not in MIME_TYPES:
            raise ValueError(f"Unsupported speech format '{response_format}'")
        self.client = client
        self.model = model
        self.voice = voice
        self.speed = speed
        self.response_format = response_format

    async def synthesize(self, text: str) -> SynthesizedSpeech:
        """Return synthesized audio for ``text``.

        Raises:
            SynthesisFailed: if the request fails or returns no audio.
        """
        if not text or not text.strip():
            raise SynthesisFailed("No text provided for speech synthesis.")
        log.info("Converting text to speech: %s...", text[:50])
        try:
            response = await self.client.audio.speech.create(
                model=self.model,
                voice=self.voice,
                input=text,
                speed=self.speed,
                response_format=self.response_format,
            )
        except Exception as exc:
            log.error("OpenAI speech synthesis failed: %s", exc)
            raise SynthesisFailed(str(exc)) from exc

        audio = getattr(response, "content", None)
        if not audio:
            raise SynthesisFailed("Speech response did not include audio.")
        return SynthesizedSpeech(audio=bytes(audio), mime_type=MIME_TYPES[self.response_format])
