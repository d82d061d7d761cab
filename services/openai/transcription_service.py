"""Speech-to-text built on OpenAI's transcription models."""

import logging
import os
import tempfile
import time
from typing import Optional

from openai import AsyncOpenAI

from services.realtime.errors import TranscriptionError, TranscriptionFailure
from utils.audio_format import sniff_audio_format

log = logging.getLogger(__name__)

TRANSCRIBE_MODEL = "whisper-1"
DEFAULT_LANGUAGE = "id"


def temp_audio_path(session_id: str, extension: str) -> str:
    """Return a per-call temporary path derived from the session id and a timestamp."""
    safe_id = "".join(ch for ch in session_id if ch.isalnum() or ch in "-_") or "anon"
    return os.path.join(tempfile.gettempdir(), f"recording-{safe_id}-{time.time_ns()}{extension}")


class TranscriptionService:
    """Transcribe recorded audio buffers into text."""

    def __init__(
        self,
        client: AsyncOpenAI,
        *,
        model: str = TRANSCRIBE_MODEL,
        language: str = DEFAULT_LANGUAGE,
    ) -> None:
        if client is None:
            raise ValueError("AsyncOpenAI client is required.")
        self.client = client
        self.model = model
        self.language = language

    async def transcribe(
        self,
        audio_bytes: bytes,
        language: Optional[str] = None,
        *,
        session_id: str = "rest",
    ) -> str:
        """Return the whitespace-trimmed transcript for ``audio_bytes``.

        The audio is written to a temporary file with a suffix matching the
        sniffed container so the multipart upload carries a real filename. The
        file is removed before this method returns, whatever the outcome.

        Raises:
            TranscriptionError: tagged TOO_SHORT, INVALID_FORMAT or UNKNOWN.
        """
        audio_format = sniff_audio_format(audio_bytes)
        tmp_path = temp_audio_path(session_id, audio_format.extension)
        created = False
        try:
            with open(tmp_path, "xb") as fh:
                created = True
                fh.write(audio_bytes)

            with open(tmp_path, "rb") as fh:
                try:
                    response = await self.client.audio.transcriptions.create(
                        model=self.model,
                        file=fh,
                        language=language or self.language,
                    )
                except Exception as exc:
                    log.error("OpenAI transcription request failed: %s", exc)
                    raise TranscriptionError.from_provider_message(str(exc)) from exc
        finally:
            if created and os.path.exists(tmp_path):
                try:
                    os.remove(tmp_path)
                except OSError as exc:
                    log.warning("Failed to remove temporary audio %s: %s", tmp_path, exc)

        transcript = (getattr(response, "text", None) or "").strip()
        if not transcript:
            raise TranscriptionError(TranscriptionFailure.TOO_SHORT, "No speech detected in audio.")
        log.debug("Transcribed %d bytes (%s) to %d chars", len(audio_bytes), audio_format.value, len(transcript))
        return transcript
