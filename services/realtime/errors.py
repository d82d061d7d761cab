"""Error types raised by the realtime voice pipeline.

Every error carries a user-facing ``message`` and a short ``code`` that is sent
to the client alongside it in the ``error`` event.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class VoiceChatError(Exception):
	"""Base class for errors reported to the client as a single error event."""

	code = "voice_chat_error"

	def __init__(self, message: str, details: Optional[str] = None) -> None:
		super().__init__(message)
		self.message = message
		self.details = details


class ProtocolError(VoiceChatError):
	"""Inbound frame could not be parsed as a supported command."""

	code = "protocol_error"


class AudioTooSmall(VoiceChatError):
	"""Assembled audio is below the minimum size worth transcribing."""

	code = "audio_too_small"

	def __init__(self, size: int, minimum: int) -> None:
		super().__init__(
			f"Audio is too short or empty ({size} bytes, minimum {minimum}). "
			"Please record for at least 1 second.",
		)
		self.size = size
		self.minimum = minimum


class TranscriptionFailure(str, Enum):
	TOO_SHORT = "too_short"
	INVALID_FORMAT = "invalid_format"
	UNKNOWN = "unknown"


_TRANSCRIPTION_MESSAGES = {
	TranscriptionFailure.TOO_SHORT: "Audio file is too short. Please record for at least 1 second.",
	TranscriptionFailure.INVALID_FORMAT: "Invalid audio format. Please try again.",
	TranscriptionFailure.UNKNOWN: "Speech-to-text failed",
}

_TRANSCRIPTION_CODES = {
	TranscriptionFailure.TOO_SHORT: "transcription_too_short",
	TranscriptionFailure.INVALID_FORMAT: "transcription_invalid_format",
	TranscriptionFailure.UNKNOWN: "transcription_failed",
}


class TranscriptionError(VoiceChatError):
	"""Speech-to-text failed; ``kind`` tags the failure mode."""

	def __init__(self, kind: TranscriptionFailure, details: Optional[str] = None) -> None:
		super().__init__(_TRANSCRIPTION_MESSAGES[kind], details)
		self.kind = kind

	@property
	def code(self) -> str:  # type: ignore[override]
		return _TRANSCRIPTION_CODES[self.kind]

	@classmethod
	def from_provider_message(cls, details: str) -> "TranscriptionError":
		"""Classify a provider error message into a tagged transcription error."""
		lowered = (details or "").lower()
		if "too short" in lowered:
			return cls(TranscriptionFailure.TOO_SHORT, details)
		if "invalid" in lowered:
			return cls(TranscriptionFailure.INVALID_FORMAT, details)
		return cls(TranscriptionFailure.UNKNOWN, details)


class CompletionFailed(VoiceChatError):
	code = "completion_failed"

	def __init__(self, details: Optional[str] = None) -> None:
		super().__init__("Failed to get AI response", details)


class SynthesisFailed(VoiceChatError):
	code = "synthesis_failed"

	def __init__(self, details: Optional[str] = None) -> None:
		super().__init__("Text-to-speech failed", details)


class NotConnected(VoiceChatError):
	"""Send attempted on a closed or missing channel."""

	code = "not_connected"
