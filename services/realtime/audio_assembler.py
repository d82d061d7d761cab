"""Collect streamed audio chunks and assemble them into one recording."""

from __future__ import annotations

from typing import Iterable, Optional

from models.session_models import VoiceSession
from services.realtime.errors import AudioTooSmall

MIN_AUDIO_BYTES = 1000


class AudioBufferAssembler:
	"""Store chunks while a session records; forward single-shot blobs otherwise."""

	def __init__(self, min_bytes: int = MIN_AUDIO_BYTES) -> None:
		self.min_bytes = min_bytes

	def accept(self, session: VoiceSession, chunk: bytes) -> Optional[bytes]:
		"""Buffer ``chunk`` for a recording session.

		Returns None when the chunk was stored, or the chunk itself when the
		session is not recording and it must be processed as a whole recording.
		"""
		if session.is_recording:
			session.audio_chunks.append(bytes(chunk))
			return None
		return bytes(chunk)

	@staticmethod
	def assemble(chunks: Iterable[bytes]) -> bytes:
		"""Concatenate chunks in arrival order into a new buffer."""
		return b"".join(chunks)

	def ensure_min_size(self, buffer: bytes) -> bytes:
		"""Return ``buffer`` or raise AudioTooSmall when it is not worth transcribing."""
		if len(buffer) < self.min_bytes:
			raise AudioTooSmall(len(buffer), self.min_bytes)
		return buffer
