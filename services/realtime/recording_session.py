"""Recording state transitions for one voice session.

    IDLE --start--> RECORDING --stop--> FINALIZING --chain settles--> IDLE

``start`` is accepted from any state. ``stop`` outside RECORDING does nothing.
"""

from __future__ import annotations

import logging
from typing import Optional

from models.session_models import RecordingState, VoiceSession
from services.realtime.audio_assembler import AudioBufferAssembler

log = logging.getLogger(__name__)


class RecordingStateMachine:
	def __init__(self, assembler: AudioBufferAssembler) -> None:
		self.assembler = assembler

	def start(self, session: VoiceSession) -> None:
		"""Begin a new recording, discarding any chunks from a previous one."""
		if session.state is RecordingState.RECORDING and session.audio_chunks:
			log.info("Session %s restarted recording; dropping %d chunks", session.session_id, len(session.audio_chunks))
		session.audio_chunks = []
		session.state = RecordingState.RECORDING

	def append(self, session: VoiceSession, chunk: bytes) -> Optional[bytes]:
		"""Hand a binary frame to the assembler; see ``AudioBufferAssembler.accept``."""
		return self.assembler.accept(session, chunk)

	def stop(self, session: VoiceSession) -> Optional[bytes]:
		"""Finish the current recording and return its assembled audio.

		Returns None when the session was not recording. The returned buffer is
		an owned copy; the session's chunk list is replaced with an empty one.
		"""
		if not session.is_recording:
			return None
		session.state = RecordingState.FINALIZING
		buffer = self.assembler.assemble(session.audio_chunks)
		session.audio_chunks = []
		return buffer

	def settle(self, session: VoiceSession) -> None:
		"""Return a finalizing session to IDLE; a newer recording is left alone."""
		if session.state is RecordingState.FINALIZING:
			session.state = RecordingState.IDLE
