"""Transcription → completion → synthesis chain for one voice turn."""

from __future__ import annotations

import base64
import logging
from typing import Optional

from models.session_models import VoiceSession
from services.openai.chat_service import ChatCompletionService
from services.openai.speech_service import SpeechSynthesisService
from services.openai.transcription_service import TranscriptionService
from services.realtime.audio_assembler import AudioBufferAssembler
from services.realtime.errors import VoiceChatError
from services.realtime.event_emitter import EventEmitter
from services.realtime.protocol import EventType

log = logging.getLogger(__name__)


class VoicePipeline:
	"""Run one processing chain and report every stage to the client.

	Each stage emits a progress event before it starts and a result event when
	it finishes. Any failure ends the chain with exactly one error event.
	"""

	def __init__(
		self,
		transcriber: TranscriptionService,
		chat: ChatCompletionService,
		speech: SpeechSynthesisService,
		emitter: EventEmitter,
		assembler: AudioBufferAssembler,
		language: Optional[str] = None,
	) -> None:
		self.transcriber = transcriber
		self.chat = chat
		self.speech = speech
		self.emitter = emitter
		self.assembler = assembler
		self.language = language

	async def process_audio(self, session: VoiceSession, audio: bytes) -> None:
		"""Transcribe a complete recording and answer it."""
		try:
			self.assembler.ensure_min_size(audio)
			await self.emitter.emit(session, EventType.PROCESSING_AUDIO)
			text = await self.transcriber.transcribe(audio, self.language, session_id=session.session_id)
			log.debug("Session %s transcribed: %s", session.session_id, text)
			session.record_message("user", text)
			await self.emitter.emit(session, EventType.TRANSCRIPTION_COMPLETE, text=text)
			await self._reply(session, text)
		except VoiceChatError as exc:
			await self._report(session, exc)
		except Exception:
			log.exception("Unexpected failure processing audio for session %s", session.session_id)
			await self.emitter.emit_error(session, "Failed to process audio")

	async def process_text(self, session: VoiceSession, text: str) -> None:
		"""Answer a typed message without transcription."""
		try:
			session.record_message("user", text)
			await self._reply(session, text)
		except VoiceChatError as exc:
			await self._report(session, exc)
		except Exception:
			log.exception("Unexpected failure answering chat message for session %s", session.session_id)
			await self.emitter.emit_error(session, "Failed to process message")

	async def _reply(self, session: VoiceSession, text: str) -> None:
		await self.emitter.emit(session, EventType.AI_THINKING)
		reply = await self.chat.complete(text)
		session.record_message("assistant", reply)
		await self.emitter.emit(session, EventType.AI_RESPONSE, text=reply)

		await self.emitter.emit(session, EventType.TTS_PROCESSING)
		speech = await self.speech.synthesize(reply)
		await self.emitter.emit(
			session,
			EventType.TTS_COMPLETE,
			audioData=base64.b64encode(speech.audio).decode("ascii"),
			mimeType=speech.mime_type,
		)

	async def _report(self, session: VoiceSession, exc: VoiceChatError) -> None:
		log.warning(
			"Session %s %s: %s%s",
			session.session_id,
			exc.code,
			exc.message,
			f" ({exc.details})" if exc.details else "",
		)
		await self.emitter.emit_error(session, exc)
