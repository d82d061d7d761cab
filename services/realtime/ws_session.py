"""Dispatch voice chat websocket frames for every connected client."""

from __future__ import annotations

import asyncio
import logging
from functools import partial
from typing import Any, Awaitable, Callable, Dict, Optional, Set

from models.session_models import VoiceSession
from services.realtime.errors import ProtocolError, VoiceChatError
from services.realtime.event_emitter import EventEmitter
from services.realtime.frame_router import route_frame
from services.realtime.protocol import (
	AudioFrame,
	ChatMessageCommand,
	EventType,
	Ping,
	ProcessAudio,
	StartRecording,
	StopRecording,
	UnknownCommand,
	decode_audio_data,
)
from services.realtime.recording_session import RecordingStateMachine
from services.realtime.session_store import SessionStore
from services.realtime.voice_pipeline import VoicePipeline

log = logging.getLogger(__name__)


class VoiceSessionManager:
	"""Own the connection registry and drive each session's state machine.

	Frames are handled inline, one at a time per connection. Processing chains
	run as background tasks so the connection keeps receiving frames while the
	OpenAI calls are awaited; the running task doubles as the session's
	in-flight guard.
	"""

	def __init__(
		self,
		store: SessionStore,
		pipeline: VoicePipeline,
		emitter: EventEmitter,
		recorder: RecordingStateMachine,
	) -> None:
		self.store = store
		self.pipeline = pipeline
		self.emitter = emitter
		self.recorder = recorder
		self._tasks: Set[asyncio.Task] = set()

	async def connect(self, websocket: Any) -> VoiceSession:
		"""Register an accepted websocket and greet the client with its id."""
		session = self.store.get(self.store.register(websocket))
		log.info("Client connected: %s (%d active)", session.session_id, len(self.store))
		await self.emitter.emit(session, EventType.CONNECTION, clientId=session.session_id)
		return session

	def disconnect(self, session: VoiceSession) -> None:
		"""Close and evict a session; later calls for the same session do nothing."""
		if session.closed:
			return
		session.closed = True
		session.audio_chunks = []
		self.store.remove(session.session_id)
		if session.is_processing:
			log.info("Client %s disconnected with a chain in flight; its results will be dropped", session.session_id)
		log.info("Client disconnected: %s (%d active)", session.session_id, len(self.store))

	async def handle(self, session: VoiceSession, message: Dict[str, Any]) -> None:
		"""Process a single inbound websocket message."""
		try:
			frame = route_frame(message)
			if isinstance(frame, AudioFrame):
				await self._on_audio(session, frame.data)
			elif isinstance(frame, StartRecording):
				await self._on_start(session)
			elif isinstance(frame, StopRecording):
				await self._on_stop(session)
			elif isinstance(frame, ProcessAudio):
				await self._on_process_audio(session, frame)
			elif isinstance(frame, ChatMessageCommand):
				await self._on_chat(session, frame.text)
			elif isinstance(frame, Ping):
				await self.emitter.emit(session, EventType.PONG)
			elif isinstance(frame, UnknownCommand):
				log.warning("Unknown message type from %s: %s", session.session_id, frame.type)
				raise ProtocolError(f"Unsupported message type: {frame.type}")
		except VoiceChatError as exc:
			await self.emitter.emit_error(session, exc)
		except Exception:
			log.exception("Failed to handle frame for session %s", session.session_id)
			await self.emitter.emit_error(session, "Failed to handle message")

	async def _on_start(self, session: VoiceSession) -> None:
		self.recorder.start(session)
		await self.emitter.emit(session, EventType.RECORDING_STARTED)

	async def _on_audio(self, session: VoiceSession, data: bytes) -> None:
		single_shot = self.recorder.append(session, data)
		if single_shot is None:
			await self.emitter.emit(
				session,
				EventType.AUDIO_CHUNK_RECEIVED,
				chunkSize=len(data),
				totalChunks=len(session.audio_chunks),
			)
			return
		log.info("Session %s sent %d bytes outside a recording; processing as one upload", session.session_id, len(data))
		self._launch(session, partial(self.pipeline.process_audio, session, single_shot))

	async def _on_stop(self, session: VoiceSession) -> None:
		audio = self.recorder.stop(session)
		if audio is None:
			log.debug("Session %s sent stop_recording while not recording", session.session_id)
			return
		await self.emitter.emit(session, EventType.RECORDING_STOPPED)
		if not audio:
			self.recorder.settle(session)
			return
		if not self._launch(session, partial(self.pipeline.process_audio, session, audio)):
			self.recorder.settle(session)

	async def _on_process_audio(self, session: VoiceSession, command: ProcessAudio) -> None:
		if session.is_processing:
			log.info("Session %s already processing; dropping process_audio", session.session_id)
			return
		audio = decode_audio_data(command.audio_data)
		log.info("Session %s submitted %d bytes of %s", session.session_id, len(audio), command.mime_type)
		self._launch(session, partial(self.pipeline.process_audio, session, audio))

	async def _on_chat(self, session: VoiceSession, text: str) -> None:
		text = text.strip()
		if not text:
			raise ProtocolError("Message text is required.")
		self._launch(session, partial(self.pipeline.process_text, session, text))

	def _launch(self, session: VoiceSession, chain: Callable[[], Awaitable[None]]) -> bool:
		"""Start a processing chain unless one is already running for the session."""
		if session.is_processing:
			log.info("Session %s already processing; dropping new request", session.session_id)
			return False
		task = asyncio.create_task(self._run_chain(session, chain))
		session.processing_task = task
		self._tasks.add(task)
		task.add_done_callback(self._tasks.discard)
		return True

	async def _run_chain(self, session: VoiceSession, chain: Callable[[], Awaitable[None]]) -> None:
		try:
			await chain()
		finally:
			self.recorder.settle(session)
			if session.processing_task is asyncio.current_task():
				session.processing_task = None

	async def drain(self, timeout: Optional[float] = None) -> int:
		"""Wait for in-flight chains to finish; return how many are still running."""
		if not self._tasks:
			return 0
		_, pending = await asyncio.wait(list(self._tasks), timeout=timeout)
		return len(pending)
