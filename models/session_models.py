"""Session domain models for realtime voice chat."""

from __future__ import annotations

import asyncio
import time
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Deque, List, Optional
from uuid import uuid4

MAX_TRANSCRIPT_MESSAGES = 20


class RecordingState(str, Enum):
	"""Recording lifecycle of one connection."""

	IDLE = "idle"
	RECORDING = "recording"
	FINALIZING = "finalizing"


@dataclass(frozen=True)
class ChatMessage:
	"""Transcript entry; never mutated once created."""

	content: str
	role: str
	id: str = field(default_factory=lambda: uuid4().hex)
	timestamp: float = field(default_factory=lambda: time.time())


@dataclass
class VoiceSession:
	"""In-memory state tracked for one live websocket connection."""

	session_id: str
	websocket: Any
	state: RecordingState = RecordingState.IDLE
	audio_chunks: List[bytes] = field(default_factory=list)
	processing_task: Optional[asyncio.Task] = None
	connected_at: float = field(default_factory=lambda: time.time())
	closed: bool = False
	messages: Deque[ChatMessage] = field(default_factory=lambda: deque(maxlen=MAX_TRANSCRIPT_MESSAGES))
	send_lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)

	@property
	def is_recording(self) -> bool:
		return self.state is RecordingState.RECORDING

	@property
	def is_processing(self) -> bool:
		"""True while a processing chain task is still running for this session."""
		return self.processing_task is not None and not self.processing_task.done()

	def record_message(self, role: str, content: str) -> ChatMessage:
		"""Append a transcript entry, dropping the oldest past the cap, and return it."""
		message = ChatMessage(content=content, role=role)
		self.messages.append(message)
		return message
