"""Send progress and result events to voice chat clients."""

from __future__ import annotations

import logging
from typing import Union

from starlette.websockets import WebSocketDisconnect

from models.session_models import VoiceSession
from services.realtime.errors import NotConnected, VoiceChatError
from services.realtime.protocol import EventType, event_payload

log = logging.getLogger(__name__)


class EventEmitter:
	"""Best-effort JSON event sender.

	Events for one session are sent one at a time, in the order they are emitted.
	Sends to a closed session are dropped instead of raised.
	"""

	async def emit(self, session: VoiceSession, event_type: EventType, **payload) -> bool:
		"""Send one event; return False when it was dropped."""
		frame = event_payload(event_type, **payload)
		async with session.send_lock:
			try:
				await self._send(session, frame)
			except NotConnected as exc:
				log.debug("Dropped %s for session %s: %s", event_type.value, session.session_id, exc.message)
				return False
		return True

	async def emit_error(self, session: VoiceSession, error: Union[VoiceChatError, str]) -> bool:
		if isinstance(error, VoiceChatError):
			return await self.emit(session, EventType.ERROR, error=error.message, code=error.code)
		return await self.emit(session, EventType.ERROR, error=str(error), code="internal_error")

	async def _send(self, session: VoiceSession, frame: str) -> None:
		if session.closed:
			raise NotConnected("Session is closed")
		try:
			await session.websocket.send_text(frame)
		except (WebSocketDisconnect, RuntimeError, OSError) as exc:
			raise NotConnected("Websocket send failed", str(exc)) from exc
