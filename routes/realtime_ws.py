"""WebSocket endpoint for streaming voice chat."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, WebSocket, WebSocketException, status
from starlette.websockets import WebSocketDisconnect

from services.realtime.ws_session import VoiceSessionManager

log = logging.getLogger(__name__)

router = APIRouter()


def _require_manager(websocket: WebSocket) -> VoiceSessionManager:
	manager = getattr(websocket.app.state, "voice_manager", None)
	if manager is None:
		raise WebSocketException(code=status.WS_1011_INTERNAL_ERROR, reason="Voice session manager unavailable")
	return manager


async def _receive(websocket: WebSocket, idle_timeout: Optional[float]) -> Dict[str, Any]:
	if idle_timeout:
		return await asyncio.wait_for(websocket.receive(), timeout=idle_timeout)
	return await websocket.receive()


@router.websocket("/ws")
@router.websocket("/")
async def voice_socket(websocket: WebSocket, manager: VoiceSessionManager = Depends(_require_manager)):
	"""Run one client's voice chat session until the socket closes."""
	await websocket.accept()
	session = await manager.connect(websocket)
	config = getattr(websocket.app.state, "config", None)
	idle_timeout = getattr(config, "idle_timeout_seconds", None)
	try:
		while True:
			try:
				message = await _receive(websocket, idle_timeout)
			except asyncio.TimeoutError:
				log.info("Closing idle session %s after %.0fs", session.session_id, idle_timeout)
				manager.disconnect(session)
				await websocket.close(code=status.WS_1000_NORMAL_CLOSURE)
				break
			if message["type"] == "websocket.disconnect":
				break
			await manager.handle(session, message)
	except WebSocketDisconnect:
		pass
	except Exception:
		log.exception("Websocket error for session %s", session.session_id)
	finally:
		manager.disconnect(session)
