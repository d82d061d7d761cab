"""Classify raw websocket messages into audio frames or commands."""

from __future__ import annotations

from typing import Any, Dict

from services.realtime.errors import ProtocolError
from services.realtime.protocol import AudioFrame, parse_command


def route_frame(message: Dict[str, Any]):
	"""Return an ``AudioFrame`` or a parsed command for one ASGI receive message.

	Raises:
		ProtocolError: for malformed text payloads or frames without content.
	"""
	data = message.get("bytes")
	if data is not None:
		return AudioFrame(data=bytes(data))
	text = message.get("text")
	if text is None:
		raise ProtocolError("Invalid websocket frame")
	return parse_command(text)
