"""Wire protocol for the voice chat websocket.

Client frames are either binary audio or JSON text commands. Commands are parsed
into a closed set of pydantic models keyed by ``type``; any other ``type`` value
becomes an ``UnknownCommand``.

Server frames are JSON objects whose ``type`` is one of ``EventType``.
"""

from __future__ import annotations

import base64
import binascii
import json
import re
from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Literal, Union, get_args

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from services.realtime.errors import ProtocolError


class EventType(str, Enum):
	CONNECTION = "connection"
	RECORDING_STARTED = "recording_started"
	AUDIO_CHUNK_RECEIVED = "audio_chunk_received"
	RECORDING_STOPPED = "recording_stopped"
	PROCESSING_AUDIO = "processing_audio"
	TRANSCRIPTION_COMPLETE = "transcription_complete"
	AI_THINKING = "ai_thinking"
	AI_RESPONSE = "ai_response"
	TTS_PROCESSING = "tts_processing"
	TTS_COMPLETE = "tts_complete"
	ERROR = "error"
	PONG = "pong"


class _Command(BaseModel):
	model_config = ConfigDict(extra="ignore", populate_by_name=True)


class StartRecording(_Command):
	type: Literal["start_recording"]


class StopRecording(_Command):
	type: Literal["stop_recording"]


class ProcessAudio(_Command):
	type: Literal["process_audio"]
	audio_data: str = Field(alias="audioData", min_length=1)
	mime_type: str = Field(default="audio/webm", alias="mimeType")


class ChatMessageCommand(_Command):
	type: Literal["chat_message"]
	text: str = Field(min_length=1)


class Ping(_Command):
	type: Literal["ping"]


class UnknownCommand(_Command):
	type: str


_COMMAND_MODELS = (StartRecording, StopRecording, ProcessAudio, ChatMessageCommand, Ping)

Command = Annotated[Union[_COMMAND_MODELS], Field(discriminator="type")]

_command_adapter: TypeAdapter = TypeAdapter(Command)

KNOWN_COMMANDS = frozenset(
	literal
	for model in _COMMAND_MODELS
	for literal in get_args(model.model_fields["type"].annotation)
)

_BASE64_ALPHABET = re.compile(r"[A-Za-z0-9+/=]+")
_BASE64_SEGMENT = re.compile(r"[A-Za-z0-9+/]+={0,2}")


@dataclass(frozen=True)
class AudioFrame:
	"""Binary websocket frame carrying raw audio bytes."""

	data: bytes


def parse_command(raw: str):
	"""Parse a JSON text frame into a command model.

	Raises:
		ProtocolError: if the text is not a JSON object with a string ``type`` or
			does not validate against the schema for its type.
	"""
	try:
		payload = json.loads(raw)
	except (TypeError, ValueError) as exc:
		raise ProtocolError("Payload must be JSON", str(exc)) from exc
	if not isinstance(payload, dict):
		raise ProtocolError("Payload must be a JSON object")
	message_type = payload.get("type")
	if not isinstance(message_type, str) or not message_type:
		raise ProtocolError("Message type is required")
	if message_type not in KNOWN_COMMANDS:
		return UnknownCommand(type=message_type)
	try:
		return _command_adapter.validate_python(payload)
	except ValidationError as exc:
		raise ProtocolError(f"Invalid '{message_type}' message", str(exc)) from exc


def decode_audio_data(data: str) -> bytes:
	"""Decode base64 audio that may be several padded segments joined together.

	Browser clients encode large recordings slice by slice and concatenate the
	results, so ``=`` padding can appear in the middle of the payload. Each
	segment is decoded on its own and the bytes are joined in order.

	Raises:
		ProtocolError: on characters outside the base64 alphabet, stray padding or
			a segment with the wrong length.
	"""
	if not _BASE64_ALPHABET.fullmatch(data or ""):
		raise ProtocolError("audioData must be base64 encoded")
	segments = _BASE64_SEGMENT.findall(data)
	if "".join(segments) != data:
		raise ProtocolError("audioData must be base64 encoded", "misplaced padding")
	try:
		return b"".join(base64.b64decode(segment, validate=True) for segment in segments)
	except (binascii.Error, ValueError) as exc:
		raise ProtocolError("audioData must be base64 encoded", str(exc)) from exc


def event_payload(event_type: EventType, **fields) -> str:
	"""Serialize an outbound event as a JSON text frame."""
	return json.dumps({"type": event_type.value, **fields})
