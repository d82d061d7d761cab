"""Request handlers for the REST voice chat endpoints."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import HTTPException, Request, UploadFile
from fastapi.responses import Response

from services.realtime.errors import (
	AudioTooSmall,
	TranscriptionError,
	TranscriptionFailure,
	VoiceChatError,
)
from utils.media_validation import read_audio_bytes


def _error_detail(exc: VoiceChatError) -> Dict[str, Any]:
	return {"error": exc.message, "details": exc.details, "code": exc.code}


async def speech_to_text(request: Request, audio_file: UploadFile) -> Dict[str, Any]:
	"""Transcribe an uploaded recording."""
	state = request.app.state
	audio_bytes = await read_audio_bytes(audio_file, state.config.max_upload_bytes)
	try:
		state.assembler.ensure_min_size(audio_bytes)
		text = await state.transcriber.transcribe(audio_bytes)
	except AudioTooSmall as exc:
		raise HTTPException(status_code=400, detail=_error_detail(exc)) from exc
	except TranscriptionError as exc:
		status_code = 500 if exc.kind is TranscriptionFailure.UNKNOWN else 400
		raise HTTPException(status_code=status_code, detail=_error_detail(exc)) from exc
	return {"text": text, "success": True}


async def chat_reply(request: Request, message: str) -> Dict[str, Any]:
	"""Return the assistant reply for a typed message."""
	cleaned = (message or "").strip()
	if not cleaned:
		raise HTTPException(status_code=400, detail="No message provided")
	try:
		response = await request.app.state.chat_service.complete(cleaned)
	except VoiceChatError as exc:
		raise HTTPException(status_code=500, detail=_error_detail(exc)) from exc
	return {"response": response, "success": True}


async def text_to_speech(request: Request, text: str) -> Response:
	"""Return synthesized speech as a binary audio response."""
	cleaned = (text or "").strip()
	if not cleaned:
		raise HTTPException(status_code=400, detail="No text provided")
	try:
		speech = await request.app.state.speech_service.synthesize(cleaned)
	except VoiceChatError as exc:
		raise HTTPException(status_code=500, detail=_error_detail(exc)) from exc
	return Response(
		content=speech.audio,
		media_type=speech.mime_type,
		headers={"Cache-Control": "no-cache"},
	)


def health(request: Request) -> Dict[str, Any]:
	"""Report service status and the number of live websocket sessions."""
	state = request.app.state
	manager = getattr(state, "voice_manager", None)
	return {
		"status": "OK",
		"timestamp": datetime.now(timezone.utc).isoformat(),
		"openai_configured": getattr(state, "openai_client", None) is not None,
		"active_sessions": len(manager.store) if manager is not None else 0,
	}
