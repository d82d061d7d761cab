"""FastAPI routes for the REST voice chat fallback."""

from fastapi import APIRouter, File, HTTPException, Request, UploadFile
from pydantic import BaseModel

from controllers.voice_controller import chat_reply, health, speech_to_text, text_to_speech

router = APIRouter(prefix="/api", tags=["voice"])


class ChatPayload(BaseModel):
    message: str = ""


class SpeechPayload(BaseModel):
    text: str = ""


@router.post("/speech-to-text")
async def speech_to_text_route(request: Request, audio: UploadFile = File(...)):
    """Transcribe an uploaded audio recording."""
    try:
        return await speech_to_text(request, audio)
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc))


@router.post("/chat")
async def chat_route(request: Request, payload: ChatPayload):
    """Answer a typed message with the assistant persona."""
    try:
        return await chat_reply(request, payload.message)
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc))


@router.post("/text-to-speech")
async def text_to_speech_route(request: Request, payload: SpeechPayload):
    """Synthesize speech for the given text."""
    try:
        return await text_to_speech(request, payload.text)
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc))


@router.get("/health")
async def health_route(request: Request):
    return health(request)
