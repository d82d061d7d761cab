import inspect
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles
from openai import AsyncOpenAI

from routes.realtime_ws import router as realtime_router
from routes.voice_route import router as voice_router
from services.openai.chat_service import ChatCompletionService
from services.openai.speech_service import SpeechSynthesisService
from services.openai.transcription_service import TranscriptionService
from services.realtime.audio_assembler import AudioBufferAssembler
from services.realtime.event_emitter import EventEmitter
from services.realtime.recording_session import RecordingStateMachine
from services.realtime.session_store import SessionStore
from services.realtime.voice_pipeline import VoicePipeline
from services.realtime.ws_session import VoiceSessionManager
from utils.voice_config import VoiceChatConfig

BASE_DIR = Path(__file__).resolve().parent
PUBLIC_DIR = BASE_DIR / "public"
SHUTDOWN_DRAIN_SECONDS = 10.0

load_dotenv()  # Load environment variables from .env file if present

log = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def attach_services(app: FastAPI, config: VoiceChatConfig, openai_client: AsyncOpenAI) -> None:
    """Build the OpenAI gateways and the session manager and put them on `app.state`."""
    transcriber = TranscriptionService(
        openai_client, model=config.transcribe_model, language=config.language
    )
    chat_service = ChatCompletionService(
        openai_client,
        model=config.chat_model,
        max_tokens=config.chat_max_tokens,
        temperature=config.chat_temperature,
    )
    speech_service = SpeechSynthesisService(
        openai_client, model=config.tts_model, voice=config.tts_voice, speed=config.tts_speed
    )
    assembler = AudioBufferAssembler(min_bytes=config.min_audio_bytes)
    emitter = EventEmitter()
    pipeline = VoicePipeline(transcriber, chat_service, speech_service, emitter, assembler)

    app.state.openai_client = openai_client
    app.state.transcriber = transcriber
    app.state.chat_service = chat_service
    app.state.speech_service = speech_service
    app.state.assembler = assembler
    app.state.voice_manager = VoiceSessionManager(
        SessionStore(), pipeline, emitter, RecordingStateMachine(assembler)
    )


async def _close_client(client) -> None:
    aclose = getattr(client, "aclose", None) or getattr(client, "close", None)
    if aclose is None:
        return
    try:
        if inspect.iscoroutinefunction(aclose):
            await aclose()
        else:
            result = aclose()
            if inspect.isawaitable(result):
                await result
    except Exception as exc:
        log.warning("Error while closing OpenAI client: %s", exc)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan manager to initialize:
      - the OpenAI async client (unless one was injected through `create_app`)
      - the transcription, chat and speech gateways
      - the voice session manager and its connection registry
    and attach them to `app.state`.
    """
    config: VoiceChatConfig = app.state.config
    configure_logging(config.log_level)
    openai_client = app.state.injected_openai_client
    owns_client = openai_client is None

    if owns_client:
        try:
            openai_client = AsyncOpenAI()
        except Exception as exc:
            raise RuntimeError(
                "Failed to initialize OpenAI Async client; is OPENAI_API_KEY set?"
            ) from exc

    attach_services(app, config, openai_client)
    log.info("Voice chat server ready (language=%s, chat_model=%s)", config.language, config.chat_model)

    try:
        yield
    finally:
        pending = await app.state.voice_manager.drain(timeout=SHUTDOWN_DRAIN_SECONDS)
        if pending:
            log.warning("Shutting down with %d processing chains still running", pending)
        if owns_client:
            await _close_client(openai_client)


def create_app(
    config: Optional[VoiceChatConfig] = None,
    openai_client: Optional[AsyncOpenAI] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application instance.

    Args:
        config: Settings to use; read from the environment when omitted.
        openai_client: Pre-built client, mainly for tests. The app does not close it.
    """
    app = FastAPI(title="Voice Chat AI", lifespan=lifespan)
    app.state.config = config or VoiceChatConfig()
    app.state.injected_openai_client = openai_client

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(app.state.config.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Serve static assets from the public directory, if it exists.
    if PUBLIC_DIR.exists():
        app.mount("/public", StaticFiles(directory=PUBLIC_DIR), name="public")

    @app.get("/", include_in_schema=False)
    async def serve_index():
        """
        Serve the frontend index page, or a short banner when no frontend is bundled.
        """
        index_path = PUBLIC_DIR / "index.html"
        if not index_path.exists():
            return {
                "message": "Voice Chat AI Server is running!",
                "websocket": "/ws",
                "health": "/api/health",
            }
        return FileResponse(index_path)

    app.include_router(voice_router)
    app.include_router(realtime_router)

    return app


app = create_app()


if __name__ == "__main__":
    settings = app.state.config
    uvicorn.run("main:app", host=settings.host, port=settings.port, log_level=settings.log_level.lower())
