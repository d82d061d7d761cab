"""
Shared fixtures for the voice chat tests.

The OpenAI SDK surface is replaced by ``AsyncMock`` objects so every gateway
runs for real against canned provider responses.
"""

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from services.openai.chat_service import ChatCompletionService
from services.openai.speech_service import SpeechSynthesisService
from services.openai.transcription_service import TranscriptionService
from services.realtime.audio_assembler import AudioBufferAssembler
from services.realtime.event_emitter import EventEmitter
from services.realtime.recording_session import RecordingStateMachine
from services.realtime.session_store import SessionStore
from services.realtime.voice_pipeline import VoicePipeline
from services.realtime.ws_session import VoiceSessionManager

EBML_HEADER = b"\x1a\x45\xdf\xa3"
REPLY_TEXT = "Halo! Ada promo apa yang ingin Anda ketahui?"
SPEECH_BYTES = b"ID3-fake-mp3-bytes"


def completion_response(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def webm_bytes(size: int, fill: bytes = b"\x01") -> bytes:
    """Return ``size`` bytes that sniff as WebM."""
    return (EBML_HEADER + fill * size)[:size]


class FakeWebSocket:
    """Collects JSON frames sent by the server."""

    def __init__(self) -> None:
        self.sent = []
        self.closed = False

    async def send_text(self, data: str) -> None:
        if self.closed:
            raise RuntimeError('Cannot call "send" once a close message has been sent.')
        self.sent.append(json.loads(data))

    def types(self):
        return [event["type"] for event in self.sent]

    def of_type(self, event_type: str):
        return [event for event in self.sent if event["type"] == event_type]


@pytest.fixture
def fake_openai():
    client = MagicMock()
    client.audio.transcriptions.create = AsyncMock(return_value=SimpleNamespace(text="halo"))
    client.chat.completions.create = AsyncMock(return_value=completion_response(REPLY_TEXT))
    client.audio.speech.create = AsyncMock(return_value=SimpleNamespace(content=SPEECH_BYTES))
    return client


@pytest.fixture
def manager(fake_openai):
    assembler = AudioBufferAssembler(min_bytes=1000)
    emitter = EventEmitter()
    pipeline = VoicePipeline(
        TranscriptionService(fake_openai),
        ChatCompletionService(fake_openai),
        SpeechSynthesisService(fake_openai),
        emitter,
        assembler,
    )
    return VoiceSessionManager(SessionStore(), pipeline, emitter, RecordingStateMachine(assembler))


@pytest.fixture
def websocket():
    return FakeWebSocket()
