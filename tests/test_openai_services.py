"""Tests for the transcription, chat and speech gateways."""

import os
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from conftest import REPLY_TEXT, SPEECH_BYTES, completion_response, webm_bytes
from services.openai.chat_service import ChatCompletionService
from services.openai.prompts import assistant_system_prompt
from services.openai.speech_service import SpeechSynthesisService
from services.openai.transcription_service import TranscriptionService, temp_audio_path
from services.realtime.errors import (
    CompletionFailed,
    SynthesisFailed,
    TranscriptionError,
    TranscriptionFailure,
)

WAV_HEADER = b"RIFF\x24\x08\x00\x00WAVEfmt "


def recording_client(text="halo", error=None):
    """Client whose transcription call records the uploaded file path."""
    seen = {}

    async def _create(**kwargs):
        seen["path"] = kwargs["file"].name
        seen["exists_during_call"] = os.path.exists(kwargs["file"].name)
        seen["kwargs"] = kwargs
        if error is not None:
            raise error
        return SimpleNamespace(text=text)

    client = MagicMock()
    client.audio.transcriptions.create = AsyncMock(side_effect=_create)
    return client, seen


class TestTranscriptionService:
    @pytest.mark.asyncio
    async def test_returns_trimmed_text_and_removes_temp_file(self):
        client, seen = recording_client(text="  halo  ")
        service = TranscriptionService(client)

        text = await service.transcribe(webm_bytes(2000), session_id="abc123")

        assert text == "halo"
        assert seen["exists_during_call"]
        assert not os.path.exists(seen["path"])
        assert os.path.basename(seen["path"]).startswith("recording-abc123-")
        assert seen["kwargs"]["model"] == "whisper-1"
        assert seen["kwargs"]["language"] == "id"

    @pytest.mark.asyncio
    async def test_language_hint_overrides_default(self):
        client, seen = recording_client()
        service = TranscriptionService(client, language="id")

        await service.transcribe(webm_bytes(2000), "en")

        assert seen["kwargs"]["language"] == "en"

    @pytest.mark.asyncio
    async def test_wav_buffer_uses_wav_suffix(self):
        client, seen = recording_client()

        await TranscriptionService(client).transcribe(WAV_HEADER + b"\x00" * 2000)

        assert seen["path"].endswith(".wav")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "message, kind",
        [
            ("Audio file is too short. Minimum audio length is 0.1 seconds.", TranscriptionFailure.TOO_SHORT),
            ("Invalid file format. Supported formats: ['flac', 'm4a', 'mp3']", TranscriptionFailure.INVALID_FORMAT),
            ("Connection reset by peer", TranscriptionFailure.UNKNOWN),
        ],
    )
    async def test_provider_errors_are_tagged_and_temp_file_removed(self, message, kind):
        client, seen = recording_client(error=RuntimeError(message))

        with pytest.raises(TranscriptionError) as excinfo:
            await TranscriptionService(client).transcribe(webm_bytes(2000), session_id="s1")

        assert excinfo.value.kind is kind
        assert excinfo.value.details == message
        assert not os.path.exists(seen["path"])

    @pytest.mark.asyncio
    async def test_empty_transcript_is_too_short(self):
        client, seen = recording_client(text="   ")

        with pytest.raises(TranscriptionError) as excinfo:
            await TranscriptionService(client).transcribe(webm_bytes(2000))

        assert excinfo.value.kind is TranscriptionFailure.TOO_SHORT
        assert not os.path.exists(seen["path"])

    def test_temp_paths_are_unique_and_sanitized(self):
        first = temp_audio_path("../../etc", ".webm")
        second = temp_audio_path("../../etc", ".webm")

        assert first != second
        assert os.path.dirname(first) == os.path.dirname(second)
        assert ".." not in os.path.basename(first)

    def test_requires_client(self):
        with pytest.raises(ValueError):
            TranscriptionService(None)


class TestChatCompletionService:
    @pytest.mark.asyncio
    async def test_sends_fixed_prompt_and_sampling(self, fake_openai):
        service = ChatCompletionService(fake_openai)

        reply = await service.complete("Ada diskon di tenant sepatu?")

        assert reply == REPLY_TEXT
        kwargs = fake_openai.chat.completions.create.await_args.kwargs
        assert kwargs["model"] == "gpt-4o-mini"
        assert kwargs["max_tokens"] == 500
        assert kwargs["temperature"] == 0.7
        assert kwargs["messages"] == [
            {"role": "system", "content": assistant_system_prompt()},
            {"role": "user", "content": "Ada diskon di tenant sepatu?"},
        ]

    @pytest.mark.asyncio
    async def test_each_call_is_stateless(self, fake_openai):
        service = ChatCompletionService(fake_openai)

        await service.complete("pertama")
        await service.complete("kedua")

        messages = fake_openai.chat.completions.create.await_args.kwargs["messages"]
        assert len(messages) == 2
        assert messages[1]["content"] == "kedua"

    @pytest.mark.asyncio
    async def test_provider_error_becomes_completion_failed(self, fake_openai):
        fake_openai.chat.completions.create.side_effect = RuntimeError("quota exceeded")

        with pytest.raises(CompletionFailed) as excinfo:
            await ChatCompletionService(fake_openai).complete("halo")

        assert excinfo.value.details == "quota exceeded"

    @pytest.mark.asyncio
    async def test_empty_reply_is_failure(self, fake_openai):
        fake_openai.chat.completions.create.return_value = completion_response(None)

        with pytest.raises(CompletionFailed):
            await ChatCompletionService(fake_openai).complete("halo")


class TestSpeechSynthesisService:
    @pytest.mark.asyncio
    async def test_returns_audio_and_mime_type(self, fake_openai):
        speech = await SpeechSynthesisService(fake_openai).synthesize("Selamat datang")

        assert speech.audio == SPEECH_BYTES
        assert speech.mime_type == "audio/mpeg"
        kwargs = fake_openai.audio.speech.create.await_args.kwargs
        assert kwargs["model"] == "gpt-4o-mini-tts"
        assert kwargs["voice"] == "nova"
        assert kwargs["input"] == "Selamat datang"

    @pytest.mark.asyncio
    async def test_provider_error_becomes_synthesis_failed(self, fake_openai):
        fake_openai.audio.speech.create.side_effect = RuntimeError("boom")

        with pytest.raises(SynthesisFailed):
            await SpeechSynthesisService(fake_openai).synthesize("halo")

    @pytest.mark.asyncio
    async def test_blank_text_is_rejected_without_call(self, fake_openai):
        with pytest.raises(SynthesisFailed):
            await SpeechSynthesisService(fake_openai).synthesize("  ")

        fake_openai.audio.speech.create.assert_not_awaited()

    def test_unknown_format_rejected(self, fake_openai):
        with pytest.raises(ValueError):
            SpeechSynthesisService(fake_openai, response_format="midi")
