"""Validation helpers for uploaded audio recordings."""

from fastapi import HTTPException, UploadFile

ALLOWED_AUDIO_TYPES = {
    "audio/wav",
    "audio/x-wav",
    "audio/webm",
    "audio/mpeg",
    "audio/mp3",
    "audio/mp4",
    "audio/x-m4a",
    "audio/aac",
    "audio/ogg",
    "audio/opus",
    "audio/flac",
    "video/webm",
    "application/octet-stream",
}

AUDIO_EXTENSIONS = (".wav", ".webm", ".mp3", ".mp4", ".m4a", ".ogg", ".oga", ".flac")


def validate_audio_file(audio_file: UploadFile) -> None:
    """Validate that the uploaded file looks like a supported audio recording.

    Browsers label MediaRecorder output inconsistently (``audio/webm``,
    ``video/webm`` or nothing at all), so the content type is checked against a
    broad allow-list and the filename extension is only consulted when the
    content type is missing.
    """
    if audio_file.content_type:
        content_type = audio_file.content_type.lower().split(";", 1)[0].strip()
        if content_type not in ALLOWED_AUDIO_TYPES:
            raise HTTPException(status_code=415, detail=f"Unsupported audio content type: {audio_file.content_type}")
    elif not (audio_file.filename or "").lower().endswith(AUDIO_EXTENSIONS):
        raise HTTPException(status_code=415, detail="Unsupported or missing audio content type.")


async def read_audio_bytes(audio_file: UploadFile, max_bytes: int) -> bytes:
    """Read validated audio bytes, rejecting empty and oversized uploads."""
    validate_audio_file(audio_file)
    audio_bytes = await audio_file.read(max_bytes + 1)
    if not audio_bytes:
        raise HTTPException(status_code=400, detail="Uploaded audio file is empty.")
    if len(audio_bytes) > max_bytes:
        raise HTTPException(status_code=413, detail=f"Audio file exceeds {max_bytes} bytes.")
    return audio_bytes
