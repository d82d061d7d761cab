"""Guess the container format of recorded audio from its leading bytes.

The guess only picks a file suffix for the transcription upload; nothing is
decoded, so a wrong guess is not fatal.
"""

from enum import Enum

EBML_MAGIC = b"\x1a\x45\xdf\xa3"


class AudioFormat(str, Enum):
    WEBM = "webm"
    WAV = "wav"
    M4A = "m4a"

    @property
    def extension(self) -> str:
        return f".{self.value}"


def sniff_audio_format(buffer: bytes) -> AudioFormat:
    """Return the likely container for ``buffer``, defaulting to WebM."""
    if buffer[:4] == b"RIFF" and buffer[8:12] == b"WAVE":
        return AudioFormat.WAV
    if buffer[:4] == EBML_MAGIC:
        return AudioFormat.WEBM
    # MP4 boxes start with a big-endian size, so short files lead with zero bytes.
    if len(buffer) >= 3 and buffer[:3] == b"\x00\x00\x00":
        return AudioFormat.M4A
    return AudioFormat.WEBM
