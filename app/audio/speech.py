"""Text-to-speech format resolution and synthesis.

Format handling:
    The requested format is matched case-insensitively against
    `AudioFormat`. Blank or unknown values resolve silently to MP3; an
    unsupported format is never a client error.

Response formatting:
    Each format carries the media type and file extension used by the HTTP
    adapter for `Content-Type` and `Content-Disposition`.
"""

from enum import Enum

from app.llm.base import SpeechModel


class AudioFormat(str, Enum):
    MP3 = "mp3"
    OPUS = "opus"
    AAC = "aac"
    FLAC = "flac"
    WAV = "wav"
    PCM = "pcm"

    @property
    def media_type(self) -> str:
        return _MEDIA_TYPES[self]

    @property
    def filename(self) -> str:
        return f"speech.{self.value}"


_MEDIA_TYPES = {
    AudioFormat.MP3: "audio/mpeg",
    AudioFormat.OPUS: "audio/opus",
    AudioFormat.AAC: "audio/aac",
    AudioFormat.FLAC: "audio/flac",
    AudioFormat.WAV: "audio/wav",
    AudioFormat.PCM: "application/octet-stream",
}

DEFAULT_AUDIO_FORMAT = AudioFormat.MP3


def parse_audio_format(value: str | None) -> AudioFormat:
    """Resolve a client format string, falling back to MP3."""
    if not value or not value.strip():
        return DEFAULT_AUDIO_FORMAT
    try:
        return AudioFormat(value.strip().lower())
    except ValueError:
        return DEFAULT_AUDIO_FORMAT


def synthesize_speech(
    speech_model: SpeechModel,
    text: str,
    audio_format: AudioFormat,
    model: str | None = None,
    voice: str | None = None,
    speed: float | None = None,
) -> bytes:
    """Synthesize `text`; blank model/voice overrides are dropped."""
    return speech_model.synthesize(
        text,
        response_format=audio_format.value,
        model=model.strip() if model and model.strip() else None,
        voice=voice.strip() if voice and voice.strip() else None,
        speed=speed,
    )
