"""Speech-to-text adapter.

Options:
    `language` and `prompt` are forwarded only when non-blank, so the
    provider's own defaults apply otherwise.

Upload validation (presence, size, filename) happens in
`app.api.multimodal.file_input_manager` before this module is reached.
"""

from app.core.types import TranscriptionResult
from app.llm.base import TranscriptionModel


def transcribe_audio(
    transcription_model: TranscriptionModel,
    filename: str,
    audio: bytes,
    language: str | None = None,
    prompt: str | None = None,
) -> TranscriptionResult:
    transcript = transcription_model.transcribe(
        filename,
        audio,
        language=language.strip() if language and language.strip() else None,
        prompt=prompt.strip() if prompt and prompt.strip() else None,
    )
    return TranscriptionResult(filename=filename, transcript=transcript or "")
