"""
Model capability endpoints (`/api/ai`).

Endpoint responsibilities:
- `GET /api/ai/features`: which optional capabilities are configured.
- `POST /api/ai/embedding`: embedding vector summary for one text.
- `POST /api/ai/vector/index` / `vector/search`: in-memory vector store.
- `POST /api/ai/rag/ask`: retrieval-augmented answer with sources.
- `POST /api/ai/image`, `POST /api/ai/moderation`.
- `POST /api/ai/audio/speech`: binary audio download.
- `POST /api/ai/audio/transcription`: multipart audio upload.

Input validation behavior:
- Feature gating is checked before field validation, so an unconfigured
  capability answers 501 even for an empty request.
- Blank required fields -> HTTP 400 `REQUEST_ERROR`.
"""

import asyncio
import logging

from fastapi import APIRouter, Body, Depends, File, Form, UploadFile
from fastapi.responses import Response

from app.api.dependencies import get_gateway
from app.api.multimodal.file_input_manager import read_audio_upload
from app.api.schemas import (
    ImageRequest,
    RagRequest,
    SpeechRequest,
    TextRequest,
    VectorIndexRequest,
    VectorSearchRequest,
)
from app.core.gateway import ProviderGateway
from app.core.types import (
    EmbeddingResult,
    ImageResult,
    IndexResult,
    ModerationVerdict,
    RagAnswer,
    SearchResult,
    TranscriptionResult,
)


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ai", tags=["ai"])


@router.get("/features")
def features(gateway: ProviderGateway = Depends(get_gateway)) -> dict[str, bool]:
    return gateway.features()


# =========================================================
# EMBEDDING / VECTOR STORE / RAG
# =========================================================

@router.post("/embedding", response_model=EmbeddingResult)
def embedding(payload: TextRequest | None = Body(default=None), gateway: ProviderGateway = Depends(get_gateway)):
    return gateway.embed(payload.text if payload else None)


@router.post("/vector/index", response_model=IndexResult)
def index_documents(
    payload: VectorIndexRequest | None = Body(default=None),
    gateway: ProviderGateway = Depends(get_gateway),
):
    return gateway.index_documents(payload.documents if payload else None)


@router.post("/vector/search", response_model=list[SearchResult])
def search(
    payload: VectorSearchRequest | None = Body(default=None),
    gateway: ProviderGateway = Depends(get_gateway),
):
    payload = payload or VectorSearchRequest()
    return gateway.search(payload.query, payload.top_k, payload.similarity_threshold)


@router.post("/rag/ask", response_model=RagAnswer)
def ask(payload: RagRequest | None = Body(default=None), gateway: ProviderGateway = Depends(get_gateway)):
    payload = payload or RagRequest()
    return gateway.ask(payload.question, payload.top_k)


# =========================================================
# IMAGE / MODERATION
# =========================================================

@router.post("/image", response_model=ImageResult)
def image(payload: ImageRequest | None = Body(default=None), gateway: ProviderGateway = Depends(get_gateway)):
    payload = payload or ImageRequest()
    return gateway.generate_image(payload.prompt, model=payload.model, quality=payload.quality, style=payload.style)


@router.post("/moderation", response_model=ModerationVerdict)
def moderation(payload: TextRequest | None = Body(default=None), gateway: ProviderGateway = Depends(get_gateway)):
    return gateway.moderate(payload.text if payload else None)


# =========================================================
# AUDIO
# =========================================================

@router.post("/audio/speech")
def speech(payload: SpeechRequest | None = Body(default=None), gateway: ProviderGateway = Depends(get_gateway)):
    """Return synthesized audio as an attachment (`speech.<ext>`)."""
    payload = payload or SpeechRequest()
    audio, audio_format = gateway.text_to_speech(
        payload.text,
        audio_format=payload.format,
        model=payload.model,
        voice=payload.voice,
        speed=payload.speed,
    )
    return Response(
        content=audio,
        media_type=audio_format.media_type,
        headers={"Content-Disposition": f'attachment; filename="{audio_format.filename}"'},
    )


@router.post("/audio/transcription", response_model=TranscriptionResult)
async def transcription(
    file: UploadFile | None = File(default=None),
    language: str | None = Form(default=None),
    prompt: str | None = Form(default=None),
    gateway: ProviderGateway = Depends(get_gateway),
):
    """
    Transcribe one uploaded audio file.

    Lifecycle:
    1. Reject with 501 when transcription is not configured.
    2. Read and validate the upload (`file_input_manager`).
    3. Run the blocking provider call in a worker thread.
    """
    gateway.require_transcription()
    filename, audio = await read_audio_upload(file)

    logger.debug("Transcribing %s (%d bytes)", filename, len(audio))
    return await asyncio.to_thread(gateway.transcribe, filename, audio, language, prompt)
