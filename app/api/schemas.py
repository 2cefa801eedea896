"""Request schemas for the HTTP adapter.

Every field is optional at the schema level: missing or blank values are
normalized or rejected by the gateway, so a blank required field yields a
`REQUEST_ERROR` payload rather than a framework validation error.
Type mismatches (for example `topK: "four"`) are still rejected by pydantic
and rendered as `REQUEST_ERROR` by `app.api.errors`.
"""

from app.core.types import CamelModel, DocumentInput


class ChatRequest(CamelModel):
    message: str | None = None


class StructuredRequest(CamelModel):
    topic: str | None = None


class TextRequest(CamelModel):
    text: str | None = None


class VectorIndexRequest(CamelModel):
    documents: list[DocumentInput] | None = None


class VectorSearchRequest(CamelModel):
    query: str | None = None
    top_k: int | None = None
    similarity_threshold: float | None = None


class RagRequest(CamelModel):
    question: str | None = None
    top_k: int | None = None


class ImageRequest(CamelModel):
    prompt: str | None = None
    model: str | None = None
    quality: str | None = None
    style: str | None = None


class SpeechRequest(CamelModel):
    text: str | None = None
    model: str | None = None
    voice: str | None = None
    format: str | None = None
    speed: float | None = None


class ChatReply(CamelModel):
    message: str
    response: str


class MemoryChatReply(CamelModel):
    conversation_id: str
    message: str
    response: str


class MemoryClearReply(CamelModel):
    conversation_id: str
    status: str = "cleared"
