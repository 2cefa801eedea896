"""Result contracts produced by `app.core.gateway`.

Architectural role:
    Defines the transient DTOs returned by gateway operations and serialized
    unchanged by the HTTP adapter. None of them carries persisted identity
    beyond ids assigned by clients or the vector store.

Serialization:
    Field names are snake_case in Python and camelCase on the wire
    (`risk_level` -> `riskLevel`, `b64_json` -> `b64Json`). Both spellings are
    accepted on input so provider JSON can be validated directly.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StudyPlan(CamelModel):
    """Structured study plan returned by the planner prompt."""

    title: str
    steps: list[str] = Field(default_factory=list)
    risk_level: str
    first_action: str


class DocumentInput(CamelModel):
    """Client-submitted document; blank `text` entries are skipped at indexing."""

    id: str | None = None
    text: str | None = None
    metadata: dict[str, Any] | None = None


class EmbeddingResult(CamelModel):
    text: str
    dimensions: int
    preview: list[float]


class SearchResult(CamelModel):
    """Read-only projection of an indexed document plus its similarity score."""

    id: str
    text: str
    score: float | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class IndexResult(CamelModel):
    indexed: int
    ids: list[str]


class RagAnswer(CamelModel):
    question: str
    answer: str
    sources: list[SearchResult] = Field(default_factory=list)


class ImageResult(CamelModel):
    prompt: str
    url: str | None = None
    b64_json: str | None = None


class ModerationVerdict(CamelModel):
    """Moderation outcome; `categories` and `scores` always carry all six keys."""

    text: str
    flagged: bool
    categories: dict[str, bool]
    scores: dict[str, float]


class TranscriptionResult(CamelModel):
    filename: str
    transcript: str
