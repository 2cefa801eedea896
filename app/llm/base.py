"""Capability protocols consumed by the provider gateway.

The gateway never depends on a concrete HTTP client. Each capability is a
small protocol; `app.llm.client.OpenAIClient` implements all of them, and
tests substitute hand-written fakes per capability.

Messages are plain OpenAI-style dicts (`{"role": ..., "content": ...}`), the
same payload shape the transport sends.
"""

from typing import Any, Iterator, Protocol


class ChatModel(Protocol):
    """Chat completion capability (always enabled)."""

    def chat(
        self,
        messages: list[dict],
        tools: list[dict] | None = None,
        response_format: dict | None = None,
    ) -> dict:
        """Return the assistant message dict (`content`, optional `tool_calls`)."""
        ...

    def chat_stream(self, messages: list[dict]) -> Iterator[str]:
        """Yield assistant text fragments as the provider produces them."""
        ...


class EmbeddingModel(Protocol):

    def embed(self, texts: list[str]) -> list[list[float]]:
        ...


class ImageModel(Protocol):

    def generate_image(
        self,
        prompt: str,
        model: str | None = None,
        quality: str | None = None,
        style: str | None = None,
    ) -> dict[str, Any]:
        """Return the first generated image as `{"url": ..., "b64_json": ...}`."""
        ...


class ModerationModel(Protocol):

    def moderate(self, text: str) -> dict[str, Any] | None:
        """Return the first moderation result, or `None` when the provider abstains."""
        ...


class SpeechModel(Protocol):

    def synthesize(
        self,
        text: str,
        response_format: str,
        model: str | None = None,
        voice: str | None = None,
        speed: float | None = None,
    ) -> bytes:
        ...


class TranscriptionModel(Protocol):

    def transcribe(
        self,
        filename: str,
        audio: bytes,
        language: str | None = None,
        prompt: str | None = None,
    ) -> str:
        ...
