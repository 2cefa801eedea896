"""OpenAI-compatible transport client for every provider capability.

Architectural role:
    Executes HTTP requests against the configured provider and normalizes the
    response shapes consumed by the gateway: assistant messages, streamed text
    deltas, embedding vectors, image references, moderation results, audio
    bytes and transcripts.

Model invocation flow:
    `app.core.gateway.ProviderGateway` -> capability method -> `requests` call
    against `<OPENAI_BASE_URL>/<endpoint>` -> parsed payload.

Retry behavior:
    No retry loop is implemented. Each HTTP call is attempted once with
    `HTTP_TIMEOUT`.

Failure handling model:
    - Provider-described failures (`{"error": {...}}` bodies) raise
      `ProviderError` with the structured provider code when present.
    - Other HTTP failures and connection errors raise `UpstreamHTTPError`.
    Nothing is converted into return-value error strings; the API layer owns
    the user-facing error contract.
"""

import json
import logging
from typing import Any, Iterator

import requests

from app.llm.errors import ProviderError, UpstreamHTTPError
from app.llm.provider_config import (
    CHAT_MODEL,
    CHAT_TEMPERATURE,
    EMBEDDING_MODEL,
    HTTP_TIMEOUT,
    IMAGE_MODEL,
    MODERATION_MODEL,
    OPENAI_BASE_URL,
    PROVIDER,
    SPEECH_MODEL,
    SPEECH_VOICE,
    TRANSCRIPTION_MODEL,
)


logger = logging.getLogger(__name__)


def _provider_error_from(response: requests.Response) -> ProviderError | None:
    """Build a `ProviderError` when the response carries a provider error body.

    Returns:
        `ProviderError` for JSON bodies with an `error` member, else `None`.
    """
    try:
        data = response.json()
    except ValueError:
        return None

    if not isinstance(data, dict) or not data.get("error"):
        return None

    error = data["error"]
    error_code = None
    if isinstance(error, dict):
        error_code = error.get("code") or error.get("type")

    return ProviderError(
        f"HTTP {response.status_code} - {response.text}",
        status_code=response.status_code,
        error_code=str(error_code) if error_code else None,
    )


def _raise_for_response(response: requests.Response) -> None:
    """Raise the matching provider exception for non-2xx responses."""
    if response.status_code < 400:
        return

    provider_error = _provider_error_from(response)
    if provider_error is not None:
        raise provider_error

    raise UpstreamHTTPError(response.status_code, response.text)


class OpenAIClient:
    """Single transport implementing all capability protocols in `app.llm.base`.

    One instance is shared by every enabled capability. The instance holds no
    per-request state and is safe for concurrent use.
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str = OPENAI_BASE_URL,
        timeout: float = HTTP_TIMEOUT,
        name: str = PROVIDER,
    ):
        self.name = name
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    # =========================================================
    # TRANSPORT
    # =========================================================

    def _headers(self) -> dict:
        headers = {}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    def _post(self, endpoint: str, **kwargs) -> requests.Response:
        """POST to `endpoint` and raise provider exceptions on failure.

        Connection-level failures (DNS, refused connection, timeout) surface
        as `UpstreamHTTPError` without a status code.
        """
        url = f"{self._base_url}/{endpoint}"
        try:
            response = requests.post(
                url,
                headers=self._headers(),
                timeout=self._timeout,
                **kwargs,
            )
        except requests.exceptions.RequestException as err:
            logger.warning("%s request to %s failed: %s", self.name, endpoint, err)
            raise UpstreamHTTPError(None, str(err)) from err

        _raise_for_response(response)
        return response

    def _post_json(self, endpoint: str, payload: dict) -> dict:
        response = self._post(endpoint, json=payload)
        try:
            return response.json()
        except ValueError as err:
            raise ProviderError(
                f"Provider returned a non-JSON body for {endpoint}",
                status_code=response.status_code,
            ) from err

    # =========================================================
    # CHAT
    # =========================================================

    def chat(
        self,
        messages: list[dict],
        tools: list[dict] | None = None,
        response_format: dict | None = None,
    ) -> dict:
        """Run one non-streaming chat completion.

        Args:
            messages: OpenAI-style message dicts.
            tools: Optional function-tool schemas (enables `tool_choice=auto`).
            response_format: Optional response format, e.g. `{"type": "json_object"}`.

        Returns:
            Assistant message dict (`role`, `content`, optional `tool_calls`).
        """
        payload: dict[str, Any] = {
            "model": CHAT_MODEL,
            "messages": messages,
            "temperature": CHAT_TEMPERATURE,
        }
        if tools:
            payload["tools"] = tools
            payload["tool_choice"] = "auto"
        if response_format:
            payload["response_format"] = response_format

        data = self._post_json("chat/completions", payload)

        try:
            return data["choices"][0]["message"]
        except (KeyError, IndexError, TypeError) as err:
            raise ProviderError("Unexpected chat completion payload") from err

    def chat_stream(self, messages: list[dict]) -> Iterator[str]:
        """Yield incremental text deltas from an OpenAI-compatible SSE stream.

        Behavior:
            - Parses line-delimited `data:` JSON chunks.
            - Extracts delta text from common response shapes.
            - Stops at the `[DONE]` sentinel.

        The HTTP request is issued lazily on first iteration, so transport
        errors surface to whoever consumes the generator.
        """
        payload = {
            "model": CHAT_MODEL,
            "messages": messages,
            "temperature": CHAT_TEMPERATURE,
            "stream": True,
        }

        with self._post("chat/completions", json=payload, stream=True) as response:
            response.encoding = "utf-8"

            for line in response.iter_lines(decode_unicode=True):
                if not line:
                    continue

                if line.startswith("data:"):
                    line = line[5:].strip()

                if line == "[DONE]":
                    break

                try:
                    data = json.loads(line)
                except ValueError:
                    continue

                if isinstance(data, dict) and data.get("error"):
                    raise ProviderError(f"Stream error - {line}")

                delta = None
                choices = data.get("choices") if isinstance(data, dict) else None
                if choices:
                    choice = choices[0]
                    if "delta" in choice and choice["delta"].get("content"):
                        delta = choice["delta"]["content"]
                    elif "message" in choice and choice["message"].get("content"):
                        delta = choice["message"]["content"]
                    elif choice.get("text"):
                        delta = choice["text"]

                if delta:
                    yield delta

    # =========================================================
    # EMBEDDING
    # =========================================================

    def embed(self, texts: list[str]) -> list[list[float]]:
        """Embed `texts`, returning vectors in input order."""
        data = self._post_json("embeddings", {"model": EMBEDDING_MODEL, "input": texts})

        try:
            items = sorted(data["data"], key=lambda item: item.get("index", 0))
            return [item["embedding"] for item in items]
        except (KeyError, TypeError) as err:
            raise ProviderError("Unexpected embedding payload") from err

    # =========================================================
    # IMAGE
    # =========================================================

    def generate_image(
        self,
        prompt: str,
        model: str | None = None,
        quality: str | None = None,
        style: str | None = None,
    ) -> dict[str, Any]:
        """Generate one image; optional parameters are only sent when given."""
        payload: dict[str, Any] = {
            "model": model or IMAGE_MODEL,
            "prompt": prompt,
            "n": 1,
        }
        if quality:
            payload["quality"] = quality
        if style:
            payload["style"] = style

        data = self._post_json("images/generations", payload)

        try:
            image = data["data"][0]
        except (KeyError, IndexError, TypeError) as err:
            raise ProviderError("Image provider returned no image") from err

        return {"url": image.get("url"), "b64_json": image.get("b64_json")}

    # =========================================================
    # MODERATION
    # =========================================================

    def moderate(self, text: str) -> dict[str, Any] | None:
        data = self._post_json("moderations", {"model": MODERATION_MODEL, "input": text})
        results = data.get("results") or []
        return results[0] if results else None

    # =========================================================
    # AUDIO
    # =========================================================

    def synthesize(
        self,
        text: str,
        response_format: str,
        model: str | None = None,
        voice: str | None = None,
        speed: float | None = None,
    ) -> bytes:
        payload: dict[str, Any] = {
            "model": model or SPEECH_MODEL,
            "input": text,
            "voice": voice or SPEECH_VOICE,
            "response_format": response_format,
        }
        if speed is not None:
            payload["speed"] = speed

        return self._post("audio/speech", json=payload).content

    def transcribe(
        self,
        filename: str,
        audio: bytes,
        language: str | None = None,
        prompt: str | None = None,
    ) -> str:
        form = {"model": TRANSCRIPTION_MODEL, "response_format": "json"}
        if language:
            form["language"] = language
        if prompt:
            form["prompt"] = prompt

        response = self._post(
            "audio/transcriptions",
            data=form,
            files={"file": (filename, audio)},
        )

        try:
            return response.json().get("text", "")
        except ValueError as err:
            raise ProviderError("Unexpected transcription payload") from err
