"""Prompt-to-payload adapters for chat invocation.

Architectural role:
    Provides the canonical chat entrypoints used by the provider gateway. This
    module bridges prompt construction (`app.prompting`) to a `ChatModel`
    capability (`app.llm.base`).

Model call flow:
    prompt (+ system instruction, + history) -> message list -> `ChatModel`.

Token behavior:
    No explicit token-budget enforcement is implemented here. Conversation
    history is bounded by the memory window (`app.memory.chat_memory`).

Failure scenarios:
    Provider exceptions propagate unchanged. Structured replies that cannot be
    parsed or validated raise `ProviderError`, because the provider produced
    an unusable answer.
"""

import json
import logging
import re
from typing import Iterator, Type, TypeVar

from pydantic import BaseModel, ValidationError

from app.llm.base import ChatModel
from app.llm.errors import ProviderError
from app.tools.executor import ToolExecutor


logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

_CODE_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


def build_messages(prompt: str, system: str | None = None, history: list[dict] | None = None) -> list[dict]:
    """Assemble the provider message list.

    Order: system instruction, prior turns, current user prompt.
    """
    messages = []
    if system:
        messages.append({"role": "system", "content": system})
    messages.extend(history or [])
    messages.append({"role": "user", "content": prompt})
    return messages


def generate_answer(
    chat_model: ChatModel,
    prompt: str,
    system: str | None = None,
    history: list[dict] | None = None,
) -> str:
    """Run one chat turn and return the assistant text (empty string when absent)."""
    message = chat_model.chat(build_messages(prompt, system, history))
    return (message.get("content") or "").strip()


def stream_answer(chat_model: ChatModel, prompt: str) -> Iterator[str]:
    return chat_model.chat_stream(build_messages(prompt))


def generate_with_tools(
    chat_model: ChatModel,
    prompt: str,
    system: str,
    executor: ToolExecutor,
    max_rounds: int,
) -> str:
    """Chat with function tools, executing tool calls locally until the model answers.

    Args:
        chat_model: Chat capability.
        prompt: User prompt.
        system: System instruction nudging the model towards the tools.
        executor: Local tool dispatcher (also provides the advertised schemas).
        max_rounds: Upper bound on model calls for one request.

    Returns:
        Final assistant text. When the round budget is exhausted while the
        model still asks for tools, the last assistant content is returned.
    """
    messages = build_messages(prompt, system)
    content = ""

    for round_num in range(1, max_rounds + 1):
        message = chat_model.chat(messages, tools=executor.schemas)
        content = (message.get("content") or "").strip()
        tool_calls = message.get("tool_calls") or []

        if not tool_calls:
            return content

        logger.debug(
            "Tool round %s: %s",
            round_num,
            ", ".join(call.get("function", {}).get("name", "?") for call in tool_calls),
        )

        messages.append({
            "role": "assistant",
            "content": message.get("content"),
            "tool_calls": tool_calls,
        })
        for call in tool_calls:
            messages.append(executor.execute(call))

    logger.warning("Tool loop stopped after %s rounds without a final answer", max_rounds)
    return content


def parse_structured_reply(text: str, model_cls: Type[ModelT]) -> ModelT:
    """Parse a JSON reply (optionally wrapped in a code fence) into `model_cls`."""
    raw = (text or "").strip()
    fenced = _CODE_FENCE.match(raw)
    if fenced:
        raw = fenced.group(1)

    try:
        return model_cls.model_validate(json.loads(raw))
    except (ValueError, ValidationError) as err:
        raise ProviderError(f"Structured reply could not be parsed: {err}") from err


def generate_structured(chat_model: ChatModel, prompt: str, system: str, model_cls: Type[ModelT]) -> ModelT:
    """Ask for a JSON object reply and validate it against `model_cls`."""
    message = chat_model.chat(
        build_messages(prompt, system),
        response_format={"type": "json_object"},
    )
    return parse_structured_reply(message.get("content") or "", model_cls)
