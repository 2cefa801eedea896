"""Prompt assembly helpers used by the provider gateway.

This module is intentionally narrow: it only builds system instructions and
user contents from already validated inputs. Validation, retrieval and model
invocation happen outside this module.

Design constraints:
    - Deterministic construction for identical inputs.
    - Fixed ordering of prompt components per use case.
    - No hidden side effects (no I/O, no global state mutation).

Prompt safety model:
    - Safety is instruction-led, not parser-enforced.
    - User text and retrieved context are interpolated as raw strings.
"""

import json


# =========================================================
# RAG PROMPT
# =========================================================
# Context injection strategy:
#   - One `Source[<id>]: <text>` line per retrieved document.
#   - Sources are joined by blank lines in retrieval order.
# Prompt component order (user content):
#   1) Question
#   2) Context block

RAG_SYSTEM_PROMPT = (
    "You are a RAG assistant.\n"
    "Use only the provided context.\n"
    "If context is not enough, clearly say it is not enough.\n"
)

RAG_NO_CONTEXT_ANSWER = "Vector store ichida mos context topilmadi."


def build_rag_context(documents) -> str:
    """Render retrieved documents as the RAG context block.

    Args:
        documents: Retrieved documents exposing `id` and `text`.

    Returns:
        `Source[<id>]: <text>` entries joined by blank lines.
    """
    return "\n\n".join(f"Source[{doc.id}]: {doc.text}" for doc in documents)


def build_rag_user_prompt(question: str, context: str) -> str:
    return f"Question: {question}\n\nContext:\n{context}"


# =========================================================
# STRUCTURED STUDY-PLAN PROMPT
# =========================================================
# The JSON schema is appended to the system instruction so that providers
# without native schema enforcement still see the exact expected shape.

PLANNER_SYSTEM_PROMPT = (
    "You are a planner assistant.\n"
    "Return concise output matching the JSON schema exactly.\n"
)


def build_structured_system_prompt(schema: dict) -> str:
    """Append the expected JSON schema to the planner instruction.

    Args:
        schema: JSON schema of the expected reply object.

    Returns:
        System instruction ending with the schema block.
    """
    return (
        f"{PLANNER_SYSTEM_PROMPT}\n"
        "Respond with a single JSON object and nothing else.\n"
        f"JSON schema:\n{json.dumps(schema, ensure_ascii=False)}\n"
    )


def build_study_plan_prompt(topic: str) -> str:
    return f"Mavzu: {topic}. 4 ta qadamli study-plan tuzib ber."


# =========================================================
# TOOL-AUGMENTED CHAT
# =========================================================

TOOL_SYSTEM_PROMPT = "Agar savolga yordam bersa, tool'lardan foydalan."
