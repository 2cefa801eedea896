"""Retrieval-augmented answering over the in-memory vector store.

Retrieval strategy:
    - Similarity search for up to `top_k` documents, with no score threshold.
    - No hits: short-circuit with a fixed no-context answer, no chat call.
    - Hits: render `Source[<id>]: <text>` blocks, constrain the assistant to
      that context, and issue a single chat call.

The returned sources are exactly the documents used to build the context,
with their similarity scores, in retrieval order.
"""

import logging

from app.core.types import RagAnswer
from app.llm.base import ChatModel
from app.llm.service import generate_answer
from app.prompting.prompt_builder import (
    RAG_NO_CONTEXT_ANSWER,
    RAG_SYSTEM_PROMPT,
    build_rag_context,
    build_rag_user_prompt,
)
from app.retrieval.vector_store import InMemoryVectorStore


logger = logging.getLogger(__name__)


def answer_question(store: InMemoryVectorStore, chat_model: ChatModel, question: str, top_k: int) -> RagAnswer:
    """Answer `question` from stored documents.

    Args:
        store: Vector store holding candidate documents.
        chat_model: Chat capability used for the final answer.
        question: Normalized, non-blank question.
        top_k: Maximum number of context documents.

    Returns:
        `RagAnswer` with the model answer and the context sources.
    """
    sources = store.similarity_search(question, top_k=top_k, threshold=None)

    if not sources:
        logger.debug("No context found for question=%r", question)
        return RagAnswer(question=question, answer=RAG_NO_CONTEXT_ANSWER, sources=[])

    context = build_rag_context(sources)
    answer = generate_answer(
        chat_model,
        build_rag_user_prompt(question, context),
        system=RAG_SYSTEM_PROMPT,
    )

    return RagAnswer(question=question, answer=answer, sources=sources)
