"""
Chat endpoints (`/api/chat`).

Endpoint responsibilities:
- `GET/POST /api/chat`: single chat turn.
- `GET /api/chat/stream`: server-sent event stream of response fragments.
- `POST /api/chat/structured`: study plan as a validated JSON object.
- `POST/DELETE /api/chat/memory/{conversationId}`: memory-backed turn / memory clear.
- `POST /api/chat/tool`: chat with the local utility tools.

Input validation behavior:
- Missing or blank messages fall back to documented defaults. An empty
  query parameter (`?message=`) counts as absent and gets the route default;
  a whitespace-only one gets the generic chat default.
- Memory turns require a non-blank message (HTTP 400 otherwise).

Streaming contract:
- Frames are `data: <line>` per fragment line, terminated by a blank line.
- A provider failure mid-stream ends the stream with one error fragment
  (produced by the gateway); the HTTP status stays 200.
- Client disconnects stop consumption and close the provider stream.
"""

import logging

from fastapi import APIRouter, Body, Depends, Request
from fastapi.responses import StreamingResponse
from starlette.concurrency import iterate_in_threadpool

from app.api.dependencies import get_gateway
from app.api.schemas import ChatReply, ChatRequest, MemoryChatReply, MemoryClearReply, StructuredRequest
from app.core.gateway import DEFAULT_QUERY_MESSAGE, DEFAULT_STREAM_MESSAGE, ProviderGateway
from app.core.types import StudyPlan


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/chat", tags=["chat"])


def format_sse(fragment: str) -> str:
    """Encode one text fragment as an SSE event (one `data:` line per text line)."""
    lines = str(fragment).split("\n")
    return "".join(f"data: {line}\n" for line in lines) + "\n"


@router.get("", response_model=ChatReply)
def chat_with_query(message: str = DEFAULT_QUERY_MESSAGE, gateway: ProviderGateway = Depends(get_gateway)):
    prompt, response = gateway.chat(message or DEFAULT_QUERY_MESSAGE)
    return ChatReply(message=prompt, response=response)


@router.post("", response_model=ChatReply)
def chat_with_body(
    payload: ChatRequest | None = Body(default=None),
    gateway: ProviderGateway = Depends(get_gateway),
):
    prompt, response = gateway.chat(payload.message if payload else None)
    return ChatReply(message=prompt, response=response)


@router.get("/stream")
async def stream_chat(
    request: Request,
    message: str = DEFAULT_STREAM_MESSAGE,
    gateway: ProviderGateway = Depends(get_gateway),
):
    fragments = gateway.stream_chat(message or DEFAULT_STREAM_MESSAGE)

    async def event_generator():
        """
        Yield SSE frames for each provider fragment.

        Side effects:
        - Checks client connection state to stop work on disconnect.
        - Closes the provider stream when the response ends for any reason.
        """
        try:
            async for fragment in iterate_in_threadpool(fragments):
                if await request.is_disconnected():
                    logger.debug("Client disconnected during stream.")
                    return
                yield format_sse(fragment)
        finally:
            try:
                fragments.close()
            except ValueError:
                # Still running in the worker thread; it stops at its next yield.
                logger.debug("Provider stream busy during close.")

    return StreamingResponse(event_generator(), media_type="text/event-stream")


@router.post("/structured", response_model=StudyPlan)
def structured(
    payload: StructuredRequest | None = Body(default=None),
    gateway: ProviderGateway = Depends(get_gateway),
):
    return gateway.structured_plan(payload.topic if payload else None)


@router.post("/memory/{conversation_id}", response_model=MemoryChatReply)
def chat_with_memory(
    conversation_id: str,
    payload: ChatRequest | None = Body(default=None),
    gateway: ProviderGateway = Depends(get_gateway),
):
    conversation_id, prompt, response = gateway.chat_with_memory(
        conversation_id,
        payload.message if payload else None,
    )
    return MemoryChatReply(conversation_id=conversation_id, message=prompt, response=response)


@router.delete("/memory/{conversation_id}", response_model=MemoryClearReply)
def clear_conversation(conversation_id: str, gateway: ProviderGateway = Depends(get_gateway)):
    return MemoryClearReply(conversation_id=gateway.clear_memory(conversation_id))


@router.post("/tool", response_model=ChatReply)
def chat_with_tool(
    payload: ChatRequest | None = Body(default=None),
    gateway: ProviderGateway = Depends(get_gateway),
):
    prompt, response = gateway.chat_with_tools(payload.message if payload else None)
    return ChatReply(message=prompt, response=response)
