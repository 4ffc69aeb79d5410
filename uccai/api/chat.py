"""Streaming chat endpoint.

Streams one model turn as Server-Sent Events, one StreamChunk per event.
"""

import logging
from collections.abc import AsyncGenerator

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from uccai.agent.chat_agent import AgentService, get_agent_service
from uccai.models.schemas import ChatRequest, StreamChunk, StreamStatus

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chat", tags=["chat"])

PROVIDER_ERROR_TEXT = "The model provider failed to generate a response"


def _sse(chunk: StreamChunk) -> str:
    return f"data: {chunk.model_dump_json()}\n\n"


async def _event_stream(
    request: ChatRequest,
    agent_service: AgentService,
) -> AsyncGenerator[str]:
    """Yield SSE events for one turn.

    Emits a generating status, content chunks in order, and a final done
    chunk. A provider failure ends the stream with a single error chunk.
    """
    yield _sse(StreamChunk(content="", done=False, status=StreamStatus.GENERATING))

    try:
        async for content in agent_service.stream_response(
            request.message,
            history=request.history,
            model=request.model,
            system_instruction=request.system_instruction,
        ):
            yield _sse(StreamChunk(content=content, done=False))
    except Exception:
        logger.exception("Chat stream failed")
        yield _sse(
            StreamChunk(
                content="",
                done=True,
                status=StreamStatus.ERROR,
                error=PROVIDER_ERROR_TEXT,
            )
        )
        return

    yield _sse(StreamChunk(content="", done=True, status=StreamStatus.COMPLETE))


@router.post("/stream")
async def stream_chat(
    request: ChatRequest,
    agent_service: AgentService = Depends(get_agent_service),
) -> StreamingResponse:
    """Stream the model's reply to a user message.

    Args:
        request: Message plus prior turns of the conversation.

    Returns:
        text/event-stream response of StreamChunk payloads.

    Raises:
        422: Empty or missing message.
    """
    logger.info(f"Streaming reply ({len(request.history)} prior turns)")
    return StreamingResponse(
        _event_stream(request, agent_service),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
