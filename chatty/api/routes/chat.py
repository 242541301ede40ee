"""
Chat endpoints - buffered replies, SSE streaming and conversation management
"""

import asyncio
import json
from typing import Any, AsyncGenerator, Dict, List, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, StreamingResponse
from loguru import logger

from chatty.agents.orchestrator import OrchestratorAgent
from chatty.api.container import ServiceContainer
from chatty.api.dependencies import get_container, get_conversation_store, get_orchestrator
from chatty.api.schemas import (
    ChatRequest,
    ChatResponse,
    ConversationListResponse,
    ConversationMessagesResponse,
    CreateConversationResponse,
    MessageResponse,
    RagTestRequest,
)
from chatty.config.constants import MESSAGES
from chatty.memory import ConversationStore
from chatty.utils.clock import utc_now_iso
from chatty.utils.errors import OrchestrationError


router = APIRouter(prefix="/chat", tags=["chat"])

TERMINAL_EVENTS = {"complete", "error"}
SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}

_STREAM_DONE = object()


def format_sse(event: str, payload: Dict[str, Any]) -> str:
    return f"event: {event}\ndata: {json.dumps(payload, ensure_ascii=False, default=str)}\n\n"


async def stream_chat_events(
    orchestrator: OrchestratorAgent,
    message: Optional[str],
    conversation_id: Optional[str],
    attachments: List[Any]
) -> AsyncGenerator[str, None]:
    """
    Run the pipeline in a task and relay its events as SSE frames.

    The generator stops after the first terminal event. If the client goes
    away the task keeps running and its remaining events are dropped.
    """
    queue: asyncio.Queue = asyncio.Queue()

    async def emit(event: str, payload: Dict[str, Any]) -> None:
        await queue.put((event, payload))

    def on_done(task: asyncio.Task) -> None:
        if not task.cancelled() and task.exception() is not None:
            logger.opt(exception=task.exception()).error("Stream pipeline crashed")
            queue.put_nowait(("error", {
                "error": str(task.exception()),
                "reply": MESSAGES.TECHNICAL_ERROR,
                "conversationId": conversation_id,
                "timestamp": utc_now_iso(),
            }))
        queue.put_nowait(_STREAM_DONE)

    task = asyncio.create_task(
        orchestrator.handle_send_message_stream(message, conversation_id, emit, attachments=attachments)
    )
    task.add_done_callback(on_done)

    while True:
        item = await queue.get()
        if item is _STREAM_DONE:
            logger.warning("Stream pipeline ended without a terminal event")
            break

        event, payload = item
        yield format_sse(event, payload)
        if event in TERMINAL_EVENTS:
            logger.info(f"Stream finished with '{event}' - conversation={payload.get('conversationId')}")
            break


@router.post("", response_model=ChatResponse)
async def send_message(
    request: ChatRequest,
    orchestrator: OrchestratorAgent = Depends(get_orchestrator)
):
    """
    Send a message and receive the complete reply with its flow trace.

    Handled failures (empty message, upstream outages, LLM errors) still
    return 200 with a conversational reply; only unexpected pipeline errors
    return 500.
    """
    try:
        return await orchestrator.handle_send_message(
            request.message,
            request.conversation_id,
            attachments=request.attachments,
        )
    except OrchestrationError as e:
        return JSONResponse(status_code=500, content=e.payload)


@router.post("/stream")
async def chat_stream(
    request: ChatRequest,
    orchestrator: OrchestratorAgent = Depends(get_orchestrator)
):
    """
    Streaming variant of ``POST /chat`` using Server-Sent Events.

    **Event Types:**

    1. **step** - a flow step started or finished
    ```
    event: step
    data: {"id": "rag-processing", "status": "skipped", ...}
    ```

    2. **complete** - final payload, same shape as ``POST /chat``

    3. **error** - ``{error, reply, conversationId, timestamp}``

    The stream ends after exactly one ``complete`` or ``error`` event.
    """
    logger.info(f"Stream request - conversation={request.conversation_id}")

    return StreamingResponse(
        stream_chat_events(orchestrator, request.message, request.conversation_id, request.attachments),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )


@router.post("/create", response_model=CreateConversationResponse)
async def create_conversation(orchestrator: OrchestratorAgent = Depends(get_orchestrator)):
    try:
        created = await orchestrator.create_conversation()
    except Exception as e:
        logger.exception("Error creating conversation")
        return JSONResponse(status_code=500, content={"error": MESSAGES.FAILED_CREATE_CONVERSATION, "message": str(e)})
    return {**created, "message": MESSAGES.CONVERSATION_CREATED}


@router.get("", response_model=ConversationListResponse)
async def list_conversations(store: ConversationStore = Depends(get_conversation_store)):
    try:
        return {"conversations": await store.get_all()}
    except Exception as e:
        logger.exception("Error fetching conversations")
        return JSONResponse(status_code=500, content={"error": MESSAGES.FAILED_FETCH_CONVERSATIONS, "message": str(e)})


@router.post("/test-rag")
async def test_rag(
    request: Optional[RagTestRequest] = None,
    container: ServiceContainer = Depends(get_container)
):
    """Run raw and contextual knowledge-base searches plus a direct backend answer, for debugging."""
    query = request.query if request else None
    if not query:
        return JSONResponse(status_code=400, content={"error": MESSAGES.QUERY_REQUIRED})

    retriever = container.retriever
    try:
        if not await retriever.is_available():
            return JSONResponse(
                status_code=503,
                content={"error": MESSAGES.RAG_NOT_AVAILABLE, "ragStatus": await retriever.get_status()},
            )

        return {
            "query": query,
            "searchResults": await retriever.search(query),
            "contextualSearch": await retriever.get_contextual_search(query),
            "ragResponse": await retriever.ask(query),
            "timestamp": utc_now_iso(),
        }
    except Exception as e:
        logger.exception("Error testing RAG")
        return JSONResponse(status_code=500, content={"error": MESSAGES.FAILED_RAG_SEARCH, "message": str(e)})


@router.get("/{conversation_id}", response_model=ConversationMessagesResponse)
async def get_conversation(conversation_id: str, store: ConversationStore = Depends(get_conversation_store)):
    try:
        return {"messages": await store.get(conversation_id)}
    except Exception as e:
        logger.exception(f"Error fetching conversation {conversation_id}")
        return JSONResponse(status_code=500, content={"error": MESSAGES.FAILED_FETCH_CONVERSATION, "message": str(e)})


@router.delete("/{conversation_id}", response_model=MessageResponse)
async def clear_conversation(conversation_id: str, store: ConversationStore = Depends(get_conversation_store)):
    try:
        await store.delete(conversation_id)
    except Exception as e:
        logger.exception(f"Error clearing conversation {conversation_id}")
        return JSONResponse(status_code=500, content={"error": MESSAGES.FAILED_CLEAR_CONVERSATION, "message": str(e)})
    return {"message": MESSAGES.CONVERSATION_CLEARED}
