"""
Orchestrator Agent - Main LangGraph workflow

Runs one chat exchange through history, knowledge base, web search, LLM and
persistence, recording a flow step per phase.
"""

import random
import time
from typing import Any, Dict, List, Optional

from langgraph.graph import StateGraph, END
from loguru import logger

from chatty.agents.orchestrator.context import PipelineContext
from chatty.agents.orchestrator.flow import FlowTracker
from chatty.agents.orchestrator.nodes import (
    load_history_node,
    retrieve_knowledge_node,
    search_web_node,
    generate_response_node,
    persist_exchange_node,
)
from chatty.agents.orchestrator.state import EmitFn, PipelineState
from chatty.agents.rag.retriever import KnowledgeRetriever
from chatty.agents.responder.generator import ResponseGenerator
from chatty.agents.web.search import WebSearchClient
from chatty.config.constants import FALLBACK_TITLES, MAX_TITLE_LENGTH, MESSAGES, TITLE_PROMPTS
from chatty.config.settings import settings
from chatty.memory.conversation_store import ConversationStore
from chatty.utils.clock import utc_now_iso
from chatty.utils.errors import OrchestrationError


ERROR_EVENT_KEYS = ("error", "reply", "conversationId", "timestamp")


def _elapsed_ms(started: float) -> int:
    return max(0, int(round((time.monotonic() - started) * 1000)))


def clean_title(raw: Optional[str]) -> str:
    """Strip wrapping quotes and whitespace, cap the length."""
    if not raw:
        return ""
    title = raw.strip().strip("\"'“”").strip()
    return title[:MAX_TITLE_LENGTH]


class OrchestratorAgent:
    """
    Chat pipeline orchestrator.

    Workflow: START → load_history → retrieve_knowledge → search_web
    → generate_response → persist_exchange → END

    Knowledge-base and web lookups run sequentially so their steps time
    cleanly in both buffered and streaming mode.
    """

    def __init__(
        self,
        conversation_store: ConversationStore,
        retriever: KnowledgeRetriever,
        web_search: WebSearchClient,
        generator: ResponseGenerator,
        rng: Optional[random.Random] = None,
        rag_max_results: Optional[int] = None
    ):
        self.ctx = PipelineContext(
            conversation_store=conversation_store,
            retriever=retriever,
            web_search=web_search,
            generator=generator,
            rag_max_results=rag_max_results or settings.rag_max_results,
        )
        self.rng = rng or random.Random()
        self.workflow = self._build_workflow()

        logger.info(
            f"Initialized OrchestratorAgent (LLM configured: {generator.is_configured()}, "
            f"web search: {'on' if web_search.enabled else 'off'})"
        )

    @property
    def conversation_store(self) -> ConversationStore:
        return self.ctx.conversation_store

    def _build_workflow(self):
        """Build the LangGraph workflow."""
        ctx = self.ctx
        workflow = StateGraph(PipelineState)

        async def load_history(s):
            return await load_history_node(s, ctx)

        async def retrieve_knowledge(s):
            return await retrieve_knowledge_node(s, ctx)

        async def search_web(s):
            return await search_web_node(s, ctx)

        async def generate_response(s):
            return await generate_response_node(s, ctx)

        async def persist_exchange(s):
            return await persist_exchange_node(s, ctx)

        workflow.add_node("load_history", load_history)
        workflow.add_node("retrieve_knowledge", retrieve_knowledge)
        workflow.add_node("search_web", search_web)
        workflow.add_node("generate_response", generate_response)
        workflow.add_node("persist_exchange", persist_exchange)

        workflow.set_entry_point("load_history")
        workflow.add_edge("load_history", "retrieve_knowledge")
        workflow.add_edge("retrieve_knowledge", "search_web")
        workflow.add_edge("search_web", "generate_response")
        workflow.add_edge("generate_response", "persist_exchange")
        workflow.add_edge("persist_exchange", END)

        return workflow.compile()

    @staticmethod
    def _empty_message_result(conversation_id: Optional[str]) -> Dict[str, Any]:
        return {
            "reply": MESSAGES.EMPTY_MESSAGE,
            "conversationId": conversation_id,
            "timestamp": utc_now_iso(),
            "flowData": FlowTracker.empty_message_trace(),
        }

    async def _run(
        self,
        message: str,
        conversation_id: Optional[str],
        attachments: Optional[List[Any]],
        emit: Optional[EmitFn]
    ) -> Dict[str, Any]:
        started = time.monotonic()
        tracker = FlowTracker()
        conversation_id = conversation_id or self.conversation_store.new_conversation_id()

        logger.info(f"💬 Message received - conversation={conversation_id}, length={len(message)}")

        initial_state: PipelineState = {
            "message": message,
            "conversation_id": conversation_id,
            "received_at": utc_now_iso(),
            "attachments": list(attachments or []),
            "tracker": tracker,
            "emit": emit,
        }

        try:
            final_state = await self.workflow.ainvoke(initial_state)
        except Exception as e:
            logger.exception(f"Chat pipeline failed for {conversation_id}")
            tracker.fail_active_step(e)
            if emit is not None:
                try:
                    for event in tracker.take_events():
                        await emit("step", event)
                except Exception as emit_error:
                    logger.warning(f"Could not publish failed step: {emit_error}")

            payload = {
                "error": str(e) or e.__class__.__name__,
                "reply": MESSAGES.TECHNICAL_ERROR,
                "conversationId": conversation_id,
                "timestamp": utc_now_iso(),
                "flowData": tracker.build_trace(_elapsed_ms(started), error=str(e) or e.__class__.__name__),
            }
            raise OrchestrationError(payload["error"], payload) from e

        generation = final_state["generation"]
        rag_used = final_state.get("rag_context") is not None
        web_used = final_state.get("web_context") is not None
        flow_data = tracker.build_trace(
            _elapsed_ms(started),
            rag_used=rag_used,
            web_search_used=web_used,
            model=generation.model,
        )

        logger.info(
            f"✅ Reply ready in {flow_data['totalDuration']}ms "
            f"(rag={rag_used}, web={web_used}, fallback={not generation.ok})"
        )
        return {
            "reply": generation.response,
            "conversationId": conversation_id,
            "timestamp": utc_now_iso(),
            "flowData": flow_data,
        }

    async def handle_send_message(
        self,
        message: Optional[str],
        conversation_id: Optional[str] = None,
        attachments: Optional[List[Any]] = None
    ) -> Dict[str, Any]:
        """
        Process a message and return the buffered result.

        Returns:
            ``{reply, conversationId, timestamp, flowData}``

        Raises:
            OrchestrationError: unexpected pipeline failure; ``payload`` holds the 500 body
        """
        if not message or not message.strip():
            logger.warning("Empty message received")
            return self._empty_message_result(conversation_id)
        return await self._run(message.strip(), conversation_id, attachments, emit=None)

    async def handle_send_message_stream(
        self,
        message: Optional[str],
        conversation_id: Optional[str],
        emit: EmitFn,
        attachments: Optional[List[Any]] = None
    ) -> None:
        """
        Process a message, emitting ``step`` events as phases start and finish.

        Exactly one terminal event follows: ``complete`` with the buffered
        payload, or ``error`` with ``{error, reply, conversationId, timestamp}``.
        """
        if not message or not message.strip():
            logger.warning("Empty message received on stream")
            result = self._empty_message_result(conversation_id)
            for step in result["flowData"]["steps"]:
                await emit("step", step)
            await emit("complete", result)
            return

        try:
            result = await self._run(message.strip(), conversation_id, attachments, emit=emit)
        except OrchestrationError as e:
            await emit("error", {key: e.payload.get(key) for key in ERROR_EVENT_KEYS})
            return

        await emit("complete", result)

    async def _generate_title(self) -> str:
        prompt = self.rng.choice(TITLE_PROMPTS)
        try:
            title = clean_title(await self.ctx.generator.generate_title(prompt))
        except Exception as e:
            logger.warning(f"Title generation failed: {e}")
            title = ""

        if not title:
            title = self.rng.choice(FALLBACK_TITLES)
            logger.debug(f"Using fallback title: {title}")
        return title

    async def create_conversation(self) -> Dict[str, Any]:
        """Create an empty conversation with a generated title."""
        conversation_id = self.conversation_store.new_conversation_id()
        title = await self._generate_title()
        await self.conversation_store.set(conversation_id, [], title=title)

        logger.info(f"🆕 Created conversation {conversation_id} ({title})")
        return {
            "conversationId": conversation_id,
            "title": title,
            "timestamp": utc_now_iso(),
        }
