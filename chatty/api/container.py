"""
Service container for dependency injection and lifecycle management.

Collaborators are constructed once at startup and handed to the
orchestrator, so routes and tests share the same explicit wiring.
"""

import random
from dataclasses import dataclass, field
from typing import Optional

from loguru import logger

from chatty.agents.orchestrator import OrchestratorAgent
from chatty.agents.rag import KnowledgeRetriever
from chatty.agents.responder import ResponseGenerator
from chatty.agents.web import WebSearchClient
from chatty.config.settings import Settings, settings as default_settings
from chatty.memory import ConversationStore


@dataclass
class ServiceContainer:
    """
    Container for the chat pipeline collaborators.

    Usage:
        container = build_container()
        await container.initialize()
        ...
        await container.cleanup()
    """

    conversation_store: ConversationStore
    retriever: KnowledgeRetriever
    web_search: WebSearchClient
    generator: ResponseGenerator
    orchestrator: OrchestratorAgent
    _initialized: bool = field(default=False, repr=False)

    async def initialize(self) -> None:
        if self._initialized:
            return
        await self.conversation_store.async_init()
        self._initialized = True
        logger.info("✅ Service container initialized")

    async def cleanup(self) -> None:
        await self.retriever.close()
        await self.web_search.close()
        await self.conversation_store.close()
        self._initialized = False
        logger.info("✅ Service container cleaned up")


def build_container(
    settings: Optional[Settings] = None,
    conversation_store: Optional[ConversationStore] = None,
    retriever: Optional[KnowledgeRetriever] = None,
    web_search: Optional[WebSearchClient] = None,
    generator: Optional[ResponseGenerator] = None,
    rng: Optional[random.Random] = None
) -> ServiceContainer:
    """Build every collaborator from settings; any of them can be overridden."""
    settings = settings or default_settings

    conversation_store = conversation_store or ConversationStore(
        db_path=settings.conversation_db_path_resolved,
        max_messages=settings.max_conversation_messages,
        check_interval=settings.storage_check_interval_seconds,
    )
    retriever = retriever or KnowledgeRetriever(
        base_url=settings.rag_base_url,
        timeout=settings.rag_timeout,
        health_timeout=settings.rag_health_timeout,
        health_cache_seconds=settings.rag_health_cache_seconds,
        max_results=settings.rag_max_results,
    )
    web_search = web_search or WebSearchClient(
        enabled=settings.web_search_enabled,
        provider=settings.web_search_provider,
        max_results=settings.web_search_max_results,
        timeout_ms=settings.web_search_timeout,
        api_key=settings.web_search_api_key,
    )
    generator = generator or ResponseGenerator(
        api_key=settings.groq_api_key,
        model=settings.groq_model,
        max_tokens=settings.max_tokens,
        temperature=settings.temperature,
    )

    orchestrator = OrchestratorAgent(
        conversation_store=conversation_store,
        retriever=retriever,
        web_search=web_search,
        generator=generator,
        rng=rng,
        rag_max_results=settings.rag_max_results,
    )
    return ServiceContainer(
        conversation_store=conversation_store,
        retriever=retriever,
        web_search=web_search,
        generator=generator,
        orchestrator=orchestrator,
    )
