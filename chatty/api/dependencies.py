"""
Dependency injection for API routes.
"""

from fastapi import Request

from chatty.agents.orchestrator import OrchestratorAgent
from chatty.api.container import ServiceContainer
from chatty.memory import ConversationStore


def get_container(request: Request) -> ServiceContainer:
    """
    Get the service container built during startup.

    Raises:
        RuntimeError: If the application lifespan has not run
    """
    container = getattr(request.app.state, "container", None)
    if container is None:
        raise RuntimeError("Service container not initialized")
    return container


def get_orchestrator(request: Request) -> OrchestratorAgent:
    return get_container(request).orchestrator


def get_conversation_store(request: Request) -> ConversationStore:
    return get_container(request).conversation_store
