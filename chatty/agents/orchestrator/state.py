"""
Orchestrator workflow state
"""

from typing import Any, Awaitable, Callable, Dict, List, Optional, TypedDict

from chatty.agents.orchestrator.flow import FlowTracker
from chatty.agents.responder.generator import GenerationResult


EmitFn = Callable[[str, Dict[str, Any]], Awaitable[None]]


class PipelineState(TypedDict, total=False):
    """State for the chat pipeline workflow"""
    message: str
    conversation_id: str
    received_at: str  # ISO timestamp of the user message
    attachments: List[Any]
    tracker: FlowTracker
    emit: Optional[EmitFn]  # Streaming callback, None for buffered requests
    history: List[Dict[str, Any]]
    rag_context: Optional[Dict[str, Any]]
    web_context: Optional[Dict[str, Any]]
    generation: Optional[GenerationResult]
    persisted: bool
