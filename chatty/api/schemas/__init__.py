"""
API schemas for request/response models
"""

from chatty.api.schemas.chat import Attachment, ChatRequest, ChatResponse, FlowData, RagTestRequest
from chatty.api.schemas.conversation import (
    ConversationListResponse,
    ConversationMessagesResponse,
    CreateConversationResponse,
    MessageResponse,
)
from chatty.api.schemas.health import HealthResponse

__all__ = [
    "Attachment",
    "ChatRequest",
    "ChatResponse",
    "FlowData",
    "RagTestRequest",
    "ConversationListResponse",
    "ConversationMessagesResponse",
    "CreateConversationResponse",
    "MessageResponse",
    "HealthResponse",
]
