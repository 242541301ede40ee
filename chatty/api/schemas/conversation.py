"""
Conversation management models
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CreateConversationResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    conversation_id: str = Field(..., alias="conversationId")
    title: str
    timestamp: str
    message: str


class ConversationSummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    last_message: Optional[str] = Field(default=None, alias="lastMessage")
    updated_at: str = Field(..., alias="updatedAt")
    message_count: int = Field(..., alias="messageCount")


class ConversationListResponse(BaseModel):
    conversations: List[ConversationSummary]


class ConversationMessagesResponse(BaseModel):
    messages: List[Dict[str, Any]]


class MessageResponse(BaseModel):
    message: str
