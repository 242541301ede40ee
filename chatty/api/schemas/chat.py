"""
Chat request/response models

Wire keys are camelCase (``conversationId``, ``flowData``); attributes are
snake_case and mapped through aliases.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Attachment(BaseModel):
    """File attached to a chat message"""
    name: str = Field(default="attachment")
    type: str = Field(default="unknown", description="MIME type")
    size: int = Field(default=0, ge=0, description="Size in bytes")
    content: Optional[str] = Field(default=None, description="Extracted text content")


class ChatRequest(BaseModel):
    """Body of ``POST /chat`` and ``POST /chat/stream``"""
    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {"message": "What is the latest news on AI?", "conversationId": "conv_a1B2c3D4e5F6g7H8"}
            ]
        },
    )

    message: Optional[str] = Field(default=None, description="The user's message (null or blank is answered locally)")
    conversation_id: Optional[str] = Field(default=None, alias="conversationId")
    attachments: List[Attachment] = Field(default_factory=list)


class FlowStepModel(BaseModel):
    id: str
    name: str
    description: str
    status: str
    timestamp: str
    duration: Optional[int] = None
    data: Dict[str, Any] = Field(default_factory=dict)


class FlowData(BaseModel):
    """Per-request processing trace"""
    model_config = ConfigDict(populate_by_name=True)

    steps: List[FlowStepModel]
    total_duration: int = Field(..., alias="totalDuration")
    rag_used: bool = Field(default=False, alias="ragUsed")
    web_search_used: bool = Field(default=False, alias="webSearchUsed")
    model: Optional[str] = None
    error: Optional[str] = None


class ChatResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    reply: str
    conversation_id: Optional[str] = Field(default=None, alias="conversationId")
    timestamp: str
    flow_data: FlowData = Field(..., alias="flowData")


class RagTestRequest(BaseModel):
    query: Optional[str] = None
