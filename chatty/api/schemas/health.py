"""
Health check models
"""

from typing import Any, Dict

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """
    Health check response

    Attributes:
        status: Service health status
        timestamp: Time of the check
        groq: LLM configuration plus RAG and web search status
        conversations: Number of stored conversations
        storage: Conversation storage status
    """
    status: str = Field(..., description="Health status")
    timestamp: str
    groq: Dict[str, Any]
    conversations: int
    storage: Dict[str, Any]
