"""
Custom error classes for the application
"""

from typing import Any, Dict, Optional


class ChattyError(Exception):
    """Base exception for application errors"""
    pass


class UpstreamError(ChattyError):
    """Error talking to an external service (RAG backend, search provider)"""
    pass


class StorageError(ChattyError):
    """Error reading or writing conversation storage"""
    pass


class OrchestrationError(ChattyError):
    """
    Unexpected failure inside the chat pipeline.

    Carries the response body that should still be returned to the caller:
    the apologetic reply plus whatever flow trace was accumulated.
    """

    def __init__(self, message: str, payload: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.payload = payload or {}
