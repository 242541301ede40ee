"""
Responder - prompt assembly and LLM completion
"""

from chatty.agents.responder.generator import (
    GenerationFailure,
    GenerationResult,
    ResponseGenerator,
)

__all__ = ["GenerationFailure", "GenerationResult", "ResponseGenerator"]
