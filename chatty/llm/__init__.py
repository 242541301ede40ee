"""
LLM layer - chat model factory and response helpers
"""

from chatty.llm.client import create_llm
from chatty.llm.response_utils import extract_text_from_response, extract_total_tokens

__all__ = ["create_llm", "extract_text_from_response", "extract_total_tokens"]
