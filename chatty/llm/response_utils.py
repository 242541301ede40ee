"""
Helpers for reading chat model replies.
"""

from typing import Any, Optional

from loguru import logger


def _block_text(block: Any) -> str:
    if isinstance(block, str):
        return block
    if isinstance(block, dict) and block.get("type", "text") != "reasoning":
        return block.get("text") or ""
    return ""


def extract_text_from_response(response: Any) -> str:
    """
    Reply text of a chat model response.

    Accepts an ``AIMessage`` or its raw ``content``. Plain string content is
    returned as is; content-block lists are joined, dropping reasoning blocks.
    """
    content = getattr(response, "content", response)
    if not content:
        return ""
    if isinstance(content, str):
        return content
    if not isinstance(content, list):
        return str(content)

    text = "".join(_block_text(block) for block in content)
    if not text:
        logger.warning(f"Model reply had no text blocks: {str(content)[:200]}")
    return text


def extract_total_tokens(response: Any) -> Optional[int]:
    """
    Provider-reported total token count, or None when the provider sent none.

    Looks at LangChain's normalized ``usage_metadata`` first, then the raw
    OpenAI-style ``token_usage`` block in ``response_metadata``.
    """
    usage = getattr(response, "usage_metadata", None) or {}
    total = usage.get("total_tokens")
    if total is None:
        metadata = getattr(response, "response_metadata", None) or {}
        total = (metadata.get("token_usage") or {}).get("total_tokens")
    return int(total) if total is not None else None
