"""
Prompt templates for the response generator
"""

from typing import Any, Dict, List, Optional


SYSTEM_PROMPT = """You are Chatty, a friendly and helpful AI assistant. You are having a conversation with a user through a chat interface.

Key guidelines:
- Be conversational, warm, and engaging
- Use emojis occasionally to make the conversation more friendly
- Keep responses concise but informative (aim for 1-3 sentences)
- Ask follow-up questions when appropriate
- Be helpful with various topics including technology, general knowledge, and casual conversation
- If you don't know something, admit it and offer to help with what you can
- Remember the conversation context and refer back to previous messages when relevant
- Be encouraging and positive in your tone

Remember: You're having a real-time chat, so keep responses conversational and not too formal."""

ATTACHMENT_PREVIEW_CHARS = 4000

KNOWLEDGE_BASE_INSTRUCTION = (
    "IMPORTANT: Use the following context from your knowledge base to provide accurate, detailed answers. "
    "If the context doesn't contain relevant information, say so clearly."
)

WEB_INSTRUCTION = (
    "CURRENT WEB INFORMATION: The following information was retrieved from web sources to provide "
    "up-to-date information. Use this to supplement your knowledge, especially for current events, "
    "recent developments, or real-time data."
)

CONTEXT_CLOSING_INSTRUCTION = (
    "Please provide a helpful, accurate response based on the provided context(s) and the user's question. "
    "If the context doesn't fully answer the question, acknowledge what information is available and what isn't."
)


def _attachment_value(attachment: Any, key: str, default: Any = None) -> Any:
    if isinstance(attachment, dict):
        return attachment.get(key, default)
    return getattr(attachment, key, default)


def format_attachments(attachments: List[Any]) -> str:
    """Summarize attachments: header per file plus a truncated content preview."""
    formatted = []
    for index, attachment in enumerate(attachments, 1):
        name = _attachment_value(attachment, "name", "attachment")
        mime_type = _attachment_value(attachment, "type", "unknown")
        size_kb = round((_attachment_value(attachment, "size", 0) or 0) / 1024)
        content = _attachment_value(attachment, "content")

        block = f"[Attachment {index}] {name} ({mime_type}, {size_kb} KB)"
        if content:
            block += f"\nContent (truncated):\n{content[:ATTACHMENT_PREVIEW_CHARS]}"
        formatted.append(block)
    return "\n\n".join(formatted)


def build_prompt(
    base: str,
    rag_context: Optional[Dict[str, Any]] = None,
    web_context: Optional[Dict[str, Any]] = None,
    attachments: Optional[List[Any]] = None
) -> str:
    """
    Assemble the system prompt.

    Order: persona, attachments, knowledge base, web results, and a closing
    instruction that is only added when some retrieved context is present.
    """
    prompt = base

    if attachments:
        prompt += f"\n\nATTACHMENTS PROVIDED BY USER:\n{format_attachments(attachments)}\n"

    if rag_context:
        prompt += f"\n\n{KNOWLEDGE_BASE_INSTRUCTION}\n\nKNOWLEDGE BASE CONTEXT:\n{rag_context['context']}\n\n"

    if web_context:
        prompt += f"\n\n{WEB_INSTRUCTION}\n\nWEB SEARCH RESULTS:\n{web_context['context']}\n\n"

    if rag_context or web_context:
        prompt += f"\n{CONTEXT_CLOSING_INSTRUCTION}"

    return prompt
