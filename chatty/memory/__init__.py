"""
Memory layer - conversation history storage
"""

from chatty.memory.conversation_store import ConversationStore, generate_conversation_id

__all__ = [
    "ConversationStore",
    "generate_conversation_id",
]
