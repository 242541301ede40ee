"""
Application constants

User-facing strings, flow step definitions and conversation defaults.
"""

from typing import Dict, List


# ============================================================================
# User-facing messages
# ============================================================================

class MESSAGES:
    EMPTY_MESSAGE = "I didn't receive a message. Could you please try again? 😊"
    TECHNICAL_ERROR = "I'm experiencing some technical difficulties. Please try again in a moment! 🔧"
    NOT_CONFIGURED = "🤖 I'm not properly configured yet. Please set up the Groq API key to enable AI responses!"
    API_CONFIGURATION_ERROR = "I'm having trouble with my API configuration. Please check the Groq API key! 🔧"
    RATE_LIMITED = "I'm getting too many requests right now. Please wait a moment and try again! ⏳"
    CONVERSATION_CREATED = "Conversation created successfully"
    CONVERSATION_CLEARED = "Conversation cleared successfully"
    FAILED_CREATE_CONVERSATION = "Failed to create conversation"
    FAILED_FETCH_CONVERSATION = "Failed to fetch conversation"
    FAILED_FETCH_CONVERSATIONS = "Failed to fetch conversations"
    FAILED_CLEAR_CONVERSATION = "Failed to clear conversation"
    FAILED_RAG_SEARCH = "Failed to test RAG search"
    RAG_NOT_AVAILABLE = "RAG service is not available"
    QUERY_REQUIRED = "Query parameter is required"
    DATABASE_CONNECTION_FAILED = "Database connection failed"


class ERRORS:
    NO_MESSAGE_PROVIDED = "No message provided"
    API_KEY_MISSING = "Groq API key is not configured"


# ============================================================================
# Flow tracking
# ============================================================================

class STATUS:
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"
    ERROR = "error"
    SKIPPED = "skipped"


# One entry per pipeline phase, in execution order
FLOW_STEPS: Dict[str, Dict[str, str]] = {
    "backend": {
        "step_id": "backend-processing",
        "name": "Backend Processing",
        "description": "Loading conversation history",
    },
    "rag": {
        "step_id": "rag-processing",
        "name": "RAG Processing",
        "description": "Searching knowledge base",
    },
    "web_search": {
        "step_id": "web-search-processing",
        "name": "Web Search",
        "description": "Searching the web for current information",
    },
    "ai": {
        "step_id": "ai-processing",
        "name": "AI Processing",
        "description": "Generating response with the language model",
    },
    "response": {
        "step_id": "response-return",
        "name": "Response Processing",
        "description": "Saving conversation",
    },
}

PHASE_ORDER: List[str] = [definition["step_id"] for definition in FLOW_STEPS.values()]


# ============================================================================
# Conversations
# ============================================================================

class SENDERS:
    USER = "user"
    BOT = "bot"


DEFAULT_CONVERSATION_TITLE = "New Conversation"
MAX_TITLE_LENGTH = 50

TITLE_PROMPTS: List[str] = [
    "Generate a creative, engaging title for a new conversation. Keep it short (2-4 words) and welcoming. "
    "Examples: 'Let's Chat', 'New Adventure', 'Fresh Start', 'Hello There'. Just return the title, nothing else.",
    "Create a friendly conversation title. Make it inviting and concise (2-4 words). "
    "Examples: 'Chat Time', 'New Journey', 'Let's Talk', 'Hello Friend'. Only return the title.",
    "Generate a warm, welcoming title for starting a new chat. Keep it brief (2-4 words) and positive. "
    "Examples: 'New Chat', 'Let's Connect', 'Hello World', 'Fresh Chat'. Just the title please.",
]

FALLBACK_TITLES: List[str] = [
    "Let's Chat",
    "New Adventure",
    "Fresh Start",
    "Hello There",
    "Chat Time",
    "New Journey",
    "Let's Talk",
    "Hello Friend",
    "New Chat",
    "Let's Connect",
]
