"""
Orchestrator context - dependencies passed to workflow nodes
"""

from dataclasses import dataclass

from chatty.agents.rag.retriever import KnowledgeRetriever
from chatty.agents.responder.generator import ResponseGenerator
from chatty.agents.web.search import WebSearchClient
from chatty.memory.conversation_store import ConversationStore


@dataclass
class PipelineContext:
    """Context holding dependencies for pipeline nodes"""

    conversation_store: ConversationStore
    retriever: KnowledgeRetriever
    web_search: WebSearchClient
    generator: ResponseGenerator
    rag_max_results: int = 3
