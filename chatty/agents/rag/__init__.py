"""
RAG client - knowledge-base context for the prompt
"""

from chatty.agents.rag.retriever import KnowledgeRetriever

__all__ = ["KnowledgeRetriever"]
