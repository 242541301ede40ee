"""
Chatty - chat assistant backend with RAG and web search enrichment.
"""

__version__ = "1.0.0"
