"""
Web search - live context for time-sensitive questions
"""

from chatty.agents.web.search import WebSearchClient

__all__ = ["WebSearchClient"]
