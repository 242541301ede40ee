"""
Pipeline workflow nodes
"""

from chatty.agents.orchestrator.nodes.history import load_history_node
from chatty.agents.orchestrator.nodes.knowledge import retrieve_knowledge_node
from chatty.agents.orchestrator.nodes.web import search_web_node
from chatty.agents.orchestrator.nodes.generate import generate_response_node
from chatty.agents.orchestrator.nodes.persist import persist_exchange_node

__all__ = [
    "load_history_node",
    "retrieve_knowledge_node",
    "search_web_node",
    "generate_response_node",
    "persist_exchange_node",
]
