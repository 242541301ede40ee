"""
Shared fixtures
"""

import pytest

from chatty.agents.rag import KnowledgeRetriever
from chatty.agents.responder import ResponseGenerator
from chatty.agents.web import WebSearchClient
from chatty.memory import ConversationStore
from tests.helpers import FakeChatModel, RecordingTransport, rag_handler, refuse_all


@pytest.fixture
def fake_llm():
    return FakeChatModel()


@pytest.fixture
def generator(fake_llm):
    return ResponseGenerator(llm=fake_llm, api_key="gsk_test_key_1234567890", model="llama-3.1-8b-instant")


@pytest.fixture
def memory_store():
    return ConversationStore(db_path="", max_messages=20)


@pytest.fixture
def unavailable_rag():
    transport = RecordingTransport(rag_handler(healthy=False))
    return KnowledgeRetriever(base_url="http://rag.test", health_cache_seconds=30, transport=transport)


@pytest.fixture
def web_transport():
    """Web transport that refuses connections and records attempts."""
    return RecordingTransport(refuse_all)


@pytest.fixture
def web_search(web_transport):
    return WebSearchClient(enabled=True, provider="duckduckgo", timeout_ms=2000, transport=web_transport)
