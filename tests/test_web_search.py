"""
Tests for the web search client.

Covers the search heuristic, the instant-answer path, the HTML fallback and
the best-effort error handling. Scraping details are checked against a
small fixed page, not live markup.
"""

import asyncio
import time
from datetime import datetime

import httpx
import pytest

from chatty.agents.web import WebSearchClient
from chatty.agents.web import search as search_module
from chatty.agents.web.parsing import parse_duckduckgo_html, resolve_result_url
from tests.helpers import RecordingTransport, dripping_server, json_response


RESULTS_PAGE = """
<html><body>
<div class="result results_links">
  <h2><a class="result__a" href="//duckduckgo.com/l/?uddg=https%3A%2F%2Fexample.com%2Fai-news&amp;rut=abc">AI <b>News</b> Today</a></h2>
  <a class="result__snippet" href="#">Latest models &amp; research from this week.</a>
</div>
<div class="result">
  <a class="result__a" href="https://example.org/weekly">Weekly Roundup</a>
  <span class="result__snippet">Everything that happened.</span>
</div>
<div class="result">
  <a class="result__a" href="https://example.net/empty">No Snippet Here</a>
</div>
<div class="result">
  <a class="result__a" href="https://example.com/fourth">Fourth Result</a>
  <a class="result__snippet">Should be cut by max_results.</a>
</div>
</body></html>
"""


def duckduckgo_handler(instant=None, html=RESULTS_PAGE, html_status=200):
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "api.duckduckgo.com":
            return json_response(instant or {"AbstractText": "", "Answer": ""})
        if request.url.host == "html.duckduckgo.com":
            return httpx.Response(html_status, text=html)
        return httpx.Response(404)

    return handler


def make_client(handler, **kwargs) -> WebSearchClient:
    transport = RecordingTransport(handler)
    kwargs.setdefault("provider", "duckduckgo")
    kwargs.setdefault("enabled", True)
    kwargs.setdefault("timeout_ms", 2000)
    return WebSearchClient(max_results=3, transport=transport, **kwargs)


class TestShouldSearch:
    """Test the search heuristic"""

    @pytest.mark.parametrize("query", [
        "What is the latest news on AI?",
        "search for cats",
        "Look up the weather in Paris",
        "How do I bake sourdough bread?",
        "Any news about the elections",
        f"Best laptops of {datetime.now().year}",
    ])
    def test_search_worthy(self, query):
        """Test explicit, time-sensitive and question queries trigger a search"""
        client = WebSearchClient(enabled=True)

        assert client.should_search(query) is True

    @pytest.mark.parametrize("query", [
        "hello",
        "Thanks a lot!",
        "I know you are great",
        "",
    ])
    def test_conversational(self, query):
        """Test ordinary conversational turns do not trigger a search"""
        client = WebSearchClient(enabled=True)

        assert client.should_search(query) is False

    def test_disabled_never_searches(self):
        """Test a disabled client ignores even explicit requests"""
        client = WebSearchClient(enabled=False)

        assert client.should_search("search for cats") is False


class TestParsing:
    """Test HTML helpers"""

    def test_redirect_links_are_unwrapped(self):
        """Test DuckDuckGo redirect URLs resolve to the target page"""
        href = "//duckduckgo.com/l/?uddg=https%3A%2F%2Fexample.com%2Fpage&rut=xyz"

        assert resolve_result_url(href) == "https://example.com/page"
        assert resolve_result_url("https://example.org/x") == "https://example.org/x"

    def test_results_page(self):
        """Test titles, snippets and entities are extracted and capped"""
        results = parse_duckduckgo_html(RESULTS_PAGE, max_results=3)

        assert len(results) == 3
        assert results[0] == {
            "title": "AI News Today",
            "url": "https://example.com/ai-news",
            "snippet": "Latest models & research from this week.",
            "source": "web",
        }
        assert results[1]["snippet"] == "Everything that happened."
        assert results[2]["snippet"] == "No description available"

    def test_unknown_markup_yields_nothing(self):
        """Test pages without result blocks parse to an empty list"""
        assert parse_duckduckgo_html("<html><p>captcha</p></html>", max_results=3) == []


class TestSearchWeb:
    """Test provider dispatch and error handling"""

    @pytest.mark.asyncio
    async def test_timeout_bounds_whole_lookup(self, monkeypatch):
        """Test a server trickling bytes cannot stretch a search past its timeout"""
        async with dripping_server(interval=0.05) as base_url:
            monkeypatch.setattr(search_module, "INSTANT_ANSWER_URL", base_url)
            monkeypatch.setattr(search_module, "HTML_SEARCH_URL", base_url)
            client = WebSearchClient(
                enabled=True,
                provider="duckduckgo",
                timeout_ms=500,
                transport=httpx.AsyncHTTPTransport(),
            )

            started = time.monotonic()
            results = await client.search_web("latest ai news")
            elapsed = time.monotonic() - started
            await client.close()

        assert results == []
        assert elapsed < 2.0

    @pytest.mark.asyncio
    async def test_timeout_marks_provider_unavailable(self):
        """Test a lookup exceeding the timeout is reported as unavailable"""
        async def stalled(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(5)
            return json_response({})

        client = make_client(stalled, timeout_ms=200)

        started = time.monotonic()
        assert await client.is_available() is False
        assert time.monotonic() - started < 2.0

    @pytest.mark.asyncio
    async def test_instant_answer_first(self):
        """Test an instant answer is returned without scraping"""
        client = make_client(duckduckgo_handler(instant={
            "AbstractText": "Python is a <b>programming</b> language.",
            "Heading": "Python",
            "AbstractURL": "https://en.wikipedia.org/wiki/Python_(programming_language)",
        }))

        results = await client.search_web("python language")

        assert results == [{
            "title": "Python",
            "url": "https://en.wikipedia.org/wiki/Python_(programming_language)",
            "snippet": "Python is a programming language.",
            "source": "web",
        }]
        assert [r.url.host for r in client._transport.requests] == ["api.duckduckgo.com"]

    @pytest.mark.asyncio
    async def test_falls_back_to_results_page(self):
        """Test an empty instant answer falls back to the HTML results page"""
        client = make_client(duckduckgo_handler())

        results = await client.search_web("latest ai news")

        assert len(results) == 3
        assert [r.url.host for r in client._transport.requests] == ["api.duckduckgo.com", "html.duckduckgo.com"]
        html_request = client._transport.requests[1]
        assert "Mozilla/5.0" in html_request.headers["User-Agent"]

    @pytest.mark.asyncio
    async def test_http_error_returns_empty(self):
        """Test a non-2xx results page degrades to no results"""
        client = make_client(duckduckgo_handler(html_status=503))

        assert await client.search_web("latest ai news") == []

    @pytest.mark.asyncio
    async def test_timeout_returns_empty(self):
        """Test a timed out fetch degrades to no results"""
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        client = make_client(handler)

        assert await client.search_web("latest ai news") == []

    @pytest.mark.asyncio
    async def test_disabled_makes_no_requests(self):
        """Test a disabled client never touches the network"""
        client = make_client(duckduckgo_handler(), enabled=False)

        assert await client.search_web("latest ai news") == []
        assert client._transport.requests == []

    @pytest.mark.asyncio
    async def test_unknown_provider(self):
        """Test an unknown provider yields no results"""
        client = make_client(duckduckgo_handler(), provider="altavista")

        assert await client.search_web("latest ai news") == []
        assert client._transport.requests == []

    @pytest.mark.asyncio
    async def test_brave_without_key_uses_duckduckgo(self):
        """Test the API-key provider falls back when no key is configured"""
        client = make_client(duckduckgo_handler(), provider="brave", api_key="")

        results = await client.search_web("latest ai news")

        assert len(results) == 3
        assert client._transport.requests[0].url.host == "api.duckduckgo.com"

    @pytest.mark.asyncio
    async def test_brave_with_key(self):
        """Test Brave Search results are mapped to web results"""
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.headers["X-Subscription-Token"] == "brave-key"
            return json_response({"web": {"results": [
                {"title": "Brave <strong>Result</strong>", "url": "https://brave.example", "description": "Found it"},
                {"title": "", "url": "https://skipped.example"},
            ]}})

        client = make_client(handler, provider="brave", api_key="brave-key")

        results = await client.search_web("anything")

        assert results == [{
            "title": "Brave Result",
            "url": "https://brave.example",
            "snippet": "Found it",
            "source": "web",
        }]


class TestContextualWebSearch:
    """Test context formatting and status"""

    @pytest.mark.asyncio
    async def test_context_blocks(self):
        """Test results are formatted as numbered web source blocks"""
        client = make_client(duckduckgo_handler())

        context = await client.get_contextual_web_search("latest ai news")

        assert context["context"].startswith(
            "[Web Source 1: AI News Today (https://example.com/ai-news)]:\nLatest models & research from this week."
        )
        assert context["context"].count("[Web Source ") == 3
        assert len(context["results"]) == 3

    @pytest.mark.asyncio
    async def test_no_results_returns_none(self):
        """Test zero results produce no context block"""
        client = make_client(duckduckgo_handler(html="<html></html>"))

        assert await client.get_contextual_web_search("latest ai news") is None

    @pytest.mark.asyncio
    async def test_status_when_disabled(self):
        """Test status of a disabled client without probing"""
        client = make_client(duckduckgo_handler(), enabled=False)

        assert await client.get_status() == {"available": False, "provider": "duckduckgo", "enabled": False}
        assert client._transport.requests == []

    @pytest.mark.asyncio
    async def test_status_check_failure(self):
        """Test a failing provider is reported unavailable"""
        client = make_client(duckduckgo_handler(html_status=500))

        status = await client.get_status()

        assert status["available"] is False
        assert status["enabled"] is True
