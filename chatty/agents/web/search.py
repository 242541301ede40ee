"""
Web search client

Decides whether a message deserves a live web lookup and fetches a few
results to ground the answer. Web search is best effort: every failure is
logged and turned into an empty result list.
"""

import asyncio
import re
from datetime import datetime
from typing import Any, Dict, List, Optional

import httpx
from loguru import logger

from chatty.agents.web.parsing import clean_text, parse_duckduckgo_html
from chatty.config.settings import settings
from chatty.utils.errors import UpstreamError


INSTANT_ANSWER_URL = "https://api.duckduckgo.com/"
HTML_SEARCH_URL = "https://html.duckduckgo.com/html/"
BRAVE_SEARCH_URL = "https://api.search.brave.com/res/v1/web/search"

INSTANT_ANSWER_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
}
HTML_SEARCH_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml",
    "Accept-Language": "en-US,en;q=0.9",
}

EXPLICIT_DIRECTIVES = ("search for", "look up")

SEARCH_KEYWORDS = [
    "current", "latest", "recent", "today", "now", "news", "update",
    "what is", "who is", "when did", "where is", "how to", "why is",
    "explain", "tell me about", "search", "find",
]

QUESTION_WORDS = ("what", "who", "when", "where", "why", "how")

# Keywords must start a word ("now" matches "nowadays" but not "know")
_KEYWORD_PATTERN = re.compile(r"\b(?:" + "|".join(re.escape(k) for k in SEARCH_KEYWORDS) + ")")


def _mentions_recent_year(text: str) -> bool:
    year = datetime.now().year
    return re.search(rf"\b(?:{year - 1}|{year})\b", text) is not None


class WebSearchClient:
    """
    Web search with pluggable providers.

    Providers:
    - ``duckduckgo``: instant-answer JSON first, HTML results page as fallback
    - ``brave``: Brave Search API (needs an API key, falls back to DuckDuckGo)
    """

    def __init__(
        self,
        enabled: Optional[bool] = None,
        provider: Optional[str] = None,
        max_results: Optional[int] = None,
        timeout_ms: Optional[int] = None,
        api_key: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.enabled = enabled if enabled is not None else settings.web_search_enabled
        self.provider = (provider or settings.web_search_provider).lower()
        self.max_results = max_results or settings.web_search_max_results
        self.timeout_ms = timeout_ms or settings.web_search_timeout
        self.api_key = api_key if api_key is not None else settings.web_search_api_key
        self._transport = transport
        self._http: Optional[httpx.AsyncClient] = None

        logger.info(
            f"Initialized WebSearchClient (enabled={self.enabled}, provider={self.provider}, "
            f"max_results={self.max_results}, timeout={self.timeout_ms}ms)"
        )

    def _client(self) -> httpx.AsyncClient:
        """Shared connection pool, opened on first use."""
        if self._http is None or self._http.is_closed:
            self._http = httpx.AsyncClient(
                timeout=self.timeout_ms / 1000,
                follow_redirects=True,
                transport=self._transport,
            )
        return self._http

    async def close(self):
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    def should_search(self, query: str) -> bool:
        """Heuristic gate: only search for explicit requests or time-sensitive questions."""
        if not self.enabled or not query:
            return False

        query_lower = query.strip().lower()

        if any(directive in query_lower for directive in EXPLICIT_DIRECTIVES):
            return True

        if _KEYWORD_PATTERN.search(query_lower) or _mentions_recent_year(query_lower):
            return True

        is_question = query_lower.endswith("?")
        return is_question and query_lower.startswith(QUESTION_WORDS)

    async def search_web(self, query: str) -> List[Dict[str, Any]]:
        """Search with the configured provider; returns [] on any error."""
        if not self.enabled:
            return []

        try:
            return await self._dispatch_with_deadline(query)
        except Exception as e:
            logger.error(f"Web search error: {e}")
            return []

    async def _dispatch_with_deadline(self, query: str) -> List[Dict[str, Any]]:
        """Provider lookup bounded by one deadline across all of its requests."""
        try:
            return await asyncio.wait_for(self._dispatch(query), timeout=self.timeout_ms / 1000)
        except asyncio.TimeoutError as e:
            raise UpstreamError(f"Web search timeout after {self.timeout_ms}ms") from e

    async def _dispatch(self, query: str) -> List[Dict[str, Any]]:
        if self.provider == "duckduckgo":
            return await self._search_duckduckgo(query)
        if self.provider == "brave":
            return await self._search_brave(query)

        logger.warning(f"Unknown search provider: {self.provider}")
        return []

    async def _search_duckduckgo(self, query: str) -> List[Dict[str, Any]]:
        client = self._client()
        instant = await self._instant_answer(client, query)
        if instant:
            return instant
        return await self._scrape_results(client, query)

    async def _instant_answer(self, client: httpx.AsyncClient, query: str) -> List[Dict[str, Any]]:
        """Single authoritative snippet from the instant-answer API, if any."""
        try:
            response = await client.get(
                INSTANT_ANSWER_URL,
                params={"q": query, "format": "json", "no_html": "1", "skip_disambig": "1"},
                headers=INSTANT_ANSWER_HEADERS,
            )
            if not response.is_success:
                return []
            data = response.json()
        except Exception as e:
            logger.debug(f"Instant answer API not available, using HTML search: {e}")
            return []

        abstract = data.get("AbstractText") or data.get("Answer")
        if not abstract:
            return []

        url = data.get("AbstractURL") or str(httpx.URL("https://duckduckgo.com/", params={"q": query}))
        return [{
            "title": data.get("Heading") or query,
            "url": url,
            "snippet": clean_text(str(abstract)),
            "source": "web",
        }]

    async def _scrape_results(self, client: httpx.AsyncClient, query: str) -> List[Dict[str, Any]]:
        try:
            response = await client.get(HTML_SEARCH_URL, params={"q": query}, headers=HTML_SEARCH_HEADERS)
        except httpx.TimeoutException as e:
            raise UpstreamError(f"Web search timeout after {self.timeout_ms}ms") from e

        if not response.is_success:
            raise UpstreamError(f"DuckDuckGo search failed: {response.status_code}")

        results = parse_duckduckgo_html(response.text, self.max_results)
        logger.debug(f"DuckDuckGo HTML returned {len(results)} results")
        return results

    async def _search_brave(self, query: str) -> List[Dict[str, Any]]:
        if not self.api_key:
            logger.warning("WEB_SEARCH_API_KEY not set, falling back to DuckDuckGo")
            return await self._search_duckduckgo(query)

        try:
            response = await self._client().get(
                BRAVE_SEARCH_URL,
                params={"q": query, "count": self.max_results},
                headers={
                    "Accept": "application/json",
                    "X-Subscription-Token": self.api_key,
                },
            )
        except httpx.TimeoutException as e:
            raise UpstreamError(f"Web search timeout after {self.timeout_ms}ms") from e

        if not response.is_success:
            raise UpstreamError(f"Brave search failed: {response.status_code}")

        results = []
        for item in response.json().get("web", {}).get("results", [])[:self.max_results]:
            title = clean_text(item.get("title", ""))
            url = item.get("url", "")
            if title and url:
                results.append({
                    "title": title,
                    "url": url,
                    "snippet": clean_text(item.get("description", "")) or "No description available",
                    "source": "web",
                })
        logger.debug(f"Brave Search returned {len(results)} results")
        return results

    async def get_contextual_web_search(self, query: str) -> Optional[Dict[str, Any]]:
        """
        Search and format results as a prompt-ready context block.

        Returns:
            ``{"context": str, "results": [...]}`` or None when nothing was found
        """
        results = await self.search_web(query)
        if not results:
            return None

        context = "\n\n".join(
            f"[Web Source {index}: {result['title']} ({result['url']})]:\n{result['snippet']}"
            for index, result in enumerate(results, 1)
        )
        return {"context": context, "results": results}

    async def is_available(self) -> bool:
        """Check the provider with a literal test query."""
        if not self.enabled:
            return False

        try:
            await self._dispatch_with_deadline("test")
            return True
        except Exception as e:
            logger.warning(f"Web search service not available: {e}")
            return False

    async def get_status(self) -> Dict[str, Any]:
        return {
            "available": await self.is_available(),
            "provider": self.provider,
            "enabled": self.enabled,
        }
