"""
Knowledge retriever - HTTP client for the external RAG backend

Every public method is total: an unreachable or misbehaving backend is
reported as "unavailable" / "no results", never as an exception, because
knowledge-base context is an optional enrichment of the prompt.
"""

import time
from typing import Any, Dict, List, Optional, Tuple

import httpx
from loguru import logger

from chatty.config.settings import settings


class KnowledgeRetriever:
    """
    Client for the RAG service (``GET /health``, ``POST /search``, ``POST /chat``).

    The availability check result is cached for ``health_cache_seconds`` as a
    single ``(checked_at, available)`` tuple. The tuple is replaced in one
    assignment, so concurrent refreshes can only overwrite each other, never
    mix a fresh timestamp with a stale value.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        health_timeout: Optional[float] = None,
        health_cache_seconds: Optional[float] = None,
        max_results: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.base_url = (base_url or settings.rag_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.rag_timeout
        self.health_timeout = health_timeout if health_timeout is not None else settings.rag_health_timeout
        self.health_cache_seconds = (
            health_cache_seconds if health_cache_seconds is not None else settings.rag_health_cache_seconds
        )
        self.max_results = max_results or settings.rag_max_results
        self._transport = transport
        self._http: Optional[httpx.AsyncClient] = None
        self._availability: Tuple[Optional[float], bool] = (None, False)

        logger.info(f"Initialized KnowledgeRetriever (base_url={self.base_url})")

    def _client(self) -> httpx.AsyncClient:
        """Shared connection pool, opened on first use."""
        if self._http is None or self._http.is_closed:
            self._http = httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self._transport)
        return self._http

    async def close(self):
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    async def is_available(self) -> bool:
        """Check RAG backend health (cached)."""
        checked_at, available = self._availability
        if checked_at is not None and time.monotonic() - checked_at < self.health_cache_seconds:
            return available

        available = await self._check_health()
        self._availability = (time.monotonic(), available)
        return available

    async def _check_health(self) -> bool:
        try:
            response = await self._client().get("/health", timeout=self.health_timeout)
            if not response.is_success:
                logger.warning(f"RAG health check returned HTTP {response.status_code}")
                return False

            health = response.json()
            return (
                isinstance(health, dict)
                and health.get("status") == "healthy"
                and bool(health.get("rag_flow_ready"))
            )
        except Exception as e:
            logger.warning(f"RAG service not available - continuing without RAG enhancement: {e}")
            return False

    async def search(self, query: str) -> List[Dict[str, Any]]:
        """Similarity search; returns [] on any failure."""
        try:
            response = await self._client().post("/search", json={"query": query})
            response.raise_for_status()

            data = response.json()
            results = data.get("results") if isinstance(data, dict) else None
            return [r for r in results if isinstance(r, dict)] if isinstance(results, list) else []
        except Exception as e:
            logger.error(f"RAG search error: {e}")
            return []

    async def get_contextual_search(
        self,
        query: str,
        max_results: Optional[int] = None
    ) -> Optional[Dict[str, Any]]:
        """
        Search and format the top hits as a prompt-ready context block.

        Args:
            query: User question
            max_results: Number of hits to include (defaults to configured value)

        Returns:
            ``{"context": str, "sources": [...]}`` or None when nothing matched
        """
        results = await self.search(query)
        if not results:
            return None

        top_results = results[:max_results or self.max_results]
        blocks = []
        sources = []
        for index, result in enumerate(top_results, 1):
            metadata = result.get("metadata") or {}
            source = metadata.get("source")
            page = metadata.get("page")
            content = result.get("content", "")

            page_suffix = f" (Page {page})" if page else ""
            blocks.append(f"[Context {index} from {source or 'Unknown source'}{page_suffix}]:\n{content}")
            sources.append({
                "content": content,
                "source": source or "Unknown",
                "page": page or None,
            })

        logger.debug(f"RAG context built from {len(top_results)} of {len(results)} hits")
        return {"context": "\n\n".join(blocks), "sources": sources}

    async def ask(self, query: str) -> Optional[str]:
        """Ask the RAG backend for a complete answer (``POST /chat``)."""
        try:
            response = await self._client().post("/chat", json={"query": query})
            response.raise_for_status()

            data = response.json()
            return (
                data.get("response")
                or data.get("answer")
                or "I couldn't generate a response from the RAG system."
            )
        except Exception as e:
            logger.error(f"RAG chat error: {e}")
            return None

    async def get_status(self) -> Dict[str, Any]:
        return {
            "available": await self.is_available(),
            "baseURL": self.base_url,
            "timeout": self.timeout,
        }
