"""
Test doubles: a scripted chat model and recording HTTP transports.
"""

import asyncio
import json
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable, Dict, List, Optional

import httpx
from langchain_core.messages import AIMessage


GROQ_URL = "https://api.groq.com/openai/v1/chat/completions"


class FakeChatModel:
    """Stands in for ChatOpenAI: records prompts, returns a canned reply or raises."""

    def __init__(self, reply: str = "Hello! How can I help you today? 😊", error: Optional[Exception] = None, tokens: int = 42):
        self.reply = reply
        self.error = error
        self.tokens = tokens
        self.calls: List[List[Any]] = []

    async def ainvoke(self, messages, *args, **kwargs):
        self.calls.append(list(messages))
        if self.error is not None:
            raise self.error
        return AIMessage(
            content=self.reply,
            usage_metadata={"input_tokens": self.tokens - 10, "output_tokens": 10, "total_tokens": self.tokens},
        )


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.requests: List[httpx.Request] = []

        def record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(record)


def json_response(payload: Any, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, content=json.dumps(payload), headers={"Content-Type": "application/json"})


def rag_handler(
    healthy: bool = True,
    results: Optional[List[Dict[str, Any]]] = None,
    answer: str = "Chatty is a chat assistant."
):
    """Handler emulating the RAG backend's /health, /search and /chat endpoints."""

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/health":
            if not healthy:
                return httpx.Response(503)
            return json_response({"status": "healthy", "rag_flow_ready": True})
        if request.url.path == "/search":
            return json_response({"results": results or []})
        if request.url.path == "/chat":
            return json_response({"response": answer})
        return httpx.Response(404)

    return handler


def refuse_all(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("Connection refused", request=request)


def status_error(error_cls, status_code: int, message: str = "upstream said no"):
    """Build an openai APIStatusError subclass the way the SDK does."""
    request = httpx.Request("POST", GROQ_URL)
    return error_cls(message, response=httpx.Response(status_code, request=request), body=None)


@asynccontextmanager
async def dripping_server(interval: float = 0.05, body_size: int = 1000) -> AsyncIterator[str]:
    """Local HTTP server that answers every request one body byte at a time; yields its base URL."""
    stop = asyncio.Event()

    async def handle(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        try:
            await reader.readuntil(b"\r\n\r\n")
            writer.write(
                b"HTTP/1.1 200 OK\r\nContent-Type: text/html\r\n"
                + f"Content-Length: {body_size}\r\n\r\n".encode()
            )
            for _ in range(body_size):
                if stop.is_set():
                    break
                writer.write(b"x")
                await writer.drain()
                await asyncio.sleep(interval)
        except (ConnectionError, asyncio.IncompleteReadError):
            pass
        finally:
            writer.close()

    server = await asyncio.start_server(handle, "127.0.0.1", 0)
    host, port = server.sockets[0].getsockname()[:2]
    try:
        yield f"http://{host}:{port}/"
    finally:
        stop.set()
        server.close()
        await server.wait_closed()
