"""
Main FastAPI application for the Chatty assistant backend

This module creates and configures the FastAPI application with:
- CORS middleware for the chat frontend
- Chat routes (buffered, SSE streaming, conversation management)
- Health check endpoint
- JSON 404 / 500 handlers
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from chatty import __version__
from chatty.api.container import ServiceContainer, build_container
from chatty.api.routes import chat, health
from chatty.config.settings import settings
from chatty.utils.logger import setup_logger


def create_app(container: Optional[ServiceContainer] = None, configure_logging: bool = True) -> FastAPI:
    """
    Build the application.

    Args:
        container: Pre-built collaborators (tests); built from settings at startup when omitted
        configure_logging: Install the loguru sinks on startup
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        if configure_logging:
            setup_logger(level=settings.log_level, log_to_file=settings.log_to_file)

        logger.info("🚀 Chatty API starting...")
        if getattr(app.state, "container", None) is None:
            app.state.container = build_container(settings)
        await app.state.container.initialize()

        if not app.state.container.generator.is_configured():
            logger.warning("⚠️  GROQ_API_KEY missing - replies will ask for configuration")
        logger.info(f"🔄 Streaming endpoint at {settings.api_prefix}/chat/stream")

        yield

        # Shutdown
        logger.info("🛑 Chatty API shutting down...")
        await app.state.container.cleanup()

    app = FastAPI(
        title="Chatty API",
        description="""
        Chat assistant backend with knowledge-base (RAG) and web search enrichment.

        ## Features

        * **Flow tracing** of every request phase (history, RAG, web search, LLM, persistence)
        * **Real-time streaming** of flow steps using Server-Sent Events (SSE)
        * **Graceful degradation** when the RAG backend or web search is unavailable

        ## Example

        ```bash
        curl -N -X POST http://localhost:5000/api/chat/stream \\
             -H "Content-Type: application/json" \\
             -d '{"message": "What is the latest news on AI?"}'
        ```
        """,
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc"
    )
    if container is not None:
        app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(chat.router, prefix=settings.api_prefix)
    app.include_router(health.router, prefix=settings.api_prefix)

    @app.get("/", tags=["root"])
    async def root():
        """
        Root endpoint - API information
        """
        return {
            "service": "Chatty API",
            "version": __version__,
            "status": "running",
            "docs": "/docs",
            "endpoints": {
                "health": f"{settings.api_prefix}/health",
                "chat": f"{settings.api_prefix}/chat",
                "chat_stream": f"{settings.api_prefix}/chat/stream",
            }
        }

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return JSONResponse(
                status_code=404,
                content={"error": "Not found", "message": f"Route {request.method} {request.url.path} not found"},
            )
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.opt(exception=exc).error(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "message": str(exc)},
        )

    return app


app = create_app()
