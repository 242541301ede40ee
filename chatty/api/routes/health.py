"""
Health check endpoint
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from loguru import logger

from chatty.api.container import ServiceContainer
from chatty.api.dependencies import get_container
from chatty.api.schemas import HealthResponse
from chatty.config.constants import STATUS
from chatty.utils.clock import utc_now_iso


router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(container: ServiceContainer = Depends(get_container)):
    """
    Health check endpoint

    Reports LLM configuration, RAG and web search availability, and the
    state of conversation storage.
    """
    try:
        groq = {
            **container.generator.get_status(),
            "rag": await container.retriever.get_status(),
            "webSearch": await container.web_search.get_status(),
        }
        store = container.conversation_store
        return HealthResponse(
            status=STATUS.HEALTHY,
            timestamp=utc_now_iso(),
            groq=groq,
            conversations=await store.size(),
            storage=await store.get_storage_status(),
        )
    except Exception as e:
        logger.exception("Health check failed")
        return JSONResponse(
            status_code=500,
            content={"status": STATUS.UNHEALTHY, "error": str(e), "timestamp": utc_now_iso()},
        )
