"""
LLM client factory

Creates the LangChain chat model used for response generation. Groq exposes
an OpenAI-compatible API, so ``ChatOpenAI`` is pointed at the Groq base URL.
"""

from typing import Optional

from langchain_openai import ChatOpenAI
from loguru import logger

from chatty.config.settings import settings


def mask_api_key(api_key: str) -> str:
    if len(api_key) > 12:
        return api_key[:8] + "..." + api_key[-4:]
    return "***"


def create_llm(
    api_key: Optional[str] = None,
    model: Optional[str] = None,
    base_url: Optional[str] = None,
    temperature: Optional[float] = None,
    max_tokens: Optional[int] = None,
    timeout: Optional[float] = None
) -> ChatOpenAI:
    """
    Factory function to create the chat model.

    Args:
        api_key: Groq API key (defaults to settings.groq_api_key)
        model: Model name (defaults to settings.groq_model)
        base_url: OpenAI-compatible endpoint (defaults to settings.groq_base_url)
        temperature: Generation temperature (defaults to settings.temperature)
        max_tokens: Max tokens for completion (defaults to settings.max_tokens)
        timeout: Request timeout in seconds (defaults to settings.llm_timeout)

    Returns:
        LangChain ChatOpenAI instance
    """
    api_key = api_key if api_key is not None else settings.groq_api_key
    if not api_key:
        raise ValueError("GROQ_API_KEY is required to create the chat model")

    model = model or settings.groq_model
    base_url = base_url or settings.groq_base_url
    logger.info(f"✅ LLM: Groq | Model: {model} | Base URL: {base_url} | API key loaded: {mask_api_key(api_key)}")

    return ChatOpenAI(
        model=model,
        api_key=api_key,
        base_url=base_url,
        temperature=temperature if temperature is not None else settings.temperature,
        max_tokens=max_tokens or settings.max_tokens,
        timeout=timeout if timeout is not None else settings.llm_timeout,
        # Completions are not retried: a failed call is reported to the user instead
        max_retries=0,
    )
