"""
Response generator - builds the augmented prompt and calls the LLM

``generate`` never raises: every failure is classified into a
``GenerationFailure`` and paired with a conversational reply, so callers
always have something to show and can still tell a fallback from a real
answer.
"""

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

import httpx
import openai
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from loguru import logger

from chatty.agents.responder.prompts import SYSTEM_PROMPT, build_prompt
from chatty.config.constants import ERRORS, MESSAGES, SENDERS
from chatty.config.settings import settings
from chatty.llm.client import create_llm
from chatty.llm.response_utils import extract_text_from_response, extract_total_tokens


class GenerationFailure(str, Enum):
    NOT_CONFIGURED = "not_configured"
    AUTH = "auth"
    RATE_LIMIT = "rate_limit"
    MALFORMED = "malformed"
    UPSTREAM = "upstream"
    NETWORK = "network"


FAILURE_MESSAGES = {
    GenerationFailure.NOT_CONFIGURED: MESSAGES.NOT_CONFIGURED,
    GenerationFailure.AUTH: MESSAGES.API_CONFIGURATION_ERROR,
    GenerationFailure.RATE_LIMIT: MESSAGES.RATE_LIMITED,
    GenerationFailure.MALFORMED: MESSAGES.TECHNICAL_ERROR,
    GenerationFailure.UPSTREAM: MESSAGES.TECHNICAL_ERROR,
    GenerationFailure.NETWORK: MESSAGES.TECHNICAL_ERROR,
}


def classify_status(status_code: int) -> GenerationFailure:
    if status_code == 401:
        return GenerationFailure.AUTH
    if status_code == 429:
        return GenerationFailure.RATE_LIMIT
    return GenerationFailure.UPSTREAM


@dataclass
class GenerationResult:
    """Outcome of one completion call"""
    response: str
    model: str
    tokens: Optional[int] = None
    failure: Optional[GenerationFailure] = None
    error: Optional[str] = None
    status_code: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.failure is None


def format_history(history: Sequence[Dict[str, Any]]) -> List[BaseMessage]:
    """Map stored messages to alternating user/assistant chat turns."""
    turns: List[BaseMessage] = []
    for message in history:
        text = message.get("text", "")
        if message.get("sender") == SENDERS.USER:
            turns.append(HumanMessage(content=text))
        else:
            turns.append(AIMessage(content=text))
    return turns


class ResponseGenerator:
    """Generates assistant replies with optional RAG, web and attachment context."""

    def __init__(
        self,
        llm: Optional[BaseChatModel] = None,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        system_prompt: str = SYSTEM_PROMPT
    ):
        """
        Initialize the generator.

        Args:
            llm: Chat model override (tests); built with create_llm when omitted
            api_key: Groq API key; without it generation is disabled
            model: Model name reported in results
            max_tokens: Completion token limit
            temperature: Sampling temperature
            system_prompt: Persona prompt every request starts from
        """
        self.api_key = api_key if api_key is not None else settings.groq_api_key
        self.model = model or settings.groq_model
        self.max_tokens = max_tokens or settings.max_tokens
        self.temperature = temperature if temperature is not None else settings.temperature
        self.system_prompt = system_prompt

        if llm is None and self.api_key:
            llm = create_llm(
                api_key=self.api_key,
                model=self.model,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        self.llm = llm

        if not self.is_configured():
            logger.warning("⚠️  GROQ_API_KEY not set - AI responses are disabled")

    def is_configured(self) -> bool:
        return bool(self.api_key) and self.llm is not None

    def build_prompt(
        self,
        rag_context: Optional[Dict[str, Any]] = None,
        web_context: Optional[Dict[str, Any]] = None,
        attachments: Optional[List[Any]] = None
    ) -> str:
        return build_prompt(self.system_prompt, rag_context, web_context, attachments)

    def _failure(
        self,
        failure: GenerationFailure,
        error: str,
        status_code: Optional[int] = None
    ) -> GenerationResult:
        return GenerationResult(
            response=FAILURE_MESSAGES[failure],
            model=self.model,
            failure=failure,
            error=error,
            status_code=status_code,
        )

    async def generate(
        self,
        user_message: str,
        history: Optional[Sequence[Dict[str, Any]]] = None,
        rag_context: Optional[Dict[str, Any]] = None,
        web_context: Optional[Dict[str, Any]] = None,
        attachments: Optional[List[Any]] = None
    ) -> GenerationResult:
        """
        Generate a reply for ``user_message``.

        Args:
            user_message: The new user turn
            history: Previous messages ({sender, text, timestamp})
            rag_context: Knowledge-base context block
            web_context: Web search context block
            attachments: Files attached to the message

        Returns:
            GenerationResult; ``failure`` is set when the reply is a canned fallback
        """
        if not self.is_configured():
            return self._failure(GenerationFailure.NOT_CONFIGURED, ERRORS.API_KEY_MISSING)

        messages: List[BaseMessage] = [
            SystemMessage(content=self.build_prompt(rag_context, web_context, attachments)),
            *format_history(history or []),
            HumanMessage(content=user_message),
        ]

        try:
            response = await self.llm.ainvoke(messages)
        except openai.APIStatusError as e:
            logger.error(f"Groq API error (HTTP {e.status_code}): {e.message}")
            return self._failure(classify_status(e.status_code), f"HTTP {e.status_code}: {e.message}", e.status_code)
        except (openai.APIConnectionError, httpx.HTTPError, asyncio.TimeoutError, OSError) as e:
            logger.error(f"Groq API connection error: {e!r}")
            return self._failure(GenerationFailure.NETWORK, str(e) or e.__class__.__name__)
        except (KeyError, IndexError, TypeError, ValueError, AttributeError) as e:
            logger.error(f"Unexpected response structure from Groq API: {e!r}")
            return self._failure(GenerationFailure.MALFORMED, f"Unexpected response structure: {e}")
        except Exception as e:
            logger.exception("Groq API call failed")
            return self._failure(GenerationFailure.UPSTREAM, str(e) or e.__class__.__name__)

        text = extract_text_from_response(response).strip()
        if not text:
            logger.error("Groq API returned an empty completion")
            return self._failure(GenerationFailure.MALFORMED, "Unexpected response structure: empty completion")

        tokens = extract_total_tokens(response)
        logger.info(f"Generated reply ({len(text)} chars, tokens={tokens})")
        return GenerationResult(response=text, model=self.model, tokens=tokens)

    async def generate_title(self, prompt: str) -> Optional[str]:
        """Ask the model for a short conversation title; None when it can't."""
        result = await self.generate(prompt, [])
        return result.response if result.ok else None

    def get_status(self) -> Dict[str, Any]:
        return {
            "configured": self.is_configured(),
            "model": self.model,
            "maxTokens": self.max_tokens,
            "temperature": self.temperature,
        }
