"""
Configuration management for the application.
Loads settings from environment variables and the project .env file.
"""

from pathlib import Path
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings
from dotenv import load_dotenv
from loguru import logger

# Find project root (where .env and data/ live)
# This file is at chatty/config/settings.py, so project root is 3 levels up
_project_root = Path(__file__).resolve().parent.parent.parent

PROJECT_ROOT = _project_root

_env_file = _project_root / ".env"
if _env_file.exists():
    load_dotenv(dotenv_path=_env_file, override=True)
    logger.debug(f"Loaded .env from: {_env_file}")
else:
    load_dotenv(override=False)


class Settings(BaseSettings):
    """Application settings from environment variables."""

    # Groq (OpenAI-compatible) LLM configuration
    groq_api_key: str = Field(default="")  # Empty key disables generation
    groq_model: str = Field(default="llama-3.1-8b-instant")
    groq_base_url: str = Field(default="https://api.groq.com/openai/v1")
    max_tokens: int = Field(default=500)
    temperature: float = Field(default=0.7)
    llm_timeout: float = Field(default=30.0)  # Seconds

    # RAG backend
    rag_base_url: str = Field(default="http://localhost:8000")
    rag_timeout: float = Field(default=30.0)  # Seconds, search/chat calls
    rag_health_timeout: float = Field(default=5.0)  # Seconds, health check
    rag_health_cache_seconds: float = Field(default=30.0)
    rag_max_results: int = Field(default=3)

    # Web search
    web_search_enabled: bool = Field(default=True)
    web_search_provider: str = Field(default="duckduckgo")  # Options: "duckduckgo" | "brave"
    web_search_max_results: int = Field(default=3)
    web_search_timeout: int = Field(default=10000)  # Milliseconds
    web_search_api_key: str = Field(default="")  # Required by API-key providers

    # Conversation storage
    max_conversation_messages: int = Field(default=20)
    conversation_db_path: str = Field(default="data/conversations.db")  # "" keeps conversations in memory only
    storage_check_interval_seconds: float = Field(default=30.0)

    # HTTP server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=5000)
    api_prefix: str = Field(default="/api")
    cors_origins: List[str] = Field(default=[
        "http://localhost:3000",  # React dev server
        "http://localhost:3005",
        "http://127.0.0.1:3000",
    ])

    # Logging
    log_level: str = Field(default="INFO")
    log_to_file: bool = Field(default=True)

    class Config:
        env_file = str(_project_root / ".env")
        env_file_encoding = "utf-8"
        extra = "allow"

    @property
    def conversation_db_path_resolved(self) -> str:
        """Absolute SQLite path, or "" when persistence is disabled."""
        if not self.conversation_db_path:
            return ""
        path = Path(self.conversation_db_path)
        if not path.is_absolute():
            path = _project_root / path
        return str(path)


# Create global settings instance
settings = Settings()
