"""
FastAPI Development Server

Run the Chatty API in development mode with auto-reload.

Usage:
    python scripts/run-dev.py
"""

import sys
import os
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))
os.chdir(project_root)

import uvicorn
from loguru import logger

from chatty.config.settings import settings


def main():
    """Start the FastAPI development server"""
    base_url = f"http://localhost:{settings.port}"
    logger.info("="*80)
    logger.info("Chatty - API Server")
    logger.info("="*80)
    logger.info(f"Server will be available at: {base_url}")
    logger.info(f"API Documentation: {base_url}/docs")
    logger.info(f"Health Check: {base_url}{settings.api_prefix}/health")
    logger.info(f"Chat Streaming: POST {base_url}{settings.api_prefix}/chat/stream")
    logger.info("Press CTRL+C to stop the server")
    logger.info("="*80)

    uvicorn.run(
        "chatty.api.app:app",
        host=settings.host,
        port=settings.port,
        reload=True,
        log_level="info",
        access_log=True,
        reload_dirs=[str(project_root / "chatty")]
    )


if __name__ == "__main__":
    main()
