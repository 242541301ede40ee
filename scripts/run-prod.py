"""
FastAPI Production Server

Run the Chatty API in production mode.

Usage:
    python scripts/run-prod.py
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
    """Start the FastAPI production server"""
    logger.info("="*80)
    logger.info("Chatty - API Server (Production)")
    logger.info("="*80)
    logger.info(f"Listening on {settings.host}:{settings.port} (API prefix {settings.api_prefix})")
    logger.info("="*80)

    uvicorn.run(
        "chatty.api.app:app",
        host=settings.host,
        port=settings.port,
        reload=False,
        log_level="warning",
        access_log=False
    )


if __name__ == "__main__":
    main()
