#!/usr/bin/env python3
"""Startup script for the value cards game backend"""

import logging
import os

import uvicorn

logger = logging.getLogger(__name__)


def main():
    port = int(os.getenv("PORT", 8000))
    host = os.getenv("HOST", "0.0.0.0")

    logging.basicConfig(level=os.getenv("LOG_LEVEL", "info").upper())
    logger.info(f"Starting value cards backend on {host}:{port}")
    logger.info(f"Health check available at: http://{host}:{port}/health")
    logger.info(f"WebSocket endpoint: ws://{host}:{port}/ws")
    if not os.getenv("VALUECARDS_CARD_CATALOG"):
        logger.warning("VALUECARDS_CARD_CATALOG is not set; analysis endpoint will be unavailable")

    uvicorn.run(
        "valuecards_engine.ws.server:app",
        host=host,
        port=port,
        reload=os.getenv("RELOAD", "false").lower() == "true",
        log_level=os.getenv("LOG_LEVEL", "info").lower()
    )


if __name__ == "__main__":
    main()
