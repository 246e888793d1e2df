#!/usr/bin/env python3
"""
Production run script for the SkillCircle API.
"""
import os
import sys
import signal
from pathlib import Path

# Add the project root to the Python path
sys.path.insert(0, str(Path(__file__).parent.parent))

import uvicorn
from core.logging import setup_logging, get_logger
from core.config import settings

# Setup logging first
setup_logging()
logger = get_logger("production")


def handle_signal(signum, frame):
    """Handle shutdown signals gracefully."""
    logger.info("Received shutdown signal", signal=signum)
    sys.exit(0)


def main():
    """Main entry point for production deployment."""
    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    logger.info("Starting SkillCircle API",
                version=settings.app_version,
                environment=settings.environment,
                debug=settings.debug)

    required_vars = ["DATABASE_URL", "JWT_SECRET_KEY"]
    missing_vars = [var for var in required_vars if not os.getenv(var)]
    if missing_vars:
        logger.error("Missing required environment variables", missing=missing_vars)
        sys.exit(1)

    if not settings.gemini_api_key:
        logger.warning("GEMINI_API_KEY is not set, the chatbot will answer with a static message")

    # Log configuration (without sensitive data)
    logger.info("Configuration loaded",
                log_level=settings.log_level,
                cors_origins=settings.allowed_origins,
                enable_security_headers=settings.enable_security_headers,
                enable_rate_limiting=settings.enable_rate_limiting)

    uvicorn_config = {
        "app": "main:app",
        "host": "0.0.0.0",
        "port": settings.port,
        "workers": int(os.getenv("WORKERS", "1")),
        "log_level": settings.log_level.lower(),
        "access_log": settings.enable_request_logging,
        "reload": False,
    }

    ssl_keyfile = os.getenv("SSL_KEYFILE")
    ssl_certfile = os.getenv("SSL_CERTFILE")

    if ssl_keyfile and ssl_certfile:
        uvicorn_config.update({
            "ssl_keyfile": ssl_keyfile,
            "ssl_certfile": ssl_certfile,
        })
        logger.info("SSL enabled", certfile=ssl_certfile)

    logger.info("Starting uvicorn server", port=uvicorn_config["port"], workers=uvicorn_config["workers"])

    try:
        uvicorn.run(**uvicorn_config)
    except Exception as e:
        logger.error("Failed to start server", error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
