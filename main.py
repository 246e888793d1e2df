"""
FastAPI main application entry point.
"""
import sys
import uvicorn

# Import logging system first
from core.logging import setup_logging, get_logger, database_logger

# Setup logging early
setup_logging()
logger = get_logger("main")

from app import app
from core.config import settings
from db_config import init_db, check_database_connection


def warn_on_missing_configuration():
    if not settings.database_url:
        logger.warning("DATABASE_URL is not set, using the local SQLite database", url=settings.sqlite_fallback_url)
    if not settings.gemini_api_key:
        logger.warning("GEMINI_API_KEY is not set, the chatbot will answer with a static message")


def prepare_database() -> bool:
    """Create missing tables; returns False when the database is unreachable."""
    if not check_database_connection():
        database_logger.error("Database is unreachable", environment=settings.environment)
        return False

    try:
        init_db()
    except Exception as e:
        logger.error("Error initializing database", error=str(e), exc_info=True)
        database_logger.error("Database initialization failed", error=str(e), exc_info=True)
        return False

    logger.info("Database initialization completed successfully")
    return True


@app.on_event("startup")
async def startup_db_client():
    """Initialize database tables on startup."""
    logger.info("Starting database initialization")
    warn_on_missing_configuration()

    if not prepare_database() and settings.is_production:
        # Lifespan failure makes uvicorn exit with a non-zero status
        raise RuntimeError("Database unavailable in production")


# Run the application
if __name__ == "__main__":
    if settings.is_production and not check_database_connection():
        logger.critical("Cannot start in production without a database")
        sys.exit(1)

    logger.info("Starting uvicorn server", host="0.0.0.0", port=settings.port)
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=False,
    )
