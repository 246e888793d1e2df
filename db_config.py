"""
Database configuration module using centralized settings.
"""
from sqlalchemy import create_engine, event, text
from sqlalchemy.orm import sessionmaker, declarative_base

from core.config import settings
from core.logging import get_logger

logger = get_logger("database")


def _resolve_database_url() -> str:
    if settings.database_url:
        return settings.database_url
    logger.warning(
        "DATABASE_URL not set, falling back to local SQLite database",
        url=settings.sqlite_fallback_url,
    )
    return settings.sqlite_fallback_url


SQLALCHEMY_DATABASE_URL = _resolve_database_url()

if SQLALCHEMY_DATABASE_URL.startswith("sqlite"):
    # TestClient and uvicorn's threadpool share connections across threads
    engine = create_engine(
        SQLALCHEMY_DATABASE_URL,
        connect_args={"check_same_thread": False},
        echo=settings.enable_sql_logging,
    )

    @event.listens_for(engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()
else:
    engine = create_engine(
        SQLALCHEMY_DATABASE_URL,
        pool_size=10,
        max_overflow=20,
        pool_pre_ping=True,
        pool_recycle=3600,
        echo=settings.enable_sql_logging,
    )

logger.info("Database configuration loaded", dialect=engine.dialect.name)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def init_db():
    """Create all tables known to the model metadata."""
    import models  # noqa: F401  registers the mappers on Base

    Base.metadata.create_all(bind=engine)
    logger.info("Database tables ensured", tables=len(Base.metadata.tables))


def check_database_connection() -> bool:
    """Run a trivial query; return False instead of raising."""
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error("Database connection check failed", error=str(e))
        return False


def get_db():
    """Yield a request scoped session; roll back if the request fails."""
    db = SessionLocal()
    try:
        logger.debug("Database session created")
        yield db
    except Exception as e:
        logger.error("Database session error", error=str(e))
        db.rollback()
        raise
    finally:
        db.close()
        logger.debug("Database session closed")
