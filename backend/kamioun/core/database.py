"""
Database access (SQLAlchemy ORM)

This module centralizes database access:
- Engine and session factory bound to settings.DATABASE_URL
- Declarative Base shared by every model in kamioun.models
- get_db FastAPI dependency
- Connectivity check with retry, used by /health

Author: Kamioun
Updated: 2025-03-02
"""
import logging
import time

from sqlalchemy import create_engine, text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import declarative_base, sessionmaker

from .config import settings

logger = logging.getLogger(__name__)


# ============================================================================
# SQLAlchemy Configuration
# ============================================================================

def _engine_kwargs(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_pre_ping": True,  # Verify connection before using it
        "pool_size": 10,
        "max_overflow": 20,
    }


engine = create_engine(settings.DATABASE_URL, **_engine_kwargs(settings.DATABASE_URL))

# Session Factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base for models
Base = declarative_base()


def get_db():
    """
    FastAPI dependency that yields a SQLAlchemy session

    Usage:
        @router.get("/items")
        def read_items(db: Session = Depends(get_db)):
            ...
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None):
    """Create all tables. Production schemas are managed by migrations."""
    # Import models so they register on Base.metadata
    from kamioun import models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)


# ============================================================================
# Connectivity check with retry
# ============================================================================

def check_database_connection(bind=None, max_retries=3, retry_delay=1.0) -> float:
    """
    Run SELECT 1 against the database, retrying on connection failures

    Args:
        bind: Engine to check (defaults to the application engine)
        max_retries: Maximum number of attempts (default: 3)
        retry_delay: Initial delay between retries in seconds (default: 1.0)

    Returns:
        Query latency in milliseconds

    Raises:
        sqlalchemy.exc.OperationalError: If all retry attempts fail
    """
    bind = bind or engine
    last_error = None

    for attempt in range(1, max_retries + 1):
        try:
            logger.debug(f"Database connection attempt {attempt}/{max_retries}")
            start = time.time()
            with bind.connect() as conn:
                conn.execute(text("SELECT 1"))
            return round((time.time() - start) * 1000, 2)

        except OperationalError as e:
            last_error = e
            logger.warning(f"Connection error on attempt {attempt}/{max_retries}: {e}")

            # Don't retry on last attempt
            if attempt < max_retries:
                # Exponential backoff
                delay = retry_delay * (2 ** (attempt - 1))
                logger.info(f"Retrying in {delay:.2f} seconds...")
                time.sleep(delay)
            else:
                logger.error(f"All {max_retries} connection attempts failed")

    raise last_error
