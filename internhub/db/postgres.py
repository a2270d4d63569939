"""
PostgreSQL engine and sessions for the entity store.
"""

import logging
from contextlib import contextmanager

from sqlalchemy import create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from internhub.core.config import get_settings
from internhub.core.errors import StoreError

settings = get_settings()
logger = logging.getLogger(__name__)

# Shared by every EntityStore call; pre-ping drops connections the server closed
engine = create_engine(
    settings.postgres_url,
    pool_size=5,
    max_overflow=10,
    pool_pre_ping=True,
    echo=settings.debug
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@contextmanager
def get_db_session():
    """
    One unit of work: commits on success, rolls back on any error.

    SQLAlchemy failures (connection loss, constraint violations the caller
    did not catch) are re-raised as StoreError.
    """
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error("Entity store error: %s", e)
        raise StoreError("The database is unavailable. Please try again.") from e
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def test_postgres_connection() -> bool:
    """Ping PostgreSQL for /health and the connection check script."""
    try:
        with get_db_session() as db:
            return db.execute(text("SELECT 1")).scalar() == 1
    except StoreError as e:
        logger.warning("PostgreSQL connection failed: %s", e.__cause__)
        return False

