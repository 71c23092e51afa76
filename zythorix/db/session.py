# zythorix/db/session.py

from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import NullPool

from zythorix.core.config import settings
from zythorix.core.logging import get_logger

logger = get_logger(__name__)

DATABASE_URL = settings.DATABASE_URL


def _connect_args(url: str) -> dict:
    if url.startswith("postgresql"):
        return {"sslmode": settings.DATABASE_SSLMODE}
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


try:
    # Each checkout is a fresh connection; the managed database does the pooling
    engine = create_engine(
        DATABASE_URL,
        echo=settings.DEBUG,
        pool_pre_ping=True,
        poolclass=NullPool,
        connect_args=_connect_args(DATABASE_URL),
    )

    # Mask sensitive parts for logging
    database_url_masked = DATABASE_URL.split("@")[-1] if "@" in DATABASE_URL else DATABASE_URL.split(":")[0]
    logger.info(f"Database engine created for {database_url_masked}")

except Exception as e:
    logger.error(f"Failed to create database engine: {e}")
    raise

# Configure a session factory
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)


def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency that yields a database session and ensures it's closed.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
