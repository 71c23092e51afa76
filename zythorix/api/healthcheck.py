"""
Health check and status endpoints for the Zythorix360 API.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from zythorix.core.config import settings
from zythorix.core.logging import get_logger
from zythorix.db.session import get_db

# Initialize logger
logger = get_logger(__name__)

# Create router
router = APIRouter()


def _environment() -> str:
    return "production" if settings.PRODUCTION else "development"


@router.get("/health", tags=["Health"])
async def healthcheck():
    """
    Health check endpoint to verify the API is running.

    Returns:
        Status information about the application
    """
    return {
        "status": "ok",
        "version": settings.VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": _environment()
    }


@router.get("/status", tags=["Health"])
async def status(db: Session = Depends(get_db)):
    """
    Extended status endpoint that checks database connectivity.
    """
    db_status = "ok"
    try:
        db.execute(text("SELECT 1")).fetchone()
    except SQLAlchemyError as e:
        logger.error(f"Database connection check failed: {str(e)}")
        db_status = "error"

    return {
        "status": "ok" if db_status == "ok" else "degraded",
        "version": settings.VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": _environment(),
        "components": {
            "database": db_status
        }
    }
