"""
FastAPI dependencies for the Zythorix360 API.
Contains reusable dependency functions that can be used across API endpoints.
"""

import uuid
from typing import Optional

from fastapi import Depends, HTTPException, status

from zythorix.core.config import settings
from zythorix.core.logging import get_logger
from zythorix.core.security import AuthenticatedUser, get_current_user
from zythorix.services.razorpay_service import RazorpayService

# Initialize logger
logger = get_logger(__name__)


def is_admin_email(email: Optional[str]) -> bool:
    if not email:
        return False
    return email.strip().lower() in settings.admin_emails


async def require_admin(
    current_user: AuthenticatedUser = Depends(get_current_user)
) -> AuthenticatedUser:
    """
    Check that the current user is on the admin allow-list

    Raises:
        HTTPException: 403 if the user is authenticated but not an admin
    """
    if not is_admin_email(current_user.email):
        logger.warning(f"Admin access denied for user: {current_user.email}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )
    return current_user


def ensure_same_user(current_user: AuthenticatedUser, user_id: Optional[str]) -> None:
    """
    Reject requests whose declared user id differs from the token subject

    Raises:
        HTTPException: 401 if user_id is missing, malformed or not the caller
    """
    if not user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    try:
        declared = uuid.UUID(str(user_id))
    except ValueError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    if declared != current_user.id:
        logger.warning(f"User id mismatch: token {current_user.id}, body {user_id}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")


def get_payment_gateway() -> RazorpayService:
    """
    Gateway client built from settings; overridden in tests
    """
    return RazorpayService(
        key_id=settings.RAZORPAY_KEY_ID,
        key_secret=settings.RAZORPAY_KEY_SECRET.get_secret_value(),
        base_url=settings.RAZORPAY_API_URL,
        timeout=settings.RAZORPAY_TIMEOUT,
    )
