# zythorix/core/security.py

"""
Security utilities for the Zythorix360 API.
Handles identity-provider token validation, influencer session tokens and
password hashing.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Dict, Any, Optional

import bcrypt
import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from .config import settings
from .logging import get_logger

# Initialize logger
logger = get_logger(__name__)

# 401 is raised by the dependencies below, not by the scheme itself
security = HTTPBearer(auto_error=False)

INFLUENCER_TOKEN_TYPE = "influencer"


@dataclass(frozen=True)
class AuthenticatedUser:
    """Identity extracted from a verified user bearer token"""
    id: uuid.UUID
    email: Optional[str] = None


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def decode_user_token(token: str) -> AuthenticatedUser:
    """
    Decode and validate a bearer token issued by the identity provider

    Args:
        token: The JWT from the Authorization header

    Returns:
        The authenticated user

    Raises:
        HTTPException: 401 if the token is invalid, expired or has no usable subject
    """
    try:
        payload = jwt.decode(
            token,
            settings.SUPABASE_JWT_SECRET.get_secret_value(),
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.SUPABASE_JWT_AUDIENCE,
        )
    except jwt.ExpiredSignatureError:
        logger.warning("User token expired")
        raise _unauthorized("Token expired")
    except jwt.InvalidTokenError as e:
        logger.warning(f"Invalid user token: {str(e)}")
        raise _unauthorized("Invalid token")

    subject = payload.get("sub")
    if not subject:
        logger.warning("User token without subject")
        raise _unauthorized("Invalid token: missing subject")

    try:
        user_id = uuid.UUID(str(subject))
    except ValueError:
        logger.warning(f"User token subject is not a UUID: {subject}")
        raise _unauthorized("Invalid token: malformed subject")

    return AuthenticatedUser(id=user_id, email=payload.get("email"))


def create_influencer_token(influencer_id: uuid.UUID, coupon_code: str, name: str) -> str:
    """
    Create a signed session token for an influencer

    Args:
        influencer_id: Influencer primary key
        coupon_code: The influencer's coupon code
        name: Display name

    Returns:
        The encoded JWT, valid for INFLUENCER_TOKEN_EXPIRE_DAYS
    """
    now = datetime.now(timezone.utc)
    to_encode = {
        "influencerId": str(influencer_id),
        "couponCode": coupon_code,
        "name": name,
        "type": INFLUENCER_TOKEN_TYPE,
        "iat": now,
        "exp": now + timedelta(days=settings.INFLUENCER_TOKEN_EXPIRE_DAYS),
    }
    return jwt.encode(
        to_encode,
        settings.INFLUENCER_JWT_SECRET.get_secret_value(),
        algorithm=settings.JWT_ALGORITHM,
    )


def decode_influencer_token(token: str) -> Dict[str, Any]:
    """
    Decode and validate an influencer session token

    Raises:
        HTTPException: 401 if the token is invalid, expired or of the wrong type
    """
    try:
        payload = jwt.decode(
            token,
            settings.INFLUENCER_JWT_SECRET.get_secret_value(),
            algorithms=[settings.JWT_ALGORITHM],
        )
    except jwt.ExpiredSignatureError:
        raise _unauthorized("Token expired")
    except jwt.InvalidTokenError as e:
        logger.warning(f"Invalid influencer token: {str(e)}")
        raise _unauthorized("Invalid token")

    if payload.get("type") != INFLUENCER_TOKEN_TYPE or not payload.get("influencerId"):
        raise _unauthorized("Invalid token")

    return payload


def hash_password(password: str) -> str:
    """
    Create a bcrypt hash of a password

    Args:
        password: Plain text password to hash

    Returns:
        Hashed password
    """
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a password against a bcrypt hash
    """
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is not a valid bcrypt hash")
        return False


def _bearer_token(credentials: Optional[HTTPAuthorizationCredentials]) -> str:
    if not credentials or not credentials.credentials:
        raise _unauthorized("Unauthorized")
    return credentials.credentials


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> AuthenticatedUser:
    """
    FastAPI dependency returning the caller identified by the bearer token
    """
    return decode_user_token(_bearer_token(credentials))


async def get_current_influencer_claims(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Dict[str, Any]:
    """
    FastAPI dependency returning the claims of an influencer session token
    """
    return decode_influencer_token(_bearer_token(credentials))
