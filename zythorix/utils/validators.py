"""
Validation utilities for the Zythorix360 API.
"""

import re
import uuid
from typing import Tuple, Optional

from zythorix.core.logging import get_logger

logger = get_logger(__name__)

EMAIL_PATTERN = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')


def validate_email(email: str) -> Tuple[bool, Optional[str]]:
    """
    Validate email format

    Args:
        email: Email to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not email:
        return False, "Email is required"

    if not EMAIL_PATTERN.match(email):
        return False, "Invalid email format"

    # RFC 3696
    if len(email) > 320:
        return False, "Email is too long"

    return True, None


def parse_uuid(value: Optional[str]) -> Optional[uuid.UUID]:
    """UUID from a request value, or None when absent or malformed"""
    if not value:
        return None
    try:
        return uuid.UUID(str(value))
    except ValueError:
        logger.debug(f"Malformed UUID value: {value}")
        return None
