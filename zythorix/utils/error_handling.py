"""
Error handling utilities for the Zythorix360 API.
"""

import traceback
import sys
from typing import Optional

from fastapi import HTTPException, status

from zythorix.core.logging import get_logger

logger = get_logger(__name__)

INTERNAL_ERROR = "Internal server error"


def handle_exception(
    exception: Exception,
    log_message: str = "An error occurred",
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
    detail: Optional[str] = None
) -> HTTPException:
    """
    Handle exception and generate appropriate HTTPException

    Args:
        exception: The exception that occurred
        log_message: Message to log
        status_code: HTTP status code to return
        detail: Detail message for the client

    Returns:
        HTTPException to raise. Internal error text is never sent to the client.
    """
    # If it's already an HTTPException, just return it
    if isinstance(exception, HTTPException):
        return exception

    log_exception(exception, log_message)

    return HTTPException(
        status_code=status_code,
        detail=detail or INTERNAL_ERROR
    )


def log_exception(
    exception: Exception,
    message: str = "An error occurred"
) -> None:
    """
    Log exception with formatted traceback
    """
    exc_type, exc_value, exc_traceback = sys.exc_info()

    if exc_traceback is None:
        logger.error(f"{message}: {str(exception)}")
        return

    formatted_exception = traceback.format_exception(exc_type, exc_value, exc_traceback)
    exception_string = "".join(formatted_exception)
    logger.error(f"{message}: {str(exception)}\n{exception_string}")
