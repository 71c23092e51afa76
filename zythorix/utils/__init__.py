"""
Utility functions for the Zythorix360 API.
"""

from .error_handling import handle_exception, log_exception
from .validators import validate_email, parse_uuid

__all__ = [
    "handle_exception",
    "log_exception",
    "validate_email",
    "parse_uuid",
]
