"""
Logging utility functions and helpers.
"""

import logging
from typing import Any, Dict


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Usage:
        from utils.logger import get_logger
        logger = get_logger(__name__)
    """
    return logging.getLogger(name)


SENSITIVE_FIELDS = {
    'password', 'token', 'secret', 'authorization', 'card_number', 'cvv',
    'idempotency_key'
}


def sanitize_log_data(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Mask sensitive values before they reach the log files.

    Tokens and keys keep their first 8 characters so a request can still be
    matched up while debugging; everything else sensitive is fully redacted.
    """
    sanitized = data.copy()

    for key, value in sanitized.items():
        lowered = key.lower()
        if any(sensitive in lowered for sensitive in SENSITIVE_FIELDS):
            if isinstance(value, str):
                if ('token' in lowered or 'key' in lowered) and len(value) > 8:
                    sanitized[key] = f"{value[:8]}..."
                else:
                    sanitized[key] = "***REDACTED***"

        elif isinstance(value, dict):
            sanitized[key] = sanitize_log_data(value)

    return sanitized
