"""
Middleware package exports.
"""

from middleware.request_id import RequestIDMiddleware, REQUEST_ID_HEADER, get_request_id
from middleware.rate_limiter import limiter, get_user_id

__all__ = ["RequestIDMiddleware", "REQUEST_ID_HEADER", "get_request_id", "limiter", "get_user_id"]
