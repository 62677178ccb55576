from typing import Optional
from slowapi import Limiter
from slowapi.util import get_remote_address
from fastapi import Request
from jose import jwt, JWTError
from core.config import settings

BEARER_PREFIX = "Bearer "


def _token_user_id(request: Request) -> Optional[int]:
    header = request.headers.get("Authorization", "")
    if not header.startswith(BEARER_PREFIX):
        return None

    try:
        payload = jwt.decode(header[len(BEARER_PREFIX):], settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None

    if payload.get("type") != "access":
        return None
    return payload.get("id")


def get_user_id(request: Request) -> str:
    """
    Bucket per authenticated customer so a shared IP (office, mobile carrier)
    does not throttle everyone behind it. Anonymous or bad tokens fall back
    to the client IP.
    """
    user_id = _token_user_id(request)
    if user_id:
        return f"user:{user_id}"
    return get_remote_address(request)


limiter = Limiter(
    key_func=get_user_id,
    default_limits=["200/hour"],
    enabled=settings.ENV != "testing"
)
