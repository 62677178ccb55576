from datetime import datetime, timedelta, timezone
from jose import jwt
from starlette.requests import Request
from core.config import settings
from middleware.rate_limiter import get_user_id


def make_request(authorization=None):
    headers = [(b"authorization", authorization.encode())] if authorization else []
    return Request({
        "type": "http",
        "method": "GET",
        "path": "/orders",
        "headers": headers,
        "client": ("203.0.113.9", 5000),
    })


def token(token_type="access", user_id=7):
    return jwt.encode({
        "sub": "customer@example.com",
        "id": user_id,
        "type": token_type,
        "exp": datetime.now(timezone.utc) + timedelta(minutes=5)
    }, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def test_access_token_keys_by_user():
    assert get_user_id(make_request(f"Bearer {token()}")) == "user:7"


def test_refresh_token_falls_back_to_ip():
    assert get_user_id(make_request(f"Bearer {token('refresh')}")) == "203.0.113.9"


def test_garbage_token_falls_back_to_ip():
    assert get_user_id(make_request("Bearer not-a-jwt")) == "203.0.113.9"


def test_anonymous_request_uses_ip():
    assert get_user_id(make_request()) == "203.0.113.9"
