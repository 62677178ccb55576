import os

# Settings are read at import time
os.environ.setdefault("ENV", "testing")
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("ALGORITHM", "HS256")
os.environ.setdefault("LOG_DIR", "logs/test")

import pytest
from decimal import Decimal
from datetime import datetime, timedelta, timezone
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from typing import Generator

from main import app
from core.config import settings
from core.database import Base
from utils.deps import get_db
from models import User, Category, Product, Address

# SYNC SQLite for testing (matches sync service layer)
SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False}
)

TestingSessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)


def make_access_token(user: User, expires_delta: timedelta = timedelta(minutes=15), token_type: str = "access") -> str:
    payload = {
        "sub": user.email,
        "id": user.id,
        "role": user.role,
        "type": token_type,
        "exp": datetime.now(timezone.utc) + expires_delta
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {make_access_token(user)}"}


@pytest.fixture
def session() -> Generator[Session, None, None]:
    """
    Creates a fresh, empty database for each test.
    """
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()

    Base.metadata.drop_all(bind=engine)


@pytest.fixture
async def client(session: Session):
    """
    HTTP client bound to the app, with get_db overridden to the test session.
    """
    def override_get_db():
        try:
            yield session
        finally:
            pass  # Session cleanup handled by session fixture

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


def create_user(session: Session, email: str, role: str = "customer", full_name: str = "Test User") -> User:
    user = User(email=email, full_name=full_name, role=role, phone="+201111111111")
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture
def customer(session: Session) -> User:
    return create_user(session, "customer@example.com", full_name="Amina Customer")


@pytest.fixture
def other_customer(session: Session) -> User:
    return create_user(session, "other@example.com", full_name="Omar Other")


@pytest.fixture
def admin_user(session: Session) -> User:
    return create_user(session, "admin@example.com", role="admin", full_name="Ada Admin")


@pytest.fixture
def customer_headers(customer: User) -> dict:
    return auth_headers(customer)


@pytest.fixture
def admin_headers(admin_user: User) -> dict:
    return auth_headers(admin_user)


@pytest.fixture
def other_headers(other_customer: User) -> dict:
    return auth_headers(other_customer)


@pytest.fixture
def products(session: Session) -> dict:
    """Catalog: burger 10.50, soda 3.00, fries 5.00, and an unavailable soup."""
    category = Category(name="Meals", description="Hot food")
    session.add(category)
    session.flush()

    items = {
        "burger": Product(category_id=category.id, name="Burger", price=Decimal("10.50"), stock=50),
        "soda": Product(category_id=category.id, name="Soda", price=Decimal("3.00"), stock=100),
        "fries": Product(category_id=category.id, name="Fries", price=Decimal("5.00"), stock=80),
        "soup": Product(category_id=category.id, name="Soup", price=Decimal("4.25"), stock=0, status="unavailable"),
    }
    session.add_all(items.values())
    session.commit()
    for product in items.values():
        session.refresh(product)
    return items


@pytest.fixture
def customer_address(session: Session, customer: User) -> Address:
    address = Address(user_id=customer.id, street="12 Nile St", city="Cairo", region="Giza")
    session.add(address)
    session.commit()
    session.refresh(address)
    return address


@pytest.fixture
def token_for():
    """Token factory for expired or wrong-type token tests."""
    return make_access_token
