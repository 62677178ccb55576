from core.database import Base
from sqlalchemy import (Column, Integer, String, Boolean)
from sqlalchemy.orm import relationship
from .mixins import TimestampMixin

class User(Base, TimestampMixin):
    """
    Account identity as seen by the ordering service.

    Credentials and token issuance live in the auth service; this table only
    holds what ownership checks and admin listings need.
    """
    __tablename__ = "users"

    #pk
    id = Column(Integer, primary_key=True, index=True)

    #relationships
    orders = relationship("Order", back_populates="user")
    cart_items = relationship("CartItem", back_populates="user", cascade="all, delete-orphan")
    addresses = relationship("Address", back_populates="user", cascade="all, delete-orphan")
    payments = relationship("Payment", back_populates="user")

    email = Column(String(150), unique=True, nullable=False, index=True)
    full_name = Column(String(120), nullable=False)
    phone = Column(String(20))
    role = Column(String(20), default="customer", nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
