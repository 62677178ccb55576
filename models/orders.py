from core.database import Base
from sqlalchemy.orm import relationship
from sqlalchemy import (Column, Integer, String, ForeignKey, Numeric, Enum, UniqueConstraint)
from .mixins import TimestampMixin

ORDER_STATUSES = ("pending", "preparing", "delivering", "completed", "cancelled")

class Order(Base, TimestampMixin):
    __tablename__ = "orders"
    __table_args__ = (
        UniqueConstraint("user_id", "idempotency_key", name="uq_orders_user_idempotency_key"),
    )

    #pk
    id = Column(Integer, primary_key=True, index=True)

    #fk
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    address_id = Column(Integer, ForeignKey("addresses.id"), nullable=True)

    #relationships
    user = relationship("User", back_populates="orders")
    address = relationship("Address", back_populates="orders")
    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan")
    payment = relationship("Payment", back_populates="order", uselist=False, cascade="all, delete-orphan")

    order_number = Column(String(32), unique=True, nullable=False, index=True)
    delivery_address = Column(String(255))
    total_amount = Column(Numeric(10, 2), nullable=False)
    status = Column(Enum(*ORDER_STATUSES, name="order_status"), default="pending", nullable=False, index=True)
    idempotency_key = Column(String(64), nullable=True)
