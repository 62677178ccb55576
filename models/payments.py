from core.database import Base
from sqlalchemy import (Column, Integer, String, ForeignKey, Numeric, Enum, DateTime)
from sqlalchemy.orm import relationship
from .mixins import TimestampMixin

PAYMENT_METHODS = ("cash", "card", "mobile_money")
PAYMENT_STATUSES = ("pending", "paid", "failed", "refunded")

class Payment(Base, TimestampMixin):
    __tablename__ = "payments"

    #pk
    id = Column(Integer, primary_key=True, index=True)

    #fk
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, unique=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    #relationships
    order = relationship("Order", back_populates="payment")
    user = relationship("User", back_populates="payments")

    amount = Column(Numeric(10, 2), nullable=False)
    method = Column(Enum(*PAYMENT_METHODS, name="payment_method"), nullable=False)
    status = Column(Enum(*PAYMENT_STATUSES, name="payment_status"), default="pending", nullable=False)
    transaction_ref = Column(String(32), unique=True, nullable=False, index=True)
    paid_at = Column(DateTime(timezone=True), nullable=True)
