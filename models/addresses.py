from core.database import Base
from sqlalchemy import (Column, Integer, String, ForeignKey)
from sqlalchemy.orm import relationship
from .mixins import CreatedAtMixin

class Address(Base, CreatedAtMixin):
    __tablename__ = "addresses"

    #pk
    id = Column(Integer, primary_key=True, index=True)

    #fk
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    #relationships
    user = relationship("User", back_populates="addresses")
    orders = relationship("Order", back_populates="address")

    street = Column(String(150), nullable=False)
    city = Column(String(100), nullable=False)
    region = Column(String(100))
    notes = Column(String(255))

    def as_text(self) -> str:
        parts = [self.street, self.city, self.region]
        return ", ".join(p for p in parts if p)
