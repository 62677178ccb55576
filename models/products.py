from core.database import Base
from sqlalchemy import (Column, Integer, String, Text, ForeignKey, Numeric, Enum)
from sqlalchemy.orm import relationship
from .mixins import TimestampMixin

PRODUCT_STATUSES = ("available", "unavailable")

class Product(Base, TimestampMixin):
    __tablename__ = "products"

    #pk
    id = Column(Integer, primary_key=True, index=True)

    #fk
    category_id = Column(Integer, ForeignKey("categories.id"))

    #relationships
    order_items = relationship("OrderItem", back_populates="product")
    category = relationship("Category", back_populates="products")
    cart_items = relationship("CartItem", back_populates="product")

    name = Column(String(150), nullable=False, index=True)
    description = Column(Text)
    price = Column(Numeric(10, 2), nullable=False)
    image_url = Column(String(255))
    stock = Column(Integer, default=0)
    status = Column(Enum(*PRODUCT_STATUSES, name="product_status"), default="available", nullable=False)

    @property
    def is_available(self) -> bool:
        return self.status == "available"
