from models.users import User
from models.addresses import Address
from models.categories import Category
from models.products import Product
from models.cart_items import CartItem
from models.orders import Order
from models.order_items import OrderItem
from models.payments import Payment

__all__ = ["User", "Address", "Category", "Product", "CartItem", "Order", "OrderItem", "Payment"]
