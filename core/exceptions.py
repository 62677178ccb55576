"""
Domain exceptions for cart, checkout and payment flows.

Every error carries an HTTP status and a client-safe message. Handlers in
main.py turn them into the standard response envelope, so services never
build HTTP responses themselves.

Hierarchy:
    FoodOrderError
    ├── CartError
    │   ├── ProductNotFoundError
    │   ├── CartItemNotFoundError
    │   └── InvalidQuantityError
    ├── CheckoutError
    │   ├── EmptyCartError
    │   ├── InvalidTotalError
    │   ├── ProductUnavailableError
    │   ├── InvalidAddressError
    │   ├── IdentifierExhaustedError
    │   └── OrderCreationFailedError
    ├── OrderNotFoundError
    ├── AccessDeniedError
    ├── PaymentNotFoundError
    └── InvalidStatusError
"""
from typing import Any, Dict, Optional
from starlette import status


class FoodOrderError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message: Human-readable message, safe to return to the client
        code: Machine-readable error code
        status_code: HTTP status used by the exception handler
        details: Extra context for logs (never sent to the client)
    """

    default_code: str = "ERROR"
    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "Request could not be processed"

    def __init__(
        self,
        message: Optional[str] = None,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message or self.default_message
        self.code = code or self.default_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


# Cart

class CartError(FoodOrderError):
    default_code = "CART_ERROR"


class ProductNotFoundError(CartError):
    default_code = "PRODUCT_NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Product not found or unavailable"


class CartItemNotFoundError(CartError):
    default_code = "CART_ITEM_NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Item is not in your cart"


class InvalidQuantityError(CartError):
    default_code = "INVALID_QUANTITY"
    default_message = "Quantity must not be negative"


# Checkout

class CheckoutError(FoodOrderError):
    default_code = "CHECKOUT_ERROR"


class EmptyCartError(CheckoutError):
    default_code = "EMPTY_CART"
    default_message = "Cart is empty. Add items before placing order."


class InvalidTotalError(CheckoutError):
    default_code = "INVALID_TOTAL"
    default_message = "Order total must be greater than zero"


class ProductUnavailableError(CheckoutError):
    default_code = "PRODUCT_UNAVAILABLE"

    def __init__(self, product_id: int, product_name: Optional[str] = None):
        label = product_name or f"Product #{product_id}"
        super().__init__(
            message=f"{label} is no longer available. Remove it from your cart to continue.",
            details={"product_id": product_id},
        )
        self.product_id = product_id


class InvalidAddressError(CheckoutError):
    default_code = "INVALID_ADDRESS"
    default_message = "Delivery address not found"


class IdentifierExhaustedError(CheckoutError):
    """Raised when no free reference could be generated within the retry budget."""
    default_code = "IDENTIFIER_EXHAUSTED"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Failed to create order. Please try again."


class OrderCreationFailedError(CheckoutError):
    default_code = "ORDER_CREATION_FAILED"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Failed to create order. Please try again."


# Orders and payments

class OrderNotFoundError(FoodOrderError):
    default_code = "ORDER_NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Order not found"


class AccessDeniedError(FoodOrderError):
    default_code = "FORBIDDEN"
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "You do not have permission to access this resource"


class PaymentNotFoundError(FoodOrderError):
    default_code = "PAYMENT_NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Payment not found"


class InvalidStatusError(FoodOrderError):
    default_code = "INVALID_STATUS"

    def __init__(self, value: str, allowed):
        super().__init__(
            message=f"Invalid status '{value}'. Allowed: {', '.join(allowed)}",
            details={"status": value},
        )
