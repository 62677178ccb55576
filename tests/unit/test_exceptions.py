from core.exceptions import (
    FoodOrderError, ProductUnavailableError, InvalidStatusError,
    EmptyCartError, OrderCreationFailedError, CheckoutError
)


def test_default_message_and_code():
    error = EmptyCartError()

    assert error.message == "Cart is empty. Add items before placing order."
    assert error.code == "EMPTY_CART"
    assert error.status_code == 400
    assert isinstance(error, CheckoutError)


def test_to_dict_includes_details():
    error = ProductUnavailableError(42, "Soup")

    assert error.to_dict() == {
        "error_type": "ProductUnavailableError",
        "code": "PRODUCT_UNAVAILABLE",
        "message": "Soup is no longer available. Remove it from your cart to continue.",
        "details": {"product_id": 42},
    }


def test_unavailable_product_without_name():
    assert "Product #9" in ProductUnavailableError(9).message


def test_invalid_status_lists_allowed_values():
    error = InvalidStatusError("shipped", ("pending", "paid"))

    assert error.message == "Invalid status 'shipped'. Allowed: pending, paid"


def test_creation_failure_is_server_error():
    error = OrderCreationFailedError()

    assert isinstance(error, FoodOrderError)
    assert error.status_code == 500
