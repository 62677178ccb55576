from fastapi import APIRouter, Request
from starlette import status
from utils.deps import user_dependency, db_dependency
from utils.responses import api_response
from schemas.cart_schemas import AddCartItemRequest, UpdateCartItemRequest
from services.cart_service import CartService
from middleware.rate_limiter import limiter
from utils.logger import get_logger

logger = get_logger(__name__)


router = APIRouter(
    prefix="/cart",
    tags=["cart"]
)


def cart_payload(db, user_id: int) -> dict:
    lines = CartService.get_cart(db, user_id)
    return {
        "items": [
            {
                "cart_item_id": line.id,
                "product_id": line.product_id,
                "name": line.product.name,
                "quantity": line.quantity,
                "price_at_time": line.price_at_time,
                "current_price": line.product.price,
                "product_status": line.product.status,
                "subtotal": line.subtotal
            }
            for line in lines
        ],
        "total": CartService.calculate_total(lines),
        "item_count": len(lines)
    }


@router.get("", status_code=status.HTTP_200_OK)
async def get_cart(user: user_dependency, db: db_dependency):
    return api_response(cart_payload(db, user.get("user_id")), "Cart retrieved successfully")


@router.post("/items", status_code=status.HTTP_201_CREATED)
@limiter.limit("60/minute")
async def add_item(request: Request, body: AddCartItemRequest, user: user_dependency, db: db_dependency):
    user_id = user.get("user_id")
    CartService.add_item(db, user_id, body.product_id, body.quantity)

    return api_response(cart_payload(db, user_id), "Item added to cart", status.HTTP_201_CREATED)


@router.patch("/items/{product_id}", status_code=status.HTTP_200_OK)
async def update_item(product_id: int, body: UpdateCartItemRequest, user: user_dependency, db: db_dependency):
    user_id = user.get("user_id")
    CartService.update_item(db, user_id, product_id, body.quantity)

    message = "Item removed from cart" if body.quantity == 0 else "Cart item updated"
    return api_response(cart_payload(db, user_id), message)


@router.delete("/items/{product_id}", status_code=status.HTTP_200_OK)
async def remove_item(product_id: int, user: user_dependency, db: db_dependency):
    user_id = user.get("user_id")
    CartService.remove_item(db, user_id, product_id)

    return api_response(cart_payload(db, user_id), "Item removed from cart")


@router.delete("", status_code=status.HTTP_200_OK)
async def clear_cart(user: user_dependency, db: db_dependency):
    user_id = user.get("user_id")
    removed = CartService.clear(db, user_id)

    logger.info("Cart cleared", extra={"user_id": user_id, "removed_lines": removed})

    return api_response(cart_payload(db, user_id), "Cart cleared")
