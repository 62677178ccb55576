from fastapi import APIRouter, Request, Header
from starlette import status
from typing import Annotated, Optional
from utils.deps import user_dependency, admin_dependency, db_dependency, is_admin
from utils.responses import api_response
from utils.logger import get_logger, sanitize_log_data
from schemas.order_schemas import PlaceOrderRequest, UpdateOrderStatusRequest
from services.order_service import OrderService, serialize_order_detail
from middleware.rate_limiter import limiter
from core.config import settings

logger = get_logger(__name__)


router = APIRouter(
    prefix="/orders",
    tags=["orders"]
)


@router.post("", status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.CHECKOUT_RATE_LIMIT)
def place_order(
    request: Request,
    body: PlaceOrderRequest,
    user: user_dependency,
    db: db_dependency,
    idempotency_key: Annotated[Optional[str], Header(max_length=64)] = None
):
    """
    Place an order from the current cart.

    Sync endpoint: runs in the threadpool while the checkout transaction
    holds the user's row lock.
    """
    user_id = user.get("user_id")

    logger.debug(
        "Checkout requested",
        extra=sanitize_log_data({
            "user_id": user_id,
            "payment_method": body.payment_method,
            "address_id": body.address_id,
            "idempotency_key": idempotency_key or ""
        })
    )

    confirmation = OrderService(db).place_order(
        user_id=user_id,
        payment_method=body.payment_method,
        address_id=body.address_id,
        delivery_address=body.delivery_address,
        idempotency_key=idempotency_key
    )

    if confirmation.replayed:
        return api_response(confirmation.to_dict(), "Order already placed", status.HTTP_200_OK)

    return api_response(confirmation.to_dict(), "Order placed successfully", status.HTTP_201_CREATED)


@router.get("", status_code=status.HTTP_200_OK)
async def get_my_orders(user: user_dependency, db: db_dependency):
    orders = OrderService(db).list_user_orders(user.get("user_id"))
    return api_response(orders, "Your orders retrieved successfully")


@router.get("/{order_id}", status_code=status.HTTP_200_OK)
async def get_order(order_id: int, user: user_dependency, db: db_dependency):
    order = OrderService(db).get_order_for_user(order_id, user.get("user_id"), is_admin(user))
    return api_response(serialize_order_detail(order), "Order details retrieved")


@router.patch("/{order_id}/status", status_code=status.HTTP_200_OK)
async def update_order_status(order_id: int, body: UpdateOrderStatusRequest, admin: admin_dependency, db: db_dependency):
    order = OrderService(db).update_status(order_id, body.status)
    return api_response(
        {"id": order.id, "order_number": order.order_number, "status": order.status},
        f"Order status updated to {order.status}"
    )
