from fastapi import APIRouter, Depends, Query
from starlette import status
from typing import Annotated, Optional
from utils.deps import admin_dependency, db_dependency
from utils.responses import api_response
from schemas.order_schemas import DateRangeQuery, UpdatePaymentStatusRequest, date_range_query
from services.order_service import OrderService
from services.payment_service import PaymentService, serialize_payment


period_dependency = Annotated[DateRangeQuery, Depends(date_range_query)]


router = APIRouter(
    prefix="/admin",
    tags=["admin"]
)


@router.get("/orders", status_code=status.HTTP_200_OK)
async def get_all_orders(
    admin: admin_dependency,
    db: db_dependency,
    period: period_dependency,
    status_filter: Annotated[Optional[str], Query(alias="status")] = None
):
    orders = OrderService(db).list_all_orders(period.start, period.end, status_filter)
    return api_response(orders, "All orders retrieved")


@router.delete("/orders/{order_id}", status_code=status.HTTP_200_OK)
async def delete_order(order_id: int, admin: admin_dependency, db: db_dependency):
    OrderService(db).delete_order(order_id)
    return api_response({"id": order_id}, "Order deleted successfully")


@router.get("/payments", status_code=status.HTTP_200_OK)
async def get_all_payments(admin: admin_dependency, db: db_dependency, period: period_dependency):
    payments = PaymentService.list_all_payments(db, period.start, period.end)
    return api_response(payments, "All payments retrieved")


@router.patch("/payments/{payment_id}/status", status_code=status.HTTP_200_OK)
async def update_payment_status(payment_id: int, body: UpdatePaymentStatusRequest, admin: admin_dependency, db: db_dependency):
    payment = PaymentService.update_status(db, payment_id, body.status)
    return api_response(serialize_payment(payment), f"Payment status updated to {payment.status}")
