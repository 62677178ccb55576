from fastapi import APIRouter
from starlette import status
from utils.deps import user_dependency, db_dependency, is_admin
from utils.responses import api_response
from services.payment_service import PaymentService, serialize_payment


router = APIRouter(
    prefix="/payments",
    tags=["payments"]
)


@router.get("", status_code=status.HTTP_200_OK)
async def get_my_payments(user: user_dependency, db: db_dependency):
    payments = PaymentService.list_user_payments(db, user.get("user_id"))
    return api_response(payments, "Your payments retrieved successfully")


@router.get("/{payment_id}", status_code=status.HTTP_200_OK)
async def get_payment(payment_id: int, user: user_dependency, db: db_dependency):
    payment = PaymentService.get_payment_for_user(db, payment_id, user.get("user_id"), is_admin(user))
    return api_response(serialize_payment(payment), "Payment details retrieved")
