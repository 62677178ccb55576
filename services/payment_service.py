from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional
from sqlalchemy.orm import Session, joinedload
from core.exceptions import PaymentNotFoundError, AccessDeniedError, InvalidStatusError
from models.orders import Order
from models.payments import Payment, PAYMENT_STATUSES
from models.users import User
from services.order_service import day_bounds
from utils.logger import get_logger

logger = get_logger(__name__)


class PaymentService:
    """
    Payment records. Rows are created by checkout; this service reads them
    and applies admin status changes.
    """

    @staticmethod
    def get_payment(db: Session, payment_id: int) -> Payment:
        payment = db.query(Payment).options(
            joinedload(Payment.order),
            joinedload(Payment.user)
        ).filter(Payment.id == payment_id).one_or_none()

        if not payment:
            raise PaymentNotFoundError()
        return payment

    @staticmethod
    def get_payment_for_user(db: Session, payment_id: int, user_id: int, is_admin: bool = False) -> Payment:
        payment = PaymentService.get_payment(db, payment_id)
        if not is_admin and payment.user_id != user_id:
            raise AccessDeniedError("You do not have permission to view this payment")
        return payment

    @staticmethod
    def list_user_payments(db: Session, user_id: int) -> List[Dict[str, Any]]:
        rows = (
            db.query(Payment, Order.order_number)
            .join(Order, Payment.order_id == Order.id)
            .filter(Payment.user_id == user_id)
            .order_by(Payment.created_at.desc(), Payment.id.desc())
            .all()
        )
        return [serialize_payment(payment, order_number=order_number) for payment, order_number in rows]

    @staticmethod
    def list_all_payments(db: Session, start: Optional[date] = None, end: Optional[date] = None) -> List[Dict[str, Any]]:
        query = (
            db.query(Payment, Order.order_number, User.full_name, User.email)
            .join(Order, Payment.order_id == Order.id)
            .join(User, Payment.user_id == User.id)
        )

        lower, upper = day_bounds(start, end)
        if lower:
            query = query.filter(Payment.created_at >= lower)
        if upper:
            query = query.filter(Payment.created_at < upper)

        rows = query.order_by(Payment.created_at.desc(), Payment.id.desc()).all()
        return [
            {
                **serialize_payment(payment, order_number=order_number),
                "customer_name": full_name,
                "email": email
            }
            for payment, order_number, full_name, email in rows
        ]

    @staticmethod
    def update_status(db: Session, payment_id: int, status: str) -> Payment:
        """
        Change payment status. paid_at is set when the payment becomes paid
        and cleared for any other status.
        """
        if status not in PAYMENT_STATUSES:
            raise InvalidStatusError(status, PAYMENT_STATUSES)

        payment = db.query(Payment).filter(Payment.id == payment_id).one_or_none()
        if not payment:
            raise PaymentNotFoundError()

        previous = payment.status
        payment.status = status
        if status == "paid":
            if previous != "paid":
                payment.paid_at = datetime.now(timezone.utc)
        else:
            payment.paid_at = None

        db.commit()
        db.refresh(payment)

        logger.info(
            "Payment status updated",
            extra={
                "payment_id": payment.id,
                "transaction_ref": payment.transaction_ref,
                "from_status": previous,
                "to_status": status
            }
        )
        return payment


def serialize_payment(payment: Payment, order_number: Optional[str] = None) -> Dict[str, Any]:
    return {
        "id": payment.id,
        "order_id": payment.order_id,
        "order_number": order_number or (payment.order.order_number if payment.order else None),
        "user_id": payment.user_id,
        "amount": payment.amount,
        "method": payment.method,
        "status": payment.status,
        "transaction_ref": payment.transaction_ref,
        "paid_at": payment.paid_at,
        "created_at": payment.created_at
    }
