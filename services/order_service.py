"""
Order placement and order read paths.

place_order() turns the user's cart into an order, its items and a payment
record inside one transaction, then empties the cart. Nothing is written
unless everything is.
"""
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, joinedload
from core.config import settings
from core.exceptions import (
    FoodOrderError, EmptyCartError, InvalidTotalError, ProductUnavailableError,
    InvalidAddressError, IdentifierExhaustedError, OrderCreationFailedError,
    OrderNotFoundError, AccessDeniedError, InvalidStatusError
)
from models.addresses import Address
from models.cart_items import CartItem
from models.order_items import OrderItem
from models.orders import Order, ORDER_STATUSES
from models.payments import Payment
from models.users import User
from services.cart_service import CartService, money, lock_cart_owner
from services.catalog_service import CatalogService
from services.address_service import AddressService
from services.reference_service import generate_order_number, generate_transaction_ref
from utils.logger import get_logger

logger = get_logger(__name__)

CASH_METHOD = "cash"


class OrderConfirmation:
    """Result of a successful checkout."""

    def __init__(
        self,
        order_id: int,
        order_number: str,
        total_amount: Decimal,
        transaction_ref: str,
        payment_status: str,
        replayed: bool = False
    ):
        self.order_id = order_id
        self.order_number = order_number
        self.total_amount = total_amount
        self.transaction_ref = transaction_ref
        self.payment_status = payment_status
        self.replayed = replayed

    @classmethod
    def from_order(cls, order: Order, replayed: bool = False) -> "OrderConfirmation":
        return cls(
            order_id=order.id,
            order_number=order.order_number,
            total_amount=order.total_amount,
            transaction_ref=order.payment.transaction_ref,
            payment_status=order.payment.status,
            replayed=replayed
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "order_id": self.order_id,
            "order_number": self.order_number,
            "total_amount": self.total_amount,
            "transaction_ref": self.transaction_ref,
            "payment_status": self.payment_status,
        }


def initial_payment_status(method: str) -> str:
    """Cash is collected on delivery. Other methods are treated as captured
    unless AUTO_CAPTURE_NON_CASH_PAYMENTS is off (no gateway confirmation yet)."""
    if method == CASH_METHOD or not settings.AUTO_CAPTURE_NON_CASH_PAYMENTS:
        return "pending"
    return "paid"


def day_bounds(start: Optional[date], end: Optional[date]):
    """Convert an inclusive date range to [start 00:00, end+1 00:00) datetimes."""
    lower = datetime.combine(start, time.min) if start else None
    upper = datetime.combine(end + timedelta(days=1), time.min) if end else None
    return lower, upper


class OrderService:

    def __init__(self, db: Session):
        self.db = db

    # Checkout

    def place_order(
        self,
        user_id: int,
        payment_method: str,
        address_id: Optional[int] = None,
        delivery_address: Optional[str] = None,
        idempotency_key: Optional[str] = None
    ) -> OrderConfirmation:
        """
        Convert the user's cart into an order.

        Flow:
        1. Lock the user row so checkouts by the same user run one at a time
        2. Replay the earlier result if this idempotency key was already used
        3. Validate cart, address and product availability
        4. Insert order, items and payment, clear the cart, commit

        Raises:
            EmptyCartError, InvalidAddressError, ProductUnavailableError,
            InvalidTotalError: nothing was written
            OrderCreationFailedError: database failure, transaction rolled back
        """
        # A blank header means no key; "" must never be stored
        idempotency_key = (idempotency_key or "").strip() or None

        try:
            self._lock_user(user_id)

            if idempotency_key:
                existing = self.find_by_idempotency_key(user_id, idempotency_key)
                if existing:
                    confirmation = OrderConfirmation.from_order(existing, replayed=True)
                    self.db.rollback()
                    logger.info(
                        "Duplicate checkout replayed",
                        extra={"user_id": user_id, "order_number": confirmation.order_number}
                    )
                    return confirmation

            lines = CartService.get_cart(self.db, user_id)
            if not lines:
                raise EmptyCartError()

            address = self._resolve_address(user_id, address_id)
            self._check_availability(lines)

            subtotals = [money(line.price_at_time * line.quantity) for line in lines]
            total = money(sum(subtotals, Decimal("0")))
            if total <= 0:
                raise InvalidTotalError()

            order_number = generate_order_number(self.db)
            transaction_ref = generate_transaction_ref(self.db)

            order = Order(
                user_id=user_id,
                address_id=address.id if address else None,
                delivery_address=delivery_address or (address.as_text() if address else None),
                total_amount=total,
                status="pending",
                order_number=order_number,
                idempotency_key=idempotency_key
            )
            self.db.add(order)
            self.db.flush()

            self._create_items(order, lines, subtotals)
            payment = self._create_payment(order, payment_method, transaction_ref)

            CartService.clear(self.db, user_id, line_ids=[line.id for line in lines], commit=False)
            self.db.commit()

        except IdentifierExhaustedError as e:
            self.db.rollback()
            raise OrderCreationFailedError(details=e.details) from e

        except FoodOrderError:
            self.db.rollback()
            raise

        except IntegrityError as e:
            self.db.rollback()
            if idempotency_key:
                # Same key committed by a concurrent request
                existing = self.find_by_idempotency_key(user_id, idempotency_key)
                if existing:
                    return OrderConfirmation.from_order(existing, replayed=True)
            self._log_failure(user_id, e)
            raise OrderCreationFailedError() from e

        except SQLAlchemyError as e:
            self.db.rollback()
            self._log_failure(user_id, e)
            raise OrderCreationFailedError() from e

        logger.info(
            "Order placed",
            extra={
                "user_id": user_id,
                "order_number": order_number,
                "total_amount": str(total),
                "item_count": len(subtotals),
                "payment_method": payment_method
            }
        )

        return OrderConfirmation(
            order_id=order.id,
            order_number=order_number,
            total_amount=total,
            transaction_ref=transaction_ref,
            payment_status=payment.status
        )

    def _lock_user(self, user_id: int) -> None:
        # Same row lock as cart writes
        lock_cart_owner(self.db, user_id)

    def _resolve_address(self, user_id: int, address_id: Optional[int]) -> Address | None:
        if address_id is None:
            return None

        address = AddressService.get_owned_address(self.db, user_id, address_id)

        if not address:
            logger.warning(
                "Checkout with address not owned by user",
                extra={"user_id": user_id, "address_id": address_id}
            )
            raise InvalidAddressError()
        return address

    def _check_availability(self, lines: List[CartItem]) -> None:
        products = CatalogService.find_many(self.db, [line.product_id for line in lines])
        for line in lines:
            product = products.get(line.product_id)
            if product is None or not product.is_available:
                logger.warning(
                    "Checkout rejected - product unavailable",
                    extra={"user_id": line.user_id, "product_id": line.product_id}
                )
                raise ProductUnavailableError(line.product_id, product.name if product else None)

    def _create_items(self, order: Order, lines: List[CartItem], subtotals: List[Decimal]) -> None:
        for line, subtotal in zip(lines, subtotals):
            self.db.add(OrderItem(
                order_id=order.id,
                product_id=line.product_id,
                quantity=line.quantity,
                price_at_time=line.price_at_time,
                subtotal=subtotal
            ))
        self.db.flush()

    def _create_payment(self, order: Order, method: str, transaction_ref: str) -> Payment:
        status = initial_payment_status(method)
        payment = Payment(
            order_id=order.id,
            user_id=order.user_id,
            amount=order.total_amount,
            method=method,
            status=status,
            transaction_ref=transaction_ref,
            paid_at=datetime.now(timezone.utc) if status == "paid" else None
        )
        self.db.add(payment)
        self.db.flush()
        return payment

    def _log_failure(self, user_id: int, error: Exception) -> None:
        logger.error(
            f"Order creation failed: {str(error)}",
            extra={"user_id": user_id, "error_type": type(error).__name__},
            exc_info=True
        )

    # Queries

    def find_by_idempotency_key(self, user_id: int, key: str) -> Order | None:
        return self.db.query(Order).options(joinedload(Order.payment)).filter(
            Order.user_id == user_id,
            Order.idempotency_key == key
        ).one_or_none()

    def get_order(self, order_id: int) -> Order:
        order = self.db.query(Order).options(
            joinedload(Order.items).joinedload(OrderItem.product),
            joinedload(Order.payment),
            joinedload(Order.user),
            joinedload(Order.address)
        ).filter(Order.id == order_id).first()

        if not order:
            raise OrderNotFoundError()
        return order

    def get_order_for_user(self, order_id: int, user_id: int, is_admin: bool = False) -> Order:
        order = self.get_order(order_id)
        if not is_admin and order.user_id != user_id:
            logger.warning(
                "Order access denied",
                extra={"user_id": user_id, "order_id": order_id}
            )
            raise AccessDeniedError("You do not have permission to view this order")
        return order

    def list_user_orders(self, user_id: int) -> List[Dict[str, Any]]:
        rows = (
            self.db.query(
                Order,
                func.count(OrderItem.id).label("item_count"),
                func.coalesce(func.sum(OrderItem.quantity), 0).label("total_items")
            )
            .outerjoin(OrderItem, OrderItem.order_id == Order.id)
            .filter(Order.user_id == user_id)
            .group_by(Order.id)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .all()
        )
        return [
            {
                "id": order.id,
                "order_number": order.order_number,
                "total_amount": order.total_amount,
                "status": order.status,
                "created_at": order.created_at,
                "item_count": item_count,
                "total_items": int(total_items)
            }
            for order, item_count, total_items in rows
        ]

    def list_all_orders(
        self,
        start: Optional[date] = None,
        end: Optional[date] = None,
        status: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        query = self.db.query(Order, User.full_name).join(User, Order.user_id == User.id)

        lower, upper = day_bounds(start, end)
        if lower:
            query = query.filter(Order.created_at >= lower)
        if upper:
            query = query.filter(Order.created_at < upper)
        if status:
            if status not in ORDER_STATUSES:
                raise InvalidStatusError(status, ORDER_STATUSES)
            query = query.filter(Order.status == status)

        rows = query.order_by(Order.created_at.desc(), Order.id.desc()).all()
        return [
            {
                "id": order.id,
                "order_number": order.order_number,
                "total_amount": order.total_amount,
                "status": order.status,
                "created_at": order.created_at,
                "customer_name": full_name
            }
            for order, full_name in rows
        ]

    # Admin actions

    def update_status(self, order_id: int, status: str) -> Order:
        if status not in ORDER_STATUSES:
            raise InvalidStatusError(status, ORDER_STATUSES)

        order = self.db.query(Order).filter(Order.id == order_id).one_or_none()
        if not order:
            raise OrderNotFoundError()

        previous = order.status
        order.status = status
        self.db.commit()
        self.db.refresh(order)

        logger.info(
            "Order status updated",
            extra={"order_number": order.order_number, "from_status": previous, "to_status": status}
        )
        return order

    def delete_order(self, order_id: int) -> None:
        order = self.db.query(Order).filter(Order.id == order_id).one_or_none()
        if not order:
            raise OrderNotFoundError()

        order_number = order.order_number
        self.db.delete(order)  # items and payment cascade
        self.db.commit()

        logger.info("Order deleted", extra={"order_number": order_number})


def serialize_order_detail(order: Order) -> Dict[str, Any]:
    payment = order.payment
    return {
        "id": order.id,
        "order_number": order.order_number,
        "user_id": order.user_id,
        "customer_name": order.user.full_name if order.user else None,
        "address_id": order.address_id,
        "delivery_address": order.delivery_address,
        "total_amount": order.total_amount,
        "status": order.status,
        "created_at": order.created_at,
        "updated_at": order.updated_at,
        "items": [
            {
                "id": item.id,
                "product_id": item.product_id,
                "name": item.product.name if item.product else None,
                "quantity": item.quantity,
                "price_at_time": item.price_at_time,
                "subtotal": item.subtotal
            }
            for item in sorted(order.items, key=lambda i: i.id)
        ],
        "payment": {
            "id": payment.id,
            "method": payment.method,
            "status": payment.status,
            "amount": payment.amount,
            "transaction_ref": payment.transaction_ref,
            "paid_at": payment.paid_at
        } if payment else None
    }
