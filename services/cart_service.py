from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Optional
from sqlalchemy.orm import Session, joinedload
from sqlalchemy.exc import IntegrityError
from models.cart_items import CartItem
from models.products import Product
from models.users import User
from services.catalog_service import CatalogService
from core.exceptions import ProductNotFoundError, CartItemNotFoundError, InvalidQuantityError
from utils.logger import get_logger

logger = get_logger(__name__)

CENTS = Decimal("0.01")


def money(value) -> Decimal:
    """Quantize to 2 decimal places, half up."""
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def lock_cart_owner(db: Session, user_id: int) -> None:
    """
    SELECT ... FOR UPDATE on the user row. Cart writes and checkout take the
    same lock, so a cart change waits for an in-flight checkout to finish.
    No-op on SQLite, which serializes writers anyway.
    """
    db.query(User.id).filter(User.id == user_id).with_for_update().one_or_none()


class CartService:
    """
    Per-user cart lines.

    Each (user, product) pair has at most one line. The unit price is captured
    when the line is first created and is what checkout charges.
    """

    @staticmethod
    def get_cart(db: Session, user_id: int) -> List[CartItem]:
        return (
            db.query(CartItem)
            .join(Product, CartItem.product_id == Product.id)
            .options(joinedload(CartItem.product))
            .filter(CartItem.user_id == user_id)
            .order_by(Product.name.asc(), CartItem.id.asc())
            .all()
        )

    @staticmethod
    def get_item(db: Session, user_id: int, product_id: int) -> CartItem | None:
        return db.query(CartItem).filter(
            CartItem.user_id == user_id,
            CartItem.product_id == product_id
        ).one_or_none()

    @staticmethod
    def add_item(db: Session, user_id: int, product_id: int, quantity: int = 1) -> CartItem:
        """
        Add a product to the cart, incrementing the existing line if present.

        Raises:
            InvalidQuantityError: quantity < 1
            ProductNotFoundError: product missing or unavailable (nothing is added)
        """
        if quantity < 1:
            raise InvalidQuantityError("Quantity must be at least 1")

        product = CatalogService.find_available(db, product_id)
        if not product:
            logger.warning(
                "Add to cart rejected - product missing or unavailable",
                extra={"user_id": user_id, "product_id": product_id}
            )
            raise ProductNotFoundError()

        lock_cart_owner(db, user_id)
        line = CartService.get_item(db, user_id, product_id)
        if line:
            line.quantity += quantity
            db.commit()
            db.refresh(line)
            return line

        line = CartItem(
            user_id=user_id,
            product_id=product_id,
            quantity=quantity,
            price_at_time=product.price
        )
        db.add(line)
        try:
            db.commit()
        except IntegrityError:
            # Concurrent add created the line first
            db.rollback()
            line = CartService.get_item(db, user_id, product_id)
            line.quantity += quantity
            db.commit()

        db.refresh(line)

        logger.debug(
            "Product added to cart",
            extra={"user_id": user_id, "product_id": product_id, "quantity": quantity}
        )
        return line

    @staticmethod
    def update_item(db: Session, user_id: int, product_id: int, quantity: int) -> CartItem | None:
        """
        Set the quantity of a cart line. Quantity 0 removes the line and returns None.
        """
        if quantity < 0:
            raise InvalidQuantityError()

        if quantity == 0:
            CartService.remove_item(db, user_id, product_id)
            return None

        lock_cart_owner(db, user_id)
        line = CartService.get_item(db, user_id, product_id)
        if not line:
            raise CartItemNotFoundError()

        line.quantity = quantity
        db.commit()
        db.refresh(line)
        return line

    @staticmethod
    def remove_item(db: Session, user_id: int, product_id: int) -> None:
        lock_cart_owner(db, user_id)
        line = CartService.get_item(db, user_id, product_id)
        if not line:
            raise CartItemNotFoundError()

        db.delete(line)
        db.commit()

    @staticmethod
    def clear(db: Session, user_id: int, line_ids: Optional[Iterable[int]] = None, commit: bool = True) -> int:
        """
        Delete the user's cart lines, or only `line_ids` when given.

        Checkout passes the ids it ordered and commit=False, so the delete
        joins its transaction and a line added meanwhile stays in the cart.
        """
        lock_cart_owner(db, user_id)
        query = db.query(CartItem).filter(CartItem.user_id == user_id)
        if line_ids is not None:
            query = query.filter(CartItem.id.in_(list(line_ids)))
        deleted = query.delete(synchronize_session=False)
        if commit:
            db.commit()
        return deleted

    @staticmethod
    def calculate_total(lines: List[CartItem]) -> Decimal:
        return money(sum((line.price_at_time * line.quantity for line in lines), Decimal("0")))

    @staticmethod
    def get_total(db: Session, user_id: int) -> Decimal:
        return CartService.calculate_total(CartService.get_cart(db, user_id))
