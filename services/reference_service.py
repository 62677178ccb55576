"""
Human-readable unique references for orders and payments.

Format: PREFIX + YYYYMMDD + 4 chars from [A-Z0-9], e.g. ORD20260205AB12 or
TX20260205Q7ZK. Uniqueness is checked against the owning table; a taken
value is regenerated a bounded number of times before giving up.
"""
import secrets
import string
from datetime import date, datetime, timezone
from typing import Callable, Optional
from sqlalchemy.orm import Session
from core.config import settings
from core.exceptions import IdentifierExhaustedError
from models.orders import Order
from models.payments import Payment
from utils.logger import get_logger

logger = get_logger(__name__)

ORDER_PREFIX = "ORD"
TRANSACTION_PREFIX = "TX"
SUFFIX_ALPHABET = string.ascii_uppercase + string.digits
SUFFIX_LENGTH = 4


def build_reference(prefix: str, today: Optional[date] = None) -> str:
    """Build one candidate reference. No uniqueness check."""
    today = today or datetime.now(timezone.utc).date()
    suffix = "".join(secrets.choice(SUFFIX_ALPHABET) for _ in range(SUFFIX_LENGTH))
    return f"{prefix}{today:%Y%m%d}{suffix}"


def generate_unique_reference(
    prefix: str,
    exists: Callable[[str], bool],
    max_attempts: Optional[int] = None,
    today: Optional[date] = None
) -> str:
    """
    Generate a reference that `exists` reports as free.

    Args:
        prefix: Reference prefix ("ORD", "TX")
        exists: Returns True if the candidate is already taken
        max_attempts: Retry budget (default: settings.REFERENCE_MAX_ATTEMPTS)
        today: Date embedded in the reference (default: current UTC date)

    Raises:
        IdentifierExhaustedError: every attempt collided
    """
    attempts = max_attempts or settings.REFERENCE_MAX_ATTEMPTS

    for attempt in range(1, attempts + 1):
        candidate = build_reference(prefix, today)
        if not exists(candidate):
            return candidate

        logger.warning(
            "Reference collision, regenerating",
            extra={"prefix": prefix, "reference": candidate, "attempt": attempt}
        )

    logger.error(
        "Reference generation exhausted",
        extra={"prefix": prefix, "attempts": attempts}
    )
    raise IdentifierExhaustedError(details={"prefix": prefix, "attempts": attempts})


def generate_order_number(db: Session, today: Optional[date] = None) -> str:
    def exists(candidate: str) -> bool:
        return db.query(Order.id).filter(Order.order_number == candidate).first() is not None

    return generate_unique_reference(ORDER_PREFIX, exists, today=today)


def generate_transaction_ref(db: Session, today: Optional[date] = None) -> str:
    def exists(candidate: str) -> bool:
        return db.query(Payment.id).filter(Payment.transaction_ref == candidate).first() is not None

    return generate_unique_reference(TRANSACTION_PREFIX, exists, today=today)
