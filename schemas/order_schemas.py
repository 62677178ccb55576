from fastapi import HTTPException, Query
from pydantic import BaseModel, Field, field_validator
from starlette import status
from datetime import date
from typing import Optional
from models.orders import ORDER_STATUSES
from models.payments import PAYMENT_METHODS, PAYMENT_STATUSES


class PlaceOrderRequest(BaseModel):
    address_id: Optional[int] = Field(None, gt=0)
    delivery_address: Optional[str] = Field(None, max_length=255)
    payment_method: str

    @field_validator('payment_method')
    @classmethod
    def validate_payment_method(cls, value):
        value = value.strip().lower()
        if value not in PAYMENT_METHODS:
            raise ValueError(f"payment_method must be one of: {', '.join(PAYMENT_METHODS)}")
        return value

    @field_validator('delivery_address')
    @classmethod
    def strip_delivery_address(cls, value):
        if value is None:
            return value
        value = value.strip()
        return value or None


class UpdateOrderStatusRequest(BaseModel):
    status: str

    @field_validator('status')
    @classmethod
    def validate_status(cls, value):
        value = value.strip().lower()
        if value not in ORDER_STATUSES:
            raise ValueError(f"status must be one of: {', '.join(ORDER_STATUSES)}")
        return value


class UpdatePaymentStatusRequest(BaseModel):
    status: str

    @field_validator('status')
    @classmethod
    def validate_status(cls, value):
        value = value.strip().lower()
        if value not in PAYMENT_STATUSES:
            raise ValueError(f"status must be one of: {', '.join(PAYMENT_STATUSES)}")
        return value


class DateRangeQuery(BaseModel):
    start: Optional[date] = None
    end: Optional[date] = None


def date_range_query(start: Optional[date] = Query(None), end: Optional[date] = Query(None)) -> DateRangeQuery:
    """Inclusive ?start=YYYY-MM-DD&end=YYYY-MM-DD filter shared by admin listings."""
    if start and end and start > end:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST,
            detail="start must be on or before end")
    return DateRangeQuery(start=start, end=end)
