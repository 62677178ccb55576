from pydantic import BaseModel, Field, field_validator
from typing import Optional


class CreateAddressRequest(BaseModel):
    street: str = Field(..., max_length=150)
    city: str = Field(..., max_length=100)
    region: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = Field(None, max_length=255)

    @field_validator('street', 'city')
    @classmethod
    def not_blank(cls, value):
        if not value or not value.strip():
            raise ValueError('must not be empty')
        return value.strip()
