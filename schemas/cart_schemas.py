from pydantic import BaseModel, Field


class AddCartItemRequest(BaseModel):
    product_id: int = Field(..., gt=0)
    quantity: int = Field(1, ge=1)


class UpdateCartItemRequest(BaseModel):
    # 0 removes the line
    quantity: int = Field(..., ge=0)
