from datetime import datetime
from decimal import Decimal
from typing import List

from pydantic import BaseModel, ConfigDict, Field


class OrderItemCreate(BaseModel):
    product_id: str = Field(..., min_length=1, max_length=64)
    quantity: int = Field(..., gt=0)
    unit_price: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)


class CreateOrderRequest(BaseModel):
    customer_id: str = Field(..., min_length=1, max_length=64)
    items: List[OrderItemCreate] = Field(..., min_length=1)
    currency: str = Field("USD", min_length=3, max_length=3)

    @property
    def total_amount(self) -> Decimal:
        return sum((item.unit_price * item.quantity for item in self.items), Decimal("0"))


class OrderItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    line_number: int
    product_id: str
    quantity: int
    unit_price: Decimal


class OrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    order_number: str
    customer_id: str
    status: str
    total_amount: Decimal
    currency: str
    items: List[OrderItemResponse]
    created_at: datetime
