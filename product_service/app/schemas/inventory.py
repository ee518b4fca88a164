from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class AdjustmentType(str, Enum):
    INCREASE = "increase"
    DECREASE = "decrease"


class LedgerAdjustment(BaseModel):
    """Outcome of one ledger mutation"""

    product_id: str
    product_name: str
    reorder_point: int
    requested_delta: int
    previous_quantity: int
    new_quantity: int

    @property
    def applied_delta(self) -> int:
        return self.new_quantity - self.previous_quantity

    @property
    def clamped(self) -> bool:
        """True when the request would have taken stock below zero"""
        return self.previous_quantity + self.requested_delta < 0


class InventoryRecordResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    product_id: str
    name: str
    quantity: int
    reorder_point: int
    is_active: bool
    updated_at: datetime


class StockAdjustmentRequest(BaseModel):
    """Manual stock adjustment, always expressed as a positive quantity"""

    quantity: int = Field(..., gt=0)
    reason: str = Field(..., min_length=1, max_length=200)
    type: AdjustmentType

    @property
    def signed_delta(self) -> int:
        if self.type == AdjustmentType.INCREASE:
            return self.quantity
        return -self.quantity


class StockAdjustmentResult(BaseModel):
    product_id: str
    new_stock: int
    adjustment: int
    alert_severity: Optional[str] = None


class StockAdjustmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    product_id: str
    quantity_delta: int
    previous_quantity: int
    resulting_quantity: int
    reason: str
    adjustment_type: str
    actor: str
    order_id: Optional[str] = None
    line_number: Optional[int] = None
    created_at: datetime


class InventoryAlertResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    product_id: str
    product_name: str
    current_stock: int
    threshold: int
    severity: str
    resolved: bool
    resolution: Optional[str] = None
    resolved_at: Optional[datetime] = None
    created_at: datetime
