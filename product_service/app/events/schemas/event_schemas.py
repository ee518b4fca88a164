"""
Product Service Event Schemas
=============================

Payload schemas for the events the product service consumes and produces.
Field names travel on the wire in camelCase; parsing accepts either spelling.
"""

from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# ==============================================
# BASE EVENT DATA CLASS
# ==============================================


class EventData(BaseModel):
    """Base event payload with camelCase wire names"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# ==============================================
# ORDER EVENT DATA SCHEMAS (consumed)
# ==============================================

# Lengths match the ledger columns so an oversized id is rejected on decode
# instead of failing the insert on every redelivery.


class OrderLineItem(EventData):
    """One ordered line; its position in ``items`` is the line number"""

    product_id: str = Field(min_length=1, max_length=64)
    quantity: int = Field(gt=0)
    unit_price: Decimal = Field(ge=0)


class OrderCreatedEventData(EventData):
    """Data schema for order creation events"""

    order_id: str = Field(min_length=1, max_length=64)
    order_number: str = Field(max_length=50)
    customer_id: str = Field(max_length=64)
    items: List[OrderLineItem]
    total_amount: Decimal
    currency: str = "USD"


# ==============================================
# INVENTORY EVENT DATA SCHEMAS (produced)
# ==============================================


class StockAdjustedEventData(EventData):
    """Data schema for stock adjustment events

    ``quantity_adjusted`` is the signed delta that was requested;
    ``new_quantity`` is the stock on hand after the adjustment.
    """

    product_id: str = Field(max_length=64)
    quantity_adjusted: int
    new_quantity: int = Field(ge=0)
    reason: str = Field(max_length=255)
    order_id: Optional[str] = Field(default=None, max_length=64)


# ==============================================
# EVENT TYPE AND TOPIC CONSTANTS
# ==============================================

ORDER_CREATED = "OrderCreated"
STOCK_ADJUSTED = "StockAdjusted"

ORDER_EVENTS_TOPIC = "order-events"
INVENTORY_EVENTS_TOPIC = "inventory-events"
