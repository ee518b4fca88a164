"""
Order Service Event Schemas
===========================

Payloads the order service publishes. Field names travel in camelCase.
"""

from decimal import Decimal
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class EventData(BaseModel):
    """Base event payload with camelCase wire names"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


# ==============================================
# ORDER EVENT DATA SCHEMAS
# ==============================================


class OrderLineItem(EventData):
    product_id: str
    quantity: int = Field(gt=0)
    unit_price: Decimal


class OrderCreatedEventData(EventData):
    """Data schema for order creation events"""

    order_id: str
    order_number: str
    customer_id: str
    items: List[OrderLineItem]
    total_amount: Decimal
    currency: str


ORDER_CREATED = "OrderCreated"
ORDER_EVENTS_TOPIC = "order-events"
