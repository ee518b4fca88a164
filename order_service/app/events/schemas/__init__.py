"""
Order Service Event Schemas
===========================

Event data schemas specific to the order service domain.
"""

from .event_schemas import (
    ORDER_CREATED,
    ORDER_EVENTS_TOPIC,
    EventData,
    OrderCreatedEventData,
    OrderLineItem,
)

__all__ = [
    "EventData",
    "OrderLineItem",
    "OrderCreatedEventData",
    "ORDER_CREATED",
    "ORDER_EVENTS_TOPIC",
]
