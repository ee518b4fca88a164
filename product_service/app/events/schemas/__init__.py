"""
Product Service Event Schemas
=============================

Event data schemas specific to the product service domain.
"""

from .event_schemas import (
    INVENTORY_EVENTS_TOPIC,
    ORDER_CREATED,
    ORDER_EVENTS_TOPIC,
    STOCK_ADJUSTED,
    EventData,
    OrderCreatedEventData,
    OrderLineItem,
    StockAdjustedEventData,
)

__all__ = [
    # Base class
    "EventData",
    # Order events
    "OrderLineItem",
    "OrderCreatedEventData",
    # Inventory events
    "StockAdjustedEventData",
    # Constants
    "ORDER_CREATED",
    "STOCK_ADJUSTED",
    "ORDER_EVENTS_TOPIC",
    "INVENTORY_EVENTS_TOPIC",
]
