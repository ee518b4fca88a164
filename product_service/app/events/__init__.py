"""
Events module for the Product Service.

Producers:
    - ProductEventProducer: Publishes StockAdjusted events to inventory-events

Consumers:
    - OrderCreatedHandler: Reserves inventory for new orders
    - ProductEventConsumer: Subscribes handlers on order-events

Event Types Supported:
    Consumed: OrderCreated
    Produced: StockAdjusted
"""

from .event_consumers import OrderCreatedHandler, ProductEventConsumer
from .event_producers import ProductEventProducer

__all__ = [
    # Producers
    "ProductEventProducer",
    # Consumer handlers
    "OrderCreatedHandler",
    # Consumer management
    "ProductEventConsumer",
]
