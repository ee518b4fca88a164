"""
Events module for the Order Service.

Producers:
    - OrderEventProducer: Publishes OrderCreated to order-events after commit
"""

from .producers import OrderEventProducer

__all__ = ["OrderEventProducer"]
