"""
Order schemas package
"""

from .order import CreateOrderRequest, OrderItemCreate, OrderItemResponse, OrderResponse

__all__ = [
    "CreateOrderRequest",
    "OrderItemCreate",
    "OrderItemResponse",
    "OrderResponse",
]
