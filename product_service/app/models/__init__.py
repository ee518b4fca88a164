from .alert import InventoryAlert
from .base import ProductServiceBase, ProductServiceBaseModel
from .inventory import InventoryRecord, StockAdjustment
from .processed_event import ProcessedEvent

"""Product Service Models"""

__all__ = [
    "ProductServiceBase",
    "ProductServiceBaseModel",
    "InventoryAlert",
    "InventoryRecord",
    "ProcessedEvent",
    "StockAdjustment",
]
