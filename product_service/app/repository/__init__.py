from .alert_repository import AlertRepository
from .event_repository import ProcessedEventRepository
from .inventory_repository import InventoryRepository

__all__ = [
    "AlertRepository",
    "InventoryRepository",
    "ProcessedEventRepository",
]
