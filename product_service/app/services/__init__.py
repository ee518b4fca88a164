"""Service layer for Product Service"""

from .alert_generator import AlertGenerator, AlertSeverity, AlertThresholds, classify
from .inventory_ledger import InventoryLedger
from .inventory_service import InventoryService

__all__ = [
    "AlertGenerator",
    "AlertSeverity",
    "AlertThresholds",
    "classify",
    "InventoryLedger",
    "InventoryService",
]
