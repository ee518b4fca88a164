from .inventory import (
    AdjustmentType,
    InventoryAlertResponse,
    InventoryRecordResponse,
    LedgerAdjustment,
    StockAdjustmentRequest,
    StockAdjustmentResponse,
    StockAdjustmentResult,
)

__all__ = [
    "AdjustmentType",
    "InventoryAlertResponse",
    "InventoryRecordResponse",
    "LedgerAdjustment",
    "StockAdjustmentRequest",
    "StockAdjustmentResponse",
    "StockAdjustmentResult",
]
