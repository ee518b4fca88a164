"""Inventory service for manual stock operations and queries"""

from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import ProductNotFound
from ..events.event_producers import ProductEventProducer
from ..models.alert import InventoryAlert
from ..models.inventory import InventoryRecord, StockAdjustment
from ..schemas.inventory import StockAdjustmentRequest, StockAdjustmentResult
from ..utils.logging import setup_product_logging as setup_logging
from .alert_generator import AlertGenerator, AlertThresholds
from .inventory_ledger import InventoryLedger

# Setup structured logging for the service
logger = setup_logging("product_service.inventory_service")


class InventoryService:
    """Service class for inventory business logic"""

    def __init__(
        self,
        db: AsyncSession,
        event_producer: Optional[ProductEventProducer] = None,
        thresholds: Optional[AlertThresholds] = None,
    ):
        self.db = db
        self.ledger = InventoryLedger(db)
        self.alerts = AlertGenerator(db, thresholds=thresholds)
        self.event_producer = event_producer

    async def get_inventory(self, product_id: str) -> InventoryRecord:
        record = await self.ledger.get_record(product_id)
        if record is None:
            raise ProductNotFound(product_id)
        return record

    async def adjust_stock(
        self,
        product_id: str,
        request: StockAdjustmentRequest,
        user_id: str = "system",
    ) -> StockAdjustmentResult:
        """Apply a manual adjustment, evaluate alerts, then announce it"""
        adjustment = await self.ledger.adjust_with_audit(
            product_id=product_id,
            signed_delta=request.signed_delta,
            reason=request.reason,
            actor=user_id,
            commit=False,
        )
        alert = await self.alerts.evaluate(adjustment, commit=False)
        await self.ledger.commit()

        logger.info(
            "Manual stock adjustment applied",
            extra={
                "product_id": product_id,
                "quantity_change": request.signed_delta,
                "new_quantity": adjustment.new_quantity,
                "user_id": user_id,
                "alert_severity": alert.severity if alert else None,
                "operation": "manual_adjust_stock",
            },
        )

        if self.event_producer is not None:
            await self.event_producer.publish_stock_adjusted(
                product_id=product_id,
                quantity_adjusted=adjustment.requested_delta,
                new_quantity=adjustment.new_quantity,
                reason=request.reason,
            )

        return StockAdjustmentResult(
            product_id=product_id,
            new_stock=adjustment.new_quantity,
            adjustment=adjustment.requested_delta,
            alert_severity=alert.severity if alert else None,
        )

    async def list_adjustments(self, product_id: str) -> List[StockAdjustment]:
        await self.get_inventory(product_id)
        return await self.ledger.list_adjustments(product_id)

    async def list_low_stock(
        self, threshold: Optional[int] = None
    ) -> List[InventoryRecord]:
        return await self.ledger.list_low_stock(threshold)

    async def list_alerts(self, resolved: Optional[bool] = None) -> List[InventoryAlert]:
        return await self.alerts.list_alerts(resolved)

    async def resolve_alert(self, alert_id: int) -> InventoryAlert:
        return await self.alerts.resolve_alert(alert_id)
