"""Low-stock alert classification and lifecycle"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import AlertNotFound, PersistenceError
from ..models.alert import InventoryAlert
from ..models.base import utcnow
from ..repository.alert_repository import AlertRepository
from ..schemas.inventory import LedgerAdjustment
from ..utils.logging import setup_product_logging as setup_logging

logger = setup_logging("product_service.alert_generator")


class AlertSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    AlertSeverity.LOW: 1,
    AlertSeverity.MEDIUM: 2,
    AlertSeverity.HIGH: 3,
    AlertSeverity.CRITICAL: 4,
}


class AlertThresholds(BaseModel):
    """Severity band boundaries

    ``critical_stock_level`` is an absolute stock level; ``high_ratio`` is a
    fraction of the product's reorder point.
    """

    critical_stock_level: int = Field(default=0, ge=0)
    high_ratio: float = Field(default=0.5, ge=0.0, le=1.0)

    @classmethod
    def from_settings(cls) -> "AlertThresholds":
        from ..core.setting import get_settings

        settings = get_settings()
        return cls(
            critical_stock_level=settings.ALERT_CRITICAL_STOCK_LEVEL,
            high_ratio=settings.ALERT_HIGH_RATIO,
        )


def classify(
    current_stock: int,
    reorder_point: int,
    thresholds: Optional[AlertThresholds] = None,
) -> Optional[AlertSeverity]:
    """Severity for a post-adjustment stock level, None when above reorder point"""
    thresholds = thresholds or AlertThresholds()

    if current_stock > reorder_point:
        return None
    if current_stock <= thresholds.critical_stock_level:
        return AlertSeverity.CRITICAL
    if current_stock <= reorder_point * thresholds.high_ratio:
        return AlertSeverity.HIGH
    return AlertSeverity.MEDIUM


class AlertGenerator:
    """Raises and resolves inventory alerts

    Every breach produces a new alert row. Raising an alert supersedes any
    alert still open for the same product, so at most one alert per product is
    unresolved at a time.
    """

    def __init__(self, db: AsyncSession, thresholds: Optional[AlertThresholds] = None):
        self.db = db
        self.repository = AlertRepository(db)
        self.thresholds = thresholds or AlertThresholds.from_settings()

    def classify(
        self, current_stock: int, reorder_point: int
    ) -> Optional[AlertSeverity]:
        return classify(current_stock, reorder_point, self.thresholds)

    async def raise_alert(
        self,
        product_id: str,
        product_name: str,
        current_stock: int,
        reorder_point: int,
        severity: AlertSeverity,
        commit: bool = True,
    ) -> InventoryAlert:
        """Persist a new unresolved alert"""
        try:
            superseded = await self.repository.supersede_unresolved(product_id)
            alert = await self.repository.create(
                InventoryAlert(
                    product_id=product_id,
                    product_name=product_name,
                    current_stock=current_stock,
                    threshold=reorder_point,
                    severity=AlertSeverity(severity).value,
                    resolved=False,
                )
            )
            if commit:
                await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise PersistenceError(f"Failed to raise inventory alert: {e}", e) from e

        logger.warning(
            "Inventory alert raised",
            extra={
                "alert_id": alert.id,
                "product_id": product_id,
                "current_stock": current_stock,
                "threshold": reorder_point,
                "severity": alert.severity,
                "superseded_alerts": superseded,
                "operation": "raise_alert",
            },
        )
        return alert

    async def evaluate(
        self, adjustment: LedgerAdjustment, commit: bool = True
    ) -> Optional[InventoryAlert]:
        """Raise an alert if the adjustment left stock at or below reorder point"""
        severity = self.classify(adjustment.new_quantity, adjustment.reorder_point)
        if severity is None:
            return None

        return await self.raise_alert(
            product_id=adjustment.product_id,
            product_name=adjustment.product_name,
            current_stock=adjustment.new_quantity,
            reorder_point=adjustment.reorder_point,
            severity=severity,
            commit=commit,
        )

    async def list_alerts(self, resolved: Optional[bool] = None) -> List[InventoryAlert]:
        try:
            return await self.repository.list_alerts(resolved)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to list inventory alerts: {e}", e) from e

    async def resolve_alert(self, alert_id: int) -> InventoryAlert:
        """Operator resolution of an alert"""
        try:
            alert = await self.repository.get_by_id(alert_id)
            if alert is None:
                raise AlertNotFound(alert_id)

            if not alert.resolved:
                alert.resolved = True
                alert.resolution = "operator"
                alert.resolved_at = utcnow()
                await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise PersistenceError(f"Failed to resolve inventory alert: {e}", e) from e

        logger.info(
            "Inventory alert resolved",
            extra={
                "alert_id": alert_id,
                "product_id": alert.product_id,
                "resolution": alert.resolution,
                "operation": "resolve_alert",
            },
        )
        return alert
