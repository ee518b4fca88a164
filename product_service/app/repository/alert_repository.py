"""Inventory alert repository"""

from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.alert import InventoryAlert
from ..models.base import utcnow


class AlertRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, alert: InventoryAlert) -> InventoryAlert:
        self.db.add(alert)
        await self.db.flush()
        return alert

    async def get_by_id(self, alert_id: int) -> Optional[InventoryAlert]:
        query = (
            select(InventoryAlert)
            .where(InventoryAlert.id == alert_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def list_alerts(self, resolved: Optional[bool] = None) -> List[InventoryAlert]:
        query = select(InventoryAlert).execution_options(populate_existing=True)
        if resolved is not None:
            query = query.where(InventoryAlert.resolved.is_(resolved))
        query = query.order_by(InventoryAlert.created_at, InventoryAlert.id)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def supersede_unresolved(self, product_id: str) -> int:
        """Mark every open alert for a product as superseded"""
        stmt = (
            update(InventoryAlert)
            .where(
                InventoryAlert.product_id == product_id,
                InventoryAlert.resolved.is_(False),
            )
            .values(resolved=True, resolution="superseded", resolved_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.rowcount or 0
