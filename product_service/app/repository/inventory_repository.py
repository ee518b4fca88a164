"""Inventory repository for ledger database operations

Methods here only execute and flush; the ledger decides when a unit of work
commits so that a quantity change and its audit row land together.
"""

from typing import List, Optional

from sqlalchemy import case, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.inventory import InventoryRecord, StockAdjustment
from ..models.base import utcnow


class InventoryRepository:
    """Repository for inventory database operations"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_product_id(
        self, product_id: str, for_update: bool = False
    ) -> Optional[InventoryRecord]:
        """Get the ledger row for a product, optionally row-locked"""
        query = (
            select(InventoryRecord)
            .where(InventoryRecord.product_id == product_id)
            .execution_options(populate_existing=True)
        )
        if for_update:
            query = query.with_for_update()
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def apply_delta(self, product_id: str, signed_delta: int) -> Optional[int]:
        """Atomically add ``signed_delta`` to stock, clamped at zero.

        Runs as a single UPDATE so concurrent adjusters are serialised by the
        database. Returns the resulting quantity, or None when no row matched.
        """
        table = InventoryRecord.__table__
        adjusted = table.c.quantity + signed_delta
        stmt = (
            update(table)
            .where(table.c.product_id == product_id)
            .values(
                quantity=case((adjusted < 0, 0), else_=adjusted),
                updated_at=utcnow(),
            )
            .returning(table.c.quantity)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def add_adjustment(self, adjustment: StockAdjustment) -> StockAdjustment:
        """Append an audit row"""
        self.db.add(adjustment)
        await self.db.flush()
        return adjustment

    async def line_already_applied(self, order_id: str, line_number: int) -> bool:
        """Check the applied-once marker for an order line"""
        query = select(StockAdjustment.id).where(
            StockAdjustment.order_id == order_id,
            StockAdjustment.line_number == line_number,
        )
        result = await self.db.execute(query)
        return result.first() is not None

    async def list_adjustments(self, product_id: str) -> List[StockAdjustment]:
        """Audit trail for a product, oldest first"""
        query = (
            select(StockAdjustment)
            .where(StockAdjustment.product_id == product_id)
            .order_by(StockAdjustment.created_at, StockAdjustment.id)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def list_low_stock(
        self, threshold: Optional[int] = None
    ) -> List[InventoryRecord]:
        """Active records at or below ``threshold``, or their own reorder point"""
        query = (
            select(InventoryRecord)
            .where(InventoryRecord.is_active.is_(True))
            .execution_options(populate_existing=True)
        )
        if threshold is None:
            query = query.where(InventoryRecord.quantity <= InventoryRecord.reorder_point)
        else:
            query = query.where(InventoryRecord.quantity <= threshold)
        query = query.order_by(InventoryRecord.quantity, InventoryRecord.product_id)
        result = await self.db.execute(query)
        return list(result.scalars().all())
