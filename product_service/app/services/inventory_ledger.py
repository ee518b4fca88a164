"""Inventory ledger: the only writer of stock-on-hand

Underflow policy: a decrement larger than the stock on hand clamps the result
at zero and logs a warning carrying the shortfall. The audit row keeps the
requested delta next to the previous and resulting quantities so the oversell
stays visible.
"""

import asyncio
from typing import Awaitable, List, Optional, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import (
    DuplicateAdjustment,
    InventoryError,
    PersistenceError,
    ProductNotFound,
)
from ..models.inventory import InventoryRecord, StockAdjustment
from ..repository.inventory_repository import InventoryRepository
from ..schemas.inventory import AdjustmentType, LedgerAdjustment
from ..utils.logging import setup_product_logging as setup_logging

logger = setup_logging("product_service.inventory_ledger")

T = TypeVar("T")


class InventoryLedger:
    """Atomic adjust-and-read operations over ``inventory_records``"""

    def __init__(self, db: AsyncSession, operation_timeout: Optional[float] = None):
        if operation_timeout is None:
            from ..core.setting import get_settings

            operation_timeout = get_settings().LEDGER_OPERATION_TIMEOUT

        self.db = db
        self.repository = InventoryRepository(db)
        self.operation_timeout = operation_timeout

    async def _bounded(self, awaitable: Awaitable[T], operation: str) -> T:
        try:
            return await asyncio.wait_for(awaitable, timeout=self.operation_timeout)
        except asyncio.TimeoutError as e:
            raise PersistenceError(
                f"Ledger {operation} timed out after {self.operation_timeout}s", e
            ) from e

    async def rollback(self) -> None:
        try:
            await self.db.rollback()
        except SQLAlchemyError as e:
            logger.error(
                "Ledger rollback failed",
                extra={"error": str(e), "operation": "ledger_rollback"},
            )

    async def commit(self) -> None:
        """Commit the current unit of work"""
        try:
            await self._bounded(self.db.commit(), "commit")
        except PersistenceError:
            await self.rollback()
            raise
        except SQLAlchemyError as e:
            await self.rollback()
            raise PersistenceError(f"Ledger commit failed: {e}", e) from e

    async def get_record(self, product_id: str) -> Optional[InventoryRecord]:
        try:
            return await self._bounded(
                self.repository.get_by_product_id(product_id), "read"
            )
        except SQLAlchemyError as e:
            raise PersistenceError(f"Ledger read failed: {e}", e) from e

    async def is_line_applied(self, order_id: str, line_number: int) -> bool:
        try:
            return await self._bounded(
                self.repository.line_already_applied(order_id, line_number),
                "marker_read",
            )
        except SQLAlchemyError as e:
            raise PersistenceError(f"Ledger marker read failed: {e}", e) from e

    async def adjust(self, product_id: str, signed_delta: int) -> int:
        """Apply ``signed_delta`` to stock (clamped at zero) and return the result"""
        try:
            new_quantity = await self._bounded(
                self.repository.apply_delta(product_id, signed_delta), "update"
            )
            if new_quantity is None:
                raise ProductNotFound(product_id)
            await self._bounded(self.db.commit(), "commit")
        except InventoryError:
            await self.rollback()
            raise
        except SQLAlchemyError as e:
            await self.rollback()
            raise PersistenceError(f"Ledger adjust failed: {e}", e) from e

        logger.info(
            "Stock adjusted",
            extra={
                "product_id": product_id,
                "quantity_change": signed_delta,
                "new_quantity": new_quantity,
                "operation": "ledger_adjust",
            },
        )
        return new_quantity

    async def adjust_with_audit(
        self,
        product_id: str,
        signed_delta: int,
        reason: str,
        actor: str = "system",
        order_id: Optional[str] = None,
        line_number: Optional[int] = None,
        commit: bool = True,
    ) -> LedgerAdjustment:
        """Apply ``signed_delta`` and append its audit row in one transaction.

        With ``commit=False`` the caller owns the unit of work and must call
        :meth:`commit` (or :meth:`rollback`) itself.
        """
        try:
            record = await self._bounded(
                self.repository.get_by_product_id(product_id, for_update=True),
                "read",
            )
            if record is None:
                raise ProductNotFound(product_id)

            previous_quantity = record.quantity
            product_name = record.name
            reorder_point = record.reorder_point

            new_quantity = await self._bounded(
                self.repository.apply_delta(product_id, signed_delta), "update"
            )
            if new_quantity is None:
                raise ProductNotFound(product_id)

            await self._bounded(
                self.repository.add_adjustment(
                    StockAdjustment(
                        product_id=product_id,
                        quantity_delta=signed_delta,
                        previous_quantity=previous_quantity,
                        resulting_quantity=new_quantity,
                        reason=reason,
                        adjustment_type=(
                            AdjustmentType.INCREASE.value
                            if signed_delta >= 0
                            else AdjustmentType.DECREASE.value
                        ),
                        actor=actor,
                        order_id=order_id,
                        line_number=line_number,
                    )
                ),
                "audit",
            )

            if commit:
                await self._bounded(self.db.commit(), "commit")

        except InventoryError:
            await self.rollback()
            raise
        except IntegrityError as e:
            await self.rollback()
            if order_id is not None and line_number is not None:
                raise DuplicateAdjustment(order_id, line_number) from e
            raise PersistenceError(f"Ledger write rejected: {e}", e) from e
        except SQLAlchemyError as e:
            await self.rollback()
            raise PersistenceError(f"Ledger write failed: {e}", e) from e

        adjustment = LedgerAdjustment(
            product_id=product_id,
            product_name=product_name,
            reorder_point=reorder_point,
            requested_delta=signed_delta,
            previous_quantity=previous_quantity,
            new_quantity=new_quantity,
        )

        if adjustment.clamped:
            logger.warning(
                "Stock decrement exceeded stock on hand, clamped at zero",
                extra={
                    "product_id": product_id,
                    "previous_quantity": previous_quantity,
                    "requested_delta": signed_delta,
                    "shortfall": -(previous_quantity + signed_delta),
                    "order_id": order_id,
                    "operation": "ledger_clamp",
                },
            )

        logger.info(
            "Stock adjusted with audit",
            extra={
                "product_id": product_id,
                "previous_quantity": previous_quantity,
                "quantity_change": signed_delta,
                "new_quantity": new_quantity,
                "reason": reason,
                "actor": actor,
                "order_id": order_id,
                "line_number": line_number,
                "committed": commit,
                "operation": "ledger_adjust_with_audit",
            },
        )
        return adjustment

    async def list_adjustments(self, product_id: str) -> List[StockAdjustment]:
        try:
            return await self.repository.list_adjustments(product_id)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to list stock adjustments: {e}", e) from e

    async def list_low_stock(
        self, threshold: Optional[int] = None
    ) -> List[InventoryRecord]:
        try:
            return await self.repository.list_low_stock(threshold)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to list low stock records: {e}", e) from e
