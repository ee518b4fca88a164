from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from .base import ProductServiceBaseModel, utcnow


class InventoryRecord(ProductServiceBaseModel):
    """Authoritative stock-on-hand for one product.

    Static fields (name, reorder point, active flag) belong to the product
    catalogue; only the inventory ledger writes ``quantity``.
    """

    __tablename__ = "inventory_records"

    product_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    reorder_point: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_active: Mapped[bool] = mapped_column(default=True, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False), default=utcnow, onupdate=utcnow, nullable=False
    )

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="inventory_quantity_non_negative"),
    )


class StockAdjustment(ProductServiceBaseModel):
    """Append-only audit trail of ledger mutations.

    Rows written for an order line carry ``order_id``/``line_number``; the
    unique constraint on that pair is the applied-once marker for redelivered
    order events. Manual adjustments leave both NULL.
    """

    __tablename__ = "stock_adjustments"

    product_id: Mapped[str] = mapped_column(String(64), index=True, nullable=False)
    quantity_delta: Mapped[int] = mapped_column(Integer, nullable=False)
    previous_quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    resulting_quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    reason: Mapped[str] = mapped_column(String(255), nullable=False)
    adjustment_type: Mapped[str] = mapped_column(String(16), nullable=False)
    actor: Mapped[str] = mapped_column(String(64), default="system", nullable=False)

    order_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    line_number: Mapped[int | None] = mapped_column(Integer, nullable=True)

    __table_args__ = (
        UniqueConstraint("order_id", "line_number", name="uq_adjustment_order_line"),
        CheckConstraint(
            "adjustment_type IN ('increase', 'decrease')",
            name="stock_adjustment_type",
        ),
    )
