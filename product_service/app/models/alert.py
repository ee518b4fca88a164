from datetime import datetime

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import ProductServiceBaseModel


class InventoryAlert(ProductServiceBaseModel):
    __tablename__ = "inventory_alerts"

    product_id: Mapped[str] = mapped_column(String(64), index=True, nullable=False)
    # Snapshot of the product name when the alert was raised
    product_name: Mapped[str] = mapped_column(String(255), nullable=False)
    current_stock: Mapped[int] = mapped_column(Integer, nullable=False)
    threshold: Mapped[int] = mapped_column(Integer, nullable=False)
    severity: Mapped[str] = mapped_column(String(16), nullable=False)

    resolved: Mapped[bool] = mapped_column(default=False, nullable=False)
    resolution: Mapped[str | None] = mapped_column(String(16), nullable=True)
    resolved_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=False), nullable=True
    )
