from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from .base import ProductServiceBaseModel


class ProcessedEvent(ProductServiceBaseModel):
    """Inbound events whose every line item has been handled."""

    __tablename__ = "processed_events"

    event_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    event_type: Mapped[str] = mapped_column(String(64), nullable=False)
    order_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
