"""
Product Service Event Producers
==============================

Publishes inventory events from the product service. Publishing is
best-effort: it runs after the ledger write it describes has committed, and a
failure is logged instead of propagated.
"""

import asyncio
from typing import Optional

from ..core.exceptions import PublishError
from ..utils.logging import setup_product_logging as setup_logging
from .base import BaseEvent, EventPublisher
from .schemas import INVENTORY_EVENTS_TOPIC, STOCK_ADJUSTED, StockAdjustedEventData

logger = setup_logging("product_service.events.producers")


def order_reservation_reason(order_number: str) -> str:
    return f"Order {order_number} - Inventory reserved"


class ProductEventProducer:
    """
    Product service event producer over an injected ``EventPublisher``.
    """

    def __init__(
        self,
        publisher: EventPublisher,
        topic: str = INVENTORY_EVENTS_TOPIC,
        publish_timeout: Optional[float] = None,
        source: str = "product-service",
    ):
        if publish_timeout is None:
            from ..core.setting import get_settings

            publish_timeout = get_settings().EVENT_PUBLISH_TIMEOUT

        self.publisher = publisher
        self.topic = topic
        self.publish_timeout = publish_timeout
        self.source = source

    # ==============================================
    # INVENTORY EVENTS
    # ==============================================

    async def publish_stock_adjusted(
        self,
        product_id: str,
        quantity_adjusted: int,
        new_quantity: int,
        reason: str,
        order_id: Optional[str] = None,
    ) -> bool:
        """Publish a StockAdjusted event keyed by product id.

        Returns True once the broker acknowledged the event, False otherwise.
        """
        event_data = StockAdjustedEventData(
            product_id=product_id,
            quantity_adjusted=quantity_adjusted,
            new_quantity=new_quantity,
            reason=reason,
            order_id=order_id,
        )
        event = BaseEvent(
            event_type=STOCK_ADJUSTED,
            source=self.source,
            data=event_data.to_dict(),
        )

        try:
            await asyncio.wait_for(
                self.publisher.publish(self.topic, event, key=product_id),
                timeout=self.publish_timeout,
            )
        except Exception as e:
            error = PublishError(self.topic, STOCK_ADJUSTED, e)
            logger.error(
                str(error),
                extra={
                    "event_id": event.event_id,
                    "product_id": product_id,
                    "order_id": order_id,
                    "new_quantity": new_quantity,
                    "error_type": type(e).__name__,
                    "operation": "publish_stock_adjusted",
                },
            )
            return False

        logger.info(
            "Published stock adjusted event",
            extra={
                "event_id": event.event_id,
                "product_id": product_id,
                "quantity_adjusted": quantity_adjusted,
                "new_quantity": new_quantity,
                "order_id": order_id,
                "operation": "publish_stock_adjusted",
            },
        )
        return True
