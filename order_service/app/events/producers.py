import asyncio
from typing import Optional

from ..models.order import Order
from ..utils.logging import setup_order_logging as setup_logging
from .base import BaseEvent, EventPublisher
from .schemas import (
    ORDER_CREATED,
    ORDER_EVENTS_TOPIC,
    OrderCreatedEventData,
    OrderLineItem,
)

logger = setup_logging("order_service.events.producers")


class OrderEventProducer:
    """Publishes order lifecycle events.

    Called only after the order row has committed. Publishing is best-effort:
    failures and timeouts are logged and reported through the return value.
    """

    def __init__(
        self,
        publisher: EventPublisher,
        topic: str = ORDER_EVENTS_TOPIC,
        publish_timeout: float = 10.0,
        source: str = "order-service",
    ):
        self.publisher = publisher
        self.topic = topic
        self.publish_timeout = publish_timeout
        self.source = source

    def build_order_created(self, order: Order) -> BaseEvent:
        event_data = OrderCreatedEventData(
            order_id=str(order.id),
            order_number=order.order_number,
            customer_id=order.customer_id,
            items=[
                OrderLineItem(
                    product_id=item.product_id,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                )
                for item in order.items
            ],
            total_amount=order.total_amount,
            currency=order.currency,
        )
        return BaseEvent(
            event_type=ORDER_CREATED, source=self.source, data=event_data.to_dict()
        )

    async def publish_order_created(self, order: Order) -> bool:
        """Publish OrderCreated keyed by order id; True once acknowledged"""
        event = self.build_order_created(order)
        log_data = {
            "event_id": event.event_id,
            "order_id": str(order.id),
            "order_number": order.order_number,
            "items_count": len(order.items),
        }

        try:
            await asyncio.wait_for(
                self.publisher.publish(self.topic, event, key=str(order.id)),
                timeout=self.publish_timeout,
            )
        except Exception as e:
            logger.error(
                f"Failed to publish order created event: {e!r}",
                extra={**log_data, "topic": self.topic, "operation": "publish_order_created"},
            )
            return False

        logger.info(
            "Published order created event",
            extra={**log_data, "topic": self.topic, "operation": "publish_order_created"},
        )
        return True
