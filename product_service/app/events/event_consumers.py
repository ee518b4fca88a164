"""
Product Service Event Consumers
==============================

Turns ``OrderCreated`` events into inventory reservations.

Delivery is at-least-once, so each order line is applied at most once: the
audit row written with the ledger update carries ``(order_id, line_number)``
under a unique constraint and doubles as the applied marker. Fully handled
events are also recorded in ``processed_events`` so a redelivered event is
dropped before any line is looked at.
"""

from typing import Callable, Optional

from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import DuplicateAdjustment, PersistenceError, ProductNotFound
from ..repository.event_repository import ProcessedEventRepository
from ..services.alert_generator import AlertGenerator, AlertThresholds
from ..services.inventory_ledger import InventoryLedger
from ..utils.logging import setup_product_logging as setup_logging
from .base import BaseEvent, EventHandler, EventSubscriber
from .event_producers import ProductEventProducer, order_reservation_reason
from .schemas import (
    ORDER_CREATED,
    ORDER_EVENTS_TOPIC,
    OrderCreatedEventData,
    OrderLineItem,
)

logger = setup_logging("product_service.events.consumers")

SessionFactory = Callable[[], AsyncSession]


class OrderCreatedHandler(EventHandler):
    """Reserve inventory for every line of a newly created order"""

    def __init__(
        self,
        session_factory: SessionFactory,
        event_producer: ProductEventProducer,
        thresholds: Optional[AlertThresholds] = None,
        ledger_timeout: Optional[float] = None,
    ):
        self.session_factory = session_factory
        self.event_producer = event_producer
        self.thresholds = thresholds
        self.ledger_timeout = ledger_timeout

    async def handle(self, event: BaseEvent) -> None:
        """Apply one OrderCreated event; PersistenceError means redeliver"""
        if event.event_type != ORDER_CREATED:
            logger.debug(
                "Ignoring event of another type",
                extra={"event_id": event.event_id, "event_type": event.event_type},
            )
            return

        async with self.session_factory() as session:
            processed_events = ProcessedEventRepository(session)
            try:
                already_processed = await processed_events.is_processed(event.event_id)
            except SQLAlchemyError as e:
                raise PersistenceError(f"Processed event lookup failed: {e}", e) from e

            if already_processed:
                logger.info(
                    "Skipping already processed event",
                    extra={
                        "event_id": event.event_id,
                        "operation": "order_created_duplicate",
                    },
                )
                return

            try:
                order = OrderCreatedEventData.model_validate(event.data)
            except ValidationError as e:
                logger.error(
                    "Dropping malformed OrderCreated event",
                    extra={
                        "event_id": event.event_id,
                        "errors": e.errors(include_url=False),
                        "operation": "order_created_invalid",
                    },
                )
                return

            logger.info(
                "Processing inventory reservation for order",
                extra={
                    "event_id": event.event_id,
                    "order_id": order.order_id,
                    "order_number": order.order_number,
                    "items_count": len(order.items),
                    "operation": "order_created_start",
                },
            )

            ledger = InventoryLedger(session, operation_timeout=self.ledger_timeout)
            alerts = AlertGenerator(session, thresholds=self.thresholds)

            for line_number, item in enumerate(order.items):
                try:
                    await self._apply_line(ledger, alerts, order, line_number, item)
                except PersistenceError as e:
                    logger.error(
                        "Aborting order reservation, event will be redelivered",
                        extra={
                            "event_id": event.event_id,
                            "order_id": order.order_id,
                            "line_number": line_number,
                            "product_id": item.product_id,
                            "error": str(e),
                            "operation": "order_created_abort",
                        },
                    )
                    raise

            await self._mark_processed(session, ledger, event, order.order_id)

            logger.info(
                "Completed inventory reservation for order",
                extra={
                    "event_id": event.event_id,
                    "order_id": order.order_id,
                    "operation": "order_created_complete",
                },
            )

    async def _apply_line(
        self,
        ledger: InventoryLedger,
        alerts: AlertGenerator,
        order: OrderCreatedEventData,
        line_number: int,
        item: OrderLineItem,
    ) -> None:
        line_context = {
            "order_id": order.order_id,
            "line_number": line_number,
            "product_id": item.product_id,
        }

        if await ledger.is_line_applied(order.order_id, line_number):
            logger.info(
                "Order line already applied, skipping",
                extra={**line_context, "operation": "order_line_duplicate"},
            )
            return

        record = await ledger.get_record(item.product_id)
        if record is None:
            logger.warning(
                "No inventory record for ordered product, skipping line",
                extra={
                    **line_context,
                    "quantity": item.quantity,
                    "operation": "order_line_unknown_product",
                },
            )
            return

        try:
            adjustment = await ledger.adjust_with_audit(
                product_id=item.product_id,
                signed_delta=-item.quantity,
                reason=order_reservation_reason(order.order_number),
                actor="system",
                order_id=order.order_id,
                line_number=line_number,
                commit=False,
            )
            alert = await alerts.evaluate(adjustment, commit=False)
            await ledger.commit()
        except ProductNotFound:
            logger.warning(
                "Inventory record disappeared, skipping line",
                extra={**line_context, "operation": "order_line_unknown_product"},
            )
            return
        except DuplicateAdjustment:
            logger.info(
                "Order line applied concurrently, skipping",
                extra={**line_context, "operation": "order_line_duplicate"},
            )
            return

        logger.info(
            "Reserved inventory for order line",
            extra={
                **line_context,
                "quantity": item.quantity,
                "new_quantity": adjustment.new_quantity,
                "alert_severity": alert.severity if alert else None,
                "operation": "order_line_applied",
            },
        )

        await self.event_producer.publish_stock_adjusted(
            product_id=item.product_id,
            quantity_adjusted=adjustment.requested_delta,
            new_quantity=adjustment.new_quantity,
            reason=order_reservation_reason(order.order_number),
            order_id=order.order_id,
        )

    async def _mark_processed(
        self,
        session: AsyncSession,
        ledger: InventoryLedger,
        event: BaseEvent,
        order_id: str,
    ) -> None:
        try:
            await ProcessedEventRepository(session).mark_processed(
                event.event_id, event.event_type, order_id
            )
        except IntegrityError:
            await ledger.rollback()
            logger.info(
                "Event marked processed concurrently",
                extra={"event_id": event.event_id, "operation": "order_created_mark"},
            )
            return
        except SQLAlchemyError as e:
            await ledger.rollback()
            raise PersistenceError(f"Failed to record processed event: {e}", e) from e

        await ledger.commit()


class ProductEventConsumer:
    """Wires the product service handlers to the event bus"""

    def __init__(
        self,
        subscriber: EventSubscriber,
        order_created_handler: OrderCreatedHandler,
        topic: str = ORDER_EVENTS_TOPIC,
        group: str = "product-service-group",
    ):
        self.subscriber = subscriber
        self.order_created_handler = order_created_handler
        self.topic = topic
        self.group = group

    async def start(self) -> None:
        """Subscribe the OrderCreated handler"""
        await self.subscriber.start()

        await self.subscriber.subscribe(
            topic=self.topic,
            group=self.group,
            handler=self.order_created_handler,
            event_type=ORDER_CREATED,
        )

        logger.info(
            "Started consuming product service events",
            extra={
                "subscriptions": [f"{self.topic}:{ORDER_CREATED}"],
                "group": self.group,
                "operation": "consumer_start",
            },
        )

    async def stop(self) -> None:
        """Stop event consumer"""
        await self.subscriber.stop()
