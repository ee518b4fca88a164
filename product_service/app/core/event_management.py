"""
Product Service Event Management
Builds the event bus collaborators once at startup and keeps them on
``app.state`` so handlers and endpoints receive them by injection.
"""

from typing import Optional

from fastapi import FastAPI

from ..events.base import EventPublisher, EventSubscriber
from ..events.base.kafka_client import KafkaEventPublisher, KafkaEventSubscriber
from ..events.event_consumers import OrderCreatedHandler, ProductEventConsumer
from ..events.event_producers import ProductEventProducer
from ..services.alert_generator import AlertThresholds
from ..utils.logging import setup_product_logging as setup_logging
from .database import ProductServiceDatabaseManager
from .setting import get_settings

logger = setup_logging("product_service.events", log_level=get_settings().LOG_LEVEL)


async def init_events(
    app: FastAPI,
    database_manager: ProductServiceDatabaseManager,
    publisher: Optional[EventPublisher] = None,
    subscriber: Optional[EventSubscriber] = None,
) -> None:
    """Start publisher and consumer; Kafka clients are built unless given"""
    settings = get_settings()

    logger.info(
        "Initializing event infrastructure",
        extra={
            "operation": "init_events",
            "kafka_servers": settings.KAFKA_BOOTSTRAP_SERVERS,
            "service_name": settings.SERVICE_NAME,
        },
    )

    if publisher is None:
        publisher = KafkaEventPublisher(
            bootstrap_servers=settings.KAFKA_BOOTSTRAP_SERVERS,
            client_id=f"{settings.SERVICE_NAME}-producer",
            max_retries=settings.KAFKA_CONNECT_MAX_RETRIES,
            retry_delay=settings.KAFKA_CONNECT_RETRY_DELAY,
            enable_graceful_degradation=True,
        )
        await publisher.start(timeout=30.0)

    if subscriber is None:
        subscriber = KafkaEventSubscriber(
            bootstrap_servers=settings.KAFKA_BOOTSTRAP_SERVERS,
            client_id=f"{settings.SERVICE_NAME}-consumer",
            max_retries=settings.KAFKA_CONNECT_MAX_RETRIES,
            retry_delay=settings.KAFKA_CONNECT_RETRY_DELAY,
            retry_backoff=settings.CONSUMER_RETRY_BACKOFF,
            retry_backoff_max=settings.CONSUMER_RETRY_BACKOFF_MAX,
            enable_graceful_degradation=True,
        )

    event_producer = ProductEventProducer(
        publisher,
        topic=settings.KAFKA_TOPIC_INVENTORY_EVENTS,
        publish_timeout=settings.EVENT_PUBLISH_TIMEOUT,
        source=settings.SERVICE_NAME,
    )
    order_created_handler = OrderCreatedHandler(
        session_factory=database_manager.async_session_maker,
        event_producer=event_producer,
        thresholds=AlertThresholds.from_settings(),
        ledger_timeout=settings.LEDGER_OPERATION_TIMEOUT,
    )
    event_consumer = ProductEventConsumer(
        subscriber,
        order_created_handler,
        topic=settings.KAFKA_TOPIC_ORDER_EVENTS,
        group=settings.KAFKA_GROUP_ID,
    )

    app.state.event_publisher = publisher
    app.state.event_producer = event_producer
    app.state.event_consumer = event_consumer

    try:
        await event_consumer.start()
    except Exception as e:
        logger.warning(
            "Event consumer failed to start - operating in degraded mode",
            extra={"operation": "init_events_failed", "error": str(e)},
        )
        return

    logger.info(
        "Event infrastructure initialized",
        extra={"operation": "init_events_complete"},
    )


async def close_events(app: FastAPI) -> None:
    """Stop consumer first, then the publisher it may still be using"""
    event_consumer: Optional[ProductEventConsumer] = getattr(
        app.state, "event_consumer", None
    )
    publisher: Optional[EventPublisher] = getattr(app.state, "event_publisher", None)

    try:
        if event_consumer is not None:
            await event_consumer.stop()
        if isinstance(publisher, KafkaEventPublisher):
            await publisher.stop()
        logger.info(
            "Event infrastructure closed",
            extra={"operation": "close_events_complete"},
        )
    except Exception as e:
        logger.error(
            "Error closing event infrastructure",
            extra={"operation": "close_events_error", "error": str(e)},
        )


async def health_check_events(app: FastAPI) -> bool:
    """Check if event publishing is healthy"""
    publisher = getattr(app.state, "event_publisher", None)
    if isinstance(publisher, KafkaEventPublisher):
        return await publisher.health_check()
    return publisher is not None
