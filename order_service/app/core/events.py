"""
Order Service Event Management
Builds the event publisher once at startup and keeps it on ``app.state``.
"""

from typing import Optional

from fastapi import FastAPI

from ..events.base import EventPublisher
from ..events.base.kafka_client import KafkaEventPublisher
from ..events.producers import OrderEventProducer
from ..utils.logging import setup_order_logging as setup_logging
from .setting import get_settings

logger = setup_logging("order_service.events", log_level=get_settings().LOG_LEVEL)


async def init_events(app: FastAPI, publisher: Optional[EventPublisher] = None) -> None:
    """Initialize event publishing infrastructure"""
    settings = get_settings()

    if publisher is None:
        publisher = KafkaEventPublisher(
            bootstrap_servers=settings.KAFKA_BOOTSTRAP_SERVERS,
            client_id=f"{settings.SERVICE_NAME}-producer",
            max_retries=settings.KAFKA_CONNECT_MAX_RETRIES,
            retry_delay=settings.KAFKA_CONNECT_RETRY_DELAY,
            enable_graceful_degradation=True,
        )
        await publisher.start(timeout=30.0)

    app.state.event_publisher = publisher
    app.state.event_producer = OrderEventProducer(
        publisher,
        topic=settings.KAFKA_TOPIC_ORDER_EVENTS,
        publish_timeout=settings.EVENT_PUBLISH_TIMEOUT,
        source=settings.SERVICE_NAME,
    )
    logger.info(
        "Event publishing infrastructure initialized",
        extra={
            "operation": "init_events",
            "kafka_servers": settings.KAFKA_BOOTSTRAP_SERVERS,
            "topic": settings.KAFKA_TOPIC_ORDER_EVENTS,
        },
    )


async def close_events(app: FastAPI) -> None:
    """Close event publishing infrastructure"""
    publisher = getattr(app.state, "event_publisher", None)
    try:
        if isinstance(publisher, KafkaEventPublisher):
            await publisher.stop()
            logger.info(
                "Event publishing infrastructure closed",
                extra={"operation": "close_events"},
            )
    except Exception as e:
        logger.error(
            f"Error closing event infrastructure: {e}",
            extra={"operation": "close_events"},
        )


async def health_check_events(app: FastAPI) -> bool:
    """Check if event publishing is healthy"""
    publisher = getattr(app.state, "event_publisher", None)
    if isinstance(publisher, KafkaEventPublisher):
        return await publisher.health_check()
    return publisher is not None
