import asyncio
import json
from typing import Dict, List, Optional, Tuple

from aiokafka import AIOKafkaConsumer, AIOKafkaProducer  # type: ignore
from aiokafka.errors import KafkaConnectionError, KafkaError  # type: ignore
from aiokafka.structs import TopicPartition  # type: ignore
from pydantic import ValidationError

from ...core.exceptions import RetryableEventError
from ...utils.logging import setup_product_logging as setup_logging
from . import BaseEvent, EventHandler, EventPublisher, EventSubscriber

logger = setup_logging("product_service.events.kafka")


class KafkaEventPublisher(EventPublisher):
    """
    Product Service Kafka publisher with connection retry logic
    """

    def __init__(
        self,
        bootstrap_servers: str,
        client_id: str,
        max_retries: int = 20,
        retry_delay: float = 2.0,
        enable_graceful_degradation: bool = True,
    ):
        self.bootstrap_servers = bootstrap_servers
        self.client_id = client_id
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.enable_graceful_degradation = enable_graceful_degradation
        self.producer: Optional[AIOKafkaProducer] = None
        self.is_connected = False
        self._connection_lock = asyncio.Lock()

    async def start(self, timeout: float = 30.0) -> None:
        """Start Kafka producer with retry logic"""
        async with self._connection_lock:
            if self.producer and self.is_connected:
                return

            self.producer = AIOKafkaProducer(
                bootstrap_servers=self.bootstrap_servers,
                client_id=self.client_id,
                value_serializer=lambda x: json.dumps(x, default=str).encode("utf-8"),
                key_serializer=lambda x: x.encode("utf-8") if x else None,
                acks="all",
                enable_idempotence=True,
                retry_backoff_ms=1000,
                request_timeout_ms=30000,
            )

            # Retry connection with exponential backoff
            for attempt in range(self.max_retries):
                try:
                    logger.info(
                        "Attempting Kafka connection",
                        extra={
                            "attempt": attempt + 1,
                            "max_retries": self.max_retries,
                            "operation": "kafka_connect",
                        },
                    )
                    await asyncio.wait_for(self.producer.start(), timeout=timeout)
                    self.is_connected = True
                    logger.info("Successfully connected to Kafka")
                    return

                except (KafkaConnectionError, asyncio.TimeoutError) as e:
                    delay = self.retry_delay * (2**attempt)
                    logger.warning(
                        f"Kafka connection attempt {attempt + 1} failed: {e}. "
                        f"Retrying in {delay} seconds..."
                    )
                    if attempt < self.max_retries - 1:
                        await asyncio.sleep(delay)

            self.is_connected = False
            if not self.enable_graceful_degradation:
                raise KafkaConnectionError(
                    f"Could not connect to Kafka at {self.bootstrap_servers}"
                )
            logger.error(
                f"Failed to connect to Kafka after {self.max_retries} attempts. "
                f"Running in degraded mode (events will be logged but not published)"
            )

    async def stop(self) -> None:
        """Stop Kafka producer"""
        async with self._connection_lock:
            if self.producer:
                try:
                    await self.producer.stop()
                    logger.info("Kafka producer stopped")
                except Exception as e:
                    logger.warning(
                        "Error stopping Kafka producer",
                        extra={"error": str(e), "operation": "stop_producer"},
                    )
                finally:
                    self.producer = None
                    self.is_connected = False

    async def publish(
        self, topic: str, event: BaseEvent, key: Optional[str] = None
    ) -> None:
        """Publish event and wait for broker acknowledgement"""
        if not self.is_connected or not self.producer:
            raise KafkaConnectionError("Kafka producer not connected")

        await self.producer.send_and_wait(topic=topic, value=event.to_message(), key=key)
        logger.info(
            "Published event to Kafka topic",
            extra={
                "event_type": event.event_type,
                "topic": topic,
                "event_id": event.event_id,
                "partition_key": key,
                "operation": "publish_event",
            },
        )

    async def health_check(self) -> bool:
        """Check if Kafka connection is healthy"""
        try:
            if not self.producer or not self.is_connected:
                return False

            metadata = await self.producer.client.fetch_all_metadata()
            return len(metadata.brokers()) > 0

        except Exception as e:
            logger.warning(
                "Kafka health check failed",
                extra={"error": str(e), "operation": "health_check"},
            )
            return False


class KafkaEventSubscriber(EventSubscriber):
    """Product Service Kafka subscriber with at-least-once delivery

    Offsets are committed only after every handler for a message returned.
    A ``RetryableEventError`` keeps the message uncommitted and retries it in
    place with exponential backoff; any other failure is logged and the
    message is committed past so one bad payload cannot stall the partition.
    """

    def __init__(
        self,
        bootstrap_servers: str,
        client_id: str,
        max_retries: int = 5,
        retry_delay: float = 2.0,
        retry_backoff: float = 1.0,
        retry_backoff_max: float = 30.0,
        enable_graceful_degradation: bool = True,
    ):
        self.bootstrap_servers = bootstrap_servers
        self.client_id = client_id
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.retry_backoff = retry_backoff
        self.retry_backoff_max = retry_backoff_max
        self.enable_graceful_degradation = enable_graceful_degradation
        self.consumers: Dict[Tuple[str, str], AIOKafkaConsumer] = {}
        self.handlers: Dict[Tuple[str, str], List[Tuple[Optional[str], EventHandler]]] = {}
        self.tasks: List[asyncio.Task] = []
        self.running = False

    async def start(self) -> None:
        self.running = True

    async def stop(self) -> None:
        """Stop all consumers"""
        self.running = False

        for task in self.tasks:
            task.cancel()
        if self.tasks:
            await asyncio.gather(*self.tasks, return_exceptions=True)
        self.tasks.clear()

        for (topic, group), consumer in self.consumers.items():
            try:
                await consumer.stop()
                logger.info(
                    "Stopped Kafka consumer for topic",
                    extra={"topic": topic, "group": group, "operation": "stop_consumer"},
                )
            except Exception as e:
                logger.warning(
                    "Error stopping Kafka consumer",
                    extra={
                        "topic": topic,
                        "error": str(e),
                        "operation": "stop_consumer_error",
                    },
                )

        self.consumers.clear()
        self.handlers.clear()
        logger.info("All Kafka consumers stopped")

    async def subscribe(
        self,
        topic: str,
        group: str,
        handler: EventHandler,
        event_type: Optional[str] = None,
    ) -> None:
        """Register ``handler`` for ``topic`` and start consuming as ``group``"""
        subscription = (topic, group)
        self.handlers.setdefault(subscription, []).append((event_type, handler))

        if subscription in self.consumers:
            return

        consumer = AIOKafkaConsumer(
            topic,
            bootstrap_servers=self.bootstrap_servers,
            group_id=group,
            client_id=f"{self.client_id}-{topic}",
            enable_auto_commit=False,
            auto_offset_reset="earliest",
        )

        for attempt in range(self.max_retries):
            try:
                await consumer.start()
                break
            except KafkaConnectionError as e:
                delay = self.retry_delay * (2**attempt)
                logger.warning(
                    f"Kafka subscriber connection attempt {attempt + 1} failed: {e}. "
                    f"Retrying in {delay} seconds..."
                )
                if attempt < self.max_retries - 1:
                    await asyncio.sleep(delay)
        else:
            self.handlers.pop(subscription, None)
            if not self.enable_graceful_degradation:
                raise KafkaConnectionError(
                    f"Could not connect to Kafka at {self.bootstrap_servers}"
                )
            logger.error(
                "Failed to connect Kafka subscriber after all retries. "
                "Running in degraded mode (no event consumption)",
                extra={"topic": topic, "group": group},
            )
            return

        self.running = True
        self.consumers[subscription] = consumer
        self.tasks.append(
            asyncio.create_task(self._consume_messages(subscription, consumer))
        )
        logger.info(
            "Subscribed to Kafka topic",
            extra={
                "topic": topic,
                "group": group,
                "event_type": event_type,
                "operation": "subscribe",
            },
        )

    async def _consume_messages(
        self, subscription: Tuple[str, str], consumer: AIOKafkaConsumer
    ) -> None:
        topic, _ = subscription
        backoff = self.retry_backoff
        try:
            while self.running:
                try:
                    message = await consumer.getone()
                    delivered = await self._process_message(subscription, message)
                    if delivered:
                        await consumer.commit(
                            {
                                TopicPartition(message.topic, message.partition): (
                                    message.offset + 1
                                )
                            }
                        )
                    backoff = self.retry_backoff
                except KafkaError as e:
                    # An uncommitted offset is redelivered later; the order line
                    # markers make that harmless.
                    logger.warning(
                        "Kafka fetch or commit failed, continuing",
                        extra={
                            "topic": topic,
                            "error": str(e),
                            "error_type": type(e).__name__,
                            "retry_in_seconds": backoff,
                            "operation": "consumer_kafka_error",
                        },
                    )
                    await asyncio.sleep(backoff)
                    backoff = min(backoff * 2, self.retry_backoff_max)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(
                "Kafka consumer error",
                extra={"topic": topic, "error": str(e), "operation": "consumer_error"},
                exc_info=True,
            )

    async def _process_message(self, subscription: Tuple[str, str], message) -> bool:
        """Run handlers until they succeed; False if stopped before finishing"""
        topic, _ = subscription
        event = self._decode(topic, message)
        if event is None:
            return True

        backoff = self.retry_backoff
        while self.running:
            try:
                await self._dispatch(subscription, event)
                return True
            except RetryableEventError as e:
                logger.warning(
                    "Retryable event handling failure, redelivering",
                    extra={
                        "topic": topic,
                        "partition": message.partition,
                        "offset": message.offset,
                        "event_id": event.event_id,
                        "event_type": event.event_type,
                        "error": str(e),
                        "retry_in_seconds": backoff,
                        "operation": "handler_retry",
                    },
                )
                await asyncio.sleep(backoff)
                backoff = min(backoff * 2, self.retry_backoff_max)
            except Exception as e:
                logger.error(
                    "Event handler error, skipping message",
                    extra={
                        "topic": topic,
                        "partition": message.partition,
                        "offset": message.offset,
                        "event_id": event.event_id,
                        "event_type": event.event_type,
                        "error": str(e),
                        "operation": "handler_error",
                    },
                    exc_info=True,
                )
                return True
        return False

    def _decode(self, topic: str, message) -> Optional[BaseEvent]:
        try:
            payload = json.loads(message.value.decode("utf-8"))
            return BaseEvent.model_validate(payload)
        except (UnicodeDecodeError, json.JSONDecodeError, ValidationError, AttributeError) as e:
            logger.error(
                "Undecodable Kafka message, skipping",
                extra={
                    "topic": topic,
                    "partition": message.partition,
                    "offset": message.offset,
                    "error": str(e),
                    "operation": "decode_error",
                },
            )
            return None

    async def _dispatch(self, subscription: Tuple[str, str], event: BaseEvent) -> None:
        for event_type, handler in self.handlers.get(subscription, []):
            if event_type is None or event_type == event.event_type:
                await handler.handle(event)
