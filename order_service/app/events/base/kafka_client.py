import asyncio
import json
from typing import Optional

from aiokafka import AIOKafkaProducer  # type: ignore
from aiokafka.errors import KafkaConnectionError  # type: ignore

from ...utils.logging import setup_order_logging as setup_logging
from . import BaseEvent, EventPublisher

logger = setup_logging("order_service.events.kafka")


class KafkaEventPublisher(EventPublisher):
    """Order Service Kafka publisher with connection retry logic"""

    def __init__(
        self,
        bootstrap_servers: str,
        client_id: str,
        max_retries: int = 10,
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

    async def start(self, timeout: float = 30.0) -> None:
        """Start Kafka producer, retrying with exponential backoff"""
        if self.producer and self.is_connected:
            return

        self.producer = AIOKafkaProducer(
            bootstrap_servers=self.bootstrap_servers,
            client_id=self.client_id,
            value_serializer=lambda x: json.dumps(x, default=str).encode("utf-8"),
            key_serializer=lambda x: x.encode("utf-8") if x else None,
            acks="all",
            enable_idempotence=True,
        )

        for attempt in range(self.max_retries):
            try:
                await asyncio.wait_for(self.producer.start(), timeout=timeout)
                self.is_connected = True
                logger.info(
                    "Connected to Kafka",
                    extra={"attempt": attempt + 1, "operation": "kafka_connect"},
                )
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
            "Failed to connect to Kafka, running in degraded mode "
            "(order events will be logged but not published)"
        )

    async def stop(self) -> None:
        if self.producer:
            try:
                await self.producer.stop()
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
        if not self.is_connected or not self.producer:
            raise KafkaConnectionError("Kafka producer not connected")

        await self.producer.send_and_wait(topic=topic, value=event.to_message(), key=key)

    async def health_check(self) -> bool:
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
