"""
Pytest configuration and fixtures for Product Service tests.
"""

import os
from decimal import Decimal
from typing import Any, AsyncGenerator, Dict, List, Optional, Tuple

import pytest
from sqlalchemy import select

# Set up test environment
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("PRODUCT_DATABASE_URL", "sqlite+aiosqlite:///./product_test.db")

# Import product service components
from product_service.app.core.database import ProductServiceDatabaseManager
from product_service.app.events.base import (
    BaseEvent,
    EventHandler,
    EventPublisher,
    EventSubscriber,
)
from product_service.app.events.event_consumers import OrderCreatedHandler
from product_service.app.events.event_producers import ProductEventProducer
from product_service.app.models.inventory import InventoryRecord
from product_service.app.services.alert_generator import AlertThresholds


class RecordingEventPublisher(EventPublisher):
    """In-memory publisher that keeps every (topic, event, key) it was given"""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.published: List[Tuple[str, BaseEvent, Optional[str]]] = []

    async def publish(
        self, topic: str, event: BaseEvent, key: Optional[str] = None
    ) -> None:
        if self.fail:
            raise ConnectionError("broker unavailable")
        self.published.append((topic, event, key))

    def events_of_type(self, event_type: str) -> List[BaseEvent]:
        return [event for _, event, _ in self.published if event.event_type == event_type]


class RecordingEventSubscriber(EventSubscriber):
    """Subscriber that records subscriptions without consuming anything"""

    def __init__(self):
        self.subscriptions: List[Tuple[str, str, EventHandler, Optional[str]]] = []
        self.started = False
        self.stopped = False

    async def start(self) -> None:
        self.started = True

    async def stop(self) -> None:
        self.stopped = True

    async def subscribe(
        self,
        topic: str,
        group: str,
        handler: EventHandler,
        event_type: Optional[str] = None,
    ) -> None:
        self.subscriptions.append((topic, group, handler, event_type))


@pytest.fixture
def database_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'inventory.db'}"


@pytest.fixture
async def database_manager(database_url) -> AsyncGenerator[ProductServiceDatabaseManager, None]:
    """Database manager on a throwaway SQLite file with all tables created."""
    manager = ProductServiceDatabaseManager(database_url)
    await manager.create_tables()

    yield manager

    await manager.close()


@pytest.fixture
def session_factory(database_manager):
    return database_manager.async_session_maker


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[Any, None]:
    """Create a test database session."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def seed_inventory(session_factory):
    """Insert inventory records: ``await seed_inventory(("P1", 5, 10), ...)``"""

    async def _seed(*rows: Tuple[str, int, int]) -> None:
        async with session_factory() as session:
            for product_id, quantity, reorder_point in rows:
                session.add(
                    InventoryRecord(
                        product_id=product_id,
                        name=f"Product {product_id}",
                        quantity=quantity,
                        reorder_point=reorder_point,
                    )
                )
            await session.commit()

    return _seed


@pytest.fixture
def stock_of(session_factory):
    """Read the committed stock level of a product"""

    async def _stock_of(product_id: str) -> Optional[int]:
        async with session_factory() as session:
            result = await session.execute(
                select(InventoryRecord.quantity).where(
                    InventoryRecord.product_id == product_id
                )
            )
            return result.scalar_one_or_none()

    return _stock_of


@pytest.fixture
def thresholds() -> AlertThresholds:
    return AlertThresholds(critical_stock_level=0, high_ratio=0.5)


@pytest.fixture
def event_publisher() -> RecordingEventPublisher:
    return RecordingEventPublisher()


@pytest.fixture
def failing_event_publisher() -> RecordingEventPublisher:
    return RecordingEventPublisher(fail=True)


@pytest.fixture
def event_subscriber() -> RecordingEventSubscriber:
    return RecordingEventSubscriber()


@pytest.fixture
def event_producer(event_publisher) -> ProductEventProducer:
    return ProductEventProducer(event_publisher, publish_timeout=1.0)


@pytest.fixture
def order_created_handler(session_factory, event_producer, thresholds) -> OrderCreatedHandler:
    return OrderCreatedHandler(
        session_factory=session_factory,
        event_producer=event_producer,
        thresholds=thresholds,
        ledger_timeout=5.0,
    )


@pytest.fixture
def make_order_event():
    """Build an OrderCreated envelope from ``(product_id, quantity)`` lines"""

    def _make(
        order_id: str = "1001",
        lines: Tuple[Tuple[str, int], ...] = (("P1", 1),),
        order_number: str = "ORD-1001",
        event_id: Optional[str] = None,
    ) -> BaseEvent:
        data: Dict[str, Any] = {
            "orderId": order_id,
            "orderNumber": order_number,
            "customerId": "customer-7",
            "items": [
                {"productId": product_id, "quantity": quantity, "unitPrice": "9.99"}
                for product_id, quantity in lines
            ],
            "totalAmount": str(Decimal("9.99") * sum(quantity for _, quantity in lines)),
            "currency": "USD",
        }
        envelope: Dict[str, Any] = {
            "event_type": "OrderCreated",
            "source": "order-service",
            "data": data,
        }
        if event_id is not None:
            envelope["event_id"] = event_id
        return BaseEvent(**envelope)

    return _make
