"""
Pytest configuration and fixtures for Order Service tests.
"""

import os
from typing import Any, AsyncGenerator, List, Optional, Tuple
from unittest.mock import Mock

import pytest

# Set up test environment
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("ORDER_DATABASE_URL", "sqlite+aiosqlite:///./order_test.db")

# Import order service components
from order_service.app.core.database import OrderServiceDatabaseManager
from order_service.app.events.base import BaseEvent, EventPublisher
from order_service.app.events.producers import OrderEventProducer


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


@pytest.fixture
def database_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'orders.db'}"


@pytest.fixture
async def database_manager(database_url) -> AsyncGenerator[OrderServiceDatabaseManager, None]:
    """Create test database manager."""
    manager = OrderServiceDatabaseManager(database_url)
    await manager.create_tables()

    yield manager

    await manager.close()


@pytest.fixture
async def db_session(database_manager) -> AsyncGenerator[Any, None]:
    """Create a test database session."""
    async with database_manager.async_session_maker() as session:
        yield session


@pytest.fixture
def event_publisher() -> RecordingEventPublisher:
    return RecordingEventPublisher()


@pytest.fixture
def failing_event_publisher() -> RecordingEventPublisher:
    return RecordingEventPublisher(fail=True)


@pytest.fixture
def event_producer(event_publisher) -> OrderEventProducer:
    return OrderEventProducer(event_publisher, publish_timeout=1.0)


@pytest.fixture
def mock_request():
    """Mock FastAPI Request object."""
    from fastapi import Request

    mock_req = Mock(spec=Request)
    mock_req.state = Mock()
    mock_req.headers = {}
    mock_req.url = Mock()
    mock_req.url.path = "/api/v1/orders"
    mock_req.method = "POST"
    return mock_req


@pytest.fixture
def sample_order_payload():
    """Order with two lines for customer c-1."""
    return {
        "customer_id": "c-1",
        "items": [
            {"product_id": "P1", "quantity": 2, "unit_price": "4.50"},
            {"product_id": "P2", "quantity": 1, "unit_price": "10.00"},
        ],
    }
