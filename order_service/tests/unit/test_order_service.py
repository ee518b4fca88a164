"""
Unit tests for order creation and OrderCreated publishing.
"""

from decimal import Decimal
from unittest.mock import AsyncMock

import pytest
from fastapi import HTTPException
from sqlalchemy.exc import OperationalError

from order_service.app.events.producers import OrderEventProducer
from order_service.app.events.schemas import ORDER_CREATED, ORDER_EVENTS_TOPIC
from order_service.app.schemas.order import CreateOrderRequest
from order_service.app.services.order_service import OrderService


class TestCreateOrder:
    """Test order persistence followed by event publication"""

    @pytest.mark.asyncio
    async def test_creates_order_and_publishes_once(
        self, db_session, event_producer, event_publisher, sample_order_payload
    ):
        service = OrderService(db_session, event_producer)

        order = await service.create_order(CreateOrderRequest(**sample_order_payload))

        assert order.id is not None
        assert order.order_number.startswith("ORD-")
        assert order.status == "pending"
        assert order.total_amount == Decimal("19.00")
        assert [item.line_number for item in order.items] == [0, 1]

        assert len(event_publisher.published) == 1
        topic, event, key = event_publisher.published[0]
        assert topic == ORDER_EVENTS_TOPIC
        assert key == str(order.id)
        assert event.event_type == ORDER_CREATED
        assert event.source == "order-service"
        assert event.data["orderId"] == str(order.id)
        assert event.data["orderNumber"] == order.order_number
        assert event.data["customerId"] == "c-1"
        assert [
            (item["productId"], item["quantity"]) for item in event.data["items"]
        ] == [("P1", 2), ("P2", 1)]

    @pytest.mark.asyncio
    async def test_order_is_committed_before_publish(
        self, database_manager, db_session, sample_order_payload
    ):
        seen = {}

        class CheckingPublisher:
            async def publish_order_created(self, order):
                async with database_manager.async_session_maker() as other:
                    from order_service.app.repository.order_repository import (
                        OrderRepository,
                    )

                    seen["order"] = await OrderRepository(other).get_order_by_id(order.id)
                return True

        service = OrderService(db_session, CheckingPublisher())
        order = await service.create_order(CreateOrderRequest(**sample_order_payload))

        assert seen["order"] is not None
        assert seen["order"].order_number == order.order_number

    @pytest.mark.asyncio
    async def test_publish_failure_still_returns_order(
        self, db_session, failing_event_publisher, sample_order_payload
    ):
        producer = OrderEventProducer(failing_event_publisher, publish_timeout=1.0)
        service = OrderService(db_session, producer)

        order = await service.create_order(CreateOrderRequest(**sample_order_payload))

        assert order.id is not None
        assert (await service.get_order(order.id)).order_number == order.order_number

    @pytest.mark.asyncio
    async def test_persistence_failure_publishes_nothing(
        self, db_session, event_producer, event_publisher, sample_order_payload
    ):
        service = OrderService(db_session, event_producer)
        service.order_repository.create_order = AsyncMock(
            side_effect=OperationalError("INSERT", {}, Exception("disk full"))
        )

        with pytest.raises(HTTPException) as exc_info:
            await service.create_order(CreateOrderRequest(**sample_order_payload))

        assert exc_info.value.status_code == 500
        assert event_publisher.published == []

    @pytest.mark.asyncio
    async def test_without_producer_order_is_still_created(self, db_session, sample_order_payload):
        service = OrderService(db_session, None)

        order = await service.create_order(CreateOrderRequest(**sample_order_payload))

        assert order.id is not None

    @pytest.mark.asyncio
    async def test_item_quantity_limit(self, db_session, event_producer, event_publisher):
        service = OrderService(db_session, event_producer)
        request = CreateOrderRequest(
            customer_id="c-1",
            items=[{"product_id": "P1", "quantity": 1000, "unit_price": "1.00"}],
        )

        with pytest.raises(HTTPException) as exc_info:
            await service.create_order(request)

        assert exc_info.value.status_code == 400
        assert event_publisher.published == []


class TestGetOrder:
    """Test order lookup"""

    @pytest.mark.asyncio
    async def test_unknown_order_is_404(self, db_session):
        service = OrderService(db_session, None)

        with pytest.raises(HTTPException) as exc_info:
            await service.get_order(12345)

        assert exc_info.value.status_code == 404
