"""
Unit tests for the event envelope and payload contracts.
"""

import json
from decimal import Decimal

import pytest
from pydantic import ValidationError

from product_service.app.events.base import BaseEvent
from product_service.app.events.event_producers import ProductEventProducer
from product_service.app.events.schemas import (
    INVENTORY_EVENTS_TOPIC,
    OrderCreatedEventData,
    StockAdjustedEventData,
)


class TestEventEnvelope:
    """Test BaseEvent wire format"""

    def test_message_uses_camel_case_keys(self):
        event = BaseEvent(event_type="StockAdjusted", data={"productId": "P1"})

        message = event.to_message()

        assert set(message) == {"eventId", "eventType", "timestamp", "source", "version", "data"}
        assert message["eventType"] == "StockAdjusted"
        assert message["source"] == "product-service"
        assert message["version"] == "1.0"
        assert BaseEvent.model_validate(message).timestamp.tzinfo is not None

    def test_event_ids_are_unique(self):
        assert BaseEvent(event_type="X").event_id != BaseEvent(event_type="X").event_id

    def test_parses_wire_message(self):
        raw = json.dumps(
            {
                "eventId": "abc123",
                "eventType": "OrderCreated",
                "timestamp": "2026-01-05T10:00:00+00:00",
                "source": "order-service",
                "version": "1.0",
                "data": {"orderId": "1"},
            }
        )

        event = BaseEvent.model_validate(json.loads(raw))

        assert event.event_id == "abc123"
        assert event.event_type == "OrderCreated"
        assert event.source == "order-service"
        assert event.data == {"orderId": "1"}

    def test_rejects_oversized_event_id(self):
        with pytest.raises(ValidationError):
            BaseEvent(event_id="e" * 65, event_type="OrderCreated")

    def test_rejects_oversized_event_type(self):
        with pytest.raises(ValidationError):
            BaseEvent(event_type="T" * 65)


class TestOrderCreatedContract:
    """Test the consumed OrderCreated payload"""

    def test_parses_camel_case_payload(self):
        data = OrderCreatedEventData.model_validate(
            {
                "orderId": "17",
                "orderNumber": "ORD-17",
                "customerId": "c-1",
                "items": [
                    {"productId": "P1", "quantity": 2, "unitPrice": "4.50"},
                    {"productId": "P2", "quantity": 1, "unitPrice": "1.00"},
                ],
                "totalAmount": "10.00",
            }
        )

        assert data.order_id == "17"
        assert [item.product_id for item in data.items] == ["P1", "P2"]
        assert data.items[0].unit_price == Decimal("4.50")
        assert data.currency == "USD"

    @pytest.mark.parametrize(
        "item",
        [
            {"productId": "P1", "quantity": 0, "unitPrice": "1"},
            {"productId": "", "quantity": 1, "unitPrice": "1"},
            {"productId": "P1", "quantity": 1, "unitPrice": "-1"},
        ],
    )
    def test_rejects_invalid_lines(self, item):
        with pytest.raises(ValidationError):
            OrderCreatedEventData.model_validate(
                {
                    "orderId": "17",
                    "orderNumber": "ORD-17",
                    "customerId": "c-1",
                    "items": [item],
                    "totalAmount": "1",
                }
            )

    @pytest.mark.parametrize(
        "overrides",
        [
            {"orderId": "9" * 65},
            {"orderNumber": "ORD-" + "1" * 47},
            {"customerId": "c" * 65},
            {"items": [{"productId": "P" * 65, "quantity": 1, "unitPrice": "1"}]},
        ],
    )
    def test_rejects_values_longer_than_ledger_columns(self, overrides):
        payload = {
            "orderId": "17",
            "orderNumber": "ORD-17",
            "customerId": "c-1",
            "items": [{"productId": "P1", "quantity": 1, "unitPrice": "1"}],
            "totalAmount": "1",
        }
        payload.update(overrides)

        with pytest.raises(ValidationError):
            OrderCreatedEventData.model_validate(payload)

    def test_accepts_values_at_column_limits(self):
        data = OrderCreatedEventData.model_validate(
            {
                "orderId": "9" * 64,
                "orderNumber": "N" * 50,
                "customerId": "c-1",
                "items": [{"productId": "P" * 64, "quantity": 1, "unitPrice": "1"}],
                "totalAmount": "1",
            }
        )

        assert len(data.order_id) == 64
        assert len(data.items[0].product_id) == 64


class TestStockAdjustedContract:
    """Test the produced StockAdjusted payload"""

    def test_omits_order_id_for_manual_adjustments(self):
        data = StockAdjustedEventData(
            product_id="P1", quantity_adjusted=5, new_quantity=12, reason="restock"
        )

        assert data.to_dict() == {
            "productId": "P1",
            "quantityAdjusted": 5,
            "newQuantity": 12,
            "reason": "restock",
        }

    def test_rejects_negative_resulting_stock(self):
        with pytest.raises(ValidationError):
            StockAdjustedEventData(
                product_id="P1", quantity_adjusted=-1, new_quantity=-1, reason="r"
            )

    @pytest.mark.asyncio
    async def test_producer_keys_by_product_id(self, event_publisher):
        producer = ProductEventProducer(event_publisher, publish_timeout=1.0)

        published = await producer.publish_stock_adjusted(
            product_id="P7", quantity_adjusted=-3, new_quantity=4, reason="r", order_id="9"
        )

        assert published is True
        topic, event, key = event_publisher.published[0]
        assert (topic, key) == (INVENTORY_EVENTS_TOPIC, "P7")
        assert event.data["orderId"] == "9"

    @pytest.mark.asyncio
    async def test_producer_reports_failure(self, failing_event_publisher):
        producer = ProductEventProducer(failing_event_publisher, publish_timeout=1.0)

        published = await producer.publish_stock_adjusted(
            product_id="P7", quantity_adjusted=-3, new_quantity=4, reason="r"
        )

        assert published is False
