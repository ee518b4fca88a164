"""
Unit tests for the order HTTP endpoints and error responses.
"""

import json
from unittest.mock import AsyncMock

import httpx
import pytest
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError
from starlette.exceptions import HTTPException as StarletteHTTPException

from order_service.app.core.database import OrderServiceDatabaseManager
from order_service.app.events.producers import OrderEventProducer
from order_service.app.main import create_app
from order_service.app.middleware.error.error_handler import OrderServiceErrorHandler
from order_service.app.repository.order_repository import OrderRepository


@pytest.fixture
def test_app(database_manager, event_publisher):
    """Application wired to the test database without running startup."""
    app = create_app(database_manager=database_manager, event_publisher=event_publisher)
    app.state.database_manager = database_manager
    app.state.event_publisher = event_publisher
    app.state.event_producer = OrderEventProducer(event_publisher, publish_timeout=1.0)
    return app


@pytest.fixture
async def client(test_app):
    transport = httpx.ASGITransport(app=test_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


class TestOrderEndpoints:
    """Test order creation and retrieval over HTTP"""

    @pytest.mark.asyncio
    async def test_create_order(self, client, event_publisher, sample_order_payload):
        response = await client.post("/api/v1/orders", json=sample_order_payload)

        assert response.status_code == 201
        body = response.json()
        assert body["customer_id"] == "c-1"
        assert body["status"] == "pending"
        assert [item["product_id"] for item in body["items"]] == ["P1", "P2"]

        _, event, key = event_publisher.published[0]
        assert key == str(body["id"])
        assert event.data["orderNumber"] == body["order_number"]

    @pytest.mark.asyncio
    async def test_get_order(self, client, sample_order_payload):
        created = (await client.post("/api/v1/orders", json=sample_order_payload)).json()

        response = await client.get(f"/api/v1/orders/{created['id']}")

        assert response.status_code == 200
        assert response.json()["order_number"] == created["order_number"]
        assert len(response.json()["items"]) == 2

    @pytest.mark.asyncio
    async def test_get_unknown_order_is_404(self, client):
        response = await client.get("/api/v1/orders/999")

        assert response.status_code == 404
        error = response.json()["error"]
        assert error["type"] == "order_not_found"
        assert error["message"] == "Order 999 not found"
        assert error["path"] == "/api/v1/orders/999"

    @pytest.mark.asyncio
    async def test_empty_order_rejected(self, client, event_publisher):
        response = await client.post("/api/v1/orders", json={"customer_id": "c-1", "items": []})

        assert response.status_code == 422
        error = response.json()["error"]
        assert error["type"] == "validation_error"
        assert error["details"]["validation_errors"]
        assert event_publisher.published == []

    @pytest.mark.asyncio
    async def test_quantity_over_limit_is_invalid_order(self, client, event_publisher):
        response = await client.post(
            "/api/v1/orders",
            json={
                "customer_id": "c-1",
                "items": [{"product_id": "P1", "quantity": 100, "unit_price": "1.00"}],
            },
        )

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["type"] == "invalid_order"
        assert error["method"] == "POST"
        assert event_publisher.published == []

    @pytest.mark.asyncio
    async def test_storage_failure_is_order_persistence_error(
        self, client, event_publisher, sample_order_payload, monkeypatch
    ):
        monkeypatch.setattr(
            OrderRepository,
            "create_order",
            AsyncMock(side_effect=OperationalError("INSERT", {}, Exception("disk full"))),
        )

        response = await client.post("/api/v1/orders", json=sample_order_payload)

        assert response.status_code == 500
        error = response.json()["error"]
        assert error["type"] == "order_persistence_error"
        assert error["message"] == "Failed to create order."
        assert event_publisher.published == []


class TestOrderServiceErrorHandler:
    """Test cases for error handler."""

    @pytest.fixture
    def app(self):
        """Create FastAPI app for testing."""
        return FastAPI()

    def test_setup_error_handlers(self, app):
        OrderServiceErrorHandler.setup_error_handlers(app)

        assert StarletteHTTPException in app.exception_handlers
        assert RequestValidationError in app.exception_handlers
        assert Exception in app.exception_handlers

    @pytest.mark.asyncio
    async def test_unhandled_exception_hides_details(self, app, mock_request):
        OrderServiceErrorHandler.setup_error_handlers(app)
        handler = app.exception_handlers[Exception]

        response = await handler(mock_request, RuntimeError("connection string leaked"))

        assert response.status_code == 500
        response_data = json.loads(response.body)
        assert response_data["error"]["type"] == "internal_server_error"
        assert "leaked" not in response_data["error"]["message"]
        assert response_data["error"]["details"] == {"exception_type": "RuntimeError"}

    @pytest.mark.asyncio
    async def test_http_errors_outside_order_routes_stay_generic(self, app, mock_request):
        OrderServiceErrorHandler.setup_error_handlers(app)
        handler = app.exception_handlers[StarletteHTTPException]
        mock_request.url.path = "/unknown"

        response = await handler(mock_request, StarletteHTTPException(404, "Not Found"))

        assert response.status_code == 404
        assert json.loads(response.body)["error"]["type"] == "http_error"


class TestApplicationLifespan:
    """Test startup wiring with an injected publisher"""

    def test_health_reports_database_and_event_bus(self, database_url, event_publisher):
        app = create_app(
            database_manager=OrderServiceDatabaseManager(database_url),
            event_publisher=event_publisher,
        )

        with TestClient(app) as client:
            response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["checks"] == {"database": "healthy", "event_bus": "healthy"}
