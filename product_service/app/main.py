"""
Product Service FastAPI Application
==================================

Main application entry point for the Product Service microservice.
Owns the inventory ledger: consumes OrderCreated events to reserve stock,
publishes StockAdjusted events, raises low-stock alerts, and exposes the
inventory and alert query endpoints.
"""

import time
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.v1.alerts import router as alerts_router
from .api.v1.health import router as health_router
from .api.v1.inventory import router as inventory_router
from .core.database import ProductServiceDatabaseManager, build_database_manager
from .core.event_management import close_events, init_events
from .core.setting import get_settings
from .events.base import EventPublisher, EventSubscriber
from .middleware.error import setup_product_error_handling
from .utils.logging import setup_product_logging as setup_logging

settings = get_settings()
logger = setup_logging("product_service.main", log_level=settings.LOG_LEVEL)


def create_app(
    database_manager: Optional[ProductServiceDatabaseManager] = None,
    event_publisher: Optional[EventPublisher] = None,
    event_subscriber: Optional[EventSubscriber] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Collaborators left as None are built from settings during startup.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        startup_start = time.time()
        manager = database_manager or build_database_manager()
        app.state.database_manager = manager

        try:
            await manager.create_tables()
            await init_events(
                app,
                manager,
                publisher=event_publisher,
                subscriber=event_subscriber,
            )
        except Exception as e:
            logger.error(
                "Failed to start product service",
                exc_info=True,
                extra={
                    "startup_duration_ms": int((time.time() - startup_start) * 1000),
                    "error_type": type(e).__name__,
                },
            )
            raise

        logger.info(
            "Product service started successfully",
            extra={
                "total_startup_duration_ms": int((time.time() - startup_start) * 1000),
                "environment": settings.ENVIRONMENT,
                "service_version": settings.APP_VERSION,
            },
        )

        yield

        shutdown_start = time.time()
        await close_events(app)
        if database_manager is None:
            await manager.close()
        logger.info(
            "Product service shutdown completed",
            extra={"shutdown_duration_ms": int((time.time() - shutdown_start) * 1000)},
        )

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan,
        openapi_url="/openapi.json" if settings.DEBUG else None,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
    )

    setup_product_error_handling(app)
    _setup_cors(app)
    _setup_routers(app)

    return app


def _setup_cors(app: FastAPI) -> None:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=settings.CORS_CREDENTIALS,
        allow_methods=settings.CORS_METHODS,
        allow_headers=settings.CORS_HEADERS,
    )


def _setup_routers(app: FastAPI) -> None:
    """Configure all application routers with detailed logging."""
    routers_info: list[dict[str, Any]] = []

    app.include_router(health_router, tags=["Health"])
    routers_info.append({"router": "health", "prefix": "", "tags": ["Health"]})

    app.include_router(alerts_router, prefix="/api/v1", tags=["Inventory Alerts"])
    routers_info.append(
        {"router": "alerts", "prefix": "/api/v1", "tags": ["Inventory Alerts"]}
    )

    app.include_router(
        inventory_router, prefix="/api/v1", tags=["Inventory Management"]
    )
    routers_info.append(
        {"router": "inventory", "prefix": "/api/v1", "tags": ["Inventory Management"]}
    )

    logger.info(
        "API routes configured",
        extra={"total_routers": len(routers_info), "routers": routers_info},
    )


app = create_app()

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(  # type: ignore
        "product_service.app.main:app",
        host="0.0.0.0",
        port=8002,
        log_level=settings.LOG_LEVEL.lower(),
        access_log=True,
    )
