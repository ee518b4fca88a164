"""
Order Service FastAPI Application
================================

Persists orders and publishes OrderCreated events for the inventory
reservation pipeline.
"""

import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.v1.health import router as health_router
from .api.v1.orders import router as orders_router
from .core.database import OrderServiceDatabaseManager, build_database_manager
from .core.events import close_events, init_events
from .core.setting import get_settings
from .events.base import EventPublisher
from .middleware.error import setup_order_error_handling
from .utils.logging import setup_order_logging as setup_logging

settings = get_settings()
logger = setup_logging("order_service.main", log_level=settings.LOG_LEVEL)


def create_app(
    database_manager: Optional[OrderServiceDatabaseManager] = None,
    event_publisher: Optional[EventPublisher] = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        startup_start = time.time()
        manager = database_manager or build_database_manager()
        app.state.database_manager = manager

        await manager.create_tables()
        await init_events(app, publisher=event_publisher)

        logger.info(
            "Order service started successfully",
            extra={
                "total_startup_duration_ms": int((time.time() - startup_start) * 1000),
                "environment": settings.ENVIRONMENT,
            },
        )

        yield

        await close_events(app)
        if database_manager is None:
            await manager.close()
        logger.info("Order service shutdown completed")

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan,
        openapi_url="/openapi.json" if settings.DEBUG else None,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
    )

    setup_order_error_handling(app)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=settings.CORS_CREDENTIALS,
        allow_methods=settings.CORS_METHODS,
        allow_headers=settings.CORS_HEADERS,
    )

    app.include_router(health_router, tags=["Health"])
    app.include_router(orders_router, prefix="/api/v1", tags=["Orders"])

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(  # type: ignore
        "order_service.app.main:app",
        host="0.0.0.0",
        port=8003,
        log_level=settings.LOG_LEVEL.lower(),
        access_log=True,
    )
