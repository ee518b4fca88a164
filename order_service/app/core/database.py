"""Database configuration for Order Service"""

from typing import Any, AsyncGenerator, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from ..models.base import OrderServiceBase
from ..utils.logging import setup_order_logging as setup_logging
from .setting import get_settings

logger = setup_logging("order_service.database", log_level=get_settings().LOG_LEVEL)


class OrderServiceDatabaseManager:
    """Engine and session factory for the order database."""

    def __init__(self, database_url: str, echo: bool = False) -> None:
        engine_kwargs: Dict[str, Any] = {"echo": echo, "future": True}

        if database_url.startswith("sqlite"):
            engine_kwargs["connect_args"] = {"timeout": 60, "check_same_thread": False}
        else:
            engine_kwargs.update(
                {
                    "pool_size": 20,
                    "max_overflow": 40,
                    "pool_timeout": 45,
                    "pool_recycle": 3600,  # 1 hour recycle for order sessions
                    "pool_pre_ping": True,
                    "connect_args": {
                        "command_timeout": 30,
                        "server_settings": {"jit": "off"},
                    },
                }
            )

        self.async_engine = create_async_engine(database_url, **engine_kwargs)
        self.async_session_maker = async_sessionmaker(
            bind=self.async_engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    async def create_tables(self) -> None:
        """Create all Order Service database tables."""
        async with self.async_engine.begin() as conn:
            await conn.run_sync(OrderServiceBase.metadata.create_all, checkfirst=True)
        logger.info("Order tables ready", extra={"operation": "create_tables"})

    async def get_async_session(self) -> AsyncGenerator[AsyncSession, None]:
        async with self.async_session_maker() as session:
            yield session

    async def close(self) -> None:
        await self.async_engine.dispose()
        logger.info(
            "Order Service database connections closed",
            extra={"operation": "database_close"},
        )


def build_database_manager(
    database_url: Optional[str] = None,
) -> OrderServiceDatabaseManager:
    settings = get_settings()
    database_url = database_url or settings.ORDER_DATABASE_URL
    if not database_url:
        raise ValueError("ORDER_DATABASE_URL is required for Order Service")
    return OrderServiceDatabaseManager(database_url=database_url, echo=settings.DEBUG)
