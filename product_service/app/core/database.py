from typing import Any, AsyncGenerator, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from ..models.base import ProductServiceBase
from ..utils.logging import setup_product_logging as setup_logging
from .setting import get_settings

logger = setup_logging("product_service.database", log_level=get_settings().LOG_LEVEL)


def _mask_credentials(database_url: str) -> str:
    if "@" not in database_url:
        return database_url
    scheme, _, rest = database_url.partition("://")
    return f"{scheme}://***@{rest.split('@', 1)[1]}"


class ProductServiceDatabaseManager:
    """Engine and session factory for the inventory database.

    The same session factory serves HTTP requests and the OrderCreated
    consumer; each consumer event gets its own session.
    """

    def __init__(self, database_url: str, echo: bool = False) -> None:
        engine_kwargs: Dict[str, Any] = {"echo": echo, "future": True}

        if database_url.startswith("sqlite"):
            # SQLite for development and tests
            engine_kwargs["connect_args"] = {"timeout": 60, "check_same_thread": False}
            database_type = "sqlite"
        else:
            engine_kwargs.update(
                {
                    "pool_size": 10,
                    "max_overflow": 20,
                    "pool_timeout": 30,
                    "pool_recycle": 3600,
                    "pool_pre_ping": True,
                    "connect_args": {
                        "command_timeout": 30,
                        # Disable prepared statements to avoid shared_preload_libraries requirement
                        "prepared_statement_cache_size": 0,
                    },
                }
            )
            database_type = "postgresql"

        self.database_url = database_url
        self.async_engine = create_async_engine(database_url, **engine_kwargs)
        self.async_session_maker = async_sessionmaker(
            bind=self.async_engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

        logger.info(
            "Product Service database manager initialized",
            extra={
                "operation": "database_manager_init",
                "database_url": _mask_credentials(database_url),
                "database_type": database_type,
                "echo": echo,
            },
        )

    async def create_tables(self) -> None:
        """Create all Product Service database tables."""
        try:
            async with self.async_engine.begin() as conn:
                await conn.run_sync(
                    ProductServiceBase.metadata.create_all, checkfirst=True
                )
            logger.info(
                "Database tables created successfully",
                extra={"operation": "create_tables"},
            )
        except Exception as e:
            # Another instance may have created them concurrently
            logger.warning(
                "Database table creation failed",
                extra={"operation": "create_tables", "error": str(e)},
            )

    async def get_async_session(self) -> AsyncGenerator[AsyncSession, None]:
        async with self.async_session_maker() as session:
            yield session

    async def close(self) -> None:
        await self.async_engine.dispose()
        logger.info(
            "Product Service database connections closed",
            extra={"operation": "database_close"},
        )


def build_database_manager(
    database_url: Optional[str] = None,
) -> ProductServiceDatabaseManager:
    """Create the database manager from settings unless a URL is given"""
    settings = get_settings()
    database_url = database_url or settings.PRODUCT_DATABASE_URL
    if not database_url:
        error_msg = (
            "PRODUCT_DATABASE_URL is required for Product Service but not configured"
        )
        logger.error(
            error_msg,
            extra={"operation": "database_init", "database_configured": False},
        )
        raise ValueError(error_msg)

    return ProductServiceDatabaseManager(database_url=database_url, echo=settings.DEBUG)
