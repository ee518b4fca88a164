"""
FastAPI dependency injection for Order Service

Database sessions and the event producer come from collaborators that the
application builds at startup and keeps on ``app.state``.
"""

from typing import AsyncGenerator, Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ..events.producers import OrderEventProducer
from ..services.order_service import OrderService

# =====================================================
# DATABASE DEPENDENCIES
# =====================================================


async def get_async_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Provide async database session"""
    async for session in request.app.state.database_manager.get_async_session():
        yield session


# =====================================================
# EVENT PUBLISHER DEPENDENCIES
# =====================================================


def get_order_event_producer(request: Request) -> Optional[OrderEventProducer]:
    """Provide OrderEventProducer instance"""
    return getattr(request.app.state, "event_producer", None)


# =====================================================
# SERVICE DEPENDENCIES
# =====================================================


def get_order_service(
    session: AsyncSession = Depends(get_async_session),
    event_producer: Optional[OrderEventProducer] = Depends(get_order_event_producer),
) -> OrderService:
    """Provide OrderService instance with database and event publishing"""
    return OrderService(session, event_producer)


OrderServiceDep = Depends(get_order_service)
