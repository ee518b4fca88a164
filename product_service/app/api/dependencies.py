"""
FastAPI dependency injection for Product Service

Collaborators built at startup live on ``app.state``; these functions hand
them to endpoints per request.
"""

from typing import AsyncGenerator, Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ..events.event_producers import ProductEventProducer
from ..services.inventory_service import InventoryService

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


def get_product_event_producer(request: Request) -> Optional[ProductEventProducer]:
    """Provide ProductEventProducer instance, None when events are disabled"""
    return getattr(request.app.state, "event_producer", None)


# =====================================================
# SERVICE DEPENDENCIES
# =====================================================


def get_inventory_service(
    session: AsyncSession = Depends(get_async_session),
    event_producer: Optional[ProductEventProducer] = Depends(
        get_product_event_producer
    ),
) -> InventoryService:
    """Provide InventoryService instance with database and event publishing"""
    return InventoryService(session, event_producer)


# =====================================================
# REQUEST CONTEXT DEPENDENCIES
# =====================================================


def get_actor(request: Request) -> str:
    """User the gateway authenticated, or ``system`` for internal callers"""
    return request.headers.get("X-User-ID") or "system"


# =====================================================
# COMMON DEPENDENCY ALIASES
# =====================================================

ActorDep = Depends(get_actor)
InventoryServiceDep = Depends(get_inventory_service)
