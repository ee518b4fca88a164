"""
Order service: persists orders and announces them to the inventory pipeline.
"""

import uuid
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.setting import get_settings
from ..events.producers import OrderEventProducer
from ..models.order import Order
from ..repository.order_repository import OrderRepository
from ..schemas.order import CreateOrderRequest
from ..utils.logging import setup_order_logging as setup_logging

logger = setup_logging("order_service.service", log_level=get_settings().LOG_LEVEL)


class OrderService:
    def __init__(
        self,
        session: AsyncSession,
        event_publisher: Optional[OrderEventProducer],
    ):
        self.session = session
        self.event_publisher = event_publisher
        self.order_repository = OrderRepository(session)

    def _generate_order_number(self) -> str:
        return f"ORD-{uuid.uuid4().hex[:12].upper()}"

    def _validate_order_data(self, request: CreateOrderRequest) -> None:
        settings = get_settings()
        if len(request.items) > settings.MAX_ORDER_ITEMS:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Order cannot contain more than {settings.MAX_ORDER_ITEMS} items",
            )
        for item in request.items:
            if item.quantity > settings.MAX_ITEM_QUANTITY:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"Item quantity cannot exceed {settings.MAX_ITEM_QUANTITY}",
                )

    async def create_order(self, request: CreateOrderRequest) -> Order:
        """Persist the order, then publish OrderCreated exactly once.

        A publish failure is logged and does not fail the order; a persistence
        failure publishes nothing.
        """
        self._validate_order_data(request)
        order_number = self._generate_order_number()

        try:
            order = await self.order_repository.create_order(
                order_number=order_number,
                customer_id=request.customer_id,
                items=request.items,
                total_amount=request.total_amount,
                currency=request.currency.upper(),
            )
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(
                f"Error creating order for customer {request.customer_id}: {e}",
                extra={
                    "customer_id": request.customer_id,
                    "order_number": order_number,
                    "operation": "create_order",
                },
            )
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to create order.",
            )

        logger.info(
            "Order created successfully.",
            extra={
                "order_id": str(order.id),
                "order_number": order_number,
                "customer_id": request.customer_id,
                "total_amount": str(order.total_amount),
                "operation": "create_order",
            },
        )

        if self.event_publisher is None:
            logger.warning(
                "Event publishing disabled, OrderCreated not sent",
                extra={"order_id": str(order.id), "operation": "publish_order_created"},
            )
        else:
            await self.event_publisher.publish_order_created(order)

        return order

    async def get_order(self, order_id: int) -> Order:
        order = await self.order_repository.get_order_by_id(order_id)
        if order is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Order {order_id} not found",
            )
        return order
