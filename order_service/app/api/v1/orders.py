from fastapi import APIRouter, status

from ...schemas.order import CreateOrderRequest, OrderResponse
from ...services.order_service import OrderService
from ..deps import OrderServiceDep

router = APIRouter(prefix="/orders")


@router.post("", status_code=status.HTTP_201_CREATED, response_model=OrderResponse)
async def create_order(
    request: CreateOrderRequest,
    order_service: OrderService = OrderServiceDep,
):
    """Create an order; inventory is reserved asynchronously"""
    return await order_service.create_order(request)


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: int,
    order_service: OrderService = OrderServiceDep,
):
    """Get an order with its line items"""
    return await order_service.get_order(order_id)
