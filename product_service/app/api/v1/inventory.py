"""Inventory API endpoints"""

from typing import List, Optional

from fastapi import APIRouter, Query

from ...schemas.inventory import (
    InventoryRecordResponse,
    StockAdjustmentRequest,
    StockAdjustmentResponse,
    StockAdjustmentResult,
)
from ...services.inventory_service import InventoryService
from ...utils.logging import setup_product_logging as setup_logging
from ..dependencies import ActorDep, InventoryServiceDep

logger = setup_logging("product_service.inventory_api")
router = APIRouter(prefix="/inventory")


@router.get("/products/{product_id}", response_model=InventoryRecordResponse)
async def get_product_inventory(
    product_id: str,
    service: InventoryService = InventoryServiceDep,
):
    """Get stock on hand for a specific product"""
    return await service.get_inventory(product_id)


@router.post(
    "/products/{product_id}/adjust-stock", response_model=StockAdjustmentResult
)
async def adjust_product_stock(
    product_id: str,
    request: StockAdjustmentRequest,
    service: InventoryService = InventoryServiceDep,
    user_id: str = ActorDep,
):
    """Manually increase or decrease stock for a product"""
    logger.info(
        "Manual stock adjustment requested",
        extra={
            "product_id": product_id,
            "quantity": request.quantity,
            "type": request.type.value,
            "user_id": user_id,
            "operation": "adjust_stock_request",
        },
    )
    return await service.adjust_stock(product_id, request, user_id=user_id)


@router.get(
    "/products/{product_id}/stock-adjustments",
    response_model=List[StockAdjustmentResponse],
)
async def list_stock_adjustments(
    product_id: str,
    service: InventoryService = InventoryServiceDep,
):
    """Audit trail of adjustments for a product, oldest first"""
    return await service.list_adjustments(product_id)


@router.get("/low-stock", response_model=List[InventoryRecordResponse])
async def list_low_stock(
    threshold: Optional[int] = Query(None, ge=0),
    service: InventoryService = InventoryServiceDep,
):
    """Active products at or below ``threshold`` (or their own reorder point)"""
    return await service.list_low_stock(threshold)
