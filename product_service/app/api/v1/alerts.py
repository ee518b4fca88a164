"""Inventory alert API endpoints"""

from typing import List, Optional

from fastapi import APIRouter, Query

from ...schemas.inventory import InventoryAlertResponse
from ...services.inventory_service import InventoryService
from ..dependencies import InventoryServiceDep

router = APIRouter(prefix="/inventory/alerts")


@router.get("", response_model=List[InventoryAlertResponse])
async def list_alerts(
    resolved: Optional[bool] = Query(None),
    service: InventoryService = InventoryServiceDep,
):
    """List alerts, optionally filtered by resolution state"""
    return await service.list_alerts(resolved)


@router.patch("/{alert_id}/resolve", response_model=InventoryAlertResponse)
async def resolve_alert(
    alert_id: int,
    service: InventoryService = InventoryServiceDep,
):
    """Mark an alert resolved by an operator"""
    return await service.resolve_alert(alert_id)
