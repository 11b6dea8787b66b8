from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query

from garage_admin.dependencies.services import get_inventory_service
from garage_admin.routes.common import to_http_exception
from garage_admin.schemas.inventory import DeductRequest, InventoryItemForm, InventoryItemView, StockAddForm
from garage_admin.services import InventoryService
from garage_admin.services.exceptions import ServiceError

router = APIRouter()


@router.get("/inventory", response_model=List[InventoryItemView])
async def list_inventory(
    search: Optional[str] = Query(None, description="Matches name, description or unit."),
    type: Optional[str] = Query(None, description="consumable, non-consumable, bulk or all."),
    status: Optional[str] = Query(None, description="low-stock or in-stock."),
    service: InventoryService = Depends(get_inventory_service),
):
    try:
        return await service.list(search=search, item_type=type, status=status)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc


@router.post("/inventory", response_model=InventoryItemView, status_code=201)
async def create_inventory_item(form: InventoryItemForm, service: InventoryService = Depends(get_inventory_service)):
    try:
        return await service.create(form)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc


@router.get("/inventory/{item_id}", response_model=InventoryItemView)
async def get_inventory_item(item_id: int, service: InventoryService = Depends(get_inventory_service)):
    try:
        return await service.get(item_id)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc


@router.put("/inventory/{item_id}", response_model=InventoryItemView)
async def update_inventory_item(
    item_id: int,
    form: InventoryItemForm,
    service: InventoryService = Depends(get_inventory_service),
):
    try:
        return await service.update(item_id, form)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc


@router.post("/inventory/{item_id}/stock", response_model=InventoryItemView)
async def add_stock(
    item_id: int,
    form: StockAddForm,
    service: InventoryService = Depends(get_inventory_service),
):
    try:
        return await service.add_stock(item_id, form)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc


@router.post("/inventory/{item_id}/deduct", response_model=InventoryItemView)
async def deduct_inventory(
    item_id: int,
    req: DeductRequest,
    service: InventoryService = Depends(get_inventory_service),
):
    try:
        return await service.deduct(item_id, req.quantity)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc


@router.delete("/inventory/{item_id}")
async def delete_inventory_item(item_id: int, service: InventoryService = Depends(get_inventory_service)) -> Dict[str, str]:
    try:
        await service.delete(item_id)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc
    return {"status": "deleted"}
