from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query

from garage_admin.dependencies.services import get_supplier_service
from garage_admin.routes.common import to_http_exception
from garage_admin.schemas.supplier import PurchaseForm, Supplier, SupplierForm, SupplierPurchase
from garage_admin.services import SupplierService
from garage_admin.services.exceptions import ServiceError

router = APIRouter()


# Purchase routes are registered first so /suppliers/purchases never parses as an id.
@router.get("/suppliers/purchases", response_model=List[SupplierPurchase])
async def list_purchases(
    supplier_id: Optional[int] = Query(None),
    service: SupplierService = Depends(get_supplier_service),
):
    try:
        return await service.purchases(supplier_id)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc


@router.post("/suppliers/purchases", response_model=SupplierPurchase, status_code=201)
async def record_purchase(form: PurchaseForm, service: SupplierService = Depends(get_supplier_service)):
    try:
        return await service.record_purchase(form)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc


@router.put("/suppliers/purchases/{purchase_id}", response_model=SupplierPurchase)
async def update_purchase(
    purchase_id: int,
    form: PurchaseForm,
    service: SupplierService = Depends(get_supplier_service),
):
    try:
        return await service.update_purchase(purchase_id, form)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc


@router.delete("/suppliers/purchases/{purchase_id}")
async def delete_purchase(purchase_id: int, service: SupplierService = Depends(get_supplier_service)) -> Dict[str, str]:
    try:
        await service.delete_purchase(purchase_id)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc
    return {"status": "deleted"}


@router.get("/suppliers", response_model=List[Supplier])
async def list_suppliers(service: SupplierService = Depends(get_supplier_service)):
    try:
        return await service.list()
    except ServiceError as exc:
        raise to_http_exception(exc) from exc


@router.post("/suppliers", response_model=Supplier, status_code=201)
async def create_supplier(form: SupplierForm, service: SupplierService = Depends(get_supplier_service)):
    try:
        return await service.create(form)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc


@router.get("/suppliers/{supplier_id}", response_model=Supplier)
async def get_supplier(supplier_id: int, service: SupplierService = Depends(get_supplier_service)):
    try:
        return await service.get(supplier_id)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc


@router.put("/suppliers/{supplier_id}", response_model=Supplier)
async def update_supplier(
    supplier_id: int,
    form: SupplierForm,
    service: SupplierService = Depends(get_supplier_service),
):
    try:
        return await service.update(supplier_id, form)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc


@router.delete("/suppliers/{supplier_id}")
async def delete_supplier(supplier_id: int, service: SupplierService = Depends(get_supplier_service)) -> Dict[str, str]:
    try:
        await service.delete(supplier_id)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc
    return {"status": "deleted"}
