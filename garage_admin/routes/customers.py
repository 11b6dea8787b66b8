from typing import Dict, List

from fastapi import APIRouter, Depends

from garage_admin.dependencies.services import get_customer_service, get_vehicle_service
from garage_admin.routes.common import to_http_exception
from garage_admin.schemas.customer import Customer, CustomerForm, Vehicle, VehicleForm
from garage_admin.services import CustomerService, VehicleService
from garage_admin.services.exceptions import ServiceError

router = APIRouter()


@router.get("/customers", response_model=List[Customer])
async def list_customers(service: CustomerService = Depends(get_customer_service)):
    try:
        return await service.list()
    except ServiceError as exc:
        raise to_http_exception(exc) from exc


@router.post("/customers", response_model=Customer, status_code=201)
async def create_customer(
    form: CustomerForm,
    service: CustomerService = Depends(get_customer_service),
):
    try:
        return await service.create(form)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc


@router.get("/customers/{customer_id}", response_model=Customer)
async def get_customer(customer_id: int, service: CustomerService = Depends(get_customer_service)):
    try:
        return await service.get(customer_id)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc


@router.put("/customers/{customer_id}", response_model=Customer)
async def update_customer(
    customer_id: int,
    form: CustomerForm,
    service: CustomerService = Depends(get_customer_service),
):
    try:
        return await service.update(customer_id, form)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc


@router.delete("/customers/{customer_id}")
async def delete_customer(customer_id: int, service: CustomerService = Depends(get_customer_service)) -> Dict[str, str]:
    try:
        await service.delete(customer_id)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc
    return {"status": "deleted"}


@router.get("/customers/{customer_id}/vehicles", response_model=List[Vehicle])
async def list_vehicles(customer_id: int, service: VehicleService = Depends(get_vehicle_service)):
    try:
        return await service.list(customer_id)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc


@router.post("/vehicles", response_model=Vehicle, status_code=201)
async def create_vehicle(form: VehicleForm, service: VehicleService = Depends(get_vehicle_service)):
    try:
        return await service.create(form)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc


@router.put("/vehicles/{vehicle_id}", response_model=Vehicle)
async def update_vehicle(
    vehicle_id: int,
    form: VehicleForm,
    service: VehicleService = Depends(get_vehicle_service),
):
    try:
        return await service.update(vehicle_id, form)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc


@router.delete("/vehicles/{vehicle_id}")
async def delete_vehicle(vehicle_id: int, service: VehicleService = Depends(get_vehicle_service)) -> Dict[str, str]:
    try:
        await service.delete(vehicle_id)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc
    return {"status": "deleted"}
