from typing import Dict, List

from fastapi import APIRouter, Depends

from garage_admin.dependencies.services import get_technician_service
from garage_admin.routes.common import to_http_exception
from garage_admin.schemas.technician import Technician, TechnicianForm, TechnicianJob
from garage_admin.services import TechnicianService
from garage_admin.services.exceptions import ServiceError

router = APIRouter()


@router.get("/technicians", response_model=List[Technician])
async def list_technicians(service: TechnicianService = Depends(get_technician_service)):
    try:
        return await service.list()
    except ServiceError as exc:
        raise to_http_exception(exc) from exc


@router.post("/technicians", response_model=Technician, status_code=201)
async def create_technician(form: TechnicianForm, service: TechnicianService = Depends(get_technician_service)):
    try:
        return await service.create(form)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc


@router.get("/technicians/{technician_id}", response_model=Technician)
async def get_technician(technician_id: int, service: TechnicianService = Depends(get_technician_service)):
    try:
        return await service.get(technician_id)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc


@router.put("/technicians/{technician_id}", response_model=Technician)
async def update_technician(
    technician_id: int,
    form: TechnicianForm,
    service: TechnicianService = Depends(get_technician_service),
):
    try:
        return await service.update(technician_id, form)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc


@router.delete("/technicians/{technician_id}")
async def delete_technician(
    technician_id: int,
    service: TechnicianService = Depends(get_technician_service),
) -> Dict[str, str]:
    try:
        await service.delete(technician_id)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc
    return {"status": "deleted"}


@router.get("/technicians/{technician_id}/jobs", response_model=List[TechnicianJob])
async def technician_jobs(technician_id: int, service: TechnicianService = Depends(get_technician_service)):
    try:
        return await service.jobs(technician_id)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc
