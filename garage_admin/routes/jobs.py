from datetime import date
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query

from garage_admin.dependencies.services import get_job_service
from garage_admin.routes.common import to_http_exception
from garage_admin.schemas.invoice import InvoiceView
from garage_admin.schemas.job import Job, JobForm, JobUpdateForm, JobUpdateResult
from garage_admin.services import JobService
from garage_admin.services.exceptions import ServiceError

router = APIRouter()


@router.get("/jobs", response_model=List[Job])
async def list_jobs(
    status: Optional[str] = Query(None, description="Job status, or 'all'."),
    customer_id: Optional[int] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    service: JobService = Depends(get_job_service),
):
    try:
        return await service.list(
            status=status,
            customer_id=customer_id,
            start_date=start_date,
            end_date=end_date,
        )
    except ServiceError as exc:
        raise to_http_exception(exc) from exc


@router.post("/jobs", response_model=Job, status_code=201)
async def create_job(form: JobForm, service: JobService = Depends(get_job_service)):
    try:
        return await service.create(form)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc


@router.get("/jobs/{job_id}", response_model=Job)
async def get_job(job_id: int, service: JobService = Depends(get_job_service)):
    try:
        return await service.get(job_id)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc


@router.put("/jobs/{job_id}", response_model=JobUpdateResult)
async def update_job(job_id: int, form: JobUpdateForm, service: JobService = Depends(get_job_service)):
    try:
        return await service.update(job_id, form)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc


@router.delete("/jobs/{job_id}")
async def delete_job(job_id: int, service: JobService = Depends(get_job_service)) -> Dict[str, str]:
    try:
        await service.delete(job_id)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc
    return {"status": "deleted"}


@router.get("/jobs/{job_id}/invoice", response_model=InvoiceView)
async def job_invoice(job_id: int, service: JobService = Depends(get_job_service)):
    try:
        return await service.invoice(job_id)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc
