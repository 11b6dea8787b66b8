from datetime import date
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query

from garage_admin.dependencies.services import get_editor_registry, get_invoice_service
from garage_admin.routes.common import binary_response, to_http_exception
from garage_admin.schemas.invoice import (
    DeductionDecisionRequest,
    EditSessionView,
    ExtraEntryForm,
    InventoryChargeRequest,
    InvoiceEmailForm,
    InvoiceUpdateForm,
    InvoiceView,
)
from garage_admin.services import InvoiceEditorRegistry, InvoiceService
from garage_admin.services.exceptions import ServiceError

router = APIRouter()


@router.get("/invoices", response_model=List[InvoiceView])
async def list_invoices(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    job_id: Optional[int] = Query(None),
    service: InvoiceService = Depends(get_invoice_service),
):
    try:
        return await service.list(start_date=start_date, end_date=end_date, job_id=job_id)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc


@router.get("/invoices/{invoice_id}", response_model=InvoiceView)
async def get_invoice(invoice_id: int, service: InvoiceService = Depends(get_invoice_service)):
    try:
        return await service.get(invoice_id)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc


@router.put("/invoices/{invoice_id}", response_model=InvoiceView)
async def update_invoice(
    invoice_id: int,
    form: InvoiceUpdateForm,
    service: InvoiceService = Depends(get_invoice_service),
):
    try:
        return await service.update(invoice_id, form)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc


@router.delete("/invoices/{invoice_id}")
async def delete_invoice(invoice_id: int, service: InvoiceService = Depends(get_invoice_service)) -> Dict[str, str]:
    try:
        await service.delete(invoice_id)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc
    return {"status": "deleted"}


@router.get("/invoices/{invoice_id}/pdf")
async def download_invoice(invoice_id: int, service: InvoiceService = Depends(get_invoice_service)):
    try:
        payload = await service.pdf(invoice_id)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc
    return binary_response(payload, f"invoice-{invoice_id}.pdf")


@router.post("/invoices/{invoice_id}/email")
async def email_invoice(
    invoice_id: int,
    form: InvoiceEmailForm,
    service: InvoiceService = Depends(get_invoice_service),
) -> Dict[str, Any]:
    try:
        return await service.email(invoice_id, form)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc


# --- edit sessions ---


@router.post("/invoices/{invoice_id}/edit-sessions", response_model=EditSessionView, status_code=201)
async def open_edit_session(invoice_id: int, registry: InvoiceEditorRegistry = Depends(get_editor_registry)):
    try:
        session = await registry.open(invoice_id)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc
    return session.view()


@router.get("/invoice-sessions/{session_id}", response_model=EditSessionView)
async def get_edit_session(session_id: str, registry: InvoiceEditorRegistry = Depends(get_editor_registry)):
    try:
        return registry.get(session_id).view()
    except ServiceError as exc:
        raise to_http_exception(exc) from exc


@router.post("/invoice-sessions/{session_id}/charges", response_model=EditSessionView)
async def add_charge(
    session_id: str,
    form: ExtraEntryForm,
    registry: InvoiceEditorRegistry = Depends(get_editor_registry),
):
    try:
        session = registry.get(session_id)
        session.add_charge(form.label, form.amount)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc
    return session.view()


@router.delete("/invoice-sessions/{session_id}/charges/{index}", response_model=EditSessionView)
async def remove_charge(session_id: str, index: int, registry: InvoiceEditorRegistry = Depends(get_editor_registry)):
    try:
        session = registry.get(session_id)
        session.remove_charge(index)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc
    return session.view()


@router.post("/invoice-sessions/{session_id}/reductions", response_model=EditSessionView)
async def add_reduction(
    session_id: str,
    form: ExtraEntryForm,
    registry: InvoiceEditorRegistry = Depends(get_editor_registry),
):
    try:
        session = registry.get(session_id)
        session.add_reduction(form.label, form.amount)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc
    return session.view()


@router.delete("/invoice-sessions/{session_id}/reductions/{index}", response_model=EditSessionView)
async def remove_reduction(session_id: str, index: int, registry: InvoiceEditorRegistry = Depends(get_editor_registry)):
    try:
        session = registry.get(session_id)
        session.remove_reduction(index)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc
    return session.view()


@router.post("/invoice-sessions/{session_id}/inventory-charge", response_model=EditSessionView)
async def select_inventory_charge(
    session_id: str,
    req: InventoryChargeRequest,
    registry: InvoiceEditorRegistry = Depends(get_editor_registry),
):
    try:
        session = registry.get(session_id)
        await session.select_inventory(req.inventory_item_id, req.quantity, req.rate)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc
    return session.view()


@router.post("/invoice-sessions/{session_id}/inventory-charge/decision", response_model=EditSessionView)
async def decide_inventory_charge(
    session_id: str,
    req: DeductionDecisionRequest,
    registry: InvoiceEditorRegistry = Depends(get_editor_registry),
):
    try:
        session = registry.get(session_id)
        await session.decide(req.decision)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc
    return session.view()


@router.post("/invoice-sessions/{session_id}/save", response_model=InvoiceView)
async def save_edit_session(
    session_id: str,
    form: InvoiceUpdateForm,
    registry: InvoiceEditorRegistry = Depends(get_editor_registry),
):
    try:
        return await registry.save(session_id, form)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc


@router.delete("/invoice-sessions/{session_id}")
async def close_edit_session(
    session_id: str,
    registry: InvoiceEditorRegistry = Depends(get_editor_registry),
) -> Dict[str, bool]:
    return {"closed": registry.close(session_id)}
