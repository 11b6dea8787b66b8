from datetime import date
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query

from garage_admin.dependencies.services import get_expense_service
from garage_admin.routes.common import to_http_exception
from garage_admin.schemas.expense import Expense, ExpenseForm
from garage_admin.services import ExpenseService
from garage_admin.services.exceptions import ServiceError

router = APIRouter()


@router.get("/expenses", response_model=List[Expense])
async def list_expenses(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    service: ExpenseService = Depends(get_expense_service),
):
    try:
        return await service.list(start_date=start_date, end_date=end_date)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc


@router.post("/expenses", response_model=Expense, status_code=201)
async def create_expense(form: ExpenseForm, service: ExpenseService = Depends(get_expense_service)):
    try:
        return await service.create(form)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc


@router.put("/expenses/{expense_id}", response_model=Expense)
async def update_expense(
    expense_id: int,
    form: ExpenseForm,
    service: ExpenseService = Depends(get_expense_service),
):
    try:
        return await service.update(expense_id, form)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc


@router.delete("/expenses/{expense_id}")
async def delete_expense(expense_id: int, service: ExpenseService = Depends(get_expense_service)) -> Dict[str, str]:
    try:
        await service.delete(expense_id)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc
    return {"status": "deleted"}
