from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional

from garage_admin.schemas.expense import Expense, ExpenseForm
from garage_admin.services.base import BackendService
from garage_admin.services.payloads import build_expense_payload
from garage_admin.services.query_cache import make_key

logger = logging.getLogger(__name__)


class ExpenseService(BackendService):
    async def list(self, *, start_date: Optional[date] = None, end_date: Optional[date] = None) -> List[Expense]:
        params = {
            "startDate": start_date.isoformat() if start_date else None,
            "endDate": end_date.isoformat() if end_date else None,
        }

        async def load() -> List[Expense]:
            data = await self._client.get("/expenses", params)
            return [Expense(**row) for row in data or []]

        return await self._cached(make_key("expenses:list", params), "list expenses", load)

    async def create(self, form: ExpenseForm) -> Expense:
        payload = build_expense_payload(form)
        logger.info("Recording expense %s (%s)", payload["description"], payload["amount"])

        async def send() -> Expense:
            return Expense(**await self._client.post("/expenses", payload))

        expense = await self._call("create expense", send)
        self._invalidate("expense.create")
        return expense

    async def update(self, expense_id: int, form: ExpenseForm) -> Expense:
        payload = build_expense_payload(form, partial=True)

        async def send() -> Expense:
            return Expense(**await self._client.put(f"/expenses/{expense_id}", payload))

        expense = await self._call("update expense", send)
        self._invalidate("expense.update")
        return expense

    async def delete(self, expense_id: int) -> None:
        logger.info("Deleting expense %s", expense_id)
        await self._call("delete expense", lambda: self._client.delete(f"/expenses/{expense_id}"))
        self._invalidate("expense.delete")
