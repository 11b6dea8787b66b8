from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from garage_admin.clients.backend import BinaryPayload, GarageBackendClient
from garage_admin.schemas.invoice import InvoiceDetail, InvoiceEmailForm, InvoiceUpdateForm, InvoiceView
from garage_admin.services.base import BackendService
from garage_admin.services.exceptions import ValidationFailed
from garage_admin.services.formatting import format_currency, format_local_date
from garage_admin.services.invoice_totals import advance_received, derive_totals
from garage_admin.services.payloads import Payload, build_invoice_update_payload
from garage_admin.services.query_cache import QueryCache, make_key

logger = logging.getLogger(__name__)


def build_invoice_view(
    detail: InvoiceDetail,
    *,
    currency: str = "LKR",
    tz_name: str = "Asia/Colombo",
) -> InvoiceView:
    """Attach derived totals and display strings to a loaded invoice."""
    totals = derive_totals(detail).as_schema(advance_received=advance_received(detail.reductions))
    display = {
        "items_total": format_currency(totals.items_total, currency),
        "charges_total": format_currency(totals.charges_total, currency),
        "reductions_total": format_currency(totals.reductions_total, currency),
        "final_total": format_currency(totals.final_total, currency),
        "advance_received": format_currency(totals.advance_received, currency),
        "invoice_date": format_local_date(detail.invoice_date, tz_name),
    }
    return InvoiceView(invoice=detail, totals=totals, display=display)


class InvoiceService(BackendService):
    def __init__(
        self,
        client: GarageBackendClient,
        *,
        cache: Optional[QueryCache] = None,
        currency: str = "LKR",
        tz_name: str = "Asia/Colombo",
    ) -> None:
        super().__init__(client, cache=cache)
        self._currency = currency
        self._tz_name = tz_name

    def view(self, detail: InvoiceDetail) -> InvoiceView:
        return build_invoice_view(detail, currency=self._currency, tz_name=self._tz_name)

    async def list(
        self,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        job_id: Optional[int] = None,
    ) -> List[InvoiceView]:
        params: Dict[str, Any] = {
            "startDate": start_date.isoformat() if start_date else None,
            "endDate": end_date.isoformat() if end_date else None,
            "job_id": job_id,
        }
        logger.info("Listing invoices %s", {key: value for key, value in params.items() if value})

        async def load() -> List[InvoiceView]:
            data = await self._client.get("/invoices", params)
            return [self.view(InvoiceDetail(**row)) for row in data or []]

        return await self._cached(make_key("invoices:list", params), "list invoices", load)

    async def load_detail(self, invoice_id: int) -> InvoiceDetail:
        """Fresh detail straight from the backend, bypassing the query cache."""

        async def load() -> InvoiceDetail:
            return InvoiceDetail(**await self._client.get(f"/invoices/{invoice_id}"))

        return await self._call("load invoice", load)

    async def get(self, invoice_id: int) -> InvoiceView:
        async def load() -> InvoiceView:
            return self.view(InvoiceDetail(**await self._client.get(f"/invoices/{invoice_id}")))

        return await self._cached(f"invoices:detail:{invoice_id}", "load invoice", load)

    async def save(self, invoice_id: int, payload: Payload) -> InvoiceView:
        logger.info("Saving invoice %s fields=%s", invoice_id, sorted(payload))

        async def send() -> InvoiceView:
            return self.view(InvoiceDetail(**await self._client.put(f"/invoices/{invoice_id}", payload)))

        view = await self._call("update invoice", send)
        self._invalidate("invoice.update")
        return view

    async def update(self, invoice_id: int, form: InvoiceUpdateForm) -> InvoiceView:
        return await self.save(invoice_id, build_invoice_update_payload(form))

    async def delete(self, invoice_id: int) -> None:
        logger.info("Deleting invoice %s", invoice_id)
        await self._call("delete invoice", lambda: self._client.delete(f"/invoices/{invoice_id}"))
        self._invalidate("invoice.delete")

    async def pdf(self, invoice_id: int) -> BinaryPayload:
        return await self._call("download invoice", lambda: self._client.get_binary(f"/invoices/{invoice_id}/pdf"))

    async def email(self, invoice_id: int, form: InvoiceEmailForm) -> Dict[str, Any]:
        recipient = (form.to or "").strip()
        if not recipient:
            raise ValidationFailed("Recipient email is required.", field="to")
        payload = {"to": recipient, "subject": form.subject, "message": form.message}
        logger.info("Emailing invoice %s to %s", invoice_id, recipient)
        data = await self._call("email invoice", lambda: self._client.post(f"/invoices/{invoice_id}/email", payload))
        return data or {}
