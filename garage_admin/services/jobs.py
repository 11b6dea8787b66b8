from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from garage_admin.clients.backend import GarageBackendClient
from garage_admin.schemas.invoice import InvoiceDetail, InvoiceView
from garage_admin.schemas.job import Job, JobForm, JobUpdateForm, JobUpdateResult
from garage_admin.services.base import BackendService
from garage_admin.services.invoices import build_invoice_view
from garage_admin.services.payloads import build_job_payload, build_job_update_payload
from garage_admin.services.query_cache import QueryCache, make_key

logger = logging.getLogger(__name__)


class JobService(BackendService):
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

    def _invoice_view(self, data: Dict[str, Any]) -> InvoiceView:
        return build_invoice_view(InvoiceDetail(**data), currency=self._currency, tz_name=self._tz_name)

    async def list(
        self,
        *,
        status: Optional[str] = None,
        customer_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[Job]:
        params: Dict[str, Any] = {
            "status": status if status and status != "all" else None,
            "customerId": customer_id,
            "startDate": start_date.isoformat() if start_date else None,
            "endDate": end_date.isoformat() if end_date else None,
        }

        async def load() -> List[Job]:
            data = await self._client.get("/jobs", params)
            return [Job(**row) for row in data or []]

        return await self._cached(make_key("jobs:list", params), "list jobs", load)

    async def get(self, job_id: int) -> Job:
        async def load() -> Job:
            return Job(**await self._client.get(f"/jobs/{job_id}"))

        return await self._cached(f"jobs:detail:{job_id}", "load job", load)

    async def create(self, form: JobForm) -> Job:
        payload = build_job_payload(form)
        logger.info(
            "Creating job for customer %s (%s)",
            payload["customer_id"],
            "new vehicle" if "vehicle" in payload else f"vehicle {payload['vehicle_id']}",
        )

        async def send() -> Job:
            return Job(**await self._client.post("/jobs", payload))

        job = await self._call("create job", send)
        self._invalidate("job.create")
        if "vehicle" in payload:
            self._invalidate("vehicle.create")
        return job

    async def update(self, job_id: int, form: JobUpdateForm) -> JobUpdateResult:
        """Apply a partial update; the backend may raise an invoice alongside it.

        The invoice is only created when ``create_invoice`` was requested, the
        job ends up Completed, no invoice exists yet and an initial amount is set.
        """
        payload = build_job_update_payload(form)
        logger.info("Updating job %s fields=%s", job_id, sorted(payload))

        async def send() -> JobUpdateResult:
            data = dict(await self._client.put(f"/jobs/{job_id}", payload))
            invoice_data = data.pop("invoice", None)
            invoice = self._invoice_view(invoice_data) if invoice_data else None
            return JobUpdateResult(job=Job(**data), invoice=invoice)

        result = await self._call("update job", send)
        self._invalidate("job.update")
        if result.invoice is not None:
            logger.info("Job %s produced invoice %s", job_id, result.invoice.invoice.invoice_no)
        return result

    async def delete(self, job_id: int) -> None:
        logger.info("Deleting job %s", job_id)
        await self._call("delete job", lambda: self._client.delete(f"/jobs/{job_id}"))
        self._invalidate("job.delete")

    async def invoice(self, job_id: int) -> InvoiceView:
        async def load() -> InvoiceView:
            return self._invoice_view(await self._client.get(f"/jobs/{job_id}/invoice"))

        return await self._cached(f"invoices:job:{job_id}", "load job invoice", load)
