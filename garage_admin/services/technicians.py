from __future__ import annotations

import logging
from typing import List

from garage_admin.schemas.technician import Technician, TechnicianForm, TechnicianJob
from garage_admin.services.base import BackendService
from garage_admin.services.payloads import build_technician_payload

logger = logging.getLogger(__name__)


class TechnicianService(BackendService):
    async def list(self) -> List[Technician]:
        async def load() -> List[Technician]:
            data = await self._client.get("/technicians")
            return [Technician(**row) for row in data or []]

        return await self._cached("technicians:list", "list technicians", load)

    async def get(self, technician_id: int) -> Technician:
        async def load() -> Technician:
            return Technician(**await self._client.get(f"/technicians/{technician_id}"))

        return await self._cached(f"technicians:detail:{technician_id}", "load technician", load)

    async def create(self, form: TechnicianForm) -> Technician:
        payload = build_technician_payload(form)
        logger.info("Creating technician %s", payload["name"])

        async def send() -> Technician:
            return Technician(**await self._client.post("/technicians", payload))

        technician = await self._call("create technician", send)
        self._invalidate("technician.create")
        return technician

    async def update(self, technician_id: int, form: TechnicianForm) -> Technician:
        payload = build_technician_payload(form, partial=True)

        async def send() -> Technician:
            return Technician(**await self._client.put(f"/technicians/{technician_id}", payload))

        technician = await self._call("update technician", send)
        self._invalidate("technician.update")
        return technician

    async def delete(self, technician_id: int) -> None:
        logger.info("Deleting technician %s", technician_id)
        await self._call("delete technician", lambda: self._client.delete(f"/technicians/{technician_id}"))
        self._invalidate("technician.delete")

    async def jobs(self, technician_id: int) -> List[TechnicianJob]:
        async def load() -> List[TechnicianJob]:
            data = await self._client.get(f"/technicians/{technician_id}/jobs")
            return [TechnicianJob(**row) for row in data or []]

        return await self._cached(f"technicians:jobs:{technician_id}", "list technician jobs", load)
