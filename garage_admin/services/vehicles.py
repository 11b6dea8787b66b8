from __future__ import annotations

import logging
from typing import List

from garage_admin.schemas.customer import Vehicle, VehicleForm
from garage_admin.services.base import BackendService
from garage_admin.services.payloads import build_vehicle_payload

logger = logging.getLogger(__name__)


class VehicleService(BackendService):
    async def list(self, customer_id: int) -> List[Vehicle]:
        async def load() -> List[Vehicle]:
            data = await self._client.get("/vehicles", {"customer_id": customer_id})
            return [Vehicle(**row) for row in data or []]

        return await self._cached(f"vehicles:customer:{customer_id}", "list vehicles", load)

    async def create(self, form: VehicleForm) -> Vehicle:
        payload = build_vehicle_payload(form)
        logger.info("Adding %s %s for customer %s", payload["make"], payload["model"], payload["customer_id"])

        async def send() -> Vehicle:
            return Vehicle(**await self._client.post("/vehicles", payload))

        vehicle = await self._call("create vehicle", send)
        self._invalidate("vehicle.create")
        return vehicle

    async def update(self, vehicle_id: int, form: VehicleForm) -> Vehicle:
        payload = build_vehicle_payload(form, partial=True)

        async def send() -> Vehicle:
            return Vehicle(**await self._client.put(f"/vehicles/{vehicle_id}", payload))

        vehicle = await self._call("update vehicle", send)
        self._invalidate("vehicle.update")
        return vehicle

    async def delete(self, vehicle_id: int) -> None:
        logger.info("Deleting vehicle %s", vehicle_id)
        await self._call("delete vehicle", lambda: self._client.delete(f"/vehicles/{vehicle_id}"))
        self._invalidate("vehicle.delete")
