from __future__ import annotations

import logging
from typing import List

from garage_admin.schemas.customer import Customer, CustomerForm
from garage_admin.services.base import BackendService
from garage_admin.services.payloads import build_customer_payload

logger = logging.getLogger(__name__)


class CustomerService(BackendService):
    async def list(self) -> List[Customer]:
        logger.debug("Listing customers")

        async def load() -> List[Customer]:
            data = await self._client.get("/customers")
            return [Customer(**row) for row in data or []]

        return await self._cached("customers:list", "list customers", load)

    async def get(self, customer_id: int) -> Customer:
        async def load() -> Customer:
            return Customer(**await self._client.get(f"/customers/{customer_id}"))

        return await self._cached(f"customers:detail:{customer_id}", "load customer", load)

    async def create(self, form: CustomerForm) -> Customer:
        payload = build_customer_payload(form)
        logger.info("Creating customer %s", payload["name"])

        async def send() -> Customer:
            return Customer(**await self._client.post("/customers", payload))

        customer = await self._call("create customer", send)
        self._invalidate("customer.create")
        return customer

    async def update(self, customer_id: int, form: CustomerForm) -> Customer:
        payload = build_customer_payload(form, partial=True)
        logger.info("Updating customer %s fields=%s", customer_id, sorted(payload))

        async def send() -> Customer:
            return Customer(**await self._client.put(f"/customers/{customer_id}", payload))

        customer = await self._call("update customer", send)
        self._invalidate("customer.update")
        return customer

    async def delete(self, customer_id: int) -> None:
        logger.info("Deleting customer %s", customer_id)
        await self._call("delete customer", lambda: self._client.delete(f"/customers/{customer_id}"))
        self._invalidate("customer.delete")
