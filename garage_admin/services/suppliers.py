from __future__ import annotations

import logging
from typing import List, Optional

from garage_admin.schemas.supplier import PurchaseForm, Supplier, SupplierForm, SupplierPurchase
from garage_admin.services.base import BackendService
from garage_admin.services.payloads import build_purchase_payload, build_supplier_payload

logger = logging.getLogger(__name__)


class SupplierService(BackendService):
    async def list(self) -> List[Supplier]:
        async def load() -> List[Supplier]:
            data = await self._client.get("/suppliers")
            return [Supplier(**row) for row in data or []]

        return await self._cached("suppliers:list", "list suppliers", load)

    async def get(self, supplier_id: int) -> Supplier:
        async def load() -> Supplier:
            return Supplier(**await self._client.get(f"/suppliers/{supplier_id}"))

        return await self._cached(f"suppliers:detail:{supplier_id}", "load supplier", load)

    async def create(self, form: SupplierForm) -> Supplier:
        payload = build_supplier_payload(form)
        logger.info("Creating supplier %s", payload["name"])

        async def send() -> Supplier:
            return Supplier(**await self._client.post("/suppliers", payload))

        supplier = await self._call("create supplier", send)
        self._invalidate("supplier.create")
        return supplier

    async def update(self, supplier_id: int, form: SupplierForm) -> Supplier:
        payload = build_supplier_payload(form, partial=True)

        async def send() -> Supplier:
            return Supplier(**await self._client.put(f"/suppliers/{supplier_id}", payload))

        supplier = await self._call("update supplier", send)
        self._invalidate("supplier.update")
        return supplier

    async def delete(self, supplier_id: int) -> None:
        logger.info("Deleting supplier %s", supplier_id)
        await self._call("delete supplier", lambda: self._client.delete(f"/suppliers/{supplier_id}"))
        self._invalidate("supplier.delete")

    async def purchases(self, supplier_id: Optional[int] = None) -> List[SupplierPurchase]:
        async def load() -> List[SupplierPurchase]:
            data = await self._client.get("/suppliers/purchases", {"supplier_id": supplier_id})
            return [SupplierPurchase(**row) for row in data or []]

        key = f"suppliers:purchases:{supplier_id if supplier_id is not None else 'all'}"
        return await self._cached(key, "list purchases", load)

    async def record_purchase(self, form: PurchaseForm) -> SupplierPurchase:
        """Record stock bought from a supplier.

        A linked consumable item has its quantity raised by the backend, so
        inventory reads are invalidated too.
        """
        payload = build_purchase_payload(form)
        supplier_id = payload.pop("supplier_id")
        logger.info("Recording purchase of %s x %s from supplier %s", payload["quantity"], payload["item_name"], supplier_id)

        async def send() -> SupplierPurchase:
            return SupplierPurchase(**await self._client.post(f"/suppliers/{supplier_id}/purchase", payload))

        purchase = await self._call("record purchase", send)
        self._invalidate("purchase.create")
        return purchase

    async def update_purchase(self, purchase_id: int, form: PurchaseForm) -> SupplierPurchase:
        payload = build_purchase_payload(form, partial=True)

        async def send() -> SupplierPurchase:
            return SupplierPurchase(**await self._client.put(f"/suppliers/purchases/{purchase_id}", payload))

        purchase = await self._call("update purchase", send)
        self._invalidate("purchase.update")
        return purchase

    async def delete_purchase(self, purchase_id: int) -> None:
        logger.info("Deleting purchase %s", purchase_id)
        await self._call("delete purchase", lambda: self._client.delete(f"/suppliers/purchases/{purchase_id}"))
        self._invalidate("purchase.delete")
