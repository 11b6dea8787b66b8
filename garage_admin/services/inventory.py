from __future__ import annotations

import logging
from typing import List, Optional

from garage_admin.schemas.inventory import InventoryItem, InventoryItemForm, InventoryItemView, StockAddForm
from garage_admin.services.base import BackendService
from garage_admin.services.payloads import (
    build_deduct_payload,
    build_inventory_create_payload,
    build_inventory_update_payload,
    build_stock_add_payload,
)
from garage_admin.services.stock import filter_inventory, with_status

logger = logging.getLogger(__name__)


class InventoryService(BackendService):
    async def _all_items(self) -> List[InventoryItem]:
        async def load() -> List[InventoryItem]:
            data = await self._client.get("/inventory")
            return [InventoryItem(**row) for row in data or []]

        return await self._cached("inventory:list", "list inventory", load)

    async def list(
        self,
        *,
        search: Optional[str] = None,
        item_type: Optional[str] = None,
        status: Optional[str] = None,
    ) -> List[InventoryItemView]:
        items = await self._all_items()
        return filter_inventory(items, search=search, item_type=item_type, status=status)

    async def load_item(self, item_id: int) -> InventoryItem:
        """Current stock for one item, read past the query cache."""

        async def load() -> InventoryItem:
            return InventoryItem(**await self._client.get(f"/inventory/{item_id}"))

        return await self._call("load inventory item", load)

    async def get(self, item_id: int) -> InventoryItemView:
        async def load() -> InventoryItem:
            return InventoryItem(**await self._client.get(f"/inventory/{item_id}"))

        item = await self._cached(f"inventory:detail:{item_id}", "load inventory item", load)
        return with_status(item)

    async def create(self, form: InventoryItemForm) -> InventoryItemView:
        payload = build_inventory_create_payload(form)
        logger.info("Creating %s inventory item %s", payload["type"], payload["name"])

        async def send() -> InventoryItem:
            return InventoryItem(**await self._client.post("/inventory", payload))

        item = await self._call("create inventory item", send)
        self._invalidate("inventory.create")
        return with_status(item)

    async def update(self, item_id: int, form: InventoryItemForm) -> InventoryItemView:
        payload = build_inventory_update_payload(form)
        return await self._put(item_id, payload)

    async def add_stock(self, item_id: int, form: StockAddForm) -> InventoryItemView:
        item = await self.load_item(item_id)
        payload = build_stock_add_payload(item, form)
        logger.info("Adding %s to %s (now %s)", form.quantity, item.name, payload["quantity"])
        return await self._put(item_id, payload)

    async def _put(self, item_id: int, payload: dict) -> InventoryItemView:
        async def send() -> InventoryItem:
            return InventoryItem(**await self._client.put(f"/inventory/{item_id}", payload))

        item = await self._call("update inventory item", send)
        self._invalidate("inventory.update")
        return with_status(item)

    async def delete(self, item_id: int) -> None:
        logger.info("Deleting inventory item %s", item_id)
        await self._call("delete inventory item", lambda: self._client.delete(f"/inventory/{item_id}"))
        self._invalidate("inventory.delete")

    async def deduct(self, item_id: int, quantity: Optional[float]) -> InventoryItemView:
        payload = build_deduct_payload(quantity)
        logger.info("Deducting %s from inventory item %s", payload["quantity"], item_id)

        async def send() -> InventoryItem:
            return InventoryItem(**await self._client.post(f"/inventory/{item_id}/deduct", payload))

        item = await self._call("deduct inventory", send)
        self._invalidate("inventory.deduct")
        return with_status(item)
