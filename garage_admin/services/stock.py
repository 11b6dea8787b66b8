from __future__ import annotations

from typing import Iterable, List, Optional

from garage_admin.schemas.inventory import InventoryItem, InventoryItemView, StockStatus

LOW_STOCK: StockStatus = "Low Stock"
IN_STOCK: StockStatus = "In Stock"

STATUS_FILTERS = {"low-stock": LOW_STOCK, "in-stock": IN_STOCK}


def stock_status(item: InventoryItem) -> StockStatus:
    """Label an item, counting quantity equal to the reorder level as low."""
    reorder_level = item.reorder_level if item.reorder_level is not None else 0.0
    return LOW_STOCK if item.quantity <= reorder_level else IN_STOCK


def with_status(item: InventoryItem) -> InventoryItemView:
    return InventoryItemView(**item.model_dump(), status=stock_status(item))


def _matches_search(item: InventoryItem, query: str) -> bool:
    return (
        query in item.name.lower()
        or query in (item.description or "").lower()
        or query in (item.unit or "").lower()
    )


def filter_inventory(
    items: Iterable[InventoryItem],
    *,
    search: Optional[str] = None,
    item_type: Optional[str] = None,
    status: Optional[str] = None,
) -> List[InventoryItemView]:
    query = (search or "").strip().lower()
    wanted_status = STATUS_FILTERS.get(status or "")

    rows: List[InventoryItemView] = []
    for item in items:
        if query and not _matches_search(item, query):
            continue
        if item_type and item_type != "all" and item.type != item_type:
            continue
        view = with_status(item)
        if wanted_status and view.status != wanted_status:
            continue
        rows.append(view)

    rows.sort(key=lambda row: row.name.lower())
    return rows
