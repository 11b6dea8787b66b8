from __future__ import annotations

import os
import sys

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from garage_admin.schemas.inventory import InventoryItem
from garage_admin.services.stock import filter_inventory, stock_status


def _item(item_id: int, name: str, quantity: float, reorder_level=None, item_type: str = "consumable", **extra) -> InventoryItem:
    return InventoryItem(
        id=item_id,
        name=name,
        type=item_type,
        quantity=quantity,
        reorder_level=reorder_level,
        **extra,
    )


@pytest.mark.parametrize(
    "quantity, reorder_level, expected",
    [
        (5, 5, "Low Stock"),
        (4, 5, "Low Stock"),
        (6, 5, "In Stock"),
        (0, None, "Low Stock"),
        (1, None, "In Stock"),
        (0.5, 0.5, "Low Stock"),
    ],
)
def test_stock_status_boundaries(quantity, reorder_level, expected) -> None:
    assert stock_status(_item(1, "Brake Pads", quantity, reorder_level)) == expected


def test_filter_inventory_searches_name_description_and_unit() -> None:
    items = [
        _item(1, "Engine Oil", 20, 5, description="Synthetic 5W-30", unit="litre"),
        _item(2, "Brake Pads", 4, 5, unit="set"),
        _item(3, "Coolant", 50, 10, item_type="bulk", unit="litre"),
    ]

    by_unit = filter_inventory(items, search="LITRE")
    by_description = filter_inventory(items, search="synthetic")

    assert [row.name for row in by_unit] == ["Coolant", "Engine Oil"]
    assert [row.name for row in by_description] == ["Engine Oil"]


def test_filter_inventory_by_type_and_status() -> None:
    items = [
        _item(1, "Engine Oil", 20, 5),
        _item(2, "Brake Pads", 4, 5),
        _item(3, "Coolant", 5, 10, item_type="bulk"),
        _item(4, "Scanner", 1, None, item_type="non-consumable"),
    ]

    low = filter_inventory(items, status="low-stock")
    consumables = filter_inventory(items, item_type="consumable")
    everything = filter_inventory(items, item_type="all", status="")

    assert [row.name for row in low] == ["Brake Pads", "Coolant"]
    assert all(row.status == "Low Stock" for row in low)
    assert [row.name for row in consumables] == ["Brake Pads", "Engine Oil"]
    assert len(everything) == 4
