from typing import Literal, Optional

from pydantic import BaseModel

InventoryType = Literal["consumable", "non-consumable", "bulk"]
StockStatus = Literal["Low Stock", "In Stock"]


class InventoryItem(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    type: InventoryType
    unit: Optional[str] = None
    quantity: float = 0.0
    unit_cost: Optional[float] = None
    reorder_level: Optional[float] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class InventoryItemView(InventoryItem):
    status: StockStatus


class InventoryItemForm(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    type: Optional[str] = None
    unit: Optional[str] = None
    quantity: Optional[float] = None
    unit_cost: Optional[float] = None
    reorder_level: Optional[float] = None


class StockAddForm(BaseModel):
    quantity: Optional[float] = None


class DeductRequest(BaseModel):
    quantity: Optional[float] = None
