from typing import Literal, Optional

from pydantic import BaseModel

PurchasePaymentStatus = Literal["paid", "unpaid"]


class Supplier(BaseModel):
    id: int
    name: str
    contact_name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[str] = None


class SupplierForm(BaseModel):
    name: Optional[str] = None
    contact_name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None


class SupplierPurchase(BaseModel):
    id: int
    supplier_id: int
    supplier_name: Optional[str] = None
    inventory_item_id: Optional[int] = None
    item_name: str
    quantity: float = 0.0
    unit_cost: Optional[float] = None
    payment_status: PurchasePaymentStatus = "unpaid"
    payment_method: Optional[str] = None
    purchase_date: Optional[str] = None
    notes: Optional[str] = None


class PurchaseForm(BaseModel):
    supplier_id: Optional[int] = None
    inventory_item_id: Optional[int] = None
    item_name: Optional[str] = None
    quantity: Optional[float] = None
    unit_cost: Optional[float] = None
    payment_status: Optional[str] = None
    payment_method: Optional[str] = None
    purchase_date: Optional[str] = None
    notes: Optional[str] = None
