from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from garage_admin.schemas.inventory import InventoryItem

PaymentStatus = Literal["unpaid", "partial", "paid"]
InvoiceItemType = Literal["consumable", "non-consumable", "bulk"]
ExtraType = Literal["charge", "deduction"]
ChargeState = Literal["idle", "selecting", "awaiting_deduction", "finalized"]


class InvoiceLineItem(BaseModel):
    id: Optional[int] = None
    inventory_item_id: Optional[int] = None
    item_name: str
    type: InvoiceItemType = "consumable"
    quantity: float = 1.0
    unit_price: float = 0.0
    line_total: float = 0.0  # computed by the backend, never recomputed here


class InvoiceExtra(BaseModel):
    id: Optional[int] = None
    label: str
    type: ExtraType = "charge"
    amount: float = Field(default=0.0, ge=0)


class InvoiceDetail(BaseModel):
    id: int
    invoice_no: Optional[str] = None
    job_id: Optional[int] = None
    invoice_date: Optional[str] = None
    payment_status: PaymentStatus = "unpaid"
    payment_method: Optional[str] = None
    notes: Optional[str] = None

    items: List[InvoiceLineItem] = Field(default_factory=list)
    charges: List[InvoiceExtra] = Field(default_factory=list)
    reductions: List[InvoiceExtra] = Field(default_factory=list)

    # Aggregates may be missing from partial responses.
    items_total: Optional[float] = None
    total_charges: Optional[float] = None
    total_deductions: Optional[float] = None
    final_total: Optional[float] = None

    customer_id: Optional[int] = None
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    customer_address: Optional[str] = None
    job_description: Optional[str] = None
    job_status: Optional[str] = None
    initial_amount: Optional[float] = None
    advance_amount: Optional[float] = None
    mileage: Optional[float] = None


class InvoiceTotalsOut(BaseModel):
    items_total: float
    charges_total: float
    reductions_total: float
    final_total: float
    advance_received: float = 0.0


class InvoiceView(BaseModel):
    invoice: InvoiceDetail
    totals: InvoiceTotalsOut
    display: Dict[str, str] = Field(default_factory=dict)


class ExtraEntryForm(BaseModel):
    label: Optional[str] = None
    amount: Optional[float] = None


class InvoiceUpdateForm(BaseModel):
    payment_method: Optional[str] = None
    payment_status: Optional[str] = None
    notes: Optional[str] = None


class InvoiceEmailForm(BaseModel):
    to: Optional[str] = None
    subject: Optional[str] = None
    message: Optional[str] = None


class InventoryChargeRequest(BaseModel):
    inventory_item_id: int
    quantity: Optional[float] = 1.0
    rate: Optional[float] = None


class DeductionDecisionRequest(BaseModel):
    decision: Literal["deduct", "skip", "back"]


class PendingChargeOut(BaseModel):
    item: InventoryItem
    quantity: float
    rate: float
    label: str
    line_total: float


class ChargeOutcomeOut(BaseModel):
    charge: InvoiceExtra
    deducted: bool


class ResolverView(BaseModel):
    state: ChargeState
    pending: Optional[PendingChargeOut] = None
    last_outcome: Optional[ChargeOutcomeOut] = None


class EditSessionView(BaseModel):
    session_id: str
    invoice_id: int
    invoice_no: Optional[str] = None
    items: List[InvoiceLineItem]
    charges: List[InvoiceExtra]
    reductions: List[InvoiceExtra]
    totals: InvoiceTotalsOut
    resolver: ResolverView
    saving: bool = False
