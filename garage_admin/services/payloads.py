"""Request body builders, one per form.

Every builder validates before anything is sent and raises
``ValidationFailed`` with a message fit for the operator. Field semantics,
unless a builder says otherwise:

* omitted: the key is left out of the body, the backend keeps its value
  (updates only, driven by ``model_fields_set``).
* ``None``: sent as JSON ``null``. On create this stores nothing; on update
  the backend's ``COALESCE`` keeps the existing value.
* blank text: trimmed; required fields reject it, optional ones become ``None``.
"""

from __future__ import annotations

import calendar
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Sequence

from pydantic import BaseModel

from garage_admin.schemas.customer import CustomerForm, VehicleForm
from garage_admin.schemas.expense import ExpenseForm
from garage_admin.schemas.inventory import InventoryItem, InventoryItemForm, StockAddForm
from garage_admin.schemas.invoice import InvoiceExtra, InvoiceUpdateForm
from garage_admin.schemas.job import JobForm, JobItemForm, JobUpdateForm
from garage_admin.schemas.report import ReportQuery
from garage_admin.schemas.supplier import PurchaseForm, SupplierForm
from garage_admin.schemas.technician import TechnicianForm
from garage_admin.services.exceptions import ValidationFailed

INVENTORY_TYPES = ("consumable", "non-consumable", "bulk")
JOB_STATUSES = ("Pending", "In Progress", "Completed", "Cancelled")
INVOICE_PAYMENT_STATUSES = ("unpaid", "partial", "paid")
EXPENSE_PAYMENT_STATUSES = ("pending", "paid", "unpaid")
PURCHASE_PAYMENT_STATUSES = ("paid", "unpaid")
TECHNICIAN_STATUSES = ("Active", "On Leave", "Inactive")

Payload = Dict[str, Any]


def _text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    stripped = str(value).strip()
    return stripped or None


def _required_text(value: Optional[str], field: str, message: str) -> str:
    text = _text(value)
    if text is None:
        raise ValidationFailed(message, field=field)
    return text


def _non_negative(value: Optional[float], field: str, label: str) -> Optional[float]:
    if value is None:
        return None
    if value < 0:
        raise ValidationFailed(f"{label} must be zero or greater.", field=field)
    return float(value)


def _positive(value: Optional[float], field: str, label: str) -> float:
    if value is None or value <= 0:
        raise ValidationFailed(f"{label} must be greater than zero.", field=field)
    return float(value)


def _choice(value: Optional[str], allowed: Sequence[str], field: str, default: Optional[str] = None) -> Optional[str]:
    if value is None or value == "":
        return default
    if value not in allowed:
        raise ValidationFailed(
            f"{field} must be one of {', '.join(allowed)}.",
            field=field,
        )
    return value


def _sent(form: BaseModel, partial: bool) -> Iterable[str]:
    return form.model_fields_set if partial else type(form).model_fields.keys()


def build_customer_payload(form: CustomerForm, *, partial: bool = False) -> Payload:
    """``name`` is required on create and cannot be blanked on update.

    Optional contact fields sent blank on update become ``""`` so the backend
    clears them instead of keeping the old value.
    """
    payload: Payload = {}
    for field in _sent(form, partial):
        value = getattr(form, field)
        if field == "name":
            payload["name"] = _required_text(value, "name", "Customer name is required.")
        elif partial:
            payload[field] = _text(value) or ""
        else:
            payload[field] = _text(value)
    if not partial and "name" not in payload:
        raise ValidationFailed("Customer name is required.", field="name")
    return payload


def build_vehicle_payload(form: VehicleForm, *, partial: bool = False) -> Payload:
    if partial:
        payload: Payload = {}
        for field in form.model_fields_set:
            value = getattr(form, field)
            if field in ("make", "model"):
                payload[field] = _required_text(value, field, "Vehicle make and model are required.")
            elif field == "customer_id":
                payload[field] = value
            else:
                payload[field] = _text(value)
        return payload

    if form.customer_id is None:
        raise ValidationFailed("Select a customer for the vehicle.", field="customer_id")
    make = _text(form.make)
    model = _text(form.model)
    if not make or not model:
        raise ValidationFailed("Vehicle make and model are required.", field="make" if not make else "model")
    return {
        "customer_id": form.customer_id,
        "make": make,
        "model": model,
        "year": _text(form.year),
        "license_plate": _text(form.license_plate),
    }


def _job_items(items: Sequence[JobItemForm]) -> List[Payload]:
    prepared: List[Payload] = []
    for index, item in enumerate(items, start=1):
        name = _text(item.item_name)
        if not name and item.inventory_item_id is None:
            raise ValidationFailed(
                f"Item {index} needs a name or an inventory item.",
                field="items",
            )
        prepared.append(
            {
                "inventory_item_id": item.inventory_item_id,
                "item_name": name,
                "item_type": _choice(item.item_type, INVENTORY_TYPES, "item_type"),
                "quantity": _positive(item.quantity, "items", f"Quantity for item {index}"),
                "unit_price": _non_negative(item.unit_price, "items", f"Unit price for item {index}") or 0.0,
            }
        )
    return prepared


def _technician_ids(ids: Iterable[int]) -> List[int]:
    seen: List[int] = []
    for tech_id in ids:
        if tech_id not in seen:
            seen.append(tech_id)
    return seen


def _category(value: Optional[str]) -> Optional[str]:
    text = _text(value)
    return text[:100] if text else None


def build_job_payload(form: JobForm) -> Payload:
    """Create body for a job.

    Either ``vehicle_id`` or a new ``vehicle`` (make and model required) must
    be given; an existing id wins when both are present.
    """
    if form.customer_id is None:
        raise ValidationFailed("Select a customer for the job.", field="customer_id")
    description = _required_text(form.description, "description", "Job description is required.")

    payload: Payload = {
        "customer_id": form.customer_id,
        "description": description,
        "notes": _text(form.notes),
        "category": _category(form.category),
        "initial_amount": _non_negative(form.initial_amount, "initial_amount", "Initial amount"),
        "advance_amount": _non_negative(form.advance_amount, "advance_amount", "Advance amount"),
        "mileage": _non_negative(form.mileage, "mileage", "Mileage"),
        "job_status": _choice(form.job_status, JOB_STATUSES, "job_status", default="Pending"),
        "technician_ids": _technician_ids(form.technician_ids),
        "items": _job_items(form.items),
    }

    if form.vehicle_id is not None:
        payload["vehicle_id"] = form.vehicle_id
    elif form.vehicle is not None:
        vehicle = build_vehicle_payload(form.vehicle.model_copy(update={"customer_id": form.customer_id}))
        vehicle.pop("customer_id")
        payload["vehicle"] = vehicle
    else:
        raise ValidationFailed("Select a vehicle or enter the vehicle details.", field="vehicle_id")
    return payload


def build_job_update_payload(form: JobUpdateForm) -> Payload:
    """Only fields present in the request are sent.

    ``description`` cannot be blanked. Amount fields sent as ``null`` clear
    the stored value. ``create_invoice`` is sent only when requested and only
    for jobs being moved to, or already in, ``Completed``.
    """
    payload: Payload = {}
    for field in form.model_fields_set:
        value = getattr(form, field)
        if field == "create_invoice":
            continue
        if field == "description":
            payload[field] = _required_text(value, field, "Description is required when updating a job.")
        elif field == "job_status":
            payload[field] = _choice(value, JOB_STATUSES, field)
        elif field in ("initial_amount", "advance_amount", "mileage"):
            payload[field] = _non_negative(value, field, field.replace("_", " ").capitalize())
        elif field == "category":
            payload[field] = _category(value)
        elif field == "notes":
            payload[field] = _text(value)
        elif field == "technician_ids":
            payload[field] = _technician_ids(value or [])
        elif field == "items":
            payload[field] = _job_items(value or [])

    if form.create_invoice:
        status = payload.get("job_status")
        if status is not None and status != "Completed":
            raise ValidationFailed(
                "An invoice can only be created when the job status is Completed.",
                field="create_invoice",
            )
        payload["create_invoice"] = True
    return payload


def build_inventory_create_payload(form: InventoryItemForm) -> Payload:
    name = _required_text(form.name, "name", "Provide a name before saving.")
    item_type = _choice(form.type, INVENTORY_TYPES, "type")
    if item_type is None:
        raise ValidationFailed("Select the item type before saving.", field="type")
    return {
        "name": name,
        "description": _text(form.description),
        "type": item_type,
        "unit": _text(form.unit),
        "quantity": _non_negative(form.quantity, "quantity", "Quantity") or 0.0,
        "unit_cost": _non_negative(form.unit_cost, "unit_cost", "Unit cost"),
        "reorder_level": _non_negative(form.reorder_level, "reorder_level", "Minimum quantity"),
    }


def build_inventory_update_payload(form: InventoryItemForm) -> Payload:
    """Numeric fields sent as ``null`` are omitted, so the stored value is kept."""
    payload: Payload = {}
    for field in form.model_fields_set:
        value = getattr(form, field)
        if field == "name":
            payload[field] = _required_text(value, field, "Item name cannot be blank.")
        elif field == "type":
            item_type = _choice(value, INVENTORY_TYPES, field)
            if item_type is None:
                raise ValidationFailed("Select the item type before saving.", field="type")
            payload[field] = item_type
        elif field in ("description", "unit"):
            payload[field] = _text(value)
        elif field in ("quantity", "unit_cost", "reorder_level"):
            label = {"quantity": "Quantity", "unit_cost": "Unit cost"}.get(field, "Minimum quantity")
            amount = _non_negative(value, field, label)
            if amount is not None:
                payload[field] = amount
    return payload


def build_stock_add_payload(item: InventoryItem, form: StockAddForm) -> Payload:
    added = _positive(form.quantity, "quantity", "Quantity to add")
    return {"quantity": item.quantity + added}


def build_deduct_payload(quantity: Optional[float]) -> Payload:
    return {"quantity": _positive(quantity, "quantity", "Deduction quantity")}


def build_supplier_payload(form: SupplierForm, *, partial: bool = False) -> Payload:
    payload: Payload = {}
    for field in _sent(form, partial):
        value = getattr(form, field)
        if field == "name":
            payload[field] = _required_text(value, field, "Supplier name is required.")
        else:
            payload[field] = _text(value)
    if not partial and "name" not in payload:
        raise ValidationFailed("Supplier name is required.", field="name")
    return payload


def build_purchase_payload(form: PurchaseForm, *, partial: bool = False) -> Payload:
    """Record of stock bought from a supplier.

    A purchase linked to a consumable inventory item raises that item's
    quantity on the backend. ``unit_cost`` left blank keeps the item's cost.
    """
    if partial:
        payload: Payload = {}
        for field in form.model_fields_set:
            value = getattr(form, field)
            if field == "item_name":
                payload[field] = _required_text(value, field, "Item name is required.")
            elif field in ("quantity", "unit_cost"):
                payload[field] = _non_negative(value, field, field.replace("_", " ").capitalize())
            elif field == "payment_status":
                payload[field] = _choice(value, PURCHASE_PAYMENT_STATUSES, field)
            elif field in ("supplier_id", "inventory_item_id"):
                payload[field] = value
            else:
                payload[field] = _text(value)
        return payload

    if form.supplier_id is None:
        raise ValidationFailed("Select a supplier for the purchase.", field="supplier_id")
    return {
        "supplier_id": form.supplier_id,
        "inventory_item_id": form.inventory_item_id,
        "item_name": _required_text(form.item_name, "item_name", "Item name is required."),
        "quantity": _non_negative(form.quantity, "quantity", "Quantity") or 0.0,
        "unit_cost": _non_negative(form.unit_cost, "unit_cost", "Unit cost"),
        "payment_status": _choice(form.payment_status, PURCHASE_PAYMENT_STATUSES, "payment_status", default="unpaid"),
        "payment_method": _text(form.payment_method),
        "purchase_date": _text(form.purchase_date),
        "notes": _text(form.notes),
    }


def build_expense_payload(form: ExpenseForm, *, partial: bool = False) -> Payload:
    """A ``paid`` expense must name its payment method."""
    payload: Payload = {}
    for field in _sent(form, partial):
        value = getattr(form, field)
        if field == "description":
            payload[field] = _required_text(value, field, "Expense description is required.")
        elif field == "amount":
            payload[field] = _positive(value, field, "Amount")
        elif field == "payment_status":
            default = None if partial else "pending"
            payload[field] = _choice(value, EXPENSE_PAYMENT_STATUSES, field, default=default)
        else:
            payload[field] = _text(value)

    if not partial:
        if "description" not in payload:
            raise ValidationFailed("Expense description is required.", field="description")
        if "amount" not in payload:
            raise ValidationFailed("Amount must be greater than zero.", field="amount")
    if payload.get("payment_status") == "paid" and not payload.get("payment_method"):
        raise ValidationFailed("Select a payment method for a paid expense.", field="payment_method")
    return payload


def build_technician_payload(form: TechnicianForm, *, partial: bool = False) -> Payload:
    payload: Payload = {}
    for field in _sent(form, partial):
        value = getattr(form, field)
        if field == "name":
            payload[field] = _required_text(value, field, "Technician name is required.")
        elif field == "status":
            payload[field] = _choice(value, TECHNICIAN_STATUSES, field, default=None if partial else "Active")
        else:
            payload[field] = _text(value)
    if not partial and "name" not in payload:
        raise ValidationFailed("Technician name is required.", field="name")
    return payload


def build_extra_entry(label: Optional[str], amount: Optional[float], kind: str) -> InvoiceExtra:
    noun = "Charge" if kind == "charge" else "Reduction"
    return InvoiceExtra(
        label=_required_text(label, "label", f"{noun} label is required."),
        type=kind,
        amount=_positive(amount, "amount", f"{noun} amount"),
    )


def build_invoice_update_payload(
    form: InvoiceUpdateForm,
    charges: Optional[Sequence[InvoiceExtra]] = None,
    reductions: Optional[Sequence[InvoiceExtra]] = None,
) -> Payload:
    """Charges and reductions, when given, replace the stored lists in full.
    Left as ``None`` they are omitted and the backend keeps its lists.

    ``payment_method`` and ``notes`` left as ``None`` are omitted so the
    stored values survive.
    """
    payload: Payload = {}
    if charges is not None:
        payload["charges"] = [{"label": entry.label, "amount": entry.amount} for entry in charges]
    if reductions is not None:
        payload["reductions"] = [{"label": entry.label, "amount": entry.amount} for entry in reductions]
    status = _choice(form.payment_status, INVOICE_PAYMENT_STATUSES, "payment_status")
    if status is not None:
        payload["payment_status"] = status
    if form.payment_method is not None:
        payload["payment_method"] = _text(form.payment_method)
    if form.notes is not None:
        payload["notes"] = form.notes.strip()
    return payload


def build_report_params(query: ReportQuery, *, today: Optional[date] = None) -> Payload:
    """Query string for report endpoints.

    Explicit ``startDate``/``endDate`` boundaries are always sent so the
    backend honours the chosen window regardless of the timeframe.
    """
    anchor = query.date or today or date.today()
    params: Payload = {"timeframe": query.timeframe}

    if query.timeframe == "daily":
        start = end = anchor
        params["date"] = anchor.isoformat()
    elif query.timeframe == "monthly":
        start = anchor.replace(day=1)
        end = anchor.replace(day=calendar.monthrange(anchor.year, anchor.month)[1])
        params["month"] = anchor.month
        params["year"] = anchor.year
    elif query.timeframe == "yearly":
        start = date(anchor.year, 1, 1)
        end = date(anchor.year, 12, 31)
        params["year"] = anchor.year
    else:
        if query.start_date is None or query.end_date is None:
            raise ValidationFailed("Choose both a start and an end date.", field="start_date")
        if query.start_date > query.end_date:
            raise ValidationFailed("The start date must be on or before the end date.", field="start_date")
        start, end = query.start_date, query.end_date

    params["startDate"] = start.isoformat()
    params["endDate"] = end.isoformat()
    return params
