from __future__ import annotations

import os
import sys
from datetime import date

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from garage_admin.schemas.customer import CustomerForm, VehicleForm
from garage_admin.schemas.expense import ExpenseForm
from garage_admin.schemas.inventory import InventoryItem, InventoryItemForm, StockAddForm
from garage_admin.schemas.invoice import InvoiceExtra, InvoiceUpdateForm
from garage_admin.schemas.job import JobForm, JobItemForm, JobUpdateForm
from garage_admin.schemas.report import ReportQuery
from garage_admin.schemas.supplier import PurchaseForm
from garage_admin.services.exceptions import ValidationFailed
from garage_admin.services.payloads import (
    build_customer_payload,
    build_expense_payload,
    build_extra_entry,
    build_inventory_create_payload,
    build_inventory_update_payload,
    build_invoice_update_payload,
    build_job_payload,
    build_job_update_payload,
    build_purchase_payload,
    build_report_params,
    build_stock_add_payload,
    build_vehicle_payload,
)


def test_customer_payload_requires_name_and_trims_contacts() -> None:
    with pytest.raises(ValidationFailed) as excinfo:
        build_customer_payload(CustomerForm(name="   "))
    assert excinfo.value.field == "name"

    payload = build_customer_payload(CustomerForm(name=" Nimal ", phone=" ", email="n@example.lk "))
    assert payload == {"name": "Nimal", "phone": None, "email": "n@example.lk", "address": None}


def test_customer_partial_update_sends_only_given_fields() -> None:
    form = CustomerForm.model_validate({"phone": ""})

    assert build_customer_payload(form, partial=True) == {"phone": ""}


def test_vehicle_payload_requires_make_and_model() -> None:
    with pytest.raises(ValidationFailed) as excinfo:
        build_vehicle_payload(VehicleForm(customer_id=1, make="Toyota"))
    assert excinfo.value.field == "model"


def test_job_payload_needs_vehicle_and_dedupes_technicians() -> None:
    with pytest.raises(ValidationFailed) as excinfo:
        build_job_payload(JobForm(customer_id=1, description="Oil change"))
    assert excinfo.value.field == "vehicle_id"

    payload = build_job_payload(
        JobForm(
            customer_id=1,
            description=" Oil change ",
            vehicle=VehicleForm(make="Honda", model="Fit"),
            technician_ids=[2, 2, 1],
            items=[JobItemForm(item_name="Oil", quantity=2, unit_price=1500)],
        )
    )
    assert payload["description"] == "Oil change"
    assert payload["vehicle"]["make"] == "Honda"
    assert "vehicle_id" not in payload
    assert payload["technician_ids"] == [2, 1]
    assert payload["job_status"] == "Pending"
    assert payload["items"][0]["quantity"] == 2.0


def test_job_payload_rejects_negative_amounts() -> None:
    with pytest.raises(ValidationFailed) as excinfo:
        build_job_payload(JobForm(customer_id=1, vehicle_id=1, description="Tyres", advance_amount=-5))
    assert excinfo.value.field == "advance_amount"


def test_job_update_sends_only_present_fields() -> None:
    form = JobUpdateForm.model_validate({"job_status": "Completed", "advance_amount": None, "create_invoice": True})

    assert build_job_update_payload(form) == {
        "job_status": "Completed",
        "advance_amount": None,
        "create_invoice": True,
    }


def test_job_update_rejects_invoice_for_unfinished_job() -> None:
    form = JobUpdateForm.model_validate({"job_status": "In Progress", "create_invoice": True})

    with pytest.raises(ValidationFailed):
        build_job_update_payload(form)


def test_inventory_payloads() -> None:
    with pytest.raises(ValidationFailed):
        build_inventory_create_payload(InventoryItemForm(name="Oil"))
    with pytest.raises(ValidationFailed):
        build_inventory_create_payload(InventoryItemForm(name="Oil", type="liquid"))

    created = build_inventory_create_payload(InventoryItemForm(name="Oil", type="consumable"))
    assert created["quantity"] == 0.0

    update = build_inventory_update_payload(InventoryItemForm.model_validate({"unit_cost": None, "unit": " L "}))
    assert update == {"unit": "L"}


def test_stock_add_adds_to_current_quantity() -> None:
    item = InventoryItem(id=1, name="Oil", type="consumable", quantity=4)

    assert build_stock_add_payload(item, StockAddForm(quantity=6)) == {"quantity": 10}
    with pytest.raises(ValidationFailed):
        build_stock_add_payload(item, StockAddForm(quantity=0))


def test_expense_payload_rules() -> None:
    with pytest.raises(ValidationFailed) as excinfo:
        build_expense_payload(ExpenseForm(description="Rent", amount=0))
    assert excinfo.value.field == "amount"

    with pytest.raises(ValidationFailed) as excinfo:
        build_expense_payload(ExpenseForm(description="Rent", amount=100, payment_status="paid"))
    assert excinfo.value.field == "payment_method"

    payload = build_expense_payload(ExpenseForm(description="Rent", amount=100))
    assert payload["payment_status"] == "pending"


def test_purchase_payload_defaults_to_unpaid() -> None:
    with pytest.raises(ValidationFailed):
        build_purchase_payload(PurchaseForm(item_name="Oil"))

    payload = build_purchase_payload(PurchaseForm(supplier_id=1, item_name="Oil", quantity=5))
    assert payload["payment_status"] == "unpaid"


def test_extra_entry_requires_label_and_positive_amount() -> None:
    with pytest.raises(ValidationFailed):
        build_extra_entry("", 10, "charge")
    with pytest.raises(ValidationFailed):
        build_extra_entry("Discount", -1, "deduction")

    entry = build_extra_entry(" Discount ", 25, "deduction")
    assert (entry.label, entry.type, entry.amount) == ("Discount", "deduction", 25.0)


def test_invoice_update_payload_replaces_lists_only_when_given() -> None:
    form = InvoiceUpdateForm(payment_status="paid")
    assert build_invoice_update_payload(form) == {"payment_status": "paid"}

    payload = build_invoice_update_payload(form, [InvoiceExtra(label="Towing", amount=200)], [])
    assert payload["charges"] == [{"label": "Towing", "amount": 200.0}]
    assert payload["reductions"] == []

    with pytest.raises(ValidationFailed):
        build_invoice_update_payload(InvoiceUpdateForm(payment_status="settled"))


def test_report_params_send_explicit_window() -> None:
    monthly = build_report_params(ReportQuery(timeframe="monthly"), today=date(2024, 2, 10))
    assert monthly == {
        "timeframe": "monthly",
        "month": 2,
        "year": 2024,
        "startDate": "2024-02-01",
        "endDate": "2024-02-29",
    }

    daily = build_report_params(ReportQuery(timeframe="daily", date=date(2024, 3, 5)))
    assert daily["startDate"] == daily["endDate"] == "2024-03-05"

    with pytest.raises(ValidationFailed):
        build_report_params(ReportQuery(timeframe="custom", start_date=date(2024, 3, 5)))
    with pytest.raises(ValidationFailed):
        build_report_params(
            ReportQuery(timeframe="custom", start_date=date(2024, 3, 5), end_date=date(2024, 3, 1))
        )
