from __future__ import annotations

import os
import sys

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from garage_admin.schemas.invoice import InvoiceDetail, InvoiceExtra, InvoiceLineItem
from garage_admin.services.invoice_totals import (
    advance_received,
    derive_edited_totals,
    derive_totals,
    is_advance,
)
from garage_admin.services.invoices import build_invoice_view


def _detail(**overrides) -> InvoiceDetail:
    data = {
        "id": 1,
        "invoice_no": "INV-20240501-0001",
        "items": [
            InvoiceLineItem(item_name="Labour", type="non-consumable", quantity=1, unit_price=600, line_total=600),
            InvoiceLineItem(item_name="Oil", quantity=2, unit_price=200, line_total=400),
        ],
        "charges": [InvoiceExtra(label="Towing", type="charge", amount=200)],
        "reductions": [InvoiceExtra(label="Advance", type="deduction", amount=50)],
    }
    data.update(overrides)
    return InvoiceDetail(**data)


def test_backend_aggregates_are_used_verbatim() -> None:
    # Aggregates deliberately disagree with the arrays.
    detail = _detail(items_total=999.0, total_charges=1.5, total_deductions=0.5)

    totals = derive_totals(detail)

    assert totals.items_total == 999.0
    assert totals.charges_total == 1.5
    assert totals.reductions_total == 0.5
    assert totals.final_total == 999.0 + 1.5 - 0.5


def test_backend_final_total_wins_over_local_arithmetic() -> None:
    detail = _detail(items_total=1000.0, total_charges=200.0, total_deductions=50.0, final_total=1149.99)

    assert derive_totals(detail).final_total == 1149.99


def test_missing_aggregates_fall_back_to_array_sums() -> None:
    totals = derive_totals(_detail())

    assert totals.items_total == 1000.0
    assert totals.charges_total == 200.0
    assert totals.reductions_total == 50.0
    assert totals.final_total == 1150.0


def test_each_aggregate_falls_back_independently() -> None:
    totals = derive_totals(_detail(items_total=1200.0))

    assert totals.items_total == 1200.0
    assert totals.charges_total == 200.0
    assert totals.final_total == 1350.0


def test_empty_invoice_totals_are_zero() -> None:
    totals = derive_totals(InvoiceDetail(id=3))

    assert (totals.items_total, totals.charges_total, totals.reductions_total, totals.final_total) == (0, 0, 0, 0)


def test_deriving_totals_twice_is_stable_and_leaves_detail_untouched() -> None:
    detail = _detail()
    before = detail.model_dump()

    first = derive_totals(detail)
    second = derive_totals(detail)

    assert first == second
    assert detail.model_dump() == before


def test_removing_advance_recomputes_final_total() -> None:
    detail = _detail(items_total=1000.0, total_charges=200.0, total_deductions=50.0, final_total=1150.0)
    assert derive_totals(detail).final_total == 1150.0

    edited = derive_edited_totals(detail, detail.charges, [])

    assert edited.items_total == 1000.0
    assert edited.reductions_total == 0.0
    assert edited.final_total == 1200.0


def test_edited_totals_ignore_stale_charge_aggregates() -> None:
    detail = _detail(items_total=1000.0, total_charges=200.0, total_deductions=50.0, final_total=1150.0)
    charges = list(detail.charges) + [InvoiceExtra(label="Wash", amount=300)]

    edited = derive_edited_totals(detail, charges, detail.reductions)

    assert edited.charges_total == 500.0
    assert edited.final_total == 1450.0


def test_advance_is_recognised_case_insensitively() -> None:
    reductions = [
        InvoiceExtra(label=" ADVANCE ", type="deduction", amount=50),
        InvoiceExtra(label="Loyalty discount", type="deduction", amount=25),
    ]

    assert is_advance(reductions[0])
    assert not is_advance(reductions[1])
    assert advance_received(reductions) == 50


def test_invoice_view_formats_totals_for_display() -> None:
    view = build_invoice_view(
        _detail(invoice_date="2024-05-01 20:00:00"),
        currency="LKR",
        tz_name="Asia/Colombo",
    )

    assert view.totals.final_total == 1150.0
    assert view.totals.advance_received == 50.0
    assert view.display["final_total"] == "LKR 1,150.00"
    assert view.display["advance_received"] == "LKR 50.00"
    # 20:00 UTC is past midnight in Colombo (UTC+05:30).
    assert view.display["invoice_date"] == "02/05/24"
