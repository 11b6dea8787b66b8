"""Invoice total derivation.

Backend aggregates win whenever they are present; they may carry rounding or
rules that are not visible here. Local sums are only a fallback for partial
responses and for invoices whose charges and reductions are being edited.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from garage_admin.schemas.invoice import InvoiceDetail, InvoiceExtra, InvoiceLineItem, InvoiceTotalsOut

ADVANCE_LABEL = "advance"


@dataclass(frozen=True)
class InvoiceTotals:
    items_total: float
    charges_total: float
    reductions_total: float
    final_total: float

    def as_schema(self, *, advance_received: float = 0.0) -> InvoiceTotalsOut:
        return InvoiceTotalsOut(
            items_total=self.items_total,
            charges_total=self.charges_total,
            reductions_total=self.reductions_total,
            final_total=self.final_total,
            advance_received=advance_received,
        )


def _sum_line_totals(items: Iterable[InvoiceLineItem]) -> float:
    return sum((item.line_total or 0.0) for item in items)


def _sum_amounts(entries: Iterable[InvoiceExtra]) -> float:
    return sum((entry.amount or 0.0) for entry in entries)


def _prefer(supplied: Optional[float], fallback: float) -> float:
    return supplied if supplied is not None else fallback


def derive_totals(detail: InvoiceDetail) -> InvoiceTotals:
    """Compute the four invoice totals from a loaded detail.

    Each aggregate falls back to summing its own entries independently, so a
    response carrying ``items_total`` but not ``total_charges`` still mixes
    the supplied value with a local sum.
    """
    items_total = _prefer(detail.items_total, _sum_line_totals(detail.items))
    charges_total = _prefer(detail.total_charges, _sum_amounts(detail.charges))
    reductions_total = _prefer(detail.total_deductions, _sum_amounts(detail.reductions))
    final_total = _prefer(
        detail.final_total,
        items_total + charges_total - reductions_total,
    )
    return InvoiceTotals(
        items_total=items_total,
        charges_total=charges_total,
        reductions_total=reductions_total,
        final_total=final_total,
    )


def derive_edited_totals(
    detail: InvoiceDetail,
    charges: Sequence[InvoiceExtra],
    reductions: Sequence[InvoiceExtra],
) -> InvoiceTotals:
    """Totals for an invoice whose charges and reductions are edited locally.

    Items are not editable, so the backend ``items_total`` is still honoured.
    The charge, deduction and final aggregates describe the saved lists and
    are ignored.
    """
    edited = detail.model_copy(
        update={
            "charges": list(charges),
            "reductions": list(reductions),
            "total_charges": None,
            "total_deductions": None,
            "final_total": None,
        }
    )
    return derive_totals(edited)


def is_advance(entry: InvoiceExtra) -> bool:
    return entry.label.strip().lower() == ADVANCE_LABEL


def advance_received(reductions: Iterable[InvoiceExtra]) -> float:
    """Sum of reductions recorded as the job's advance payment."""
    return sum(entry.amount for entry in reductions if is_advance(entry))
