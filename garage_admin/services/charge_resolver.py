"""Turns an inventory pick into an invoice charge.

Consumables stop to ask whether stock should be deducted before the charge is
added; other item types become a charge straight away. The charge is only
appended once the deduction (when chosen) has succeeded.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from garage_admin.schemas.inventory import InventoryItem
from garage_admin.schemas.invoice import (
    ChargeOutcomeOut,
    ChargeState,
    InvoiceExtra,
    PendingChargeOut,
    ResolverView,
)
from garage_admin.services.exceptions import ConflictError, ValidationFailed

if TYPE_CHECKING:  # pragma: no cover - import for static analysis only
    from garage_admin.services.inventory import InventoryService

logger = logging.getLogger(__name__)

IDLE: ChargeState = "idle"
SELECTING: ChargeState = "selecting"
AWAITING_DEDUCTION: ChargeState = "awaiting_deduction"
FINALIZED: ChargeState = "finalized"


def format_quantity(quantity: float) -> str:
    if float(quantity).is_integer():
        return str(int(quantity))
    return repr(float(quantity))


def charge_label(name: str, quantity: float) -> str:
    return f"{name} ({format_quantity(quantity)}×)" if quantity > 1 else name


@dataclass(frozen=True)
class PendingCharge:
    item: InventoryItem
    quantity: float
    rate: float

    @property
    def line_total(self) -> float:
        return self.quantity * self.rate

    @property
    def label(self) -> str:
        return charge_label(self.item.name, self.quantity)

    def as_schema(self) -> PendingChargeOut:
        return PendingChargeOut(
            item=self.item,
            quantity=self.quantity,
            rate=self.rate,
            label=self.label,
            line_total=self.line_total,
        )


@dataclass(frozen=True)
class ChargeOutcome:
    charge: InvoiceExtra
    deducted: bool

    def as_schema(self) -> ChargeOutcomeOut:
        return ChargeOutcomeOut(charge=self.charge, deducted=self.deducted)


def resolve_rate(item: InventoryItem, rate: Optional[float]) -> float:
    resolved = rate if rate is not None else item.unit_cost
    if resolved is None:
        raise ValidationFailed(f"Enter a rate; {item.name} has no unit cost.", field="rate")
    if resolved < 0:
        raise ValidationFailed("Rate must be zero or greater.", field="rate")
    return float(resolved)


class InventoryChargeResolver:
    def __init__(self, inventory: "InventoryService") -> None:
        self._inventory = inventory
        self.state: ChargeState = IDLE
        self.pending: Optional[PendingCharge] = None
        self.last_outcome: Optional[ChargeOutcome] = None
        self._deducting = False

    @property
    def busy(self) -> bool:
        return self._deducting

    def start(self) -> None:
        self._ensure_idle_for("start a new inventory charge")
        self.state = SELECTING
        self.pending = None

    def select(self, item: InventoryItem, quantity: Optional[float] = 1.0, rate: Optional[float] = None) -> Optional[ChargeOutcome]:
        """Pick an item; returns the outcome when no deduction prompt is needed."""
        self._ensure_idle_for("select another item")
        if quantity is None or quantity <= 0:
            raise ValidationFailed("Quantity must be greater than zero.", field="quantity")
        pending = PendingCharge(item=item, quantity=float(quantity), rate=resolve_rate(item, rate))

        self.pending = pending
        if item.type == "consumable":
            self.state = AWAITING_DEDUCTION
            logger.debug("Awaiting deduction decision for %s x %s", pending.quantity, item.name)
            return None
        return self._finalize(deducted=False)

    async def decide(self, decision: str) -> Optional[ChargeOutcome]:
        if self._deducting:
            raise ConflictError("A stock deduction is already in progress.")
        if self.state != AWAITING_DEDUCTION or self.pending is None:
            raise ConflictError("No inventory charge is waiting for a deduction decision.")

        if decision == "back":
            self.pending = None
            self.state = SELECTING
            return None
        if decision == "skip":
            return self._finalize(deducted=False)
        if decision != "deduct":
            raise ValidationFailed(f"Unknown decision {decision!r}.", field="decision")

        pending = self.pending
        self._deducting = True
        try:
            await self._inventory.deduct(pending.item.id, pending.quantity)
        finally:
            self._deducting = False
        return self._finalize(deducted=True)

    def view(self) -> ResolverView:
        return ResolverView(
            state=self.state,
            pending=self.pending.as_schema() if self.pending else None,
            last_outcome=self.last_outcome.as_schema() if self.last_outcome else None,
        )

    def _ensure_idle_for(self, action: str) -> None:
        if self._deducting or self.state == AWAITING_DEDUCTION:
            raise ConflictError(f"Finish the pending inventory charge before you {action}.")

    def _finalize(self, *, deducted: bool) -> ChargeOutcome:
        pending = self.pending
        charge = InvoiceExtra(label=pending.label, type="charge", amount=pending.line_total)
        outcome = ChargeOutcome(charge=charge, deducted=deducted)
        self.pending = None
        self.state = FINALIZED
        self.last_outcome = outcome
        logger.info("Inventory charge %s finalized (deducted=%s)", charge.label, deducted)
        return outcome
