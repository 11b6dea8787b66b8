"""Server-side sessions for editing an invoice's charges and reductions."""

from __future__ import annotations

import logging
import uuid
from typing import Dict, List, Optional

from garage_admin.schemas.invoice import EditSessionView, InvoiceDetail, InvoiceExtra, InvoiceUpdateForm, InvoiceView
from garage_admin.services.charge_resolver import FINALIZED, IDLE, ChargeOutcome, InventoryChargeResolver
from garage_admin.services.exceptions import ConflictError, DownstreamServiceError, NotFoundError
from garage_admin.services.inventory import InventoryService
from garage_admin.services.invoice_totals import InvoiceTotals, advance_received, derive_edited_totals
from garage_admin.services.invoices import InvoiceService
from garage_admin.services.payloads import build_extra_entry, build_invoice_update_payload

logger = logging.getLogger(__name__)


def _remove_at(entries: List[InvoiceExtra], index: int, noun: str) -> InvoiceExtra:
    if index < 0 or index >= len(entries):
        raise NotFoundError(f"No {noun} at position {index}.")
    return entries.pop(index)


class InvoiceEditSession:
    """Local copy of an invoice's extras plus the inventory charge resolver.

    Totals are derived from the loaded ``items_total`` and the local lists, so
    every add or remove is reflected before anything is saved.
    """

    def __init__(
        self,
        session_id: str,
        detail: InvoiceDetail,
        *,
        invoices: InvoiceService,
        inventory: InventoryService,
    ) -> None:
        self.session_id = session_id
        self.detail = detail
        self.charges: List[InvoiceExtra] = [entry.model_copy() for entry in detail.charges]
        self.reductions: List[InvoiceExtra] = [entry.model_copy() for entry in detail.reductions]
        self.resolver = InventoryChargeResolver(inventory)
        self.saving = False
        self._invoices = invoices
        self._inventory = inventory

    @property
    def invoice_id(self) -> int:
        return self.detail.id

    def totals(self) -> InvoiceTotals:
        return derive_edited_totals(self.detail, self.charges, self.reductions)

    def add_charge(self, label: Optional[str], amount: Optional[float]) -> InvoiceExtra:
        entry = build_extra_entry(label, amount, "charge")
        self.charges.append(entry)
        return entry

    def remove_charge(self, index: int) -> InvoiceExtra:
        return _remove_at(self.charges, index, "charge")

    def add_reduction(self, label: Optional[str], amount: Optional[float]) -> InvoiceExtra:
        entry = build_extra_entry(label, amount, "deduction")
        self.reductions.append(entry)
        return entry

    def remove_reduction(self, index: int) -> InvoiceExtra:
        return _remove_at(self.reductions, index, "reduction")

    async def select_inventory(
        self,
        item_id: int,
        quantity: Optional[float] = 1.0,
        rate: Optional[float] = None,
    ) -> Optional[ChargeOutcome]:
        if self.resolver.state in (IDLE, FINALIZED):
            self.resolver.start()
        try:
            item = await self._inventory.load_item(item_id)
        except DownstreamServiceError as exc:
            if exc.status_code == 404:
                raise NotFoundError(f"Inventory item {item_id} no longer exists.", cause=exc) from exc
            raise
        outcome = self.resolver.select(item, quantity, rate)
        if outcome is not None:
            self.charges.append(outcome.charge)
        return outcome

    async def decide(self, decision: str) -> Optional[ChargeOutcome]:
        outcome = await self.resolver.decide(decision)
        if outcome is not None:
            self.charges.append(outcome.charge)
        return outcome

    async def save(self, form: InvoiceUpdateForm) -> InvoiceView:
        if self.saving:
            raise ConflictError("This invoice is already being saved.")
        if self.resolver.busy:
            raise ConflictError("Wait for the stock deduction to finish before saving.")
        payload = build_invoice_update_payload(form, self.charges, self.reductions)
        self.saving = True
        try:
            return await self._invoices.save(self.invoice_id, payload)
        finally:
            self.saving = False

    def view(self) -> EditSessionView:
        return EditSessionView(
            session_id=self.session_id,
            invoice_id=self.invoice_id,
            invoice_no=self.detail.invoice_no,
            items=self.detail.items,
            charges=self.charges,
            reductions=self.reductions,
            totals=self.totals().as_schema(advance_received=advance_received(self.reductions)),
            resolver=self.resolver.view(),
            saving=self.saving,
        )


class InvoiceEditorRegistry:
    """Open edit sessions keyed by id. Sessions end on save or close."""

    def __init__(self, invoices: InvoiceService, inventory: InventoryService) -> None:
        self._invoices = invoices
        self._inventory = inventory
        self._sessions: Dict[str, InvoiceEditSession] = {}

    async def open(self, invoice_id: int) -> InvoiceEditSession:
        # A failed load raises before any session exists.
        detail = await self._invoices.load_detail(invoice_id)
        session = InvoiceEditSession(
            uuid.uuid4().hex,
            detail,
            invoices=self._invoices,
            inventory=self._inventory,
        )
        self._sessions[session.session_id] = session
        logger.info("Opened edit session %s for invoice %s", session.session_id, invoice_id)
        return session

    def get(self, session_id: str) -> InvoiceEditSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise NotFoundError("Invoice edit session not found or already closed.")
        return session

    async def save(self, session_id: str, form: InvoiceUpdateForm) -> InvoiceView:
        session = self.get(session_id)
        view = await session.save(form)
        self._sessions.pop(session_id, None)
        logger.info("Saved and closed edit session %s", session_id)
        return view

    def close(self, session_id: str) -> bool:
        # An in-flight deduction or save still completes after close.
        closed = self._sessions.pop(session_id, None) is not None
        if closed:
            logger.info("Closed edit session %s", session_id)
        return closed

    def __len__(self) -> int:
        return len(self._sessions)
