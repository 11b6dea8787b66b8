from __future__ import annotations

import asyncio
import os
import sys

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from garage_admin.clients.backend import GarageBackendClient
from garage_admin.schemas.invoice import InvoiceUpdateForm
from garage_admin.services.exceptions import ConflictError, DownstreamServiceError, NotFoundError, ValidationFailed
from garage_admin.services.inventory import InventoryService
from garage_admin.services.invoice_editor import InvoiceEditorRegistry
from garage_admin.services.invoices import InvoiceService
from garage_admin.services.mock_store import get_mock_backend, reset_mock_store
from garage_admin.services.query_cache import QueryCache

SEED_INVOICE_ID = 1
ENGINE_OIL_ID = 1
SCANNER_ID = 3


@pytest.fixture(autouse=True)
def _reset_store() -> None:
    reset_mock_store()
    yield
    reset_mock_store()


def _registry() -> InvoiceEditorRegistry:
    client = GarageBackendClient(None, use_mock_data=True)
    cache = QueryCache(ttl_seconds=60)
    return InvoiceEditorRegistry(InvoiceService(client, cache=cache), InventoryService(client, cache=cache))


def test_removing_advance_updates_totals_before_save() -> None:
    async def scenario():
        registry = _registry()
        session = await registry.open(SEED_INVOICE_ID)
        before = session.view().totals
        session.remove_reduction(0)
        return before, session.view().totals

    before, after = asyncio.run(scenario())

    assert before.final_total == 1150
    assert before.advance_received == 50
    assert after.final_total == 1200
    assert after.advance_received == 0


def test_consumable_charge_deducts_stock_then_saves() -> None:
    async def scenario():
        registry = _registry()
        session = await registry.open(SEED_INVOICE_ID)
        outcome = await session.select_inventory(ENGINE_OIL_ID, quantity=3, rate=50)
        assert outcome is None
        assert session.view().resolver.state == "awaiting_deduction"
        await session.decide("deduct")
        view = session.view()
        saved = await registry.save(session.session_id, InvoiceUpdateForm(payment_status="paid"))
        return registry, view, saved

    registry, view, saved = asyncio.run(scenario())
    backend = get_mock_backend()

    assert backend.inventory.get(ENGINE_OIL_ID)["quantity"] == 17
    assert view.charges[-1].label == "Engine Oil 5W-30 (3×)"
    assert view.charges[-1].amount == 150
    assert view.totals.final_total == 1300
    assert saved.invoice.payment_status == "paid"
    assert saved.totals.final_total == 1300
    assert [entry.label for entry in saved.invoice.charges] == ["Towing", "Engine Oil 5W-30 (3×)"]
    assert len(registry) == 0


def test_non_consumable_charge_is_added_without_prompt() -> None:
    async def scenario():
        session = await _registry().open(SEED_INVOICE_ID)
        outcome = await session.select_inventory(SCANNER_ID, quantity=1, rate=2500)
        return session, outcome

    session, outcome = asyncio.run(scenario())

    assert outcome.deducted is False
    assert session.charges[-1].amount == 2500
    assert get_mock_backend().inventory.get(SCANNER_ID)["quantity"] == 1


def test_deleted_inventory_item_is_reported_as_not_found() -> None:
    async def scenario():
        session = await _registry().open(SEED_INVOICE_ID)
        get_mock_backend().inventory.delete(ENGINE_OIL_ID)
        await session.select_inventory(ENGINE_OIL_ID)

    with pytest.raises(NotFoundError):
        asyncio.run(scenario())


def test_failed_deduction_leaves_charges_unchanged() -> None:
    async def scenario():
        session = await _registry().open(SEED_INVOICE_ID)
        await session.select_inventory(ENGINE_OIL_ID, quantity=500, rate=10)
        try:
            await session.decide("deduct")
        except DownstreamServiceError as exc:
            return session, exc
        raise AssertionError("deduction should fail")

    session, exc = asyncio.run(scenario())

    assert exc.status_code == 400
    assert str(exc) == "Insufficient inventory quantity"
    assert [entry.label for entry in session.charges] == ["Towing"]
    assert session.resolver.state == "awaiting_deduction"


def test_manual_entries_are_validated() -> None:
    async def scenario():
        return await _registry().open(SEED_INVOICE_ID)

    session = asyncio.run(scenario())

    with pytest.raises(ValidationFailed):
        session.add_charge("Wash", 0)
    with pytest.raises(NotFoundError):
        session.remove_charge(5)
    session.add_reduction("Loyalty", 100)
    assert session.totals().final_total == 1050


def test_save_is_rejected_while_another_save_is_running() -> None:
    async def scenario():
        session = await _registry().open(SEED_INVOICE_ID)
        session.saving = True
        await session.save(InvoiceUpdateForm())

    with pytest.raises(ConflictError):
        asyncio.run(scenario())


def test_failed_open_creates_no_session() -> None:
    registry = _registry()

    with pytest.raises(DownstreamServiceError) as excinfo:
        asyncio.run(registry.open(999))

    assert excinfo.value.status_code == 404
    assert len(registry) == 0


def test_closed_session_is_gone() -> None:
    async def scenario():
        registry = _registry()
        session = await registry.open(SEED_INVOICE_ID)
        return registry, session.session_id

    registry, session_id = asyncio.run(scenario())

    assert registry.close(session_id) is True
    assert registry.close(session_id) is False
    with pytest.raises(NotFoundError):
        registry.get(session_id)
