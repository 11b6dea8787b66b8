from __future__ import annotations

import asyncio
import os
import sys
from unittest.mock import AsyncMock

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from garage_admin.schemas.inventory import InventoryItem
from garage_admin.services.charge_resolver import (
    AWAITING_DEDUCTION,
    FINALIZED,
    IDLE,
    SELECTING,
    InventoryChargeResolver,
    charge_label,
)
from garage_admin.services.exceptions import ConflictError, DownstreamServiceError, ValidationFailed


def _item(item_type: str = "consumable", unit_cost=50.0) -> InventoryItem:
    return InventoryItem(id=7, name="Brake Fluid", type=item_type, quantity=10, unit_cost=unit_cost)


def _resolver(inventory=None) -> InventoryChargeResolver:
    resolver = InventoryChargeResolver(inventory or AsyncMock())
    resolver.start()
    return resolver


def test_charge_label_marks_quantities_above_one() -> None:
    assert charge_label("Brake Fluid", 3) == "Brake Fluid (3×)"
    assert charge_label("Brake Fluid", 1.5) == "Brake Fluid (1.5×)"
    assert charge_label("Brake Fluid", 1) == "Brake Fluid"


def test_charge_label_keeps_every_digit_of_large_quantities() -> None:
    assert charge_label("Oil", 1234567) == "Oil (1234567×)"
    assert charge_label("Oil", 3.0) == "Oil (3×)"
    assert charge_label("Oil", 1234567.25) == "Oil (1234567.25×)"


def test_consumable_waits_for_decision_then_deducts_before_adding() -> None:
    inventory = AsyncMock()
    resolver = _resolver(inventory)

    assert resolver.state == SELECTING
    assert resolver.select(_item(), quantity=3) is None
    assert resolver.state == AWAITING_DEDUCTION
    assert resolver.pending.line_total == 150
    inventory.deduct.assert_not_called()

    outcome = asyncio.run(resolver.decide("deduct"))

    inventory.deduct.assert_awaited_once_with(7, 3.0)
    assert outcome.deducted is True
    assert outcome.charge.label == "Brake Fluid (3×)"
    assert outcome.charge.amount == 150
    assert resolver.state == FINALIZED
    assert resolver.pending is None


def test_non_consumable_is_charged_immediately() -> None:
    inventory = AsyncMock()
    resolver = _resolver(inventory)

    outcome = resolver.select(_item("non-consumable"), quantity=3)

    assert outcome is not None
    assert outcome.deducted is False
    assert outcome.charge.amount == 150
    assert resolver.state == FINALIZED
    inventory.deduct.assert_not_called()


def test_skip_adds_charge_without_deduction() -> None:
    inventory = AsyncMock()
    resolver = _resolver(inventory)
    resolver.select(_item(), quantity=2)

    outcome = asyncio.run(resolver.decide("skip"))

    assert outcome.deducted is False
    assert outcome.charge.amount == 100
    inventory.deduct.assert_not_called()


def test_back_returns_to_selection_without_a_charge() -> None:
    resolver = _resolver()
    resolver.select(_item(), quantity=2)

    assert asyncio.run(resolver.decide("back")) is None
    assert resolver.state == SELECTING
    assert resolver.pending is None
    assert resolver.last_outcome is None


def test_failed_deduction_keeps_pending_charge() -> None:
    inventory = AsyncMock()
    inventory.deduct.side_effect = DownstreamServiceError("Insufficient inventory quantity", status_code=400)
    resolver = _resolver(inventory)
    resolver.select(_item(), quantity=3)

    with pytest.raises(DownstreamServiceError):
        asyncio.run(resolver.decide("deduct"))

    assert resolver.state == AWAITING_DEDUCTION
    assert resolver.pending is not None
    assert resolver.busy is False
    assert resolver.last_outcome is None


def test_selecting_while_awaiting_decision_is_a_conflict() -> None:
    resolver = _resolver()
    resolver.select(_item(), quantity=1)

    with pytest.raises(ConflictError):
        resolver.select(_item("non-consumable"))
    with pytest.raises(ConflictError):
        resolver.start()


def test_decision_without_pending_charge_is_a_conflict() -> None:
    resolver = InventoryChargeResolver(AsyncMock())
    assert resolver.state == IDLE

    with pytest.raises(ConflictError):
        asyncio.run(resolver.decide("deduct"))


def test_explicit_rate_overrides_unit_cost_and_missing_rate_is_rejected() -> None:
    resolver = _resolver()
    outcome = resolver.select(_item("bulk", unit_cost=50), quantity=2, rate=75)
    assert outcome.charge.amount == 150

    resolver.start()
    with pytest.raises(ValidationFailed) as excinfo:
        resolver.select(_item("bulk", unit_cost=None), quantity=1)
    assert excinfo.value.field == "rate"

    with pytest.raises(ValidationFailed):
        resolver.select(_item("bulk"), quantity=0)
