import asyncio
import os
import sys
from datetime import date
from unittest.mock import AsyncMock

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from garage_admin.clients.backend import GarageBackendClient
from garage_admin.schemas.customer import CustomerForm, VehicleForm
from garage_admin.schemas.expense import ExpenseForm
from garage_admin.schemas.inventory import StockAddForm
from garage_admin.schemas.invoice import InvoiceEmailForm
from garage_admin.schemas.job import JobForm, JobItemForm, JobUpdateForm
from garage_admin.schemas.notification import NotificationSummary
from garage_admin.schemas.report import ReportQuery
from garage_admin.schemas.supplier import PurchaseForm
from garage_admin.services.customers import CustomerService
from garage_admin.services.exceptions import DownstreamServiceError, ServiceError, ValidationFailed
from garage_admin.services.expenses import ExpenseService
from garage_admin.services.inventory import InventoryService
from garage_admin.services.invoices import InvoiceService
from garage_admin.services.jobs import JobService
from garage_admin.services.mock_store import get_mock_backend, reset_mock_store
from garage_admin.services.notifications import NotificationPoller, NotificationService
from garage_admin.services.query_cache import QueryCache
from garage_admin.services.reports import ReportService
from garage_admin.services.suppliers import SupplierService
from garage_admin.services.technicians import TechnicianService
from garage_admin.services.vehicles import VehicleService


NIMAL_ID = 1
COROLLA_ID = 1
KASUN_ID = 1
COMPLETED_JOB_ID = 1
IN_PROGRESS_JOB_ID = 2
ENGINE_OIL_ID = 1
BRAKE_PADS_ID = 2
SCANNER_ID = 3
SUPPLIER_ID = 1


@pytest.fixture(autouse=True)
def _reset_store() -> None:
    reset_mock_store()
    yield
    reset_mock_store()


@pytest.fixture
def client() -> GarageBackendClient:
    return GarageBackendClient(None, use_mock_data=True)


@pytest.fixture
def cache() -> QueryCache:
    return QueryCache(ttl_seconds=60)


def test_customer_list_is_cached_until_a_customer_is_created(client, cache) -> None:
    service = CustomerService(client, cache=cache)

    async def scenario():
        first = await service.list()
        get_mock_backend().customers.insert({"name": "Out of band", "phone": None, "email": None, "address": None})
        cached = await service.list()
        await service.create(CustomerForm(name="Dilan Wickrama", phone="+94 70 000 0000"))
        fresh = await service.list()
        return first, cached, fresh

    first, cached, fresh = asyncio.run(scenario())

    assert len(cached) == len(first) == 2
    assert {customer.name for customer in fresh} >= {"Dilan Wickrama", "Out of band"}


def test_customer_validation_happens_before_any_request(client) -> None:
    service = CustomerService(client)
    backend = get_mock_backend()

    with pytest.raises(ValidationFailed):
        asyncio.run(service.create(CustomerForm(name=" ")))

    assert backend.requests == []


def test_customer_partial_update_clears_blank_contact(client) -> None:
    service = CustomerService(client)

    updated = asyncio.run(service.update(NIMAL_ID, CustomerForm.model_validate({"email": ""})))

    assert updated.name == "Nimal Perera"
    assert updated.email in ("", None)


def test_job_with_new_vehicle_registers_vehicle(client, cache) -> None:
    jobs = JobService(client, cache=cache)
    vehicles = VehicleService(client, cache=cache)

    async def scenario():
        before = await vehicles.list(NIMAL_ID)
        job = await jobs.create(
            JobForm(
                customer_id=NIMAL_ID,
                description="Replace timing belt",
                vehicle=VehicleForm(make="Nissan", model="Sunny", license_plate="WP-1234"),
                technician_ids=[KASUN_ID, KASUN_ID],
            )
        )
        after = await vehicles.list(NIMAL_ID)
        return before, job, after

    before, job, after = asyncio.run(scenario())

    assert job.vehicle_make == "Nissan"
    assert [tech.id for tech in job.technicians] == [KASUN_ID]
    assert len(after) == len(before) + 1


def test_completing_job_with_create_invoice_returns_invoice(client) -> None:
    jobs = JobService(client)

    result = asyncio.run(
        jobs.update(IN_PROGRESS_JOB_ID, JobUpdateForm(job_status="Completed", create_invoice=True))
    )

    assert result.job.job_status == "Completed"
    assert result.job.invoice_created is True
    assert result.invoice is not None
    assert result.invoice.totals.items_total == 12000
    assert result.invoice.totals.final_total == 12000
    assert result.invoice.display["final_total"] == "LKR 12,000.00"


def test_status_change_without_flag_creates_no_invoice(client) -> None:
    jobs = JobService(client)

    result = asyncio.run(jobs.update(IN_PROGRESS_JOB_ID, JobUpdateForm(job_status="Completed")))

    assert result.invoice is None
    assert len(get_mock_backend().invoices.all()) == 1


def test_invoice_from_job_carries_advance_and_consumes_stock(client) -> None:
    jobs = JobService(client)
    invoices = InvoiceService(client)
    backend = get_mock_backend()

    async def scenario():
        job = await jobs.create(
            JobForm(
                customer_id=NIMAL_ID,
                vehicle_id=COROLLA_ID,
                description="Oil change",
                initial_amount=3000,
                advance_amount=500,
                job_status="Completed",
                items=[JobItemForm(inventory_item_id=ENGINE_OIL_ID, quantity=2, unit_price=1500)],
            )
        )
        result = await jobs.update(job.id, JobUpdateForm(create_invoice=True))
        return result.invoice

    invoice = asyncio.run(scenario())

    assert invoice.totals.items_total == 3000
    assert invoice.totals.advance_received == 500
    assert invoice.totals.final_total == 2500
    assert [entry.label for entry in invoice.invoice.reductions] == ["Advance"]
    assert backend.inventory.get(ENGINE_OIL_ID)["quantity"] == 18

    asyncio.run(invoices.delete(invoice.invoice.id))

    assert backend.inventory.get(ENGINE_OIL_ID)["quantity"] == 20
    titles = [note["title"] for note in backend.notifications.all()]
    assert "Inventory used" in titles
    assert "Inventory restocked" in titles


def test_seed_invoice_totals_and_email(client) -> None:
    invoices = InvoiceService(client)
    backend = get_mock_backend()

    view = asyncio.run(invoices.get(1))
    assert view.totals.final_total == 1150
    assert view.totals.advance_received == 50

    with pytest.raises(ValidationFailed):
        asyncio.run(invoices.email(1, InvoiceEmailForm(to="  ")))

    asyncio.run(invoices.email(1, InvoiceEmailForm(to="nimal@example.lk")))
    assert backend.sent_emails[-1]["to"] == "nimal@example.lk"

    pdf = asyncio.run(invoices.pdf(1))
    assert pdf.media_type == "application/pdf"
    assert pdf.filename.endswith(".pdf")


def test_deduct_rules(client) -> None:
    inventory = InventoryService(client)
    backend = get_mock_backend()

    with pytest.raises(ValidationFailed):
        asyncio.run(inventory.deduct(ENGINE_OIL_ID, 0))
    assert backend.requests == []

    with pytest.raises(DownstreamServiceError) as excinfo:
        asyncio.run(inventory.deduct(SCANNER_ID, 1))
    assert str(excinfo.value) == "Only consumable items can be auto deducted"

    with pytest.raises(DownstreamServiceError) as excinfo:
        asyncio.run(inventory.deduct(BRAKE_PADS_ID, 5))
    assert str(excinfo.value) == "Insufficient inventory quantity"

    item = asyncio.run(inventory.deduct(ENGINE_OIL_ID, 15))
    assert item.quantity == 5
    assert item.status == "Low Stock"


def test_inventory_list_refreshes_after_deduction(client, cache) -> None:
    inventory = InventoryService(client, cache=cache)

    async def scenario():
        before = await inventory.list(status="low-stock")
        await inventory.deduct(ENGINE_OIL_ID, 16)
        after = await inventory.list(status="low-stock")
        return before, after

    before, after = asyncio.run(scenario())

    assert [item.name for item in before] == ["Brake Pads (Front)"]
    assert [item.name for item in after] == ["Brake Pads (Front)", "Engine Oil 5W-30"]


def test_add_stock_lifts_item_out_of_low_stock(client) -> None:
    inventory = InventoryService(client)

    item = asyncio.run(inventory.add_stock(BRAKE_PADS_ID, StockAddForm(quantity=6)))

    assert item.quantity == 10
    assert item.status == "In Stock"


def test_purchase_of_consumable_raises_stock(client) -> None:
    suppliers = SupplierService(client)
    backend = get_mock_backend()

    purchase = asyncio.run(
        suppliers.record_purchase(
            PurchaseForm(
                supplier_id=SUPPLIER_ID,
                inventory_item_id=BRAKE_PADS_ID,
                item_name="Brake Pads (Front)",
                quantity=10,
                unit_cost=3400,
            )
        )
    )

    assert purchase.payment_status == "unpaid"
    assert purchase.supplier_name == "Lanka Auto Parts"
    assert backend.inventory.get(BRAKE_PADS_ID)["quantity"] == 14
    assert len(asyncio.run(suppliers.purchases(SUPPLIER_ID))) == 2


def test_expense_list_and_paid_rule(client) -> None:
    expenses = ExpenseService(client)
    today = date.today()

    rows = asyncio.run(expenses.list(start_date=today, end_date=today))
    assert {row.description for row in rows} == {"Electricity bill", "Workshop rent"}

    with pytest.raises(ValidationFailed) as excinfo:
        asyncio.run(expenses.create(ExpenseForm(description="Tools", amount=5000, payment_status="paid")))
    assert excinfo.value.field == "payment_method"

    created = asyncio.run(
        expenses.create(ExpenseForm(description="Tools", amount=5000, payment_status="paid", payment_method="Cash"))
    )
    assert created.amount == 5000


def test_technician_jobs(client) -> None:
    technicians = TechnicianService(client)

    jobs = asyncio.run(technicians.jobs(KASUN_ID))

    assert {job.id for job in jobs} == {COMPLETED_JOB_ID, IN_PROGRESS_JOB_ID}


def test_reports_and_exports(client) -> None:
    reports = ReportService(client)
    today = date.today()

    dashboard = asyncio.run(reports.dashboard())
    revenue = asyncio.run(reports.report("revenue", ReportQuery(timeframe="monthly", date=today)))
    export = asyncio.run(reports.export("expenses", "excel", ReportQuery(timeframe="yearly", date=today)))

    assert dashboard.totalExpenses == 68500
    assert len(dashboard.weeklyData) == 4
    assert revenue["totals"]["totalRevenue"] == 1150
    assert export.filename == f"expenses-report-{today.year}-01-01-to-{today.year}-12-31.xlsx"

    with pytest.raises(ValidationFailed):
        asyncio.run(reports.report("jobs", ReportQuery(timeframe="custom")))


def test_notification_summary_and_mark_all_read(client) -> None:
    notifications = NotificationService(client)

    summary = asyncio.run(notifications.summary())
    assert summary.unread_count == 1
    assert summary.latest[0].type == "low-stock"

    result = asyncio.run(notifications.mark_all_read())
    assert result.updated == 1
    assert asyncio.run(notifications.summary()).unread_count == 0


def test_poller_keeps_last_summary_when_refresh_fails(client) -> None:
    service = NotificationService(client)
    poller = NotificationPoller(service, interval_seconds=30)

    first = asyncio.run(poller.refresh())
    service.summary = AsyncMock(side_effect=ServiceError("Unable to reach garage backend"))
    second = asyncio.run(poller.refresh())

    assert first is not None
    assert second is first
    assert poller.latest is first


def test_poller_start_and_stop() -> None:
    service = AsyncMock()
    service.summary.return_value = NotificationSummary(unread_count=0)

    async def scenario():
        poller = NotificationPoller(service, interval_seconds=1)
        await poller.start()
        await asyncio.sleep(0)
        running = poller.running
        await poller.stop()
        return running, poller.running

    assert asyncio.run(scenario()) == (True, False)


def test_disabled_poller_never_starts() -> None:
    async def scenario():
        poller = NotificationPoller(AsyncMock(), enabled=False)
        await poller.start()
        return poller.running

    assert asyncio.run(scenario()) is False
