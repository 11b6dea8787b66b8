from __future__ import annotations

import logging
from functools import lru_cache

from fastapi import Depends

from garage_admin.clients.backend import GarageBackendClient
from garage_admin.config import Settings, get_settings
from garage_admin.services import (
    CustomerService,
    ExpenseService,
    InventoryService,
    InvoiceEditorRegistry,
    InvoiceService,
    JobService,
    NotificationPoller,
    NotificationService,
    ReportService,
    SupplierService,
    TechnicianService,
    VehicleService,
)
from garage_admin.services.query_cache import QueryCache

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_backend_client_cached() -> GarageBackendClient:
    settings = get_settings()
    logger.info(
        "Garage backend client: %s",
        "mock backend" if settings.use_mock_data or not settings.backend_base_url else settings.backend_base_url,
    )
    return GarageBackendClient(
        str(settings.backend_base_url) if settings.backend_base_url else None,
        timeout=settings.backend_timeout,
        use_mock_data=settings.use_mock_data,
        token=settings.backend_token,
    )


@lru_cache(maxsize=1)
def get_query_cache_cached() -> QueryCache:
    return QueryCache(ttl_seconds=get_settings().query_cache_ttl_seconds)


@lru_cache(maxsize=1)
def get_editor_registry_cached() -> InvoiceEditorRegistry:
    settings = get_settings()
    client = get_backend_client_cached()
    cache = get_query_cache_cached()
    invoices = InvoiceService(
        client,
        cache=cache,
        currency=settings.currency,
        tz_name=settings.display_timezone,
    )
    return InvoiceEditorRegistry(invoices, InventoryService(client, cache=cache))


@lru_cache(maxsize=1)
def get_notification_poller_cached() -> NotificationPoller:
    settings = get_settings()
    service = NotificationService(get_backend_client_cached(), cache=get_query_cache_cached())
    return NotificationPoller(
        service,
        interval_seconds=settings.notification_poll_seconds,
        enabled=settings.notification_poll_enabled,
    )


def reset_cached_dependencies() -> None:
    for cached in (
        get_backend_client_cached,
        get_query_cache_cached,
        get_editor_registry_cached,
        get_notification_poller_cached,
    ):
        cached.cache_clear()


def get_backend_client(settings: Settings = Depends(get_settings)) -> GarageBackendClient:
    return get_backend_client_cached()


def get_query_cache() -> QueryCache:
    return get_query_cache_cached()


def get_customer_service(
    client: GarageBackendClient = Depends(get_backend_client),
    cache: QueryCache = Depends(get_query_cache),
) -> CustomerService:
    return CustomerService(client, cache=cache)


def get_vehicle_service(
    client: GarageBackendClient = Depends(get_backend_client),
    cache: QueryCache = Depends(get_query_cache),
) -> VehicleService:
    return VehicleService(client, cache=cache)


def get_technician_service(
    client: GarageBackendClient = Depends(get_backend_client),
    cache: QueryCache = Depends(get_query_cache),
) -> TechnicianService:
    return TechnicianService(client, cache=cache)


def get_job_service(
    client: GarageBackendClient = Depends(get_backend_client),
    cache: QueryCache = Depends(get_query_cache),
    settings: Settings = Depends(get_settings),
) -> JobService:
    return JobService(client, cache=cache, currency=settings.currency, tz_name=settings.display_timezone)


def get_invoice_service(
    client: GarageBackendClient = Depends(get_backend_client),
    cache: QueryCache = Depends(get_query_cache),
    settings: Settings = Depends(get_settings),
) -> InvoiceService:
    return InvoiceService(client, cache=cache, currency=settings.currency, tz_name=settings.display_timezone)


def get_inventory_service(
    client: GarageBackendClient = Depends(get_backend_client),
    cache: QueryCache = Depends(get_query_cache),
) -> InventoryService:
    return InventoryService(client, cache=cache)


def get_supplier_service(
    client: GarageBackendClient = Depends(get_backend_client),
    cache: QueryCache = Depends(get_query_cache),
) -> SupplierService:
    return SupplierService(client, cache=cache)


def get_expense_service(
    client: GarageBackendClient = Depends(get_backend_client),
    cache: QueryCache = Depends(get_query_cache),
) -> ExpenseService:
    return ExpenseService(client, cache=cache)


def get_report_service(
    client: GarageBackendClient = Depends(get_backend_client),
    cache: QueryCache = Depends(get_query_cache),
) -> ReportService:
    return ReportService(client, cache=cache)


def get_notification_service(
    client: GarageBackendClient = Depends(get_backend_client),
    cache: QueryCache = Depends(get_query_cache),
) -> NotificationService:
    return NotificationService(client, cache=cache)


def get_notification_poller() -> NotificationPoller:
    return get_notification_poller_cached()


def get_editor_registry() -> InvoiceEditorRegistry:
    return get_editor_registry_cached()
