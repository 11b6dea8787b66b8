"""Service package public API definitions.

The backend client imports ``garage_admin.services.exceptions`` and the mock
backend lives in this package too, so importing every service eagerly here
would create an import cycle at start up. Services are imported lazily on
first access instead.
"""

from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING, Any

__all__ = [
    "CustomerService",
    "ExpenseService",
    "InventoryService",
    "InvoiceEditorRegistry",
    "InvoiceService",
    "JobService",
    "NotificationPoller",
    "NotificationService",
    "ReportService",
    "SupplierService",
    "TechnicianService",
    "VehicleService",
]

_SERVICE_MODULES = {
    "CustomerService": "customers",
    "ExpenseService": "expenses",
    "InventoryService": "inventory",
    "InvoiceEditorRegistry": "invoice_editor",
    "InvoiceService": "invoices",
    "JobService": "jobs",
    "NotificationPoller": "notifications",
    "NotificationService": "notifications",
    "ReportService": "reports",
    "SupplierService": "suppliers",
    "TechnicianService": "technicians",
    "VehicleService": "vehicles",
}


def __getattr__(name: str) -> Any:
    if name not in _SERVICE_MODULES:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

    module = import_module(f".{_SERVICE_MODULES[name]}", __name__)
    attr = getattr(module, name)
    globals()[name] = attr
    return attr


if TYPE_CHECKING:  # pragma: no cover - import for static analysis only
    from .customers import CustomerService as CustomerService
    from .expenses import ExpenseService as ExpenseService
    from .inventory import InventoryService as InventoryService
    from .invoice_editor import InvoiceEditorRegistry as InvoiceEditorRegistry
    from .invoices import InvoiceService as InvoiceService
    from .jobs import JobService as JobService
    from .notifications import NotificationPoller as NotificationPoller
    from .notifications import NotificationService as NotificationService
    from .reports import ReportService as ReportService
    from .suppliers import SupplierService as SupplierService
    from .technicians import TechnicianService as TechnicianService
    from .vehicles import VehicleService as VehicleService
