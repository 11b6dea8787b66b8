"""In-memory garage backend served through ``httpx.MockTransport``.

Mirrors the REST contract of the garage backend closely enough that every
service runs unchanged in mock mode: same paths, same ``{"error": ...}``
bodies, same status codes, same side effects on stock and notifications.
"""

from __future__ import annotations

import calendar
import copy
import itertools
import json
import logging
import re
from datetime import date, datetime, timedelta, timezone
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Pattern, Tuple

import httpx

logger = logging.getLogger(__name__)

Row = Dict[str, Any]

INVENTORY_TYPES = ("consumable", "non-consumable", "bulk")
JOB_STATUSES = ("Pending", "In Progress", "Completed", "Cancelled")
INVOICE_STATUSES = ("unpaid", "partial", "paid")
EXPENSE_STATUSES = ("pending", "paid", "unpaid")
PURCHASE_STATUSES = ("paid", "unpaid")
TECHNICIAN_STATUSES = ("Active", "On Leave", "Inactive")
REPORT_TYPES = ("expenses", "jobs", "inventory", "revenue")

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _utc_now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


def _days_ago(days: int) -> str:
    moment = datetime.now(timezone.utc) - timedelta(days=days)
    return moment.strftime("%Y-%m-%d %H:%M:%S")


def _round2(value: float) -> float:
    return round(float(value), 2)


def _format_quantity(quantity: float) -> str:
    return str(int(quantity)) if float(quantity).is_integer() else f"{quantity:.2f}"


class MockBackendError(Exception):
    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def _number(value: Any, field: str) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        raise MockBackendError(400, f"{field} must be a valid number")


def _int_param(value: Any) -> Optional[int]:
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class _Table:
    def __init__(self, name: str) -> None:
        self.name = name
        self._counter = itertools.count(1)
        self.rows: Dict[int, Row] = {}

    def insert(self, row: Row) -> Row:
        row_id = next(self._counter)
        row["id"] = row_id
        self.rows[row_id] = row
        return row

    def get(self, row_id: Any) -> Optional[Row]:
        try:
            return self.rows.get(int(row_id))
        except (TypeError, ValueError):
            return None

    def require(self, row_id: Any, message: str) -> Row:
        row = self.get(row_id)
        if row is None:
            raise MockBackendError(404, message)
        return row

    def delete(self, row_id: Any) -> bool:
        try:
            return self.rows.pop(int(row_id), None) is not None
        except (TypeError, ValueError):
            return False

    def all(self) -> List[Row]:
        return list(self.rows.values())


Handler = Callable[..., httpx.Response]


def _json(payload: Any, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, json=payload)


def _binary(content: bytes, media_type: str, filename: str) -> httpx.Response:
    return httpx.Response(
        200,
        content=content,
        headers={
            "Content-Type": media_type,
            "Content-Disposition": f'attachment; filename="{filename}"',
        },
    )


class MockGarageBackend:
    """Route table plus in-memory tables standing in for the garage backend."""

    def __init__(self, *, seed: bool = True) -> None:
        self.customers = _Table("customers")
        self.vehicles = _Table("vehicles")
        self.technicians = _Table("technicians")
        self.jobs = _Table("jobs")
        self.inventory = _Table("inventory")
        self.invoices = _Table("invoices")
        self.suppliers = _Table("suppliers")
        self.purchases = _Table("purchases")
        self.expenses = _Table("expenses")
        self.notifications = _Table("notifications")
        self.sent_emails: List[Row] = []
        self.requests: List[Tuple[str, str, Any]] = []
        self._line_ids = itertools.count(1)
        self._routes: List[Tuple[str, Pattern[str], Handler]] = self._build_routes()
        if seed:
            self._seed()

    # ------------------------------------------------------------------ routing

    def _build_routes(self) -> List[Tuple[str, Pattern[str], Handler]]:
        table = [
            ("GET", r"/customers", self._list_customers),
            ("POST", r"/customers", self._create_customer),
            ("GET", r"/customers/(?P<row_id>\d+)", self._get_customer),
            ("PUT", r"/customers/(?P<row_id>\d+)", self._update_customer),
            ("DELETE", r"/customers/(?P<row_id>\d+)", self._delete_customer),
            ("GET", r"/vehicles", self._list_vehicles),
            ("POST", r"/vehicles", self._create_vehicle),
            ("GET", r"/vehicles/(?P<row_id>\d+)", self._get_vehicle),
            ("PUT", r"/vehicles/(?P<row_id>\d+)", self._update_vehicle),
            ("DELETE", r"/vehicles/(?P<row_id>\d+)", self._delete_vehicle),
            ("GET", r"/technicians", self._list_technicians),
            ("POST", r"/technicians", self._create_technician),
            ("GET", r"/technicians/(?P<row_id>\d+)", self._get_technician),
            ("PUT", r"/technicians/(?P<row_id>\d+)", self._update_technician),
            ("DELETE", r"/technicians/(?P<row_id>\d+)", self._delete_technician),
            ("GET", r"/technicians/(?P<row_id>\d+)/jobs", self._technician_jobs),
            ("GET", r"/jobs", self._list_jobs),
            ("POST", r"/jobs", self._create_job),
            ("GET", r"/jobs/(?P<row_id>\d+)", self._get_job),
            ("PUT", r"/jobs/(?P<row_id>\d+)", self._update_job),
            ("DELETE", r"/jobs/(?P<row_id>\d+)", self._delete_job),
            ("GET", r"/jobs/(?P<row_id>\d+)/invoice", self._job_invoice),
            ("GET", r"/invoices", self._list_invoices),
            ("POST", r"/invoices", self._create_invoice),
            ("GET", r"/invoices/(?P<row_id>\d+)", self._get_invoice),
            ("PUT", r"/invoices/(?P<row_id>\d+)", self._update_invoice),
            ("DELETE", r"/invoices/(?P<row_id>\d+)", self._delete_invoice),
            ("GET", r"/invoices/(?P<row_id>\d+)/pdf", self._invoice_pdf),
            ("POST", r"/invoices/(?P<row_id>\d+)/email", self._email_invoice),
            ("GET", r"/inventory", self._list_inventory),
            ("POST", r"/inventory", self._create_inventory),
            ("GET", r"/inventory/(?P<row_id>\d+)", self._get_inventory),
            ("PUT", r"/inventory/(?P<row_id>\d+)", self._update_inventory),
            ("DELETE", r"/inventory/(?P<row_id>\d+)", self._delete_inventory),
            ("POST", r"/inventory/(?P<row_id>\d+)/deduct", self._deduct_inventory),
            # purchase paths are matched before /suppliers/{id}
            ("GET", r"/suppliers/purchases", self._list_purchases),
            ("PUT", r"/suppliers/purchases/(?P<row_id>\d+)", self._update_purchase),
            ("DELETE", r"/suppliers/purchases/(?P<row_id>\d+)", self._delete_purchase),
            ("GET", r"/suppliers", self._list_suppliers),
            ("POST", r"/suppliers", self._create_supplier),
            ("GET", r"/suppliers/(?P<row_id>\d+)", self._get_supplier),
            ("PUT", r"/suppliers/(?P<row_id>\d+)", self._update_supplier),
            ("DELETE", r"/suppliers/(?P<row_id>\d+)", self._delete_supplier),
            ("POST", r"/suppliers/(?P<row_id>\d+)/purchase", self._record_purchase),
            ("GET", r"/expenses", self._list_expenses),
            ("POST", r"/expenses", self._create_expense),
            ("PUT", r"/expenses/(?P<row_id>\d+)", self._update_expense),
            ("DELETE", r"/expenses/(?P<row_id>\d+)", self._delete_expense),
            ("GET", r"/notifications", self._list_notifications),
            ("PATCH", r"/notifications/mark-all-read", self._mark_all_read),
            ("PATCH", r"/notifications/(?P<row_id>\d+)/read", self._mark_read),
            ("GET", r"/reports/dashboard", self._dashboard),
            ("GET", r"/reports/(?P<report>expenses|jobs|inventory|revenue)", self._report),
            (
                "GET",
                r"/reports/(?P<report>expenses|jobs|inventory|revenue)/(?P<fmt>pdf|excel)",
                self._report_export,
            ),
        ]
        return [(method, re.compile(pattern), handler) for method, pattern, handler in table]

    def handle(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path.rstrip("/") or "/"
        body: Any = None
        if request.content:
            try:
                body = json.loads(request.content)
            except ValueError:
                return _json({"error": "Malformed JSON body"}, 400)
        self.requests.append((request.method, path, body))

        for method, pattern, handler in self._routes:
            if method != request.method:
                continue
            match = pattern.fullmatch(path)
            if not match:
                continue
            try:
                return handler(params=request.url.params, body=body or {}, **match.groupdict())
            except MockBackendError as exc:
                logger.debug("Mock backend rejected %s %s: %s", request.method, path, exc.message)
                return _json({"error": exc.message}, exc.status_code)
        return _json({"error": f"Cannot {request.method} {path}"}, 404)

    # ------------------------------------------------------------------ helpers

    def _notify(self, title: str, message: str, kind: Optional[str]) -> None:
        if not title.strip() or not message.strip():
            return
        self.notifications.insert(
            {
                "title": title.strip(),
                "message": message.strip(),
                "type": kind,
                "is_read": False,
                "created_at": _utc_now(),
            }
        )

    def _notify_low_stock(self, item_id: Any) -> None:
        item = self.inventory.get(item_id)
        if item is None:
            return
        reorder_level = float(item.get("reorder_level") or 0)
        quantity = float(item.get("quantity") or 0)
        if reorder_level <= 0 and quantity > 0:
            return
        if quantity > reorder_level:
            return
        identifier = f"Item #{item['id']}"
        for note in self.notifications.all():
            if note["type"] == "low-stock" and not note["is_read"] and note["message"].startswith(identifier):
                return
        self._notify(
            "Low stock alert",
            f"{identifier} {item['name']} is low on stock ({_format_quantity(quantity)} remaining).",
            "low-stock",
        )

    @staticmethod
    def _merge(row: Row, body: Mapping[str, Any], fields: Iterable[str]) -> None:
        for field in fields:
            if field in body and body[field] is not None:
                row[field] = body[field]

    def _next_invoice_no(self) -> str:
        prefix = f"INV-{datetime.now(timezone.utc):%Y%m%d}-"
        taken = [
            int(row["invoice_no"][len(prefix):])
            for row in self.invoices.all()
            if str(row.get("invoice_no", "")).startswith(prefix)
        ]
        return f"{prefix}{(max(taken) + 1) if taken else 1:04d}"

    # ------------------------------------------------------------------ customers

    def _list_customers(self, params, body) -> httpx.Response:
        rows = sorted(self.customers.all(), key=lambda row: row["id"], reverse=True)
        return _json(copy.deepcopy(rows))

    def _create_customer(self, params, body) -> httpx.Response:
        name = str(body.get("name") or "").strip()
        if not name:
            raise MockBackendError(400, "Customer name is required")
        row = self.customers.insert(
            {
                "name": name,
                "phone": body.get("phone"),
                "email": body.get("email"),
                "address": body.get("address"),
                "created_at": _utc_now(),
            }
        )
        return _json(dict(row), 201)

    def _get_customer(self, params, body, row_id) -> httpx.Response:
        return _json(dict(self.customers.require(row_id, "Customer not found")))

    def _update_customer(self, params, body, row_id) -> httpx.Response:
        row = self.customers.require(row_id, "Customer not found")
        self._merge(row, body, ("name", "phone", "email", "address"))
        return _json(dict(row))

    def _delete_customer(self, params, body, row_id) -> httpx.Response:
        self.customers.require(row_id, "Customer not found")
        for vehicle in self.vehicles.all():
            if vehicle["customer_id"] == int(row_id):
                self.vehicles.delete(vehicle["id"])
        self.customers.delete(row_id)
        return _json({"message": "Customer deleted"})

    # ------------------------------------------------------------------ vehicles

    def _list_vehicles(self, params, body) -> httpx.Response:
        customer_id = _int_param(params.get("customer_id") or params.get("customerId"))
        rows = [
            row
            for row in self.vehicles.all()
            if customer_id is None or row["customer_id"] == customer_id
        ]
        return _json(copy.deepcopy(rows))

    def _insert_vehicle(self, customer_id: int, data: Mapping[str, Any]) -> Row:
        make = str(data.get("make") or "").strip()
        model = str(data.get("model") or "").strip()
        if not make or not model:
            raise MockBackendError(400, "Vehicle make and model are required")
        return self.vehicles.insert(
            {
                "customer_id": customer_id,
                "make": make,
                "model": model,
                "year": data.get("year"),
                "license_plate": data.get("license_plate"),
                "archived": False,
            }
        )

    def _create_vehicle(self, params, body) -> httpx.Response:
        customer = self.customers.require(body.get("customer_id"), "Customer not found")
        row = self._insert_vehicle(customer["id"], body)
        return _json(dict(row), 201)

    def _get_vehicle(self, params, body, row_id) -> httpx.Response:
        return _json(dict(self.vehicles.require(row_id, "Vehicle not found")))

    def _update_vehicle(self, params, body, row_id) -> httpx.Response:
        row = self.vehicles.require(row_id, "Vehicle not found")
        if body.get("customer_id") is not None:
            self.customers.require(body["customer_id"], "Customer not found")
        self._merge(row, body, ("customer_id", "make", "model", "year", "license_plate"))
        return _json(dict(row))

    def _delete_vehicle(self, params, body, row_id) -> httpx.Response:
        self.vehicles.require(row_id, "Vehicle not found")
        self.vehicles.delete(row_id)
        return _json({"message": "Vehicle deleted"})

    # ------------------------------------------------------------------ technicians

    def _list_technicians(self, params, body) -> httpx.Response:
        rows = sorted(self.technicians.all(), key=lambda row: row["name"].lower())
        return _json(copy.deepcopy(rows))

    def _create_technician(self, params, body) -> httpx.Response:
        name = str(body.get("name") or "").strip()
        if not name:
            raise MockBackendError(400, "Technician name is required")
        status = body.get("status") or "Active"
        if status not in TECHNICIAN_STATUSES:
            raise MockBackendError(400, "Invalid technician status")
        row = self.technicians.insert(
            {"name": name, "phone": body.get("phone"), "status": status, "created_at": _utc_now()}
        )
        return _json(dict(row), 201)

    def _get_technician(self, params, body, row_id) -> httpx.Response:
        return _json(dict(self.technicians.require(row_id, "Technician not found")))

    def _update_technician(self, params, body, row_id) -> httpx.Response:
        row = self.technicians.require(row_id, "Technician not found")
        if body.get("status") is not None and body["status"] not in TECHNICIAN_STATUSES:
            raise MockBackendError(400, "Invalid technician status")
        self._merge(row, body, ("name", "phone", "status"))
        return _json(dict(row))

    def _delete_technician(self, params, body, row_id) -> httpx.Response:
        self.technicians.require(row_id, "Technician not found")
        self.technicians.delete(row_id)
        for job in self.jobs.all():
            job["technician_ids"] = [tech for tech in job["technician_ids"] if tech != int(row_id)]
        return _json({"message": "Technician deleted"})

    def _technician_jobs(self, params, body, row_id) -> httpx.Response:
        technician = self.technicians.require(row_id, "Technician not found")
        rows = []
        for job in sorted(self.jobs.all(), key=lambda row: row["id"], reverse=True):
            if technician["id"] not in job["technician_ids"]:
                continue
            customer = self.customers.get(job["customer_id"])
            rows.append(
                {
                    "id": job["id"],
                    "description": job["description"],
                    "job_status": job["job_status"],
                    "customer_name": customer["name"] if customer else None,
                    "created_at": job["created_at"],
                }
            )
        return _json(rows)

    # ------------------------------------------------------------------ jobs

    def _job_view(self, job: Row) -> Row:
        view = copy.deepcopy(job)
        technician_ids = view.pop("technician_ids")
        customer = self.customers.get(job["customer_id"])
        vehicle = self.vehicles.get(job.get("vehicle_id"))
        view["customer_name"] = customer["name"] if customer else None
        view["vehicle_make"] = vehicle["make"] if vehicle else None
        view["vehicle_model"] = vehicle["model"] if vehicle else None
        view["vehicle_year"] = vehicle["year"] if vehicle else None
        view["vehicle_license_plate"] = vehicle["license_plate"] if vehicle else None
        technicians = [self.technicians.get(tech_id) for tech_id in technician_ids]
        view["technicians"] = sorted(
            (
                {"id": tech["id"], "name": tech["name"], "status": tech["status"]}
                for tech in technicians
                if tech is not None
            ),
            key=lambda tech: tech["name"].lower(),
        )
        return view

    def _prepare_job_items(self, items: Any) -> List[Row]:
        if not isinstance(items, list):
            return []
        prepared: List[Row] = []
        for raw in items:
            inventory_item = None
            if raw.get("inventory_item_id") is not None:
                inventory_item = self.inventory.require(
                    raw["inventory_item_id"],
                    f"Inventory item {raw['inventory_item_id']} not found",
                )
            quantity = _number(raw.get("quantity"), "quantity")
            quantity = 1.0 if quantity is None else quantity
            unit_price = _number(raw.get("unit_price"), "unit_price")
            if unit_price is None:
                unit_price = float(inventory_item.get("unit_cost") or 0) if inventory_item else 0.0
            name = raw.get("item_name") or (inventory_item["name"] if inventory_item else None)
            if not name:
                raise MockBackendError(400, "item_name is required for job items")
            prepared.append(
                {
                    "id": next(self._line_ids),
                    "inventory_item_id": inventory_item["id"] if inventory_item else None,
                    "item_name": name,
                    "item_type": raw.get("item_type") or (inventory_item["type"] if inventory_item else "consumable"),
                    "quantity": quantity,
                    "unit_price": unit_price,
                    "line_total": _round2(quantity * unit_price),
                }
            )
        return prepared

    def _require_technicians(self, ids: Any) -> List[int]:
        if ids is None:
            return []
        if not isinstance(ids, list):
            ids = [ids]
        resolved = []
        for tech_id in ids:
            tech = self.technicians.require(tech_id, f"Technician {tech_id} not found")
            if tech["id"] not in resolved:
                resolved.append(tech["id"])
        return resolved

    def _list_jobs(self, params, body) -> httpx.Response:
        status = params.get("status")
        start = params.get("startDate")
        end = params.get("endDate")
        customer_id = _int_param(params.get("customerId") or params.get("customer_id"))
        rows = []
        for job in sorted(self.jobs.all(), key=lambda row: (row["created_at"], row["id"]), reverse=True):
            if status in JOB_STATUSES and job["job_status"] != status:
                continue
            if start and job["created_at"][:10] < start:
                continue
            if end and job["created_at"][:10] > end:
                continue
            if customer_id is not None and job["customer_id"] != customer_id:
                continue
            rows.append(self._job_view(job))
        return _json(rows)

    def _create_job(self, params, body) -> httpx.Response:
        description = str(body.get("description") or "").strip()
        if body.get("customer_id") is None or not description:
            raise MockBackendError(400, "customer_id and description are required")
        customer = self.customers.require(body["customer_id"], "Customer not found")

        status = body.get("job_status") or "Pending"
        if status not in JOB_STATUSES:
            raise MockBackendError(400, "Invalid job status")

        technician_ids = self._require_technicians(body.get("technician_ids"))
        items = self._prepare_job_items(body.get("items"))
        initial_amount = _number(body.get("initial_amount"), "initial_amount")
        advance_amount = _number(body.get("advance_amount"), "advance_amount")
        mileage = _number(body.get("mileage"), "mileage")

        if body.get("vehicle_id") is not None:
            vehicle = self.vehicles.require(body["vehicle_id"], "Vehicle not found")
        elif isinstance(body.get("vehicle"), dict):
            vehicle = self._insert_vehicle(customer["id"], body["vehicle"])
        else:
            raise MockBackendError(400, "vehicle_id or vehicle details are required")

        now = _utc_now()
        job = self.jobs.insert(
            {
                "customer_id": customer["id"],
                "vehicle_id": vehicle["id"],
                "description": description,
                "notes": body.get("notes"),
                "category": body.get("category"),
                "initial_amount": initial_amount,
                "advance_amount": advance_amount,
                "mileage": mileage,
                "job_status": status,
                "invoice_created": False,
                "technician_ids": technician_ids,
                "items": items,
                "created_at": now,
                "updated_at": now,
                "status_changed_at": now,
            }
        )
        return _json(self._job_view(job), 201)

    def _get_job(self, params, body, row_id) -> httpx.Response:
        return _json(self._job_view(self.jobs.require(row_id, "Job not found")))

    def _update_job(self, params, body, row_id) -> httpx.Response:
        job = self.jobs.require(row_id, "Job not found")

        next_status = body.get("job_status") or job["job_status"]
        if next_status not in JOB_STATUSES:
            raise MockBackendError(400, "Invalid job status")
        if "description" in body and not str(body.get("description") or "").strip():
            raise MockBackendError(400, "Description cannot be empty")

        numbers = {}
        for field in ("initial_amount", "advance_amount", "mileage"):
            if field in body:
                numbers[field] = _number(body[field], field)
        technician_ids = (
            self._require_technicians(body["technician_ids"]) if "technician_ids" in body else None
        )
        items = self._prepare_job_items(body["items"]) if isinstance(body.get("items"), list) else None

        status_changed = next_status != job["job_status"]
        job.update(numbers)
        for field in ("description", "notes", "category"):
            if field in body:
                job[field] = body[field]
        if technician_ids is not None:
            job["technician_ids"] = technician_ids
        if items is not None:
            job["items"] = items
        job["job_status"] = next_status
        job["updated_at"] = _utc_now()
        if status_changed:
            job["status_changed_at"] = job["updated_at"]

        created_invoice = None
        if (
            body.get("create_invoice")
            and next_status == "Completed"
            and not job["invoice_created"]
            and job.get("initial_amount") is not None
        ):
            created_invoice = self._invoice_for_job(job)

        if status_changed:
            self._notify("Job status updated", f"Job #{job['id']} marked as {next_status}.", "job-status")

        response = self._job_view(job)
        if created_invoice is not None:
            response["invoice"] = self._invoice_detail(created_invoice)
        return _json(response)

    def _delete_job(self, params, body, row_id) -> httpx.Response:
        self.jobs.require(row_id, "Job not found")
        self.jobs.delete(row_id)
        return _json({"message": "Job deleted"})

    def _job_invoice(self, params, body, row_id) -> httpx.Response:
        self.jobs.require(row_id, "Job not found")
        for invoice in self.invoices.all():
            if invoice["job_id"] == int(row_id):
                return _json(self._invoice_detail(invoice))
        raise MockBackendError(404, "No invoice for this job")

    # ------------------------------------------------------------------ invoices

    def _invoice_detail(self, invoice: Row) -> Row:
        detail = copy.deepcopy(invoice)
        job = self.jobs.get(invoice["job_id"])
        customer = self.customers.get(job["customer_id"]) if job else None
        detail.update(
            {
                "customer_id": customer["id"] if customer else None,
                "customer_name": customer["name"] if customer else None,
                "customer_email": customer["email"] if customer else None,
                "customer_phone": customer["phone"] if customer else None,
                "customer_address": customer["address"] if customer else None,
                "job_description": job["description"] if job else None,
                "job_status": job["job_status"] if job else None,
                "initial_amount": job["initial_amount"] if job else None,
                "advance_amount": job["advance_amount"] if job else None,
                "mileage": job["mileage"] if job else None,
            }
        )
        return detail

    def _invoice_lines(self, items: Any) -> List[Row]:
        if not isinstance(items, list):
            return []
        lines = []
        for raw in items:
            quantity = _number(raw.get("quantity"), "quantity")
            quantity = 1.0 if quantity is None else quantity
            unit_price = _number(raw.get("unit_price"), "unit_price") or 0.0
            lines.append(
                {
                    "id": next(self._line_ids),
                    "inventory_item_id": raw.get("inventory_item_id"),
                    "item_name": raw.get("item_name") or "Item",
                    "type": (raw.get("type") or raw.get("item_type") or "consumable").lower(),
                    "quantity": quantity,
                    "unit_price": unit_price,
                    "line_total": _round2(quantity * unit_price),
                }
            )
        return lines

    def _extras(self, entries: Any, kind: str) -> List[Row]:
        if not isinstance(entries, list):
            return []
        extras = []
        for raw in entries:
            label = str(raw.get("label") or "").strip()
            amount = _number(raw.get("amount"), "amount") or 0.0
            if not label:
                raise MockBackendError(400, f"Each {kind} requires a label")
            if amount < 0:
                raise MockBackendError(400, f"{kind.capitalize()} amounts cannot be negative")
            extras.append({"id": next(self._line_ids), "label": label, "type": kind, "amount": amount})
        return extras

    def _consume_stock(self, lines: List[Row], invoice_no: str) -> None:
        usage: Dict[int, float] = {}
        for line in lines:
            if line["inventory_item_id"] and line["type"] == "consumable" and line["quantity"] > 0:
                key = int(line["inventory_item_id"])
                usage[key] = usage.get(key, 0.0) + line["quantity"]
        for item_id, planned in usage.items():
            item = self.inventory.require(item_id, f"Inventory item {item_id} not found")
            if planned > item["quantity"]:
                raise MockBackendError(
                    400,
                    f"Insufficient stock for {item['name']}. "
                    f"Available {_format_quantity(item['quantity'])}, needed {_format_quantity(planned)}.",
                )
        if not usage:
            return
        movements = []
        for item_id, planned in usage.items():
            item = self.inventory.rows[item_id]
            item["quantity"] = item["quantity"] - planned
            item["updated_at"] = _utc_now()
            movements.append(f"{_format_quantity(planned)} x {item['name']}")
            self._notify_low_stock(item_id)
        self._notify("Inventory used", f"{', '.join(movements)} deducted for invoice {invoice_no}.", "stock-usage")

    def _restock(self, invoice: Row) -> List[str]:
        restocked = []
        for line in invoice["items"]:
            item = self.inventory.get(line.get("inventory_item_id"))
            if item is None or line["type"] != "consumable" or line["quantity"] <= 0:
                continue
            item["quantity"] = item["quantity"] + line["quantity"]
            item["updated_at"] = _utc_now()
            restocked.append(f"{_format_quantity(line['quantity'])} x {item['name']}")
        return restocked

    @staticmethod
    def _recalculate(invoice: Row) -> None:
        items_total = sum(line["line_total"] for line in invoice["items"])
        charges = sum(entry["amount"] for entry in invoice["charges"])
        reductions = sum(entry["amount"] for entry in invoice["reductions"])
        invoice["items_total"] = _round2(items_total)
        invoice["total_charges"] = _round2(charges)
        invoice["total_deductions"] = _round2(reductions)
        invoice["final_total"] = _round2(items_total + charges - reductions)

    def _insert_invoice(
        self,
        job: Row,
        *,
        lines: List[Row],
        charges: List[Row],
        reductions: List[Row],
        payment_status: str = "unpaid",
        payment_method: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Row:
        advance = float(job.get("advance_amount") or 0)
        has_advance = any(entry["label"].strip().lower() == "advance" for entry in reductions)
        if advance > 0 and not has_advance:
            reductions.append(
                {"id": next(self._line_ids), "label": "Advance", "type": "deduction", "amount": advance}
            )

        invoice_no = self._next_invoice_no()
        self._consume_stock(lines, invoice_no)
        invoice = self.invoices.insert(
            {
                "invoice_no": invoice_no,
                "job_id": job["id"],
                "invoice_date": _utc_now(),
                "payment_status": payment_status,
                "payment_method": payment_method,
                "notes": notes,
                "items": lines,
                "charges": charges,
                "reductions": reductions,
            }
        )
        self._recalculate(invoice)
        job["invoice_created"] = True
        return invoice

    def _invoice_for_job(self, job: Row) -> Row:
        source = job["items"] or [
            {
                "item_name": job["description"] or "Service",
                "type": "non-consumable",
                "quantity": 1,
                "unit_price": job["initial_amount"],
            }
        ]
        lines = self._invoice_lines(
            [
                {
                    "inventory_item_id": item.get("inventory_item_id"),
                    "item_name": item["item_name"],
                    "type": item.get("item_type") or item.get("type"),
                    "quantity": item["quantity"],
                    "unit_price": item["unit_price"],
                }
                for item in source
            ]
        )
        return self._insert_invoice(job, lines=lines, charges=[], reductions=[], notes=job.get("notes"))

    def _list_invoices(self, params, body) -> httpx.Response:
        start = params.get("startDate")
        end = params.get("endDate")
        job_id = _int_param(params.get("job_id") or params.get("jobId"))
        rows = []
        for invoice in sorted(self.invoices.all(), key=lambda row: (row["invoice_date"], row["id"]), reverse=True):
            if start and invoice["invoice_date"][:10] < start:
                continue
            if end and invoice["invoice_date"][:10] > end:
                continue
            if job_id is not None and invoice["job_id"] != job_id:
                continue
            rows.append(self._invoice_detail(invoice))
        return _json(rows)

    def _create_invoice(self, params, body) -> httpx.Response:
        if body.get("job_id") is None:
            raise MockBackendError(400, "job_id is required")
        payment_status = body.get("payment_status") or "unpaid"
        if payment_status not in INVOICE_STATUSES:
            raise MockBackendError(400, "Invalid payment status value")
        job = self.jobs.require(body["job_id"], "Job not found")
        if job["job_status"] != "Completed":
            raise MockBackendError(400, "Invoices can only be created for completed jobs")
        if any(invoice["job_id"] == job["id"] for invoice in self.invoices.all()):
            raise MockBackendError(409, "An invoice already exists for this job")

        if isinstance(body.get("items"), list):
            lines = self._invoice_lines(body["items"])
            invoice = self._insert_invoice(
                job,
                lines=lines,
                charges=self._extras(body.get("charges"), "charge"),
                reductions=self._extras(body.get("reductions"), "deduction"),
                payment_status=payment_status,
                payment_method=body.get("payment_method"),
                notes=body.get("notes"),
            )
        else:
            invoice = self._invoice_for_job(job)
        return _json(self._invoice_detail(invoice), 201)

    def _get_invoice(self, params, body, row_id) -> httpx.Response:
        return _json(self._invoice_detail(self.invoices.require(row_id, "Invoice not found")))

    def _update_invoice(self, params, body, row_id) -> httpx.Response:
        payment_status = body.get("payment_status")
        if payment_status is not None and payment_status not in INVOICE_STATUSES:
            raise MockBackendError(400, "Invalid payment status value")
        invoice = self.invoices.require(row_id, "Invoice not found")
        previous_status = invoice["payment_status"]

        charges = self._extras(body["charges"], "charge") if isinstance(body.get("charges"), list) else None
        reductions = (
            self._extras(body["reductions"], "deduction") if isinstance(body.get("reductions"), list) else None
        )
        if isinstance(body.get("items"), list):
            lines = self._invoice_lines(body["items"])
            self._restock(invoice)
            try:
                self._consume_stock(lines, invoice["invoice_no"])
            except MockBackendError:
                self._consume_stock(invoice["items"], invoice["invoice_no"])
                raise
            invoice["items"] = lines
        if charges is not None:
            invoice["charges"] = charges
        if reductions is not None:
            invoice["reductions"] = reductions
        self._merge(invoice, body, ("payment_status", "payment_method", "notes"))
        self._recalculate(invoice)

        if invoice["payment_status"] == "paid" and previous_status != "paid":
            self._notify("Invoice paid", f"Invoice {invoice['invoice_no']} marked as paid.", "invoice-paid")
        return _json(self._invoice_detail(invoice))

    def _delete_invoice(self, params, body, row_id) -> httpx.Response:
        invoice = self.invoices.require(row_id, "Invoice not found")
        restocked = self._restock(invoice)
        job = self.jobs.get(invoice["job_id"])
        if job is not None:
            job["invoice_created"] = False
        self.invoices.delete(row_id)
        if restocked:
            self._notify(
                "Inventory restocked",
                f"{', '.join(restocked)} returned to stock after deleting invoice {invoice['invoice_no']}.",
                "stock-restock",
            )
        return _json({"message": "Invoice deleted"})

    def _invoice_pdf(self, params, body, row_id) -> httpx.Response:
        invoice = self.invoices.require(row_id, "Invoice not found")
        content = (
            f"%PDF-1.4\n% Invoice {invoice['invoice_no']} total {invoice['final_total']:.2f}\n%%EOF\n"
        ).encode("utf-8")
        return _binary(content, "application/pdf", f"{invoice['invoice_no']}.pdf")

    def _email_invoice(self, params, body, row_id) -> httpx.Response:
        invoice = self.invoices.require(row_id, "Invoice not found")
        recipient = str(body.get("to") or "").strip()
        if not recipient:
            raise MockBackendError(400, "Recipient email is required")
        self.sent_emails.append(
            {
                "invoice_id": invoice["id"],
                "to": recipient,
                "subject": body.get("subject") or f"Invoice {invoice['invoice_no']}",
                "message": body.get("message"),
            }
        )
        return _json({"message": "Invoice emailed successfully"})

    # ------------------------------------------------------------------ inventory

    def _list_inventory(self, params, body) -> httpx.Response:
        rows = sorted(self.inventory.all(), key=lambda row: row["name"].lower())
        return _json(copy.deepcopy(rows))

    def _create_inventory(self, params, body) -> httpx.Response:
        name = str(body.get("name") or "").strip()
        item_type = body.get("type")
        if not name or not item_type:
            raise MockBackendError(400, "name and type are required")
        if item_type not in INVENTORY_TYPES:
            raise MockBackendError(400, "Invalid inventory type")
        now = _utc_now()
        row = self.inventory.insert(
            {
                "name": name,
                "description": body.get("description"),
                "type": item_type,
                "unit": body.get("unit"),
                "quantity": _number(body.get("quantity"), "quantity") or 0.0,
                "unit_cost": _number(body.get("unit_cost"), "unit_cost"),
                "reorder_level": _number(body.get("reorder_level"), "reorder_level"),
                "created_at": now,
                "updated_at": now,
            }
        )
        self._notify_low_stock(row["id"])
        return _json(dict(row), 201)

    def _get_inventory(self, params, body, row_id) -> httpx.Response:
        return _json(dict(self.inventory.require(row_id, "Inventory item not found")))

    def _update_inventory(self, params, body, row_id) -> httpx.Response:
        row = self.inventory.require(row_id, "Inventory item not found")
        if body.get("type") is not None and body["type"] not in INVENTORY_TYPES:
            raise MockBackendError(400, "Invalid inventory type")
        updates = dict(body)
        for field in ("quantity", "unit_cost", "reorder_level"):
            if field in updates:
                updates[field] = _number(updates[field], field)
        self._merge(row, updates, ("name", "description", "type", "unit", "quantity", "unit_cost", "reorder_level"))
        row["updated_at"] = _utc_now()
        self._notify_low_stock(row["id"])
        return _json(dict(row))

    def _delete_inventory(self, params, body, row_id) -> httpx.Response:
        self.inventory.require(row_id, "Inventory item not found")
        self.inventory.delete(row_id)
        return _json({"message": "Inventory item deleted"})

    def _deduct_inventory(self, params, body, row_id) -> httpx.Response:
        quantity = _number(body.get("quantity"), "quantity")
        if quantity is None or quantity <= 0:
            raise MockBackendError(400, "Deduction quantity must be greater than zero")
        item = self.inventory.require(row_id, "Inventory item not found")
        if item["type"] != "consumable":
            raise MockBackendError(400, "Only consumable items can be auto deducted")
        if quantity > item["quantity"]:
            raise MockBackendError(400, "Insufficient inventory quantity")
        item["quantity"] = item["quantity"] - quantity
        item["updated_at"] = _utc_now()
        self._notify_low_stock(item["id"])
        return _json(dict(item))

    # ------------------------------------------------------------------ suppliers

    def _list_suppliers(self, params, body) -> httpx.Response:
        rows = sorted(self.suppliers.all(), key=lambda row: row["name"].lower())
        return _json(copy.deepcopy(rows))

    def _create_supplier(self, params, body) -> httpx.Response:
        name = str(body.get("name") or "").strip()
        if not name:
            raise MockBackendError(400, "Supplier name is required")
        row = self.suppliers.insert(
            {
                "name": name,
                "contact_name": body.get("contact_name"),
                "phone": body.get("phone"),
                "email": body.get("email"),
                "address": body.get("address"),
                "notes": body.get("notes"),
                "created_at": _utc_now(),
            }
        )
        return _json(dict(row), 201)

    def _get_supplier(self, params, body, row_id) -> httpx.Response:
        return _json(dict(self.suppliers.require(row_id, "Supplier not found")))

    def _update_supplier(self, params, body, row_id) -> httpx.Response:
        row = self.suppliers.require(row_id, "Supplier not found")
        self._merge(row, body, ("name", "contact_name", "phone", "email", "address", "notes"))
        return _json(dict(row))

    def _delete_supplier(self, params, body, row_id) -> httpx.Response:
        self.suppliers.require(row_id, "Supplier not found")
        self.suppliers.delete(row_id)
        return _json({"message": "Supplier deleted"})

    def _purchase_view(self, purchase: Row) -> Row:
        view = dict(purchase)
        supplier = self.suppliers.get(purchase["supplier_id"])
        view["supplier_name"] = supplier["name"] if supplier else None
        return view

    def _list_purchases(self, params, body) -> httpx.Response:
        supplier_id = _int_param(params.get("supplier_id") or params.get("supplierId"))
        rows = [
            self._purchase_view(row)
            for row in sorted(self.purchases.all(), key=lambda row: (row["purchase_date"], row["id"]), reverse=True)
            if supplier_id is None or row["supplier_id"] == supplier_id
        ]
        return _json(rows)

    def _record_purchase(self, params, body, row_id) -> httpx.Response:
        supplier = self.suppliers.require(row_id, "Supplier not found")
        item_name = str(body.get("item_name") or "").strip()
        if not item_name:
            raise MockBackendError(400, "item_name is required")
        payment_status = body.get("payment_status") or "unpaid"
        if payment_status not in PURCHASE_STATUSES:
            raise MockBackendError(400, "payment_status must be 'paid' or 'unpaid'")
        quantity = _number(body.get("quantity"), "quantity") or 0.0
        unit_cost = _number(body.get("unit_cost"), "unit_cost")

        item = None
        if body.get("inventory_item_id") is not None and quantity > 0:
            item = self.inventory.require(body["inventory_item_id"], "Linked inventory item not found")

        purchase = self.purchases.insert(
            {
                "supplier_id": supplier["id"],
                "inventory_item_id": body.get("inventory_item_id"),
                "item_name": item_name,
                "quantity": quantity,
                "unit_cost": unit_cost,
                "payment_status": payment_status,
                "payment_method": body.get("payment_method"),
                "purchase_date": body.get("purchase_date") or _utc_now(),
                "notes": body.get("notes"),
            }
        )
        if item is not None and item["type"] == "consumable":
            item["quantity"] = item["quantity"] + quantity
            if unit_cost is not None:
                item["unit_cost"] = unit_cost
            item["updated_at"] = _utc_now()
            self._notify(
                "Stock received",
                f"{_format_quantity(quantity)} x {item['name']} added from {supplier['name']}.",
                "stock-received",
            )
        return _json(self._purchase_view(purchase), 201)

    def _update_purchase(self, params, body, row_id) -> httpx.Response:
        purchase = self.purchases.require(row_id, "Purchase not found")
        if body.get("payment_status") is not None and body["payment_status"] not in PURCHASE_STATUSES:
            raise MockBackendError(400, "payment_status must be 'paid' or 'unpaid'")
        if body.get("supplier_id") is not None:
            self.suppliers.require(body["supplier_id"], "Supplier not found")
        updates = dict(body)
        for field in ("quantity", "unit_cost"):
            if field in updates:
                updates[field] = _number(updates[field], field)
        self._merge(
            purchase,
            updates,
            (
                "supplier_id",
                "inventory_item_id",
                "item_name",
                "quantity",
                "unit_cost",
                "payment_status",
                "payment_method",
                "purchase_date",
                "notes",
            ),
        )
        return _json(self._purchase_view(purchase))

    def _delete_purchase(self, params, body, row_id) -> httpx.Response:
        self.purchases.require(row_id, "Purchase not found")
        self.purchases.delete(row_id)
        return _json({"message": "Purchase deleted"})

    # ------------------------------------------------------------------ expenses

    @staticmethod
    def _check_expense(row: Mapping[str, Any]) -> None:
        if row["payment_status"] not in EXPENSE_STATUSES:
            raise MockBackendError(400, "Invalid payment status")
        if row["payment_status"] == "paid" and not row.get("payment_method"):
            raise MockBackendError(400, "payment_method is required when payment_status is paid")

    def _list_expenses(self, params, body) -> httpx.Response:
        start = params.get("startDate")
        end = params.get("endDate")
        rows = [
            dict(row)
            for row in sorted(self.expenses.all(), key=lambda row: (row["expense_date"], row["id"]), reverse=True)
            if (not start or row["expense_date"][:10] >= start) and (not end or row["expense_date"][:10] <= end)
        ]
        return _json(rows)

    def _create_expense(self, params, body) -> httpx.Response:
        description = str(body.get("description") or "").strip()
        if not description:
            raise MockBackendError(400, "description is required")
        amount = _number(body.get("amount"), "amount")
        if amount is None:
            raise MockBackendError(400, "amount is required")
        row = {
            "description": description,
            "category": body.get("category"),
            "amount": amount,
            "expense_date": body.get("expense_date") or date.today().isoformat(),
            "payment_status": body.get("payment_status") or "pending",
            "payment_method": body.get("payment_method"),
            "remarks": body.get("remarks"),
        }
        self._check_expense(row)
        return _json(dict(self.expenses.insert(row)), 201)

    def _update_expense(self, params, body, row_id) -> httpx.Response:
        row = self.expenses.require(row_id, "Expense not found")
        candidate = dict(row)
        updates = dict(body)
        if "amount" in updates:
            updates["amount"] = _number(updates["amount"], "amount")
        self._merge(
            candidate,
            updates,
            ("description", "category", "amount", "expense_date", "payment_status", "payment_method", "remarks"),
        )
        self._check_expense(candidate)
        row.update(candidate)
        return _json(dict(row))

    def _delete_expense(self, params, body, row_id) -> httpx.Response:
        self.expenses.require(row_id, "Expense not found")
        self.expenses.delete(row_id)
        return _json({"message": "Expense deleted"})

    # ------------------------------------------------------------------ notifications

    def _list_notifications(self, params, body) -> httpx.Response:
        limit = _int_param(params.get("limit")) or 50
        unread_only = str(params.get("unread", "")).lower() in ("1", "true", "yes")
        rows = [
            dict(row)
            for row in sorted(self.notifications.all(), key=lambda row: (row["created_at"], row["id"]), reverse=True)
            if not unread_only or not row["is_read"]
        ]
        return _json(rows[: max(limit, 1)])

    def _mark_read(self, params, body, row_id) -> httpx.Response:
        row = self.notifications.require(row_id, "Notification not found")
        row["is_read"] = True
        return _json(dict(row))

    def _mark_all_read(self, params, body) -> httpx.Response:
        updated = 0
        for row in self.notifications.all():
            if not row["is_read"]:
                row["is_read"] = True
                updated += 1
        return _json({"updated": updated})

    # ------------------------------------------------------------------ reports

    @staticmethod
    def _date_range(params: Mapping[str, Any]) -> Row:
        today = date.today()
        timeframe = str(params.get("timeframe") or "monthly").lower()
        if params.get("startDate") and params.get("endDate"):
            start, end = params["startDate"], params["endDate"]
            return {"startDate": start, "endDate": end, "label": f"{start} to {end}"}
        if timeframe == "daily":
            anchor = params.get("date") or today.isoformat()
            return {"startDate": anchor, "endDate": anchor, "label": f"Daily {anchor}"}
        if timeframe == "yearly":
            year = _int_param(params.get("year")) or today.year
            return {"startDate": f"{year}-01-01", "endDate": f"{year}-12-31", "label": f"Year {year}"}
        if timeframe == "custom":
            end = today.isoformat()
            start = (today - timedelta(days=29)).isoformat()
            return {"startDate": start, "endDate": end, "label": f"Custom {start} to {end}"}
        month = _int_param(params.get("month")) or today.month
        year = _int_param(params.get("year")) or today.year
        last_day = calendar.monthrange(year, month)[1]
        return {
            "startDate": f"{year}-{month:02d}-01",
            "endDate": f"{year}-{month:02d}-{last_day:02d}",
            "label": f"{calendar.month_name[month]} {year}",
        }

    @staticmethod
    def _within(value: Optional[str], window: Mapping[str, str]) -> bool:
        return bool(value) and window["startDate"] <= value[:10] <= window["endDate"]

    def _expense_report(self, window: Row) -> Row:
        expenses = [dict(row) for row in self.expenses.all() if self._within(row["expense_date"], window)]
        categories: Dict[str, Row] = {}
        statuses: Dict[str, Row] = {}
        for row in expenses:
            category = categories.setdefault(
                row["category"] or "Uncategorized", {"category": row["category"] or "Uncategorized", "count": 0, "total": 0.0}
            )
            category["count"] += 1
            category["total"] += row["amount"]
            status = statuses.setdefault(row["payment_status"], {"status": row["payment_status"], "count": 0, "total": 0.0})
            status["count"] += 1
            status["total"] += row["amount"]
        return {
            "range": window,
            "totals": {"totalAmount": _round2(sum(row["amount"] for row in expenses))},
            "categories": sorted(categories.values(), key=lambda row: row["total"], reverse=True),
            "statuses": sorted(statuses.values(), key=lambda row: row["total"], reverse=True),
            "expenses": expenses,
        }

    def _job_report(self, window: Row) -> Row:
        jobs = [job for job in self.jobs.all() if self._within(job["created_at"], window)]
        statuses: Dict[str, int] = {}
        for job in jobs:
            statuses[job["job_status"]] = statuses.get(job["job_status"], 0) + 1
        revenue = sum(
            invoice["final_total"] for invoice in self.invoices.all() if self._within(invoice["invoice_date"], window)
        )
        return {
            "range": window,
            "totals": {"jobCount": len(jobs), "completedRevenue": _round2(revenue)},
            "statuses": [{"status": status, "count": count} for status, count in statuses.items()],
            "jobs": [self._job_view(job) for job in jobs],
        }

    def _revenue_report(self, window: Row) -> Row:
        invoices = [invoice for invoice in self.invoices.all() if self._within(invoice["invoice_date"], window)]
        expenses = [row for row in self.expenses.all() if self._within(row["expense_date"], window)]
        total = sum(invoice["final_total"] for invoice in invoices)
        by_status = {
            status: sum(invoice["final_total"] for invoice in invoices if invoice["payment_status"] == status)
            for status in INVOICE_STATUSES
        }
        expenses_total = _round2(sum(row["amount"] for row in expenses))
        return {
            "range": window,
            "totals": {
                "totalRevenue": _round2(total),
                "invoiceCount": len(invoices),
                "averageInvoice": _round2(total / len(invoices)) if invoices else 0,
                "paidRevenue": _round2(by_status["paid"]),
                "partialRevenue": _round2(by_status["partial"]),
                "unpaidRevenue": _round2(by_status["unpaid"]),
                "expensesTotal": expenses_total,
                "revenue": _round2(total - expenses_total),
            },
            "invoices": [self._invoice_detail(invoice) for invoice in invoices],
            "expenses": [dict(row) for row in expenses],
        }

    def _inventory_report(self, window: Row) -> Row:
        usage: Dict[int, float] = {}
        for job in self.jobs.all():
            if not self._within(job["created_at"], window):
                continue
            for item in job["items"]:
                if item.get("inventory_item_id"):
                    usage[item["inventory_item_id"]] = usage.get(item["inventory_item_id"], 0.0) + item["quantity"]
        items = []
        for row in sorted(self.inventory.all(), key=lambda row: row["name"].lower()):
            entry = dict(row)
            entry["total_used"] = usage.get(row["id"], 0.0)
            entry["low_stock"] = row["quantity"] <= (row.get("reorder_level") or 0)
            items.append(entry)
        low_stock = [item for item in items if item["low_stock"]]
        most_used = sorted((item for item in items if item["total_used"] > 0), key=lambda item: item["total_used"], reverse=True)
        return {
            "range": window,
            "totals": {"itemCount": len(items), "lowStockCount": len(low_stock)},
            "lowStock": low_stock,
            "mostUsed": most_used[:10],
            "items": items,
        }

    def _build_report(self, report: str, params: Mapping[str, Any]) -> Row:
        window = self._date_range(params)
        builders = {
            "expenses": self._expense_report,
            "jobs": self._job_report,
            "inventory": self._inventory_report,
            "revenue": self._revenue_report,
        }
        return builders[report](window)

    def _report(self, params, body, report) -> httpx.Response:
        return _json(self._build_report(report, params))

    def _report_export(self, params, body, report, fmt) -> httpx.Response:
        data = self._build_report(report, params)
        window = data["range"]
        stem = f"{report}-report-{window['startDate']}-to-{window['endDate']}"
        if fmt == "pdf":
            content = f"%PDF-1.4\n% {report} report {window['label']}\n%%EOF\n".encode("utf-8")
            return _binary(content, "application/pdf", f"{stem}.pdf")
        content = json.dumps(data["totals"]).encode("utf-8")
        return _binary(content, XLSX_MEDIA_TYPE, f"{stem}.xlsx")

    def _dashboard(self, params, body) -> httpx.Response:
        today = date.today()
        month = _int_param(params.get("month")) or today.month
        year = _int_param(params.get("year")) or today.year
        prefix = f"{year}-{month:02d}"

        revenue = sum(invoice["final_total"] for invoice in self.invoices.all() if invoice["invoice_date"].startswith(prefix))
        expenses = sum(row["amount"] for row in self.expenses.all() if row["expense_date"].startswith(prefix))
        month_jobs = [job for job in self.jobs.all() if job["created_at"].startswith(prefix)]
        statuses: Dict[str, int] = {}
        for job in month_jobs:
            statuses[job["job_status"]] = statuses.get(job["job_status"], 0) + 1

        last_day = calendar.monthrange(year, month)[1]
        days_per_week = -(-last_day // 4)
        weeks = []
        for index in range(4):
            start_day = 1 + index * days_per_week
            week_start = date(year, month, min(start_day, last_day))
            week_end = date(year, month, min(start_day + days_per_week - 1, last_day))
            window = {"startDate": week_start.isoformat(), "endDate": week_end.isoformat()}
            weeks.append(
                {
                    "week": index + 1,
                    "weekStart": window["startDate"],
                    "weekEnd": window["endDate"],
                    "revenue": sum(
                        invoice["final_total"]
                        for invoice in self.invoices.all()
                        if self._within(invoice["invoice_date"], window)
                    ),
                    "expenses": sum(row["amount"] for row in self.expenses.all() if self._within(row["expense_date"], window)),
                }
            )

        return _json(
            {
                "month": month,
                "year": year,
                "totalRevenue": revenue,
                "totalExpenses": expenses,
                "netProfit": revenue - expenses,
                "activeJobs": sum(1 for job in month_jobs if job["job_status"] in ("Pending", "In Progress")),
                "jobStatuses": [{"status": status, "count": count} for status, count in statuses.items()],
                "weeklyData": weeks,
            }
        )

    # ------------------------------------------------------------------ overview

    def collections(self) -> Dict[str, List[Row]]:
        return {
            "customers": self.customers.all(),
            "vehicles": self.vehicles.all(),
            "technicians": self.technicians.all(),
            "jobs": [self._job_view(job) for job in self.jobs.all()],
            "inventory": self.inventory.all(),
            "invoices": [self._invoice_detail(invoice) for invoice in self.invoices.all()],
            "suppliers": self.suppliers.all(),
            "purchases": [self._purchase_view(row) for row in self.purchases.all()],
            "expenses": self.expenses.all(),
            "notifications": self.notifications.all(),
        }

    def delete_record(self, collection: str, record_id: Any) -> bool:
        tables = {
            "customers": self.customers,
            "vehicles": self.vehicles,
            "technicians": self.technicians,
            "jobs": self.jobs,
            "inventory": self.inventory,
            "invoices": self.invoices,
            "suppliers": self.suppliers,
            "purchases": self.purchases,
            "expenses": self.expenses,
            "notifications": self.notifications,
        }
        table = tables.get(collection)
        if table is None:
            raise KeyError(collection)
        return table.delete(record_id)

    # ------------------------------------------------------------------ seed

    def _seed(self) -> None:
        now = _utc_now()
        nimal = self.customers.insert(
            {
                "name": "Nimal Perera",
                "phone": "+94 77 123 4567",
                "email": "nimal@example.lk",
                "address": "12 Galle Road, Colombo 03",
                "created_at": _days_ago(40),
            }
        )
        ayesha = self.customers.insert(
            {
                "name": "Ayesha Fernando",
                "phone": "+94 71 555 0101",
                "email": "ayesha@example.lk",
                "address": "45 Kandy Road, Kadawatha",
                "created_at": _days_ago(12),
            }
        )
        corolla = self.vehicles.insert(
            {
                "customer_id": nimal["id"],
                "make": "Toyota",
                "model": "Corolla",
                "year": "2016",
                "license_plate": "CAB-4521",
                "archived": False,
            }
        )
        swift = self.vehicles.insert(
            {
                "customer_id": ayesha["id"],
                "make": "Suzuki",
                "model": "Swift",
                "year": "2019",
                "license_plate": "KX-9088",
                "archived": False,
            }
        )
        kasun = self.technicians.insert({"name": "Kasun Silva", "phone": "+94 76 222 3344", "status": "Active", "created_at": now})
        self.technicians.insert({"name": "Ruwan Jayasinghe", "phone": "+94 75 888 1122", "status": "On Leave", "created_at": now})

        for spec in (
            ("Engine Oil 5W-30", "Synthetic engine oil", "consumable", "litre", 20.0, 1500.0, 5.0),
            ("Brake Pads (Front)", "Ceramic brake pad set", "consumable", "set", 4.0, 3500.0, 5.0),
            ("Diagnostic Scanner", "OBD-II scan tool", "non-consumable", "unit", 1.0, 45000.0, None),
            ("Coolant", "Long life coolant", "bulk", "litre", 50.0, 800.0, 10.0),
        ):
            name, description, item_type, unit, quantity, unit_cost, reorder_level = spec
            self.inventory.insert(
                {
                    "name": name,
                    "description": description,
                    "type": item_type,
                    "unit": unit,
                    "quantity": quantity,
                    "unit_cost": unit_cost,
                    "reorder_level": reorder_level,
                    "created_at": now,
                    "updated_at": now,
                }
            )

        completed = self.jobs.insert(
            {
                "customer_id": nimal["id"],
                "vehicle_id": corolla["id"],
                "description": "Full service and brake inspection",
                "notes": None,
                "category": "Service",
                "initial_amount": 1000.0,
                "advance_amount": 50.0,
                "mileage": 84500.0,
                "job_status": "Completed",
                "invoice_created": False,
                "technician_ids": [kasun["id"]],
                "items": [],
                "created_at": now,
                "updated_at": now,
                "status_changed_at": now,
            }
        )
        self.jobs.insert(
            {
                "customer_id": ayesha["id"],
                "vehicle_id": swift["id"],
                "description": "Air conditioning repair",
                "notes": "Customer reports weak cooling",
                "category": "Repair",
                "initial_amount": 12000.0,
                "advance_amount": None,
                "mileage": 32000.0,
                "job_status": "In Progress",
                "invoice_created": False,
                "technician_ids": [kasun["id"]],
                "items": [],
                "created_at": now,
                "updated_at": now,
                "status_changed_at": now,
            }
        )
        self._insert_invoice(
            completed,
            lines=self._invoice_lines(
                [{"item_name": "Labour", "type": "non-consumable", "quantity": 1, "unit_price": 1000}]
            ),
            charges=[{"id": next(self._line_ids), "label": "Towing", "type": "charge", "amount": 200.0}],
            reductions=[],
        )

        supplier = self.suppliers.insert(
            {
                "name": "Lanka Auto Parts",
                "contact_name": "Sunil",
                "phone": "+94 11 234 5678",
                "email": "sales@lankaauto.lk",
                "address": "Panchikawatte, Colombo 10",
                "notes": None,
                "created_at": now,
            }
        )
        self.purchases.insert(
            {
                "supplier_id": supplier["id"],
                "inventory_item_id": 1,
                "item_name": "Engine Oil 5W-30",
                "quantity": 10.0,
                "unit_cost": 1500.0,
                "payment_status": "paid",
                "payment_method": "Bank Transfer",
                "purchase_date": now,
                "notes": None,
            }
        )
        self.expenses.insert(
            {
                "description": "Electricity bill",
                "category": "Utilities",
                "amount": 8500.0,
                "expense_date": date.today().isoformat(),
                "payment_status": "paid",
                "payment_method": "Cash",
                "remarks": None,
            }
        )
        self.expenses.insert(
            {
                "description": "Workshop rent",
                "category": "Rent",
                "amount": 60000.0,
                "expense_date": date.today().isoformat(),
                "payment_status": "pending",
                "payment_method": None,
                "remarks": None,
            }
        )
        self._notify_low_stock(2)


_mock_backend: Optional[MockGarageBackend] = None


def get_mock_backend() -> MockGarageBackend:
    global _mock_backend
    if _mock_backend is None:
        _mock_backend = MockGarageBackend()
    return _mock_backend


def reset_mock_store() -> None:
    global _mock_backend
    _mock_backend = None
