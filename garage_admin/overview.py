"""Routes for browsing and pruning the in-memory garage backend."""
from __future__ import annotations

import html
import json
from typing import Any, Dict, Iterable, List, Mapping

from fastapi import APIRouter, HTTPException
from fastapi.responses import HTMLResponse

from garage_admin.config import get_settings
from garage_admin.dependencies.services import get_query_cache_cached
from garage_admin.schemas.inventory import InventoryItem
from garage_admin.schemas.invoice import InvoiceDetail
from garage_admin.services.formatting import format_currency
from garage_admin.services.invoices import build_invoice_view
from garage_admin.services.mock_store import get_mock_backend
from garage_admin.services.stock import stock_status

router = APIRouter()

_TITLES = {
    "customers": "Customers",
    "vehicles": "Vehicles",
    "technicians": "Technicians",
    "jobs": "Jobs",
    "inventory": "Inventory",
    "invoices": "Invoices",
    "suppliers": "Suppliers",
    "purchases": "Supplier Purchases",
    "expenses": "Expenses",
    "notifications": "Notifications",
}

# Singular forms accepted by the delete route.
_ALIASES = {
    "customer": "customers",
    "vehicle": "vehicles",
    "technician": "technicians",
    "job": "jobs",
    "invoice": "invoices",
    "supplier": "suppliers",
    "purchase": "purchases",
    "expense": "expenses",
    "notification": "notifications",
}


def _stringify(value: Any) -> str:
    """Return a JSON-friendly string representation for table cells."""
    if value is None:
        return ""
    if isinstance(value, (str, int, float, bool)):
        return str(value)
    return json.dumps(value, default=str)


def _build_table(title: str, rows: Iterable[Mapping[str, Any]]) -> str:
    row_list: List[Dict[str, Any]] = [dict(row) for row in rows]
    section_parts = [f"<section><h2>{html.escape(title)}</h2>"]
    if not row_list:
        section_parts.append("<p>No records found.</p></section>")
        return "".join(section_parts)

    columns: List[str] = []
    for row in row_list:
        for key in row.keys():
            if key not in columns:
                columns.append(key)

    header = "".join(f"<th>{html.escape(column)}</th>" for column in columns)
    body_rows: List[str] = []
    for row in row_list:
        cells = [f"<td>{html.escape(_stringify(row.get(column)))}</td>" for column in columns]
        body_rows.append("<tr>" + "".join(cells) + "</tr>")
    section_parts.append(
        "<table><thead><tr>"
        + header
        + "</tr></thead><tbody>"
        + "".join(body_rows)
        + "</tbody></table>"
    )
    section_parts.append("</section>")
    return "".join(section_parts)


def _inventory_rows(rows: Iterable[Mapping[str, Any]], currency: str) -> List[Dict[str, Any]]:
    result: List[Dict[str, Any]] = []
    for row in rows:
        item = InventoryItem.model_validate(row)
        result.append(
            {
                "id": item.id,
                "name": item.name,
                "type": item.type,
                "quantity": item.quantity,
                "unit": item.unit,
                "reorder_level": item.reorder_level,
                "unit_cost": format_currency(item.unit_cost, currency),
                "status": stock_status(item),
            }
        )
    return result


def _invoice_rows(rows: Iterable[Mapping[str, Any]], currency: str, tz_name: str) -> List[Dict[str, Any]]:
    result: List[Dict[str, Any]] = []
    for row in rows:
        view = build_invoice_view(InvoiceDetail.model_validate(row), currency=currency, tz_name=tz_name)
        result.append(
            {
                "id": view.invoice.id,
                "invoice_no": view.invoice.invoice_no,
                "job_id": view.invoice.job_id,
                "customer": view.invoice.customer_name,
                "date": view.display["invoice_date"],
                "items": view.display["items_total"],
                "charges": view.display["charges_total"],
                "reductions": view.display["reductions_total"],
                "final_total": view.display["final_total"],
                "payment_status": view.invoice.payment_status,
            }
        )
    return result


@router.get("/overview", response_class=HTMLResponse)
async def view_overview() -> HTMLResponse:
    """Render every collection of the in-memory backend as HTML tables."""
    settings = get_settings()
    collections = get_mock_backend().collections()

    sections = []
    for name, rows in collections.items():
        if name == "inventory":
            rows = _inventory_rows(rows, settings.currency)
        elif name == "invoices":
            rows = _invoice_rows(rows, settings.currency, settings.display_timezone)
        sections.append(_build_table(_TITLES.get(name, name.title()), rows))

    sections_html = "".join(sections)
    html_content = f"""
    <html>
        <head>
            <title>Garage Data Overview</title>
            <style>
                body {{ font-family: Arial, sans-serif; margin: 2rem; }}
                h1 {{ text-align: center; }}
                section {{ margin-bottom: 2rem; }}
                table {{ border-collapse: collapse; width: 100%; }}
                th, td {{ border: 1px solid #ccc; padding: 0.5rem; text-align: left; }}
                th {{ background-color: #f0f0f0; }}
                tbody tr:nth-child(even) {{ background-color: #fafafa; }}
            </style>
        </head>
        <body>
            <h1>Garage Data Overview</h1>
            {sections_html}
        </body>
    </html>
    """

    return HTMLResponse(content=html_content)


@router.delete("/overview/{collection}/{record_id}")
async def delete_overview_record(collection: str, record_id: str) -> Dict[str, str]:
    """Remove a record from one of the in-memory collections."""
    normalized = collection.strip().lower()
    canonical_name = _ALIASES.get(normalized, normalized)

    try:
        deleted = get_mock_backend().delete_record(canonical_name, record_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Unsupported collection")
    if not deleted:
        raise HTTPException(status_code=404, detail="Record not found")

    get_query_cache_cached().clear()
    return {"status": "deleted", "collection": canonical_name, "record_id": record_id}
