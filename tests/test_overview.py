from __future__ import annotations

import os
import sys

from fastapi.testclient import TestClient

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from garage_admin.dependencies.services import reset_cached_dependencies
from garage_admin.main import app
from garage_admin.services.mock_store import get_mock_backend, reset_mock_store


def test_overview_renders_seed_data() -> None:
    reset_mock_store()
    client = TestClient(app)

    response = client.get("/overview")
    assert response.status_code == 200
    body = response.text

    assert "Garage Data Overview" in body
    assert "Nimal Perera" in body  # seeded customer
    assert "Low Stock" in body  # brake pads badge
    assert "LKR 1,150.00" in body  # seeded invoice total


def test_overview_includes_created_records() -> None:
    reset_mock_store()
    get_mock_backend().customers.insert(
        {"name": "Test Customer", "phone": "1234567", "email": "test@example.com", "address": None}
    )

    client = TestClient(app)
    body = client.get("/overview").text

    assert "Test Customer" in body
    assert "test@example.com" in body


def test_overview_shows_empty_collections() -> None:
    reset_mock_store()
    backend = get_mock_backend()
    for row in backend.expenses.all():
        backend.expenses.delete(row["id"])

    body = TestClient(app).get("/overview").text

    assert "No records found." in body


def test_overview_delete_removes_record_and_stale_reads() -> None:
    reset_mock_store()
    reset_cached_dependencies()
    client = TestClient(app)

    assert len(client.get("/api/suppliers").json()) == 1

    response = client.delete("/overview/supplier/1")
    assert response.status_code == 200
    assert response.json() == {"status": "deleted", "collection": "suppliers", "record_id": "1"}
    assert client.get("/api/suppliers").json() == []

    missing = client.delete("/overview/suppliers/1")
    assert missing.status_code == 404

    unsupported = client.delete("/overview/widgets/1")
    assert unsupported.status_code == 404
    assert unsupported.json()["detail"] == "Unsupported collection"
