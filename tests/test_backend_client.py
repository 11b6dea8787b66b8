from __future__ import annotations

import asyncio
import os
import sys

import httpx
import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from garage_admin.clients.backend import GarageBackendClient
from garage_admin.services.exceptions import DownstreamServiceError
from garage_admin.services.mock_store import reset_mock_store


@pytest.fixture(autouse=True)
def _reset_store() -> None:
    reset_mock_store()
    yield
    reset_mock_store()


def _client(handler, **kwargs) -> GarageBackendClient:
    return GarageBackendClient(
        "http://garage.local/api",
        use_mock_data=False,
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


def test_backend_error_message_and_status_are_surfaced() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"error": "Insufficient inventory quantity"})

    with pytest.raises(DownstreamServiceError) as excinfo:
        asyncio.run(_client(handler).post("/inventory/1/deduct", {"quantity": 3}))

    assert str(excinfo.value) == "Insufficient inventory quantity"
    assert excinfo.value.status_code == 400


def test_error_without_body_uses_generic_message() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="upstream down")

    with pytest.raises(DownstreamServiceError) as excinfo:
        asyncio.run(_client(handler).get("/customers"))

    assert str(excinfo.value) == "Request failed with status 503"


def test_transport_failure_is_reported_as_unreachable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(DownstreamServiceError) as excinfo:
        asyncio.run(_client(handler).get("/customers"))

    assert str(excinfo.value) == "Unable to reach garage backend"
    assert excinfo.value.status_code is None


def test_requests_carry_bearer_token_and_drop_empty_params() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers.get("Authorization")
        seen["url"] = str(request.url)
        return httpx.Response(200, json=[])

    result = asyncio.run(_client(handler, token="secret").get("/jobs", {"status": "Completed", "startDate": None, "endDate": ""}))

    assert result == []
    assert seen["auth"] == "Bearer secret"
    assert seen["url"] == "http://garage.local/api/jobs?status=Completed"


def test_binary_download_keeps_content_type_and_filename() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            content=b"%PDF-1.4",
            headers={"Content-Type": "application/pdf", "Content-Disposition": 'attachment; filename="INV-1.pdf"'},
        )

    payload = asyncio.run(_client(handler).get_binary("/invoices/1/pdf"))

    assert payload.content == b"%PDF-1.4"
    assert payload.media_type == "application/pdf"
    assert payload.filename == "INV-1.pdf"


def test_missing_base_url_falls_back_to_mock_backend() -> None:
    client = GarageBackendClient(None, use_mock_data=False)

    customers = asyncio.run(client.get("/customers"))

    assert client.use_mock_data is True
    assert {row["name"] for row in customers} >= {"Nimal Perera", "Ayesha Fernando"}
