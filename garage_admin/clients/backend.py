from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from garage_admin.services.exceptions import DownstreamServiceError

logger = logging.getLogger(__name__)

MOCK_BASE_URL = "http://mock-garage-backend"

_FILENAME_PATTERN = re.compile(r'filename="?([^";]+)"?')


@dataclass
class BinaryPayload:
    """Raw response body for exports the backend renders itself (PDF, Excel)."""

    content: bytes
    media_type: str
    filename: str | None = None


def _route_to_mock_backend(request: httpx.Request) -> httpx.Response:
    # Resolved per request so a reset store is picked up without rebuilding the client.
    from garage_admin.services.mock_store import get_mock_backend

    return get_mock_backend().handle(request)


def _clean_params(params: Dict[str, Any] | None) -> Dict[str, Any] | None:
    if not params:
        return None
    return {key: value for key, value in params.items() if value is not None and value != ""}


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict) and isinstance(payload.get("error"), str):
        return payload["error"]
    return f"Request failed with status {response.status_code}"


def _parse_json(response: httpx.Response) -> Any:
    content_type = response.headers.get("Content-Type", "")
    if "application/json" not in content_type:
        return None
    try:
        return response.json()
    except ValueError:
        return None


class GarageBackendClient:
    """Async HTTP client responsible for communicating with the garage REST backend."""

    def __init__(
        self,
        base_url: str | None,
        *,
        timeout: float = 10.0,
        use_mock_data: bool = True,
        token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = str(base_url).rstrip("/") if base_url else None
        self._timeout = timeout
        self.use_mock_data = use_mock_data or not self._base_url
        self._headers = {"Accept": "application/json"}
        if token:
            self._headers["Authorization"] = f"Bearer {token}"
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _build_client(self) -> httpx.AsyncClient:
        transport = self._transport
        base_url = self._base_url
        if self.use_mock_data:
            transport = transport or httpx.MockTransport(_route_to_mock_backend)
            base_url = MOCK_BASE_URL
        return httpx.AsyncClient(
            base_url=base_url or MOCK_BASE_URL,
            timeout=self._timeout,
            headers=self._headers,
            transport=transport,
        )

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = self._build_client()
        return self._client

    async def _send(
        self,
        method: str,
        path: str,
        *,
        params: Dict[str, Any] | None = None,
        payload: Any = None,
    ) -> httpx.Response:
        client = await self._ensure_client()
        try:
            logger.debug("%s %s params=%s", method, path, params)
            response = await client.request(
                method,
                path,
                params=_clean_params(params),
                json=payload,
            )
            response.raise_for_status()
            return response
        except httpx.HTTPStatusError as exc:
            message = _error_message(exc.response)
            logger.warning(
                "Garage backend returned %s for %s %s: %s",
                exc.response.status_code,
                method,
                path,
                message,
            )
            raise DownstreamServiceError(
                message,
                status_code=exc.response.status_code,
                cause=exc,
            ) from exc
        except httpx.RequestError as exc:
            logger.exception("Unable to reach garage backend: %s", exc)
            raise DownstreamServiceError(
                "Unable to reach garage backend", status_code=None, cause=exc
            ) from exc

    async def get(self, path: str, params: Dict[str, Any] | None = None) -> Any:
        response = await self._send("GET", path, params=params)
        return _parse_json(response)

    async def post(self, path: str, payload: Dict[str, Any] | None = None) -> Any:
        response = await self._send("POST", path, payload=payload or {})
        return _parse_json(response)

    async def put(self, path: str, payload: Dict[str, Any]) -> Any:
        response = await self._send("PUT", path, payload=payload)
        return _parse_json(response)

    async def patch(self, path: str, payload: Dict[str, Any] | None = None) -> Any:
        response = await self._send("PATCH", path, payload=payload)
        return _parse_json(response)

    async def delete(self, path: str) -> Any:
        response = await self._send("DELETE", path)
        return _parse_json(response)

    async def get_binary(self, path: str, params: Dict[str, Any] | None = None) -> BinaryPayload:
        response = await self._send("GET", path, params=params)
        disposition = response.headers.get("Content-Disposition", "")
        match = _FILENAME_PATTERN.search(disposition)
        return BinaryPayload(
            content=response.content,
            media_type=response.headers.get("Content-Type", "application/octet-stream"),
            filename=match.group(1) if match else None,
        )
