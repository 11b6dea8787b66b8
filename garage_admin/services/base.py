from __future__ import annotations

import logging
from typing import Awaitable, Callable, Optional, TypeVar

from garage_admin.clients.backend import GarageBackendClient
from garage_admin.services.exceptions import ServiceError
from garage_admin.services.query_cache import QueryCache

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BackendService:
    """Shared plumbing for services that talk to the garage backend."""

    def __init__(self, client: GarageBackendClient, *, cache: Optional[QueryCache] = None) -> None:
        self._client = client
        # ttl 0 disables caching when no shared cache is supplied
        self._cache = cache if cache is not None else QueryCache(ttl_seconds=0)

    async def _call(self, action: str, operation: Callable[[], Awaitable[T]]) -> T:
        try:
            return await operation()
        except ServiceError:
            raise
        except Exception as exc:  # pragma: no cover
            logger.exception("Unexpected error while trying to %s", action)
            raise ServiceError(f"Failed to {action}", cause=exc)

    async def _cached(self, key: str, action: str, operation: Callable[[], Awaitable[T]]) -> T:
        return await self._cache.fetch(key, lambda: self._call(action, operation))

    def _invalidate(self, mutation: str) -> None:
        self._cache.invalidate_for(mutation)
