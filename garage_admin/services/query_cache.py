from __future__ import annotations

import logging
import time
from typing import Any, Awaitable, Callable, Dict, Iterable, Tuple, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

# mutation name -> key prefixes it makes stale
INVALIDATIONS: Dict[str, Tuple[str, ...]] = {
    "customer.create": ("customers:",),
    "customer.update": ("customers:", "jobs:", "invoices:"),
    "customer.delete": ("customers:", "vehicles:", "jobs:", "invoices:", "reports:"),
    "vehicle.create": ("vehicles:",),
    "vehicle.update": ("vehicles:", "jobs:"),
    "vehicle.delete": ("vehicles:", "jobs:"),
    "job.create": ("jobs:", "inventory:", "reports:", "technicians:"),
    "job.update": ("jobs:", "invoices:", "inventory:", "reports:", "technicians:", "notifications:"),
    "job.delete": ("jobs:", "invoices:", "inventory:", "reports:", "technicians:"),
    "invoice.update": ("invoices:", "inventory:", "reports:", "notifications:"),
    "invoice.delete": ("invoices:", "jobs:", "inventory:", "reports:", "notifications:"),
    "inventory.create": ("inventory:",),
    "inventory.update": ("inventory:", "notifications:"),
    "inventory.delete": ("inventory:",),
    "inventory.deduct": ("inventory:", "notifications:", "reports:"),
    "supplier.create": ("suppliers:",),
    "supplier.update": ("suppliers:",),
    "supplier.delete": ("suppliers:",),
    "purchase.create": ("suppliers:", "inventory:", "notifications:", "reports:"),
    "purchase.update": ("suppliers:", "inventory:", "reports:"),
    "purchase.delete": ("suppliers:", "reports:"),
    "expense.create": ("expenses:", "reports:"),
    "expense.update": ("expenses:", "reports:"),
    "expense.delete": ("expenses:", "reports:"),
    "technician.create": ("technicians:",),
    "technician.update": ("technicians:", "jobs:"),
    "technician.delete": ("technicians:", "jobs:"),
    "notification.read": ("notifications:",),
}


def make_key(*parts: Any) -> str:
    """Join key parts, rendering sorted mappings so equal queries share a key."""
    rendered = []
    for part in parts:
        if isinstance(part, dict):
            items = sorted((k, v) for k, v in part.items() if v is not None and v != "")
            rendered.append("&".join(f"{k}={v}" for k, v in items))
        else:
            rendered.append(str(part))
    return ":".join(rendered)


class QueryCache:
    """Short-lived cache for backend reads, cleared by mutation name."""

    def __init__(self, ttl_seconds: int = 15) -> None:
        self._ttl = ttl_seconds
        self._store: Dict[str, Tuple[float, Any]] = {}
        # bumped on every clear so loads started before it are not stored
        self._generations: Dict[str, int] = {}
        self._epoch = 0

    def get(self, key: str) -> Any:
        hit = self._store.get(key)
        if not hit:
            return None
        expires_at, data = hit
        if time.monotonic() >= expires_at:
            self._store.pop(key, None)
            return None
        return data

    def set(self, key: str, value: Any) -> None:
        if self._ttl <= 0:
            self._store.pop(key, None)
            return
        self._store[key] = (time.monotonic() + self._ttl, value)

    def _generation(self, key: str) -> int:
        return self._epoch + sum(
            count for prefix, count in self._generations.items() if key.startswith(prefix)
        )

    async def fetch(self, key: str, loader: Callable[[], Awaitable[T]]) -> T:
        cached = self.get(key)
        if cached is not None:
            logger.debug("Query cache hit for %s", key)
            return cached
        generation = self._generation(key)
        value = await loader()
        if self._generation(key) == generation:
            self.set(key, value)
        else:
            logger.debug("Discarding %s loaded before an invalidation", key)
        return value

    def clear_prefix(self, prefix: str) -> int:
        self._generations[prefix] = self._generations.get(prefix, 0) + 1
        keys = [key for key in self._store if key.startswith(prefix)]
        for key in keys:
            self._store.pop(key, None)
        return len(keys)

    def invalidate(self, prefixes: Iterable[str]) -> int:
        return sum(self.clear_prefix(prefix) for prefix in prefixes)

    def invalidate_for(self, mutation: str) -> int:
        prefixes = INVALIDATIONS.get(mutation)
        if prefixes is None:
            raise KeyError(f"Unknown mutation {mutation!r}")
        removed = self.invalidate(prefixes)
        logger.debug("Mutation %s invalidated %s cached queries", mutation, removed)
        return removed

    def clear(self) -> None:
        self._epoch += 1
        self._store.clear()

    def __len__(self) -> int:
        return len(self._store)
