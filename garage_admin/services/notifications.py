from __future__ import annotations

import asyncio
import logging
from contextlib import suppress
from datetime import datetime, timezone
from typing import List, Optional

from garage_admin.schemas.notification import MarkAllReadResult, Notification, NotificationSummary
from garage_admin.services.base import BackendService
from garage_admin.services.exceptions import ServiceError
from garage_admin.services.query_cache import make_key

logger = logging.getLogger(__name__)

SUMMARY_SIZE = 5


class NotificationService(BackendService):
    async def list(self, *, limit: int = 50, unread_only: bool = False) -> List[Notification]:
        params = {"limit": limit, "unread": "true" if unread_only else None}

        async def load() -> List[Notification]:
            data = await self._client.get("/notifications", params)
            return [Notification(**row) for row in data or []]

        return await self._cached(make_key("notifications:list", params), "list notifications", load)

    async def mark_read(self, notification_id: int) -> Notification:
        async def send() -> Notification:
            return Notification(**await self._client.patch(f"/notifications/{notification_id}/read"))

        notification = await self._call("mark notification read", send)
        self._invalidate("notification.read")
        return notification

    async def mark_all_read(self) -> MarkAllReadResult:
        async def send() -> MarkAllReadResult:
            return MarkAllReadResult(**await self._client.patch("/notifications/mark-all-read"))

        result = await self._call("mark notifications read", send)
        logger.info("Marked %s notifications as read", result.updated)
        self._invalidate("notification.read")
        return result

    async def summary(self) -> NotificationSummary:
        async def load() -> List[Notification]:
            data = await self._client.get("/notifications", {"limit": 100, "unread": "true"})
            return [Notification(**row) for row in data or []]

        unread = await self._call("summarise notifications", load)
        return NotificationSummary(
            unread_count=len(unread),
            latest=unread[:SUMMARY_SIZE],
            refreshed_at=datetime.now(timezone.utc).isoformat(),
        )


class NotificationPoller:
    """Refreshes the unread notification summary on a fixed interval."""

    def __init__(self, service: NotificationService, *, interval_seconds: int = 30, enabled: bool = True) -> None:
        self._service = service
        self._interval = interval_seconds
        self._enabled = enabled
        self._task: Optional[asyncio.Task] = None
        self._stop = asyncio.Event()
        self.latest: Optional[NotificationSummary] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        if not self._enabled:
            logger.info("Notification polling disabled; poller not started")
            return
        if self.running:
            logger.info("Notification poller already running; start() ignored")
            return
        self._stop.clear()
        self._task = asyncio.create_task(self._loop(), name="notification_poller")
        logger.info("Notification poller started (interval=%ss)", self._interval)

    async def stop(self) -> None:
        if not self.running:
            return
        self._stop.set()
        self._task.cancel()
        with suppress(asyncio.CancelledError):
            await self._task
        logger.info("Notification poller stopped")

    async def refresh(self) -> Optional[NotificationSummary]:
        try:
            self.latest = await self._service.summary()
        except ServiceError as exc:
            logger.warning("Notification poll failed: %s", exc)
            return self.latest
        logger.debug("Notification poll: %s unread", self.latest.unread_count)
        return self.latest

    async def _loop(self) -> None:
        while not self._stop.is_set():
            await self.refresh()
            with suppress(asyncio.TimeoutError):
                await asyncio.wait_for(self._stop.wait(), timeout=self._interval)
