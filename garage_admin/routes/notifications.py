from typing import List

from fastapi import APIRouter, Depends, Query

from garage_admin.dependencies.services import get_notification_poller, get_notification_service
from garage_admin.routes.common import to_http_exception
from garage_admin.schemas.notification import MarkAllReadResult, Notification, NotificationSummary
from garage_admin.services import NotificationPoller, NotificationService
from garage_admin.services.exceptions import ServiceError

router = APIRouter()


@router.get("/notifications", response_model=List[Notification])
async def list_notifications(
    limit: int = Query(50, ge=1, le=200),
    unread: bool = Query(False),
    service: NotificationService = Depends(get_notification_service),
):
    try:
        return await service.list(limit=limit, unread_only=unread)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc


@router.get("/notifications/summary", response_model=NotificationSummary)
async def notification_summary(
    poller: NotificationPoller = Depends(get_notification_poller),
    service: NotificationService = Depends(get_notification_service),
):
    """Latest polled summary, or a fresh one when the poller has not run yet."""
    if poller.latest is not None:
        return poller.latest
    try:
        return await service.summary()
    except ServiceError as exc:
        raise to_http_exception(exc) from exc


@router.patch("/notifications/mark-all-read", response_model=MarkAllReadResult)
async def mark_all_read(
    poller: NotificationPoller = Depends(get_notification_poller),
    service: NotificationService = Depends(get_notification_service),
):
    try:
        result = await service.mark_all_read()
    except ServiceError as exc:
        raise to_http_exception(exc) from exc
    await poller.refresh()
    return result


@router.patch("/notifications/{notification_id}/read", response_model=Notification)
async def mark_read(
    notification_id: int,
    poller: NotificationPoller = Depends(get_notification_poller),
    service: NotificationService = Depends(get_notification_service),
):
    try:
        notification = await service.mark_read(notification_id)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc
    await poller.refresh()
    return notification
