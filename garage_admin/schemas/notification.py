from typing import List, Optional

from pydantic import BaseModel, Field


class Notification(BaseModel):
    id: int
    title: str
    message: str
    type: Optional[str] = None
    is_read: bool = False
    created_at: Optional[str] = None


class NotificationSummary(BaseModel):
    unread_count: int
    latest: List[Notification] = Field(default_factory=list)
    refreshed_at: Optional[str] = None


class MarkAllReadResult(BaseModel):
    updated: int
