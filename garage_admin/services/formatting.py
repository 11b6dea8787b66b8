"""Render-time formatting helpers. Values passed in are never modified."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo

_DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_HAS_OFFSET = re.compile(r"([zZ]|[+-]\d{2}:?\d{2})$")


def format_currency(value: Optional[float], currency: str = "LKR") -> str:
    amount = float(value or 0.0)
    sign = "-" if amount < 0 else ""
    return f"{sign}{currency} {abs(amount):,.2f}"


def parse_backend_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse backend timestamps, treating naive values as UTC.

    The backend stores SQLite ``CURRENT_TIMESTAMP`` strings such as
    ``2024-05-01 08:30:00`` which carry no offset but are UTC.
    """
    if not value:
        return None
    text = str(value).strip()
    if not text:
        return None

    if _HAS_OFFSET.search(text):
        try:
            return datetime.fromisoformat(text.replace("Z", "+00:00").replace("z", "+00:00"))
        except ValueError:
            return None

    normalized = text.replace(" ", "T", 1)
    if _DATE_ONLY.match(normalized):
        normalized = f"{normalized}T00:00:00"
    try:
        return datetime.fromisoformat(normalized).replace(tzinfo=timezone.utc)
    except ValueError:
        return None


def format_local_date(value: Optional[str], tz_name: str = "Asia/Colombo", *, with_time: bool = False) -> str:
    parsed = parse_backend_timestamp(value)
    if parsed is None:
        return str(value) if value else "—"
    local = parsed.astimezone(ZoneInfo(tz_name))
    return local.strftime("%d/%m/%y %H:%M" if with_time else "%d/%m/%y")
