"""Relative time labels ("3 hours ago")."""

from __future__ import annotations

import math
from datetime import datetime

from src.store.models import utcnow


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'' if count == 1 else 's'} ago"


def format_relative_time(timestamp: datetime, now: datetime | None = None) -> str:
    """Describe how long ago ``timestamp`` was, relative to ``now``.

    Thresholds: under a minute is "just now", then minutes, hours, days
    (under 7), weeks (under 4, weeks = days // 7) and finally months
    (days // 30). Future timestamps read as "just now".
    """
    now = now or utcnow()
    seconds = math.floor((now - timestamp).total_seconds())
    minutes = seconds // 60
    hours = minutes // 60
    days = hours // 24
    weeks = days // 7
    months = days // 30

    if seconds < 60:
        return "just now"
    if minutes < 60:
        return _plural(minutes, "minute")
    if hours < 24:
        return _plural(hours, "hour")
    if days < 7:
        return _plural(days, "day")
    if weeks < 4:
        return _plural(weeks, "week")
    return _plural(months, "month")
