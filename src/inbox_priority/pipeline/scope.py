from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional, Tuple

SCOPES: tuple[str, ...] = ("today", "yesterday", "7d", "30d", "60d", "90d")
DEFAULT_SCOPE = "today"


def validate_scope(scope: str) -> str:
    if scope not in SCOPES:
        raise ValueError(f"Unknown scope range: {scope!r} (expected one of {', '.join(SCOPES)})")
    return scope


def _midnight(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def scope_window(scope: str, now: datetime) -> Tuple[datetime, Optional[datetime]]:
    """
    Map a scope range to a [start, end) window.
    end is None when the window is open up to now.
    """
    validate_scope(scope)
    today = _midnight(now)

    if scope == "today":
        return today, None
    if scope == "yesterday":
        return today - timedelta(days=1), today

    days = int(scope.rstrip("d"))
    return today - timedelta(days=days), None


def build_unread_query(scope: str, now: Optional[datetime] = None) -> str:
    # Gmail "after:"/"before:" take seconds since epoch.
    now = now or datetime.now().astimezone()
    start, end = scope_window(scope, now)
    query = f"is:unread in:inbox after:{int(start.timestamp())}"
    if end is not None:
        query += f" before:{int(end.timestamp())}"
    return query
