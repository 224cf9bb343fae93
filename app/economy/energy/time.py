from __future__ import annotations

from datetime import datetime, timedelta, timezone
from math import ceil

UTC = timezone.utc


def utc_day_start(now_utc: datetime) -> datetime:
    """Start of the UTC calendar day used for daily XP bonuses."""
    return now_utc.astimezone(UTC).replace(hour=0, minute=0, second=0, microsecond=0)


def cooldown_window_start(now_utc: datetime, cooldown_seconds: int) -> datetime:
    return now_utc - timedelta(seconds=cooldown_seconds)


def remaining_ms(until: datetime, now_utc: datetime) -> int:
    """Milliseconds left until ``until``, never negative."""
    delta_ms = (until - now_utc).total_seconds() * 1000
    return max(0, ceil(delta_ms))
