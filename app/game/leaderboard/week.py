from __future__ import annotations

from datetime import datetime, timedelta, timezone

UTC = timezone.utc


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC)


def week_start(moment: datetime) -> datetime:
    """Monday 00:00 UTC of the week containing ``moment``."""
    moment_utc = _as_utc(moment)
    monday = moment_utc.date() - timedelta(days=moment_utc.weekday())
    return datetime(monday.year, monday.month, monday.day, tzinfo=UTC)


def week_end(moment: datetime) -> datetime:
    return week_start(moment) + timedelta(days=7) - timedelta(microseconds=1)


def time_until_week_end(moment: datetime) -> timedelta:
    return max(timedelta(0), week_end(moment) - _as_utc(moment))
