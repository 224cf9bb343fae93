from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timedelta
from math import ceil

from app.economy.energy.time import cooldown_window_start, remaining_ms
from app.economy.energy.types import EnergyGateCode, EnergyGateRejection


def counted_sessions(
    started_at_values: Sequence[datetime],
    *,
    now_utc: datetime,
    cooldown_seconds: int,
) -> list[datetime]:
    window_start = cooldown_window_start(now_utc, cooldown_seconds)
    return sorted(value for value in started_at_values if value > window_start)


def next_slot_at(
    counted: Sequence[datetime],
    *,
    cooldown_seconds: int,
) -> datetime | None:
    """Moment the oldest counted session leaves the cooldown window."""
    if not counted:
        return None
    return min(counted) + timedelta(seconds=cooldown_seconds)


def depleted_rejection(
    counted: Sequence[datetime],
    *,
    now_utc: datetime,
    cooldown_seconds: int,
) -> EnergyGateRejection:
    slot_at = next_slot_at(counted, cooldown_seconds=cooldown_seconds)
    wait_ms = remaining_ms(slot_at, now_utc) if slot_at is not None else 0
    wait_minutes = ceil(wait_ms / 60_000)
    return EnergyGateRejection(
        code=EnergyGateCode.ENERGY_DEPLETED,
        message=f"No energy left. Next attempt in {format_wait(wait_minutes)}.",
        wait_ms=wait_ms,
    )


def rate_limit_rejection(
    last_finished_at: datetime | None,
    *,
    now_utc: datetime,
    rate_limit_seconds: int,
) -> EnergyGateRejection | None:
    if last_finished_at is None:
        return None
    wait_ms = remaining_ms(last_finished_at + timedelta(seconds=rate_limit_seconds), now_utc)
    if wait_ms <= 0:
        return None
    wait_seconds = ceil(wait_ms / 1000)
    return EnergyGateRejection(
        code=EnergyGateCode.RATE_LIMITED,
        message=f"Wait {wait_seconds} seconds before the next attempt.",
        wait_seconds=wait_seconds,
    )


def format_wait(total_minutes: int) -> str:
    hours, minutes = divmod(max(0, total_minutes), 60)
    if hours and minutes:
        return f"{hours}h {minutes}m"
    if hours:
        return f"{hours}h"
    return f"{minutes}m"
