from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class EnergyGateCode(str, Enum):
    ENERGY_DEPLETED = "energy_depleted"
    RATE_LIMITED = "rate_limited"


@dataclass(slots=True, frozen=True)
class EnergyGateRejection:
    code: EnergyGateCode
    message: str
    wait_ms: int | None = None
    wait_seconds: int | None = None


@dataclass(slots=True, frozen=True)
class EnergyGatePass:
    used_attempts: int
    max_attempts: int
    bonus_energy: int
    used_bonus_energy: bool
    is_tournament_quiz: bool

    @property
    def energy_exempt(self) -> bool:
        return self.is_tournament_quiz

    @property
    def remaining_attempts(self) -> int:
        if self.is_tournament_quiz:
            return max(0, self.max_attempts - self.used_attempts)
        if self.used_bonus_energy:
            return 0
        # the session being created takes one of the free slots
        return max(0, self.max_attempts - self.used_attempts - 1)


EnergyGateDecision = EnergyGatePass | EnergyGateRejection


@dataclass(slots=True, frozen=True)
class EnergyStatus:
    used: int
    max_attempts: int
    remaining: int
    bonus_energy: int
    next_energy_at: datetime | None
    hours_per_slot: float
