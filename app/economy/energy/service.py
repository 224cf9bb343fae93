from __future__ import annotations

from datetime import datetime

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.db.repo.quiz_sessions_repo import QuizSessionsRepo
from app.db.repo.users_repo import UsersRepo
from app.economy.energy.rules import (
    counted_sessions,
    depleted_rejection,
    next_slot_at,
    rate_limit_rejection,
)
from app.economy.energy.time import cooldown_window_start
from app.economy.energy.types import (
    EnergyGateDecision,
    EnergyGatePass,
    EnergyGateRejection,
    EnergyStatus,
)

logger = structlog.get_logger(__name__)


class EnergyGate:
    @staticmethod
    async def _counted_sessions(
        session: AsyncSession,
        *,
        user_id: int,
        now_utc: datetime,
        cooldown_seconds: int,
    ) -> list[datetime]:
        started_at_values = await QuizSessionsRepo.list_counted_started_at_since(
            session,
            user_id=user_id,
            since_utc=cooldown_window_start(now_utc, cooldown_seconds),
        )
        return counted_sessions(
            started_at_values,
            now_utc=now_utc,
            cooldown_seconds=cooldown_seconds,
        )

    @staticmethod
    async def check_rate_limit(
        session: AsyncSession,
        *,
        user_id: int,
        quiz_id: int,
        now_utc: datetime,
    ) -> EnergyGateRejection | None:
        last_finished_at = await QuizSessionsRepo.get_last_finished_at(
            session,
            user_id=user_id,
            quiz_id=quiz_id,
        )
        return rate_limit_rejection(
            last_finished_at,
            now_utc=now_utc,
            rate_limit_seconds=int(get_settings().quiz_rate_limit_seconds),
        )

    @staticmethod
    async def admit(
        session: AsyncSession,
        *,
        user_id: int,
        now_utc: datetime,
        is_tournament_quiz: bool,
    ) -> EnergyGateDecision:
        settings = get_settings()
        max_attempts = int(settings.energy_max_attempts)
        cooldown_seconds = int(settings.energy_attempt_cooldown_seconds)

        counted = await EnergyGate._counted_sessions(
            session,
            user_id=user_id,
            now_utc=now_utc,
            cooldown_seconds=cooldown_seconds,
        )
        used_attempts = len(counted)
        user = await UsersRepo.get_by_id(session, user_id)
        bonus_energy = int(user.bonus_energy) if user is not None else 0

        if is_tournament_quiz or settings.energy_bypass:
            return EnergyGatePass(
                used_attempts=used_attempts,
                max_attempts=max_attempts,
                bonus_energy=bonus_energy,
                used_bonus_energy=False,
                is_tournament_quiz=is_tournament_quiz,
            )

        if used_attempts < max_attempts:
            return EnergyGatePass(
                used_attempts=used_attempts,
                max_attempts=max_attempts,
                bonus_energy=bonus_energy,
                used_bonus_energy=False,
                is_tournament_quiz=False,
            )

        remaining_bonus = await UsersRepo.consume_bonus_energy(session, user_id=user_id)
        if remaining_bonus is not None:
            logger.info(
                "energy_bonus_consumed",
                user_id=user_id,
                used_attempts=used_attempts,
                bonus_energy_left=remaining_bonus,
            )
            return EnergyGatePass(
                used_attempts=used_attempts,
                max_attempts=max_attempts,
                bonus_energy=int(remaining_bonus),
                used_bonus_energy=True,
                is_tournament_quiz=False,
            )

        rejection = depleted_rejection(
            counted,
            now_utc=now_utc,
            cooldown_seconds=cooldown_seconds,
        )
        logger.info(
            "energy_gate_rejected",
            user_id=user_id,
            used_attempts=used_attempts,
            wait_ms=rejection.wait_ms,
        )
        return rejection

    @staticmethod
    async def status(
        session: AsyncSession,
        *,
        user_id: int,
        now_utc: datetime,
    ) -> EnergyStatus:
        settings = get_settings()
        max_attempts = int(settings.energy_max_attempts)
        cooldown_seconds = int(settings.energy_attempt_cooldown_seconds)
        counted = await EnergyGate._counted_sessions(
            session,
            user_id=user_id,
            now_utc=now_utc,
            cooldown_seconds=cooldown_seconds,
        )
        user = await UsersRepo.get_by_id(session, user_id)
        used = min(len(counted), max_attempts)
        return EnergyStatus(
            used=used,
            max_attempts=max_attempts,
            remaining=max_attempts - used,
            bonus_energy=int(user.bonus_energy) if user is not None else 0,
            next_energy_at=(
                next_slot_at(counted, cooldown_seconds=cooldown_seconds) if counted else None
            ),
            hours_per_slot=cooldown_seconds / 3600,
        )
