from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.tournament_stage_results import TournamentStageResult


class TournamentStageResultsRepo:
    @staticmethod
    async def get(
        session: AsyncSession,
        *,
        stage_id: UUID,
        user_id: int,
    ) -> TournamentStageResult | None:
        stmt = select(TournamentStageResult).where(
            TournamentStageResult.stage_id == stage_id,
            TournamentStageResult.user_id == user_id,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def count_completed(
        session: AsyncSession,
        *,
        user_id: int,
        stage_ids: Sequence[UUID],
    ) -> int:
        ids = tuple(stage_ids)
        if not ids:
            return 0
        stmt = select(func.count(TournamentStageResult.stage_id)).where(
            TournamentStageResult.user_id == user_id,
            TournamentStageResult.stage_id.in_(ids),
            TournamentStageResult.completed_at.is_not(None),
        )
        result = await session.execute(stmt)
        return int(result.scalar_one() or 0)

    @staticmethod
    async def count_passed(
        session: AsyncSession,
        *,
        user_id: int,
        stage_ids: Sequence[UUID],
    ) -> int:
        ids = tuple(stage_ids)
        if not ids:
            return 0
        stmt = select(func.count(TournamentStageResult.stage_id)).where(
            TournamentStageResult.user_id == user_id,
            TournamentStageResult.stage_id.in_(ids),
            TournamentStageResult.passed.is_(True),
        )
        result = await session.execute(stmt)
        return int(result.scalar_one() or 0)

    @staticmethod
    async def upsert_completed(
        session: AsyncSession,
        *,
        stage_id: UUID,
        user_id: int,
        score: int,
        rank: int,
        passed: bool,
        completed_at: datetime,
    ) -> bool:
        stmt = insert(TournamentStageResult).values(
            stage_id=stage_id,
            user_id=user_id,
            score=score,
            rank=rank,
            passed=passed,
            completed_at=completed_at,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[TournamentStageResult.stage_id, TournamentStageResult.user_id],
            set_={
                "score": stmt.excluded.score,
                "rank": stmt.excluded.rank,
                "passed": stmt.excluded.passed,
                "completed_at": stmt.excluded.completed_at,
            },
            where=TournamentStageResult.completed_at.is_(None),
        ).returning(TournamentStageResult.stage_id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None
