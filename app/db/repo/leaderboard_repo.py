from __future__ import annotations

from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.leaderboard_entries import LeaderboardEntry


class LeaderboardRepo:
    @staticmethod
    async def get_for_update(
        session: AsyncSession,
        *,
        user_id: int,
        quiz_id: int,
        period_type: str,
    ) -> LeaderboardEntry | None:
        stmt = (
            select(LeaderboardEntry)
            .where(
                LeaderboardEntry.user_id == user_id,
                LeaderboardEntry.quiz_id == quiz_id,
                LeaderboardEntry.period_type == period_type,
            )
            .with_for_update()
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def record_finish(
        session: AsyncSession,
        *,
        user_id: int,
        quiz_id: int,
        period_type: str,
        game_score: int,
        now_utc: datetime,
    ) -> tuple[int, int]:
        stmt = insert(LeaderboardEntry).values(
            user_id=user_id,
            quiz_id=quiz_id,
            period_type=period_type,
            best_score=game_score,
            attempts=1,
            updated_at=now_utc,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[
                LeaderboardEntry.user_id,
                LeaderboardEntry.quiz_id,
                LeaderboardEntry.period_type,
            ],
            set_={
                "best_score": func.greatest(LeaderboardEntry.best_score, stmt.excluded.best_score),
                "attempts": LeaderboardEntry.attempts + 1,
                "updated_at": now_utc,
            },
        ).returning(LeaderboardEntry.best_score, LeaderboardEntry.attempts)
        result = await session.execute(stmt)
        best_score, attempts = result.one()
        return int(best_score), int(attempts)

    @staticmethod
    async def list_user_ids_with_total_between(
        session: AsyncSession,
        *,
        quiz_id: int,
        period_type: str,
        above_total: int,
        below_total: int,
        per_game_bonus: int,
        max_bonus: int,
        exclude_user_id: int,
        limit: int,
    ) -> list[int]:
        total = LeaderboardEntry.best_score + func.least(
            LeaderboardEntry.attempts * per_game_bonus,
            max_bonus,
        )
        stmt = (
            select(LeaderboardEntry.user_id)
            .where(
                LeaderboardEntry.quiz_id == quiz_id,
                LeaderboardEntry.period_type == period_type,
                LeaderboardEntry.user_id != exclude_user_id,
                total > above_total,
                total < below_total,
            )
            .order_by(total.desc(), LeaderboardEntry.user_id.asc())
            .limit(max(1, int(limit)))
        )
        result = await session.execute(stmt)
        return [int(user_id) for user_id in result.scalars().all()]
