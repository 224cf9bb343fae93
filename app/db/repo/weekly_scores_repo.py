from __future__ import annotations

from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.weekly_scores import WeeklyScore


class WeeklyScoresRepo:
    @staticmethod
    async def get_for_update(
        session: AsyncSession,
        *,
        user_id: int,
        week_start: datetime,
    ) -> WeeklyScore | None:
        stmt = (
            select(WeeklyScore)
            .where(WeeklyScore.user_id == user_id, WeeklyScore.week_start == week_start)
            .with_for_update()
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def record_finish(
        session: AsyncSession,
        *,
        user_id: int,
        week_start: datetime,
        game_score: int,
        now_utc: datetime,
    ) -> tuple[int, int]:
        stmt = insert(WeeklyScore).values(
            user_id=user_id,
            week_start=week_start,
            best_score=game_score,
            quizzes=1,
            updated_at=now_utc,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[WeeklyScore.user_id, WeeklyScore.week_start],
            set_={
                "best_score": func.greatest(WeeklyScore.best_score, stmt.excluded.best_score),
                "quizzes": WeeklyScore.quizzes + 1,
                "updated_at": now_utc,
            },
        ).returning(WeeklyScore.best_score, WeeklyScore.quizzes)
        result = await session.execute(stmt)
        best_score, quizzes = result.one()
        return int(best_score), int(quizzes)
