from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.quiz_sessions import QuizSession


class QuizSessionsRepo:
    @staticmethod
    async def get_by_id(session: AsyncSession, session_id: UUID) -> QuizSession | None:
        return await session.get(QuizSession, session_id)

    @staticmethod
    async def get_by_id_for_update(session: AsyncSession, session_id: UUID) -> QuizSession | None:
        stmt = select(QuizSession).where(QuizSession.id == session_id).with_for_update()
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_live_for_update(
        session: AsyncSession,
        *,
        user_id: int,
        quiz_id: int,
    ) -> QuizSession | None:
        stmt = (
            select(QuizSession)
            .where(
                QuizSession.user_id == user_id,
                QuizSession.quiz_id == quiz_id,
                QuizSession.finished_at.is_(None),
            )
            .order_by(QuizSession.started_at.desc())
            .limit(1)
            .with_for_update()
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_last_finished_at(
        session: AsyncSession,
        *,
        user_id: int,
        quiz_id: int,
    ) -> datetime | None:
        stmt = select(func.max(QuizSession.finished_at)).where(
            QuizSession.user_id == user_id,
            QuizSession.quiz_id == quiz_id,
            QuizSession.finished_at.is_not(None),
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def list_counted_started_at_since(
        session: AsyncSession,
        *,
        user_id: int,
        since_utc: datetime,
    ) -> list[datetime]:
        stmt = (
            select(QuizSession.started_at)
            .where(
                QuizSession.user_id == user_id,
                QuizSession.energy_exempt.is_(False),
                QuizSession.started_at > since_utc,
            )
            .order_by(QuizSession.started_at.asc())
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def count_for_user_quiz(session: AsyncSession, *, user_id: int, quiz_id: int) -> int:
        stmt = select(func.count(QuizSession.id)).where(
            QuizSession.user_id == user_id,
            QuizSession.quiz_id == quiz_id,
        )
        result = await session.execute(stmt)
        return int(result.scalar_one() or 0)

    @staticmethod
    async def count_finished_for_user_since(
        session: AsyncSession,
        *,
        user_id: int,
        since_utc: datetime,
        exclude_session_id: UUID | None = None,
    ) -> int:
        stmt = select(func.count(QuizSession.id)).where(
            QuizSession.user_id == user_id,
            QuizSession.finished_at.is_not(None),
            QuizSession.finished_at >= since_utc,
        )
        if exclude_session_id is not None:
            stmt = stmt.where(QuizSession.id != exclude_session_id)
        result = await session.execute(stmt)
        return int(result.scalar_one() or 0)

    @staticmethod
    async def create(session: AsyncSession, *, quiz_session: QuizSession) -> QuizSession:
        session.add(quiz_session)
        await session.flush()
        return quiz_session

    @staticmethod
    async def start_question_timer_if_idle(
        session: AsyncSession,
        *,
        session_id: UUID,
        question_index: int,
        started_at: datetime,
    ) -> int:
        stmt = (
            update(QuizSession)
            .where(
                QuizSession.id == session_id,
                QuizSession.finished_at.is_(None),
                QuizSession.current_question_index == question_index,
                QuizSession.current_question_started_at.is_(None),
            )
            .values(current_question_started_at=started_at)
        )
        result = await session.execute(stmt)
        return result.rowcount or 0
