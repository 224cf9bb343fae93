from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.quizzes import AnswerOption, Question, Quiz


class QuizzesRepo:
    @staticmethod
    async def get_active(session: AsyncSession, quiz_id: int) -> Quiz | None:
        stmt = select(Quiz).where(Quiz.id == quiz_id, Quiz.is_active.is_(True))
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def list_questions(session: AsyncSession, *, quiz_id: int) -> list[Question]:
        stmt = (
            select(Question)
            .where(Question.quiz_id == quiz_id)
            .order_by(Question.order.asc(), Question.id.asc())
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def list_options_for_questions(
        session: AsyncSession,
        question_ids: Sequence[int],
    ) -> list[AnswerOption]:
        ids = tuple(question_ids)
        if not ids:
            return []
        stmt = (
            select(AnswerOption)
            .where(AnswerOption.question_id.in_(ids))
            .order_by(AnswerOption.question_id.asc(), AnswerOption.id.asc())
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())
