from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.quiz_answers import QuizAnswer
from app.db.models.quizzes import Question


class QuizAnswersRepo:
    @staticmethod
    async def list_answered_question_ids(
        session: AsyncSession,
        *,
        session_id: UUID,
        question_ids: Sequence[int],
    ) -> set[int]:
        ids = tuple(question_ids)
        if not ids:
            return set()
        stmt = select(QuizAnswer.question_id).where(
            QuizAnswer.session_id == session_id,
            QuizAnswer.question_id.in_(ids),
        )
        result = await session.execute(stmt)
        return {int(question_id) for question_id in result.scalars().all()}

    @staticmethod
    async def insert_timeouts(
        session: AsyncSession,
        *,
        session_id: UUID,
        timeouts: Sequence[tuple[int, int]],
        answered_at: datetime,
    ) -> int:
        if not timeouts:
            return 0
        stmt = (
            insert(QuizAnswer)
            .values(
                [
                    {
                        "session_id": session_id,
                        "question_id": question_id,
                        "option_id": None,
                        "is_correct": False,
                        "time_spent_ms": time_spent_ms,
                        "score_delta": 0,
                        "answered_at": answered_at,
                    }
                    for question_id, time_spent_ms in timeouts
                ]
            )
            .on_conflict_do_nothing(
                index_elements=[QuizAnswer.session_id, QuizAnswer.question_id]
            )
            .returning(QuizAnswer.question_id)
        )
        result = await session.execute(stmt)
        return len(result.scalars().all())

    @staticmethod
    async def create_once(
        session: AsyncSession,
        *,
        session_id: UUID,
        question_id: int,
        option_id: int | None,
        is_correct: bool,
        time_spent_ms: int,
        score_delta: int,
        answered_at: datetime,
    ) -> bool:
        stmt = (
            insert(QuizAnswer)
            .values(
                session_id=session_id,
                question_id=question_id,
                option_id=option_id,
                is_correct=is_correct,
                time_spent_ms=time_spent_ms,
                score_delta=score_delta,
                answered_at=answered_at,
            )
            .on_conflict_do_nothing(
                index_elements=[QuizAnswer.session_id, QuizAnswer.question_id]
            )
            .returning(QuizAnswer.id)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None

    @staticmethod
    async def list_correctness_in_order(session: AsyncSession, *, session_id: UUID) -> list[bool]:
        stmt = (
            select(QuizAnswer.is_correct)
            .join(Question, Question.id == QuizAnswer.question_id)
            .where(QuizAnswer.session_id == session_id)
            .order_by(Question.order.asc(), QuizAnswer.answered_at.asc())
        )
        result = await session.execute(stmt)
        return [bool(value) for value in result.scalars().all()]
