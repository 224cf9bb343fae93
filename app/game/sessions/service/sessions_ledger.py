from __future__ import annotations

from datetime import datetime
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.quiz_sessions import QuizSession
from app.db.repo.quiz_answers_repo import QuizAnswersRepo
from app.db.repo.quiz_sessions_repo import QuizSessionsRepo
from app.game.questions.types import QuizContent
from app.game.sessions.errors import (
    SessionFinishedError,
    SessionNotFoundError,
    SessionOwnershipError,
)
from app.game.sessions.rules import elapsed_question_budgets, max_streak
from app.game.sessions.types import TimeoutBackfill

logger = structlog.get_logger(__name__)


async def load_owned_session_for_update(
    session: AsyncSession,
    *,
    session_id: UUID,
    user_id: int,
    quiz_id: int,
    allow_finished: bool = False,
) -> QuizSession:
    quiz_session = await QuizSessionsRepo.get_by_id_for_update(session, session_id)
    if quiz_session is None or quiz_session.quiz_id != quiz_id:
        raise SessionNotFoundError
    if quiz_session.user_id != user_id:
        raise SessionOwnershipError
    if quiz_session.finished_at is not None and not allow_finished:
        raise SessionFinishedError
    return quiz_session


async def force_finish(
    session: AsyncSession,
    *,
    quiz_session: QuizSession,
    now_utc: datetime,
    reason: str,
) -> None:
    """Close a live session without scoring it; finish still scores it once later."""
    correctness = await QuizAnswersRepo.list_correctness_in_order(session, session_id=quiz_session.id)
    quiz_session.max_streak = max_streak(correctness)
    quiz_session.current_question_started_at = None
    quiz_session.finished_at = now_utc
    await session.flush()
    logger.info(
        "quiz_session_force_finished",
        session_id=str(quiz_session.id),
        user_id=quiz_session.user_id,
        quiz_id=quiz_session.quiz_id,
        reason=reason,
    )


async def backfill_timeouts(
    session: AsyncSession,
    *,
    quiz_session: QuizSession,
    content: QuizContent,
    now_utc: datetime,
) -> TimeoutBackfill:
    current_index = int(quiz_session.current_question_index)
    started_at = quiz_session.current_question_started_at
    if started_at is None:
        return TimeoutBackfill(
            elapsed_questions=0,
            inserted_answers=0,
            question_index=current_index,
            is_exhausted=current_index >= content.total_questions,
        )

    remaining_questions = content.questions[current_index:]
    elapsed = elapsed_question_budgets(
        question_started_at=started_at,
        now_utc=now_utc,
        time_limits_ms=[question.time_limit_ms for question in remaining_questions],
    )
    if elapsed == 0:
        return TimeoutBackfill(
            elapsed_questions=0,
            inserted_answers=0,
            question_index=current_index,
            is_exhausted=current_index >= content.total_questions,
        )

    elapsed_questions = remaining_questions[:elapsed]
    answered_ids = await QuizAnswersRepo.list_answered_question_ids(
        session,
        session_id=quiz_session.id,
        question_ids=[question.question_id for question in elapsed_questions],
    )
    inserted = await QuizAnswersRepo.insert_timeouts(
        session,
        session_id=quiz_session.id,
        timeouts=[
            (question.question_id, question.time_limit_ms)
            for question in elapsed_questions
            if question.question_id not in answered_ids
        ],
        answered_at=now_utc,
    )

    new_index = current_index + elapsed
    quiz_session.current_question_index = new_index
    quiz_session.current_streak = 0
    quiz_session.current_question_started_at = None
    await session.flush()

    logger.info(
        "quiz_session_timeouts_backfilled",
        session_id=str(quiz_session.id),
        elapsed_questions=elapsed,
        inserted_answers=inserted,
        question_index=new_index,
    )
    return TimeoutBackfill(
        elapsed_questions=elapsed,
        inserted_answers=inserted,
        question_index=new_index,
        is_exhausted=new_index >= content.total_questions,
    )
