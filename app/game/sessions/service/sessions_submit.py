from __future__ import annotations

from datetime import datetime
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.db.repo.quiz_answers_repo import QuizAnswersRepo
from app.game.questions.catalog import get_quiz_content
from app.game.questions.types import QuestionContent, QuizContent
from app.game.sessions.errors import (
    AlreadyAnsweredError,
    AnswerTimeoutError,
    InvalidAnswerOptionError,
    QuestionNotFoundError,
    QuestionNotStartedError,
    QuizNotFoundError,
    WrongQuestionIndexError,
)
from app.game.sessions.rules import answer_score, answer_timing
from app.game.sessions.service.sessions_ledger import load_owned_session_for_update
from app.game.sessions.types import AnswerResult, TimeoutResult

logger = structlog.get_logger(__name__)


async def _load_content(session: AsyncSession, *, quiz_id: int) -> QuizContent:
    content = await get_quiz_content(session, quiz_id=quiz_id)
    if content is None:
        raise QuizNotFoundError
    return content


def _question_index(content: QuizContent, question_id: int) -> int | None:
    for index, question in enumerate(content.questions):
        if question.question_id == question_id:
            return index
    return None


def _correct_option_id(question: QuestionContent) -> int | None:
    for option in question.options:
        if option.is_correct:
            return option.option_id
    return None


async def submit_answer(
    session: AsyncSession,
    *,
    user_id: int,
    quiz_id: int,
    session_id: UUID,
    question_id: int,
    option_id: int,
    now_utc: datetime,
) -> AnswerResult:
    content = await _load_content(session, quiz_id=quiz_id)
    quiz_session = await load_owned_session_for_update(
        session,
        session_id=session_id,
        user_id=user_id,
        quiz_id=quiz_id,
    )

    question_index = _question_index(content, question_id)
    if question_index is None:
        raise QuestionNotFoundError
    current_index = int(quiz_session.current_question_index)
    if question_index < current_index:
        raise AlreadyAnsweredError
    if question_index != current_index:
        raise WrongQuestionIndexError(expected=current_index, received=question_index)

    question = content.questions[question_index]
    option = question.option(option_id)
    if option is None:
        raise InvalidAnswerOptionError
    if quiz_session.current_question_started_at is None:
        raise QuestionNotStartedError

    timing = answer_timing(
        question_started_at=quiz_session.current_question_started_at,
        now_utc=now_utc,
        time_limit_ms=question.time_limit_ms,
        grace_ms=int(get_settings().quiz_answer_grace_ms),
    )
    if timing.is_late:
        raise AnswerTimeoutError

    score = answer_score(
        is_correct=option.is_correct,
        time_spent_ms=timing.time_spent_ms,
        time_limit_ms=question.time_limit_ms,
        streak_before=int(quiz_session.current_streak),
    )
    created = await QuizAnswersRepo.create_once(
        session,
        session_id=quiz_session.id,
        question_id=question.question_id,
        option_id=option.option_id,
        is_correct=option.is_correct,
        time_spent_ms=timing.time_spent_ms,
        score_delta=score.total,
        answered_at=now_utc,
    )
    if not created:
        raise AlreadyAnsweredError

    quiz_session.total_score = int(quiz_session.total_score) + score.total
    quiz_session.current_streak = int(quiz_session.current_streak) + 1 if option.is_correct else 0
    quiz_session.current_question_index = current_index + 1
    quiz_session.current_question_started_at = None
    await session.flush()

    logger.info(
        "quiz_answer_recorded",
        session_id=str(quiz_session.id),
        question_id=question.question_id,
        is_correct=option.is_correct,
        score_delta=score.total,
        time_spent_ms=timing.time_spent_ms,
    )
    return AnswerResult(
        correct=option.is_correct,
        score=score,
        time_spent_ms=timing.time_spent_ms,
        total_score=int(quiz_session.total_score),
        streak=int(quiz_session.current_streak),
        current_question_index=int(quiz_session.current_question_index),
        correct_option_id=_correct_option_id(question),
        is_last_question=quiz_session.current_question_index >= content.total_questions,
    )


async def record_timeout(
    session: AsyncSession,
    *,
    user_id: int,
    quiz_id: int,
    session_id: UUID,
    question_id: int,
    now_utc: datetime,
) -> TimeoutResult:
    content = await _load_content(session, quiz_id=quiz_id)
    quiz_session = await load_owned_session_for_update(
        session,
        session_id=session_id,
        user_id=user_id,
        quiz_id=quiz_id,
    )
    current_index = int(quiz_session.current_question_index)
    question = content.question_at(current_index)
    if question is None or question.question_id != question_id:
        return TimeoutResult(
            skipped=False,
            current_question_index=current_index,
            total_score=int(quiz_session.total_score),
            streak=int(quiz_session.current_streak),
            is_last_question=current_index >= content.total_questions,
            message="question_already_processed",
        )

    inserted = await QuizAnswersRepo.insert_timeouts(
        session,
        session_id=quiz_session.id,
        timeouts=[(question.question_id, question.time_limit_ms)],
        answered_at=now_utc,
    )
    quiz_session.current_question_index = current_index + 1
    quiz_session.current_question_started_at = None
    quiz_session.current_streak = 0
    await session.flush()

    logger.info(
        "quiz_question_timed_out",
        session_id=str(quiz_session.id),
        question_id=question.question_id,
        inserted=inserted,
    )
    return TimeoutResult(
        skipped=True,
        current_question_index=int(quiz_session.current_question_index),
        total_score=int(quiz_session.total_score),
        streak=0,
        is_last_question=quiz_session.current_question_index >= content.total_questions,
    )
