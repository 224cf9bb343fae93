from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.db.repo.quiz_sessions_repo import QuizSessionsRepo
from app.game.sessions.errors import WrongQuestionIndexError
from app.game.sessions.service.sessions_ledger import load_owned_session_for_update
from app.game.sessions.types import ViewSignalResult


async def signal_question_view(
    session: AsyncSession,
    *,
    user_id: int,
    quiz_id: int,
    session_id: UUID,
    question_index: int,
    now_utc: datetime,
) -> ViewSignalResult:
    """Start the server timer once the client has rendered the question.

    A running timer is never restarted, so repeated signals cannot buy time.
    """
    quiz_session = await load_owned_session_for_update(
        session,
        session_id=session_id,
        user_id=user_id,
        quiz_id=quiz_id,
    )
    if quiz_session.current_question_index != question_index:
        raise WrongQuestionIndexError(
            expected=int(quiz_session.current_question_index),
            received=int(question_index),
        )

    started_at = quiz_session.current_question_started_at
    if started_at is None:
        await QuizSessionsRepo.start_question_timer_if_idle(
            session,
            session_id=quiz_session.id,
            question_index=question_index,
            started_at=now_utc,
        )
        started_at = now_utc

    return ViewSignalResult(
        question_index=question_index,
        server_time=now_utc,
        question_started_at=started_at,
    )
