from __future__ import annotations

from datetime import datetime, timedelta
from uuid import uuid4

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.db.models.quiz_sessions import QuizSession
from app.db.repo.quiz_sessions_repo import QuizSessionsRepo
from app.db.repo.users_repo import UsersRepo
from app.economy.energy.service import EnergyGate
from app.economy.energy.types import EnergyGateRejection
from app.game.questions.catalog import get_quiz_content, public_questions
from app.game.questions.types import QuizContent
from app.game.sessions.constants import (
    SESSION_START_KIND_COMPLETED,
    SESSION_START_KIND_CREATED,
    SESSION_START_KIND_REJECTED,
    SESSION_START_KIND_RESUMED,
    USER_STATUS_PLAYING,
)
from app.game.sessions.errors import QuizNotFoundError, UserNotFoundError
from app.game.sessions.rules import is_abandoned
from app.game.sessions.service.payloads import (
    build_completed_payload,
    build_created_payload,
    build_rejection_payload,
    build_resumed_payload,
)
from app.game.sessions.service.sessions_ledger import backfill_timeouts, force_finish
from app.game.sessions.types import PendingNotification, SessionStartResult
from app.game.tournaments.eligibility import evaluate_tournament_quiz_access
from app.services.notifications import NotificationType

logger = structlog.get_logger(__name__)


def _rejected(rejection: EnergyGateRejection) -> SessionStartResult:
    return SessionStartResult(
        kind=SESSION_START_KIND_REJECTED,
        payload=build_rejection_payload(rejection),
        rejection=rejection,
    )


async def _resume_live_session(
    session: AsyncSession,
    *,
    quiz_session: QuizSession,
    content: QuizContent,
    now_utc: datetime,
) -> SessionStartResult:
    backfill = await backfill_timeouts(
        session,
        quiz_session=quiz_session,
        content=content,
        now_utc=now_utc,
    )
    if backfill.is_exhausted:
        await force_finish(session, quiz_session=quiz_session, now_utc=now_utc, reason="timed_out")
        return SessionStartResult(
            kind=SESSION_START_KIND_COMPLETED,
            payload=build_completed_payload(
                quiz_session=quiz_session,
                content=content,
                skipped_questions=backfill.elapsed_questions,
            ),
            session_id=quiz_session.id,
        )

    return SessionStartResult(
        kind=SESSION_START_KIND_RESUMED,
        payload=build_resumed_payload(
            quiz_session=quiz_session,
            content=content,
            questions=public_questions(content),
            skipped_questions=backfill.elapsed_questions,
        ),
        session_id=quiz_session.id,
    )


async def start_quiz_session(
    session: AsyncSession,
    *,
    user_id: int,
    quiz_id: int,
    now_utc: datetime,
) -> SessionStartResult:
    settings = get_settings()
    content = await get_quiz_content(session, quiz_id=quiz_id)
    if content is None or content.total_questions == 0:
        raise QuizNotFoundError

    user = await UsersRepo.get_by_id(session, user_id)
    if user is None:
        raise UserNotFoundError

    live_session = await QuizSessionsRepo.get_live_for_update(session, user_id=user_id, quiz_id=quiz_id)
    if live_session is not None and not is_abandoned(
        live_session.current_question_started_at,
        now_utc=now_utc,
        abandon_seconds=int(settings.quiz_session_abandon_seconds),
    ):
        return await _resume_live_session(
            session,
            quiz_session=live_session,
            content=content,
            now_utc=now_utc,
        )

    # read before the abandoned session below gets a finish time of "now"
    rate_limit = await EnergyGate.check_rate_limit(
        session,
        user_id=user_id,
        quiz_id=quiz_id,
        now_utc=now_utc,
    )
    if rate_limit is not None:
        logger.info("quiz_start_rate_limited", user_id=user_id, quiz_id=quiz_id, wait_seconds=rate_limit.wait_seconds)
        return _rejected(rate_limit)

    if live_session is not None:
        await force_finish(session, quiz_session=live_session, now_utc=now_utc, reason="abandoned")

    access = await evaluate_tournament_quiz_access(
        session,
        user_id=user_id,
        quiz_id=quiz_id,
        now_utc=now_utc,
    )
    decision = await EnergyGate.admit(
        session,
        user_id=user_id,
        now_utc=now_utc,
        is_tournament_quiz=access.is_tournament_quiz,
    )
    if isinstance(decision, EnergyGateRejection):
        return _rejected(decision)

    attempts_total = await QuizSessionsRepo.count_for_user_quiz(session, user_id=user_id, quiz_id=quiz_id)
    quiz_session = await QuizSessionsRepo.create(
        session,
        quiz_session=QuizSession(
            id=uuid4(),
            user_id=user_id,
            quiz_id=quiz_id,
            attempt_number=attempts_total + 1,
            current_question_index=0,
            current_question_started_at=None,
            current_streak=0,
            max_streak=0,
            total_score=0,
            energy_exempt=decision.energy_exempt,
            used_bonus_energy=decision.used_bonus_energy,
            started_at=now_utc,
            finished_at=None,
            finish_result=None,
        ),
    )
    await UsersRepo.set_presence(
        session,
        user_id=user_id,
        current_quiz_id=quiz_id,
        status=USER_STATUS_PLAYING,
        seen_at=now_utc,
    )

    notifications: tuple[PendingNotification, ...] = ()
    if not decision.energy_exempt and not settings.energy_bypass:
        notifications = (
            PendingNotification(
                notification_type=NotificationType.ENERGY_RESTORED.value,
                user_id=user_id,
                payload={},
                eta=quiz_session.started_at
                + timedelta(seconds=int(settings.energy_attempt_cooldown_seconds)),
            ),
        )

    logger.info(
        "quiz_session_created",
        session_id=str(quiz_session.id),
        user_id=user_id,
        quiz_id=quiz_id,
        attempt_number=quiz_session.attempt_number,
        is_tournament_quiz=access.is_tournament_quiz,
        used_bonus_energy=decision.used_bonus_energy,
    )
    return SessionStartResult(
        kind=SESSION_START_KIND_CREATED,
        payload=build_created_payload(
            quiz_session=quiz_session,
            content=content,
            questions=public_questions(content),
            gate_pass=decision,
            access=access,
        ),
        session_id=quiz_session.id,
        notifications=notifications,
    )
