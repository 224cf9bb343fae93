from __future__ import annotations

from datetime import datetime
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.quiz_sessions import QuizSession
from app.db.repo.quiz_answers_repo import QuizAnswersRepo
from app.db.repo.quiz_sessions_repo import QuizSessionsRepo
from app.db.repo.users_repo import UsersRepo
from app.economy.energy.time import utc_day_start
from app.game.achievements.rules import candidate_achievement_keys
from app.game.achievements.service import unlock_achievements
from app.game.leaderboard.service import record_all_time_finish, record_weekly_finish
from app.game.progression.service import grant_xp
from app.game.progression.xp import calculate_quiz_xp, level_title
from app.game.questions.catalog import get_quiz_content
from app.game.sessions.constants import USER_STATUS_IDLE
from app.game.sessions.rules import max_streak
from app.game.sessions.service.payloads import build_finish_payload
from app.game.sessions.service.sessions_ledger import load_owned_session_for_update
from app.game.sessions.types import FinishResult, PendingNotification
from app.game.tournaments.stage_engine import process_tournament_stage
from app.game.tournaments.types import StageOutcomeKind, StageScore
from app.services.notifications import NotificationType

logger = structlog.get_logger(__name__)


async def _process_stage_best_effort(
    session: AsyncSession,
    *,
    quiz_session: QuizSession,
    now_utc: datetime,
) -> StageScore | None:
    try:
        async with session.begin_nested():
            outcome = await process_tournament_stage(
                session,
                user_id=quiz_session.user_id,
                quiz_id=quiz_session.quiz_id,
                raw_score=int(quiz_session.total_score),
                now_utc=now_utc,
            )
    except Exception as exc:
        logger.warning(
            "tournament_stage_processing_failed",
            session_id=str(quiz_session.id),
            user_id=quiz_session.user_id,
            quiz_id=quiz_session.quiz_id,
            error_type=type(exc).__name__,
        )
        return None

    if outcome.kind is not StageOutcomeKind.SCORED:
        return None
    return outcome.scored


async def _unlock_achievements_best_effort(
    session: AsyncSession,
    *,
    quiz_session: QuizSession,
    candidate_keys: list[str],
    now_utc: datetime,
) -> list[str]:
    try:
        async with session.begin_nested():
            return await unlock_achievements(
                session,
                user_id=quiz_session.user_id,
                candidate_keys=candidate_keys,
                now_utc=now_utc,
            )
    except Exception as exc:
        logger.warning(
            "achievements_check_failed",
            session_id=str(quiz_session.id),
            user_id=quiz_session.user_id,
            error_type=type(exc).__name__,
        )
        return []


async def _overtaken_notifications(
    session: AsyncSession,
    *,
    user_id: int,
    quiz_title: str,
    overtaken_user_ids: list[int],
) -> list[PendingNotification]:
    if not overtaken_user_ids:
        return []
    user = await UsersRepo.get_by_id(session, user_id)
    overtaker = (user.username or user.first_name) if user is not None else None
    return [
        PendingNotification(
            notification_type=NotificationType.LEADERBOARD_OVERTAKEN.value,
            user_id=overtaken_user_id,
            payload={"overtaker": overtaker or "Another player", "quiz_title": quiz_title},
        )
        for overtaken_user_id in overtaken_user_ids
    ]


async def finish_quiz_session(
    session: AsyncSession,
    *,
    user_id: int,
    quiz_id: int,
    session_id: UUID,
    now_utc: datetime,
) -> FinishResult:
    quiz_session = await load_owned_session_for_update(
        session,
        session_id=session_id,
        user_id=user_id,
        quiz_id=quiz_id,
        allow_finished=True,
    )
    if quiz_session.finish_result is not None:
        return FinishResult(payload=dict(quiz_session.finish_result), already_finished=True)

    correctness = await QuizAnswersRepo.list_correctness_in_order(session, session_id=quiz_session.id)
    quiz_session.max_streak = max_streak(correctness)
    quiz_session.current_question_started_at = None
    if quiz_session.finished_at is None:
        quiz_session.finished_at = now_utc
    await session.flush()

    content = await get_quiz_content(session, quiz_id=quiz_id)
    total_questions = content.total_questions if content is not None else len(correctness)
    quiz_title = content.title if content is not None else ""
    correct_count = sum(1 for is_correct in correctness if is_correct)
    game_score = int(quiz_session.total_score)

    leaderboard = await record_all_time_finish(
        session,
        user_id=user_id,
        quiz_id=quiz_id,
        game_score=game_score,
        now_utc=now_utc,
    )
    weekly = await record_weekly_finish(
        session,
        user_id=user_id,
        game_score=game_score,
        now_utc=now_utc,
    )

    finished_today = await QuizSessionsRepo.count_finished_for_user_since(
        session,
        user_id=user_id,
        since_utc=utc_day_start(now_utc),
        exclude_session_id=quiz_session.id,
    )
    xp_breakdown = calculate_quiz_xp(
        correct_count=correct_count,
        total_questions=total_questions,
        max_streak=int(quiz_session.max_streak),
        is_first_quiz_of_day=finished_today == 0,
    )
    xp = await grant_xp(session, user_id=user_id, amount=xp_breakdown.total)

    stage = await _process_stage_best_effort(session, quiz_session=quiz_session, now_utc=now_utc)
    achievements = await _unlock_achievements_best_effort(
        session,
        quiz_session=quiz_session,
        candidate_keys=candidate_achievement_keys(
            game_score=game_score,
            correct_count=correct_count,
            total_questions=total_questions,
            max_streak=int(quiz_session.max_streak),
            tournament_stage_passed=stage is not None and stage.passed,
        ),
        now_utc=now_utc,
    )

    await UsersRepo.set_presence(
        session,
        user_id=user_id,
        current_quiz_id=None,
        status=USER_STATUS_IDLE,
        seen_at=now_utc,
    )

    payload = build_finish_payload(
        quiz_session=quiz_session,
        leaderboard=leaderboard,
        weekly=weekly,
        xp=xp,
        achievements=achievements,
        tournament=stage,
    )
    quiz_session.finish_result = payload
    await session.flush()

    notifications: list[PendingNotification] = []
    if xp.level_up and xp.new_level is not None:
        notifications.append(
            PendingNotification(
                notification_type=NotificationType.LEVEL_UP.value,
                user_id=user_id,
                payload={"level": xp.new_level, "title": level_title(xp.new_level)},
            )
        )
    notifications.extend(
        await _overtaken_notifications(
            session,
            user_id=user_id,
            quiz_title=quiz_title,
            overtaken_user_ids=leaderboard.overtaken_user_ids,
        )
    )

    logger.info(
        "quiz_session_finished",
        session_id=str(quiz_session.id),
        user_id=user_id,
        quiz_id=quiz_id,
        game_score=game_score,
        xp_earned=xp.earned,
        tournament_scored=stage is not None,
    )
    return FinishResult(
        payload=payload,
        already_finished=False,
        notifications=tuple(notifications),
    )
