from __future__ import annotations

from datetime import datetime

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.db.repo.leaderboard_repo import LeaderboardRepo
from app.db.repo.weekly_scores_repo import WeeklyScoresRepo
from app.game.leaderboard.constants import OVERTAKEN_NOTIFY_LIMIT, PERIOD_TYPE_ALL_TIME
from app.game.leaderboard.rules import is_new_best, score_breakdown, total_score
from app.game.leaderboard.types import LeaderboardUpdate, WeeklyUpdate
from app.game.leaderboard.week import week_start

logger = structlog.get_logger(__name__)


def _bonus_config() -> tuple[int, int]:
    settings = get_settings()
    return int(settings.activity_bonus_per_game), int(settings.max_activity_bonus)


async def record_all_time_finish(
    session: AsyncSession,
    *,
    user_id: int,
    quiz_id: int,
    game_score: int,
    now_utc: datetime,
) -> LeaderboardUpdate:
    per_game_bonus, max_bonus = _bonus_config()
    previous = await LeaderboardRepo.get_for_update(
        session,
        user_id=user_id,
        quiz_id=quiz_id,
        period_type=PERIOD_TYPE_ALL_TIME,
    )
    previous_best = previous.best_score if previous is not None else None
    previous_total = (
        total_score(
            previous.best_score,
            previous.attempts,
            per_game_bonus=per_game_bonus,
            max_bonus=max_bonus,
        )
        if previous is not None
        else 0
    )

    best_score, attempts = await LeaderboardRepo.record_finish(
        session,
        user_id=user_id,
        quiz_id=quiz_id,
        period_type=PERIOD_TYPE_ALL_TIME,
        game_score=game_score,
        now_utc=now_utc,
    )
    breakdown = score_breakdown(
        best_score,
        attempts,
        per_game_bonus=per_game_bonus,
        max_bonus=max_bonus,
    )
    new_total = breakdown.total_score
    new_best = is_new_best(previous_best, game_score)

    overtaken_user_ids: list[int] = []
    if new_best and new_total > previous_total:
        overtaken_user_ids = await LeaderboardRepo.list_user_ids_with_total_between(
            session,
            quiz_id=quiz_id,
            period_type=PERIOD_TYPE_ALL_TIME,
            above_total=previous_total,
            below_total=new_total,
            per_game_bonus=per_game_bonus,
            max_bonus=max_bonus,
            exclude_user_id=user_id,
            limit=OVERTAKEN_NOTIFY_LIMIT,
        )
        if overtaken_user_ids:
            logger.info(
                "leaderboard_overtaken_detected",
                user_id=user_id,
                quiz_id=quiz_id,
                overtaken_total=len(overtaken_user_ids),
            )

    return LeaderboardUpdate(
        best_score=best_score,
        attempts=attempts,
        activity_bonus=breakdown.activity_bonus,
        total_score=new_total,
        games_until_max_bonus=breakdown.games_until_max_bonus,
        is_new_best=new_best,
        overtaken_user_ids=overtaken_user_ids,
    )


async def record_weekly_finish(
    session: AsyncSession,
    *,
    user_id: int,
    game_score: int,
    now_utc: datetime,
) -> WeeklyUpdate:
    per_game_bonus, max_bonus = _bonus_config()
    current_week = week_start(now_utc)
    previous = await WeeklyScoresRepo.get_for_update(
        session,
        user_id=user_id,
        week_start=current_week,
    )
    best_score, quizzes = await WeeklyScoresRepo.record_finish(
        session,
        user_id=user_id,
        week_start=current_week,
        game_score=game_score,
        now_utc=now_utc,
    )
    breakdown = score_breakdown(
        best_score,
        quizzes,
        per_game_bonus=per_game_bonus,
        max_bonus=max_bonus,
    )
    return WeeklyUpdate(
        week_start=current_week,
        best_score=best_score,
        quizzes=quizzes,
        activity_bonus=breakdown.activity_bonus,
        total_score=breakdown.total_score,
        games_until_max_bonus=breakdown.games_until_max_bonus,
        is_new_best=is_new_best(previous.best_score if previous is not None else None, game_score),
    )
