from __future__ import annotations

from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from app.db.repo.tournament_stage_results_repo import TournamentStageResultsRepo
from app.db.repo.tournament_stages_repo import TournamentStagesRepo
from app.game.tournaments.rules import (
    is_start_participant,
    is_within_start_window,
    prev_stages_completed,
)
from app.game.tournaments.types import NOT_A_TOURNAMENT_QUIZ_ACCESS, TournamentQuizAccess


async def evaluate_tournament_quiz_access(
    session: AsyncSession,
    *,
    user_id: int,
    quiz_id: int,
    now_utc: datetime,
) -> TournamentQuizAccess:
    candidates = await TournamentStagesRepo.list_start_candidates(
        session,
        user_id=user_id,
        quiz_id=quiz_id,
        now_utc=now_utc,
    )

    first_access: TournamentQuizAccess | None = None
    for stage, tournament, participant_status in candidates:
        is_within_window = is_within_start_window(
            status=tournament.status,
            ends_at=tournament.ends_at,
            now_utc=now_utc,
        )
        is_participant = is_start_participant(participant_status)

        prev_stages_ok = stage.order <= 1
        if is_participant and stage.order > 1:
            lower_stage_ids = await TournamentStagesRepo.list_lower_order_ids(
                session,
                tournament_id=tournament.id,
                order=stage.order,
            )
            lower_completed_total = await TournamentStageResultsRepo.count_completed(
                session,
                user_id=user_id,
                stage_ids=lower_stage_ids,
            )
            prev_stages_ok = prev_stages_completed(
                stage_order=stage.order,
                lower_stages_total=len(lower_stage_ids),
                lower_completed_total=lower_completed_total,
            )

        access = TournamentQuizAccess(
            is_within_window=is_within_window,
            is_participant=is_participant,
            prev_stages_ok=prev_stages_ok,
            tournament_id=tournament.id,
            tournament_title=tournament.title,
            stage_id=stage.id,
            stage_order=stage.order,
            stage_title=stage.title,
        )
        if access.is_tournament_quiz:
            return access
        if first_access is None:
            first_access = access

    return first_access if first_access is not None else NOT_A_TOURNAMENT_QUIZ_ACCESS
