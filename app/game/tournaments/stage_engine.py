from __future__ import annotations

from datetime import datetime

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.repo.tournament_participants_repo import TournamentParticipantsRepo
from app.db.repo.tournament_stage_results_repo import TournamentStageResultsRepo
from app.db.repo.tournament_stages_repo import TournamentStagesRepo
from app.game.tournaments.constants import SCORING_ELIGIBLE_PARTICIPANT_STATUSES
from app.game.tournaments.rules import (
    passed_min_score,
    passed_top_n,
    prev_stages_passed,
    rank_from_count_above,
    stage_score,
)
from app.game.tournaments.types import StageOutcome, StageOutcomeKind, StageScore

logger = structlog.get_logger(__name__)


async def process_tournament_stage(
    session: AsyncSession,
    *,
    user_id: int,
    quiz_id: int,
    raw_score: int,
    now_utc: datetime,
) -> StageOutcome:
    """Credit a finished quiz to the user's tournament stage, at most once.

    Runs inside the caller's transaction. Ranks of other participants are not
    touched here and stay stale until their own next stage or finalization.
    """
    match = await TournamentStagesRepo.find_scoring_stage(
        session,
        user_id=user_id,
        quiz_id=quiz_id,
        now_utc=now_utc,
    )
    if match is None:
        return StageOutcome.not_a_tournament_quiz()
    stage, tournament = match

    # serializes concurrent finishes of the same user in this tournament
    participant = await TournamentParticipantsRepo.get_for_update(
        session,
        tournament_id=tournament.id,
        user_id=user_id,
    )
    if participant is None or participant.status not in SCORING_ELIGIBLE_PARTICIPANT_STATUSES:
        return StageOutcome.not_a_tournament_quiz()

    existing = await TournamentStageResultsRepo.get(session, stage_id=stage.id, user_id=user_id)
    if existing is not None and existing.completed_at is not None:
        logger.info(
            "tournament_stage_replay_ignored",
            tournament_id=str(tournament.id),
            stage_id=str(stage.id),
            user_id=user_id,
        )
        return StageOutcome.already_completed()

    if stage.order > 1:
        lower_stage_ids = await TournamentStagesRepo.list_lower_order_ids(
            session,
            tournament_id=tournament.id,
            order=stage.order,
        )
        lower_passed_total = await TournamentStageResultsRepo.count_passed(
            session,
            user_id=user_id,
            stage_ids=lower_stage_ids,
        )
        if not prev_stages_passed(
            stage_order=stage.order,
            lower_stages_total=len(lower_stage_ids),
            lower_passed_total=lower_passed_total,
        ):
            logger.info(
                "tournament_stage_out_of_sequence",
                tournament_id=str(tournament.id),
                stage_id=str(stage.id),
                stage_order=stage.order,
                user_id=user_id,
            )
            return StageOutcome.sequence_violation()

    score = stage_score(raw_score, stage.score_multiplier)
    min_score_ok = passed_min_score(score, stage.min_score)

    total_score = await TournamentParticipantsRepo.add_stage_score(
        session,
        tournament_id=tournament.id,
        user_id=user_id,
        score_delta=score,
    )
    if total_score is None:
        return StageOutcome.not_a_tournament_quiz()

    count_above = await TournamentParticipantsRepo.count_with_total_above(
        session,
        tournament_id=tournament.id,
        total_score=total_score,
    )
    rank = rank_from_count_above(count_above)
    passed = min_score_ok and passed_top_n(rank, stage.top_n)

    recorded = await TournamentStageResultsRepo.upsert_completed(
        session,
        stage_id=stage.id,
        user_id=user_id,
        score=score,
        rank=rank,
        passed=passed,
        completed_at=now_utc,
    )
    if not recorded:
        raise RuntimeError("tournament stage result completed concurrently")

    await TournamentParticipantsRepo.set_rank(
        session,
        tournament_id=tournament.id,
        user_id=user_id,
        rank=rank,
        current_stage=(stage.order + 1) if passed else None,
    )

    stages = await TournamentStagesRepo.list_for_tournament(session, tournament_id=tournament.id)
    next_stage = next((item for item in stages if item.order > stage.order), None)

    logger.info(
        "tournament_stage_scored",
        tournament_id=str(tournament.id),
        stage_id=str(stage.id),
        stage_order=stage.order,
        user_id=user_id,
        score=score,
        total_score=total_score,
        rank=rank,
        passed=passed,
    )
    return StageOutcome(
        kind=StageOutcomeKind.SCORED,
        scored=StageScore(
            tournament_id=tournament.id,
            tournament_title=tournament.title,
            stage_id=stage.id,
            stage_order=stage.order,
            total_stages=len(stages),
            score_multiplier=float(stage.score_multiplier),
            score=score,
            total_score=total_score,
            rank=rank,
            passed=passed,
            is_last_stage=next_stage is None,
            next_stage_title=next_stage.title if next_stage is not None else None,
        ),
    )
