from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from app.db.models.tournament_participants import TournamentParticipant
from app.db.models.tournament_stage_results import TournamentStageResult
from app.db.session import SessionLocal
from app.game.tournaments.stage_engine import process_tournament_stage
from app.game.tournaments.types import StageOutcomeKind
from tests.integration.tournament_fixtures import (
    _add_participant,
    _add_stage_result,
    _create_quiz,
    _create_tournament,
    _create_user,
)

UTC = timezone.utc


async def _seed_spring_cup(now_utc: datetime):  # noqa: ANN202
    qualifier_quiz = await _create_quiz("Qualifier")
    semifinal_quiz = await _create_quiz("Semifinal")
    final_quiz = await _create_quiz("Final")
    tournament_id, stage_ids = await _create_tournament(
        slug="spring-cup",
        stages=[
            {"quiz_id": qualifier_quiz, "title": "Qualifier", "multiplier": "1.00"},
            {
                "quiz_id": semifinal_quiz,
                "title": "Semifinal",
                "multiplier": "1.50",
                "min_score": 100,
                "top_n": 3,
            },
            {"quiz_id": final_quiz, "title": "Final", "multiplier": "2.00", "top_n": 1},
        ],
        now_utc=now_utc,
    )
    return tournament_id, stage_ids, semifinal_quiz


@pytest.mark.asyncio
async def test_semifinal_is_scored_once_and_ranked() -> None:
    now_utc = datetime.now(UTC)
    tournament_id, stage_ids, semifinal_quiz = await _seed_spring_cup(now_utc)

    anna = await _create_user("anna", telegram_user_id=10_001)
    await _add_participant(
        tournament_id=tournament_id,
        user_id=anna,
        total_score=100,
        now_utc=now_utc,
        current_stage=2,
    )
    await _add_stage_result(
        stage_id=stage_ids[0],
        user_id=anna,
        score=100,
        passed=True,
        completed_at=now_utc - timedelta(hours=1),
    )
    for index, total_score in enumerate((300, 150, 50), start=1):
        rival = await _create_user(f"rival_{index}", telegram_user_id=20_000 + index)
        await _add_participant(
            tournament_id=tournament_id,
            user_id=rival,
            total_score=total_score,
            now_utc=now_utc,
        )

    async with SessionLocal.begin() as session:
        outcome = await process_tournament_stage(
            session,
            user_id=anna,
            quiz_id=semifinal_quiz,
            raw_score=80,
            now_utc=now_utc,
        )

    assert outcome.kind is StageOutcomeKind.SCORED
    assert outcome.scored is not None
    assert outcome.scored.score == 120
    assert outcome.scored.total_score == 220
    assert outcome.scored.rank == 2
    assert outcome.scored.passed is True
    assert outcome.scored.next_stage_title == "Final"

    async with SessionLocal.begin() as session:
        replay = await process_tournament_stage(
            session,
            user_id=anna,
            quiz_id=semifinal_quiz,
            raw_score=500,
            now_utc=now_utc + timedelta(minutes=5),
        )

    assert replay.kind is StageOutcomeKind.ALREADY_COMPLETED

    async with SessionLocal.begin() as session:
        participant = await session.get(TournamentParticipant, (tournament_id, anna))
        result = await session.get(TournamentStageResult, (stage_ids[1], anna))

    assert participant is not None
    assert participant.total_score == 220
    assert participant.rank == 2
    assert participant.current_stage == 3
    assert result is not None
    assert result.score == 120
    assert result.passed is True


@pytest.mark.asyncio
async def test_stage_out_of_sequence_is_not_scored() -> None:
    now_utc = datetime.now(UTC)
    tournament_id, stage_ids, semifinal_quiz = await _seed_spring_cup(now_utc)

    boris = await _create_user("boris", telegram_user_id=10_002)
    await _add_participant(tournament_id=tournament_id, user_id=boris, total_score=0, now_utc=now_utc)

    async with SessionLocal.begin() as session:
        outcome = await process_tournament_stage(
            session,
            user_id=boris,
            quiz_id=semifinal_quiz,
            raw_score=90,
            now_utc=now_utc,
        )

    assert outcome.kind is StageOutcomeKind.SEQUENCE_VIOLATION

    async with SessionLocal.begin() as session:
        participant = await session.get(TournamentParticipant, (tournament_id, boris))
        result = await session.get(TournamentStageResult, (stage_ids[1], boris))

    assert participant is not None
    assert participant.total_score == 0
    assert result is None
