from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from types import SimpleNamespace
from uuid import uuid4

import pytest

from app.game.tournaments import stage_engine
from app.game.tournaments.stage_engine import process_tournament_stage
from app.game.tournaments.types import StageOutcomeKind

UTC = timezone.utc
NOW = datetime(2026, 3, 4, 12, 0, tzinfo=UTC)

TOURNAMENT = SimpleNamespace(id=uuid4(), title="Spring Cup", status="ACTIVE")
STAGES = [
    SimpleNamespace(
        id=uuid4(),
        order=1,
        title="Qualifier",
        score_multiplier=Decimal("1.00"),
        min_score=None,
        top_n=None,
    ),
    SimpleNamespace(
        id=uuid4(),
        order=2,
        title="Semifinal",
        score_multiplier=Decimal("1.50"),
        min_score=100,
        top_n=3,
    ),
    SimpleNamespace(
        id=uuid4(),
        order=3,
        title="Final",
        score_multiplier=Decimal("2.00"),
        min_score=None,
        top_n=1,
    ),
]


@pytest.fixture
def engine_env(monkeypatch: pytest.MonkeyPatch) -> dict[str, object]:
    env: dict[str, object] = {
        "stage": STAGES[1],
        "participant": SimpleNamespace(total_score=100, status="ACTIVE"),
        "existing_result": None,
        "passed_lower": 1,
        "total_before": 100,
        "count_above": 1,
        "upsert_result": True,
        "upserts": [],
        "rank_updates": [],
    }

    async def fake_find_scoring_stage(session, *, user_id, quiz_id, now_utc):  # noqa: ANN001
        del session, user_id, quiz_id, now_utc
        if env["stage"] is None:
            return None
        return env["stage"], TOURNAMENT

    async def fake_get_for_update(session, *, tournament_id, user_id):  # noqa: ANN001
        del session, tournament_id, user_id
        return env["participant"]

    async def fake_get_result(session, *, stage_id, user_id):  # noqa: ANN001
        del session, stage_id, user_id
        return env["existing_result"]

    async def fake_list_lower_order_ids(session, *, tournament_id, order):  # noqa: ANN001
        del session, tournament_id
        return [stage.id for stage in STAGES if stage.order < order]

    async def fake_count_passed(session, *, user_id, stage_ids):  # noqa: ANN001
        del session, user_id, stage_ids
        return env["passed_lower"]

    async def fake_add_stage_score(session, *, tournament_id, user_id, score_delta):  # noqa: ANN001
        del session, tournament_id, user_id
        return int(env["total_before"]) + score_delta

    async def fake_count_with_total_above(session, *, tournament_id, total_score):  # noqa: ANN001
        del session, tournament_id, total_score
        return env["count_above"]

    async def fake_upsert_completed(session, **kwargs):  # noqa: ANN001
        del session
        env["upserts"].append(kwargs)
        return env["upsert_result"]

    async def fake_set_rank(session, *, tournament_id, user_id, rank, current_stage):  # noqa: ANN001
        del session, tournament_id, user_id
        env["rank_updates"].append((rank, current_stage))
        return 1

    async def fake_list_for_tournament(session, *, tournament_id):  # noqa: ANN001
        del session, tournament_id
        return STAGES

    stages_repo = stage_engine.TournamentStagesRepo
    participants_repo = stage_engine.TournamentParticipantsRepo
    results_repo = stage_engine.TournamentStageResultsRepo
    monkeypatch.setattr(stages_repo, "find_scoring_stage", fake_find_scoring_stage)
    monkeypatch.setattr(stages_repo, "list_lower_order_ids", fake_list_lower_order_ids)
    monkeypatch.setattr(stages_repo, "list_for_tournament", fake_list_for_tournament)
    monkeypatch.setattr(participants_repo, "get_for_update", fake_get_for_update)
    monkeypatch.setattr(participants_repo, "add_stage_score", fake_add_stage_score)
    monkeypatch.setattr(participants_repo, "count_with_total_above", fake_count_with_total_above)
    monkeypatch.setattr(participants_repo, "set_rank", fake_set_rank)
    monkeypatch.setattr(results_repo, "get", fake_get_result)
    monkeypatch.setattr(results_repo, "count_passed", fake_count_passed)
    monkeypatch.setattr(results_repo, "upsert_completed", fake_upsert_completed)
    return env


async def _process(raw_score: int) -> object:
    return await process_tournament_stage(
        object(),
        user_id=1,
        quiz_id=7,
        raw_score=raw_score,
        now_utc=NOW,
    )


async def test_passing_stage_advances_participant(engine_env: dict[str, object]) -> None:
    outcome = await _process(80)

    assert outcome.kind is StageOutcomeKind.SCORED
    scored = outcome.scored
    assert scored.score == 120
    assert scored.total_score == 220
    assert scored.rank == 2
    assert scored.passed is True
    assert scored.stage_order == 2
    assert scored.total_stages == 3
    assert scored.score_multiplier == 1.5
    assert scored.is_last_stage is False
    assert scored.next_stage_title == "Final"
    assert engine_env["rank_updates"] == [(2, 3)]
    assert engine_env["upserts"][0]["passed"] is True
    assert engine_env["upserts"][0]["completed_at"] == NOW


async def test_stage_below_min_score_fails_regardless_of_rank(engine_env: dict[str, object]) -> None:
    engine_env["count_above"] = 0

    outcome = await _process(50)

    assert outcome.kind is StageOutcomeKind.SCORED
    assert outcome.scored.score == 75
    assert outcome.scored.rank == 1
    assert outcome.scored.passed is False
    assert engine_env["rank_updates"] == [(1, None)]


async def test_stage_outside_top_n_fails(engine_env: dict[str, object]) -> None:
    engine_env["count_above"] = 3

    outcome = await _process(200)

    assert outcome.scored.rank == 4
    assert outcome.scored.passed is False


async def test_last_stage_has_no_next_stage(engine_env: dict[str, object]) -> None:
    engine_env["stage"] = STAGES[2]
    engine_env["passed_lower"] = 2
    engine_env["count_above"] = 0

    outcome = await _process(100)

    assert outcome.scored.score == 200
    assert outcome.scored.is_last_stage is True
    assert outcome.scored.next_stage_title is None
    assert engine_env["rank_updates"] == [(1, 4)]


async def test_completed_stage_is_never_rescored(engine_env: dict[str, object]) -> None:
    engine_env["existing_result"] = SimpleNamespace(completed_at=NOW, score=90, passed=False)

    outcome = await _process(500)

    assert outcome.kind is StageOutcomeKind.ALREADY_COMPLETED
    assert outcome.scored is None
    assert engine_env["upserts"] == []
    assert engine_env["rank_updates"] == []


async def test_uncompleted_placeholder_result_does_not_block(engine_env: dict[str, object]) -> None:
    engine_env["existing_result"] = SimpleNamespace(completed_at=None, score=0, passed=False)

    outcome = await _process(80)

    assert outcome.kind is StageOutcomeKind.SCORED


async def test_stage_requires_lower_stages_passed(engine_env: dict[str, object]) -> None:
    engine_env["passed_lower"] = 0

    outcome = await _process(80)

    assert outcome.kind is StageOutcomeKind.SEQUENCE_VIOLATION
    assert engine_env["upserts"] == []


async def test_quiz_without_scoring_stage(engine_env: dict[str, object]) -> None:
    engine_env["stage"] = None

    outcome = await _process(80)

    assert outcome.kind is StageOutcomeKind.NOT_A_TOURNAMENT_QUIZ


async def test_missing_participant_is_not_a_tournament_quiz(engine_env: dict[str, object]) -> None:
    engine_env["participant"] = None

    outcome = await _process(80)

    assert outcome.kind is StageOutcomeKind.NOT_A_TOURNAMENT_QUIZ


async def test_concurrent_completion_raises_to_roll_back(engine_env: dict[str, object]) -> None:
    engine_env["upsert_result"] = False

    with pytest.raises(RuntimeError):
        await _process(80)

    assert engine_env["rank_updates"] == []


async def test_participant_finished_while_waiting_for_lock_is_not_scored(
    engine_env: dict[str, object],
) -> None:
    engine_env["participant"] = SimpleNamespace(total_score=220, status="FINISHED")

    outcome = await _process(80)

    assert outcome.kind is StageOutcomeKind.NOT_A_TOURNAMENT_QUIZ
    assert engine_env["upserts"] == []
    assert engine_env["rank_updates"] == []
