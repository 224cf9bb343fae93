from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID

import pytest
from fastapi.testclient import TestClient

from app.api.routes import tournaments as tournament_routes
from app.game.tournaments.errors import (
    TournamentAlreadyRegisteredError,
    TournamentClosedError,
    TournamentFullError,
    TournamentInsufficientXpError,
    TournamentNotFoundError,
)
from app.game.tournaments.types import (
    LeaderboardRow,
    TournamentLeaderboard,
    TournamentRegistration,
)
from app.main import app
from tests.api.route_fixtures import FakeSessionLocal, player

TOURNAMENT_ID = UUID("5f1b7c7e-0000-4000-8000-0000000000aa")
NOW = datetime(2026, 3, 4, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def authenticated(monkeypatch: pytest.MonkeyPatch) -> None:
    async def fake_authenticate(request, session, *, now):  # noqa: ANN001
        del request, session, now
        return player(3)

    monkeypatch.setattr(tournament_routes, "SessionLocal", FakeSessionLocal())
    monkeypatch.setattr(tournament_routes, "authenticate", fake_authenticate)


def test_register_returns_registration(monkeypatch: pytest.MonkeyPatch) -> None:
    async def fake_register(session, *, user_id, id_or_slug, now_utc):  # noqa: ANN001
        del session, now_utc
        assert (user_id, id_or_slug) == (3, "spring-cup")
        return TournamentRegistration(
            tournament_id=TOURNAMENT_ID,
            slug="spring-cup",
            status="REGISTERED",
            entry_fee_xp=200,
            xp_after=300,
            joined_at=NOW,
        )

    monkeypatch.setattr(tournament_routes, "register_for_tournament", fake_register)

    response = TestClient(app).post("/api/tournaments/spring-cup/register")

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "tournamentId": str(TOURNAMENT_ID),
        "slug": "spring-cup",
        "status": "REGISTERED",
        "entryFeeXp": 200,
        "xpAfter": 300,
        "joinedAt": NOW.isoformat(),
    }


@pytest.mark.parametrize(
    ("exc", "status_code", "detail"),
    [
        (TournamentNotFoundError(), 404, {"error": "tournament_not_found"}),
        (TournamentClosedError(), 400, {"error": "tournament_ended"}),
        (TournamentFullError(), 400, {"error": "tournament_full"}),
        (TournamentAlreadyRegisteredError(), 409, {"error": "already_registered"}),
        (
            TournamentInsufficientXpError(required_xp=1000, current_xp=500),
            400,
            {"error": "insufficient_xp", "requiredXp": 1000, "currentXp": 500},
        ),
    ],
)
def test_register_maps_errors(
    monkeypatch: pytest.MonkeyPatch,
    exc: Exception,
    status_code: int,
    detail: dict[str, object],
) -> None:
    async def failing_register(session, **kwargs):  # noqa: ANN001, ANN003
        del session, kwargs
        raise exc

    monkeypatch.setattr(tournament_routes, "register_for_tournament", failing_register)

    response = TestClient(app).post("/api/tournaments/spring-cup/register")

    assert response.status_code == status_code
    assert response.json() == {"detail": detail}


def test_leaderboard_passes_paging(monkeypatch: pytest.MonkeyPatch) -> None:
    seen: dict[str, object] = {}

    async def fake_leaderboard(session, *, id_or_slug, viewer_user_id, limit, offset):  # noqa: ANN001
        del session
        seen.update(id_or_slug=id_or_slug, viewer_user_id=viewer_user_id, limit=limit, offset=offset)
        return TournamentLeaderboard(
            tournament_id=TOURNAMENT_ID,
            slug="spring-cup",
            title="Spring Cup",
            status="ACTIVE",
            participants_total=12,
            rows=(
                LeaderboardRow(
                    position=11,
                    user_id=3,
                    username="anna",
                    first_name="Anna",
                    total_score=220,
                    current_stage=2,
                    status="ACTIVE",
                ),
            ),
            my_position=11,
            my_total_score=220,
        )

    monkeypatch.setattr(tournament_routes, "get_tournament_leaderboard", fake_leaderboard)

    response = TestClient(app).get("/api/tournaments/spring-cup/leaderboard?limit=1&offset=10")

    assert response.status_code == 200
    assert seen == {"id_or_slug": "spring-cup", "viewer_user_id": 3, "limit": 1, "offset": 10}
    body = response.json()
    assert body["participantsTotal"] == 12
    assert body["leaderboard"] == [
        {
            "position": 11,
            "userId": 3,
            "username": "anna",
            "firstName": "Anna",
            "totalScore": 220,
            "currentStage": 2,
            "status": "ACTIVE",
        }
    ]
    assert body["myPosition"] == 11


def test_leaderboard_rejects_negative_offset() -> None:
    response = TestClient(app).get("/api/tournaments/spring-cup/leaderboard?offset=-1")

    assert response.status_code == 422
