from __future__ import annotations

from types import SimpleNamespace
from uuid import UUID

import pytest
from fastapi.testclient import TestClient

from app.api.routes import internal_tournaments
from app.game.tournaments.errors import TournamentNotFoundError
from app.game.tournaments.types import PrizeAward, TournamentFinalization
from app.main import app
from app.services import internal_auth
from tests.api.route_fixtures import FakeSessionLocal

TOURNAMENT_ID = UUID("5f1b7c7e-0000-4000-8000-0000000000aa")


@pytest.fixture
def internal_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        internal_auth,
        "get_settings",
        lambda: SimpleNamespace(
            internal_api_token="internal-secret",
            internal_api_allowlist="127.0.0.1/32",
        ),
    )
    monkeypatch.setattr(internal_auth, "extract_client_ip", lambda request: "127.0.0.1")
    monkeypatch.setattr(internal_tournaments, "SessionLocal", FakeSessionLocal())


def test_finalize_rejects_missing_token(internal_settings: None) -> None:
    response = TestClient(app).post(f"/internal/tournaments/{TOURNAMENT_ID}/finalize")

    assert response.status_code == 403
    assert response.json() == {"detail": {"error": "forbidden"}}


def test_finalize_rejects_disallowed_ip(monkeypatch: pytest.MonkeyPatch, internal_settings: None) -> None:
    monkeypatch.setattr(internal_auth, "extract_client_ip", lambda request: "10.0.0.25")

    response = TestClient(app).post(
        f"/internal/tournaments/{TOURNAMENT_ID}/finalize",
        headers={"X-Internal-Token": "internal-secret", "X-Forwarded-For": "127.0.0.1"},
    )

    assert response.status_code == 403


def test_finalize_rejects_malformed_id(internal_settings: None) -> None:
    response = TestClient(app).post(
        "/internal/tournaments/not-a-uuid/finalize",
        headers={"X-Internal-Token": "internal-secret"},
    )

    assert response.status_code == 400
    assert response.json() == {"detail": {"error": "invalid_tournament_id"}}


def test_finalize_unknown_tournament(monkeypatch: pytest.MonkeyPatch, internal_settings: None) -> None:
    async def missing_finalize(session, *, tournament_id, now_utc):  # noqa: ANN001
        del session, tournament_id, now_utc
        raise TournamentNotFoundError

    monkeypatch.setattr(internal_tournaments, "finalize_tournament", missing_finalize)

    response = TestClient(app).post(
        f"/internal/tournaments/{TOURNAMENT_ID}/finalize",
        headers={"X-Internal-Token": "internal-secret"},
    )

    assert response.status_code == 404
    assert response.json() == {"detail": {"error": "tournament_not_found"}}


def test_finalize_dispatches_winner_notifications(
    monkeypatch: pytest.MonkeyPatch,
    internal_settings: None,
) -> None:
    dispatched: list[tuple[int, dict[str, object]]] = []

    async def fake_finalize(session, *, tournament_id, now_utc):  # noqa: ANN001
        del session, now_utc
        return TournamentFinalization(
            tournament_id=tournament_id,
            tournament_title="Spring Cup",
            finalized_now=True,
            participants_total=8,
            awards=(PrizeAward(user_id=11, place=1, prize_type="xp", value=300, title="300 XP"),),
        )

    def fake_dispatch(notification_type, *, user_id, payload):  # noqa: ANN001
        del notification_type
        dispatched.append((user_id, payload))
        return True

    monkeypatch.setattr(internal_tournaments, "finalize_tournament", fake_finalize)
    monkeypatch.setattr(internal_tournaments, "dispatch_notification", fake_dispatch)

    response = TestClient(app).post(
        f"/internal/tournaments/{TOURNAMENT_ID}/finalize",
        headers={"X-Internal-Token": "internal-secret"},
    )

    assert response.status_code == 200
    assert response.json() == {
        "tournamentId": str(TOURNAMENT_ID),
        "finalizedNow": True,
        "participantsTotal": 8,
        "awards": [{"userId": 11, "place": 1, "type": "xp", "value": 300, "title": "300 XP"}],
    }
    assert dispatched == [
        (11, {"tournament_title": "Spring Cup", "place": 1, "prize_title": "300 XP"}),
    ]
