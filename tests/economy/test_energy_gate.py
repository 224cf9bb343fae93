from __future__ import annotations

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from app.economy.energy import service as energy_service
from app.economy.energy.service import EnergyGate
from app.economy.energy.types import EnergyGateCode, EnergyGatePass, EnergyGateRejection

UTC = timezone.utc
NOW = datetime(2026, 3, 4, 12, 0, tzinfo=UTC)


def _settings(**overrides: object) -> SimpleNamespace:
    values: dict[str, object] = {
        "energy_max_attempts": 5,
        "energy_attempt_cooldown_seconds": 4 * 60 * 60,
        "energy_bypass": False,
        "quiz_rate_limit_seconds": 60,
    }
    values.update(overrides)
    return SimpleNamespace(**values)


@pytest.fixture
def gate_state(monkeypatch: pytest.MonkeyPatch) -> dict[str, object]:
    state: dict[str, object] = {
        "started_at": [],
        "bonus_energy": 0,
        "consume_calls": 0,
        "last_finished_at": None,
        "settings": _settings(),
    }

    async def fake_list_counted_started_at_since(session, *, user_id, since_utc):  # noqa: ANN001
        del session, user_id
        return [value for value in state["started_at"] if value > since_utc]

    async def fake_get_by_id(session, user_id):  # noqa: ANN001
        del session, user_id
        return SimpleNamespace(bonus_energy=state["bonus_energy"])

    async def fake_consume_bonus_energy(session, *, user_id):  # noqa: ANN001
        del session, user_id
        state["consume_calls"] = int(state["consume_calls"]) + 1
        if int(state["bonus_energy"]) <= 0:
            return None
        state["bonus_energy"] = int(state["bonus_energy"]) - 1
        return state["bonus_energy"]

    async def fake_get_last_finished_at(session, *, user_id, quiz_id):  # noqa: ANN001
        del session, user_id, quiz_id
        return state["last_finished_at"]

    monkeypatch.setattr(
        energy_service.QuizSessionsRepo,
        "list_counted_started_at_since",
        fake_list_counted_started_at_since,
    )
    monkeypatch.setattr(
        energy_service.QuizSessionsRepo,
        "get_last_finished_at",
        fake_get_last_finished_at,
    )
    monkeypatch.setattr(energy_service.UsersRepo, "get_by_id", fake_get_by_id)
    monkeypatch.setattr(energy_service.UsersRepo, "consume_bonus_energy", fake_consume_bonus_energy)
    monkeypatch.setattr(energy_service, "get_settings", lambda: state["settings"])
    return state


async def test_admit_allows_while_attempts_remain(gate_state: dict[str, object]) -> None:
    gate_state["started_at"] = [NOW - timedelta(hours=1)] * 4

    decision = await EnergyGate.admit(object(), user_id=1, now_utc=NOW, is_tournament_quiz=False)

    assert isinstance(decision, EnergyGatePass)
    assert decision.used_attempts == 4
    assert decision.used_bonus_energy is False
    assert decision.remaining_attempts == 0
    assert gate_state["consume_calls"] == 0


async def test_admit_ignores_sessions_older_than_cooldown(gate_state: dict[str, object]) -> None:
    gate_state["started_at"] = [NOW - timedelta(hours=5)] * 5

    decision = await EnergyGate.admit(object(), user_id=1, now_utc=NOW, is_tournament_quiz=False)

    assert isinstance(decision, EnergyGatePass)
    assert decision.used_attempts == 0


async def test_admit_spends_bonus_energy_when_depleted(gate_state: dict[str, object]) -> None:
    gate_state["started_at"] = [NOW - timedelta(minutes=minutes) for minutes in (10, 20, 30, 40, 50)]
    gate_state["bonus_energy"] = 2

    decision = await EnergyGate.admit(object(), user_id=1, now_utc=NOW, is_tournament_quiz=False)

    assert isinstance(decision, EnergyGatePass)
    assert decision.used_bonus_energy is True
    assert decision.bonus_energy == 1
    assert gate_state["bonus_energy"] == 1


async def test_admit_rejects_when_depleted_without_bonus(gate_state: dict[str, object]) -> None:
    gate_state["started_at"] = [NOW - timedelta(hours=3)] + [NOW - timedelta(minutes=5)] * 4

    decision = await EnergyGate.admit(object(), user_id=1, now_utc=NOW, is_tournament_quiz=False)

    assert isinstance(decision, EnergyGateRejection)
    assert decision.code == EnergyGateCode.ENERGY_DEPLETED
    assert decision.wait_ms == 60 * 60 * 1000


async def test_tournament_quiz_skips_energy_check(gate_state: dict[str, object]) -> None:
    gate_state["started_at"] = [NOW - timedelta(minutes=5)] * 5

    decision = await EnergyGate.admit(object(), user_id=1, now_utc=NOW, is_tournament_quiz=True)

    assert isinstance(decision, EnergyGatePass)
    assert decision.energy_exempt is True
    assert decision.used_bonus_energy is False
    assert gate_state["consume_calls"] == 0


async def test_energy_bypass_admits_without_marking_exempt(gate_state: dict[str, object]) -> None:
    gate_state["settings"] = _settings(energy_bypass=True)
    gate_state["started_at"] = [NOW - timedelta(minutes=5)] * 7

    decision = await EnergyGate.admit(object(), user_id=1, now_utc=NOW, is_tournament_quiz=False)

    assert isinstance(decision, EnergyGatePass)
    assert decision.energy_exempt is False
    assert gate_state["consume_calls"] == 0


async def test_check_rate_limit(gate_state: dict[str, object]) -> None:
    gate_state["last_finished_at"] = NOW - timedelta(seconds=45)

    rejection = await EnergyGate.check_rate_limit(object(), user_id=1, quiz_id=3, now_utc=NOW)

    assert rejection is not None
    assert rejection.code == EnergyGateCode.RATE_LIMITED
    assert rejection.wait_seconds == 15

    gate_state["last_finished_at"] = NOW - timedelta(minutes=5)
    assert await EnergyGate.check_rate_limit(object(), user_id=1, quiz_id=3, now_utc=NOW) is None


async def test_status_reports_next_slot(gate_state: dict[str, object]) -> None:
    gate_state["started_at"] = [NOW - timedelta(hours=3), NOW - timedelta(hours=1)]
    gate_state["bonus_energy"] = 3

    status = await EnergyGate.status(object(), user_id=1, now_utc=NOW)

    assert status.used == 2
    assert status.remaining == 3
    assert status.bonus_energy == 3
    assert status.next_energy_at == NOW + timedelta(hours=1)
    assert status.hours_per_slot == 4.0
