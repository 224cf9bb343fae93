from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from urllib.parse import urlencode

import pytest

from app.services import telegram_auth
from app.services.telegram_auth import (
    TelegramAuthError,
    authenticate_player,
    build_init_data_hash,
    validate_init_data,
)

BOT_TOKEN = "123456:test-token"
NOW = datetime(2026, 3, 4, 12, 0, tzinfo=timezone.utc)


def _init_data(*, auth_date: datetime = NOW, user: dict | None = None, token: str = BOT_TOKEN) -> str:
    fields = {
        "auth_date": str(int(auth_date.timestamp())),
        "query_id": "AAE1",
        "user": json.dumps(user or {"id": 42, "username": "anna", "first_name": "Anna"}),
    }
    fields["hash"] = build_init_data_hash(fields, bot_token=token)
    return urlencode(fields)


def test_validate_init_data_returns_user() -> None:
    init_user = validate_init_data(
        _init_data(),
        bot_token=BOT_TOKEN,
        max_age_seconds=3600,
        now_utc=NOW,
    )

    assert init_user.telegram_user_id == 42
    assert init_user.username == "anna"
    assert init_user.first_name == "Anna"
    assert init_user.last_name is None
    assert init_user.auth_date == NOW


@pytest.mark.parametrize(
    ("init_data", "code"),
    [
        ("", "missing_init_data"),
        ("auth_date=1&user=%7B%7D", "invalid_init_data"),
        (_init_data(token="999:other"), "invalid_signature"),
    ],
)
def test_validate_init_data_rejects(init_data: str, code: str) -> None:
    with pytest.raises(TelegramAuthError) as exc_info:
        validate_init_data(init_data, bot_token=BOT_TOKEN, max_age_seconds=3600, now_utc=NOW)

    assert exc_info.value.code == code
    assert exc_info.value.status_code == 401


def test_validate_init_data_rejects_expired_payload() -> None:
    stale = _init_data(auth_date=NOW - timedelta(hours=2))

    with pytest.raises(TelegramAuthError) as exc_info:
        validate_init_data(stale, bot_token=BOT_TOKEN, max_age_seconds=3600, now_utc=NOW)

    assert exc_info.value.code == "init_data_expired"


def test_validate_init_data_max_age_zero_disables_expiry() -> None:
    stale = _init_data(auth_date=NOW - timedelta(days=30))

    init_user = validate_init_data(stale, bot_token=BOT_TOKEN, max_age_seconds=0, now_utc=NOW)

    assert init_user.telegram_user_id == 42


def test_validate_init_data_rejects_signed_payload_without_user() -> None:
    fields = {"auth_date": str(int(NOW.timestamp()))}
    fields["hash"] = build_init_data_hash(fields, bot_token=BOT_TOKEN)

    with pytest.raises(TelegramAuthError) as exc_info:
        validate_init_data(urlencode(fields), bot_token=BOT_TOKEN, max_age_seconds=0, now_utc=NOW)

    assert exc_info.value.code == "invalid_init_data"


@pytest.fixture
def upserts(monkeypatch: pytest.MonkeyPatch) -> list[dict[str, object]]:
    calls: list[dict[str, object]] = []

    async def fake_upsert(session, **kwargs):  # noqa: ANN001, ANN003
        del session
        calls.append(kwargs)
        return SimpleNamespace(id=1, telegram_user_id=kwargs["telegram_user_id"])

    monkeypatch.setattr(telegram_auth.UsersRepo, "upsert_from_telegram", staticmethod(fake_upsert))
    return calls


def _settings(**overrides: object) -> SimpleNamespace:
    values: dict[str, object] = {
        "app_env": "prod",
        "allow_dev_no_telegram": False,
        "telegram_bot_token": BOT_TOKEN,
        "telegram_init_data_max_age_seconds": 3600,
    }
    values.update(overrides)
    return SimpleNamespace(**values)


async def test_authenticate_player_upserts_from_header(
    monkeypatch: pytest.MonkeyPatch,
    upserts: list[dict[str, object]],
) -> None:
    monkeypatch.setattr(telegram_auth, "get_settings", lambda: _settings())
    request = SimpleNamespace(headers={"X-Telegram-Init-Data": _init_data()}, cookies={})

    user = await authenticate_player(request, object(), now_utc=NOW)

    assert user.telegram_user_id == 42
    assert upserts == [
        {
            "telegram_user_id": 42,
            "username": "anna",
            "first_name": "Anna",
            "last_name": None,
            "seen_at": NOW,
        }
    ]


async def test_authenticate_player_reads_cookie(
    monkeypatch: pytest.MonkeyPatch,
    upserts: list[dict[str, object]],
) -> None:
    monkeypatch.setattr(telegram_auth, "get_settings", lambda: _settings())
    request = SimpleNamespace(headers={}, cookies={"telegram_init_data": _init_data()})

    await authenticate_player(request, object(), now_utc=NOW)

    assert len(upserts) == 1


async def test_authenticate_player_ignores_debug_header_outside_dev(
    monkeypatch: pytest.MonkeyPatch,
    upserts: list[dict[str, object]],
) -> None:
    monkeypatch.setattr(
        telegram_auth,
        "get_settings",
        lambda: _settings(app_env="prod", allow_dev_no_telegram=True),
    )
    request = SimpleNamespace(headers={"X-Debug-User-Id": "5"}, cookies={})

    with pytest.raises(TelegramAuthError) as exc_info:
        await authenticate_player(request, object(), now_utc=NOW)

    assert exc_info.value.code == "missing_init_data"
    assert upserts == []


async def test_authenticate_player_dev_bypass_uses_existing_user(monkeypatch: pytest.MonkeyPatch) -> None:
    existing = SimpleNamespace(id=5, telegram_user_id=5)

    async def fake_get_by_id(session, user_id):  # noqa: ANN001
        del session
        return existing if user_id == 5 else None

    monkeypatch.setattr(telegram_auth.UsersRepo, "get_by_id", staticmethod(fake_get_by_id))
    monkeypatch.setattr(
        telegram_auth,
        "get_settings",
        lambda: _settings(app_env="dev", allow_dev_no_telegram=True),
    )
    request = SimpleNamespace(headers={"X-Debug-User-Id": "5"}, cookies={})

    assert await authenticate_player(request, object(), now_utc=NOW) is existing
