from __future__ import annotations

import hashlib
import hmac
import json
from dataclasses import dataclass
from datetime import datetime, timezone
from urllib.parse import parse_qsl

import structlog
from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.db.models.users import User
from app.db.repo.users_repo import UsersRepo

logger = structlog.get_logger(__name__)

INIT_DATA_HEADER = "X-Telegram-Init-Data"
INIT_DATA_COOKIE = "telegram_init_data"
DEBUG_USER_HEADER = "X-Debug-User-Id"


class TelegramAuthError(Exception):
    def __init__(self, code: str, *, status_code: int = 401) -> None:
        super().__init__(code)
        self.code = code
        self.status_code = status_code


@dataclass(slots=True, frozen=True)
class TelegramInitUser:
    telegram_user_id: int
    username: str | None
    first_name: str | None
    last_name: str | None
    auth_date: datetime


def _secret_key(bot_token: str) -> bytes:
    return hmac.new(b"WebAppData", bot_token.encode("utf-8"), hashlib.sha256).digest()


def build_init_data_hash(fields: dict[str, str], *, bot_token: str) -> str:
    data_check_string = "\n".join(f"{key}={fields[key]}" for key in sorted(fields))
    return hmac.new(
        _secret_key(bot_token),
        data_check_string.encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()


def validate_init_data(
    init_data: str,
    *,
    bot_token: str,
    max_age_seconds: int,
    now_utc: datetime,
) -> TelegramInitUser:
    """Check a WebApp ``initData`` string and return the Telegram user in it."""
    if not init_data or not bot_token:
        raise TelegramAuthError("missing_init_data")

    fields = dict(parse_qsl(init_data, keep_blank_values=True))
    received_hash = fields.pop("hash", None)
    if not received_hash:
        raise TelegramAuthError("invalid_init_data")
    expected_hash = build_init_data_hash(fields, bot_token=bot_token)
    if not hmac.compare_digest(expected_hash, received_hash):
        raise TelegramAuthError("invalid_signature")

    try:
        auth_date = datetime.fromtimestamp(int(fields["auth_date"]), tz=timezone.utc)
        raw_user = json.loads(fields["user"])
        telegram_user_id = int(raw_user["id"])
    except (KeyError, ValueError, TypeError):
        raise TelegramAuthError("invalid_init_data") from None

    if max_age_seconds > 0 and (now_utc - auth_date).total_seconds() > max_age_seconds:
        raise TelegramAuthError("init_data_expired")

    return TelegramInitUser(
        telegram_user_id=telegram_user_id,
        username=raw_user.get("username"),
        first_name=raw_user.get("first_name"),
        last_name=raw_user.get("last_name"),
        auth_date=auth_date,
    )


def _dev_bypass_user_id(request: Request) -> int | None:
    settings = get_settings()
    if not settings.allow_dev_no_telegram or settings.app_env != "dev":
        return None
    raw_value = request.headers.get(DEBUG_USER_HEADER)
    if raw_value is None:
        return None
    try:
        return int(raw_value)
    except ValueError:
        return None


async def authenticate_player(
    request: Request,
    session: AsyncSession,
    *,
    now_utc: datetime,
) -> User:
    debug_user_id = _dev_bypass_user_id(request)
    if debug_user_id is not None:
        user = await UsersRepo.get_by_id(session, debug_user_id)
        if user is None:
            user = await UsersRepo.upsert_from_telegram(
                session,
                telegram_user_id=debug_user_id,
                username="devuser",
                first_name="Dev",
                last_name="User",
                seen_at=now_utc,
            )
        return user

    init_data = request.headers.get(INIT_DATA_HEADER) or request.cookies.get(INIT_DATA_COOKIE)
    settings = get_settings()
    try:
        init_user = validate_init_data(
            init_data or "",
            bot_token=settings.telegram_bot_token,
            max_age_seconds=int(settings.telegram_init_data_max_age_seconds),
            now_utc=now_utc,
        )
    except TelegramAuthError as exc:
        logger.info("telegram_auth_rejected", reason=exc.code)
        raise

    return await UsersRepo.upsert_from_telegram(
        session,
        telegram_user_id=init_user.telegram_user_id,
        username=init_user.username,
        first_name=init_user.first_name,
        last_name=init_user.last_name,
        seen_at=now_utc,
    )
