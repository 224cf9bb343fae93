from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from typing import Any

import structlog
from aiogram.exceptions import TelegramForbiddenError
from redis.asyncio import Redis

from app.bot.application import build_bot
from app.core.config import get_settings
from app.db.repo.users_repo import UsersRepo
from app.db.session import SessionLocal
from app.economy.energy.constants import ENERGY_RESTORED_DEDUPE_KEY_PREFIX

logger = structlog.get_logger(__name__)


class NotificationType(str, Enum):
    LEVEL_UP = "level_up"
    ENERGY_RESTORED = "energy_restored"
    LEADERBOARD_OVERTAKEN = "leaderboard_overtaken"
    TOURNAMENT_WINNER = "tournament_winner"


NOTIFICATION_TEXTS: dict[NotificationType, str] = {
    NotificationType.LEVEL_UP: "Level up! You reached level {level} ({title}).",
    NotificationType.ENERGY_RESTORED: "Your energy is restored. Time for another quiz!",
    NotificationType.LEADERBOARD_OVERTAKEN: (
        "{overtaker} just passed you on the \"{quiz_title}\" leaderboard. Win your spot back!"
    ),
    NotificationType.TOURNAMENT_WINNER: (
        "\"{tournament_title}\" is over: you finished #{place}. Prize: {prize_title}."
    ),
}


class _SafeFormatDict(dict):
    def __missing__(self, key: str) -> str:
        return "?"


def render_notification_text(
    notification_type: NotificationType | str,
    payload: dict[str, Any] | None = None,
) -> str:
    resolved_type = NotificationType(notification_type)
    template = NOTIFICATION_TEXTS[resolved_type]
    return template.format_map(_SafeFormatDict(payload or {}))


def energy_restored_dedupe_key(*, user_id: int) -> str:
    return f"{ENERGY_RESTORED_DEDUPE_KEY_PREFIX}{user_id}"


def energy_restored_dedupe_ttl_ms(*, cooldown_seconds: int) -> int:
    # repeats of one cycle land minutes apart, the next cycle at least a cooldown later
    return max(1, cooldown_seconds // 2) * 1000


async def _acquire_energy_restored_slot(
    *,
    user_id: int,
    redis_factory: Callable[[], Redis] | None = None,
) -> bool:
    settings = get_settings()
    redis_client = redis_factory() if redis_factory is not None else Redis.from_url(settings.redis_url)
    try:
        acquired = await redis_client.set(
            energy_restored_dedupe_key(user_id=user_id),
            "1",
            nx=True,
            px=energy_restored_dedupe_ttl_ms(
                cooldown_seconds=settings.energy_attempt_cooldown_seconds,
            ),
        )
        return bool(acquired)
    finally:
        await redis_client.aclose()


async def _resolve_telegram_user_id(*, user_id: int) -> int | None:
    async with SessionLocal.begin() as session:
        user = await UsersRepo.get_by_id(session, user_id)
    if user is None:
        return None
    return int(user.telegram_user_id)


async def deliver_notification(
    notification_type: NotificationType | str,
    *,
    user_id: int,
    payload: dict[str, Any] | None = None,
    bot_factory: Callable[[], Any] | None = None,
    redis_factory: Callable[[], Redis] | None = None,
) -> bool:
    resolved_type = NotificationType(notification_type)
    chat_id = await _resolve_telegram_user_id(user_id=user_id)
    if chat_id is None:
        logger.info(
            "notification_skipped_unknown_user",
            notification_type=resolved_type.value,
            user_id=user_id,
        )
        return False

    if resolved_type is NotificationType.ENERGY_RESTORED:
        if not await _acquire_energy_restored_slot(user_id=user_id, redis_factory=redis_factory):
            logger.info(
                "notification_skipped_duplicate",
                notification_type=resolved_type.value,
                user_id=user_id,
            )
            return False

    text = render_notification_text(resolved_type, payload)
    resolved_bot_factory = bot_factory if bot_factory is not None else build_bot
    bot = resolved_bot_factory()
    try:
        await bot.send_message(chat_id=chat_id, text=text)
    except TelegramForbiddenError:
        logger.info("notification_blocked_by_user", notification_type=resolved_type.value, user_id=user_id)
        return False
    finally:
        await bot.session.close()

    logger.info("notification_sent", notification_type=resolved_type.value, user_id=user_id)
    return True
