from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.repo.user_achievements_repo import UserAchievementsRepo

logger = structlog.get_logger(__name__)


async def unlock_achievements(
    session: AsyncSession,
    *,
    user_id: int,
    candidate_keys: Sequence[str],
    now_utc: datetime,
) -> list[str]:
    """Returns only the keys unlocked by this call."""
    already_unlocked = await UserAchievementsRepo.list_keys(session, user_id=user_id)
    pending_keys = [key for key in candidate_keys if key not in already_unlocked]
    if not pending_keys:
        return []

    unlocked = await UserAchievementsRepo.unlock_many(
        session,
        user_id=user_id,
        keys=pending_keys,
        unlocked_at=now_utc,
    )
    if unlocked:
        logger.info("achievements_unlocked", user_id=user_id, achievement_keys=unlocked)
    return unlocked
