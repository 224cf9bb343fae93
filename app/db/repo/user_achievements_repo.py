from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.user_achievements import UserAchievement


class UserAchievementsRepo:
    @staticmethod
    async def list_keys(session: AsyncSession, *, user_id: int) -> set[str]:
        stmt = select(UserAchievement.achievement_key).where(UserAchievement.user_id == user_id)
        result = await session.execute(stmt)
        return set(result.scalars().all())

    @staticmethod
    async def unlock_many(
        session: AsyncSession,
        *,
        user_id: int,
        keys: Sequence[str],
        unlocked_at: datetime,
    ) -> list[str]:
        unique_keys = sorted(set(keys))
        if not unique_keys:
            return []
        stmt = (
            insert(UserAchievement)
            .values(
                [
                    {"user_id": user_id, "achievement_key": key, "unlocked_at": unlocked_at}
                    for key in unique_keys
                ]
            )
            .on_conflict_do_nothing(
                index_elements=[UserAchievement.user_id, UserAchievement.achievement_key]
            )
            .returning(UserAchievement.achievement_key)
        )
        result = await session.execute(stmt)
        return sorted(result.scalars().all())
