from __future__ import annotations

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.repo.users_repo import UsersRepo
from app.game.progression.types import XpGrant
from app.game.progression.xp import level_from_xp

logger = structlog.get_logger(__name__)


class UserNotFoundForXpError(Exception):
    pass


async def grant_xp(session: AsyncSession, *, user_id: int, amount: int) -> XpGrant:
    total = await UsersRepo.add_xp(session, user_id=user_id, amount=amount)
    if total is None:
        raise UserNotFoundForXpError

    previous_level = level_from_xp(total - amount)
    level = level_from_xp(total)
    level_up = level > previous_level
    if level_up:
        logger.info(
            "xp_level_up",
            user_id=user_id,
            previous_level=previous_level,
            new_level=level,
        )
    return XpGrant(
        earned=amount,
        total=total,
        level=level,
        level_up=level_up,
        new_level=level if level_up else None,
    )
