from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.tournament_prizes import TournamentPrize


class TournamentPrizesRepo:
    @staticmethod
    async def list_unclaimed_for_update(
        session: AsyncSession,
        *,
        tournament_id: UUID,
    ) -> list[TournamentPrize]:
        stmt = (
            select(TournamentPrize)
            .where(
                TournamentPrize.tournament_id == tournament_id,
                TournamentPrize.winner_user_id.is_(None),
            )
            .order_by(TournamentPrize.place.asc())
            .with_for_update()
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())
