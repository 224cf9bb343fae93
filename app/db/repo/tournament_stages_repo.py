from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.tournament_participants import TournamentParticipant
from app.db.models.tournament_stages import TournamentStage
from app.db.models.tournaments import Tournament


class TournamentStagesRepo:
    @staticmethod
    async def list_for_tournament(
        session: AsyncSession,
        *,
        tournament_id: UUID,
    ) -> list[TournamentStage]:
        stmt = (
            select(TournamentStage)
            .where(TournamentStage.tournament_id == tournament_id)
            .order_by(TournamentStage.order.asc())
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def list_lower_order_ids(
        session: AsyncSession,
        *,
        tournament_id: UUID,
        order: int,
    ) -> list[UUID]:
        stmt = select(TournamentStage.id).where(
            TournamentStage.tournament_id == tournament_id,
            TournamentStage.order < order,
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def find_scoring_stage(
        session: AsyncSession,
        *,
        user_id: int,
        quiz_id: int,
        now_utc: datetime,
    ) -> tuple[TournamentStage, Tournament] | None:
        stmt = (
            select(TournamentStage, Tournament)
            .join(Tournament, Tournament.id == TournamentStage.tournament_id)
            .join(
                TournamentParticipant,
                and_(
                    TournamentParticipant.tournament_id == Tournament.id,
                    TournamentParticipant.user_id == user_id,
                ),
            )
            .where(
                TournamentStage.quiz_id == quiz_id,
                Tournament.status == "ACTIVE",
                TournamentParticipant.status.in_(("REGISTERED", "ACTIVE")),
                or_(TournamentStage.starts_at.is_(None), TournamentStage.starts_at <= now_utc),
            )
            .order_by(Tournament.starts_at.asc(), TournamentStage.order.asc())
            .limit(1)
            # finalization holds FOR UPDATE on the tournament until it commits
            .with_for_update(read=True, of=Tournament)
        )
        result = await session.execute(stmt)
        row = result.first()
        if row is None:
            return None
        return row[0], row[1]

    @staticmethod
    async def list_start_candidates(
        session: AsyncSession,
        *,
        user_id: int,
        quiz_id: int,
        now_utc: datetime,
    ) -> list[tuple[TournamentStage, Tournament, str | None]]:
        stmt = (
            select(TournamentStage, Tournament, TournamentParticipant.status)
            .join(Tournament, Tournament.id == TournamentStage.tournament_id)
            .outerjoin(
                TournamentParticipant,
                and_(
                    TournamentParticipant.tournament_id == Tournament.id,
                    TournamentParticipant.user_id == user_id,
                ),
            )
            .where(
                TournamentStage.quiz_id == quiz_id,
                or_(
                    Tournament.status == "ACTIVE",
                    and_(Tournament.status == "FINISHED", Tournament.ends_at >= now_utc),
                ),
            )
            .order_by(Tournament.starts_at.asc(), TournamentStage.order.asc())
        )
        result = await session.execute(stmt)
        return [(row[0], row[1], row[2]) for row in result.all()]
