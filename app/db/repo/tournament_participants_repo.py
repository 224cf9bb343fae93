from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.tournament_participants import TournamentParticipant
from app.db.models.users import User


class TournamentParticipantsRepo:
    @staticmethod
    async def get(
        session: AsyncSession,
        *,
        tournament_id: UUID,
        user_id: int,
    ) -> TournamentParticipant | None:
        return await session.get(TournamentParticipant, (tournament_id, user_id))

    @staticmethod
    async def get_for_update(
        session: AsyncSession,
        *,
        tournament_id: UUID,
        user_id: int,
    ) -> TournamentParticipant | None:
        stmt = (
            select(TournamentParticipant)
            .where(
                TournamentParticipant.tournament_id == tournament_id,
                TournamentParticipant.user_id == user_id,
            )
            .with_for_update()
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def create_once(
        session: AsyncSession,
        *,
        tournament_id: UUID,
        user_id: int,
        status: str,
        joined_at: datetime,
    ) -> bool:
        stmt = (
            insert(TournamentParticipant)
            .values(
                tournament_id=tournament_id,
                user_id=user_id,
                status=status,
                total_score=0,
                rank=None,
                current_stage=1,
                joined_at=joined_at,
            )
            .on_conflict_do_nothing(
                index_elements=[
                    TournamentParticipant.tournament_id,
                    TournamentParticipant.user_id,
                ]
            )
            .returning(TournamentParticipant.user_id)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None

    @staticmethod
    async def count_for_tournament(session: AsyncSession, *, tournament_id: UUID) -> int:
        stmt = select(func.count(TournamentParticipant.user_id)).where(
            TournamentParticipant.tournament_id == tournament_id
        )
        result = await session.execute(stmt)
        return int(result.scalar_one() or 0)

    @staticmethod
    async def add_stage_score(
        session: AsyncSession,
        *,
        tournament_id: UUID,
        user_id: int,
        score_delta: int,
    ) -> int | None:
        stmt = (
            update(TournamentParticipant)
            .where(
                TournamentParticipant.tournament_id == tournament_id,
                TournamentParticipant.user_id == user_id,
            )
            .values(
                total_score=TournamentParticipant.total_score + score_delta,
                status="ACTIVE",
            )
            .returning(TournamentParticipant.total_score)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def count_with_total_above(
        session: AsyncSession,
        *,
        tournament_id: UUID,
        total_score: int,
    ) -> int:
        stmt = select(func.count(TournamentParticipant.user_id)).where(
            TournamentParticipant.tournament_id == tournament_id,
            TournamentParticipant.total_score > total_score,
        )
        result = await session.execute(stmt)
        return int(result.scalar_one() or 0)

    @staticmethod
    async def set_rank(
        session: AsyncSession,
        *,
        tournament_id: UUID,
        user_id: int,
        rank: int,
        current_stage: int | None,
    ) -> int:
        values: dict[str, int] = {"rank": rank}
        if current_stage is not None:
            values["current_stage"] = current_stage
        stmt = (
            update(TournamentParticipant)
            .where(
                TournamentParticipant.tournament_id == tournament_id,
                TournamentParticipant.user_id == user_id,
            )
            .values(**values)
        )
        result = await session.execute(stmt)
        return result.rowcount or 0

    @staticmethod
    async def list_leaderboard(
        session: AsyncSession,
        *,
        tournament_id: UUID,
        limit: int,
        offset: int,
    ) -> list[tuple[TournamentParticipant, User]]:
        stmt = (
            select(TournamentParticipant, User)
            .join(User, User.id == TournamentParticipant.user_id)
            .where(TournamentParticipant.tournament_id == tournament_id)
            .order_by(
                TournamentParticipant.total_score.desc(),
                TournamentParticipant.joined_at.asc(),
                TournamentParticipant.user_id.asc(),
            )
            .limit(max(1, int(limit)))
            .offset(max(0, int(offset)))
        )
        result = await session.execute(stmt)
        return [(row[0], row[1]) for row in result.all()]

    @staticmethod
    async def list_for_tournament_for_update(
        session: AsyncSession,
        *,
        tournament_id: UUID,
    ) -> list[TournamentParticipant]:
        stmt = (
            select(TournamentParticipant)
            .where(TournamentParticipant.tournament_id == tournament_id)
            .order_by(
                TournamentParticipant.total_score.desc(),
                TournamentParticipant.joined_at.asc(),
                TournamentParticipant.user_id.asc(),
            )
            .with_for_update()
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())
