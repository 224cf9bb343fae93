from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.tournaments import Tournament


class TournamentsRepo:
    @staticmethod
    async def create(session: AsyncSession, *, tournament: Tournament) -> Tournament:
        session.add(tournament)
        await session.flush()
        return tournament

    @staticmethod
    async def get_by_id(session: AsyncSession, tournament_id: UUID) -> Tournament | None:
        return await session.get(Tournament, tournament_id)

    @staticmethod
    async def get_by_id_for_update(session: AsyncSession, tournament_id: UUID) -> Tournament | None:
        stmt = select(Tournament).where(Tournament.id == tournament_id).with_for_update()
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_slug(session: AsyncSession, slug: str) -> Tournament | None:
        stmt = select(Tournament).where(Tournament.slug == slug)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_slug_for_update(session: AsyncSession, slug: str) -> Tournament | None:
        stmt = select(Tournament).where(Tournament.slug == slug).with_for_update()
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def activate_due(session: AsyncSession, *, now_utc: datetime) -> list[UUID]:
        stmt = (
            update(Tournament)
            .where(
                Tournament.status == "UPCOMING",
                Tournament.starts_at <= now_utc,
            )
            .values(status="ACTIVE")
            .returning(Tournament.id)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def list_due_finalization_ids(
        session: AsyncSession,
        *,
        now_utc: datetime,
        limit: int,
    ) -> list[UUID]:
        resolved_limit = max(1, int(limit))
        stmt = (
            select(Tournament.id)
            .where(
                Tournament.status == "ACTIVE",
                Tournament.ends_at <= now_utc,
            )
            .order_by(Tournament.ends_at.asc())
            .limit(resolved_limit)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())
