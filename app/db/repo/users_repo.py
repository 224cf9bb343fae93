from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.users import User


class UsersRepo:
    @staticmethod
    async def get_by_id(session: AsyncSession, user_id: int) -> User | None:
        return await session.get(User, user_id)

    @staticmethod
    async def get_by_id_for_update(session: AsyncSession, user_id: int) -> User | None:
        stmt = select(User).where(User.id == user_id).with_for_update()
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_telegram_user_id(session: AsyncSession, telegram_user_id: int) -> User | None:
        stmt = select(User).where(User.telegram_user_id == telegram_user_id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def list_by_ids(
        session: AsyncSession,
        user_ids: Sequence[int],
    ) -> list[User]:
        ids = tuple({int(user_id) for user_id in user_ids})
        if not ids:
            return []
        stmt = select(User).where(User.id.in_(ids))
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def upsert_from_telegram(
        session: AsyncSession,
        *,
        telegram_user_id: int,
        username: str | None,
        first_name: str | None,
        last_name: str | None,
        seen_at: datetime,
    ) -> User:
        stmt = (
            insert(User)
            .values(
                telegram_user_id=telegram_user_id,
                username=username,
                first_name=first_name,
                last_name=last_name,
                last_seen_at=seen_at,
            )
            .on_conflict_do_update(
                index_elements=[User.telegram_user_id],
                set_={
                    "username": username,
                    "first_name": first_name,
                    "last_name": last_name,
                    "last_seen_at": seen_at,
                },
            )
            .returning(User)
        )
        result = await session.execute(stmt)
        return result.scalar_one()

    @staticmethod
    async def consume_bonus_energy(session: AsyncSession, *, user_id: int) -> int | None:
        stmt = (
            update(User)
            .where(User.id == user_id, User.bonus_energy > 0)
            .values(
                bonus_energy=User.bonus_energy - 1,
                bonus_energy_used=User.bonus_energy_used + 1,
            )
            .returning(User.bonus_energy)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def add_xp(session: AsyncSession, *, user_id: int, amount: int) -> int | None:
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(xp=User.xp + amount)
            .returning(User.xp)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def debit_xp_if_enough(session: AsyncSession, *, user_id: int, amount: int) -> int | None:
        stmt = (
            update(User)
            .where(User.id == user_id, User.xp >= amount)
            .values(xp=User.xp - amount)
            .returning(User.xp)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def set_presence(
        session: AsyncSession,
        *,
        user_id: int,
        current_quiz_id: int | None,
        status: str,
        seen_at: datetime,
    ) -> int:
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(current_quiz_id=current_quiz_id, status=status, last_seen_at=seen_at)
        )
        result = await session.execute(stmt)
        return result.rowcount or 0
