from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select

from app.db.models.leaderboard_entries import LeaderboardEntry
from app.db.models.users import User
from app.db.repo.users_repo import UsersRepo
from app.db.session import SessionLocal
from app.game.sessions.service import finish_quiz_session
from tests.integration.tournament_fixtures import _create_quiz, _create_session, _create_user

UTC = timezone.utc


@pytest.mark.asyncio
async def test_finish_is_idempotent() -> None:
    now_utc = datetime.now(UTC)
    user_id = await _create_user("anna", telegram_user_id=30_001)
    quiz_id = await _create_quiz("Capitals")
    session_id = await _create_session(
        user_id=user_id,
        quiz_id=quiz_id,
        total_score=300,
        started_at=now_utc - timedelta(minutes=2),
        current_question_index=3,
    )

    async with SessionLocal.begin() as session:
        first = await finish_quiz_session(
            session,
            user_id=user_id,
            quiz_id=quiz_id,
            session_id=session_id,
            now_utc=now_utc,
        )
    async with SessionLocal.begin() as session:
        xp_after_first = (await session.get(User, user_id)).xp

    async with SessionLocal.begin() as session:
        second = await finish_quiz_session(
            session,
            user_id=user_id,
            quiz_id=quiz_id,
            session_id=session_id,
            now_utc=now_utc + timedelta(seconds=30),
        )

    assert first.already_finished is False
    assert second.already_finished is True
    assert second.payload == first.payload
    assert second.notifications == ()
    assert first.payload["gameScore"] == 300
    assert first.payload["leaderboard"]["bestScore"] == 300
    assert first.payload["leaderboard"]["attempts"] == 1
    assert first.payload["leaderboard"]["gamesUntilMaxBonus"] == 9
    assert first.payload["xp"]["total"] == xp_after_first

    async with SessionLocal.begin() as session:
        user = await session.get(User, user_id)
        entries = (
            await session.execute(select(LeaderboardEntry).where(LeaderboardEntry.user_id == user_id))
        ).scalars().all()

    assert user is not None
    assert user.xp == xp_after_first
    assert user.status == "IDLE"
    assert len(entries) == 1
    assert entries[0].attempts == 1


@pytest.mark.asyncio
async def test_bonus_energy_never_goes_negative() -> None:
    user_id = await _create_user("boris", telegram_user_id=30_002, bonus_energy=1)

    async with SessionLocal.begin() as session:
        first = await UsersRepo.consume_bonus_energy(session, user_id=user_id)
        second = await UsersRepo.consume_bonus_energy(session, user_id=user_id)

    assert first == 0
    assert second is None

    async with SessionLocal.begin() as session:
        user = await session.get(User, user_id)

    assert user is not None
    assert user.bonus_energy == 0
    assert user.bonus_energy_used == 1
