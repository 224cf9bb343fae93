from __future__ import annotations

from datetime import datetime

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.repo.tournament_participants_repo import TournamentParticipantsRepo
from app.db.repo.users_repo import UsersRepo
from app.game.tournaments.constants import (
    PARTICIPANT_STATUS_ACTIVE,
    PARTICIPANT_STATUS_REGISTERED,
    REGISTRATION_CLOSED_STATUSES,
    TOURNAMENT_STATUS_ACTIVE,
)
from app.game.tournaments.errors import (
    TournamentAlreadyRegisteredError,
    TournamentClosedError,
    TournamentFullError,
    TournamentInsufficientXpError,
)
from app.game.tournaments.internal import resolve_tournament
from app.game.tournaments.types import TournamentRegistration

logger = structlog.get_logger(__name__)


async def register_for_tournament(
    session: AsyncSession,
    *,
    user_id: int,
    id_or_slug: str,
    now_utc: datetime,
) -> TournamentRegistration:
    tournament = await resolve_tournament(session, id_or_slug=id_or_slug, for_update=True)
    if tournament.status in REGISTRATION_CLOSED_STATUSES:
        raise TournamentClosedError

    existing = await TournamentParticipantsRepo.get(
        session,
        tournament_id=tournament.id,
        user_id=user_id,
    )
    if existing is not None:
        raise TournamentAlreadyRegisteredError

    if tournament.max_participants is not None:
        participants_total = await TournamentParticipantsRepo.count_for_tournament(
            session,
            tournament_id=tournament.id,
        )
        if participants_total >= tournament.max_participants:
            raise TournamentFullError

    entry_fee_xp = int(tournament.entry_fee_xp or 0)
    xp_after: int | None = None
    if entry_fee_xp > 0:
        xp_after = await UsersRepo.debit_xp_if_enough(session, user_id=user_id, amount=entry_fee_xp)
        if xp_after is None:
            user = await UsersRepo.get_by_id(session, user_id)
            raise TournamentInsufficientXpError(
                required_xp=entry_fee_xp,
                current_xp=int(user.xp) if user is not None else 0,
            )

    status = (
        PARTICIPANT_STATUS_ACTIVE
        if tournament.status == TOURNAMENT_STATUS_ACTIVE
        else PARTICIPANT_STATUS_REGISTERED
    )
    created = await TournamentParticipantsRepo.create_once(
        session,
        tournament_id=tournament.id,
        user_id=user_id,
        status=status,
        joined_at=now_utc,
    )
    if not created:
        # raising rolls back the fee debit together with the transaction
        raise TournamentAlreadyRegisteredError

    logger.info(
        "tournament_registered",
        tournament_id=str(tournament.id),
        user_id=user_id,
        entry_fee_xp=entry_fee_xp,
        status=status,
    )
    return TournamentRegistration(
        tournament_id=tournament.id,
        slug=tournament.slug,
        status=status,
        entry_fee_xp=entry_fee_xp,
        xp_after=xp_after,
        joined_at=now_utc,
    )
