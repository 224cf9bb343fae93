from __future__ import annotations

from datetime import datetime
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.repo.tournament_participants_repo import TournamentParticipantsRepo
from app.db.repo.tournament_prizes_repo import TournamentPrizesRepo
from app.db.repo.tournaments_repo import TournamentsRepo
from app.db.repo.users_repo import UsersRepo
from app.game.tournaments.constants import (
    PARTICIPANT_STATUS_FINISHED,
    PRIZE_TYPE_XP,
    TOURNAMENT_STATUS_ACTIVE,
    TOURNAMENT_STATUS_FINISHED,
)
from app.game.tournaments.errors import TournamentNotFoundError
from app.game.tournaments.types import PrizeAward, TournamentFinalization

logger = structlog.get_logger(__name__)


async def activate_due_tournaments(session: AsyncSession, *, now_utc: datetime) -> list[UUID]:
    activated_ids = await TournamentsRepo.activate_due(session, now_utc=now_utc)
    for tournament_id in activated_ids:
        logger.info("tournament_activated", tournament_id=str(tournament_id))
    return activated_ids


async def finalize_tournament(
    session: AsyncSession,
    *,
    tournament_id: UUID,
    now_utc: datetime,
) -> TournamentFinalization:
    tournament = await TournamentsRepo.get_by_id_for_update(session, tournament_id)
    if tournament is None:
        raise TournamentNotFoundError
    if tournament.status != TOURNAMENT_STATUS_ACTIVE:
        return TournamentFinalization(
            tournament_id=tournament.id,
            tournament_title=tournament.title,
            finalized_now=False,
            participants_total=0,
            awards=(),
        )

    # stored ranks are point-in-time values, recompute all of them before payout
    participants = await TournamentParticipantsRepo.list_for_tournament_for_update(
        session,
        tournament_id=tournament.id,
    )
    user_id_by_place: dict[int, int] = {}
    for place, participant in enumerate(participants, start=1):
        participant.rank = place
        participant.status = PARTICIPANT_STATUS_FINISHED
        user_id_by_place[place] = int(participant.user_id)

    awards: list[PrizeAward] = []
    prizes = await TournamentPrizesRepo.list_unclaimed_for_update(session, tournament_id=tournament.id)
    for prize in prizes:
        winner_user_id = user_id_by_place.get(int(prize.place))
        if winner_user_id is None:
            continue
        prize.winner_user_id = winner_user_id
        prize.awarded_at = now_utc
        if prize.type == PRIZE_TYPE_XP and prize.value > 0:
            await UsersRepo.add_xp(session, user_id=winner_user_id, amount=int(prize.value))
        awards.append(
            PrizeAward(
                user_id=winner_user_id,
                place=int(prize.place),
                prize_type=prize.type,
                value=int(prize.value),
                title=prize.title,
            )
        )

    tournament.status = TOURNAMENT_STATUS_FINISHED
    await session.flush()

    logger.info(
        "tournament_finalized",
        tournament_id=str(tournament.id),
        participants_total=len(participants),
        awards_total=len(awards),
    )
    return TournamentFinalization(
        tournament_id=tournament.id,
        tournament_title=tournament.title,
        finalized_now=True,
        participants_total=len(participants),
        awards=tuple(awards),
    )


def winner_notification_payloads(finalization: TournamentFinalization) -> list[tuple[int, dict[str, object]]]:
    return [
        (
            award.user_id,
            {
                "tournament_title": finalization.tournament_title,
                "place": award.place,
                "prize_title": award.title,
            },
        )
        for award in finalization.awards
    ]
