from __future__ import annotations

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.tournaments import Tournament
from app.db.repo.tournaments_repo import TournamentsRepo
from app.game.tournaments.errors import TournamentNotFoundError


def parse_tournament_id(value: str) -> UUID | None:
    try:
        return UUID(str(value).strip())
    except ValueError:
        return None


async def resolve_tournament(
    session: AsyncSession,
    *,
    id_or_slug: str,
    for_update: bool = False,
) -> Tournament:
    tournament_id = parse_tournament_id(id_or_slug)
    if tournament_id is not None:
        if for_update:
            tournament = await TournamentsRepo.get_by_id_for_update(session, tournament_id)
        else:
            tournament = await TournamentsRepo.get_by_id(session, tournament_id)
    elif for_update:
        tournament = await TournamentsRepo.get_by_slug_for_update(session, id_or_slug.strip())
    else:
        tournament = await TournamentsRepo.get_by_slug(session, id_or_slug.strip())

    if tournament is None:
        raise TournamentNotFoundError
    return tournament
