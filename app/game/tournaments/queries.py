from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from app.db.repo.tournament_participants_repo import TournamentParticipantsRepo
from app.game.tournaments.constants import LEADERBOARD_DEFAULT_LIMIT, LEADERBOARD_MAX_LIMIT
from app.game.tournaments.internal import resolve_tournament
from app.game.tournaments.rules import rank_from_count_above
from app.game.tournaments.types import LeaderboardRow, TournamentLeaderboard


def clamp_leaderboard_limit(limit: int | None) -> int:
    if limit is None:
        return LEADERBOARD_DEFAULT_LIMIT
    return max(1, min(int(limit), LEADERBOARD_MAX_LIMIT))


async def get_tournament_leaderboard(
    session: AsyncSession,
    *,
    id_or_slug: str,
    viewer_user_id: int | None,
    limit: int | None = None,
    offset: int = 0,
) -> TournamentLeaderboard:
    """Standings ordered by total score, then join time.

    Positions are derived from this ordering. Stored ``rank`` values are
    written at stage completion and may lag behind until finalization.
    """
    tournament = await resolve_tournament(session, id_or_slug=id_or_slug)
    resolved_limit = clamp_leaderboard_limit(limit)
    resolved_offset = max(0, int(offset))

    participants_total = await TournamentParticipantsRepo.count_for_tournament(
        session,
        tournament_id=tournament.id,
    )
    pairs = await TournamentParticipantsRepo.list_leaderboard(
        session,
        tournament_id=tournament.id,
        limit=resolved_limit,
        offset=resolved_offset,
    )
    rows = tuple(
        LeaderboardRow(
            position=resolved_offset + index + 1,
            user_id=int(participant.user_id),
            username=user.username,
            first_name=user.first_name,
            total_score=int(participant.total_score),
            current_stage=int(participant.current_stage),
            status=participant.status,
        )
        for index, (participant, user) in enumerate(pairs)
    )

    my_position: int | None = None
    my_total_score: int | None = None
    if viewer_user_id is not None:
        me = await TournamentParticipantsRepo.get(
            session,
            tournament_id=tournament.id,
            user_id=viewer_user_id,
        )
        if me is not None:
            my_total_score = int(me.total_score)
            count_above = await TournamentParticipantsRepo.count_with_total_above(
                session,
                tournament_id=tournament.id,
                total_score=my_total_score,
            )
            my_position = rank_from_count_above(count_above)

    return TournamentLeaderboard(
        tournament_id=tournament.id,
        slug=tournament.slug,
        title=tournament.title,
        status=tournament.status,
        participants_total=participants_total,
        rows=rows,
        my_position=my_position,
        my_total_score=my_total_score,
    )
