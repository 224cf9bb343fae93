from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, HTTPException, Request, status

from app.api.routes.player_helpers import now_utc
from app.db.session import SessionLocal
from app.game.tournaments.errors import TournamentNotFoundError
from app.game.tournaments.internal import parse_tournament_id
from app.game.tournaments.lifecycle import finalize_tournament, winner_notification_payloads
from app.services.internal_auth import InternalAccessDeniedError, assert_internal_access
from app.services.notifications import NotificationType
from app.workers.tasks.notifications import dispatch_notification

router = APIRouter(prefix="/internal/tournaments", tags=["internal", "tournaments"])
logger = structlog.get_logger(__name__)


@router.post("/{tournament_id}/finalize")
async def finalize(tournament_id: str, request: Request) -> dict[str, Any]:
    try:
        assert_internal_access(request)
    except InternalAccessDeniedError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail={"error": "forbidden"}) from exc

    resolved_id = parse_tournament_id(tournament_id)
    if resolved_id is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail={"error": "invalid_tournament_id"})

    try:
        async with SessionLocal.begin() as session:
            finalization = await finalize_tournament(
                session,
                tournament_id=resolved_id,
                now_utc=now_utc(),
            )
    except TournamentNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error": "tournament_not_found"},
        ) from exc

    for user_id, payload in winner_notification_payloads(finalization):
        dispatch_notification(NotificationType.TOURNAMENT_WINNER, user_id=user_id, payload=payload)

    logger.info(
        "internal_tournament_finalize_requested",
        tournament_id=str(finalization.tournament_id),
        finalized_now=finalization.finalized_now,
    )
    return {
        "tournamentId": str(finalization.tournament_id),
        "finalizedNow": finalization.finalized_now,
        "participantsTotal": finalization.participants_total,
        "awards": [
            {
                "userId": award.user_id,
                "place": award.place,
                "type": award.prize_type,
                "value": award.value,
                "title": award.title,
            }
            for award in finalization.awards
        ],
    }
