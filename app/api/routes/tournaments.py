from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Query, Request, status

from app.api.routes.player_helpers import authenticate, error, now_utc
from app.db.session import SessionLocal
from app.game.tournaments.errors import (
    TournamentAlreadyRegisteredError,
    TournamentClosedError,
    TournamentError,
    TournamentFullError,
    TournamentInsufficientXpError,
    TournamentNotFoundError,
)
from app.game.tournaments.queries import get_tournament_leaderboard
from app.game.tournaments.registration import register_for_tournament

router = APIRouter(prefix="/api/tournaments", tags=["tournaments"])


def _tournament_error_as_http(exc: TournamentError) -> HTTPException:
    if isinstance(exc, TournamentNotFoundError):
        return error(status.HTTP_404_NOT_FOUND, "tournament_not_found")
    if isinstance(exc, TournamentClosedError):
        return error(status.HTTP_400_BAD_REQUEST, "tournament_ended")
    if isinstance(exc, TournamentFullError):
        return error(status.HTTP_400_BAD_REQUEST, "tournament_full")
    if isinstance(exc, TournamentAlreadyRegisteredError):
        return error(status.HTTP_409_CONFLICT, "already_registered")
    if isinstance(exc, TournamentInsufficientXpError):
        return error(
            status.HTTP_400_BAD_REQUEST,
            "insufficient_xp",
            requiredXp=exc.required_xp,
            currentXp=exc.current_xp,
        )
    return error(status.HTTP_400_BAD_REQUEST, "tournament_error")


@router.post("/{id_or_slug}/register")
async def register(id_or_slug: str, request: Request) -> dict[str, Any]:
    now = now_utc()
    try:
        async with SessionLocal.begin() as session:
            user = await authenticate(request, session, now=now)
            registration = await register_for_tournament(
                session,
                user_id=user.id,
                id_or_slug=id_or_slug,
                now_utc=now,
            )
    except TournamentError as exc:
        raise _tournament_error_as_http(exc) from exc

    return {
        "success": True,
        "tournamentId": str(registration.tournament_id),
        "slug": registration.slug,
        "status": registration.status,
        "entryFeeXp": registration.entry_fee_xp,
        "xpAfter": registration.xp_after,
        "joinedAt": registration.joined_at.isoformat(),
    }


@router.get("/{id_or_slug}/leaderboard")
async def leaderboard(
    id_or_slug: str,
    request: Request,
    limit: int | None = Query(default=None, ge=1),
    offset: int = Query(default=0, ge=0),
) -> dict[str, Any]:
    now = now_utc()
    try:
        async with SessionLocal.begin() as session:
            user = await authenticate(request, session, now=now)
            board = await get_tournament_leaderboard(
                session,
                id_or_slug=id_or_slug,
                viewer_user_id=user.id,
                limit=limit,
                offset=offset,
            )
    except TournamentError as exc:
        raise _tournament_error_as_http(exc) from exc

    return {
        "tournamentId": str(board.tournament_id),
        "slug": board.slug,
        "title": board.title,
        "status": board.status,
        "participantsTotal": board.participants_total,
        "leaderboard": [
            {
                "position": row.position,
                "userId": row.user_id,
                "username": row.username,
                "firstName": row.first_name,
                "totalScore": row.total_score,
                "currentStage": row.current_stage,
                "status": row.status,
            }
            for row in board.rows
        ],
        "myPosition": board.my_position,
        "myTotalScore": board.my_total_score,
    }
