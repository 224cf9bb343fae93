from __future__ import annotations

from datetime import datetime, timezone

import structlog

from app.db.repo.tournaments_repo import TournamentsRepo
from app.db.session import SessionLocal
from app.game.tournaments.constants import FINALIZATION_BATCH_LIMIT
from app.game.tournaments.lifecycle import (
    activate_due_tournaments,
    finalize_tournament,
    winner_notification_payloads,
)
from app.services.notifications import NotificationType
from app.workers.tasks.notifications import dispatch_notification

logger = structlog.get_logger("app.workers.tasks.tournaments")


async def run_tournaments_lifecycle_async(
    *,
    batch_size: int = FINALIZATION_BATCH_LIMIT,
) -> dict[str, int]:
    now_utc = datetime.now(timezone.utc)
    resolved_batch_size = max(1, int(batch_size))

    async with SessionLocal.begin() as session:
        activated_ids = await activate_due_tournaments(session, now_utc=now_utc)
        due_ids = await TournamentsRepo.list_due_finalization_ids(
            session,
            now_utc=now_utc,
            limit=resolved_batch_size,
        )

    finalized_total = 0
    failed_total = 0
    awards_total = 0
    for tournament_id in due_ids:
        # one transaction per tournament so a failure does not block the rest
        try:
            async with SessionLocal.begin() as session:
                finalization = await finalize_tournament(
                    session,
                    tournament_id=tournament_id,
                    now_utc=now_utc,
                )
        except Exception as exc:
            failed_total += 1
            logger.warning(
                "tournament_finalization_failed",
                tournament_id=str(tournament_id),
                error_type=type(exc).__name__,
            )
            continue

        if not finalization.finalized_now:
            continue
        finalized_total += 1
        awards_total += len(finalization.awards)
        for user_id, payload in winner_notification_payloads(finalization):
            dispatch_notification(NotificationType.TOURNAMENT_WINNER, user_id=user_id, payload=payload)

    result = {
        "activated_total": len(activated_ids),
        "finalized_total": finalized_total,
        "finalization_failed_total": failed_total,
        "awards_total": awards_total,
    }
    logger.info("tournaments_lifecycle_processed", **result)
    return result
