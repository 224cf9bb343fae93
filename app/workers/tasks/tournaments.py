from __future__ import annotations

from app.game.tournaments.constants import FINALIZATION_BATCH_LIMIT
from app.workers.asyncio_runner import run_async_job
from app.workers.celery_app import celery_app
from app.workers.tasks.tournaments_async import (
    run_tournaments_lifecycle_async as _run_tournaments_lifecycle_async,
)
from app.workers.tasks.tournaments_schedule import configure_tournaments_schedule

run_tournaments_lifecycle_async = _run_tournaments_lifecycle_async

__all__ = ["run_tournaments_lifecycle", "run_tournaments_lifecycle_async"]


@celery_app.task(name="app.workers.tasks.tournaments.run_tournaments_lifecycle")
def run_tournaments_lifecycle(batch_size: int = FINALIZATION_BATCH_LIMIT) -> dict[str, int]:
    return run_async_job(run_tournaments_lifecycle_async(batch_size=batch_size))


configure_tournaments_schedule(celery_app)
