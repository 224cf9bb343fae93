from __future__ import annotations

from app.core.config import get_settings


def configure_tournaments_schedule(celery_app) -> None:
    scan_interval_seconds = max(30, int(get_settings().tournaments_scan_interval_seconds))
    celery_app.conf.beat_schedule = celery_app.conf.beat_schedule or {}
    celery_app.conf.beat_schedule.update(
        {
            "tournaments-lifecycle": {
                "task": "app.workers.tasks.tournaments.run_tournaments_lifecycle",
                "schedule": float(scan_interval_seconds),
                "options": {"queue": "q_normal"},
            }
        }
    )
