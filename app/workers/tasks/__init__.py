from app.workers.tasks.notifications import send_notification
from app.workers.tasks.tournaments import run_tournaments_lifecycle

__all__ = [
    "run_tournaments_lifecycle",
    "send_notification",
]
