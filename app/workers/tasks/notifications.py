from __future__ import annotations

from datetime import datetime
from typing import Any

import structlog

from app.services.notifications import NotificationType, deliver_notification
from app.workers.asyncio_runner import run_async_job
from app.workers.celery_app import celery_app

logger = structlog.get_logger(__name__)


@celery_app.task(name="app.workers.tasks.notifications.send_notification")
def send_notification(
    notification_type: str,
    user_id: int,
    payload: dict[str, Any] | None = None,
) -> bool:
    return run_async_job(
        deliver_notification(
            notification_type,
            user_id=user_id,
            payload=payload,
        )
    )


def dispatch_notification(
    notification_type: NotificationType | str,
    *,
    user_id: int,
    payload: dict[str, Any] | None = None,
    eta: datetime | None = None,
) -> bool:
    resolved_type = NotificationType(notification_type)
    try:
        send_notification.apply_async(
            kwargs={
                "notification_type": resolved_type.value,
                "user_id": int(user_id),
                "payload": payload or {},
            },
            eta=eta,
        )
    except Exception as exc:
        logger.warning(
            "notification_enqueue_failed",
            notification_type=resolved_type.value,
            user_id=user_id,
            error_type=type(exc).__name__,
        )
        return False
    return True
