from __future__ import annotations

import asyncio
from datetime import datetime, timezone

import pytest

from app.workers.tasks import notifications as notification_tasks


def test_dispatch_notification_enqueues_task(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[dict[str, object]] = []
    eta = datetime(2026, 3, 4, 16, 0, tzinfo=timezone.utc)

    def fake_apply_async(*, kwargs, eta=None):  # noqa: ANN001
        calls.append({"kwargs": kwargs, "eta": eta})

    monkeypatch.setattr(notification_tasks.send_notification, "apply_async", fake_apply_async)

    assert notification_tasks.dispatch_notification("energy_restored", user_id=3, eta=eta) is True
    assert calls == [
        {
            "kwargs": {"notification_type": "energy_restored", "user_id": 3, "payload": {}},
            "eta": eta,
        }
    ]


def test_dispatch_notification_never_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    def broken_apply_async(**kwargs):  # noqa: ANN003
        del kwargs
        raise ConnectionError("broker down")

    monkeypatch.setattr(notification_tasks.send_notification, "apply_async", broken_apply_async)

    assert (
        notification_tasks.dispatch_notification(
            "level_up",
            user_id=3,
            payload={"level": 2, "title": "Novice"},
        )
        is False
    )


def test_send_notification_task_wrapper(monkeypatch: pytest.MonkeyPatch) -> None:
    seen: dict[str, object] = {}

    async def fake_deliver(notification_type, *, user_id, payload=None):  # noqa: ANN001
        seen.update(notification_type=notification_type, user_id=user_id, payload=payload)
        return True

    monkeypatch.setattr(notification_tasks, "deliver_notification", fake_deliver)
    monkeypatch.setattr(notification_tasks, "run_async_job", asyncio.run)

    assert notification_tasks.send_notification("level_up", 7, {"level": 2}) is True
    assert seen == {"notification_type": "level_up", "user_id": 7, "payload": {"level": 2}}
