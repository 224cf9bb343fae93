from __future__ import annotations

import asyncio
import re
from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from redis.asyncio import Redis
from sqlalchemy import text

from app.core.config import get_settings
from app.db.session import SessionLocal
from app.workers.celery_app import celery_app

router = APIRouter(tags=["health"])
MAX_ERROR_LENGTH = 200
CELERY_PING_TIMEOUT_SECONDS = 1.0

Check = Callable[[], Awaitable[dict[str, Any] | None]]


def _sanitize_error(error: str) -> str:
    # connection strings in driver errors may carry credentials
    first_line = error.strip().splitlines()[0] if error.strip() else "unknown error"
    sanitized = re.sub(r"\b([a-z+]+)://[^\s@/]*@", r"\1://***@", first_line)
    return sanitized[:MAX_ERROR_LENGTH]


async def _check_database() -> None:
    async with SessionLocal() as session:
        await session.execute(text("SELECT 1"))


async def _check_redis() -> None:
    redis_client = Redis.from_url(get_settings().redis_url)
    try:
        pong = await redis_client.ping()
    finally:
        await redis_client.aclose()
    if pong is not True:
        raise RuntimeError(f"unexpected redis ping response: {pong!r}")


def _ping_celery_workers() -> int:
    inspector = celery_app.control.inspect(timeout=CELERY_PING_TIMEOUT_SECONDS)
    replies = inspector.ping() if inspector is not None else None
    if not replies:
        raise RuntimeError("no celery workers responded to ping")
    return len(replies)


async def _check_celery_worker() -> dict[str, Any]:
    workers = await asyncio.to_thread(_ping_celery_workers)
    return {"workers": workers}


async def _run_check(check: Check) -> dict[str, Any]:
    try:
        extra = await check()
    except Exception as exc:
        return {"status": "failed", "error": _sanitize_error(str(exc))}
    return {"status": "ok", **(extra or {})}


async def _report(*, with_celery: bool, ok_status: str, failed_status: str) -> JSONResponse:
    checks: dict[str, Check] = {"database": _check_database, "redis": _check_redis}
    if with_celery:
        checks["celery"] = _check_celery_worker

    results = await asyncio.gather(*(_run_check(check) for check in checks.values()))
    report = dict(zip(checks, results))
    is_ok = all(result["status"] == "ok" for result in results)
    return JSONResponse(
        status_code=status.HTTP_200_OK if is_ok else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": ok_status if is_ok else failed_status, "checks": report},
    )


@router.get("/health")
async def health() -> JSONResponse:
    return await _report(with_celery=True, ok_status="ok", failed_status="degraded")


@router.get("/ready")
async def ready() -> JSONResponse:
    """Database and redis only; a stalled worker must not pull the API out of rotation."""
    return await _report(with_celery=False, ok_status="ready", failed_status="not_ready")


@router.get("/live")
async def live() -> dict[str, str]:
    return {"status": "live"}
