from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from time import monotonic
from typing import TypeVar

import structlog

from app.db.session import dispose_engine

T = TypeVar("T")

logger = structlog.get_logger(__name__)


async def _run_with_fresh_db_pool(awaitable: Awaitable[T], *, job_name: str) -> T:
    # asyncpg connections are bound to the loop that opened them
    await dispose_engine()
    started_at = monotonic()
    try:
        return await awaitable
    except Exception as exc:
        logger.warning(
            "async_job_failed",
            job=job_name,
            duration_ms=int((monotonic() - started_at) * 1000),
            error_type=type(exc).__name__,
        )
        raise
    finally:
        await dispose_engine()


def run_async_job(awaitable: Awaitable[T]) -> T:
    job_name = getattr(awaitable, "__qualname__", type(awaitable).__name__)
    return asyncio.run(_run_with_fresh_db_pool(awaitable, job_name=job_name))
