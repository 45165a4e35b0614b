# homewise/jobs/scheduler.py
from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import AsyncContextManager, Callable

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from sqlalchemy.ext.asyncio import AsyncSession

from ..adapters.repos.users import UserRepository
from ..config import scoring_config, search_config, settings
from ..db import async_session
from ..domain.errors import NotFoundError
from ..domain.rating import RatingEngine
from ..service_layer.recommender import get_top_properties

log = logging.getLogger(__name__)

SessionFactory = Callable[[], AsyncContextManager[AsyncSession]]


async def refresh_stale_top_properties(
    session_factory: SessionFactory = async_session,
    *,
    batch_size: int | None = None,
    now: datetime | None = None,
) -> dict[str, int]:
    """
    Recompute top-N for users whose cache is stale, one session per user so a
    failure for one user does not roll back the others.
    """
    cfg = search_config()
    now = now or datetime.now(timezone.utc)
    engine = RatingEngine(scoring_config())
    stats = {"candidates": 0, "refreshed": 0, "failed": 0}

    async with session_factory() as session:
        user_ids = await UserRepository(session).list_ids_with_stale_top_properties(
            now=now,
            ttl_hours=cfg.cache_ttl_hours,
            limit=batch_size or settings.SCHED_TOP_REFRESH_BATCH_SIZE,
        )
    stats["candidates"] = len(user_ids)

    for user_id in user_ids:
        async with session_factory() as session:
            try:
                await get_top_properties(session, user_id, engine=engine, config=cfg, now=now)
                await session.commit()
                stats["refreshed"] += 1
            except NotFoundError:
                # deleted between listing and refresh
                await session.rollback()
            except Exception:
                await session.rollback()
                stats["failed"] += 1
                log.exception("top properties refresh failed user_id=%s", user_id)

    if stats["candidates"]:
        log.info("top properties refresh %s", stats)
    return stats


def build_scheduler() -> AsyncIOScheduler:
    sched = AsyncIOScheduler()

    sched.add_job(
        lambda: asyncio.create_task(refresh_stale_top_properties()),
        "interval",
        minutes=settings.SCHED_TOP_REFRESH_INTERVAL_MINUTES,
    )

    return sched
