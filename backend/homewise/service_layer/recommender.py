# homewise/service_layer/recommender.py
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from ..adapters.repos.properties import PropertyRepository, to_profile
from ..adapters.repos.users import UserRepository, preferences_of, top_properties_of
from ..config import scoring_config, search_config, settings
from ..domain.discovery import DiscoveryStats, discover_top_properties
from ..domain.policies import cache_stale_reason
from ..domain.rating import RatingEngine
from ..domain.types import PropertyProfile, Rating, SearchConfig, TopPropertyEntry, UserPreferences
from ..models import Property

log = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class RankedProperty:
    property: Property
    rating: float


@dataclass(frozen=True)
class TopProperties:
    items: list[RankedProperty]
    from_cache: bool
    updated_at: datetime | None
    stale_reason: str | None = None
    stats: DiscoveryStats | None = None


async def rate_property_for_user(
    session: AsyncSession,
    user_id: int,
    property_id: int,
    *,
    include_description: bool = False,
    engine: RatingEngine | None = None,
) -> Rating:
    user = await UserRepository(session).require(user_id)
    prop = await PropertyRepository(session).require(property_id)
    engine = engine or RatingEngine(scoring_config())

    profile = to_profile(prop)
    prefs = preferences_of(user)
    if include_description:
        return await engine.rate_with_description(profile, prefs)
    return engine.rate(profile, prefs)


async def _hydrate(repo: PropertyRepository, entries: Sequence[TopPropertyEntry]) -> list[RankedProperty]:
    by_id = await repo.get_many([e.property_id for e in entries])
    out: list[RankedProperty] = []
    for e in entries:
        prop = by_id.get(e.property_id)
        if prop is None:
            log.warning("top-N entry property_id=%s no longer exists; omitted", e.property_id)
            continue
        out.append(RankedProperty(property=prop, rating=e.rating))
    return out


async def get_top_properties(
    session: AsyncSession,
    user_id: int,
    *,
    force_refresh: bool = False,
    limit: int | None = None,
    engine: RatingEngine | None = None,
    config: SearchConfig | None = None,
    now: datetime | None = None,
    query_timeout_s: float | None = None,
) -> TopProperties:
    """
    Serve the user's cached top-N when it is fresh, otherwise run the
    expanding-ring discovery and overwrite the cache with the result.
    """
    users = UserRepository(session)
    props = PropertyRepository(session)

    user = await users.require(user_id)
    cfg = config or search_config()
    limit = cfg.top_n if limit is None else limit
    now = now or _utcnow()
    timeout = query_timeout_s if query_timeout_s is not None else settings.REPO_QUERY_TIMEOUT_S

    cache = top_properties_of(user)
    reason = cache_stale_reason(
        cache,
        preferences_updated_at=user.preferences_updated_at,
        now=now,
        ttl_hours=cfg.cache_ttl_hours,
        force_refresh=force_refresh,
    )
    if reason is None:
        items = await _hydrate(props, cache.entries[:limit])
        return TopProperties(items=items, from_cache=True, updated_at=cache.updated_at)

    async def fetch_band(
        prefs: UserPreferences, inner_km: float, outer_km: float, max_price: float
    ) -> list[PropertyProfile]:
        # the last ring includes the max radius itself
        rows = await asyncio.wait_for(
            props.find_in_ring(
                prefs.location,
                inner_km=inner_km,
                outer_km=outer_km,
                max_price=max_price,
                include_outer=outer_km >= cfg.max_radius_km,
            ),
            timeout=timeout,
        )
        return [to_profile(p) for p in rows]

    result = await discover_top_properties(
        preferences_of(user),
        fetch_band=fetch_band,
        engine=engine or RatingEngine(scoring_config()),
        config=cfg,
        limit=limit,
        now=now,
    )
    await users.write_top_properties(user.id, result.cache)

    log.info(
        "recomputed top properties user_id=%s reason=%s found=%s %s",
        user.id,
        reason,
        len(result.cache.entries),
        result.stats.snapshot(),
    )

    items = await _hydrate(props, result.cache.entries)
    return TopProperties(
        items=items,
        from_cache=False,
        updated_at=result.cache.updated_at,
        stale_reason=reason,
        stats=result.stats,
    )
