# homewise/domain/discovery.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Awaitable, Callable, Sequence

from .rating import RatingEngine
from .ranking import price_ceiling, search_bands, select_top
from .types import PropertyProfile, SearchConfig, TopPropertiesCache, TopPropertyEntry, UserPreferences

log = logging.getLogger(__name__)

# (prefs, inner_km, outer_km, max_price) -> unsold properties in that ring around prefs.location
BandFetcher = Callable[[UserPreferences, float, float, float], Awaitable[Sequence[PropertyProfile]]]


@dataclass
class DiscoveryStats:
    bands_searched: int = 0
    scored: int = 0
    skipped: int = 0
    stopped_early: bool = False
    bands: list[tuple[float, float]] = field(default_factory=list)

    def snapshot(self) -> dict[str, object]:
        return {
            "bands_searched": self.bands_searched,
            "bands": list(self.bands),
            "scored": self.scored,
            "skipped": self.skipped,
            "stopped_early": self.stopped_early,
        }


@dataclass(frozen=True)
class DiscoveryResult:
    cache: TopPropertiesCache
    stats: DiscoveryStats


async def discover_top_properties(
    prefs: UserPreferences,
    *,
    fetch_band: BandFetcher,
    engine: RatingEngine,
    config: SearchConfig,
    limit: int,
    now: datetime,
) -> DiscoveryResult:
    """
    Expanding-ring search around the user's preferred location.

    Rings are disjoint, so every property is rated at most once per call.
    Stops as soon as `limit` candidates are collected or the radius cap is hit.
    Nothing is persisted here; the caller decides what to do with the cache value.
    """
    stats = DiscoveryStats()
    collected: list[TopPropertyEntry] = []
    max_price = price_ceiling(prefs.price_max, config)

    for inner_km, outer_km in search_bands(config):
        if len(collected) >= limit:
            break

        try:
            band = await fetch_band(prefs, inner_km, outer_km, max_price)
        except Exception:
            if not collected:
                raise
            # partial data is still worth ranking
            log.warning(
                "band query failed inner_km=%s outer_km=%s; ranking %s collected candidates",
                inner_km,
                outer_km,
                len(collected),
                exc_info=True,
            )
            stats.stopped_early = True
            break

        stats.bands_searched += 1
        stats.bands.append((inner_km, outer_km))

        for profile in band:
            try:
                rating = engine.rate(profile, prefs)
            except (ArithmeticError, TypeError, ValueError):
                stats.skipped += 1
                log.warning("skipping property_id=%s: rating failed", profile.property_id, exc_info=True)
                continue
            collected.append(TopPropertyEntry(property_id=profile.property_id, rating=rating.rating))
            stats.scored += 1

    entries = select_top(collected, limit)
    return DiscoveryResult(cache=TopPropertiesCache(updated_at=now, entries=entries), stats=stats)
