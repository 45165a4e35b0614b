# homewise/domain/rating.py
from __future__ import annotations

import logging
from typing import Protocol

from .geo import haversine_m
from .objective import clamp01
from .types import PropertyProfile, Rating, RatingBreakdown, ScoringConfig, UserPreferences

log = logging.getLogger(__name__)


class RatingNarrator(Protocol):
    async def describe(
        self,
        profile: PropertyProfile,
        prefs: UserPreferences,
        breakdown: RatingBreakdown,
    ) -> str | None:
        """Human-readable justification, or None when unavailable."""
        ...


class RatingEngine:
    def __init__(self, config: ScoringConfig | None = None, narrator: RatingNarrator | None = None) -> None:
        self.config = config or ScoringConfig()
        self.narrator = narrator

    def core_score(self, profile: PropertyProfile, prefs: UserPreferences) -> float:
        s = profile.scores
        return (
            (prefs.w_growth / 100.0) * s.growth_score
            + (prefs.w_yield / 100.0) * s.yield_score
            + (prefs.w_schools / 100.0) * s.school_score
            + (prefs.w_transport / 100.0) * s.transport_score
        )

    def price_score(self, price: float, prefs: UserPreferences) -> float:
        if prefs.price_min <= price <= prefs.price_max:
            return 1.0

        if price > prefs.price_max:
            overshoot = price - prefs.price_max
        else:
            overshoot = prefs.price_min - price

        cfg = self.config
        penalty = (overshoot / cfg.price_penalty_step) * cfg.price_penalty
        return clamp01(max(1.0 - penalty, cfg.price_score_floor))

    def location_score(self, profile: PropertyProfile, prefs: UserPreferences) -> float:
        if profile.suburb == prefs.suburb and profile.postcode == prefs.postcode:
            return 1.0

        cfg = self.config
        # preferred location is the suburb centroid, so allow a grace distance
        overshoot = haversine_m(profile.location, prefs.location) - cfg.loc_grace_m
        penalty = (overshoot / cfg.dist_penalty_step_m) * cfg.dist_penalty
        return clamp01(max(1.0 - penalty, cfg.loc_score_floor))

    def breakdown(self, profile: PropertyProfile, prefs: UserPreferences) -> RatingBreakdown:
        core = self.core_score(profile, prefs)
        price = self.price_score(profile.price, prefs)
        loc = self.location_score(profile, prefs)
        final01 = core * price * loc
        return RatingBreakdown(
            core=core,
            price_score=price,
            loc_score=loc,
            final01=final01,
            stars=final01 * 5.0,
        )

    def rate(self, profile: PropertyProfile, prefs: UserPreferences) -> Rating:
        b = self.breakdown(profile, prefs)
        return Rating(rating=b.stars, breakdown=b)

    async def rate_with_description(self, profile: PropertyProfile, prefs: UserPreferences) -> Rating:
        """
        Same number as `rate`; the description is best-effort and is omitted
        when no narrator is configured, the narrator returns nothing or it raises.
        """
        b = self.breakdown(profile, prefs)
        if self.narrator is None:
            return Rating(rating=b.stars, breakdown=b)

        try:
            description = await self.narrator.describe(profile, prefs, b)
        except Exception:
            log.warning("rating description failed for property_id=%s", profile.property_id, exc_info=True)
            return Rating(rating=b.stars, breakdown=b)

        if not description:
            log.info("rating description unavailable for property_id=%s", profile.property_id)
        return Rating(rating=b.stars, description=description or None, breakdown=b)
