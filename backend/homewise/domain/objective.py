# homewise/domain/objective.py
from __future__ import annotations

import asyncio
import math
from typing import Protocol

from .errors import InvalidInputError
from .types import (
    AmenityHit,
    AmenityKind,
    AmenityResult,
    GeoPoint,
    ObjectiveScores,
    PropertyAttributes,
    ScoringConfig,
)


class AmenityLookup(Protocol):
    async def nearest(self, point: GeoPoint, kind: AmenityKind, radius_m: float) -> AmenityResult:
        """Closest amenity of `kind` within `radius_m`, or AmenityNotFound."""
        ...


def clamp01(x: float) -> float:
    return max(0.0, min(1.0, x))


def _distance_or_worst(result: AmenityResult, worst_m: float) -> float:
    if isinstance(result, AmenityHit):
        return min(result.distance_m, worst_m)
    return worst_m


class ObjectiveScorer:
    """
    Maps raw property attributes to four independent [0,1] scores:

      growth    1.0 at or above the ideal capital growth, 0.0 at or below zero
      yield     same shape against the ideal rental yield
      school    1.0 next door to a school, 0.0 at/after the ideal distance
      transport closest of bus/train, same shape against its ideal distance

    Amenity lookups that come back empty count as the worst-case distance.
    """

    def __init__(self, amenities: AmenityLookup, config: ScoringConfig | None = None) -> None:
        self.amenities = amenities
        self.config = config or ScoringConfig()

    def growth_score(self, cap_growth_pct: float) -> float:
        return clamp01(cap_growth_pct / self.config.ideal_cap_growth_pct)

    def yield_score(self, rental_yield_pct: float) -> float:
        return clamp01(rental_yield_pct / self.config.ideal_rent_yield_pct)

    def school_score(self, nearest_school: AmenityResult) -> float:
        ideal = self.config.ideal_school_dist_m
        return clamp01(1.0 - _distance_or_worst(nearest_school, ideal) / ideal)

    def transport_score(self, nearest_bus: AmenityResult, nearest_train: AmenityResult) -> float:
        ideal = self.config.ideal_transport_dist_m
        closest = min(
            _distance_or_worst(nearest_bus, ideal),
            _distance_or_worst(nearest_train, ideal),
        )
        return clamp01(1.0 - closest / ideal)

    async def score(self, attrs: PropertyAttributes) -> ObjectiveScores:
        # clamp01 would map NaN to 1.0
        if not (math.isfinite(attrs.cap_growth_pct) and math.isfinite(attrs.rental_yield_pct)):
            raise InvalidInputError("Capital growth and rental yield must be finite numbers.")

        cfg = self.config
        school, bus, train = await asyncio.gather(
            self.amenities.nearest(attrs.location, AmenityKind.school, cfg.ideal_school_dist_m),
            self.amenities.nearest(attrs.location, AmenityKind.bus_station, cfg.ideal_transport_dist_m),
            self.amenities.nearest(attrs.location, AmenityKind.train_station, cfg.ideal_transport_dist_m),
        )

        return ObjectiveScores(
            growth_score=self.growth_score(attrs.cap_growth_pct),
            yield_score=self.yield_score(attrs.rental_yield_pct),
            school_score=self.school_score(school),
            transport_score=self.transport_score(bus, train),
        )
