# homewise/domain/types.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


@dataclass(frozen=True)
class GeoPoint:
    lat: float
    lng: float


class AmenityKind(str, Enum):
    school = "school"
    bus_station = "bus_station"
    train_station = "train_station"


@dataclass(frozen=True)
class AmenityHit:
    kind: AmenityKind
    name: str
    distance_m: float
    address: str | None = None


@dataclass(frozen=True)
class AmenityNotFound:
    kind: AmenityKind
    reason: str = "none_within_radius"


AmenityResult = AmenityHit | AmenityNotFound


@dataclass(frozen=True)
class ScoringConfig:
    """
    Tunables for the objective scorer and the rating engine.

    Distances are metres. Penalties are "lose `*_penalty` for every `*_step`
    outside the preferred range".
    """
    ideal_cap_growth_pct: float = 6.0
    ideal_rent_yield_pct: float = 4.0
    ideal_school_dist_m: float = 5000.0
    ideal_transport_dist_m: float = 2000.0

    price_score_floor: float = 0.5
    price_penalty_step: float = 50_000.0
    price_penalty: float = 0.1

    loc_score_floor: float = 0.75
    loc_grace_m: float = 3000.0
    dist_penalty_step_m: float = 3000.0
    dist_penalty: float = 0.1


@dataclass(frozen=True)
class SearchConfig:
    initial_radius_km: float = 6.0
    radius_step_km: float = 4.0
    max_radius_km: float = 22.0
    price_ceiling_pct: float = 0.10
    top_n: int = 5
    cache_ttl_hours: float = 24.0


@dataclass(frozen=True)
class PropertyAttributes:
    cap_growth_pct: float
    rental_yield_pct: float
    location: GeoPoint


@dataclass(frozen=True)
class ObjectiveScores:
    growth_score: float
    yield_score: float
    school_score: float
    transport_score: float


@dataclass(frozen=True)
class PropertyProfile:
    """Everything the rating engine is allowed to read about a property."""
    property_id: int
    price: float
    suburb: str
    postcode: str
    location: GeoPoint
    scores: ObjectiveScores
    cap_growth_pct: float
    rental_yield_pct: float


@dataclass(frozen=True)
class UserPreferences:
    """
    Derived view over a user record.

    `w_proximity` is the third top-level weight. School and transport weights
    are shares of it (`school_pct` + `transport_pct` == 100).
    """
    w_growth: float
    w_yield: float
    w_proximity: float
    school_pct: float
    transport_pct: float
    price_min: float
    price_max: float
    suburb: str
    postcode: str
    location: GeoPoint

    @property
    def w_schools(self) -> float:
        return self.w_proximity * self.school_pct / 100.0

    @property
    def w_transport(self) -> float:
        return self.w_proximity * self.transport_pct / 100.0


@dataclass(frozen=True)
class RatingBreakdown:
    core: float
    price_score: float
    loc_score: float
    final01: float
    stars: float


@dataclass(frozen=True)
class Rating:
    rating: float
    description: str | None = None
    breakdown: RatingBreakdown | None = None


@dataclass(frozen=True)
class TopPropertyEntry:
    property_id: int
    rating: float


@dataclass(frozen=True)
class TopPropertiesCache:
    updated_at: datetime | None
    entries: tuple[TopPropertyEntry, ...] = field(default_factory=tuple)

    @property
    def is_empty(self) -> bool:
        return len(self.entries) == 0
