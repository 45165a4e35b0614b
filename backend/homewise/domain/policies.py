# homewise/domain/policies.py
from __future__ import annotations

import math
import re
from datetime import datetime, timedelta, timezone
from typing import Sequence

from .errors import InvalidInputError
from .types import TopPropertiesCache

SUBURB_RE = re.compile(r"^[A-Za-z -]+$")
POSTCODE_RE = re.compile(r"^[0-9]{4}$")


def ensure_aware_utc(dt: datetime) -> datetime:
    """SQLite hands back naive datetimes; treat those as UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def cache_stale_reason(
    cache: TopPropertiesCache,
    *,
    preferences_updated_at: datetime | None,
    now: datetime,
    ttl_hours: float,
    force_refresh: bool = False,
) -> str | None:
    """
    Returns why the cached top-N must be recomputed, or None if it can be served.
    """
    if force_refresh:
        return "forced"
    if cache.is_empty or cache.updated_at is None:
        return "empty"

    updated_at = ensure_aware_utc(cache.updated_at)
    if ensure_aware_utc(now) - updated_at >= timedelta(hours=ttl_hours):
        return "expired"
    if preferences_updated_at is not None and updated_at < ensure_aware_utc(preferences_updated_at):
        return "preferences_changed"
    return None


def validate_preferences(
    *,
    suburb: str,
    postcode: str,
    price_range: Sequence[float],
    scoring: Sequence[float],
) -> None:
    """
    Preference-write gate. Scoring is [growth, yield, proximity, school_pct, transport_pct];
    the first three and the last two must each sum to 100.
    """
    if not SUBURB_RE.match(suburb or ""):
        raise InvalidInputError("Invalid suburb.")
    if not POSTCODE_RE.match(postcode or ""):
        raise InvalidInputError("Invalid postcode.")

    if len(price_range) != 2 or not all(math.isfinite(p) for p in price_range):
        raise InvalidInputError("Invalid price range.")
    lo, hi = price_range
    if lo < 0 or hi < 0 or lo > hi:
        raise InvalidInputError("Invalid price range.")

    if len(scoring) != 5 or not all(math.isfinite(s) and s >= 0 for s in scoring):
        raise InvalidInputError("Invalid recommendation score.")
    if not math.isclose(sum(scoring[:3]), 100) or not math.isclose(sum(scoring[3:]), 100):
        raise InvalidInputError("Invalid recommendation score.")
