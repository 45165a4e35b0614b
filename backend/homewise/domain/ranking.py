# homewise/domain/ranking.py
from __future__ import annotations

from typing import Iterable, Iterator

from .types import SearchConfig, TopPropertyEntry


def search_bands(config: SearchConfig) -> Iterator[tuple[float, float]]:
    """
    Consecutive (inner_km, outer_km) rings around the preferred location:
      (0, 6), (6, 10), (10, 14), (14, 18), (18, 22) with the defaults.
    """
    inner = 0.0
    outer = config.initial_radius_km
    while outer <= config.max_radius_km:
        yield inner, outer
        inner = outer
        outer += config.radius_step_km


def price_ceiling(price_max: float, config: SearchConfig) -> float:
    # no matching floor: cheap properties are never excluded by price
    return price_max + price_max * config.price_ceiling_pct


def select_top(candidates: Iterable[TopPropertyEntry], limit: int) -> tuple[TopPropertyEntry, ...]:
    """
    Highest rating first. `sorted` is stable, so equal ratings keep the order
    the repository produced them in.
    """
    ranked = sorted(candidates, key=lambda e: e.rating, reverse=True)
    return tuple(ranked[: max(0, limit)])
