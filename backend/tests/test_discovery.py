from dataclasses import replace
from datetime import datetime, timezone

import pytest

from homewise.domain.discovery import discover_top_properties
from homewise.domain.rating import RatingEngine
from homewise.domain.ranking import price_ceiling, search_bands, select_top
from homewise.domain.types import ObjectiveScores, SearchConfig, TopPropertyEntry

from factories import SYDNEY, make_prefs, make_profile, north_of

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


def _profile(pid: int, km: float, growth: float = 1.0):
    return make_profile(
        property_id=pid,
        location=north_of(SYDNEY, km),
        scores=ObjectiveScores(growth_score=growth, yield_score=1.0, school_score=1.0, transport_score=1.0),
    )


class BandStub:
    """Serves pre-built profiles per band and records the bands requested."""

    def __init__(self, by_band: dict[tuple[float, float], list], fail_on: set[tuple[float, float]] = frozenset()):
        self.by_band = by_band
        self.fail_on = set(fail_on)
        self.requested: list[tuple[float, float, float]] = []

    async def __call__(self, prefs, inner_km, outer_km, max_price):
        self.requested.append((inner_km, outer_km, max_price))
        if (inner_km, outer_km) in self.fail_on:
            raise TimeoutError("band query timed out")
        return self.by_band.get((inner_km, outer_km), [])


async def _discover(fetch, *, limit=5, engine=None):
    return await discover_top_properties(
        make_prefs(),
        fetch_band=fetch,
        engine=engine or RatingEngine(),
        config=SearchConfig(),
        limit=limit,
        now=NOW,
    )


def test_default_search_bands():
    assert list(search_bands(SearchConfig())) == [(0.0, 6), (6, 10), (10, 14), (14, 18), (18, 22)]


def test_price_ceiling_allows_ten_percent_over_max():
    assert price_ceiling(900_000, SearchConfig()) == pytest.approx(990_000)


def test_select_top_is_stable_on_ties():
    entries = [
        TopPropertyEntry(property_id=1, rating=4.0),
        TopPropertyEntry(property_id=2, rating=4.5),
        TopPropertyEntry(property_id=3, rating=4.0),
        TopPropertyEntry(property_id=4, rating=4.0),
    ]
    top = select_top(entries, 3)
    assert [e.property_id for e in top] == [2, 1, 3]
    assert select_top(entries, 0) == ()


@pytest.mark.asyncio
async def test_stops_after_first_band_when_enough_found():
    first = [_profile(i, 1.0 + i * 0.1, growth=i / 10) for i in range(1, 8)]
    fetch = BandStub({(0.0, 6): first, (6, 10): [_profile(99, 7.0)]})

    result = await _discover(fetch)

    assert [(inner, outer) for inner, outer, _ in fetch.requested] == [(0.0, 6)]
    assert fetch.requested[0][2] == pytest.approx(990_000)
    assert len(result.cache.entries) == 5
    assert [e.property_id for e in result.cache.entries] == [7, 6, 5, 4, 3]
    assert result.stats.scored == 7
    assert result.cache.updated_at == NOW


@pytest.mark.asyncio
async def test_expands_until_radius_cap_and_never_duplicates():
    fetch = BandStub({(0.0, 6): [_profile(1, 2.0)], (14, 18): [_profile(2, 15.0)]})

    result = await _discover(fetch)

    assert len(fetch.requested) == 5
    ids = [e.property_id for e in result.cache.entries]
    assert sorted(ids) == [1, 2]
    assert len(ids) == len(set(ids))
    assert not result.stats.stopped_early


@pytest.mark.asyncio
async def test_nothing_nearby_gives_empty_cache():
    result = await _discover(BandStub({}))

    assert result.cache.entries == ()
    assert result.cache.is_empty
    assert result.stats.bands_searched == 5


@pytest.mark.asyncio
async def test_first_band_failure_is_raised():
    fetch = BandStub({}, fail_on={(0.0, 6)})
    with pytest.raises(TimeoutError):
        await _discover(fetch)


@pytest.mark.asyncio
async def test_later_band_failure_keeps_partial_results():
    fetch = BandStub({(0.0, 6): [_profile(1, 2.0), _profile(2, 3.0)]}, fail_on={(6, 10)})

    result = await _discover(fetch)

    assert [e.property_id for e in result.cache.entries] == [1, 2]
    assert result.stats.stopped_early
    assert result.stats.bands_searched == 1


class FlakyEngine(RatingEngine):
    def __init__(self, bad_ids):
        super().__init__()
        self.bad_ids = set(bad_ids)

    def rate(self, profile, prefs):
        if profile.property_id in self.bad_ids:
            raise ValueError("corrupt property row")
        return super().rate(profile, prefs)


@pytest.mark.asyncio
async def test_property_that_fails_to_rate_is_skipped():
    fetch = BandStub({(0.0, 6): [_profile(1, 1.0), _profile(2, 2.0), _profile(3, 3.0)]})

    result = await _discover(fetch, engine=FlakyEngine({2}))

    assert [e.property_id for e in result.cache.entries] == [1, 3]
    assert result.stats.skipped == 1
    assert result.stats.scored == 2


@pytest.mark.asyncio
async def test_ratings_in_cache_match_engine():
    prefs = make_prefs()
    profile = replace(_profile(1, 1.0), price=prefs.price_max + 50_000)
    fetch = BandStub({(0.0, 6): [profile]})

    result = await _discover(fetch)

    assert result.cache.entries[0].rating == pytest.approx(RatingEngine().rate(profile, prefs).rating)
    assert result.cache.entries[0].rating == pytest.approx(4.5)


@pytest.mark.asyncio
async def test_stats_snapshot_lists_searched_bands():
    fetch = BandStub({(0.0, 6): [_profile(1, 2.0)]}, fail_on={(10, 14)})

    result = await _discover(fetch)
    snap = result.stats.snapshot()

    assert snap["bands"] == [(0.0, 6), (6, 10)]
    assert snap["bands_searched"] == 2
    assert snap["stopped_early"] is True
