from datetime import datetime, timedelta, timezone

import pytest

from homewise.adapters.repos.properties import PropertyRepository, to_profile
from homewise.adapters.repos.users import UserRepository, preferences_of, top_properties_of
from homewise.domain.errors import NotFoundError
from homewise.domain.types import TopPropertiesCache, TopPropertyEntry

from factories import SYDNEY, add_property, add_user, north_of

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_find_in_ring_partitions_by_distance(session):
    near = await add_property(session, location=north_of(SYDNEY, 2.0))
    edge = await add_property(session, location=north_of(SYDNEY, 6.0))
    mid = await add_property(session, location=north_of(SYDNEY, 8.0))
    far = await add_property(session, location=north_of(SYDNEY, 30.0))

    repo = PropertyRepository(session)
    first = await repo.find_in_ring(SYDNEY, inner_km=0, outer_km=6, max_price=1e9)
    second = await repo.find_in_ring(SYDNEY, inner_km=6, outer_km=10, max_price=1e9)

    first_ids = {p.id for p in first}
    second_ids = {p.id for p in second}
    assert near.id in first_ids
    assert mid.id in second_ids
    assert far.id not in first_ids | second_ids
    # the 6 km property lands in exactly one ring
    assert (edge.id in first_ids) != (edge.id in second_ids)


@pytest.mark.asyncio
async def test_find_in_ring_excludes_sold_and_overpriced(session):
    ok = await add_property(session, location=north_of(SYDNEY, 1.0), price=980_000)
    await add_property(session, location=north_of(SYDNEY, 1.0), price=1_000_000)
    await add_property(session, location=north_of(SYDNEY, 1.0), sold=True)
    cheap = await add_property(session, location=north_of(SYDNEY, 1.5), price=10_000)

    found = await PropertyRepository(session).find_in_ring(SYDNEY, inner_km=0, outer_km=6, max_price=990_000)

    assert {p.id for p in found} == {ok.id, cheap.id}


@pytest.mark.asyncio
async def test_find_in_ring_orders_nearest_first(session):
    b = await add_property(session, location=north_of(SYDNEY, 4.0))
    a = await add_property(session, location=north_of(SYDNEY, 0.5))
    c = await add_property(session, location=north_of(SYDNEY, 5.5))

    found = await PropertyRepository(session).find_in_ring(SYDNEY, inner_km=0, outer_km=6, max_price=1e9)

    assert [p.id for p in found] == [a.id, b.id, c.id]


@pytest.mark.asyncio
async def test_mark_sold_and_missing_property(session):
    prop = await add_property(session)
    repo = PropertyRepository(session)

    await repo.mark_sold(prop.id)
    await session.refresh(prop)
    assert prop.sold is True

    with pytest.raises(NotFoundError):
        await repo.mark_sold(9999)
    with pytest.raises(NotFoundError):
        await repo.require(9999)


@pytest.mark.asyncio
async def test_profile_mapping(session):
    prop = await add_property(session, location=north_of(SYDNEY, 1.0), scores=(0.1, 0.2, 0.3, 0.4))
    profile = to_profile(prop)

    assert profile.property_id == prop.id
    assert profile.location.lat == pytest.approx(prop.lat)
    assert profile.scores.transport_score == pytest.approx(0.4)


@pytest.mark.asyncio
async def test_top_properties_cache_round_trip(session):
    user = await add_user(session)
    repo = UserRepository(session)
    cache = TopPropertiesCache(
        updated_at=NOW,
        entries=(TopPropertyEntry(property_id=3, rating=4.5), TopPropertyEntry(property_id=1, rating=4.0)),
    )

    await repo.write_top_properties(user.id, cache)
    await session.refresh(user)
    loaded = top_properties_of(user)

    assert loaded.entries == cache.entries
    assert loaded.updated_at.replace(tzinfo=timezone.utc) == NOW
    assert preferences_of(user).w_transport == pytest.approx(15.0)


@pytest.mark.asyncio
async def test_corrupt_cache_json_reads_as_empty(session):
    user = await add_user(session, top_properties_json="{not json", top_properties_updated_at=NOW)
    assert top_properties_of(user).is_empty


@pytest.mark.asyncio
async def test_write_cache_for_missing_user(session):
    with pytest.raises(NotFoundError):
        await UserRepository(session).write_top_properties(404, TopPropertiesCache(updated_at=NOW))


@pytest.mark.asyncio
async def test_lists_users_with_stale_caches(session):
    fresh_json = '[{"id": 1, "rating": 4.0}]'
    never = await add_user(session, email="never@example.com")
    expired = await add_user(
        session,
        email="expired@example.com",
        top_properties_json=fresh_json,
        top_properties_updated_at=NOW - timedelta(hours=30),
        preferences_updated_at=NOW - timedelta(days=3),
    )
    edited = await add_user(
        session,
        email="edited@example.com",
        top_properties_json=fresh_json,
        top_properties_updated_at=NOW - timedelta(hours=2),
        preferences_updated_at=NOW - timedelta(hours=1),
    )
    await add_user(
        session,
        email="fresh@example.com",
        top_properties_json=fresh_json,
        top_properties_updated_at=NOW - timedelta(hours=1),
        preferences_updated_at=NOW - timedelta(days=1),
    )

    ids = await UserRepository(session).list_ids_with_stale_top_properties(now=NOW, ttl_hours=24, limit=10)

    assert ids == [never.id, expired.id, edited.id]


@pytest.mark.asyncio
async def test_find_in_ring_can_include_outer_edge(session):
    # a property at the centre sits exactly on a zero-width ring's edge
    prop = await add_property(session, location=SYDNEY)
    repo = PropertyRepository(session)

    open_ring = await repo.find_in_ring(SYDNEY, inner_km=0, outer_km=0, max_price=1e9)
    closed_ring = await repo.find_in_ring(SYDNEY, inner_km=0, outer_km=0, max_price=1e9, include_outer=True)

    assert open_ring == []
    assert [p.id for p in closed_ring] == [prop.id]
