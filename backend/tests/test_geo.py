import pytest

from homewise.domain.geo import bounding_box, haversine_m, in_annulus
from homewise.domain.types import GeoPoint

from factories import SYDNEY, north_of

MELBOURNE = GeoPoint(lat=-37.8136, lng=144.9631)


def test_haversine_zero_and_symmetric():
    assert haversine_m(SYDNEY, SYDNEY) == 0.0
    assert haversine_m(SYDNEY, MELBOURNE) == pytest.approx(haversine_m(MELBOURNE, SYDNEY))


def test_haversine_known_distances():
    one_degree = haversine_m(GeoPoint(0.0, 0.0), GeoPoint(1.0, 0.0))
    assert one_degree == pytest.approx(111_194.9, abs=1.0)

    # Sydney CBD to Melbourne CBD is roughly 714 km
    assert haversine_m(SYDNEY, MELBOURNE) == pytest.approx(714_000, rel=0.01)


def test_annulus_is_half_open():
    assert in_annulus(0.0, 0.0, 6000.0)
    assert in_annulus(5999.9, 0.0, 6000.0)
    assert not in_annulus(6000.0, 0.0, 6000.0)
    assert in_annulus(6000.0, 6000.0, 10000.0)


def test_bounding_box_contains_ring():
    min_lat, max_lat, min_lng, max_lng = bounding_box(SYDNEY, 10_000.0)
    for p in (north_of(SYDNEY, 9.9), north_of(SYDNEY, -9.9)):
        assert min_lat <= p.lat <= max_lat
    assert min_lng < SYDNEY.lng < max_lng
    assert max_lat - min_lat == pytest.approx(2 * 0.0899, abs=1e-3)


def test_closed_annulus_includes_outer_edge():
    assert in_annulus(22000.0, 18000.0, 22000.0, closed=True)
    assert not in_annulus(22000.1, 18000.0, 22000.0, closed=True)
    assert not in_annulus(22000.0, 18000.0, 22000.0)
