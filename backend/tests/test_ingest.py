import json

import pytest
from sqlalchemy import func, select

from homewise.domain.errors import InvalidInputError, NotFoundError
from homewise.domain.objective import ObjectiveScorer
from homewise.domain.types import AmenityKind
from homewise.models import Property
from homewise.service_layer.ingest import mark_property_sold, street_address, upload_properties

from factories import SYDNEY, FakeAmenities, FakeGeocoder


def _payload(**overrides):
    base = {
        "street_number": "12",
        "street": "Crown St",
        "suburb": "Surry Hills",
        "postcode": "2010",
        "state": "NSW",
        "cap_growth_pct": 3.0,
        "rental_yield_pct": 4.0,
        "price": 850_000,
        "property_type": "apartment",
        "bedrooms": 2,
        "images": ["https://img.example.com/1.jpg"],
    }
    base.update(overrides)
    return base


def test_street_address_format():
    assert street_address(_payload()) == "12 Crown St, Surry Hills, NSW 2010"


@pytest.mark.asyncio
async def test_upload_geocodes_scores_and_stores(session):
    geocoder = FakeGeocoder(SYDNEY)
    scorer = ObjectiveScorer(FakeAmenities({AmenityKind.school: 2500.0, AmenityKind.train_station: 0.0}))

    [prop] = await upload_properties(session, [_payload()], scorer=scorer, geocoder=geocoder)

    assert geocoder.addresses == ["12 Crown St, Surry Hills, NSW 2010"]
    assert prop.id is not None
    assert prop.sold is False
    assert (prop.lat, prop.lon) == (SYDNEY.lat, SYDNEY.lng)
    assert prop.growth_score == pytest.approx(0.5)
    assert prop.yield_score == pytest.approx(1.0)
    assert prop.school_score == pytest.approx(0.5)
    assert prop.transport_score == pytest.approx(1.0)
    assert json.loads(prop.images_json) == ["https://img.example.com/1.jpg"]


@pytest.mark.asyncio
async def test_upload_uses_given_coordinates(session):
    geocoder = FakeGeocoder()
    [prop] = await upload_properties(
        session,
        [_payload(lat=-33.9, lng=151.1)],
        scorer=ObjectiveScorer(FakeAmenities()),
        geocoder=geocoder,
    )
    assert geocoder.addresses == []
    assert prop.lat == -33.9
    assert prop.school_score == 0.0


@pytest.mark.asyncio
async def test_mark_sold(session):
    [prop] = await upload_properties(
        session, [_payload(lat=-33.9, lng=151.1)], scorer=ObjectiveScorer(FakeAmenities()), geocoder=FakeGeocoder()
    )
    await mark_property_sold(session, prop.id)
    await session.refresh(prop)
    assert prop.sold is True

    with pytest.raises(NotFoundError):
        await mark_property_sold(session, prop.id + 1)


@pytest.mark.asyncio
async def test_upload_rejects_non_finite_growth_before_storing(session):
    geocoder = FakeGeocoder()
    with pytest.raises(InvalidInputError):
        await upload_properties(
            session,
            [_payload(cap_growth_pct=float("nan"))],
            scorer=ObjectiveScorer(FakeAmenities()),
            geocoder=geocoder,
        )

    assert (await session.execute(select(func.count(Property.id)))).scalar_one() == 0


@pytest.mark.asyncio
async def test_upload_rejects_non_finite_price(session):
    geocoder = FakeGeocoder()
    with pytest.raises(InvalidInputError):
        await upload_properties(
            session, [_payload(price=float("inf"))], scorer=ObjectiveScorer(FakeAmenities()), geocoder=geocoder
        )
    assert geocoder.addresses == []
