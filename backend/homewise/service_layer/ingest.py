# homewise/service_layer/ingest.py
from __future__ import annotations

import logging
import math
from typing import Any, Protocol, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from ..adapters.repos.properties import PropertyRepository
from ..domain.errors import InvalidInputError
from ..domain.objective import ObjectiveScorer
from ..domain.types import GeoPoint, PropertyAttributes
from ..models import Property

log = logging.getLogger(__name__)


class Geocoder(Protocol):
    async def geocode(self, address: str) -> GeoPoint: ...

    async def geocode_suburb(self, suburb: str, postcode: str) -> GeoPoint: ...


def street_address(payload: dict[str, Any]) -> str:
    return (
        f"{payload['street_number']} {payload['street']}, "
        f"{payload['suburb']}, {payload['state']} {payload['postcode']}"
    )


async def _location_for(payload: dict[str, Any], geocoder: Geocoder) -> GeoPoint:
    lat, lng = payload.get("lat"), payload.get("lng")
    if lat is not None and lng is not None:
        return GeoPoint(lat=float(lat), lng=float(lng))
    return await geocoder.geocode(street_address(payload))


async def upload_properties(
    session: AsyncSession,
    payloads: Sequence[dict[str, Any]],
    *,
    scorer: ObjectiveScorer,
    geocoder: Geocoder,
) -> list[Property]:
    """
    Ingest uploaded properties: resolve coordinates, compute the four objective
    scores once, then persist. Objective scores are not recomputed later unless
    the property is uploaded again.
    """
    repo = PropertyRepository(session)
    out: list[Property] = []

    for payload in payloads:
        if not math.isfinite(float(payload["price"])):
            raise InvalidInputError("Price must be a finite number.")
        location = await _location_for(payload, geocoder)
        scores = await scorer.score(
            PropertyAttributes(
                cap_growth_pct=float(payload["cap_growth_pct"]),
                rental_yield_pct=float(payload["rental_yield_pct"]),
                location=location,
            )
        )
        prop = await repo.add(payload, location=location, scores=scores)
        out.append(prop)
        log.debug(
            "ingested property_id=%s growth=%.2f yield=%.2f school=%.2f transport=%.2f",
            prop.id,
            scores.growth_score,
            scores.yield_score,
            scores.school_score,
            scores.transport_score,
        )

    log.info("uploaded %s properties", len(out))
    return out


async def mark_property_sold(session: AsyncSession, property_id: int) -> None:
    await PropertyRepository(session).mark_sold(property_id)
