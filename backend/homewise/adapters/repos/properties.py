# homewise/adapters/repos/properties.py
from __future__ import annotations

import json
from typing import Any, Sequence

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ...domain.errors import NotFoundError
from ...domain.geo import bounding_box, haversine_m, in_annulus
from ...domain.types import GeoPoint, ObjectiveScores, PropertyProfile
from ...models import Property


def to_profile(prop: Property) -> PropertyProfile:
    return PropertyProfile(
        property_id=prop.id,
        price=float(prop.price),
        suburb=prop.suburb,
        postcode=prop.postcode,
        location=GeoPoint(lat=prop.lat, lng=prop.lon),
        scores=ObjectiveScores(
            growth_score=prop.growth_score,
            yield_score=prop.yield_score,
            school_score=prop.school_score,
            transport_score=prop.transport_score,
        ),
        cap_growth_pct=prop.cap_growth_pct,
        rental_yield_pct=prop.rental_yield_pct,
    )


class PropertyRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, property_id: int) -> Property | None:
        return await self.session.get(Property, property_id)

    async def require(self, property_id: int) -> Property:
        prop = await self.get(property_id)
        if prop is None:
            raise NotFoundError("property", property_id)
        return prop

    async def get_many(self, property_ids: Sequence[int]) -> dict[int, Property]:
        if not property_ids:
            return {}
        q = select(Property).where(Property.id.in_(list(property_ids)))
        rows = (await self.session.execute(q)).scalars().all()
        return {p.id: p for p in rows}

    async def add(
        self,
        payload: dict[str, Any],
        *,
        location: GeoPoint,
        scores: ObjectiveScores,
    ) -> Property:
        """
        Insert an uploaded property. Objective scores are always written as a set.
        """
        prop = Property(
            street_number=str(payload["street_number"]).strip(),
            street=str(payload["street"]).strip(),
            suburb=str(payload["suburb"]).strip(),
            postcode=str(payload["postcode"]).strip(),
            state=str(payload["state"]).strip(),
            lat=location.lat,
            lon=location.lng,
            cap_growth_pct=float(payload["cap_growth_pct"]),
            rental_yield_pct=float(payload["rental_yield_pct"]),
            growth_score=scores.growth_score,
            yield_score=scores.yield_score,
            school_score=scores.school_score,
            transport_score=scores.transport_score,
            price=float(payload["price"]),
            property_type=payload.get("property_type"),
            bedrooms=payload.get("bedrooms"),
            bathrooms=payload.get("bathrooms"),
            car_spaces=payload.get("car_spaces"),
            land_size_m2=payload.get("land_size_m2"),
            description=payload.get("description"),
            agent_ref=payload.get("agent"),
            images_json=json.dumps(list(payload.get("images") or [])),
            sold=bool(payload.get("sold") or False),
        )
        self.session.add(prop)
        await self.session.flush()
        return prop

    async def mark_sold(self, property_id: int) -> None:
        res = await self.session.execute(
            update(Property).where(Property.id == property_id).values(sold=True)
        )
        if res.rowcount == 0:
            raise NotFoundError("property", property_id)

    async def find_in_ring(
        self,
        center: GeoPoint,
        *,
        inner_km: float,
        outer_km: float,
        max_price: float,
        include_outer: bool = False,
    ) -> list[Property]:
        """
        Unsold properties priced at or below `max_price` whose distance from
        `center` falls in [inner_km, outer_km), nearest first. `include_outer`
        closes the ring at outer_km.

        SQL narrows to the outer ring's bounding box; the exact ring test is haversine.
        """
        inner_m = inner_km * 1000.0
        outer_m = outer_km * 1000.0
        min_lat, max_lat, min_lon, max_lon = bounding_box(center, outer_m)

        q = (
            select(Property)
            .where(Property.sold.is_(False))
            .where(Property.price <= max_price)
            .where(Property.lat.between(min_lat, max_lat))
            .where(Property.lon.between(min_lon, max_lon))
            .order_by(Property.id.asc())
        )
        rows = (await self.session.execute(q)).scalars().all()

        hits: list[tuple[float, Property]] = []
        for prop in rows:
            d = haversine_m(center, GeoPoint(lat=prop.lat, lng=prop.lon))
            if in_annulus(d, inner_m, outer_m, closed=include_outer):
                hits.append((d, prop))

        hits.sort(key=lambda t: t[0])
        return [p for _, p in hits]
