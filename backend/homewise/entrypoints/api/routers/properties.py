# homewise/entrypoints/api/routers/properties.py
from __future__ import annotations

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from ..deps import geocoder_dep, objective_scorer_dep, require_api_key
from ....adapters.repos.properties import PropertyRepository
from ....db import get_session
from ....domain.objective import ObjectiveScorer
from ....models import Property
from ....schemas import PropertyOut, PropertyUploadBatch, UploadResult
from ....service_layer.ingest import Geocoder, mark_property_sold, upload_properties

router = APIRouter(tags=["properties"])


def property_out(prop: Property) -> PropertyOut:
    return PropertyOut(
        id=prop.id,
        street_number=prop.street_number,
        street=prop.street,
        suburb=prop.suburb,
        postcode=prop.postcode,
        state=prop.state,
        lat=prop.lat,
        lng=prop.lon,
        cap_growth_pct=prop.cap_growth_pct,
        rental_yield_pct=prop.rental_yield_pct,
        growth_score=prop.growth_score,
        yield_score=prop.yield_score,
        school_score=prop.school_score,
        transport_score=prop.transport_score,
        price=prop.price,
        property_type=prop.property_type,
        bedrooms=prop.bedrooms,
        bathrooms=prop.bathrooms,
        car_spaces=prop.car_spaces,
        land_size_m2=prop.land_size_m2,
        description=prop.description,
        sold=prop.sold,
    )


@router.post("/property/upload", response_model=UploadResult, dependencies=[Depends(require_api_key)])
async def upload(
    body: PropertyUploadBatch,
    session: AsyncSession = Depends(get_session),
    scorer: ObjectiveScorer = Depends(objective_scorer_dep),
    geocoder: Geocoder = Depends(geocoder_dep),
) -> UploadResult:
    props = await upload_properties(
        session,
        [p.model_dump() for p in body.properties],
        scorer=scorer,
        geocoder=geocoder,
    )
    await session.commit()
    return UploadResult(uploaded=len(props), property_ids=[p.id for p in props])


@router.post("/property/{property_id}/sold", status_code=204, dependencies=[Depends(require_api_key)])
async def sold(
    property_id: int = Path(..., ge=1),
    session: AsyncSession = Depends(get_session),
) -> None:
    await mark_property_sold(session, property_id)
    await session.commit()


@router.get("/property/{property_id}", response_model=PropertyOut)
async def get_property(
    property_id: int = Path(..., ge=1),
    session: AsyncSession = Depends(get_session),
) -> PropertyOut:
    prop = await PropertyRepository(session).require(property_id)
    return property_out(prop)
