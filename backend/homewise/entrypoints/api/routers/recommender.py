# homewise/entrypoints/api/routers/recommender.py
from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..deps import current_user_id, rating_engine_dep
from .properties import property_out
from ....db import get_session
from ....domain.rating import RatingEngine
from ....schemas import PropertyWithRating, RatingOut, TopPropertiesOut
from ....service_layer.recommender import get_top_properties, rate_property_for_user

router = APIRouter(tags=["recommender"])


@router.get("/recommender/property", response_model=RatingOut)
async def property_rating(
    property_id: int = Query(..., alias="propertyId", ge=1),
    description: bool = Query(False),
    user_id: int = Depends(current_user_id),
    session: AsyncSession = Depends(get_session),
    engine: RatingEngine = Depends(rating_engine_dep),
) -> RatingOut:
    rating = await rate_property_for_user(
        session,
        user_id,
        property_id,
        include_description=description,
        engine=engine,
    )
    return RatingOut(rating=rating.rating, description=rating.description)


@router.get("/recommender/top", response_model=TopPropertiesOut)
async def top_properties(
    force: bool = Query(False),
    limit: int | None = Query(None, ge=1, le=50),
    user_id: int = Depends(current_user_id),
    session: AsyncSession = Depends(get_session),
    engine: RatingEngine = Depends(rating_engine_dep),
) -> TopPropertiesOut:
    top = await get_top_properties(
        session,
        user_id,
        force_refresh=force,
        limit=limit,
        engine=engine,
    )
    await session.commit()
    return TopPropertiesOut(
        properties_and_ratings=[
            PropertyWithRating(property=property_out(item.property), rating=item.rating)
            for item in top.items
        ],
        updated_at=top.updated_at,
        from_cache=top.from_cache,
    )
