# homewise/entrypoints/api/routers/users.py
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..deps import current_user_id, geocoder_dep
from ....db import get_session
from ....models import User
from ....schemas import PreferencesIn, UserCreate, UserOut
from ....service_layer.accounts import edit_preferences, register_user
from ....service_layer.ingest import Geocoder

router = APIRouter(tags=["users"])


def user_out(user: User) -> UserOut:
    return UserOut(
        id=user.id,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        suburb=user.pref_suburb,
        postcode=user.pref_postcode,
        price_min=user.price_min,
        price_max=user.price_max,
        preferences_updated_at=user.preferences_updated_at,
    )


@router.post("/user/register", response_model=UserOut, status_code=201)
async def register(
    body: UserCreate,
    session: AsyncSession = Depends(get_session),
    geocoder: Geocoder = Depends(geocoder_dep),
) -> UserOut:
    user = await register_user(
        session,
        email=body.email,
        first_name=body.first_name,
        last_name=body.last_name,
        suburb=body.suburb,
        postcode=body.postcode,
        price_range=body.price_range(),
        scoring=body.scoring(),
        geocoder=geocoder,
    )
    await session.commit()
    return user_out(user)


@router.post("/user/edit/preferences", response_model=UserOut, status_code=201)
async def update_preferences(
    body: PreferencesIn,
    user_id: int = Depends(current_user_id),
    session: AsyncSession = Depends(get_session),
    geocoder: Geocoder = Depends(geocoder_dep),
) -> UserOut:
    user = await edit_preferences(
        session,
        user_id,
        suburb=body.suburb,
        postcode=body.postcode,
        price_range=body.price_range(),
        scoring=body.scoring(),
        geocoder=geocoder,
    )
    await session.commit()
    return user_out(user)
