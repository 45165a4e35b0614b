# homewise/service_layer/accounts.py
from __future__ import annotations

from datetime import datetime, timezone
from typing import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from ..adapters.repos.users import UserRepository
from ..domain.errors import InvalidInputError
from ..domain.policies import validate_preferences
from ..models import User
from .ingest import Geocoder


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


async def register_user(
    session: AsyncSession,
    *,
    email: str,
    first_name: str,
    last_name: str,
    suburb: str,
    postcode: str,
    price_range: Sequence[float],
    scoring: Sequence[float],
    geocoder: Geocoder,
    now: datetime | None = None,
) -> User:
    """
    Create a user with validated preferences and an empty top-N cache.
    """
    if not (email and first_name and last_name):
        raise InvalidInputError("Input fields cannot be empty.")
    validate_preferences(suburb=suburb, postcode=postcode, price_range=price_range, scoring=scoring)

    repo = UserRepository(session)
    if await repo.get_by_email(email):
        raise InvalidInputError("Email already taken.")

    where = await geocoder.geocode_suburb(suburb, postcode)
    now = now or _utcnow()

    user = User(
        email=email,
        first_name=first_name,
        last_name=last_name,
        date_joined=now,
        pref_suburb=suburb,
        pref_postcode=postcode,
        pref_lat=where.lat,
        pref_lon=where.lng,
        price_min=float(price_range[0]),
        price_max=float(price_range[1]),
        w_growth=float(scoring[0]),
        w_yield=float(scoring[1]),
        w_proximity=float(scoring[2]),
        school_pct=float(scoring[3]),
        transport_pct=float(scoring[4]),
        preferences_updated_at=now,
        top_properties_json="[]",
        top_properties_updated_at=None,
    )
    return await repo.add(user)


async def edit_preferences(
    session: AsyncSession,
    user_id: int,
    *,
    suburb: str,
    postcode: str,
    price_range: Sequence[float],
    scoring: Sequence[float],
    geocoder: Geocoder,
    now: datetime | None = None,
) -> User:
    """
    Overwrite a user's preferences. Bumping `preferences_updated_at` makes any
    cached top-N older than the preferences, so the next read recomputes it.
    """
    repo = UserRepository(session)
    user = await repo.require(user_id)
    validate_preferences(suburb=suburb, postcode=postcode, price_range=price_range, scoring=scoring)

    where = await geocoder.geocode_suburb(suburb, postcode)

    user.pref_suburb = suburb
    user.pref_postcode = postcode
    user.pref_lat = where.lat
    user.pref_lon = where.lng
    user.price_min = float(price_range[0])
    user.price_max = float(price_range[1])
    user.w_growth = float(scoring[0])
    user.w_yield = float(scoring[1])
    user.w_proximity = float(scoring[2])
    user.school_pct = float(scoring[3])
    user.transport_pct = float(scoring[4])
    user.preferences_updated_at = now or _utcnow()

    await session.flush()
    return user
