# homewise/adapters/repos/users.py
from __future__ import annotations

import json
from datetime import datetime, timedelta

from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ...domain.errors import NotFoundError
from ...domain.types import GeoPoint, TopPropertiesCache, TopPropertyEntry, UserPreferences
from ...models import User


def preferences_of(user: User) -> UserPreferences:
    return UserPreferences(
        w_growth=user.w_growth,
        w_yield=user.w_yield,
        w_proximity=user.w_proximity,
        school_pct=user.school_pct,
        transport_pct=user.transport_pct,
        price_min=user.price_min,
        price_max=user.price_max,
        suburb=user.pref_suburb,
        postcode=user.pref_postcode,
        location=GeoPoint(lat=user.pref_lat, lng=user.pref_lon),
    )


def top_properties_of(user: User) -> TopPropertiesCache:
    try:
        raw = json.loads(user.top_properties_json or "[]")
    except json.JSONDecodeError:
        raw = []

    entries = tuple(
        TopPropertyEntry(property_id=int(row["id"]), rating=float(row["rating"]))
        for row in raw
        if isinstance(row, dict) and "id" in row and "rating" in row
    )
    return TopPropertiesCache(updated_at=user.top_properties_updated_at, entries=entries)


def _dump_entries(cache: TopPropertiesCache) -> str:
    return json.dumps([{"id": e.property_id, "rating": e.rating} for e in cache.entries])


class UserRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, user_id: int) -> User | None:
        return await self.session.get(User, user_id)

    async def require(self, user_id: int) -> User:
        user = await self.get(user_id)
        if user is None:
            raise NotFoundError("user", user_id)
        return user

    async def get_by_email(self, email: str) -> User | None:
        q = select(User).where(User.email == email)
        return (await self.session.execute(q)).scalars().first()

    async def add(self, user: User) -> User:
        self.session.add(user)
        await self.session.flush()
        return user

    async def write_top_properties(self, user_id: int, cache: TopPropertiesCache) -> None:
        """
        Replace the cached top-N wholesale in one UPDATE. Concurrent writers: last one wins.
        """
        res = await self.session.execute(
            update(User)
            .where(User.id == user_id)
            .values(
                top_properties_json=_dump_entries(cache),
                top_properties_updated_at=cache.updated_at,
            )
        )
        if res.rowcount == 0:
            raise NotFoundError("user", user_id)

    async def list_ids_with_stale_top_properties(
        self,
        *,
        now: datetime,
        ttl_hours: float,
        limit: int,
    ) -> list[int]:
        """
        Users whose cache is empty, expired, or older than their last preference edit.
        """
        cutoff = now - timedelta(hours=ttl_hours)
        q = (
            select(User.id)
            .where(
                or_(
                    User.top_properties_updated_at.is_(None),
                    User.top_properties_json == "[]",
                    User.top_properties_updated_at <= cutoff,
                    User.top_properties_updated_at < User.preferences_updated_at,
                )
            )
            .order_by(User.id.asc())
            .limit(limit)
        )
        return list((await self.session.execute(q)).scalars().all())
