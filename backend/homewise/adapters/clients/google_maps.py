# homewise/adapters/clients/google_maps.py
from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from ...config import settings
from ...domain.errors import GeocodingError
from ...domain.geo import haversine_m
from ...domain.types import AmenityHit, AmenityKind, AmenityNotFound, AmenityResult, GeoPoint
from .http_resilience import resilient_request

log = logging.getLogger(__name__)


def _point_of(place: dict[str, Any]) -> GeoPoint | None:
    loc = (place.get("geometry") or {}).get("location") or {}
    lat, lng = loc.get("lat"), loc.get("lng")
    if lat is None or lng is None:
        return None
    try:
        return GeoPoint(lat=float(lat), lng=float(lng))
    except (TypeError, ValueError):
        return None


class GooglePlacesAmenityLookup:
    """
    AmenityLookup over the Places "nearby search" endpoint.

    Anything short of a usable first result (no key, HTTP error, timeout,
    empty results, malformed geometry) comes back as AmenityNotFound.
    """

    def __init__(
        self,
        api_key: str | None = None,
        *,
        base_url: str | None = None,
        timeout_s: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else settings.GMAPS_API_KEY
        self.base_url = (base_url or settings.GMAPS_BASE_URL).rstrip("/")
        self.timeout_s = timeout_s if timeout_s is not None else settings.AMENITY_LOOKUP_TIMEOUT_S
        self.client = client

    async def nearest(self, point: GeoPoint, kind: AmenityKind, radius_m: float) -> AmenityResult:
        if not self.api_key:
            return AmenityNotFound(kind=kind, reason="disabled")

        params = {
            "location": f"{point.lat},{point.lng}",
            "radius": int(radius_m),
            "type": kind.value,
            "key": self.api_key,
        }
        try:
            resp = await asyncio.wait_for(
                resilient_request(
                    "GET",
                    f"{self.base_url}/place/nearbysearch/json",
                    params=params,
                    timeout_s=self.timeout_s,
                    client=self.client,
                ),
                timeout=self.timeout_s,
            )
            data = resp.json()
        except (httpx.HTTPError, asyncio.TimeoutError, ValueError) as e:
            log.warning("amenity lookup failed kind=%s: %s", kind.value, type(e).__name__)
            return AmenityNotFound(kind=kind, reason=f"error:{type(e).__name__}")

        results = data.get("results") if isinstance(data, dict) else None
        for place in (results or [])[:1]:
            where = _point_of(place)
            if where is None:
                continue
            return AmenityHit(
                kind=kind,
                name=place.get("name") or "Unnamed",
                address=place.get("vicinity"),
                distance_m=haversine_m(point, where),
            )

        return AmenityNotFound(kind=kind)


class GoogleGeocoder:
    def __init__(
        self,
        api_key: str | None = None,
        *,
        base_url: str | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else settings.GMAPS_API_KEY
        self.base_url = (base_url or settings.GMAPS_BASE_URL).rstrip("/")
        self.client = client

    async def geocode(self, address: str) -> GeoPoint:
        """
        First match for `address`. Raises GeocodingError; callers cannot score
        or search without coordinates.
        """
        if not self.api_key:
            raise GeocodingError("GMAPS_API_KEY is not configured")

        try:
            resp = await resilient_request(
                "GET",
                f"{self.base_url}/geocode/json",
                params={"address": address, "key": self.api_key},
                client=self.client,
            )
            data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            raise GeocodingError(f"Geocoding failed for address {address!r}: {type(e).__name__}") from e

        for result in (data.get("results") or []) if isinstance(data, dict) else []:
            where = _point_of(result)
            if where is not None:
                return where

        raise GeocodingError(f"No results found for address: {address}")

    async def geocode_suburb(self, suburb: str, postcode: str) -> GeoPoint:
        """Centroid of an Australian suburb/postcode pair."""
        return await self.geocode(f"{suburb} {postcode} {settings.GEOCODE_REGION_SUFFIX}")
