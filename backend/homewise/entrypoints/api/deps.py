# homewise/entrypoints/api/deps.py
from __future__ import annotations

from fastapi import Header, HTTPException

from ...config import settings
from ...domain.objective import ObjectiveScorer
from ...domain.rating import RatingEngine
from ...service_layer.collaborators import build_geocoder, build_objective_scorer, build_rating_engine
from ...service_layer.ingest import Geocoder


def require_api_key(x_api_key: str | None = Header(default=None, alias="X-API-Key")) -> None:
    if settings.API_KEY:
        if not x_api_key or x_api_key != settings.API_KEY:
            raise HTTPException(status_code=401, detail="Invalid API key")


def current_user_id(x_user_id: int | None = Header(default=None, alias="X-User-Id")) -> int:
    # identity comes from the auth layer in front of this service
    if x_user_id is None:
        raise HTTPException(status_code=401, detail="Missing X-User-Id")
    return x_user_id


def rating_engine_dep() -> RatingEngine:
    return build_rating_engine()


def objective_scorer_dep() -> ObjectiveScorer:
    return build_objective_scorer()


def geocoder_dep() -> Geocoder:
    return build_geocoder()
