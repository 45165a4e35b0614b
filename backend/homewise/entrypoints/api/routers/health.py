# homewise/entrypoints/api/routers/health.py
from __future__ import annotations

from dataclasses import asdict
from typing import Any

from fastapi import APIRouter, Depends

from ..deps import require_api_key
from ....config import scoring_config, search_config, settings

router = APIRouter(tags=["health"])


@router.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/debug/config", dependencies=[Depends(require_api_key)])
def debug_config() -> dict[str, Any]:
    def _redact(v: str | None) -> str | None:
        if not v:
            return v
        if len(v) <= 8:
            return "***"
        return v[:4] + "***" + v[-4:]

    return {
        "ENV": settings.ENV,
        "HOMEWISE_DB_URL": settings.HOMEWISE_DB_URL,
        "GMAPS_API_KEY": _redact(settings.GMAPS_API_KEY),
        "OPENAI_API_KEY_SET": bool(settings.OPENAI_API_KEY),
        "OPENAI_MODEL": settings.OPENAI_MODEL,
        "scoring": asdict(scoring_config()),
        "search": asdict(search_config()),
    }
