# homewise/entrypoints/fastapi_app.py
from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ..config import configure_logging
from ..db import engine
from ..domain.errors import GeocodingError, InvalidInputError, NotFoundError
from ..models import Base
from .api.routers import health, properties, recommender, users

log = logging.getLogger(__name__)


def _install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(NotFoundError)
    async def _not_found(request: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"error": str(exc)})

    @app.exception_handler(InvalidInputError)
    async def _invalid(request: Request, exc: InvalidInputError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": str(exc)})

    @app.exception_handler(GeocodingError)
    async def _geocoding(request: Request, exc: GeocodingError) -> JSONResponse:
        log.warning("geocoding failed on %s: %s", request.url.path, exc)
        return JSONResponse(status_code=502, content={"error": str(exc)})


def create_app(*, create_tables: bool = True) -> FastAPI:
    configure_logging()
    app = FastAPI(title="Homewise - Property Recommender")

    if create_tables:
        @app.on_event("startup")
        async def _startup() -> None:
            # Single place where DB tables are created in dev.
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)

    _install_error_handlers(app)

    app.include_router(health.router)
    app.include_router(properties.router)
    app.include_router(users.router)
    app.include_router(recommender.router)

    return app
