from __future__ import annotations

import argparse
import asyncio
import json
from pathlib import Path

from homewise.config import configure_logging
from homewise.db import async_session, engine
from homewise.models import Base
from homewise.schemas import PropertyUpload
from homewise.service_layer.collaborators import build_geocoder, build_objective_scorer
from homewise.service_layer.ingest import upload_properties

DEMO_PROPERTIES = [
    {
        "street_number": "12", "street": "Bondi Rd", "suburb": "Bondi", "postcode": "2026", "state": "NSW",
        "lat": -33.8915, "lng": 151.2767, "cap_growth_pct": 5.5, "rental_yield_pct": 3.1, "price": 1_450_000,
        "bedrooms": 2, "bathrooms": 1, "property_type": "Apartment & Unit",
    },
    {
        "street_number": "3", "street": "Station St", "suburb": "Newtown", "postcode": "2042", "state": "NSW",
        "lat": -33.8978, "lng": 151.1786, "cap_growth_pct": 4.2, "rental_yield_pct": 4.4, "price": 1_150_000,
        "bedrooms": 3, "bathrooms": 2, "property_type": "House",
    },
    {
        "street_number": "88", "street": "Church St", "suburb": "Parramatta", "postcode": "2150", "state": "NSW",
        "lat": -33.8150, "lng": 151.0011, "cap_growth_pct": 6.8, "rental_yield_pct": 4.9, "price": 780_000,
        "bedrooms": 2, "bathrooms": 2, "property_type": "Apartment & Unit",
    },
]


async def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--file", type=Path, default=None, help="JSON list of property uploads (default: built-in demo set)")
    args = parser.parse_args()

    configure_logging()
    raw = json.loads(args.file.read_text()) if args.file else DEMO_PROPERTIES
    payloads = [PropertyUpload(**p).model_dump() for p in raw]

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session() as session:
        props = await upload_properties(
            session,
            payloads,
            scorer=build_objective_scorer(),
            geocoder=build_geocoder(),
        )
        await session.commit()

    print(f"Seeded {len(props)} properties: ids={[p.id for p in props]}")


if __name__ == "__main__":
    asyncio.run(main())
