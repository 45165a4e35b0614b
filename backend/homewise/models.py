# homewise/models.py
from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    DateTime,
    Float,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    first_name: Mapped[str] = mapped_column(String(80))
    last_name: Mapped[str] = mapped_column(String(80))
    date_joined: Mapped[datetime] = mapped_column(DateTime, default=_utcnow)

    # --- preferences ---
    pref_suburb: Mapped[str] = mapped_column(String(80))
    pref_postcode: Mapped[str] = mapped_column(String(4))
    pref_lat: Mapped[float] = mapped_column(Float)
    pref_lon: Mapped[float] = mapped_column(Float)
    price_min: Mapped[float] = mapped_column(Float)
    price_max: Mapped[float] = mapped_column(Float)

    # growth + yield + proximity == 100; school_pct + transport_pct == 100
    w_growth: Mapped[float] = mapped_column(Float)
    w_yield: Mapped[float] = mapped_column(Float)
    w_proximity: Mapped[float] = mapped_column(Float)
    school_pct: Mapped[float] = mapped_column(Float)
    transport_pct: Mapped[float] = mapped_column(Float)

    preferences_updated_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow)

    # --- cached top-N: [{"id": int, "rating": float}, ...], highest first ---
    top_properties_json: Mapped[str] = mapped_column(Text, default="[]")
    top_properties_updated_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)


class Property(Base):
    __tablename__ = "properties"
    __table_args__ = (
        Index("ix_properties_lat_lon", "lat", "lon"),
        Index("ix_properties_sold_price", "sold", "price"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    street_number: Mapped[str] = mapped_column(String(20))
    street: Mapped[str] = mapped_column(String(120))
    suburb: Mapped[str] = mapped_column(String(80), index=True)
    postcode: Mapped[str] = mapped_column(String(4), index=True)
    state: Mapped[str] = mapped_column(String(3))

    lat: Mapped[float] = mapped_column(Float)
    lon: Mapped[float] = mapped_column(Float)

    # projected 1-year capital growth % and rental income as % of price
    cap_growth_pct: Mapped[float] = mapped_column(Float)
    rental_yield_pct: Mapped[float] = mapped_column(Float)

    # objective scores in [0,1], written together at ingestion
    growth_score: Mapped[float] = mapped_column(Float)
    yield_score: Mapped[float] = mapped_column(Float)
    school_score: Mapped[float] = mapped_column(Float)
    transport_score: Mapped[float] = mapped_column(Float)

    price: Mapped[float] = mapped_column(Float)
    property_type: Mapped[str | None] = mapped_column(String(40), nullable=True)
    bedrooms: Mapped[int | None] = mapped_column(Integer, nullable=True)
    bathrooms: Mapped[int | None] = mapped_column(Integer, nullable=True)
    car_spaces: Mapped[int | None] = mapped_column(Integer, nullable=True)
    land_size_m2: Mapped[float | None] = mapped_column(Float, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    agent_ref: Mapped[str | None] = mapped_column(String(80), nullable=True)
    images_json: Mapped[str] = mapped_column(Text, default="[]")

    sold: Mapped[bool] = mapped_column(Boolean, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow, onupdate=_utcnow)
