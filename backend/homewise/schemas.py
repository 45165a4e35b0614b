from datetime import datetime

from pydantic import BaseModel, Field


class PropertyUpload(BaseModel):
    street_number: str
    street: str
    suburb: str
    postcode: str
    state: str
    cap_growth_pct: float = Field(..., allow_inf_nan=False)
    rental_yield_pct: float = Field(..., allow_inf_nan=False)
    price: float = Field(..., ge=0, allow_inf_nan=False)

    # optional: skip geocoding when the uploader already knows the coordinates
    lat: float | None = Field(default=None, ge=-90, le=90)
    lng: float | None = Field(default=None, ge=-180, le=180)

    agent: str | None = None
    description: str | None = None
    images: list[str] = Field(default_factory=list)
    bedrooms: int | None = None
    bathrooms: int | None = None
    car_spaces: int | None = None
    land_size_m2: float | None = None
    property_type: str | None = None
    sold: bool = False


class PropertyUploadBatch(BaseModel):
    properties: list[PropertyUpload]


class PropertyOut(BaseModel):
    id: int
    street_number: str
    street: str
    suburb: str
    postcode: str
    state: str
    lat: float
    lng: float

    cap_growth_pct: float
    rental_yield_pct: float
    growth_score: float
    yield_score: float
    school_score: float
    transport_score: float

    price: float
    property_type: str | None = None
    bedrooms: int | None = None
    bathrooms: int | None = None
    car_spaces: int | None = None
    land_size_m2: float | None = None
    description: str | None = None
    sold: bool


class UploadResult(BaseModel):
    uploaded: int
    property_ids: list[int]


class PreferencesIn(BaseModel):
    suburb: str
    postcode: str
    price_lowest: float = Field(..., allow_inf_nan=False)
    price_highest: float = Field(..., allow_inf_nan=False)
    capital_growth: float = Field(..., allow_inf_nan=False)
    rental_yield: float = Field(..., allow_inf_nan=False)
    proximity_score: float = Field(..., allow_inf_nan=False)
    school_proximity: float = Field(..., allow_inf_nan=False)
    transport_proximity: float = Field(..., allow_inf_nan=False)

    def price_range(self) -> list[float]:
        return [self.price_lowest, self.price_highest]

    def scoring(self) -> list[float]:
        return [
            self.capital_growth,
            self.rental_yield,
            self.proximity_score,
            self.school_proximity,
            self.transport_proximity,
        ]


class UserCreate(PreferencesIn):
    email: str
    first_name: str
    last_name: str


class UserOut(BaseModel):
    id: int
    email: str
    first_name: str
    last_name: str
    suburb: str
    postcode: str
    price_min: float
    price_max: float
    preferences_updated_at: datetime


class RatingOut(BaseModel):
    rating: float = Field(..., ge=0, le=5)
    description: str | None = None


class PropertyWithRating(BaseModel):
    property: PropertyOut
    rating: float


class TopPropertiesOut(BaseModel):
    properties_and_ratings: list[PropertyWithRating]
    updated_at: datetime | None
    from_cache: bool
