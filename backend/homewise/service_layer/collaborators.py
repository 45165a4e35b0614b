# homewise/service_layer/collaborators.py
from __future__ import annotations

from ..adapters.clients.google_maps import GoogleGeocoder, GooglePlacesAmenityLookup
from ..adapters.clients.rating_narrator import OpenAIRatingNarrator
from ..config import scoring_config
from ..domain.objective import ObjectiveScorer
from ..domain.rating import RatingEngine


def build_objective_scorer() -> ObjectiveScorer:
    return ObjectiveScorer(GooglePlacesAmenityLookup(), scoring_config())


def build_rating_engine(*, with_narrator: bool = True) -> RatingEngine:
    cfg = scoring_config()
    narrator = OpenAIRatingNarrator(config=cfg) if with_narrator else None
    return RatingEngine(cfg, narrator=narrator)


def build_geocoder() -> GoogleGeocoder:
    return GoogleGeocoder()
