# homewise/adapters/clients/rating_narrator.py
from __future__ import annotations

import logging
from typing import Any

import httpx

from ...config import settings
from ...domain.types import PropertyProfile, RatingBreakdown, ScoringConfig, UserPreferences
from .http_resilience import resilient_request

log = logging.getLogger(__name__)


def system_prompt(cfg: ScoringConfig) -> str:
    return f"""I have a rating system for properties (out of 5 stars). This rating is achieved first by taking the objective scores on the property for 4 criteria: the capital growth potential score (capital growth being the % growth in the property's value after 1 year), the rental yield score (rental yield being 1-year rental income as a % of property value), the school proximity score and the transport proximity score. These objective ratings (in range [0,1]) are higher for more attractive capital growth and rental yield, and also higher for closer proximity to schools and transport.

These objective ratings are then weighted against the user's stated importance for each of the criteria (measured as % in range [0,100]). The weighted ratings for capital growth, rental yield, school proximity and transport proximity are added together to create a 'core' score (in range [0,1]).

A price score (in range [0,1]) gives a perfect score of 1 if the price is within the desired range, and decreases the further the price is from the user's [min price, max price] range.

A location score (in range [0,1]) gives a perfect score of 1 if the property is within the desired suburb, and decreases the further the property is from the user's desired suburb.

The core rating is multiplied by the price score and location score to get a final rating between [0,1], then multiplied by 5 to get the final star rating.

When talking about scores, refer to them using percentages only (e.g. a price score of 0.75 is referred to as 75%).

The ideal capital growth the rating is based on is {cfg.ideal_cap_growth_pct:g}%, and the ideal rental yield is {cfg.ideal_rent_yield_pct:g}%. Anything above those amounts gets a perfect score.

The price score has a floor of {cfg.price_score_floor:.0%} and the location score has a floor of {cfg.loc_score_floor:.0%} so the property's other merits don't get fully drowned out.

Generate a description/justification of the rating just calculated for a user. Do not give any extra text, everything you say will appear on a webpage. This system only uses Australian properties.

Do not mention any scores other than the final star rating. Keep it abstract: a school proximity score of 0.20 shouldn't be mentioned explicitly, instead say the rating is impacted because the property is far from schools. You may mention figures like the capital growth potential and rental yield.

If the rating is low, use language that suits a low rating instead of trying to make it sound positive.

At the end, encourage the user to look at the 'Nearby Amenities' section of the page (down below), or at the 'Suburb Insights' page for the suburb the property is in (do not confuse this with the user's preferred suburb; mention the property's suburb by name).
"""


def user_prompt(profile: PropertyProfile, prefs: UserPreferences, b: RatingBreakdown) -> str:
    s = profile.scores
    return f"""Objective capital growth score = {s.growth_score}
Estimated capital growth % = {profile.cap_growth_pct}

Objective rental yield score = {s.yield_score}
Estimated rental yield % = {profile.rental_yield_pct}

Objective transport proximity score = {s.transport_score}
Objective school proximity score = {s.school_score}

User's capital growth importance = {prefs.w_growth}
User's rental yield importance = {prefs.w_yield}
User's school proximity importance = {prefs.w_schools}
User's transport proximity importance = {prefs.w_transport}

Calculated 'core' score = {b.core}
Calculated price score = {b.price_score}
Calculated location score = {b.loc_score}
Final 0 to 1 rating (core * price * location) = {b.final01}
Final 0 to 5 star rating (0to1 * 5) = {b.stars}

Suburb and postcode of the property = {profile.suburb} {profile.postcode}
User's desired suburb + postcode = {prefs.suburb} {prefs.postcode}
"""


def _content_of(data: Any) -> str | None:
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return None
    if not isinstance(content, str):
        return None
    return content.strip() or None


class OpenAIRatingNarrator:
    """
    RatingNarrator over an OpenAI-compatible /chat/completions endpoint.
    Returns None instead of raising: the numeric rating never waits on this.
    """

    def __init__(
        self,
        api_key: str | None = None,
        *,
        model: str | None = None,
        base_url: str | None = None,
        config: ScoringConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else settings.OPENAI_API_KEY
        self.model = model or settings.OPENAI_MODEL
        self.base_url = (base_url or settings.OPENAI_BASE_URL).rstrip("/")
        self.config = config or ScoringConfig()
        self.client = client

    async def describe(
        self,
        profile: PropertyProfile,
        prefs: UserPreferences,
        breakdown: RatingBreakdown,
    ) -> str | None:
        if not self.api_key:
            return None

        body = {
            "model": self.model,
            "temperature": 0,
            "messages": [
                {"role": "system", "content": system_prompt(self.config)},
                {"role": "user", "content": user_prompt(profile, prefs, breakdown)},
            ],
        }
        headers = {"Authorization": f"Bearer {self.api_key}", "Content-Type": "application/json"}

        try:
            resp = await resilient_request(
                "POST",
                f"{self.base_url}/chat/completions",
                headers=headers,
                json=body,
                client=self.client,
            )
            data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            log.warning("rating description failed property_id=%s: %s", profile.property_id, type(e).__name__)
            return None

        return _content_of(data)
