import logging

from pydantic_settings import BaseSettings, SettingsConfigDict

from .domain.types import ScoringConfig, SearchConfig


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # --- Runtime ---
    ENV: str = "dev"  # dev|prod
    HOMEWISE_DB_URL: str = "sqlite+aiosqlite:///./homewise.db"
    LOG_LEVEL: str = "INFO"

    # --- Minimal B2B Auth (API key) for ingestion endpoints ---
    # Send: X-API-Key: <key>
    API_KEY: str | None = None

    # --- Google Maps (geocoding + places nearby search) ---
    GMAPS_API_KEY: str | None = None
    GMAPS_BASE_URL: str = "https://maps.googleapis.com/maps/api"
    GEOCODE_REGION_SUFFIX: str = "Australia"

    # --- Rating descriptions (OpenAI-compatible chat completions) ---
    OPENAI_API_KEY: str | None = None
    OPENAI_BASE_URL: str = "https://api.openai.com/v1"
    OPENAI_MODEL: str = "gpt-4.1-nano"

    # --- Outbound HTTP ---
    HTTP_TIMEOUT_S: float = 10.0
    HTTP_MAX_RETRIES: int = 2
    HTTP_BACKOFF_BASE_S: float = 0.5

    # --- Timeouts around collaborators ---
    AMENITY_LOOKUP_TIMEOUT_S: float = 8.0
    REPO_QUERY_TIMEOUT_S: float = 15.0

    # --- Objective scoring ---
    IDEAL_CAP_GROWTH: float = 6.0
    IDEAL_RENT_YIELD: float = 4.0
    IDEAL_SCHOOL_DIST_M: float = 5000.0
    IDEAL_TRANSPORT_DIST_M: float = 2000.0

    # --- Personalised rating ---
    PRICE_SCORE_FLOOR: float = 0.5
    PRICE_PENALTY_STEP: float = 50_000.0
    PRICE_PENALTY: float = 0.1
    LOC_SCORE_FLOOR: float = 0.75
    LOC_GRACE_M: float = 3000.0
    DIST_PENALTY_STEP_M: float = 3000.0
    DIST_PENALTY: float = 0.1

    # --- Top-N discovery ---
    INITIAL_SEARCH_RADIUS_KM: float = 6.0
    RADIUS_STEP_KM: float = 4.0
    MAX_SEARCH_RADIUS_KM: float = 22.0
    PRICE_CEIL_MAX_PCT: float = 0.10
    TOP_N_DEFAULT: int = 5
    TOP_N_CACHE_TTL_HOURS: float = 24.0

    # --- Scheduler tuning ---
    SCHED_TOP_REFRESH_INTERVAL_MINUTES: int = 60
    SCHED_TOP_REFRESH_BATCH_SIZE: int = 100


settings = Settings()


def scoring_config(s: Settings = settings) -> ScoringConfig:
    return ScoringConfig(
        ideal_cap_growth_pct=s.IDEAL_CAP_GROWTH,
        ideal_rent_yield_pct=s.IDEAL_RENT_YIELD,
        ideal_school_dist_m=s.IDEAL_SCHOOL_DIST_M,
        ideal_transport_dist_m=s.IDEAL_TRANSPORT_DIST_M,
        price_score_floor=s.PRICE_SCORE_FLOOR,
        price_penalty_step=s.PRICE_PENALTY_STEP,
        price_penalty=s.PRICE_PENALTY,
        loc_score_floor=s.LOC_SCORE_FLOOR,
        loc_grace_m=s.LOC_GRACE_M,
        dist_penalty_step_m=s.DIST_PENALTY_STEP_M,
        dist_penalty=s.DIST_PENALTY,
    )


def search_config(s: Settings = settings) -> SearchConfig:
    return SearchConfig(
        initial_radius_km=s.INITIAL_SEARCH_RADIUS_KM,
        radius_step_km=s.RADIUS_STEP_KM,
        max_radius_km=s.MAX_SEARCH_RADIUS_KM,
        price_ceiling_pct=s.PRICE_CEIL_MAX_PCT,
        top_n=s.TOP_N_DEFAULT,
        cache_ttl_hours=s.TOP_N_CACHE_TTL_HOURS,
    )


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format="%(levelname)s:%(name)s:%(message)s",
    )

    # Quiet the usual offenders
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("apscheduler").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
