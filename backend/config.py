"""
config.py
---------
Central configuration for the itinerary engine.
Every tunable is read from an environment variable with a documented default;
nothing below is re-declared as a literal inside scheduling logic.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the backend directory (if it exists) so env vars in that file
# are picked up by os.getenv() below.  Won't override vars already set in the shell.
_env_path = Path(__file__).parent / ".env"
if _env_path.exists():
    load_dotenv(_env_path, override=False)


def _env_list(name: str, default: str) -> list[str]:
    return [v.strip() for v in os.getenv(name, default).split(",") if v.strip()]


# ── Catalog ──────────────────────────────────────────────────────────────────
CATALOG_DIR: Path = Path(os.getenv("CATALOG_DIR", str(Path(__file__).parent / "data" / "locations")))

# ── Day scheduling (all time values in minutes) ──────────────────────────────
DAY_START: str             = os.getenv("DAY_START", "08:00")            # first visit of each day
DAY_ACTIVE_BUDGET_MIN: int = int(os.getenv("DAY_ACTIVE_BUDGET_MIN", "720"))  # 12 active hours
MAX_SAME_CATEGORY_RUN: int = int(os.getenv("MAX_SAME_CATEGORY_RUN", "2"))
MAX_TRIP_DAYS: int         = int(os.getenv("MAX_TRIP_DAYS", "14"))

# Pace → target visits per day (onboarding presets)
PACE_CAPACITY: dict[str, int] = {
    "chill":    int(os.getenv("PACE_CAPACITY_CHILL",    "3")),
    "balanced": int(os.getenv("PACE_CAPACITY_BALANCED", "5")),
    "packed":   int(os.getenv("PACE_CAPACITY_PACKED",   "7")),
}
# Visits allowed above the pace target (only the "maximize" transform uses it)
PACE_EXTRA_ALLOWANCE: int = int(os.getenv("PACE_EXTRA_ALLOWANCE", "1"))

# ── Budget (VND) ──────────────────────────────────────────────────────────────
# Price tiers admitted per budget tier; tier 1 is always admitted as a floor.
BUDGET_PRICE_TIERS: dict[str, tuple[int, ...]] = {
    "budget":   (1, 2),
    "moderate": (1, 2, 3),
    "luxury":   (2, 3, 4),
}
PRICE_TIER_FLOOR: int = 1

BUDGET_DAILY_VND: dict[str, int] = {
    "budget":   int(os.getenv("BUDGET_DAILY_VND_BUDGET",   "400000")),
    "moderate": int(os.getenv("BUDGET_DAILY_VND_MODERATE", "1000000")),
    "luxury":   int(os.getenv("BUDGET_DAILY_VND_LUXURY",   "2500000")),
}

# Estimated spend for one visit, by catalog price level
PRICE_LEVEL_COST_VND: dict[int, int] = {
    1: int(os.getenv("PRICE_LEVEL_1_VND", "60000")),
    2: int(os.getenv("PRICE_LEVEL_2_VND", "180000")),
    3: int(os.getenv("PRICE_LEVEL_3_VND", "400000")),
    4: int(os.getenv("PRICE_LEVEL_4_VND", "900000")),
}

# ── Affinity weights (must sum to 1.0) ───────────────────────────────────────
AFFINITY_W_TAGS:   float = float(os.getenv("AFFINITY_W_TAGS",   "0.5"))
AFFINITY_W_RATING: float = float(os.getenv("AFFINITY_W_RATING", "0.3"))
AFFINITY_W_FLAGS:  float = float(os.getenv("AFFINITY_W_FLAGS",  "0.2"))

# ── Match score weights (must sum to 1.0) ────────────────────────────────────
MATCH_W_AFFINITY: float = float(os.getenv("MATCH_W_AFFINITY", "0.60"))
MATCH_W_BUDGET:   float = float(os.getenv("MATCH_W_BUDGET",   "0.25"))
MATCH_W_PACE:     float = float(os.getenv("MATCH_W_PACE",     "0.15"))
MATCH_BUDGET_BAND: float = float(os.getenv("MATCH_BUDGET_BAND", "0.20"))  # ±20 % → full fit
MATCH_PACE_BAND:   int   = int(os.getenv("MATCH_PACE_BAND", "1"))         # ±1 visit/day → full fit

# ── Transport legs ───────────────────────────────────────────────────────────
WALK_MAX_KM: float = float(os.getenv("WALK_MAX_KM", "1.2"))
BIKE_MAX_KM: float = float(os.getenv("BIKE_MAX_KM", "8.0"))
TRANSPORT_SPEED_KMH: dict[str, float] = {
    "walk":      float(os.getenv("WALK_SPEED_KMH", "4.5")),
    "grab_bike": float(os.getenv("BIKE_SPEED_KMH", "25.0")),
    "grab_car":  float(os.getenv("CAR_SPEED_KMH",  "30.0")),
}
TRANSPORT_RATE_VND_PER_KM: dict[str, int] = {
    "walk":      0,
    "grab_bike": int(os.getenv("BIKE_RATE_VND_PER_KM", "5000")),
    "grab_car":  int(os.getenv("CAR_RATE_VND_PER_KM",  "12000")),
}
MIN_LEG_MINUTES: int = int(os.getenv("MIN_LEG_MINUTES", "5"))   # boarding / alighting

# ── Weather ──────────────────────────────────────────────────────────────────
RAIN_CHANCE_THRESHOLD: int = int(os.getenv("RAIN_CHANCE_THRESHOLD", "60"))   # percent
RAIN_OUTDOOR_PENALTY: float = float(os.getenv("RAIN_OUTDOOR_PENALTY", "0.35"))
OUTDOOR_CATEGORIES: frozenset[str] = frozenset(_env_list("OUTDOOR_CATEGORIES", "beach,nature"))
OUTDOOR_TAGS: frozenset[str]       = frozenset(_env_list("OUTDOOR_TAGS", "hiking"))

# ── Optimizer thresholds ─────────────────────────────────────────────────────
WALK_FATIGUE_MINUTES: int = int(os.getenv("WALK_FATIGUE_MINUTES", "25"))
WALK_FATIGUE_FALLBACK_MODE: str = os.getenv("WALK_FATIGUE_FALLBACK_MODE", "grab_bike")

BUDGET_REPLACE_RADIUS_KM: float = float(os.getenv("BUDGET_REPLACE_RADIUS_KM", "2.0"))
BUDGET_MAX_AFFINITY_LOSS: float = float(os.getenv("BUDGET_MAX_AFFINITY_LOSS", "0.10"))

LOCAL_REPLACE_RADIUS_KM: float = float(os.getenv("LOCAL_REPLACE_RADIUS_KM", "3.0"))
LOCAL_MAX_AFFINITY_LOSS: float = float(os.getenv("LOCAL_MAX_AFFINITY_LOSS", "0.15"))

PHOTOGENIC_TAGS: frozenset[str] = frozenset(
    _env_list("PHOTOGENIC_TAGS", "photography,views,sunrise,sunset,instagram")
)
SUNRISE: str = os.getenv("SUNRISE", "06:00")
SUNSET:  str = os.getenv("SUNSET",  "18:00")
GOLDEN_HOUR_SPREAD_MIN: int = int(os.getenv("GOLDEN_HOUR_SPREAD_MIN", "60"))

# ── Assembly ─────────────────────────────────────────────────────────────────
POOL_CAP: int             = int(os.getenv("POOL_CAP", "200"))
RESULT_CAP: int           = int(os.getenv("RESULT_CAP", "3"))
DEDUP_OVERLAP_RATIO: float = float(os.getenv("DEDUP_OVERLAP_RATIO", "0.70"))

# ── Observability ────────────────────────────────────────────────────────────
LOGS_DIR: Path = Path(os.getenv("LOGS_DIR", str(Path(__file__).parent / "logs")))
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

# ── Itinerary store (persistence boundary) ───────────────────────────────────
ITINERARY_STORE: str   = os.getenv("ITINERARY_STORE", "memory")    # "memory" | "redis"
REDIS_HOST: str        = os.getenv("REDIS_HOST",     "localhost")
REDIS_PORT: int        = int(os.getenv("REDIS_PORT", "6379"))
REDIS_DB: int          = int(os.getenv("REDIS_DB",   "0"))
REDIS_PASSWORD: str    = os.getenv("REDIS_PASSWORD", "")
ITINERARY_TTL: int     = int(os.getenv("ITINERARY_TTL", "2592000"))  # 30 days
