"""
config.py
---------
Central configuration for the date-course planner.
All knobs are read from environment variables; nothing secret is hard-coded.

Units: distances in km, travel/visit times in minutes, durations in hours,
meal windows in minutes since midnight.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the repository root (if it exists) so env vars in that file
# are picked up by os.getenv() below.
_env_path = Path(__file__).resolve().parent.parent / ".env"
if _env_path.exists():
    load_dotenv(_env_path, override=True)


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


# ── Transport ─────────────────────────────────────────────────────────────────
# Walking hop limit between consecutive stops (hard filter for candidates,
# soft for user-mandated anchors).
WALK_MAX_HOP_KM: float         = float(os.getenv("WALK_MAX_HOP_KM", "1.5"))
FOOT_MINUTES_PER_KM: float     = float(os.getenv("FOOT_MINUTES_PER_KM", "12"))
FOOT_MAX_TRAVEL_MINUTES: float = float(os.getenv("FOOT_MAX_TRAVEL_MINUTES", "90"))
CAR_MINUTES_PER_KM: float      = float(os.getenv("CAR_MINUTES_PER_KM", "3"))
CAR_MAX_DRIVE_MINUTES: float   = float(os.getenv("CAR_MAX_DRIVE_MINUTES", "60"))
CAR_PARKING_MINUTES: float     = float(os.getenv("CAR_PARKING_MINUTES", "10"))

# ── Planning ──────────────────────────────────────────────────────────────────
DEFAULT_VISIT_MINUTES: int    = int(os.getenv("DEFAULT_VISIT_MINUTES", "60"))
DEFAULT_DURATION_HOURS: float = float(os.getenv("DEFAULT_DURATION_HOURS", "6"))
MIN_FILL_MINUTES: float       = float(os.getenv("MIN_FILL_MINUTES", "30"))
DIVERSITY_DECAY: float        = float(os.getenv("DIVERSITY_DECAY", "0.6"))

# Default meal windows (minutes since midnight)
LUNCH_WINDOW_START: int  = int(os.getenv("LUNCH_WINDOW_START", str(11 * 60 + 30)))   # 11:30
LUNCH_WINDOW_END: int    = int(os.getenv("LUNCH_WINDOW_END",   str(13 * 60 + 30)))   # 13:30
DINNER_WINDOW_START: int = int(os.getenv("DINNER_WINDOW_START", str(17 * 60)))       # 17:00
DINNER_WINDOW_END: int   = int(os.getenv("DINNER_WINDOW_END",   str(19 * 60 + 30)))  # 19:30

# ── Preference learning ───────────────────────────────────────────────────────
LIKE_DELTA: float    = float(os.getenv("LIKE_DELTA", "0.10"))
DISLIKE_DELTA: float = float(os.getenv("DISLIKE_DELTA", "-0.20"))

# ── Weather supplier (OpenWeatherMap current weather) ─────────────────────────
# Stub mode returns the neutral default snapshot (20 °C, dry) with no HTTP call.
USE_STUB_WEATHER: bool         = _flag("USE_STUB_WEATHER", "true")
OPENWEATHER_API_KEY: str       = os.getenv("OPENWEATHER_API_KEY", "")
OPENWEATHER_BASE_URL: str      = os.getenv(
    "OPENWEATHER_BASE_URL", "https://api.openweathermap.org/data/2.5/weather"
)
WEATHER_REQUEST_TIMEOUT: int   = int(os.getenv("WEATHER_REQUEST_TIMEOUT", "10"))
DEFAULT_TEMPERATURE_C: float   = 20.0

# ── Venue supplier (procedural generator) ─────────────────────────────────────
VENUE_GENERATOR_SEED: int  = int(os.getenv("VENUE_GENERATOR_SEED", "42"))
VENUE_GENERATOR_COUNT: int = int(os.getenv("VENUE_GENERATOR_COUNT", "2000"))

# ── Observability ─────────────────────────────────────────────────────────────
ENABLE_PERF_LOG: bool = _flag("ENABLE_PERF_LOG", "false")
LOGS_DIR: str         = os.getenv("LOGS_DIR", str(Path(__file__).resolve().parent.parent / "logs"))
LOG_LEVEL: str        = os.getenv("LOG_LEVEL", "INFO")
