"""
modules/tool_usage/weather_tool.py
-------------------------------------
Current-weather fetcher backed by the OpenWeatherMap Current Weather API.

Endpoint:
    GET https://api.openweathermap.org/data/2.5/weather
        ?lat={lat}&lon={lng}&appid={key}&units=metric

No OAuth — plain API key in `appid` query param.

Only two facts reach the planner (WeatherSnapshot):
  temperature  ← main.temp            (20 °C when missing)
  is_raining   ← any weather[].main containing "rain", "snow" or "drizzle"

Stub mode: USE_STUB_WEATHER=true (default) or OPENWEATHER_API_KEY absent
           returns WeatherSnapshot() (20 °C, dry) without a network call.
Network or payload errors degrade to the same default with a warning; the
planner must never fail because weather is unavailable.
"""

from __future__ import annotations
import logging
from typing import Any, Optional

import requests

from datecourse import config
from datecourse.schemas.itinerary import WeatherSnapshot

logger = logging.getLogger(__name__)

_WET_CONDITIONS = ("rain", "snow", "drizzle")


def parse_current_weather(data: dict[str, Any]) -> WeatherSnapshot:
    """Reduce an OWM current-weather payload to a WeatherSnapshot."""
    temp = (data.get("main") or {}).get("temp")
    if isinstance(temp, bool) or not isinstance(temp, (int, float)):
        temp = config.DEFAULT_TEMPERATURE_C

    conditions = " ".join(
        str((w or {}).get("main", "")) for w in (data.get("weather") or [])
    ).lower()
    is_raining = any(word in conditions for word in _WET_CONDITIONS)

    return WeatherSnapshot(temperature=float(temp), is_raining=is_raining)


class WeatherTool:
    """Returns the current WeatherSnapshot for a coordinate."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        use_stub: Optional[bool] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.api_key  = config.OPENWEATHER_API_KEY if api_key is None else api_key
        self.use_stub = config.USE_STUB_WEATHER if use_stub is None else use_stub
        self.session  = session or requests.Session()

    @property
    def is_live(self) -> bool:
        return not self.use_stub and bool(self.api_key)

    def fetch(self, lat: float, lng: float) -> WeatherSnapshot:
        if not self.is_live:
            logger.debug("Stub weather for (%.4f, %.4f)", lat, lng)
            return WeatherSnapshot()

        params = {
            "lat":   lat,
            "lon":   lng,
            "appid": self.api_key,
            "units": "metric",
        }
        try:
            res = self.session.get(
                config.OPENWEATHER_BASE_URL, params=params, timeout=config.WEATHER_REQUEST_TIMEOUT,
            )
            res.raise_for_status()
            data = res.json()
        except (requests.RequestException, ValueError) as exc:
            logger.warning("Weather lookup failed for (%.4f, %.4f): %s", lat, lng, exc)
            return WeatherSnapshot()

        if not isinstance(data, dict):
            logger.warning("Unexpected weather payload type %s; using default.", type(data).__name__)
            return WeatherSnapshot()
        return parse_current_weather(data)
