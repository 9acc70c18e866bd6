"""
schemas/itinerary.py
--------------------
Dataclass definitions for planner inputs (GenerationOptions) and outputs
(ItineraryStep, GeneratedItinerary).

Times are naive or aware datetimes; the planner only adds timedeltas and
reads hour/minute, so whatever the caller passes in is carried through.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional

from datecourse import config
from datecourse.schemas.venue import Companion, Intensity, MealType, Transport, Venue


@dataclass(frozen=True)
class MealWindow:
    """Minute-of-day range during which a meal slot may start."""
    start_minutes: int
    end_minutes: int

    def contains(self, minute_of_day: int) -> bool:
        return self.start_minutes <= minute_of_day <= self.end_minutes


@dataclass(frozen=True)
class MealWindows:
    lunch: MealWindow = field(
        default_factory=lambda: MealWindow(config.LUNCH_WINDOW_START, config.LUNCH_WINDOW_END)
    )
    dinner: MealWindow = field(
        default_factory=lambda: MealWindow(config.DINNER_WINDOW_START, config.DINNER_WINDOW_END)
    )


@dataclass(frozen=True)
class WeatherSnapshot:
    """Weather at planning time. Absence of live data means 20 °C and dry."""
    temperature: float = config.DEFAULT_TEMPERATURE_C
    is_raining: bool = False


@dataclass
class GenerationOptions:
    """
    Per-call planning configuration.

    locked_steps maps a sequence index (start venue = 0) to the venue the
    caller wants pinned at that position. A pin is honoured only if the venue
    is unvisited and passes the same feasibility checks as a scored candidate.

    user_vector of None means a neutral (all 0.5) preference vector.
    """
    start_venue: Optional[Venue]
    start_time: datetime
    end_venue: Optional[Venue] = None
    end_time: Optional[datetime] = None
    must_visit: list[Venue] = field(default_factory=list)
    locked_steps: dict[int, Venue] = field(default_factory=dict)
    meal_windows: MealWindows = field(default_factory=MealWindows)
    companion: Companion = Companion.SOLO
    transport: Transport = Transport.FOOT
    intensity: Intensity = Intensity.RELAXED
    duration_hours: float = config.DEFAULT_DURATION_HOURS
    weather: WeatherSnapshot = field(default_factory=WeatherSnapshot)
    user_vector: Optional[dict[str, float]] = None

    @property
    def max_end_time(self) -> datetime:
        """Earlier of the explicit end time and start + duration."""
        duration_end = self.start_time + timedelta(hours=self.duration_hours)
        if self.end_time is None:
            return duration_end
        return min(self.end_time, duration_end)


@dataclass
class ItineraryStep:
    """
    A single stop in the itinerary.

    meal_type is the slot the stop fills (lunch / dinner / cafe break), not
    the venue's own meal tag; None for ordinary stops, anchors and the start.
    """
    venue: Venue
    start_time: datetime
    end_time: datetime
    travel_minutes: float = 0.0
    distance_km: float = 0.0
    meal_type: Optional[MealType] = None


@dataclass
class GeneratedItinerary:
    steps: list[ItineraryStep] = field(default_factory=list)
    total_distance_km: float = 0.0
    estimated_duration: int = 0       # minutes, start -> final step's end

    @property
    def sequence(self) -> list[Venue]:
        return [s.venue for s in self.steps]

    def to_dict(self) -> dict:
        return {
            "sequence": [v.id for v in self.sequence],
            "total_distance_km": self.total_distance_km,
            "estimated_duration": self.estimated_duration,
            "steps": [
                {
                    "venue_id":       s.venue.id,
                    "name":           s.venue.name,
                    "category":       s.venue.category.value,
                    "lat":            s.venue.lat,
                    "lng":            s.venue.lng,
                    "start_time":     s.start_time.isoformat(),
                    "end_time":       s.end_time.isoformat(),
                    "travel_minutes": round(s.travel_minutes, 1),
                    "distance_km":    round(s.distance_km, 3),
                    "meal_type":      s.meal_type.value if s.meal_type else None,
                }
                for s in self.steps
            ],
        }
