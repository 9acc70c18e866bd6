"""schemas — venue records, planner options and itinerary output."""

from datecourse.schemas.venue import (
    Category,
    Companion,
    FeedbackAction,
    Intensity,
    MealType,
    Theme,
    Transport,
    Venue,
)
from datecourse.schemas.itinerary import (
    GeneratedItinerary,
    GenerationOptions,
    ItineraryStep,
    MealWindow,
    MealWindows,
    WeatherSnapshot,
)

__all__ = [
    "Category",
    "Companion",
    "FeedbackAction",
    "Intensity",
    "MealType",
    "Theme",
    "Transport",
    "Venue",
    "GeneratedItinerary",
    "GenerationOptions",
    "ItineraryStep",
    "MealWindow",
    "MealWindows",
    "WeatherSnapshot",
]
