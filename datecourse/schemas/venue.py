"""
schemas/venue.py
----------------
Venue record and the closed vocabularies the planner reasons about.

Venues are supplied by an external pool (OSM export or the procedural
generator in modules/tool_usage/venue_tool.py) and are read-only to the
planner: the record is frozen and the planner never sanitises it.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from datecourse import config


class Category(str, Enum):
    ACTIVITY   = "activity"
    CAFE       = "cafe"
    RESTAURANT = "restaurant"
    SHOPPING   = "shopping"
    BAKERY     = "bakery"
    BAR        = "bar"
    CULTURE    = "culture"
    LANDMARK   = "landmark"


class MealType(str, Enum):
    LUNCH  = "lunch"
    DINNER = "dinner"
    CAFE   = "cafe"


class Theme(str, Enum):
    HEALING  = "Healing"
    ACTIVITY = "Activity"
    GOURMET  = "Gourmet"


class Companion(str, Enum):
    PARTNER = "partner"
    FRIEND  = "friend"
    FAMILY  = "family"
    SOLO    = "solo"


class Transport(str, Enum):
    FOOT = "foot"
    CAR  = "car"


class Intensity(str, Enum):
    RELAXED = "relaxed"
    PACKED  = "packed"


class FeedbackAction(str, Enum):
    LIKE    = "LIKE"
    DISLIKE = "DISLIKE"


@dataclass(frozen=True)
class Venue:
    """
    A candidate stop.

    estimated_duration is the planned stay in minutes; None means "unknown"
    and resolves to config.DEFAULT_VISIT_MINUTES via visit_minutes.
    """
    id: str
    name: str
    category: Category
    lat: float
    lng: float
    is_indoor: bool = True
    name_local: str = ""
    description: str = ""
    themes: frozenset[Theme] = field(default_factory=frozenset)
    meal_type: Optional[MealType] = None
    estimated_duration: Optional[int] = None

    @property
    def visit_minutes(self) -> int:
        if self.estimated_duration is None:
            return config.DEFAULT_VISIT_MINUTES
        return self.estimated_duration

    @property
    def is_outdoor(self) -> bool:
        return not self.is_indoor
