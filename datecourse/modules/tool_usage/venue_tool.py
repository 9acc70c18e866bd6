"""
modules/tool_usage/venue_tool.py
----------------------------------
Venue pool supplier.

Two sources:
  1. load_json(path)  — a pre-fetched venue list (e.g. an OSM export written
                        by a fetch script). Every record is validated; bad
                        records are dropped with a warning.
  2. generate(count)  — procedural venues scattered around fixed hubs in
                        Daejeon. Used for offline testing and demos.

The generator draws from an injected random.Random(seed), so the same seed
always yields the same pool. Nothing is cached at module level.

Hub table (centre, scatter radius, share of food venues, share indoor):
  Dunsan-dong                      36.3512, 127.3848   0.8 km  0.60  0.70
  Bongmyeong-dong (Yuseong)        36.3650, 127.3400   1.0 km  0.55  0.65
  Soje-dong & Daeheung-dong        36.3189, 127.4283   0.9 km  0.50  0.80
  Techno Valley & KAIST            36.3708, 127.3845   1.2 km  0.45  0.75
  Outskirts (Jangtaesan, O-World)  36.3400, 127.4000   3.0 km  0.40  0.50
"""

from __future__ import annotations
import json
import logging
import math
import random
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from datecourse import config
from datecourse.modules.validation import filter_valid
from datecourse.schemas.venue import Category, MealType, Theme, Venue

logger = logging.getLogger(__name__)

_KM_PER_DEG_LAT = 111.0


@dataclass(frozen=True)
class Hub:
    name: str
    lat: float
    lng: float
    radius_km: float
    count: int
    food_ratio: float      # share of restaurants / cafes / bakeries
    indoor_ratio: float


HUBS: tuple[Hub, ...] = (
    Hub("Dunsan-dong",                     36.3512, 127.3848, 0.8, 400, 0.60, 0.70),
    Hub("Bongmyeong-dong (Yuseong)",       36.3650, 127.3400, 1.0, 300, 0.55, 0.65),
    Hub("Soje-dong & Daeheung-dong",       36.3189, 127.4283, 0.9, 300, 0.50, 0.80),
    Hub("Techno Valley & KAIST",           36.3708, 127.3845, 1.2, 200, 0.45, 0.75),
    Hub("Outskirts (Jangtaesan, O-World)", 36.3400, 127.4000, 3.0, 100, 0.40, 0.50),
)

# ── Naming tables ─────────────────────────────────────────────────────────────
PREFIXES = (
    "Grand", "Tasty", "Daejeon", "Hanbat", "Yuseong", "Dunsan", "Soje",
    "Modern", "Classic", "Premium", "Royal", "Elite", "Cozy", "Chic",
    "Mood", "Style", "Trend", "Vibe", "Zen", "Luxury", "Art", "Culture",
)
_RESTAURANT_WORDS = (
    "BBQ", "Pasta", "Pizza", "Sushi", "Ramen", "Kal-guksu", "Bibimbap",
    "Korean", "Italian", "Japanese", "Chinese", "Western", "Fusion",
    "Steak", "Seafood", "Chicken", "Burgers", "Dessert", "Buffet",
)
_CAFE_WORDS = (
    "Cafe", "Coffee", "Roastery", "Brunch", "Dessert Cafe", "Book Cafe",
    "Gallery Cafe", "Roof Top", "Terrace", "Study Cafe", "Pet Cafe",
)
_BAKERY_WORDS = ("Bakery", "Bread House", "Pastry", "Boulangerie")
_ACTIVITY_WORDS = (
    "Gallery", "Museum", "Park", "Zoo", "Observatory", "Theater",
    "Cinema", "Arcade", "Escape Room", "Karaoke", "Bowling",
    "Exhibition", "Concert Hall", "Library", "Aquarium", "Botanical Garden",
)
_LANDMARK_WORDS = (
    "Bridge", "Tower", "Plaza", "Square", "Monument", "Temple",
    "Shrine", "Fortress", "Palace", "Village", "Street", "Market",
)
_LOCAL_PREFIXES = (
    "그랜드", "대전", "한밭", "유성", "둔산", "소제", "모던", "클래식",
    "프리미엄", "로얄", "엘리트", "코지", "시크", "무드", "스타일", "트렌드",
)
_LOCAL_SUFFIXES: dict[Category, tuple[str, ...]] = {
    Category.RESTAURANT: ("식당", "레스토랑", "분식", "횟집", "고기집"),
    Category.CAFE:       ("카페", "커피숍", "브런치", "북카페"),
    Category.BAKERY:     ("베이커리", "빵집", "제과점"),
    Category.ACTIVITY:   ("갤러리", "박물관", "공원", "극장", "영화관"),
    Category.LANDMARK:   ("다리", "탑", "광장", "기념비", "사원", "마을"),
}

_THEME_WORDS: dict[Theme, tuple[str, ...]] = {
    Theme.HEALING:  ("relaxing", "peaceful", "serene", "calming", "tranquil"),
    Theme.ACTIVITY: ("exciting", "energetic", "fun", "adventurous", "vibrant"),
    Theme.GOURMET:  ("delicious", "tasty", "flavorful", "gourmet", "savory"),
}
_TYPE_WORDS: dict[Category, tuple[str, ...]] = {
    Category.RESTAURANT: ("restaurant", "dining spot", "eatery"),
    Category.CAFE:       ("cafe", "coffee shop", "hangout"),
    Category.BAKERY:     ("bakery", "pastry shop"),
    Category.ACTIVITY:   ("activity center", "entertainment venue", "attraction"),
    Category.LANDMARK:   ("landmark", "notable place", "iconic location"),
}


# ── Dict conversion ───────────────────────────────────────────────────────────

def venue_to_dict(venue: Venue) -> dict[str, Any]:
    return {
        "id":                 venue.id,
        "name":               venue.name,
        "name_local":         venue.name_local,
        "category":           venue.category.value,
        "lat":                venue.lat,
        "lng":                venue.lng,
        "is_indoor":          venue.is_indoor,
        "description":        venue.description,
        "themes":             sorted(t.value for t in venue.themes),
        "meal_type":          venue.meal_type.value if venue.meal_type else None,
        "estimated_duration": venue.estimated_duration,
    }


def venue_from_dict(record: dict[str, Any]) -> Venue:
    """Build a Venue from a validated dict. Unknown theme tags are dropped."""
    known_themes = {t.value for t in Theme}
    meal = record.get("meal_type")
    return Venue(
        id                 = str(record["id"]),
        name               = str(record["name"]),
        category           = Category(record["category"]),
        lat                = float(record["lat"]),
        lng                = float(record["lng"]),
        is_indoor          = bool(record.get("is_indoor", True)),
        name_local         = str(record.get("name_local") or ""),
        description        = str(record.get("description") or ""),
        themes             = frozenset(Theme(t) for t in record.get("themes") or [] if t in known_themes),
        meal_type          = MealType(meal) if meal else None,
        estimated_duration = record.get("estimated_duration"),
    )


# ── VenueTool ─────────────────────────────────────────────────────────────────

class VenueTool:
    """Produces venue pools for the planner."""

    def __init__(self, seed: Optional[int] = None) -> None:
        self.seed = config.VENUE_GENERATOR_SEED if seed is None else seed
        self._rng = random.Random(self.seed)

    # ── file source ──────────────────────────────────────────────────────────

    @staticmethod
    def load_json(path: str | Path) -> list[Venue]:
        """Read a JSON list of venue dicts, keeping only valid records."""
        with open(path, "r", encoding="utf-8") as fh:
            records = json.load(fh)
        if not isinstance(records, list):
            raise ValueError(f"{path}: expected a JSON list of venues, got {type(records).__name__}")

        clean = filter_valid(records)
        logger.info("Loaded %d/%d venues from %s", len(clean), len(records), path)
        return [venue_from_dict(r) for r in clean]

    # ── procedural source ────────────────────────────────────────────────────

    def generate(self, count: Optional[int] = None) -> list[Venue]:
        """
        Generate *count* venues (default VENUE_GENERATOR_COUNT). Hubs are filled
        in order; any shortfall is topped up around the first (densest) hub.
        """
        total = config.VENUE_GENERATOR_COUNT if count is None else count
        venues: list[Venue] = []
        for hub in HUBS:
            if len(venues) >= total:
                break
            venues.extend(self._hub_venues(hub, hub.count, len(venues)))

        if len(venues) < total:
            venues.extend(self._hub_venues(HUBS[0], total - len(venues), len(venues)))
        return venues[:total]

    def _hub_venues(self, hub: Hub, count: int, start_index: int) -> list[Venue]:
        food_count = int(count * hub.food_ratio)
        out = []
        for i in range(count):
            if i < food_count:
                roll = self._rng.random()
                if roll < 0.7:
                    category = Category.RESTAURANT
                else:
                    category = Category.CAFE if self._rng.random() < 0.5 else Category.BAKERY
            else:
                category = Category.LANDMARK if self._rng.random() < 0.3 else Category.ACTIVITY
            out.append(self._make_venue(hub, category, start_index + i))
        return out

    def _make_venue(self, hub: Hub, category: Category, index: int) -> Venue:
        rng = self._rng
        lat, lng = self._scatter(hub)
        themes = self._themes()
        name, name_local = self._names(hub, category)

        meal_type: Optional[MealType] = None
        if category == Category.RESTAURANT:
            roll = rng.random()
            if roll < 0.4:
                meal_type = MealType.LUNCH
            elif roll < 0.8:
                meal_type = MealType.DINNER
            duration = rng.randint(60, 120)
        elif category in (Category.CAFE, Category.BAKERY):
            meal_type = MealType.CAFE
            duration = rng.randint(30, 90)
        else:
            duration = rng.randint(60, 180)

        theme_words = ", ".join(rng.choice(_THEME_WORDS[t]) for t in sorted(themes, key=lambda t: t.value))
        description = (
            f"A {theme_words} {rng.choice(_TYPE_WORDS[category])} perfect for dates. "
            f"{name} offers a memorable experience."
        )
        slug = hub.name.lower().split()[0]
        return Venue(
            id                 = f"{slug}-{category.value}-{index}",
            name               = name,
            name_local         = name_local,
            category           = category,
            lat                = lat,
            lng                = lng,
            is_indoor          = rng.random() < hub.indoor_ratio,
            description        = description,
            themes             = themes,
            meal_type          = meal_type,
            estimated_duration = duration,
        )

    def _scatter(self, hub: Hub) -> tuple[float, float]:
        """Uniform angle, uniform radius: denser towards the hub centre."""
        angle = self._rng.random() * 2 * math.pi
        dist = self._rng.random() * hub.radius_km
        km_per_deg_lng = _KM_PER_DEG_LAT * math.cos(math.radians(hub.lat))
        return (
            hub.lat + (dist / _KM_PER_DEG_LAT) * math.cos(angle),
            hub.lng + (dist / km_per_deg_lng) * math.sin(angle),
        )

    def _themes(self) -> frozenset[Theme]:
        all_themes = list(Theme)
        primary = self._rng.choice(all_themes)
        themes = {primary}
        if self._rng.random() < 0.3:
            themes.add(self._rng.choice([t for t in all_themes if t != primary]))
        return frozenset(themes)

    def _names(self, hub: Hub, category: Category) -> tuple[str, str]:
        rng = self._rng
        words = {
            Category.RESTAURANT: _RESTAURANT_WORDS,
            Category.CAFE:       _CAFE_WORDS,
            Category.BAKERY:     _BAKERY_WORDS,
            Category.ACTIVITY:   _ACTIVITY_WORDS,
            Category.LANDMARK:   _LANDMARK_WORDS,
        }[category]
        word = rng.choice(words)
        name = f"{rng.choice(PREFIXES)} {word}"
        local = f"{rng.choice(_LOCAL_PREFIXES)}{word}{rng.choice(_LOCAL_SUFFIXES[category])}"
        if rng.random() < 0.3:
            name = f"{name} {hub.name}"
            local = f"{local} {hub.name}"
        return name, local
