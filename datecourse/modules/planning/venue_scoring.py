"""
modules/planning/venue_scoring.py
-----------------------------------
Composite desirability score for one candidate venue.

  base   = similarity(user, venue) * 100 * DIVERSITY_DECAY ** same_category_count
  score  = base + weather + keyword + distance + companion

The score has no fixed range; higher is better. Hard feasibility (walking
cutoff, meal windows, time budget) lives in candidate_filter.py, so the
distance term below only ranks hops that are already allowed.

Adjustment tables:
  weather   : rain -> outdoor -200 / indoor +30; temp > 30 or < 0 -> outdoor -50
  keyword   : premium words +20; chain blacklist -100
  distance  : foot d > WALK_MAX_HOP_KM -> -200, else -(e^(d/5) - 1) * 30
              car  -(e^(d/10) - 1) * 20
  companion : see companion_adjustment()
"""

from __future__ import annotations
import math
from dataclasses import dataclass, field
from typing import Iterable

from datecourse import config
from datecourse.modules.preference.preference_model import similarity
from datecourse.schemas.venue import Category, Companion, Transport, Venue

KEYWORD_BONUS   = ("steak", "pasta", "sushi", "dining", "lounge", "bakery")
CHAIN_BLACKLIST = ("bhc", "bbq", "lotteria", "mcdonald", "burger king", "gukbap")

_ROMANCE_WORDS = ("romantic", "date", "couple")
_FAMILY_WORDS  = ("family", "kids", "playground")
_NIGHTLIFE_WORDS = ("bar", "pub", "club")

_RAIN_OUTDOOR_PENALTY = -200.0
_RAIN_INDOOR_BONUS    = 30.0
_EXTREME_TEMP_PENALTY = -50.0
_OVER_WALK_PENALTY    = -200.0


@dataclass
class ScoreContext:
    """Everything the scorer needs besides the venue itself."""
    user_vector: dict[str, float]
    is_raining: bool = False
    temperature: float = config.DEFAULT_TEMPERATURE_C
    distance_km: float = 0.0
    selected: list[Venue] = field(default_factory=list)   # for the diversity term
    companion: Companion = Companion.SOLO
    transport: Transport = Transport.FOOT


@dataclass
class ScoreBreakdown:
    """Per-term view of a score, for explanations and debugging."""
    similarity: float
    diversity: float
    base: float
    weather: float
    keyword: float
    distance: float
    companion: float

    @property
    def total(self) -> float:
        return self.base + self.weather + self.keyword + self.distance + self.companion


# ── Component terms ───────────────────────────────────────────────────────────

def diversity_multiplier(venue: Venue, selected: Iterable[Venue]) -> float:
    """DIVERSITY_DECAY ** (times this category was already chosen)."""
    repeats = sum(1 for v in selected if v.category == venue.category)
    return config.DIVERSITY_DECAY ** repeats


def weather_adjustment(venue: Venue, is_raining: bool, temperature: float) -> float:
    score = 0.0
    if is_raining:
        score += _RAIN_OUTDOOR_PENALTY if venue.is_outdoor else _RAIN_INDOOR_BONUS
    if (temperature > 30 or temperature < 0) and venue.is_outdoor:
        score += _EXTREME_TEMP_PENALTY
    return score


def keyword_adjustment(venue: Venue) -> float:
    name = venue.name.lower()
    score = 0.0
    if any(kw in name for kw in KEYWORD_BONUS):
        score += 20
    if any(kw in name for kw in CHAIN_BLACKLIST):
        score -= 100
    return score


def distance_adjustment(distance_km: float, transport: Transport) -> float:
    if transport == Transport.FOOT:
        if distance_km > config.WALK_MAX_HOP_KM:
            return _OVER_WALK_PENALTY
        return -max(0.0, (math.exp(distance_km / 5) - 1) * 30)
    return -max(0.0, (math.exp(distance_km / 10) - 1) * 20)


def companion_adjustment(venue: Venue, companion: Companion) -> float:
    name = venue.name.lower()
    cat = venue.category
    bonus = 0.0

    if companion == Companion.PARTNER:
        if cat in (Category.RESTAURANT, Category.CAFE, Category.BAR):
            bonus += 30
        if any(w in name for w in _ROMANCE_WORDS):
            bonus += 40
        if any(w in name for w in _FAMILY_WORDS):
            bonus -= 50
    elif companion == Companion.FAMILY:
        if venue.is_indoor:
            bonus += 20
        if cat in (Category.ACTIVITY, Category.LANDMARK, Category.SHOPPING):
            bonus += 25
        if cat == Category.BAR:
            bonus -= 100
        if any(w in name for w in _NIGHTLIFE_WORDS):
            bonus -= 80
    elif companion == Companion.FRIEND:
        if cat in (Category.CAFE, Category.ACTIVITY, Category.SHOPPING):
            bonus += 20
    elif companion == Companion.SOLO:
        if cat in (Category.CAFE, Category.CULTURE, Category.LANDMARK):
            bonus += 15

    return bonus


# ── Scorer ────────────────────────────────────────────────────────────────────


class VenueScorer:
    """
    The single scoring strategy used by the itinerary builder.
    Subclass and override score_breakdown() to plug in a different model.
    """

    def score(self, venue: Venue, ctx: ScoreContext) -> float:
        return self.score_breakdown(venue, ctx).total

    def score_breakdown(self, venue: Venue, ctx: ScoreContext) -> ScoreBreakdown:
        sim = similarity(ctx.user_vector, venue) * 100
        div = diversity_multiplier(venue, ctx.selected)
        return ScoreBreakdown(
            similarity = sim,
            diversity  = div,
            base       = sim * div,
            weather    = weather_adjustment(venue, ctx.is_raining, ctx.temperature),
            keyword    = keyword_adjustment(venue),
            distance   = distance_adjustment(ctx.distance_km, ctx.transport),
            companion  = companion_adjustment(venue, ctx.companion),
        )
