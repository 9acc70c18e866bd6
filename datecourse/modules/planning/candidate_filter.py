"""
modules/planning/candidate_filter.py
--------------------------------------
Per-step feasibility filter.

A step (StepDefinition) says what kind of stop is wanted next: preferred and
fallback categories, an optional meal slot and the meal window it must start
in. filter_candidates() narrows the venue pool to the venues that can fill
that step from the current place and time, and pre-computes distance,
travel time, start and end for each so the scorer can rank them.

Hard rules, in order:
  1. not already visited
  2. category in preferred + fallback
  3. meal hard filter (lunch/dinner -> restaurant, cafe -> cafe/bakery,
     no restaurants or lunch/dinner venues outside meal slots)
  4. foot hops longer than WALK_MAX_HOP_KM are excluded outright
  5. arrival after the window end is rejected; start waits for window start
  6. end (start + stay) must not pass the session's maximum end time
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, Optional

from datecourse.modules.tool_usage.distance_tool import (
    exceeds_walking_limit,
    travel_minutes,
    venue_distance_km,
)
from datecourse.schemas.itinerary import MealWindow, MealWindows
from datecourse.schemas.venue import Category, Intensity, MealType, Transport, Venue

_MEAL_SLOTS = (MealType.LUNCH, MealType.DINNER)

# Outline thresholds (hours of outing needed before a slot is offered)
_LUNCH_MIN_HOURS   = 4
_CAFE_MIN_HOURS    = 5
_DINNER_MIN_HOURS  = 6
_EVENING_MIN_HOURS = 7


@dataclass(frozen=True)
class StepDefinition:
    label: str
    preferred: tuple[Category, ...]
    fallback: tuple[Category, ...] = ()
    meal_type: Optional[MealType] = None
    window: Optional[MealWindow] = None

    @property
    def categories(self) -> tuple[Category, ...]:
        return self.preferred + self.fallback

    @property
    def is_meal(self) -> bool:
        return self.meal_type in _MEAL_SLOTS


@dataclass
class Candidate:
    venue: Venue
    distance_km: float
    travel_minutes: float
    start_time: datetime
    end_time: datetime


def minute_of_day(t: datetime) -> int:
    return t.hour * 60 + t.minute


def is_valid_for_step(venue: Venue, step: StepDefinition) -> bool:
    """Meal-type hard filter (independent of category preference)."""
    if step.is_meal:
        if venue.category != Category.RESTAURANT:
            return False
        return venue.meal_type is None or venue.meal_type == step.meal_type
    if step.meal_type == MealType.CAFE:
        if venue.category not in (Category.CAFE, Category.BAKERY):
            return False
        return venue.meal_type in (None, MealType.CAFE)
    # Ordinary stop: restaurants and meal-tagged venues only inside meal slots
    return venue.category != Category.RESTAURANT and venue.meal_type not in _MEAL_SLOTS


def _window_start(step: StepDefinition, arrival: datetime) -> Optional[datetime]:
    """Start time honouring the step's window, or None if arrival is too late."""
    if step.window is None:
        return arrival
    arrive_min = minute_of_day(arrival)
    if arrive_min > step.window.end_minutes:
        return None
    if arrive_min < step.window.start_minutes:
        start = step.window.start_minutes
        return arrival.replace(hour=start // 60, minute=start % 60, second=0, microsecond=0)
    return arrival


def evaluate_candidate(
    venue: Venue,
    step: StepDefinition,
    current_time: datetime,
    current_venue: Venue,
    transport: Transport,
    max_end_time: datetime,
    finish_at: Optional[Venue] = None,
) -> Optional[Candidate]:
    """
    Feasibility checks 3-6 for a single venue. Returns the timed Candidate or
    None. *finish_at*, when given, must still be reachable by max_end_time
    after this venue's end.
    """
    if not is_valid_for_step(venue, step):
        return None

    distance = venue_distance_km(current_venue, venue)
    if exceeds_walking_limit(distance, transport):
        return None

    travel = travel_minutes(distance, transport)
    arrival = current_time + timedelta(minutes=travel)
    start = _window_start(step, arrival)
    if start is None:
        return None

    end = start + timedelta(minutes=venue.visit_minutes)
    if end > max_end_time:
        return None

    if finish_at is not None and finish_at.id != venue.id:
        to_finish = travel_minutes(venue_distance_km(venue, finish_at), transport)
        if end + timedelta(minutes=to_finish) > max_end_time:
            return None

    return Candidate(
        venue          = venue,
        distance_km    = distance,
        travel_minutes = travel,
        start_time     = start,
        end_time       = end,
    )


def filter_candidates(
    pool: Iterable[Venue],
    step: StepDefinition,
    current_time: datetime,
    current_venue: Venue,
    visited: set[str],
    transport: Transport,
    max_end_time: datetime,
    finish_at: Optional[Venue] = None,
) -> list[Candidate]:
    """All feasible candidates for *step*, in pool order."""
    allowed = set(step.categories)
    out: list[Candidate] = []
    for venue in pool:
        if venue.id in visited or venue.category not in allowed:
            continue
        cand = evaluate_candidate(
            venue, step, current_time, current_venue, transport, max_end_time, finish_at
        )
        if cand is not None:
            out.append(cand)
    return out


# ── Step selection ────────────────────────────────────────────────────────────


def step_for_time(
    current_time: datetime,
    meal_windows: MealWindows,
    had_lunch: bool,
    had_dinner: bool,
    duration_hours: float,
    intensity: Intensity = Intensity.RELAXED,
) -> StepDefinition:
    """
    The stop implied by the time of day.

    Meal slots are only offered when the outing is long enough to include
    them (lunch from 4 h, dinner from 6 h).
    """
    now = minute_of_day(current_time)
    lunch, dinner = meal_windows.lunch, meal_windows.dinner

    if not had_lunch and duration_hours >= _LUNCH_MIN_HOURS and lunch.contains(now):
        return StepDefinition("Lunch", (Category.RESTAURANT,), meal_type=MealType.LUNCH, window=lunch)
    if not had_dinner and duration_hours >= _DINNER_MIN_HOURS and dinner.contains(now):
        return StepDefinition("Dinner", (Category.RESTAURANT,), meal_type=MealType.DINNER, window=dinner)
    if lunch.end_minutes < now < dinner.start_minutes:
        return StepDefinition("Cafe Break", (Category.CAFE, Category.BAKERY), meal_type=MealType.CAFE)

    fallback: tuple[Category, ...] = ()
    if intensity == Intensity.PACKED:
        fallback = (Category.LANDMARK,)
    return StepDefinition(
        "Explore",
        (Category.ACTIVITY, Category.CAFE, Category.CULTURE, Category.SHOPPING),
        fallback,
    )


def outline_steps(
    meal_windows: MealWindows,
    duration_hours: float,
    intensity: Intensity = Intensity.RELAXED,
) -> list[StepDefinition]:
    """
    Course outline for a given length and intensity: the shape of the day a
    timeline view can show before (or alongside) the concrete itinerary.
    Relaxed days have fewer, broader afternoon stops; packed days split them.
    """
    steps = [StepDefinition(
        "Warm-up",
        (Category.ACTIVITY, Category.CAFE, Category.CULTURE, Category.SHOPPING),
    )]

    if duration_hours >= _LUNCH_MIN_HOURS:
        steps.append(StepDefinition(
            "Lunch", (Category.RESTAURANT,), meal_type=MealType.LUNCH, window=meal_windows.lunch,
        ))

    if intensity == Intensity.RELAXED:
        steps.append(StepDefinition(
            "Afternoon",
            (Category.ACTIVITY, Category.CULTURE, Category.LANDMARK, Category.SHOPPING),
            (Category.CAFE,),
        ))
    else:
        steps.append(StepDefinition(
            "Afternoon Activity",
            (Category.ACTIVITY, Category.CULTURE, Category.LANDMARK),
            (Category.SHOPPING, Category.CAFE),
        ))
        if duration_hours >= _DINNER_MIN_HOURS:
            steps.append(StepDefinition(
                "Afternoon Shopping", (Category.SHOPPING, Category.CULTURE), (Category.CAFE,),
            ))

    if duration_hours >= _CAFE_MIN_HOURS:
        steps.append(StepDefinition(
            "Cafe Break", (Category.CAFE, Category.BAKERY), meal_type=MealType.CAFE,
        ))

    if duration_hours >= _DINNER_MIN_HOURS:
        steps.append(StepDefinition(
            "Dinner", (Category.RESTAURANT,), meal_type=MealType.DINNER, window=meal_windows.dinner,
        ))

    if duration_hours >= _EVENING_MIN_HOURS:
        steps.append(StepDefinition(
            "Evening",
            (Category.ACTIVITY, Category.CULTURE, Category.LANDMARK),
            (Category.CAFE,),
        ))

    return steps
