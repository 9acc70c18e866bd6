"""
modules/planning/itinerary_builder.py
---------------------------------------
Greedy, time-ordered itinerary construction for a single outing.

Pipeline per call (no I/O, no randomness, inputs never mutated):

  Phase 1: anchor routing
      Visit must-visit venues in the given order. A foot hop longer than
      WALK_MAX_HOP_KM gets one scored intermediate stop at a time (each one
      must bring us closer to the anchor); when none fits, the anchor is
      connected directly, walking limit or not. Anchors still ahead are
      never taken as intermediate stops, so the given order holds.

  Phase 2: time fill
      While >= MIN_FILL_MINUTES remain, ask step_for_time() what kind of stop
      the clock calls for, filter the pool, score the survivors and append
      the best one (first seen wins ties).

  Finalization
      The end venue is the implicit final anchor. It is routed last so it
      closes the itinerary; every earlier pick must leave it reachable.

Locked steps: options.locked_steps[i] pins a venue at sequence index i
(start = 0). A pin replaces the scored search for that index when the venue
is unvisited and passes the step's feasibility checks; otherwise it is
ignored and the search runs as usual.

Termination is guaranteed: every loop iteration either appends an unvisited
venue or exits.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Iterable, Optional

from datecourse import config
from datecourse.modules.observability.logger import StructuredLogger
from datecourse.modules.planning.candidate_filter import (
    Candidate,
    StepDefinition,
    evaluate_candidate,
    filter_candidates,
    minute_of_day,
    step_for_time,
)
from datecourse.modules.planning.venue_scoring import ScoreContext, VenueScorer
from datecourse.modules.preference.preference_model import initial_user_vector
from datecourse.modules.tool_usage.distance_tool import (
    exceeds_walking_limit,
    travel_minutes,
    venue_distance_km,
)
from datecourse.schemas.itinerary import GeneratedItinerary, GenerationOptions, ItineraryStep
from datecourse.schemas.venue import Category, MealType, Venue

logger = logging.getLogger(__name__)


@dataclass
class _PlanState:
    """Mutable state of one build() call."""
    current: Venue
    time: datetime
    steps: list[ItineraryStep] = field(default_factory=list)
    visited: set[str] = field(default_factory=set)
    had_lunch: bool = False
    had_dinner: bool = False

    @property
    def selected(self) -> list[Venue]:
        return [s.venue for s in self.steps]

    @property
    def next_index(self) -> int:
        return len(self.steps)


class ItineraryBuilder:
    """
    Builds a GeneratedItinerary from a venue pool and GenerationOptions.

    One instance can serve many calls; it keeps no per-call state.
    """

    def __init__(
        self,
        scorer: VenueScorer | None = None,
        perf_logger: StructuredLogger | None = None,
        session_id: str = "default",
    ):
        self.scorer      = scorer or VenueScorer()
        self.perf_logger = perf_logger
        self.session_id  = session_id

    # ── Public entry point ────────────────────────────────────────────────────

    def build(self, pool: Iterable[Venue], options: GenerationOptions) -> Optional[GeneratedItinerary]:
        """
        Returns None only when options.start_venue is missing. A short (even
        start-only) itinerary is a valid outcome when constraints bind.

        A PERFORMANCE event is written only when a perf_logger was injected
        and ENABLE_PERF_LOG is on; otherwise build() touches no files.
        """
        if options.start_venue is None:
            logger.info("No start venue given; nothing to plan.")
            return None

        if self.perf_logger is None or not config.ENABLE_PERF_LOG:
            return self._build(list(pool), options)

        with self.perf_logger.timed(self.session_id, "ItineraryBuilder.build") as payload:
            itinerary = self._build(list(pool), options)
            payload["steps"] = len(itinerary.steps)
            payload["total_distance_km"] = itinerary.total_distance_km
        return itinerary

    # ── Phases ────────────────────────────────────────────────────────────────

    def _build(self, pool: list[Venue], options: GenerationOptions) -> GeneratedItinerary:
        start = options.start_venue
        max_end = options.max_end_time
        user_vector = dict(options.user_vector) if options.user_vector else initial_user_vector()

        state = _PlanState(current=start, time=options.start_time)
        state.steps.append(ItineraryStep(
            venue=start, start_time=options.start_time, end_time=options.start_time,
        ))
        state.visited.add(start.id)

        end_venue = options.end_venue
        if end_venue is not None and end_venue.id == start.id:
            logger.debug("End venue equals start venue; it is already step 0.")
            end_venue = None

        anchors: list[Venue] = []
        seen: set[str] = set()
        for a in options.must_visit:
            if a.id in seen or (end_venue is not None and a.id == end_venue.id):
                continue
            seen.add(a.id)
            anchors.append(a)
        end_is_anchor = end_venue is not None and any(
            a.id == end_venue.id for a in options.must_visit
        )

        # Phase 1: anchor routing
        for i, anchor in enumerate(anchors):
            if anchor.id in state.visited:
                continue
            if state.time >= max_end:
                logger.debug("Time budget exhausted before anchor %s.", anchor.id)
                break
            # anchors still ahead may not be used as stops on the way
            pending = {a.id for a in anchors[i:]}
            self._route_to(state, anchor, pool, options, user_vector, max_end,
                           finish_at=end_venue, stay=True, reserved=pending)

        # Phase 2: time fill
        while (max_end - state.time) >= timedelta(minutes=config.MIN_FILL_MINUTES):
            step = step_for_time(
                state.time, options.meal_windows, state.had_lunch, state.had_dinner,
                options.duration_hours, options.intensity,
            )
            cand = self._pick(state, pool, step, options, user_vector, max_end, end_venue)
            if cand is None:
                logger.debug("No feasible %s stop at %s; time fill ends.", step.label, state.time)
                break
            self._append(state, cand.venue, cand.start_time, cand.end_time,
                         cand.distance_km, cand.travel_minutes, step.meal_type)

        # Finalization: the end venue closes the itinerary
        if end_venue is not None and end_venue.id not in state.visited:
            self._route_to(state, end_venue, pool, options, user_vector, max_end,
                           finish_at=end_venue, stay=end_is_anchor, finish=True)

        total_km = sum(s.distance_km for s in state.steps)
        elapsed = state.steps[-1].end_time - options.start_time
        return GeneratedItinerary(
            steps              = state.steps,
            total_distance_km  = round(total_km, 1),
            estimated_duration = round(elapsed.total_seconds() / 60),
        )

    def _route_to(
        self,
        state: _PlanState,
        anchor: Venue,
        pool: list[Venue],
        options: GenerationOptions,
        user_vector: dict[str, float],
        max_end: datetime,
        finish_at: Optional[Venue],
        stay: bool,
        finish: bool = False,
        reserved: frozenset[str] | set[str] = frozenset(),
    ) -> bool:
        """
        Walk toward *anchor*, inserting intermediate stops while the direct
        foot hop is too long. Returns True once the anchor is appended.
        """
        while state.current.id != anchor.id:
            distance = venue_distance_km(state.current, anchor)
            if not exceeds_walking_limit(distance, options.transport):
                return self._append_anchor(state, anchor, distance, options, max_end, stay, finish)

            step = step_for_time(
                state.time, options.meal_windows, state.had_lunch, state.had_dinner,
                options.duration_hours, options.intensity,
            )
            cand = self._pick(state, pool, step, options, user_vector, max_end, finish_at,
                              toward=(anchor, distance), reserved=reserved)
            if cand is None:
                logger.debug("No stop bridges the way to %s; connecting directly (%.2f km).",
                             anchor.id, distance)
                return self._append_anchor(state, anchor, distance, options, max_end, stay, finish)

            self._append(state, cand.venue, cand.start_time, cand.end_time,
                         cand.distance_km, cand.travel_minutes, step.meal_type)
            if state.time >= max_end:
                return False
        return True

    # ── Selection ─────────────────────────────────────────────────────────────

    def _pick(
        self,
        state: _PlanState,
        pool: list[Venue],
        step: StepDefinition,
        options: GenerationOptions,
        user_vector: dict[str, float],
        max_end: datetime,
        finish_at: Optional[Venue],
        toward: tuple[Venue, float] | None = None,
        reserved: frozenset[str] | set[str] = frozenset(),
    ) -> Optional[Candidate]:
        # The finish venue is only ever appended by its own routing
        excluded = state.visited | set(reserved)
        if finish_at is not None:
            excluded.add(finish_at.id)

        locked = options.locked_steps.get(state.next_index)
        if locked is not None and locked.id not in excluded:
            cand = evaluate_candidate(
                locked, step, state.time, state.current, options.transport, max_end, finish_at,
            )
            if cand is not None:
                logger.debug("Locked venue %s used at step %d.", locked.id, state.next_index)
                return cand
            logger.debug("Locked venue %s does not fit step %d; scoring instead.",
                         locked.id, state.next_index)

        candidates = filter_candidates(
            pool, step, state.time, state.current, excluded,
            options.transport, max_end, finish_at,
        )
        if toward is not None:
            anchor, remaining = toward
            candidates = [c for c in candidates if venue_distance_km(c.venue, anchor) < remaining]

        best: Optional[Candidate] = None
        best_score = 0.0
        selected = state.selected
        for cand in candidates:
            ctx = ScoreContext(
                user_vector = user_vector,
                is_raining  = options.weather.is_raining,
                temperature = options.weather.temperature,
                distance_km = cand.distance_km,
                selected    = selected,
                companion   = options.companion,
                transport   = options.transport,
            )
            score = self.scorer.score(cand.venue, ctx)
            if best is None or score > best_score:
                best, best_score = cand, score
        return best

    # ── State transitions ─────────────────────────────────────────────────────

    def _append(
        self,
        state: _PlanState,
        venue: Venue,
        start_time: datetime,
        end_time: datetime,
        distance_km: float,
        travel: float,
        meal_type: Optional[MealType],
    ) -> None:
        state.steps.append(ItineraryStep(
            venue          = venue,
            start_time     = start_time,
            end_time       = end_time,
            travel_minutes = travel,
            distance_km    = distance_km,
            meal_type      = meal_type,
        ))
        state.visited.add(venue.id)
        state.current = venue
        state.time = end_time
        if meal_type == MealType.LUNCH:
            state.had_lunch = True
        elif meal_type == MealType.DINNER:
            state.had_dinner = True

    def _append_anchor(
        self,
        state: _PlanState,
        anchor: Venue,
        distance: float,
        options: GenerationOptions,
        max_end: datetime,
        stay: bool,
        finish: bool = False,
    ) -> bool:
        """
        Direct hop to a user-mandated venue. With stay=False the venue is a
        finish point (arrival only). A finish venue whose stay does not fit
        falls back to arrival only. Skipped if it would overrun max_end.
        """
        travel = travel_minutes(distance, options.transport)
        arrival = state.time + timedelta(minutes=travel)
        end = arrival + timedelta(minutes=anchor.visit_minutes) if stay else arrival
        if finish and end > max_end:
            end = arrival
        if end > max_end:
            logger.debug("Anchor %s would end at %s, past %s; skipped.", anchor.id, end, max_end)
            return False

        self._append(state, anchor, arrival, end, distance, travel,
                     self._anchor_meal(anchor, arrival, state, options))
        return True

    @staticmethod
    def _anchor_meal(
        anchor: Venue,
        arrival: datetime,
        state: _PlanState,
        options: GenerationOptions,
    ) -> Optional[MealType]:
        """A restaurant anchor reached inside a meal window counts as that meal."""
        if anchor.category != Category.RESTAURANT:
            return None
        now = minute_of_day(arrival)
        if not state.had_lunch and options.meal_windows.lunch.contains(now):
            return MealType.LUNCH
        if not state.had_dinner and options.meal_windows.dinner.contains(now):
            return MealType.DINNER
        return None


def generate_itinerary(pool: Iterable[Venue], options: GenerationOptions) -> Optional[GeneratedItinerary]:
    """Plan one outing with the default scorer. None iff no start venue."""
    return ItineraryBuilder().build(pool, options)
