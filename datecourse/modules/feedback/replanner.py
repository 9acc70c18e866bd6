"""
modules/feedback/replanner.py
-------------------------------
FeedbackReplanner — applies one LIKE / DISLIKE to a generated course and
regenerates it from scratch.

  LIKE     update the user vector, pin the liked venue at its step index
           (index 0 is the start and is never pinned), regenerate.
  DISLIKE  update the user vector, drop any pin at that index, leave the
           venue out of the pool for this regeneration, regenerate.

Every call works on fresh copies: the caller's pool, options, vector and
locked steps are never mutated. Returns a FeedbackResult carrying the next
state so the caller (API route, UI) can store it and feed it back in.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field, replace
from typing import Iterable, Optional

from datecourse import config
from datecourse.modules.observability.logger import FEEDBACK, StructuredLogger
from datecourse.modules.planning.itinerary_builder import ItineraryBuilder
from datecourse.modules.preference.preference_model import (
    changed_dimensions,
    initial_user_vector,
    update_vector,
)
from datecourse.schemas.itinerary import GeneratedItinerary, GenerationOptions
from datecourse.schemas.venue import FeedbackAction, Venue

logger = logging.getLogger(__name__)


@dataclass
class FeedbackResult:
    user_vector: dict[str, float]
    options: GenerationOptions            # next options (vector + locks applied)
    pool: list[Venue]                     # pool used for the regeneration
    itinerary: Optional[GeneratedItinerary]
    boosts: dict[str, float] = field(default_factory=dict)   # dims that went up

    @property
    def boost_labels(self) -> list[str]:
        return [f"{dim} +{delta:.2f}" for dim, delta in self.boosts.items()]


class FeedbackReplanner:

    def __init__(
        self,
        builder: ItineraryBuilder | None = None,
        event_logger: StructuredLogger | None = None,
        session_id: str = "default",
    ) -> None:
        self.builder      = builder or ItineraryBuilder(perf_logger=event_logger, session_id=session_id)
        self.event_logger = event_logger
        self.session_id   = session_id

    def apply(
        self,
        pool: Iterable[Venue],
        options: GenerationOptions,
        venue: Venue,
        action: FeedbackAction | str,
        step_index: int,
    ) -> FeedbackResult:
        action = FeedbackAction(action)
        before = dict(options.user_vector) if options.user_vector else initial_user_vector()
        after = update_vector(before, venue, action)

        locked = dict(options.locked_steps)
        next_pool = list(pool)
        if action == FeedbackAction.LIKE:
            if step_index > 0:
                locked[step_index] = venue
        else:
            locked.pop(step_index, None)
            next_pool = [v for v in next_pool if v.id != venue.id]

        next_options = replace(
            options,
            user_vector  = after,
            locked_steps = locked,
            must_visit   = list(options.must_visit),
        )
        itinerary = self.builder.build(next_pool, next_options)

        deltas = changed_dimensions(before, after)
        boosts = {dim: d for dim, d in deltas.items() if d > 0}
        logger.info("%s on %s at step %d: %s", action.value, venue.id, step_index, deltas or "no change")

        if self.event_logger is not None and config.ENABLE_PERF_LOG:
            self.event_logger.log(self.session_id, FEEDBACK, {
                "action":     action.value,
                "venue_id":   venue.id,
                "step_index": step_index,
                "deltas":     deltas,
            })

        return FeedbackResult(
            user_vector = after,
            options     = next_options,
            pool        = next_pool,
            itinerary   = itinerary,
            boosts      = boosts,
        )
