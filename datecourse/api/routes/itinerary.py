"""
api/routes/itinerary.py
------------------------
POST /v1/itinerary/generate
POST /v1/itinerary/feedback

generate builds a course from the supplied venue pool (or a generated one
when none is given) and stores pool + options in memory under a session_id.
feedback applies LIKE / DISLIKE to a step of that session's course, stores
the updated vector, locks and pool, and returns the regenerated course.

Sessions live in process memory only; a restart forgets them. With
ENABLE_PERF_LOG on, PERFORMANCE and FEEDBACK events for a session are
appended to <LOGS_DIR>/<session_id>.jsonl.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from datecourse import config
from datecourse.modules.feedback.replanner import FeedbackReplanner
from datecourse.modules.observability.logger import StructuredLogger
from datecourse.modules.planning.candidate_filter import outline_steps
from datecourse.modules.planning.itinerary_builder import ItineraryBuilder
from datecourse.modules.tool_usage.venue_tool import VenueTool, venue_from_dict
from datecourse.modules.tool_usage.weather_tool import WeatherTool
from datecourse.modules.validation import validate_venue
from datecourse.schemas.itinerary import (
    GeneratedItinerary,
    GenerationOptions,
    MealWindow,
    MealWindows,
    WeatherSnapshot,
)
from datecourse.schemas.venue import (
    Companion,
    FeedbackAction,
    Intensity,
    Transport,
    Venue,
)

router = APIRouter()

# ── In-memory session store ────────────────────────────────────────────────────
# key: session_id (str uuid4)
# value: {"pool": list[Venue], "options": GenerationOptions}
_store: dict[str, dict] = {}


# ── Request schemas ────────────────────────────────────────────────────────────

class VenueIn(BaseModel):
    id: str
    name: str
    category: str
    lat: float
    lng: float
    is_indoor: bool = True
    name_local: str = ""
    description: str = ""
    themes: list[str] = Field(default_factory=list)
    meal_type: Optional[str] = None
    estimated_duration: Optional[int] = None


class WindowIn(BaseModel):
    start_minutes: int = Field(..., ge=0, le=24 * 60)
    end_minutes:   int = Field(..., ge=0, le=24 * 60)


class GenerateRequest(BaseModel):
    venues: Optional[list[VenueIn]] = Field(
        None, description="Venue pool; omitted means a generated sample pool"
    )
    sample_seed: Optional[int] = None
    start_venue_id: str
    start_time: datetime
    end_venue_id: Optional[str] = None
    end_time: Optional[datetime] = None
    must_visit_ids: list[str] = Field(default_factory=list)
    locked_steps: dict[int, str] = Field(default_factory=dict, description="step index -> venue id")
    lunch_window: Optional[WindowIn] = None
    dinner_window: Optional[WindowIn] = None
    companion: Companion = Companion.SOLO
    transport: Transport = Transport.FOOT
    intensity: Intensity = Intensity.RELAXED
    duration_hours: float = Field(config.DEFAULT_DURATION_HOURS, gt=0, le=24)
    temperature: float = config.DEFAULT_TEMPERATURE_C
    is_raining: bool = False
    live_weather: bool = Field(False, description="Fetch current weather at the start venue")
    user_vector: Optional[dict[str, float]] = None


class FeedbackRequest(BaseModel):
    session_id: str
    venue_id: str
    action: FeedbackAction
    step_index: int = Field(..., ge=0)


# ── Helpers ────────────────────────────────────────────────────────────────────

def _build_pool(req: GenerateRequest) -> list[Venue]:
    if req.venues is None:
        return VenueTool(seed=req.sample_seed).generate()

    pool: list[Venue] = []
    seen: set[str] = set()
    for v in req.venues:
        record = v.model_dump()
        result = validate_venue(record)
        if not result:
            raise HTTPException(
                status_code=422,
                detail=f"Invalid venue {v.id!r}: {'; '.join(result.errors)}",
            )
        if v.id in seen:
            raise HTTPException(status_code=422, detail=f"Duplicate venue id {v.id!r}")
        seen.add(v.id)
        pool.append(venue_from_dict(record))
    return pool


def _lookup(by_id: dict[str, Venue], venue_id: str, field_name: str) -> Venue:
    venue = by_id.get(venue_id)
    if venue is None:
        raise HTTPException(
            status_code=422,
            detail=f"{field_name}={venue_id!r} is not in the venue pool",
        )
    return venue


def _window(w: Optional[WindowIn], default: MealWindow) -> MealWindow:
    if w is None:
        return default
    if w.end_minutes < w.start_minutes:
        raise HTTPException(
            status_code=422,
            detail=f"meal window end ({w.end_minutes}) must be >= start ({w.start_minutes})",
        )
    return MealWindow(w.start_minutes, w.end_minutes)


def _response(session_id: str, options: GenerationOptions,
              itinerary: Optional[GeneratedItinerary], **extra) -> dict:
    outline = outline_steps(options.meal_windows, options.duration_hours, options.intensity)
    return {
        "session_id":  session_id,
        "itinerary":   itinerary.to_dict() if itinerary else None,
        "outline":     [s.label for s in outline],
        "user_vector": options.user_vector,
        **extra,
    }


# ── Endpoints ──────────────────────────────────────────────────────────────────

@router.post("/generate", summary="Generate a date course")
def generate(req: GenerateRequest) -> dict:
    pool = _build_pool(req)
    by_id = {v.id: v for v in pool}

    start = _lookup(by_id, req.start_venue_id, "start_venue_id")
    end = _lookup(by_id, req.end_venue_id, "end_venue_id") if req.end_venue_id else None
    must_visit = [_lookup(by_id, vid, "must_visit_ids") for vid in req.must_visit_ids]
    locked = {idx: _lookup(by_id, vid, "locked_steps") for idx, vid in req.locked_steps.items()}

    if req.end_time is not None:
        if (req.start_time.tzinfo is None) != (req.end_time.tzinfo is None):
            raise HTTPException(
                status_code=422,
                detail="start_time and end_time must both carry a UTC offset, or neither",
            )
        if req.end_time <= req.start_time:
            raise HTTPException(status_code=422, detail="end_time must be after start_time")

    defaults = MealWindows()
    meal_windows = MealWindows(
        lunch  = _window(req.lunch_window, defaults.lunch),
        dinner = _window(req.dinner_window, defaults.dinner),
    )

    if req.live_weather:
        weather = WeatherTool().fetch(start.lat, start.lng)
    else:
        weather = WeatherSnapshot(temperature=req.temperature, is_raining=req.is_raining)

    options = GenerationOptions(
        start_venue    = start,
        start_time     = req.start_time,
        end_venue      = end,
        end_time       = req.end_time,
        must_visit     = must_visit,
        locked_steps   = locked,
        meal_windows   = meal_windows,
        companion      = req.companion,
        transport      = req.transport,
        intensity      = req.intensity,
        duration_hours = req.duration_hours,
        weather        = weather,
        user_vector    = req.user_vector,
    )

    session_id = str(uuid.uuid4())
    builder = ItineraryBuilder(perf_logger=StructuredLogger(), session_id=session_id)
    itinerary = builder.build(pool, options)
    _store[session_id] = {"pool": pool, "options": options}

    return _response(session_id, options, itinerary, weather={
        "temperature": weather.temperature,
        "is_raining":  weather.is_raining,
    })


@router.post("/feedback", summary="Like or dislike a step and regenerate")
def feedback(req: FeedbackRequest) -> dict:
    entry = get_session(req.session_id)
    pool: list[Venue] = entry["pool"]
    venue = _lookup({v.id: v for v in pool}, req.venue_id, "venue_id")

    replanner = FeedbackReplanner(event_logger=StructuredLogger(), session_id=req.session_id)
    result = replanner.apply(
        pool, entry["options"], venue, req.action, req.step_index,
    )
    _store[req.session_id] = {"pool": result.pool, "options": result.options}

    return _response(req.session_id, result.options, result.itinerary,
                     boosts=result.boost_labels)


# ── Utility: expose store to other routes ─────────────────────────────────────

def get_session(session_id: str) -> dict:
    """Retrieve a stored session or raise 404."""
    entry = _store.get(session_id)
    if not entry:
        raise HTTPException(
            status_code=404,
            detail=f"Session '{session_id}' not found. Call /v1/itinerary/generate first.",
        )
    return entry
