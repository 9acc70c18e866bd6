"""
modules/validation/ingestion_validator.py
------------------------------------------
Data-quality guards for venue records entering the pool (OSM export JSON,
API request bodies, generated fixtures).

The planner assumes clean venues and never re-checks them, so every record
goes through validate_venue() on the way in:

    ✓ Non-empty id and name
    ✓ Non-null, numeric coordinates
    ✓ Latitude in [-90, 90], longitude in [-180, 180]
    ✓ Coordinates are not both exactly 0.0 (likely missing)
    ✓ category in the closed Category vocabulary
    ✓ meal_type, if present, in the MealType vocabulary
    ✓ estimated_duration, if present, a non-negative integer

Usage:
    from datecourse.modules.validation import validate_venue, filter_valid

    result = validate_venue(record)
    if not result:
        logger.warning(result.errors)

    clean = filter_valid(records, validate_venue)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, TypeVar

from datecourse.schemas.venue import Category, MealType

logger = logging.getLogger(__name__)

T = TypeVar("T")

_CATEGORIES = {c.value for c in Category}
_MEAL_TYPES = {m.value for m in MealType}


@dataclass
class ValidationResult:
    """
    Outcome of a single validation run.

    Attributes:
        valid:  True iff there are zero errors.
        errors: Human-readable list of failure reasons.
        record: The input record dict (for logging purposes).
    """
    valid: bool
    errors: list[str] = field(default_factory=list)
    record: dict = field(default_factory=dict, repr=False)

    def __bool__(self) -> bool:
        return self.valid


def validate_venue(record: dict[str, Any]) -> ValidationResult:
    """Validate one venue dict (field names as in venue_to_dict())."""
    errors: list[str] = []

    # ── Identity ───────────────────────────────────────────────────────────
    for key in ("id", "name"):
        value = record.get(key)
        if value is None or not str(value).strip():
            errors.append(f"{key} must not be empty or NULL")

    # ── Coordinates ────────────────────────────────────────────────────────
    lat = record.get("lat")
    lng = record.get("lng")
    if lat is None or lng is None:
        errors.append(f"lat/lng must not be NULL (got lat={lat!r}, lng={lng!r})")
    else:
        try:
            lat, lng = float(lat), float(lng)
        except (TypeError, ValueError):
            errors.append(f"lat/lng must be numeric (got lat={lat!r}, lng={lng!r})")
        else:
            if not (-90.0 <= lat <= 90.0):
                errors.append(f"lat={lat} is outside valid range [-90, 90]")
            if not (-180.0 <= lng <= 180.0):
                errors.append(f"lng={lng} is outside valid range [-180, 180]")
            if lat == 0.0 and lng == 0.0:
                errors.append("lat=0.0 and lng=0.0: likely a missing/default value")

    # ── Vocabularies ───────────────────────────────────────────────────────
    category = record.get("category")
    if category not in _CATEGORIES:
        errors.append(f"category={category!r} is not one of {sorted(_CATEGORIES)}")

    meal_type = record.get("meal_type")
    if meal_type is not None and meal_type not in _MEAL_TYPES:
        errors.append(f"meal_type={meal_type!r} is not one of {sorted(_MEAL_TYPES)}")

    # ── Duration ───────────────────────────────────────────────────────────
    duration = record.get("estimated_duration")
    if duration is not None:
        if isinstance(duration, bool) or not isinstance(duration, int):
            errors.append(f"estimated_duration={duration!r} must be an integer number of minutes")
        elif duration < 0:
            errors.append(f"estimated_duration={duration} must be >= 0")

    return ValidationResult(valid=len(errors) == 0, errors=errors, record=record)


def filter_valid(
    items: list[T],
    validator: Callable[[dict], ValidationResult] = validate_venue,
    to_dict: Callable[[T], dict] | None = None,
) -> list[T]:
    """
    Apply *validator* to every item and return only the valid ones, logging a
    warning per rejected record and a summary line.
    """
    valid_items: list[T] = []
    rejected = 0

    for item in items:
        record = to_dict(item) if to_dict is not None else item
        result = validator(record)
        if result:
            valid_items.append(item)
            continue
        rejected += 1
        logger.warning("Rejected venue %r: %s", record.get("id", "?"), "; ".join(result.errors))

    if rejected:
        logger.warning("%d/%d venue records rejected; %d passed.",
                       rejected, len(items), len(valid_items))
    return valid_items
