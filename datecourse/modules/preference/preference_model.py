"""
modules/preference/preference_model.py
----------------------------------------
Vector-based taste model.

A user's taste and a venue's character live in the same ten-dimensional
space (DIMENSIONS). Venues are projected by keyword detection over their
name, description and category; the user vector starts neutral and moves
only through update_vector() on LIKE / DISLIKE feedback.

Both vectors are non-negative, so cosine similarity stays within [0, 1].
"""

from __future__ import annotations
import math

from datecourse import config
from datecourse.schemas.venue import Category, FeedbackAction, Venue

DIMENSIONS: tuple[str, ...] = (
    "meat", "seafood", "noodle", "rice", "bread",
    "quiet", "active", "indoor", "nature", "luxury",
)

NEUTRAL: float = 0.5

# ── Keyword groups (matched against lower-cased name + description) ──────────
_MEAT_KW     = ("meat", "bbq", "grill")
_SEAFOOD_KW  = ("seafood", "sushi")
_NOODLE_KW   = ("noodle", "ramen")
_RICE_KW     = ("rice", "bibimbap")
_BREAD_KW    = ("bread", "bakery", "pastry")
_QUIET_KW    = ("quiet", "peaceful")
_ACTIVE_KW   = ("active", "sport")
_NATURE_KW   = ("park", "garden", "landmark")
_LUXURY_KW   = ("luxury", "fine dining", "fine-dining", "gourmet")
_UPSCALE_KW  = ("steak", "lounge", "dining")

_NATURE_KEYWORD_LEVEL = 0.8
_UPSCALE_LEVEL        = 0.8


def initial_user_vector() -> dict[str, float]:
    """Neutral starting vector: every dimension at 0.5."""
    return {dim: NEUTRAL for dim in DIMENSIONS}


def _has_any(text: str, keywords: tuple[str, ...]) -> bool:
    return any(kw in text for kw in keywords)


def feature_vector(venue: Venue) -> dict[str, float]:
    """Project a venue onto DIMENSIONS. Undetected dimensions stay at NEUTRAL."""
    text = f"{venue.name} {venue.description}".lower()
    vec = initial_user_vector()

    if _has_any(text, _MEAT_KW):
        vec["meat"] = 1.0
    if _has_any(text, _SEAFOOD_KW):
        vec["seafood"] = 1.0
    if _has_any(text, _NOODLE_KW):
        vec["noodle"] = 1.0
    if _has_any(text, _RICE_KW):
        vec["rice"] = 1.0
    if venue.category == Category.BAKERY or _has_any(text, _BREAD_KW):
        vec["bread"] = 1.0
    if venue.category == Category.CULTURE or _has_any(text, _QUIET_KW):
        vec["quiet"] = 1.0
    if venue.category == Category.ACTIVITY or _has_any(text, _ACTIVE_KW):
        vec["active"] = 1.0

    if venue.is_indoor:
        vec["indoor"] = 1.0
    else:
        vec["nature"] = 1.0
    if _has_any(text, _NATURE_KW):
        vec["nature"] = max(vec["nature"], _NATURE_KEYWORD_LEVEL)

    if _has_any(text, _LUXURY_KW):
        vec["luxury"] = 1.0
    elif _has_any(text, _UPSCALE_KW):
        vec["luxury"] = _UPSCALE_LEVEL

    return vec


def cosine_similarity(u: dict[str, float], v: dict[str, float]) -> float:
    """(u · v) / (|u| |v|) over DIMENSIONS; 0.0 if either magnitude is 0."""
    dot = norm_u = norm_v = 0.0
    for dim in DIMENSIONS:
        a = u.get(dim, 0.0)
        b = v.get(dim, 0.0)
        dot += a * b
        norm_u += a * a
        norm_v += b * b
    denom = math.sqrt(norm_u) * math.sqrt(norm_v)
    if denom == 0:
        return 0.0
    return max(0.0, min(1.0, dot / denom))


def similarity(user_vector: dict[str, float], venue: Venue) -> float:
    """How well *venue* matches the user's taste, in [0, 1]."""
    return cosine_similarity(user_vector, feature_vector(venue))


def represented_dimensions(venue: Venue) -> list[str]:
    """Dimensions the venue was detected on (raised above the neutral baseline)."""
    features = feature_vector(venue)
    return [dim for dim in DIMENSIONS if features[dim] > NEUTRAL]


def update_vector(
    vector: dict[str, float],
    venue: Venue,
    action: FeedbackAction,
) -> dict[str, float]:
    """
    Apply LIKE (+LIKE_DELTA) or DISLIKE (DISLIKE_DELTA) to the dimensions the
    venue represents. Returns a new vector; *vector* is left untouched.
    Values are clamped to [0, 1] and rounded to 3 decimals.
    """
    delta = config.LIKE_DELTA if FeedbackAction(action) == FeedbackAction.LIKE else config.DISLIKE_DELTA
    updated = {dim: vector.get(dim, NEUTRAL) for dim in DIMENSIONS}
    for dim in represented_dimensions(venue):
        updated[dim] = round(max(0.0, min(1.0, updated[dim] + delta)), 3)
    return updated


# Public alias matching the external interface name
update_preference = update_vector


def changed_dimensions(before: dict[str, float], after: dict[str, float]) -> dict[str, float]:
    """Per-dimension delta for every dimension that moved."""
    deltas = {}
    for dim in DIMENSIONS:
        diff = round(after.get(dim, NEUTRAL) - before.get(dim, NEUTRAL), 3)
        if diff != 0:
            deltas[dim] = diff
    return deltas
