"""
modules/tool_usage/distance_tool.py
-------------------------------------
Distance and travel-time oracle using the Haversine formula.
No external HTTP calls are made.

Travel-time model (config.py):
  foot -- FOOT_MINUTES_PER_KM per km, capped at FOOT_MAX_TRAVEL_MINUTES
  car  -- CAR_MINUTES_PER_KM per km capped at CAR_MAX_DRIVE_MINUTES,
          plus a fixed CAR_PARKING_MINUTES per stop
"""

from __future__ import annotations
import math

from datecourse import config
from datecourse.schemas.venue import Transport, Venue

# ---------------------------------------------------------------------------
# Pure maths
# ---------------------------------------------------------------------------

_EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance between two points (Haversine formula) in km."""
    r = _EARTH_RADIUS_KM
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lam = math.radians(lng2 - lng1)
    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lam / 2) ** 2
    )
    return 2 * r * math.asin(min(1.0, math.sqrt(a)))


def venue_distance_km(a: Venue, b: Venue) -> float:
    return haversine_km(a.lat, a.lng, b.lat, b.lng)


def travel_minutes(distance_km: float, transport: Transport = Transport.FOOT) -> float:
    """Minutes needed to cover *distance_km* with the given transport mode."""
    if transport == Transport.CAR:
        driving = min(config.CAR_MAX_DRIVE_MINUTES, distance_km * config.CAR_MINUTES_PER_KM)
        return driving + config.CAR_PARKING_MINUTES
    return min(config.FOOT_MAX_TRAVEL_MINUTES, distance_km * config.FOOT_MINUTES_PER_KM)


def exceeds_walking_limit(distance_km: float, transport: Transport) -> bool:
    """True when a foot hop is longer than the walking limit."""
    return transport == Transport.FOOT and distance_km > config.WALK_MAX_HOP_KM

