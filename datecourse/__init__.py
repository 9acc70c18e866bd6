"""
datecourse — greedy, time-aware date-course planner.

Public operations:
    distance_km(lat1, lng1, lat2, lng2)          great-circle distance in km
    similarity(user_vector, venue)               taste match in [0, 1]
    update_preference(vector, venue, action)     LIKE / DISLIKE learning step
    generate_itinerary(pool, options)            one outing, or None
"""

from datecourse.modules.tool_usage.distance_tool import haversine_km as distance_km
from datecourse.modules.preference.preference_model import similarity, update_preference
from datecourse.modules.planning.itinerary_builder import generate_itinerary

__all__ = [
    "distance_km",
    "similarity",
    "update_preference",
    "generate_itinerary",
]
