"""Great-circle distance between event venues and the search origin."""

from __future__ import annotations

import math

from event_aggregator.models.event import Coordinates

EARTH_RADIUS_MILES = 3958.8


def haversine_miles(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute the great-circle distance between two points in miles."""
    dlat = math.radians(lat2 - lat1)
    dlon = math.radians(lon2 - lon1)
    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(dlon / 2) ** 2
    )
    return EARTH_RADIUS_MILES * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def distance_between(origin: Coordinates, target: Coordinates | None) -> float | None:
    """Miles from ``origin`` to ``target``, or ``None`` if the venue has no geometry."""
    if target is None:
        return None
    return haversine_miles(origin.lat, origin.lng, target.lat, target.lng)
