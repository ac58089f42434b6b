"""
Geographic and size-classification helpers.

Distances are great-circle (Haversine) in meters, which is accurate to
well under a meter at apron scale.
"""

import math
from typing import Optional

EARTH_RADIUS_M = 6371e3


def calculate_distance(
    lat1: float, lon1: float,
    lat2: float, lon2: float
) -> float:
    """
    Calculate great-circle distance between two points in meters.

    Uses the Haversine formula for accuracy over short to medium distances.
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lon = math.radians(lon2 - lon1)

    a = (
        math.sin(delta_lat / 2) ** 2 +
        math.cos(lat1_rad) * math.cos(lat2_rad) *
        math.sin(delta_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_M * c


def matches_aircraft_size(
    aircraft_wingspan: float,
    stand_max_wingspan: Optional[float] = None,
) -> bool:
    """Check whether an aircraft fits a stand's wingspan restriction."""
    if not stand_max_wingspan:
        return True  # No restriction
    return aircraft_wingspan <= stand_max_wingspan


def get_aircraft_size_code(wingspan: float) -> str:
    """
    Classify a wingspan into its ICAO Aerodrome Reference Code letter.

    A: < 15m, B: < 24m, C: < 36m, D: < 52m, E: < 65m, F: up to 80m.
    """
    if wingspan < 15:
        return 'A'
    if wingspan < 24:
        return 'B'
    if wingspan < 36:
        return 'C'
    if wingspan < 52:
        return 'D'
    if wingspan < 65:
        return 'E'
    return 'F'
