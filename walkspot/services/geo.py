from __future__ import annotations

import math

EARTH_RADIUS_M = 6371000.0
STEP_LENGTH_M = 0.65
WALK_SPEED_KMH = 4.0


def distance_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle (haversine) distance in meters between two WGS84 coords."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)

    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_M * c


def steps_to_km(steps: float) -> float:
    return steps * STEP_LENGTH_M / 1000


def km_to_steps(km: float) -> float:
    return km * 1000 / STEP_LENGTH_M


def walk_minutes(km: float, speed_kmh: float = WALK_SPEED_KMH) -> float:
    return km / speed_kmh * 60
