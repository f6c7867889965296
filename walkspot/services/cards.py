from __future__ import annotations

from typing import List
from urllib.parse import urlencode

from walkspot.models import Candidate, CandidateSet, SpotCard
from walkspot.services.geo import WALK_SPEED_KMH, km_to_steps, walk_minutes

TIERS = ("near", "mid", "far")

GOOGLE_MAPS_DIR_URL = "https://www.google.com/maps/dir/"


def format_distance(distance_m: float) -> str:
    km = distance_m / 1000
    if km < 1:
        return f"{round(distance_m)} m"
    return f"{km:.1f} km"


def navigation_url(lat: float, lon: float) -> str:
    params = {"api": 1, "destination": f"{lat},{lon}", "travelmode": "walking"}
    return f"{GOOGLE_MAPS_DIR_URL}?{urlencode(params, safe=',')}"


def build_card(candidate: Candidate, tier: str, walk_speed_kmh: float = WALK_SPEED_KMH) -> SpotCard:
    km = candidate.distance_m / 1000
    return SpotCard(
        tier=tier,
        name=candidate.name,
        category=candidate.category,
        lat=candidate.lat,
        lon=candidate.lon,
        distance_m=candidate.distance_m,
        distance_text=format_distance(candidate.distance_m),
        steps=round(km_to_steps(km)),
        walk_minutes=round(walk_minutes(km, walk_speed_kmh)),
        navigation_url=navigation_url(candidate.lat, candidate.lon),
    )


def build_cards(candidate_set: CandidateSet, walk_speed_kmh: float = WALK_SPEED_KMH) -> List[SpotCard]:
    # tier follows position; a pool of three or fewer is labelled the same way
    return [
        build_card(candidate, TIERS[i], walk_speed_kmh)
        for i, candidate in enumerate(candidate_set.candidates[: len(TIERS)])
    ]
