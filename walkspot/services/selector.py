from __future__ import annotations

import logging
import math
import random
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, TypeVar, Union

from walkspot.models import Candidate, CandidateSet, RawPoint, TargetDistance
from walkspot.services.categories import category_label
from walkspot.services.geo import distance_m
from walkspot.services.planner import TOLERANCE_RATIO

logger = logging.getLogger(__name__)

MAX_SPOTS = 30

T = TypeVar("T")


def materialize(
    points: Iterable[Union[RawPoint, Dict[str, Any]]],
    user_lat: float,
    user_lon: float,
    name_language: Optional[str] = "ja",
) -> List[Candidate]:
    """Turn raw elements into candidates, dropping those without a coordinate or name."""
    candidates: list[Candidate] = []
    for item in points:
        if isinstance(item, RawPoint):
            point = item
        elif isinstance(item, Mapping):
            point = RawPoint.from_element(item)
        else:
            continue

        coord = point.coordinate()
        if coord is None:
            continue
        name = point.name(name_language)
        if not name:
            continue

        candidates.append(
            Candidate(
                name=name,
                lat=coord.lat,
                lon=coord.lon,
                category=category_label(point.tags),
                distance_m=distance_m(user_lat, user_lon, coord.lat, coord.lon),
                osm_id=point.osm_id,
                osm_type=point.osm_type,
                tags=point.tags,
            )
        )
    return candidates


def tolerance_band(target_km: float, tolerance_ratio: float = TOLERANCE_RATIO) -> Tuple[float, float]:
    tolerance = target_km * tolerance_ratio
    return target_km - tolerance, target_km + tolerance


def split_terciles(pool: Sequence[T]) -> Tuple[Sequence[T], Sequence[T], Sequence[T]]:
    """Split a distance-ordered pool into contiguous near/mid/far buckets."""
    size = math.ceil(len(pool) / 3)
    return pool[:size], pool[size : size * 2], pool[size * 2 :]


def select_candidates(
    elements: Iterable[Union[RawPoint, Dict[str, Any]]],
    user_lat: float,
    user_lon: float,
    target: Union[TargetDistance, float],
    *,
    rng: Optional[random.Random] = None,
    tolerance_ratio: float = TOLERANCE_RATIO,
    max_spots: int = MAX_SPOTS,
    name_language: Optional[str] = "ja",
) -> CandidateSet:
    """Pick up to three spots around a one-way target distance.

    Points inside the tolerance band form the pool; when the band is empty the
    ``max_spots`` nearest points are used instead. Pools of three or fewer are
    returned as they are. Larger pools are split into distance terciles and one
    spot is drawn at random from each, so the result is always ordered near,
    mid, far.
    """
    target_km = target.km if isinstance(target, TargetDistance) else float(target)

    # sort() is stable, equal distances keep input order
    spots = materialize(elements, user_lat, user_lon, name_language)
    spots.sort(key=lambda c: c.distance_m)

    min_km, max_km = tolerance_band(target_km, tolerance_ratio)
    in_range = [c for c in spots if min_km <= c.distance_m / 1000 <= max_km]

    used_fallback = not in_range
    pool = in_range if in_range else spots[:max_spots]

    logger.debug(
        "Selecting from %d usable spots: %d in band [%.3f, %.3f] km, pool=%d, fallback=%s",
        len(spots),
        len(in_range),
        min_km,
        max_km,
        len(pool),
        used_fallback,
    )

    if not pool:
        return CandidateSet(candidates=[], used_fallback=used_fallback)
    if len(pool) <= 3:
        return CandidateSet(candidates=list(pool), used_fallback=used_fallback)

    rng = rng or random.Random()
    picks = [rng.choice(bucket) for bucket in split_terciles(pool) if bucket]
    return CandidateSet(candidates=picks, used_fallback=used_fallback)
