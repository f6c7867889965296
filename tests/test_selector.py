from __future__ import annotations

import math
import random

import pytest

from walkspot.models import RawPoint, TargetDistance
from walkspot.services.geo import EARTH_RADIUS_M
from walkspot.services.selector import (
    materialize,
    select_candidates,
    split_terciles,
    tolerance_band,
)

USER_LAT = 35.0
USER_LON = 139.0


def element(osm_id, distance, **tags):
    """Node ``distance`` meters due north of the user."""
    return {
        "type": "node",
        "id": osm_id,
        "lat": USER_LAT + math.degrees(distance / EARTH_RADIUS_M),
        "lon": USER_LON,
        "tags": {"name": f"Spot {osm_id}", **tags},
    }


class NoRandom:
    def choice(self, seq):
        raise AssertionError("randomness should not be used")


class FirstChoice:
    def __init__(self):
        self.buckets = []

    def choice(self, seq):
        self.buckets.append(list(seq))
        return seq[0]


def test_end_to_end_small_pool_is_returned_in_order():
    distances = [500, 900, 950, 1000, 1050, 1100, 4000, 4500, 5000, 9000]
    elements = [element(i, d) for i, d in enumerate(distances)]
    random.shuffle(elements)

    result = select_candidates(elements, USER_LAT, USER_LON, TargetDistance(km=1.0), rng=NoRandom())

    assert [round(c.distance_m) for c in result.candidates] == [950, 1000, 1050]
    assert result.used_fallback is False


def test_band_is_inclusive():
    min_km, max_km = tolerance_band(2.0)
    assert min_km == pytest.approx(2.0 * 0.917)
    assert max_km == pytest.approx(2.0 * 1.083)


@pytest.mark.parametrize("target_km", [0.5, 1.0, 2.0, 6.5])
def test_every_pick_respects_band(target_km):
    elements = [element(i, d) for i, d in enumerate(range(100, 12_000, 37))]
    result = select_candidates(elements, USER_LAT, USER_LON, target_km, rng=random.Random(7))

    assert result.candidates
    assert not result.used_fallback
    for c in result.candidates:
        assert target_km * 0.917 <= c.distance_m / 1000 <= target_km * 1.083


def test_large_pool_picks_one_per_tercile():
    # seven points in the band: buckets of 3, 3, 1
    distances = [920, 940, 960, 980, 1000, 1020, 1080]
    elements = [element(i, d) for i, d in enumerate(distances)]
    rng = FirstChoice()

    result = select_candidates(elements, USER_LAT, USER_LON, 1.0, rng=rng)

    assert [len(b) for b in rng.buckets] == [3, 3, 1]
    assert [round(c.distance_m) for c in result.candidates] == [920, 980, 1080]


def test_large_pool_is_always_near_mid_far():
    elements = [element(i, d) for i, d in enumerate(range(920, 1080, 10))]
    for seed in range(25):
        result = select_candidates(elements, USER_LAT, USER_LON, 1.0, rng=random.Random(seed))
        distances = [c.distance_m for c in result.candidates]
        assert len(distances) == 3
        assert distances == sorted(distances)


def test_seeded_selection_is_reproducible():
    elements = [element(i, d) for i, d in enumerate(range(920, 1080, 10))]
    first = select_candidates(elements, USER_LAT, USER_LON, 1.0, rng=random.Random(42))
    second = select_candidates(elements, USER_LAT, USER_LON, 1.0, rng=random.Random(42))
    assert first == second


def test_pool_of_four_leaves_far_empty():
    elements = [element(i, d) for i, d in enumerate([930, 960, 990, 1020])]
    result = select_candidates(elements, USER_LAT, USER_LON, 1.0, rng=random.Random(1))
    assert len(result.candidates) == 2
    assert result.candidates[0].distance_m < result.candidates[1].distance_m


def test_split_terciles():
    assert split_terciles(list(range(4))) == ([0, 1], [2, 3], [])
    assert split_terciles(list(range(5))) == ([0, 1], [2, 3], [4])
    assert split_terciles(list(range(9))) == ([0, 1, 2], [3, 4, 5], [6, 7, 8])


def test_empty_band_falls_back_to_nearest():
    elements = [element(i, 100 + i * 10) for i in range(40)]
    rng = FirstChoice()

    result = select_candidates(elements, USER_LAT, USER_LON, 5.0, rng=rng)

    assert result.used_fallback is True
    assert len(result.candidates) == 3
    pooled = [c for bucket in rng.buckets for c in bucket]
    assert len(pooled) == 30
    assert max(c.distance_m for c in pooled) == pytest.approx(390, abs=0.01)


def test_fallback_with_single_point():
    result = select_candidates([element(1, 50)], USER_LAT, USER_LON, 3.0, rng=NoRandom())
    assert len(result.candidates) == 1
    assert result.used_fallback is True


def test_no_usable_points_gives_empty_set():
    elements = [
        {"type": "node", "id": 1, "tags": {"name": "Nowhere"}},
        {"type": "node", "id": 2, "lat": 35.01, "lon": 139.0, "tags": {}},
        {"type": "way", "id": 3, "tags": {"name": "No center"}},
    ]
    result = select_candidates(elements, USER_LAT, USER_LON, 1.0)
    assert result.candidates == []
    assert len(result) == 0


def test_empty_input():
    assert select_candidates([], USER_LAT, USER_LON, 1.0).candidates == []


def test_equal_distances_keep_input_order():
    elements = [element("1", 1000), element("2", 1000), element("3", 1000)]
    result = select_candidates(elements, USER_LAT, USER_LON, 1.0, rng=NoRandom())
    assert [c.osm_id for c in result.candidates] == [1, 2, 3]


def test_materialize_uses_center_for_areas():
    way = {
        "type": "way",
        "id": 77,
        "center": {"lat": 35.005, "lon": 139.0},
        "tags": {"name": "Big Park", "leisure": "park"},
    }
    [candidate] = materialize([way], USER_LAT, USER_LON)
    assert candidate.lat == 35.005
    assert candidate.category == "Park"
    assert candidate.osm_type == "way"


def test_materialize_prefers_localized_name():
    el = element(5, 300)
    el["tags"]["name:ja"] = "みどり公園"
    [candidate] = materialize([el], USER_LAT, USER_LON, name_language="ja")
    assert candidate.name == "みどり公園"

    [candidate] = materialize([el], USER_LAT, USER_LON, name_language="en")
    assert candidate.name == "Spot 5"


def test_materialize_accepts_raw_points():
    point = RawPoint.from_element(element(9, 400, religion="shinto"))
    [candidate] = materialize([point], USER_LAT, USER_LON)
    assert candidate.category == "Shrine"
    assert candidate.distance_m == pytest.approx(400)


def test_candidates_are_immutable():
    [candidate] = materialize([element(1, 100)], USER_LAT, USER_LON)
    with pytest.raises(Exception):
        candidate.name = "changed"


def test_raw_point_tolerates_garbage():
    point = RawPoint.from_element({"id": "x1", "lat": "abc", "lon": 1, "center": "nope", "tags": None})
    assert point.coordinate() is None
    assert point.name() is None


def test_null_name_tag_is_dropped():
    el = {"type": "node", "id": 4, "lat": 35.01, "lon": 139.0, "tags": {"name": None, "leisure": "park"}}
    result = select_candidates([el], USER_LAT, USER_LON, 1.0)
    assert result.candidates == []


def test_non_string_tags_are_ignored():
    el = element(6, 300, leisure=None, amenity=5)
    [candidate] = materialize([el], USER_LAT, USER_LON)
    assert candidate.category == "Spot"
    assert "leisure" not in candidate.tags


def test_non_mapping_elements_are_skipped():
    good = element(8, 1000)
    result = select_candidates([None, "node", 42, good], USER_LAT, USER_LON, 1.0, rng=NoRandom())
    assert [c.osm_id for c in result.candidates] == [8]


def test_direct_point_wins_over_center():
    el = element(11, 500)
    el["center"] = {"lat": 35.5, "lon": 139.5}
    [candidate] = materialize([el], USER_LAT, USER_LON)
    assert candidate.lat == el["lat"]
    assert candidate.lon == USER_LON
    assert candidate.distance_m == pytest.approx(500)


def test_candidate_tags_are_read_only():
    [candidate] = materialize([element(12, 100, leisure="park")], USER_LAT, USER_LON)
    with pytest.raises(TypeError):
        candidate.tags["leisure"] = "garden"
    assert candidate.tags["leisure"] == "park"
    assert candidate.model_dump()["tags"] == {"name": "Spot 12", "leisure": "park"}
