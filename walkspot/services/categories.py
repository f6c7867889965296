from __future__ import annotations

from typing import Mapping, Optional

# Display label per OSM tag value. To add a category, add its value here and
# to QUERY_TAGS below; the classifier itself never changes.
CATEGORY_LABELS: dict[str, str] = {
    "park": "Park",
    "cafe": "Cafe",
    "restaurant": "Restaurant",
    "place_of_worship": "Shrine / Temple",
    "library": "Library",
    "community_centre": "Community Centre",
    "garden": "Garden",
    "playground": "Playground",
    "sports_centre": "Sports Facility",
    "pitch": "Sports Facility",
    "viewpoint": "Viewpoint",
    "attraction": "Attraction",
    "museum": "Museum",
    "artwork": "Artwork",
    "peak": "Peak / Hill",
    "spring": "Spring",
    "water": "Waterside",
    "wood": "Woods",
}

# Probe order matters: the first key with a known value wins.
PROBE_KEYS: tuple[str, ...] = ("amenity", "leisure", "tourism", "natural")

RELIGION_LABELS: dict[str, str] = {
    "shinto": "Shrine",
    "buddhism": "Temple",
}

FALLBACK_LABEL = "Spot"

# Values requested from Overpass for point features, per key.
QUERY_TAGS: dict[str, tuple[str, ...]] = {
    "amenity": ("cafe", "restaurant", "library", "community_centre", "place_of_worship"),
    "leisure": ("park", "garden", "playground", "sports_centre", "pitch"),
    "tourism": ("viewpoint", "attraction", "museum", "artwork"),
    "natural": ("peak", "spring", "water", "wood"),
}

# Extended geometries (way/relation) requested with their center.
AREA_TAGS: tuple[tuple[str, str, str], ...] = (
    ("way", "leisure", "park"),
    ("way", "amenity", "place_of_worship"),
    ("relation", "leisure", "park"),
)


def category_label(tags: Mapping[str, str]) -> str:
    for key in PROBE_KEYS:
        label = _label_for(tags.get(key))
        if label:
            return label

    religion = tags.get("religion")
    if religion in RELIGION_LABELS:
        return RELIGION_LABELS[religion]
    return FALLBACK_LABEL


def _label_for(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    return CATEGORY_LABELS.get(value)


def list_categories() -> dict[str, list[dict[str, str]]]:
    return {
        key: [{"value": value, "label": CATEGORY_LABELS[value]} for value in values]
        for key, values in QUERY_TAGS.items()
    }
