from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from walkspot.services.geo import steps_to_km


class Unit(str, Enum):
    steps = "steps"
    distance = "distance"


class TargetDistance(BaseModel):
    """One-way walking target, always stored in kilometers."""

    model_config = ConfigDict(frozen=True)

    km: float = Field(..., ge=0.0)

    @classmethod
    def from_value(cls, value: float, unit: Unit) -> "TargetDistance":
        if unit == Unit.steps:
            return cls(km=steps_to_km(value))
        return cls(km=value)


class Coordinate(BaseModel):
    model_config = ConfigDict(frozen=True)

    lat: float
    lon: float


class RawPoint(BaseModel):
    """One element as returned by the geographic query service."""

    osm_id: int = 0
    osm_type: str = "node"
    point: Optional[Coordinate] = None
    center: Optional[Coordinate] = None
    tags: Dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_element(cls, element: Mapping[str, Any]) -> "RawPoint":
        tags = element.get("tags")
        if not isinstance(tags, dict):
            tags = {}
        return cls(
            osm_id=_osm_id(element.get("id")),
            osm_type=str(element.get("type") or "node"),
            point=_coordinate(element.get("lat"), element.get("lon")),
            center=_coordinate(*_center_pair(element.get("center"))),
            tags={str(k): v for k, v in tags.items() if isinstance(v, str)},
        )

    def coordinate(self) -> Optional[Coordinate]:
        # way/relation elements only carry a center
        return self.point or self.center

    def name(self, language: Optional[str] = None) -> Optional[str]:
        if language:
            localized = self.tags.get(f"name:{language}")
            if localized:
                return localized
        return self.tags.get("name") or None


def _osm_id(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _center_pair(center: Any) -> tuple:
    if not isinstance(center, dict):
        return None, None
    return center.get("lat"), center.get("lon")


def _coordinate(lat: Any, lon: Any) -> Optional[Coordinate]:
    if lat is None or lon is None:
        return None
    try:
        return Coordinate(lat=float(lat), lon=float(lon))
    except (TypeError, ValueError):
        return None


class Candidate(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    lat: float
    lon: float
    category: str
    distance_m: float
    osm_id: int = 0
    osm_type: str = "node"
    tags: Mapping[str, str] = Field(default_factory=dict, validate_default=True)

    @field_validator("tags", mode="after")
    @classmethod
    def _freeze_tags(cls, value: Mapping[str, str]) -> Mapping[str, str]:
        return MappingProxyType(dict(value))

    @field_serializer("tags")
    def _dump_tags(self, value: Mapping[str, str]) -> Dict[str, str]:
        return dict(value)


class CandidateSet(BaseModel):
    """Up to three candidates ordered near, mid, far.

    ``used_fallback`` is set when nothing fell inside the tolerance band and
    the nearest points were used instead.
    """

    model_config = ConfigDict(frozen=True)

    candidates: List[Candidate] = Field(default_factory=list)
    used_fallback: bool = False

    def __len__(self) -> int:
        return len(self.candidates)


class SliderBounds(BaseModel):
    min: float
    max: float
    step: float
    default: float


class SpotCard(BaseModel):
    tier: str
    name: str
    category: str
    lat: float
    lon: float
    distance_m: float
    distance_text: str
    steps: int
    walk_minutes: int
    navigation_url: str


class SearchResponse(BaseModel):
    target_km: float
    radius_m: int
    used_fallback: bool
    spots: List[SpotCard]
