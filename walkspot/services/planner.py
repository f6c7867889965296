from __future__ import annotations

import math

from walkspot.models import SliderBounds, Unit
from walkspot.services.geo import km_to_steps, steps_to_km

TOLERANCE_RATIO = 0.083  # roughly +-500 steps around a 6000-step target
MIN_SEARCH_RADIUS_M = 300.0
MAX_SEARCH_RADIUS_M = 10_000.0

SLIDER_CONFIG: dict[Unit, SliderBounds] = {
    Unit.steps: SliderBounds(min=1000, max=15000, step=500, default=3000),
    Unit.distance: SliderBounds(min=0.5, max=10.0, step=0.5, default=2.0),
}


def search_radius_m(
    target_km: float,
    tolerance_ratio: float = TOLERANCE_RATIO,
    min_radius_m: float = MIN_SEARCH_RADIUS_M,
    max_radius_m: float = MAX_SEARCH_RADIUS_M,
) -> float:
    """Radius that reaches the upper edge of the tolerance band, clamped."""
    upper_km = target_km * (1 + tolerance_ratio)
    return max(min_radius_m, min(upper_km * 1000, max_radius_m))


def clamp_to_slider(value: float, unit: Unit) -> float:
    bounds = _bounds(unit)
    return max(bounds.min, min(value, bounds.max))


def convert_slider_value(value: float, to_unit: Unit) -> float:
    """Convert a slider value when the unit toggle flips to ``to_unit``.

    The result is snapped to the new unit's step and kept inside its bounds.
    """
    bounds = _bounds(to_unit)
    converted = km_to_steps(value) if to_unit == Unit.steps else steps_to_km(value)
    # round half up
    snapped = math.floor(converted / bounds.step + 0.5) * bounds.step
    return clamp_to_slider(snapped, to_unit)


def _bounds(unit: Unit) -> SliderBounds:
    try:
        return SLIDER_CONFIG[Unit(unit)]
    except ValueError:
        raise ValueError(f"Unknown unit '{unit}'. Supported: {', '.join(u.value for u in Unit)}") from None
