"""Quadrant classification with optional special zones and manual overrides."""

import math
from collections.abc import Mapping
from dataclasses import dataclass

from segment_insights.errors import InvalidInput
from segment_insights.models import MACRO_SEGMENT, Entity, Midpoint, ScaleConfig


@dataclass(frozen=True)
class ZoneBox:
    """Inclusive rectangle on the satisfaction/loyalty grid."""

    sat_min: float
    sat_max: float
    loy_min: float
    loy_max: float

    def contains(self, a: float, b: float) -> bool:
        return self.sat_min <= a <= self.sat_max and self.loy_min <= b <= self.loy_max

    def distance(self, a: float, b: float) -> float:
        """Chebyshev distance from a point to the box (0 inside)."""
        da = max(self.sat_min - a, 0.0, a - self.sat_max)
        db = max(self.loy_min - b, 0.0, b - self.loy_max)
        return max(da, db)

    @property
    def size(self) -> int:
        """Number of integer grid positions covered."""
        return int((self.sat_max - self.sat_min + 1) * (self.loy_max - self.loy_min + 1))


def zone_boxes(scale: ScaleConfig) -> dict[str, ZoneBox]:
    """Special-zone rectangles anchored at the scale corners.

    Apostles occupy the top-right corner, terrorists the bottom-left. The
    near-apostles box is the one-cell band just inside the apostles corner.
    """
    sat_min, sat_max = scale.bounds("satisfaction")
    loy_min, loy_max = scale.bounds("loyalty")
    a_size = scale.apostles_zone_size
    t_size = scale.terrorists_zone_size
    return {
        "apostles": ZoneBox(sat_max - a_size, sat_max, loy_max - a_size, loy_max),
        "near_apostles": ZoneBox(
            sat_max - a_size - 1, sat_max - a_size, loy_max - a_size - 1, loy_max - a_size
        ),
        "terrorists": ZoneBox(sat_min, sat_min + t_size, loy_min, loy_min + t_size),
    }


def classify_point(a: float, b: float, midpoint: Midpoint) -> str:
    """
    Four-way quadrant rule against the active midpoint.

    Raises:
        InvalidInput: if either coordinate is not finite
    """
    if not (math.isfinite(a) and math.isfinite(b)):
        raise InvalidInput(f"Cannot classify non-finite point ({a}, {b})", "point", (a, b))
    if a >= midpoint.satisfaction:
        return "loyalists" if b >= midpoint.loyalty else "mercenaries"
    return "hostages" if b >= midpoint.loyalty else "defectors"


def special_zone(
    a: float,
    b: float,
    macro: str,
    scale: ScaleConfig,
    near_zones: bool = False,
) -> str | None:
    """Sub-segment for a point already placed in its macro quadrant, or None.

    Apostle zones only subdivide loyalists and terrorist zones only subdivide
    defectors, so the special scheme never moves a point across macro quadrants.
    """
    sat_min, sat_max = scale.bounds("satisfaction")
    loy_min, loy_max = scale.bounds("loyalty")

    if macro == "loyalists":
        size = scale.apostles_zone_size
        if a >= sat_max - size and b >= loy_max - size:
            return "apostles"
        if near_zones and a >= sat_max - size - 1 and b >= loy_max - size - 1:
            return "near_apostles"
    elif macro == "defectors":
        size = scale.terrorists_zone_size
        if a <= sat_min + size and b <= loy_min + size:
            return "terrorists"
        if near_zones and a <= sat_min + size + 1 and b <= loy_min + size + 1:
            return "near_terrorists"
    return None


class QuadrantClassifier:
    """Classifies entities against one midpoint, scale and override map. Stateless per call."""

    def __init__(
        self,
        midpoint: Midpoint,
        scale: ScaleConfig,
        special_zones: bool = False,
        near_zones: bool = False,
        overrides: Mapping[str, str] | None = None,
    ):
        self.midpoint = midpoint
        self.scale = scale
        self.special_zones = special_zones or near_zones
        self.near_zones = near_zones
        self.overrides = dict(overrides or {})

    def classify_position(self, a: float, b: float) -> str:
        """Segment for a raw position, ignoring overrides."""
        macro = classify_point(a, b, self.midpoint)
        if self.special_zones:
            return special_zone(a, b, macro, self.scale, self.near_zones) or macro
        return macro

    def classify(self, entity: Entity) -> str:
        """Segment for an entity. Manual overrides win."""
        override = self.overrides.get(entity.id)
        if override is not None:
            return override
        return self.classify_position(entity.satisfaction, entity.loyalty)

    def has_override(self, entity: Entity) -> bool:
        return entity.id in self.overrides

    def is_neutral(self, entity: Entity) -> bool:
        """Exactly on the midpoint on both axes (and not overridden)."""
        return (
            not self.has_override(entity)
            and entity.satisfaction == self.midpoint.satisfaction
            and entity.loyalty == self.midpoint.loyalty
        )

    @staticmethod
    def macro_segment(label: str) -> str:
        return MACRO_SEGMENT.get(label, label)
