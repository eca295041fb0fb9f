"""Data model for entities, configuration and generated statements."""

import math
import re
from collections.abc import Callable, Mapping
from dataclasses import asdict, dataclass, field
from typing import Any

from segment_insights.errors import InvalidInput
from segment_insights.utils.normalize import sanitize_nan_inf

# Main quadrants, in display order
MAIN_SEGMENTS = ("loyalists", "mercenaries", "hostages", "defectors")
# Special sub-segments: apostle zones live inside loyalists, terrorist zones inside defectors
SPECIAL_SEGMENTS = ("apostles", "near_apostles", "terrorists", "near_terrorists")
ALL_SEGMENTS = MAIN_SEGMENTS + SPECIAL_SEGMENTS
NEUTRAL = "neutral"

MACRO_SEGMENT = {
    "loyalists": "loyalists",
    "mercenaries": "mercenaries",
    "hostages": "hostages",
    "defectors": "defectors",
    "apostles": "loyalists",
    "near_apostles": "loyalists",
    "terrorists": "defectors",
    "near_terrorists": "defectors",
}

DISPLAY_NAMES = {
    "loyalists": "Loyalists",
    "mercenaries": "Mercenaries",
    "hostages": "Hostages",
    "defectors": "Defectors",
    "apostles": "Apostles",
    "near_apostles": "Near-Apostles",
    "terrorists": "Terrorists",
    "near_terrorists": "Near-Terrorists",
    "neutral": "Neutral",
}

SINGULAR_NAMES = {
    "loyalists": "Loyalist",
    "mercenaries": "Mercenary",
    "hostages": "Hostage",
    "defectors": "Defector",
    "apostles": "Apostle",
    "near_apostles": "Near-Apostle",
    "terrorists": "Terrorist",
    "near_terrorists": "Near-Terrorist",
    "neutral": "Neutral",
}

VALID_NAMING_SCHEMES = {"classic", "modern"}
VALID_AUDIENCES = {"b2c", "b2b"}

_SCALE_RE = re.compile(r"^\s*(-?\d+)\s*[-–]\s*(-?\d+)\s*$")


def display_name(segment: str, count: int | None = None) -> str:
    """Display name of a segment, singular when count == 1."""
    if count == 1:
        return SINGULAR_NAMES.get(segment, segment.replace("_", " ").title())
    return DISPLAY_NAMES.get(segment, segment.replace("_", " ").title())


def parse_scale(scale: str) -> tuple[int, int]:
    """Parse a "min-max" scale string (hyphen or en dash) into integer bounds."""
    match = _SCALE_RE.match(scale or "")
    if not match:
        raise InvalidInput(f"Invalid scale '{scale}'. Expected 'min-max', e.g. '1-10'", "scale", scale)
    low, high = int(match.group(1)), int(match.group(2))
    if low >= high:
        raise InvalidInput(f"Invalid scale '{scale}': min must be below max", "scale", scale)
    return low, high


def _require_finite(value: Any, field_name: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidInput(f"{field_name} must be numeric, got {value!r}", field_name, value) from None
    if not math.isfinite(number):
        raise InvalidInput(f"{field_name} must be finite, got {value!r}", field_name, value)
    return number


@dataclass(frozen=True)
class Entity:
    """One survey respondent observation. Immutable input."""

    id: str
    satisfaction: float
    loyalty: float
    name: str | None = None
    email: str | None = None
    date: str | None = None
    excluded: bool = False


@dataclass(frozen=True)
class Midpoint:
    """Axis thresholds separating high from low on each axis."""

    satisfaction: float
    loyalty: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "satisfaction", _require_finite(self.satisfaction, "midpoint.satisfaction"))
        object.__setattr__(self, "loyalty", _require_finite(self.loyalty, "midpoint.loyalty"))


@dataclass(frozen=True)
class ScaleConfig:
    """Declared axis scales and special-zone sizes."""

    satisfaction: str = "1-10"
    loyalty: str = "1-10"
    apostles_zone_size: int = 1
    terrorists_zone_size: int = 1

    def __post_init__(self) -> None:
        # Normalize en dash to hyphen so scales compare and serialize consistently
        for axis in ("satisfaction", "loyalty"):
            low, high = parse_scale(getattr(self, axis))
            object.__setattr__(self, axis, f"{low}-{high}")
        for name in ("apostles_zone_size", "terrorists_zone_size"):
            size = getattr(self, name)
            if not isinstance(size, int) or size < 0:
                raise InvalidInput(f"{name} must be a non-negative integer, got {size!r}", name, size)

    def bounds(self, axis: str) -> tuple[int, int]:
        """(min, max) for "satisfaction" or "loyalty"."""
        if axis not in ("satisfaction", "loyalty"):
            raise ValueError(f"Unknown axis '{axis}'")
        return parse_scale(getattr(self, axis))

    def midpoint(self) -> Midpoint:
        """Arithmetic midpoint of both scales, e.g. 1-10 -> 5.5."""
        sat_min, sat_max = self.bounds("satisfaction")
        loy_min, loy_max = self.bounds("loyalty")
        return Midpoint((sat_min + sat_max) / 2, (loy_min + loy_max) / 2)


@dataclass(frozen=True)
class SegmentRanking:
    """Versioned ordering of segments used to call a transition positive or negative.

    Higher rank is better. Segments missing from the table make a transition neutral.
    """

    version: str
    ranks: Mapping[str, int]

    def direction(self, from_segment: str, to_segment: str) -> str:
        """Return "positive", "negative" or "neutral" for a segment change."""
        from_rank = self.ranks.get(from_segment)
        to_rank = self.ranks.get(to_segment)
        if from_rank is None or to_rank is None or from_rank == to_rank:
            return "neutral"
        return "positive" if to_rank > from_rank else "negative"


DEFAULT_RANKING = SegmentRanking(
    version="1",
    ranks={
        "terrorists": 0,
        "near_terrorists": 1,
        "defectors": 2,
        "hostages": 3,
        "mercenaries": 4,
        "loyalists": 5,
        "near_apostles": 6,
        "apostles": 7,
    },
)


@dataclass(frozen=True)
class ReportOptions:
    """Immutable report options. Normalized and validated on construction."""

    special_zones: bool = False
    near_zones: bool = False
    naming_scheme: str = "modern"
    audience: str = "b2c"
    include_chart_placeholders: bool = True
    capture_chart: Callable[[str, str], str | None] | None = None
    manual_overrides: Mapping[str, str] = field(default_factory=dict)
    proximity_threshold: float = 2.0
    report_date: str | None = None
    ranking: SegmentRanking = DEFAULT_RANKING
    axis_labels: tuple[str, str] = ("satisfaction", "loyalty")

    def __post_init__(self) -> None:
        scheme = self.naming_scheme.lower().strip()
        audience = self.audience.lower().strip()

        if scheme not in VALID_NAMING_SCHEMES:
            raise ValueError(
                f"Invalid naming_scheme '{self.naming_scheme}'. Must be one of: {VALID_NAMING_SCHEMES}"
            )
        if audience not in VALID_AUDIENCES:
            raise ValueError(f"Invalid audience '{self.audience}'. Must be one of: {VALID_AUDIENCES}")
        if not self.proximity_threshold > 0:
            raise ValueError(f"proximity_threshold must be positive, got {self.proximity_threshold}")

        overrides = {str(k): str(v).lower().strip() for k, v in dict(self.manual_overrides).items()}
        for entity_id, segment in overrides.items():
            if segment not in ALL_SEGMENTS:
                raise InvalidInput(
                    f"Unknown override segment '{segment}' for entity '{entity_id}'",
                    "manual_overrides",
                    segment,
                )

        object.__setattr__(self, "naming_scheme", scheme)
        object.__setattr__(self, "audience", audience)
        object.__setattr__(self, "manual_overrides", overrides)
        object.__setattr__(self, "axis_labels", tuple(self.axis_labels))
        # Near zones are a refinement of special zones
        if self.near_zones and not self.special_zones:
            object.__setattr__(self, "special_zones", True)


@dataclass(frozen=True)
class SupportingEntity:
    """Entity row attached to a statement."""

    id: str
    name: str | None
    email: str | None
    satisfaction: float
    loyalty: float
    distance: float | None = None
    score: float | None = None


# ---------------- Support variants ----------------


@dataclass(frozen=True)
class SampleSupport:
    total: int
    is_low: bool
    is_high: bool
    missing_segments: tuple[str, ...] = ()
    kind: str = field(default="sample", init=False)


@dataclass(frozen=True)
class DistributionSupport:
    counts: Mapping[str, int]
    percentages: Mapping[str, float]
    segment: str | None = None
    count: int | None = None
    percentage: float | None = None
    kind: str = field(default="distribution", init=False)


@dataclass(frozen=True)
class StatisticsSupport:
    axis: str
    average: float
    mode: float | None
    threshold: float
    is_custom_threshold: bool
    is_very_demanding: bool
    kind: str = field(default="statistics", init=False)


@dataclass(frozen=True)
class RecommendationSupport:
    score: float
    promoters: int
    passives: int
    detractors: int
    total: int
    kind: str = field(default="recommendation", init=False)


@dataclass(frozen=True)
class ProximitySupport:
    relationship: str | None
    count: int
    level: str | None = None
    high_risk_count: int = 0
    high_opportunity_count: int = 0
    kind: str = field(default="proximity", init=False)


@dataclass(frozen=True)
class ConversionSupport:
    from_segment: str
    to_segment: str
    count: int
    average_chance: float
    kind: str = field(default="conversion", init=False)


@dataclass(frozen=True)
class HistoricalSupport:
    tracked_entities: int
    total_transitions: int
    positive: int
    negative: int
    between_segment_transitions: int
    transition: str | None = None
    share: float | None = None
    typical_gap_days: float | None = None
    kind: str = field(default="historical", init=False)


@dataclass(frozen=True)
class ChartSupport:
    chart_id: str
    caption: str
    kind: str = field(default="chart", init=False)


Support = (
    SampleSupport
    | DistributionSupport
    | StatisticsSupport
    | RecommendationSupport
    | ProximitySupport
    | ConversionSupport
    | HistoricalSupport
    | ChartSupport
)


@dataclass(frozen=True)
class Statement:
    """One generated finding, risk, opportunity or action. Never mutated after emission."""

    id: str
    kind: str
    category: str
    text: str
    priority: int
    severity: str | None = None
    impact: str | None = None
    actionability: str | None = None
    expected_impact: str | None = None
    roi: int | None = None
    segment: str | None = None
    entities: tuple[SupportingEntity, ...] = ()
    support: Support | None = None
    chart_id: str | None = None
    is_chart: bool = False

    @property
    def entity_ids(self) -> tuple[str, ...]:
        return tuple(e.id for e in self.entities)


@dataclass(frozen=True)
class SupportingImage:
    statement_id: str
    chart_id: str
    caption: str
    image_ref: str | None = None
    placeholder: str | None = None


@dataclass(frozen=True)
class Report:
    """Read-only report artifact handed to rendering and export collaborators."""

    date: str
    findings: tuple[Statement, ...]
    opportunities: tuple[Statement, ...]
    risks: tuple[Statement, ...]
    actions: tuple[Statement, ...]
    supporting_images: tuple[SupportingImage, ...]
    metadata: Mapping[str, Any]
    duplicate_entity_lists: Mapping[str, tuple[str, ...]] = field(default_factory=dict)

    def all_statements(self) -> list[Statement]:
        return [*self.findings, *self.risks, *self.opportunities, *self.actions]

    def to_dict(self) -> dict[str, Any]:
        """JSON-safe dict (NaN/inf replaced with None, tuples as lists)."""
        return sanitize_nan_inf(asdict(self))
