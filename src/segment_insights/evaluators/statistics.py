"""Axis statistics evaluator."""

from collections.abc import Mapping
from typing import Any

from segment_insights.models import Midpoint, ScaleConfig

CUSTOM_THRESHOLD_TOLERANCE = 0.01
VERY_DEMANDING_MARGIN = 1.5


def evaluate_statistics(
    statistics: Mapping[str, Mapping[str, float | None]],
    scale: ScaleConfig,
    midpoint: Midpoint | None = None,
) -> dict[str, Any]:
    """
    Compare axis averages against the active threshold.

    The active threshold is the supplied midpoint when given, otherwise the
    scale midpoint. A threshold counts as custom when it differs from the
    scale midpoint by more than 0.01, and as very demanding when a custom
    threshold sits more than 1.5 units above the scale midpoint.

    Args:
        statistics: {"satisfaction": {"average", "mode"}, "loyalty": {...}}
        scale: Declared scales
        midpoint: Active midpoint, or None to use the scale midpoint

    Returns:
        Per-axis evaluation dicts; an axis with no data has average None
    """
    scale_mid = scale.midpoint()
    result: dict[str, Any] = {}
    for axis in ("satisfaction", "loyalty"):
        stats = statistics.get(axis, {})
        average = stats.get("average")
        scale_midpoint = getattr(scale_mid, axis)
        active = getattr(midpoint, axis) if midpoint is not None else scale_midpoint
        is_custom = midpoint is not None and abs(active - scale_midpoint) > CUSTOM_THRESHOLD_TOLERANCE

        result[axis] = {
            "average": average,
            "mode": stats.get("mode"),
            "scale_midpoint": scale_midpoint,
            "active_midpoint": active,
            "is_custom_threshold": is_custom,
            "is_above": average is not None and average > active,
            "is_below": average is not None and average < active,
            "is_at": average is not None and average == active,
            "is_very_demanding": is_custom and active - scale_midpoint > VERY_DEMANDING_MARGIN,
        }
    return result
