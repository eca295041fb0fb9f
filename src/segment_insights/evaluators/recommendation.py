"""Recommendation-score (promoter/detractor) evaluator."""

import math
from collections import Counter
from collections.abc import Iterable
from typing import Any

DETRACTOR_SHARE = 0.6364
PASSIVE_SHARE = 0.1818
STRONG_SCORE = 50
UNBALANCED_SCORE = 20


def _round_half_up(x: float) -> int:
    return math.floor(x + 0.5)


def category_bounds(scale_min: int, scale_max: int) -> dict[str, tuple[int, int]]:
    """
    Split a scale into detractor, passive and promoter value ranges.

    Proportions follow the classic 0-10 recommendation question: on 1-10
    detractors are 1-6, passives 7-8 and promoters 9-10.
    """
    n = scale_max - scale_min + 1
    detractors = _round_half_up(n * DETRACTOR_SHARE)
    passives = _round_half_up(n * PASSIVE_SHARE)
    return {
        "detractors": (scale_min, scale_min + detractors - 1),
        "passives": (scale_min + detractors, scale_min + detractors + passives - 1),
        "promoters": (scale_min + detractors + passives, scale_max),
    }


def categorize(value: float, bounds: dict[str, tuple[int, int]]) -> str:
    if value < bounds["passives"][0]:
        return "detractors"
    if value < bounds["promoters"][0]:
        return "passives"
    return "promoters"


def evaluate_recommendation(values: Iterable[float], scale: tuple[int, int]) -> dict[str, Any]:
    """
    Compute the net recommendation score and data-quality flags.

    Args:
        values: Recommendation-axis scores of non-excluded entities
        scale: (min, max) of that axis

    Returns:
        Dict with score (promoter % - detractor %), category counts and
        percentages, and the unbalanced/incomplete-scale warnings
    """
    values = list(values)
    bounds = category_bounds(*scale)
    counts = Counter(categorize(v, bounds) for v in values)
    total = len(values)

    def pct(category: str) -> float:
        return counts[category] / total * 100 if total else 0.0

    score = pct("promoters") - pct("detractors")
    expected_values = scale[1] - scale[0] + 1
    distinct = {round(v) for v in values if scale[0] <= v <= scale[1]}
    has_incomplete_scale = total > 0 and len(distinct) < expected_values
    detractors = counts["detractors"]

    return {
        "total": total,
        "score": score,
        "promoters": counts["promoters"],
        "passives": counts["passives"],
        "detractors": detractors,
        "promoter_percentage": pct("promoters"),
        "passive_percentage": pct("passives"),
        "detractor_percentage": pct("detractors"),
        "category_bounds": bounds,
        "is_positive": score > 0,
        "is_strong": score > STRONG_SCORE,
        "is_weak": score < 0,
        "has_incomplete_scale": has_incomplete_scale,
        "has_unbalanced_data": score > UNBALANCED_SCORE and (detractors == 0 or has_incomplete_scale),
    }
