"""Segment distribution evaluator."""

import logging
import operator
from collections.abc import Mapping
from typing import Any

from segment_insights.models import MACRO_SEGMENT, MAIN_SEGMENTS
from segment_insights.utils.validators import check_rule

logger = logging.getLogger(__name__)

SKEWED_PCT = 50.0
CLOSE_FOLLOW_RATIO = 0.15
TOO_EMPTY_PCT = 5.0
TOO_FULL_GAP_PCT = 10.0


def evaluate_distribution(counts: Mapping[str, int], neutral: int = 0) -> dict[str, Any]:
    """
    Evaluate how entities spread across segments.

    Percentages use the total including neutral entities so they match any
    paired visualization. Each segment receives at most one edge label,
    in priority order skewed > too_full > tied > too_empty.

    Args:
        counts: Entities per displayed segment (neutrals excluded)
        neutral: Entities sitting exactly on the midpoint

    Returns:
        Dict with percentages, largest segment and edge-case flags
    """
    total = sum(counts.values()) + neutral
    percentages = {s: (c / total * 100 if total else 0.0) for s, c in counts.items()}
    neutral_pct = neutral / total * 100 if total else 0.0

    # Stable sort keeps display order for equal counts
    ranked = sorted(((s, c) for s, c in counts.items() if c > 0), key=lambda item: -item[1])

    largest = ranked[0][0] if ranked else None
    largest_count = ranked[0][1] if ranked else 0
    largest_pct = percentages.get(largest, 0.0) if largest else 0.0

    is_tied = len(ranked) >= 2 and ranked[0][1] == ranked[1][1]
    tied = [s for s, c in ranked if c == largest_count] if is_tied else []

    closely_followed: list[str] = []
    if largest and not is_tied:
        margin = largest_count * CLOSE_FOLLOW_RATIO
        closely_followed = [s for s, c in ranked[1:] if largest_count - c <= margin]

    is_skewed = bool(check_rule(largest_pct, SKEWED_PCT)) if largest else False

    too_full: list[str] = []
    if largest and not is_skewed and not is_tied:
        second_pct = percentages[ranked[1][0]] if len(ranked) > 1 else 0.0
        if largest_pct - second_pct > TOO_FULL_GAP_PCT:
            too_full = [largest]

    edge_labels: dict[str, str] = {}
    if is_skewed and largest:
        edge_labels[largest] = "skewed"
    for s in too_full:
        edge_labels.setdefault(s, "too_full")
    for s in tied:
        edge_labels.setdefault(s, "tied")

    too_empty = []
    for s, c in counts.items():
        if c > 0 and check_rule(percentages[s], TOO_EMPTY_PCT, operator.lt) and s not in edge_labels:
            too_empty.append(s)
            edge_labels[s] = "too_empty"

    # A main quadrant is empty only if none of its sub-segments has entities either
    family_counts = {m: 0 for m in MAIN_SEGMENTS}
    for s, c in counts.items():
        family_counts[MACRO_SEGMENT.get(s, s)] = family_counts.get(MACRO_SEGMENT.get(s, s), 0) + c
    zero_quadrants = [m for m in MAIN_SEGMENTS if total > 0 and family_counts[m] == 0]

    result = {
        "total": total,
        "counts": dict(counts),
        "percentages": percentages,
        "neutral": {"count": neutral, "percentage": neutral_pct},
        "largest": largest,
        "largest_count": largest_count,
        "largest_percentage": largest_pct,
        "ranked": [s for s, _ in ranked],
        "is_tied": is_tied,
        "tied_quadrants": tied,
        "closely_followed": closely_followed,
        "is_balanced": len(closely_followed) >= 2,
        "is_skewed": is_skewed,
        "too_empty": too_empty,
        "too_full": too_full,
        "zero_quadrants": zero_quadrants,
        "edge_labels": edge_labels,
    }
    _validate_distribution_invariants(result)
    return result


def _validate_distribution_invariants(result: dict[str, Any]) -> None:
    """
    Check percentages sum to 100 and edge labels do not contradict.

    Logs warnings for violations rather than raising (production-safe).
    """
    violations: list[str] = []

    if result["total"] > 0:
        pct_sum = sum(result["percentages"].values()) + result["neutral"]["percentage"]
        if abs(pct_sum - 100.0) > 1e-6:
            violations.append(f"percentages sum to {pct_sum:.6f}, expected 100")

    empty = set(result["too_empty"])
    for label, segments in (("too_full", result["too_full"]), ("tied", result["tied_quadrants"])):
        overlap = empty.intersection(segments)
        if overlap:
            violations.append(f"segments {sorted(overlap)} are both too_empty and {label}")
    if result["is_skewed"] and result["too_full"]:
        violations.append("distribution is both skewed and too_full")

    for violation in violations:
        logger.warning(f"Distribution invariant violation: {violation}")
