"""Sample size evaluator."""

from collections.abc import Mapping
from typing import Any

from segment_insights.models import MAIN_SEGMENTS

LOW_SAMPLE = 30
HIGH_SAMPLE = 100
MISSING_PCT = 5.0
MISSING_ABSOLUTE = 3


def evaluate_sample_size(total: int, macro_counts: Mapping[str, int]) -> dict[str, Any]:
    """
    Flag low/medium/high sample sizes and under-represented main quadrants.

    A quadrant is missing when it holds both less than 5% of the total and
    fewer than 3 entities. Sub-segments count toward their main quadrant.
    """
    missing = [
        s
        for s in MAIN_SEGMENTS
        if macro_counts.get(s, 0) < total * MISSING_PCT / 100 and macro_counts.get(s, 0) < MISSING_ABSOLUTE
    ]
    is_low = total < LOW_SAMPLE
    is_high = total >= HIGH_SAMPLE
    return {
        "total": total,
        "is_low": is_low,
        "is_medium": not is_low and not is_high,
        "is_high": is_high,
        "missing_quadrants": missing,
        "has_good_representation": not missing,
    }
