"""Historical movement analysis over dated observations.

Each respondent with two or more distinct dated observations becomes a
timeline. Timelines are compressed (consecutive identical segments collapse
into one) before transitions are counted, so a timeline's transition count
is len(compressed) - 1.

Cadence is the median gap in days between consecutive check-ins. It is only
reported when the sample is large enough (MIN_CADENCE_GAPS gaps across
MIN_CADENCE_ENTITIES entities); otherwise typical_gap_days stays None and
no rapid-movement counts are produced.
"""

import logging
from collections import defaultdict
from collections.abc import Callable, Iterable
from typing import Any

import numpy as np
import pandas as pd

from segment_insights.models import DEFAULT_RANKING, Entity, SegmentRanking

logger = logging.getLogger(__name__)

MIN_CADENCE_GAPS = 30
MIN_CADENCE_ENTITIES = 15
TOP_TRANSITIONS = 15

# Typical gap (days) -> label, inclusive bands
CADENCE_BANDS: list[tuple[str, float, float]] = [
    ("monthly", 25, 45),
    ("quarterly", 70, 110),
    ("annual", 300, 430),
]


def timeline_key(entity: Entity) -> str:
    """Stable per-respondent key: normalized email, falling back to id."""
    if entity.email and entity.email.strip():
        return entity.email.strip().lower()
    return entity.id


def compress(segments: list[str]) -> list[str]:
    """Collapse consecutive repeats: [A, A, B, B, A] -> [A, B, A]."""
    compressed: list[str] = []
    for segment in segments:
        if not compressed or compressed[-1] != segment:
            compressed.append(segment)
    return compressed


def cadence_label(typical_gap_days: float | None) -> str | None:
    if typical_gap_days is None:
        return None
    for label, low, high in CADENCE_BANDS:
        if low <= typical_gap_days <= high:
            return label
    return None


def build_timelines(entities: Iterable[Entity]) -> list[dict[str, Any]]:
    """
    Group dated, non-excluded entities into per-respondent timelines.

    Distinct trimmed date strings are sorted lexicographically (callers supply
    normalized, sortable dates) and the last observation seen for a date wins.
    Groups with fewer than two distinct dates are dropped.
    """
    groups: dict[str, dict[str, Entity]] = defaultdict(dict)
    for entity in entities:
        if entity.excluded or not entity.date or not entity.date.strip():
            continue
        groups[timeline_key(entity)][entity.date.strip()] = entity

    timelines = []
    for key, by_date in groups.items():
        if len(by_date) < 2:
            continue
        dates = sorted(by_date)
        timelines.append({"key": key, "dates": dates, "observations": [by_date[d] for d in dates]})
    return timelines


def analyze_history(
    entities: Iterable[Entity],
    classify: Callable[[Entity], str],
    ranking: SegmentRanking = DEFAULT_RANKING,
) -> dict[str, Any] | None:
    """
    Analyze segment movement over time.

    Args:
        entities: Full entity list (undated and excluded entities are ignored)
        classify: Segment callback for a single observation
        ranking: Versioned segment ordering used to call transitions
            positive or negative

    Returns:
        Movement summary dict, or None when no respondent has 2+ distinct dates
    """
    timelines = build_timelines(entities)
    if not timelines:
        return None

    positive = negative = neutral = 0
    multi_move_2plus = multi_move_3plus = 0
    transition_counts: dict[tuple[str, str], int] = {}
    gaps: list[float] = []
    entities_with_2_dates = 0
    parsed_timelines: list[tuple[list[str], list[pd.Timestamp]]] = []

    for timeline in timelines:
        segments = [classify(obs) for obs in timeline["observations"]]
        compressed = compress(segments)
        moves = max(0, len(compressed) - 1)
        if moves >= 2:
            multi_move_2plus += 1
        if moves >= 3:
            multi_move_3plus += 1

        for from_seg, to_seg in zip(compressed, compressed[1:]):
            # dict preserves first-seen order, which breaks count ties later
            transition_counts[(from_seg, to_seg)] = transition_counts.get((from_seg, to_seg), 0) + 1
            direction = ranking.direction(from_seg, to_seg)
            if direction == "positive":
                positive += 1
            elif direction == "negative":
                negative += 1
            else:
                neutral += 1

        # Cadence gaps only between parseable dates
        parsed = pd.to_datetime(pd.Series(timeline["dates"]), errors="coerce", format="ISO8601")
        valid = [(seg, ts) for seg, ts in zip(segments, parsed) if not pd.isna(ts)]
        if len(valid) >= 2:
            entities_with_2_dates += 1
            for (_, earlier), (_, later) in zip(valid, valid[1:]):
                gaps.append(_gap_days(earlier, later))
            parsed_timelines.append(([seg for seg, _ in valid], [ts for _, ts in valid]))

    has_confidence = len(gaps) >= MIN_CADENCE_GAPS and entities_with_2_dates >= MIN_CADENCE_ENTITIES
    typical_gap_days = float(np.median(gaps)) if has_confidence else None

    rapid_negative = 0
    if typical_gap_days is not None:
        for segments, stamps in parsed_timelines:
            for i in range(len(stamps) - 1):
                from_seg, to_seg = segments[i], segments[i + 1]
                if from_seg == to_seg or ranking.direction(from_seg, to_seg) != "negative":
                    continue
                if _gap_days(stamps[i], stamps[i + 1]) <= typical_gap_days:
                    rapid_negative += 1

    ranked = sorted(transition_counts.items(), key=lambda item: -item[1])
    top_transitions = [
        {
            "from": from_seg,
            "to": to_seg,
            "count": count,
            "direction": ranking.direction(from_seg, to_seg),
        }
        for (from_seg, to_seg), count in ranked[:TOP_TRANSITIONS]
    ]

    total = positive + negative + neutral
    logger.debug(
        f"History: {len(timelines)} timelines, {total} transitions "
        f"(+{positive}/-{negative}/={neutral}), {len(gaps)} gaps"
    )

    return {
        "tracked_entities": len(timelines),
        "total_transitions": total,
        "positive": positive,
        "negative": negative,
        "neutral": neutral,
        "between_segment_transitions": positive + negative,
        "top_transitions": top_transitions,
        "multi_move_2plus": multi_move_2plus,
        "multi_move_3plus": multi_move_3plus,
        "ranking_version": ranking.version,
        "cadence": {
            "has_confidence": has_confidence,
            "typical_gap_days": typical_gap_days,
            "label": cadence_label(typical_gap_days),
            "gaps_count": len(gaps),
            "entities_with_2_dates": entities_with_2_dates,
            "rapid_negative_count": rapid_negative,
        },
    }


def _gap_days(earlier: pd.Timestamp, later: pd.Timestamp) -> float:
    return max(0.0, (later - earlier).total_seconds() / 86400)
