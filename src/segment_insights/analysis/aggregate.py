"""One-pass aggregation of classified entities into counts, statistics and concentration."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

import pandas as pd

from segment_insights.analysis.quadrants import QuadrantClassifier
from segment_insights.models import ALL_SEGMENTS, MAIN_SEGMENTS, NEUTRAL, Entity

logger = logging.getLogger(__name__)

FRAME_COLUMNS = ["id", "name", "email", "satisfaction", "loyalty", "segment", "macro"]
TOP_CONCENTRATION = 10


@dataclass
class Aggregates:
    """Counts and statistics over the non-excluded entities of one report."""

    frame: pd.DataFrame
    total: int
    neutral: int
    counts: dict[str, int]
    macro_counts: dict[str, int]
    statistics: dict[str, dict[str, float | None]]
    concentration: dict[str, Any]
    rows: list[Entity] = field(default_factory=list)

    def members(self, segment: str, macro: bool = False) -> list[Entity]:
        """Entities labelled with a segment (or any sub-segment of it when macro=True)."""
        column = "macro" if macro else "segment"
        positions = self.frame.index[self.frame[column] == segment]
        return [self.rows[i] for i in positions]

    @property
    def loyalty_values(self) -> list[float]:
        return [float(v) for v in self.frame["loyalty"]]


def build_frame(entities: Iterable[Entity], classifier: QuadrantClassifier) -> pd.DataFrame:
    """One row per non-excluded entity with its segment label and macro quadrant."""
    rows = []
    for entity in entities:
        if entity.excluded:
            continue
        if classifier.is_neutral(entity):
            segment = macro = NEUTRAL
        else:
            segment = classifier.classify(entity)
            macro = classifier.macro_segment(segment)
        rows.append(
            {
                "id": entity.id,
                "name": entity.name,
                "email": entity.email,
                "satisfaction": float(entity.satisfaction),
                "loyalty": float(entity.loyalty),
                "segment": segment,
                "macro": macro,
            }
        )
    return pd.DataFrame(rows, columns=FRAME_COLUMNS)


def aggregate(
    entities: list[Entity],
    classifier: QuadrantClassifier,
) -> Aggregates:
    """
    Aggregate entities once for all evaluators.

    Args:
        entities: Full entity list (excluded entities are filtered here)
        classifier: Classifier bound to the active midpoint and options

    Returns:
        Aggregates with per-segment counts (neutrals counted apart),
        macro-quadrant counts, axis statistics and response concentration
    """
    frame = build_frame(entities, classifier)
    total = len(frame)
    neutral = int((frame["segment"] == NEUTRAL).sum())

    classified = frame[frame["segment"] != NEUTRAL]
    label_counts = classified["segment"].value_counts()
    macro_counts_raw = classified["macro"].value_counts()

    shown = set(MAIN_SEGMENTS)
    if classifier.special_zones:
        shown.update({"apostles", "terrorists"})
    if classifier.near_zones:
        shown.update({"near_apostles", "near_terrorists"})
    # Overrides can force a sub-segment even with zones off
    shown.update(s for s in label_counts.index if s in ALL_SEGMENTS)

    counts = {s: int(label_counts.get(s, 0)) for s in ALL_SEGMENTS if s in shown}
    macro_counts = {s: int(macro_counts_raw.get(s, 0)) for s in MAIN_SEGMENTS}

    logger.debug(f"Aggregated {total} entities ({neutral} neutral): {counts}")

    return Aggregates(
        frame=frame,
        total=total,
        neutral=neutral,
        counts=counts,
        macro_counts=macro_counts,
        statistics={
            "satisfaction": _axis_statistics(frame["satisfaction"]),
            "loyalty": _axis_statistics(frame["loyalty"]),
        },
        concentration=_concentration(frame),
        rows=[e for e in entities if not e.excluded],
    )


def _axis_statistics(series: pd.Series) -> dict[str, float | None]:
    """Average and mode (smallest value wins a tie)."""
    if series.empty:
        return {"average": None, "mode": None}
    modes = series.mode()
    return {
        "average": float(series.mean()),
        "mode": float(modes.min()) if not modes.empty else None,
    }


def _concentration(frame: pd.DataFrame) -> dict[str, Any]:
    """Most repeated (satisfaction, loyalty) positions."""
    total = len(frame)
    if total == 0:
        return {"combinations": [], "most_common": None}

    combos = (
        frame.groupby(["satisfaction", "loyalty"]).size().reset_index(name="n")
        .sort_values(["n", "satisfaction", "loyalty"], ascending=[False, True, True], kind="stable")
        .head(TOP_CONCENTRATION)
    )
    combinations = [
        {
            "satisfaction": float(row.satisfaction),
            "loyalty": float(row.loyalty),
            "count": int(row.n),
            "percentage": int(row.n) / total * 100,
        }
        for row in combos.itertuples(index=False)
    ]
    return {"combinations": combinations, "most_common": combinations[0]}
