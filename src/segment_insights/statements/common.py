"""Shared inputs and helpers for statement generators."""

from collections.abc import Iterable
from dataclasses import dataclass, replace
from typing import Any

from segment_insights.analysis.aggregate import Aggregates
from segment_insights.models import (
    DISPLAY_NAMES,
    ReportOptions,
    ScaleConfig,
    Statement,
    SupportingEntity,
    display_name,
)

IMPACT_SCORE = {"high": 3, "medium": 2, "low": 1}
ACTIONABILITY_SCORE = {"easy": 3, "medium": 2, "hard": 1}
SEVERITY_ORDER = {"high": 3, "medium": 2, "low": 1}

CHART_PRIORITY_BASE = 1000


@dataclass(frozen=True)
class Evaluations:
    """Everything a generator may read. Built once per report."""

    aggregates: Aggregates
    distribution: dict[str, Any]
    sample: dict[str, Any]
    statistics: dict[str, Any]
    recommendation: dict[str, Any]
    proximity: dict[str, Any]
    proximity_eval: dict[str, Any]
    conversions: dict[str, list[dict[str, Any]]]
    history: dict[str, Any] | None
    scale: ScaleConfig
    options: ReportOptions

    @property
    def total(self) -> int:
        return self.aggregates.total

    def count(self, segment: str) -> int:
        return self.distribution["counts"].get(segment, 0)

    def percentage(self, segment: str) -> float:
        return self.distribution["percentages"].get(segment, 0.0)


def roi(expected_impact: str, actionability: str) -> int:
    return IMPACT_SCORE[expected_impact] * ACTIONABILITY_SCORE[actionability]


def plural(count: int, suffix: str = "s") -> str:
    return "" if count == 1 else suffix


def is_are(count: int) -> str:
    return "is" if count == 1 else "are"


def join_names(segments: Iterable[str]) -> str:
    return " and ".join(DISPLAY_NAMES.get(s, s) for s in segments)


def possessive(name: str) -> str:
    return f"{name}'" if name.endswith("s") else f"{name}'s"


def relationship_name(from_segment: str, to_segment: str) -> str:
    """Reader-facing name, e.g. "Loyalists close to Mercenaries"."""
    return f"{display_name(from_segment)} close to {display_name(to_segment)}"


def supporting(items: Iterable[Any]) -> tuple[SupportingEntity, ...]:
    """Entity rows for a statement, unique by id, first occurrence kept.

    Accepts Entity objects or proximity member dicts.
    """
    rows: dict[str, SupportingEntity] = {}
    for item in items:
        if isinstance(item, dict):
            entity_id = str(item["id"])
            row = SupportingEntity(
                id=entity_id,
                name=item.get("name"),
                email=item.get("email"),
                satisfaction=item["satisfaction"],
                loyalty=item["loyalty"],
                distance=item.get("distance"),
                score=item.get("score"),
            )
        else:
            entity_id = str(item.id)
            row = SupportingEntity(
                id=entity_id,
                name=item.name,
                email=item.email,
                satisfaction=item.satisfaction,
                loyalty=item.loyalty,
            )
        rows.setdefault(entity_id, row)
    return tuple(rows.values())


def ranked(candidates: list[tuple[Statement, tuple]], start: int = 1) -> list[Statement]:
    """Sort (statement, sort_key) pairs by key (stable) and renumber priorities."""
    ordered = sorted(candidates, key=lambda pair: pair[1])
    return [replace(statement, priority=start + i) for i, (statement, _) in enumerate(ordered)]
