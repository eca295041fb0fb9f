"""Pytest configuration and fixtures."""

from collections.abc import Callable

import pytest

from segment_insights.models import Entity, Midpoint, ReportOptions, ScaleConfig
from segment_insights.report import build_evaluations
from segment_insights.statements.common import Evaluations

# 20 respondents on a 1-10 scale, midpoint 5.5:
# 8 loyalists, 4 mercenaries, 3 hostages, 5 defectors
MIXED_POINTS = [
    (9, 9), (8, 9), (9, 8), (8, 8), (7, 7), (8, 6), (6, 9), (10, 10),
    (8, 3), (9, 2), (7, 5), (6, 4),
    (3, 8), (2, 9), (4, 7),
    (2, 2), (3, 3), (1, 1), (4, 5), (5, 4),
]


@pytest.fixture
def make_entities() -> Callable[..., list[Entity]]:
    """Factory building entities e1..eN from (satisfaction, loyalty) pairs."""

    def _make(points, prefix: str = "e", **fields) -> list[Entity]:
        return [
            Entity(
                id=f"{prefix}{i}",
                satisfaction=sat,
                loyalty=loy,
                name=f"Customer {prefix}{i}",
                email=f"{prefix}{i}@example.com",
                **fields,
            )
            for i, (sat, loy) in enumerate(points, start=1)
        ]

    return _make


@pytest.fixture
def scale() -> ScaleConfig:
    """Default 1-10 scales with one-unit special zones."""
    return ScaleConfig()


@pytest.fixture
def midpoint() -> Midpoint:
    """Scale midpoint for 1-10 scales."""
    return Midpoint(5.5, 5.5)


@pytest.fixture
def mixed_entities(make_entities) -> list[Entity]:
    """20 entities spread over all four quadrants."""
    return make_entities(MIXED_POINTS)


@pytest.fixture
def evaluate(scale, midpoint) -> Callable[..., Evaluations]:
    """Factory running every analysis and evaluator over a list of entities."""

    def _evaluate(entities, active_midpoint=midpoint, options: ReportOptions | None = None) -> Evaluations:
        return build_evaluations(list(entities), active_midpoint, scale, options or ReportOptions())

    return _evaluate


@pytest.fixture
def dated_history(make_entities) -> Callable[..., list[Entity]]:
    """Factory for respondents observed on several dates.

    Each path is a list of (date, satisfaction, loyalty); respondent i gets
    email r{i}@example.com and a distinct id per observation.
    """

    def _make(paths) -> list[Entity]:
        entities = []
        for i, path in enumerate(paths, start=1):
            for j, (date, sat, loy) in enumerate(path, start=1):
                entities.append(
                    Entity(
                        id=f"r{i}-{j}",
                        satisfaction=sat,
                        loyalty=loy,
                        email=f"r{i}@example.com",
                        date=date,
                    )
                )
        return entities

    return _make
