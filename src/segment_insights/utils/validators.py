"""Validation utilities and rule helpers."""

import math
import operator
from collections.abc import Callable, Iterable
from typing import Any

from segment_insights.errors import InvalidInput


def validate_scores(entities: Iterable[Any]) -> None:
    """
    Reject entities whose axis scores are not finite numbers.

    Excluded entities are checked too: they still flow through analyzers,
    which filter them, and a NaN there points at an upstream ingestion bug.

    Raises:
        InvalidInput: on the first non-finite or non-numeric score
    """
    for entity in entities:
        for axis in ("satisfaction", "loyalty"):
            value = getattr(entity, axis)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
                raise InvalidInput(
                    f"Entity '{entity.id}' has invalid {axis} score {value!r}",
                    axis,
                    value,
                )


def check_rule(
    value: float | None,
    threshold: float,
    comparator: Callable[[float, float], bool] = operator.gt,
) -> bool | None:
    """
    Check a rule with nullable boolean semantics.

    If value is None, returns None (not False).

    Args:
        value: The value to check (may be None)
        threshold: The threshold to compare against
        comparator: Comparison function (default: operator.gt)

    Returns:
        True/False if value is not None, None otherwise
    """
    if value is None:
        return None
    return comparator(value, threshold)
