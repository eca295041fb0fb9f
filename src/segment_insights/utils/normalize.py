"""Normalization utilities for deterministic, diff-stable report output.

Generated reports contain run-dependent fields (report date, durations,
captured image references) that create spurious diffs when comparing two
runs over the same input snapshot.

The normalization contract:
1. Key ordering: sorted at every level
2. Tuples serialize as lists
3. NaN/inf sanitization: replaced with null for JSON safety
4. -0.0 collapses to 0.0
5. Volatile fields removed before fingerprinting
"""

from __future__ import annotations

import copy
import hashlib
import json
import math
from typing import Any

import numpy as np

# Fingerprint format version - bump when normalization logic changes
FINGERPRINT_VERSION = "1.0.0"

# Paths removed before fingerprinting (values differ between otherwise identical runs)
VOLATILE_PATHS: list[tuple[str, ...]] = [
    ("date",),
    ("metadata", "report_date"),
    ("meta", "duration_ms"),
]


def canonical_dumps(obj: Any) -> str:
    """Produce canonical JSON string with sorted keys and minimal separators.

    Uses allow_nan=False to fail fast if NaN/inf values slip through
    sanitization. This ensures JSON validity across all parsers.
    """
    return json.dumps(
        obj,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    )


def report_fingerprint(report: dict[str, Any]) -> str:
    """
    Short stable hash of a report dict with volatile fields removed.

    Two reports generated from the same input snapshot and options share a
    fingerprint regardless of when they were generated.

    Args:
        report: Report.to_dict() output (or a tool response wrapping it)

    Returns:
        16-character hex digest
    """
    data = sanitize_nan_inf(copy.deepcopy(report))
    for path in VOLATILE_PATHS:
        _delete_path(data, path)
    for image in data.get("supporting_images") or []:
        if isinstance(image, dict):
            image.pop("image_ref", None)

    payload = {"fingerprint_version": FINGERPRINT_VERSION, "report": data}
    return hashlib.sha256(canonical_dumps(payload).encode("utf-8")).hexdigest()[:16]


# ---------------- Path helpers ----------------

def _delete_path(root: dict[str, Any], path: tuple[str, ...]) -> None:
    """Delete a nested key if it exists."""
    parent = root
    for k in path[:-1]:
        if not isinstance(parent, dict) or k not in parent:
            return
        parent = parent[k]
    if isinstance(parent, dict):
        parent.pop(path[-1], None)


# ---------------- Normalization helpers ----------------

def _is_nan_or_inf(x: Any) -> bool:
    """Check if value is NaN or inf, handling numpy types safely."""
    try:
        return math.isnan(x) or math.isinf(x)
    except (TypeError, ValueError):
        return False


def _is_negative_zero(x: Any) -> bool:
    """Check if value is -0.0 (which creates diff noise)."""
    try:
        return x == 0.0 and math.copysign(1.0, x) < 0
    except (TypeError, ValueError):
        return False


def sanitize_nan_inf(obj: Any) -> Any:
    """Recursively replace NaN, inf, -inf with None and -0.0 with 0.0.

    Averages over empty groups and numpy reductions can produce NaN, which
    strict JSON does not allow. Tuples are converted to lists on the way.
    """
    if isinstance(obj, np.generic):
        obj = obj.item()
    if isinstance(obj, dict):
        return {k: sanitize_nan_inf(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [sanitize_nan_inf(item) for item in obj]
    elif isinstance(obj, bool) or obj is None or isinstance(obj, str):
        return obj
    elif _is_nan_or_inf(obj):
        return None
    elif _is_negative_zero(obj):
        return 0.0
    return obj
