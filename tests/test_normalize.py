"""Tests for normalize module."""

import json
import math

import numpy as np
import pytest

from segment_insights.utils.normalize import canonical_dumps, report_fingerprint, sanitize_nan_inf


class TestCanonicalDumps:
    """Tests for canonical_dumps function."""

    def test_sorted_keys(self):
        """Keys should be sorted at every level."""
        obj = {"z": 1, "a": 2, "m": {"z": 3, "a": 4}}
        assert canonical_dumps(obj) == '{"a":2,"m":{"a":4,"z":3},"z":1}'

    def test_minimal_separators(self):
        assert canonical_dumps({"a": [1, 2, 3]}) == '{"a":[1,2,3]}'

    def test_unicode_preserved(self):
        assert "Müller" in canonical_dumps({"name": "Müller"})

    def test_rejects_nan(self):
        """Should raise ValueError for NaN (allow_nan=False)."""
        with pytest.raises(ValueError, match="Out of range float values"):
            canonical_dumps({"value": float("nan")})


class TestSanitizeNanInf:
    """Tests for sanitize_nan_inf function."""

    def test_nan_and_inf_replaced(self):
        result = sanitize_nan_inf({"average": float("nan"), "score": float("inf"), "low": float("-inf")})
        assert result == {"average": None, "score": None, "low": None}

    def test_nested(self):
        result = sanitize_nan_inf({"stats": [{"average": float("nan")}, 1.5]})
        assert result == {"stats": [{"average": None}, 1.5]}

    def test_tuples_become_lists(self):
        """Frozen report sections serialize as lists."""
        assert sanitize_nan_inf({"ids": ("e1", "e2")}) == {"ids": ["e1", "e2"]}

    def test_numpy_scalars(self):
        result = sanitize_nan_inf({"count": np.int64(3), "average": np.float64("nan")})
        assert result == {"count": 3, "average": None}
        assert type(result["count"]) is int

    def test_negative_zero_normalized(self):
        result = sanitize_nan_inf({"score": -0.0})
        assert math.copysign(1.0, result["score"]) == 1.0

    def test_output_is_json_safe(self):
        result = sanitize_nan_inf({"a": float("nan"), "b": [float("inf")], "c": True})
        assert json.loads(canonical_dumps(result)) == {"a": None, "b": [None], "c": True}


class TestReportFingerprint:
    """Tests for report_fingerprint function."""

    def _report(self, **overrides):
        report = {
            "date": "2024-06-01",
            "findings": [{"id": "sample-low", "text": "..."}],
            "metadata": {"report_date": "2024-06-01", "total_customers": 20},
            "supporting_images": [{"chart_id": "chart-main-visualisation", "image_ref": "img://1"}],
            "meta": {"tool": "generate_segment_report", "duration_ms": 12.3},
        }
        report.update(overrides)
        return report

    def test_length(self):
        assert len(report_fingerprint(self._report())) == 16

    def test_volatile_fields_ignored(self):
        """Date, duration and captured image references do not change the fingerprint."""
        other = self._report(
            date="2025-01-01",
            metadata={"report_date": "2025-01-01", "total_customers": 20},
            supporting_images=[{"chart_id": "chart-main-visualisation", "image_ref": "img://2"}],
            meta={"tool": "generate_segment_report", "duration_ms": 99.0},
        )
        assert report_fingerprint(self._report()) == report_fingerprint(other)

    def test_content_changes_fingerprint(self):
        other = self._report(metadata={"report_date": "2024-06-01", "total_customers": 21})
        assert report_fingerprint(self._report()) != report_fingerprint(other)

    def test_input_not_mutated(self):
        report = self._report()
        report_fingerprint(report)
        assert report["date"] == "2024-06-01"
        assert report["supporting_images"][0]["image_ref"] == "img://1"
