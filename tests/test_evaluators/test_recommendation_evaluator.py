"""Tests for the recommendation score evaluator."""

import pytest

from segment_insights.evaluators.recommendation import categorize, category_bounds, evaluate_recommendation


class TestCategoryBounds:
    """Tests for category_bounds()."""

    def test_one_to_ten(self) -> None:
        """1-10 splits into 1-6, 7-8 and 9-10."""
        assert category_bounds(1, 10) == {"detractors": (1, 6), "passives": (7, 8), "promoters": (9, 10)}

    def test_zero_to_ten(self) -> None:
        """0-10 matches the classic recommendation question."""
        assert category_bounds(0, 10) == {"detractors": (0, 6), "passives": (7, 8), "promoters": (9, 10)}

    def test_categorize_fractional(self) -> None:
        """Values between integer bounds fall below the next category."""
        bounds = category_bounds(1, 10)
        assert categorize(6.5, bounds) == "detractors"
        assert categorize(8.9, bounds) == "passives"
        assert categorize(9, bounds) == "promoters"


class TestEvaluateRecommendation:
    """Tests for evaluate_recommendation()."""

    def test_score_and_flags(self) -> None:
        """Score is promoter share minus detractor share."""
        result = evaluate_recommendation([9, 10, 7, 3], (0, 10))
        assert result["promoters"] == 2
        assert result["passives"] == 1
        assert result["detractors"] == 1
        assert result["score"] == pytest.approx(25.0)
        assert result["is_positive"] is True
        assert result["is_strong"] is False
        assert result["has_incomplete_scale"] is True
        assert result["has_unbalanced_data"] is True

    def test_negative_score(self) -> None:
        """More detractors than promoters is weak."""
        result = evaluate_recommendation([1, 2, 3, 10], (1, 10))
        assert result["score"] == pytest.approx(-50.0)
        assert result["is_weak"] is True
        assert result["has_unbalanced_data"] is False

    def test_complete_scale(self) -> None:
        """Every scale value present is a complete scale."""
        result = evaluate_recommendation(list(range(1, 11)), (1, 10))
        assert result["has_incomplete_scale"] is False
        assert result["score"] == pytest.approx(-40.0)

    def test_empty(self) -> None:
        """No values: zero score and no warnings."""
        result = evaluate_recommendation([], (1, 10))
        assert result["total"] == 0
        assert result["score"] == 0
        assert result["has_incomplete_scale"] is False
