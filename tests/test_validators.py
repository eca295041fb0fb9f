"""Tests for score validation and rule helpers."""

import operator

import pytest

from segment_insights.errors import InvalidInput
from segment_insights.models import Entity
from segment_insights.utils.validators import check_rule, validate_scores


class TestValidateScores:
    """Tests for validate_scores()."""

    def test_valid_scores(self) -> None:
        """Ints and floats pass."""
        validate_scores([Entity(id="c1", satisfaction=7, loyalty=6.5)])

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite(self, value: float) -> None:
        with pytest.raises(InvalidInput, match="invalid loyalty score") as exc_info:
            validate_scores([Entity(id="c1", satisfaction=5, loyalty=value)])
        assert exc_info.value.field == "loyalty"

    def test_non_numeric(self) -> None:
        with pytest.raises(InvalidInput, match="Entity 'c2' has invalid satisfaction score '7'"):
            validate_scores([Entity(id="c1", satisfaction=5, loyalty=5), Entity(id="c2", satisfaction="7", loyalty=5)])

    def test_bool_rejected(self) -> None:
        """Booleans are not scores even though they are ints."""
        with pytest.raises(InvalidInput):
            validate_scores([Entity(id="c1", satisfaction=True, loyalty=5)])

    def test_excluded_entities_checked(self) -> None:
        with pytest.raises(InvalidInput):
            validate_scores([Entity(id="c1", satisfaction=float("nan"), loyalty=5, excluded=True)])


class TestCheckRule:
    """Tests for check_rule function."""

    def test_check_rule_true(self) -> None:
        """Test rule that triggers."""
        assert check_rule(55.0, 50.0) is True

    def test_check_rule_false(self) -> None:
        """Test rule that doesn't trigger."""
        assert check_rule(50.0, 50.0) is False

    def test_check_rule_none_value(self) -> None:
        """Test rule with None value returns None (not False)."""
        assert check_rule(None, 50.0) is None

    def test_check_rule_lt_operator(self) -> None:
        """Test rule with less-than operator."""
        assert check_rule(4.9, 5.0, operator.lt) is True
