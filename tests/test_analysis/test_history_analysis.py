"""Tests for historical movement analysis."""

from segment_insights.analysis.historical import (
    analyze_history,
    build_timelines,
    cadence_label,
    compress,
    timeline_key,
)
from segment_insights.analysis.quadrants import QuadrantClassifier
from segment_insights.models import Entity, Midpoint, ScaleConfig, SegmentRanking

CLASSIFY = QuadrantClassifier(Midpoint(5.5, 5.5), ScaleConfig()).classify


class TestHelpers:
    """Tests for timeline helpers."""

    def test_compress(self) -> None:
        """Consecutive repeats collapse."""
        assert compress(["a", "a", "b", "b", "a"]) == ["a", "b", "a"]
        assert compress([]) == []

    def test_timeline_key_prefers_email(self) -> None:
        """Email is normalized; id is the fallback."""
        assert timeline_key(Entity(id="1", satisfaction=5, loyalty=5, email="  Ann@Example.COM ")) == "ann@example.com"
        assert timeline_key(Entity(id="1", satisfaction=5, loyalty=5, email="  ")) == "1"

    def test_cadence_label(self) -> None:
        """Gaps map to inclusive cadence bands."""
        assert cadence_label(30) == "monthly"
        assert cadence_label(90) == "quarterly"
        assert cadence_label(365) == "annual"
        assert cadence_label(60) is None
        assert cadence_label(None) is None

    def test_last_observation_per_date_wins(self) -> None:
        """Two observations on the same date keep the later one."""
        entities = [
            Entity(id="a", satisfaction=9, loyalty=9, email="x@example.com", date="2024-01-01"),
            Entity(id="b", satisfaction=2, loyalty=2, email="x@example.com", date="2024-01-01"),
            Entity(id="c", satisfaction=8, loyalty=8, email="x@example.com", date="2024-02-01"),
        ]
        timelines = build_timelines(entities)
        assert len(timelines) == 1
        assert [o.id for o in timelines[0]["observations"]] == ["b", "c"]


class TestAnalyzeHistory:
    """Tests for analyze_history()."""

    def test_none_without_repeat_dates(self, make_entities) -> None:
        """Undated or single-date respondents give no history."""
        assert analyze_history(make_entities([(8, 8), (3, 3)]), CLASSIFY) is None
        single = [Entity(id="a", satisfaction=8, loyalty=8, date="2024-01-01")]
        assert analyze_history(single, CLASSIFY) is None

    def test_negative_transition(self, dated_history) -> None:
        """Loyalist to defector is a negative between-segment move."""
        entities = dated_history([[("2024-01-01", 9, 9), ("2024-02-01", 2, 2)]])
        result = analyze_history(entities, CLASSIFY)
        assert result["tracked_entities"] == 1
        assert result["total_transitions"] == 1
        assert result["negative"] == 1
        assert result["positive"] == 0
        assert result["between_segment_transitions"] == 1
        assert result["top_transitions"] == [
            {"from": "loyalists", "to": "defectors", "count": 1, "direction": "negative"}
        ]
        assert result["ranking_version"] == "1"

    def test_repeats_are_compressed(self, dated_history) -> None:
        """Staying in a segment is not a transition."""
        entities = dated_history([[("2024-01-01", 9, 9), ("2024-02-01", 8, 8), ("2024-03-01", 8, 3)]])
        result = analyze_history(entities, CLASSIFY)
        assert result["total_transitions"] == 1
        assert result["multi_move_2plus"] == 0

    def test_multi_move_cohorts(self, dated_history) -> None:
        """Three moves count toward both multi-move cohorts."""
        path = [("2024-01-01", 9, 9), ("2024-02-01", 9, 2), ("2024-03-01", 9, 9), ("2024-04-01", 2, 2)]
        result = analyze_history(dated_history([path]), CLASSIFY)
        assert result["total_transitions"] == 3
        assert result["multi_move_2plus"] == 1
        assert result["multi_move_3plus"] == 1

    def test_unranked_segment_is_neutral(self, dated_history) -> None:
        """A custom ranking that omits a segment makes moves to it neutral."""
        ranking = SegmentRanking(version="test", ranks={"loyalists": 1})
        entities = dated_history([[("2024-01-01", 9, 9), ("2024-02-01", 2, 2)]])
        result = analyze_history(entities, CLASSIFY, ranking)
        assert result["neutral"] == 1
        assert result["between_segment_transitions"] == 0
        assert result["ranking_version"] == "test"

    def test_cadence_low_confidence(self, dated_history) -> None:
        """A handful of gaps gives no typical gap and no rapid counts."""
        entities = dated_history([[("2024-01-01", 9, 9), ("2024-02-01", 2, 2)]])
        cadence = analyze_history(entities, CLASSIFY)["cadence"]
        assert cadence["has_confidence"] is False
        assert cadence["typical_gap_days"] is None
        assert cadence["rapid_negative_count"] == 0
        assert cadence["gaps_count"] == 1

    def test_cadence_with_confidence(self, dated_history) -> None:
        """15 respondents with two monthly gaps each reach confidence."""
        path = [("2024-01-01", 9, 9), ("2024-01-31", 2, 2), ("2024-03-01", 2, 2)]
        result = analyze_history(dated_history([path] * 15), CLASSIFY)
        cadence = result["cadence"]
        assert cadence["has_confidence"] is True
        assert cadence["gaps_count"] == 30
        assert cadence["entities_with_2_dates"] == 15
        assert cadence["typical_gap_days"] == 30.0
        assert cadence["label"] == "monthly"
        assert cadence["rapid_negative_count"] == 15

    def test_cadence_enough_gaps_too_few_entities(self, dated_history) -> None:
        """42 gaps from 14 respondents miss the entity bar."""
        path = [("2024-01-01", 9, 9), ("2024-01-31", 2, 2), ("2024-03-01", 2, 2), ("2024-03-31", 9, 9)]
        cadence = analyze_history(dated_history([path] * 14), CLASSIFY)["cadence"]
        assert cadence["gaps_count"] == 42
        assert cadence["entities_with_2_dates"] == 14
        assert cadence["has_confidence"] is False
        assert cadence["typical_gap_days"] is None
        assert cadence["label"] is None
        assert cadence["rapid_negative_count"] == 0

    def test_cadence_enough_entities_too_few_gaps(self, dated_history) -> None:
        """15 respondents with a single gap each miss the gap bar."""
        path = [("2024-01-01", 9, 9), ("2024-01-31", 2, 2)]
        cadence = analyze_history(dated_history([path] * 15), CLASSIFY)["cadence"]
        assert cadence["gaps_count"] == 15
        assert cadence["entities_with_2_dates"] == 15
        assert cadence["has_confidence"] is False
        assert cadence["typical_gap_days"] is None
        assert cadence["rapid_negative_count"] == 0

    def test_unparseable_dates_skip_cadence(self) -> None:
        """Non-ISO dates still form timelines but produce no gaps."""
        entities = [
            Entity(id="a", satisfaction=9, loyalty=9, email="x@example.com", date="week-1"),
            Entity(id="b", satisfaction=2, loyalty=2, email="x@example.com", date="week-2"),
        ]
        result = analyze_history(entities, CLASSIFY)
        assert result["total_transitions"] == 1
        assert result["cadence"]["gaps_count"] == 0
