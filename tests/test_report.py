"""Tests for report assembly."""

import logging

import pytest

from segment_insights.errors import DataUnavailable, InvalidInput
from segment_insights.models import Entity, Midpoint, ReportOptions, ScaleConfig, Statement
from segment_insights.report import (
    MAIN_CHART_ID,
    _validate_report_invariants,
    build_evaluations,
    generate_report,
    order_findings,
)
from segment_insights.statements.terminology import apply_terminology
from segment_insights.utils.normalize import report_fingerprint

MIDPOINT = Midpoint(5.5, 5.5)
SCALE = ScaleConfig()


def _report(entities, midpoint=MIDPOINT, **options):
    options.setdefault("report_date", "2024-06-01")
    return generate_report(entities, midpoint, SCALE, ReportOptions(**options))


def _all_statements(report) -> list[Statement]:
    return [*report.findings, *report.risks, *report.opportunities, *report.actions]


def _finding(statement_id: str, category: str, priority: int, is_chart: bool = False) -> Statement:
    return Statement(
        id=statement_id,
        kind="finding",
        category=category,
        text="",
        priority=priority,
        chart_id=statement_id if is_chart else None,
        is_chart=is_chart,
    )


class TestOrderFindings:
    """Tests for order_findings()."""

    def test_category_order_and_main_chart_followers(self) -> None:
        text = [
            _finding("dominant-loyalists", "distribution", 3),
            _finding("quadrant-description-hostages", "data", 2),
            _finding("sample-low", "data", 1),
            _finding("distribution-too-empty-defectors", "data", 4),
            _finding("recommendation-score", "recommendation", 5),
        ]
        charts = [
            _finding(MAIN_CHART_ID, "data", 1000, is_chart=True),
            _finding("chart-distribution", "distribution", 1001, is_chart=True),
        ]
        assert [f.id for f in order_findings(text, charts)] == [
            "sample-low",
            MAIN_CHART_ID,
            "quadrant-description-hostages",
            "distribution-too-empty-defectors",
            "recommendation-score",
            "dominant-loyalists",
            "chart-distribution",
        ]


class TestGenerateReport:
    """Tests for generate_report()."""

    def test_findings_layout(self, mixed_entities) -> None:
        """Data findings come first, then the main chart and the segment descriptions."""
        ids = [f.id for f in _report(mixed_entities).findings]
        assert ids[:9] == [
            "sample-low",
            "sample-representation-good",
            "satisfaction-above-average",
            "loyalty-above-average",
            MAIN_CHART_ID,
            "quadrant-description-loyalists",
            "quadrant-description-defectors",
            "quadrant-description-mercenaries",
            "quadrant-description-hostages",
        ]
        assert ids[9:11] == ["recommendation-score", "chart-recommendation"]
        assert ids.index("chart-concentration") < ids.index("dominant-loyalists")

    def test_metadata(self, mixed_entities) -> None:
        report = _report(mixed_entities, audience="b2b")
        assert report.date == "2024-06-01"
        meta = report.metadata
        assert meta["total_customers"] == 20
        assert meta["report_date"] == "2024-06-01"
        assert meta["scales"] == {"satisfaction": "1-10", "loyalty": "1-10"}
        assert meta["audience_context"] == "b2b"
        assert meta["naming_scheme"] == "modern"
        assert meta["schema_version"] == "2"
        assert meta["ranking_version"] == "1"
        assert meta["historical_confidence"] == {"quantitative": False, "percentages": False}
        assert meta["statement_counts"]["findings"] == len(report.findings)

    def test_sections_renumbered(self, mixed_entities) -> None:
        report = _report(mixed_entities)
        assert [r.priority for r in report.risks] == list(range(1, len(report.risks) + 1))
        assert [o.priority for o in report.opportunities] == list(range(1, len(report.opportunities) + 1))

    def test_actions_sorted_by_priority_then_roi(self, mixed_entities) -> None:
        actions = _report(mixed_entities).actions
        keys = [(a.priority, -a.roi) for a in actions]
        assert keys == sorted(keys)

    def test_historical_first(self, make_entities, dated_history) -> None:
        """Historical risks lead the risk section."""
        entities = make_entities([(9, 9), (2, 2), (3, 3)]) + dated_history(
            [[("2024-01-01", 9, 9), ("2024-02-01", 2, 2)]]
        )
        report = _report(entities)
        assert report.risks[0].id == "risk-historical-small-sample"
        assert report.risks[0].priority == 1
        assert "action-historical-improve-checkins" in [a.id for a in report.actions]

    def test_placeholders(self, mixed_entities) -> None:
        """One placeholder image per chart finding, in finding order."""
        report = _report(mixed_entities)
        charts = [f for f in report.findings if f.is_chart]
        assert [img.statement_id for img in report.supporting_images] == [c.id for c in charts]
        main = report.supporting_images[0]
        assert main.placeholder == "[Chart: Satisfaction and loyalty matrix]"
        assert main.image_ref is None

    def test_placeholders_disabled(self, mixed_entities) -> None:
        assert _report(mixed_entities, include_chart_placeholders=False).supporting_images == ()

    def test_capture_chart(self, mixed_entities) -> None:
        report = _report(mixed_entities, capture_chart=lambda chart_id, caption: f"img://{chart_id}")
        main = report.supporting_images[0]
        assert main.image_ref == f"img://{MAIN_CHART_ID}"
        assert main.placeholder is None

    def test_capture_failure_keeps_placeholder(self, mixed_entities, caplog) -> None:
        """A failing capture degrades to the textual placeholder."""

        def capture(chart_id: str, caption: str) -> str:
            raise DataUnavailable("chart_capture", "renderer offline")

        with caplog.at_level(logging.WARNING):
            report = _report(mixed_entities, capture_chart=capture)
        assert all(img.placeholder for img in report.supporting_images)
        assert "Chart capture failed for chart-main-visualisation: renderer offline" in caplog.text

    def test_capture_crash_keeps_placeholder(self, mixed_entities, caplog) -> None:
        """Any error from the capture callback degrades to the placeholder."""

        def capture(chart_id: str, caption: str) -> str:
            raise RuntimeError("renderer crashed")

        with caplog.at_level(logging.WARNING):
            report = _report(mixed_entities, capture_chart=capture)
        assert report.findings
        assert all(img.placeholder and img.image_ref is None for img in report.supporting_images)
        assert "Chart capture failed for chart-main-visualisation: RuntimeError: renderer crashed" in caplog.text

    def test_naming_scheme(self, mixed_entities) -> None:
        """Segment names follow the requested scheme in every section."""
        modern = {f.id: f for f in _report(mixed_entities, special_zones=True).findings}
        classic = {f.id: f for f in _report(mixed_entities, special_zones=True, naming_scheme="classic").findings}
        assert modern["quadrant-description-apostles"].text.startswith("Advocates: Advocates are")
        assert classic["quadrant-description-apostles"].text.startswith("Apostles: Apostles are")

    @pytest.mark.parametrize(("scheme", "other"), [("classic", "modern"), ("modern", "classic")])
    def test_terminology_round_trip(self, mixed_entities, scheme: str, other: str) -> None:
        """Every statement text survives a rewrite to the other scheme and back."""
        report = _report(mixed_entities, special_zones=True, near_zones=True, naming_scheme=scheme)
        for statement in _all_statements(report):
            assert apply_terminology(apply_terminology(statement.text, other), scheme) == statement.text

    def test_classic_keeps_ordinary_words(self, mixed_entities) -> None:
        """The word "advocates" in running text is not a segment name."""
        report = _report(mixed_entities, special_zones=True, near_zones=True, naming_scheme="classic")
        findings = {f.id: f for f in report.findings}
        assert "becoming full advocates" in findings["quadrant-description-near_apostles"].text
        for statement in _all_statements(report):
            for phrase in ("full apostles", "brand apostles", "potential apostles", "apostles for", "strongest apostles"):
                assert phrase not in statement.text

    def test_deterministic(self, mixed_entities) -> None:
        """Same snapshot, same fingerprint, whatever the report date."""
        first = _report(mixed_entities).to_dict()
        second = _report(list(mixed_entities), report_date="2025-01-01").to_dict()
        assert first["date"] != second["date"]
        assert report_fingerprint(first) == report_fingerprint(second)

    def test_default_date_is_utc_today(self, mixed_entities) -> None:
        report = generate_report(mixed_entities, MIDPOINT, SCALE)
        assert len(report.date) == 10
        assert report.metadata["report_date"] == report.date

    def test_to_dict_lists(self, mixed_entities) -> None:
        """Serialized sections are plain lists of dicts."""
        data = _report(mixed_entities).to_dict()
        assert isinstance(data["findings"], list)
        assert data["findings"][0]["id"] == "sample-low"
        assert isinstance(data["risks"][0]["entities"], list)

    def test_duplicate_entity_lists(self, make_entities) -> None:
        """Statements sharing one customer list are reported together."""
        report = _report(make_entities([(6, 6), (6, 6), (6, 6)]))
        assert "e1,e2,e3" in report.duplicate_entity_lists
        assert "action-crisis-prevention" in report.duplicate_entity_lists["e1,e2,e3"]

    def test_empty(self) -> None:
        """No entities: only the main chart and its placeholder."""
        report = _report([])
        assert [f.id for f in report.findings] == [MAIN_CHART_ID]
        assert report.risks == ()
        assert report.opportunities == ()
        assert report.actions == ()
        assert len(report.supporting_images) == 1

    def test_excluded_entities_ignored(self, mixed_entities) -> None:
        entities = mixed_entities + [Entity(id="x1", satisfaction=1, loyalty=1, excluded=True)]
        assert _report(entities).metadata["total_customers"] == 20

    def test_non_finite_score_raises(self) -> None:
        entities = [Entity(id="c1", satisfaction=float("nan"), loyalty=5)]
        with pytest.raises(InvalidInput, match="invalid satisfaction score"):
            _report(entities)

    def test_valid_report_no_warnings(self, mixed_entities, caplog) -> None:
        with caplog.at_level(logging.WARNING):
            _report(mixed_entities)
        assert "Report invariant violation" not in caplog.text


class TestReportInvariants:
    """Tests for _validate_report_invariants()."""

    def test_misplaced_statement_warns(self, mixed_entities, caplog) -> None:
        report = _report(mixed_entities)
        broken = type(report)(
            date=report.date,
            findings=report.findings,
            opportunities=report.opportunities,
            risks=report.risks + report.risks[:1],
            actions=tuple(reversed(report.actions)),
            supporting_images=(),
            metadata=report.metadata,
        )
        with caplog.at_level(logging.WARNING):
            _validate_report_invariants(broken)
        assert "duplicate risk ids" in caplog.text
        assert "actions not ordered by priority then ROI" in caplog.text


class TestScenarios:
    """End-to-end scenarios over whole datasets."""

    def test_large_unskewed_sample(self, make_entities) -> None:
        """100 respondents at 40/30/20/10 around a (5, 5) midpoint."""
        points = [(8, 8)] * 40 + [(8, 2)] * 30 + [(2, 8)] * 20 + [(2, 2)] * 10
        entities = make_entities(points)
        ev = build_evaluations(entities, Midpoint(5, 5), SCALE, ReportOptions())
        assert ev.distribution["largest"] == "loyalists"
        assert ev.distribution["is_skewed"] is False
        assert ev.distribution["closely_followed"] == []
        assert ev.sample["is_high"] is True

        report = _report(entities, midpoint=Midpoint(5, 5))
        assert report.metadata["total_customers"] == 100
        assert "sample-low" not in {f.id for f in report.findings}

    def test_undated_data_has_no_historical_statements(self, mixed_entities) -> None:
        report = _report(mixed_entities)
        assert report.findings
        assert [s.id for s in _all_statements(report) if s.category == "historical"] == []
