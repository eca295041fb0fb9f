"""Tests for text findings."""

from segment_insights.models import Midpoint, ReportOptions
from segment_insights.statements.findings import generate_findings


def _ids(findings):
    return [f.id for f in findings]


class TestGenerateFindings:
    """Tests for generate_findings()."""

    def test_mixed_dataset_order(self, evaluate, mixed_entities) -> None:
        """Findings follow sample, descriptions, distribution, statistics, recommendation."""
        findings = generate_findings(evaluate(mixed_entities))
        ids = [i for i in _ids(findings) if not i.startswith("proximity-")]
        assert ids == [
            "sample-low",
            "sample-representation-good",
            "quadrant-description-loyalists",
            "quadrant-description-defectors",
            "quadrant-description-mercenaries",
            "quadrant-description-hostages",
            "dominant-loyalists",
            "distribution-no-close-competition",
            "distribution-too-full-loyalists",
            "satisfaction-above-average",
            "loyalty-above-average",
            "recommendation-score",
        ]

    def test_priorities_follow_generation_order(self, evaluate, mixed_entities) -> None:
        findings = generate_findings(evaluate(mixed_entities))
        assert [f.priority for f in findings] == list(range(1, len(findings) + 1))
        assert all(f.kind == "finding" and not f.is_chart for f in findings)

    def test_description_entities(self, evaluate, mixed_entities) -> None:
        """Segment descriptions carry the segment's members."""
        findings = {f.id: f for f in generate_findings(evaluate(mixed_entities))}
        hostages = findings["quadrant-description-hostages"]
        assert hostages.entity_ids == ("e13", "e14", "e15")
        assert "You currently have 3 Hostages (15.0% of your customer base)." in hostages.text

    def test_singular_description(self, evaluate, make_entities) -> None:
        """A single member uses the singular segment name."""
        findings = {f.id: f for f in generate_findings(evaluate(make_entities([(9, 9), (9, 9), (2, 8)])))}
        assert "You currently have 1 Hostage (" in findings["quadrant-description-hostages"].text

    def test_recommendation_negative(self, evaluate, mixed_entities) -> None:
        findings = {f.id: f for f in generate_findings(evaluate(mixed_entities))}
        rec = findings["recommendation-score"]
        assert rec.text.startswith("Your Recommendation Score of -25.0 is negative")
        assert rec.support.detractors == 10

    def test_tied_divided(self, evaluate, make_entities) -> None:
        """A tie between a positive and a negative segment reads as divided."""
        findings = {f.id: f for f in generate_findings(evaluate(make_entities([(9, 9), (2, 2)])))}
        assert "divided customer base" in findings["distribution-tied"].text
        assert "distribution-zero-mercenaries" in findings
        assert "distribution-zero-hostages" in findings

    def test_high_score_warning(self, evaluate, make_entities) -> None:
        """All promoters trigger the exceptionally-high warning and the unbalanced wording."""
        findings = {f.id: f for f in generate_findings(evaluate(make_entities([(9, 9), (9, 10), (10, 10)])))}
        assert "recommendation-score-exceptionally-high" in findings
        assert "recommendation-score-very-high" not in findings
        assert "may be conditioned" in findings["recommendation-score"].text
        assert "recommendation-score-incomplete-scale" in findings

    def test_neutral_customers(self, evaluate, make_entities) -> None:
        """Entities on the midpoint get their own findings."""
        entities = make_entities([(5, 5), (9, 9), (8, 8), (2, 2)])
        findings = {f.id: f for f in generate_findings(evaluate(entities, Midpoint(5, 5)))}
        neutral = findings["neutral-customers"]
        assert neutral.entity_ids == ("e1",)
        assert "You have 1 Neutral customer (25.0% of your total) who is exactly" in neutral.text
        assert "neutral-customers-high" in findings

    def test_custom_threshold_wording(self, evaluate, mixed_entities) -> None:
        """A demanding custom threshold is called out."""
        findings = {f.id: f for f in generate_findings(evaluate(mixed_entities, Midpoint(8.0, 5.5)))}
        text = findings["satisfaction-below-average"].text
        assert "your current threshold" in text
        assert "threshold (8.0) is significantly higher than the scale midpoint (5.5)" in text

    def test_axis_labels(self, evaluate, mixed_entities) -> None:
        """Axis labels flow into the statistics wording."""
        options = ReportOptions(axis_labels=("Happiness", "Retention"))
        findings = {f.id: f for f in generate_findings(evaluate(mixed_entities, options=options))}
        assert findings["satisfaction-above-average"].text.startswith("Your average happiness score")

    def test_no_proximity_without_midpoint(self, evaluate, mixed_entities) -> None:
        """Without a midpoint no proximity findings are produced."""
        findings = generate_findings(evaluate(mixed_entities, None))
        assert not any(i.startswith("proximity-") for i in _ids(findings))

    def test_proximity_top_risk(self, evaluate, make_entities) -> None:
        """Loyalists at the midpoint corner produce a top-risk finding."""
        findings = {f.id: f for f in generate_findings(evaluate(make_entities([(6, 6), (6, 6), (6, 6)])))}
        assert "proximity-risks-only" in findings
        top = findings["proximity-top-risk"]
        assert top.text.startswith("The most significant risk is 3 customers in the Loyalists close to Mercenaries")
        assert top.severity == "high"
        assert top.entity_ids == ("e1", "e2", "e3")

    def test_empty(self, evaluate) -> None:
        """No entities yield no findings."""
        assert generate_findings(evaluate([])) == []
