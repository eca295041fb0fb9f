"""Tests for historical movement statements."""

from segment_insights.statements.historical import confidence, generate_historical, top_flows, transition_name


def _history(**overrides):
    base = {
        "tracked_entities": 0,
        "total_transitions": 0,
        "top_transitions": [],
    }
    return {**base, **overrides}


def _ids(statements):
    return [s.id for s in statements]


class TestHelpers:
    """Tests for confidence flags and flow selection."""

    def test_confidence_bars(self) -> None:
        assert confidence(_history(tracked_entities=9, total_transitions=100)) == {
            "quantitative": False,
            "percentages": False,
        }
        assert confidence(_history(tracked_entities=10, total_transitions=20)) == {
            "quantitative": True,
            "percentages": False,
        }
        assert confidence(_history(tracked_entities=30, total_transitions=50))["percentages"] is True

    def test_top_flows(self) -> None:
        """First upward and downward main-quadrant flows; sub-segments are ignored."""
        history = _history(
            top_transitions=[
                {"from": "apostles", "to": "defectors", "count": 9},
                {"from": "loyalists", "to": "hostages", "count": 5},
                {"from": "defectors", "to": "mercenaries", "count": 3},
                {"from": "loyalists", "to": "defectors", "count": 2},
            ]
        )
        up, down = top_flows(history)
        assert (up["from"], up["to"]) == ("defectors", "mercenaries")
        assert (down["from"], down["to"]) == ("loyalists", "hostages")
        assert transition_name(down) == "Loyalists -> Hostages"


class TestGenerateHistorical:
    """Tests for generate_historical()."""

    def test_no_history(self, evaluate, mixed_entities) -> None:
        """Undated data produces nothing."""
        result = generate_historical(evaluate(mixed_entities))
        assert result["risks"] == []
        assert result["opportunities"] == []
        assert result["actions"] == []
        assert result["confidence"] == {"quantitative": False, "percentages": False}

    def test_small_sample(self, evaluate, dated_history) -> None:
        """Below the quantitative bar the wording stays qualitative."""
        entities = dated_history(
            [
                [("2024-01-01", 9, 9), ("2024-02-01", 2, 2)],
                [("2024-01-01", 8, 8), ("2024-02-01", 3, 3)],
            ]
        )
        result = generate_historical(evaluate(entities))
        assert _ids(result["risks"]) == ["risk-historical-small-sample"]
        assert "(2 customers with 2+ dated records)" in result["risks"][0].text
        assert result["opportunities"] == []
        assert _ids(result["actions"]) == ["action-historical-improve-checkins"]

    def test_stability(self, evaluate, dated_history) -> None:
        """Respondents who never change quadrant read as stable."""
        entities = dated_history([[("2024-01-01", 9, 9), ("2024-02-01", 8, 8)]])
        result = generate_historical(evaluate(entities))
        assert _ids(result["opportunities"]) == ["opportunity-historical-stability"]
        assert _ids(result["actions"]) == ["action-historical-improve-checkins"]

    def test_negative_pressure(self, evaluate, dated_history) -> None:
        """Fifty monthly loyalist-to-defector drops fire the downward rules."""
        entities = dated_history([[("2024-01-01", 9, 9), ("2024-01-31", 2, 2)]] * 50)
        result = generate_historical(evaluate(entities))

        assert result["confidence"] == {"quantitative": True, "percentages": True}
        assert _ids(result["risks"]) == [
            "risk-historical-negative-pressure",
            "risk-historical-top-negative-flow",
            "risk-historical-rapid-negative",
        ]
        risks = {r.id: r for r in result["risks"]}
        assert "100.0% of transitions were negative vs 0.0% positive" in risks["risk-historical-negative-pressure"].text
        flow = risks["risk-historical-top-negative-flow"]
        assert "Loyalists -> Defectors" in flow.text
        assert flow.support.share == 1.0
        assert "~30 days" in risks["risk-historical-rapid-negative"].text
        assert result["opportunities"] == []
        assert _ids(result["actions"]) == ["action-historical-early-warning", "action-historical-reduce-top-negative"]

    def test_statement_shape(self, evaluate, dated_history) -> None:
        """Historical statements point at the movement chart; actions sit at priority 2."""
        entities = dated_history([[("2024-01-01", 9, 9), ("2024-01-31", 2, 2)]] * 50)
        result = generate_historical(evaluate(entities))
        assert all(r.chart_id == "chart-historical-movement-flow" for r in result["risks"])
        assert all(a.priority == 2 and a.category == "historical" for a in result["actions"])

    def test_positive_momentum(self, evaluate, dated_history) -> None:
        entities = dated_history([[("2024-01-01", 2, 2), ("2024-01-31", 9, 9)]] * 12)
        result = generate_historical(evaluate(entities))
        assert _ids(result["opportunities"]) == ["opportunity-historical-positive-momentum"]
        assert "action-historical-scale-top-positive" in _ids(result["actions"])
        assert _ids(result["risks"]) == ["risk-historical-small-sample"]

    def test_multi_movement(self, evaluate, dated_history) -> None:
        """Many respondents bouncing between segments raise the stability rules."""
        path = [("2024-01-01", 9, 9), ("2024-02-01", 2, 2), ("2024-03-01", 9, 9), ("2024-04-01", 2, 2)]
        result = generate_historical(evaluate(dated_history([path] * 30)))
        assert "risk-historical-stability-multi-movement" in _ids(result["risks"])
        assert "action-historical-stabilise-multi-movers" in _ids(result["actions"])
