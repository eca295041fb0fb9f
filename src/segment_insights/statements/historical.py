"""
Historical movement statements.

Rules read the movement summary produced by analysis.historical. Statements
that quote numbers only do so above the confidence bars; below them the
wording stays qualitative. When history exists but no stronger rule fires,
a light "movement present" statement and a review action keep the topic
visible in every section.
"""

from typing import Any

from segment_insights.models import HistoricalSupport, Statement, display_name
from segment_insights.statements.common import Evaluations, roi

# Confidence bars for quoting counts and percentages
QUANT_MIN_TRACKED = 10
QUANT_MIN_TRANSITIONS = 20
PCT_MIN_TRACKED = 30
PCT_MIN_TRANSITIONS = 50

MIN_DIRECTIONAL_TRANSITIONS = 10
MIN_FLOW_SHARE = 0.15
MULTI_MOVE_3PLUS_COUNT = 5
MULTI_MOVE_3PLUS_SHARE = 0.10
MULTI_MOVE_2PLUS_SHARE = 0.15
MULTI_MOVE_MIN_TRACKED = 30
RAPID_NEGATIVE_MIN = 10

MOVEMENT_CHART_ID = "chart-historical-movement-flow"

# Flows are judged on the main quadrants only
_MAIN_RANK = {"defectors": 0, "hostages": 1, "mercenaries": 2, "loyalists": 3}


def confidence(history: dict[str, Any]) -> dict[str, bool]:
    tracked, transitions = history["tracked_entities"], history["total_transitions"]
    return {
        "quantitative": tracked >= QUANT_MIN_TRACKED and transitions >= QUANT_MIN_TRANSITIONS,
        "percentages": tracked >= PCT_MIN_TRACKED and transitions >= PCT_MIN_TRANSITIONS,
    }


def top_flows(history: dict[str, Any]) -> tuple[dict | None, dict | None]:
    """First upward and first downward main-quadrant flow among the top transitions."""
    flows = [
        t
        for t in history["top_transitions"]
        if t["from"] != t["to"] and t["from"] in _MAIN_RANK and t["to"] in _MAIN_RANK
    ]
    up = next((t for t in flows if _MAIN_RANK[t["to"]] > _MAIN_RANK[t["from"]]), None)
    down = next((t for t in flows if _MAIN_RANK[t["to"]] < _MAIN_RANK[t["from"]]), None)
    return up, down


def transition_name(flow: dict) -> str:
    return f"{display_name(flow['from'])} -> {display_name(flow['to'])}"


def _pct(numerator: int, denominator: int) -> str:
    if denominator <= 0:
        return "0%"
    return f"{numerator / denominator * 100:.1f}%"


def generate_historical(ev: Evaluations) -> dict[str, Any]:
    """
    Generate historical risks, opportunities and actions.

    Returns:
        Dict with "risks", "opportunities", "actions" (lists of Statement, in
        rule order) and "confidence" flags. Lists are empty when there is no
        movement history.
    """
    result: dict[str, Any] = {
        "risks": [],
        "opportunities": [],
        "actions": [],
        "confidence": {"quantitative": False, "percentages": False},
    }
    history = ev.history
    if not history or history["tracked_entities"] <= 0:
        return result

    tracked = history["tracked_entities"]
    total = history["total_transitions"]
    between = history["between_segment_transitions"]
    positive, negative = history["positive"], history["negative"]
    multi2, multi3 = history["multi_move_2plus"], history["multi_move_3plus"]
    cadence = history["cadence"]

    flags = confidence(history)
    result["confidence"] = flags
    up, down = top_flows(history)
    up_share = up["count"] / between if up and between > 0 else 0.0
    down_share = down["count"] / between if down and between > 0 else 0.0

    def support(flow: dict | None = None, share: float | None = None) -> HistoricalSupport:
        return HistoricalSupport(
            tracked_entities=tracked,
            total_transitions=total,
            positive=positive,
            negative=negative,
            between_segment_transitions=between,
            transition=transition_name(flow) if flow else None,
            share=share,
            typical_gap_days=cadence["typical_gap_days"],
        )

    risks, opportunities, actions = result["risks"], result["opportunities"], result["actions"]

    def risk(statement_id: str, text: str, severity: str, data: HistoricalSupport | None = None) -> None:
        risks.append(
            Statement(
                id=statement_id,
                kind="risk",
                category="historical",
                text=text,
                priority=0,
                severity=severity,
                chart_id=MOVEMENT_CHART_ID,
                support=data or support(),
            )
        )

    def opportunity(statement_id: str, text: str, impact: str) -> None:
        opportunities.append(
            Statement(
                id=statement_id,
                kind="opportunity",
                category="historical",
                text=text,
                priority=0,
                impact=impact,
                chart_id=MOVEMENT_CHART_ID,
                support=support(),
            )
        )

    def action(
        statement_id: str, text: str, actionability: str, expected_impact: str, data: HistoricalSupport | None = None
    ) -> None:
        actions.append(
            Statement(
                id=statement_id,
                kind="action",
                category="historical",
                text=text,
                priority=2,
                actionability=actionability,
                expected_impact=expected_impact,
                roi=roi(expected_impact, actionability),
                support=data or support(),
            )
        )

    if not flags["quantitative"]:
        risk(
            "risk-historical-small-sample",
            f"Historical Progress is available, but the amount of historical data is limited ({tracked} "
            f"customer{'' if tracked == 1 else 's'} with 2+ dated records). Treat movement signals as directional "
            "and prioritise collecting more consistent check-ins before drawing strong conclusions.",
            "low",
        )
        action(
            "action-historical-improve-checkins",
            "Improve the consistency of historical check-ins: standardise when you measure satisfaction and loyalty "
            "(and for which customer cohorts) so Historical Progress movement can be interpreted with higher "
            "confidence.",
            "medium",
            "medium",
        )

    if negative >= MIN_DIRECTIONAL_TRANSITIONS and negative > positive:
        if flags["percentages"]:
            text = (
                "Historical Progress risk: negative transitions outweigh positive ones. Across consecutive "
                f"check-ins, {_pct(negative, total)} of transitions were negative vs {_pct(positive, total)} "
                "positive, indicating downward movement pressure to investigate and mitigate."
            )
        else:
            text = (
                "Historical Progress risk: negative transitions outweigh positive ones in the observed period, "
                "indicating downward movement pressure that should be investigated and mitigated."
            )
        risk("risk-historical-negative-pressure", text, "high")

    if positive >= MIN_DIRECTIONAL_TRANSITIONS and positive > negative:
        if flags["percentages"]:
            text = (
                "Historical Progress opportunity: positive transitions outweigh negative ones. Across consecutive "
                f"check-ins, {_pct(positive, total)} of transitions were positive vs {_pct(negative, total)} "
                "negative, suggesting improvement momentum that can be reinforced and scaled."
            )
        else:
            text = (
                "Historical Progress opportunity: positive transitions outweigh negative ones, suggesting "
                "improvement momentum that can be reinforced and scaled."
            )
        opportunity("opportunity-historical-positive-momentum", text, "medium")

    leak = down is not None and negative >= MIN_DIRECTIONAL_TRANSITIONS and down_share >= MIN_FLOW_SHARE
    if leak:
        risk(
            "risk-historical-top-negative-flow",
            f"Historical Progress risk: the largest negative flow is {transition_name(down)}, representing "
            f"{_pct(down['count'], between)} of between-quadrant movement, which is the clearest leak to address.",
            "high",
            data=support(down, down_share),
        )

    multi3_share = multi3 / tracked if tracked else 0.0
    if multi3 >= MULTI_MOVE_3PLUS_COUNT or multi3_share >= MULTI_MOVE_3PLUS_SHARE:
        risk(
            "risk-historical-stability-multi-movement",
            "Historical Progress stability risk: a subset of customers change segments three or more times, which "
            "may indicate inconsistent delivery, inconsistent expectations, or a threshold-sensitive experience "
            "that requires operational tightening.",
            "medium",
        )

    if cadence["has_confidence"] and cadence["rapid_negative_count"] >= RAPID_NEGATIVE_MIN:
        text = (
            "Historical Progress risk: rapid negative movement within one typical time between check-ins "
            "(cadence) may indicate incidents or complaints; prioritise investigation of the experience drivers "
            "behind these fast deteriorations."
        )
        if cadence["typical_gap_days"] is not None:
            text += f" (Typical time between check-ins (cadence): ~{round(cadence['typical_gap_days'])} days.)"
        risk("risk-historical-rapid-negative", text, "high")
        action(
            "action-historical-early-warning",
            "Create an early-warning loop for rapid negative movement: monitor leading indicators between check-ins "
            "(complaints, incidents, product failures), trigger proactive outreach within one typical time between "
            "check-ins (cadence), and verify recovery at the next measurement.",
            "medium",
            "high",
        )

    if tracked >= MULTI_MOVE_MIN_TRACKED and multi2 / tracked >= MULTI_MOVE_2PLUS_SHARE:
        action(
            "action-historical-stabilise-multi-movers",
            "Create a stabilisation initiative for multi-movement customers: identify common friction points, apply "
            "targeted improvements, and follow up to confirm they settle into a stronger segment.",
            "hard",
            "high",
        )

    if leak:
        action(
            "action-historical-reduce-top-negative",
            f"Prioritise interventions that reduce the top negative transition ({transition_name(down)}) via "
            "root-cause analysis, service recovery, and process fixes.",
            "medium",
            "high",
            data=support(down, down_share),
        )

    if up is not None and positive >= MIN_DIRECTIONAL_TRANSITIONS and up_share >= MIN_FLOW_SHARE:
        action(
            "action-historical-scale-top-positive",
            f"Scale the behaviours and processes associated with the top positive transition ({transition_name(up)}) "
            "and institutionalise them as standard practice.",
            "easy",
            "high",
            data=support(up, up_share),
        )

    if between == 0:
        opportunity(
            "opportunity-historical-stability",
            "Historical Progress suggests stability: customers with historical records did not change quadrant "
            "between consecutive check-ins. This can be a strength, but it also means shifting segment "
            "distribution will likely require deliberate interventions rather than organic drift.",
            "low",
        )

    if not risks and not opportunities and between > 0:
        if positive > 0 and negative > 0:
            direction = "both positive and negative"
        elif positive > 0:
            direction = "positive"
        else:
            direction = "negative"
        if negative > 0:
            risk(
                "risk-historical-movement-present",
                f"Historical Progress shows {direction} between-quadrant movement over time. Even with a modest "
                "sample, this is a useful operational signal: review the Movement Flow diagram to identify the main "
                "leaks and stabilise the drivers behind them.",
                "low",
            )
        else:
            opportunity(
                "opportunity-historical-movement-present",
                f"Historical Progress shows {direction} between-quadrant movement over time. Even with a modest "
                "sample, this is a useful operational signal: review the Movement Flow diagram to identify what's "
                "working and reinforce the drivers behind these improvements.",
                "low",
            )

    if not actions:
        action(
            "action-historical-review-top-transitions",
            "Review the Movement Flow diagram and pick one or two top transitions to act on: investigate the "
            "experience drivers behind them, design targeted interventions, and re-measure at the next check-in "
            "to confirm movement stabilises in the desired direction.",
            "medium",
            "medium",
        )

    return result
