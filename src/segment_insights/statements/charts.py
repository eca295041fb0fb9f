"""Chart findings: one statement per visualisation, carrying its commentary."""

import math
from typing import Any

from segment_insights.models import MAIN_SEGMENTS, ChartSupport, Statement, display_name
from segment_insights.statements.common import CHART_PRIORITY_BASE, Evaluations

CHART_CAPTIONS = {
    "chart-main-visualisation": "Satisfaction and loyalty matrix",
    "chart-distribution": "Segment distribution",
    "chart-historical-movement-flow": "Movement flow between segments",
    "chart-concentration": "Response concentration",
    "chart-proximity": "Boundary proximity",
    "chart-proximity-actionable-conversions": "Actionable conversions",
    "chart-recommendation": "Recommendation score",
}

MAIN_CHART_CONCENTRATION_PCT = 40.0
CONCENTRATION_FAR = 1.5
CONCENTRATION_CLOSE = 0.5
CONCENTRATION_LARGE_SAMPLE = 50


def _pct(numerator: float, denominator: float) -> str:
    if not denominator or denominator <= 0:
        return "0%"
    return f"{numerator / denominator * 100:.1f}%"


def generate_chart_findings(ev: Evaluations) -> list[Statement]:
    """Chart findings in display order. The main visualisation is always present."""
    sat_label, loy_label = (label.lower() for label in ev.options.axis_labels)
    charts: list[tuple[str, str, str]] = [
        ("chart-main-visualisation", "data", _main_commentary(ev, sat_label, loy_label))
    ]

    if ev.distribution["largest"]:
        charts.append(("chart-distribution", "distribution", _distribution_commentary(ev)))

    history = ev.history
    if history and history["tracked_entities"] > 0 and history["total_transitions"] > 0:
        charts.append(
            ("chart-historical-movement-flow", "historical", _movement_commentary(history, sat_label, loy_label))
        )

    if ev.total > 0:
        charts.append(("chart-concentration", "concentration", _concentration_commentary(ev, sat_label, loy_label)))

    if ev.total > 0 and ev.proximity_eval["available"]:
        charts.append(("chart-proximity", "proximity", _proximity_commentary(ev)))
        charts.append(
            (
                "chart-proximity-actionable-conversions",
                "proximity",
                "The Actionable Conversions view shows high-priority customer movements grouped by conversion type. "
                "Opportunities represent movements towards stronger segments, while warnings indicate risks of "
                "customers moving to less strategic segments for retention. Each conversion shows the number of "
                "customers and the average chance of movement.",
            )
        )

    if ev.recommendation["total"] > 0 and ev.recommendation["score"] != 0:
        charts.append(("chart-recommendation", "recommendation", _recommendation_commentary(ev)))

    return [
        Statement(
            id=chart_id,
            kind="finding",
            category=category,
            text=text,
            priority=CHART_PRIORITY_BASE + i,
            support=ChartSupport(chart_id=chart_id, caption=CHART_CAPTIONS[chart_id]),
            chart_id=chart_id,
            is_chart=True,
        )
        for i, (chart_id, category, text) in enumerate(charts)
    ]


def _main_commentary(ev: Evaluations, sat_label: str, loy_label: str) -> str:
    dist = ev.distribution
    text = (
        f"This visualisation shows the distribution of your {ev.total} customers across the "
        f"{sat_label}-{loy_label} matrix. "
    )
    largest = dist["largest"]
    if not largest:
        return text + f"Each point represents a customer, positioned based on their {sat_label} and {loy_label} scores."

    name = display_name(largest)
    count, pct = dist["largest_count"], dist["largest_percentage"]
    if pct > MAIN_CHART_CONCENTRATION_PCT:
        text += (
            f"The chart reveals a strong concentration in the {name} quadrant, with {count} customers "
            f"({pct:.1f}%) falling into this category."
        )
    else:
        text += f"The chart shows that {name} is your most common segment, with {count} customers ({pct:.1f}%)."

    if dist["is_balanced"]:
        text += " The distribution appears relatively balanced across segments, which suggests a healthy mix of customer types."
    elif dist["is_skewed"]:
        text += (
            f" However, the distribution is heavily skewed towards {name}, which may indicate a lack of diversity "
            "in your customer base."
        )
    return text


def _distribution_commentary(ev: Evaluations) -> str:
    dist = ev.distribution
    largest = dist["largest"]
    text = (
        "This breakdown shows the detailed distribution across all customer segments. "
        f"{display_name(largest)} represents {dist['largest_percentage']:.1f}% of your customer base."
    )
    others = sorted(
        (s for s in MAIN_SEGMENTS if s != largest and ev.count(s) > 0),
        key=lambda s: -ev.percentage(s),
    )[:2]
    if others:
        listed = " and ".join(f"{display_name(s)} ({ev.percentage(s):.1f}%)" for s in others)
        text += f" Other notable segments include {listed}."
    if dist["is_balanced"]:
        text += " The relatively balanced distribution across segments is a positive indicator of customer diversity."
    return text


def _concentration_commentary(ev: Evaluations, sat_label: str, loy_label: str) -> str:
    text = (
        f"The response concentration analysis reveals how customers cluster around specific "
        f"{sat_label}-{loy_label} combinations. "
    )
    most_common = ev.aggregates.concentration["most_common"]
    avg_sat = ev.aggregates.statistics["satisfaction"]["average"]
    avg_loy = ev.aggregates.statistics["loyalty"]["average"]

    if most_common and avg_sat is not None and avg_loy is not None:
        if avg_sat % 1 != 0 or avg_loy % 1 != 0:
            text += (
                f"It's important to note that your average {sat_label} ({avg_sat:.1f}) and {loy_label} "
                f"({avg_loy:.1f}) are calculated values that may not represent any actual customer. This is why "
                "it's valuable to look at where your real customers are actually positioned. "
            )
        sat, loy = most_common["satisfaction"], most_common["loyalty"]
        sat_diff, loy_diff = sat - avg_sat, loy - avg_loy
        averages = f"({sat_label} {avg_sat:.1f}, {loy_label} {avg_loy:.1f})"

        text += (
            f"The most repeated position is {sat_label} {sat:g} and {loy_label} {loy:g}, with "
            f"{most_common['count']} customers ({most_common['percentage']:.1f}% of your base). "
        )
        if sat_diff > 0 and loy_diff > 0:
            text += f"This position is more positive than your average {averages}, "
        elif sat_diff < 0 and loy_diff < 0:
            text += f"This position is more negative than your average {averages}, "
        elif sat_diff * loy_diff < 0:
            text += f"This position shows a mixed pattern compared to your average {averages}, "
        else:
            text += f"This position is close to your average {averages}, "

        distance = math.hypot(sat_diff, loy_diff)
        if distance > CONCENTRATION_FAR:
            text += "and it's positioned far from the average, indicating a distinct customer segment. "
        elif distance < CONCENTRATION_CLOSE:
            text += "and it's positioned close to the average, suggesting this represents your typical customer experience. "
        else:
            text += "showing moderate deviation from the average. "

    if ev.total < CONCENTRATION_LARGE_SAMPLE:
        text += (
            f"With {ev.total} customers, the concentration patterns may be less pronounced, but they still reveal "
            f"where your customers tend to fall on the {sat_label}-{loy_label} spectrum."
        )
    else:
        text += (
            f"With {ev.total} customers, clear concentration patterns emerge. These clusters can help identify "
            "common customer experiences and potential areas for targeted interventions."
        )
    return text


def _proximity_commentary(ev: Evaluations) -> str:
    prox = ev.proximity_eval
    text = (
        "The proximity analysis identifies customers who are close to quadrant boundaries, revealing both risks "
        "and opportunities. "
    )
    opportunities = len(prox["top_opportunities"])
    if prox["has_risks"] and prox["has_opportunities"]:
        text += (
            f"The analysis shows {prox['high_risk_count']} high-risk relationships and {opportunities} opportunity "
            f"relationships ({prox['high_opportunity_count']} high-opportunity). Customers near boundaries are "
            "particularly important to monitor, as they may move to less strategic quadrants, or to stronger "
            "segments with the right engagement."
        )
    elif prox["has_risks"]:
        text += (
            f"The analysis identifies {prox['high_risk_count']} high-risk relationships where customers are close to "
            "moving to less strategic quadrants. These boundary customers require immediate attention."
        )
    elif prox["has_opportunities"]:
        text += (
            f"The analysis reveals {opportunities} opportunity relationships ({prox['high_opportunity_count']} "
            "high-opportunity) where customers are close to moving across nearby segment boundaries. These "
            "customers should be prioritised for focused engagement."
        )
    else:
        text += (
            "The analysis shows that most customers are well-positioned within their quadrants, with fewer "
            "boundary cases requiring immediate attention."
        )
    return text


def _recommendation_commentary(ev: Evaluations) -> str:
    rec = ev.recommendation
    score = rec["score"]
    promoters = f"{rec['promoters']} Promoters ({rec['promoter_percentage']:.1f}%)"
    detractors = f"{rec['detractors']} Detractors ({rec['detractor_percentage']:.1f}%)"
    text = "The Recommendation Score analysis shows how likely your customers are to recommend your brand. "

    if score > 20 and rec["has_unbalanced_data"]:
        text += (
            f"Your score of {score:.1f} appears {'outstanding' if score > 30 else 'positive'}, with {promoters} and "
            f"{detractors}. However, this result may be conditioned by incomplete or biased data collection."
        )
    elif score > 30:
        text += (
            f"Your score of {score:.1f} is outstanding, with {promoters} significantly outweighing {detractors}. "
            "This may indicate a healthy customer base that actively advocates for your brand."
        )
    elif score > 0:
        text += f"Your score of {score:.1f} is positive, with {promoters} outnumbering {detractors}."
    else:
        text += (
            f"Your score of {score:.1f} is negative, with {detractors} outnumbering {promoters}. This may be a "
            "significant concern that could require attention to prevent negative word-of-mouth."
        )
    return text


def _movement_commentary(history: dict[str, Any], sat_label: str, loy_label: str) -> str:
    tracked = history["tracked_entities"]
    total = history["total_transitions"]
    between = history["between_segment_transitions"]
    multi2, multi3 = history["multi_move_2plus"], history["multi_move_3plus"]
    multi2_share = multi2 / tracked if tracked else 0.0
    top = history["top_transitions"][0] if history["top_transitions"] else None
    cadence = history["cadence"]

    parts = [
        "The Movement Flow Visualization summarises step-by-step movements between segments from one dated "
        "check-in to the next (customers can contribute to multiple movements if they change segment multiple "
        "times)."
    ]
    if tracked >= 10 and total >= 20:
        parts.append(f"We observed measurable customer movement over time across {tracked} customers with historical records.")
    if total >= 50:
        parts.append(
            f"Across consecutive check-ins, {_pct(history['positive'], total)} of transitions were positive, "
            f"{_pct(history['negative'], total)} negative, and {_pct(history['neutral'], total)} showed no "
            "ranked change."
        )
    if between >= 20 and top:
        if top["count"] / between >= 0.35:
            parts.append(
                f"Movement is concentrated: the single largest transition ({display_name(top['from'])} to "
                f"{display_name(top['to'])}) accounts for {_pct(top['count'], between)} of all between-quadrant "
                "movements."
            )
        else:
            parts.append("Movement is spread across multiple transitions rather than dominated by a single flow.")
    if tracked >= 30 and multi2 >= 10:
        if multi2_share >= 0.15:
            parts.append(
                f"A material share of customers ({_pct(multi2, tracked)}) changed segments two or more times, "
                "suggesting a stability opportunity: some customers have not yet settled into a consistent segment. "
                "Repeated segment changes may indicate boundary sensitivity, with customers switching "
                f"classification as {sat_label} or {loy_label} fluctuates."
            )
        else:
            parts.append(
                f"A smaller cohort ({multi2} customers) changed segments multiple times; these customers are worth "
                "monitoring as a stability segment."
            )
    elif tracked >= 10 and multi2 == 0:
        parts.append("Most customers remained stable or moved at most once between segments during the period.")
    if cadence["has_confidence"] and cadence["rapid_negative_count"] >= 10:
        phrase = (
            f" (the typical time between check-ins appears approximately {cadence['label']})" if cadence["label"] else ""
        )
        parts.append(
            "A notable share of negative movements occurred within one typical time between check-ins"
            f"{phrase}, which may indicate discrete bad experiences causing rapid deterioration."
        )
    if tracked >= 30 and multi2_share >= 0.20:
        parts.append(
            "If your operational definition of good differs from the mathematical midpoint, adjusting the midpoint "
            "can align segmentation to business standards and make borderline classifications more consistent."
        )
    if tracked >= 30 and (multi3 >= 5 or multi3 / tracked >= 0.10):
        parts.append(
            f"Stability risk: a subset of customers changed segments three or more times ({_pct(multi3, tracked)}), "
            "which may indicate inconsistent delivery or a threshold-sensitive experience."
        )
    return " ".join(parts)
