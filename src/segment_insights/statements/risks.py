"""Risk statements from proximity, recommendation and distribution results."""

from segment_insights.evaluators.recommendation import categorize
from segment_insights.models import (
    DistributionSupport,
    ProximitySupport,
    RecommendationSupport,
    Statement,
    display_name,
)
from segment_insights.statements.common import SEVERITY_ORDER, Evaluations, plural, ranked, relationship_name, supporting

HIGH_SHARE_PCT = 20.0
SEVERE_SHARE_PCT = 30.0


def _risk(statement_id: str, category: str, text: str, severity: str, **kwargs) -> Statement:
    return Statement(id=statement_id, kind="risk", category=category, text=text, priority=0, severity=severity, **kwargs)


def generate_risks(ev: Evaluations) -> list[Statement]:
    """
    Generate risks sorted by severity (high first), then affected count.

    Priorities are assigned 1..n in that order.
    """
    candidates: list[tuple[Statement, tuple]] = []

    def add(statement: Statement, count: int) -> None:
        candidates.append((statement, (-SEVERITY_ORDER[statement.severity], -count)))

    prox = ev.proximity_eval
    top_risks = prox["top_risks"]
    if prox["has_risks"] and top_risks:
        top = top_risks[0]
        add(
            _risk(
                f"risk-{top['type']}",
                "proximity",
                f"You have {top['count']} customers in the {relationship_name(top['from'], top['to'])} relationship, "
                "which represents a significant risk of these customers moving to a less favourable quadrant.",
                top["severity"],
                segment=top["from"],
                entities=supporting(top["entities"]),
                support=ProximitySupport(relationship=top["type"], count=top["count"], level=top["level"]),
            ),
            top["count"],
        )

        by_type = {r["type"]: r for r in top_risks}
        crisis = by_type.get("loyalists_close_to_defectors")
        if crisis:
            add(
                _risk(
                    "risk-crisis",
                    "proximity",
                    f"There's a critical risk with {crisis['count']} Loyalists who are close to becoming Defectors. "
                    "This represents a crisis situation: your best customers are at risk of becoming your worst. "
                    "Immediate action is required to prevent this shift.",
                    "high",
                    segment="loyalists",
                    entities=supporting(crisis["entities"]),
                    support=ProximitySupport(relationship=crisis["type"], count=crisis["count"], level=crisis["level"]),
                ),
                crisis["count"],
            )

        wavering = by_type.get("loyalists_close_to_mercenaries")
        if wavering:
            add(
                _risk(
                    "risk-loyalists-losing-loyalty",
                    "proximity",
                    f"You have {wavering['count']} Loyalists who are close to becoming Mercenaries. These customers "
                    "are satisfied but their loyalty is wavering, and they're at risk of becoming price-sensitive "
                    "and switching to competitors.",
                    "high",
                    segment="loyalists",
                    entities=supporting(wavering["entities"]),
                    support=ProximitySupport(
                        relationship=wavering["type"], count=wavering["count"], level=wavering["level"]
                    ),
                ),
                wavering["count"],
            )

    indicators = prox["crisis_indicators"]
    if indicators:
        relationships = ev.proximity.get("relationships", {})
        members = [m for ind in indicators for m in relationships.get(ind["relationship"], {}).get("entities", [])]
        n = len(indicators)
        add(
            _risk(
                "risk-crisis-indicators",
                "proximity",
                f"The proximity analysis has identified {n} crisis indicator{plural(n)} "
                f"({'; '.join(ind['label'] for ind in indicators)}), suggesting that a significant portion of your "
                "customer base is at risk of negative movement.",
                "high",
                entities=supporting(members),
                support=ProximitySupport(relationship=None, count=sum(ind["count"] for ind in indicators)),
            ),
            sum(ind["count"] for ind in indicators),
        )

    rec = ev.recommendation
    rec_support = RecommendationSupport(
        score=rec["score"],
        promoters=rec["promoters"],
        passives=rec["passives"],
        detractors=rec["detractors"],
        total=rec["total"],
    )
    if rec["detractors"] > 0 and rec["detractor_percentage"] > HIGH_SHARE_PCT:
        pct = rec["detractor_percentage"]
        detractors = [
            e for e in ev.aggregates.rows if categorize(e.loyalty, rec["category_bounds"]) == "detractors"
        ]
        add(
            _risk(
                "risk-detractors",
                "recommendation",
                f"You have {rec['detractors']} Detractors ({pct:.1f}% of your customers), who are unlikely to "
                "recommend your brand and may actively discourage others. This represents a significant risk to "
                "your reputation and growth.",
                "high" if pct > SEVERE_SHARE_PCT else "medium",
                entities=supporting(detractors),
                support=rec_support,
            ),
            rec["detractors"],
        )

    if rec["is_weak"]:
        add(
            _risk(
                "risk-negative-score",
                "recommendation",
                f"Your Recommendation Score of {rec['score']:.1f} is negative, meaning you have more Detractors than "
                "Promoters. This is a serious concern that requires immediate attention to prevent further customer "
                "loss and reputational damage.",
                "high",
                support=rec_support,
            ),
            0,
        )

    for segment, severity_fn, description in (
        (
            "defectors",
            lambda pct: "high" if pct > SEVERE_SHARE_PCT else "medium",
            "These customers are both dissatisfied and disloyal, representing a significant risk of churn and "
            "negative word-of-mouth.",
        ),
        (
            "hostages",
            lambda pct: "medium",
            "These customers are loyal but dissatisfied: they're staying with you out of necessity rather than "
            "choice, which makes them highly vulnerable to churn if alternatives become available.",
        ),
    ):
        # Whole macro family, so Terrorists count towards the Defectors share
        count = ev.aggregates.macro_counts.get(segment, 0)
        pct = count / ev.total * 100 if ev.total else 0.0
        if count > 0 and pct > HIGH_SHARE_PCT:
            add(
                _risk(
                    f"risk-{segment}",
                    "distribution",
                    f"Your {display_name(segment)} segment represents {pct:.1f}% of your customer base. {description}",
                    severity_fn(pct),
                    segment=segment,
                    entities=supporting(ev.aggregates.members(segment, macro=True)),
                    support=DistributionSupport(
                        counts=dict(ev.distribution["counts"]),
                        percentages=dict(ev.distribution["percentages"]),
                        segment=segment,
                        count=count,
                        percentage=pct,
                    ),
                ),
                count,
            )

    return ranked(candidates)
