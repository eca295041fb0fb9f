"""Opportunity statements."""

from segment_insights.evaluators.recommendation import categorize
from segment_insights.models import (
    DistributionSupport,
    ProximitySupport,
    RecommendationSupport,
    Statement,
    display_name,
)
from segment_insights.statements.common import IMPACT_SCORE, Evaluations, plural, ranked, relationship_name, supporting

PROMOTERS_HIGH_PCT = 20.0
PROMOTERS_GROWING_PCT = 10.0
PASSIVES_PCT = 20.0
MERCENARIES_HIGH_PCT = 15.0
MERCENARIES_GROWING_PCT = 5.0
HOSTAGES_PCT = 10.0

_STRONG_TARGETS = {"loyalists", "apostles", "near_apostles"}


def _opportunity(statement_id: str, category: str, text: str, impact: str, **kwargs) -> Statement:
    return Statement(id=statement_id, kind="opportunity", category=category, text=text, priority=0, impact=impact, **kwargs)


def generate_opportunities(ev: Evaluations) -> list[Statement]:
    """
    Generate opportunities sorted by impact (high first), then affected count.

    When nothing qualifies and there is data, a general-growth statement is
    emitted so the section is never empty.
    """
    candidates: list[tuple[Statement, tuple]] = []

    def add(statement: Statement, count: int) -> None:
        candidates.append((statement, (-IMPACT_SCORE[statement.impact], -count)))

    prox = ev.proximity_eval
    top_opps = prox["top_opportunities"]
    if prox["has_opportunities"] and top_opps:
        top = top_opps[0]
        target = "a stronger segment" if top["to"] in _STRONG_TARGETS else "a more stable segment"
        add(
            _opportunity(
                f"opportunity-{top['type']}",
                "proximity",
                f"You have {top['count']} customers in the {relationship_name(top['from'], top['to'])} relationship, "
                f"representing a significant opportunity to move these customers into {target} through targeted "
                "engagement.",
                top["impact"],
                segment=top["from"],
                entities=supporting(top["entities"]),
                support=ProximitySupport(relationship=top["type"], count=top["count"], level=top["level"]),
            ),
            top["count"],
        )

        by_type = {o["type"]: o for o in top_opps}
        redemption = by_type.get("defectors_close_to_loyalists")
        if redemption:
            add(
                _opportunity(
                    "opportunity-redemption",
                    "proximity",
                    f"There's a particularly valuable opportunity with {redemption['count']} Defectors who are close "
                    "to becoming Loyalists. These customers represent a redemption opportunity: they've been "
                    "disappointed but are still within reach of becoming your strongest advocates.",
                    "high",
                    segment="defectors",
                    entities=supporting(redemption["entities"]),
                    support=ProximitySupport(
                        relationship=redemption["type"], count=redemption["count"], level=redemption["level"]
                    ),
                ),
                redemption["count"],
            )

        promotion = by_type.get("loyalists_close_to_apostles") or by_type.get("near_apostles_close_to_apostles")
        if promotion:
            add(
                _opportunity(
                    "opportunity-apostles",
                    "proximity",
                    f"You have {promotion['count']} customers who are close to becoming Apostles, your strongest "
                    "brand advocates. With the right engagement, these customers could become powerful advocates "
                    "for your brand.",
                    "high",
                    segment=promotion["from"],
                    entities=supporting(promotion["entities"]),
                    support=ProximitySupport(
                        relationship=promotion["type"], count=promotion["count"], level=promotion["level"]
                    ),
                ),
                promotion["count"],
            )

    rec = ev.recommendation
    rec_support = RecommendationSupport(
        score=rec["score"],
        promoters=rec["promoters"],
        passives=rec["passives"],
        detractors=rec["detractors"],
        total=rec["total"],
    )

    def in_category(category: str):
        return supporting(e for e in ev.aggregates.rows if categorize(e.loyalty, rec["category_bounds"]) == category)

    promoters, promoter_pct = rec["promoters"], rec["promoter_percentage"]
    if promoters > 0 and promoter_pct > PROMOTERS_HIGH_PCT:
        add(
            _opportunity(
                "opportunity-promoters",
                "recommendation",
                f"You have {promoters} Promoters ({promoter_pct:.1f}% of your customers), which is excellent. These "
                "customers are your brand advocates and represent a strong foundation for growth through "
                "word-of-mouth and referrals.",
                "high",
                entities=in_category("promoters"),
                support=rec_support,
            ),
            promoters,
        )
    elif promoters > 0 and promoter_pct > PROMOTERS_GROWING_PCT:
        add(
            _opportunity(
                "opportunity-promoters-growing",
                "recommendation",
                f"You have {promoters} Promoters ({promoter_pct:.1f}% of your customers). Whilst this is a good "
                "foundation, there's an opportunity to grow this segment through exceptional customer experiences "
                "and referral incentives.",
                "medium",
                entities=in_category("promoters"),
                support=rec_support,
            ),
            promoters,
        )

    if rec["passives"] > 0 and rec["passive_percentage"] > PASSIVES_PCT:
        add(
            _opportunity(
                "opportunity-passives",
                "recommendation",
                f"You have {rec['passives']} Passives ({rec['passive_percentage']:.1f}% of your customers) who are "
                "neutral about your brand. These customers represent a significant opportunity to move them into the "
                "Promoter category through targeted engagement and improved experiences.",
                "medium",
                entities=in_category("passives"),
                support=rec_support,
            ),
            rec["passives"],
        )

    def distribution_support(segment: str | None) -> DistributionSupport:
        return DistributionSupport(
            counts=dict(ev.distribution["counts"]),
            percentages=dict(ev.distribution["percentages"]),
            segment=segment,
            count=ev.count(segment) if segment else None,
            percentage=ev.percentage(segment) if segment else None,
        )

    neutral = ev.distribution["neutral"]
    if neutral["count"] > 0:
        n = neutral["count"]
        add(
            _opportunity(
                "opportunity-neutral-customers",
                "distribution",
                f"You have {n} Neutral customer{plural(n)} ({neutral['percentage']:.1f}% of your total) who are at a "
                "critical transition point. They haven't formed strong opinions yet, making them more receptive to "
                "positive experiences, and with targeted engagement they could easily become Loyalists or even "
                "Apostles. Their neutral position makes them low-hanging fruit for conversion.",
                "high",
                segment="neutral",
                entities=supporting(ev.aggregates.members("neutral")),
                support=distribution_support(None),
            ),
            n,
        )

    merc_count, merc_pct = ev.count("mercenaries"), ev.percentage("mercenaries")
    if merc_count > 0 and merc_pct > MERCENARIES_HIGH_PCT:
        add(
            _opportunity(
                "opportunity-mercenaries",
                "distribution",
                f"Your Mercenaries segment represents {merc_pct:.1f}% of your customer base. These customers are "
                "satisfied but not yet loyal, and they represent a significant opportunity to build stronger "
                "relationships and increase retention through targeted loyalty programmes.",
                "medium",
                segment="mercenaries",
                entities=supporting(ev.aggregates.members("mercenaries")),
                support=distribution_support("mercenaries"),
            ),
            merc_count,
        )
    elif merc_count > 0 and merc_pct > MERCENARIES_GROWING_PCT:
        add(
            _opportunity(
                "opportunity-mercenaries-growing",
                "distribution",
                f"You have {merc_count} {display_name('mercenaries', merc_count)} ({merc_pct:.1f}% of your customer "
                "base). These satisfied but not yet loyal customers represent an opportunity to strengthen "
                "relationships and improve retention.",
                "low",
                segment="mercenaries",
                entities=supporting(ev.aggregates.members("mercenaries")),
                support=distribution_support("mercenaries"),
            ),
            merc_count,
        )

    host_count, host_pct = ev.count("hostages"), ev.percentage("hostages")
    if host_count > 0 and host_pct > HOSTAGES_PCT:
        add(
            _opportunity(
                "opportunity-hostages",
                "distribution",
                f"You have {host_count} {display_name('hostages', host_count)} ({host_pct:.1f}% of your customers) "
                "who are loyal but not satisfied. These customers represent an opportunity to improve their "
                "satisfaction and convert them into true Loyalists through better product or service experiences.",
                "high",
                segment="hostages",
                entities=supporting(ev.aggregates.members("hostages")),
                support=distribution_support("hostages"),
            ),
            host_count,
        )

    if ev.distribution["is_balanced"] and ev.distribution["largest"]:
        add(
            _opportunity(
                "opportunity-balanced-distribution",
                "distribution",
                "Your customer base shows a relatively balanced distribution across segments, which is a healthy "
                "foundation. This diversity reduces risk and provides multiple pathways for growth and engagement.",
                "low",
                support=distribution_support(None),
            ),
            0,
        )

    if not candidates and ev.total > 0:
        largest = ev.distribution["largest"]
        text = (
            f"With {ev.total} customer{plural(ev.total)} in your analysis, there are always opportunities for growth "
            "and improvement. Focus on understanding your customer segments and identifying areas where you can "
            "enhance satisfaction and loyalty."
        )
        if largest:
            text += f" Your largest segment is {display_name(largest)}, which represents a key area for strategic focus."
        add(_opportunity("opportunity-general-growth", "distribution", text, "medium", support=distribution_support(largest)), 0)

    return ranked(candidates)
