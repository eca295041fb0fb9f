"""Text findings: what the data says, before any recommendation."""

import logging

from segment_insights.models import (
    DistributionSupport,
    ProximitySupport,
    RecommendationSupport,
    SampleSupport,
    Statement,
    StatisticsSupport,
    display_name,
)
from segment_insights.statements.common import Evaluations, is_are, join_names, plural, relationship_name, supporting

logger = logging.getLogger(__name__)

NEUTRAL_HIGH_PCT = 10.0
NEUTRAL_LOW_PCT = 5.0

SEGMENT_DESCRIPTIONS = {
    "loyalists": (
        "Loyalists are the reason why your business is still alive. They are happy customers who are also "
        "willing to come back to you. They're the foundation of your business's stability and growth. However, "
        "loyalty is fragile and competition is fierce, so you should not take their loyalty for granted. Your "
        "focus should be to keep them engaged and satisfied, attract more customers from other segments, and "
        "work towards upgrading them to Apostles."
    ),
    "apostles": (
        "Apostles are your most valuable customers: they are both highly satisfied and highly loyal, and they "
        "actively promote and recommend your brand to others. They represent a strong foundation for growth "
        "through word-of-mouth and referrals, and should be given opportunities to become ambassadors, "
        "influencers, or part of VIP referral programmes."
    ),
    "near_apostles": (
        "Near-Apostles are Loyalists who are on the verge of becoming full advocates. They love your brand and "
        "are loyal, but haven't yet actively promoted or recommended you to others. Your priority should be "
        "promoting them into full Apostles by activating their advocacy potential and giving them the tools and "
        "incentives to become your brand ambassadors."
    ),
    "mercenaries": (
        "Mercenaries are satisfied customers who know you, like you, and trust you, but they also shop with "
        "competitors. Rather than seeing this as a problem, recognise it as a massive opportunity. Your goal "
        "should be to keep your products and services in their top suppliers to buy from as frequently as "
        "possible, rather than trying to make them exclusively loyal. Most importantly, you need to be present "
        "in their minds when they're ready to make a purchase decision."
    ),
    "hostages": (
        "Hostages are customers who continue to buy from you despite being dissatisfied. They're staying out of "
        "necessity rather than choice, which could be due to contracts, lack of alternatives, or other "
        "constraints. They will churn as soon as a better option becomes available, and they could already be "
        "damaging your reputation through negative feedback. You need to urgently investigate why they're not "
        "satisfied and address the underlying issues before competitors provide alternatives."
    ),
    "defectors": (
        "Defectors are customers who are both dissatisfied and disloyal: they've either already left you or are "
        "on the brink of doing so. These customers are likely sharing negative feedback and may be actively "
        "harming your reputation. You need to investigate what went wrong and implement recovery strategies. "
        "However, before getting obsessed with this group, consider that some customers may have made one-off "
        "purchases or bought from you in error, which isn't necessarily a problem depending on your industry."
    ),
}

# Description order: the apostle family first, then everything else by share
_DESCRIPTION_GROUPS = (("near_apostles",), ("apostles",), ("loyalists",), ("mercenaries", "hostages", "defectors"))

OPENING_STATEMENTS = {
    "apostles": (
        "Apostles is the most popular segment with {count} customers, representing {pct}% of the total. This is "
        "your most popular group of customers, according to the data analysed. It's wonderful to see that most "
        "of your customers are potential advocates of your brand!"
    ),
    "near_apostles": (
        "Near-Apostles is the most popular segment with {count} customers, representing {pct}% of the total. "
        "This is excellent news: Near-Apostles are Loyalists who are on the verge of becoming full advocates. "
        "Your priority should be promoting them into full Apostles by activating their advocacy potential."
    ),
    "loyalists": (
        "Loyalists is the most popular segment with {count} customers, representing {pct}% of the total. This "
        "is excellent news: Loyalists are happy customers who are also willing to come back to you, and they're "
        "the foundation of your business's stability and growth. However, remember that loyalty is fragile and "
        "competition is fierce, so you should not take their loyalty for granted."
    ),
    "mercenaries": (
        "Mercenaries is the most popular segment with {count} customers, representing {pct}% of the total. This "
        "group represents satisfied customers who know you, like you, and trust you, but they also shop with "
        "competitors. Rather than seeing this as a problem, recognise it as a massive opportunity: your goal "
        "should be to keep your products and services in their top suppliers to buy from as frequently as "
        "possible."
    ),
    "hostages": (
        "Hostages is the most popular segment with {count} customers, representing {pct}% of the total. This is "
        "a serious concern that requires immediate attention. A significant portion of your customer base is "
        "unhappy with your products or services and will churn as soon as a better option becomes available. "
        "You need to urgently investigate why they're not satisfied and address the underlying issues before "
        "competitors provide alternatives."
    ),
    "defectors": (
        "Defectors is the most popular segment with {count} customers, representing {pct}% of the total. This is "
        "a critical situation that demands immediate action. Having this as your largest segment indicates "
        "serious problems with your products, services, or customer experience. You need to urgently "
        "investigate what went wrong, address the root causes, and implement recovery strategies before this "
        "situation worsens."
    ),
    "terrorists": (
        "Terrorists is the most popular segment with {count} customers, representing {pct}% of the total. This "
        "is a serious concern that requires immediate attention. These customers are extremely dissatisfied and "
        "disloyal, and they may actively discourage others from buying. You need to investigate why such a "
        "large portion of your customer base falls into this category and take urgent action."
    ),
}

ZERO_SEGMENT_CONTEXT = {
    "defectors": (
        "This is unusual, as most businesses have some Defectors. This could indicate excellent customer "
        "satisfaction, or it might suggest your data collection is missing customers who have already left."
    ),
    "hostages": (
        "This suggests customers aren't feeling trapped: they're either satisfied or have left. This is generally "
        "positive, though it's worth ensuring you're capturing all customer experiences."
    ),
    "mercenaries": (
        "This suggests customers are either very loyal or very disloyal, with little in between. Check your other "
        "segments to see which way it leans."
    ),
    "loyalists": (
        "This is concerning: having no Loyalists suggests significant challenges with customer satisfaction and "
        "loyalty. This requires immediate investigation."
    ),
}

_POSITIVE_SEGMENTS = {"loyalists", "mercenaries", "apostles", "near_apostles"}
_NEGATIVE_SEGMENTS = {"hostages", "defectors", "terrorists", "near_terrorists"}

HIGH_SCORE_WARNINGS = [
    (
        90,
        "recommendation-score-exceptionally-high",
        "Your Recommendation Score of {score} is exceptionally high, which is extremely rare in genuine customer "
        "experience scenarios. This strongly suggests that your data collection method may be biased or "
        "selective: almost every customer rated the question with one of the two highest possible answers. "
        "We would recommend reviewing your data collection methodology to ensure you're gathering responses "
        "from a representative sample across all customer touchpoints, including challenging moments.",
    ),
    (
        80,
        "recommendation-score-very-high",
        "Your Recommendation Score of {score} is very high, which is uncommon in typical customer experience "
        "scenarios. This may indicate that your data collection approach could be selective or biased. The most "
        "revealing moment for the question is not when a customer has just joined, but when they have had "
        "opportunities to be frustrated or disappointed. Consider whether you're collecting responses after "
        "service issues, complaints, or other challenging moments in the customer journey.",
    ),
    (
        70,
        "recommendation-score-quite-high",
        "Your Recommendation Score of {score} is quite high. Whilst this is encouraging, it's worth considering "
        "whether the way data is being gathered could potentially be biased. For example, are you being "
        "selective about who you ask, or asking only during particularly positive moments of the customer "
        "journey? A Recommendation Score is typically more reliable when responses are collected across "
        "different touchpoints, including moments when customers might be frustrated or disappointed.",
    ),
]

INCOMPLETE_SCALE_TEXT = (
    "It's worth noting that your Recommendation Score analysis may have an incomplete scope, as not all values "
    "on the scale are represented in your customer responses. A Recommendation Score is typically more accurate "
    "when responses are distributed across the full range of possible values. This could indicate that your data "
    "collection might be missing certain customer segments or experiences."
)

UNBALANCED_DETRACTORS_NOTE = (
    "The absence of Detractors in your data is unusual and may indicate that you're not capturing the full "
    "range of customer experiences. "
)
UNBALANCED_SCALE_NOTE = (
    "Not all scale values are represented in your responses, which could suggest that certain customer "
    "segments or experiences are missing from your analysis. "
)


class _Findings:
    """Accumulates findings with generation-order priorities."""

    def __init__(self) -> None:
        self.items: list[Statement] = []

    def add(self, statement_id: str, category: str, text: str, **kwargs) -> None:
        self.items.append(
            Statement(
                id=statement_id,
                kind="finding",
                category=category,
                text=text,
                priority=len(self.items) + 1,
                **kwargs,
            )
        )


def generate_findings(ev: Evaluations) -> list[Statement]:
    """
    Generate text findings in a fixed, deterministic order.

    Findings cover sample size, segment descriptions, distribution shape,
    neutral customers, axis statistics, boundary proximity and the
    recommendation score. Chart findings are generated separately.
    """
    out = _Findings()
    _sample_findings(ev, out)
    _description_findings(ev, out)
    _distribution_findings(ev, out)
    _neutral_findings(ev, out)
    _statistics_findings(ev, out)
    _proximity_findings(ev, out)
    _recommendation_findings(ev, out)
    logger.debug(f"Generated {len(out.items)} findings")
    return out.items


def _sample_findings(ev: Evaluations, out: _Findings) -> None:
    sample = ev.sample
    total = sample["total"]
    if total == 0:
        return
    missing = tuple(sample["missing_quadrants"])
    support = SampleSupport(total=total, is_low=sample["is_low"], is_high=sample["is_high"], missing_segments=missing)

    if sample["is_low"]:
        out.add(
            "sample-low",
            "data",
            f"It's important to highlight that we have a limited sample of {total} customers, "
            "which is not too high.",
            support=support,
        )
        if sample["has_good_representation"]:
            out.add(
                "sample-representation-good",
                "data",
                "However, although the number of customers is limited, they are actually somewhat spread out "
                "across the different categories, which might make us consider them as representative, even if "
                "the volume isn't too high. You will probably need to carry out some further analysis to "
                "determine if all personas and all significant segments are represented in this group.",
                support=support,
            )
        else:
            out.add(
                "sample-representation-poor",
                "data",
                "In addition to the somewhat small group of customers to analyse, it should be noted that not all "
                f"groups have sufficient representation, with only a few or no customers at all in some quadrants "
                f"({join_names(missing)}). Any analysis on this data might be incomplete, if not potentially "
                "misleading. You should determine whether the sample is representative enough for your personas, "
                "the moments of truth covered and the possible customer journeys, and if it is not, find ways to "
                "add customer data to this analysis.",
                support=support,
            )
    elif sample["is_high"]:
        out.add(
            "sample-high",
            "data",
            f"We've got a good sample of {total} customers that should be a good representation of your customer "
            "base. However, far from making assumptions, you should make sure that this sample is representative "
            "enough for the personas, the moments of truth covered, the possible customer journeys covered, and "
            "whatever else applies to consider different representations.",
            support=support,
        )
        if sample["has_good_representation"]:
            out.add(
                "sample-high-representation",
                "data",
                "We seem to have a good representation of customers in all groups, which constitutes a healthy "
                "scenario where all possible mindsets and customer types are covered in the analysis.",
                support=support,
            )
        else:
            out.add(
                "sample-high-poor-representation",
                "data",
                f"Despite having a good sample size of {total} customers, it should be noted that not all groups "
                "have sufficient representation, with only a few or no customers at all in some quadrants "
                f"({join_names(missing)}). Any analysis on these underrepresented groups might be incomplete, if "
                "not potentially misleading.",
                support=support,
            )


def _distribution_support(ev: Evaluations, segment: str | None = None) -> DistributionSupport:
    dist = ev.distribution
    return DistributionSupport(
        counts=dict(dist["counts"]),
        percentages=dict(dist["percentages"]),
        segment=segment,
        count=ev.count(segment) if segment else None,
        percentage=ev.percentage(segment) if segment else None,
    )


def _description_findings(ev: Evaluations, out: _Findings) -> None:
    for group in _DESCRIPTION_GROUPS:
        present = [s for s in group if s in SEGMENT_DESCRIPTIONS and ev.count(s) > 0]
        if "near_apostles" in present and not ev.options.near_zones:
            present.remove("near_apostles")
        present.sort(key=lambda s: -ev.percentage(s))
        for segment in present:
            count = ev.count(segment)
            name = display_name(segment)
            out.add(
                f"quadrant-description-{segment}",
                "data",
                f"{name}: {SEGMENT_DESCRIPTIONS[segment]} You currently have {count} {display_name(segment, count)} "
                f"({ev.percentage(segment):.1f}% of your customer base).",
                segment=segment,
                entities=supporting(ev.aggregates.members(segment)),
                support=_distribution_support(ev, segment),
            )


def _distribution_findings(ev: Evaluations, out: _Findings) -> None:
    dist = ev.distribution
    largest = dist["largest"]
    if not largest:
        return

    name = display_name(largest)
    count = dist["largest_count"]
    pct = dist["largest_percentage"]
    template = OPENING_STATEMENTS.get(largest)
    if template:
        opening = template.format(count=count, pct=f"{pct:.1f}")
    else:
        opening = f"{name} is the most popular segment with {count} customers, representing {pct:.1f}% of the total."
    out.add(
        f"dominant-{largest}",
        "distribution",
        opening,
        segment=largest,
        support=_distribution_support(ev, largest),
    )

    followed = dist["closely_followed"]
    if followed:
        names = join_names(followed)
        verb = is_are(len(followed))
        if largest == "hostages":
            text = (
                f"The situation is particularly concerning as {names} {verb} not far behind, indicating "
                "widespread issues across your customer base."
            )
        elif largest in ("defectors", "terrorists"):
            text = (
                f"The situation is particularly alarming as {names} {verb} not far behind, suggesting systemic "
                "issues affecting a large portion of your customer base."
            )
        else:
            text = (
                f"However, you shouldn't be tempted to rest on your laurels, as although {name} is your most "
                f"popular group, {names} {verb} not far behind."
            )
            if largest == "near_apostles":
                text += " Focus on converting these Near-Apostles into full advocates while maintaining your position."
        out.add("distribution-close-competition", "distribution", text, segment=largest,
                support=_distribution_support(ev, largest))
    elif not dist["is_skewed"]:
        if largest == "hostages":
            text = (
                "This concentration of dissatisfied customers represents a significant risk to your business "
                "stability and reputation."
            )
        elif largest in ("defectors", "terrorists"):
            text = (
                "This concentration of Defectors represents an urgent crisis that requires immediate intervention "
                "to prevent further customer loss and reputational damage."
            )
        else:
            text = (
                "However, you shouldn't be tempted to rest on your laurels, as these customers might move to other "
                "groups if you don't take good care of them."
            )
            if largest == "near_apostles":
                text += " Act now to activate their advocacy potential."
        out.add("distribution-no-close-competition", "distribution", text, segment=largest,
                support=_distribution_support(ev, largest))

    if dist["is_skewed"]:
        out.add(
            "distribution-skewed",
            "distribution",
            f"Your customer base is heavily concentrated in the {name} segment, with {pct:.1f}% of customers "
            "falling into this category. Whilst this might seem positive, it also indicates a lack of diversity in "
            "your customer base, which could pose risks if market conditions change.",
            segment=largest,
            support=_distribution_support(ev, largest),
        )
    elif dist["is_balanced"]:
        out.add(
            "distribution-balanced",
            "distribution",
            "Your customer base shows a relatively balanced distribution across different segments, which "
            "suggests a healthy mix of customer types and reduces the risk of over-reliance on a single segment.",
            support=_distribution_support(ev),
        )

    tied = dist["tied_quadrants"]
    if dist["is_tied"] and tied:
        has_positive = any(s in _POSITIVE_SEGMENTS for s in tied)
        has_negative = any(s in _NEGATIVE_SEGMENTS for s in tied)
        if has_positive and has_negative:
            interpretation = (
                "a divided customer base, with equal numbers of satisfied and dissatisfied customers. This "
                "represents both opportunity and risk."
            )
        elif has_negative:
            interpretation = (
                "significant challenges with customer satisfaction across your base, requiring urgent attention."
            )
        else:
            interpretation = (
                "a healthy mix of satisfied customers, with some showing strong loyalty and others shopping "
                "around. Both are positive indicators."
            )
        tied_count = ev.count(tied[0])
        out.add(
            "distribution-tied",
            "distribution",
            f"Your customer distribution shows {join_names(tied)} are equally represented, each with {tied_count} "
            f"customers ({ev.percentage(tied[0]):.1f}% of the total). This balanced distribution suggests "
            f"{interpretation}",
            support=_distribution_support(ev),
        )

    # Too-empty segments read as part of the segment descriptions
    for segment in dist["too_empty"]:
        seg_count = ev.count(segment)
        seg_name = display_name(segment)
        out.add(
            f"distribution-too-empty-{segment}",
            "data",
            f"It's worth noting that the {seg_name} segment is significantly underrepresented, with only "
            f"{seg_count} customer{plural(seg_count)} ({ev.percentage(segment):.1f}% of your base). This could "
            "indicate that this customer type is rare in your market, that your data collection might be missing "
            "certain customer segments or experiences, or alternatively, it could reflect that your company is "
            f"performing exceptionally well with minimal {seg_name}. Consider whether this underrepresentation "
            "reflects your actual customer base or suggests gaps in your data collection approach.",
            segment=segment,
            entities=supporting(ev.aggregates.members(segment)),
            support=_distribution_support(ev, segment),
        )

    for segment in dist["too_full"]:
        out.add(
            f"distribution-too-full-{segment}",
            "distribution",
            f"Your customer distribution shows a strong concentration in the {display_name(segment)} segment, with "
            f"{ev.percentage(segment):.1f}% of customers. Whilst this might seem positive, it also indicates a "
            "lack of diversity in your customer base, which could pose risks if market conditions change or if "
            "this segment's needs evolve.",
            segment=segment,
            support=_distribution_support(ev, segment),
        )

    for segment in dist["zero_quadrants"]:
        reasons = "serious issues" if segment == "loyalists" else "either excellent performance or gaps in data collection"
        out.add(
            f"distribution-zero-{segment}",
            "distribution",
            f"It's worth noting that you have no customers in the {display_name(segment)} segment. "
            f"{ZERO_SEGMENT_CONTEXT[segment]} This could indicate {reasons}, or it might suggest that your data "
            "collection is missing certain customer types or experiences.",
            segment=segment,
            support=_distribution_support(ev, segment),
        )


def _neutral_findings(ev: Evaluations, out: _Findings) -> None:
    neutral = ev.distribution["neutral"]
    count, pct = neutral["count"], neutral["percentage"]
    if count <= 0:
        return

    support = _distribution_support(ev)
    entities = supporting(ev.aggregates.members("neutral"))
    out.add(
        "neutral-customers",
        "distribution",
        f"You have {count} Neutral customer{plural(count)} ({pct:.1f}% of your total) who {is_are(count)} exactly "
        "at the midpoint: neither satisfied nor dissatisfied, neither loyal nor disloyal. These customers are at a "
        "critical transition point where they could move in literally any direction. With the right engagement, "
        "they could easily become Loyalists or even Apostles, but without attention, they could drift toward "
        "Hostages or Defectors. You should engage with them immediately to understand their experience and "
        "monitor their movement closely.",
        segment="neutral",
        entities=entities,
        support=support,
    )
    if pct > NEUTRAL_HIGH_PCT:
        out.add(
            "neutral-customers-high",
            "distribution",
            "The significant number of Neutral customers suggests that your brand hasn't made a strong impression "
            "yet, or that customers are genuinely indifferent. This is an opportunity to proactively shape their "
            "experience and guide them toward positive quadrants.",
            segment="neutral",
            support=support,
        )
    elif pct < NEUTRAL_LOW_PCT:
        out.add(
            "neutral-customers-low",
            "distribution",
            "Whilst the number of Neutral customers is small, each one represents a critical opportunity. Don't "
            "overlook them, as targeted engagement could quickly convert them into Loyalists.",
            segment="neutral",
            support=support,
        )


_AXIS_PHRASES = {
    "satisfaction": {
        "above": "indicating that customers are generally satisfied with your products or services.",
        "below": "which suggests there's room for improvement in how customers perceive your products or services.",
        "at": "indicating a balanced position where customers are neither particularly satisfied nor dissatisfied.",
    },
    "loyalty": {
        "above": "suggesting that customers are generally loyal to your brand.",
        "below": "indicating that customers may be more likely to switch to competitors.",
        "at": "indicating a balanced position where customers are neither particularly loyal nor disloyal.",
    },
}


def _statistics_findings(ev: Evaluations, out: _Findings) -> None:
    labels = dict(zip(("satisfaction", "loyalty"), ev.options.axis_labels))
    for axis in ("satisfaction", "loyalty"):
        stats = ev.statistics[axis]
        average = stats["average"]
        if average is None:
            continue
        threshold_text = "your current threshold" if stats["is_custom_threshold"] else "the midpoint"
        if stats["is_above"]:
            position, relation = "above", "is above"
        elif stats["is_below"]:
            position, relation = "below", "is below"
        else:
            position, relation = "at", "is exactly at"

        text = (
            f"Your average {labels[axis].lower()} score of {average:.1f} {relation} {threshold_text}, "
            f"{_AXIS_PHRASES[axis][position]}"
        )
        if position == "below" and stats["is_very_demanding"]:
            text += (
                f" However, it's worth noting that your threshold ({stats['active_midpoint']:.1f}) is significantly "
                f"higher than the scale midpoint ({stats['scale_midpoint']:.1f}), which may be quite demanding."
            )
        out.add(
            f"{axis}-{position}-average",
            "data",
            text,
            support=StatisticsSupport(
                axis=axis,
                average=average,
                mode=stats["mode"],
                threshold=stats["active_midpoint"],
                is_custom_threshold=stats["is_custom_threshold"],
                is_very_demanding=stats["is_very_demanding"],
            ),
        )


def _busiest(items: list[dict], side: str) -> tuple[str | None, int]:
    """Segment with the largest summed count on one side of the relationships (first wins ties)."""
    totals: dict[str, int] = {}
    for item in items:
        totals[item[side]] = totals.get(item[side], 0) + item["count"]
    if not totals:
        return None, 0
    segment = max(totals, key=lambda s: totals[s])
    return segment, totals[segment]


def _proximity_findings(ev: Evaluations, out: _Findings) -> None:
    prox = ev.proximity_eval
    if not prox["available"] or ev.total == 0:
        return

    dist = ev.distribution
    largest = dist["largest"]
    largest_name = display_name(largest) if largest else None
    largest_count = ev.count(largest) if largest else 0
    has_risks, has_opps = prox["has_risks"], prox["has_opportunities"]
    risk_segment, risk_count = _busiest(prox["top_risks"], "from")
    opp_segment, opp_count = _busiest(prox["top_opportunities"], "to")

    support = ProximitySupport(
        relationship=None,
        count=sum(r["count"] for r in prox["top_risks"]) + sum(o["count"] for o in prox["top_opportunities"]),
        high_risk_count=prox["high_risk_count"],
        high_opportunity_count=prox["high_opportunity_count"],
    )

    def largest_at_risk() -> str:
        return (
            f"Notably, {largest_name} is your largest segment ({largest_count} customers), and it's also the group "
            f"with the most customers at risk ({risk_count} customers). This means you need to be particularly "
            f"careful, as out of your {largest_count} {largest_name}, you're at risk of losing {risk_count} "
            "customers to less favourable quadrants. "
        )

    def largest_growing() -> str:
        return (
            f"Notably, {largest_name} is your largest segment ({largest_count} customers), and it's also the group "
            f"with the most potential for growth. You could potentially gain {opp_count} more {largest_name} from "
            f"other groups, totalling {largest_count + opp_count} customers in this segment. "
        )

    def risk_clause() -> str:
        return (
            f"The {display_name(risk_segment)} segment has the most customers at risk of negative movement "
            f"({risk_count} customers). "
        )

    def opportunity_clause() -> str:
        return (
            f"The {display_name(opp_segment)} segment has the most potential for positive movement, with "
            f"{opp_count} customers close to moving into it. "
        )

    if has_risks and has_opps:
        text = (
            f"The proximity analysis reveals {prox['high_risk_count']} high-risk relationships and "
            f"{prox['high_opportunity_count']} high-opportunity relationships. "
        )
        if largest and risk_segment == largest:
            text += largest_at_risk()
        elif largest and opp_segment == largest:
            text += largest_growing()
        if risk_segment and risk_segment != largest:
            text += risk_clause()
        if opp_segment and opp_segment != largest:
            text += opportunity_clause()
        text += (
            "Customers near quadrant boundaries are particularly important to monitor, as they may be at risk of "
            "moving to less desirable quadrants, or have the potential to move to more positive segments with the "
            "right engagement."
        )
        out.add("proximity-overview", "proximity", text, support=support)
    elif has_risks:
        text = (
            f"The proximity analysis identifies {prox['high_risk_count']} high-risk relationships where customers "
            "are close to moving to less desirable quadrants. "
        )
        if largest and risk_segment == largest:
            text += largest_at_risk()
        elif risk_segment:
            text += risk_clause()
        text += "These boundary customers require immediate attention to prevent negative movement."
        out.add("proximity-risks-only", "proximity", text, support=support)
    elif has_opps:
        text = (
            f"The proximity analysis reveals {prox['high_opportunity_count']} high-opportunity relationships where "
            "customers are close to moving to more positive quadrants. "
        )
        if largest and opp_segment == largest:
            text += largest_growing()
        elif opp_segment:
            text += opportunity_clause()
        text += "These customers represent potential for growth and should be prioritised for targeted engagement."
        out.add("proximity-opportunities-only", "proximity", text, support=support)
    else:
        text = (
            "The proximity analysis examines customers who are positioned near quadrant boundaries, which helps "
            "identify both risks and opportunities. In your case, the analysis shows that most customers are "
            "well-positioned within their quadrants, with fewer boundary cases requiring immediate attention. "
        )
        if largest:
            text += (
                f"This is particularly notable for your largest segment, {largest_name}, which represents "
                f"{largest_count} customers ({ev.percentage(largest):.1f}% of your base), suggesting they are "
                "stable and well-anchored in their current position. "
            )
        if dist["is_balanced"]:
            text += (
                "Combined with your relatively balanced distribution across segments, this suggests stable "
                "customer relationships across your entire base. "
            )
        elif dist["is_skewed"] and largest:
            text += (
                f"While your customer base is concentrated in {largest_name}, the lack of proximity risks suggests "
                "that this concentration is stable rather than fragile. "
            )
        text += (
            "However, it's still important to monitor for any shifts over time, as early detection of boundary "
            "movements can help you take proactive measures."
        )
        out.add("proximity-no-boundary-cases", "proximity", text, support=support)
        return

    if has_risks:
        top = prox["top_risks"][0]
        text = f"The most significant risk is {top['count']} customers in the {relationship_name(top['from'], top['to'])} relationship. "
        if top["from"] == largest:
            text += (
                f"Since {display_name(top['from'])} is your largest segment, this represents a particularly "
                "concerning risk to your customer base. "
            )
        text += "These customers are at risk of moving to a less favourable quadrant and require immediate intervention."
        out.add(
            "proximity-top-risk",
            "proximity",
            text,
            severity=top["severity"],
            segment=top["from"],
            entities=supporting(top["entities"]),
            support=ProximitySupport(relationship=top["type"], count=top["count"], level=top["level"]),
        )

    if has_opps:
        top = prox["top_opportunities"][0]
        text = (
            f"The most significant opportunity is {top['count']} customers in the "
            f"{relationship_name(top['from'], top['to'])} relationship. "
        )
        if top["to"] == largest:
            text += (
                f"Since {display_name(top['to'])} is already your largest segment, this represents a valuable "
                "opportunity to further strengthen your position. "
            )
        text += (
            "These customers are close to moving to a more positive quadrant and represent a high-value opportunity "
            "for targeted engagement."
        )
        out.add(
            "proximity-top-opportunity",
            "proximity",
            text,
            impact=top["impact"],
            segment=top["from"],
            entities=supporting(top["entities"]),
            support=ProximitySupport(relationship=top["type"], count=top["count"], level=top["level"]),
        )


def _recommendation_findings(ev: Evaluations, out: _Findings) -> None:
    rec = ev.recommendation
    score = rec["score"]
    if rec["total"] == 0 or score == 0:
        return

    support = RecommendationSupport(
        score=score,
        promoters=rec["promoters"],
        passives=rec["passives"],
        detractors=rec["detractors"],
        total=rec["total"],
    )

    if score > 20 and rec["has_unbalanced_data"]:
        opening = "appears strong and positive, with significantly more" if score > 30 else "appears positive, showing that you have more"
        text = (
            f"Your Recommendation Score of {score:.1f} {opening} promoters than detractors. However, this result may "
            "be conditioned by the fact that your data collection might be somewhat incomplete or biased. "
        )
        if rec["detractors"] == 0:
            text += UNBALANCED_DETRACTORS_NOTE
        if rec["has_incomplete_scale"]:
            text += UNBALANCED_SCALE_NOTE
        text += "A Recommendation Score is typically more accurate when responses are distributed across the full range of possible values."
    elif score > 30:
        text = (
            f"Your Recommendation Score of {score:.1f} is strong and positive, indicating that you have significantly "
            "more promoters than detractors. You may want to consider focusing on maintaining this strong position "
            "and investigating specific improvements, rather than obsessing over the number."
        )
    elif score > 20:
        text = (
            f"Your Recommendation Score of {score:.1f} is positive, showing that you have more promoters than "
            "detractors. You seem to be in a strong position. You may want to consider investigating specific "
            "improvements and finding quick wins from your Detractors, rather than obsessing over the number."
        )
    elif score > 10:
        text = (
            f"Your Recommendation Score of {score:.1f} is positive, showing that you have more promoters than "
            "detractors. You seem to be on the right track. You may want to consider continuing to focus on growing "
            "your Promoter base and reducing Detractors."
        )
    elif score > 0:
        text = (
            f"Your Recommendation Score of {score:.1f} is positive, showing that you have more promoters than "
            "detractors. Whilst this may be encouraging, there may still be room to grow the Promoter base and "
            "reduce Detractors."
        )
    else:
        text = (
            f"Your Recommendation Score of {score:.1f} is negative, indicating that you have more detractors than "
            "promoters, which may be a concern that needs addressing."
        )
    out.add("recommendation-score", "recommendation", text, support=support)

    for floor, statement_id, template in HIGH_SCORE_WARNINGS:
        if score >= floor:
            out.add(statement_id, "recommendation", template.format(score=f"{score:.1f}"), support=support)
            break

    if rec["has_incomplete_scale"]:
        out.add("recommendation-score-incomplete-scale", "recommendation", INCOMPLETE_SCALE_TEXT, support=support)
