"""Action statements: per-segment playbooks plus proximity-driven actions."""

from dataclasses import dataclass

from segment_insights.models import ConversionSupport, DistributionSupport, ProximitySupport, Statement, display_name
from segment_insights.statements.common import Evaluations, plural, roi, supporting


@dataclass(frozen=True)
class Play:
    """One playbook entry. Texts take {name} (segment name, singular for one entity)."""

    slug: str
    priority: int
    actionability: str
    expected_impact: str
    b2c: str
    b2b: str | None = None

    def text(self, audience: str, name: str) -> str:
        template = self.b2b if audience == "b2b" and self.b2b else self.b2c
        return template.format(name=name)


PLAYBOOKS: dict[str, list[Play]] = {
    "loyalists": [
        Play(
            "strengthen-loyalty", 1, "medium", "high",
            "You might implement retention strategies for {name} such as personalised offers, loyalty programmes, "
            "and exclusive perks.",
            "You might implement retention strategies for {name} such as account-based success plans, renewal "
            "workshops, and executive relationship mapping.",
        ),
        Play(
            "encourage-advocacy", 2, "medium", "high",
            "You could encourage advocacy among {name}. You might invite them to share their positive experiences "
            "and become brand ambassadors.",
            "You could encourage advocacy among {name}. You might invite them to share measurable outcomes and "
            "become references in case studies, webinars, or peer customer communities.",
        ),
        Play(
            "reward-loyalty", 3, "easy", "medium",
            "You might reward {name} for their loyalty through exclusive benefits, early access to new products, or "
            "special recognition programmes.",
        ),
        Play(
            "involve-them-in-your-success", 4, "easy", "medium",
            "You could involve {name} in your success by seeking their feedback, inviting them to beta test new "
            "products, or including them in co-creation initiatives.",
            "You could involve {name} in your success by running joint roadmap reviews, inviting them to pilot "
            "features in production contexts, or including them in customer advisory boards.",
        ),
    ],
    "mercenaries": [
        Play(
            "know-customers", 1, "medium", "high",
            "You might consider knowing your {name}. The first question you could have an answer to is why they buy "
            "from you and what they like from your offering. You might make sure you keep that, and improve it when "
            "possible.",
        ),
        Play(
            "know-competitors", 2, "medium", "high",
            "For {name}, you might consider understanding your competitors. The second question could be what others "
            "are offering that you don't. You may find some easy wins and good ideas to implement in your brand.",
        ),
        Play(
            "build-relationships", 3, "medium", "medium",
            "You could build relationships with {name} by creating a sense of connection with the brand through "
            "personalised communications, loyalty programmes, or customer communities.",
            "You could build relationships with {name} by strengthening stakeholder trust through account reviews, "
            "success governance, and role-specific enablement.",
        ),
        Play(
            "reward", 4, "easy", "medium",
            "You might consider rewarding {name} by celebrating when they make a purchase. You could recognise their "
            "value with thank-you notes, anniversary discounts, or early access to new products.",
            "You might consider rewarding {name} by recognising expansion milestones, successful renewals, or "
            "adoption growth across teams, for example with executive thank-you outreach or priority access to "
            "roadmap features.",
        ),
        Play(
            "differentiate", 5, "hard", "high",
            "For {name}, you might differentiate beyond price by emphasising unique value propositions like quality, "
            "convenience, or user experience that competitors can't easily replicate.",
        ),
        Play(
            "simplify", 6, "medium", "medium",
            "You could simplify repurchasing for {name} by eliminating friction in the purchasing process, from easy "
            "online checkouts to convenient delivery options.",
            "You could simplify renewals and expansion for {name} by reducing procurement friction, streamlining "
            "legal and security steps, and clarifying implementation ownership.",
        ),
    ],
    "hostages": [
        Play(
            "dont-ignore", 1, "easy", "high",
            "It may be important not to overlook {name}. They are active customers who are already buying from you, "
            "so there may be no need to invest in expensive marketing campaigns to acquire them. Instead, you might "
            "focus on meeting their expectations by understanding their motivations and needs.",
        ),
        Play(
            "understand", 2, "medium", "high",
            "For {name}, you might consider understanding why they are not satisfied with your products and "
            "services. Your real interest might be on their lack of satisfaction, rather than their forced loyalty.",
        ),
        Play(
            "address", 3, "medium", "high",
            "You could address dissatisfaction among {name}. Knowing why you are not meeting their needs may uncover "
            "pain points that affect other segments in your customer base. You could address their concerns "
            "promptly and transparently to build trust.",
        ),
        Play(
            "create-path", 4, "hard", "high",
            "You might create a path to satisfaction for {name} by transitioning them into Loyalists through "
            "improved service, personalised solutions, or tailored engagement.",
        ),
        Play(
            "support", 5, "medium", "medium",
            "You could offer support to {name}. Your Customer Success strategy might count on special measures for "
            "this group, such as a dedicated account manager, direct support line, or more approachable channels.",
        ),
    ],
    "defectors": [
        Play(
            "prevent", 1, "medium", "high",
            "You may want to consider preventing future defections. {name} used to buy from you (or considered doing "
            "so), but at some point changed their minds. Running research to understand those frustrations could "
            "allow you to prevent those situations from affecting other customers.",
        ),
        Play(
            "damage-control", 2, "easy", "high",
            "For {name}, you might consider damage control. You could identify them as early as possible and read "
            "their reviews or customer support interactions to understand their grievances, rather than sending "
            "them surveys that they are very likely to ignore.",
        ),
        Play(
            "win-back", 3, "hard", "high",
            "You might consider winning {name} back. You could offer a personalised resolution to regain their "
            "trust. The first action could be the acknowledgment of mistakes and resolving issues; once the air is "
            "clear you might think about promotions and gestures of goodwill.",
        ),
        Play(
            "learn", 4, "easy", "medium",
            "You could learn from {name}. Analysing their feedback might help you uncover systemic issues and "
            "prevent future churn.",
        ),
    ],
    "neutral": [
        Play(
            "engage", 1, "easy", "high",
            "You may want to engage with Neutral customers promptly. It could be valuable to reach out to understand "
            "their experience and expectations before they drift in either direction.",
        ),
        Play(
            "create-moments", 2, "medium", "high",
            "You could create positive moments for Neutral customers by designing experiences that may tip them "
            "toward satisfaction and loyalty. Even small improvements could shift their trajectory.",
        ),
        Play(
            "gather-feedback", 3, "easy", "medium",
            "You might consider gathering feedback from Neutral customers. Their neutral position could be an "
            "opportunity to understand what would make them more satisfied and loyal.",
        ),
        Play(
            "personalised", 4, "medium", "medium",
            "You could provide personalised outreach to Neutral customers. Since they're not strongly committed, "
            "personalised attention may have a significant impact.",
        ),
        Play(
            "monitor", 5, "easy", "medium",
            "You may want to monitor Neutral customers closely. Early intervention, before they drift toward "
            "Hostages or Defectors, could make a significant difference.",
        ),
    ],
    "apostles": [
        Play(
            "celebrate", 1, "easy", "high",
            "You might celebrate and amplify. Publicly acknowledging and rewarding {name} for their advocacy through "
            "exclusive benefits, recognition programmes, or personalised thank-you notes could be very effective, "
            "and engaging with their posts on social media helps amplify positivity.",
            "You might celebrate and amplify. Publicly acknowledging and rewarding {name} for their advocacy could be "
            "very effective, through co-authored case studies, webinar participation, or recognition in industry "
            "communities.",
        ),
        Play(
            "leverage", 2, "medium", "high",
            "You might leverage the voice of {name}. You could invite them to become part of referral programmes, "
            "co-creation initiatives, or ambassador programmes, and share their testimonials across your marketing "
            "channels.",
            "You might leverage the voice of {name}. You could invite them to participate in reference programmes, "
            "product councils, or peer-to-peer customer sessions, and publish joint case studies with quantified "
            "outcomes.",
        ),
        Play(
            "maintain", 3, "medium", "high",
            "You might maintain satisfaction for {name}. You could continue delivering exceptional service and be "
            "proactive in gathering their feedback and addressing any potential issues.",
        ),
    ],
}


def conversion_impact(count: int, average_chance: float) -> str:
    if count >= 5 and average_chance >= 70:
        return "high"
    if count >= 3 and average_chance >= 50:
        return "medium"
    if count >= 2 and average_chance >= 30:
        return "medium"
    return "low"


def conversion_actionability(average_chance: float) -> str:
    if average_chance >= 75:
        return "easy"
    if average_chance >= 50:
        return "medium"
    return "hard"


def _action(
    statement_id: str,
    text: str,
    priority: int,
    actionability: str,
    expected_impact: str,
    segment: str | None,
    category: str,
    **kwargs,
) -> Statement:
    return Statement(
        id=statement_id,
        kind="action",
        category=category,
        text=text,
        priority=priority,
        actionability=actionability,
        expected_impact=expected_impact,
        roi=roi(expected_impact, actionability),
        segment=segment,
        **kwargs,
    )


def generate_actions(ev: Evaluations) -> list[Statement]:
    """
    Generate actions, unsorted.

    Each playbook attaches its entity list to the first action only. Priority
    0 is reserved for crisis prevention; conversion actions follow redemption.
    The assembler sorts the merged list by priority, then ROI.
    """
    actions: list[Statement] = []
    audience = ev.options.audience

    for segment, plays in PLAYBOOKS.items():
        count = ev.distribution["neutral"]["count"] if segment == "neutral" else ev.count(segment)
        if count <= 0:
            continue
        name = display_name(segment, count)
        members = supporting(ev.aggregates.members(segment))
        support = DistributionSupport(
            counts=dict(ev.distribution["counts"]),
            percentages=dict(ev.distribution["percentages"]),
            segment=segment,
            count=count,
            percentage=ev.distribution["neutral"]["percentage"] if segment == "neutral" else ev.percentage(segment),
        )
        for i, play in enumerate(plays):
            actions.append(
                _action(
                    f"action-{segment}-{play.slug}",
                    play.text(audience, name),
                    play.priority,
                    play.actionability,
                    play.expected_impact,
                    segment,
                    segment,
                    entities=members if i == 0 else (),
                    support=support,
                )
            )

    by_risk = {r["type"]: r for r in ev.proximity_eval["top_risks"]}
    by_opp = {o["type"]: o for o in ev.proximity_eval["top_opportunities"]}

    crisis = by_risk.get("loyalists_close_to_defectors")
    if crisis:
        n = crisis["count"]
        actions.append(
            _action(
                "action-crisis-prevention",
                f"{n} {display_name('loyalists', n)} {'is' if n == 1 else 'are'} at risk of becoming "
                f"{display_name('defectors', n)}. This may require attention. You might consider reaching out to "
                "understand their concerns and could take action to address issues before they churn.",
                0,
                "hard",
                "high",
                "loyalists",
                "proximity",
                entities=supporting(crisis["entities"]),
                support=ProximitySupport(relationship=crisis["type"], count=n, level=crisis["level"]),
            )
        )

    redemption = by_opp.get("defectors_close_to_loyalists")
    if redemption:
        n = redemption["count"]
        actions.append(
            _action(
                "action-redemption",
                f"{n} {display_name('defectors', n)} {'is' if n == 1 else 'are'} close to becoming "
                f"{display_name('loyalists', n)}. This could represent a high-value redemption opportunity. You might "
                "consider engaging them personally, addressing their past concerns, and demonstrating that you've "
                "learned from their feedback.",
                1,
                "hard",
                "high",
                "defectors",
                "proximity",
                entities=supporting(redemption["entities"]),
                support=ProximitySupport(relationship=redemption["type"], count=n, level=redemption["level"]),
            )
        )

    for i, conversion in enumerate(ev.conversions["opportunities"]):
        n, chance = conversion["count"], conversion["average_chance"]
        impact = conversion_impact(n, chance)
        actionability = conversion_actionability(chance)
        actions.append(
            _action(
                f"action-conversion-{conversion['from']}-to-{conversion['to']}",
                f"You might consider focusing on converting {n} customer{plural(n)} from "
                f"{display_name(conversion['from'])} to {display_name(conversion['to'])}. Average chances of "
                f"movement: {chance:.1f}%.",
                2 + i,
                actionability,
                impact,
                conversion["from"],
                "conversion",
                entities=supporting(conversion["entities"]),
                support=ConversionSupport(
                    from_segment=conversion["from"],
                    to_segment=conversion["to"],
                    count=n,
                    average_chance=chance,
                ),
            )
        )

    return actions
