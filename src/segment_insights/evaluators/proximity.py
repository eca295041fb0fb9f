"""Proximity evaluator: ranks risk and opportunity relationships."""

from typing import Any

WARNING_RELATIONSHIPS = [
    "loyalists_close_to_mercenaries",
    "loyalists_close_to_hostages",
    "mercenaries_close_to_defectors",
    "hostages_close_to_defectors",
    "defectors_close_to_terrorists",
    "loyalists_close_to_defectors",
    "mercenaries_close_to_hostages",
]

OPPORTUNITY_RELATIONSHIPS = [
    "mercenaries_close_to_loyalists",
    "hostages_close_to_loyalists",
    "defectors_close_to_mercenaries",
    "defectors_close_to_hostages",
    "loyalists_close_to_apostles",
    "loyalists_close_to_near_apostles",
    "near_apostles_close_to_apostles",
    "hostages_close_to_mercenaries",
    "defectors_close_to_loyalists",
]

TOP_N = 5

SEVERITY_BY_LEVEL = {"HIGH": "high", "MODERATE": "medium"}
# A relationship far from its boundary is a low risk but a wide-open opportunity
IMPACT_BY_LEVEL = {"LOW": "high", "MODERATE": "medium"}


def empty_proximity_evaluation() -> dict[str, Any]:
    return {
        "available": False,
        "has_risks": False,
        "has_opportunities": False,
        "high_risk_count": 0,
        "high_opportunity_count": 0,
        "crisis_indicators": [],
        "opportunity_indicators": [],
        "top_risks": [],
        "top_opportunities": [],
    }


def evaluate_proximity(proximity: dict[str, Any] | None) -> dict[str, Any]:
    """
    Extract the top risk and opportunity relationships.

    Relationships are ranked by unique entity count (stable for ties) and
    truncated to the top five of each kind. An unavailable analysis yields
    the empty evaluation so dependent statements are simply omitted.
    """
    if not proximity or not proximity.get("available"):
        return empty_proximity_evaluation()

    relationships = proximity["relationships"]

    def collect(keys: list[str], field: str, mapping: dict[str, str]) -> list[dict[str, Any]]:
        found = []
        for key in keys:
            rel = relationships.get(key)
            if not rel:
                continue
            count = len({m["id"] for m in rel["entities"]}) or rel["count"]
            if count == 0:
                continue
            found.append(
                {
                    "type": key,
                    "from": rel["from"],
                    "to": rel["to"],
                    "count": count,
                    "level": rel["level"],
                    field: mapping.get(rel["level"], "low"),
                    "entities": rel["entities"],
                }
            )
        found.sort(key=lambda item: -item["count"])
        return found

    risks = collect(WARNING_RELATIONSHIPS, "severity", SEVERITY_BY_LEVEL)
    opportunities = collect(OPPORTUNITY_RELATIONSHIPS, "impact", IMPACT_BY_LEVEL)
    summary = proximity["summary"]

    return {
        "available": True,
        "has_risks": bool(risks),
        "has_opportunities": bool(opportunities),
        "high_risk_count": sum(1 for r in risks if r["severity"] == "high"),
        "high_opportunity_count": sum(1 for o in opportunities if o["impact"] == "high"),
        "crisis_indicators": summary["crisis_indicators"],
        "opportunity_indicators": summary["opportunity_indicators"],
        "top_risks": risks[:TOP_N],
        "top_opportunities": opportunities[:TOP_N],
    }
