"""Boundary-proximity analysis.

Finds entities sitting close to a quadrant boundary (lateral), close to the
opposite quadrant through the midpoint corner (diagonal), or close to a
special zone, and scores each one 0-100 (closer = higher).

The search area limits candidates to the few integer scale positions nearest
the midpoint on the source side of each crossed axis:

    positions on source side -> sorted by |p - midpoint|
    space cap: 0 positions -> 0, 1-3 -> 1, 4+ -> 2
    keep positions within SEARCH_AREA_LIMIT of the midpoint
    candidate must lie within [min(kept), max(kept)]
"""

import logging
from collections import defaultdict
from collections.abc import Iterable
from typing import Any

from segment_insights.analysis.quadrants import QuadrantClassifier, zone_boxes
from segment_insights.models import Entity, ScaleConfig

logger = logging.getLogger(__name__)

SEARCH_AREA_LIMIT = 2.0
SPECIAL_ZONE_REACH = 1.0
INDICATOR_MIN_COUNT = 3

# (from, to, crossed axis, source side is high)
LATERAL_RELATIONSHIPS: list[tuple[str, str, str, bool]] = [
    ("loyalists", "mercenaries", "loyalty", True),
    ("loyalists", "hostages", "satisfaction", True),
    ("mercenaries", "loyalists", "loyalty", False),
    ("mercenaries", "defectors", "satisfaction", True),
    ("hostages", "loyalists", "satisfaction", False),
    ("hostages", "defectors", "loyalty", True),
    ("defectors", "mercenaries", "satisfaction", False),
    ("defectors", "hostages", "loyalty", False),
]

DIAGONAL_RELATIONSHIPS: list[tuple[str, str]] = [
    ("loyalists", "defectors"),
    ("mercenaries", "hostages"),
    ("hostages", "mercenaries"),
    ("defectors", "loyalists"),
]

# Which side of each axis a macro quadrant occupies: (satisfaction high, loyalty high)
QUADRANT_SIDES = {
    "loyalists": (True, True),
    "mercenaries": (True, False),
    "hostages": (False, True),
    "defectors": (False, False),
}

CRISIS_INDICATORS = {
    "loyalists_close_to_mercenaries": "loyalists at risk of becoming mercenaries",
    "mercenaries_close_to_defectors": "mercenaries at risk of defection",
    "hostages_close_to_defectors": "hostages at risk of defection",
    "loyalists_close_to_defectors": "best customers near becoming worst",
}

OPPORTUNITY_INDICATORS = {
    "mercenaries_close_to_loyalists": "mercenaries moving toward loyalty",
    "hostages_close_to_loyalists": "hostages moving toward loyalty",
}


def relationship_key(from_segment: str, to_segment: str) -> str:
    return f"{from_segment}_close_to_{to_segment}"


def space_cap(available_positions: int) -> int:
    """How many boundary-nearest positions qualify for the search area."""
    if available_positions == 0:
        return 0
    if available_positions <= 3:
        return 1
    return 2


def search_range(low: int, high: int, midpoint: float, high_side: bool) -> tuple[float, float] | None:
    """Inclusive value range of the search area on one axis, or None if empty."""
    positions = [p for p in range(low, high + 1) if (p >= midpoint if high_side else p < midpoint)]
    ranked = sorted(positions, key=lambda p: abs(p - midpoint))[: space_cap(len(positions))]
    kept = [p for p in ranked if abs(p - midpoint) <= SEARCH_AREA_LIMIT]
    if not kept:
        return None
    return float(min(kept)), float(max(kept))


def proximity_score(distance: float, threshold: float) -> int:
    """0-100 score, 100 on the boundary, 0 at or beyond the threshold."""
    normalized = min(distance / threshold, 1.0)
    return max(0, min(100, round((1 - normalized) * 100)))


def lateral_level(distance: float) -> str:
    if distance <= 0.5:
        return "HIGH"
    if distance <= 1.0:
        return "MODERATE"
    return "LOW"


def diagonal_level(distance: float, threshold: float) -> str:
    ratio = distance / threshold
    if ratio <= 0.5:
        return "HIGH"
    if ratio <= 0.8:
        return "MODERATE"
    return "LOW"


def relationship_level(average_score: float) -> str:
    if average_score >= 75:
        return "HIGH"
    if average_score >= 50:
        return "MODERATE"
    return "LOW"


def unavailable_proximity(reason: str) -> dict[str, Any]:
    """Explicit unavailable state. Dependent statements are omitted downstream."""
    return {
        "available": False,
        "reason": reason,
        "threshold": None,
        "relationships": {},
        "summary": {
            "total_proximity_entities": 0,
            "average_score": 0,
            "crisis_indicators": [],
            "opportunity_indicators": [],
        },
        "crossroads": [],
    }


def analyze_proximity(
    entities: Iterable[Entity],
    classifier: QuadrantClassifier,
    scale: ScaleConfig,
    midpoint_set: bool = True,
    threshold: float = 2.0,
) -> dict[str, Any]:
    """
    Classify boundary-adjacent entities into proximity relationships.

    Args:
        entities: Full entity list; excluded, neutral and manually overridden
            entities are skipped
        classifier: Classifier bound to the active midpoint and zone options
        scale: Scale bounds for search areas and special zones
        midpoint_set: False when no midpoint was supplied (analysis unavailable)
        threshold: Maximum boundary distance considered "close"

    Returns:
        Dict with availability, non-empty relationships keyed
        "<from>_close_to_<to>", summary indicators and crossroads entities
    """
    if not midpoint_set:
        return unavailable_proximity("midpoint_not_set")

    midpoint = classifier.midpoint
    sat_bounds = scale.bounds("satisfaction")
    loy_bounds = scale.bounds("loyalty")

    # Group candidates by macro quadrant and by exact label
    by_macro: dict[str, list[Entity]] = defaultdict(list)
    by_label: dict[str, list[Entity]] = defaultdict(list)
    for entity in entities:
        if entity.excluded or classifier.is_neutral(entity) or classifier.has_override(entity):
            continue
        label = classifier.classify(entity)
        by_label[label].append(entity)
        by_macro[classifier.macro_segment(label)].append(entity)

    relationships: dict[str, dict[str, Any]] = {}

    # Lateral: cross one midpoint line
    for from_seg, to_seg, axis, high_side in LATERAL_RELATIONSHIPS:
        bounds = sat_bounds if axis == "satisfaction" else loy_bounds
        mid = midpoint.satisfaction if axis == "satisfaction" else midpoint.loyalty
        area = search_range(bounds[0], bounds[1], mid, high_side)
        if area is None:
            continue
        matches = []
        for entity in by_macro.get(from_seg, []):
            value = getattr(entity, axis)
            distance = value - mid if high_side else mid - value
            if area[0] <= value <= area[1] and 0 <= distance <= threshold:
                matches.append(
                    _match(entity, distance, proximity_score(distance, threshold), lateral_level(distance))
                )
        _add_relationship(relationships, from_seg, to_seg, "lateral", matches)

    # Diagonal: through the midpoint corner into the opposite quadrant
    for from_seg, to_seg in DIAGONAL_RELATIONSHIPS:
        sat_high, loy_high = QUADRANT_SIDES[from_seg]
        sat_area = search_range(sat_bounds[0], sat_bounds[1], midpoint.satisfaction, sat_high)
        loy_area = search_range(loy_bounds[0], loy_bounds[1], midpoint.loyalty, loy_high)
        if sat_area is None or loy_area is None:
            continue
        matches = []
        for entity in by_macro.get(from_seg, []):
            a, b = entity.satisfaction, entity.loyalty
            if not (sat_area[0] <= a <= sat_area[1] and loy_area[0] <= b <= loy_area[1]):
                continue
            distance = max(abs(a - midpoint.satisfaction), abs(b - midpoint.loyalty))
            if distance <= threshold:
                matches.append(
                    _match(
                        entity,
                        distance,
                        proximity_score(distance, threshold),
                        diagonal_level(distance, threshold),
                    )
                )
        _add_relationship(relationships, from_seg, to_seg, "diagonal", matches)

    # Special zones: within one cell (Chebyshev) of the target zone box
    if classifier.special_zones:
        boxes = zone_boxes(scale)
        pairs = [("defectors", "terrorists")]
        if classifier.near_zones:
            pairs[:0] = [("loyalists", "near_apostles"), ("near_apostles", "apostles")]
        else:
            pairs.insert(0, ("loyalists", "apostles"))
        for from_seg, to_seg in pairs:
            box = boxes[to_seg]
            if box.size <= 1:
                continue
            matches = []
            for entity in by_label.get(from_seg, []):
                a, b = entity.satisfaction, entity.loyalty
                if box.contains(a, b):
                    continue
                distance = box.distance(a, b)
                if distance <= SPECIAL_ZONE_REACH:
                    level = "HIGH" if distance == 0 else "MODERATE"
                    matches.append(_match(entity, distance, round(100 - 50 * distance), level))
            _add_relationship(relationships, from_seg, to_seg, "special_zone", matches)

    summary = _summary(relationships)
    crossroads = _crossroads(relationships)

    logger.debug(
        f"Proximity: {len(relationships)} relationships, "
        f"{summary['total_proximity_entities']} entities, {len(crossroads)} crossroads"
    )

    return {
        "available": True,
        "reason": None,
        "threshold": threshold,
        "relationships": relationships,
        "summary": summary,
        "crossroads": crossroads,
    }


def _match(entity: Entity, distance: float, score: int, level: str) -> dict[str, Any]:
    return {
        "id": entity.id,
        "name": entity.name,
        "email": entity.email,
        "satisfaction": entity.satisfaction,
        "loyalty": entity.loyalty,
        "distance": distance,
        "score": score,
        "level": level,
    }


def _add_relationship(
    relationships: dict[str, dict[str, Any]],
    from_seg: str,
    to_seg: str,
    kind: str,
    matches: list[dict[str, Any]],
) -> None:
    """Store a relationship if any entity qualified. Entities are unique by id."""
    unique: dict[str, dict[str, Any]] = {}
    for match in matches:
        unique.setdefault(match["id"], match)
    if not unique:
        return

    members = sorted(unique.values(), key=lambda m: -m["score"])
    count = len(members)
    average_score = sum(m["score"] for m in members) / count
    key = relationship_key(from_seg, to_seg)
    relationships[key] = {
        "key": key,
        "from": from_seg,
        "to": to_seg,
        "type": kind,
        "count": count,
        "position_count": len({(m["satisfaction"], m["loyalty"]) for m in members}),
        "average_distance": sum(m["distance"] for m in members) / count,
        "average_score": average_score,
        "level": relationship_level(average_score),
        "entities": members,
    }


def _summary(relationships: dict[str, dict[str, Any]]) -> dict[str, Any]:
    all_members = [m for rel in relationships.values() for m in rel["entities"]]
    average_score = sum(m["score"] for m in all_members) / len(all_members) if all_members else 0

    def indicators(catalogue: dict[str, str]) -> list[dict[str, Any]]:
        found = []
        for key, label in catalogue.items():
            count = relationships.get(key, {}).get("count", 0)
            if count >= INDICATOR_MIN_COUNT:
                found.append({"relationship": key, "count": count, "label": f"{count} {label}"})
        return found

    return {
        "total_proximity_entities": sum(rel["count"] for rel in relationships.values()),
        "average_score": round(average_score),
        "crisis_indicators": indicators(CRISIS_INDICATORS),
        "opportunity_indicators": indicators(OPPORTUNITY_INDICATORS),
    }


def _crossroads(relationships: dict[str, dict[str, Any]]) -> list[dict[str, Any]]:
    """Entities appearing in two or more relationships."""
    seen: dict[str, dict[str, Any]] = {}
    for key, rel in relationships.items():
        for member in rel["entities"]:
            entry = seen.setdefault(
                member["id"],
                {"id": member["id"], "name": member["name"], "relationships": [], "max_score": 0},
            )
            entry["relationships"].append(key)
            entry["max_score"] = max(entry["max_score"], member["score"])

    crossroads = []
    for entry in seen.values():
        n = len(entry["relationships"])
        if n < 2:
            continue
        if n >= 3 or entry["max_score"] >= 75:
            value = "HIGH"
        elif entry["max_score"] >= 50:
            value = "MODERATE"
        else:
            value = "LOW"
        crossroads.append({**entry, "strategic_value": value})
    return crossroads


def actionable_conversions(proximity: dict[str, Any]) -> dict[str, list[dict[str, Any]]]:
    """
    Group proximity entities into conversion opportunities and warnings.

    Each (from, to) pair becomes one conversion with its unique entities and
    the mean proximity score as the average chance of movement.
    """
    if not proximity.get("available"):
        return {"opportunities": [], "warnings": []}

    groups: dict[tuple[str, str], dict[str, Any]] = {}
    seen: set[str] = set()
    for rel in proximity["relationships"].values():
        for member in rel["entities"]:
            dedupe_key = f"{member['id']}::{rel['from']}::{rel['to']}"
            if dedupe_key in seen:
                continue
            seen.add(dedupe_key)
            group = groups.setdefault(
                (rel["from"], rel["to"]),
                {"from": rel["from"], "to": rel["to"], "entities": []},
            )
            group["entities"].append(member)

    opportunities: list[dict[str, Any]] = []
    warnings: list[dict[str, Any]] = []
    for (from_seg, to_seg), group in groups.items():
        members = group["entities"]
        conversion = {
            **group,
            "count": len(members),
            "average_chance": sum(m["score"] for m in members) / len(members),
        }
        (opportunities if is_positive_movement(from_seg, to_seg) else warnings).append(conversion)

    opportunities.sort(key=lambda c: -c["average_chance"])
    warnings.sort(key=lambda c: -c["average_chance"])
    return {"opportunities": opportunities, "warnings": warnings}


_STRONG = {"loyalists", "apostles", "near_apostles"}
_WEAK = {"defectors", "terrorists"}
_MOVEMENT_ORDER = {
    "apostles": 1,
    "near_apostles": 2,
    "loyalists": 3,
    "mercenaries": 4,
    "hostages": 5,
    "defectors": 6,
    "terrorists": 7,
}


def is_positive_movement(from_segment: str, to_segment: str) -> bool:
    """Whether moving from one segment to another is an improvement worth pursuing."""
    if to_segment in _WEAK:
        return False
    if from_segment in _STRONG:
        return False
    if to_segment in _STRONG:
        return True
    if from_segment in _WEAK:
        return True
    return _MOVEMENT_ORDER.get(to_segment, 99) < _MOVEMENT_ORDER.get(from_segment, 99)
