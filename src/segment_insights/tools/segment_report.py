"""Segment report tool."""

import asyncio
import logging
import os
from concurrent.futures import ThreadPoolExecutor
from time import perf_counter
from typing import Any

from segment_insights.errors import InvalidInput
from segment_insights.models import Entity, Midpoint, ReportOptions, ScaleConfig
from segment_insights.report import generate_report
from segment_insights.utils.normalize import report_fingerprint
from segment_insights.utils.provenance import build_error_response, build_meta
from segment_insights.utils.sanitize import NAME_MAX_LENGTH, sanitize_date, sanitize_email, sanitize_text

logger = logging.getLogger(__name__)

_executor = ThreadPoolExecutor(max_workers=2)


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise InvalidInput(f"Environment variable {name} must be a number, got {raw!r}", name, raw) from None


def parse_entity(record: dict[str, Any], index: int) -> Entity:
    """Build an Entity from an input record, sanitizing free-text fields."""
    if not isinstance(record, dict):
        raise InvalidInput(f"Entity #{index} must be an object, got {type(record).__name__}", "entities", record)

    entity_id = record.get("id")
    if entity_id is None or not str(entity_id).strip():
        raise InvalidInput(f"Entity #{index} is missing an id", "id", entity_id)

    scores = {}
    for axis in ("satisfaction", "loyalty"):
        if axis not in record:
            raise InvalidInput(f"Entity '{entity_id}' is missing {axis}", axis, None)
        scores[axis] = record[axis]

    return Entity(
        id=str(entity_id).strip(),
        satisfaction=scores["satisfaction"],
        loyalty=scores["loyalty"],
        name=sanitize_text(record.get("name"), max_length=NAME_MAX_LENGTH),
        email=sanitize_email(record.get("email")),
        date=sanitize_date(record.get("date")),
        excluded=bool(record.get("excluded", False)),
    )


def parse_midpoint(midpoint: dict[str, Any] | None) -> Midpoint | None:
    if midpoint is None:
        return None
    if not isinstance(midpoint, dict) or "satisfaction" not in midpoint or "loyalty" not in midpoint:
        raise InvalidInput("midpoint must have 'satisfaction' and 'loyalty'", "midpoint", midpoint)
    return Midpoint(midpoint["satisfaction"], midpoint["loyalty"])


async def segment_report(
    entities: list[dict[str, Any]],
    satisfaction_scale: str = "1-10",
    loyalty_scale: str = "1-10",
    midpoint: dict[str, Any] | None = None,
    special_zones: bool = False,
    near_zones: bool = False,
    apostles_zone_size: int = 1,
    terrorists_zone_size: int = 1,
    naming_scheme: str | None = None,
    audience: str | None = None,
    manual_overrides: dict[str, str] | None = None,
    report_date: str | None = None,
    include_chart_placeholders: bool = True,
) -> dict[str, Any]:
    """
    Generate a segmentation report for a snapshot of survey responses.

    Args:
        entities: Records with id, satisfaction, loyalty and optional name,
            email, date (ISO) and excluded flag
        satisfaction_scale: Satisfaction scale as "min-max" (default: 1-10)
        loyalty_scale: Loyalty scale as "min-max" (default: 1-10)
        midpoint: {"satisfaction": x, "loyalty": y}; omit to use the scale
            midpoint (boundary proximity is then unavailable)
        special_zones: Detect apostle and terrorist zones in the corners
        near_zones: Also detect the near zones around them
        apostles_zone_size: Apostles zone edge length in scale units
        terrorists_zone_size: Terrorists zone edge length in scale units
        naming_scheme: "modern" or "classic" (default: DEFAULT_NAMING_SCHEME or modern)
        audience: "b2c" or "b2b" (default: DEFAULT_AUDIENCE or b2c)
        manual_overrides: Entity id -> forced segment
        report_date: Report date to stamp (default: today, UTC)
        include_chart_placeholders: Emit one supporting image per chart finding

    Returns:
        Dict with findings, risks, opportunities, actions, supporting images,
        metadata, duplicate entity lists, a deterministic fingerprint and meta
    """
    start_time = perf_counter()

    try:
        parsed = [parse_entity(record, i) for i, record in enumerate(entities or [])]
        scale = ScaleConfig(
            satisfaction=satisfaction_scale,
            loyalty=loyalty_scale,
            apostles_zone_size=apostles_zone_size,
            terrorists_zone_size=terrorists_zone_size,
        )
        options = ReportOptions(
            special_zones=special_zones,
            near_zones=near_zones,
            naming_scheme=naming_scheme or os.environ.get("DEFAULT_NAMING_SCHEME", "modern"),
            audience=audience or os.environ.get("DEFAULT_AUDIENCE", "b2c"),
            manual_overrides=manual_overrides or {},
            proximity_threshold=_env_float("PROXIMITY_THRESHOLD", 2.0),
            report_date=report_date,
            include_chart_placeholders=include_chart_placeholders,
        )
        active_midpoint = parse_midpoint(midpoint)
    except ValueError as e:
        return build_error_response(
            error_type="invalid_input",
            message=str(e),
            field=getattr(e, "field", None),
        )

    loop = asyncio.get_running_loop()
    try:
        report = await loop.run_in_executor(
            _executor, lambda: generate_report(parsed, active_midpoint, scale, options)
        )
    except InvalidInput as e:
        return build_error_response(error_type="invalid_input", message=str(e), field=e.field)
    except Exception as e:
        logger.exception(f"Report generation failed for {len(parsed)} entities")
        return build_error_response(error_type="analysis_failed", message=f"Report generation failed: {e}")

    result = report.to_dict()
    result["fingerprint"] = report_fingerprint(result)
    result["meta"] = build_meta("generate_segment_report", (perf_counter() - start_time) * 1000)
    return result
