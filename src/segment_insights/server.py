"""Segment Insights MCP Server using FastMCP."""

import json
import logging
import os
from typing import Any

from fastmcp import FastMCP

from segment_insights import SCHEMA_VERSION, SERVER_VERSION
from segment_insights.prompts.templates import get_prompt
from segment_insights.tools import segment_report

# Configure logging
log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
logging.basicConfig(level=getattr(logging, log_level, logging.INFO))
logger = logging.getLogger(__name__)

# Create FastMCP server instance
mcp = FastMCP(
    name="segment-insights",
)


# ============================================================================
# TOOLS
# ============================================================================


@mcp.tool
async def generate_segment_report(
    entities: list[dict[str, Any]],
    satisfaction_scale: str = "1-10",
    loyalty_scale: str = "1-10",
    midpoint: dict[str, float] | None = None,
    special_zones: bool = False,
    near_zones: bool = False,
    apostles_zone_size: int = 1,
    terrorists_zone_size: int = 1,
    naming_scheme: str | None = None,
    audience: str | None = None,
    manual_overrides: dict[str, str] | None = None,
    report_date: str | None = None,
    include_chart_placeholders: bool = True,
) -> str:
    """
    Generate a customer segmentation report from satisfaction/loyalty survey data.

    Classifies each respondent into Loyalists, Mercenaries, Hostages or
    Defectors (plus optional Advocate/Troll zones), then produces findings,
    risks, opportunities and a prioritised action plan.

    Args:
        entities: Survey records. Example:
                  [{"id": "c1", "satisfaction": 8, "loyalty": 9, "email": "a@x.com", "date": "2024-03-01"}]
        satisfaction_scale: Satisfaction scale as "min-max" (default: 1-10)
        loyalty_scale: Loyalty scale as "min-max" (default: 1-10)
        midpoint: Custom thresholds {"satisfaction": 6, "loyalty": 6} (default: scale midpoint)
        special_zones: Detect Advocates/Trolls in the scale corners
        near_zones: Also detect Near-Advocates/Near-Trolls
        apostles_zone_size: Advocates zone size in scale units (default: 1)
        terrorists_zone_size: Trolls zone size in scale units (default: 1)
        naming_scheme: "modern" (Advocates/Trolls) or "classic" (Apostles/Terrorists)
        audience: "b2c" or "b2b" wording for actions
        manual_overrides: Entity id -> segment, e.g. {"c7": "hostages"}
        report_date: Date to stamp on the report (YYYY-MM-DD, default: today UTC)
        include_chart_placeholders: Include one supporting image entry per chart

    Returns:
        JSON with findings, risks, opportunities, actions, supporting images, metadata
    """
    result = await segment_report(
        entities=entities,
        satisfaction_scale=satisfaction_scale,
        loyalty_scale=loyalty_scale,
        midpoint=midpoint,
        special_zones=special_zones,
        near_zones=near_zones,
        apostles_zone_size=apostles_zone_size,
        terrorists_zone_size=terrorists_zone_size,
        naming_scheme=naming_scheme,
        audience=audience,
        manual_overrides=manual_overrides,
        report_date=report_date,
        include_chart_placeholders=include_chart_placeholders,
    )
    return json.dumps(result, indent=2, default=str)


# ============================================================================
# PROMPTS
# ============================================================================


@mcp.prompt
def segment_report_summary(audience: str = "b2c") -> str:
    """Executive summary of a segmentation report."""
    result = get_prompt("segment_report_summary", {"audience": audience})
    if result:
        return result["messages"][0]["content"]
    return "Summarise my customer segmentation using generate_segment_report."


@mcp.prompt
def action_plan(audience: str = "b2c", max_actions: str = "5") -> str:
    """Prioritised action plan from report actions and risks."""
    result = get_prompt("action_plan", {"audience": audience, "max_actions": max_actions})
    if result:
        return result["messages"][0]["content"]
    return "Build an action plan from generate_segment_report actions."


# ============================================================================
# ENTRY POINT
# ============================================================================


def main() -> None:
    """Run the MCP server."""
    logger.info(f"Starting Segment Insights MCP Server v{SERVER_VERSION} (schema v{SCHEMA_VERSION})")
    mcp.run()


if __name__ == "__main__":
    main()
