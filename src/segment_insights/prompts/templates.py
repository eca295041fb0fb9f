"""Prompt templates for segmentation reports."""

from typing import Any

# Prompt definitions
PROMPTS = {
    "segment_report_summary": {
        "description": "Executive summary of a segmentation report",
        "arguments": [{"name": "audience", "required": False}],
    },
    "action_plan": {
        "description": "Prioritised action plan from report actions and risks",
        "arguments": [
            {"name": "audience", "required": False},
            {"name": "max_actions", "required": False},
        ],
    },
}


def list_prompts() -> list[dict[str, Any]]:
    """List available prompts."""
    return [
        {
            "name": name,
            "description": info["description"],
            "arguments": info["arguments"],
        }
        for name, info in PROMPTS.items()
    ]


def get_prompt(name: str, arguments: dict[str, str]) -> dict[str, Any] | None:
    """
    Get a prompt by name with arguments filled in.

    Returns dict with 'messages' key for MCP GetPromptResult.
    """
    if name not in PROMPTS:
        return None

    audience = arguments.get("audience") or "b2c"

    if name == "segment_report_summary":
        return {
            "messages": [
                {
                    "role": "user",
                    "content": f"""Summarise my customer segmentation for a {audience} audience.

1. Call generate_segment_report with my survey records (id, satisfaction, loyalty, and optional name, email, date).
   Pass audience="{audience}" and my midpoint if I have set one.
2. Read findings in order: they are already grouped by section.

Then provide:
1. **Snapshot** (2-3 sentences): sample size, dominant segment, recommendation score
2. **Top Risks**: up to 3, quoting severity and affected customer counts
3. **Top Opportunities**: up to 3, quoting impact
4. **Movement**: what historical progress shows, if present (respect its confidence flags)

Use only numbers that appear in the report. Do not invent percentages.""",
                }
            ]
        }

    if name == "action_plan":
        max_actions = arguments.get("max_actions") or "5"
        return {
            "messages": [
                {
                    "role": "user",
                    "content": f"""Build an action plan from my segmentation report.

1. Call generate_segment_report with my survey records and audience="{audience}".
2. Take the first {max_actions} actions (already sorted by priority, then ROI).

For each action provide:
- **What**: the action in one sentence
- **Who**: the segment and number of customers listed
- **Why**: the linked risk or opportunity, if any
- **Effort vs Impact**: actionability and expected impact

Flag statements that share the same customer list (duplicate_entity_lists) so the same customers
are not contacted twice.""",
                }
            ]
        }

    return None
