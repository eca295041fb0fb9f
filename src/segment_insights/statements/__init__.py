"""Statement generators: findings, charts, risks, opportunities and actions."""

from segment_insights.statements.actions import generate_actions
from segment_insights.statements.charts import generate_chart_findings
from segment_insights.statements.common import Evaluations
from segment_insights.statements.duplicates import find_duplicate_entity_lists
from segment_insights.statements.findings import generate_findings
from segment_insights.statements.historical import generate_historical
from segment_insights.statements.opportunities import generate_opportunities
from segment_insights.statements.risks import generate_risks
from segment_insights.statements.terminology import apply_terminology

__all__ = [
    "Evaluations",
    "apply_terminology",
    "find_duplicate_entity_lists",
    "generate_actions",
    "generate_chart_findings",
    "generate_findings",
    "generate_historical",
    "generate_opportunities",
    "generate_risks",
]
