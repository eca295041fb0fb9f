"""Classification, aggregation, proximity and historical movement analysis."""

from segment_insights.analysis.aggregate import Aggregates, aggregate
from segment_insights.analysis.historical import analyze_history
from segment_insights.analysis.proximity import actionable_conversions, analyze_proximity
from segment_insights.analysis.quadrants import QuadrantClassifier, classify_point

__all__ = [
    "Aggregates",
    "aggregate",
    "analyze_history",
    "actionable_conversions",
    "analyze_proximity",
    "QuadrantClassifier",
    "classify_point",
]
