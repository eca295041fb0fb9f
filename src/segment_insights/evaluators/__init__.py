"""Pure evaluators over aggregated analysis results."""

from segment_insights.evaluators.distribution import evaluate_distribution
from segment_insights.evaluators.proximity import evaluate_proximity
from segment_insights.evaluators.recommendation import evaluate_recommendation
from segment_insights.evaluators.sample_size import evaluate_sample_size
from segment_insights.evaluators.statistics import evaluate_statistics

__all__ = [
    "evaluate_distribution",
    "evaluate_proximity",
    "evaluate_recommendation",
    "evaluate_sample_size",
    "evaluate_statistics",
]
