"""Segmentation analysis tools."""

from segment_insights.tools.segment_report import segment_report

__all__ = ["segment_report"]
