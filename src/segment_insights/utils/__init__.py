"""Utility modules."""

from segment_insights.utils.normalize import canonical_dumps, report_fingerprint, sanitize_nan_inf
from segment_insights.utils.provenance import build_error_response, build_meta
from segment_insights.utils.sanitize import sanitize_date, sanitize_email, sanitize_text
from segment_insights.utils.validators import check_rule, validate_scores

__all__ = [
    "canonical_dumps",
    "report_fingerprint",
    "sanitize_nan_inf",
    "build_error_response",
    "build_meta",
    "sanitize_date",
    "sanitize_email",
    "sanitize_text",
    "check_rule",
    "validate_scores",
]
