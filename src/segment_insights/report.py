"""
Report assembly: runs every analysis once and orders the generated statements.

generate_report() is pure apart from two edges: the UTC clock (only when no
report_date is supplied) and the optional capture_chart callback.
"""

import logging
from collections.abc import Iterable
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any

from segment_insights import SCHEMA_VERSION
from segment_insights.analysis import (
    QuadrantClassifier,
    actionable_conversions,
    aggregate,
    analyze_history,
    analyze_proximity,
)
from segment_insights.errors import DataUnavailable
from segment_insights.evaluators import (
    evaluate_distribution,
    evaluate_proximity,
    evaluate_recommendation,
    evaluate_sample_size,
    evaluate_statistics,
)
from segment_insights.models import (
    Entity,
    Midpoint,
    Report,
    ReportOptions,
    ScaleConfig,
    Statement,
    SupportingImage,
)
from segment_insights.statements import (
    Evaluations,
    apply_terminology,
    find_duplicate_entity_lists,
    generate_actions,
    generate_chart_findings,
    generate_findings,
    generate_historical,
    generate_opportunities,
    generate_risks,
)
from segment_insights.utils.validators import validate_scores

logger = logging.getLogger(__name__)

FINDING_CATEGORY_ORDER = ["data", "recommendation", "concentration", "distribution", "proximity", "historical"]
MAIN_CHART_ID = "chart-main-visualisation"
# Findings shown directly under the main chart
_MAIN_CHART_FOLLOWERS = ("quadrant-description-", "distribution-too-empty-")


def build_evaluations(
    entities: list[Entity],
    midpoint: Midpoint | None,
    scale: ScaleConfig,
    options: ReportOptions,
) -> Evaluations:
    """Run classification, aggregation, analyses and evaluators once."""
    active_midpoint = midpoint if midpoint is not None else scale.midpoint()
    classifier = QuadrantClassifier(
        active_midpoint,
        scale,
        special_zones=options.special_zones,
        near_zones=options.near_zones,
        overrides=options.manual_overrides,
    )

    aggregates = aggregate(entities, classifier)
    proximity = analyze_proximity(
        entities,
        classifier,
        scale,
        midpoint_set=midpoint is not None,
        threshold=options.proximity_threshold,
    )
    history = analyze_history(entities, classifier.classify, options.ranking)

    return Evaluations(
        aggregates=aggregates,
        distribution=evaluate_distribution(aggregates.counts, aggregates.neutral),
        sample=evaluate_sample_size(aggregates.total, aggregates.macro_counts),
        statistics=evaluate_statistics(aggregates.statistics, scale, midpoint),
        recommendation=evaluate_recommendation(aggregates.loyalty_values, scale.bounds("loyalty")),
        proximity=proximity,
        proximity_eval=evaluate_proximity(proximity),
        conversions=actionable_conversions(proximity),
        history=history,
        scale=scale,
        options=options,
    )


def order_findings(text_findings: list[Statement], chart_findings: list[Statement]) -> list[Statement]:
    """
    Interleave text and chart findings by category.

    Each category contributes its text findings (by priority) followed by its
    charts. Segment descriptions and too-empty findings are pulled out and
    placed right after the main visualisation chart.
    """
    followers = [f for f in text_findings if f.id.startswith(_MAIN_CHART_FOLLOWERS)]
    others = [f for f in text_findings if not f.id.startswith(_MAIN_CHART_FOLLOWERS)]

    ordered: list[Statement] = []
    for category in FINDING_CATEGORY_ORDER:
        ordered.extend(sorted((f for f in others if f.category == category), key=lambda f: f.priority))
        for chart in sorted((c for c in chart_findings if c.category == category), key=lambda c: c.priority):
            ordered.append(chart)
            if chart.id == MAIN_CHART_ID:
                ordered.extend(sorted(followers, key=lambda f: f.priority))
    return ordered


def capture_images(findings: Iterable[Statement], options: ReportOptions) -> list[SupportingImage]:
    """One image per chart finding; a textual placeholder when capture is unavailable."""
    if not options.include_chart_placeholders:
        return []

    images = []
    for finding in findings:
        if not finding.is_chart or finding.chart_id is None:
            continue
        caption = finding.support.caption if finding.support is not None else finding.chart_id
        image_ref = None
        if options.capture_chart is not None:
            try:
                image_ref = options.capture_chart(finding.chart_id, caption)
            except DataUnavailable as e:
                logger.warning(f"Chart capture failed for {finding.chart_id}: {e.reason}")
            except Exception as e:
                logger.warning(f"Chart capture failed for {finding.chart_id}: {type(e).__name__}: {e}")
        images.append(
            SupportingImage(
                statement_id=finding.id,
                chart_id=finding.chart_id,
                caption=caption,
                image_ref=image_ref,
                placeholder=None if image_ref else f"[Chart: {caption}]",
            )
        )
    return images


def generate_report(
    entities: list[Entity],
    midpoint: Midpoint | None,
    scale_config: ScaleConfig,
    options: ReportOptions | None = None,
) -> Report:
    """
    Generate the full report for one snapshot of entities.

    Args:
        entities: Survey observations (excluded entities are ignored by analyses)
        midpoint: Active axis thresholds, or None to fall back to the scale
            midpoint (boundary proximity is then unavailable)
        scale_config: Declared axis scales and special-zone sizes
        options: Report options (defaults when omitted)

    Returns:
        Immutable Report

    Raises:
        InvalidInput: non-finite scores or malformed configuration
    """
    options = options or ReportOptions()
    entities = list(entities)
    validate_scores(entities)

    ev = build_evaluations(entities, midpoint, scale_config, options)
    historical = generate_historical(ev)

    findings = order_findings(generate_findings(ev), generate_chart_findings(ev))
    risks = _renumber([*historical["risks"], *generate_risks(ev)])
    opportunities = _renumber([*historical["opportunities"], *generate_opportunities(ev)])
    actions = sorted(
        [*generate_actions(ev), *historical["actions"]],
        key=lambda a: (a.priority, -(a.roi or 0)),
    )

    scheme = options.naming_scheme
    findings, risks, opportunities, actions = (
        [replace(s, text=apply_terminology(s.text, scheme)) for s in section]
        for section in (findings, risks, opportunities, actions)
    )

    duplicates = find_duplicate_entity_lists([*risks, *opportunities, *actions])
    if duplicates:
        logger.debug(f"{len(duplicates)} entity lists shared between statements")

    report_date = options.report_date or datetime.now(timezone.utc).date().isoformat()
    metadata: dict[str, Any] = {
        "total_customers": ev.total,
        "report_date": report_date,
        "scales": {"satisfaction": scale_config.satisfaction, "loyalty": scale_config.loyalty},
        "audience_context": options.audience,
        "naming_scheme": scheme,
        "schema_version": SCHEMA_VERSION,
        "ranking_version": options.ranking.version,
        "historical_confidence": historical["confidence"],
        "statement_counts": {
            "findings": len(findings),
            "risks": len(risks),
            "opportunities": len(opportunities),
            "actions": len(actions),
        },
    }

    report = Report(
        date=report_date,
        findings=tuple(findings),
        opportunities=tuple(opportunities),
        risks=tuple(risks),
        actions=tuple(actions),
        supporting_images=tuple(capture_images(findings, options)),
        metadata=metadata,
        duplicate_entity_lists=duplicates,
    )
    _validate_report_invariants(report)
    logger.debug(
        f"Report for {ev.total} entities: {len(findings)} findings, {len(risks)} risks, "
        f"{len(opportunities)} opportunities, {len(actions)} actions"
    )
    return report


def _renumber(statements: list[Statement]) -> list[Statement]:
    return [replace(s, priority=i + 1) for i, s in enumerate(statements)]


def _validate_report_invariants(report: Report) -> None:
    """
    Check internal consistency of an assembled report.

    Invariants checked:
    1. Statement ids are unique within each section
    2. Every statement sits in the section matching its kind
    3. Findings start with the main visualisation chart when data is present
    4. Actions are ordered by priority, then ROI (descending)
    5. With placeholders enabled, each chart finding has exactly one image

    Logs warnings for violations rather than raising.
    """
    violations: list[str] = []

    sections = {
        "finding": report.findings,
        "risk": report.risks,
        "opportunity": report.opportunities,
        "action": report.actions,
    }
    for kind, statements in sections.items():
        ids = [s.id for s in statements]
        if len(ids) != len(set(ids)):
            violations.append(f"duplicate {kind} ids: {sorted({i for i in ids if ids.count(i) > 1})}")
        for s in statements:
            if s.kind != kind:
                violations.append(f"{s.id} has kind={s.kind} but sits in the {kind} section")

    charts = [f for f in report.findings if f.is_chart]
    if report.metadata.get("total_customers") and charts and charts[0].id != MAIN_CHART_ID:
        violations.append(f"first chart is {charts[0].id}, expected {MAIN_CHART_ID}")

    keys = [(a.priority, -(a.roi or 0)) for a in report.actions]
    if keys != sorted(keys):
        violations.append("actions not ordered by priority then ROI")

    if report.supporting_images:
        imaged = [img.statement_id for img in report.supporting_images]
        if imaged != [c.id for c in charts]:
            violations.append(f"supporting images {imaged} do not match chart findings")

    for v in violations:
        logger.warning(f"Report invariant violation: {v}")
