"""Minimal deterministic report used when model output cannot be trusted."""

import structlog

from cashflow_insights.models import CashflowDataset
from cashflow_insights.prompt import format_currency
from cashflow_insights.report import (
    AnalysisReport,
    Impact,
    Insight,
    Metric,
    MetricUnit,
    Severity,
    Trend,
)
from cashflow_insights.visualizations import generate_visualizations

logger = structlog.get_logger(__name__)

POSITIVE_HEALTH_SCORE = 70
NEGATIVE_HEALTH_SCORE = 40
FALLBACK_CONFIDENCE = 60


def generate_fallback_report(dataset: CashflowDataset) -> AnalysisReport:
    """Summarize the period from the trusted totals alone.

    The health score is a binary heuristic: strictly positive net cashflow
    scores 70, anything else 40. No external calls are made.
    """
    summary = dataset.summary
    positive = summary.net_cashflow > 0

    logger.info("fallback_report_generated", positive_cashflow=positive)

    return AnalysisReport(
        executive_summary=(
            f"Basic financial analysis: Total revenue of {format_currency(summary.total_revenue)}, "
            f"expenses of {format_currency(summary.total_expenses)}, resulting in net cashflow "
            f"of {format_currency(summary.net_cashflow)}."
        ),
        overall_health_score=POSITIVE_HEALTH_SCORE if positive else NEGATIVE_HEALTH_SCORE,
        insights=[
            Insight(
                type="profitability",
                title="Basic Profitability Analysis",
                description=(
                    "Business shows positive cashflow"
                    if positive
                    else "Business shows negative cashflow"
                ),
                severity=Severity.LOW if positive else Severity.HIGH,
                actionable=not positive,
                impact=Impact.POSITIVE if positive else Impact.NEGATIVE,
                confidence=FALLBACK_CONFIDENCE,
            )
        ],
        key_metrics=[
            Metric(
                name="Net Cashflow",
                value=float(summary.net_cashflow),
                unit=MetricUnit.CURRENCY,
                trend=Trend.STABLE,
                description="Total revenue minus total expenses",
            )
        ],
        recommendations=[],
        risk_factors=[],
        visualizations=generate_visualizations(dataset.entries),
    )
