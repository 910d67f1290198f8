"""Chart-ready aggregates built from raw ledger entries.

Charts are always computed locally, whatever the model suggested. Colors
and styling are fixed presentation metadata.
"""

from collections.abc import Sequence
from typing import Any

import structlog

from cashflow_insights.metrics import aggregate_by_month, breakdown_by_subcategory
from cashflow_insights.models import LedgerEntry
from cashflow_insights.report import ChartData, ChartDataset, ChartSpec, ChartType

logger = structlog.get_logger(__name__)

EXPENSE_PALETTE = [
    "#FF6384", "#36A2EB", "#FFCE56", "#4BC0C0",
    "#9966FF", "#FF9F40", "#E7E9ED", "#71B37C",
]
REVENUE_COLOR = "#36A2EB"
EXPENSE_COLOR = "#FF6384"
TREND_BORDER_COLOR = "#4BC0C0"
TREND_FILL_COLOR = "rgba(75, 192, 192, 0.2)"

DEFAULT_EXPENSE_LABEL = "Other Expenses"

# Fixed English abbreviations so labels do not depend on the process locale.
MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


def month_label(month_key: str) -> str:
    """``"2024-01"`` -> ``"Jan 2024"``."""
    year, month = month_key.split("-")
    return f"{MONTH_ABBREVIATIONS[int(month) - 1]} {year}"


def expense_breakdown_data(entries: Sequence[LedgerEntry]) -> ChartData:
    breakdown = breakdown_by_subcategory(
        entries, expenses=True, default_label=DEFAULT_EXPENSE_LABEL
    )
    return ChartData(
        labels=list(breakdown),
        datasets=[
            ChartDataset(
                data=[float(amount) for amount in breakdown.values()],
                background_color=list(EXPENSE_PALETTE),
            )
        ],
    )


def revenue_expense_data(entries: Sequence[LedgerEntry]) -> ChartData:
    # "YYYY-MM" keys sort chronologically; display labels would not.
    monthly = sorted(aggregate_by_month(entries).items())
    return ChartData(
        labels=[month_label(key) for key, _ in monthly],
        datasets=[
            ChartDataset(
                label="Revenue",
                data=[float(data.revenue) for _, data in monthly],
                background_color=REVENUE_COLOR,
            ),
            ChartDataset(
                label="Expenses",
                data=[float(data.expenses) for _, data in monthly],
                background_color=EXPENSE_COLOR,
            ),
        ],
    )


def cashflow_trend_data(entries: Sequence[LedgerEntry]) -> ChartData:
    monthly = sorted(aggregate_by_month(entries).items())
    return ChartData(
        labels=[month_label(key) for key, _ in monthly],
        datasets=[
            ChartDataset(
                label="Net Cashflow",
                data=[float(data.net) for _, data in monthly],
                border_color=TREND_BORDER_COLOR,
                background_color=TREND_FILL_COLOR,
                fill=True,
            )
        ],
    )


def generate_visualizations(
    entries: Sequence[LedgerEntry],
    suggestions: Sequence[Any] | None = None,
) -> list[ChartSpec]:
    """Build the expense pie, monthly bar and net trend line charts.

    ``suggestions`` are accepted from the model but do not change which
    charts are produced. The pie chart is omitted when there are no expenses.
    """
    if suggestions:
        logger.debug("visualization_suggestions_ignored", count=len(suggestions))

    visualizations: list[ChartSpec] = []

    expense_data = expense_breakdown_data(entries)
    if expense_data.datasets and expense_data.datasets[0].data:
        visualizations.append(
            ChartSpec(
                chart_type=ChartType.PIE,
                title="Expense Breakdown",
                category="expenses",
                data=expense_data,
            )
        )

    visualizations.append(
        ChartSpec(
            chart_type=ChartType.BAR,
            title="Revenue vs Expenses by Month",
            category="comparisons",
            data=revenue_expense_data(entries),
        )
    )
    visualizations.append(
        ChartSpec(
            chart_type=ChartType.LINE,
            title="Net Cashflow Trend",
            category="trends",
            data=cashflow_trend_data(entries),
        )
    )
    return visualizations
