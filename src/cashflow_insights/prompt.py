"""Build the analysis prompt sent to the text-generation model.

The prompt is deterministic for a given dataset: only the first
``MAX_PROMPT_ENTRIES`` entries are listed verbatim, while breakdowns and
monthly trends summarize the full ledger.
"""

from collections.abc import Mapping, Sequence
from decimal import Decimal

from cashflow_insights.metrics import (
    MonthlyAggregate,
    aggregate_by_month,
    breakdown_by_subcategory,
    calculate_business_metrics,
)
from cashflow_insights.models import CashflowDataset, LedgerEntry

MAX_PROMPT_ENTRIES = 20
PROMPT_LENGTH_WARNING = 30_000
DEFAULT_BUSINESS_NAME = "Unknown Business"
DEFAULT_SUBCATEGORY = "Other"

REPORT_SCHEMA = """{
  "executiveSummary": "3-4 sentence executive summary of business financial health",
  "overallHealthScore": 0-100 (integer score of overall financial health),
  "insights": [
    {
      "type": "profitability|liquidity|trend_analysis|expense_breakdown|revenue_analysis|seasonal_patterns|risk_assessment|growth_potential|cost_optimization|forecasting",
      "title": "Insight title",
      "description": "Detailed description of the insight",
      "severity": "low|medium|high|critical",
      "actionable": true/false,
      "recommendation": "Specific recommendation if actionable",
      "impact": "positive|negative|neutral",
      "confidence": 0-100
    }
  ],
  "keyMetrics": [
    {
      "name": "Metric name",
      "value": numerical_value,
      "unit": "currency|percentage|count|ratio",
      "trend": "up|down|stable",
      "changePercentage": percentage_change,
      "description": "What this metric means"
    }
  ],
  "recommendations": [
    {
      "priority": "low|medium|high|urgent",
      "category": "cost_reduction|revenue_growth|cash_management|risk_mitigation|operational_efficiency",
      "title": "Recommendation title",
      "description": "Detailed recommendation",
      "expectedImpact": "Expected business impact",
      "timeframe": "immediate|short_term|medium_term|long_term"
    }
  ],
  "riskFactors": [
    {
      "type": "cashflow|operational|market|financial",
      "description": "Risk description",
      "likelihood": "low|medium|high",
      "impact": "low|medium|high"
    }
  ],
  "visualizationSuggestions": [
    {
      "chartType": "pie|bar|line|area|donut",
      "title": "Chart title",
      "description": "What this chart should show",
      "category": "revenue|expenses|trends|comparisons|forecasts",
      "dataPoints": ["list", "of", "data", "points", "to", "include"]
    }
  ]
}"""

FORMAT_REQUIREMENTS = (
    "MUST return ONLY valid JSON in the exact format specified above",
    "ALL array fields (insights, keyMetrics, recommendations, riskFactors, "
    "visualizationSuggestions) MUST be present, even if empty []",
    "NO additional text, comments, or markdown formatting outside the JSON",
    "ALL required fields must be present with correct data types",
    'String fields cannot be null or undefined - use empty string "" if no value',
    "Number fields must be valid numbers, not strings",
    "Boolean fields must be true or false, not strings",
)

ANALYSIS_FOCUS = (
    "Focus on actionable insights that can drive business decisions",
    "Identify specific patterns in revenue and expense timing",
    "Highlight any concerning trends or positive opportunities",
    "Provide industry-relevant benchmarks where possible",
    "Consider seasonal patterns and business cycles",
    "Assess liquidity and working capital management",
    "Identify cost optimization opportunities",
    "Evaluate revenue diversification and growth potential",
    "Flag any unusual transactions or patterns",
    "Provide forward-looking recommendations",
)


def format_currency(amount: Decimal) -> str:
    """Format as ``$1,234.50``; negatives as ``-$1,234.50``."""
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"


def format_entries(entries: Sequence[LedgerEntry]) -> str:
    return "\n".join(
        f"{entry.date.isoformat()}: {entry.category_value.upper()} - "
        f"{format_currency(entry.amount)} - {entry.description}"
        for entry in entries
    )


def format_breakdown(breakdown: Mapping[str, Decimal]) -> str:
    """One ``label: $amount`` line per subcategory, largest first."""
    ordered = sorted(breakdown.items(), key=lambda item: item[1], reverse=True)
    if not ordered:
        return "(none)"
    return "\n".join(f"{label}: {format_currency(amount)}" for label, amount in ordered)


def format_monthly_trends(monthly: Mapping[str, MonthlyAggregate]) -> str:
    if not monthly:
        return "(none)"
    return "\n".join(
        f"{month}: Revenue {format_currency(data.revenue)}, "
        f"Expenses {format_currency(data.expenses)}, "
        f"Net {format_currency(data.net)}"
        for month, data in sorted(monthly.items())
    )


def _numbered(lines: Sequence[str]) -> str:
    return "\n".join(f"{index}. {line}" for index, line in enumerate(lines, start=1))


def build_analysis_prompt(dataset: CashflowDataset) -> str:
    """Assemble the full analysis prompt for one dataset.

    Length is not capped here; callers log a warning past
    ``PROMPT_LENGTH_WARNING`` characters.
    """
    entries = dataset.entries
    summary = dataset.summary
    period = dataset.report_period
    metrics = calculate_business_metrics(entries)

    expense_breakdown = breakdown_by_subcategory(
        entries, expenses=True, default_label=DEFAULT_SUBCATEGORY
    )
    revenue_breakdown = breakdown_by_subcategory(
        entries, expenses=False, default_label=DEFAULT_SUBCATEGORY
    )
    requirements = "\n".join(f"- {line}" for line in FORMAT_REQUIREMENTS)

    return f"""
You are a senior business financial analyst. Analyze the following cashflow data and provide comprehensive business insights in a structured JSON format.

BUSINESS INFORMATION:
- Business Name: {dataset.business_name or DEFAULT_BUSINESS_NAME}
- Analysis Period: {period.start_date.isoformat()} to {period.end_date.isoformat()}
- Total Entries: {len(entries)}

FINANCIAL SUMMARY:
- Total Revenue: {format_currency(summary.total_revenue)}
- Total Expenses: {format_currency(summary.total_expenses)}
- Net Cashflow: {format_currency(summary.net_cashflow)}
- Gross Profit Margin: {metrics.gross_profit_margin:.2f}%

DETAILED CASHFLOW DATA (first {MAX_PROMPT_ENTRIES} entries):
{format_entries(entries[:MAX_PROMPT_ENTRIES])}

EXPENSE BREAKDOWN:
{format_breakdown(expense_breakdown)}

REVENUE BREAKDOWN:
{format_breakdown(revenue_breakdown)}

MONTHLY TRENDS:
{format_monthly_trends(aggregate_by_month(entries))}

Please provide a comprehensive analysis in the following JSON structure:

{REPORT_SCHEMA}

CRITICAL RESPONSE FORMAT REQUIREMENTS:
{requirements}

ANALYSIS REQUIREMENTS:
{_numbered(ANALYSIS_FOCUS)}

Ensure all numerical values are realistic and based on the provided data. Be specific and avoid generic advice."""
