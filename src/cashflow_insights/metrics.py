"""Aggregate business metrics and monthly rollups from ledger entries.

All money arithmetic stays in Decimal. Expense magnitudes are taken as
absolute values because upstream ledgers may store expenses negative.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from decimal import Decimal

from cashflow_insights.models import LedgerEntry

ZERO = Decimal("0")
HUNDRED = Decimal("100")


@dataclass(frozen=True)
class BusinessMetrics:
    """Derived ratios for a set of entries. Percentages are 0-100 scale."""

    gross_profit_margin: Decimal
    expense_ratio: Decimal
    average_transaction_size: Decimal
    transaction_frequency: int


@dataclass
class MonthlyAggregate:
    """Running totals for one calendar month."""

    revenue: Decimal = ZERO
    expenses: Decimal = ZERO
    count: int = 0

    @property
    def net(self) -> Decimal:
        return self.revenue - self.expenses


def calculate_business_metrics(entries: Sequence[LedgerEntry]) -> BusinessMetrics:
    """Compute margin, expense ratio and average revenue transaction size."""
    revenue = [e for e in entries if e.is_revenue]
    total_revenue = sum((e.amount for e in revenue), ZERO)
    total_expenses = sum((abs(e.amount) for e in entries if e.is_expense), ZERO)

    if total_revenue > 0:
        gross_profit_margin = (total_revenue - total_expenses) / total_revenue * HUNDRED
        expense_ratio = total_expenses / total_revenue * HUNDRED
    else:
        gross_profit_margin = ZERO
        expense_ratio = ZERO

    # Expense-only ledgers have no revenue entries to average over.
    average_transaction_size = total_revenue / len(revenue) if revenue else ZERO

    return BusinessMetrics(
        gross_profit_margin=gross_profit_margin,
        expense_ratio=expense_ratio,
        average_transaction_size=average_transaction_size,
        transaction_frequency=len(entries),
    )


def aggregate_by_month(entries: Iterable[LedgerEntry]) -> dict[str, MonthlyAggregate]:
    """Bucket entries by ``YYYY-MM``.

    Every entry increments its month's count; entries outside revenue and
    expense add to neither total.
    """
    monthly: dict[str, MonthlyAggregate] = {}
    for entry in entries:
        bucket = monthly.setdefault(entry.month_key, MonthlyAggregate())
        if entry.is_revenue:
            bucket.revenue += entry.amount
        elif entry.is_expense:
            bucket.expenses += abs(entry.amount)
        bucket.count += 1
    return monthly


def breakdown_by_subcategory(
    entries: Iterable[LedgerEntry],
    *,
    expenses: bool,
    default_label: str,
) -> dict[str, Decimal]:
    """Sum revenue or expense magnitudes per subcategory, in first-seen order."""
    breakdown: dict[str, Decimal] = {}
    for entry in entries:
        if expenses:
            if not entry.is_expense:
                continue
            amount = abs(entry.amount)
        else:
            if not entry.is_revenue:
                continue
            amount = entry.amount
        label = entry.subcategory or default_label
        breakdown[label] = breakdown.get(label, ZERO) + amount
    return breakdown
