"""Ledger input types for cashflow analysis.

Entries, summary and reporting period are produced upstream and treated as
read-only here. Amounts are Decimals; expenses may carry a negative sign.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any


class EntryCategory(str, Enum):
    """Ledger entry categories."""

    REVENUE = "revenue"
    EXPENSE = "expense"


def _parse_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _parse_amount(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _parse_category(value: Any) -> "EntryCategory | str":
    try:
        return EntryCategory(str(value).lower())
    except ValueError:
        return str(value)


@dataclass(frozen=True)
class LedgerEntry:
    """One dated revenue or expense transaction."""

    date: date
    category: EntryCategory | str
    amount: Decimal
    description: str = ""
    subcategory: str | None = None

    @property
    def category_value(self) -> str:
        if isinstance(self.category, EntryCategory):
            return self.category.value
        return str(self.category)

    @property
    def is_revenue(self) -> bool:
        return self.category_value == EntryCategory.REVENUE.value

    @property
    def is_expense(self) -> bool:
        return self.category_value == EntryCategory.EXPENSE.value

    @property
    def month_key(self) -> str:
        """Calendar month bucket as ``YYYY-MM``."""
        return f"{self.date.year:04d}-{self.date.month:02d}"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "LedgerEntry":
        return cls(
            date=_parse_date(data["date"]),
            category=_parse_category(data["category"]),
            amount=_parse_amount(data["amount"]),
            description=data.get("description") or "",
            subcategory=data.get("subcategory") or None,
        )


@dataclass(frozen=True)
class ReportPeriod:
    """Inclusive reporting window. start <= end is assumed, not checked."""

    start_date: date
    end_date: date

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ReportPeriod":
        return cls(
            start_date=_parse_date(data["startDate"]),
            end_date=_parse_date(data["endDate"]),
        )


@dataclass(frozen=True)
class CashflowSummary:
    """Precomputed totals for the period, trusted as given."""

    total_revenue: Decimal
    total_expenses: Decimal
    net_cashflow: Decimal

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CashflowSummary":
        return cls(
            total_revenue=_parse_amount(data["totalRevenue"]),
            total_expenses=_parse_amount(data["totalExpenses"]),
            net_cashflow=_parse_amount(data["netCashflow"]),
        )


@dataclass(frozen=True)
class CashflowDataset:
    """Everything one analysis call reads."""

    entries: Sequence[LedgerEntry]
    summary: CashflowSummary
    report_period: ReportPeriod
    business_name: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CashflowDataset":
        """Build a dataset from the camelCase JSON shape used by the ledger API."""
        return cls(
            entries=tuple(LedgerEntry.from_dict(e) for e in data.get("entries") or []),
            summary=CashflowSummary.from_dict(data["summary"]),
            report_period=ReportPeriod.from_dict(data["reportPeriod"]),
            business_name=data.get("businessName") or None,
        )
