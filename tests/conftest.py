"""Pytest configuration and fixtures."""

import json
import os
from datetime import date
from decimal import Decimal
from typing import Any

import httpx
import pytest

# Set test environment variables before importing settings
os.environ.setdefault("GEMINI_API_KEY", "test-key")

from cashflow_insights.config import AnalyzerConfig  # noqa: E402
from cashflow_insights.models import (  # noqa: E402
    CashflowDataset,
    CashflowSummary,
    EntryCategory,
    LedgerEntry,
    ReportPeriod,
)

TEST_ENDPOINT = (
    "https://generativelanguage.googleapis.com/v1beta/models/"
    "gemini-2.5-flash:generateContent"
)


@pytest.fixture
def analyzer_config():
    """Config with a test key and the default endpoint."""
    return AnalyzerConfig(api_key="test-key", endpoint_url=TEST_ENDPOINT, timeout=60.0)


@pytest.fixture
def missing_key_config():
    """Config without an API key."""
    return AnalyzerConfig(api_key=None, endpoint_url=TEST_ENDPOINT)


@pytest.fixture
def sample_entries():
    """A small two-month ledger with revenue and expenses."""
    return [
        LedgerEntry(
            date=date(2024, 1, 5),
            category=EntryCategory.REVENUE,
            amount=Decimal("1000"),
            description="Consulting invoice",
            subcategory="Consulting",
        ),
        LedgerEntry(
            date=date(2024, 1, 10),
            category=EntryCategory.EXPENSE,
            amount=Decimal("-400"),
            description="January rent",
            subcategory="Rent",
        ),
        LedgerEntry(
            date=date(2024, 2, 3),
            category=EntryCategory.REVENUE,
            amount=Decimal("1500.50"),
            description="Product sales",
            subcategory="Sales",
        ),
        LedgerEntry(
            date=date(2024, 2, 14),
            category=EntryCategory.EXPENSE,
            amount=Decimal("250.25"),
            description="Office supplies",
        ),
    ]


@pytest.fixture
def sample_dataset(sample_entries):
    """Dataset whose summary matches the sample entries."""
    return CashflowDataset(
        entries=sample_entries,
        summary=CashflowSummary(
            total_revenue=Decimal("2500.50"),
            total_expenses=Decimal("650.25"),
            net_cashflow=Decimal("1850.25"),
        ),
        report_period=ReportPeriod(start_date=date(2024, 1, 1), end_date=date(2024, 2, 29)),
        business_name="Test Bakery",
    )


@pytest.fixture
def ai_report_payload():
    """A well-formed model report."""
    return {
        "executiveSummary": "The business is profitable with healthy margins.",
        "overallHealthScore": 82,
        "insights": [
            {
                "type": "profitability",
                "title": "Strong margins",
                "description": "Gross margin above 70%.",
                "severity": "low",
                "actionable": False,
                "impact": "positive",
                "confidence": 85,
            }
        ],
        "keyMetrics": [
            {
                "name": "Gross Profit Margin",
                "value": 74.0,
                "unit": "percentage",
                "trend": "up",
                "changePercentage": 5.2,
                "description": "Revenue retained after expenses",
            }
        ],
        "recommendations": [
            {
                "priority": "medium",
                "category": "cash_management",
                "title": "Build a reserve",
                "description": "Set aside three months of expenses.",
                "expectedImpact": "Lower liquidity risk",
                "timeframe": "short_term",
            }
        ],
        "riskFactors": [
            {
                "type": "cashflow",
                "description": "Revenue concentrated in one client.",
                "likelihood": "medium",
                "impact": "high",
            }
        ],
        "visualizationSuggestions": [
            {"chartType": "pie", "title": "Revenue mix", "category": "revenue"}
        ],
    }


def _gemini_body(text: str) -> dict[str, Any]:
    """Wrap text in the generateContent response envelope."""
    return {
        "candidates": [
            {
                "content": {"parts": [{"text": text}], "role": "model"},
                "finishReason": "STOP",
            }
        ]
    }


@pytest.fixture
def gemini_body():
    """Factory for generateContent response bodies."""
    return _gemini_body


@pytest.fixture
def make_response():
    """Factory for real httpx responses bound to a request."""

    def _make(status_code: int, body: Any = None, text: str | None = None) -> httpx.Response:
        request = httpx.Request("POST", TEST_ENDPOINT)
        if text is not None:
            return httpx.Response(status_code, text=text, request=request)
        return httpx.Response(status_code, json=body, request=request)

    return _make


@pytest.fixture
def gemini_success(make_response, ai_report_payload):
    """200 response carrying the sample report as candidate text."""
    return make_response(200, _gemini_body(json.dumps(ai_report_payload)))
