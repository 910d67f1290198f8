"""Cashflow insights - AI-assisted analysis of business cashflow ledgers."""

__version__ = "0.1.0"

from cashflow_insights.clients import GeminiAnalysisClient, GenerationResult
from cashflow_insights.config import AnalyzerConfig, configure_logging, get_settings
from cashflow_insights.exceptions import ErrorKind
from cashflow_insights.fallback import generate_fallback_report
from cashflow_insights.metrics import (
    BusinessMetrics,
    MonthlyAggregate,
    aggregate_by_month,
    calculate_business_metrics,
)
from cashflow_insights.models import (
    CashflowDataset,
    CashflowSummary,
    EntryCategory,
    LedgerEntry,
    ReportPeriod,
)
from cashflow_insights.normalizer import normalize_response
from cashflow_insights.prompt import build_analysis_prompt
from cashflow_insights.report import (
    AnalysisReport,
    AnalysisResult,
    ChartSpec,
    Insight,
    Metric,
    Recommendation,
    RiskFactor,
)
from cashflow_insights.service import CashflowAnalysisService, create_analysis_service
from cashflow_insights.visualizations import generate_visualizations

__all__ = [
    # Version
    "__version__",
    # Input model
    "CashflowDataset",
    "CashflowSummary",
    "EntryCategory",
    "LedgerEntry",
    "ReportPeriod",
    # Report model
    "AnalysisReport",
    "AnalysisResult",
    "ChartSpec",
    "Insight",
    "Metric",
    "Recommendation",
    "RiskFactor",
    "ErrorKind",
    # Pipeline
    "BusinessMetrics",
    "MonthlyAggregate",
    "aggregate_by_month",
    "calculate_business_metrics",
    "build_analysis_prompt",
    "normalize_response",
    "generate_fallback_report",
    "generate_visualizations",
    # Service & client
    "CashflowAnalysisService",
    "create_analysis_service",
    "GeminiAnalysisClient",
    "GenerationResult",
    # Config
    "AnalyzerConfig",
    "get_settings",
    "configure_logging",
]
