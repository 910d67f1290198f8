"""Typed analysis report returned to callers and consumed by the charting layer.

Field names are snake_case in Python and camelCase on the wire.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from cashflow_insights.exceptions import ErrorKind


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class Impact(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class MetricUnit(str, Enum):
    CURRENCY = "currency"
    PERCENTAGE = "percentage"
    COUNT = "count"
    RATIO = "ratio"


class Trend(str, Enum):
    UP = "up"
    DOWN = "down"
    STABLE = "stable"


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class Timeframe(str, Enum):
    IMMEDIATE = "immediate"
    SHORT_TERM = "short_term"
    MEDIUM_TERM = "medium_term"
    LONG_TERM = "long_term"


class Level(str, Enum):
    """Likelihood/impact scale for risk factors."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ChartType(str, Enum):
    PIE = "pie"
    BAR = "bar"
    LINE = "line"
    AREA = "area"
    DONUT = "donut"


def _normalize_enum_text(value: Any) -> Any:
    """Map model spellings like ``"Short-Term"`` onto enum values."""
    if isinstance(value, str):
        return value.strip().lower().replace("-", "_").replace(" ", "_")
    return value


class ReportModel(BaseModel):
    """Base for report elements: camelCase aliases, unknown keys ignored."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


class Insight(ReportModel):
    type: str = Field(..., description="Insight category, e.g. profitability or liquidity")
    title: str
    description: str
    severity: Severity
    actionable: bool
    recommendation: str | None = None
    impact: Impact
    confidence: float = Field(..., ge=0, le=100)

    @field_validator("severity", "impact", mode="before")
    @classmethod
    def _normalize(cls, value: Any) -> Any:
        return _normalize_enum_text(value)


class Metric(ReportModel):
    name: str
    value: float
    unit: MetricUnit
    trend: Trend
    change_percentage: float | None = None
    description: str

    @field_validator("unit", "trend", mode="before")
    @classmethod
    def _normalize(cls, value: Any) -> Any:
        return _normalize_enum_text(value)


class Recommendation(ReportModel):
    priority: Priority
    category: str
    title: str
    description: str
    expected_impact: str
    timeframe: Timeframe

    @field_validator("priority", "timeframe", mode="before")
    @classmethod
    def _normalize(cls, value: Any) -> Any:
        return _normalize_enum_text(value)


class RiskFactor(ReportModel):
    type: str
    description: str
    likelihood: Level
    impact: Level

    @field_validator("likelihood", "impact", mode="before")
    @classmethod
    def _normalize(cls, value: Any) -> Any:
        return _normalize_enum_text(value)


class ChartDataset(ReportModel):
    label: str | None = None
    data: list[float] = Field(default_factory=list)
    background_color: str | list[str] | None = None
    border_color: str | None = None
    fill: bool | None = None


class ChartData(ReportModel):
    labels: list[str] = Field(default_factory=list)
    datasets: list[ChartDataset] = Field(default_factory=list)


class ChartSpec(ReportModel):
    chart_type: ChartType
    title: str
    category: str
    data: ChartData


class AnalysisReport(ReportModel):
    """Canonical report. Every field is present whether AI- or fallback-sourced."""

    executive_summary: str
    overall_health_score: int = Field(..., ge=0, le=100)
    insights: list[Insight] = Field(default_factory=list)
    key_metrics: list[Metric] = Field(default_factory=list)
    recommendations: list[Recommendation] = Field(default_factory=list)
    risk_factors: list[RiskFactor] = Field(default_factory=list)
    visualizations: list[ChartSpec] = Field(default_factory=list)


@dataclass
class AnalysisResult:
    """Outcome of one ``analyze`` call: a report, or a classified failure."""

    success: bool
    analysis: AnalysisReport | None = None
    raw_response: str | None = None
    error: str | None = None
    error_kind: ErrorKind | None = None
    details: str | None = None

    @classmethod
    def ok(cls, analysis: AnalysisReport, raw_response: str | None = None) -> "AnalysisResult":
        return cls(success=True, analysis=analysis, raw_response=raw_response)

    @classmethod
    def failure(
        cls, error: str, error_kind: ErrorKind, details: str | None = None
    ) -> "AnalysisResult":
        return cls(success=False, error=error, error_kind=error_kind, details=details)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the camelCase JSON shape returned to API callers."""
        if self.success and self.analysis is not None:
            return {
                "success": True,
                "analysis": self.analysis.to_dict(),
                "rawResponse": self.raw_response,
            }
        result: dict[str, Any] = {
            "success": False,
            "error": self.error,
            "errorKind": self.error_kind.value if self.error_kind else None,
        }
        if self.details is not None:
            result["details"] = self.details
        return result
