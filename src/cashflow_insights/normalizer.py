"""Turn free-form model output into a validated ``AnalysisReport``.

Normalization never fails outward. Text that holds no usable JSON object,
or an object missing the required fields, yields the fallback report
instead. A present-but-degraded report is preferred over no report.
"""

import json
import math
import re
from collections.abc import Sequence
from typing import Any, TypeVar

import structlog
from pydantic import ValidationError

from cashflow_insights.exceptions import (
    ResponseInvalidSchemaError,
    ResponseNormalizationError,
    ResponseUnparseableError,
)
from cashflow_insights.fallback import generate_fallback_report
from cashflow_insights.models import CashflowDataset
from cashflow_insights.report import (
    AnalysisReport,
    Insight,
    Metric,
    Recommendation,
    ReportModel,
    RiskFactor,
)
from cashflow_insights.visualizations import generate_visualizations

logger = structlog.get_logger(__name__)

ModelT = TypeVar("ModelT", bound=ReportModel)

_GREEDY_OBJECT = re.compile(r"\{.*\}", re.DOTALL)
_decoder = json.JSONDecoder()


def extract_json_object(text: str) -> dict[str, Any] | None:
    """Best-effort location of a JSON object inside model output.

    Tries the span from the first ``{`` to the last ``}`` first. If that does
    not decode (prose with stray braces around the body), each ``{`` is tried
    in turn and the first object that decodes wins.
    """
    match = _GREEDY_OBJECT.search(text)
    if match is None:
        return None

    try:
        parsed = json.loads(match.group(0))
    except ValueError:
        parsed = None
    if isinstance(parsed, dict):
        return parsed

    start = text.find("{")
    while start != -1:
        try:
            candidate, _ = _decoder.raw_decode(text, start)
        except ValueError:
            candidate = None
        if isinstance(candidate, dict):
            return candidate
        start = text.find("{", start + 1)
    return None


def clamp_health_score(value: Any) -> int:
    """Clamp a numeric score to [0, 100] and round to an integer."""
    try:
        score = float(value)
    except (TypeError, ValueError) as e:
        raise ResponseInvalidSchemaError(f"overallHealthScore is not numeric: {value!r}") from e
    if math.isnan(score):
        raise ResponseInvalidSchemaError("overallHealthScore is NaN")
    return int(round(max(0.0, min(100.0, score))))


def _validate_items(model: type[ModelT], raw: Any, field: str) -> list[ModelT]:
    """Validate each element on its own; invalid elements are dropped."""
    if raw is None:
        return []
    if not isinstance(raw, list):
        logger.warning("ai_field_not_a_list", field=field, value_type=type(raw).__name__)
        return []

    items: list[ModelT] = []
    for index, item in enumerate(raw):
        try:
            items.append(model.model_validate(item))
        except ValidationError as e:
            logger.warning(
                "ai_item_dropped",
                field=field,
                index=index,
                error_count=e.error_count(),
            )
    return items


def build_report(response_text: str, dataset: CashflowDataset) -> AnalysisReport:
    """Strict path: raise ``ResponseNormalizationError`` on unusable output."""
    parsed = extract_json_object(response_text)
    if parsed is None:
        raise ResponseUnparseableError("No JSON found in response")

    summary = parsed.get("executiveSummary")
    score = parsed.get("overallHealthScore")
    # A score of 0 is treated as missing, same as an absent field.
    # Empty list or object values for either field also count as missing.
    if not summary or not score:
        raise ResponseInvalidSchemaError("Missing required fields in AI response")
    if not isinstance(summary, str):
        raise ResponseInvalidSchemaError("executiveSummary is not a string")

    suggestions = parsed.get("visualizationSuggestions")
    if not isinstance(suggestions, Sequence) or isinstance(suggestions, str):
        suggestions = None

    return AnalysisReport(
        executive_summary=summary,
        overall_health_score=clamp_health_score(score),
        insights=_validate_items(Insight, parsed.get("insights"), "insights"),
        key_metrics=_validate_items(Metric, parsed.get("keyMetrics"), "keyMetrics"),
        recommendations=_validate_items(
            Recommendation, parsed.get("recommendations"), "recommendations"
        ),
        risk_factors=_validate_items(RiskFactor, parsed.get("riskFactors"), "riskFactors"),
        visualizations=generate_visualizations(dataset.entries, suggestions),
    )


def normalize_response(response_text: str, dataset: CashflowDataset) -> AnalysisReport:
    """Return the model's report if usable, otherwise the fallback report."""
    try:
        report = build_report(response_text, dataset)
    except ResponseNormalizationError as e:
        logger.warning("ai_response_unusable", reason=e.kind.value, error=str(e))
        return generate_fallback_report(dataset)

    logger.info(
        "ai_response_normalized",
        health_score=report.overall_health_score,
        insights=len(report.insights),
        recommendations=len(report.recommendations),
    )
    return report
