"""Public entry point: cashflow dataset in, analysis result out."""

from collections.abc import Mapping
from typing import Any

import structlog

from cashflow_insights.clients.gemini import MISSING_KEY_ERROR, GeminiAnalysisClient
from cashflow_insights.config import AnalyzerConfig
from cashflow_insights.exceptions import ErrorKind
from cashflow_insights.models import CashflowDataset
from cashflow_insights.normalizer import normalize_response
from cashflow_insights.prompt import PROMPT_LENGTH_WARNING, build_analysis_prompt
from cashflow_insights.report import AnalysisResult

logger = structlog.get_logger(__name__)

ANALYSIS_FAILED_ERROR = "Failed to analyze cashflow data"


class CashflowAnalysisService:
    """Runs the prompt -> model -> normalize pipeline for one dataset at a time.

    Holds only read-only configuration, so concurrent ``analyze`` calls on
    different datasets need no coordination.
    """

    def __init__(
        self,
        config: AnalyzerConfig,
        client: GeminiAnalysisClient | None = None,
    ):
        self._config = config
        self._client = client or GeminiAnalysisClient(config)

        if self._client.is_configured:
            logger.info("gemini_api_key_configured")
        else:
            logger.warning("gemini_api_key_missing")

    async def __aenter__(self) -> "CashflowAnalysisService":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.close()

    async def analyze(
        self, dataset: CashflowDataset | Mapping[str, Any]
    ) -> AnalysisResult:
        """Analyze one dataset.

        Remote failures come back as failed results; unusable model output
        becomes a fallback report. Unexpected exceptions are caught here and
        reported as ``analysis_failed``, never raised to the caller.
        """
        try:
            if not self._client.is_configured:
                return AnalysisResult.failure(MISSING_KEY_ERROR, ErrorKind.CREDENTIAL_MISSING)

            if not isinstance(dataset, CashflowDataset):
                dataset = CashflowDataset.from_dict(dataset)

            prompt = build_analysis_prompt(dataset)
            logger.info(
                "prompt_built",
                prompt_length=len(prompt),
                estimated_tokens=self._client.count_tokens(prompt),
                entry_count=len(dataset.entries),
            )
            if len(prompt) > PROMPT_LENGTH_WARNING:
                logger.warning(
                    "prompt_too_long", prompt_length=len(prompt), limit=PROMPT_LENGTH_WARNING
                )

            generation = await self._client.generate_analysis(prompt)
            if not generation.success:
                return AnalysisResult.failure(
                    generation.error or ANALYSIS_FAILED_ERROR,
                    generation.error_kind or ErrorKind.CONNECTION_FAILED,
                    generation.details,
                )

            response_text = generation.response_text or ""
            report = normalize_response(response_text, dataset)
            return AnalysisResult.ok(report, raw_response=response_text)

        except Exception as e:
            logger.exception("analysis_failed", error=str(e))
            return AnalysisResult.failure(
                ANALYSIS_FAILED_ERROR, ErrorKind.ANALYSIS_FAILED, details=str(e)
            )


def create_analysis_service(config: AnalyzerConfig | None = None) -> CashflowAnalysisService:
    """Build a service from settings, reading the environment exactly once."""
    return CashflowAnalysisService(config or AnalyzerConfig.from_settings())
