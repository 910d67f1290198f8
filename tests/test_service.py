"""Tests for the cashflow analysis service."""

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from cashflow_insights.clients.gemini import GeminiAnalysisClient
from cashflow_insights.config import AnalyzerConfig
from cashflow_insights.exceptions import ErrorKind
from cashflow_insights.service import CashflowAnalysisService, create_analysis_service


class TestCashflowAnalysisService:
    """Tests for CashflowAnalysisService.analyze."""

    @pytest.mark.asyncio
    async def test_successful_analysis(self, analyzer_config, sample_dataset, gemini_success):
        """Test a valid model response becomes the report."""
        service = CashflowAnalysisService(analyzer_config)
        service._client._client.post = AsyncMock(return_value=gemini_success)

        result = await service.analyze(sample_dataset)

        assert result.success is True
        assert result.analysis is not None
        assert result.analysis.overall_health_score == 82
        assert len(result.analysis.visualizations) == 3
        assert result.raw_response is not None
        assert "executiveSummary" in result.raw_response

    @pytest.mark.asyncio
    async def test_missing_key_fails_fast(self, missing_key_config, sample_dataset):
        """Test analysis fails without a network call when no key is configured."""
        service = CashflowAnalysisService(missing_key_config)
        service._client._client.post = AsyncMock()

        result = await service.analyze(sample_dataset)

        service._client._client.post.assert_not_called()
        assert result.success is False
        assert result.error == "Gemini API key not configured"
        assert result.error_kind == ErrorKind.CREDENTIAL_MISSING

    @pytest.mark.asyncio
    async def test_unconfigured_client_fails_fast(
        self, analyzer_config, missing_key_config, sample_dataset
    ):
        """Test the injected client decides whether a key is configured."""
        client = GeminiAnalysisClient(missing_key_config)
        client._client.post = AsyncMock()
        service = CashflowAnalysisService(analyzer_config, client=client)

        result = await service.analyze(sample_dataset)

        client._client.post.assert_not_called()
        assert result.error_kind == ErrorKind.CREDENTIAL_MISSING

    @pytest.mark.asyncio
    async def test_rate_limit_surfaces_as_failure(
        self, analyzer_config, sample_dataset, make_response
    ):
        """Test a 429 is returned to the caller, not retried or masked."""
        service = CashflowAnalysisService(analyzer_config)
        service._client._client.post = AsyncMock(return_value=make_response(429, {}))

        result = await service.analyze(sample_dataset)

        assert result.success is False
        assert result.error == "Rate limit exceeded, please try again later"
        assert result.error_kind == ErrorKind.RATE_LIMITED
        service._client._client.post.assert_called_once()

    @pytest.mark.asyncio
    async def test_timeout_surfaces_as_connection_failure(self, analyzer_config, sample_dataset):
        service = CashflowAnalysisService(analyzer_config)
        service._client._client.post = AsyncMock(side_effect=httpx.ReadTimeout("timed out"))

        result = await service.analyze(sample_dataset)

        assert result.success is False
        assert result.error == "Failed to connect to Gemini API"
        assert result.details == "timed out"

    @pytest.mark.asyncio
    async def test_unusable_output_returns_fallback(
        self, analyzer_config, sample_dataset, make_response, gemini_body
    ):
        """Test malformed model output degrades to a successful fallback report."""
        service = CashflowAnalysisService(analyzer_config)
        service._client._client.post = AsyncMock(
            return_value=make_response(200, gemini_body("I am unable to help with that."))
        )

        result = await service.analyze(sample_dataset)

        assert result.success is True
        assert result.analysis.executive_summary.startswith("Basic financial analysis:")
        assert result.analysis.overall_health_score == 70

    @pytest.mark.asyncio
    async def test_accepts_mapping_input(self, analyzer_config, gemini_success):
        """Test a camelCase mapping is parsed before analysis."""
        service = CashflowAnalysisService(analyzer_config)
        service._client._client.post = AsyncMock(return_value=gemini_success)

        result = await service.analyze(
            {
                "entries": [{"date": "2024-01-05", "category": "revenue", "amount": 1000}],
                "summary": {"totalRevenue": 1000, "totalExpenses": 0, "netCashflow": 1000},
                "reportPeriod": {"startDate": "2024-01-01", "endDate": "2024-01-31"},
            }
        )

        assert result.success is True

    @pytest.mark.asyncio
    async def test_unexpected_error_is_caught(self, analyzer_config):
        """Test malformed input returns a failure instead of raising."""
        service = CashflowAnalysisService(analyzer_config)
        service._client._client.post = AsyncMock()

        result = await service.analyze({"entries": []})

        assert result.success is False
        assert result.error == "Failed to analyze cashflow data"
        assert result.error_kind == ErrorKind.ANALYSIS_FAILED
        assert result.details is not None
        service._client._client.post.assert_not_called()

    @pytest.mark.asyncio
    async def test_prompt_failure_is_caught(self, analyzer_config, sample_dataset):
        """Test an exception while building the prompt is reported, not raised."""
        service = CashflowAnalysisService(analyzer_config)

        with patch(
            "cashflow_insights.service.build_analysis_prompt",
            side_effect=ValueError("bad entry"),
        ):
            result = await service.analyze(sample_dataset)

        assert result.success is False
        assert result.details == "bad entry"

    @pytest.mark.asyncio
    async def test_long_prompt_is_still_sent(
        self, analyzer_config, sample_dataset, gemini_success
    ):
        """Test oversized prompts only warn and are still sent."""
        service = CashflowAnalysisService(analyzer_config)
        service._client._client.post = AsyncMock(return_value=gemini_success)

        with patch(
            "cashflow_insights.service.build_analysis_prompt", return_value="x" * 40_000
        ):
            result = await service.analyze(sample_dataset)

        assert result.success is True
        sent = service._client._client.post.call_args[1]["json"]
        assert len(sent["contents"][0]["parts"][0]["text"]) == 40_000

    @pytest.mark.asyncio
    async def test_context_manager_closes_client(self, analyzer_config):
        async with CashflowAnalysisService(analyzer_config) as service:
            service._client._client.aclose = AsyncMock()

        service._client._client.aclose.assert_called_once()


class TestAnalysisResultSerialization:
    """Tests for AnalysisResult.to_dict via the service."""

    @pytest.mark.asyncio
    async def test_success_shape(self, analyzer_config, sample_dataset, gemini_success):
        service = CashflowAnalysisService(analyzer_config)
        service._client._client.post = AsyncMock(return_value=gemini_success)

        payload = (await service.analyze(sample_dataset)).to_dict()

        assert payload["success"] is True
        assert payload["analysis"]["overallHealthScore"] == 82
        assert "rawResponse" in payload

    @pytest.mark.asyncio
    async def test_failure_shape(self, missing_key_config, sample_dataset):
        service = CashflowAnalysisService(missing_key_config)

        payload = (await service.analyze(sample_dataset)).to_dict()

        assert payload == {
            "success": False,
            "error": "Gemini API key not configured",
            "errorKind": "credential_missing",
        }


def test_create_analysis_service_reads_settings():
    """Test the factory builds config from environment settings."""
    from cashflow_insights.config import get_settings

    get_settings.cache_clear()
    service = create_analysis_service()

    assert service._config.has_api_key is True
    assert service._config.endpoint_url.endswith(":generateContent")


def test_create_analysis_service_with_config(missing_key_config):
    service = create_analysis_service(missing_key_config)

    assert isinstance(service._config, AnalyzerConfig)
    assert service._config.has_api_key is False
