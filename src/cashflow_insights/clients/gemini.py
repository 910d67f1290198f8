"""Gemini REST client for single-turn JSON analysis requests.

Talks to the ``generateContent`` endpoint directly over httpx so the key can
be sent as the ``key`` query parameter. Transport and HTTP failures are
classified into ``GenerationResult`` outcomes rather than raised; there are
no retries.
"""

import asyncio
import json
from dataclasses import dataclass
from typing import Any

import httpx
import structlog

from cashflow_insights.config import AnalyzerConfig
from cashflow_insights.exceptions import ErrorKind

logger = structlog.get_logger(__name__)

GENERATION_CONFIG: dict[str, Any] = {
    "temperature": 0.3,
    "maxOutputTokens": 8192,
    "topP": 0.8,
    "topK": 40,
    "responseMimeType": "application/json",
}

MISSING_KEY_ERROR = "Gemini API key not configured"
INVALID_KEY_ERROR = "Invalid Gemini API key"
RATE_LIMIT_ERROR = "Rate limit exceeded, please try again later"
CONNECTION_ERROR = "Failed to connect to Gemini API"


@dataclass
class GenerationResult:
    """Outcome of one generation request."""

    success: bool
    response_text: str | None = None
    error: str | None = None
    error_kind: ErrorKind | None = None
    details: str | None = None
    status_code: int | None = None

    @classmethod
    def ok(cls, response_text: str, status_code: int | None = None) -> "GenerationResult":
        return cls(success=True, response_text=response_text, status_code=status_code)

    @classmethod
    def failure(
        cls,
        error: str,
        error_kind: ErrorKind,
        details: str | None = None,
        status_code: int | None = None,
    ) -> "GenerationResult":
        return cls(
            success=False,
            error=error,
            error_kind=error_kind,
            details=details,
            status_code=status_code,
        )


def _first_candidate_text(data: Any) -> str | None:
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return None
    return text if isinstance(text, str) and text else None


def _remote_error_message(response: httpx.Response) -> str:
    try:
        message = response.json()["error"]["message"]
    except (ValueError, KeyError, TypeError):
        message = None
    return message or response.reason_phrase


class GeminiAnalysisClient:
    """Async client for Gemini's ``generateContent`` endpoint."""

    def __init__(self, config: AnalyzerConfig):
        self._api_key = config.api_key
        self._endpoint_url = config.endpoint_url
        self._timeout = config.timeout

        self._client = httpx.AsyncClient(timeout=httpx.Timeout(self._timeout))
        self._logger = logger.bind(client="gemini", endpoint=self._endpoint_url)

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    def _redact(self, text: str) -> str:
        if self._api_key:
            return text.replace(self._api_key, "***")
        return text

    def build_payload(self, prompt: str) -> dict[str, Any]:
        """Request body for a single-turn text generation."""
        return {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": dict(GENERATION_CONFIG),
        }

    def _classify_status_error(self, error: httpx.HTTPStatusError) -> GenerationResult:
        response = error.response
        status = response.status_code

        if status == 401:
            result = GenerationResult.failure(
                INVALID_KEY_ERROR, ErrorKind.INVALID_CREDENTIAL, status_code=status
            )
        elif status == 429:
            result = GenerationResult.failure(
                RATE_LIMIT_ERROR, ErrorKind.RATE_LIMITED, status_code=status
            )
        elif status == 400:
            result = GenerationResult.failure(
                f"Invalid request: {_remote_error_message(response)}",
                ErrorKind.INVALID_REQUEST,
                status_code=status,
            )
        else:
            result = GenerationResult.failure(
                CONNECTION_ERROR,
                ErrorKind.CONNECTION_FAILED,
                details=f"HTTP {status}: {_remote_error_message(response)}",
                status_code=status,
            )

        self._logger.error(
            "gemini_request_failed",
            status=status,
            error_kind=result.error_kind.value if result.error_kind else None,
        )
        return result

    async def generate_analysis(self, prompt: str) -> GenerationResult:
        """Submit the prompt and return the model's text or a classified failure.

        A 2xx response without first-candidate text still counts as success:
        the raw body is returned so normalization can try it or fall back.
        """
        if not self._api_key:
            self._logger.warning("gemini_request_skipped", reason="missing_api_key")
            return GenerationResult.failure(MISSING_KEY_ERROR, ErrorKind.CREDENTIAL_MISSING)

        self._logger.debug("gemini_request_started", prompt_length=len(prompt))

        try:
            # httpx timeouts are per phase; the deadline bounds the whole call.
            async with asyncio.timeout(self._timeout):
                response = await self._client.post(
                    self._endpoint_url,
                    params={"key": self._api_key},
                    headers={"Content-Type": "application/json"},
                    json=self.build_payload(prompt),
                )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            return self._classify_status_error(e)
        except httpx.RequestError as e:
            details = self._redact(str(e)) or type(e).__name__
            self._logger.error(
                "gemini_connection_error", error=details, error_type=type(e).__name__
            )
            return GenerationResult.failure(
                CONNECTION_ERROR, ErrorKind.CONNECTION_FAILED, details=details
            )
        except TimeoutError:
            details = f"Request exceeded {self._timeout:g}s deadline"
            self._logger.error("gemini_request_timeout", timeout=self._timeout)
            return GenerationResult.failure(
                CONNECTION_ERROR, ErrorKind.CONNECTION_FAILED, details=details
            )

        status = response.status_code
        try:
            data = response.json()
        except ValueError:
            self._logger.warning("gemini_response_not_json", status=status)
            return GenerationResult.ok(response.text, status_code=status)

        text = _first_candidate_text(data)
        if text is None:
            self._logger.warning("gemini_response_missing_text", status=status)
            return GenerationResult.ok(json.dumps(data), status_code=status)

        self._logger.info("gemini_response_received", status=status, response_length=len(text))
        return GenerationResult.ok(text, status_code=status)

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    def count_tokens(self, text: str) -> int:
        """Estimate token count for text.

        Note: This is an approximation.
        """
        # Rough approximation: ~4 characters per token
        return len(text) // 4
