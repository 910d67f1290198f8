"""Error taxonomy for cashflow analysis."""

from enum import Enum


class ErrorKind(str, Enum):
    """Classified failure outcomes."""

    CREDENTIAL_MISSING = "credential_missing"
    INVALID_CREDENTIAL = "invalid_credential"
    RATE_LIMITED = "rate_limited"
    INVALID_REQUEST = "invalid_request"
    CONNECTION_FAILED = "connection_failed"
    RESPONSE_UNPARSEABLE = "response_unparseable"
    RESPONSE_INVALID_SCHEMA = "response_invalid_schema"
    ANALYSIS_FAILED = "analysis_failed"


class ResponseNormalizationError(Exception):
    """Model output could not be turned into a report.

    Always absorbed by the normalizer, which falls back to a local report.
    """

    kind: ErrorKind = ErrorKind.RESPONSE_UNPARSEABLE


class ResponseUnparseableError(ResponseNormalizationError):
    """No JSON object could be located or decoded."""

    kind = ErrorKind.RESPONSE_UNPARSEABLE


class ResponseInvalidSchemaError(ResponseNormalizationError):
    """JSON decoded but required report fields are missing or malformed."""

    kind = ErrorKind.RESPONSE_INVALID_SCHEMA
