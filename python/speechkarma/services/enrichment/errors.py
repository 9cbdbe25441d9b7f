"""Enrichment error classification.

Classes exist for log correlation only. The enricher collapses every failure
to "no summary", so none of these ever reach an API response.

- INVALID_KEY: 401/403 from the provider
- RATE_LIMIT: 429
- MODEL_NOT_AVAILABLE: 404
- INVALID_REQUEST: other 4xx
- PROVIDER_DOWN: 5xx or network failure
- TIMEOUT: provider or local deadline exceeded
- MALFORMED_RESPONSE: 2xx with a body we could not use
- NOT_CONFIGURED: enabled without an API key
"""

import asyncio
import json
from enum import Enum

import httpx


class EnrichmentErrorClass(str, Enum):
    """Normalized enrichment failure classifications."""

    INVALID_KEY = "invalid_key"
    RATE_LIMIT = "rate_limit"
    MODEL_NOT_AVAILABLE = "model_not_available"
    INVALID_REQUEST = "invalid_request"
    PROVIDER_DOWN = "provider_down"
    TIMEOUT = "timeout"
    MALFORMED_RESPONSE = "malformed_response"
    NOT_CONFIGURED = "not_configured"
    UNEXPECTED = "unexpected"


class EnrichmentError(Exception):
    """Raised by adapters for failures that are not plain HTTP errors.

    Attributes:
        error_class: The normalized error classification
        message: Human-readable error message
    """

    def __init__(self, error_class: EnrichmentErrorClass, message: str):
        self.error_class = error_class
        self.message = message
        super().__init__(message)


def _classify_status(status_code: int) -> EnrichmentErrorClass:
    if status_code in (401, 403):
        return EnrichmentErrorClass.INVALID_KEY
    if status_code == 429:
        return EnrichmentErrorClass.RATE_LIMIT
    if status_code == 404:
        return EnrichmentErrorClass.MODEL_NOT_AVAILABLE
    if status_code == 408:
        return EnrichmentErrorClass.TIMEOUT
    if 400 <= status_code < 500:
        return EnrichmentErrorClass.INVALID_REQUEST
    return EnrichmentErrorClass.PROVIDER_DOWN


def classify_enrichment_error(exc: BaseException) -> EnrichmentErrorClass:
    """Map an exception raised during enrichment to its error class."""
    if isinstance(exc, EnrichmentError):
        return exc.error_class
    if isinstance(exc, (asyncio.TimeoutError, httpx.TimeoutException)):
        return EnrichmentErrorClass.TIMEOUT
    if isinstance(exc, httpx.HTTPStatusError):
        return _classify_status(exc.response.status_code)
    if isinstance(exc, httpx.RequestError):
        return EnrichmentErrorClass.PROVIDER_DOWN
    if isinstance(exc, (json.JSONDecodeError, KeyError, IndexError, TypeError, ValueError)):
        return EnrichmentErrorClass.MALFORMED_RESPONSE
    return EnrichmentErrorClass.UNEXPECTED
