"""Abstract base class for summary provider adapters.

Rules:
- Async, using the shared httpx.AsyncClient
- No retries inside adapters
- No DB access
- No logging of request/response bodies
- Raw errors bubble up to the enricher for classification
"""

from abc import ABC, abstractmethod

import httpx

from speechkarma.services.enrichment.types import SummaryRequest, SummaryResponse


class SummaryAdapter(ABC):
    """Provider-specific HTTP call that turns a SummaryRequest into a summary."""

    def __init__(self, client: httpx.AsyncClient):
        self._client = client

    @abstractmethod
    async def summarize(
        self,
        req: SummaryRequest,
        *,
        api_key: str,
        timeout_s: float,
    ) -> SummaryResponse:
        """Call the provider once and parse its answer.

        Raises:
            httpx.HTTPStatusError: On non-2xx HTTP response.
            httpx.TimeoutException: On request timeout.
            httpx.RequestError: On network failure.
            EnrichmentError(MALFORMED_RESPONSE): If the body has no usable summary.
        """
        pass
