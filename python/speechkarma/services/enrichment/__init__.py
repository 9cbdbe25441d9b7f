"""Optional AI summary enrichment for newly created statements.

Usage:
    from speechkarma.services.enrichment import StatementEnricher, format_summary_segment

    summary = await enricher.enrich(text)
    if summary:
        text = format_summary_segment(text, summary)

Rules:
- Adapters are async using the shared httpx.AsyncClient
- No retries, no DB access inside adapters
- The enricher never raises; every failure means "no summary"
"""

from speechkarma.services.enrichment.adapter import SummaryAdapter
from speechkarma.services.enrichment.enricher import (
    SUMMARY_SEPARATOR,
    StatementEnricher,
    format_summary_segment,
)
from speechkarma.services.enrichment.errors import (
    EnrichmentError,
    EnrichmentErrorClass,
    classify_enrichment_error,
)
from speechkarma.services.enrichment.openrouter import (
    OPENROUTER_CHAT_URL,
    OpenRouterAdapter,
    build_summary_request,
)
from speechkarma.services.enrichment.types import SummaryRequest, SummaryResponse, Turn

__all__ = [
    # Core types
    "Turn",
    "SummaryRequest",
    "SummaryResponse",
    # Adapters
    "SummaryAdapter",
    "OpenRouterAdapter",
    "OPENROUTER_CHAT_URL",
    "build_summary_request",
    # Enricher
    "StatementEnricher",
    "format_summary_segment",
    "SUMMARY_SEPARATOR",
    # Errors
    "EnrichmentError",
    "EnrichmentErrorClass",
    "classify_enrichment_error",
]
