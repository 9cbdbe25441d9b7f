"""Best-effort statement enrichment.

StatementEnricher wraps a SummaryAdapter with the feature gate, a hard
deadline, error classification, and logging. Its public method never raises:
a statement is always created, with or without a summary.

Observability:
- enrichment.skipped: gate off or not configured (debug)
- enrichment.succeeded / enrichment.failed, with latency_ms and error_class
- Statement text and summaries are never logged, only their lengths
"""

import asyncio
import time

from speechkarma.config import Settings
from speechkarma.logging import get_logger
from speechkarma.services.enrichment.adapter import SummaryAdapter
from speechkarma.services.enrichment.errors import (
    EnrichmentErrorClass,
    classify_enrichment_error,
)
from speechkarma.services.enrichment.openrouter import build_summary_request
from speechkarma.services.policy import MAX_STATEMENT_CHARS
from speechkarma.services.redact import safe_kv

logger = get_logger(__name__)

SUMMARY_SEPARATOR = "\n\n---\n\n📝 AI Summary: "


def format_summary_segment(statement_text: str, summary: str) -> str:
    """Append a summary to the statement text.

    Returns the original text unchanged when the combined text would exceed
    the statement length limit.
    """
    combined = f"{statement_text}{SUMMARY_SEPARATOR}{summary}"
    if len(combined) > MAX_STATEMENT_CHARS:
        logger.info(
            "enrichment.summary_dropped",
            **safe_kv(statement_text_chars=len(statement_text), combined_chars=len(combined)),
        )
        return statement_text
    return combined


class StatementEnricher:
    """Produces an optional summary for a statement being created.

    Args:
        adapter: Provider adapter, or None when enrichment is not wired.
        enabled: Feature gate (USE_AI_SUMMARY).
        api_key: Provider API key. Enabled without a key behaves as disabled
            and logs NOT_CONFIGURED.
        model_name: Provider model identifier.
        timeout_s: Hard deadline for one call; late results are discarded.
    """

    def __init__(
        self,
        adapter: SummaryAdapter | None,
        *,
        enabled: bool,
        api_key: str | None,
        model_name: str,
        timeout_s: float,
    ):
        self._adapter = adapter
        self._enabled = enabled
        self._api_key = api_key
        self._model_name = model_name
        self._timeout_s = timeout_s

    @classmethod
    def disabled(cls) -> "StatementEnricher":
        """An enricher that never calls out."""
        return cls(None, enabled=False, api_key=None, model_name="", timeout_s=1.0)

    @classmethod
    def from_settings(
        cls, adapter: SummaryAdapter | None, settings: Settings
    ) -> "StatementEnricher":
        return cls(
            adapter,
            enabled=settings.use_ai_summary,
            api_key=settings.openrouter_api_key,
            model_name=settings.ai_summary_model,
            timeout_s=settings.ai_summary_timeout_s,
        )

    @property
    def enabled(self) -> bool:
        return self._enabled and self._adapter is not None

    @property
    def configured(self) -> bool:
        """Enabled and holding an API key, so calls can actually go out."""
        return self.enabled and bool(self._api_key)

    async def enrich(self, statement_text: str, *, timeout_s: float | None = None) -> str | None:
        """Return a summary for the statement, or None on any failure.

        Never raises (cancellation of the enclosing request excepted).
        """
        if not self.enabled:
            logger.debug("enrichment.skipped", reason="disabled")
            return None

        text_chars = len(statement_text)
        if not self._api_key:
            logger.warning(
                "enrichment.failed",
                **safe_kv(
                    error_class=EnrichmentErrorClass.NOT_CONFIGURED.value,
                    statement_text_chars=text_chars,
                ),
            )
            return None

        deadline = timeout_s if timeout_s is not None else self._timeout_s
        req = build_summary_request(statement_text, self._model_name)
        start = time.monotonic()

        try:
            response = await asyncio.wait_for(
                self._adapter.summarize(req, api_key=self._api_key, timeout_s=deadline),
                timeout=deadline,
            )
        except Exception as exc:
            logger.warning(
                "enrichment.failed",
                **safe_kv(
                    error_class=classify_enrichment_error(exc).value,
                    exception_type=type(exc).__name__,
                    model_name=self._model_name,
                    statement_text_chars=text_chars,
                    latency_ms=int((time.monotonic() - start) * 1000),
                ),
            )
            return None

        logger.info(
            "enrichment.succeeded",
            **safe_kv(
                model_name=self._model_name,
                provider_request_id=response.provider_request_id,
                statement_text_chars=text_chars,
                summary_chars=len(response.summary),
                latency_ms=int((time.monotonic() - start) * 1000),
            ),
        )
        return response.summary
