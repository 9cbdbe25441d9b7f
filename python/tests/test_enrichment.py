"""Tests for the statement enrichment layer.

Test coverage:
- OpenRouter adapter: request shape, summary parsing, HTTP failures
- Error classification for logging
- StatementEnricher: gate, missing key, timeout, raise, success
- format_summary_segment: separator and the length cap

Explicitly Forbidden:
- Live provider calls
- Real API keys anywhere in test code

These are pure unit tests that do NOT require database access.
"""

import asyncio
import json

import httpx
import pytest
import respx

from speechkarma.services.enrichment import (
    OPENROUTER_CHAT_URL,
    SUMMARY_SEPARATOR,
    EnrichmentError,
    EnrichmentErrorClass,
    OpenRouterAdapter,
    StatementEnricher,
    SummaryAdapter,
    SummaryResponse,
    build_summary_request,
    classify_enrichment_error,
    format_summary_segment,
)

STATEMENT = "We will build two hundred thousand new homes by the end of the decade."


def completion(content: str, request_id: str = "gen-123") -> dict:
    return {"id": request_id, "choices": [{"message": {"role": "assistant", "content": content}}]}


# =============================================================================
# Test Fixtures
# =============================================================================


@pytest.fixture
def httpx_client():
    """Create an httpx AsyncClient for testing."""
    return httpx.AsyncClient()


@pytest.fixture
def summary_request():
    return build_summary_request(STATEMENT, "openai/gpt-4o-mini")


class StubAdapter(SummaryAdapter):
    """Adapter returning a canned summary, raising, or sleeping."""

    def __init__(self, summary: str | None = "Promises 200k homes.", exc=None, delay_s=0.0):
        super().__init__(client=None)
        self.summary = summary
        self.exc = exc
        self.delay_s = delay_s
        self.calls = 0

    async def summarize(self, req, *, api_key, timeout_s):
        self.calls += 1
        if self.delay_s:
            await asyncio.sleep(self.delay_s)
        if self.exc is not None:
            raise self.exc
        return SummaryResponse(summary=self.summary)


def make_enricher(adapter, enabled=True, api_key="sk-or-test", timeout_s=1.0):
    return StatementEnricher(
        adapter,
        enabled=enabled,
        api_key=api_key,
        model_name="openai/gpt-4o-mini",
        timeout_s=timeout_s,
    )


# =============================================================================
# OpenRouter Adapter
# =============================================================================


class TestOpenRouterAdapter:
    """Tests for the OpenRouter adapter."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_success_parses_summary(self, httpx_client, summary_request):
        route = respx.post(OPENROUTER_CHAT_URL).respond(
            200, json=completion(json.dumps({"summary": "  Promises 200k homes.  "}))
        )

        adapter = OpenRouterAdapter(httpx_client, site_url="https://speechkarma.test")
        response = await adapter.summarize(summary_request, api_key="sk-or-test", timeout_s=5)

        assert response.summary == "Promises 200k homes."
        assert response.provider_request_id == "gen-123"

        sent = route.calls.last.request
        assert sent.headers["Authorization"] == "Bearer sk-or-test"
        assert sent.headers["HTTP-Referer"] == "https://speechkarma.test"
        assert sent.headers["X-Title"] == "SpeechKarma"
        body = json.loads(sent.content)
        assert body["model"] == "openai/gpt-4o-mini"
        assert body["max_tokens"] == 150
        assert body["response_format"]["type"] == "json_schema"
        assert [m["role"] for m in body["messages"]] == ["system", "user"]
        assert STATEMENT in body["messages"][1]["content"]

    @pytest.mark.asyncio
    @respx.mock
    async def test_content_not_json_is_malformed(self, httpx_client, summary_request):
        respx.post(OPENROUTER_CHAT_URL).respond(200, json=completion("just text"))

        adapter = OpenRouterAdapter(httpx_client, site_url="http://localhost")
        with pytest.raises(EnrichmentError) as exc_info:
            await adapter.summarize(summary_request, api_key="sk-or-test", timeout_s=5)

        assert exc_info.value.error_class == EnrichmentErrorClass.MALFORMED_RESPONSE

    @pytest.mark.asyncio
    @respx.mock
    async def test_no_choices_is_malformed(self, httpx_client, summary_request):
        respx.post(OPENROUTER_CHAT_URL).respond(200, json={"id": "gen-1", "choices": []})

        adapter = OpenRouterAdapter(httpx_client, site_url="http://localhost")
        with pytest.raises(EnrichmentError) as exc_info:
            await adapter.summarize(summary_request, api_key="sk-or-test", timeout_s=5)

        assert exc_info.value.error_class == EnrichmentErrorClass.MALFORMED_RESPONSE

    @pytest.mark.asyncio
    @respx.mock
    async def test_empty_summary_is_malformed(self, httpx_client, summary_request):
        respx.post(OPENROUTER_CHAT_URL).respond(
            200, json=completion(json.dumps({"summary": "   "}))
        )

        adapter = OpenRouterAdapter(httpx_client, site_url="http://localhost")
        with pytest.raises(EnrichmentError):
            await adapter.summarize(summary_request, api_key="sk-or-test", timeout_s=5)

    @pytest.mark.asyncio
    @respx.mock
    async def test_http_error_raises_status_error(self, httpx_client, summary_request):
        respx.post(OPENROUTER_CHAT_URL).respond(429, json={"error": {"message": "slow down"}})

        adapter = OpenRouterAdapter(httpx_client, site_url="http://localhost")
        with pytest.raises(httpx.HTTPStatusError) as exc_info:
            await adapter.summarize(summary_request, api_key="sk-or-test", timeout_s=5)

        assert classify_enrichment_error(exc_info.value) == EnrichmentErrorClass.RATE_LIMIT


# =============================================================================
# Error Classification
# =============================================================================


class TestClassifyEnrichmentError:
    def _status_error(self, status_code: int) -> httpx.HTTPStatusError:
        request = httpx.Request("POST", OPENROUTER_CHAT_URL)
        response = httpx.Response(status_code, request=request)
        return httpx.HTTPStatusError("error", request=request, response=response)

    @pytest.mark.parametrize(
        "status_code,expected",
        [
            (401, EnrichmentErrorClass.INVALID_KEY),
            (403, EnrichmentErrorClass.INVALID_KEY),
            (404, EnrichmentErrorClass.MODEL_NOT_AVAILABLE),
            (429, EnrichmentErrorClass.RATE_LIMIT),
            (400, EnrichmentErrorClass.INVALID_REQUEST),
            (502, EnrichmentErrorClass.PROVIDER_DOWN),
        ],
    )
    def test_status_codes(self, status_code, expected):
        assert classify_enrichment_error(self._status_error(status_code)) == expected

    def test_timeouts(self):
        assert classify_enrichment_error(asyncio.TimeoutError()) == EnrichmentErrorClass.TIMEOUT
        assert (
            classify_enrichment_error(httpx.ReadTimeout("read timed out"))
            == EnrichmentErrorClass.TIMEOUT
        )

    def test_network_failure_is_provider_down(self):
        exc = httpx.ConnectError("refused")
        assert classify_enrichment_error(exc) == EnrichmentErrorClass.PROVIDER_DOWN

    def test_unknown_exception(self):
        assert classify_enrichment_error(RuntimeError("boom")) == EnrichmentErrorClass.UNEXPECTED


# =============================================================================
# StatementEnricher
# =============================================================================


class TestStatementEnricher:
    """The enricher yields a summary or None and never raises."""

    @pytest.mark.asyncio
    async def test_returns_summary(self):
        adapter = StubAdapter(summary="Promises 200k homes.")
        assert await make_enricher(adapter).enrich(STATEMENT) == "Promises 200k homes."
        assert adapter.calls == 1

    @pytest.mark.asyncio
    async def test_disabled_never_calls_adapter(self):
        adapter = StubAdapter()
        assert await make_enricher(adapter, enabled=False).enrich(STATEMENT) is None
        assert adapter.calls == 0

    @pytest.mark.asyncio
    async def test_missing_key_returns_none(self):
        adapter = StubAdapter()
        assert await make_enricher(adapter, api_key=None).enrich(STATEMENT) is None
        assert adapter.calls == 0

    @pytest.mark.asyncio
    async def test_timeout_returns_none(self):
        adapter = StubAdapter(delay_s=1.0)
        result = await make_enricher(adapter).enrich(STATEMENT, timeout_s=0.01)
        assert result is None

    @pytest.mark.asyncio
    async def test_adapter_exception_returns_none(self):
        adapter = StubAdapter(exc=RuntimeError("provider exploded"))
        assert await make_enricher(adapter).enrich(STATEMENT) is None

    @pytest.mark.asyncio
    @respx.mock
    async def test_provider_500_returns_none(self, httpx_client):
        respx.post(OPENROUTER_CHAT_URL).respond(500, text="upstream error")
        adapter = OpenRouterAdapter(httpx_client, site_url="http://localhost")
        assert await make_enricher(adapter).enrich(STATEMENT) is None

    @pytest.mark.asyncio
    async def test_static_disabled_enricher(self):
        enricher = StatementEnricher.disabled()
        assert enricher.enabled is False
        assert await enricher.enrich(STATEMENT) is None

    def test_configured_needs_key(self):
        assert make_enricher(StubAdapter()).configured is True
        assert make_enricher(StubAdapter(), api_key=None).configured is False


# =============================================================================
# Summary Formatting
# =============================================================================


class TestFormatSummarySegment:
    def test_appends_with_separator(self):
        result = format_summary_segment(STATEMENT, "Promises homes.")
        assert result == f"{STATEMENT}{SUMMARY_SEPARATOR}Promises homes."
        assert "📝 AI Summary: " in result

    def test_drops_summary_past_length_limit(self):
        long_text = "x" * 4990
        assert format_summary_segment(long_text, "A summary that is too long.") == long_text

    def test_keeps_summary_at_exact_limit(self):
        summary = "s" * 10
        text = "x" * (5000 - len(SUMMARY_SEPARATOR) - len(summary))
        result = format_summary_segment(text, summary)
        assert len(result) == 5000
        assert result.endswith(summary)
