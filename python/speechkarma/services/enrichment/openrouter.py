"""OpenRouter summary adapter.

- Endpoint: POST https://openrouter.ai/api/v1/chat/completions
- Headers: Authorization: Bearer <key>, HTTP-Referer: <site url>, X-Title: SpeechKarma

Request body:
{
  "model": "openai/gpt-4o-mini",
  "messages": [{"role": "system", ...}, {"role": "user", ...}],
  "temperature": 0.3,
  "max_tokens": 150,
  "response_format": {"type": "json_schema", "json_schema": {...}}
}

Response (non-stream) - extract:
{
  "id": "gen-...",
  "choices": [{"message": {"content": "{\"summary\": \"...\"}"}}]
}

The message content is itself JSON matching the summary schema.
"""

import json

import httpx

from speechkarma.services.enrichment.adapter import SummaryAdapter
from speechkarma.services.enrichment.errors import EnrichmentError, EnrichmentErrorClass
from speechkarma.services.enrichment.types import SummaryRequest, SummaryResponse, Turn

OPENROUTER_CHAT_URL = "https://openrouter.ai/api/v1/chat/completions"
APP_TITLE = "SpeechKarma"

SUMMARY_SYSTEM_PROMPT = (
    "You are a political analyst. Create very concise, objective summaries of "
    "political statements. Keep summaries to 1-2 sentences maximum. Focus on the "
    "key message or claim."
)

SUMMARY_RESPONSE_FORMAT = {
    "type": "json_schema",
    "json_schema": {
        "name": "statement_summary",
        "strict": True,
        "schema": {
            "type": "object",
            "properties": {
                "summary": {
                    "type": "string",
                    "description": "A concise 1-2 sentence summary of the statement",
                }
            },
            "required": ["summary"],
            "additionalProperties": False,
        },
    },
}


def build_summary_request(statement_text: str, model_name: str) -> SummaryRequest:
    """Build the two-turn summary prompt for one statement."""
    return SummaryRequest(
        model_name=model_name,
        messages=[
            Turn(role="system", content=SUMMARY_SYSTEM_PROMPT),
            Turn(
                role="user",
                content=f'Summarize this political statement concisely:\n\n"{statement_text}"',
            ),
        ],
    )


class OpenRouterAdapter(SummaryAdapter):
    """OpenRouter chat-completions adapter with a JSON-schema response format."""

    def __init__(self, client: httpx.AsyncClient, *, site_url: str):
        super().__init__(client)
        self._site_url = site_url

    async def summarize(
        self,
        req: SummaryRequest,
        *,
        api_key: str,
        timeout_s: float,
    ) -> SummaryResponse:
        response = await self._client.post(
            OPENROUTER_CHAT_URL,
            headers=self._build_headers(api_key),
            json=self._build_request_body(req),
            timeout=httpx.Timeout(timeout_s, connect=min(timeout_s, 5.0)),
        )
        response.raise_for_status()
        return self._parse_response(response.json())

    def _build_headers(self, api_key: str) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
            "HTTP-Referer": self._site_url,
            "X-Title": APP_TITLE,
        }

    def _build_request_body(self, req: SummaryRequest) -> dict:
        return {
            "model": req.model_name,
            "messages": [{"role": t.role, "content": t.content} for t in req.messages],
            "temperature": req.temperature,
            "max_tokens": req.max_tokens,
            "response_format": SUMMARY_RESPONSE_FORMAT,
        }

    def _parse_response(self, data: dict) -> SummaryResponse:
        """Extract the summary from choices[0].message.content.

        Raises:
            EnrichmentError(MALFORMED_RESPONSE): No choices, no content, content
                that is not the expected JSON object, or an empty summary.
        """
        choices = data.get("choices") or []
        if not choices:
            raise EnrichmentError(EnrichmentErrorClass.MALFORMED_RESPONSE, "Response has no choices")

        content = (choices[0].get("message") or {}).get("content")
        if not content:
            raise EnrichmentError(
                EnrichmentErrorClass.MALFORMED_RESPONSE, "Response choice has no content"
            )

        try:
            parsed = json.loads(content)
        except json.JSONDecodeError as e:
            raise EnrichmentError(
                EnrichmentErrorClass.MALFORMED_RESPONSE, "Response content is not JSON"
            ) from e

        summary = parsed.get("summary") if isinstance(parsed, dict) else None
        if not isinstance(summary, str) or not summary.strip():
            raise EnrichmentError(EnrichmentErrorClass.MALFORMED_RESPONSE, "Summary is missing")

        return SummaryResponse(summary=summary.strip(), provider_request_id=data.get("id"))
