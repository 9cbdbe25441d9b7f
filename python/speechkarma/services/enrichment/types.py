"""Shared type definitions for the enrichment layer.

- Turn: one chat message sent to the provider
- SummaryRequest: what the enricher asks an adapter to summarize
- SummaryResponse: the adapter's parsed answer
"""

from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True)
class Turn:
    """Provider-agnostic chat turn."""

    role: Literal["system", "user", "assistant"]
    content: str


@dataclass(frozen=True)
class SummaryRequest:
    """Request to summarize one statement.

    Attributes:
        model_name: Provider model identifier (e.g. "openai/gpt-4o-mini")
        messages: System turn first, then the user turn carrying the statement
        max_tokens: Completion token cap
        temperature: Sampling temperature
    """

    model_name: str
    messages: list[Turn]
    max_tokens: int = 150
    temperature: float = 0.3


@dataclass(frozen=True)
class SummaryResponse:
    """Parsed provider answer.

    Attributes:
        summary: The summary text, stripped. Never empty.
        provider_request_id: Provider's id for the completion, if returned.
    """

    summary: str
    provider_request_id: str | None = None
