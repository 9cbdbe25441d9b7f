"""Keeps statement content and credentials out of the logs.

Never-log policy:
- Bearer tokens and API keys
- Statement text and AI summaries
- Rendered prompts

Allowed (with suffix):
- _chars, _length: length of text
- _sha256, _hash: hash of text
"""

import hashlib
import os

import structlog

FORBIDDEN_KEYS = frozenset(
    {
        "api_key",
        "bearer",
        "token",
        "secret",
        "password",
        "prompt",
        "statement_text",
        "summary",
        "comment",
        "raw_body",
    }
)

REDACTED_SUFFIXES = ("_sha256", "_hash", "_length", "_chars")
REDACTED = "[redacted]"


def hash_text(value: str) -> str:
    """Stable SHA-256 hex digest, for correlating log lines without content."""
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def _has_redacted_suffix(key: str) -> bool:
    return any(key.endswith(suffix) for suffix in REDACTED_SUFFIXES)


def safe_kv(*, _env: str | None = None, **kwargs) -> dict:
    """Validate that no forbidden keys are present unless already redacted.

    Raises ValueError in local/test environments if a forbidden key is used
    without a redacted suffix. In staging/prod, logs a warning instead.

    Usage:
        logger.info("statement.created", **safe_kv(
            statement_id=str(statement.id),
            statement_text_chars=len(text),   # OK: _chars suffix
            # statement_text=text,            # BLOCKED
        ))

    Args:
        _env: Override for SPEECHKARMA_ENV (test-only). If None, reads from env.
        **kwargs: Keyword arguments to validate and return.

    Returns:
        The same kwargs dict, after validation.
    """
    violations = [key for key in kwargs if key in FORBIDDEN_KEYS and not _has_redacted_suffix(key)]

    if violations:
        msg = f"Forbidden log keys without redacted suffix: {violations}"
        env = _env or os.environ.get("SPEECHKARMA_ENV", "local")
        if env in ("local", "test"):
            raise ValueError(msg)
        structlog.get_logger("speechkarma.services.redact").warning(
            "safe_kv_violation", forbidden_keys=violations
        )

    return kwargs


def scrub_forbidden_keys(logger, method_name: str, event_dict: dict) -> dict:
    """structlog processor: blank out forbidden values that reached a log call.

    Backstop for staging/prod, where safe_kv only warns.
    """
    for key in event_dict:
        if key in FORBIDDEN_KEYS and not _has_redacted_suffix(key):
            event_dict[key] = REDACTED
    return event_dict
