"""Token verification implementations.

Provides:
- TokenVerifier: Protocol for token verification
- SupabaseJwksVerifier: Verifier using the Supabase JWKS endpoint

Note: the test-only verifier lives in tests/support/test_verifier.py
"""

import threading
from typing import Any, Protocol
from uuid import UUID

import jwt
from jwt import PyJWKClient
from jwt.exceptions import (
    DecodeError,
    ExpiredSignatureError,
    InvalidAudienceError,
    InvalidIssuerError,
    InvalidSignatureError,
    InvalidTokenError,
    PyJWKClientError,
)

from speechkarma.errors import ApiError, ApiErrorCode
from speechkarma.logging import get_logger

logger = get_logger(__name__)

CLOCK_SKEW_SECONDS = 60
ALLOWED_ALGORITHMS = ["RS256", "ES256"]

# Ordered most specific first; InvalidTokenError is the base class of the rest.
_DECODE_FAILURES: tuple[tuple[type[InvalidTokenError], str, str], ...] = (
    (ExpiredSignatureError, "expired_token", "Token expired"),
    (InvalidSignatureError, "invalid_signature", "Invalid token signature"),
    (InvalidIssuerError, "invalid_issuer", "Invalid token issuer"),
    (InvalidAudienceError, "invalid_audience", "Invalid token audience"),
    (DecodeError, "decode_error", "Invalid token format"),
    (InvalidTokenError, "invalid_token", "Invalid token"),
)


def _unauthenticated(reason: str, message: str) -> ApiError:
    logger.warning("auth_failure", reason=reason)
    return ApiError(ApiErrorCode.E_UNAUTHENTICATED, message)


class TokenVerifier(Protocol):
    """Verifies a bearer token and returns its claims.

    Raises:
        ApiError(E_UNAUTHENTICATED): Token is invalid, expired, or malformed.
        ApiError(E_AUTH_UNAVAILABLE): JWKS endpoint unreachable.
    """

    def verify(self, token: str) -> dict[str, Any]: ...


class SupabaseJwksVerifier:
    """Token verifier backed by Supabase JWKS.

    Validates signature (RS256 or ES256), exp with 60s leeway, iss after
    trailing-slash normalization, aud against the configured list, and that
    sub is a UUID (it becomes the profile id).
    """

    def __init__(self, jwks_url: str, issuer: str, audiences: list[str], cache_ttl: int = 3600):
        self.jwks_url = jwks_url
        self.issuer = issuer.rstrip("/")
        self.audiences = audiences
        self.cache_ttl = cache_ttl
        self._jwks_client: PyJWKClient | None = None
        self._jwks_lock = threading.Lock()

    def _client(self, refresh: bool = False) -> PyJWKClient:
        with self._jwks_lock:
            if self._jwks_client is None or refresh:
                self._jwks_client = PyJWKClient(
                    self.jwks_url, cache_keys=True, lifespan=self.cache_ttl
                )
            return self._jwks_client

    def _get_signing_key(self, token: str) -> Any:
        """Resolve the signing key, refreshing JWKS once on a kid miss."""
        try:
            return self._client().get_signing_key_from_jwt(token)
        except PyJWKClientError as e:
            if "Unable to find" not in str(e) and "kid" not in str(e).lower():
                raise
            logger.info("jwks_refresh", reason="kid_miss")
            try:
                return self._client(refresh=True).get_signing_key_from_jwt(token)
            except PyJWKClientError as retry_e:
                raise _unauthenticated(
                    "kid_not_found", "Invalid token: signing key not found"
                ) from retry_e

    def verify(self, token: str) -> dict[str, Any]:
        """Verify a Supabase access token and return its claims."""
        try:
            signing_key = self._get_signing_key(token)
        except PyJWKClientError as e:
            logger.warning("auth_failure", reason="jwks_unavailable", error=str(e))
            raise ApiError(
                ApiErrorCode.E_AUTH_UNAVAILABLE, "Authentication service unavailable"
            ) from e
        except DecodeError as e:
            raise _unauthenticated("decode_error", "Invalid token format") from e

        try:
            payload = jwt.decode(
                token,
                signing_key.key,
                algorithms=ALLOWED_ALGORITHMS,
                audience=self.audiences,
                issuer=self.issuer,
                leeway=CLOCK_SKEW_SECONDS,
                options={"require": ["exp", "iss", "sub"], "verify_aud": True},
            )
        except InvalidTokenError as e:
            for exc_type, reason, message in _DECODE_FAILURES:
                if isinstance(e, exc_type):
                    raise _unauthenticated(reason, message) from e
            raise

        try:
            UUID(payload["sub"])
        except (KeyError, ValueError, TypeError) as e:
            raise _unauthenticated("invalid_sub", "Invalid token: sub is not a valid UUID") from e

        return payload
