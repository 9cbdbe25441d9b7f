"""Test helpers for authentication.

Provides:
- Token minting for test authentication
- Header generation for test requests
"""

import time
from typing import Any
from uuid import UUID, uuid4

import jwt

from tests.support.test_verifier import MockJwtVerifier, generate_rsa_keypair

DEFAULT_ISSUER = "test-issuer"
DEFAULT_AUDIENCE = "test-audience"
DEFAULT_EXPIRES_IN = 3600  # 1 hour


def _claims(user_id: UUID | str, expires_in: int, issuer: str, audience: str) -> dict[str, Any]:
    now = int(time.time())
    return {
        "sub": str(user_id),
        "iss": issuer,
        "aud": audience,
        "iat": now,
        "exp": now + expires_in,
    }


def mint_test_token(
    user_id: UUID | str,
    expires_in: int = DEFAULT_EXPIRES_IN,
    issuer: str = DEFAULT_ISSUER,
    audience: str = DEFAULT_AUDIENCE,
    **extra_claims: Any,
) -> str:
    """Mint a valid test JWT, e.g. ``mint_test_token(uid, email="a@b.org")``."""
    payload = {**_claims(user_id, expires_in, issuer, audience), **extra_claims}
    return jwt.encode(payload, MockJwtVerifier.get_private_key(), algorithm="RS256")


def mint_expired_token(user_id: UUID | str) -> str:
    """Mint a token that expired an hour ago (beyond the clock-skew leeway)."""
    return mint_test_token(user_id, expires_in=-3600)


def mint_token_with_bad_signature(user_id: UUID | str) -> str:
    """Mint a token signed with an unrelated key."""
    private_key, _ = generate_rsa_keypair()
    payload = _claims(user_id, DEFAULT_EXPIRES_IN, DEFAULT_ISSUER, DEFAULT_AUDIENCE)
    return jwt.encode(payload, private_key, algorithm="RS256")


def auth_headers(user_id: UUID | str, **token_kwargs: Any) -> dict[str, str]:
    """Return headers dict with a valid Authorization for the given user."""
    token = mint_test_token(user_id, **token_kwargs)
    return {"Authorization": f"Bearer {token}"}


def create_test_user_id() -> UUID:
    """Generate a random UUID for a test user."""
    return uuid4()
