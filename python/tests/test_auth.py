"""Tests for token verification and the auth middleware.

Tests cover:
- SupabaseJwksVerifier claim checks with a mocked JWKS client
- JWKS refresh on kid miss, and JWKS outage -> 503
- Middleware: anonymous passthrough, malformed header, bad tokens, bootstrap
"""

import time
from unittest.mock import MagicMock, patch
from uuid import uuid4

import jwt
import pytest
from cryptography.hazmat.primitives.asymmetric import rsa
from jwt.exceptions import PyJWKClientError

from speechkarma.auth.verifier import SupabaseJwksVerifier
from speechkarma.db.models import Profile
from speechkarma.errors import ApiError, ApiErrorCode
from tests.helpers import (
    auth_headers,
    mint_expired_token,
    mint_test_token,
    mint_token_with_bad_signature,
)

ISSUER = "https://test.supabase.co/auth/v1"


class TestSupabaseJwksVerifier:
    """All tests mock the JWKS client; no network."""

    @pytest.fixture
    def private_key(self):
        return rsa.generate_private_key(public_exponent=65537, key_size=2048)

    @pytest.fixture
    def verifier(self):
        return SupabaseJwksVerifier(
            jwks_url=f"{ISSUER}/.well-known/jwks.json",
            issuer=f"{ISSUER}/",
            audiences=["authenticated"],
        )

    def mint_token(self, private_key, sub: str, **overrides) -> str:
        now = int(time.time())
        payload = {
            "sub": sub,
            "iss": ISSUER,
            "aud": "authenticated",
            "iat": now,
            "exp": now + 3600,
            **overrides,
        }
        return jwt.encode(payload, private_key, algorithm="RS256", headers={"kid": "k1"})

    def _jwks_client(self, private_key, side_effect=None):
        signing_key = MagicMock()
        signing_key.key = private_key.public_key()
        client = MagicMock()
        if side_effect is None:
            client.get_signing_key_from_jwt.return_value = signing_key
        else:
            client.get_signing_key_from_jwt.side_effect = [
                signing_key if item == "key" else item for item in side_effect
            ]
        return client

    def test_valid_token(self, verifier, private_key):
        user_id = str(uuid4())
        token = self.mint_token(private_key, user_id)

        with patch.object(verifier, "_client", return_value=self._jwks_client(private_key)):
            claims = verifier.verify(token)

        assert claims["sub"] == user_id

    @pytest.mark.parametrize(
        "overrides,message",
        [
            ({"exp": int(time.time()) - 3600}, "Token expired"),
            ({"iss": "https://evil.example"}, "Invalid token issuer"),
            ({"aud": "anon"}, "Invalid token audience"),
        ],
    )
    def test_rejected_claims(self, verifier, private_key, overrides, message):
        token = self.mint_token(private_key, str(uuid4()), **overrides)

        with patch.object(verifier, "_client", return_value=self._jwks_client(private_key)):
            with pytest.raises(ApiError) as exc_info:
                verifier.verify(token)

        assert exc_info.value.code == ApiErrorCode.E_UNAUTHENTICATED
        assert exc_info.value.message == message

    def test_sub_must_be_uuid(self, verifier, private_key):
        token = self.mint_token(private_key, "not-a-uuid")

        with patch.object(verifier, "_client", return_value=self._jwks_client(private_key)):
            with pytest.raises(ApiError) as exc_info:
                verifier.verify(token)

        assert exc_info.value.code == ApiErrorCode.E_UNAUTHENTICATED

    def test_kid_miss_refreshes_once(self, verifier, private_key):
        token = self.mint_token(private_key, str(uuid4()))
        client = self._jwks_client(
            private_key,
            side_effect=[PyJWKClientError("Unable to find a signing key that matches"), "key"],
        )

        with patch.object(verifier, "_client", return_value=client) as get_client:
            verifier.verify(token)

        get_client.assert_any_call(refresh=True)

    def test_kid_still_missing_after_refresh(self, verifier, private_key):
        token = self.mint_token(private_key, str(uuid4()))
        miss = PyJWKClientError("Unable to find a signing key that matches")
        client = self._jwks_client(private_key, side_effect=[miss, miss])

        with patch.object(verifier, "_client", return_value=client):
            with pytest.raises(ApiError) as exc_info:
                verifier.verify(token)

        assert exc_info.value.code == ApiErrorCode.E_UNAUTHENTICATED

    def test_jwks_unreachable(self, verifier, private_key):
        token = self.mint_token(private_key, str(uuid4()))
        client = self._jwks_client(
            private_key, side_effect=[PyJWKClientError("Fail to fetch data from the url")]
        )

        with patch.object(verifier, "_client", return_value=client):
            with pytest.raises(ApiError) as exc_info:
                verifier.verify(token)

        assert exc_info.value.code == ApiErrorCode.E_AUTH_UNAVAILABLE
        assert exc_info.value.status_code == 503


class TestAuthMiddleware:
    def test_anonymous_read_allowed(self, authenticated_client):
        response = authenticated_client.get("/statements")
        assert response.status_code == 200

    def test_malformed_header(self, authenticated_client):
        response = authenticated_client.get("/statements", headers={"Authorization": "Token abc"})

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "E_UNAUTHENTICATED"

    def test_expired_token_rejected_even_on_public_read(self, authenticated_client):
        token = mint_expired_token(uuid4())
        response = authenticated_client.get(
            "/statements", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == 401

    def test_bad_signature(self, authenticated_client):
        token = mint_token_with_bad_signature(uuid4())
        response = authenticated_client.get(
            "/profiles/me", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == 401

    def test_health_skips_auth(self, authenticated_client):
        response = authenticated_client.get("/health", headers={"Authorization": "garbage"})
        assert response.status_code == 200

    def test_bootstrap_uses_display_name_claim(
        self, authenticated_client, db_session, test_user_id
    ):
        token = mint_test_token(
            test_user_id,
            email="someone@example.org",
            user_metadata={"display_name": "  Policy Watcher  "},
        )

        response = authenticated_client.get(
            "/profiles/me", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == 200
        assert response.json()["data"]["display_name"] == "Policy Watcher"
        assert db_session.get(Profile, test_user_id) is not None

    def test_bootstrap_is_idempotent(self, authenticated_client, test_user_id):
        for _ in range(2):
            response = authenticated_client.get("/profiles/me", headers=auth_headers(test_user_id))
            assert response.status_code == 200

    def test_me_requires_auth(self, authenticated_client):
        response = authenticated_client.get("/profiles/me")

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "E_UNAUTHENTICATED"
