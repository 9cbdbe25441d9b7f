"""Tests for X-Request-ID middleware.

Tests cover:
- Request ID generation when missing or invalid
- Request ID preservation and UUID normalization
- Request ID presence on auth failures and in error bodies
"""

from uuid import UUID

import pytest
from fastapi.testclient import TestClient

from speechkarma.app import add_request_id_middleware
from speechkarma.middleware.request_id import resolve_request_id


@pytest.fixture
def request_id_client(authenticated_app):
    add_request_id_middleware(authenticated_app, log_requests=False)
    with TestClient(authenticated_app) as client:
        yield client


class TestResolveRequestId:
    def test_generates_when_missing(self):
        assert UUID(resolve_request_id(None)).version == 4

    def test_keeps_token(self):
        assert resolve_request_id("trace-abc_1.2") == "trace-abc_1.2"

    def test_lowercases_uuid(self):
        value = "0F8FAD5B-D9CB-469F-A165-70867728950E"
        assert resolve_request_id(value) == value.lower()

    @pytest.mark.parametrize("value", ["has space", "a" * 129, "semi;colon"])
    def test_replaces_invalid(self, value):
        result = resolve_request_id(value)
        assert result != value
        UUID(result)


class TestRequestIdMiddleware:
    def test_echoed_on_success(self, request_id_client):
        response = request_id_client.get("/health", headers={"X-Request-ID": "abc-123"})
        assert response.headers["X-Request-ID"] == "abc-123"

    def test_present_on_auth_failure(self, request_id_client):
        response = request_id_client.get(
            "/profiles/me", headers={"Authorization": "Bearer not-a-jwt"}
        )

        assert response.status_code == 401
        request_id = response.headers["X-Request-ID"]
        assert response.json()["error"]["request_id"] == request_id
