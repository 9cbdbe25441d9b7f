"""Authentication middleware for FastAPI.

Provides:
- AuthMiddleware: resolves an optional bearer token into a Viewer
- get_viewer: dependency for routes that require authentication
- get_optional_viewer: dependency for routes that are public but viewer-aware

Reads are public: a request without an Authorization header proceeds as
anonymous and routes decide whether that is acceptable. A header that is
present but malformed or fails verification is always rejected with 401.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from speechkarma.auth.verifier import TokenVerifier
from speechkarma.errors import ApiError, ApiErrorCode
from speechkarma.logging import get_logger
from speechkarma.responses import error_response

logger = get_logger(__name__)

AUTHORIZATION_HEADER = "authorization"

# Paths that never look at credentials
PUBLIC_PATHS = {"/health", "/docs", "/redoc", "/openapi.json"}

BootstrapCallback = Callable[[UUID, dict[str, Any]], None]


@dataclass
class Viewer:
    """Authenticated viewer identity.

    Attributes:
        user_id: The viewer's profile ID (JWT sub claim).
    """

    user_id: UUID


class AuthMiddleware(BaseHTTPMiddleware):
    """Optional bearer-token authentication.

    Order of checks:
    1. Skip if public path
    2. No Authorization header: continue anonymously (viewer = None)
    3. Parse the bearer token (malformed header -> 401)
    4. Verify token via TokenVerifier (invalid -> 401, JWKS down -> 503)
    5. Call bootstrap callback so the viewer's profile exists
    6. Attach Viewer to request state
    """

    def __init__(
        self,
        app: ASGIApp,
        verifier: TokenVerifier,
        bootstrap_callback: BootstrapCallback | None = None,
    ):
        super().__init__(app)
        self.verifier = verifier
        self.bootstrap_callback = bootstrap_callback

    async def dispatch(self, request: Request, call_next):
        request.state.viewer = None

        if request.url.path in PUBLIC_PATHS:
            return await call_next(request)

        auth_header = request.headers.get(AUTHORIZATION_HEADER)
        if auth_header is None:
            return await call_next(request)

        token = self._parse_bearer(auth_header)
        if not token:
            logger.warning("auth_failure", reason="invalid_header_format", request_path=request.url.path)
            return self._error_json_response(
                ApiErrorCode.E_UNAUTHENTICATED, "Invalid authorization header format", 401
            )

        try:
            claims = self.verifier.verify(token)
        except ApiError as e:
            return self._error_json_response(e.code, e.message, e.status_code)

        user_id = UUID(claims["sub"])

        if self.bootstrap_callback:
            try:
                self.bootstrap_callback(user_id, claims)
            except Exception:
                logger.exception("profile_bootstrap_failed", user_id=str(user_id))
                return self._error_json_response(
                    ApiErrorCode.E_INTERNAL, "Internal server error", 500
                )

        request.state.viewer = Viewer(user_id=user_id)
        return await call_next(request)

    @staticmethod
    def _parse_bearer(auth_header: str) -> str:
        """Return the token from a ``Bearer <token>`` header, or "" if malformed."""
        if not auth_header.lower().startswith("bearer "):
            return ""
        return auth_header[7:].strip()

    @staticmethod
    def _error_json_response(code: ApiErrorCode, message: str, status_code: int) -> JSONResponse:
        return JSONResponse(status_code=status_code, content=error_response(code, message))


def get_optional_viewer(request: Request) -> Viewer | None:
    """FastAPI dependency: the authenticated viewer, or None when anonymous."""
    return getattr(request.state, "viewer", None)


def get_viewer(request: Request) -> Viewer:
    """FastAPI dependency: the authenticated viewer.

    Raises:
        ApiError(E_UNAUTHENTICATED): The request carried no credentials.
    """
    viewer = get_optional_viewer(request)
    if viewer is None:
        raise ApiError(ApiErrorCode.E_UNAUTHENTICATED, "Authentication required")
    return viewer
