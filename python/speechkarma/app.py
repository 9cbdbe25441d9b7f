"""FastAPI application creation and configuration.

Registers exception handlers, auth middleware, request-id middleware, and
routes.

Middleware ordering:
- Middleware runs in reverse order of registration
- RequestIDMiddleware is added LAST (see add_request_id_middleware) so it
  runs FIRST and every response, auth failures included, has X-Request-ID

Per request:
1. RequestIDMiddleware (sets request_id, starts timer)
2. AuthMiddleware (optional bearer token, profile bootstrap, sets viewer)
3. Route handler

Enrichment client lifecycle:
- httpx.AsyncClient is created at startup and stored in app.state
- StatementEnricher wraps it through the OpenRouter adapter
- The client is closed at shutdown
"""

from contextlib import asynccontextmanager
from typing import Any
from uuid import UUID

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session, sessionmaker
from starlette.exceptions import HTTPException as StarletteHTTPException

from speechkarma.api.routes import create_api_router
from speechkarma.auth.middleware import AuthMiddleware, BootstrapCallback
from speechkarma.auth.verifier import SupabaseJwksVerifier, TokenVerifier
from speechkarma.config import get_settings
from speechkarma.db.session import get_session_factory
from speechkarma.errors import ApiError, ApiErrorCode
from speechkarma.logging import configure_logging, get_logger
from speechkarma.middleware.request_id import RequestIDMiddleware
from speechkarma.responses import (
    api_error_handler,
    error_response,
    http_exception_handler,
    unhandled_exception_handler,
)
from speechkarma.services.enrichment import OpenRouterAdapter, StatementEnricher
from speechkarma.services.profiles import ensure_profile

logger = get_logger(__name__)

# Field-specific codes for request validation failures
VALIDATION_FIELD_CODES: dict[str, ApiErrorCode] = {
    "page": ApiErrorCode.E_INVALID_PAGINATION,
    "limit": ApiErrorCode.E_INVALID_PAGINATION,
    "time_range": ApiErrorCode.E_INVALID_TIME_RANGE,
    "statement_text": ApiErrorCode.E_STATEMENT_TEXT_INVALID,
    "statement_timestamp": ApiErrorCode.E_STATEMENT_TIMESTAMP_INVALID,
    "display_name": ApiErrorCode.E_DISPLAY_NAME_INVALID,
}


def _offending_field(error: dict[str, Any]) -> str | None:
    """Last string component of a validation error location, e.g. ("query", "limit")."""
    for part in reversed(error.get("loc", ())):
        if isinstance(part, str) and part not in ("body", "query", "path"):
            return part
    return None


def validation_error_response(exc: RequestValidationError) -> JSONResponse:
    """Map a FastAPI validation failure onto the 400 error envelope."""
    errors = exc.errors()
    first = errors[0] if errors else {}

    if first.get("type") == "json_invalid":
        return JSONResponse(
            status_code=400,
            content=error_response(ApiErrorCode.E_INVALID_REQUEST, "Malformed JSON body"),
        )

    field = _offending_field(first)
    code = VALIDATION_FIELD_CODES.get(field or "", ApiErrorCode.E_INVALID_REQUEST)
    message = first.get("msg") or "Invalid request"
    if field:
        message = f"{field}: {message}"
    return JSONResponse(
        status_code=400,
        content=error_response(code, message, details={"field": field} if field else None),
    )


def create_bootstrap_callback(
    session_factory: sessionmaker[Session] | None = None,
) -> BootstrapCallback:
    """Create the profile bootstrap callback used by the auth middleware.

    Each call opens its own session, ensures the profile row, and closes it.
    """
    factory = session_factory or get_session_factory()

    def bootstrap(user_id: UUID, claims: dict[str, Any]) -> None:
        db = factory()
        try:
            ensure_profile(db, user_id, claims)
        finally:
            db.close()

    return bootstrap


def create_token_verifier() -> SupabaseJwksVerifier:
    """Create the Supabase JWKS verifier from settings.

    All environments use the same verifier; only the configuration differs.
    """
    settings = get_settings()

    return SupabaseJwksVerifier(
        jwks_url=settings.supabase_jwks_url,  # type: ignore
        issuer=settings.normalized_issuer,  # type: ignore
        audiences=settings.audience_list,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Own the shared HTTP client and the statement enricher."""
    settings = get_settings()

    app.state.httpx_client = httpx.AsyncClient(
        timeout=httpx.Timeout(settings.ai_summary_timeout_s, connect=5.0),
        limits=httpx.Limits(max_connections=20, max_keepalive_connections=10),
    )
    app.state.enricher = StatementEnricher.from_settings(
        OpenRouterAdapter(app.state.httpx_client, site_url=settings.site_url),
        settings,
    )

    if settings.use_ai_summary and not settings.openrouter_api_key:
        logger.warning("enrichment_not_configured", reason="missing_openrouter_api_key")
    logger.info(
        "enricher_initialized",
        enabled=settings.ai_summary_configured,
        model_name=settings.ai_summary_model,
        timeout_s=settings.ai_summary_timeout_s,
    )

    yield

    await app.state.httpx_client.aclose()
    logger.info("httpx_client_closed")


def create_app(
    skip_auth_middleware: bool = False,
    token_verifier: TokenVerifier | None = None,
    bootstrap_callback: BootstrapCallback | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        skip_auth_middleware: If True, skip adding auth middleware (for testing).
        token_verifier: Optional custom token verifier (for testing).
        bootstrap_callback: Optional profile bootstrap (for testing). Defaults
            to one backed by the application session factory.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()
    configure_logging(json_format=settings.log_json, level=settings.log_level)

    app = FastAPI(
        title="SpeechKarma API",
        description="Archive of attributed political statements",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return validation_error_response(exc)

    app.include_router(create_api_router())

    if not skip_auth_middleware:
        app.add_middleware(
            AuthMiddleware,
            verifier=token_verifier or create_token_verifier(),
            bootstrap_callback=bootstrap_callback or create_bootstrap_callback(),
        )
        logger.info("auth_middleware_enabled", env=settings.speechkarma_env.value)

    return app


def add_request_id_middleware(app: FastAPI, log_requests: bool = True) -> None:
    """Add request-id middleware to the app.

    Call AFTER all other middleware is added so it runs FIRST.
    """
    app.add_middleware(RequestIDMiddleware, log_requests=log_requests)
    logger.info("request_id_middleware_enabled")
