"""Response envelopes and the exception handlers that produce error envelopes.

Every response body has exactly one of these shapes:
- Success: { "data": ... }
- Paginated: { "data": [...], "pagination": {page, limit, total, total_pages} }
- Error: { "error": { "code": "E_...", "message": "...", "request_id": "...", "details": {...} } }

Route handlers pass pydantic models straight in; they are encoded to JSON
types here.
"""

from typing import Any

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from speechkarma.errors import ApiError, ApiErrorCode
from speechkarma.logging import get_logger, get_request_id

logger = get_logger(__name__)

# Framework-raised HTTP errors (unknown route, wrong method, ...)
HTTP_STATUS_TO_CODE = {
    400: ApiErrorCode.E_INVALID_REQUEST,
    401: ApiErrorCode.E_UNAUTHENTICATED,
    403: ApiErrorCode.E_FORBIDDEN,
    404: ApiErrorCode.E_NOT_FOUND,
    405: ApiErrorCode.E_INVALID_REQUEST,
    409: ApiErrorCode.E_CONFLICT,
    422: ApiErrorCode.E_INVALID_REQUEST,
}


def success_response(data: BaseModel | list | dict) -> dict[str, Any]:
    return {"data": jsonable_encoder(data)}


def paginated_response(items: list, pagination: BaseModel | dict) -> dict[str, Any]:
    """Envelope for one page of a list endpoint.

    Args:
        items: Models (or dicts) on this page; may be empty past the last page.
        pagination: PaginationOut, or an equivalent dict.
    """
    return {"data": jsonable_encoder(items), "pagination": jsonable_encoder(pagination)}


def error_response(
    code: ApiErrorCode,
    message: str,
    request_id: str | None = None,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Build an error envelope.

    request_id defaults to the one bound for the current request.
    details is omitted when empty.
    """
    error: dict[str, Any] = {"code": code.value, "message": message}
    request_id = request_id or get_request_id()
    if request_id:
        error["request_id"] = request_id
    if details:
        error["details"] = details
    return {"error": error}


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(exc.code, exc.message, details=exc.details),
    )


async def http_exception_handler(request: Request, exc: Any) -> JSONResponse:
    code = HTTP_STATUS_TO_CODE.get(exc.status_code, ApiErrorCode.E_INTERNAL)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(code, str(exc.detail) if exc.detail else "An error occurred"),
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """500 with E_INTERNAL. The exception is logged, never echoed to the client."""
    logger.exception("request.unhandled_exception", exc_type=type(exc).__name__)
    return JSONResponse(
        status_code=500,
        content=error_response(ApiErrorCode.E_INTERNAL, "Internal server error"),
    )
