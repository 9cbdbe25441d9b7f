"""API error definitions.

All API errors are defined here with their corresponding HTTP status codes.
"""

from enum import Enum
from typing import Any


class ApiErrorCode(str, Enum):
    """Standardized error codes for the API.

    Format: E_CATEGORY_NAME
    """

    # Authentication errors (401)
    E_UNAUTHENTICATED = "E_UNAUTHENTICATED"

    # Authorization errors (403)
    E_FORBIDDEN = "E_FORBIDDEN"
    E_GRACE_PERIOD_EXPIRED = "E_GRACE_PERIOD_EXPIRED"
    E_STATEMENT_DELETED = "E_STATEMENT_DELETED"

    # Not found errors (404)
    E_NOT_FOUND = "E_NOT_FOUND"
    E_STATEMENT_NOT_FOUND = "E_STATEMENT_NOT_FOUND"
    E_POLITICIAN_NOT_FOUND = "E_POLITICIAN_NOT_FOUND"
    E_PARTY_NOT_FOUND = "E_PARTY_NOT_FOUND"
    E_PROFILE_NOT_FOUND = "E_PROFILE_NOT_FOUND"

    # Validation errors (400)
    E_INVALID_REQUEST = "E_INVALID_REQUEST"
    E_STATEMENT_TEXT_INVALID = "E_STATEMENT_TEXT_INVALID"
    E_STATEMENT_TIMESTAMP_INVALID = "E_STATEMENT_TIMESTAMP_INVALID"
    E_INVALID_TIME_RANGE = "E_INVALID_TIME_RANGE"
    E_INVALID_PAGINATION = "E_INVALID_PAGINATION"
    E_DISPLAY_NAME_INVALID = "E_DISPLAY_NAME_INVALID"

    # Conflict errors (409)
    E_CONFLICT = "E_CONFLICT"

    # Server errors
    E_AUTH_UNAVAILABLE = "E_AUTH_UNAVAILABLE"  # 503
    E_INTERNAL = "E_INTERNAL"  # 500


# Error code to HTTP status mapping
ERROR_CODE_TO_STATUS: dict[ApiErrorCode, int] = {
    ApiErrorCode.E_UNAUTHENTICATED: 401,
    ApiErrorCode.E_FORBIDDEN: 403,
    ApiErrorCode.E_GRACE_PERIOD_EXPIRED: 403,
    ApiErrorCode.E_STATEMENT_DELETED: 403,
    ApiErrorCode.E_NOT_FOUND: 404,
    ApiErrorCode.E_STATEMENT_NOT_FOUND: 404,
    ApiErrorCode.E_POLITICIAN_NOT_FOUND: 404,
    ApiErrorCode.E_PARTY_NOT_FOUND: 404,
    ApiErrorCode.E_PROFILE_NOT_FOUND: 404,
    ApiErrorCode.E_INVALID_REQUEST: 400,
    ApiErrorCode.E_STATEMENT_TEXT_INVALID: 400,
    ApiErrorCode.E_STATEMENT_TIMESTAMP_INVALID: 400,
    ApiErrorCode.E_INVALID_TIME_RANGE: 400,
    ApiErrorCode.E_INVALID_PAGINATION: 400,
    ApiErrorCode.E_DISPLAY_NAME_INVALID: 400,
    ApiErrorCode.E_CONFLICT: 409,
    ApiErrorCode.E_AUTH_UNAVAILABLE: 503,
    ApiErrorCode.E_INTERNAL: 500,
}


class ApiError(Exception):
    """Base exception for API errors.

    Attributes:
        code: The error code enum value
        message: Human-readable error message
        status_code: HTTP status code (derived from code)
        details: Optional structured context (e.g. the offending field)
    """

    def __init__(self, code: ApiErrorCode, message: str, details: dict[str, Any] | None = None):
        self.code = code
        self.message = message
        self.details = details
        self.status_code = ERROR_CODE_TO_STATUS.get(code, 500)
        super().__init__(message)


class NotFoundError(ApiError):
    """Resource not found error."""

    def __init__(self, code: ApiErrorCode = ApiErrorCode.E_NOT_FOUND, message: str = "Not found"):
        super().__init__(code, message)


class ForbiddenError(ApiError):
    """Authorization failure error."""

    def __init__(self, code: ApiErrorCode = ApiErrorCode.E_FORBIDDEN, message: str = "Forbidden"):
        super().__init__(code, message)


class InvalidRequestError(ApiError):
    """Invalid request error.

    Pass ``field`` to identify the offending input in the error envelope.
    """

    def __init__(
        self,
        code: ApiErrorCode = ApiErrorCode.E_INVALID_REQUEST,
        message: str = "Invalid request",
        field: str | None = None,
    ):
        super().__init__(code, message, details={"field": field} if field else None)


class ConflictError(ApiError):
    """Uniqueness conflict error."""

    def __init__(self, code: ApiErrorCode = ApiErrorCode.E_CONFLICT, message: str = "Conflict"):
        super().__init__(code, message)
