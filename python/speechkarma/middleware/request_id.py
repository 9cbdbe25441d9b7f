"""X-Request-ID handling and per-request access logging.

Every response carries an X-Request-ID header, including auth failures,
so this middleware must wrap everything else (register it last).

Incoming IDs are kept when they are a UUID (lowercased) or a short token of
[A-Za-z0-9._-]; anything else is replaced with a fresh UUID4.
"""

import re
import time
import uuid

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from speechkarma.logging import clear_request_context, get_logger, set_request_context

REQUEST_ID_HEADER = "X-Request-ID"
MAX_REQUEST_ID_LENGTH = 128

_TOKEN_PATTERN = re.compile(r"^[A-Za-z0-9._-]{1,128}$")

logger = get_logger(__name__)


def resolve_request_id(incoming: str | None) -> str:
    """Return the request ID to use for a request.

    Args:
        incoming: Raw X-Request-ID header value, if any.

    Returns:
        The normalized incoming ID when acceptable, else a new UUID4 string.
    """
    if not incoming or len(incoming.encode("utf-8")) > MAX_REQUEST_ID_LENGTH:
        return str(uuid.uuid4())
    try:
        return str(uuid.UUID(incoming)) if len(incoming) == 36 else _check_token(incoming)
    except ValueError:
        return _check_token(incoming)


def _check_token(value: str) -> str:
    return value if _TOKEN_PATTERN.match(value) else str(uuid.uuid4())


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Assigns a request ID, binds logging context, and logs one access line.

    Args:
        app: The ASGI application.
        log_requests: Emit a request_completed entry per request.
    """

    def __init__(self, app, log_requests: bool = True):
        super().__init__(app)
        self.log_requests = log_requests

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        started = time.monotonic()
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id
        set_request_context(request_id, path=request.url.path, method=request.method)

        try:
            response = await call_next(request)

            viewer = getattr(request.state, "viewer", None)
            if viewer is not None:
                set_request_context(request_id, user_id=str(viewer.user_id))

            response.headers[REQUEST_ID_HEADER] = request_id
            if self.log_requests:
                logger.info(
                    "request_completed",
                    status_code=response.status_code,
                    duration_ms=round((time.monotonic() - started) * 1000, 2),
                )
            return response
        except Exception:
            logger.exception("request_failed")
            raise
        finally:
            clear_request_context()
