"""
Request ID middleware.

Every log record emitted while a request is being handled carries its
request ID, and the ID is echoed back in the X-Request-ID header so a
client can quote it when reporting a problem.
"""

import uuid
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from core.logging_config import request_id_var

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Reuses a client supplied X-Request-ID, otherwise generates a UUID4.

    The ID lives in request.state and in a context variable that the log
    record factory from setup_logging reads. Overlapping requests each
    see their own value.
    """

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id

        token = request_id_var.set(request_id)
        try:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            request_id_var.reset(token)


def get_request_id(request: Request) -> str:
    """Request ID of the current request, or "no-request-id" outside the middleware."""
    return getattr(request.state, "request_id", "no-request-id")
