"""
Registrar Backend: Request ID Middleware
=========================================

What:  Assigns a correlation id to each request and echoes it back.
How:   Reuses the client's X-Request-ID header when present, otherwise
       generates a short uuid4 prefix. The id is stored in a ContextVar so
       exception handlers and loggers can read it without access to the
       Request object.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

# Coroutine-local: concurrent requests on one event loop each see their own id
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Stores the request id in `request_id_var` and `request.state.request_id`."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:8]
        # Not reset afterwards: the catch-all 500 handler runs outside this
        # middleware and still needs the id
        request_id_var.set(rid)
        request.state.request_id = rid
        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = rid
        return response
