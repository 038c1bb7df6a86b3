"""Per-request correlation id.

Learn: A caller may send its own X-Request-ID to stitch our logs to theirs.
It is accepted only if it is short and made of URL-safe characters, since
it is echoed back in a header and written into every log line. Anything
else is replaced with a fresh UUID.

The id, method and path are bound to structlog's contextvars for the
lifetime of the request, so auth failures, task writes and 500 tracebacks
all carry them.
"""

import re
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

HEADER = "X-Request-ID"
_ACCEPTED_ID = re.compile(r"[A-Za-z0-9._:-]{1,128}")


def request_id_for(request: Request) -> str:
    incoming = request.headers.get(HEADER, "")
    if _ACCEPTED_ID.fullmatch(incoming):
        return incoming
    return str(uuid.uuid4())


class RequestIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request_id_for(request)
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        response: Response = await call_next(request)
        response.headers[HEADER] = request_id
        return response
