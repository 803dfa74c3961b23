"""
Request correlation.

Every request gets an id (inbound ``X-Request-Id`` or a fresh uuid4 hex) and
a W3C trace context: an inbound ``traceparent`` keeps its trace id and gets a
new span id, otherwise a new trace starts. The ids are put on
``request.state`` for the error handlers, bound into structlog contextvars for
the lifetime of the request (proof runs included) and echoed on the response.
"""

from __future__ import annotations

import secrets
import string
import uuid
from typing import Optional, Tuple

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from structlog.contextvars import bound_contextvars

REQUEST_ID_HEADER = "X-Request-Id"
TRACEPARENT_HEADER = "traceparent"

_HEX = frozenset(string.hexdigits.lower())


def _is_hex(s: str, size: int) -> bool:
    return len(s) == size and set(s) <= _HEX and s.strip("0") != ""


def parse_traceparent(value: str) -> Optional[Tuple[str, str, str]]:
    """``00-<trace:32>-<span:16>-<flags:2>`` to (trace_id, span_id, flags); None if invalid."""
    parts = value.strip().split("-")
    if len(parts) != 4:
        return None
    ver, trace_id, span_id, flags = parts
    if len(ver) != 2 or ver == "ff" or not set(ver) <= _HEX or len(flags) != 2 or not set(flags) <= _HEX:
        return None
    if not (_is_hex(trace_id, 32) and _is_hex(span_id, 16)):
        return None
    return trace_id, span_id, flags


class RequestIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        inbound = parse_traceparent(request.headers.get(TRACEPARENT_HEADER, ""))
        trace_id, flags = (inbound[0], inbound[2]) if inbound else (secrets.token_hex(16), "01")
        span_id = secrets.token_hex(8)

        request.state.request_id = request_id
        request.state.trace_id = trace_id
        request.state.span_id = span_id

        with bound_contextvars(request_id=request_id, trace_id=trace_id, span_id=span_id):
            response = await call_next(request)

        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers[TRACEPARENT_HEADER] = f"00-{trace_id}-{span_id}-{flags}"
        return response


__all__ = ["RequestIdMiddleware", "parse_traceparent", "REQUEST_ID_HEADER", "TRACEPARENT_HEADER"]
