"""
Access log: one ``http_request`` event per request with method, path,
status, duration_ms and the client address. request_id / trace_id come from
the contextvars bound by the request-id middleware, so this middleware must
run inside it.
"""

from __future__ import annotations

import time

import structlog
from fastapi import FastAPI
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

access_log = structlog.get_logger("prover_service.access")

# Probes and scrapes would drown out proof traffic at INFO.
QUIET_PATHS = frozenset({"/healthz", "/readyz", "/metrics"})


def _peer(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for", "")
    if forwarded:
        return forwarded.partition(",")[0].strip()
    return request.client.host if request.client else "-"


class AccessLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        t0 = time.monotonic()
        path = request.url.path
        try:
            response = await call_next(request)
        except Exception:
            access_log.error("http_request", method=request.method, path=path, status=500, peer=_peer(request))
            raise

        status = response.status_code
        if status >= 500:
            emit = access_log.error
        elif status >= 400:
            emit = access_log.warning
        elif path in QUIET_PATHS:
            emit = access_log.debug
        else:
            emit = access_log.info
        emit(
            "http_request",
            method=request.method,
            path=path,
            status=status,
            duration_ms=round((time.monotonic() - t0) * 1000, 2),
            peer=_peer(request),
        )
        return response


def install_access_log_middleware(app: FastAPI) -> None:
    app.add_middleware(AccessLogMiddleware)


__all__ = ["AccessLogMiddleware", "install_access_log_middleware"]
