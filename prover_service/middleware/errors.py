"""
Exception handlers rendering every failure as RFC 7807 problem+json.

Body members: type, title, status, detail, instance, request_id, trace_id,
plus ``error`` (same text as ``detail``, kept for prover clients), ``code``
for ApiErrors and whatever extension members the error contributes.
Tracebacks go to the log only.
"""

from __future__ import annotations

from http import HTTPStatus
from typing import Any, Dict, Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..errors import ApiError, WitnessInvalid
from ..witness.errors import EncodingError

PROBLEM_CT = "application/problem+json"

log = structlog.get_logger(__name__)


def _reason(status: int) -> str:
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return "Error"


def problem_response(
    request: Request,
    status: int,
    detail: str,
    *,
    title: Optional[str] = None,
    code: Optional[str] = None,
    members: Optional[Dict[str, Any]] = None,
) -> JSONResponse:
    state = request.state
    body: Dict[str, Any] = dict(members or {})
    # base members win over extension members of the same name
    body.update(
        type="about:blank",
        title=title or _reason(status),
        status=status,
        detail=detail,
        error=detail,
        instance=request.url.path,
        request_id=getattr(state, "request_id", ""),
        trace_id=getattr(state, "trace_id", ""),
    )
    if code:
        body["code"] = code
    return JSONResponse(jsonable_encoder(body), status_code=status, media_type=PROBLEM_CT)


async def on_api_error(request: Request, exc: ApiError) -> JSONResponse:
    emit = log.error if exc.status_code >= 500 else log.info
    emit("request_failed", status=exc.status_code, code=exc.code, reason=exc.message, path=request.url.path)
    return problem_response(
        request, exc.status_code, exc.message, title=exc.title, code=exc.code, members=exc.members()
    )


async def on_encoding_error(request: Request, exc: EncodingError) -> JSONResponse:
    return await on_api_error(request, WitnessInvalid(exc))


async def on_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    detail = exc.detail if isinstance(exc.detail, str) else _reason(exc.status_code)
    return problem_response(request, exc.status_code, detail)


async def on_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    log.info("request_invalid", path=request.url.path, errors=len(errors))
    return problem_response(request, 422, "Request validation failed.", members={"errors": errors})


async def on_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    log.exception("unhandled_exception", path=request.url.path)
    return problem_response(request, 500, "Internal server error. Quote the request_id when reporting this.")


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, on_api_error)  # type: ignore[arg-type]
    app.add_exception_handler(EncodingError, on_encoding_error)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, on_http_exception)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, on_validation_error)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, on_unexpected_error)


__all__ = ["install_error_handlers", "problem_response", "PROBLEM_CT"]
