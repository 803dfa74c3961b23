"""HTTP middleware: request ids, access logging, problem+json error mapping."""

from __future__ import annotations

from .errors import PROBLEM_CT, install_error_handlers
from .logging import AccessLogMiddleware, install_access_log_middleware
from .request_id import RequestIdMiddleware

__all__ = [
    "AccessLogMiddleware",
    "PROBLEM_CT",
    "RequestIdMiddleware",
    "install_access_log_middleware",
    "install_error_handlers",
]
