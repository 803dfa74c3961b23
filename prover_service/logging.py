"""
Structured logging for the prover service.

structlog renders every record, including those from uvicorn and other stdlib
loggers, through a single ``ProcessorFormatter`` on the root handler:

- JSON lines by default, human-readable output with LOG_FORMAT=console
- request_id / trace_id / span_id merged from contextvars (bound by
  :class:`prover_service.middleware.request_id.RequestIdMiddleware`)
- request payload fields (base64 witness, circuit, proof) masked, since a
  single one can run to megabytes

    from prover_service.logging import setup_logging, get_logger

    setup_logging(level="DEBUG", log_format="console")
    get_logger(__name__).info("prove_started", bb_version="0.69.0")
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, List, Optional, Union

import structlog

SERVICE_NAME = "prover-service"

MASKED_FIELDS = frozenset({"witness", "circuit", "proof", "authorization"})

_UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def _mask_payloads(_: Any, __: str, event: Dict[str, Any]) -> Dict[str, Any]:
    for key, value in event.items():
        if key.lower() in MASKED_FIELDS and isinstance(value, (str, bytes)):
            event[key] = f"<{len(value)} bytes>"
    return event


def _tag_service(_: Any, __: str, event: Dict[str, Any]) -> Dict[str, Any]:
    event.setdefault("service", SERVICE_NAME)
    return event


def _pre_chain(log_format: str) -> List[Any]:
    chain: List[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        _mask_payloads,
        _tag_service,
    ]
    # console renderer prints tracebacks itself
    if log_format == "json":
        chain.append(structlog.processors.format_exc_info)
    return chain


def setup_logging(*, level: Optional[Union[str, int]] = None, log_format: Optional[str] = None) -> None:
    """
    Configure structlog and the stdlib root logger. Idempotent: handlers are
    replaced, not stacked, so app factories may call it repeatedly.
    """
    level = level or os.getenv("LOG_LEVEL", "INFO").upper()
    log_format = (log_format or os.getenv("LOG_FORMAT", "json")).lower()
    chain = _pre_chain(log_format)

    renderer: Any
    if log_format == "console":
        renderer = structlog.dev.ConsoleRenderer(colors=True)
    else:
        renderer = structlog.processors.JSONRenderer(sort_keys=True)

    structlog.configure(
        processors=[structlog.stdlib.filter_by_level, *chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=chain))

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)

    # uvicorn installs its own handlers; route them through ours
    for name in _UVICORN_LOGGERS:
        uv = logging.getLogger(name)
        uv.handlers.clear()
        uv.propagate = True


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


__all__ = ["setup_logging", "get_logger", "SERVICE_NAME"]
