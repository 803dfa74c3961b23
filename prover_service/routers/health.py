"""
Probe and metadata routes.

  GET /          plain-text greeting; what load balancers hit by default
  GET /healthz   liveness, 200 while the process serves requests
  GET /readyz    200 when staging works and a bb binary resolves, else 503
  GET /version   build metadata
  GET /versions  configured bb versions and where each binary resolves
"""

from __future__ import annotations

import os
import platform
import tempfile
import time
from typing import Any, Dict

import structlog
from fastapi import APIRouter, Depends, Response
from fastapi.responses import PlainTextResponse

from .. import version as svc_version
from ..config import Settings
from ..deps import get_app_settings, get_registry
from ..prover import BinaryRegistry

log = structlog.get_logger(__name__)
router = APIRouter(tags=["health"])

STARTED_AT = time.time()


def _staging_check(settings: Settings) -> Dict[str, Any]:
    parent = str(settings.tmp_dir or tempfile.gettempdir())
    try:
        with tempfile.TemporaryDirectory(prefix="prover-probe-", dir=parent):
            pass
    except OSError as e:
        return {"ok": False, "path": parent, "error": str(e)}
    return {"ok": True, "path": parent}


def _prover_check(registry: BinaryRegistry) -> Dict[str, Any]:
    found = registry.availability()
    return {"ok": any(found.values()), "binaries": found}


@router.get("/", response_class=PlainTextResponse, summary="Greeting")
def root() -> str:
    return "Hello from the prover service"


@router.get("/healthz", summary="Liveness probe")
def healthz() -> Dict[str, Any]:
    return {
        "status": "ok",
        "service": "prover-service",
        "version": svc_version.__version__,
        "uptime_seconds": round(time.time() - STARTED_AT, 3),
    }


@router.get("/version", summary="Build metadata")
def version() -> Dict[str, Any]:
    return {
        "service": "prover-service",
        "version": svc_version.__version__,
        "git": svc_version.git_describe(),
        "python": platform.python_version(),
        "pid": os.getpid(),
        "uptime_seconds": round(time.time() - STARTED_AT, 3),
    }


@router.get("/versions", summary="Supported prover versions")
def versions(registry: BinaryRegistry = Depends(get_registry)) -> Dict[str, Any]:
    return {"supportedVersions": registry.supported(), "binaries": registry.availability()}


@router.get("/readyz", summary="Readiness probe")
def readyz(
    response: Response,
    settings: Settings = Depends(get_app_settings),
    registry: BinaryRegistry = Depends(get_registry),
) -> Dict[str, Any]:
    checks = {"staging": _staging_check(settings), "prover": _prover_check(registry)}
    ready = all(c["ok"] for c in checks.values())
    if not ready:
        log.warning("not_ready", failing=[name for name, c in checks.items() if not c["ok"]])
        response.status_code = 503
    return {"status": "ok" if ready else "degraded", "checks": checks}
