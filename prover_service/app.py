from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from .config import Settings, get_settings
from .logging import get_logger, setup_logging
from .metrics import setup_metrics
from .middleware.errors import install_error_handlers
from .middleware.logging import install_access_log_middleware
from .middleware.request_id import RequestIdMiddleware
from .prover import BinaryRegistry, ProverRunner
from .routers import build_router
from .version import __version__

log = get_logger(__name__)


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings: Settings = app.state.settings
    registry: BinaryRegistry = app.state.registry
    missing = [v for v, path in registry.availability().items() if path is None]
    log.info(
        "prover_service_started",
        version=__version__,
        supported_versions=registry.supported(),
        missing_binaries=missing,
        max_concurrent_proofs=settings.max_concurrent_proofs,
    )
    try:
        yield
    finally:
        log.info("prover_service_stopped")


def setup_cors(app: FastAPI, settings: Settings) -> None:
    """Install CORS only when origins are configured (deny by default)."""
    origins = settings.cors_origins
    if not origins:
        return
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "X-Request-Id"],
        expose_headers=["X-Request-Id"],
        max_age=600,
    )


def create_app(settings: Optional[Settings] = None, *, configure_logging: bool = True) -> FastAPI:
    """
    FastAPI factory. Wires settings, prover objects, middleware, metrics and routers.
    """
    cfg = settings or get_settings()
    if configure_logging:
        setup_logging(level=cfg.log_level.upper(), log_format=cfg.log_format)

    app = FastAPI(
        title="Prover Service",
        version=__version__,
        lifespan=_lifespan,
    )
    app.state.settings = cfg
    app.state.registry = BinaryRegistry(cfg.bb_versions)
    app.state.runner = ProverRunner(
        timeout=cfg.prove_timeout_seconds,
        max_concurrent=cfg.max_concurrent_proofs,
        tmp_dir=cfg.tmp_dir,
        time_binary=cfg.time_binary,
    )

    # Outermost last: request ids must be bound before access logging runs.
    install_access_log_middleware(app)
    app.add_middleware(RequestIdMiddleware)
    setup_cors(app, cfg)

    install_error_handlers(app)
    setup_metrics(app)

    app.include_router(build_router())
    return app


# Convenience entrypoint for `uvicorn prover_service.app:app`
app = create_app()
