"""FastAPI dependencies exposing the per-app objects built by `create_app`."""

from __future__ import annotations

from typing import Optional

from fastapi import Request

from .config import Settings
from .metrics import Metrics
from .prover import BinaryRegistry, ProverRunner


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_registry(request: Request) -> BinaryRegistry:
    return request.app.state.registry


def get_runner(request: Request) -> ProverRunner:
    return request.app.state.runner


def get_app_metrics(request: Request) -> Optional[Metrics]:
    return getattr(request.app.state, "metrics", None)
