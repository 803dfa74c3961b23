"""
Routers package: aggregates all HTTP routes into a single APIRouter.

Usage (from the app factory):
    from prover_service.routers import build_router
    app.include_router(build_router())
"""

from __future__ import annotations

from typing import List

from fastapi import APIRouter

from . import health, prove, witness

# Order controls route declaration order and OpenAPI grouping.
ROUTERS: List[APIRouter] = [health.router, prove.router, witness.router]


def build_router() -> APIRouter:
    root = APIRouter()
    for r in ROUTERS:
        root.include_router(r)
    return root


__all__ = ["ROUTERS", "build_router"]
