"""Pydantic request/response models for the HTTP API."""

from __future__ import annotations

from .prove import ProveRequest, ProveResponse
from .witness import WitnessRequest, WitnessResponse

__all__ = ["ProveRequest", "ProveResponse", "WitnessRequest", "WitnessResponse"]
