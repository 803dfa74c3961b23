"""
Prove Router

Endpoint:
  - POST /prove : run `bb prove_ultra_honk` on a base64 circuit + witness

Thin shim over `prover_service.services.prove.prove`.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends

from ..deps import get_app_metrics, get_registry, get_runner
from ..metrics import Metrics
from ..models.prove import ProveRequest, ProveResponse
from ..prover import BinaryRegistry, ProverRunner
from ..services.prove import prove as run_prove

log = logging.getLogger(__name__)
router = APIRouter(tags=["prove"])


@router.post(
    "/prove",
    summary="Generate an UltraHonk proof with a pinned bb version",
    response_model=ProveResponse,
)
async def post_prove(
    req: Optional[ProveRequest] = Body(default=None),
    registry: BinaryRegistry = Depends(get_registry),
    runner: ProverRunner = Depends(get_runner),
    metrics: Optional[Metrics] = Depends(get_app_metrics),
) -> ProveResponse:
    """
    Stage the circuit and witness, run the prover, and return the proof
    base64-encoded alongside the prover's stderr (`bbout`).

    400 for malformed requests or unsupported versions (with
    `supportedVersions`), 500 when the prover fails, 504 on timeout.
    """
    log.debug("POST /prove bb_version=%s", getattr(req, "bb_version", None))
    return await run_prove(req, registry=registry, runner=runner, metrics=metrics)
