"""
Witness Router

Endpoint:
  - POST /witness : encode named inputs into a witness map using a circuit ABI
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends

from ..config import Settings
from ..deps import get_app_metrics, get_app_settings
from ..metrics import Metrics
from ..models.witness import WitnessRequest, WitnessResponse
from ..services.witness import encode_witness

log = logging.getLogger(__name__)
router = APIRouter(tags=["witness"])


@router.post(
    "/witness",
    summary="Encode inputs into an ABI-ordered witness map",
    response_model=WitnessResponse,
)
def post_witness(
    req: WitnessRequest,
    settings: Settings = Depends(get_app_settings),
    metrics: Optional[Metrics] = Depends(get_app_metrics),
) -> WitnessResponse:
    """
    Returns `{witness: {"<index>": "0x…"}, length, start_index}`.
    Inputs that do not match the ABI yield 422 with the structured error
    under `details.error` (kind, path, expected, actual).
    """
    log.debug("POST /witness start_index=%s", req.start_index)
    return encode_witness(req, limits=settings.encoding_limits(), metrics=metrics)
