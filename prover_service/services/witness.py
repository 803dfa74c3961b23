"""
Witness service: resolve the ABI a request refers to and run the encoder.

Encoder failures are converted to :class:`WitnessInvalid` (HTTP 422) carrying
the structured error, so callers see the offending path and expected/actual
values without parsing messages.
"""

from __future__ import annotations

import json
from typing import Any, Mapping, Optional

import structlog

from ..errors import BadRequest, WitnessInvalid
from ..metrics import Metrics
from ..models.witness import WitnessRequest, WitnessResponse
from ..witness import (DEFAULT_LIMITS, EncodingError, EncodingLimits, encode,
                       parse_abi, witness_to_json)
from .prove import decode_base64

log = structlog.get_logger(__name__)


def load_circuit(circuit: Any) -> Mapping[str, Any]:
    """Accept a circuit artifact as a JSON object or base64 of its JSON text."""
    if isinstance(circuit, Mapping):
        return circuit
    raw = decode_base64(str(circuit), "circuit")
    try:
        obj = json.loads(raw)
    except ValueError:
        raise BadRequest("Field circuit does not contain JSON") from None
    if not isinstance(obj, Mapping):
        raise BadRequest("Circuit JSON must be an object")
    return obj


def encode_witness(
    req: WitnessRequest,
    *,
    limits: EncodingLimits = DEFAULT_LIMITS,
    metrics: Optional[Metrics] = None,
) -> WitnessResponse:
    source = req.abi if req.abi is not None else load_circuit(req.circuit)
    try:
        parameters = parse_abi(source, limits=limits)
        witness = encode(req.inputs, parameters, req.start_index, limits=limits)
    except EncodingError as e:
        if metrics is not None:
            metrics.witness_encodings_total.labels("rejected").inc()
        log.info("witness_rejected", kind=e.kind, path=e.path)
        raise WitnessInvalid(e) from e

    if metrics is not None:
        metrics.witness_encodings_total.labels("ok").inc()
    return WitnessResponse(
        witness=witness_to_json(witness),
        length=len(witness),
        start_index=req.start_index,
    )


__all__ = ["encode_witness", "load_circuit"]
