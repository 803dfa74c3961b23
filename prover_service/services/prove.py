"""
Proof service: validate a prove request, stage it, run the pinned prover,
and shape the response.

Checks happen in the order clients have always seen them:
  empty body → threads → bb_version → witness → circuit → version supported
"""

from __future__ import annotations

import base64
import binascii
from typing import Any, Optional

import structlog

from ..errors import ApiError, BadRequest, ProverTimeout, UnsupportedVersion
from ..metrics import Metrics
from ..models.prove import ProveRequest, ProveResponse
from ..prover import BinaryRegistry, ProverRunner

log = structlog.get_logger(__name__)


def parse_threads(raw: Any) -> Optional[int]:
    if raw is None:
        return None
    if isinstance(raw, bool):
        raise BadRequest("Threads parameter must be a positive number")
    if isinstance(raw, float):
        if not raw.is_integer():
            raise BadRequest("Threads parameter must be a positive number")
        raw = int(raw)
    try:
        threads = int(str(raw).strip())
    except ValueError:
        raise BadRequest("Threads parameter must be a positive number") from None
    if threads <= 0:
        raise BadRequest("Threads parameter must be a positive number")
    return threads


def decode_base64(value: str, field: str) -> bytes:
    # Line-wrapped payloads (`base64 file`, MIME) are accepted.
    compact = "".join(value.split())
    try:
        return base64.b64decode(compact, validate=True)
    except (binascii.Error, ValueError):
        raise BadRequest(f"Field {field} is not valid base64") from None


async def prove(
    req: Optional[ProveRequest],
    *,
    registry: BinaryRegistry,
    runner: ProverRunner,
    metrics: Optional[Metrics] = None,
) -> ProveResponse:
    if req is None:
        raise BadRequest("Empty request")

    # Client-supplied versions never become label values unless configured.
    version = req.bb_version if req.bb_version in registry.supported() else "unsupported"
    try:
        threads = parse_threads(req.threads)
        if not req.bb_version:
            raise UnsupportedVersion(None, registry.supported())
        if not req.witness:
            raise BadRequest("Missing witness field in request body")
        if not req.circuit:
            raise BadRequest("Missing circuit field in request body")
        binary = registry.resolve(req.bb_version)

        witness = decode_base64(req.witness, "witness")
        circuit = decode_base64(req.circuit, "circuit")
    except ApiError:
        if metrics is not None:
            metrics.prove_requests_total.labels(version, "rejected").inc()
        raise

    if metrics is not None:
        metrics.prove_inflight.inc()
    try:
        result = await runner.prove(
            binary,
            circuit=circuit,
            witness=witness,
            threads=threads,
            stats=req.stats,
            log_output=req.logging,
        )
    except ProverTimeout:
        if metrics is not None:
            metrics.prove_requests_total.labels(version, "timeout").inc()
        raise
    except ApiError:
        if metrics is not None:
            metrics.prove_requests_total.labels(version, "failed").inc()
        raise
    finally:
        if metrics is not None:
            metrics.prove_inflight.dec()

    if metrics is not None:
        metrics.prove_requests_total.labels(version, "ok").inc()
        metrics.prove_duration_seconds.labels(version).observe(result.elapsed_seconds)
    log.info("proof_created", bb_version=version, proof_bytes=len(result.proof))

    return ProveResponse(
        success=True,
        proof=base64.b64encode(result.proof).decode("ascii"),
        bbout=result.stderr or "",
        elapsed_seconds=round(result.elapsed_seconds, 3),
    )


__all__ = ["prove", "parse_threads", "decode_base64"]
