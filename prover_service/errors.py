"""
Errors the HTTP layer reports to clients.

Each :class:`ApiError` knows its HTTP status, a stable ``code`` and the
human ``message``; :mod:`prover_service.middleware.errors` renders it as
``application/problem+json``. ``message`` is also sent as ``error``, the field
existing prover clients read.

    raise BadRequest("Missing witness field in request body")
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Sequence

from .witness.errors import EncodingError

_TITLES = {
    "bad_request": "Bad Request",
    "unsupported_version": "Unsupported Prover Version",
    "witness_invalid": "Invalid Witness Inputs",
    "prover_failed": "Prover Failed",
    "prover_timeout": "Prover Timed Out",
}


@dataclass(eq=False)
class ApiError(Exception):
    message: str
    status_code: int = 400
    code: str = "bad_request"
    details: Optional[Mapping[str, Any]] = None

    def __post_init__(self) -> None:
        super().__init__(self.message)

    @property
    def title(self) -> str:
        return _TITLES.get(self.code, "Error")

    def members(self) -> Dict[str, Any]:
        """
        Extension members for the problem body. ``details`` is included whole;
        its top-level keys are also lifted (e.g. ``supportedVersions``).
        """
        if not self.details:
            return {}
        return {**self.details, "details": dict(self.details)}


class BadRequest(ApiError):
    def __init__(self, message: str, *, details: Optional[Mapping[str, Any]] = None):
        super().__init__(message, 400, "bad_request", details)


class UnsupportedVersion(ApiError):
    """No ``bb_version`` given, or one without a configured binary."""

    def __init__(self, version: Optional[str], supported: Sequence[str]):
        if version:
            message = f"Unsupported bb version: {version}"
        else:
            message = "Missing bb_version in request body"
        super().__init__(message, 400, "unsupported_version", {"supportedVersions": list(supported)})


class WitnessInvalid(ApiError):
    def __init__(self, err: EncodingError):
        # "error" would shadow the top-level message, so only nest it
        super().__init__(err.message, 422, "witness_invalid", {"error": err.to_dict()})

    def members(self) -> Dict[str, Any]:
        return {"details": dict(self.details or {})}


class ProverFailed(ApiError):
    def __init__(self, message: str = "Failed to execute bb prove_ultra_honk", *, details: Optional[Mapping[str, Any]] = None):
        super().__init__(message, 500, "prover_failed", details)


class ProverTimeout(ApiError):
    def __init__(self, timeout: float):
        super().__init__(
            f"bb prove_ultra_honk did not finish within {timeout:g}s",
            504,
            "prover_timeout",
            {"timeoutSeconds": timeout},
        )


__all__ = [
    "ApiError",
    "BadRequest",
    "UnsupportedVersion",
    "WitnessInvalid",
    "ProverFailed",
    "ProverTimeout",
]
