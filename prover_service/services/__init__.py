"""
Service layer: request orchestration between routers and the witness /
prover packages. Routers stay thin; everything testable without HTTP lives here.
"""

from __future__ import annotations

from .prove import prove
from .witness import encode_witness

__all__ = ["prove", "encode_witness"]
