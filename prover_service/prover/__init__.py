"""Prover orchestration: version-pinned binaries and process execution."""

from __future__ import annotations

from .binaries import BinaryRegistry
from .runner import ProveResult, ProverRunner, build_command

__all__ = ["BinaryRegistry", "ProveResult", "ProverRunner", "build_command"]
