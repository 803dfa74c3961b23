"""
Proof request/response models.

Request fields are all optional at the schema level: the service answers
missing or malformed fields with 400 problems (and, for bb_version, the list
of supported versions) rather than a generic 422.

Fields
------
bb_version : str        prover release to use, e.g. "0.69.0"
witness    : str        base64 of the compressed witness (witness.gz)
circuit    : str        base64 of the compiled circuit JSON
threads    : int|str    optional positive thread count passed to bb (integral floats allowed)
stats      : bool       run the prover under `time -v`
logging    : bool       log the prover's stdout/stderr
"""

from __future__ import annotations

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class ProveRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    bb_version: Optional[str] = Field(default=None, description="Prover version, e.g. 0.69.0")
    witness: Optional[str] = Field(default=None, description="Base64 compressed witness")
    circuit: Optional[str] = Field(default=None, description="Base64 compiled circuit JSON")
    threads: Optional[Union[int, float, str]] = Field(default=None, description="Positive thread count")
    stats: bool = Field(default=False, description="Collect resource usage via time -v")
    logging: bool = Field(default=False, description="Log prover stdout/stderr")


class ProveResponse(BaseModel):
    success: bool = True
    proof: str = Field(..., description="Base64 encoded proof bytes")
    bbout: str = Field(default="", description="Prover stderr")
    elapsed_seconds: float = Field(..., description="Wall-clock prover time")


__all__ = ["ProveRequest", "ProveResponse"]
