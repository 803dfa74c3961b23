"""
Witness encoding models.

- WitnessRequest: named inputs plus the ABI they are encoded against. The ABI
  comes either inline (`abi`: parameter list or {"parameters": [...]}) or from
  a compiled circuit (`circuit`: JSON object or base64 of it).
- WitnessResponse: the witness map keyed by decimal index strings.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class WitnessRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    inputs: Dict[str, Any] = Field(..., description="Input values keyed by parameter name")
    abi: Optional[Union[List[Dict[str, Any]], Dict[str, Any]]] = Field(
        default=None, description="Circuit ABI (parameter list or ABI object)"
    )
    circuit: Optional[Union[Dict[str, Any], str]] = Field(
        default=None, description="Compiled circuit JSON, or base64 of it"
    )
    start_index: int = Field(default=0, ge=0, description="First witness index")

    @model_validator(mode="after")
    def _one_abi_source(self) -> "WitnessRequest":
        if (self.abi is None) == (self.circuit is None):
            raise ValueError("Provide exactly one of `abi` or `circuit`.")
        return self


class WitnessResponse(BaseModel):
    witness: Dict[str, str] = Field(..., description="Index -> 0x-prefixed field element")
    length: int = Field(..., description="Number of witness entries")
    start_index: int = Field(..., description="First index assigned")


__all__ = ["WitnessRequest", "WitnessResponse"]
