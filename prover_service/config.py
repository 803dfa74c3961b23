"""
Service settings, read from the environment (and `.env` when present).

    LOG_LEVEL               INFO
    LOG_FORMAT              json | console
    HOST / PORT             0.0.0.0 / 3000
    BB_VERSIONS             JSON object, version -> bb executable
    TIME_BINARY             /bin/time, wraps bb when a request sets stats=true
    TMP_DIR                 parent of the per-request staging directories
    PROVE_TIMEOUT_SECONDS   600
    MAX_CONCURRENT_PROOFS   2
    MAX_ABI_DEPTH           32
    MAX_WITNESS_LENGTH      1000000
    CORS_ALLOW_ORIGINS      comma separated or JSON list; empty disables CORS

Tests construct `Settings(...)` directly and pass it to `create_app`.
"""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .witness.abi import EncodingLimits

DEFAULT_BB_VERSIONS: Dict[str, str] = {
    "0.69.0": "bb_0.69.0",
    "0.72.1": "bb_0.72.1",
    "0.73.0": "bb_0.73.0",
    "0.74.0": "bb_0.74.0",
}


def _split_origins(raw: str) -> List[str]:
    raw = raw.strip()
    if raw.startswith("["):
        try:
            return [str(x) for x in json.loads(raw)]
        except ValueError:
            pass
    return [part.strip() for part in raw.split(",") if part.strip()]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    log_level: str = "INFO"
    log_format: str = "json"
    host: str = "0.0.0.0"
    port: int = 3000

    bb_versions: Dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_BB_VERSIONS))
    time_binary: str = "/bin/time"
    tmp_dir: Optional[Path] = None
    prove_timeout_seconds: float = Field(600.0, gt=0)
    max_concurrent_proofs: int = Field(2, ge=1)

    max_abi_depth: int = Field(32, ge=1)
    max_witness_length: int = Field(1_000_000, ge=1)

    cors_allow_origins: str = ""

    @field_validator("bb_versions", mode="before")
    @classmethod
    def _versions_mapping(cls, v: Any) -> Dict[str, str]:
        if isinstance(v, str):
            try:
                v = json.loads(v)
            except ValueError:
                raise ValueError("BB_VERSIONS must be a JSON object of version -> binary") from None
        if not isinstance(v, dict):
            raise ValueError("BB_VERSIONS must be a JSON object of version -> binary")
        return {str(version): str(binary) for version, binary in v.items()}

    @field_validator("log_format")
    @classmethod
    def _known_format(cls, v: str) -> str:
        v = v.lower()
        if v not in ("json", "console"):
            raise ValueError("LOG_FORMAT must be 'json' or 'console'")
        return v

    @property
    def cors_origins(self) -> List[str]:
        return _split_origins(self.cors_allow_origins)

    @property
    def supported_versions(self) -> List[str]:
        return list(self.bb_versions)

    def encoding_limits(self) -> EncodingLimits:
        return EncodingLimits(max_depth=self.max_abi_depth, max_length=self.max_witness_length)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


__all__ = ["Settings", "DEFAULT_BB_VERSIONS", "get_settings"]
