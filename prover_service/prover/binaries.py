"""
Registry of version-pinned prover executables.

Each supported ``bb`` release maps to its own binary (``bb_0.69.0``, ...) so
proofs are produced by exactly the version the client's verifier expects.
"""

from __future__ import annotations

import os
import shutil
from typing import Dict, List, Mapping, Optional

from ..errors import UnsupportedVersion


class BinaryRegistry:
    def __init__(self, versions: Mapping[str, str]) -> None:
        self._versions: Dict[str, str] = dict(versions)

    def supported(self) -> List[str]:
        return list(self._versions.keys())

    def resolve(self, version: Optional[str]) -> str:
        """Return the binary for ``version`` or raise :class:`UnsupportedVersion`."""
        if not version:
            raise UnsupportedVersion(None, self.supported())
        path = self._versions.get(version)
        if not path:
            raise UnsupportedVersion(version, self.supported())
        return path

    def locate(self, version: str) -> Optional[str]:
        """Absolute path of the binary if it is executable or on PATH, else None."""
        path = self._versions.get(version)
        if not path:
            return None
        if os.sep in path:
            return path if os.access(path, os.X_OK) else None
        return shutil.which(path)

    def availability(self) -> Dict[str, Optional[str]]:
        return {v: self.locate(v) for v in self._versions}


__all__ = ["BinaryRegistry"]
