"""Package version and, when running from a checkout, the git revision."""

from __future__ import annotations

import os
import subprocess
from pathlib import Path
from typing import Optional

__version__ = "0.1.0"


def git_describe() -> Optional[str]:
    """
    ``git describe --always --dirty`` for the checkout holding this package.
    Container images have no .git; they set GIT_DESCRIBE at build time instead.
    """
    pkg_dir = Path(__file__).resolve().parent
    try:
        out = subprocess.run(
            ["git", "describe", "--tags", "--always", "--dirty"],
            cwd=pkg_dir,
            capture_output=True,
            text=True,
            timeout=2.0,
            check=True,
        )
    except (OSError, subprocess.SubprocessError):
        return os.getenv("GIT_DESCRIBE") or None
    return out.stdout.strip() or None


__all__ = ["__version__", "git_describe"]
