"""
Prover Service
==============

FastAPI service that runs version-pinned `bb prove_ultra_honk` binaries, plus
the ABI-driven witness encoder (`prover_service.witness`) that turns named
circuit inputs into an ordered witness map.

- ``__version__``: semantic version string
- ``build_app()``: convenience creator for a configured FastAPI app
"""

from __future__ import annotations

from .version import __version__

__all__ = ["__version__", "build_app"]


def build_app():
    """
    Create and return a configured FastAPI application.

    Imported lazily so that consumers of the witness encoder alone do not
    pull in FastAPI.
    """
    from .app import create_app

    return create_app()
