"""
Run the prover service under uvicorn.

    python -m prover_service.main [--host H] [--port P] [--workers N] [--reload]

Host, port and log level default to the service settings (HOST, PORT,
LOG_LEVEL); WORKERS defaults from the environment.
"""

from __future__ import annotations

import argparse
import os
from typing import List, Optional

import uvicorn

from .config import get_settings


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    settings = get_settings()
    p = argparse.ArgumentParser(prog="prover_service.main", description=__doc__.strip().splitlines()[0])
    p.add_argument("--host", default=settings.host)
    p.add_argument("--port", type=int, default=settings.port)
    p.add_argument("--workers", type=int, default=int(os.getenv("WORKERS", "1")))
    p.add_argument("--reload", action="store_true", help="restart on code changes (development)")
    p.add_argument("--log-level", default=settings.log_level.lower())
    return p.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    # Each worker runs the factory, so every process gets its own prover semaphore.
    uvicorn.run(
        "prover_service.app:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        workers=1 if args.reload else args.workers,
        reload=args.reload,
        log_level=args.log_level,
    )


if __name__ == "__main__":
    main()
