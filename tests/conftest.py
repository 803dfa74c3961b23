from __future__ import annotations

import stat
from pathlib import Path
from typing import AsyncIterator, Dict

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from prover_service.app import create_app
from prover_service.config import Settings, get_settings

# Stand-in for `bb prove_ultra_honk`: records its argv, writes a proof to the
# path after -o and chats on stderr like the real binary.
FAKE_BB = """#!/bin/sh
echo "$@" > "{args_file}"
out=""
while [ $# -gt 0 ]; do
  case "$1" in
    -o) out="$2"; shift 2 ;;
    *) shift ;;
  esac
done
echo "fake bb: proving circuit" >&2
printf 'fake-proof' > "$out"
"""

FAILING_BB = """#!/bin/sh
echo "boom: invalid witness" >&2
exit 3
"""

SLOW_BB = """#!/bin/sh
exec sleep 5
"""

NO_PROOF_BB = """#!/bin/sh
echo "finished without output" >&2
exit 0
"""

# Behaves like `time -v`: runs the command as a child (no exec) and reports
# on stderr afterwards.
TIME_WRAPPER = """#!/bin/sh
shift
"$@"
status=$?
echo "Maximum resident set size (kbytes): 1234" >&2
exit $status
"""

# Sleeps, then leaves a marker; the marker only appears if nobody killed it.
LINGERING_BB = """#!/bin/sh
sleep 1
touch "{marker}"
"""

# Announces itself in {gate_dir}, then blocks until {gate_dir}/release exists.
GATED_BB = """#!/bin/sh
touch "{gate_dir}/started.$$"
while [ ! -f "{gate_dir}/release" ]; do sleep 0.05; done
out=""
while [ $# -gt 0 ]; do
  case "$1" in
    -o) out="$2"; shift 2 ;;
    *) shift ;;
  esac
done
printf 'gated-proof' > "$out"
"""


def _script(path: Path, body: str) -> Path:
    path.write_text(body)
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


# ----------------------------
# Fake prover binaries
# ----------------------------
@pytest.fixture
def bb_args_file(tmp_path: Path) -> Path:
    return tmp_path / "bb_args.txt"


@pytest.fixture
def fake_bb(tmp_path: Path, bb_args_file: Path) -> Path:
    return _script(tmp_path / "bb_fake", FAKE_BB.format(args_file=bb_args_file))


@pytest.fixture
def failing_bb(tmp_path: Path) -> Path:
    return _script(tmp_path / "bb_failing", FAILING_BB)


@pytest.fixture
def slow_bb(tmp_path: Path) -> Path:
    return _script(tmp_path / "bb_slow", SLOW_BB)


@pytest.fixture
def no_proof_bb(tmp_path: Path) -> Path:
    return _script(tmp_path / "bb_no_proof", NO_PROOF_BB)


@pytest.fixture
def time_wrapper(tmp_path: Path) -> Path:
    return _script(tmp_path / "fake_time", TIME_WRAPPER)


@pytest.fixture
def linger_marker(tmp_path: Path) -> Path:
    return tmp_path / "bb_still_running"


@pytest.fixture
def lingering_bb(tmp_path: Path, linger_marker: Path) -> Path:
    return _script(tmp_path / "bb_lingering", LINGERING_BB.format(marker=linger_marker))


@pytest.fixture
def gate_dir(tmp_path: Path) -> Path:
    d = tmp_path / "gate"
    d.mkdir()
    return d


@pytest.fixture
def gated_bb(tmp_path: Path, gate_dir: Path) -> Path:
    return _script(tmp_path / "bb_gated", GATED_BB.format(gate_dir=gate_dir))


@pytest.fixture
def bb_versions(tmp_path: Path, fake_bb: Path, failing_bb: Path, no_proof_bb: Path) -> Dict[str, str]:
    return {
        "0.69.0": str(fake_bb),
        "0.72.1": str(failing_bb),
        "0.73.0": str(no_proof_bb),
        "0.74.0": str(tmp_path / "bb_not_installed"),
    }


# ----------------------------
# Settings & application
# ----------------------------
@pytest.fixture
def staging_dir(tmp_path: Path) -> Path:
    d = tmp_path / "staging"
    d.mkdir()
    return d


@pytest.fixture
def settings(bb_versions: Dict[str, str], staging_dir: Path) -> Settings:
    return Settings(
        bb_versions=bb_versions,
        tmp_dir=staging_dir,
        prove_timeout_seconds=30,
        max_concurrent_proofs=2,
        log_format="console",
    )


@pytest.fixture
def app(settings: Settings) -> FastAPI:
    return create_app(settings, configure_logging=False)


@pytest_asyncio.fixture
async def aclient(app: FastAPI) -> AsyncIterator[AsyncClient]:
    """Async HTTP client bound to the ASGI app; no server is started."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


@pytest.fixture
def clear_settings_cache():
    """Drop the cached environment settings before and after a test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
