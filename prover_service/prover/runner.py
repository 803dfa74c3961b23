"""
Runs ``bb prove_ultra_honk`` against a staged circuit and witness.

Every request gets its own temporary directory:

    prover-XXXXXX/
      circuit.json    decoded circuit artifact
      witness.gz      decoded compressed witness
      output.proof    written by bb

The directory is the child's working directory and is removed when the call
returns, whatever the outcome. The command is executed without a shell.
"""

from __future__ import annotations

import asyncio
import os
import signal
import tempfile
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

import structlog

from ..errors import ProverFailed, ProverTimeout

log = structlog.get_logger(__name__)

CIRCUIT_FILE = "circuit.json"
WITNESS_FILE = "witness.gz"
PROOF_FILE = "output.proof"

# Characters of stderr kept in error details.
STDERR_TAIL = 4000


@dataclass(frozen=True)
class ProveResult:
    proof: bytes
    stdout: str
    stderr: str
    elapsed_seconds: float
    command: List[str] = field(default_factory=list)


def build_command(
    binary: str,
    *,
    circuit_path: Path,
    witness_path: Path,
    proof_path: Path,
    threads: Optional[int] = None,
    time_binary: Optional[str] = None,
) -> List[str]:
    cmd: List[str] = [time_binary, "-v"] if time_binary else []
    cmd += [binary, "prove_ultra_honk"]
    if threads:
        cmd += ["--threads", str(threads)]
    cmd += ["-v", "-b", str(circuit_path), "-w", str(witness_path), "-o", str(proof_path)]
    return cmd


async def _kill_group(proc: asyncio.subprocess.Process) -> None:
    """SIGKILL the child's whole process group and reap the child."""
    try:
        os.killpg(proc.pid, signal.SIGKILL)
    except ProcessLookupError:
        pass
    await asyncio.shield(proc.wait())


class ProverRunner:
    def __init__(
        self,
        *,
        timeout: float = 600.0,
        max_concurrent: int = 2,
        tmp_dir: Optional[Path] = None,
        time_binary: str = "/bin/time",
    ) -> None:
        self.timeout = timeout
        self.tmp_dir = tmp_dir
        self.time_binary = time_binary
        self._slots = asyncio.Semaphore(max_concurrent)

    async def prove(
        self,
        binary: str,
        *,
        circuit: bytes,
        witness: bytes,
        threads: Optional[int] = None,
        stats: bool = False,
        log_output: bool = False,
    ) -> ProveResult:
        async with self._slots:
            with tempfile.TemporaryDirectory(prefix="prover-", dir=self.tmp_dir) as workdir:
                return await self._run(
                    Path(workdir),
                    binary,
                    circuit=circuit,
                    witness=witness,
                    threads=threads,
                    stats=stats,
                    log_output=log_output,
                )

    async def _run(
        self,
        workdir: Path,
        binary: str,
        *,
        circuit: bytes,
        witness: bytes,
        threads: Optional[int],
        stats: bool,
        log_output: bool,
    ) -> ProveResult:
        circuit_path = workdir / CIRCUIT_FILE
        witness_path = workdir / WITNESS_FILE
        proof_path = workdir / PROOF_FILE
        witness_path.write_bytes(witness)
        circuit_path.write_bytes(circuit)

        cmd = build_command(
            binary,
            circuit_path=circuit_path,
            witness_path=witness_path,
            proof_path=proof_path,
            threads=threads,
            time_binary=self.time_binary if stats else None,
        )
        log.info("prover_exec", command=" ".join(cmd))

        start = time.perf_counter()
        try:
            # Own session so a timeout can take down `time -v` and the bb under it.
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                cwd=str(workdir),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                start_new_session=True,
            )
        except OSError as e:
            raise ProverFailed(details={"reason": f"could not start prover: {e}"}) from e

        try:
            out, err = await asyncio.wait_for(proc.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError:
            await _kill_group(proc)
            log.error("prover_timeout", timeout=self.timeout)
            raise ProverTimeout(self.timeout) from None
        except BaseException:
            await _kill_group(proc)
            log.warning("prover_cancelled")
            raise

        elapsed = time.perf_counter() - start
        stdout = out.decode("utf-8", "replace")
        stderr = err.decode("utf-8", "replace")
        log.info("prover_done", elapsed_seconds=round(elapsed, 2), returncode=proc.returncode)
        if log_output:
            log.info("prover_output", stdout=stdout, stderr=stderr)

        if proc.returncode != 0:
            raise ProverFailed(
                details={
                    "reason": f"prover exited with status {proc.returncode}",
                    "bbout": stderr[-STDERR_TAIL:],
                }
            )
        if not proof_path.exists():
            raise ProverFailed(details={"reason": "Proof file was not created", "bbout": stderr[-STDERR_TAIL:]})

        return ProveResult(
            proof=proof_path.read_bytes(),
            stdout=stdout,
            stderr=stderr,
            elapsed_seconds=elapsed,
            command=cmd,
        )


__all__ = ["ProverRunner", "ProveResult", "build_command", "CIRCUIT_FILE", "WITNESS_FILE", "PROOF_FILE"]
