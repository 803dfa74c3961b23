"""
prover_service.cli
==================

Operator commands for the prover service.

  prover-service encode-witness --abi circuit.json --inputs inputs.json [--start-index 0]
  prover-service versions [--json]
  prover-service check-binaries

``encode-witness`` accepts either a bare ABI (``{"parameters": [...]}``) or a
compiled circuit artifact (``{"abi": {...}, "bytecode": ...}``) and prints the
witness map as JSON with string keys. Encoding failures print the structured
error to stderr and exit with status 1.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import typer

from .config import get_settings
from .prover import BinaryRegistry
from .witness import EncodingError, encode, parse_abi, witness_to_json

app = typer.Typer(
    name="prover-service",
    add_completion=False,
    no_args_is_help=True,
    help="Witness encoding and prover binary tooling.",
)


def _read_json(path: Path, what: str) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        typer.echo(f"Cannot read {what} file '{path}': {e}", err=True)
        raise typer.Exit(2)
    except json.JSONDecodeError as e:
        typer.echo(f"Invalid JSON in {what} file '{path}': {e}", err=True)
        raise typer.Exit(2)


@app.command("encode-witness")
def encode_witness(
    abi: Path = typer.Option(..., "--abi", help="ABI JSON or compiled circuit artifact."),
    inputs: Path = typer.Option(..., "--inputs", help="JSON object of named input values."),
    start_index: int = typer.Option(0, "--start-index", min=0, help="First witness index."),
    indent: Optional[int] = typer.Option(2, "--indent", help="JSON indent (0 for compact)."),
) -> None:
    """Encode named inputs into a witness map."""
    abi_obj = _read_json(abi, "ABI")
    inputs_obj = _read_json(inputs, "inputs")
    settings = get_settings()
    limits = settings.encoding_limits()
    try:
        params = parse_abi(abi_obj, limits=limits)
        witness = encode(inputs_obj, params, start_index, limits=limits)
    except EncodingError as e:
        typer.echo(json.dumps({"error": e.to_dict()}, default=str), err=True)
        raise typer.Exit(1)
    typer.echo(json.dumps(witness_to_json(witness), indent=indent or None))


@app.command("versions")
def versions(
    json_out: bool = typer.Option(False, "--json", help="Output as JSON."),
) -> None:
    """List configured bb versions and where each binary resolves."""
    registry = BinaryRegistry(get_settings().bb_versions)
    found = registry.availability()
    if json_out:
        typer.echo(json.dumps({"supportedVersions": registry.supported(), "binaries": found}, indent=2))
        return
    for v in registry.supported():
        typer.echo(f"{v:<10} {found[v] or '-'}")


@app.command("check-binaries")
def check_binaries() -> None:
    """Exit non-zero if any configured bb binary cannot be found."""
    registry = BinaryRegistry(get_settings().bb_versions)
    missing = [v for v, path in registry.availability().items() if path is None]
    if missing:
        typer.echo(f"Missing bb binaries for versions: {', '.join(missing)}", err=True)
        raise typer.Exit(1)
    typer.echo(f"All {len(registry.supported())} bb binaries found.")


def _entry() -> None:
    app()


if __name__ == "__main__":
    _entry()
