from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from prover_service.cli import app
from prover_service.config import get_settings

runner = CliRunner()

ABI = {
    "parameters": [
        {"name": "x", "type": {"kind": "field"}},
        {"name": "s", "type": {"kind": "string", "length": 2}},
    ]
}


@pytest.fixture
def files(tmp_path: Path):
    abi_path = tmp_path / "abi.json"
    abi_path.write_text(json.dumps(ABI))
    inputs_path = tmp_path / "inputs.json"
    inputs_path.write_text(json.dumps({"s": "hi", "x": 42}))
    return abi_path, inputs_path


def test_encode_witness(files):
    abi_path, inputs_path = files
    result = runner.invoke(app, ["encode-witness", "--abi", str(abi_path), "--inputs", str(inputs_path)])
    assert result.exit_code == 0, result.output
    assert json.loads(result.output) == {"0": "0x2a", "1": "0x68", "2": "0x69"}


def test_encode_witness_start_index_from_circuit(tmp_path: Path, files):
    _, inputs_path = files
    circuit_path = tmp_path / "circuit.json"
    circuit_path.write_text(json.dumps({"abi": ABI, "bytecode": "H4sI"}))
    result = runner.invoke(
        app,
        ["encode-witness", "--abi", str(circuit_path), "--inputs", str(inputs_path), "--start-index", "7"],
    )
    assert result.exit_code == 0, result.output
    assert list(json.loads(result.output)) == ["7", "8", "9"]


def test_encode_witness_reports_structured_error(tmp_path: Path, files):
    abi_path, _ = files
    bad_inputs = tmp_path / "bad.json"
    bad_inputs.write_text(json.dumps({"x": 1, "s": "toolong"}))
    result = runner.invoke(app, ["encode-witness", "--abi", str(abi_path), "--inputs", str(bad_inputs)])
    assert result.exit_code == 1
    assert '"kind": "LengthMismatch"' in result.output


def test_encode_witness_invalid_json(tmp_path: Path, files):
    abi_path, _ = files
    broken = tmp_path / "broken.json"
    broken.write_text("{")
    result = runner.invoke(app, ["encode-witness", "--abi", str(abi_path), "--inputs", str(broken)])
    assert result.exit_code == 2
    assert "Invalid JSON" in result.output


def test_versions_json(monkeypatch, clear_settings_cache, fake_bb: Path, tmp_path: Path):
    monkeypatch.setenv(
        "BB_VERSIONS", json.dumps({"0.69.0": str(fake_bb), "0.72.1": str(tmp_path / "absent")})
    )
    result = runner.invoke(app, ["versions", "--json"])
    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert data["supportedVersions"] == ["0.69.0", "0.72.1"]
    assert data["binaries"] == {"0.69.0": str(fake_bb), "0.72.1": None}


def test_check_binaries(monkeypatch, clear_settings_cache, fake_bb: Path, tmp_path: Path):
    monkeypatch.setenv("BB_VERSIONS", json.dumps({"0.69.0": str(fake_bb)}))
    result = runner.invoke(app, ["check-binaries"])
    assert result.exit_code == 0
    assert "All 1 bb binaries found." in result.output

    get_settings.cache_clear()
    monkeypatch.setenv("BB_VERSIONS", json.dumps({"0.74.0": str(tmp_path / "absent")}))
    result = runner.invoke(app, ["check-binaries"])
    assert result.exit_code == 1
    assert "0.74.0" in result.output
