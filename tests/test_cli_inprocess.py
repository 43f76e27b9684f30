from __future__ import annotations

import json
import runpy
import sys
from pathlib import Path


def _run_module(module: str, argv: list[str]) -> int:
    """
    Run a module as if invoked via `python -m <module> ...` but in-process,
    so coverage counts. Returns the SystemExit code (0 for success).
    """
    old_argv = sys.argv[:]
    try:
        sys.argv = [module, *argv]
        try:
            runpy.run_module(module, run_name="__main__")
            return 0
        except SystemExit as e:
            return int(e.code) if e.code is not None else 0
    finally:
        sys.argv = old_argv


def test_tools_generate_inspections_module_runs(tmp_path: Path) -> None:
    out_csv = tmp_path / "check.csv"

    rc = _run_module(
        "opterra.tools.generate_inspections",
        ["--out", str(out_csv), "--count", "5", "--seed", "1"],
    )
    assert rc == 0
    assert out_csv.exists()
    assert out_csv.stat().st_size > 0


def test_cli_module_generates_json_strict(tmp_path: Path) -> None:
    data_csv = tmp_path / "check.csv"
    out_pdf = tmp_path / "check.pdf"
    out_json = tmp_path / "check.json"

    rc = _run_module(
        "opterra.tools.generate_inspections",
        ["--out", str(data_csv), "--count", "8", "--seed", "1"],
    )
    assert rc == 0
    assert data_csv.exists()

    rc = _run_module(
        "opterra.cli",
        ["--input", str(data_csv), "--out", str(out_pdf), "--json-out", str(out_json)],
    )
    assert rc == 0

    assert out_pdf.exists()
    assert out_json.exists()
    assert out_json.stat().st_size > 0

    raw = out_json.read_text(encoding="utf-8")

    def _reject_constants(x: str):
        raise ValueError(f"Non-JSON constant encountered: {x}")

    obj = json.loads(raw, parse_constant=_reject_constants)
    assert isinstance(obj, dict)
    assert len(obj["portfolio"]["table"]) == 8


def test_validate_json_module_reports_failure(tmp_path: Path) -> None:
    bad = tmp_path / "bad.json"
    bad.write_text('{"meta": {"schema_version": "v1"}, "x": NaN}', encoding="utf-8")

    rc = _run_module("opterra.tools.validate_json", [str(bad)])
    assert rc == 1
