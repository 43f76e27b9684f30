from __future__ import annotations

import argparse
from datetime import datetime
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Any

from opterra.schema_constants import SCHEMA_VERSION
from opterra.core.assessment import Assessment, assess
from opterra.core.config import load_config, merge_config
from opterra.core.ingest import load_inspections_csv
from opterra.core.portfolio import portfolio_summary, portfolio_verdict
from opterra.report.json_report import write_json_report
from opterra.report.pdf_report import write_pdf_report

try:
    OPTERRA_PACKAGE_VERSION = version("opterra")
except PackageNotFoundError:
    OPTERRA_PACKAGE_VERSION = "dev"


def _console_safe(s: str) -> str:
    """
    Windows PowerShell can choke on certain Unicode chars (e.g., arrows).
    Keep console output ASCII-safe while leaving PDF output untouched.
    """
    return (
        str(s)
        .replace("→", "->")
        .replace("↓", "down")
        .replace("↑", "up")
        .replace("•", "-")
        .replace("⚠", "!")
        .replace("—", "-")
    )


def _require_existing_file(path: Path, label: str) -> None:
    if not path.exists():
        raise FileNotFoundError(f"{label} not found: {path}")
    if path.is_dir():
        raise IsADirectoryError(f"{label} is a directory, expected a file: {path}")


def _pick_focus(assessments: dict[str, Assessment], order: list[str], unit: str | None) -> Assessment | None:
    if unit and unit in assessments:
        return assessments[unit]
    return assessments[order[0]] if order else None


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="opterra", description="Opterra water heater risk scoring")

    p.add_argument("--input", default=None, help="Path to inspections CSV (defaults from config or built-in)")
    p.add_argument("--out", default=None, help="Output PDF path (defaults from config or built-in)")
    p.add_argument("--config", default=None, help="Path to config TOML (optional)")
    p.add_argument("--unit", default=None, help="Force focus unit_id (e.g., WH001). Default: highest priority.")
    p.add_argument("--top-stressors", type=int, default=None, help="How many focus stress factors to render")
    p.add_argument(
        "--json-out",
        "--json",
        dest="json_out",
        default=None,
        help="JSON report output path",
    )

    return p


def main(argv: list[str] | None = None) -> int:
    args = build_arg_parser().parse_args(argv)

    file_cfg = load_config(args.config)

    cli_explicit: dict[str, Any] = {}
    if args.input is not None:
        cli_explicit["input"] = args.input
    if args.out is not None:
        cli_explicit["out"] = args.out
    if args.json_out is not None:
        cli_explicit["json_out"] = args.json_out
    if args.unit is not None:
        cli_explicit["unit"] = args.unit
    if args.top_stressors is not None:
        cli_explicit["top_stressors"] = args.top_stressors

    cfg = merge_config(file_cfg, cli_explicit)

    data_path = Path(cfg.input)
    out_pdf = Path(cfg.out)
    json_out_path = Path(cfg.json_out)

    try:
        _require_existing_file(data_path, "Input CSV")
    except (FileNotFoundError, IsADirectoryError) as e:
        print(f"ERROR: {e}")
        return 2

    ingest = load_inspections_csv(data_path)
    if not ingest.units:
        print(f"ERROR: input CSV produced 0 valid inspections: {data_path}")
        if ingest.issues:
            print("Ingest issues:")
            for msg in ingest.issues:
                print(f" - {_console_safe(str(msg))}")
        return 1

    assessments = {unit_id: assess(unit_id, inspection, cfg.scoring) for unit_id, inspection in ingest.units}

    portfolio_df = portfolio_summary(assessments.values())
    verdict = portfolio_verdict(portfolio_df)

    notes = list(ingest.issues)
    if cfg.unit and cfg.unit not in assessments:
        notes.append(f"Requested unit {cfg.unit} not found; showing highest priority unit instead.")
    focus = _pick_focus(assessments, portfolio_df["unit_id"].astype(str).tolist(), cfg.unit)

    generated_at = datetime.now().strftime("%Y-%m-%d %H:%M")
    n_replace = int((portfolio_df["action"] == "replace").sum())
    n_repair = int((portfolio_df["action"] == "repair").sum())
    n_monitor = int((portfolio_df["action"] == "monitor").sum())
    coverage = (
        f"Units: {len(portfolio_df)} | Replace: {n_replace} | Repair: {n_repair} | Monitor: {n_monitor} | "
        f"Ingest issues: {len(ingest.issues)}"
    )

    run_config = {
        "input": str(data_path),
        "config": str(args.config or ""),
        "schema": SCHEMA_VERSION,
        "top_stressors": str(cfg.top_stressors),
        "version": cfg.scoring.version,
        "package": OPTERRA_PACKAGE_VERSION,
    }

    write_pdf_report(
        out_path=out_pdf,
        portfolio_df=portfolio_df,
        verdict=verdict,
        generated_at=generated_at,
        coverage_line=coverage,
        focus=focus,
        top_stressors=cfg.top_stressors,
        notes=notes,
        run_config=run_config,
    )

    write_json_report(
        out_path=json_out_path,
        generated_at=generated_at,
        coverage_line=coverage,
        verdict=verdict,
        portfolio_df=portfolio_df,
        focus=focus,
        notes=notes,
        run_config=run_config,
    )

    print(f"Report generated:  {out_pdf.resolve()}")
    print(f"JSON saved:        {json_out_path.resolve()}")
    print(f"Portfolio Verdict: {_console_safe(verdict)}")
    if focus is not None:
        rec = focus.recommendation
        print(
            f"Focus unit:        {focus.unit_id} | Health Score: {focus.metrics.health_score} | "
            f"{rec.action.upper()}: {_console_safe(rec.title)}"
        )
    if ingest.issues:
        print("Ingest issues:")
        for msg in ingest.issues:
            print(f" - {_console_safe(str(msg))}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
