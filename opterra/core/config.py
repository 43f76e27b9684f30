from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Mapping

try:
    import tomllib  # py3.11+
except ModuleNotFoundError:  # pragma: no cover
    import tomli as tomllib  # type: ignore

from opterra.core.contract import DEFAULT_SCORING, ScoringConfig


# ----------------------------
# Primary config object
# ----------------------------

@dataclass(frozen=True)
class OpterraConfig:
    """
    Single, flattened config object used by the CLI/runtime.

    Supports config.sample.toml style:
      [opterra]
      input, out, json_out, unit, top_stressors

    Also supports structured style:
      [meta], [report], [scoring], [scoring.temp_factors], ...
    """
    schema_version: str = "1.0"

    # IO
    input: str = "data/inspections.csv"
    out: str = "outputs/opterra_report.pdf"
    json_out: str = "outputs/opterra_report.json"

    # focus unit (default: highest priority)
    unit: str | None = None

    # report knobs
    top_stressors: int = 5

    scoring: ScoringConfig = field(default_factory=lambda: DEFAULT_SCORING)


# ----------------------------
# Helpers
# ----------------------------

def _as_dict(x: Any) -> dict[str, Any]:
    return x if isinstance(x, dict) else {}


def _get(d: dict[str, Any], key: str, default: Any) -> Any:
    return d.get(key, default) if isinstance(d, dict) else default


def _coerce_float(x: Any, default: float) -> float:
    try:
        return float(x)
    except (TypeError, ValueError):
        return default


def _coerce_int(x: Any, default: int) -> int:
    try:
        return int(x)
    except (TypeError, ValueError):
        return default


def _coerce_str(x: Any, default: str) -> str:
    if x is None:
        return default
    s = str(x)
    return s if s.strip() else default


def _coerce_opt_str(x: Any) -> str | None:
    if x is None:
        return None
    s = str(x).strip()
    return s or None


def _coerce_float_map(x: Any, default: dict[str, float]) -> dict[str, float]:
    out = dict(default)
    for k, v in _as_dict(x).items():
        out[str(k)] = _coerce_float(v, out.get(str(k), 1.0))
    return out


def scoring_from_table(table: dict[str, Any], base: ScoringConfig = DEFAULT_SCORING) -> ScoringConfig:
    """
    Overlay a [scoring] table on a ScoringConfig.

    Unknown keys are ignored; values that fail to coerce keep the base value.
    """
    updates: dict[str, Any] = {}
    for f in fields(ScoringConfig):
        if f.name not in table:
            continue
        cur = getattr(base, f.name)
        raw = table[f.name]
        if isinstance(cur, dict):
            updates[f.name] = _coerce_float_map(raw, cur)
        elif isinstance(cur, tuple):
            if isinstance(raw, (list, tuple)):
                updates[f.name] = tuple(_coerce_int(v, 0) for v in raw)
        elif isinstance(cur, str):
            updates[f.name] = _coerce_str(raw, cur)
        elif isinstance(cur, int):
            updates[f.name] = _coerce_int(raw, cur)
        else:
            updates[f.name] = _coerce_float(raw, cur)
    return replace(base, **updates) if updates else base


# ----------------------------
# Load + merge
# ----------------------------

def load_config(path: str | Path | None) -> OpterraConfig:
    """
    Load TOML config. If missing/None, returns safe defaults.
    Never raises for missing file (config is optional).
    """
    if not path:
        return OpterraConfig()

    p = Path(path)
    if not p.exists():
        return OpterraConfig()

    data = tomllib.loads(p.read_text(encoding="utf-8"))

    opt = _as_dict(data.get("opterra", {}))
    meta = _as_dict(data.get("meta", {}))
    report = _as_dict(data.get("report", {}))
    scoring = _as_dict(data.get("scoring", {}))

    schema_version = _coerce_str(_get(meta, "schema_version", "1.0"), "1.0")

    input_path = _coerce_str(_get(opt, "input", OpterraConfig.input), OpterraConfig.input)
    out_pdf = _coerce_str(_get(opt, "out", OpterraConfig.out), OpterraConfig.out)
    json_out = _coerce_str(_get(opt, "json_out", OpterraConfig.json_out), OpterraConfig.json_out)
    unit = _coerce_opt_str(_get(opt, "unit", None))

    top_stressors = _coerce_int(
        _get(opt, "top_stressors", _get(report, "top_stressors", OpterraConfig.top_stressors)),
        OpterraConfig.top_stressors,
    )

    return OpterraConfig(
        schema_version=schema_version,
        input=input_path,
        out=out_pdf,
        json_out=json_out,
        unit=unit,
        top_stressors=top_stressors,
        scoring=scoring_from_table(scoring),
    )


def merge_config(cfg: OpterraConfig, overrides: Mapping[str, Any]) -> OpterraConfig:
    """
    Merge explicit CLI values over file config.
    Only applies keys that are present AND not None/empty.
    """
    def pick_str(name: str, cur: str) -> str:
        v = overrides.get(name)
        if v is not None and str(v).strip():
            return str(v).strip()
        return cur

    def pick_opt_str(name: str, cur: str | None) -> str | None:
        v = overrides.get(name)
        if v is None:
            return cur
        s = str(v).strip()
        return s or cur

    def pick_int(name: str, cur: int) -> int:
        v = overrides.get(name)
        if v is None:
            return cur
        return _coerce_int(v, cur)

    return replace(
        cfg,
        input=pick_str("input", cfg.input),
        out=pick_str("out", cfg.out),
        json_out=pick_str("json_out", cfg.json_out),
        unit=pick_opt_str("unit", cfg.unit),
        top_stressors=pick_int("top_stressors", cfg.top_stressors),
    )
