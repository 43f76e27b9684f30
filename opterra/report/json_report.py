from __future__ import annotations

import json
import math
from pathlib import Path
from typing import Any

import pandas as pd

from opterra.core.assessment import Assessment
from opterra.core.models import Definite, FailureProbability


def _json_safe(x: Any) -> Any:
    """
    Convert values into strict JSON-safe Python types.

    Guarantees:
    - No NaN / Infinity (converted to None)
    - pandas/numpy NA -> None
    - numpy scalars -> python primitives
    - Recurses through dict/list/tuple/frozenset
    """
    if isinstance(x, dict):
        return {str(k): _json_safe(v) for k, v in x.items()}

    if isinstance(x, (list, tuple)):
        return [_json_safe(v) for v in x]

    if isinstance(x, (set, frozenset)):
        return [_json_safe(v) for v in sorted(x, key=str)]

    # pandas/numpy NA handling
    try:
        if pd.isna(x):
            return None
    except (TypeError, ValueError):
        pass

    if isinstance(x, float):
        if math.isnan(x) or math.isinf(x):
            return None
        return x

    # Numpy scalars (float/int/bool) -> python primitives
    if hasattr(x, "item") and callable(x.item):
        try:
            return _json_safe(x.item())
        except (TypeError, ValueError):
            pass

    if isinstance(x, pd.Timestamp):
        return x.isoformat()

    if isinstance(x, (str, int, bool)) or x is None:
        return x

    return str(x)


def _df_to_records(df: pd.DataFrame) -> list[dict[str, Any]]:
    if df is None or df.empty:
        return []
    clean = df.copy().astype(object)
    for col in clean.columns:
        clean[col] = clean[col].apply(_json_safe)
    return clean.to_dict(orient="records")


def fail_prob_to_dict(fp: FailureProbability) -> dict[str, Any]:
    if isinstance(fp, Definite):
        return {"kind": "definite", "cause": fp.cause, "percent": None}
    return {"kind": "probabilistic", "cause": None, "percent": round(fp.percent, 2)}


def focus_payload(a: Assessment) -> dict[str, Any]:
    m = a.metrics
    rec = a.recommendation
    return {
        "unit_id": a.unit_id,
        "fuel_type": m.fuel_type,
        "calendar_age": m.calendar_age,
        "bio_age": round(m.bio_age, 2),
        "aging_rate": round(m.aging_rate, 3),
        "health_score": int(m.health_score),
        "status": m.status_tier,
        "risk_band": m.risk_band,
        "fail_prob": fail_prob_to_dict(m.fail_prob),
        "stress_factors": {k: round(v, 3) for k, v in m.stress_factors.as_dict().items()},
        "primary_stressor": m.primary_stressor,
        "flags": sorted(m.flags),
        "maintenance": {
            "status": m.maintenance_status,
            "sediment_lbs": None if m.sediment_lbs is None else round(m.sediment_lbs, 2),
            "scale_score": None if m.scale_score is None else round(m.scale_score, 1),
            "months_to_flush": m.months_to_flush,
            "months_to_anode_depletion": m.months_to_anode_depletion,
            "hybrid_efficiency": m.hybrid_efficiency,
        },
        "life": {
            "years_left_current": round(m.years_left_current, 1),
            "years_left_optimized": round(m.years_left_optimized, 1),
            "life_extension": round(m.life_extension, 1),
        },
        "recommendation": {
            "action": rec.action,
            "title": rec.title,
            "reason": rec.reason,
            "badge": rec.badge,
            "urgent": rec.urgent,
            "flag": rec.flag,
            "repairs": list(rec.repairs),
        },
        "projections": [
            {
                "months": p.months,
                "bio_age": round(p.bio_age, 2),
                "health_score": int(p.health_score),
                "fail_prob": fail_prob_to_dict(p.fail_prob),
            }
            for p in a.projections
        ],
        "repairs": [
            {"id": r.id, "name": r.name, "cost_min": r.cost_min, "cost_max": r.cost_max}
            for r in a.repairs
        ],
        "after_repairs": {
            "health_score": int(a.after_repairs.health_score),
            "aging_rate": round(a.after_repairs.aging_rate, 3),
            "fail_prob": fail_prob_to_dict(a.after_repairs.fail_prob),
            "life_extension": round(a.repair_life_extension, 1),
        },
    }


def write_json_report(
    out_path: str | Path,
    *,
    generated_at: str | None,
    coverage_line: str | None,
    verdict: str,
    portfolio_df: pd.DataFrame,
    focus: Assessment | None,
    notes: list[str] | None,
    run_config: dict[str, str] | None,
) -> Path:
    """
    Writes the canonical Opterra JSON report.

    IMPORTANT:
    - `meta` must remain schema-stable and NOT include extra keys.
      (No `run_config` inside `meta`.)
    """
    p = Path(out_path)
    p.parent.mkdir(parents=True, exist_ok=True)

    decision_version = run_config.get("version") if run_config else None
    schema_version = run_config.get("schema") if run_config else None

    payload: dict[str, Any] = {
        "meta": {
            "generated_at": generated_at,
            "coverage": coverage_line,
            "decision_version": decision_version,
            "schema_version": schema_version,
        },
        "portfolio": {
            "verdict": verdict,
            "table": _df_to_records(portfolio_df),
        },
        "focus": focus_payload(focus) if focus is not None else None,
        "notes": notes or [],
    }

    # Sanitize *entire* payload recursively
    payload = _json_safe(payload)

    # STRICT JSON: no NaN allowed
    p.write_text(
        json.dumps(payload, indent=2, sort_keys=False, allow_nan=False),
        encoding="utf-8",
    )
    return p
