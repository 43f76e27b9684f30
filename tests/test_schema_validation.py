from __future__ import annotations

import json
from pathlib import Path

import jsonschema
import pytest

from opterra.tools.validate_json import StrictJsonError, validate_json


def _payload() -> dict:
    return {
        "meta": {
            "generated_at": "2026-01-01 00:00",
            "coverage": "Units: 1",
            "decision_version": "1.0.0",
            "schema_version": "v1",
        },
        "portfolio": {
            "verdict": "WH001 can stay on routine monitoring.",
            "table": [
                {
                    "unit_id": "WH001",
                    "fuel_type": "GAS",
                    "age": 2.0,
                    "bio_age": 2.0,
                    "aging_rate": 1.0,
                    "fail_prob": "0.7%",
                    "fail_prob_pct": 0.7,
                    "health": 97,
                    "status": "optimal",
                    "risk_band": "NORMAL",
                    "top_stressor": "none",
                    "action": "monitor",
                    "title": "System Healthy",
                    "urgent": False,
                    "trend": [97.0, 97.0, 96.0, 95.0],
                }
            ],
        },
        "focus": None,
        "notes": [],
    }


def _write(tmp_path: Path, payload: dict) -> Path:
    out = tmp_path / "check.json"
    out.write_text(json.dumps(payload, allow_nan=False), encoding="utf-8")
    return out


def test_bundled_schema_validates_sample_json(tmp_path: Path) -> None:
    assert validate_json(_write(tmp_path, _payload())).ok is True


def test_bundled_schema_rejects_unknown_status(tmp_path: Path) -> None:
    payload = _payload()
    payload["portfolio"]["table"][0]["status"] = "fine"

    with pytest.raises(jsonschema.ValidationError):
        validate_json(_write(tmp_path, payload))


def test_bundled_schema_rejects_health_out_of_range(tmp_path: Path) -> None:
    payload = _payload()
    payload["portfolio"]["table"][0]["health"] = 120

    with pytest.raises(jsonschema.ValidationError):
        validate_json(_write(tmp_path, payload))


def test_nan_is_rejected_before_schema(tmp_path: Path) -> None:
    out = tmp_path / "nan.json"
    out.write_text('{"meta": {"schema_version": "v1"}, "value": NaN}', encoding="utf-8")

    with pytest.raises(StrictJsonError):
        validate_json(out)


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        validate_json(tmp_path / "missing.json")
