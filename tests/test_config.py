from __future__ import annotations

from pathlib import Path

from opterra.core.config import OpterraConfig, load_config, merge_config
from opterra.core.contract import DEFAULT_SCORING


def test_missing_config_returns_defaults(tmp_path: Path):
    assert load_config(None) == OpterraConfig()
    assert load_config(tmp_path / "nope.toml") == OpterraConfig()


def test_load_config_reads_tables(tmp_path: Path):
    p = tmp_path / "opterra.toml"
    p.write_text(
        """
[meta]
schema_version = "1.1"

[opterra]
input = "data/site_a.csv"
out = "outputs/site_a.pdf"
json_out = "outputs/site_a.json"
unit = "WH007"

[report]
top_stressors = 3

[scoring]
weibull_eta = 14.0
repair_min_health_after = 50
projection_horizons = [3, 9]
not_a_knob = 1

[scoring.temp_factors]
HOT = 1.8
""",
        encoding="utf-8",
    )

    cfg = load_config(p)

    assert cfg.schema_version == "1.1"
    assert cfg.input == "data/site_a.csv"
    assert cfg.out == "outputs/site_a.pdf"
    assert cfg.json_out == "outputs/site_a.json"
    assert cfg.unit == "WH007"
    assert cfg.top_stressors == 3
    assert cfg.scoring.weibull_eta == 14.0
    assert cfg.scoring.repair_min_health_after == 50
    assert cfg.scoring.projection_horizons == (3, 9)
    assert cfg.scoring.temp_factors["HOT"] == 1.8
    assert cfg.scoring.temp_factors["NORMAL"] == 1.0
    assert cfg.scoring.weibull_beta == DEFAULT_SCORING.weibull_beta


def test_bad_values_fall_back(tmp_path: Path):
    p = tmp_path / "bad.toml"
    p.write_text(
        """
[opterra]
top_stressors = "many"
input = "   "

[scoring]
weibull_beta = "steep"
""",
        encoding="utf-8",
    )

    cfg = load_config(p)
    assert cfg.top_stressors == 5
    assert cfg.input == "data/inspections.csv"
    assert cfg.scoring.weibull_beta == DEFAULT_SCORING.weibull_beta


def test_merge_config_applies_explicit_values_only():
    base = OpterraConfig(unit="WH001")
    merged = merge_config(base, {"input": "x.csv", "unit": None, "top_stressors": "2", "out": "  "})

    assert merged.input == "x.csv"
    assert merged.unit == "WH001"
    assert merged.top_stressors == 2
    assert merged.out == base.out
    assert merged.scoring is base.scoring
