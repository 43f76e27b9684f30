from __future__ import annotations

from pathlib import Path

import pandas as pd

from opterra.core.assessment import assess
from opterra.core.ingest import load_inspections_csv
from opterra.core.portfolio import portfolio_summary, portfolio_verdict


def test_pipeline_smoke_load_to_verdict(tmp_path: Path) -> None:
    """
    Fast end-to-end sanity test:
    CSV -> ingest -> score/recommend/project -> portfolio summary -> verdict.
    """
    rows = [
        ["WH1", "GAS", "12", "90", "false", "true", "12", "5", ""],
        ["WH2", "ELECTRIC", "3", "65", "true", "true", "6", "1", "FUNCTIONAL"],
        ["WH3", "TANKLESS_GAS", "8", "70", "", "", "16", "", ""],
    ]
    df = pd.DataFrame(
        rows,
        columns=[
            "unit_id",
            "fuel_type",
            "calendar_age",
            "psi",
            "has_prv",
            "is_closed_loop",
            "hardness_gpg",
            "years_since_flush",
            "expansion_tank_status",
        ],
    )

    csv_path = tmp_path / "inspections.csv"
    df.to_csv(csv_path, index=False)

    ingest = load_inspections_csv(csv_path)
    assert ingest.issues == []
    assert len(ingest.units) == 3

    assessments = [assess(unit_id, inspection) for unit_id, inspection in ingest.units]
    portfolio = portfolio_summary(assessments)

    assert not portfolio.empty
    assert set(portfolio["unit_id"]) == {"WH1", "WH2", "WH3"}
    assert portfolio["health"].between(0, 100).all()

    verdict = portfolio_verdict(portfolio)
    assert isinstance(verdict, str)
    assert "WH1 should be replaced" in verdict
