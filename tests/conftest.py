from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest

from opterra.core.models import InspectionInput


@pytest.fixture
def scenario_a() -> InspectionInput:
    """
    12-year-old gas tank at 90 PSI with no PRV, closed loop with no expansion
    tank, 12 GPG water, last flushed 5 years ago.
    """
    return InspectionInput(
        fuel_type="GAS",
        calendar_age=12,
        psi=90,
        has_prv=False,
        is_closed_loop=True,
        has_expansion_tank=False,
        hardness_gpg=12,
        years_since_flush=5,
    )


@pytest.fixture
def scenario_b() -> InspectionInput:
    """Scenario A with a working PRV and a functional expansion tank."""
    return InspectionInput(
        fuel_type="GAS",
        calendar_age=12,
        psi=90,
        has_prv=True,
        is_closed_loop=True,
        has_expansion_tank=True,
        expansion_tank_status="FUNCTIONAL",
        hardness_gpg=12,
        years_since_flush=5,
    )


@pytest.fixture
def inspections_csv(tmp_path: Path) -> Path:
    """Small mixed portfolio: one replace, one repair, one healthy unit."""
    rows = [
        {
            "unit_id": "WH001",
            "fuel_type": "GAS",
            "calendar_age": "12",
            "psi": "90",
            "has_prv": "false",
            "is_closed_loop": "true",
            "hardness_gpg": "12",
            "years_since_flush": "5",
        },
        {
            "unit_id": "WH002",
            "fuel_type": "GAS",
            "calendar_age": "12",
            "psi": "90",
            "has_prv": "true",
            "is_closed_loop": "true",
            "expansion_tank_status": "FUNCTIONAL",
            "hardness_gpg": "12",
            "years_since_flush": "5",
        },
        {
            "unit_id": "WH003",
            "fuel_type": "ELECTRIC",
            "calendar_age": "2",
            "psi": "60",
            "location": "GARAGE",
            "hardness_gpg": "5",
            "years_since_flush": "1",
        },
    ]
    path = tmp_path / "inspections.csv"
    pd.DataFrame(rows).to_csv(path, index=False)
    return path
