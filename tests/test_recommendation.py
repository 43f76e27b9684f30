from __future__ import annotations

from dataclasses import replace

import pytest

from opterra.core.contract import ScoringConfig
from opterra.core.models import InspectionInput
from opterra.core.recommendation import recommend
from opterra.core.scoring import score


def test_scenario_a_replace(scenario_a):
    rec = recommend(score(scenario_a))
    assert rec.action == "replace"
    assert rec.title == "Statistical End-of-Life"
    assert rec.badge == "REPLACE"
    assert rec.repairs == ("replace_tank",)


def test_scenario_b_repair(scenario_b):
    rec = recommend(score(scenario_b))
    assert rec.action == "repair"
    assert rec.title == "Flush Due"
    assert rec.badge == "SERVICE"
    assert rec.flag == "FLUSH_DUE"
    assert rec.urgent is False
    assert rec.repairs == ("flush",)


def test_repair_not_cost_effective_when_threshold_unreachable(scenario_b):
    cfg = ScoringConfig(repair_min_health_after=101)
    rec = recommend(score(scenario_b, cfg), cfg)
    assert rec.action == "replace"
    assert rec.title == "Repair Not Cost-Effective"


@pytest.mark.parametrize(
    "inspection, title",
    [
        (InspectionInput(fuel_type="GAS", calendar_age=3, is_leaking=True, leak_source="TANK_BODY"), "Tank Failure Detected"),
        (InspectionInput(fuel_type="GAS", calendar_age=3, is_leaking=True), "Tank Failure Detected"),
        (InspectionInput(fuel_type="ELECTRIC", calendar_age=7, visual_rust=True), "Containment Breach"),
        (InspectionInput(fuel_type="GAS", calendar_age=11, psi=130), "Vessel Fatigue"),
        (
            InspectionInput(
                fuel_type="GAS",
                calendar_age=6,
                connection_type="DIRECT_COPPER",
                nipple_material="STEEL",
                connection_corrosion=True,
            ),
            "Galvanic Corrosion",
        ),
        (InspectionInput(fuel_type="TANKLESS_GAS", calendar_age=4, vent_status="BLOCKED"), "Blocked Exhaust Vent"),
    ],
)
def test_safety_override(inspection, title):
    rec = recommend(score(inspection))
    assert rec.action == "replace"
    assert rec.badge == "CRITICAL"
    assert rec.urgent is True
    assert rec.title == title


@pytest.mark.parametrize("age", [0, 2, 8, 15, 30])
def test_tank_body_leak_always_replaces(age):
    inspection = InspectionInput(fuel_type="GAS", calendar_age=age, is_leaking=True, leak_source="TANK_BODY")
    assert recommend(score(inspection)).action == "replace"


def test_old_unit_is_statistical_end_of_life():
    rec = recommend(score(InspectionInput(fuel_type="GAS", calendar_age=25)))
    assert rec.action == "replace"
    assert rec.title == "Statistical End-of-Life"


def test_attic_unit_is_liability():
    rec = recommend(score(InspectionInput(fuel_type="GAS", calendar_age=18, location="ATTIC")))
    assert rec.action == "replace"
    assert rec.title == "Liability Hazard"


def test_same_unit_in_garage_is_monitored():
    m = score(InspectionInput(fuel_type="GAS", calendar_age=18, location="GARAGE"))
    rec = recommend(m)
    assert rec.action == "monitor"
    assert rec.title == "Monitor Condition"


def test_economic_flags_replace():
    rec = recommend(score(InspectionInput(fuel_type="ELECTRIC", calendar_age=14, hardness_gpg=20, years_since_flush=14)))
    assert rec.action == "replace"
    assert rec.title == "Sediment Lockout"
    assert rec.flag == "SEDIMENT_LOCKOUT"


def test_risky_flush_on_old_tank_is_monitored():
    m = score(InspectionInput(fuel_type="GAS", calendar_age=13, hardness_gpg=12, years_since_flush=5, location="GARAGE"))
    rec = recommend(m)
    assert rec.action == "monitor"
    assert rec.title == "Maintenance Risk"
    assert rec.flag == "FLUSH_RISKY"


def test_healthy_unit():
    rec = recommend(score(InspectionInput(fuel_type="ELECTRIC", calendar_age=2, psi=60)))
    assert rec.action == "monitor"
    assert rec.badge == "OPTIMAL"
    assert rec.title == "System Healthy"


def test_urgent_service_issue():
    m = score(InspectionInput(fuel_type="GAS", calendar_age=4, psi=95, is_closed_loop=True, expansion_tank_status="FUNCTIONAL"))
    rec = recommend(m)
    assert rec.action == "repair"
    assert rec.title == "High Water Pressure"
    assert rec.urgent is True
    assert rec.repairs == ("prv",)


def test_tiers_are_ordered(scenario_a):
    """A safety flag beats everything else on the same unit."""
    leaking = replace(scenario_a, is_leaking=True, leak_source="TANK_BODY")
    rec = recommend(score(leaking))
    assert rec.badge == "CRITICAL"
    assert rec.title == "Tank Failure Detected"


def test_calcified_tankless_is_run_to_failure():
    m = score(InspectionInput(fuel_type="TANKLESS_GAS", calendar_age=8, hardness_gpg=16, location="GARAGE"))
    rec = recommend(m)
    assert rec.action == "monitor"
    assert rec.title == "Run to Failure"
    assert rec.flag == "DESCALE_RISKY"
    assert rec.badge == "MONITOR"


def test_failing_compressor_is_repaired():
    rec = recommend(score(InspectionInput(fuel_type="HYBRID", calendar_age=5, compressor_health=45)))
    assert rec.action == "repair"
    assert rec.title == "Compressor Degraded"
    assert rec.repairs == ("refrigerant_check", "compressor_service")
