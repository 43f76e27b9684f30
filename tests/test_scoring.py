from __future__ import annotations

from dataclasses import replace

import pytest

from opterra.core.models import Definite, InspectionInput, Probabilistic
from opterra.core.scoring import definite_failure, location_risk, score


def test_scenario_a_golden(scenario_a):
    m = score(scenario_a)

    assert m.aging_rate == pytest.approx(2.67435, rel=1e-4)
    assert m.aging_rate > 2.0
    assert m.bio_age == pytest.approx(32.09, abs=0.01)
    assert m.bio_age > 24
    assert isinstance(m.fail_prob, Probabilistic)
    assert m.fail_prob.percent == pytest.approx(84.4, abs=0.3)
    assert m.health_score == 3
    assert m.status_tier == "critical"
    assert m.risk_band == "HIGH"
    assert m.flags == frozenset({"HIGH_PRESSURE", "MISSING_EXPANSION_TANK", "FLUSH_DUE"})
    assert m.sediment_lbs == pytest.approx(2.64)
    assert m.maintenance_status == "advisory"


def test_scenario_b_golden(scenario_a, scenario_b):
    a = score(scenario_a)
    b = score(scenario_b)

    assert b.aging_rate == pytest.approx(1.1886, rel=1e-4)
    assert b.bio_age == pytest.approx(14.263, abs=0.01)
    assert b.fail_prob.percent == pytest.approx(27.80, abs=0.1)
    assert b.health_score == 33
    assert b.health_score > a.health_score
    assert b.status_tier == "critical"
    assert b.risk_band == "NORMAL"
    assert b.flags == frozenset({"FLUSH_DUE"})
    assert b.months_to_flush == 0


def test_score_is_deterministic(scenario_a):
    assert score(scenario_a) == score(scenario_a)


def test_new_install_is_healthy():
    m = score(InspectionInput(fuel_type="GAS", calendar_age=0))
    assert m.fail_prob.percent == pytest.approx(0.027, abs=0.001)
    assert m.health_score == 100
    assert m.status_tier == "optimal"
    assert m.primary_stressor is None


@pytest.mark.parametrize(
    "base",
    [
        InspectionInput(fuel_type="GAS", calendar_age=8),
        InspectionInput(fuel_type="ELECTRIC", calendar_age=12, is_closed_loop=True, hardness_gpg=15, years_since_flush=3),
        InspectionInput(fuel_type="HYBRID", calendar_age=5, temp_setting="HOT"),
        InspectionInput(fuel_type="TANKLESS_GAS", calendar_age=6, hardness_gpg=12, years_since_descale=2),
    ],
)
@pytest.mark.parametrize(
    "low, high",
    [
        ({"psi": 60}, {"psi": 120}),
        ({"hardness_gpg": 5}, {"hardness_gpg": 25}),
        ({"people_count": 2}, {"people_count": 7}),
        ({"temp_setting": "NORMAL"}, {"temp_setting": "HOT"}),
        ({"years_since_flush": 1}, {"years_since_flush": 5}),
        ({"years_since_descale": 0.5}, {"years_since_descale": 5}),
        ({"has_circ_pump": False}, {"has_circ_pump": True}),
        (
            {"connection_type": "DIRECT_COPPER", "nipple_material": "STAINLESS_BRASS"},
            {"connection_type": "DIRECT_COPPER", "nipple_material": "STEEL"},
        ),
    ],
    ids=["psi", "hardness", "people", "temp", "flush_age", "descale_age", "circ_pump", "steel_nipple"],
)
def test_more_stress_never_helps(base, low, high):
    lo = score(replace(base, **low))
    hi = score(replace(base, **high))

    assert hi.aging_rate >= lo.aging_rate
    assert hi.health_score <= lo.health_score


@pytest.mark.parametrize("age", [0, 1, 5, 12, 20, 40])
@pytest.mark.parametrize("psi", [None, 60, 150])
def test_bio_age_floor(age, psi):
    m = score(InspectionInput(fuel_type="GAS", calendar_age=age, psi=psi, is_closed_loop=True))
    assert m.bio_age >= m.calendar_age
    assert 0 <= m.health_score <= 100
    assert 1.0 <= m.aging_rate <= 12.0


def test_health_is_monotone_in_fail_prob():
    scored = [score(InspectionInput(fuel_type="GAS", calendar_age=age)) for age in range(0, 40)]
    pairs = sorted((m.fail_prob.percent, m.health_score) for m in scored)
    healths = [h for _, h in pairs]
    assert healths == sorted(healths, reverse=True)


def test_tank_body_leak_is_definite():
    m = score(InspectionInput(fuel_type="GAS", calendar_age=3, is_leaking=True, leak_source="TANK_BODY"))
    assert m.fail_prob == Definite("LEAKING")
    assert m.health_score == 0
    assert m.status_tier == "critical"
    assert m.risk_band == "CRITICAL"
    assert "TANK_BODY_LEAK" in m.flags


def test_unknown_leak_source_is_treated_as_tank():
    assert definite_failure(InspectionInput(fuel_type="GAS", calendar_age=3, is_leaking=True)) == Definite("LEAKING")


def test_visual_rust_is_breach():
    m = score(InspectionInput(fuel_type="ELECTRIC", calendar_age=9, visual_rust=True))
    assert m.fail_prob == Definite("BREACH")
    assert "CONTAINMENT_BREACH" in m.flags


def test_fitting_leak_is_not_definite():
    m = score(InspectionInput(fuel_type="GAS", calendar_age=3, is_leaking=True, leak_source="FITTING_VALVE"))
    assert isinstance(m.fail_prob, Probabilistic)
    assert "FITTING_LEAK" in m.flags


def test_vessel_fatigue_needs_age_and_no_prv():
    old = InspectionInput(fuel_type="GAS", calendar_age=11, psi=120)
    assert "VESSEL_FATIGUE" in score(old).flags
    assert "VESSEL_FATIGUE" not in score(replace(old, calendar_age=9)).flags
    assert "VESSEL_FATIGUE" not in score(replace(old, has_prv=True, expansion_tank_status="FUNCTIONAL")).flags


def test_old_tank_flush_is_risky():
    m = score(InspectionInput(fuel_type="GAS", calendar_age=13, hardness_gpg=12, years_since_flush=5, location="GARAGE"))
    assert "FLUSH_RISKY" in m.flags
    assert "FLUSH_DUE" not in m.flags


def test_sediment_lockout():
    m = score(InspectionInput(fuel_type="ELECTRIC", calendar_age=14, hardness_gpg=20, years_since_flush=14))
    assert m.maintenance_status == "lockout"
    assert "SEDIMENT_LOCKOUT" in m.flags


def test_tankless_flags():
    m = score(
        InspectionInput(
            fuel_type="TANKLESS_GAS",
            calendar_age=17,
            hardness_gpg=15,
            years_since_descale=3,
            has_isolation_valves=False,
            error_code_count=2,
            vent_status="RESTRICTED",
        )
    )
    assert m.sediment_lbs is None
    assert m.scale_score == pytest.approx(36.0)
    assert m.maintenance_status == "critical"
    assert {"END_OF_SERVICE_LIFE", "NO_ISOLATION_VALVES", "DESCALE_DUE", "ERROR_CODES", "VENT_RESTRICTED"} <= m.flags


def test_hybrid_flags():
    m = score(InspectionInput(fuel_type="HYBRID", calendar_age=4, air_filter_status="CLOGGED", condensate_clear=False))
    assert {"AIR_FILTER_SERVICE", "CONDENSATE_BLOCKED"} <= m.flags


@pytest.mark.parametrize(
    "location, finished, expected",
    [
        ("ATTIC", False, 4),
        ("UPPER_FLOOR", True, 4),
        ("BASEMENT", False, 2),
        ("BASEMENT", True, 3),
        ("GARAGE", False, 1),
        ("EXTERIOR", True, 1),
        (None, False, 2),
    ],
)
def test_location_risk(location, finished, expected):
    assert location_risk(InspectionInput(fuel_type="GAS", calendar_age=5, location=location, is_finished_area=finished)) == expected


def test_life_extension_from_fixing_pressure():
    m = score(InspectionInput(fuel_type="GAS", calendar_age=6, psi=100, is_closed_loop=True))
    assert m.years_left_current == pytest.approx(7.0 / 3.0)
    assert m.years_left_optimized == pytest.approx(7.0)
    assert m.life_extension == pytest.approx(m.years_left_optimized - m.years_left_current)


def test_hybrid_efficiency_on_metrics():
    m = score(InspectionInput(fuel_type="HYBRID", calendar_age=4, air_filter_status="CLOGGED", condensate_clear=False))
    assert m.hybrid_efficiency == pytest.approx(55.0)
    assert score(InspectionInput(fuel_type="GAS", calendar_age=4)).hybrid_efficiency is None


def test_never_descaled_old_tankless_is_run_to_failure():
    m = score(InspectionInput(fuel_type="TANKLESS_GAS", calendar_age=8, hardness_gpg=16))
    assert m.maintenance_status == "run_to_failure"
    assert "DESCALE_RISKY" in m.flags
    assert "DESCALE_DUE" not in m.flags
    assert "SCALE_LOCKOUT" not in m.flags


def test_never_descaled_young_tankless_is_due():
    m = score(InspectionInput(fuel_type="TANKLESS_GAS", calendar_age=4, hardness_gpg=16))
    assert m.maintenance_status == "due"
    assert "DESCALE_DUE" in m.flags
    assert "DESCALE_RISKY" not in m.flags
