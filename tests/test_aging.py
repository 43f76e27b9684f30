from __future__ import annotations

import pytest

from opterra.core.aging import (
    bio_age_to_fail_prob,
    biological_age,
    composite_aging_rate,
    health_from_fail_prob,
    health_from_percent,
    percent_for_health,
    risk_band,
    status_tier,
    years_to_end_of_life,
)
from opterra.core.models import Definite, Probabilistic, StressFactorSet


def test_aging_rate_is_product_of_factors():
    f = StressFactorSet(pressure=1.5, closed_loop=1.5, sediment=1.132, hardness=1.05)
    assert composite_aging_rate(f) == pytest.approx(2.67435, rel=1e-4)


def test_aging_rate_is_capped():
    f = StressFactorSet(pressure=3.0, galvanic=3.0, closed_loop=1.5, temperature=1.5)
    assert composite_aging_rate(f) == pytest.approx(12.0)


def test_bio_age_never_below_calendar_age():
    assert biological_age(10, 1.0) == 10
    assert biological_age(10, 0.5) == 10
    assert biological_age(10, 2.0) == 20


def test_fail_prob_at_install_is_tiny():
    assert bio_age_to_fail_prob(0.0) == pytest.approx(0.0274, abs=1e-3)


@pytest.mark.parametrize(
    "bio_age, expected",
    [
        (14.263, 27.80),
        (25.0, 66.2),
        (18.0, 41.4),
    ],
)
def test_weibull_reference_points(bio_age, expected):
    assert bio_age_to_fail_prob(bio_age) == pytest.approx(expected, abs=0.2)


def test_fail_prob_is_monotonic_and_capped():
    values = [bio_age_to_fail_prob(t) for t in range(0, 80, 2)]
    assert values == sorted(values)
    assert max(values) == pytest.approx(85.0)
    assert bio_age_to_fail_prob(500.0) == pytest.approx(85.0)


def test_health_is_derived_from_fail_prob():
    assert health_from_percent(0.0) == 100
    assert health_from_fail_prob(Probabilistic(27.8)) == 33
    assert health_from_fail_prob(Definite("LEAKING")) == 0


# health 1 sits beyond the 100% probability ceiling
@pytest.mark.parametrize("health", list(range(2, 101)))
def test_percent_for_health_round_trips(health):
    assert health_from_percent(percent_for_health(health)) == health


def test_percent_for_health_edges():
    assert percent_for_health(0) == 100.0
    assert percent_for_health(-5) == 100.0
    assert percent_for_health(100) == 0.0


@pytest.mark.parametrize(
    "health, tier",
    [(100, "optimal"), (70, "optimal"), (69, "warning"), (40, "warning"), (39, "critical"), (0, "critical")],
)
def test_status_tier_thresholds(health, tier):
    assert status_tier(Probabilistic(percent_for_health(health)), health) == tier


def test_definite_is_always_critical():
    assert status_tier(Definite("BREACH"), 0) == "critical"
    assert risk_band(Definite("BREACH")) == "CRITICAL"


@pytest.mark.parametrize(
    "pct, band",
    [(0.0, "NORMAL"), (29.9, "NORMAL"), (30.0, "ELEVATED"), (59.9, "ELEVATED"), (60.0, "HIGH"), (85.0, "HIGH")],
)
def test_risk_band_thresholds(pct, band):
    assert risk_band(Probabilistic(pct)) == band


def test_years_to_end_of_life():
    assert years_to_end_of_life(10.0, 1.0) == pytest.approx(15.0)
    assert years_to_end_of_life(10.0, 3.0) == pytest.approx(5.0)
    assert years_to_end_of_life(30.0, 2.0) == 0.0
