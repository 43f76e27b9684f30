from __future__ import annotations

from opterra.core.assessment import assess
from opterra.core.models import InspectionInput
from opterra.core.portfolio import PORTFOLIO_COLUMNS, portfolio_summary, portfolio_verdict


def _portfolio(scenario_a, scenario_b):
    healthy = InspectionInput(fuel_type="ELECTRIC", calendar_age=2, psi=60)
    return [
        assess("WH003", healthy),
        assess("WH002", scenario_b),
        assess("WH001", scenario_a),
    ]


def test_assess_bundles_every_stage(scenario_b):
    a = assess("WH002", scenario_b)

    assert a.unit_id == "WH002"
    assert a.recommendation.action == "repair"
    assert [p.months for p in a.projections] == [6.0, 12.0, 24.0]
    assert [r.id for r in a.repairs] == ["flush"]
    assert a.after_repairs.health_score == 48
    assert a.repair_life_extension > 0


def test_portfolio_summary_orders_by_action(scenario_a, scenario_b):
    df = portfolio_summary(_portfolio(scenario_a, scenario_b))

    assert list(df.columns) == PORTFOLIO_COLUMNS
    assert df["unit_id"].tolist() == ["WH001", "WH002", "WH003"]
    assert df["action"].tolist() == ["replace", "repair", "monitor"]
    assert df.loc[0, "health"] == 3
    assert df.loc[0, "fail_prob"] == "84.4%"
    assert df.loc[0, "top_stressor"] == "pressure"


def test_trend_holds_current_and_projected_health(scenario_b):
    df = portfolio_summary([assess("WH002", scenario_b)])
    trend = df.loc[0, "trend"]

    assert len(trend) == 4
    assert trend[0] == 33.0
    assert trend == sorted(trend, reverse=True)


def test_definite_failure_row():
    leaking = InspectionInput(fuel_type="GAS", calendar_age=3, is_leaking=True, leak_source="TANK_BODY")
    df = portfolio_summary([assess("WH9", leaking)])

    assert df.loc[0, "fail_prob"] == "FAIL (LEAKING)"
    assert df.loc[0, "fail_prob_pct"] is None
    assert bool(df.loc[0, "urgent"]) is True


def test_empty_portfolio():
    df = portfolio_summary([])
    assert df.empty
    assert list(df.columns) == PORTFOLIO_COLUMNS
    assert portfolio_verdict(df) == "No inspection data available."


def test_portfolio_verdict(scenario_a, scenario_b):
    verdict = portfolio_verdict(portfolio_summary(_portfolio(scenario_a, scenario_b)))
    assert verdict == (
        "WH001 should be replaced. "
        "WH002 needs service to restore margin. "
        "WH003 can stay on routine monitoring."
    )
