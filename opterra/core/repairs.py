from __future__ import annotations

from dataclasses import replace
from typing import Iterable

from opterra.core.aging import (
    bio_age_to_fail_prob,
    curve_fail_prob,
    health_from_fail_prob,
    percent_for_health,
    risk_band,
    status_tier,
    years_to_end_of_life,
)
from opterra.core.contract import DEFAULT_SCORING, ScoringConfig
from opterra.core.models import (
    FailureProbability,
    OpterraMetrics,
    Probabilistic,
    RepairImpact,
    RepairOption,
    UnitCategory,
)


def _option(
    id: str,
    name: str,
    description: str,
    cost: tuple[float, float],
    impact: tuple[float, float, float],
    unit_types: tuple[UnitCategory, ...],
    *,
    resolves: tuple[str, ...] = (),
    full: bool = False,
) -> RepairOption:
    return RepairOption(
        id=id,
        name=name,
        description=description,
        cost_min=cost[0],
        cost_max=cost[1],
        impact=RepairImpact(*impact),
        unit_types=unit_types,
        is_full_replacement=full,
        resolves=frozenset(resolves),
    )


# (health boost, aging reduction %, failure reduction %)
REPAIR_CATALOG: tuple[RepairOption, ...] = (
    # tank
    _option("replace_tank", "Replace Water Heater", "Full tank replacement with code-compliant installation",
            (2800, 4500), (100, 100, 100), ("tank",), full=True),
    _option("prv", "Install PRV", "Pressure reducing valve to control inlet pressure",
            (350, 550), (20, 25, 30), ("tank", "hybrid"), resolves=("HIGH_PRESSURE",)),
    _option("prv_exp_package", "Install PRV + Expansion Tank",
            "PRV closes the loop, so the expansion tank goes in with it",
            (600, 950), (35, 45, 55), ("tank", "hybrid"),
            resolves=("HIGH_PRESSURE", "MISSING_EXPANSION_TANK", "WATERLOGGED_EXPANSION_TANK")),
    _option("exp_tank", "Install Expansion Tank", "Absorbs thermal expansion in a closed loop",
            (250, 400), (15, 20, 25), ("tank", "hybrid"), resolves=("MISSING_EXPANSION_TANK",)),
    _option("replace_prv", "Replace Failed PRV", "Replace a malfunctioning pressure reducing valve",
            (350, 550), (22, 28, 35), ("tank", "hybrid"), resolves=("FAILED_PRV",)),
    _option("replace_exp", "Replace Expansion Tank", "Replace a failed or waterlogged expansion tank",
            (250, 400), (18, 22, 28), ("tank", "hybrid"), resolves=("WATERLOGGED_EXPANSION_TANK",)),
    _option("flush", "Flush Sediment", "Professional tank flush and drain",
            (150, 250), (15, 25, 20), ("tank", "hybrid"), resolves=("FLUSH_DUE",)),
    _option("anode", "Replace Anode Rod", "New sacrificial anode installation",
            (200, 350), (18, 35, 25), ("tank",), resolves=("ANODE_DEPLETED",)),
    _option("fitting_repair", "Repair Leaking Fitting", "Reseal or replace the leaking fitting or valve",
            (150, 350), (5, 0, 10), ("tank", "tankless", "hybrid"), resolves=("FITTING_LEAK",)),
    _option("dielectric_unions", "Install Dielectric Unions", "Isolate copper lines from the steel nipples",
            (150, 300), (10, 30, 15), ("tank", "tankless", "hybrid"), resolves=("UNPROTECTED_CONNECTION",)),
    _option("drain_pan", "Install Drain Pan", "Code-required pan with drain line in a finished or high-risk area",
            (150, 300), (5, 0, 0), ("tank", "hybrid"), resolves=("MISSING_DRAIN_PAN",)),
    # tankless
    _option("replace_tankless", "Replace Tankless Unit", "Full tankless replacement with code-compliant installation",
            (3500, 5500), (100, 100, 100), ("tankless",), full=True),
    _option("descale", "Descale Heat Exchanger", "Vinegar flush to remove mineral scale",
            (200, 350), (20, 30, 25), ("tankless",), resolves=("DESCALE_DUE",)),
    _option("isolation_valves", "Install Isolation Valves", "Service valves so the unit can be descaled",
            (400, 650), (10, 15, 20), ("tankless",), resolves=("NO_ISOLATION_VALVES",)),
    _option("inlet_filter", "Clean/Replace Inlet Filter", "Remove debris from the inlet screen to restore flow",
            (75, 150), (8, 10, 12), ("tankless",), resolves=("INLET_FILTER_SERVICE",)),
    _option("igniter_service", "Service Igniter/Flame Rod", "Clean or replace ignition components",
            (150, 300), (12, 15, 18), ("tankless",), resolves=("ERROR_CODES",)),
    _option("flow_sensor", "Replace Flow Sensor", "Restore accurate flow detection and firing",
            (200, 400), (15, 20, 22), ("tankless",), resolves=("ERROR_CODES",)),
    _option("vent_cleaning", "Vent System Cleaning", "Clear restricted exhaust venting",
            (150, 300), (10, 12, 15), ("tankless",), resolves=("VENT_RESTRICTED",)),
    _option("recirculation_service", "Recirculation System Service", "Put the recirc pump on a timer or demand control",
            (200, 400), (8, 20, 15), ("tankless",), resolves=("UNCONTROLLED_RECIRCULATION",)),
    # hybrid
    _option("replace_hybrid", "Replace Hybrid Unit", "Full heat pump water heater replacement",
            (3800, 5800), (100, 100, 100), ("hybrid",), full=True),
    _option("air_filter_service", "Clean/Replace Air Filter", "Restore heat pump airflow",
            (50, 100), (10, 15, 10), ("hybrid",), resolves=("AIR_FILTER_SERVICE",)),
    _option("condensate_clear", "Clear Condensate Drain", "Restore condensate drainage",
            (100, 200), (8, 10, 12), ("hybrid",), resolves=("CONDENSATE_BLOCKED",)),
    _option("compressor_service", "Compressor Service", "Diagnose and service the heat pump compressor",
            (300, 600), (20, 25, 30), ("hybrid",), resolves=("COMPRESSOR_DEGRADED",)),
    _option("refrigerant_check", "Refrigerant Check & Recharge", "Verify refrigerant charge and top up",
            (200, 400), (15, 20, 18), ("hybrid",), resolves=("LOW_HEAT_PUMP_CAPACITY",)),
)

_BY_ID = {r.id: r for r in REPAIR_CATALOG}


def get_repair(repair_id: str) -> RepairOption:
    try:
        return _BY_ID[repair_id]
    except KeyError as e:
        raise KeyError(f"Unknown repair option: {repair_id}") from e


def repairs_for_unit(category: UnitCategory) -> list[RepairOption]:
    return [r for r in REPAIR_CATALOG if category in r.unit_types]


def replacement_option(category: UnitCategory) -> RepairOption:
    return next(r for r in REPAIR_CATALOG if r.is_full_replacement and category in r.unit_types)


def available_repairs(metrics: OpterraMetrics, cfg: ScoringConfig = DEFAULT_SCORING) -> list[RepairOption]:
    """
    Service options that address the flags on this unit.

    Full replacement is never included; the recommendation compares these
    against replacement_option() instead.
    """
    flags = metrics.flags
    ids: list[str] = []

    if "FITTING_LEAK" in flags:
        ids.append("fitting_repair")

    if "HIGH_PRESSURE" in flags:
        # a new PRV closes the loop, so it needs a working expansion tank
        ids.append("prv" if metrics.expansion_tank_functional else "prv_exp_package")
    if "FAILED_PRV" in flags:
        ids.append("replace_prv")
    if "prv_exp_package" not in ids:
        if "WATERLOGGED_EXPANSION_TANK" in flags:
            ids.append("replace_exp")
        elif "MISSING_EXPANSION_TANK" in flags:
            ids.append("exp_tank")

    if "UNPROTECTED_CONNECTION" in flags:
        ids.append("dielectric_unions")
    if "MISSING_DRAIN_PAN" in flags:
        ids.append("drain_pan")

    if "ERROR_CODES" in flags:
        ids.append("igniter_service" if metrics.fuel_type == "TANKLESS_GAS" else "flow_sensor")
    if "VENT_RESTRICTED" in flags:
        ids.append("vent_cleaning")
    if "AIR_FILTER_SERVICE" in flags:
        ids.append("air_filter_service")
    if "CONDENSATE_BLOCKED" in flags:
        ids.append("condensate_clear")
    if "LOW_HEAT_PUMP_CAPACITY" in flags:
        ids.append("refrigerant_check")
    if "COMPRESSOR_DEGRADED" in flags:
        ids.append("compressor_service")
    if "INLET_FILTER_SERVICE" in flags:
        ids.append("inlet_filter")

    if "NO_ISOLATION_VALVES" in flags:
        ids.append("isolation_valves")
    elif "DESCALE_DUE" in flags:
        ids.append("descale")
    if "UNCONTROLLED_RECIRCULATION" in flags:
        ids.append("recirculation_service")

    if "FLUSH_DUE" in flags:
        ids.append("flush")
    if "ANODE_DEPLETED" in flags:
        ids.append("anode")

    out: list[RepairOption] = []
    for repair_id in ids:
        r = get_repair(repair_id)
        if metrics.unit_category in r.unit_types and r not in out:
            out.append(r)
    return out


def repair_cost_range(repairs: Iterable[RepairOption]) -> tuple[float, float]:
    selected = list(repairs)
    return (
        float(sum(r.cost_min for r in selected)),
        float(sum(r.cost_max for r in selected)),
    )


def _with_outcome(
    metrics: OpterraMetrics,
    *,
    fail_prob: FailureProbability,
    aging_rate: float,
    bio_age: float,
    flags: frozenset[str],
    scale: float,
    cfg: ScoringConfig,
) -> OpterraMetrics:
    health = health_from_fail_prob(fail_prob, cfg)
    years_left = years_to_end_of_life(bio_age, aging_rate, cfg)
    years_optimized = max(years_left, metrics.years_left_optimized)
    return replace(
        metrics,
        bio_age=bio_age,
        aging_rate=aging_rate,
        fail_prob=fail_prob,
        health_score=health,
        status_tier=status_tier(fail_prob, health, cfg),
        risk_band=risk_band(fail_prob, cfg),
        flags=flags,
        fail_prob_scale=scale,
        years_left_current=years_left,
        years_left_optimized=years_optimized,
        life_extension=years_optimized - years_left,
    )


def simulate(
    metrics: OpterraMetrics,
    repairs: Iterable[RepairOption],
    cfg: ScoringConfig = DEFAULT_SCORING,
) -> OpterraMetrics:
    """
    Hypothetical "after" snapshot for a set of repairs.

    Impacts are summed against the pre-repair baseline and clamped once, so
    the result does not depend on the order repairs were selected in. The
    health boost is applied in health space and mapped back through the
    inverse curve. The reduction is kept as fail_prob_scale so projections
    of the snapshot stay on the repaired curve.
    """
    selected = list(repairs)
    if not selected:
        return metrics

    if any(r.is_full_replacement for r in selected):
        fresh = curve_fail_prob(0.0, cfg)
        return _with_outcome(
            metrics, fail_prob=fresh, aging_rate=1.0, bio_age=0.0, flags=frozenset(), scale=1.0, cfg=cfg
        )

    boost = sum(r.impact.health_score_boost for r in selected)
    aging_cut = min(100.0, sum(r.impact.aging_factor_reduction for r in selected))
    fail_cut = min(100.0, sum(r.impact.failure_prob_reduction for r in selected))

    rate = max(1.0, metrics.aging_rate * (1.0 - aging_cut / 100.0))

    resolved: set[str] = set()
    for r in selected:
        resolved |= r.resolves
    flags = frozenset(metrics.flags - resolved)

    fail_prob = metrics.fail_prob
    scale = metrics.fail_prob_scale
    if isinstance(fail_prob, Probabilistic):
        reduced = fail_prob.percent * (1.0 - fail_cut / 100.0)
        boosted = percent_for_health(min(100.0, metrics.health_score + boost), cfg)
        target = min(100.0, max(0.0, min(reduced, boosted)))
        on_curve = bio_age_to_fail_prob(metrics.bio_age, cfg)
        scale = min(1.0, target / on_curve) if on_curve > 0.0 else 0.0
        fail_prob = Probabilistic(target)

    return _with_outcome(
        metrics, fail_prob=fail_prob, aging_rate=rate, bio_age=metrics.bio_age, flags=flags, scale=scale, cfg=cfg
    )


def life_extension(
    metrics: OpterraMetrics,
    repairs: Iterable[RepairOption],
    cfg: ScoringConfig = DEFAULT_SCORING,
) -> float:
    """Extra years of service the repairs buy by slowing the aging rate."""
    after = simulate(metrics, repairs, cfg)
    current = years_to_end_of_life(metrics.bio_age, metrics.aging_rate, cfg)
    improved = years_to_end_of_life(metrics.bio_age, after.aging_rate, cfg)
    return max(0.0, improved - current)
