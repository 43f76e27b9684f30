from __future__ import annotations

from opterra.core.aging import (
    biological_age,
    composite_aging_rate,
    curve_fail_prob,
    health_from_fail_prob,
    risk_band,
    status_tier,
    years_to_end_of_life,
)
from opterra.core.contract import DEFAULT_SCORING, ScoringConfig
from opterra.core.maintenance import MaintenanceOutlook, maintenance_outlook
from opterra.core.models import (
    Definite,
    FailureProbability,
    InspectionInput,
    OpterraMetrics,
    StressFactorSet,
)
from opterra.core.stress import (
    compute_stress_factors,
    expansion_tank_functional,
    is_closed_system,
    is_galvanic_exposed,
    prv_active,
    primary_stressor,
)

LOCATION_RISK = {
    "ATTIC": (4, 4),
    "UPPER_FLOOR": (4, 4),
    "MAIN_LIVING": (3, 3),
    "BASEMENT": (2, 3),
    "UTILITY_CLOSET": (2, 3),
    "GARAGE": (1, 2),
    "CRAWLSPACE": (1, 2),
    "EXTERIOR": (1, 1),
}
DEFAULT_LOCATION_RISK = 2


def location_risk(inspection: InspectionInput) -> int:
    """Water-damage exposure 1 (low) .. 4 (extreme); (unfinished, finished) per location."""
    levels = LOCATION_RISK.get(inspection.location or "")
    if levels is None:
        return DEFAULT_LOCATION_RISK
    return levels[1] if inspection.is_finished_area else levels[0]


def definite_failure(inspection: InspectionInput) -> Definite | None:
    if inspection.is_leaking and inspection.leak_source in (None, "NONE", "TANK_BODY"):
        return Definite("LEAKING")
    if inspection.visual_rust:
        return Definite("BREACH")
    return None


def detect_flags(
    inspection: InspectionInput,
    factors: StressFactorSet,
    outlook: MaintenanceOutlook,
    loc_risk: int,
    cfg: ScoringConfig = DEFAULT_SCORING,
) -> frozenset[str]:
    flags: set[str] = set()
    category = inspection.unit_category
    age = float(inspection.calendar_age)
    psi = inspection.psi

    # safety
    failure = definite_failure(inspection)
    if isinstance(failure, Definite):
        flags.add("TANK_BODY_LEAK" if failure.cause == "LEAKING" else "CONTAINMENT_BREACH")
    if inspection.visual_rust:
        flags.add("CONTAINMENT_BREACH")
    if inspection.connection_corrosion and is_galvanic_exposed(inspection, cfg):
        flags.add("GALVANIC_CORROSION")
    if inspection.vent_status == "BLOCKED":
        flags.add("VENT_BLOCKED")
    if (
        category != "tankless"
        and psi is not None
        and psi > cfg.psi_critical
        and age > cfg.vessel_fatigue_min_age
        and not prv_active(inspection)
    ):
        flags.add("VESSEL_FATIGUE")

    # economic
    if outlook.status == "lockout":
        flags.add("SCALE_LOCKOUT" if category == "tankless" else "SEDIMENT_LOCKOUT")
    if category == "tankless" and age > cfg.tankless_max_age:
        flags.add("END_OF_SERVICE_LIFE")
    if inspection.error_code_count > cfg.error_codes_replace:
        flags.add("CHRONIC_ERRORS")
    elif inspection.error_code_count > 0:
        flags.add("ERROR_CODES")

    # service
    if inspection.is_leaking and inspection.leak_source in ("FITTING_VALVE", "DRAIN_PAN"):
        flags.add("FITTING_LEAK")
    if inspection.has_prv and inspection.prv_functional is False:
        flags.add("FAILED_PRV")
    elif not inspection.has_prv and psi is not None and psi > cfg.psi_normal_max:
        flags.add("HIGH_PRESSURE")
    if is_closed_system(inspection) and not expansion_tank_functional(inspection):
        if inspection.expansion_tank_status == "WATERLOGGED":
            flags.add("WATERLOGGED_EXPANSION_TANK")
        else:
            flags.add("MISSING_EXPANSION_TANK")
    if factors.galvanic > 1.0:
        flags.add("UNPROTECTED_CONNECTION")
    if category != "tankless" and inspection.has_drain_pan is False and loc_risk >= 3:
        flags.add("MISSING_DRAIN_PAN")
    if inspection.vent_status == "RESTRICTED":
        flags.add("VENT_RESTRICTED")

    if category == "hybrid":
        if inspection.air_filter_status in ("DIRTY", "CLOGGED"):
            flags.add("AIR_FILTER_SERVICE")
        if inspection.condensate_clear is False:
            flags.add("CONDENSATE_BLOCKED")
        if inspection.compressor_health is not None:
            if inspection.compressor_health < cfg.compressor_degraded_health:
                flags.add("COMPRESSOR_DEGRADED")
            if inspection.compressor_health < cfg.compressor_low_capacity_health:
                flags.add("LOW_HEAT_PUMP_CAPACITY")

    if category == "tankless":
        if inspection.has_isolation_valves is False and age > 1:
            flags.add("NO_ISOLATION_VALVES")
        if inspection.inlet_filter_status in ("DIRTY", "CLOGGED"):
            flags.add("INLET_FILTER_SERVICE")
        if outlook.status == "run_to_failure":
            flags.add("DESCALE_RISKY")
        if outlook.status in ("due", "critical") or outlook.months_to_flush == 0:
            flags.add("DESCALE_DUE")
        if factors.circulation > 1.0 and age > cfg.recirc_service_min_age:
            flags.add("UNCONTROLLED_RECIRCULATION")
    else:
        flush_due = outlook.status == "due" or outlook.months_to_flush == 0
        if flush_due and outlook.status != "lockout":
            # flushing an old tank can dislodge sediment that was sealing pinholes
            flags.add("FLUSH_RISKY" if age > cfg.fragile_age_years else "FLUSH_DUE")
        if (
            category == "tank"
            and outlook.shield_life_years is not None
            and outlook.shield_life_years < 1.0
            and age < cfg.anode_replace_max_age
        ):
            flags.add("ANODE_DEPLETED")

    return frozenset(flags)


def score(inspection: InspectionInput, cfg: ScoringConfig = DEFAULT_SCORING) -> OpterraMetrics:
    """
    Score one inspection.

    Pure and total over validated input: stress factors -> aging rate ->
    biological age -> failure probability -> health score, status tier,
    violation flags and maintenance indicators.
    """
    factors = compute_stress_factors(inspection, cfg)
    rate = composite_aging_rate(factors, cfg)
    bio_age = biological_age(inspection.calendar_age, rate)

    fail_prob: FailureProbability = definite_failure(inspection) or curve_fail_prob(bio_age, cfg)
    health = health_from_fail_prob(fail_prob, cfg)

    outlook = maintenance_outlook(inspection, cfg)
    loc_risk = location_risk(inspection)
    flags = detect_flags(inspection, factors, outlook, loc_risk, cfg)

    optimized_rate = max(1.0, rate / (factors.pressure * factors.closed_loop))
    years_current = years_to_end_of_life(bio_age, rate, cfg)
    years_optimized = years_to_end_of_life(bio_age, optimized_rate, cfg)

    return OpterraMetrics(
        fuel_type=inspection.fuel_type,
        unit_category=inspection.unit_category,
        calendar_age=float(inspection.calendar_age),
        bio_age=bio_age,
        aging_rate=rate,
        fail_prob=fail_prob,
        health_score=health,
        status_tier=status_tier(fail_prob, health, cfg),
        risk_band=risk_band(fail_prob, cfg),
        stress_factors=factors,
        primary_stressor=primary_stressor(factors),
        flags=flags,
        location_risk=loc_risk,
        sediment_lbs=outlook.sediment_lbs,
        scale_score=outlook.scale_score,
        maintenance_status=outlook.status,
        months_to_flush=outlook.months_to_flush,
        shield_life_years=outlook.shield_life_years,
        months_to_anode_depletion=outlook.months_to_anode_depletion,
        years_left_current=years_current,
        years_left_optimized=years_optimized,
        life_extension=max(0.0, years_optimized - years_current),
        psi=None if inspection.psi is None else float(inspection.psi),
        expansion_tank_functional=expansion_tank_functional(inspection),
        hybrid_efficiency=outlook.hybrid_efficiency,
    )
