from __future__ import annotations

from dataclasses import dataclass

from opterra.core.contract import DEFAULT_SCORING, ScoringConfig
from opterra.core.models import InspectionInput, MaintenanceStatus
from opterra.core.stress import is_galvanic_exposed, resolve_hardness, scale_score, sediment_lbs


@dataclass(frozen=True)
class MaintenanceOutlook:
    sediment_lbs: float | None
    scale_score: float | None
    status: MaintenanceStatus
    months_to_flush: int | None
    anode_burn_rate: float | None
    shield_life_years: float | None
    months_to_anode_depletion: int | None
    hybrid_efficiency: float | None = None


def _cap_months(months: float, cfg: ScoringConfig) -> int:
    return int(max(0, min(cfg.maintenance_horizon_months, round(months))))


def sediment_status(lbs: float | None, cfg: ScoringConfig = DEFAULT_SCORING) -> MaintenanceStatus:
    if lbs is None:
        return "unknown"
    if lbs > cfg.sediment_lockout_lbs:
        return "lockout"
    if lbs >= cfg.sediment_due_lbs:
        return "due"
    if lbs >= cfg.sediment_advisory_lbs:
        return "advisory"
    return "optimal"


def scale_status(score: float | None, cfg: ScoringConfig = DEFAULT_SCORING) -> MaintenanceStatus:
    if score is None:
        return "unknown"
    if score > cfg.scale_lockout:
        return "lockout"
    if score > cfg.scale_critical:
        return "critical"
    if score > cfg.scale_due:
        return "due"
    return "optimal"


def _never_descaled_hard_water(inspection: InspectionInput, cfg: ScoringConfig) -> bool:
    hardness = resolve_hardness(inspection, cfg).effective_gpg
    return (
        inspection.years_since_descale is None
        and hardness is not None
        and hardness > cfg.hard_water_gpg
    )


def tankless_descale_status(inspection: InspectionInput, cfg: ScoringConfig = DEFAULT_SCORING) -> MaintenanceStatus:
    """
    Scale status for a tankless unit.

    An old heat exchanger that has never been descaled in hard water is past
    the point of no return: the scale is holding pinholes shut, so it is run
    to failure instead of descaled.
    """
    if _never_descaled_hard_water(inspection, cfg):
        age = float(inspection.calendar_age)
        if age > cfg.descale_no_return_age:
            return "run_to_failure"
        if age > cfg.descale_overdue_age:
            return "due"
    return scale_status(scale_score(inspection, cfg), cfg)


def hybrid_efficiency(inspection: InspectionInput, cfg: ScoringConfig = DEFAULT_SCORING) -> float | None:
    """Heat pump efficiency 0..100 from filter, compressor and condensate condition; None for non-hybrids."""
    if inspection.unit_category != "hybrid":
        return None
    efficiency = 100.0
    if inspection.air_filter_status is not None:
        efficiency -= cfg.hybrid_filter_penalty.get(inspection.air_filter_status, 0.0)
    if inspection.compressor_health is not None:
        efficiency *= float(inspection.compressor_health) / 100.0
    if inspection.condensate_clear is False:
        efficiency -= cfg.hybrid_condensate_penalty
    return float(max(0.0, min(100.0, efficiency)))


def _is_hard_water(inspection: InspectionInput, cfg: ScoringConfig) -> bool:
    hardness = resolve_hardness(inspection, cfg).effective_gpg
    # unknown hardness gets the conservative interval
    return hardness is None or hardness > cfg.hard_water_gpg


def months_to_flush(inspection: InspectionInput, cfg: ScoringConfig = DEFAULT_SCORING) -> int | None:
    """Months until the next flush (tank) or descale (tankless)."""
    hard = _is_hard_water(inspection, cfg)
    if inspection.unit_category == "tankless":
        years = inspection.years_since_descale
        interval = cfg.descale_interval_hard_months if hard else cfg.descale_interval_soft_months
    else:
        years = inspection.years_since_flush
        interval = cfg.flush_interval_hard_months if hard else cfg.flush_interval_soft_months
    if years is None:
        return None
    return _cap_months(interval - float(years) * 12.0, cfg)


def anode_burn_rate(inspection: InspectionInput, cfg: ScoringConfig = DEFAULT_SCORING) -> float:
    rate = 1.0
    if inspection.has_softener:
        rate *= cfg.anode_burn_softener
    if is_galvanic_exposed(inspection, cfg):
        rate *= cfg.anode_burn_galvanic
    if inspection.has_circ_pump:
        rate *= cfg.anode_burn_recirc
    return rate


def shield_life_years(inspection: InspectionInput, cfg: ScoringConfig = DEFAULT_SCORING) -> float | None:
    """Years of anode protection left; None for tankless or unknown anode history."""
    if inspection.unit_category == "tankless" or inspection.years_since_anode is None:
        return None
    base_life = inspection.warranty_years if inspection.warranty_years else cfg.anode_default_life_years
    effective_life = float(base_life) / anode_burn_rate(inspection, cfg)
    return max(0.0, effective_life - float(inspection.years_since_anode))


def maintenance_outlook(inspection: InspectionInput, cfg: ScoringConfig = DEFAULT_SCORING) -> MaintenanceOutlook:
    if inspection.unit_category == "tankless":
        lbs = None
        scale = scale_score(inspection, cfg)
        status = tankless_descale_status(inspection, cfg)
        burn = None
    else:
        lbs = sediment_lbs(inspection, cfg)
        scale = None
        status = sediment_status(lbs, cfg)
        burn = anode_burn_rate(inspection, cfg)

    shield = shield_life_years(inspection, cfg)
    return MaintenanceOutlook(
        sediment_lbs=lbs,
        scale_score=scale,
        status=status,
        months_to_flush=months_to_flush(inspection, cfg),
        anode_burn_rate=burn,
        shield_life_years=shield,
        months_to_anode_depletion=None if shield is None else _cap_months(shield * 12.0, cfg),
        hybrid_efficiency=hybrid_efficiency(inspection, cfg),
    )
