from __future__ import annotations

from dataclasses import dataclass

from opterra.core.contract import DEFAULT_SCORING, ScoringConfig
from opterra.core.models import InspectionInput, StressFactorSet

# Regional street hardness (GPG) by state, used when nothing was reported.
REGIONAL_HARDNESS_GPG: dict[str, float] = {
    "AZ": 18, "NM": 16, "TX": 15, "NV": 14, "UT": 16,
    "IN": 14, "OH": 13, "WI": 12, "IL": 11, "MI": 10,
    "MN": 11, "IA": 13, "MO": 12, "KS": 16, "NE": 14,
    "ND": 15, "SD": 14,
    "FL": 10, "GA": 8, "NC": 7, "SC": 7, "AL": 9, "MS": 8,
    "LA": 9, "TN": 10, "KY": 11, "VA": 7, "WV": 9,
    "CA": 8, "OR": 4, "WA": 3,
    "CO": 10, "ID": 9, "MT": 8, "WY": 11,
    "NY": 4, "MA": 3, "CT": 3, "ME": 2, "NH": 2, "VT": 3,
    "RI": 3, "NJ": 6, "PA": 8, "MD": 7, "DE": 6, "DC": 6,
    "AK": 2, "HI": 3,
}

# Brands that ship dielectric, stainless or heat-trap nipples from the factory.
FACTORY_PROTECTED_BRANDS = (
    "bradford white",
    "rheem",
    "ruud",
    "a.o. smith",
    "ao smith",
    "state",
    "american",
    "lochinvar",
    "navien",
    "rinnai",
    "noritz",
    "takagi",
)


@dataclass(frozen=True)
class ResolvedHardness:
    street_gpg: float | None
    effective_gpg: float | None
    source: str  # MEASURED | SOFTENER | REPORTED | REGIONAL | UNKNOWN


def street_hardness(inspection: InspectionInput) -> tuple[float | None, str]:
    if inspection.hardness_gpg is not None:
        return float(inspection.hardness_gpg), "REPORTED"
    if inspection.region:
        gpg = REGIONAL_HARDNESS_GPG.get(inspection.region.strip().upper())
        if gpg is not None:
            return float(gpg), "REGIONAL"
    return None, "UNKNOWN"


def resolve_hardness(inspection: InspectionInput, cfg: ScoringConfig = DEFAULT_SCORING) -> ResolvedHardness:
    """
    Effective hardness reaching the heater.

    A measured value always wins. A softener with salt gives near-zero
    hardness; an empty brine tank passes street water through.
    """
    street, source = street_hardness(inspection)

    if inspection.measured_hardness_gpg is not None:
        return ResolvedHardness(street, float(inspection.measured_hardness_gpg), "MEASURED")

    if inspection.has_softener:
        salt = inspection.softener_salt_status
        if salt == "OK":
            return ResolvedHardness(street, cfg.softened_hardness_gpg, "SOFTENER")
        if salt == "EMPTY":
            return ResolvedHardness(street, street, source)
        return ResolvedHardness(street, cfg.softener_unknown_hardness_gpg, "SOFTENER")

    return ResolvedHardness(street, street, source)


def has_factory_dielectric(manufacturer: str | None, calendar_age: float, cfg: ScoringConfig = DEFAULT_SCORING) -> bool:
    if not manufacturer:
        return False
    brand = manufacturer.strip().lower()
    protected = any(b in brand for b in FACTORY_PROTECTED_BRANDS)
    return protected and calendar_age < cfg.factory_dielectric_max_age


def is_galvanic_exposed(inspection: InspectionInput, cfg: ScoringConfig = DEFAULT_SCORING) -> bool:
    """Direct copper onto steel with nothing isolating the two metals."""
    if inspection.connection_type != "DIRECT_COPPER":
        return False
    if inspection.nipple_material in ("STAINLESS_BRASS", "FACTORY_PROTECTED"):
        return False
    if inspection.nipple_material == "STEEL":
        return True
    return not has_factory_dielectric(inspection.manufacturer, inspection.calendar_age, cfg)


def prv_active(inspection: InspectionInput) -> bool:
    return inspection.has_prv and inspection.prv_functional is not False


def expansion_tank_functional(inspection: InspectionInput) -> bool:
    status = inspection.expansion_tank_status
    if status is not None:
        return status == "FUNCTIONAL"
    return inspection.has_expansion_tank


def is_closed_system(inspection: InspectionInput) -> bool:
    # a PRV acts as a check valve and closes the loop on its own
    return inspection.is_closed_loop or inspection.has_prv


def sediment_lbs(inspection: InspectionInput, cfg: ScoringConfig = DEFAULT_SCORING) -> float | None:
    if inspection.unit_category == "tankless":
        return None
    hardness = resolve_hardness(inspection, cfg).effective_gpg
    years = inspection.years_since_flush
    if hardness is None or years is None:
        return None
    rate = cfg.sediment_rate_lbs.get(inspection.fuel_type, cfg.sediment_rate_lbs.get("GAS", 0.044))
    return float(hardness) * float(years) * float(rate)


def scale_score(inspection: InspectionInput, cfg: ScoringConfig = DEFAULT_SCORING) -> float | None:
    if inspection.unit_category != "tankless":
        return None
    hardness = resolve_hardness(inspection, cfg).effective_gpg
    years = inspection.years_since_descale
    if hardness is None or years is None:
        return None
    return float(min(100.0, float(hardness) * float(years) * cfg.scale_rate_per_gpg_year))


# ----------------------------
# Individual factors
# ----------------------------

def pressure_factor(inspection: InspectionInput, cfg: ScoringConfig = DEFAULT_SCORING) -> float:
    if inspection.psi is None or prv_active(inspection):
        return 1.0
    excess = max(0.0, float(inspection.psi) - cfg.psi_normal_max)
    return float(min(cfg.pressure_factor_cap, 1.0 + excess * cfg.psi_penalty_per_psi))


def temperature_factor(inspection: InspectionInput, cfg: ScoringConfig = DEFAULT_SCORING) -> float:
    if inspection.temp_setting is None:
        return 1.0
    return max(1.0, float(cfg.temp_factors.get(inspection.temp_setting, 1.0)))


def sediment_factor(inspection: InspectionInput, cfg: ScoringConfig = DEFAULT_SCORING) -> float:
    if inspection.unit_category == "tankless":
        scale = scale_score(inspection, cfg)
        if scale is None:
            return 1.0
        return 1.0 + scale * cfg.scale_stress_per_point

    lbs = sediment_lbs(inspection, cfg)
    if lbs is None:
        return 1.0
    return float(min(cfg.sediment_factor_cap, 1.0 + lbs * cfg.sediment_stress_per_lb))


def circulation_factor(inspection: InspectionInput, cfg: ScoringConfig = DEFAULT_SCORING) -> float:
    if inspection.has_circ_pump and not inspection.circ_pump_controlled:
        return cfg.circ_pump_factor
    return 1.0


def closed_loop_factor(inspection: InspectionInput, cfg: ScoringConfig = DEFAULT_SCORING) -> float:
    if is_closed_system(inspection) and not expansion_tank_functional(inspection):
        return cfg.closed_loop_factor
    return 1.0


def usage_factor(inspection: InspectionInput, cfg: ScoringConfig = DEFAULT_SCORING) -> float:
    if inspection.people_count is None and inspection.usage_type is None:
        return 1.0
    people = inspection.people_count if inspection.people_count is not None else cfg.usage_baseline_people
    base = 1.0 + max(0, int(people) - cfg.usage_baseline_people) * cfg.usage_per_extra_person
    mult = cfg.usage_type_factors.get(inspection.usage_type or "normal", 1.0)
    return max(1.0, base * mult)


def galvanic_factor(inspection: InspectionInput, cfg: ScoringConfig = DEFAULT_SCORING) -> float:
    return cfg.galvanic_factor if is_galvanic_exposed(inspection, cfg) else 1.0


def hardness_factor(inspection: InspectionInput, cfg: ScoringConfig = DEFAULT_SCORING) -> float:
    hardness = resolve_hardness(inspection, cfg).effective_gpg
    if hardness is None:
        return 1.0
    coef = cfg.hardness_coef_tankless if inspection.unit_category == "tankless" else cfg.hardness_coef_tank
    return 1.0 + max(0.0, float(hardness) - cfg.hardness_baseline_gpg) * coef


def compute_stress_factors(inspection: InspectionInput, cfg: ScoringConfig = DEFAULT_SCORING) -> StressFactorSet:
    return StressFactorSet(
        pressure=pressure_factor(inspection, cfg),
        temperature=temperature_factor(inspection, cfg),
        sediment=sediment_factor(inspection, cfg),
        circulation=circulation_factor(inspection, cfg),
        closed_loop=closed_loop_factor(inspection, cfg),
        usage=usage_factor(inspection, cfg),
        galvanic=galvanic_factor(inspection, cfg),
        hardness=hardness_factor(inspection, cfg),
    )


def primary_stressor(factors: StressFactorSet) -> str | None:
    """Name of the largest factor, or None when nothing adds stress."""
    name, value = max(factors.as_dict().items(), key=lambda kv: kv[1])
    return name if value > 1.0 else None
