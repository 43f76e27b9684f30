# opterra/core/contract.py
"""
Opterra Decision Contract

This module defines the locked curve constants, stress multipliers and
decision thresholds that map an inspection to a health score and an action.

If you change any constants in here, bump OPTERRA_DECISION_VERSION.
"""
from __future__ import annotations

from dataclasses import dataclass, field

OPTERRA_DECISION_VERSION = "1.1.0"

# Failure curve (Weibull, conditional 12-month failure)
WEIBULL_ETA_YEARS = 13.0
WEIBULL_BETA = 3.2
STATISTICAL_CAP_PCT = 85.0
HEALTH_DECAY_K = 0.04
MAX_STRESS_CAP = 12.0

# Pressure
PSI_NORMAL_MAX = 80.0
PSI_PENALTY_PER_PSI = 0.05
PRESSURE_FACTOR_CAP = 3.0
PSI_CRITICAL = 100.0

# Temperature dial
TEMP_FACTORS = {"LOW": 1.0, "NORMAL": 1.0, "HOT": 1.5}

# Sediment (lbs per GPG per year) and tankless scale
SEDIMENT_RATE_LBS = {"GAS": 0.044, "ELECTRIC": 0.08, "HYBRID": 0.06}
SEDIMENT_STRESS_PER_LB = 0.05
SEDIMENT_FACTOR_CAP = 2.0
SCALE_RATE_PER_GPG_YEAR = 0.8
SCALE_STRESS_PER_POINT = 0.01

# Equipment
CIRC_PUMP_FACTOR = 1.4
CLOSED_LOOP_FACTOR = 1.5
GALVANIC_FACTOR = 3.0

# Usage
USAGE_BASELINE_PEOPLE = 3
USAGE_PER_EXTRA_PERSON = 0.1
USAGE_TYPE_FACTORS = {"light": 0.9, "normal": 1.0, "heavy": 1.25}

# Hardness
HARDNESS_BASELINE_GPG = 7.0
HARDNESS_COEF_TANK = 0.01
HARDNESS_COEF_TANKLESS = 0.02
HARD_WATER_GPG = 10.0
SOFTENED_HARDNESS_GPG = 0.5
SOFTENER_UNKNOWN_HARDNESS_GPG = 3.0

# Factory dielectric protection is not trusted past this age
FACTORY_DIELECTRIC_MAX_AGE = 15.0

# Status tiers (health score)
STATUS_OPTIMAL_MIN_HEALTH = 70
STATUS_WARNING_MIN_HEALTH = 40

# Risk bands (failure probability %)
RISK_ELEVATED_PCT = 30.0
RISK_HIGH_PCT = 60.0

# Recommendation rules
REPLACE_FAIL_PROB_PCT = 60.0
LIABILITY_FAIL_PROB_PCT = 30.0
LIABILITY_LOCATION_RISK = 3
VESSEL_FATIGUE_MIN_AGE = 10.0
REPAIR_MIN_HEALTH_AFTER = 40
REPAIR_COST_CEILING_RATIO = 0.5
FRAGILE_AGE_YEARS = 12.0
ANODE_REPLACE_MAX_AGE = 8.0
TANKLESS_MAX_AGE = 15.0
ERROR_CODES_REPLACE = 10
RECIRC_SERVICE_MIN_AGE = 3.0
DESCALE_NO_RETURN_AGE = 6.0
DESCALE_OVERDUE_AGE = 2.0
COMPRESSOR_LOW_CAPACITY_HEALTH = 80.0
COMPRESSOR_DEGRADED_HEALTH = 50.0

# Sediment status (lbs)
SEDIMENT_ADVISORY_LBS = 2.0
SEDIMENT_DUE_LBS = 5.0
SEDIMENT_LOCKOUT_LBS = 15.0

# Scale status (score 0..100)
SCALE_DUE = 10.0
SCALE_CRITICAL = 25.0
SCALE_LOCKOUT = 60.0

# Hybrid efficiency (% points off 100)
HYBRID_FILTER_PENALTY = {"CLEAN": 0.0, "DIRTY": 15.0, "CLOGGED": 40.0}
HYBRID_CONDENSATE_PENALTY = 5.0

# Maintenance intervals (months)
FLUSH_INTERVAL_HARD_MONTHS = 12
FLUSH_INTERVAL_SOFT_MONTHS = 24
DESCALE_INTERVAL_HARD_MONTHS = 12
DESCALE_INTERVAL_SOFT_MONTHS = 18
MAINTENANCE_HORIZON_MONTHS = 36

# Anode
ANODE_DEFAULT_LIFE_YEARS = 6.0
ANODE_BURN_SOFTENER = 3.0
ANODE_BURN_GALVANIC = 2.5
ANODE_BURN_RECIRC = 1.25
ANODE_DEPLETED_AGING_MULTIPLIER = 1.5

# Life projection
END_OF_LIFE_BIO_AGE = 25.0
PROJECTION_HORIZONS_MONTHS = (6, 12, 24)

SAFETY_FLAGS = (
    "TANK_BODY_LEAK",
    "CONTAINMENT_BREACH",
    "GALVANIC_CORROSION",
    "VENT_BLOCKED",
    "VESSEL_FATIGUE",
)

ECONOMIC_FLAGS = (
    "SEDIMENT_LOCKOUT",
    "SCALE_LOCKOUT",
    "END_OF_SERVICE_LIFE",
    "CHRONIC_ERRORS",
)

# Order decides which issue titles a repair recommendation
SERVICE_FLAGS = (
    "FITTING_LEAK",
    "FAILED_PRV",
    "HIGH_PRESSURE",
    "MISSING_EXPANSION_TANK",
    "WATERLOGGED_EXPANSION_TANK",
    "UNPROTECTED_CONNECTION",
    "ERROR_CODES",
    "VENT_RESTRICTED",
    "CONDENSATE_BLOCKED",
    "COMPRESSOR_DEGRADED",
    "AIR_FILTER_SERVICE",
    "LOW_HEAT_PUMP_CAPACITY",
    "INLET_FILTER_SERVICE",
    "MISSING_DRAIN_PAN",
    "NO_ISOLATION_VALVES",
    "DESCALE_DUE",
    "UNCONTROLLED_RECIRCULATION",
    "FLUSH_DUE",
    "ANODE_DEPLETED",
)

# Maintenance that is due but unsafe to perform on this unit
ADVISORY_FLAGS = (
    "FLUSH_RISKY",
    "DESCALE_RISKY",
)

URGENT_SERVICE_FLAGS = frozenset(
    {
        "FITTING_LEAK",
        "FAILED_PRV",
        "HIGH_PRESSURE",
        "MISSING_EXPANSION_TANK",
        "WATERLOGGED_EXPANSION_TANK",
        "ERROR_CODES",
        "VENT_RESTRICTED",
        "CONDENSATE_BLOCKED",
    }
)


@dataclass(frozen=True)
class ScoringConfig:
    """
    Versioned numeric configuration passed into every engine function.

    Defaults mirror the module constants above. Tuned copies are built with
    dataclasses.replace() or from the [scoring] table of a config file.
    """
    version: str = OPTERRA_DECISION_VERSION

    weibull_eta: float = WEIBULL_ETA_YEARS
    weibull_beta: float = WEIBULL_BETA
    statistical_cap: float = STATISTICAL_CAP_PCT
    health_decay_k: float = HEALTH_DECAY_K
    max_stress_cap: float = MAX_STRESS_CAP

    psi_normal_max: float = PSI_NORMAL_MAX
    psi_penalty_per_psi: float = PSI_PENALTY_PER_PSI
    pressure_factor_cap: float = PRESSURE_FACTOR_CAP
    psi_critical: float = PSI_CRITICAL

    temp_factors: dict[str, float] = field(default_factory=lambda: dict(TEMP_FACTORS))

    sediment_rate_lbs: dict[str, float] = field(default_factory=lambda: dict(SEDIMENT_RATE_LBS))
    sediment_stress_per_lb: float = SEDIMENT_STRESS_PER_LB
    sediment_factor_cap: float = SEDIMENT_FACTOR_CAP
    scale_rate_per_gpg_year: float = SCALE_RATE_PER_GPG_YEAR
    scale_stress_per_point: float = SCALE_STRESS_PER_POINT

    circ_pump_factor: float = CIRC_PUMP_FACTOR
    closed_loop_factor: float = CLOSED_LOOP_FACTOR
    galvanic_factor: float = GALVANIC_FACTOR

    usage_baseline_people: int = USAGE_BASELINE_PEOPLE
    usage_per_extra_person: float = USAGE_PER_EXTRA_PERSON
    usage_type_factors: dict[str, float] = field(default_factory=lambda: dict(USAGE_TYPE_FACTORS))

    hardness_baseline_gpg: float = HARDNESS_BASELINE_GPG
    hardness_coef_tank: float = HARDNESS_COEF_TANK
    hardness_coef_tankless: float = HARDNESS_COEF_TANKLESS
    hard_water_gpg: float = HARD_WATER_GPG
    softened_hardness_gpg: float = SOFTENED_HARDNESS_GPG
    softener_unknown_hardness_gpg: float = SOFTENER_UNKNOWN_HARDNESS_GPG
    factory_dielectric_max_age: float = FACTORY_DIELECTRIC_MAX_AGE

    status_optimal_min_health: int = STATUS_OPTIMAL_MIN_HEALTH
    status_warning_min_health: int = STATUS_WARNING_MIN_HEALTH
    risk_elevated_pct: float = RISK_ELEVATED_PCT
    risk_high_pct: float = RISK_HIGH_PCT

    replace_fail_prob_pct: float = REPLACE_FAIL_PROB_PCT
    liability_fail_prob_pct: float = LIABILITY_FAIL_PROB_PCT
    liability_location_risk: int = LIABILITY_LOCATION_RISK
    vessel_fatigue_min_age: float = VESSEL_FATIGUE_MIN_AGE
    repair_min_health_after: int = REPAIR_MIN_HEALTH_AFTER
    repair_cost_ceiling_ratio: float = REPAIR_COST_CEILING_RATIO
    fragile_age_years: float = FRAGILE_AGE_YEARS
    anode_replace_max_age: float = ANODE_REPLACE_MAX_AGE
    tankless_max_age: float = TANKLESS_MAX_AGE
    error_codes_replace: int = ERROR_CODES_REPLACE
    recirc_service_min_age: float = RECIRC_SERVICE_MIN_AGE
    descale_no_return_age: float = DESCALE_NO_RETURN_AGE
    descale_overdue_age: float = DESCALE_OVERDUE_AGE
    compressor_low_capacity_health: float = COMPRESSOR_LOW_CAPACITY_HEALTH
    compressor_degraded_health: float = COMPRESSOR_DEGRADED_HEALTH

    sediment_advisory_lbs: float = SEDIMENT_ADVISORY_LBS
    sediment_due_lbs: float = SEDIMENT_DUE_LBS
    sediment_lockout_lbs: float = SEDIMENT_LOCKOUT_LBS
    scale_due: float = SCALE_DUE
    scale_critical: float = SCALE_CRITICAL
    scale_lockout: float = SCALE_LOCKOUT

    hybrid_filter_penalty: dict[str, float] = field(default_factory=lambda: dict(HYBRID_FILTER_PENALTY))
    hybrid_condensate_penalty: float = HYBRID_CONDENSATE_PENALTY

    flush_interval_hard_months: int = FLUSH_INTERVAL_HARD_MONTHS
    flush_interval_soft_months: int = FLUSH_INTERVAL_SOFT_MONTHS
    descale_interval_hard_months: int = DESCALE_INTERVAL_HARD_MONTHS
    descale_interval_soft_months: int = DESCALE_INTERVAL_SOFT_MONTHS
    maintenance_horizon_months: int = MAINTENANCE_HORIZON_MONTHS

    anode_default_life_years: float = ANODE_DEFAULT_LIFE_YEARS
    anode_burn_softener: float = ANODE_BURN_SOFTENER
    anode_burn_galvanic: float = ANODE_BURN_GALVANIC
    anode_burn_recirc: float = ANODE_BURN_RECIRC
    anode_depleted_aging_multiplier: float = ANODE_DEPLETED_AGING_MULTIPLIER

    end_of_life_bio_age: float = END_OF_LIFE_BIO_AGE
    projection_horizons: tuple[int, ...] = PROJECTION_HORIZONS_MONTHS


DEFAULT_SCORING = ScoringConfig()
