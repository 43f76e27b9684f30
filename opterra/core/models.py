from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Literal, Union

FuelType = Literal["GAS", "ELECTRIC", "TANKLESS_GAS", "TANKLESS_ELECTRIC", "HYBRID"]
UnitCategory = Literal["tank", "tankless", "hybrid"]
LocationType = Literal[
    "GARAGE",
    "BASEMENT",
    "ATTIC",
    "UTILITY_CLOSET",
    "CRAWLSPACE",
    "EXTERIOR",
    "MAIN_LIVING",
    "UPPER_FLOOR",
]
TempSetting = Literal["LOW", "NORMAL", "HOT"]
ExpansionTankStatus = Literal["FUNCTIONAL", "WATERLOGGED", "MISSING"]
ConnectionType = Literal["DIELECTRIC", "BRASS", "DIRECT_COPPER"]
NippleMaterial = Literal["STEEL", "STAINLESS_BRASS", "FACTORY_PROTECTED"]
LeakSource = Literal["NONE", "TANK_BODY", "FITTING_VALVE", "DRAIN_PAN"]
SaltStatus = Literal["OK", "EMPTY", "UNKNOWN"]
UsageType = Literal["light", "normal", "heavy"]
VentStatus = Literal["CLEAR", "RESTRICTED", "BLOCKED"]
AirFilterStatus = Literal["CLEAN", "DIRTY", "CLOGGED"]

StatusTier = Literal["optimal", "warning", "critical"]
RiskBand = Literal["NORMAL", "ELEVATED", "HIGH", "CRITICAL"]
MaintenanceStatus = Literal["optimal", "advisory", "due", "critical", "lockout", "run_to_failure", "unknown"]
Action = Literal["monitor", "repair", "replace"]
Badge = Literal["CRITICAL", "REPLACE", "SERVICE", "MONITOR", "OPTIMAL"]
DefiniteCause = Literal["LEAKING", "BREACH"]

FUEL_TYPES: tuple[str, ...] = ("GAS", "ELECTRIC", "TANKLESS_GAS", "TANKLESS_ELECTRIC", "HYBRID")


def unit_category(fuel_type: str) -> UnitCategory:
    if fuel_type in ("TANKLESS_GAS", "TANKLESS_ELECTRIC"):
        return "tankless"
    if fuel_type == "HYBRID":
        return "hybrid"
    return "tank"


@dataclass(frozen=True)
class InspectionInput:
    """
    One assessed unit at one point in time.

    Presence flags default to False; measurements default to None, which
    means "not observed" and contributes no stress.
    """
    fuel_type: FuelType
    calendar_age: float

    location: LocationType | None = None
    is_finished_area: bool = False

    psi: float | None = None
    has_prv: bool = False
    prv_functional: bool | None = None

    hardness_gpg: float | None = None
    measured_hardness_gpg: float | None = None
    region: str | None = None
    has_softener: bool = False
    softener_salt_status: SaltStatus | None = None

    temp_setting: TempSetting | None = None

    has_expansion_tank: bool = False
    expansion_tank_status: ExpansionTankStatus | None = None
    is_closed_loop: bool = False

    has_circ_pump: bool = False
    circ_pump_controlled: bool = False
    has_drain_pan: bool | None = None

    connection_type: ConnectionType | None = None
    nipple_material: NippleMaterial | None = None
    manufacturer: str | None = None

    years_since_flush: float | None = None
    years_since_descale: float | None = None
    years_since_anode: float | None = None
    warranty_years: float | None = None

    people_count: int | None = None
    usage_type: UsageType | None = None

    visual_rust: bool = False
    connection_corrosion: bool = False
    is_leaking: bool = False
    leak_source: LeakSource | None = None

    # tankless
    error_code_count: int = 0
    vent_status: VentStatus | None = None
    has_isolation_valves: bool | None = None
    inlet_filter_status: AirFilterStatus | None = None

    # hybrid
    air_filter_status: AirFilterStatus | None = None
    condensate_clear: bool | None = None
    compressor_health: float | None = None

    @property
    def unit_category(self) -> UnitCategory:
        return unit_category(self.fuel_type)


INSPECTION_FIELDS: tuple[str, ...] = tuple(f.name for f in fields(InspectionInput))


@dataclass(frozen=True)
class StressFactorSet:
    pressure: float = 1.0
    temperature: float = 1.0
    sediment: float = 1.0
    circulation: float = 1.0
    closed_loop: float = 1.0
    usage: float = 1.0
    galvanic: float = 1.0
    hardness: float = 1.0

    def as_dict(self) -> dict[str, float]:
        return {f.name: float(getattr(self, f.name)) for f in fields(self)}

    def product(self) -> float:
        out = 1.0
        for v in self.as_dict().values():
            out *= v
        return out


@dataclass(frozen=True)
class Probabilistic:
    percent: float


@dataclass(frozen=True)
class Definite:
    cause: DefiniteCause


FailureProbability = Union[Probabilistic, Definite]


def is_definite(fp: FailureProbability) -> bool:
    return isinstance(fp, Definite)


def failure_percent(fp: FailureProbability) -> float | None:
    """Numeric percent for probabilistic values, None for the FAIL sentinel."""
    if isinstance(fp, Probabilistic):
        return fp.percent
    return None


def fail_prob_label(fp: FailureProbability) -> str:
    if isinstance(fp, Definite):
        return f"FAIL ({fp.cause})"
    return f"{fp.percent:.1f}%"


@dataclass(frozen=True)
class OpterraMetrics:
    fuel_type: FuelType
    unit_category: UnitCategory
    calendar_age: float

    bio_age: float
    aging_rate: float
    fail_prob: FailureProbability
    health_score: int
    status_tier: StatusTier
    risk_band: RiskBand

    stress_factors: StressFactorSet
    primary_stressor: str | None
    flags: frozenset[str]
    location_risk: int

    sediment_lbs: float | None
    scale_score: float | None
    maintenance_status: MaintenanceStatus
    months_to_flush: int | None
    shield_life_years: float | None
    months_to_anode_depletion: int | None

    years_left_current: float
    years_left_optimized: float
    life_extension: float

    psi: float | None = None
    expansion_tank_functional: bool = False
    hybrid_efficiency: float | None = None
    # ratio of the simulated probability to the curve value at bio_age
    fail_prob_scale: float = 1.0


@dataclass(frozen=True)
class RepairImpact:
    health_score_boost: float
    aging_factor_reduction: float
    failure_prob_reduction: float


@dataclass(frozen=True)
class RepairOption:
    id: str
    name: str
    description: str
    cost_min: float
    cost_max: float
    impact: RepairImpact
    unit_types: tuple[UnitCategory, ...]
    is_full_replacement: bool = False
    resolves: frozenset[str] = frozenset()


@dataclass(frozen=True)
class Recommendation:
    action: Action
    title: str
    reason: str
    badge: Badge
    urgent: bool = False
    flag: str | None = None
    repairs: tuple[str, ...] = ()


@dataclass(frozen=True)
class Projection:
    months: float
    bio_age: float
    fail_prob: FailureProbability
    health_score: int
