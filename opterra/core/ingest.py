from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import numpy as np
import pandas as pd

from opterra.core.models import FUEL_TYPES, INSPECTION_FIELDS, InspectionInput


REQUIRED_COLUMNS = [
    "unit_id",
    "fuel_type",
    "calendar_age",
]

ENUM_FIELDS: dict[str, tuple[str, ...]] = {
    "fuel_type": FUEL_TYPES,
    "location": ("GARAGE", "BASEMENT", "ATTIC", "UTILITY_CLOSET", "CRAWLSPACE", "EXTERIOR", "MAIN_LIVING", "UPPER_FLOOR"),
    "temp_setting": ("LOW", "NORMAL", "HOT"),
    "expansion_tank_status": ("FUNCTIONAL", "WATERLOGGED", "MISSING"),
    "connection_type": ("DIELECTRIC", "BRASS", "DIRECT_COPPER"),
    "nipple_material": ("STEEL", "STAINLESS_BRASS", "FACTORY_PROTECTED"),
    "leak_source": ("NONE", "TANK_BODY", "FITTING_VALVE", "DRAIN_PAN"),
    "softener_salt_status": ("OK", "EMPTY", "UNKNOWN"),
    "usage_type": ("LIGHT", "NORMAL", "HEAVY"),
    "vent_status": ("CLEAR", "RESTRICTED", "BLOCKED"),
    "air_filter_status": ("CLEAN", "DIRTY", "CLOGGED"),
    "inlet_filter_status": ("CLEAN", "DIRTY", "CLOGGED"),
}

# (min, max) plausible ranges, inclusive
FLOAT_FIELDS: dict[str, tuple[float, float]] = {
    "calendar_age": (0.0, 60.0),
    "psi": (10.0, 200.0),
    "hardness_gpg": (0.0, 100.0),
    "measured_hardness_gpg": (0.0, 100.0),
    "years_since_flush": (0.0, 60.0),
    "years_since_descale": (0.0, 60.0),
    "years_since_anode": (0.0, 60.0),
    "warranty_years": (1.0, 25.0),
    "compressor_health": (0.0, 100.0),
}

INT_FIELDS: dict[str, tuple[int, int]] = {
    "people_count": (1, 20),
    "error_code_count": (0, 1000),
}

BOOL_FIELDS = (
    "is_finished_area",
    "has_prv",
    "prv_functional",
    "has_softener",
    "has_expansion_tank",
    "is_closed_loop",
    "has_circ_pump",
    "circ_pump_controlled",
    "has_drain_pan",
    "visual_rust",
    "connection_corrosion",
    "is_leaking",
    "has_isolation_valves",
    "condensate_clear",
)

TEXT_FIELDS = ("region", "manufacturer")

_TRUE = {"true", "t", "yes", "y", "1"}
_FALSE = {"false", "f", "no", "n", "0"}


@dataclass(frozen=True)
class ValidationIssue:
    field: str
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


class InspectionValidationError(ValueError):
    """Raised when a raw inspection record is malformed or out of domain."""

    def __init__(self, issues: list[ValidationIssue]):
        self.issues = list(issues)
        super().__init__("; ".join(str(i) for i in self.issues))


@dataclass(frozen=True)
class IngestResult:
    df: pd.DataFrame
    units: list[tuple[str, InspectionInput]]
    issues: list[str]


def _is_missing(x: Any) -> bool:
    if x is None:
        return True
    if isinstance(x, str):
        return not x.strip()
    try:
        return bool(pd.isna(x))
    except (TypeError, ValueError):
        return False


def _parse_bool(x: Any) -> bool:
    if isinstance(x, (bool, np.bool_)):
        return bool(x)
    if isinstance(x, (int, float, np.integer, np.floating)) and x in (0, 1):
        return bool(x)
    s = str(x).strip().lower()
    if s in _TRUE:
        return True
    if s in _FALSE:
        return False
    raise ValueError(f"expected a boolean, got {x!r}")


def _parse_enum(x: Any, allowed: tuple[str, ...]) -> str:
    s = str(x).strip().upper().replace("-", "_").replace(" ", "_")
    if s not in allowed:
        raise ValueError(f"expected one of {', '.join(allowed)}, got {x!r}")
    return s


def _parse_float(x: Any, lo: float, hi: float) -> float:
    if isinstance(x, (bool, np.bool_)):
        raise ValueError(f"expected a number, got {x!r}")
    try:
        v = float(x)
    except (TypeError, ValueError):
        raise ValueError(f"expected a number, got {x!r}") from None
    if not np.isfinite(v):
        raise ValueError(f"expected a finite number, got {x!r}")
    if v < lo or v > hi:
        raise ValueError(f"{v:g} is outside the plausible range {lo:g}..{hi:g}")
    return v


def _parse_int(x: Any, lo: int, hi: int) -> int:
    v = _parse_float(x, float(lo), float(hi))
    if v != int(v):
        raise ValueError(f"expected a whole number, got {x!r}")
    return int(v)


def normalize_inspection(record: Mapping[str, Any]) -> InspectionInput:
    """
    Validate and coerce one raw record into an InspectionInput.

    Keys that are not inspection fields are ignored. Every problem in the
    record is collected before raising, so callers see the full list at once.
    """
    issues: list[ValidationIssue] = []
    values: dict[str, Any] = {}

    for name in INSPECTION_FIELDS:
        raw = record.get(name)
        if _is_missing(raw):
            continue
        try:
            if name in ENUM_FIELDS:
                v: Any = _parse_enum(raw, ENUM_FIELDS[name])
                values[name] = v.lower() if name == "usage_type" else v
            elif name in FLOAT_FIELDS:
                values[name] = _parse_float(raw, *FLOAT_FIELDS[name])
            elif name in INT_FIELDS:
                values[name] = _parse_int(raw, *INT_FIELDS[name])
            elif name in BOOL_FIELDS:
                values[name] = _parse_bool(raw)
            elif name in TEXT_FIELDS:
                values[name] = str(raw).strip()
        except ValueError as e:
            issues.append(ValidationIssue(name, str(e)))

    for name in ("fuel_type", "calendar_age"):
        if name not in values and not any(i.field == name for i in issues):
            issues.append(ValidationIssue(name, "is required"))

    age = values.get("calendar_age")
    if age is not None:
        for name in ("years_since_flush", "years_since_descale", "years_since_anode"):
            v = values.get(name)
            if v is not None and v > age:
                issues.append(ValidationIssue(name, f"{v:g} exceeds calendar_age {age:g}"))

    if issues:
        raise InspectionValidationError(issues)

    if values.get("expansion_tank_status") is not None and "has_expansion_tank" not in values:
        values["has_expansion_tank"] = values["expansion_tank_status"] != "MISSING"
    if values.get("leak_source") not in (None, "NONE") and "is_leaking" not in values:
        values["is_leaking"] = True

    return InspectionInput(**values)


def load_inspections_csv(path: str | Path) -> IngestResult:
    """
    Load an inspections CSV (one row per unit) and normalize every row.

    Expected columns:
    unit_id, fuel_type, calendar_age, plus any InspectionInput field names.
    Rows that fail validation are dropped and reported in `issues`.
    """
    path = Path(path)
    issues: list[str] = []

    if not path.exists():
        return IngestResult(df=pd.DataFrame(), units=[], issues=[f"File not found: {path}"])

    df = pd.read_csv(path, dtype=str, keep_default_na=True)
    df.columns = [str(c).strip() for c in df.columns]

    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        issues.append(f"Missing required columns: {missing}")
        return IngestResult(df=pd.DataFrame(), units=[], issues=issues)

    unknown = sorted(c for c in df.columns if c != "unit_id" and c not in INSPECTION_FIELDS)
    if unknown:
        issues.append(f"Ignored unknown columns: {unknown}")

    df["unit_id"] = df["unit_id"].astype(str).str.strip()

    units: list[tuple[str, InspectionInput]] = []
    keep: list[int] = []
    seen: set[str] = set()
    for idx, row in df.iterrows():
        unit_id = str(row["unit_id"])
        line = int(idx) + 2  # header is line 1
        if _is_missing(row["unit_id"]) or unit_id.lower() == "nan":
            issues.append(f"Row {line}: missing unit_id")
            continue
        if unit_id in seen:
            issues.append(f"Row {line}: duplicate unit_id {unit_id} skipped")
            continue
        try:
            inspection = normalize_inspection(row.to_dict())
        except InspectionValidationError as e:
            issues.append(f"Row {line} ({unit_id}): {e}")
            continue
        seen.add(unit_id)
        units.append((unit_id, inspection))
        keep.append(idx)

    clean = df.loc[keep].reset_index(drop=True)
    return IngestResult(df=clean, units=units, issues=issues)
