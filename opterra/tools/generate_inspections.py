from __future__ import annotations

import argparse
import csv
import random
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

from opterra.core.models import INSPECTION_FIELDS

# ----------------------------
# Column layout
# ----------------------------

COLUMNS = ["unit_id", *INSPECTION_FIELDS]

REGIONS = ["AZ", "TX", "OH", "IL", "FL", "GA", "CA", "WA", "NY", "CO", "PA", "MN"]
BRANDS = ["Bradford White", "Rheem", "A.O. Smith", "State", "GE", "Whirlpool", "Reliance", "Kenmore"]
TANKLESS_BRANDS = ["Navien", "Rinnai", "Noritz", "Takagi"]


@dataclass(frozen=True)
class Archetype:
    name: str
    weight: float
    build: Callable[[random.Random], dict[str, Any]]


# ----------------------------
# Helpers
# ----------------------------

def clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, x))


def _years_since(rng: random.Random, age: float, lo: float, hi: float) -> float:
    """A maintenance interval that never predates the install."""
    return round(clamp(rng.uniform(lo, hi), 0.0, age), 1)


def _base_tank(rng: random.Random, age: float) -> dict[str, Any]:
    return {
        "fuel_type": rng.choice(["GAS", "GAS", "ELECTRIC"]),
        "calendar_age": round(age, 1),
        "location": rng.choice(["GARAGE", "BASEMENT", "UTILITY_CLOSET"]),
        "is_finished_area": False,
        "psi": round(rng.uniform(50, 75)),
        "has_prv": False,
        "region": rng.choice(REGIONS),
        "temp_setting": "NORMAL",
        "manufacturer": rng.choice(BRANDS),
        "warranty_years": rng.choice([6, 6, 9, 12]),
        "people_count": rng.randint(1, 5),
        "usage_type": "normal",
        "has_drain_pan": rng.random() < 0.5,
        "leak_source": "NONE",
    }


# ----------------------------
# Archetypes
# ----------------------------

def _perfect_install(rng: random.Random) -> dict[str, Any]:
    age = rng.uniform(1, 6)
    row = _base_tank(rng, age)
    row.update(
        psi=round(rng.uniform(55, 70)),
        has_prv=True,
        prv_functional=True,
        is_closed_loop=True,
        has_expansion_tank=True,
        expansion_tank_status="FUNCTIONAL",
        connection_type="DIELECTRIC",
        years_since_flush=_years_since(rng, age, 0, 1),
        years_since_anode=_years_since(rng, age, 0, 3),
        has_drain_pan=True,
    )
    return row


def _pressure_cooker(rng: random.Random) -> dict[str, Any]:
    age = rng.uniform(4, 12)
    row = _base_tank(rng, age)
    row.update(
        psi=round(rng.uniform(95, 140)),
        has_prv=rng.random() < 0.3,
        is_closed_loop=True,
        has_expansion_tank=False,
        expansion_tank_status="MISSING",
        years_since_flush=_years_since(rng, age, 1, 4),
    )
    if row["has_prv"]:
        row["prv_functional"] = False
    return row


def _sediment_bomb(rng: random.Random) -> dict[str, Any]:
    age = rng.uniform(9, 16)
    row = _base_tank(rng, age)
    row.update(
        fuel_type="GAS",
        region=rng.choice(["AZ", "TX", "NM", "KS"]),
        hardness_gpg=round(rng.uniform(15, 25), 1),
        years_since_flush=round(age, 1),
        people_count=rng.randint(4, 6),
        usage_type="heavy",
    )
    return row


def _zombie_tank(rng: random.Random) -> dict[str, Any]:
    age = rng.uniform(18, 26)
    row = _base_tank(rng, age)
    row.update(
        temp_setting=rng.choice(["NORMAL", "HOT"]),
        years_since_flush=_years_since(rng, age, 8, 20),
        connection_corrosion=rng.random() < 0.4,
    )
    return row


def _attic_bomb(rng: random.Random) -> dict[str, Any]:
    age = rng.uniform(12, 18)
    row = _base_tank(rng, age)
    row.update(
        location="ATTIC",
        is_finished_area=True,
        has_drain_pan=rng.random() < 0.3,
        years_since_flush=_years_since(rng, age, 3, 8),
    )
    return row


def _leaker(rng: random.Random) -> dict[str, Any]:
    age = rng.uniform(6, 15)
    row = _base_tank(rng, age)
    source = rng.choice(["TANK_BODY", "FITTING_VALVE", "FITTING_VALVE", "DRAIN_PAN"])
    row.update(
        is_leaking=True,
        leak_source=source,
        visual_rust=source == "TANK_BODY" and rng.random() < 0.5,
    )
    return row


def _galvanic_nightmare(rng: random.Random) -> dict[str, Any]:
    age = rng.uniform(5, 14)
    row = _base_tank(rng, age)
    row.update(
        manufacturer=rng.choice(["GE", "Whirlpool", "Kenmore"]),
        connection_type="DIRECT_COPPER",
        nipple_material="STEEL",
        connection_corrosion=rng.random() < 0.6,
        has_softener=rng.random() < 0.5,
    )
    if row["has_softener"]:
        row["softener_salt_status"] = "OK"
    return row


def _scaled_tankless(rng: random.Random) -> dict[str, Any]:
    age = rng.uniform(3, 14)
    return {
        "fuel_type": rng.choice(["TANKLESS_GAS", "TANKLESS_ELECTRIC"]),
        "calendar_age": round(age, 1),
        "location": rng.choice(["GARAGE", "UTILITY_CLOSET", "EXTERIOR"]),
        "psi": round(rng.uniform(55, 85)),
        "region": rng.choice(["AZ", "TX", "OH", "IN"]),
        "hardness_gpg": round(rng.uniform(10, 22), 1),
        "manufacturer": rng.choice(TANKLESS_BRANDS),
        "years_since_descale": _years_since(rng, age, 2, 8),
        "has_isolation_valves": rng.random() < 0.4,
        "error_code_count": rng.choice([0, 0, 1, 3, 6, 12]),
        "vent_status": rng.choice(["CLEAR", "CLEAR", "RESTRICTED"]),
        "inlet_filter_status": rng.choice(["CLEAN", "CLEAN", "DIRTY", "CLOGGED"]),
        "people_count": rng.randint(2, 5),
        "usage_type": "normal",
        "leak_source": "NONE",
    }


def _neglected_hybrid(rng: random.Random) -> dict[str, Any]:
    age = rng.uniform(4, 12)
    row = _base_tank(rng, age)
    row.update(
        fuel_type="HYBRID",
        location=rng.choice(["GARAGE", "BASEMENT"]),
        manufacturer=rng.choice(["Rheem", "A.O. Smith", "Bradford White"]),
        warranty_years=10,
        air_filter_status=rng.choice(["DIRTY", "CLOGGED"]),
        condensate_clear=rng.random() < 0.5,
        compressor_health=round(rng.uniform(35, 100)),
        years_since_flush=_years_since(rng, age, 2, 6),
    )
    return row


ARCHETYPES: dict[str, Archetype] = {
    a.name: a
    for a in [
        Archetype("perfect_install", 3.0, _perfect_install),
        Archetype("pressure_cooker", 2.0, _pressure_cooker),
        Archetype("sediment_bomb", 2.0, _sediment_bomb),
        Archetype("zombie_tank", 1.5, _zombie_tank),
        Archetype("attic_bomb", 1.0, _attic_bomb),
        Archetype("leaker", 1.0, _leaker),
        Archetype("galvanic_nightmare", 1.0, _galvanic_nightmare),
        Archetype("scaled_tankless", 1.5, _scaled_tankless),
        Archetype("neglected_hybrid", 1.0, _neglected_hybrid),
    ]
}


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


# ----------------------------
# Core generation
# ----------------------------

def generate_csv(
    out_path: Path,
    *,
    count: int,
    seed: int | None,
    archetype: str | None = None,
    print_summary: bool = False,
) -> dict[str, int]:
    """
    Write `count` synthetic inspections to `out_path`.

    Returns how many rows each archetype produced.
    """
    if archetype is not None and archetype not in ARCHETYPES:
        raise ValueError(f"Unknown archetype: {archetype}")

    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)

    rng = random.Random(seed)
    names = list(ARCHETYPES)
    weights = [ARCHETYPES[n].weight for n in names]
    counts = {n: 0 for n in names}

    with out_path.open("w", newline="", encoding="utf-8") as f:
        w = csv.writer(f)
        w.writerow(COLUMNS)

        for i in range(count):
            name = archetype or rng.choices(names, weights=weights, k=1)[0]
            row = ARCHETYPES[name].build(rng)
            row["unit_id"] = f"WH{i + 1:03d}"
            w.writerow([_cell(row.get(col)) for col in COLUMNS])
            counts[name] += 1

    if print_summary:
        print(f"Generated {out_path} with {count} units | Seed: {seed}")
        for name, n in counts.items():
            if n:
                print(f"  {name}: {n}")

    return counts


# ----------------------------
# CLI
# ----------------------------

def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="generate_inspections.py",
        description="Generate a synthetic inspections.csv for Opterra demo/testing.",
    )

    p.add_argument("--out", default="data/inspections.csv",
                   help="Output CSV path (default: data/inspections.csv)")
    p.add_argument("--count", type=int, default=12,
                   help="Number of units to generate")
    p.add_argument("--seed", type=int, default=None,
                   help="Random seed for reproducible output")
    p.add_argument("--archetype", choices=sorted(ARCHETYPES), default=None,
                   help="Generate only this archetype (default: weighted mix)")
    p.add_argument("--print-summary", action="store_true",
                   help="Print generation summary to console")

    return p


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)

    if args.count <= 0:
        raise SystemExit("--count must be > 0")

    generate_csv(
        out_path=Path(args.out),
        count=args.count,
        seed=args.seed,
        archetype=args.archetype,
        print_summary=args.print_summary,
    )


if __name__ == "__main__":
    main()
