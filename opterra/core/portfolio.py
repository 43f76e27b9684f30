from __future__ import annotations

from typing import Iterable

import pandas as pd

from opterra.core.assessment import Assessment
from opterra.core.models import failure_percent, fail_prob_label

PORTFOLIO_COLUMNS = [
    "unit_id",
    "fuel_type",
    "age",
    "bio_age",
    "aging_rate",
    "fail_prob",
    "fail_prob_pct",
    "health",
    "status",
    "risk_band",
    "top_stressor",
    "action",
    "title",
    "urgent",
    "trend",
]

ACTION_ORDER = {"replace": 0, "repair": 1, "monitor": 2}


def portfolio_verdict(portfolio_df: pd.DataFrame) -> str:
    if portfolio_df.empty:
        return "No inspection data available."

    replace = portfolio_df.loc[portfolio_df["action"] == "replace", "unit_id"].tolist()
    repair = portfolio_df.loc[portfolio_df["action"] == "repair", "unit_id"].tolist()
    monitor = portfolio_df.loc[portfolio_df["action"] == "monitor", "unit_id"].tolist()

    parts: list[str] = []
    if replace:
        parts.append(f"{', '.join(map(str, replace))} should be replaced")
    if repair:
        parts.append(f"{', '.join(map(str, repair))} needs service to restore margin")
    if monitor:
        parts.append(f"{', '.join(map(str, monitor))} can stay on routine monitoring")

    return ". ".join(parts) + "."


def portfolio_summary(assessments: Iterable[Assessment]) -> pd.DataFrame:
    """
    One row per unit, ordered replace -> repair -> monitor, worst health first.

    `trend` holds the health score now and at each projection horizon.
    """
    rows = []
    for a in assessments:
        m = a.metrics
        pct = failure_percent(m.fail_prob)
        rows.append(
            {
                "unit_id": a.unit_id,
                "fuel_type": m.fuel_type,
                "age": round(m.calendar_age, 1),
                "bio_age": round(m.bio_age, 1),
                "aging_rate": round(m.aging_rate, 2),
                "fail_prob": fail_prob_label(m.fail_prob),
                "fail_prob_pct": None if pct is None else round(pct, 1),
                "health": int(m.health_score),
                "status": m.status_tier,
                "risk_band": m.risk_band,
                "top_stressor": m.primary_stressor or "none",
                "action": a.recommendation.action,
                "title": a.recommendation.title,
                "urgent": bool(a.recommendation.urgent),
                "trend": [float(m.health_score)] + [float(p.health_score) for p in a.projections],
            }
        )

    if not rows:
        return pd.DataFrame(columns=PORTFOLIO_COLUMNS)

    df = pd.DataFrame(rows, columns=PORTFOLIO_COLUMNS)
    df["_a"] = df["action"].map(ACTION_ORDER).fillna(9)
    df = (
        df.sort_values(["_a", "health", "unit_id"], ascending=[True, True, True], kind="mergesort")
          .drop(columns="_a")
          .reset_index(drop=True)
    )
    return df
