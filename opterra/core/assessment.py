from __future__ import annotations

from dataclasses import dataclass

from opterra.core.contract import DEFAULT_SCORING, ScoringConfig
from opterra.core.models import InspectionInput, OpterraMetrics, Projection, Recommendation, RepairOption
from opterra.core.projection import project_sweep
from opterra.core.recommendation import recommend
from opterra.core.repairs import available_repairs, life_extension, simulate
from opterra.core.scoring import score


@dataclass(frozen=True)
class Assessment:
    unit_id: str
    inspection: InspectionInput
    metrics: OpterraMetrics
    recommendation: Recommendation
    projections: list[Projection]
    repairs: list[RepairOption]
    after_repairs: OpterraMetrics
    repair_life_extension: float


def assess(unit_id: str, inspection: InspectionInput, cfg: ScoringConfig = DEFAULT_SCORING) -> Assessment:
    """Full single-unit pass: score, recommend, project forward, price the repairs."""
    metrics = score(inspection, cfg)
    repairs = available_repairs(metrics, cfg)
    return Assessment(
        unit_id=str(unit_id),
        inspection=inspection,
        metrics=metrics,
        recommendation=recommend(metrics, cfg),
        projections=project_sweep(metrics, cfg=cfg),
        repairs=repairs,
        after_repairs=simulate(metrics, repairs, cfg),
        repair_life_extension=life_extension(metrics, repairs, cfg),
    )
