from __future__ import annotations

from typing import Iterable

from opterra.core.aging import bio_age_to_fail_prob, health_from_fail_prob
from opterra.core.contract import DEFAULT_SCORING, ScoringConfig
from opterra.core.models import Definite, FailureProbability, OpterraMetrics, Probabilistic, Projection


def projected_bio_age(metrics: OpterraMetrics, months: float, cfg: ScoringConfig = DEFAULT_SCORING) -> float:
    """
    Biological age after `months` with no intervention.

    Once the anode is depleted the tank ages faster, so the window is split at
    the depletion point.
    """
    m = max(0.0, float(months))
    rate = metrics.aging_rate

    shield = metrics.shield_life_years
    if shield is None:
        return metrics.bio_age + (m / 12.0) * rate

    depletion_month = shield * 12.0
    protected = min(m, depletion_month)
    exposed = max(0.0, m - depletion_month)
    return (
        metrics.bio_age
        + (protected / 12.0) * rate
        + (exposed / 12.0) * rate * cfg.anode_depleted_aging_multiplier
    )


def project(metrics: OpterraMetrics, months: float, cfg: ScoringConfig = DEFAULT_SCORING) -> Projection:
    """
    Health and failure probability after `months` with no intervention.

    A simulated snapshot keeps its repair reduction: the re-curved
    probability is scaled by fail_prob_scale. Month 0 is the snapshot itself.
    """
    bio_age = projected_bio_age(metrics, months, cfg)
    fail_prob: FailureProbability
    if isinstance(metrics.fail_prob, Definite) or months <= 0:
        fail_prob = metrics.fail_prob
    else:
        fail_prob = Probabilistic(bio_age_to_fail_prob(bio_age, cfg) * metrics.fail_prob_scale)
    return Projection(
        months=float(months),
        bio_age=bio_age,
        fail_prob=fail_prob,
        health_score=health_from_fail_prob(fail_prob, cfg),
    )


def project_sweep(
    metrics: OpterraMetrics,
    horizons: Iterable[float] | None = None,
    cfg: ScoringConfig = DEFAULT_SCORING,
) -> list[Projection]:
    months = tuple(horizons) if horizons is not None else cfg.projection_horizons
    return [project(metrics, m, cfg) for m in months]
