from __future__ import annotations

import numpy as np

from opterra.core.contract import DEFAULT_SCORING, ScoringConfig
from opterra.core.models import (
    Definite,
    FailureProbability,
    Probabilistic,
    RiskBand,
    StatusTier,
    StressFactorSet,
)


def composite_aging_rate(factors: StressFactorSet, cfg: ScoringConfig = DEFAULT_SCORING) -> float:
    """Stresses compound: product of all factors, clipped to [1.0, max_stress_cap]."""
    return float(np.clip(factors.product(), 1.0, cfg.max_stress_cap))


def biological_age(calendar_age: float, aging_rate: float) -> float:
    age = max(0.0, float(calendar_age))
    return max(age, age * float(aging_rate))


def bio_age_to_fail_prob(bio_age: float, cfg: ScoringConfig = DEFAULT_SCORING) -> float:
    """
    Conditional probability (%) of failing within the next 12 months.

    Weibull survival ratio R(t+1)/R(t) is evaluated as a single exponent of
    the hazard difference, so very old units saturate at the statistical cap
    rather than dividing two underflowed survivals.
    """
    t = max(0.0, float(bio_age))
    eta = cfg.weibull_eta
    beta = cfg.weibull_beta

    hazard_diff = ((t + 1.0) / eta) ** beta - (t / eta) ** beta
    survival = float(np.exp(-hazard_diff))
    pct = (1.0 - survival) * 100.0
    return float(np.clip(pct, 0.0, cfg.statistical_cap))


def health_from_percent(percent: float, cfg: ScoringConfig = DEFAULT_SCORING) -> int:
    raw = 100.0 * float(np.exp(-cfg.health_decay_k * float(percent)))
    return int(np.clip(round(raw), 0, 100))


def health_from_fail_prob(fail_prob: FailureProbability, cfg: ScoringConfig = DEFAULT_SCORING) -> int:
    """The only mapping from failure probability to health score."""
    if isinstance(fail_prob, Definite):
        return 0
    return health_from_percent(fail_prob.percent, cfg)


def percent_for_health(health: float, cfg: ScoringConfig = DEFAULT_SCORING) -> float:
    """Inverse of the health curve; health <= 0 maps to 100%."""
    h = float(health)
    if h <= 0.0:
        return 100.0
    if h >= 100.0:
        return 0.0
    return float(np.clip(-np.log(h / 100.0) / cfg.health_decay_k, 0.0, 100.0))


def status_tier(fail_prob: FailureProbability, health: int, cfg: ScoringConfig = DEFAULT_SCORING) -> StatusTier:
    if isinstance(fail_prob, Definite):
        return "critical"
    if health >= cfg.status_optimal_min_health:
        return "optimal"
    if health >= cfg.status_warning_min_health:
        return "warning"
    return "critical"


def risk_band(fail_prob: FailureProbability, cfg: ScoringConfig = DEFAULT_SCORING) -> RiskBand:
    if isinstance(fail_prob, Definite):
        return "CRITICAL"
    if fail_prob.percent >= cfg.risk_high_pct:
        return "HIGH"
    if fail_prob.percent >= cfg.risk_elevated_pct:
        return "ELEVATED"
    return "NORMAL"


def curve_fail_prob(bio_age: float, cfg: ScoringConfig = DEFAULT_SCORING) -> Probabilistic:
    return Probabilistic(bio_age_to_fail_prob(bio_age, cfg))


def years_to_end_of_life(bio_age: float, aging_rate: float, cfg: ScoringConfig = DEFAULT_SCORING) -> float:
    remaining = max(0.0, cfg.end_of_life_bio_age - float(bio_age))
    return remaining / max(1.0, float(aging_rate))
