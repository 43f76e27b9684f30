from __future__ import annotations

from opterra.core.contract import (
    ADVISORY_FLAGS,
    DEFAULT_SCORING,
    ECONOMIC_FLAGS,
    SAFETY_FLAGS,
    SERVICE_FLAGS,
    URGENT_SERVICE_FLAGS,
    ScoringConfig,
)
from opterra.core.interpretation import interpret_flag
from opterra.core.models import Definite, OpterraMetrics, Recommendation
from opterra.core.repairs import available_repairs, repair_cost_range, replacement_option, simulate


def _replace(title: str, reason: str, *, badge: str = "REPLACE", urgent: bool = False, flag: str | None = None, metrics: OpterraMetrics) -> Recommendation:
    return Recommendation(
        action="replace",
        title=title,
        reason=reason,
        badge=badge,  # type: ignore[arg-type]
        urgent=urgent,
        flag=flag,
        repairs=(replacement_option(metrics.unit_category).id,),
    )


def recommend(metrics: OpterraMetrics, cfg: ScoringConfig = DEFAULT_SCORING) -> Recommendation:
    """
    Decision table over status, flags and simulated repair benefit.

    Tiers are checked in order and the first match wins:
      1) safety flags -> replace (critical, urgent)
      2) economic end of life -> replace
      3) service issues -> repair when the simulated result clears the
         replacement baseline, otherwise replace
      4) monitor
    """
    flags = metrics.flags

    # Tier 1: safety
    for flag in SAFETY_FLAGS:
        if flag in flags:
            rule = interpret_flag(flag)
            return _replace(rule["title"], rule["meaning"], badge="CRITICAL", urgent=True, flag=flag, metrics=metrics)

    if isinstance(metrics.fail_prob, Definite):
        return _replace(
            "Unit Failed",
            "Deterministic failure condition observed. Replacement is required.",
            badge="CRITICAL",
            urgent=True,
            metrics=metrics,
        )

    # Tier 2: economic
    for flag in ECONOMIC_FLAGS:
        if flag in flags:
            rule = interpret_flag(flag)
            return _replace(rule["title"], rule["meaning"], flag=flag, metrics=metrics)

    pct = metrics.fail_prob.percent
    if pct >= cfg.replace_fail_prob_pct:
        return _replace(
            "Statistical End-of-Life",
            f"Failure probability is {pct:.0f}% per year. Repair spending is not justified at this age.",
            metrics=metrics,
        )
    if metrics.location_risk >= cfg.liability_location_risk and pct >= cfg.liability_fail_prob_pct:
        return _replace(
            "Liability Hazard",
            f"A {pct:.0f}% annual failure risk in a high-damage location puts the home at risk of major water damage.",
            metrics=metrics,
        )

    # Tier 3: repair vs replace
    candidates = available_repairs(metrics, cfg)
    if candidates:
        after = simulate(metrics, candidates, cfg)
        _, repair_max = repair_cost_range(candidates)
        baseline = replacement_option(metrics.unit_category)

        lead = next((f for f in SERVICE_FLAGS if f in flags), None)
        rule = interpret_flag(lead) if lead else {"title": "Service Recommended", "meaning": ""}

        worth_it = (
            after.health_score >= cfg.repair_min_health_after
            and repair_max <= cfg.repair_cost_ceiling_ratio * baseline.cost_min
        )
        if worth_it:
            return Recommendation(
                action="repair",
                title=rule["title"],
                reason=f"{rule['meaning']} Repairs restore the health score to {after.health_score}.".strip(),
                badge="SERVICE",
                urgent=lead in URGENT_SERVICE_FLAGS,
                flag=lead,
                repairs=tuple(r.id for r in candidates),
            )
        return _replace(
            "Repair Not Cost-Effective",
            f"Repairs (up to ${repair_max:,.0f}) would only restore the health score to {after.health_score}.",
            flag=lead,
            metrics=metrics,
        )

    # Tier 4: monitor
    for flag in ADVISORY_FLAGS:
        if flag in flags:
            rule = interpret_flag(flag)
            return Recommendation(action="monitor", title=rule["title"], reason=rule["meaning"], badge="MONITOR", flag=flag)
    if metrics.status_tier == "optimal":
        return Recommendation(action="monitor", title="System Healthy", reason="No issues found. Keep up routine maintenance.", badge="OPTIMAL")
    return Recommendation(
        action="monitor",
        title="Monitor Condition",
        reason=f"Health score {metrics.health_score}. No repair would change the outlook; re-inspect within a year.",
        badge="MONITOR",
    )
