from __future__ import annotations

from pathlib import Path

import pandas as pd
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from opterra.core.assessment import Assessment
from opterra.core.interpretation import interpret_flag, interpret_stressor
from opterra.core.models import fail_prob_label


def _fmt_cost(lo: float, hi: float) -> str:
    if lo == hi:
        return f"${lo:,.0f}"
    return f"${lo:,.0f} - ${hi:,.0f}"


def _wrap_lines(c: canvas.Canvas, text: str, max_width: float, font_name: str, font_size: int) -> list[str]:
    c.setFont(font_name, font_size)
    words = (text or "").split()
    if not words:
        return [""]

    lines: list[str] = []
    current = words[0]
    for w in words[1:]:
        test = f"{current} {w}"
        if c.stringWidth(test, font_name, font_size) <= max_width:
            current = test
        else:
            lines.append(current)
            current = w
    lines.append(current)
    return lines


def _draw_wrapped(
    c: canvas.Canvas,
    x: float,
    y: float,
    text: str,
    max_width: float,
    line_height: int = 13,
    font_name: str = "Helvetica",
    font_size: int = 10,
) -> float:
    lines = _wrap_lines(c, text, max_width, font_name, font_size)
    c.setFont(font_name, font_size)
    for line in lines:
        c.drawString(x, y, line)
        y -= line_height
    return y


def _draw_sparkline(
    c: canvas.Canvas,
    x: float,
    y: float,
    w: float,
    h: float,
    values: list[float] | None,
    lo: float | None = None,
    hi: float | None = None,
) -> None:
    """
    Draw a tiny sparkline around the text baseline `y`.

    With `lo`/`hi` the series is scaled to that fixed range (health is 0..100),
    otherwise to its own min/max.
    """
    if not values:
        return

    vals = [float(v) for v in values if isinstance(v, (int, float))]
    if len(vals) < 2:
        return

    mn = min(vals) if lo is None else lo
    mx = max(vals) if hi is None else hi
    if mx - mn > 1e-9:
        vals = [min(1.0, max(0.0, (v - mn) / (mx - mn))) for v in vals]
    else:
        vals = [0.5 for _ in vals]

    y0 = y - (h * 0.6)

    n = len(vals)
    dx = w / (n - 1)

    last_x = x
    last_y = y0 + (vals[0] * h)

    for i in range(1, n):
        xx = x + i * dx
        yy = y0 + (vals[i] * h)
        c.line(last_x, last_y, xx, yy)
        last_x, last_y = xx, yy


def _draw_footer(
    c: canvas.Canvas,
    page_w: float,
    y: float,
    text: str,
    left: float,
    right: float,
) -> None:
    c.setFont("Helvetica", 8)
    c.drawRightString(page_w - right, y, text)
    c.drawString(left, y, "Opterra")


def _draw_portfolio_page(
    c: canvas.Canvas,
    portfolio_df: pd.DataFrame,
    verdict: str,
    generated_at: str | None,
    coverage_line: str | None,
    run_config: dict[str, str] | None,
    left: float,
    right: float,
) -> None:
    page_w, page_h = letter
    max_width = page_w - left - right

    # widths sum to 530, max_width is 534
    COL_W = {
        "unit": 62,
        "trend": 48,
        "health": 40,
        "status": 52,
        "stressor": 70,
        "title": 150,
        "action": 52,
        "fail": 56,
    }
    order = ["unit", "trend", "health", "status", "stressor", "title", "action", "fail"]
    X = {}
    x = left
    for k in order:
        X[k] = x
        x += COL_W[k]

    y = page_h - 60
    c.setFont("Helvetica-Bold", 18)
    c.drawString(left, y, "Opterra Portfolio Overview")
    y -= 26

    c.setFont("Helvetica", 10)
    if generated_at:
        c.drawString(left, y, f"Generated: {generated_at}")
        y -= 14
    if coverage_line:
        y = _draw_wrapped(c, left, y, coverage_line, max_width, line_height=12, font_name="Helvetica", font_size=10)
        y -= 6

    if run_config:
        c.setFont("Helvetica-Bold", 10)
        c.drawString(left, y, "Run Configuration")
        y -= 12

        labels = {
            "input": "Input",
            "config": "Config",
            "top_stressors": "Top stressors",
            "version": "Decision version",
            "package": "Package",
            "schema": "Schema",
        }
        parts = [f"{label}: {run_config[k]}" for k, label in labels.items() if run_config.get(k)]
        if parts:
            y = _draw_wrapped(c, left, y, " | ".join(parts), max_width, line_height=12, font_name="Helvetica", font_size=10)
        y -= 6

    y -= 6

    c.setFont("Helvetica-Bold", 12)
    c.drawString(left, y, "Portfolio Verdict")
    y -= 16

    y = _draw_wrapped(c, left, y, verdict, max_width, line_height=14, font_name="Helvetica", font_size=11)
    y -= 12

    y = _draw_wrapped(
        c,
        left,
        y,
        "Units are ordered replace, then repair, then monitor, with the weakest health score first. "
        "The trend line shows health now and at each projection horizon.",
        max_width,
        line_height=14,
        font_name="Helvetica",
        font_size=11,
    )
    y -= 10

    urgent = portfolio_df[portfolio_df["urgent"]] if not portfolio_df.empty else portfolio_df
    if not urgent.empty:
        c.setFont("Helvetica-Bold", 11)
        c.drawString(left, y, "Urgent")
        y -= 14
        for _, rr in urgent.head(3).iterrows():
            alert = f"{rr['unit_id']}  Health {int(rr['health'])}  |  {rr['title']}  |  {str(rr['action']).upper()}"
            y = _draw_wrapped(c, left, y, alert, max_width, line_height=11, font_name="Helvetica", font_size=9)
            y -= 2
        y -= 6

    c.setFont("Helvetica-Bold", 9)
    c.drawString(X["unit"], y, "Unit")
    c.drawString(X["trend"], y, "Trend")
    c.drawString(X["health"], y, "Health")
    c.drawString(X["status"], y, "Status")
    c.drawString(X["stressor"], y, "Stressor")
    c.drawString(X["title"], y, "Finding")
    c.drawString(X["action"], y, "Action")
    c.drawString(X["fail"], y, "Fail 12mo")
    y -= 14

    c.setFont("Helvetica", 9)

    if portfolio_df.empty:
        c.drawString(left, y, "No inspection data available.")
        y -= 14
    else:
        for _, r in portfolio_df.iterrows():
            if y < 96:
                _draw_footer(c, page_w, 24, f"Generated {generated_at}" if generated_at else "", left, right)
                c.showPage()
                y = page_h - 60
                c.setFont("Helvetica-Bold", 12)
                c.drawString(left, y, "Opterra Portfolio Overview (cont.)")
                y -= 24
                c.setFont("Helvetica", 9)

            unit = str(r["unit_id"])
            if bool(r["urgent"]):
                c.setFont("Helvetica-Bold", 9)
                c.drawString(X["unit"], y, f"! {unit}")
                c.setFont("Helvetica", 9)
            else:
                c.drawString(X["unit"], y, unit)

            trend = r.get("trend", None)
            c.setLineWidth(0.6)
            _draw_sparkline(
                c,
                X["trend"],
                y,
                w=COL_W["trend"] - 6,
                h=10,
                values=trend if isinstance(trend, list) else None,
                lo=0.0,
                hi=100.0,
            )

            c.drawString(X["health"], y, str(int(r["health"])))
            c.drawString(X["status"], y, str(r["status"]))
            c.drawString(X["stressor"], y, str(r["top_stressor"]))

            y_title = _draw_wrapped(
                c, X["title"], y, str(r["title"]),
                max_width=COL_W["title"] - 4, line_height=11,
                font_name="Helvetica", font_size=9,
            )

            c.drawString(X["action"], y, str(r["action"]).upper())
            c.drawString(X["fail"], y, str(r["fail_prob"]))

            y = min(y - 11, y_title) - 8

    _draw_footer(c, page_w, 24, f"Generated {generated_at}" if generated_at else "", left, right)


def _draw_focus_page(
    c: canvas.Canvas,
    focus: Assessment,
    top_stressors: int,
    left: float,
    right: float,
) -> None:
    page_w, page_h = letter
    max_width = page_w - left - right
    m = focus.metrics

    y = page_h - 60
    c.setFont("Helvetica-Bold", 18)
    c.drawString(left, y, f"Unit {focus.unit_id} Risk Profile")
    y -= 34

    c.setFont("Helvetica-Bold", 14)
    c.drawString(left, y, "Executive Summary")
    y -= 22

    summary = (
        f"This {m.fuel_type.lower().replace('_', ' ')} unit is {m.calendar_age:g} years old but is aging "
        f"{m.aging_rate:.2f}x faster than a protected install, for a biological age of {m.bio_age:.1f} years. "
        f"Health score is {m.health_score}/100 ({m.status_tier}), with a 12-month failure probability of "
        f"{fail_prob_label(m.fail_prob)} ({m.risk_band})."
    )
    y = _draw_wrapped(c, left, y, summary, max_width, line_height=14, font_name="Helvetica", font_size=11)
    y -= 6

    if m.years_left_current > 0:
        life = (
            f"Estimated remaining life is {m.years_left_current:.1f} years as installed and "
            f"{m.years_left_optimized:.1f} years with pressure and expansion issues corrected."
        )
        y = _draw_wrapped(c, left, y, life, max_width, line_height=14, font_name="Helvetica", font_size=11)
    if m.hybrid_efficiency is not None:
        eff = f"Heat pump efficiency is {m.hybrid_efficiency:.0f}% of rated (air filter and condensate condition)."
        y = _draw_wrapped(c, left, y, eff, max_width, line_height=14, font_name="Helvetica", font_size=11)
    y -= 14

    c.setFont("Helvetica-Bold", 13)
    c.drawString(left, y, "Stress Factors")
    y -= 18

    ranked = sorted(
        ((k, v) for k, v in m.stress_factors.as_dict().items() if v > 1.0),
        key=lambda kv: (-kv[1], kv[0]),
    )[: max(0, int(top_stressors))]

    if not ranked:
        c.setFont("Helvetica", 10)
        c.drawString(left, y, "No stress factors above baseline.")
        y -= 14
    else:
        for name, value in ranked:
            interp = interpret_stressor(name)
            if y < 140:
                c.showPage()
                y = page_h - 60

            c.setFont("Helvetica-Bold", 10)
            c.drawString(left, y, f"{interp['label']}  x{value:.2f}")
            y -= 14
            y = _draw_wrapped(c, left + 20, y, interp["meaning"], max_width - 20, line_height=13)
            y = _draw_wrapped(c, left + 20, y, f"Remedy: {interp['remedy']}", max_width - 20, line_height=13)

            c.setLineWidth(0.3)
            c.line(left, y + 10, page_w - right, y + 10)
            y -= 8

    y -= 10
    c.setFont("Helvetica-Bold", 13)
    c.drawString(left, y, "Findings")
    y -= 18

    if not m.flags:
        c.setFont("Helvetica", 10)
        c.drawString(left, y, "No findings.")
        y -= 14
    else:
        for flag in sorted(m.flags):
            interp = interpret_flag(flag)
            if y < 120:
                c.showPage()
                y = page_h - 60
            y = _draw_wrapped(
                c, left, y, f"- {interp['title']}: {interp['meaning']}", max_width,
                line_height=13, font_name="Helvetica", font_size=10,
            )
            y -= 2

    if focus.projections:
        y -= 12
        if y < 140:
            c.showPage()
            y = page_h - 60
        c.setFont("Helvetica-Bold", 13)
        c.drawString(left, y, "Projection")
        y -= 18

        values = [float(m.health_score)] + [float(p.health_score) for p in focus.projections]
        c.setLineWidth(0.6)
        _draw_sparkline(c, page_w - right - 120, y, w=120, h=16, values=values, lo=0.0, hi=100.0)

        c.setFont("Helvetica", 10)
        for p in focus.projections:
            c.drawString(
                left, y,
                f"+{p.months:g} months: bio age {p.bio_age:.1f}, health {p.health_score}, "
                f"failure {fail_prob_label(p.fail_prob)}",
            )
            y -= 13

    _draw_footer(c, page_w, 24, f"Unit {focus.unit_id} | Health {m.health_score}", left, right)


def _draw_recommendation_page(
    c: canvas.Canvas,
    focus: Assessment | None,
    notes: list[str] | None,
    run_config: dict[str, str] | None,
    left: float,
    right: float,
) -> None:
    page_w, page_h = letter
    max_width = page_w - left - right

    y = page_h - 60
    c.setFont("Helvetica-Bold", 14)
    c.drawString(left, y, "Recommendation")
    y -= 22

    if focus is None:
        c.setFont("Helvetica", 11)
        c.drawString(left, y, "No unit selected.")
        y -= 14
    else:
        rec = focus.recommendation
        marker = " (urgent)" if rec.urgent else ""
        c.setFont("Helvetica-Bold", 12)
        c.drawString(left, y, f"[{rec.badge}] {rec.action.upper()}: {rec.title}{marker}")
        y -= 16
        y = _draw_wrapped(c, left, y, rec.reason, max_width, line_height=15, font_name="Helvetica", font_size=11)
        y -= 12

        c.setFont("Helvetica-Bold", 12)
        c.drawString(left, y, "Candidate Repairs")
        y -= 16

        if not focus.repairs:
            c.setFont("Helvetica", 10)
            c.drawString(left, y, "No repairs apply to the current findings.")
            y -= 14
        else:
            total_lo = 0.0
            total_hi = 0.0
            for r in focus.repairs:
                total_lo += r.cost_min
                total_hi += r.cost_max
                y = _draw_wrapped(
                    c, left, y, f"- {r.name} ({_fmt_cost(r.cost_min, r.cost_max)}): {r.description}", max_width,
                    line_height=13, font_name="Helvetica", font_size=10,
                )
                y -= 2

            after = focus.after_repairs
            y -= 6
            outcome = (
                f"All repairs together: {_fmt_cost(total_lo, total_hi)}. Health would move from "
                f"{focus.metrics.health_score} to {after.health_score}, aging rate from "
                f"{focus.metrics.aging_rate:.2f}x to {after.aging_rate:.2f}x, adding about "
                f"{focus.repair_life_extension:.1f} years of service life."
            )
            y = _draw_wrapped(c, left, y, outcome, max_width, line_height=13, font_name="Helvetica", font_size=10)

    if notes:
        y -= 14
        c.setFont("Helvetica-Bold", 12)
        c.drawString(left, y, "Data Notes")
        y -= 14
        c.setFont("Helvetica", 10)
        for n in notes:
            if y < 60:
                c.showPage()
                y = page_h - 60
            y = _draw_wrapped(c, left, y, f"- {n}", max_width, line_height=13, font_name="Helvetica", font_size=10)

    _draw_footer(
        c,
        page_w,
        24,
        f"Version {run_config.get('version', '')}" if run_config else "",
        left,
        right,
    )


def write_pdf_report(
    out_path: str | Path,
    portfolio_df: pd.DataFrame,
    verdict: str,
    generated_at: str | None,
    coverage_line: str | None,
    focus: Assessment | None,
    top_stressors: int = 5,
    notes: list[str] | None = None,
    run_config: dict[str, str] | None = None,
) -> Path:
    """
    Three pages: portfolio overview, focus unit risk profile, recommendation.
    """
    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)

    c = canvas.Canvas(str(out_path), pagesize=letter)
    left = 34
    right = 44

    _draw_portfolio_page(c, portfolio_df, verdict, generated_at, coverage_line, run_config, left, right)

    if focus is not None:
        c.showPage()
        _draw_focus_page(c, focus, top_stressors, left, right)

    c.showPage()
    _draw_recommendation_page(c, focus, notes, run_config, left, right)

    c.save()
    return out_path
