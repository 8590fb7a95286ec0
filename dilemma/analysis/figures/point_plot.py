"""Confidence-interval point plots.

One figure per analysis: group means as points with t-based CI whiskers,
groups ordered by descending mean as in the descriptive table.
"""

from __future__ import annotations

from pathlib import Path

import altair as alt
import pandas as pd

from dilemma.analysis.config import config
from dilemma.analysis.figures import get_color_scale
from dilemma.analysis.figures.spec_builder import compute_dynamic_domain, save_figure
from dilemma.analysis.pipeline import AnalysisResult

STRATEGY_COLUMNS = ("P1", "P2")


def ci_point_chart(result: AnalysisResult) -> alt.LayerChart:
    """Build the point-and-error-bar chart for one analysis.

    Args:
        result: Pipeline result

    Returns:
        Layered Altair chart (zero rule + error bars + points)

    """
    spec = result.spec
    data = result.descriptives[["group", "n", "mean", "ci_lower", "ci_upper"]].copy()
    order = data["group"].tolist()
    level = int(round(config.confidence_level * 100))

    domain = compute_dynamic_domain(data["ci_lower"], data["ci_upper"])
    x = alt.X("group:N", title=spec.group_label, sort=order, axis=alt.Axis(labelAngle=0))

    if spec.group_by in STRATEGY_COLUMNS:
        color_domain, color_range = get_color_scale("strategies", order)
        color = alt.Color(
            "group:N", scale=alt.Scale(domain=color_domain, range=color_range), legend=None
        )
    else:
        color = alt.value(config.point_color)

    points = (
        alt.Chart(data)
        .mark_point(filled=True, size=80)
        .encode(
            x=x,
            y=alt.Y("mean:Q", title="Mean Relative Payoff", scale=alt.Scale(domain=domain)),
            color=color,
            tooltip=[
                alt.Tooltip("group:N", title=spec.group_label),
                alt.Tooltip("n:Q", title="N"),
                alt.Tooltip("mean:Q", title="M", format=".3f"),
                alt.Tooltip("ci_lower:Q", title=f"{level}% CI Low", format=".3f"),
                alt.Tooltip("ci_upper:Q", title=f"{level}% CI High", format=".3f"),
            ],
        )
    )

    error_bars = (
        alt.Chart(data)
        .mark_errorbar(ticks=True)
        .encode(
            x=x,
            y=alt.Y("ci_lower:Q", title=""),
            y2="ci_upper:Q",
            color=color,
        )
    )

    zero_rule = (
        alt.Chart(pd.DataFrame({"y": [0.0]}))
        .mark_rule(color="gray", strokeDash=[5, 5])
        .encode(y="y:Q")
    )

    return (zero_rule + error_bars + points).properties(
        title=alt.TitleParams(
            spec.title,
            subtitle=f"Means with {level}% confidence intervals ({spec.describe_filter()})",
        ),
        width=config.figure_width,
        height=config.figure_height,
    )


def fig_ci_point_plot(
    result: AnalysisResult,
    output_dir: Path,
    render: bool = True,
) -> list[Path]:
    """Generate and save the CI point plot for one analysis.

    Args:
        result: Pipeline result
        output_dir: Output directory
        render: Whether to render to PNG/PDF

    Returns:
        Paths of the files written

    """
    chart = ci_point_chart(result)
    data = result.descriptives[["group", "n", "mean", "sd", "ci_lower", "ci_upper"]]
    return save_figure(
        chart,
        result.name,
        output_dir,
        data=data,
        render=render,
        latex_caption=result.spec.title,
    )
