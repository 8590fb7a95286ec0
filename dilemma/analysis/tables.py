"""Statistical table generation.

Each table function takes an AnalysisResult and returns a
``(markdown, latex)`` pair, mirroring the layout of the dissertation tables:
a title, the table body and a note describing the subset.
"""

from __future__ import annotations

import math
import re

import pandas as pd

from dilemma.analysis.config import config
from dilemma.analysis.pipeline import AnalysisResult

__all__ = [
    "descriptives_frame",
    "table_anova",
    "table_descriptives",
    "table_tukey",
]

# Format strings from config
_FMT_MEAN = f".{config.precision_means}f"
_FMT_STAT = f".{config.precision_statistics}f"
_FMT_P = f".{config.precision_p_values}f"
_FMT_ES = f".{config.precision_effect_sizes}f"


_LATEX_SPECIAL = {
    "\\": r"\textbackslash{}",
    "&": r"\&",
    "%": r"\%",
    "$": r"\$",
    "#": r"\#",
    "_": r"\_",
    "{": r"\{",
    "}": r"\}",
}


def _num(value: float, fmt: str) -> str:
    """Format a number, rendering NaN as NA."""
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return "NA"
    return f"{value:{fmt}}"


def _p(value: float) -> str:
    """Format a p-value, flooring tiny values at the display precision."""
    if value is None or math.isnan(value):
        return "NA"
    floor = 10 ** -config.precision_p_values
    if value < floor:
        return f"< {floor:{_FMT_P}}"
    return f"{value:{_FMT_P}}"


def _p_latex(value: float) -> str:
    """Format a p-value for LaTeX, with the less-than sign in math mode."""
    return _p(value).replace("<", "$<$")


def _latex_escape(text: str) -> str:
    """Escape characters LaTeX treats specially in table text."""
    return re.sub(r"[\\&%$#_{}]", lambda m: _LATEX_SPECIAL[m.group()], text)


def _latex_label(result: AnalysisResult, kind: str) -> str:
    """Cross-reference label for one table of an analysis."""
    return f"tab:{result.name}_{kind}"


def descriptives_frame(result: AnalysisResult) -> pd.DataFrame:
    """Ranked descriptive summary with display column names.

    Columns: <group label>, M, SD, CI_lower, CI_upper.
    """
    df = result.descriptives
    return pd.DataFrame(
        {
            result.spec.group_label: df["group"],
            "M": df["mean"],
            "SD": df["sd"],
            "CI_lower": df["ci_lower"],
            "CI_upper": df["ci_upper"],
        }
    )


def table_descriptives(result: AnalysisResult) -> tuple[str, str]:
    """Generate the ranked descriptive-statistics table.

    Args:
        result: Pipeline result

    Returns:
        Tuple of (markdown_table, latex_table)

    """
    spec = result.spec
    df = descriptives_frame(result)
    level = int(round(config.confidence_level * 100))
    note = f"Note. {spec.note} " if spec.note else "Note. "
    note += f"N = {result.n_observations}. CI = {level}% t-based confidence interval."

    # Format markdown table
    md_lines = [f"# {spec.title}", ""]
    md_lines.append(f"| {spec.group_label} | M | SD | CI_lower | CI_upper |")
    md_lines.append("|---|---|---|---|---|")
    for _, row in df.iterrows():
        md_lines.append(
            f"| {row[spec.group_label]} | {_num(row['M'], _FMT_MEAN)} | "
            f"{_num(row['SD'], _FMT_MEAN)} | {_num(row['CI_lower'], _FMT_MEAN)} | "
            f"{_num(row['CI_upper'], _FMT_MEAN)} |"
        )
    md_lines.extend(["", note])
    markdown = "\n".join(md_lines)

    # Format LaTeX table
    latex_lines = [
        r"\begin{table}[htbp]",
        r"\centering",
        f"\\caption{{{_latex_escape(spec.title)}}}",
        f"\\label{{{_latex_label(result, 'descriptives')}}}",
        r"\begin{tabular}{lrrrr}",
        r"\toprule",
        f"{_latex_escape(spec.group_label)} & $M$ & $SD$ & CI$_{{lower}}$ & CI$_{{upper}}$ \\\\",
        r"\midrule",
    ]
    for _, row in df.iterrows():
        latex_lines.append(
            f"{_latex_escape(str(row[spec.group_label]))} & {_num(row['M'], _FMT_MEAN)} & "
            f"{_num(row['SD'], _FMT_MEAN)} & {_num(row['CI_lower'], _FMT_MEAN)} & "
            f"{_num(row['CI_upper'], _FMT_MEAN)} \\\\"
        )
    latex_lines.extend(
        [
            r"\bottomrule",
            r"\end{tabular}",
            f"\\par\\smallskip\\footnotesize\\emph{{{_latex_escape(note)}}}",
            r"\end{table}",
        ]
    )
    latex = "\n".join(latex_lines)

    return markdown, latex


def table_anova(result: AnalysisResult) -> tuple[str, str]:
    """Generate the one-way ANOVA table with eta-squared.

    Args:
        result: Pipeline result

    Returns:
        Tuple of (markdown_table, latex_table)

    """
    spec = result.spec
    a = result.anova
    level = int(round(config.confidence_level * 100))
    eta_ci = f"[{_num(a.eta_squared_ci_low, _FMT_ES)}, {_num(a.eta_squared_ci_high, _FMT_ES)}]"
    lev_w, lev_p = result.homogeneity
    sw_w, sw_p = result.residual_normality
    note = (
        f"Note. η² = {_num(a.eta_squared, _FMT_ES)}, {level}% CI {eta_ci}. "
        f"Levene W = {_num(lev_w, _FMT_STAT)}, p = {_p(lev_p)}. "
        f"Shapiro-Wilk (residuals) W = {_num(sw_w, _FMT_ES)}, p = {_p(sw_p)}."
    )

    rows = [
        (spec.group_label, a.ss_between, a.df_between, a.ms_between, a.f_statistic, a.p_value),
        ("Residual", a.ss_within, a.df_within, a.ms_within, None, None),
        ("Total", a.ss_total, a.df_between + a.df_within, None, None, None),
    ]

    def cells(row: tuple) -> list[str]:
        source, ss, dof, ms, f, p = row
        return [
            source,
            _num(ss, _FMT_STAT),
            str(dof),
            _num(ms, _FMT_STAT) if ms is not None else "",
            _num(f, _FMT_STAT) if f is not None else "",
            _p(p) if p is not None else "",
        ]

    # Format markdown table
    md_lines = [f"# ANOVA: {spec.title}", ""]
    md_lines.append("| Source | SS | df | MS | F | p |")
    md_lines.append("|---|---|---|---|---|---|")
    for row in rows:
        md_lines.append("| " + " | ".join(cells(row)) + " |")
    md_lines.extend(["", note])
    markdown = "\n".join(md_lines)

    # Format LaTeX table
    latex_note = (
        f"Note. $\\eta^2$ = {_num(a.eta_squared, _FMT_ES)}, {level}\\% CI {eta_ci}. "
        f"Levene $W$ = {_num(lev_w, _FMT_STAT)}, $p$ = {_p_latex(lev_p)}. "
        f"Shapiro-Wilk (residuals) $W$ = {_num(sw_w, _FMT_ES)}, $p$ = {_p_latex(sw_p)}."
    )
    latex_lines = [
        r"\begin{table}[htbp]",
        r"\centering",
        f"\\caption{{ANOVA: {_latex_escape(spec.title)}}}",
        f"\\label{{{_latex_label(result, 'anova')}}}",
        r"\begin{tabular}{lrrrrr}",
        r"\toprule",
        r"Source & $SS$ & $df$ & $MS$ & $F$ & $p$ \\",
        r"\midrule",
    ]
    for row in rows:
        values = cells(row)
        values[0] = _latex_escape(values[0])
        values[5] = _p_latex(row[5]) if row[5] is not None else ""
        latex_lines.append(" & ".join(values) + r" \\")
    latex_lines.extend(
        [
            r"\bottomrule",
            r"\end{tabular}",
            f"\\par\\smallskip\\footnotesize\\emph{{{latex_note}}}",
            r"\end{table}",
        ]
    )
    latex = "\n".join(latex_lines)

    return markdown, latex


def table_tukey(result: AnalysisResult) -> tuple[str, str]:
    """Generate the Tukey HSD pairwise-comparison table.

    Args:
        result: Pipeline result

    Returns:
        Tuple of (markdown_table, latex_table)

    """
    spec = result.spec
    df = result.pairwise()
    level = int(round(config.confidence_level * 100))
    note = (
        f"Note. Mean difference = group 2 - group 1. p_adj is Tukey-adjusted; "
        f"p is the unadjusted pooled-variance t test. CI = {level}% simultaneous interval."
    )
    if result.excluded_levels:
        note += (
            f" Not compared (n < {config.min_sample_t_interval}): "
            f"{', '.join(result.excluded_levels)}."
        )

    # Format markdown table
    md_lines = [f"# Tukey HSD: {spec.title}", ""]
    md_lines.append("| Group 1 | Group 2 | Mean Diff | p_adj | p | CI_lower | CI_upper | Reject |")
    md_lines.append("|---|---|---|---|---|---|---|---|")
    for _, row in df.iterrows():
        md_lines.append(
            f"| {row['group1']} | {row['group2']} | {_num(row['meandiff'], _FMT_MEAN)} | "
            f"{_p(row['p_adj'])} | {_p(row['p_value'])} | "
            f"{_num(row['ci_lower'], _FMT_MEAN)} | {_num(row['ci_upper'], _FMT_MEAN)} | "
            f"{'Yes' if row['reject'] else 'No'} |"
        )
    md_lines.extend(["", note])
    markdown = "\n".join(md_lines)

    # Format LaTeX table
    latex_lines = [
        r"\begin{table}[htbp]",
        r"\centering",
        f"\\caption{{Tukey HSD: {_latex_escape(spec.title)}}}",
        f"\\label{{{_latex_label(result, 'tukey')}}}",
        r"\begin{tabular}{llrrrrrc}",
        r"\toprule",
        r"Group 1 & Group 2 & $\Delta M$ & $p_{adj}$ & $p$ & CI$_{lower}$ & CI$_{upper}$ & Reject \\",
        r"\midrule",
    ]
    for _, row in df.iterrows():
        latex_lines.append(
            f"{_latex_escape(row['group1'])} & {_latex_escape(row['group2'])} & "
            f"{_num(row['meandiff'], _FMT_MEAN)} & "
            f"{_p_latex(row['p_adj'])} & {_p_latex(row['p_value'])} & "
            f"{_num(row['ci_lower'], _FMT_MEAN)} & {_num(row['ci_upper'], _FMT_MEAN)} & "
            f"{'Yes' if row['reject'] else 'No'} \\\\"
        )
    latex_lines.extend(
        [
            r"\bottomrule",
            r"\end{tabular}",
            f"\\par\\smallskip\\footnotesize\\emph{{{_latex_escape(note)}}}",
            r"\end{table}",
        ]
    )
    latex = "\n".join(latex_lines)

    return markdown, latex
