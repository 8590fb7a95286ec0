"""Unit tests for table generation."""

import pandas as pd
import pytest

from dilemma.analysis.pipeline import AnalysisSpec, run_analysis
from dilemma.analysis.tables import (
    _latex_escape,
    _p,
    descriptives_frame,
    table_anova,
    table_descriptives,
    table_tukey,
)


@pytest.fixture
def opponent_result(three_group_df):
    """Pipeline result for the three-group opponent table."""
    spec = AnalysisSpec(
        name="defector_opponent",
        group_by="P2",
        title="Defector Relative Payoff by Opponent Strategy",
        note="Matches with Defector as P1.",
    )
    return run_analysis(three_group_df, spec)


@pytest.fixture
def sparse_result():
    """Pipeline result with a single-observation level."""
    df = pd.DataFrame(
        {
            "Turns": ["10", "10", "10", "20", "50", "50", "50"],
            "Rel_Avg_Score": [1.0, 1.5, 2.0, 0.25, 1.0, 2.5, 2.2],
        }
    )
    return run_analysis(df, AnalysisSpec(name="sparse_turns", group_by="Turns"))


def test_p_value_formatting():
    assert _p(0.04567) == "0.0457"
    assert _p(0.00001) == "< 0.0001"
    assert _p(float("nan")) == "NA"


def test_latex_escape():
    assert _latex_escape("k_index 50% & more") == r"k\_index 50\% \& more"
    assert _latex_escape("a\\b{c}") == r"a\textbackslash{}b\{c\}"


def test_descriptives_frame(opponent_result):
    df = descriptives_frame(opponent_result)

    assert list(df.columns) == ["Opponent Strategy", "M", "SD", "CI_lower", "CI_upper"]
    assert df["Opponent Strategy"].tolist() == ["Cooperator", "TFT", "Defector"]


def test_table_descriptives(opponent_result):
    markdown, latex = table_descriptives(opponent_result)

    assert markdown.startswith("# Defector Relative Payoff by Opponent Strategy")
    assert "| Opponent Strategy | M | SD | CI_lower | CI_upper |" in markdown
    assert "| Cooperator | 1.100 |" in markdown
    assert "| Defector | -0.400 |" in markdown
    assert markdown.index("Cooperator") < markdown.index("TFT") < markdown.index("| Defector")
    assert "Matches with Defector as P1. N = 15. CI = 95% t-based" in markdown

    assert r"\begin{table}[htbp]" in latex
    assert r"\label{tab:defector_opponent_descriptives}" in latex
    assert "Cooperator & 1.100" in latex
    assert r"95\% t-based" in latex


def test_table_descriptives_missing_values(sparse_result):
    markdown, latex = table_descriptives(sparse_result)

    assert "# Relative Payoff by Match Length (turns)" in markdown
    assert "| 20 | 0.250 | NA | NA | NA |" in markdown
    assert "20 & 0.250 & NA & NA & NA" in latex


def test_table_anova(opponent_result):
    markdown, latex = table_anova(opponent_result)
    a = opponent_result.anova

    assert markdown.startswith("# ANOVA: Defector Relative Payoff by Opponent Strategy")
    assert "| Source | SS | df | MS | F | p |" in markdown
    assert f"| Opponent Strategy | {a.ss_between:.2f} | 2 | {a.ms_between:.2f} |" in markdown
    assert f"| Residual | {a.ss_within:.2f} | 12 |" in markdown
    assert f"| Total | {a.ss_total:.2f} | 14 |" in markdown
    assert f"η² = {a.eta_squared:.3f}" in markdown
    assert "Levene W" in markdown
    assert "Shapiro-Wilk" in markdown

    assert r"$\eta^2$" in latex
    assert r"\label{tab:defector_opponent_anova}" in latex
    assert "< 0.0001" not in latex


def test_table_anova_missing_values(sparse_result):
    markdown, _ = table_anova(sparse_result)

    assert "| Residual | 1.76 | 4 | 0.44 |  |  |" in markdown
    assert "| Total |" in markdown


def test_table_tukey(opponent_result):
    markdown, latex = table_tukey(opponent_result)

    assert markdown.startswith("# Tukey HSD: Defector Relative Payoff by Opponent Strategy")
    header = "| Group 1 | Group 2 | Mean Diff | p_adj | p | CI_lower | CI_upper | Reject |"
    assert header in markdown
    assert "| Cooperator | Defector | -1.500 |" in markdown
    assert markdown.count("| Yes |") == 3
    assert "group 2 - group 1" in markdown

    assert r"\label{tab:defector_opponent_tukey}" in latex
    assert r"$<$" in latex


def test_table_tukey_excluded_level(sparse_result):
    markdown, latex = table_tukey(sparse_result)

    assert "| 10 | 50 | 0.400 |" in markdown
    assert markdown.count("| No |") == 1
    assert "| 20 |" not in markdown
    assert "Not compared (n < 2): 20." in markdown
    assert "Not compared (n < 2): 20." in latex
