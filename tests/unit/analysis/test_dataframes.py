"""Unit tests for outcome derivation and subgroup filtering."""

import numpy as np
import pandas as pd
import pytest

from dilemma.analysis.dataframes import build_matchups_df, derive_outcomes, filter_matchups
from dilemma.analysis.loader import MatchupDataError


def test_spec_example(spec_example_df):
    """Defector vs TFT rows (3 vs 1, 5 vs 1) give relative payoffs 2 and 4."""
    assert spec_example_df["Rel_Avg_Score"].tolist() == [2.0, 4.0]
    assert spec_example_df["Rel_Avg_Score"].mean() == pytest.approx(3.0)
    assert spec_example_df["Winner"].tolist() == ["P1", "P1"]
    assert spec_example_df["P1"].tolist() == ["Defector", "Defector"]
    assert spec_example_df["P2"].tolist() == ["TFT", "TFT"]


def test_rel_avg_score_is_exact_difference(sample_matchups_df):
    """Relative payoff equals P1 score minus P2 score for every row."""
    expected = sample_matchups_df["Avg_Score_P1"] - sample_matchups_df["Avg_Score_P2"]
    assert (sample_matchups_df["Rel_Avg_Score"] == expected).all()


def test_winner_rule():
    """Winner is P1 / P2 / Tie by strict comparison of the two scores."""
    df = pd.DataFrame(
        {
            "Avg_Score_P1": [3.0, 1.0, 2.5, 0.0],
            "Avg_Score_P2": [1.0, 3.0, 2.5, 0.0],
        }
    )
    out = derive_outcomes(df)

    assert out["Winner"].tolist() == ["P1", "P2", "Tie", "Tie"]
    assert list(out["Winner"].cat.categories) == ["P1", "P2", "Tie"]


def test_winner_is_exhaustive_and_exclusive(sample_matchups_df):
    """Every row has exactly one winner consistent with the scores."""
    df = sample_matchups_df
    p1_wins = df["Avg_Score_P1"] > df["Avg_Score_P2"]
    p2_wins = df["Avg_Score_P1"] < df["Avg_Score_P2"]
    ties = df["Avg_Score_P1"] == df["Avg_Score_P2"]

    assert df["Winner"].notna().all()
    assert ((df["Winner"] == "P1") == p1_wins).all()
    assert ((df["Winner"] == "P2") == p2_wins).all()
    assert ((df["Winner"] == "Tie") == ties).all()
    assert (p1_wins.astype(int) + p2_wins.astype(int) + ties.astype(int) == 1).all()


def test_derive_outcomes_does_not_modify_input(spec_example_df):
    """Derivation returns a new frame."""
    base = spec_example_df.drop(columns=["Winner", "Rel_Avg_Score"])
    derive_outcomes(base)
    assert "Rel_Avg_Score" not in base.columns


def test_filter_by_label(sample_matchups_df):
    """Mapping filters keep only matching rows and drop unused categories."""
    subset = filter_matchups(sample_matchups_df, {"P1": "Defector"})

    assert len(subset) == 192
    assert (subset["P1"] == "Defector").all()
    assert list(subset["P1"].cat.categories) == ["Defector"]
    assert subset["P2"].nunique() == 6


def test_filter_multiple_labels(sample_matchups_df):
    """Multiple constraints combine with AND."""
    subset = filter_matchups(sample_matchups_df, {"P1": "AntiTFT", "Game": "0.4"})

    assert len(subset) == 48
    assert (subset["Game"] == "0.4").all()


def test_filter_with_predicate(sample_matchups_df):
    """Callable filters select rows by boolean mask."""
    subset = filter_matchups(sample_matchups_df, lambda df: df["Rel_Avg_Score"] > 0)
    assert (subset["Rel_Avg_Score"] > 0).all()


def test_filter_none_is_copy(sample_matchups_df):
    """No filter returns every row as a separate frame."""
    subset = filter_matchups(sample_matchups_df)

    assert len(subset) == len(sample_matchups_df)
    assert subset is not sample_matchups_df


def test_filter_leaves_input_untouched(sample_matchups_df):
    """Filtering never mutates the loaded table."""
    before = sample_matchups_df.copy()
    filter_matchups(sample_matchups_df, {"P1": "TrickyCooperator"})

    pd.testing.assert_frame_equal(sample_matchups_df, before)


def test_filter_unknown_label(sample_matchups_df):
    """Unknown labels are rejected rather than silently matching nothing."""
    with pytest.raises(MatchupDataError, match="Invalid filter"):
        filter_matchups(sample_matchups_df, {"P1": "Grudger"})


def test_filter_unknown_column(sample_matchups_df):
    """Only factor columns can be filtered by label."""
    with pytest.raises(MatchupDataError, match="Invalid filter"):
        filter_matchups(sample_matchups_df, {"Winner": "P1"})


def test_filter_empty_result(sample_matchups_df):
    """An empty subset is a data error."""
    with pytest.raises(MatchupDataError, match="No matchups left"):
        filter_matchups(sample_matchups_df, lambda df: np.zeros(len(df), dtype=bool))


def test_build_matchups_df(matchups_csv):
    """File to analysis-ready frame in one call."""
    df = build_matchups_df(matchups_csv)

    assert {"Winner", "Rel_Avg_Score"} <= set(df.columns)
    assert len(df) == 1152
