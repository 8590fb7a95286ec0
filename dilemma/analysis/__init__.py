"""Analysis pipeline for matchup results.

This module provides data loading, factor labelling, statistical analysis,
figure generation and table generation for the matchup study.
"""

from dilemma.analysis.dataframes import build_matchups_df, derive_outcomes, filter_matchups
from dilemma.analysis.loader import MatchupDataError, load_matchups, read_matchups
from dilemma.analysis.pipeline import (
    AnalysisResult,
    AnalysisSpec,
    load_plan,
    run_analysis,
    run_plan,
)

__all__ = [
    "AnalysisResult",
    "AnalysisSpec",
    "MatchupDataError",
    "build_matchups_df",
    "derive_outcomes",
    "filter_matchups",
    "load_matchups",
    "load_plan",
    "read_matchups",
    "run_analysis",
    "run_plan",
]
