"""DataFrame construction and subgroup helpers.

Derives the outcome columns analysed throughout the study and selects the
subgroups each analysis runs on. Every helper returns a new frame; the
loaded table is never modified in place.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from pathlib import Path

import numpy as np
import pandas as pd

from dilemma.analysis.factors import WINNER_LABELS, factor_for
from dilemma.analysis.loader import MatchupDataError, load_matchups

__all__ = [
    "RowFilter",
    "build_matchups_df",
    "derive_outcomes",
    "filter_matchups",
]

# Either {column: label} equality constraints or a boolean-mask predicate
RowFilter = Mapping[str, str] | Callable[[pd.DataFrame], pd.Series]


def derive_outcomes(df: pd.DataFrame) -> pd.DataFrame:
    """Add the Winner and Rel_Avg_Score columns.

    Rel_Avg_Score is P1's average score minus P2's. Winner is "P1" when P1
    scored strictly more, "P2" when strictly less and "Tie" otherwise.

    Args:
        df: Labelled matchup DataFrame

    Returns:
        New DataFrame with the two derived columns appended

    """
    out = df.copy()
    p1 = out["Avg_Score_P1"].to_numpy(dtype=float)
    p2 = out["Avg_Score_P2"].to_numpy(dtype=float)

    winner = np.select([p1 > p2, p1 < p2], ["P1", "P2"], default="Tie")
    out["Winner"] = pd.Categorical(winner, categories=WINNER_LABELS)
    out["Rel_Avg_Score"] = p1 - p2
    return out


def filter_matchups(df: pd.DataFrame, where: RowFilter | None = None) -> pd.DataFrame:
    """Select the rows of one subgroup analysis.

    Categories no longer present after filtering are dropped so that group
    summaries and model matrices only see observed levels.

    Args:
        df: Matchup DataFrame
        where: {column: label} constraints, a predicate returning a boolean
            mask, or None for no filtering

    Returns:
        Filtered copy of the DataFrame

    Raises:
        MatchupDataError: If a constraint names an unknown label or no rows
            remain after filtering

    """
    if where is None:
        subset = df.copy()
    elif callable(where):
        subset = df[where(df)].copy()
    else:
        mask = pd.Series(True, index=df.index)
        for column, label in where.items():
            try:
                factor_for(column).from_label(label)
            except (KeyError, ValueError) as e:
                raise MatchupDataError(f"Invalid filter {column}={label!r}: {e}") from e
            mask &= df[column] == label
        subset = df[mask].copy()

    if subset.empty:
        raise MatchupDataError(f"No matchups left after filtering with {where!r}")

    for column in subset.select_dtypes(include="category").columns:
        subset[column] = subset[column].cat.remove_unused_categories()
    return subset


def build_matchups_df(path: str | Path, delimiter: str | None = None) -> pd.DataFrame:
    """Load, label and derive outcomes in one step.

    Args:
        path: Path to the delimited results file
        delimiter: Field delimiter (default from config)

    Returns:
        Analysis-ready matchup DataFrame

    """
    return derive_outcomes(load_matchups(path, delimiter=delimiter))
