"""Data loader for matchup results.

Reads the precomputed results table and replaces the integer factor codes
with labelled, ordered categoricals. Unmapped codes are rejected here so
that no later step ever sees a missing label.
"""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import pandas as pd

from dilemma.analysis.config import config
from dilemma.analysis.factors import FACTORS

logger = logging.getLogger(__name__)

__all__ = [
    "FACTOR_COLUMNS",
    "MatchupDataError",
    "REQUIRED_COLUMNS",
    "SCORE_COLUMNS",
    "label_factors",
    "load_matchups",
    "read_matchups",
]

FACTOR_COLUMNS = ["Game", "Turns", "P1", "P2"]
SCORE_COLUMNS = ["Avg_Score_P1", "Avg_Score_P2"]
REQUIRED_COLUMNS = FACTOR_COLUMNS + SCORE_COLUMNS


class MatchupDataError(ValueError):
    """Raised when the matchup results table is malformed."""


def read_matchups(path: str | Path, delimiter: str | None = None) -> pd.DataFrame:
    """Read the raw results file.

    Only the required columns are kept; extra columns (row indices, run ids)
    are dropped. Scores must parse as finite numbers.

    Args:
        path: Path to the delimited results file
        delimiter: Field delimiter (default from config)

    Returns:
        DataFrame with the raw integer factor codes and float scores

    Raises:
        MatchupDataError: If columns are missing or scores are not numeric

    """
    if delimiter is None:
        delimiter = config.delimiter

    path = Path(path)
    logger.info("Reading matchup results from %s", path)
    raw = pd.read_csv(path, sep=delimiter)
    raw.columns = raw.columns.str.strip()

    missing = [col for col in REQUIRED_COLUMNS if col not in raw.columns]
    if missing:
        raise MatchupDataError(f"{path}: missing required columns {missing}")

    df = raw[REQUIRED_COLUMNS].copy()
    for col in SCORE_COLUMNS:
        scores = pd.to_numeric(df[col], errors="coerce")
        bad = scores.isna() | np.isinf(scores)
        if bad.any():
            first = int(np.flatnonzero(bad.to_numpy())[0])
            raise MatchupDataError(
                f"{path}: column {col} has {int(bad.sum())} non-numeric value(s), "
                f"first at row {first} ({df[col].iloc[first]!r})"
            )
        df[col] = scores.astype(float)

    logger.debug("Read %d matchup rows", len(df))
    return df


def _decode_column(codes: pd.Series, column: str) -> pd.Categorical:
    """Map one column of integer codes to its factor labels."""
    factor = FACTORS[column]
    labels = factor.labels()

    numeric = pd.to_numeric(codes, errors="coerce")
    is_integer = numeric.notna() & (numeric == np.floor(numeric))
    in_range = is_integer & (numeric >= 0) & (numeric < len(labels))
    if not in_range.all():
        bad_values = sorted({str(v) for v in codes[~in_range]})
        raise MatchupDataError(
            f"Column {column}: unmapped {factor.__name__} code(s) {bad_values}; "
            f"expected integers 0..{len(labels) - 1}"
        )

    return pd.Categorical.from_codes(numeric.astype(int), categories=labels, ordered=True)


def label_factors(df: pd.DataFrame) -> pd.DataFrame:
    """Replace integer factor codes with ordered categorical labels.

    Args:
        df: Raw matchup DataFrame from read_matchups()

    Returns:
        New DataFrame with Game, Turns, P1 and P2 as labelled categoricals

    Raises:
        MatchupDataError: If any factor code is not an integer in range

    """
    labelled = df.copy()
    for column in FACTOR_COLUMNS:
        labelled[column] = _decode_column(df[column], column)
    return labelled


def load_matchups(path: str | Path, delimiter: str | None = None) -> pd.DataFrame:
    """Read the results file and label its factors.

    Args:
        path: Path to the delimited results file
        delimiter: Field delimiter (default from config)

    Returns:
        Labelled matchup DataFrame (outcome columns not yet derived)

    """
    return label_factors(read_matchups(path, delimiter=delimiter))
