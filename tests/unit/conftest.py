"""Shared matchup fixtures for unit tests."""

import numpy as np
import pandas as pd
import pytest

# Additive effect on P1's relative payoff per strategy code
STRATEGY_EFFECTS = {0: -1.0, 1: 1.5, 2: 0.0, 3: 0.8, 4: 0.4, 5: 0.1}


@pytest.fixture
def sample_raw_df():
    """Raw coded matchup table (1152 rows).

    Covers every P1 x P2 x Game x Turns combination with 2 replicates.
    """
    rng = np.random.default_rng(42)
    rows = []
    for p1 in range(6):
        for p2 in range(6):
            for game in range(4):
                for turns in range(4):
                    for _ in range(2):
                        base = rng.uniform(1.0, 3.0)
                        rel = (
                            STRATEGY_EFFECTS[p1]
                            - STRATEGY_EFFECTS[p2] / 2
                            + 0.3 * game
                            + rng.normal(0.0, 0.5)
                        )
                        rows.append(
                            {
                                "Game": game,
                                "Turns": turns,
                                "P1": p1,
                                "P2": p2,
                                "Avg_Score_P1": round(base + rel, 4),
                                "Avg_Score_P2": round(base, 4),
                            }
                        )
    return pd.DataFrame(rows)


@pytest.fixture
def sample_matchups_df(sample_raw_df):
    """Labelled matchup table with derived outcome columns."""
    from dilemma.analysis.dataframes import derive_outcomes
    from dilemma.analysis.loader import label_factors

    return derive_outcomes(label_factors(sample_raw_df))


@pytest.fixture
def matchups_csv(tmp_path, sample_raw_df):
    """Sample raw table written as a comma-delimited results file."""
    path = tmp_path / "matchups.csv"
    sample_raw_df.to_csv(path, index=False)
    return path
