"""Shared fixtures for analysis tests."""

from unittest.mock import patch

import numpy as np
import pandas as pd
import pytest


@pytest.fixture(scope="function", autouse=True)
def clear_patches():
    """Clear all mock patches between tests to prevent pollution."""
    yield
    patch.stopall()


@pytest.fixture
def spec_example_df():
    """The two-row Defector vs TFT example, labelled and derived."""
    from dilemma.analysis.dataframes import derive_outcomes
    from dilemma.analysis.loader import label_factors

    raw = pd.DataFrame(
        {
            "Game": [0, 0],
            "Turns": [0, 0],
            "P1": [1, 1],  # Defector
            "P2": [2, 2],  # TFT
            "Avg_Score_P1": [3.0, 5.0],
            "Avg_Score_P2": [1.0, 1.0],
        }
    )
    return derive_outcomes(label_factors(raw))


@pytest.fixture
def three_group_df():
    """Small three-group table with well separated means."""
    return pd.DataFrame(
        {
            "P2": ["Cooperator"] * 5 + ["Defector"] * 5 + ["TFT"] * 5,
            "Rel_Avg_Score": [
                1.0, 1.2, 0.9, 1.1, 1.3,
                -0.5, -0.2, -0.4, -0.6, -0.3,
                0.2, 0.4, 0.1, 0.3, 0.5,
            ],
        }
    )


@pytest.fixture
def degenerate_single_element():
    """Single-element array for testing n=1 edge cases."""
    return np.array([0.5])


@pytest.fixture
def degenerate_all_same():
    """Array with all identical values for testing zero variance."""
    return np.array([0.7, 0.7, 0.7, 0.7, 0.7])


@pytest.fixture
def degenerate_empty_array():
    """Empty array for testing n=0 edge cases."""
    return np.array([])
