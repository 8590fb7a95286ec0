"""Unit tests for factor enumerations."""

import pytest

from dilemma.analysis.factors import (
    FACTORS,
    GameVariant,
    MatchLength,
    Strategy,
    factor_for,
)


def test_strategy_code_order():
    """Codes map positionally onto the strategy labels."""
    assert Strategy.labels() == [
        "Cooperator",
        "Defector",
        "TFT",
        "AntiTFT",
        "TrickyCooperator",
        "Random",
    ]


def test_game_variant_labels():
    """k-index labels are the payoff parameter values."""
    assert GameVariant.labels() == ["0.2", "0.4", "0.6", "0.8"]


def test_match_length_labels():
    """Match length labels are the number of rounds."""
    assert MatchLength.labels() == ["10", "20", "50", "100"]


def test_from_label():
    """Labels resolve to members and unknown labels are rejected."""
    assert Strategy.from_label("AntiTFT") is Strategy.ANTI_TFT
    assert GameVariant.from_label("0.6") is GameVariant.K_06

    with pytest.raises(ValueError, match="not a Strategy label"):
        Strategy.from_label("Grudger")


def test_from_label_lists_expected_labels():
    with pytest.raises(ValueError, match=r"expected one of \['10', '20', '50', '100'\]"):
        MatchLength.from_label("30")


def test_factor_columns():
    """Each factor column has its enumeration; P1 and P2 share strategies."""
    assert set(FACTORS) == {"Game", "Turns", "P1", "P2"}
    assert factor_for("P1") is Strategy
    assert factor_for("P2") is Strategy
    assert factor_for("Game") is GameVariant
    assert factor_for("Turns") is MatchLength

    with pytest.raises(KeyError, match="not a factor column"):
        factor_for("Avg_Score_P1")
