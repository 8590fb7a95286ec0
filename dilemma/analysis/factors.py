"""Study factors and their fixed code-to-label tables.

The results file stores every categorical factor as a small integer code.
Each factor is an explicit enumeration whose member order *is* the code
order, so code ``i`` always maps to ``Factor.labels()[i]``.
"""

from __future__ import annotations

from enum import Enum

__all__ = [
    "FACTORS",
    "GameVariant",
    "MatchLength",
    "Strategy",
    "WINNER_LABELS",
    "factor_for",
]


class CodedFactor(Enum):
    """Base for factors stored as positional integer codes."""

    @classmethod
    def from_label(cls, label: str) -> CodedFactor:
        """Return the member for a display label."""
        try:
            return cls(label)
        except ValueError:
            raise ValueError(
                f"{label!r} is not a {cls.__name__} label (expected one of {cls.labels()})"
            ) from None

    @classmethod
    def labels(cls) -> list[str]:
        """Display labels in code order."""
        return [member.value for member in cls]


class Strategy(CodedFactor):
    """Player strategies (``P1`` and ``P2`` columns)."""

    COOPERATOR = "Cooperator"
    DEFECTOR = "Defector"
    TFT = "TFT"
    ANTI_TFT = "AntiTFT"
    TRICKY_COOPERATOR = "TrickyCooperator"
    RANDOM = "Random"


class GameVariant(CodedFactor):
    """Payoff-structure parameter k of the game variant (``Game`` column)."""

    K_02 = "0.2"
    K_04 = "0.4"
    K_06 = "0.6"
    K_08 = "0.8"


class MatchLength(CodedFactor):
    """Number of rounds per match (``Turns`` column)."""

    TURNS_10 = "10"
    TURNS_20 = "20"
    TURNS_50 = "50"
    TURNS_100 = "100"


# Column name -> factor enumeration
FACTORS: dict[str, type[CodedFactor]] = {
    "Game": GameVariant,
    "Turns": MatchLength,
    "P1": Strategy,
    "P2": Strategy,
}

WINNER_LABELS = ["P1", "P2", "Tie"]


def factor_for(column: str) -> type[CodedFactor]:
    """Look up the factor enumeration for a results column.

    Raises:
        KeyError: If the column is not a categorical study factor.

    """
    try:
        return FACTORS[column]
    except KeyError:
        raise KeyError(
            f"{column!r} is not a factor column (expected one of {sorted(FACTORS)})"
        ) from None
