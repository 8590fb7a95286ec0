"""Figure generation for the matchup study.

Each figure module provides generation functions that produce Vega-Lite
JSON specifications and CSV data files.
"""

from dilemma.analysis.config import config

# Color palettes (consistent across all figures)
COLORS = {
    "strategies": dict(config.strategy_colors),
}

# Fallback palette for levels without a configured color
_DYNAMIC_PALETTE = [
    "#4C78A8",  # Blue
    "#E45756",  # Red
    "#72B7B2",  # Teal
    "#F58518",  # Orange
    "#54A24B",  # Green
    "#B279A2",  # Purple
    "#FF9DA6",  # Pink
    "#9D755D",  # Brown
]


def get_color(category: str, key: str, position: int = 0) -> str:
    """Get color for a key, using static colors or the fallback palette.

    Args:
        category: Color category ("strategies")
        key: Key within category
        position: Position of the key in its domain, used for fallback colors

    Returns:
        Hex color code

    """
    if category in COLORS and key in COLORS[category]:
        return COLORS[category][key]
    return _DYNAMIC_PALETTE[position % len(_DYNAMIC_PALETTE)]


def get_color_scale(category: str, keys: list[str]) -> tuple[list[str], list[str]]:
    """Get color scale domain and range for Altair.

    Args:
        category: Color category ("strategies")
        keys: List of keys to assign colors to

    Returns:
        Tuple of (domain, range) for alt.Scale()

    """
    domain = list(keys)
    range_ = [get_color(category, key, i) for i, key in enumerate(keys)]
    return domain, range_
