"""dilemma - statistics for iterated Prisoner's Dilemma matchup studies.

This package loads simulated matchup results, labels the study factors,
and runs the descriptive / ANOVA / Tukey pipeline behind the dissertation
tables and figures.
"""

__version__ = "0.1.0"

__all__ = [
    "analysis",
    "cli",
]
