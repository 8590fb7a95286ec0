"""Analysis configuration loader.

Loads and provides access to centralized analysis parameters from config.yaml.
Every tunable value of the pipeline is read from here.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, cast

import yaml

__all__ = ["AnalysisConfig", "config"]


class AnalysisConfig:
    """Analysis configuration singleton."""

    _instance: AnalysisConfig | None = None
    _config: dict[str, Any] | None = None

    def __new__(cls) -> AnalysisConfig:
        """Singleton pattern to ensure config is loaded once."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self) -> None:
        """Load configuration from YAML file."""
        if self._config is None:
            config_path = Path(__file__).parent / "config.yaml"
            with open(config_path, encoding="utf-8") as f:
                self._config = yaml.safe_load(f)

    def get(self, *keys: str, default: Any = None) -> Any:
        """Get configuration value by nested keys.

        Args:
            *keys: Nested keys to traverse (e.g., "statistical", "alpha")
            default: Default value if key path not found

        Returns:
            Configuration value or default

        Examples:
            >>> config = AnalysisConfig()
            >>> config.get("statistical", "alpha")
            0.05
            >>> config.get("figures", "dpi", "png")
            300

        """
        value = self._config
        for key in keys:
            if not isinstance(value, dict) or key not in value:
                return default
            value = value[key]
        return value

    @property
    def alpha(self) -> float:
        """Statistical significance threshold."""
        return cast(float, self.get("statistical", "alpha", default=0.05))

    @property
    def confidence_level(self) -> float:
        """Confidence level for t intervals, eta-squared CIs and Tukey CIs."""
        return cast(float, self.get("statistical", "confidence_level", default=0.95))

    @property
    def outcome(self) -> str:
        """Outcome column analysed by every pipeline run."""
        return cast(str, self.get("statistical", "outcome", default="Rel_Avg_Score"))

    @property
    def min_sample_t_interval(self) -> int:
        """Minimum group size for a defined t confidence interval."""
        return cast(int, self.get("statistical", "min_samples", "t_interval", default=2))

    @property
    def min_sample_normality(self) -> int:
        """Minimum sample size for normality tests."""
        return cast(int, self.get("statistical", "min_samples", "normality_test", default=3))

    @property
    def delimiter(self) -> str:
        """Field delimiter of the matchup results file."""
        return cast(str, self.get("input", "delimiter", default=","))

    @property
    def png_dpi_scale(self) -> float:
        """PNG DPI scale factor (300 DPI / 100 base = 3.0)."""
        dpi = cast(float, self.get("figures", "dpi", "png", default=300))
        return dpi / 100.0

    @property
    def figure_width(self) -> int:
        """Default figure width."""
        return cast(int, self.get("figures", "default_width", default=400))

    @property
    def figure_height(self) -> int:
        """Default figure height."""
        return cast(int, self.get("figures", "default_height", default=300))

    @property
    def figure_formats(self) -> list[str]:
        """Rendered figure formats."""
        return cast(list[str], self.get("figures", "formats", default=["png", "pdf"]))

    @property
    def strategy_colors(self) -> dict[str, str]:
        """Strategy color palette."""
        return cast(dict[str, str], self.get("colors", "strategies", default={}))

    @property
    def point_color(self) -> str:
        """Mark color for single-series point plots."""
        return cast(str, self.get("colors", "point", default="#333333"))

    @property
    def precision_means(self) -> int:
        """Number of decimal places for means, SDs and CI bounds."""
        return cast(int, self.get("tables", "precision", "means", default=3))

    @property
    def precision_statistics(self) -> int:
        """Number of decimal places for test statistics and sums of squares."""
        return cast(int, self.get("tables", "precision", "statistics", default=2))

    @property
    def precision_p_values(self) -> int:
        """Number of decimal places for p-values."""
        return cast(int, self.get("tables", "precision", "p_values", default=4))

    @property
    def precision_effect_sizes(self) -> int:
        """Number of decimal places for effect sizes."""
        return cast(int, self.get("tables", "precision", "effect_sizes", default=3))

    @property
    def analyses(self) -> list[dict[str, Any]]:
        """Raw study plan entries (validated by pipeline.load_plan)."""
        return cast(list[dict[str, Any]], self.get("analyses", default=[]))


# Global singleton instance
config = AnalysisConfig()
