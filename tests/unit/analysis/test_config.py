"""Tests for the analysis configuration loader."""

from dilemma.analysis.config import AnalysisConfig, config
from dilemma.analysis.factors import Strategy


def test_singleton():
    assert AnalysisConfig() is config


def test_statistical_defaults():
    assert config.alpha == 0.05
    assert config.confidence_level == 0.95
    assert config.outcome == "Rel_Avg_Score"
    assert config.min_sample_t_interval == 2
    assert config.min_sample_normality == 3


def test_nested_get():
    assert config.get("statistical", "alpha") == 0.05
    assert config.get("figures", "dpi", "png") == 300
    assert config.get("missing", "key", default="fallback") == "fallback"
    assert config.get("statistical", "alpha", "too_deep") is None


def test_figure_settings():
    assert config.png_dpi_scale == 3.0
    assert config.figure_formats == ["png", "pdf"]
    assert config.delimiter == ","


def test_every_strategy_has_a_color():
    assert set(config.strategy_colors) == set(Strategy.labels())


def test_table_precision():
    assert config.precision_means == 3
    assert config.precision_p_values == 4


def test_plan_entries():
    assert len(config.analyses) == 10
    assert all("name" in entry and "group_by" in entry for entry in config.analyses)


def test_figure_size():
    assert config.figure_width == 400
    assert config.figure_height == 300
