"""Vega-Lite specification builder utilities.

Provides helpers for creating publication-quality Vega-Lite charts with
consistent typography, and for writing them out with their data.
"""

from __future__ import annotations

import logging
from pathlib import Path

import altair as alt
import numpy as np
import pandas as pd

from dilemma.analysis.config import config

logger = logging.getLogger(__name__)

__all__ = [
    "apply_publication_theme",
    "compute_dynamic_domain",
    "save_figure",
]


def compute_dynamic_domain(
    lower: pd.Series,
    upper: pd.Series,
    padding_fraction: float = 0.1,
    min_range: float = 0.1,
) -> list[float]:
    """Compute a padded axis domain that contains every CI whisker.

    Unlike rate plots, relative payoffs are unbounded in both directions, so
    the domain is not clamped; it always includes 0 so the sign of each
    group mean is visible.

    Args:
        lower: Lower CI bounds (NaN bounds are ignored)
        upper: Upper CI bounds (NaN bounds are ignored)
        padding_fraction: Fraction of range to add as padding (default: 10%)
        min_range: Minimum range to enforce

    Returns:
        Two-element list [min, max] suitable for alt.Scale(domain=...)

    Example:
        >>> compute_dynamic_domain(pd.Series([0.5, 1.2]), pd.Series([0.9, 1.8]))
        [-0.2, 2.0]

    """
    values = pd.concat([lower, upper, pd.Series([0.0])]).astype(float)
    values = values[np.isfinite(values)]

    data_min = float(values.min())
    data_max = float(values.max())

    data_range = data_max - data_min
    if data_range < min_range:
        center = (data_min + data_max) / 2
        data_min = center - min_range / 2
        data_max = center + min_range / 2
        data_range = min_range

    padding = data_range * padding_fraction
    domain_min = round((data_min - padding) / 0.05) * 0.05
    domain_max = round((data_max + padding) / 0.05) * 0.05
    return [round(domain_min, 2), round(domain_max, 2)]


def apply_publication_theme() -> None:
    """Register and enable the publication theme for all charts."""

    @alt.theme.register("publication", enable=True)
    def publication_theme() -> alt.theme.ThemeConfig:
        return {
            "config": {
                "font": "serif",
                "axis": {
                    "labelFontSize": 11,
                    "titleFontSize": 13,
                    "gridColor": "#e0e0e0",
                    "domainColor": "#333333",
                },
                "legend": {
                    "labelFontSize": 11,
                    "titleFontSize": 12,
                },
                "title": {
                    "fontSize": 14,
                    "anchor": "start",
                    "fontWeight": "normal",
                },
                "view": {
                    "stroke": None,
                    "continuousWidth": config.figure_width,
                    "continuousHeight": config.figure_height,
                },
                "mark": {
                    "tooltip": True,
                },
            }
        }


def save_figure(
    chart: alt.Chart | alt.LayerChart,
    name: str,
    output_dir: Path,
    data: pd.DataFrame | None = None,
    render: bool = True,
    formats: list[str] | None = None,
    latex_caption: str | None = None,
) -> list[Path]:
    """Save chart as Vega-Lite JSON + CSV + optionally rendered images + LaTeX snippet.

    Rendering failures (for example a missing vl-convert backend) are logged
    and skipped; the spec and CSV are always written. The LaTeX snippet is
    written only when the PDF it includes was rendered.

    Args:
        chart: Altair chart
        name: Figure name (without extension)
        output_dir: Output directory
        data: Optional DataFrame to save as CSV (if None, taken from the chart)
        render: Whether to render to raster/vector formats
        formats: Formats to render (default from config: png, pdf)
        latex_caption: Optional custom LaTeX caption (defaults to chart title)

    Returns:
        Paths of the files written

    """
    if formats is None:
        formats = config.figure_formats

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    written = []

    spec_path = output_dir / f"{name}.vl.json"
    chart.save(str(spec_path))
    written.append(spec_path)
    logger.info("Saved spec: %s", spec_path)

    if data is None and isinstance(getattr(chart, "data", None), pd.DataFrame):
        data = chart.data
    if data is not None:
        csv_path = output_dir / f"{name}.csv"
        data.to_csv(csv_path, index=False)
        written.append(csv_path)
        logger.info("Saved data: %s", csv_path)

    if render:
        for fmt in formats:
            img_path = output_dir / f"{name}.{fmt}"
            try:
                if fmt == "png":
                    chart.save(str(img_path), scale_factor=config.png_dpi_scale)
                else:
                    chart.save(str(img_path))
            except Exception as e:
                logger.warning("Could not render %s: %s", img_path, e)
                continue
            written.append(img_path)
            logger.info("Rendered: %s", img_path)

        if output_dir / f"{name}.pdf" in written:
            written.append(_generate_latex_snippet(name, output_dir, chart, latex_caption))

    return written


def _generate_latex_snippet(
    name: str,
    output_dir: Path,
    chart: alt.Chart | alt.LayerChart,
    custom_caption: str | None = None,
) -> Path:
    """Generate LaTeX figure inclusion snippet.

    Args:
        name: Figure name (without extension)
        output_dir: Output directory
        chart: Altair chart (for extracting title)
        custom_caption: Optional custom caption (overrides chart title)

    Returns:
        Path of the snippet file

    """
    caption = custom_caption
    if caption is None:
        title = getattr(chart, "title", None)
        if isinstance(title, str) and title:
            caption = title
        elif isinstance(title, alt.TitleParams) and isinstance(title.text, str):
            caption = title.text
        else:
            caption = name.replace("_", " ").title()

    latex_snippet = f"""\\begin{{figure}}[htbp]
\\centering
\\includegraphics[width=\\textwidth]{{{name}.pdf}}
\\caption{{{caption}}}
\\label{{fig:{name}}}
\\end{{figure}}
"""

    snippet_path = output_dir / f"{name}_include.tex"
    snippet_path.write_text(latex_snippet)
    logger.info("Saved LaTeX snippet: %s", snippet_path)
    return snippet_path
