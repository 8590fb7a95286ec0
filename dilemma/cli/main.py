"""Command-line interface for dilemma.

Runs the study plan over a matchup results file and writes the
descriptive, ANOVA and Tukey tables plus one CI point plot per analysis.
"""

import logging
import sys
from pathlib import Path

import click

from dilemma import __version__
from dilemma.analysis import (
    AnalysisSpec,
    build_matchups_df,
    filter_matchups,
    load_plan,
    run_analysis,
)
from dilemma.analysis.figures.point_plot import fig_ci_point_plot
from dilemma.analysis.figures.spec_builder import apply_publication_theme
from dilemma.analysis.pipeline import GROUP_LABELS, select_analyses
from dilemma.analysis.stats import describe_groups
from dilemma.analysis.tables import table_anova, table_descriptives, table_tukey

logger = logging.getLogger(__name__)

TABLES = {
    "descriptives": table_descriptives,
    "anova": table_anova,
    "tukey": table_tukey,
}


def _configure_logging(verbose: bool, quiet: bool) -> None:
    """Set up root logging for a CLI invocation."""
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _parse_where(values: tuple[str, ...]) -> dict[str, str]:
    """Parse repeated COLUMN=LABEL options into a filter mapping."""
    where = {}
    for item in values:
        column, sep, label = item.partition("=")
        if not sep or not column.strip() or not label.strip():
            raise click.BadParameter(f"Expected COLUMN=LABEL, got {item!r}", param_hint="--where")
        where[column.strip()] = label.strip()
    return where


@click.group()
@click.version_option(version=__version__, prog_name="dilemma")
def cli() -> None:
    """dilemma - Prisoner's Dilemma matchup statistics.

    Descriptive statistics, one-way ANOVA and Tukey HSD for simulated
    strategy matchups.
    """
    pass


@cli.command()
@click.argument("data", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--output-dir",
    "-o",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("results"),
    show_default=True,
    help="Directory for tables/ and figures/.",
)
@click.option(
    "--analyses",
    "-a",
    default="all",
    help="Comma-separated analysis names (default: all).",
)
@click.option("--sep", default=None, help="Field delimiter (default from config).")
@click.option("--no-render", is_flag=True, help="Only write Vega-Lite specs and CSVs.")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Do not print tables.")
def analyze(
    data: Path,
    output_dir: Path,
    analyses: str,
    sep: str | None,
    no_render: bool,
    verbose: bool,
    quiet: bool,
) -> None:
    """Run the study plan on a matchup results file.

    DATA is the delimited results file (Game, Turns, P1, P2, Avg_Score_P1,
    Avg_Score_P2).

    Examples:

        dilemma analyze matchups.csv

        dilemma analyze matchups.csv --analyses strategy_overall,defector_k_index

        dilemma analyze matchups.tsv --sep $'\\t' --no-render
    """
    if verbose and quiet:
        raise click.UsageError("Cannot use --verbose and --quiet together.")
    _configure_logging(verbose, quiet)

    try:
        plan = load_plan()
        if analyses != "all":
            plan = select_analyses(plan, [name.strip() for name in analyses.split(",")])

        matchups = build_matchups_df(data, delimiter=sep)
        apply_publication_theme()

        tables_dir = output_dir / "tables"
        figures_dir = output_dir / "figures"
        tables_dir.mkdir(parents=True, exist_ok=True)

        for spec in plan:
            result = run_analysis(matchups, spec)
            for kind, table_func in TABLES.items():
                markdown, latex = table_func(result)
                (tables_dir / f"{spec.name}_{kind}.md").write_text(markdown + "\n")
                (tables_dir / f"{spec.name}_{kind}.tex").write_text(latex + "\n")
                if not quiet:
                    click.echo(f"\n{markdown}")
            fig_ci_point_plot(result, figures_dir, render=not no_render)

    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(f"\nCompleted {len(plan)} analyses on {len(matchups)} matchups")
    click.echo(f"Output directory: {output_dir}")


@cli.command("list-analyses")
def list_analyses() -> None:
    """List the analyses in the configured study plan."""
    for spec in load_plan():
        click.echo(f"{spec.name:<32} by {spec.group_by:<6} ({spec.describe_filter()})")


@cli.command()
@click.argument("data", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--by",
    "group_by",
    required=True,
    type=click.Choice(list(GROUP_LABELS)),
    help="Factor to group by.",
)
@click.option(
    "--where",
    "-w",
    multiple=True,
    help="Filter as COLUMN=LABEL (e.g. P1=Defector). Can be given multiple times.",
)
@click.option("--sep", default=None, help="Field delimiter (default from config).")
def describe(data: Path, group_by: str, where: tuple[str, ...], sep: str | None) -> None:
    """Print the ranked descriptive summary for an ad-hoc grouping.

    Examples:

        dilemma describe matchups.csv --by P2 --where P1=Defector
    """
    filters = _parse_where(where)

    try:
        spec = AnalysisSpec(name="describe", group_by=group_by, where=filters)
        matchups = build_matchups_df(data, delimiter=sep)
        subset = filter_matchups(matchups, spec.where or None)
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    summary = describe_groups(subset, spec.group_by)
    click.echo(f"{spec.title} ({spec.describe_filter()}, N = {len(subset)})")
    click.echo(summary.to_string(index=False, float_format=lambda v: f"{v:.3f}"))


if __name__ == "__main__":
    cli()
