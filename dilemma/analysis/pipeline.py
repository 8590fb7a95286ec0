"""Single-analysis pipeline and the study plan that drives it.

One call of run_analysis() performs the full sequence for one grouping:
filter -> descriptive summary (ranked by mean) -> one-way ANOVA with
eta-squared -> Tukey HSD. The study plan in config.yaml lists the ten
groupings reported in the dissertation.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import Any, Literal

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from dilemma.analysis.config import config
from dilemma.analysis.dataframes import filter_matchups
from dilemma.analysis.factors import factor_for
from dilemma.analysis.stats import (
    AnovaResult,
    describe_groups,
    levene_test,
    one_way_anova,
    pairwise_unadjusted,
    shapiro_wilk,
    tukey_hsd,
)

logger = logging.getLogger(__name__)

__all__ = [
    "AnalysisResult",
    "AnalysisSpec",
    "load_plan",
    "run_analysis",
    "run_plan",
    "select_analyses",
]

# Default display label per grouping column
GROUP_LABELS = {
    "P1": "Strategy",
    "P2": "Opponent Strategy",
    "Game": "k-Index",
    "Turns": "Match Length (turns)",
}


class AnalysisSpec(BaseModel):
    """One entry of the study plan.

    Attributes:
        name: Identifier used for output file names
        group_by: Factor whose levels are compared
        where: Equality filters ({column: label}) applied before grouping
        title: Table and figure title
        group_label: Display name of the grouping column
        note: Table note describing the subset

    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    group_by: Literal["P1", "P2", "Game", "Turns"]
    where: dict[str, str] = Field(default_factory=dict)
    title: str = ""
    group_label: str = ""
    note: str = ""

    @field_validator("where")
    @classmethod
    def validate_where(cls, v: dict[str, str]) -> dict[str, str]:
        """Ensure every filter names a factor column and one of its labels."""
        for column, label in v.items():
            try:
                factor_for(column).from_label(label)
            except KeyError as e:
                raise ValueError(str(e)) from e
        return v

    @model_validator(mode="before")
    @classmethod
    def fill_display_defaults(cls, data: Any) -> Any:
        """Derive title and group label when the plan leaves them out."""
        if not isinstance(data, dict) or data.get("group_by") not in GROUP_LABELS:
            return data
        data = dict(data)
        if not data.get("group_label"):
            data["group_label"] = GROUP_LABELS[data["group_by"]]
        if not data.get("title"):
            data["title"] = f"Relative Payoff by {data['group_label']}"
        return data

    @model_validator(mode="after")
    def check_group_not_filtered(self) -> AnalysisSpec:
        """A factor cannot be both the grouping and a filter."""
        if self.group_by in self.where:
            raise ValueError(f"Cannot group by {self.group_by} while filtering on it")
        return self

    def describe_filter(self) -> str:
        """Human-readable form of the row filter."""
        if not self.where:
            return "all matchups"
        return ", ".join(f"{column} = {label}" for column, label in self.where.items())


@dataclass
class AnalysisResult:
    """Everything produced by one pipeline run.

    Attributes:
        spec: The analysis that produced this result
        n_observations: Rows in the filtered subset
        descriptives: Ranked per-group summary (group, n, mean, sd, se, CI)
        anova: One-way ANOVA and eta-squared
        tukey: Tukey HSD pairwise comparisons
        unadjusted: Uncorrected pairwise t tests on the same error term
        homogeneity: Levene (W, p) across groups
        residual_normality: Shapiro-Wilk (W, p) on ANOVA residuals
        excluded_levels: Levels with too few values for the pairwise
            comparisons and the variance test

    """

    spec: AnalysisSpec
    n_observations: int
    descriptives: pd.DataFrame
    anova: AnovaResult
    tukey: pd.DataFrame
    unadjusted: pd.DataFrame
    homogeneity: tuple[float, float]
    residual_normality: tuple[float, float]
    excluded_levels: list[str] = field(default_factory=list)

    @property
    def name(self) -> str:
        """Analysis name."""
        return self.spec.name

    def pairwise(self) -> pd.DataFrame:
        """Tukey comparisons joined with their unadjusted p-values."""
        return self.tukey.merge(
            self.unadjusted[["group1", "group2", "p_value"]],
            on=["group1", "group2"],
            how="left",
        )


def run_analysis(
    matchups: pd.DataFrame,
    spec: AnalysisSpec,
    predicate: Callable[[pd.DataFrame], pd.Series] | None = None,
    value_col: str | None = None,
) -> AnalysisResult:
    """Run the full descriptive / ANOVA / post-hoc sequence for one grouping.

    The input frame is not modified; every step works on a filtered copy.

    Args:
        matchups: Analysis-ready matchup DataFrame (see build_matchups_df)
        spec: Grouping column, filter and display labels
        predicate: Optional extra row selection applied after spec.where
        value_col: Outcome column (default from config: Rel_Avg_Score)

    Returns:
        AnalysisResult for the subset

    Raises:
        MatchupDataError: If the filter leaves no rows

    """
    if value_col is None:
        value_col = config.outcome

    subset = filter_matchups(matchups, spec.where or None)
    if predicate is not None:
        subset = filter_matchups(subset, predicate)

    group = spec.group_by
    logger.debug(
        "%s: %d rows grouped by %s (%s)", spec.name, len(subset), group, spec.describe_filter()
    )

    descriptives = describe_groups(subset, group, value_col)
    excluded = descriptives.loc[
        descriptives["n"] < config.min_sample_t_interval, "group"
    ].tolist()
    if excluded:
        logger.warning(
            "%s: excluding %s level(s) %s from pairwise comparisons (n < %d)",
            spec.name,
            group,
            excluded,
            config.min_sample_t_interval,
        )
    anova = one_way_anova(subset, group, value_col)
    tukey = tukey_hsd(subset, group, value_col)
    unadjusted = pairwise_unadjusted(subset, group, value_col)

    group_means = subset.groupby(group, observed=True)[value_col].transform("mean")
    residuals = subset[value_col] - group_means

    logger.info(
        "%s: F(%d, %d) = %.2f, p = %.4g, eta^2 = %.3f",
        spec.name,
        anova.df_between,
        anova.df_within,
        anova.f_statistic,
        anova.p_value,
        anova.eta_squared,
    )

    return AnalysisResult(
        spec=spec,
        n_observations=len(subset),
        descriptives=descriptives,
        anova=anova,
        tukey=tukey,
        unadjusted=unadjusted,
        homogeneity=levene_test(subset, group, value_col),
        residual_normality=shapiro_wilk(residuals),
        excluded_levels=excluded,
    )


def load_plan(entries: list[dict[str, Any]] | None = None) -> list[AnalysisSpec]:
    """Validate study plan entries (default: the `analyses` list in config.yaml).

    Raises:
        ValueError: If two entries share a name
        pydantic.ValidationError: If an entry is malformed

    """
    if entries is None:
        entries = config.analyses

    plan = [AnalysisSpec.model_validate(entry) for entry in entries]
    names = [spec.name for spec in plan]
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise ValueError(f"Duplicate analysis names in plan: {duplicates}")
    return plan


def select_analyses(plan: list[AnalysisSpec], names: list[str]) -> list[AnalysisSpec]:
    """Pick named analyses from a plan, keeping the requested order.

    Raises:
        KeyError: If a name is not in the plan

    """
    by_name = {spec.name: spec for spec in plan}
    unknown = [name for name in names if name not in by_name]
    if unknown:
        raise KeyError(f"Unknown analyses {unknown}; available: {list(by_name)}")
    return [by_name[name] for name in names]


def run_plan(
    matchups: pd.DataFrame, plan: list[AnalysisSpec] | None = None
) -> Iterator[AnalysisResult]:
    """Run each analysis of a plan in order.

    The first failing analysis raises; nothing is retried.
    """
    if plan is None:
        plan = load_plan()
    for spec in plan:
        yield run_analysis(matchups, spec)
