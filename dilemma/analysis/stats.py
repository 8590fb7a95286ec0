"""Statistical analysis functions.

Provides t-based confidence intervals, grouped descriptive summaries,
one-way ANOVA with eta-squared effect size, Tukey HSD post-hoc comparisons
and the assumption checks that accompany them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np
import pandas as pd
from scipy import optimize, stats
from statsmodels.formula.api import ols
from statsmodels.stats.anova import anova_lm

from dilemma.analysis.config import config

logger = logging.getLogger(__name__)

__all__ = [
    "AnovaResult",
    "describe_groups",
    "eta_squared_ci",
    "group_samples",
    "levene_test",
    "one_way_anova",
    "pairwise_unadjusted",
    "shapiro_wilk",
    "t_confidence_interval",
    "tukey_hsd",
]


def t_confidence_interval(
    data: pd.Series | np.ndarray,
    confidence: float | None = None,
) -> tuple[float, float, float]:
    """Compute a t-distribution confidence interval for the mean.

    ``mean ± t((1 + confidence) / 2, n - 1) * sd / sqrt(n)`` with the sample
    standard deviation (ddof=1).

    Args:
        data: Sample values
        confidence: Confidence level (default from config: 0.95)

    Returns:
        Tuple of (mean, lower_bound, upper_bound). The bounds are NaN when
        the sample has fewer than two values.

    """
    if confidence is None:
        confidence = config.confidence_level

    data_array = np.asarray(data, dtype=float)
    n = len(data_array)
    if n == 0:
        return np.nan, np.nan, np.nan

    mean = float(np.mean(data_array))
    if n < config.min_sample_t_interval:
        logger.warning(
            f"t confidence interval called with sample size {n} < "
            f"{config.min_sample_t_interval}. Returning NaN bounds."
        )
        return mean, np.nan, np.nan

    sem = float(np.std(data_array, ddof=1)) / np.sqrt(n)
    t_crit = float(stats.t.ppf((1 + confidence) / 2, n - 1))
    half_width = t_crit * sem
    return mean, mean - half_width, mean + half_width


def describe_groups(
    df: pd.DataFrame,
    group_col: str,
    value_col: str | None = None,
    confidence: float | None = None,
) -> pd.DataFrame:
    """Summarize an outcome per level of a grouping column.

    Args:
        df: Data containing the grouping and outcome columns
        group_col: Column whose levels define the groups
        value_col: Outcome column (default from config: Rel_Avg_Score)
        confidence: Confidence level (default from config: 0.95)

    Returns:
        DataFrame with columns group, n, mean, sd, se, ci_lower, ci_upper,
        one row per observed level, sorted by descending mean

    """
    if value_col is None:
        value_col = config.outcome

    rows = []
    for level, values in df.groupby(group_col, observed=True, sort=True)[value_col]:
        mean, ci_lower, ci_upper = t_confidence_interval(values, confidence=confidence)
        n = len(values)
        sd = float(values.std(ddof=1)) if n > 1 else np.nan
        rows.append(
            {
                "group": str(level),
                "n": n,
                "mean": mean,
                "sd": sd,
                "se": sd / np.sqrt(n) if n > 1 else np.nan,
                "ci_lower": ci_lower,
                "ci_upper": ci_upper,
            }
        )

    summary = pd.DataFrame(
        rows, columns=["group", "n", "mean", "sd", "se", "ci_lower", "ci_upper"]
    )
    # Stable sort keeps the factor order for tied means
    return summary.sort_values("mean", ascending=False, kind="mergesort").reset_index(drop=True)


def group_samples(
    df: pd.DataFrame, group_col: str, value_col: str | None = None
) -> dict[str, np.ndarray]:
    """Split an outcome into one array per observed group level, in factor order."""
    if value_col is None:
        value_col = config.outcome
    return {
        str(level): values.to_numpy(dtype=float)
        for level, values in df.groupby(group_col, observed=True, sort=True)[value_col]
    }


@dataclass
class AnovaResult:
    """One-way ANOVA summary.

    Attributes:
        factor: Grouping column
        ss_between: Between-groups sum of squares
        ss_within: Residual sum of squares
        ss_total: Total sum of squares
        df_between: Between-groups degrees of freedom (k - 1)
        df_within: Residual degrees of freedom (N - k)
        ms_between: Between-groups mean square
        ms_within: Residual mean square (the error term)
        f_statistic: F ratio
        p_value: P(F > f_statistic) under the null
        eta_squared: ss_between / ss_total
        eta_squared_ci_low: Lower eta-squared confidence bound
        eta_squared_ci_high: Upper eta-squared confidence bound

    """

    factor: str
    ss_between: float
    ss_within: float
    ss_total: float
    df_between: int
    df_within: int
    ms_between: float
    ms_within: float
    f_statistic: float
    p_value: float
    eta_squared: float
    eta_squared_ci_low: float
    eta_squared_ci_high: float

    @property
    def significant(self) -> bool:
        """Whether the omnibus test rejects at the configured alpha."""
        return bool(self.p_value < config.alpha)


def eta_squared_ci(
    f_statistic: float,
    df_between: int,
    df_within: int,
    confidence: float | None = None,
) -> tuple[float, float]:
    """Confidence interval for eta-squared by noncentral-F inversion.

    Finds the noncentrality parameters whose F distributions put the
    observed F at the upper and lower tail quantiles, then converts each
    lambda to eta-squared via ``lambda / (lambda + N)`` with
    ``N = df_between + df_within + 1``. A bound is 0 when even the central
    F distribution leaves the observed value below that quantile.

    Args:
        f_statistic: Observed F ratio
        df_between: Numerator degrees of freedom
        df_within: Denominator degrees of freedom
        confidence: Confidence level (default from config: 0.95)

    Returns:
        Tuple of (lower, upper) eta-squared bounds in [0, 1]

    """
    if confidence is None:
        confidence = config.confidence_level

    if not np.isfinite(f_statistic) or df_between < 1 or df_within < 1:
        return np.nan, np.nan

    n_total = df_between + df_within + 1
    tail = (1 - confidence) / 2

    def cdf_at(nc: float) -> float:
        if nc == 0:
            return float(stats.f.cdf(f_statistic, df_between, df_within))
        return float(stats.ncf.cdf(f_statistic, df_between, df_within, nc))

    def solve(target: float) -> float:
        # cdf_at is decreasing in the noncentrality parameter
        if cdf_at(0.0) <= target:
            return 0.0
        upper = max(10.0, f_statistic * df_between * 2)
        while cdf_at(upper) > target:
            upper *= 2
        return float(optimize.brentq(lambda nc: cdf_at(nc) - target, 0.0, upper))

    lambda_low = solve(1 - tail)
    lambda_high = solve(tail)
    return lambda_low / (lambda_low + n_total), lambda_high / (lambda_high + n_total)


def one_way_anova(
    df: pd.DataFrame,
    group_col: str,
    value_col: str | None = None,
    confidence: float | None = None,
) -> AnovaResult:
    """One-way ANOVA of an outcome on a grouping factor.

    Fits ``value ~ C(group)`` by OLS and reads the type II ANOVA table.

    Args:
        df: Data containing the grouping and outcome columns
        group_col: Grouping factor
        value_col: Outcome column (default from config: Rel_Avg_Score)
        confidence: Confidence level for the eta-squared CI

    Returns:
        AnovaResult with the sum-of-squares breakdown and effect size

    """
    if value_col is None:
        value_col = config.outcome

    model = ols(f"{value_col} ~ C({group_col})", data=df).fit()
    table = anova_lm(model, typ=2)

    effect_row = table.loc[f"C({group_col})"]
    residual_row = table.loc["Residual"]

    ss_between = float(effect_row["sum_sq"])
    ss_within = float(residual_row["sum_sq"])
    ss_total = ss_between + ss_within
    df_between = int(effect_row["df"])
    df_within = int(residual_row["df"])
    f_statistic = float(effect_row["F"])

    eta_squared = ss_between / ss_total if ss_total > 0 else np.nan
    ci_low, ci_high = eta_squared_ci(f_statistic, df_between, df_within, confidence=confidence)

    return AnovaResult(
        factor=group_col,
        ss_between=ss_between,
        ss_within=ss_within,
        ss_total=ss_total,
        df_between=df_between,
        df_within=df_within,
        ms_between=ss_between / df_between if df_between > 0 else np.nan,
        ms_within=ss_within / df_within if df_within > 0 else np.nan,
        f_statistic=f_statistic,
        p_value=float(effect_row["PR(>F)"]),
        eta_squared=eta_squared,
        eta_squared_ci_low=ci_low,
        eta_squared_ci_high=ci_high,
    )


def comparable_samples(
    df: pd.DataFrame, group_col: str, value_col: str | None = None
) -> dict[str, np.ndarray]:
    """Group samples with enough values for a within-group variance.

    Levels with fewer than ``statistical.min_samples.t_interval`` values are
    left out of the pairwise comparisons and the variance test.
    """
    return {
        level: s
        for level, s in group_samples(df, group_col, value_col).items()
        if len(s) >= config.min_sample_t_interval
    }


def tukey_hsd(
    df: pd.DataFrame,
    group_col: str,
    value_col: str | None = None,
    confidence: float | None = None,
    alpha: float | None = None,
) -> pd.DataFrame:
    """All-pairs Tukey honestly-significant-difference comparisons.

    Args:
        df: Data containing the grouping and outcome columns
        group_col: Grouping factor
        value_col: Outcome column (default from config: Rel_Avg_Score)
        confidence: Confidence level of the simultaneous intervals
        alpha: Significance level for the reject flag

    Returns:
        DataFrame with columns group1, group2, meandiff (group2 - group1),
        p_adj, ci_lower, ci_upper and reject, one row per pair in factor order
        among the levels with at least two values (empty when fewer than two
        such levels remain)

    """
    if confidence is None:
        confidence = config.confidence_level
    if alpha is None:
        alpha = config.alpha

    columns = ["group1", "group2", "meandiff", "p_adj", "ci_lower", "ci_upper", "reject"]
    samples = comparable_samples(df, group_col, value_col)
    if len(samples) < 2:
        return pd.DataFrame(columns=columns)

    levels = list(samples)
    result = stats.tukey_hsd(*samples.values())
    ci = result.confidence_interval(confidence_level=confidence)

    rows = []
    for i in range(len(levels)):
        for j in range(i + 1, len(levels)):
            # scipy reports mean_i - mean_j; flip so meandiff reads group2 - group1
            p_adj = float(result.pvalue[i, j])
            rows.append(
                {
                    "group1": levels[i],
                    "group2": levels[j],
                    "meandiff": float(-result.statistic[i, j]),
                    "p_adj": p_adj,
                    "ci_lower": float(-ci.high[i, j]),
                    "ci_upper": float(-ci.low[i, j]),
                    "reject": p_adj < alpha,
                }
            )

    return pd.DataFrame(rows, columns=columns)


def pairwise_unadjusted(
    df: pd.DataFrame, group_col: str, value_col: str | None = None
) -> pd.DataFrame:
    """Unadjusted pairwise t tests using the pooled ANOVA error term.

    Same error term and degrees of freedom as Tukey HSD, without the
    family-wise correction, so each p-value is a lower bound for the
    corresponding Tukey adjusted p-value.

    Levels with a single value are skipped, as in tukey_hsd().

    Returns:
        DataFrame with columns group1, group2, t_statistic and p_value

    """
    columns = ["group1", "group2", "t_statistic", "p_value"]
    samples = comparable_samples(df, group_col, value_col)
    if len(samples) < 2:
        return pd.DataFrame(columns=columns)

    levels = list(samples)
    n_total = sum(len(s) for s in samples.values())
    df_within = n_total - len(levels)
    ss_within = sum(float(((s - s.mean()) ** 2).sum()) for s in samples.values())
    mse = ss_within / df_within

    rows = []
    for i in range(len(levels)):
        for j in range(i + 1, len(levels)):
            a, b = samples[levels[i]], samples[levels[j]]
            se = np.sqrt(mse * (1 / len(a) + 1 / len(b)))
            t_stat = (b.mean() - a.mean()) / se
            rows.append(
                {
                    "group1": levels[i],
                    "group2": levels[j],
                    "t_statistic": float(t_stat),
                    "p_value": float(2 * stats.t.sf(abs(t_stat), df_within)),
                }
            )

    return pd.DataFrame(rows, columns=columns)


def levene_test(
    df: pd.DataFrame, group_col: str, value_col: str | None = None
) -> tuple[float, float]:
    """Levene's test (median-centred) for homogeneity of variance across groups.

    Returns:
        Tuple of (W statistic, p-value); (NaN, NaN) with fewer than two groups
        of at least two values

    """
    samples = list(comparable_samples(df, group_col, value_col).values())
    if len(samples) < 2:
        return np.nan, np.nan
    statistic, pvalue = stats.levene(*samples, center="median")
    return float(statistic), float(pvalue)


def shapiro_wilk(data: pd.Series | np.ndarray) -> tuple[float, float]:
    """Perform Shapiro-Wilk normality test.

    Applied to ANOVA residuals to check the normality assumption.

    Args:
        data: Sample data to test for normality

    Returns:
        Tuple of (W statistic, p-value)
        - W close to 1 suggests normality
        - p > alpha means normality cannot be rejected

    """
    data_array = np.asarray(data, dtype=float)

    if len(data_array) < config.min_sample_normality:
        logger.warning(
            f"Shapiro-Wilk test requires n >= {config.min_sample_normality}, "
            f"got n={len(data_array)}. Returning NaN."
        )
        return np.nan, np.nan

    statistic, pvalue = stats.shapiro(data_array)
    return float(statistic), float(pvalue)
