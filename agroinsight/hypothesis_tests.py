"""
Hypothesis Testing Module for AgroInsight v1.0
==============================================
Two-sample and paired t-tests, one-way ANOVA, Pearson correlation, simple
linear regression, confidence intervals and one-sample t-tests.

All functions are pure. Malformed input raises StatisticalInputError.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Sequence, Tuple, Union

import numpy as np
import scipy.stats as stats
import statsmodels.api as sm

from agroinsight.config import StatisticalInputError

GroupsInput = Union[Mapping[str, Sequence[float]], Sequence[Tuple[str, Sequence[float]]]]


@dataclass(frozen=True)
class TTestResult:
    statistic: float
    p_value: float
    degrees_of_freedom: int
    mean_difference: float
    confidence_interval: Tuple[float, float]
    significant: bool
    effect_size: float
    interpretation: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'statistic': self.statistic,
            'p_value': self.p_value,
            'degrees_of_freedom': self.degrees_of_freedom,
            'mean_difference': self.mean_difference,
            'confidence_interval': list(self.confidence_interval),
            'significant': self.significant,
            'effect_size': self.effect_size,
            'interpretation': self.interpretation,
        }


@dataclass(frozen=True)
class GroupStatistics:
    name: str
    mean: float
    std_dev: float
    count: int

    def to_dict(self) -> Dict[str, Any]:
        return {'name': self.name, 'mean': self.mean, 'std_dev': self.std_dev, 'count': self.count}


@dataclass(frozen=True)
class ANOVAResult:
    f_statistic: float
    p_value: float
    df_between: int
    df_within: int
    significant: bool
    effect_size: float  # eta squared
    groups: Tuple[GroupStatistics, ...]
    interpretation: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'f_statistic': self.f_statistic,
            'p_value': self.p_value,
            'df_between': self.df_between,
            'df_within': self.df_within,
            'significant': self.significant,
            'effect_size': self.effect_size,
            'groups': [g.to_dict() for g in self.groups],
            'interpretation': self.interpretation,
        }


@dataclass(frozen=True)
class PearsonResult:
    coefficient: float
    p_value: float
    significant: bool
    strength: str
    direction: str
    n: int
    interpretation: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'coefficient': self.coefficient,
            'p_value': self.p_value,
            'significant': self.significant,
            'strength': self.strength,
            'direction': self.direction,
            'n': self.n,
            'interpretation': self.interpretation,
        }


@dataclass(frozen=True)
class RegressionResult:
    slope: float
    intercept: float
    r_squared: float
    p_value: float
    standard_error: float
    predictions: Tuple[float, ...]
    residuals: Tuple[float, ...]
    equation: str
    interpretation: str

    def predict(self, x: float) -> float:
        return self.slope * x + self.intercept

    def to_dict(self) -> Dict[str, Any]:
        return {
            'slope': self.slope,
            'intercept': self.intercept,
            'r_squared': self.r_squared,
            'p_value': self.p_value,
            'standard_error': self.standard_error,
            'predictions': list(self.predictions),
            'residuals': list(self.residuals),
            'equation': self.equation,
            'interpretation': self.interpretation,
        }


@dataclass(frozen=True)
class ConfidenceInterval:
    mean: float
    lower: float
    upper: float
    margin: float
    confidence_level: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            'mean': self.mean,
            'lower': self.lower,
            'upper': self.upper,
            'margin': self.margin,
            'confidence_level': self.confidence_level,
        }


@dataclass(frozen=True)
class OneSampleTTestResult:
    statistic: float
    p_value: float
    degrees_of_freedom: int
    mean: float
    reference_value: float
    significant: bool
    confidence_interval: ConfidenceInterval
    interpretation: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'statistic': self.statistic,
            'p_value': self.p_value,
            'degrees_of_freedom': self.degrees_of_freedom,
            'mean': self.mean,
            'reference_value': self.reference_value,
            'significant': self.significant,
            'confidence_interval': self.confidence_interval.to_dict(),
            'interpretation': self.interpretation,
        }


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _as_array(values: Iterable[float], label: str) -> np.ndarray:
    try:
        array = np.asarray(list(values), dtype=float)
    except (TypeError, ValueError) as e:
        raise StatisticalInputError(f"{label} must contain only numbers: {e}") from e
    if not np.all(np.isfinite(array)):
        raise StatisticalInputError(f"{label} contains NaN or infinite values")
    return array


def _require_same_length(a: np.ndarray, b: np.ndarray):
    if len(a) != len(b):
        raise StatisticalInputError(
            f"Inputs must have the same length (got {len(a)} and {len(b)})"
        )


def _ratio(numerator: float, denominator: float) -> float:
    """numerator / denominator, with 0/0 -> 0 and x/0 -> +-inf"""
    if denominator == 0:
        return 0.0 if numerator == 0 else math.copysign(math.inf, numerator)
    return numerator / denominator


def _two_tailed_p(t_statistic: float, df: int) -> float:
    return float(2 * stats.t.sf(abs(t_statistic), df))


def effect_size_label(d: float) -> str:
    """Cohen's d magnitude label"""
    d = abs(d)
    if d < 0.2:
        return 'trivial'
    if d < 0.5:
        return 'small'
    if d < 0.8:
        return 'medium'
    return 'large'


def correlation_strength(r: float) -> str:
    """Strength label for a correlation coefficient"""
    abs_r = abs(r)
    if abs_r < 0.2:
        return 'very weak'
    if abs_r < 0.4:
        return 'weak'
    if abs_r < 0.6:
        return 'moderate'
    if abs_r < 0.8:
        return 'strong'
    return 'very strong'


def correlation_direction(r: float) -> str:
    if r > 0:
        return 'positive'
    if r < 0:
        return 'negative'
    return 'none'


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------

def independent_t_test(group1: Sequence[float], group2: Sequence[float],
                       alpha: float = 0.05) -> TTestResult:
    """Two-sample t-test with pooled variance"""
    a = _as_array(group1, 'group1')
    b = _as_array(group2, 'group2')
    n1, n2 = len(a), len(b)
    if n1 < 2 or n2 < 2:
        raise StatisticalInputError("Each group needs at least 2 observations")

    mean1, mean2 = float(a.mean()), float(b.mean())
    mean_diff = mean1 - mean2
    df = n1 + n2 - 2

    pooled_variance = ((n1 - 1) * a.var(ddof=1) + (n2 - 1) * b.var(ddof=1)) / df
    standard_error = math.sqrt(pooled_variance * (1 / n1 + 1 / n2))

    t_stat = _ratio(mean_diff, standard_error)
    p_value = _two_tailed_p(t_stat, df)

    margin = float(stats.t.ppf(1 - alpha / 2, df)) * standard_error
    cohens_d = _ratio(mean_diff, math.sqrt(pooled_variance))
    significant = p_value < alpha

    interpretation = "Independent samples t-test: "
    if significant:
        interpretation += f"significant difference between groups (p = {p_value:.4f}). "
        interpretation += f"Group 1 (M = {mean1:.2f}) is "
        interpretation += "greater than " if mean_diff > 0 else "less than "
        interpretation += f"group 2 (M = {mean2:.2f})."
    else:
        interpretation += f"no significant difference between groups (p = {p_value:.4f})."
    interpretation += f" Effect size: {effect_size_label(cohens_d)}."

    return TTestResult(
        statistic=t_stat,
        p_value=p_value,
        degrees_of_freedom=df,
        mean_difference=mean_diff,
        confidence_interval=(mean_diff - margin, mean_diff + margin),
        significant=significant,
        effect_size=cohens_d,
        interpretation=interpretation,
    )


def paired_t_test(before: Sequence[float], after: Sequence[float],
                  alpha: float = 0.05) -> TTestResult:
    """Paired t-test on the differences before - after"""
    x = _as_array(before, 'before')
    y = _as_array(after, 'after')
    _require_same_length(x, y)
    n = len(x)
    if n < 2:
        raise StatisticalInputError("Paired t-test needs at least 2 pairs")

    differences = x - y
    mean_diff = float(differences.mean())
    std_diff = float(differences.std(ddof=1))
    standard_error = std_diff / math.sqrt(n)
    df = n - 1

    t_stat = _ratio(mean_diff, standard_error)
    p_value = _two_tailed_p(t_stat, df)
    margin = float(stats.t.ppf(1 - alpha / 2, df)) * standard_error
    effect_size = _ratio(mean_diff, std_diff)
    significant = p_value < alpha

    if significant:
        interpretation = (
            f"Paired t-test: significant difference between before (M = {x.mean():.2f}) "
            f"and after (M = {y.mean():.2f}), p = {p_value:.4f}."
        )
    else:
        interpretation = f"Paired t-test: no significant difference (p = {p_value:.4f})."

    return TTestResult(
        statistic=t_stat,
        p_value=p_value,
        degrees_of_freedom=df,
        mean_difference=mean_diff,
        confidence_interval=(mean_diff - margin, mean_diff + margin),
        significant=significant,
        effect_size=effect_size,
        interpretation=interpretation,
    )


def _normalize_groups(groups: GroupsInput) -> List[Tuple[str, np.ndarray]]:
    items = groups.items() if isinstance(groups, Mapping) else groups
    normalized = []
    for item in items:
        try:
            name, values = item
        except (TypeError, ValueError) as e:
            raise StatisticalInputError(
                "Groups must be a mapping name -> values or a sequence of (name, values)"
            ) from e
        normalized.append((str(name), _as_array(values, f"group '{name}'")))
    return normalized


def one_way_anova(groups: GroupsInput, alpha: float = 0.05) -> ANOVAResult:
    """One-way analysis of variance.

    Args:
        groups: mapping of group name -> values, or a sequence of (name, values)
        alpha: significance level
    """
    named = _normalize_groups(groups)
    k = len(named)
    if k < 2:
        raise StatisticalInputError("ANOVA needs at least 2 groups")
    for name, values in named:
        if len(values) == 0:
            raise StatisticalInputError(f"Group '{name}' has no observations")

    all_values = np.concatenate([values for _, values in named])
    total = len(all_values)
    df_between = k - 1
    df_within = total - k
    if df_within < 1:
        raise StatisticalInputError("ANOVA needs more observations than groups")

    grand_mean = all_values.mean()
    ssb = float(sum(len(v) * (v.mean() - grand_mean) ** 2 for _, v in named))
    ssw = float(sum(((v - v.mean()) ** 2).sum() for _, v in named))

    f_stat = _ratio(ssb / df_between, ssw / df_within)
    p_value = float(stats.f.sf(f_stat, df_between, df_within))
    eta_squared = ssb / (ssb + ssw) if (ssb + ssw) > 0 else 0.0
    significant = p_value < alpha

    group_stats = tuple(
        GroupStatistics(
            name=name,
            mean=float(values.mean()),
            std_dev=float(values.std(ddof=1)) if len(values) > 1 else 0.0,
            count=len(values),
        )
        for name, values in named
    )

    if significant:
        interpretation = (
            f"One-way ANOVA: significant difference between groups "
            f"(F({df_between}, {df_within}) = {f_stat:.2f}, p = {p_value:.4f})."
        )
    else:
        interpretation = f"One-way ANOVA: no significant difference between groups (p = {p_value:.4f})."
    interpretation += f" Effect size (eta squared) = {eta_squared:.3f}."

    return ANOVAResult(
        f_statistic=f_stat,
        p_value=p_value,
        df_between=df_between,
        df_within=df_within,
        significant=significant,
        effect_size=eta_squared,
        groups=group_stats,
        interpretation=interpretation,
    )


def pearson_correlation(x: Sequence[float], y: Sequence[float],
                        alpha: float = 0.05) -> PearsonResult:
    """Pearson product-moment correlation with a two-tailed t-test.

    Raises:
        StatisticalInputError: mismatched lengths, fewer than 3 points, or
            a constant input (correlation undefined)
    """
    a = _as_array(x, 'x')
    b = _as_array(y, 'y')
    _require_same_length(a, b)
    n = len(a)
    if n < 3:
        raise StatisticalInputError("Pearson correlation needs at least 3 observations")
    if np.ptp(a) == 0 or np.ptp(b) == 0:
        raise StatisticalInputError("Correlation is undefined for a constant input")

    r, p_value = stats.pearsonr(a, b)
    r = float(np.clip(r, -1.0, 1.0))
    p_value = 0.0 if abs(r) == 1.0 else float(p_value)

    strength = correlation_strength(r)
    direction = correlation_direction(r)
    significant = p_value < alpha

    interpretation = f"Pearson correlation: r = {r:.3f}, {strength} {direction} correlation. "
    if significant:
        interpretation += f"Statistically significant (p = {p_value:.4f})."
    else:
        interpretation += f"Not significant (p = {p_value:.4f})."

    return PearsonResult(
        coefficient=r,
        p_value=p_value,
        significant=significant,
        strength=strength,
        direction=direction,
        n=n,
        interpretation=interpretation,
    )


def _format_equation(slope: float, intercept: float) -> str:
    sign = '-' if intercept < 0 else '+'
    return f"y = {slope:.3f}x {sign} {abs(intercept):.3f}"


def linear_regression(x: Sequence[float], y: Sequence[float]) -> RegressionResult:
    """Simple ordinary least squares regression of y on x"""
    a = _as_array(x, 'x')
    b = _as_array(y, 'y')
    _require_same_length(a, b)
    n = len(a)
    if n < 3:
        raise StatisticalInputError("Linear regression needs at least 3 observations")
    if np.ptp(a) == 0:
        raise StatisticalInputError("Linear regression needs a non-constant x")

    with np.errstate(divide='ignore', invalid='ignore'):
        model = sm.OLS(b, sm.add_constant(a)).fit()
        intercept, slope = (float(v) for v in model.params)
        slope_p = float(model.pvalues[1])

    predictions = model.fittedvalues
    residuals = b - predictions
    sse = float((residuals ** 2).sum())
    sst = float(((b - b.mean()) ** 2).sum())
    r_squared = 1 - sse / sst if sst > 0 else 0.0
    standard_error = math.sqrt(sse / (n - 2))

    # a perfect fit gives a zero standard error for the slope
    if math.isnan(slope_p):
        slope_p = 1.0 if slope == 0 else 0.0

    equation = _format_equation(slope, intercept)
    interpretation = (
        f"Linear regression: {equation}. R² = {r_squared:.3f} "
        f"({r_squared * 100:.1f}% of variance explained). "
    )
    if slope_p < 0.05:
        interpretation += f"The model is statistically significant (p = {slope_p:.4f})."
    else:
        interpretation += f"The model is not statistically significant (p = {slope_p:.4f})."

    return RegressionResult(
        slope=slope,
        intercept=intercept,
        r_squared=r_squared,
        p_value=slope_p,
        standard_error=standard_error,
        predictions=tuple(float(v) for v in predictions),
        residuals=tuple(float(v) for v in residuals),
        equation=equation,
        interpretation=interpretation,
    )


def confidence_interval(values: Sequence[float],
                        confidence_level: float = 0.95) -> ConfidenceInterval:
    """t-based confidence interval for the mean"""
    if not 0 < confidence_level < 1:
        raise StatisticalInputError("confidence_level must be between 0 and 1")
    data = _as_array(values, 'values')
    n = len(data)
    if n < 2:
        raise StatisticalInputError("A confidence interval needs at least 2 values")

    mean = float(data.mean())
    sem = float(data.std(ddof=1)) / math.sqrt(n)
    margin = float(stats.t.ppf((1 + confidence_level) / 2, n - 1)) * sem

    return ConfidenceInterval(
        mean=mean,
        lower=mean - margin,
        upper=mean + margin,
        margin=margin,
        confidence_level=confidence_level,
    )


def one_sample_t_test(values: Sequence[float], reference_value: float,
                      alpha: float = 0.05) -> OneSampleTTestResult:
    """Test whether a sample mean differs from a reference value"""
    data = _as_array(values, 'values')
    n = len(data)
    if n < 2:
        raise StatisticalInputError("One-sample t-test needs at least 2 values")

    mean = float(data.mean())
    sem = float(data.std(ddof=1)) / math.sqrt(n)
    df = n - 1
    t_stat = _ratio(mean - reference_value, sem)
    p_value = _two_tailed_p(t_stat, df)
    significant = p_value < alpha

    if significant:
        relation = 'above' if mean > reference_value else 'below'
        interpretation = (
            f"One-sample t-test: mean {mean:.2f} is significantly {relation} "
            f"the reference {reference_value:.2f} (p = {p_value:.4f})."
        )
    else:
        interpretation = (
            f"One-sample t-test: mean {mean:.2f} does not differ significantly "
            f"from the reference {reference_value:.2f} (p = {p_value:.4f})."
        )

    return OneSampleTTestResult(
        statistic=t_stat,
        p_value=p_value,
        degrees_of_freedom=df,
        mean=mean,
        reference_value=float(reference_value),
        significant=significant,
        confidence_interval=confidence_interval(data, 1 - alpha),
        interpretation=interpretation,
    )
