"""
Descriptive Statistics Module for AgroInsight v1.0
==================================================
Numeric summaries (central tendency, dispersion, quartiles, IQR outliers,
skewness) and categorical summaries (distribution, frequencies, entropy).
"""

import math
from collections import Counter
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Tuple

import numpy as np
from scipy import stats

from agroinsight.config import Config, InsufficientDataError
from agroinsight.hypothesis_tests import ConfidenceInterval, confidence_interval
from agroinsight.logging_config import get_statistics_logger
from agroinsight.value_parsing import NumberParsingRule

logger = get_statistics_logger()


@dataclass(frozen=True)
class NumericSummary:
    """Descriptive statistics of a numeric column"""
    count: int
    valid_count: int
    missing_count: int
    mean: float
    median: float
    mode: Optional[float]
    std_dev: float
    variance: float
    min: float
    max: float
    range: float
    q1: float
    q3: float
    iqr: float
    cv: float
    skewness: Optional[float]
    outliers: Tuple[float, ...]

    @property
    def is_constant(self) -> bool:
        return self.std_dev == 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'count': self.count,
            'valid_count': self.valid_count,
            'missing_count': self.missing_count,
            'mean': self.mean,
            'median': self.median,
            'mode': self.mode,
            'std_dev': self.std_dev,
            'variance': self.variance,
            'min': self.min,
            'max': self.max,
            'range': self.range,
            'q1': self.q1,
            'q3': self.q3,
            'iqr': self.iqr,
            'cv': self.cv,
            'skewness': self.skewness,
            'outliers': list(self.outliers),
        }


@dataclass(frozen=True)
class CategoricalSummary:
    """Frequency statistics of a categorical column"""
    count: int
    valid_count: int
    missing_count: int
    unique_values: int
    distribution: Dict[str, int]
    frequencies: Dict[str, float]
    most_common: Optional[str]
    least_common: Optional[str]
    entropy: Optional[float]  # bits; None when no value is present

    def to_dict(self) -> Dict[str, Any]:
        return {
            'count': self.count,
            'valid_count': self.valid_count,
            'missing_count': self.missing_count,
            'unique_values': self.unique_values,
            'distribution': dict(self.distribution),
            'frequencies': dict(self.frequencies),
            'most_common': self.most_common,
            'least_common': self.least_common,
            'entropy': self.entropy,
        }


@dataclass(frozen=True)
class NumericSummaryWithCI:
    """Numeric summary together with a t-based interval for the mean"""
    summary: NumericSummary
    confidence_interval: ConfidenceInterval

    def significantly_different_from(self, value: float) -> bool:
        """True when ``value`` falls outside the interval"""
        return value < self.confidence_interval.lower or value > self.confidence_interval.upper

    def to_dict(self) -> Dict[str, Any]:
        data = self.summary.to_dict()
        data['confidence_interval'] = self.confidence_interval.to_dict()
        return data


def _mode(values: np.ndarray) -> Optional[float]:
    """Smallest of the most frequent values, None when all values are distinct"""
    uniques, counts = np.unique(values, return_counts=True)
    top = counts.max()
    if top == 1:
        return None
    # np.unique returns sorted values
    return float(uniques[counts == top][0])


def _skewness(values: np.ndarray, std_dev: float) -> Optional[float]:
    if len(values) <= 2:
        return None
    if std_dev == 0:
        return 0.0
    # bias-adjusted Fisher-Pearson coefficient
    return float(stats.skew(values, bias=False))


class DescriptiveStatsEngine:
    """Computes column summaries"""

    def __init__(self, config: Optional[Config] = None):
        self.config = config or Config()
        self.parsing_rule = NumberParsingRule.from_config(self.config.parsing)

    def numeric_summary(self, values: Iterable[Any]) -> NumericSummary:
        """Summarize a numeric column.

        Unparseable and missing cells are counted in ``missing_count``.

        Raises:
            InsufficientDataError: when no cell parses as a number
        """
        raw = list(values)
        numbers = np.asarray(self.parsing_rule.parse_numbers(raw), dtype=float)
        n = len(numbers)
        if n == 0:
            raise InsufficientDataError("No valid numeric values to summarize")

        mean = float(numbers.mean())
        variance = float(numbers.var(ddof=1)) if n > 1 else 0.0
        std_dev = math.sqrt(variance)
        q1, median, q3 = (float(q) for q in np.percentile(numbers, [25, 50, 75]))
        iqr = q3 - q1

        multiplier = self.config.statistics.outlier_iqr_multiplier
        lower_fence = q1 - multiplier * iqr
        upper_fence = q3 + multiplier * iqr
        outliers = tuple(float(v) for v in numbers if v < lower_fence or v > upper_fence)

        minimum = float(numbers.min())
        maximum = float(numbers.max())

        summary = NumericSummary(
            count=len(raw),
            valid_count=n,
            missing_count=len(raw) - n,
            mean=mean,
            median=median,
            mode=_mode(numbers),
            std_dev=std_dev,
            variance=variance,
            min=minimum,
            max=maximum,
            range=maximum - minimum,
            q1=q1,
            q3=q3,
            iqr=iqr,
            cv=(std_dev / abs(mean) * 100) if mean != 0 else 0.0,
            skewness=_skewness(numbers, std_dev),
            outliers=outliers,
        )
        logger.debug(f"Numeric summary over {n} values, {len(outliers)} outliers")
        return summary

    def numeric_summary_with_ci(self, values: Iterable[Any],
                                confidence_level: float = 0.95) -> NumericSummaryWithCI:
        """Numeric summary plus a confidence interval for the mean.

        A single valid value gives a zero-width interval at that value.
        """
        raw = list(values)
        summary = self.numeric_summary(raw)
        if summary.valid_count == 1:
            interval = ConfidenceInterval(
                mean=summary.mean, lower=summary.mean, upper=summary.mean,
                margin=0.0, confidence_level=confidence_level,
            )
        else:
            interval = confidence_interval(self.parsing_rule.parse_numbers(raw), confidence_level)
        return NumericSummaryWithCI(summary=summary, confidence_interval=interval)

    def categorical_summary(self, values: Iterable[Any]) -> CategoricalSummary:
        """Summarize a categorical column (values are trimmed text).

        Entropy is 0 exactly when one distinct value is present and None for a
        column without any present value.
        """
        raw = list(values)
        clean = [
            str(v).strip() for v in raw
            if not self.parsing_rule.is_missing(v)
        ]
        n = len(clean)

        # Counter keeps first-seen order for ties
        distribution = dict(Counter(clean))
        frequencies = {key: count / n * 100 for key, count in distribution.items()}

        most_common = least_common = None
        if distribution:
            top = max(distribution.values())
            bottom = min(distribution.values())
            most_common = next(k for k, c in distribution.items() if c == top)
            least_common = next(k for k, c in distribution.items() if c == bottom)

        entropy = None if n == 0 else 0.0
        for count in distribution.values():
            p = count / n
            entropy -= p * math.log2(p)
        # a single category gives -1 * log2(1) == -0.0
        entropy = abs(entropy) if len(distribution) == 1 else entropy

        return CategoricalSummary(
            count=len(raw),
            valid_count=n,
            missing_count=len(raw) - n,
            unique_values=len(distribution),
            distribution=distribution,
            frequencies=frequencies,
            most_common=most_common,
            least_common=least_common,
            entropy=entropy,
        )
