"""
Group comparison decision rules.

- ``TwoSampleTTest``: Student (pooled) or Welch t-test against the
  critical value at ``alpha``.
- ``FixedThresholdTest``: Student t statistic against a fixed cut-off
  (``|t| > 1.96`` by default).
- ``OneWayAnova``: F-test across several groups.

All comparisons are strict: a statistic equal to its critical value does
not reject.
"""

from functools import lru_cache

import numpy as np
from scipy.stats import f as f_dist
from scipy.stats import t as t_dist

from ..errors import FitFailure, InvalidArgument
from ..utils.validators import _validate_alpha, _validate_positive
from .decision import Decision, exceeds
from .sampling import GroupedData, TwoSampleData

FLOAT_NEAR_ZERO = 1e-15


@lru_cache(maxsize=1024)
def _t_critical(alpha: float, df: float) -> float:
    return float(t_dist.ppf(1 - alpha / 2, df))


@lru_cache(maxsize=1024)
def _f_critical(alpha: float, dfn: int, dfd: int) -> float:
    return float(f_dist.ppf(1 - alpha, dfn, dfd))


def _t_statistic(group_a: np.ndarray, group_b: np.ndarray, equal_var: bool):
    """Return ``(t, df)`` for the difference ``mean(a) - mean(b)``."""
    n_a, n_b = len(group_a), len(group_b)
    if n_a < 2 or n_b < 2:
        raise FitFailure(f"Each group needs at least two observations (got {n_a} and {n_b})")

    var_a = np.var(group_a, ddof=1)
    var_b = np.var(group_b, ddof=1)
    diff = np.mean(group_a) - np.mean(group_b)

    if equal_var:
        df = n_a + n_b - 2
        pooled = ((n_a - 1) * var_a + (n_b - 1) * var_b) / df
        se = np.sqrt(pooled * (1.0 / n_a + 1.0 / n_b))
    else:
        va, vb = var_a / n_a, var_b / n_b
        se = np.sqrt(va + vb)
        if se > FLOAT_NEAR_ZERO:
            # Welch-Satterthwaite
            df = (va + vb) ** 2 / (va**2 / (n_a - 1) + vb**2 / (n_b - 1))
        else:
            df = n_a + n_b - 2

    if se <= FLOAT_NEAR_ZERO:
        raise FitFailure("Both groups have zero variance; the t statistic is undefined")

    return float(diff / se), float(df)


class TwoSampleTTest:
    """Two-sided two-sample t-test.

    Rejects when ``|t| > t_{1 - alpha/2, df}``. With ``equal_var=True``
    (default) the pooled Student test is used with ``df = n_a + n_b - 2``;
    otherwise Welch's test with Satterthwaite degrees of freedom.
    """

    def __init__(self, alpha: float = 0.05, equal_var: bool = True):
        _validate_alpha(alpha).raise_if_invalid()
        self.alpha = float(alpha)
        self.equal_var = equal_var

    def __call__(self, data: TwoSampleData) -> Decision:
        t_stat, df = _t_statistic(data.group_a, data.group_b, self.equal_var)
        t_abs = abs(t_stat)
        t_crit = _t_critical(self.alpha, df)
        return Decision(
            rejected=exceeds(t_abs, t_crit),
            statistic=t_abs,
            critical_value=t_crit,
            p_value=float(2 * t_dist.sf(t_abs, df)),
        )

    def __repr__(self):
        return f"TwoSampleTTest(alpha={self.alpha}, equal_var={self.equal_var})"


class FixedThresholdTest:
    """Student t statistic compared against a fixed critical value.

    The normal-approximation shortcut ``|t| > 1.96``; close to
    ``TwoSampleTTest(alpha=0.05)`` for large groups and slightly liberal for
    small ones. No p-value is reported.
    """

    def __init__(self, critical: float = 1.96, equal_var: bool = True):
        _validate_positive(critical, "critical").raise_if_invalid()
        self.critical = float(critical)
        self.equal_var = equal_var

    def __call__(self, data: TwoSampleData) -> Decision:
        t_stat, _ = _t_statistic(data.group_a, data.group_b, self.equal_var)
        t_abs = abs(t_stat)
        return Decision(rejected=exceeds(t_abs, self.critical), statistic=t_abs, critical_value=self.critical)

    def __repr__(self):
        return f"FixedThresholdTest(critical={self.critical})"


class OneWayAnova:
    """One-way ANOVA F-test; rejects when ``F > F_{1 - alpha, k-1, N-k}``."""

    def __init__(self, alpha: float = 0.05):
        _validate_alpha(alpha).raise_if_invalid()
        self.alpha = float(alpha)

    def __call__(self, data: GroupedData) -> Decision:
        groups = data.groups
        k = len(groups)
        if k < 2:
            raise InvalidArgument(f"ANOVA needs at least two groups, got {k}")
        sizes = np.array([len(g) for g in groups])
        n_total = int(sizes.sum())
        dfn, dfd = k - 1, n_total - k
        if dfd <= 0:
            raise FitFailure(f"No within-group degrees of freedom (N={n_total}, groups={k})")

        grand_mean = np.concatenate(groups).mean()
        ss_between = float(sum(len(g) * (g.mean() - grand_mean) ** 2 for g in groups))
        ss_within = float(sum(((g - g.mean()) ** 2).sum() for g in groups))
        if ss_within <= FLOAT_NEAR_ZERO:
            raise FitFailure("Within-group variance is zero; the F statistic is undefined")

        f_stat = (ss_between / dfn) / (ss_within / dfd)
        f_crit = _f_critical(self.alpha, dfn, dfd)
        return Decision(
            rejected=exceeds(f_stat, f_crit),
            statistic=float(f_stat),
            critical_value=f_crit,
            p_value=float(f_dist.sf(f_stat, dfn, dfd)),
        )

    def __repr__(self):
        return f"OneWayAnova(alpha={self.alpha})"
