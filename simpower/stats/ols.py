"""
OLS decision rule for SimPower.

Fits a linear model by QR decomposition and tests the overall F statistic
or individual coefficients (t-tests), with optional multiple comparison
corrections when several coefficients are tested together.
"""

from functools import lru_cache
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np
from scipy.stats import f as f_dist
from scipy.stats import t as t_dist

from ..errors import FitFailure, InvalidArgument
from ..utils.validators import _validate_alpha, _validate_correction_method
from .decision import Decision, exceeds
from .sampling import RegressionData

FLOAT_NEAR_ZERO = 1e-15
RANK_TOLERANCE = 1e-10
CONSTANT_OUTCOME_SS = 1e-10

CORRECTION_CODES = {
    None: 0,
    "bonferroni": 1,
    "benjamini_hochberg": 2,
    "bh": 2,
    "fdr": 2,
    "holm": 3,
}


def _correction_code(correction: Optional[str]) -> int:
    if correction is None:
        return 0
    return CORRECTION_CODES[correction.lower().replace("-", "_").replace(" ", "_")]


@lru_cache(maxsize=256)
def compute_critical_values(alpha: float, dfn: int, dfd: int, n_targets: int, correction_method: int) -> Tuple[float, float, Tuple[float, ...]]:
    """Pre-compute critical F and t values for OLS significance testing.

    Cached so that a sweep only pays for each degrees-of-freedom combination
    once; every trial then compares its statistics against these thresholds.

    Args:
        alpha: Significance level.
        dfn: Numerator degrees of freedom (number of predictors).
        dfd: Denominator degrees of freedom (``n - p - 1``).
        n_targets: Number of individual coefficients being tested.
        correction_method: Encoded correction (0=none, 1=Bonferroni,
            2=Benjamini-Hochberg, 3=Holm).

    Returns:
        Tuple of ``(f_crit, t_crit, correction_t_crits)`` where
        *correction_t_crits* holds the per-rank critical t-values for the
        chosen correction.
    """
    f_crit = float(f_dist.ppf(1 - alpha, dfn, dfd)) if dfn > 0 else np.inf
    t_crit = float(t_dist.ppf(1 - alpha / 2, dfd))

    m = n_targets
    if m == 0:
        return f_crit, t_crit, ()

    if correction_method == 1:  # Bonferroni
        crits = [t_dist.ppf(1 - alpha / (2 * m), dfd)] * m
    elif correction_method == 2:  # FDR (Benjamini-Hochberg)
        crits = [t_dist.ppf(1 - (k + 1) / m * alpha / 2, dfd) for k in range(m)]
    elif correction_method == 3:  # Holm
        crits = [t_dist.ppf(1 - alpha / (2 * (m - k)), dfd) for k in range(m)]
    else:
        crits = [t_crit] * m

    return f_crit, t_crit, tuple(float(c) for c in crits)


def _apply_correction(t_abs: np.ndarray, crits: Sequence[float], correction_method: int) -> np.ndarray:
    """Return corrected significance flags for the target coefficients."""
    n_targets = len(t_abs)
    if correction_method in (0, 1):
        return np.array([exceeds(t_abs[i], crits[i]) for i in range(n_targets)], dtype=bool)

    order = np.argsort(-t_abs, kind="stable")
    corrected = np.zeros(n_targets, dtype=bool)

    if correction_method == 2:
        # Benjamini-Hochberg step-up: largest k whose sorted |t| clears its threshold
        last_sig = -1
        for k in range(n_targets):
            if exceeds(t_abs[order[k]], crits[k]):
                last_sig = k
        corrected[order[: last_sig + 1]] = True
    else:
        # Holm step-down
        for k in range(n_targets):
            if not exceeds(t_abs[order[k]], crits[k]):
                break
            corrected[order[k]] = True

    return corrected


def _adjusted_p_values(p_values: np.ndarray, correction_method: int) -> np.ndarray:
    """Return multiplicity-adjusted p-values matching ``_apply_correction``.

    A target is flagged by ``_apply_correction`` exactly when its adjusted
    p-value is below ``alpha``: Bonferroni scales by ``m``, Holm takes the
    running maximum of ``(m - k) p_(k)`` and Benjamini-Hochberg the running
    minimum (from the largest rank down) of ``m p_(k) / (k + 1)``.
    """
    m = len(p_values)
    if correction_method == 0:
        return p_values.copy()
    if correction_method == 1:
        return np.minimum(1.0, m * p_values)

    order = np.argsort(p_values, kind="stable")
    ranked = p_values[order]
    ranks = np.arange(m)
    if correction_method == 2:
        adjusted = np.minimum.accumulate((ranked * m / (ranks + 1))[::-1])[::-1]
    else:
        adjusted = np.maximum.accumulate(ranked * (m - ranks))

    result = np.empty(m)
    result[order] = np.minimum(1.0, adjusted)
    return result


class LinearModelTest:
    """Significance test on a fitted linear model.

    Args:
        target: ``"overall"`` for the model F-test, a coefficient name, or a
            list of coefficient names.
        alpha: Significance level.
        correction: Multiple comparison correction for several targets
            (``None``, ``"bonferroni"``, ``"holm"``, ``"benjamini-hochberg"``).
        require: ``"all"`` to reject only when every target is significant,
            ``"any"`` to reject when at least one is.

    Calling the rule with a ``RegressionData`` returns a ``Decision``. For
    a single coefficient the reported statistic is ``|t|``; for several
    targets it is the smallest (``"all"``) or largest (``"any"``) ``|t|``,
    and the p-value is the largest (``"all"``) or smallest (``"any"``)
    correction-adjusted p-value, so ``p_value < alpha`` agrees with
    ``rejected``. A constant outcome under the overall F-test is a
    non-rejection.

    Raises (when called):
        FitFailure: If the design matrix is rank deficient or leaves no
            residual degrees of freedom.
    """

    def __init__(
        self,
        target: Union[str, Sequence[str]] = "overall",
        alpha: float = 0.05,
        correction: Optional[str] = None,
        require: str = "all",
    ):
        _validate_alpha(alpha).raise_if_invalid()
        _validate_correction_method(correction).raise_if_invalid()
        if require not in ("all", "any"):
            raise InvalidArgument(f"require must be 'all' or 'any', got {require!r}")

        self.targets: List[str] = [target] if isinstance(target, str) else list(target)
        if not self.targets:
            raise InvalidArgument("At least one target must be given")
        if "overall" in self.targets and len(self.targets) > 1:
            raise InvalidArgument("'overall' cannot be combined with coefficient targets")

        self.alpha = float(alpha)
        self.correction = correction
        self.require = require
        self._correction_method = _correction_code(correction)

    @property
    def is_overall(self) -> bool:
        return self.targets == ["overall"]

    def __call__(self, data: RegressionData) -> Decision:
        X, y = data.X, data.y
        n, p = X.shape
        X_int = np.column_stack((np.ones(n), X))

        Q, R = np.linalg.qr(X_int)
        diag = np.abs(np.diag(R))
        if diag.size == 0 or np.any(diag <= RANK_TOLERANCE * max(1.0, diag.max())):
            raise FitFailure(f"Design matrix is rank deficient (columns: {', '.join(data.columns)})")

        dof = n - (p + 1)
        if dof <= 0:
            raise FitFailure(f"No residual degrees of freedom (n={n}, parameters={p + 1})")

        n_targets = 0 if self.is_overall else len(self.targets)
        f_crit, t_crit, correction_crits = compute_critical_values(self.alpha, p, dof, n_targets, self._correction_method)

        ss_tot = float(np.sum((y - np.mean(y)) ** 2))
        if self.is_overall and (p == 0 or ss_tot <= CONSTANT_OUTCOME_SS):
            # nothing to explain
            return Decision(rejected=False, statistic=0.0, critical_value=f_crit, p_value=1.0)

        beta_all = np.linalg.solve(R, Q.T @ y)
        residuals = y - X_int @ beta_all
        ss_res = float(residuals @ residuals)
        mse = ss_res / dof
        if mse <= FLOAT_NEAR_ZERO:
            raise FitFailure("Residual variance is zero; the model fits the sample exactly")

        if self.is_overall:
            return self._overall(ss_tot, ss_res, mse, p, dof, f_crit)

        indices = [data.column_index(name) for name in self.targets]

        # Standard errors from the diagonal of (R'R)^-1 = R^-1 R^-T
        R_inv = np.linalg.solve(R, np.eye(p + 1))
        se = np.sqrt(mse * np.sum(R_inv**2, axis=1))
        t_abs = np.array([abs(beta_all[i + 1] / se[i + 1]) for i in indices])

        p_values = 2 * t_dist.sf(t_abs, dof)
        if n_targets == 1:
            flags = np.array([exceeds(t_abs[0], t_crit)])
            critical = t_crit
        else:
            flags = _apply_correction(t_abs, correction_crits, self._correction_method)
            critical = float(max(correction_crits)) if self.require == "all" else float(min(correction_crits))
            p_values = _adjusted_p_values(p_values, self._correction_method)

        if self.require == "all":
            rejected = bool(np.all(flags))
            statistic = float(np.min(t_abs))
            p_value = float(np.max(p_values))
        else:
            rejected = bool(np.any(flags))
            statistic = float(np.max(t_abs))
            p_value = float(np.min(p_values))
        return Decision(rejected=rejected, statistic=statistic, critical_value=critical, p_value=p_value)

    def _overall(self, ss_tot, ss_res, mse, p, dof, f_crit) -> Decision:
        f_stat = ((ss_tot - ss_res) / p) / mse
        p_value = float(f_dist.sf(f_stat, p, dof))
        return Decision(rejected=exceeds(f_stat, f_crit), statistic=float(f_stat), critical_value=f_crit, p_value=p_value)

    def __repr__(self):
        target = self.targets[0] if len(self.targets) == 1 else self.targets
        return f"LinearModelTest(target={target!r}, alpha={self.alpha}, correction={self.correction!r}, require={self.require!r})"
