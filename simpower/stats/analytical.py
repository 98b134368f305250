"""
Closed-form power for the two-sample mean comparison.

Reference values for checking simulated estimates. ``delta`` is the raw
difference in means and ``sd`` the common standard deviation.
"""

import numpy as np
from scipy.stats import nct, norm
from scipy.stats import t as t_dist


def normal_approx_two_sample_power(delta, sd, n_per_group, alpha=0.05):
    """
    Normal-approximation power of a two-sided two-sample test.

    Power = Phi(lambda - z) + Phi(-lambda - z) with
    lambda = |delta| * sqrt(n / 2) / sd and z = z_{1 - alpha/2}.
    """
    ncp = abs(delta) * np.sqrt(n_per_group / 2.0) / sd
    z_crit = norm.ppf(1 - alpha / 2)
    return float(norm.cdf(ncp - z_crit) + norm.cdf(-ncp - z_crit))


def t_two_sample_power(delta, sd, n_per_group, alpha=0.05):
    """
    Exact power of the pooled two-sided two-sample t-test.

    Uses the non-central t distribution with df = 2n - 2 and
    non-centrality delta * sqrt(n / 2) / sd.
    """
    df = 2 * n_per_group - 2
    ncp = delta * np.sqrt(n_per_group / 2.0) / sd
    t_crit = t_dist.ppf(1 - alpha / 2, df)
    return float(1 - nct.cdf(t_crit, df, ncp) + nct.cdf(-t_crit, df, ncp))
