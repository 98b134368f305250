"""
Results processing for SimPower.

This module defines the per-trial and per-scenario records produced by the
estimator and turns raw rejection flags into power estimates.
"""

import collections.abc
from dataclasses import dataclass
from typing import Any, Iterator, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from scipy.stats import norm

from ..errors import InvalidArgument
from .scenarios import Scenario


@dataclass(frozen=True)
class Trial:
    """Outcome of one synthetic dataset.

    Attributes:
        index: Zero-based trial index within its scenario.
        rejected: Whether the decision rule rejected the null hypothesis.
        statistic: Test statistic reported by the rule (``nan`` if the rule
            returned a bare boolean).
        p_value: p-value reported by the rule, when it computes one.
    """

    index: int
    rejected: bool
    statistic: float = float("nan")
    p_value: Optional[float] = None


@dataclass(frozen=True)
class PowerEstimate:
    """Empirical rejection rate for one scenario.

    Attributes:
        scenario: The scenario the trials were drawn from.
        parameter: The scenario's identifying value (``scenario.value``).
        power: ``n_rejected / n_trials``, always within ``[0, 1]``.
        n_trials: Number of trials aggregated.
        n_rejected: Number of trials in which the null was rejected.
    """

    scenario: Scenario
    parameter: Any
    power: float
    n_trials: int
    n_rejected: int

    @property
    def standard_error(self) -> float:
        """Binomial Monte Carlo standard error ``sqrt(p(1-p)/n)``."""
        return float(np.sqrt(self.power * (1.0 - self.power) / self.n_trials))

    def confidence_interval(self, level: float = 0.95) -> Tuple[float, float]:
        """Wilson score interval for the true power.

        Stays inside ``[0, 1]`` and behaves sensibly when the estimate is
        exactly 0 or 1, where the Wald interval collapses.
        """
        if not 0 < level < 1:
            raise InvalidArgument(f"level must be between 0 and 1, got {level}")
        z = norm.ppf(0.5 + level / 2)
        n = self.n_trials
        p = self.power
        denom = 1 + z**2 / n
        centre = (p + z**2 / (2 * n)) / denom
        half = z * np.sqrt(p * (1 - p) / n + z**2 / (4 * n**2)) / denom
        return float(max(0.0, centre - half)), float(min(1.0, centre + half))


def aggregate_trials(scenario: Scenario, rejections: Sequence[bool]) -> PowerEstimate:
    """Collapse per-trial rejection flags into a ``PowerEstimate``.

    Raises:
        InvalidArgument: If *rejections* is empty.
    """
    flags = np.asarray(rejections, dtype=bool)
    n_trials = int(flags.size)
    if n_trials == 0:
        raise InvalidArgument("Cannot aggregate zero trials", scenario=scenario)
    n_rejected = int(np.count_nonzero(flags))
    return PowerEstimate(
        scenario=scenario,
        parameter=scenario.value,
        power=n_rejected / n_trials,
        n_trials=n_trials,
        n_rejected=n_rejected,
    )


class SweepResult(collections.abc.Sequence):
    """Ordered power estimates for a sweep, in scenario input order."""

    def __init__(self, estimates: Sequence[PowerEstimate]):
        self._estimates: Tuple[PowerEstimate, ...] = tuple(estimates)

    def __len__(self) -> int:
        return len(self._estimates)

    def __getitem__(self, index):
        if isinstance(index, slice):
            return SweepResult(self._estimates[index])
        return self._estimates[index]

    def __iter__(self) -> Iterator[PowerEstimate]:
        return iter(self._estimates)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SweepResult):
            return self._estimates == other._estimates
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    @property
    def parameters(self) -> List[Any]:
        return [e.parameter for e in self._estimates]

    @property
    def powers(self) -> List[float]:
        return [e.power for e in self._estimates]

    def first_achieved(self, target_power: float) -> Optional[Any]:
        """First parameter value whose power reaches *target_power* (0–1 scale).

        Returns ``None`` when no scenario in the sweep reaches the target.
        """
        if not 0 <= target_power <= 1:
            raise InvalidArgument(f"target_power must be on the 0-1 scale, got {target_power}")
        for estimate in self._estimates:
            if estimate.power >= target_power:
                return estimate.parameter
        return None

    def to_frame(self, level: float = 0.95) -> pd.DataFrame:
        """Tabulate the sweep as a ``pandas.DataFrame``, one row per scenario."""
        rows = []
        for e in self._estimates:
            lower, upper = e.confidence_interval(level)
            rows.append(
                {
                    "scenario": e.scenario.name,
                    "parameter": e.parameter,
                    "power": e.power,
                    "n_trials": e.n_trials,
                    "n_rejected": e.n_rejected,
                    "standard_error": e.standard_error,
                    "ci_lower": lower,
                    "ci_upper": upper,
                }
            )
        columns = ["scenario", "parameter", "power", "n_trials", "n_rejected", "standard_error", "ci_lower", "ci_upper"]
        return pd.DataFrame(rows, columns=columns)

    def __repr__(self):
        pairs = ", ".join(f"{e.parameter}: {e.power:.3f}" for e in self._estimates)
        return f"SweepResult({pairs})"
