"""
SimPower - Monte Carlo power estimation.

This module provides the ``PowerAnalysis`` class, a configurable front-end
over ``estimate_power`` and ``sweep``.
"""

import warnings
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Sequence, Union

from .core import (
    DEFAULT_SEED,
    PowerEstimate,
    Scenario,
    SweepResult,
    estimate_power,
    scenario_grid,
    scenario_range,
    sweep,
)
from .core.scenarios import DEFAULT_AXIS
from .progress import ProgressReporter
from .stats.ols import LinearModelTest
from .stats.sampling import linear_model, two_sample_normal
from .stats.ttest import TwoSampleTTest
from .utils.validators import (
    _validate_alpha,
    _validate_num_trials,
    _validate_parallel_settings,
    _validate_power,
    _validate_seed,
)

DEFAULT_ALPHA = 0.05
DEFAULT_N_TRIALS = 1600
DEFAULT_TARGET_POWER = 80.0


class PowerAnalysis:
    """Monte Carlo power analysis for one data-generating process and test.

    Holds the sample generator, the decision rule and the parameters shared
    by every scenario, together with the run configuration. All ``set_*``
    methods validate their input and return ``self`` for chaining.

    Attributes:
        seed: Top-level random seed (default: 2137). ``None`` for fresh
            entropy on every run.
        power: Target power in percent (default: 80.0), used by
            ``find_sample_size``.
        alpha: Significance level of the built-in decision rules created by
            the factory constructors (default: 0.05).
        n_simulations: Trials per scenario (default: 1600).
        parallel: Whether sweeps run scenarios in parallel (default: False).
        n_cores: Number of worker processes when parallel.

    Example:
        >>> analysis = PowerAnalysis.two_sample(mean_a=8, mean_b=7, sd=2)
        >>> analysis.set_simulations(1000).find_power(sample_size=20).power
        >>> analysis.find_sample_size(from_size=10, to_size=150, by=10)
    """

    def __init__(
        self,
        generate_sample: Callable,
        decision_rule: Callable,
        base_params: Optional[Mapping[str, Any]] = None,
        axis: str = DEFAULT_AXIS,
    ):
        """Create an analysis.

        Args:
            generate_sample: ``generate_sample(scenario, rng)`` drawing one
                synthetic dataset.
            decision_rule: ``decision_rule(sample)`` returning ``bool`` or
                ``Decision``.
            base_params: Parameters shared by every scenario.
            axis: Default sweep axis.
        """
        import multiprocessing as mp

        self.generate_sample = generate_sample
        self.decision_rule = decision_rule
        self.base_params: Dict[str, Any] = dict(base_params or {})
        self.axis = axis

        self.seed: Optional[int] = DEFAULT_SEED
        self.power = DEFAULT_TARGET_POWER
        self.alpha = DEFAULT_ALPHA
        self.n_simulations = DEFAULT_N_TRIALS

        self.parallel = False
        self.n_cores = max(1, (mp.cpu_count() or 1) // 2)

    # =========================================================================
    # Factory constructors
    # =========================================================================

    @classmethod
    def two_sample(
        cls,
        mean_a: float,
        mean_b: float,
        sd: float,
        alpha: float = DEFAULT_ALPHA,
        equal_var: bool = True,
        **params,
    ) -> "PowerAnalysis":
        """Two-group mean comparison with a two-sided t-test.

        ``sample_size`` (per group) is supplied per run; extra keyword
        parameters (e.g. ``sd_b``) are passed to ``two_sample_normal``.
        """
        analysis = cls(
            two_sample_normal,
            TwoSampleTTest(alpha=alpha, equal_var=equal_var),
            {"mean_a": mean_a, "mean_b": mean_b, "sd": sd, **params},
        )
        analysis.alpha = float(alpha)
        return analysis

    @classmethod
    def linear_model(
        cls,
        coefficients: Mapping[str, float],
        predictors: Mapping[str, Any],
        target: Union[str, Sequence[str]] = "overall",
        noise_sd: float = 1.0,
        alpha: float = DEFAULT_ALPHA,
        correction: Optional[str] = None,
        require: str = "all",
    ) -> "PowerAnalysis":
        """Linear model with coefficient (or overall F) significance as the test."""
        analysis = cls(
            linear_model,
            LinearModelTest(target=target, alpha=alpha, correction=correction, require=require),
            {"coefficients": dict(coefficients), "predictors": dict(predictors), "noise_sd": noise_sd},
        )
        analysis.alpha = float(alpha)
        return analysis

    # =========================================================================
    # Configuration methods
    # =========================================================================

    def set_seed(self, seed: Optional[int] = None):
        """Set random seed for reproducibility.

        Args:
            seed: Non-negative integer up to 3,000,000,000.
                Pass ``None`` to enable fully random seeding.

        Returns:
            self: For method chaining.

        Raises:
            InvalidArgument: If *seed* is not an integer in range or ``None``.
        """
        _validate_seed(seed).raise_if_invalid()
        self.seed = seed
        return self

    def set_power(self, power: float):
        """Set the target power in percent (0–100) used by ``find_sample_size``."""
        _validate_power(power).raise_if_invalid()
        self.power = float(power)
        return self

    def set_simulations(self, n_simulations: int):
        """Set the number of trials per scenario.

        More trials give a more precise estimate at the cost of runtime.
        Counts below 1000 are accepted with a warning.

        Raises:
            InvalidArgument: If *n_simulations* is not a positive integer.
        """
        result = _validate_num_trials(n_simulations)
        result.raise_if_invalid()
        for warning in result.warnings:
            warnings.warn(warning, UserWarning, stacklevel=2)
        self.n_simulations = int(n_simulations)
        return self

    def set_parallel(self, enable: bool = True, n_cores: Optional[int] = None):
        """Enable or disable parallel sweeps (joblib, one process per scenario).

        Falls back to sequential processing with a warning if ``joblib`` is
        unavailable.

        Args:
            enable: ``True`` for parallel sweeps, ``False`` for sequential.
            n_cores: Number of worker processes. Defaults to ``cpu_count // 2``.

        Returns:
            self: For method chaining.
        """
        if enable is False:
            self.parallel, self.n_cores = False, 1
            return self

        try:
            import joblib  # noqa: F401
        except ImportError:
            warnings.warn("joblib not available; continuing with sequential processing.", UserWarning, stacklevel=2)
            self.parallel = False
            return self

        settings, result = _validate_parallel_settings(enable, n_cores)
        result.raise_if_invalid()
        self.parallel, self.n_cores = settings
        return self

    def set_alpha(self, alpha: float):
        """Set the significance level and propagate it to the decision rule.

        Only rules exposing an ``alpha`` attribute (the built-in ones) are
        updated.
        """
        _validate_alpha(alpha).raise_if_invalid()
        self.alpha = float(alpha)
        if hasattr(self.decision_rule, "alpha"):
            self.decision_rule.alpha = self.alpha
        return self

    # =========================================================================
    # Analysis
    # =========================================================================

    def scenario(self, **overrides) -> Scenario:
        """Build a scenario from the base parameters plus *overrides*."""
        return Scenario.from_params(axis=self.axis, **{**self.base_params, **overrides})

    def find_power(
        self,
        sample_size: Optional[int] = None,
        progress_callback: Optional[Callable[[int, int], None]] = None,
        cancel_check: Optional[Callable[[], bool]] = None,
        **overrides,
    ) -> PowerEstimate:
        """Estimate power for a single scenario.

        Args:
            sample_size: Sample size for this run (per group for group
                comparisons); may be omitted if already in the base params.
            progress_callback: Optional ``(current, total)`` callable, e.g.
                ``PrintReporter()``.
            cancel_check: Optional callable returning ``True`` to abort.
            **overrides: Further scenario parameters for this run only.

        Returns:
            ``PowerEstimate`` for the scenario.
        """
        if sample_size is not None:
            overrides["sample_size"] = sample_size
        scenario = self.scenario(**overrides)

        reporter = self._reporter(progress_callback, 1)
        if reporter is not None:
            reporter.start()
        estimate = estimate_power(
            self.generate_sample,
            self.decision_rule,
            scenario,
            self.n_simulations,
            seed=self.seed,
            progress=reporter,
            cancel_check=cancel_check,
        )
        if reporter is not None:
            reporter.finish()
        return estimate

    def find_sample_size(
        self,
        from_size: int = 30,
        to_size: int = 200,
        by: int = 5,
        axis: str = "sample_size",
        progress_callback: Optional[Callable[[int, int], None]] = None,
        cancel_check: Optional[Callable[[], bool]] = None,
    ) -> SweepResult:
        """Sweep sample sizes ``from_size..to_size`` (inclusive) in steps of *by*.

        The first size reaching the target power is available as
        ``result.first_achieved(analysis.power / 100)``; a warning is issued
        when no size in the range reaches it.
        """
        scenarios = scenario_range(self.base_params, from_size, to_size, by, axis=axis)
        result = self._run_sweep(scenarios, progress_callback, cancel_check)
        if result.first_achieved(self.power / 100) is None:
            warnings.warn(
                f"Target power {self.power:.1f}% not reached for {axis} in [{from_size}, {to_size}]",
                UserWarning,
                stacklevel=2,
            )
        return result

    def power_curve(
        self,
        axis: str,
        values: Iterable[Any],
        progress_callback: Optional[Callable[[int, int], None]] = None,
        cancel_check: Optional[Callable[[], bool]] = None,
        **overrides,
    ) -> SweepResult:
        """Sweep an arbitrary parameter (e.g. ``mean_b`` or a noise level)."""
        scenarios = scenario_grid({**self.base_params, **overrides}, axis, values)
        return self._run_sweep(scenarios, progress_callback, cancel_check)

    # =========================================================================
    # Internal methods
    # =========================================================================

    def _reporter(self, progress_callback, n_scenarios) -> Optional[ProgressReporter]:
        if progress_callback is None or progress_callback is False:
            return None
        return ProgressReporter(
            self.n_simulations,
            n_scenarios,
            callback=progress_callback,
            on_scenario=getattr(progress_callback, "scenario_done", None),
        )

    def _run_sweep(self, scenarios, progress_callback, cancel_check) -> SweepResult:
        reporter = self._reporter(progress_callback, len(scenarios))
        if reporter is not None:
            reporter.start()
        result = sweep(
            self.generate_sample,
            self.decision_rule,
            scenarios,
            self.n_simulations,
            seed=self.seed,
            n_jobs=self.n_cores if self.parallel else 1,
            progress=reporter,
            cancel_check=cancel_check,
        )
        if reporter is not None:
            reporter.finish()
        return result

    def __repr__(self):
        return f"PowerAnalysis(rule={self.decision_rule!r}, n_simulations={self.n_simulations}, seed={self.seed})"
