"""
Simulation execution for SimPower.

This module contains the Monte Carlo power estimator: it repeatedly draws a
synthetic sample for a scenario, applies a decision rule, and reports the
rejection rate. ``sweep`` repeats that for an ordered list of scenarios.
"""

import warnings
from typing import Any, Callable, Iterator, List, Optional, Sequence

import numpy as np

from ..errors import FitFailure, InvalidArgument, PowerAnalysisError, SamplingFailure
from ..progress import SimulationCancelled
from ..utils.validators import _validate_num_trials, _validate_seed
from .results import PowerEstimate, SweepResult, Trial, aggregate_trials
from .scenarios import Scenario

DEFAULT_SEED = 2137

SampleGenerator = Callable[[Scenario, np.random.Generator], Any]
DecisionRule = Callable[[Any], Any]


def trial_generator(entropy: int, trial_index: int) -> np.random.Generator:
    """Independent generator for one trial, derived from ``(entropy, trial_index)`` only."""
    return np.random.default_rng(np.random.SeedSequence(entropy, spawn_key=(trial_index,)))


def _resolve_entropy(seed: Optional[int]) -> int:
    """Return *seed* itself, or fresh OS entropy when *seed* is ``None``."""
    if seed is None:
        return int(np.random.SeedSequence().entropy)
    return int(seed)


def _as_trial(index: int, outcome: Any) -> Trial:
    """Convert a decision rule's return value into a ``Trial`` record.

    Raises:
        InvalidArgument: *outcome* is neither a boolean nor carries a
            ``rejected`` attribute (e.g. a raw scipy test result, which is
            always truthy).
    """
    if isinstance(outcome, (bool, np.bool_)):
        return Trial(index=index, rejected=bool(outcome))
    if not hasattr(outcome, "rejected"):
        raise InvalidArgument(
            f"Decision rule must return a bool or an object with a 'rejected' attribute, got {type(outcome).__name__}"
        )
    statistic = getattr(outcome, "statistic", float("nan"))
    p_value = getattr(outcome, "p_value", None)
    return Trial(index=index, rejected=bool(outcome.rejected), statistic=float(statistic), p_value=p_value)


class TrialRunner:
    """Executes the Monte Carlo trial loop for a single scenario.

    Each trial gets its own ``numpy.random.Generator`` seeded from the
    top-level seed plus the trial index, so trial *i* sees the same random
    stream in every scenario and under any parallel layout. A failing trial
    aborts the run; there is no skipping and no retry, since either would
    bias the estimate.
    """

    def __init__(self, num_trials: int, seed: Optional[int] = None, entropy: Optional[int] = None):
        """Initialise the trial runner.

        Args:
            num_trials: Number of trials per scenario (>= 1).
            seed: Top-level seed. ``None`` draws fresh entropy once, at
                construction, and reuses it for every scenario run by this
                runner.
            entropy: Pre-resolved entropy (overrides *seed*); used to hand
                the parent's stream to worker processes.

        Raises:
            InvalidArgument: If *num_trials* or *seed* is invalid.
        """
        _validate_num_trials(num_trials).raise_if_invalid()
        _validate_seed(seed).raise_if_invalid()
        self.num_trials = int(num_trials)
        self.seed = seed
        self.entropy = int(entropy) if entropy is not None else _resolve_entropy(seed)

    def iter_trials(
        self,
        generate_sample: SampleGenerator,
        decision_rule: DecisionRule,
        scenario: Scenario,
        progress=None,
        cancel_check: Optional[Callable[[], bool]] = None,
    ) -> Iterator[Trial]:
        """Yield one ``Trial`` per repetition, in trial-index order.

        Raises:
            SamplingFailure: *generate_sample* failed.
            FitFailure: *decision_rule* failed.
            SimulationCancelled: *cancel_check* returned ``True``.
        """
        for trial_index in range(self.num_trials):
            if cancel_check is not None and cancel_check():
                raise SimulationCancelled("Simulation cancelled by user")

            rng = trial_generator(self.entropy, trial_index)

            try:
                sample = generate_sample(scenario, rng)
            except (ImportError, SimulationCancelled):
                raise
            except PowerAnalysisError as e:
                raise e.attach(scenario, trial_index)
            except Exception as e:
                raise SamplingFailure(f"Sample generation failed: {type(e).__name__}: {e}", scenario, trial_index) from e

            try:
                trial = _as_trial(trial_index, decision_rule(sample))
            except (ImportError, SimulationCancelled):
                raise
            except PowerAnalysisError as e:
                raise e.attach(scenario, trial_index)
            except Exception as e:
                raise FitFailure(f"Decision rule failed: {type(e).__name__}: {e}", scenario, trial_index) from e

            if progress is not None:
                progress.advance(1)

            yield trial

    def run(
        self,
        generate_sample: SampleGenerator,
        decision_rule: DecisionRule,
        scenario: Scenario,
        progress=None,
        cancel_check: Optional[Callable[[], bool]] = None,
    ) -> PowerEstimate:
        """Run all trials for *scenario* and aggregate them."""
        _check_scenario(scenario)
        if progress is not None:
            progress.begin_scenario(scenario)
        rejections = [
            trial.rejected
            for trial in self.iter_trials(generate_sample, decision_rule, scenario, progress=progress, cancel_check=cancel_check)
        ]
        estimate = aggregate_trials(scenario, rejections)
        if progress is not None:
            progress.end_scenario(estimate)
        return estimate


def _check_scenario(scenario: Any) -> None:
    if not isinstance(scenario, Scenario):
        raise InvalidArgument(f"Expected a Scenario, got {type(scenario).__name__}")
    scenario.value  # raises InvalidArgument when the axis value is missing


def estimate_power(
    generate_sample: SampleGenerator,
    decision_rule: DecisionRule,
    scenario: Scenario,
    num_trials: int,
    seed: Optional[int] = None,
    progress=None,
    cancel_check: Optional[Callable[[], bool]] = None,
) -> PowerEstimate:
    """Estimate power for one scenario by Monte Carlo simulation.

    Args:
        generate_sample: ``generate_sample(scenario, rng)`` returning one
            synthetic dataset drawn with the given generator.
        decision_rule: ``decision_rule(sample)`` returning a ``bool`` or a
            ``Decision``; truthy means the null hypothesis is rejected.
        scenario: Data-generating parameters; never mutated.
        num_trials: Number of independent trials (>= 1).
        seed: Top-level seed; identical inputs and seed give bit-identical
            results. ``None`` for fresh entropy.
        progress: Optional ``ProgressReporter`` advanced once per trial and
            closed with the finished estimate.
        cancel_check: Optional callable returning ``True`` to abort.

    Returns:
        ``PowerEstimate`` with ``power = rejections / num_trials``.

    Raises:
        InvalidArgument: ``num_trials < 1``, bad seed, or malformed scenario.
        SamplingFailure: A sample could not be drawn.
        FitFailure: The decision rule failed on a sample.
        SimulationCancelled: *cancel_check* returned ``True``.
    """
    runner = TrialRunner(num_trials, seed)
    return runner.run(generate_sample, decision_rule, scenario, progress=progress, cancel_check=cancel_check)


def _run_scenario(generate_sample, decision_rule, scenario, num_trials, entropy):
    """Worker entry point for parallel sweeps."""
    return TrialRunner(num_trials, entropy=entropy).run(generate_sample, decision_rule, scenario)


def sweep(
    generate_sample: SampleGenerator,
    decision_rule: DecisionRule,
    scenarios: Sequence[Scenario],
    num_trials: int,
    seed: Optional[int] = None,
    n_jobs: int = 1,
    progress=None,
    cancel_check: Optional[Callable[[], bool]] = None,
) -> SweepResult:
    """Estimate power for each scenario, preserving input order.

    Every scenario reuses the same per-trial seed stream, so neighbouring
    points of a sweep differ only by their parameters.

    Args:
        generate_sample: See ``estimate_power``.
        decision_rule: See ``estimate_power``.
        scenarios: Ordered scenarios (e.g. from ``scenario_range``).
        num_trials: Trials per scenario (>= 1).
        seed: Top-level seed.
        n_jobs: Number of worker processes (joblib). ``1`` runs
            sequentially; ``-1`` uses all cores. Results are identical to
            the sequential run.
        progress: Optional ``ProgressReporter`` built for *num_trials* and
            ``len(scenarios)``; each finished scenario's estimate is handed
            to ``end_scenario`` in input order.
        cancel_check: Optional callable returning ``True`` to abort. Polled
            between scenarios (and between trials when sequential).

    Returns:
        ``SweepResult`` whose order matches *scenarios*.

    Raises:
        InvalidArgument: Empty *scenarios*, bad trial count or seed.
        SamplingFailure, FitFailure: A trial failed; no partial result.
        SimulationCancelled: *cancel_check* returned ``True``.
    """
    scenarios = list(scenarios)
    if not scenarios:
        raise InvalidArgument("sweep requires at least one scenario")
    runner = TrialRunner(num_trials, seed)
    for scenario in scenarios:
        _check_scenario(scenario)

    if n_jobs != 1 and len(scenarios) > 1:
        try:
            return SweepResult(_sweep_parallel(runner, generate_sample, decision_rule, scenarios, n_jobs, progress, cancel_check))
        except (PowerAnalysisError, SimulationCancelled):
            raise
        except Exception as e:
            warnings.warn(f"Parallel execution failed ({e}). Falling back to sequential.", UserWarning, stacklevel=2)
            if progress is not None:
                progress.start()

    estimates: List[PowerEstimate] = []
    for scenario in scenarios:
        if cancel_check is not None and cancel_check():
            raise SimulationCancelled("Simulation cancelled by user")
        estimates.append(runner.run(generate_sample, decision_rule, scenario, progress=progress, cancel_check=cancel_check))
    return SweepResult(estimates)


def _sweep_parallel(runner, generate_sample, decision_rule, scenarios, n_jobs, progress, cancel_check) -> List[PowerEstimate]:
    from joblib import Parallel, delayed

    results = Parallel(n_jobs=n_jobs, backend="loky", verbose=0, return_as="generator")(
        delayed(_run_scenario)(generate_sample, decision_rule, scenario, runner.num_trials, runner.entropy) for scenario in scenarios
    )
    estimates = []
    for estimate in results:
        if cancel_check is not None and cancel_check():
            raise SimulationCancelled("Simulation cancelled by user")
        estimates.append(estimate)
        if progress is not None:
            progress.end_scenario(estimate)
    return estimates
