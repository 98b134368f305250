"""
Progress tracking for SimPower runs.

A run is an ordered list of scenarios, each made of the same number of
trials. ``ProgressReporter`` follows both levels: it forwards throttled
``(trials_done, total_trials)`` updates to a callback and hands each
finished scenario's ``PowerEstimate`` to an optional ``on_scenario`` hook,
keeping the finished estimates so that a cancelled sweep still shows what
it had computed.
"""

import sys
from typing import Any, Callable, List, Optional

LINE_WIDTH = 48


class SimulationCancelled(Exception):
    """Raised when a run is cancelled through ``cancel_check``."""

    pass


class ProgressReporter:
    """Counts trials and scenarios for one ``estimate_power`` or ``sweep`` call.

    Args:
        num_trials: Trials per scenario.
        n_scenarios: Number of scenarios in the run.
        callback: Optional ``callback(trials_done, total_trials)``, called at
            most once per *update_every* trials and always at scenario ends.
        on_scenario: Optional ``on_scenario(estimate)`` called with each
            scenario's ``PowerEstimate`` as it completes.
        update_every: Trial granularity of *callback*. Defaults to about
            200 updates over the whole run.

    Attributes:
        completed: Estimates of finished scenarios, in completion order
            (input order for both sequential and parallel sweeps).
        active: Scenario currently running, or ``None`` between scenarios.
    """

    def __init__(
        self,
        num_trials: int,
        n_scenarios: int = 1,
        callback: Optional[Callable[[int, int], None]] = None,
        on_scenario: Optional[Callable[[Any], None]] = None,
        update_every: Optional[int] = None,
    ):
        self.num_trials = num_trials
        self.n_scenarios = n_scenarios
        self.total = num_trials * n_scenarios
        self._callback = callback
        self._on_scenario = on_scenario
        self.update_every = update_every if update_every is not None else max(1, self.total // 200)
        self.completed: List[Any] = []
        self.active = None
        self._scenario_trials = 0

    @property
    def current(self) -> int:
        """Trials finished so far, across scenarios."""
        return len(self.completed) * self.num_trials + self._scenario_trials

    @property
    def scenarios_done(self) -> int:
        return len(self.completed)

    @property
    def fraction(self) -> float:
        return self.current / self.total if self.total else 1.0

    def _notify(self):
        if self._callback is not None:
            self._callback(min(self.current, self.total), self.total)

    def start(self):
        """Reset all counters and report ``0 / total``."""
        self.completed = []
        self.active = None
        self._scenario_trials = 0
        self._notify()

    def begin_scenario(self, scenario):
        self.active = scenario
        self._scenario_trials = 0

    def advance(self, n: int = 1):
        """Record *n* finished trials of the active scenario."""
        before = self.current
        self._scenario_trials += n
        if before // self.update_every != self.current // self.update_every:
            self._notify()

    def end_scenario(self, estimate):
        """Close the active scenario with its estimate.

        Trials not reported through ``advance`` (parallel workers report
        whole scenarios only) are counted here.
        """
        self._scenario_trials = 0
        self.active = None
        self.completed.append(estimate)
        self._notify()
        if self._on_scenario is not None:
            self._on_scenario(estimate)

    def finish(self):
        """Report ``total / total`` if the last update fell short of it."""
        if self.current < self.total:
            self._scenario_trials = self.total - self.current
            self._notify()


class PrintReporter:
    """Console progress on stderr.

    ``Progress: 45.2% (723/1600 trials)`` while trials run, plus one line per
    finished scenario with its power.
    """

    def __call__(self, current: int, total: int):
        if total <= 0:
            return
        sys.stderr.write(f"\rProgress: {100.0 * current / total:5.1f}% ({current}/{total} trials)")
        if current >= total:
            sys.stderr.write("\n")
        sys.stderr.flush()

    def scenario_done(self, estimate):
        line = f"{estimate.scenario.name}: power={estimate.power:.3f} ({estimate.n_rejected}/{estimate.n_trials} rejected)"
        sys.stderr.write(f"\r{line:<{LINE_WIDTH}}\n")
        sys.stderr.flush()


class TqdmReporter:
    """tqdm progress bar (lazy import) showing the latest scenario's power.

    Usage::

        from simpower.progress import TqdmReporter
        analysis.find_sample_size(20, 200, by=20, progress_callback=TqdmReporter())
    """

    def __init__(self, **tqdm_kwargs):
        self._tqdm_kwargs = tqdm_kwargs
        self._bar = None

    def __call__(self, current: int, total: int):
        from tqdm import tqdm

        if self._bar is None:
            self._bar = tqdm(total=total, unit="trial", **self._tqdm_kwargs)

        delta = current - self._bar.n
        if delta > 0:
            self._bar.update(delta)

        if current >= total:
            self._bar.close()
            self._bar = None

    def scenario_done(self, estimate):
        if self._bar is not None:
            self._bar.set_postfix_str(f"{estimate.scenario.name} power={estimate.power:.3f}")
