"""Core components for the SimPower framework.

Re-exports the foundational building blocks:

- ``Scenario``, ``scenario_grid``, ``scenario_range``: data-generating
  configurations and sweep enumeration.
- ``TrialRunner``, ``estimate_power``, ``sweep``: Monte Carlo execution.
- ``Trial``, ``PowerEstimate``, ``SweepResult``, ``aggregate_trials``:
  result records.
"""

from .results import PowerEstimate, SweepResult, Trial, aggregate_trials
from .scenarios import Scenario, scenario_grid, scenario_range
from .simulation import DEFAULT_SEED, TrialRunner, estimate_power, sweep, trial_generator

__all__ = [
    # Scenarios
    "Scenario",
    "scenario_grid",
    "scenario_range",
    # Simulation
    "TrialRunner",
    "estimate_power",
    "sweep",
    "trial_generator",
    "DEFAULT_SEED",
    # Results
    "Trial",
    "PowerEstimate",
    "SweepResult",
    "aggregate_trials",
]
