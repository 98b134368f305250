"""SimPower - Monte Carlo power estimation.

Estimates statistical power by repeatedly drawing synthetic samples from a
parameterised data-generating process, applying a fixed-threshold test, and
reporting the rejection rate, for one scenario or a sweep of scenarios.

Example:
    >>> from simpower import PowerAnalysis
    >>>
    >>> analysis = PowerAnalysis.two_sample(mean_a=8, mean_b=7, sd=2)
    >>> analysis.find_power(sample_size=20)
    >>>
    >>> analysis.find_sample_size(from_size=10, to_size=150, by=10)
"""

from importlib.metadata import version as _get_version

from .core import PowerEstimate, Scenario, SweepResult, Trial, estimate_power, scenario_grid, scenario_range, sweep
from .errors import FitFailure, InvalidArgument, PowerAnalysisError, SamplingFailure
from .model import PowerAnalysis
from .progress import PrintReporter, ProgressReporter, SimulationCancelled, TqdmReporter
from .stats import (
    Decision,
    FixedThresholdTest,
    LinearModelTest,
    OneWayAnova,
    TwoSampleTTest,
    k_sample_normal,
    linear_model,
    two_sample_normal,
)

__version__ = _get_version("SimPower")

__all__ = [
    "PowerAnalysis",
    # Estimator
    "estimate_power",
    "sweep",
    "Scenario",
    "scenario_grid",
    "scenario_range",
    "Trial",
    "PowerEstimate",
    "SweepResult",
    # Generators and rules
    "two_sample_normal",
    "k_sample_normal",
    "linear_model",
    "Decision",
    "TwoSampleTTest",
    "FixedThresholdTest",
    "OneWayAnova",
    "LinearModelTest",
    # Errors
    "PowerAnalysisError",
    "InvalidArgument",
    "SamplingFailure",
    "FitFailure",
    "SimulationCancelled",
    # Progress
    "ProgressReporter",
    "PrintReporter",
    "TqdmReporter",
]
