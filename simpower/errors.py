"""
Error types for SimPower.

Every failure inside a power estimate aborts the whole call. Errors raised
while running a trial carry the offending scenario and trial index so the
caller can see exactly which draw broke.
"""

from typing import Any, Optional

__all__ = [
    "PowerAnalysisError",
    "InvalidArgument",
    "SamplingFailure",
    "FitFailure",
]


class PowerAnalysisError(Exception):
    """Base class for all SimPower errors.

    Attributes:
        scenario: The ``Scenario`` being evaluated when the error occurred,
            or ``None`` if the error was raised outside the trial loop.
        trial_index: Zero-based index of the failing trial, or ``None``.
    """

    def __init__(self, message: str = "", scenario: Optional[Any] = None, trial_index: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.scenario = scenario
        self.trial_index = trial_index

    def attach(self, scenario: Any, trial_index: Optional[int] = None) -> "PowerAnalysisError":
        """Record where the error happened unless it is already known."""
        if self.scenario is None:
            self.scenario = scenario
        if self.trial_index is None:
            self.trial_index = trial_index
        return self

    def __reduce__(self):
        # keep scenario and trial index when crossing process boundaries
        return (self.__class__, (self.message, self.scenario, self.trial_index))

    def __str__(self) -> str:
        location = []
        if self.scenario is not None:
            location.append(f"scenario={getattr(self.scenario, 'name', self.scenario)!s}")
        if self.trial_index is not None:
            location.append(f"trial={self.trial_index}")
        if location:
            return f"{self.message} [{', '.join(location)}]"
        return self.message


class InvalidArgument(PowerAnalysisError, ValueError):
    """Bad trial count, malformed scenario, or invalid configuration."""

    pass


class SamplingFailure(PowerAnalysisError):
    """The data-generating step could not produce a usable sample."""

    pass


class FitFailure(PowerAnalysisError):
    """The decision rule's model fit was singular or otherwise degenerate."""

    pass
