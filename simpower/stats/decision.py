"""Typed outcome of a decision rule."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Decision:
    """Result of applying a fixed-threshold test to one sample.

    Truthiness equals ``rejected``, so built-in rules satisfy the plain
    ``decision_rule(sample) -> bool`` contract.

    Attributes:
        rejected: Whether the null hypothesis was rejected.
        statistic: Test statistic compared against ``critical_value``.
        critical_value: Threshold; rejection requires ``statistic > critical_value``.
        p_value: p-value of the statistic, if computed.
    """

    rejected: bool
    statistic: float
    critical_value: float
    p_value: Optional[float] = None

    def __bool__(self) -> bool:
        return self.rejected


def exceeds(statistic: float, critical_value: float) -> bool:
    """Strict threshold comparison; a tie at the critical value is not a rejection."""
    return bool(statistic > critical_value)
