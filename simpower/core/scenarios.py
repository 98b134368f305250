"""
Scenario definitions for SimPower.

A scenario is one fixed set of data-generating parameters. Sweeps are
ordered lists of scenarios that differ along a single axis, usually the
per-group sample size.
"""

import warnings
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, List, Mapping, Optional

from ..errors import InvalidArgument
from ..utils.validators import _validate_range

DEFAULT_AXIS = "sample_size"


@dataclass(frozen=True)
class Scenario:
    """A named, immutable configuration of data-generating parameters.

    Attributes:
        name: Label used in results and error messages.
        params: Parameter mapping consumed by the sample generator. Stored
            as a read-only view of a private copy.
        axis: Name of the parameter that identifies this scenario within a
            sweep (``"sample_size"`` unless stated otherwise).
    """

    name: str
    params: Mapping[str, Any] = field(default_factory=dict, hash=False)
    axis: str = DEFAULT_AXIS

    def __post_init__(self):
        object.__setattr__(self, "params", MappingProxyType(dict(self.params)))

    @classmethod
    def from_params(cls, axis: str = DEFAULT_AXIS, name: Optional[str] = None, **params) -> "Scenario":
        """Build a scenario from keyword parameters, naming it after its axis value."""
        if name is None:
            name = f"{axis}={params[axis]}" if axis in params else "scenario"
        return cls(name=name, params=params, axis=axis)

    @property
    def value(self) -> Any:
        """The identifying parameter value (``params[axis]``)."""
        try:
            return self.params[self.axis]
        except KeyError:
            raise InvalidArgument(f"Scenario '{self.name}' has no value for its axis '{self.axis}'", scenario=self) from None

    def get(self, key: str, default: Any = None) -> Any:
        return self.params.get(key, default)

    def __getitem__(self, key: str) -> Any:
        return self.params[key]

    def __contains__(self, key: object) -> bool:
        return key in self.params

    def replace(self, name: Optional[str] = None, **updates) -> "Scenario":
        """Return a new scenario with *updates* applied; ``self`` is unchanged."""
        params = {**self.params, **updates}
        if name is None:
            name = f"{self.axis}={params[self.axis]}" if self.axis in params else self.name
        return Scenario(name=name, params=params, axis=self.axis)

    def __reduce__(self):
        # mappingproxy is not picklable; rebuild from a plain dict
        return (Scenario, (self.name, dict(self.params), self.axis))


def scenario_grid(base: Mapping[str, Any], axis: str, values: Iterable[Any]) -> List[Scenario]:
    """Enumerate scenarios along *axis*, one per entry of *values*, in order.

    Args:
        base: Parameters shared by every scenario.
        axis: Parameter varied across the sweep.
        values: Ordered values for *axis*.

    Returns:
        List of scenarios named ``"<axis>=<value>"``.

    Raises:
        InvalidArgument: If *values* is empty.
    """
    values = list(values)
    if not values:
        raise InvalidArgument(f"No values given for sweep axis '{axis}'")
    base = dict(base)
    return [Scenario(name=f"{axis}={v}", params={**base, axis: v}, axis=axis) for v in values]


def scenario_range(
    base: Mapping[str, Any],
    from_value: int,
    to_value: int,
    by: int = 1,
    axis: str = DEFAULT_AXIS,
) -> List[Scenario]:
    """Enumerate an inclusive integer sweep, e.g. sample sizes 10..100 by 10.

    Raises:
        InvalidArgument: If the range is malformed (non-positive bounds,
            ``from_value >= to_value`` or a step wider than the range).
    """
    result = _validate_range(from_value, to_value, by)
    for warning in result.warnings:
        warnings.warn(warning, UserWarning, stacklevel=2)
    result.raise_if_invalid()
    return scenario_grid(base, axis, range(from_value, to_value + 1, by))
