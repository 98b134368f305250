"""
Data generators for SimPower.

Each generator takes a ``Scenario`` and an explicit
``numpy.random.Generator`` and returns one synthetic dataset:

- ``two_sample_normal``: two independent normal groups.
- ``k_sample_normal``: several independent normal groups (one-way layout).
- ``linear_model``: normal and binary predictors, optional interactions,
  and a normal outcome ``y = X @ beta + noise``.

Parameters are validated before anything is drawn: a malformed scenario
raises ``InvalidArgument``, a scenario too small to support a test raises
``SamplingFailure``.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Sequence, Tuple

import numpy as np

from ..errors import InvalidArgument, SamplingFailure
from ..utils.validators import _validate_positive, _validate_proportion

MIN_GROUP_SIZE = 2


@dataclass(frozen=True)
class TwoSampleData:
    """Two independent samples."""

    group_a: np.ndarray
    group_b: np.ndarray


@dataclass(frozen=True)
class GroupedData:
    """Observations for several independent groups."""

    groups: Tuple[np.ndarray, ...]


@dataclass(frozen=True)
class RegressionData:
    """Design matrix (without intercept), outcome, and column names.

    Attributes:
        X: ``(n, p)`` design matrix; interaction columns are products of
            their components.
        y: ``(n,)`` outcome vector.
        columns: Column names of ``X`` in order, e.g. ``["x1", "x2", "x1:x2"]``.
    """

    X: np.ndarray
    y: np.ndarray
    columns: Tuple[str, ...] = field(default_factory=tuple)

    def column_index(self, name: str) -> int:
        try:
            return self.columns.index(name)
        except ValueError:
            raise InvalidArgument(f"Unknown coefficient '{name}'. Available: {', '.join(self.columns)}") from None


def _require(scenario, key: str) -> Any:
    if key not in scenario:
        raise InvalidArgument(f"Scenario '{scenario.name}' is missing parameter '{key}'", scenario=scenario)
    return scenario[key]


def _check_size(value: Any, name: str, minimum: int, scenario) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise InvalidArgument(f"{name} must be an integer, got {type(value).__name__}", scenario=scenario)
    if value < minimum:
        raise SamplingFailure(f"{name} must be at least {minimum}, got {value}", scenario=scenario)
    return int(value)


def _check_positive(value: Any, name: str, scenario) -> float:
    result = _validate_positive(value, name)
    if not result.is_valid:
        raise InvalidArgument("; ".join(result.errors), scenario=scenario)
    return float(value)


def two_sample_normal(scenario, rng: np.random.Generator) -> TwoSampleData:
    """Draw two independent normal samples.

    Scenario parameters:
        mean_a, mean_b: Group means.
        sd: Common standard deviation, or ``sd_a`` / ``sd_b`` per group.
        sample_size: Observations per group, or ``n_a`` / ``n_b``.
    """
    mean_a = float(_require(scenario, "mean_a"))
    mean_b = float(_require(scenario, "mean_b"))

    sd_a = _check_positive(scenario.get("sd_a", scenario.get("sd")), "sd_a", scenario)
    sd_b = _check_positive(scenario.get("sd_b", scenario.get("sd")), "sd_b", scenario)

    n_default = scenario.get("sample_size")
    n_a = _check_size(scenario.get("n_a", n_default), "n_a", MIN_GROUP_SIZE, scenario)
    n_b = _check_size(scenario.get("n_b", n_default), "n_b", MIN_GROUP_SIZE, scenario)

    return TwoSampleData(
        group_a=rng.normal(mean_a, sd_a, n_a),
        group_b=rng.normal(mean_b, sd_b, n_b),
    )


def k_sample_normal(scenario, rng: np.random.Generator) -> GroupedData:
    """Draw one normal sample per entry of ``means``.

    Scenario parameters:
        means: Sequence of group means (at least two).
        sd: Common standard deviation.
        sample_size: Observations per group.
    """
    means = list(_require(scenario, "means"))
    if len(means) < 2:
        raise InvalidArgument(f"At least two group means are required, got {len(means)}", scenario=scenario)
    sd = _check_positive(_require(scenario, "sd"), "sd", scenario)
    n = _check_size(_require(scenario, "sample_size"), "sample_size", MIN_GROUP_SIZE, scenario)
    return GroupedData(groups=tuple(rng.normal(float(m), sd, n) for m in means))


def _parse_predictors(predictors: Mapping[str, Any], scenario) -> List[Tuple[str, str, float]]:
    """Normalise predictor specs to ``(name, kind, proportion)`` tuples."""
    parsed = []
    for name, definition in predictors.items():
        if definition == "normal":
            parsed.append((name, "normal", 0.0))
            continue
        if definition == "binary":
            definition = ("binary", 0.5)
        if isinstance(definition, (tuple, list)) and len(definition) == 2 and definition[0] == "binary":
            result = _validate_proportion(definition[1], f"proportion of '{name}'")
            if not result.is_valid:
                raise InvalidArgument("; ".join(result.errors), scenario=scenario)
            parsed.append((name, "binary", float(definition[1])))
            continue
        raise InvalidArgument(f"Unknown predictor type for '{name}': {definition!r}. Use 'normal', 'binary' or ('binary', p)", scenario=scenario)
    return parsed


def _term_columns(coefficients: Mapping[str, float], names: Sequence[str], scenario) -> List[str]:
    terms = [t for t in coefficients if t != "intercept"]
    for term in terms:
        for part in term.split(":"):
            if part not in names:
                raise InvalidArgument(f"Coefficient '{term}' refers to unknown predictor '{part}'", scenario=scenario)
    # predictors without a coefficient still enter the design with beta = 0
    return list(names) + [t for t in terms if ":" in t]


def linear_model(scenario, rng: np.random.Generator) -> RegressionData:
    """Draw predictors and a normal outcome from a linear model.

    Scenario parameters:
        coefficients: Mapping of term to beta; interactions are written
            ``"a:b"``; ``"intercept"`` is optional (default 0).
        predictors: Mapping of predictor name to ``"normal"`` (standard
            normal), ``"binary"`` (Bernoulli 0.5) or ``("binary", p)``.
        noise_sd: Residual standard deviation.
        sample_size: Number of observations.
    """
    coefficients: Dict[str, float] = dict(_require(scenario, "coefficients"))
    predictors = _parse_predictors(_require(scenario, "predictors"), scenario)
    if not predictors:
        raise InvalidArgument("At least one predictor is required", scenario=scenario)
    noise_sd = _check_positive(scenario.get("noise_sd", 1.0), "noise_sd", scenario)

    names = [name for name, _, _ in predictors]
    columns = _term_columns(coefficients, names, scenario)
    n = _check_size(_require(scenario, "sample_size"), "sample_size", len(columns) + 2, scenario)

    base = {}
    for name, kind, proportion in predictors:
        if kind == "binary":
            base[name] = (rng.random(n) < proportion).astype(float)
        else:
            base[name] = rng.standard_normal(n)

    X = np.empty((n, len(columns)), dtype=float)
    for j, column in enumerate(columns):
        parts = column.split(":")
        X[:, j] = np.prod([base[part] for part in parts], axis=0)

    beta = np.array([float(coefficients.get(c, 0.0)) for c in columns])
    y = float(coefficients.get("intercept", 0.0)) + X @ beta + rng.normal(0.0, noise_sd, n)
    return RegressionData(X=X, y=y, columns=tuple(columns))
