"""
Validation utilities for SimPower.

This module provides validation functions for trial counts, significance
levels, seeds, sweep ranges and scenario parameters.
"""

from dataclasses import dataclass
from numbers import Integral, Real
from typing import Any, List, Optional, Tuple, Union

from ..errors import InvalidArgument

__all__ = []

MAX_SEED = 3_000_000_000


@dataclass
class _ValidationResult:
    """Outcome of a validation check, carrying errors and warnings.

    Attributes:
        is_valid: ``True`` if no errors were found.
        errors: List of error messages (empty when valid).
        warnings: List of non-fatal warning messages.
    """

    is_valid: bool
    errors: List[str]
    warnings: List[str]

    def raise_if_invalid(self):
        """Raise ``InvalidArgument`` if the validation failed."""
        if not self.is_valid:
            error_msg = "Validation failed:\n" + "\n".join(f"• {err}" for err in self.errors)
            raise InvalidArgument(error_msg)


class _Validator:
    """Static helpers for type and range checks used by all validators."""

    @staticmethod
    def _check_type(value: Any, expected_types: tuple, name: str) -> Optional[str]:
        """Check if value has expected type (``bool`` never counts as a number)."""
        if isinstance(value, bool) or not isinstance(value, expected_types):
            actual_type = type(value).__name__
            expected = expected_types[0].__name__ if len(expected_types) == 1 else f"one of {[t.__name__ for t in expected_types]}"
            return f"{name} must be {expected}, got {actual_type}"
        return None

    @staticmethod
    def _check_range(
        value: Union[int, float],
        min_val: Optional[float],
        max_val: Optional[float],
        name: str,
    ) -> Optional[str]:
        """Check if value is within range."""
        if min_val is not None and value < min_val:
            return f"{name} must be >= {min_val}, got {value}"
        if max_val is not None and value > max_val:
            return f"{name} must be <= {max_val}, got {value}"
        return None


_validator = _Validator()


def _validate_numeric_parameter(
    value: Any,
    name: str,
    expected_types: tuple = (Real,),
    min_val: Optional[float] = None,
    max_val: Optional[float] = None,
) -> _ValidationResult:
    """Generic validation for numeric parameters."""
    errors: List[str] = []

    type_error = _validator._check_type(value, expected_types, name)
    if type_error:
        errors.append(type_error)
        return _ValidationResult(False, errors, [])

    range_error = _validator._check_range(value, min_val, max_val, name)
    if range_error:
        errors.append(range_error)

    return _ValidationResult(len(errors) == 0, errors, [])


def _validate_num_trials(num_trials: Any) -> _ValidationResult:
    """Validate the per-scenario trial count (integer >= 1)."""
    result = _validate_numeric_parameter(num_trials, "num_trials", expected_types=(Integral,), min_val=1)
    if result.is_valid and num_trials < 1000:
        result.warnings.append(f"Low trial count ({num_trials}). Consider using at least 1000 for reliable results.")
    return result


def _validate_power(power: Any) -> _ValidationResult:
    """Validate target power parameter (0-100%)."""
    return _validate_numeric_parameter(power, "Power", min_val=0, max_val=100)


def _validate_alpha(alpha: Any) -> _ValidationResult:
    """Validate alpha level parameter (0 < alpha < 1)."""
    result = _validate_numeric_parameter(alpha, "Alpha", min_val=0, max_val=1)
    if result.is_valid and not 0 < alpha < 1:
        result.errors.append(f"Alpha must be strictly between 0 and 1, got {alpha}")
        result.is_valid = False
    return result


def _validate_seed(seed: Any) -> _ValidationResult:
    """Validate a top-level seed (``None`` or integer in ``[0, 3e9]``)."""
    if seed is None:
        return _ValidationResult(True, [], [])
    return _validate_numeric_parameter(seed, "seed", expected_types=(Integral,), min_val=0, max_val=MAX_SEED)


def _validate_positive(value: Any, name: str) -> _ValidationResult:
    """Validate a strictly positive real (standard deviations, noise levels)."""
    result = _validate_numeric_parameter(value, name)
    if result.is_valid and not value > 0:
        return _ValidationResult(False, [f"{name} must be > 0, got {value}"], [])
    return result


def _validate_proportion(value: Any, name: str) -> _ValidationResult:
    """Validate a Bernoulli proportion strictly inside (0, 1)."""
    result = _validate_numeric_parameter(value, name)
    if result.is_valid and not 0 < value < 1:
        return _ValidationResult(False, [f"{name} must be between 0 and 1 (exclusive), got {value}"], [])
    return result


def _validate_range(from_value: Any, to_value: Any, by: Any) -> _ValidationResult:
    """Validate sweep range parameters."""
    errors: List[str] = []
    warnings: List[str] = []

    for param, name in [(from_value, "from_size"), (to_value, "to_size"), (by, "by")]:
        if isinstance(param, bool) or not isinstance(param, Integral) or param <= 0:
            errors.append(f"{name} must be a positive integer, got {param}")

    if errors:
        return _ValidationResult(False, errors, warnings)

    if from_value >= to_value:
        errors.append(f"from_size ({from_value}) must be less than to_size ({to_value})")
    elif by > (to_value - from_value):
        errors.append(f"Step size 'by' ({by}) is larger than range ({to_value - from_value}). This will only test one value.")

    if not errors:
        n_points = len(range(from_value, to_value + 1, by))
        if n_points > 100:
            warnings.append(f"Large number of scenarios to test ({n_points}). This may take significant time.")

    return _ValidationResult(len(errors) == 0, errors, warnings)


def _validate_correction_method(correction: Optional[str]) -> _ValidationResult:
    """Validate correction method name."""
    if correction is None:
        return _ValidationResult(True, [], [])

    method = correction.lower().replace("-", "_").replace(" ", "_")
    valid_methods = ["bonferroni", "benjamini_hochberg", "bh", "fdr", "holm"]

    if method not in valid_methods:
        return _ValidationResult(
            False,
            [f"Unknown correction method: {correction}. Valid options: 'Bonferroni', 'Benjamini-Hochberg' (or 'BH', 'FDR'), 'Holm'"],
            [],
        )

    return _ValidationResult(True, [], [])


def _validate_parallel_settings(enable: Any, n_cores: Optional[int]) -> Tuple[Tuple[bool, int], _ValidationResult]:
    """Validate parallel processing settings.

    Args:
        enable: ``True`` or ``False``.
        n_cores: Number of CPU cores (positive int or None for auto).

    Returns:
        ((enable, n_cores), ValidationResult)
    """
    import multiprocessing as mp

    errors = []

    if enable not in (True, False):
        errors.append(f"enable must be True or False, got {enable!r}")
        return (False, 1), _ValidationResult(False, errors, [])

    max_cores = mp.cpu_count() or 1
    validated_n_cores = max(1, max_cores // 2)

    if n_cores is not None:
        if isinstance(n_cores, bool) or not isinstance(n_cores, int) or n_cores <= 0:
            errors.append(f"n_cores must be a positive integer, got {n_cores}")
        else:
            validated_n_cores = min(n_cores, max_cores)

    return (bool(enable), validated_n_cores), _ValidationResult(len(errors) == 0, errors, [])
