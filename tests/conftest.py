"""
Shared pytest fixtures for SimPower tests.
"""

import warnings

import pytest

from tests.config import MEAN_A, MEAN_B, SD


@pytest.fixture(autouse=True)
def _quiet_low_trial_warnings():
    """Tests deliberately use small trial counts; silence the reminder."""
    with warnings.catch_warnings():
        warnings.filterwarnings("ignore", message="Low trial count")
        yield


@pytest.fixture
def two_sample_params():
    """Parameters of the two-group tutorial example (means 8 vs 7, SD 2)."""
    return {"mean_a": MEAN_A, "mean_b": MEAN_B, "sd": SD}


@pytest.fixture
def two_sample_scenario(two_sample_params):
    """Tutorial example at 20 observations per group."""
    from simpower import Scenario

    return Scenario.from_params(sample_size=20, **two_sample_params)


@pytest.fixture
def regression_params():
    """Linear model with a binary treatment, a covariate and their interaction."""
    return {
        "coefficients": {"intercept": 1.0, "treatment": 0.5, "age": 0.3, "treatment:age": 0.2},
        "predictors": {"treatment": "binary", "age": "normal"},
        "noise_sd": 1.0,
    }


@pytest.fixture
def regression_scenario(regression_params):
    from simpower import Scenario

    return Scenario.from_params(sample_size=100, **regression_params)


@pytest.fixture
def rng():
    import numpy as np

    return np.random.default_rng(12345)
