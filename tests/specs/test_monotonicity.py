"""
Power monotonicity tests.

Power must increase with effect size and sample size.
"""

from simpower import PowerAnalysis, TwoSampleTTest, scenario_grid, sweep, two_sample_normal
from tests.config import MEAN_A, N_TRIALS_ORDERING as N_TRIALS, SD, SEED


class TestPowerMonotonicity:
    """Coarse grids keep neighbouring points well separated relative to MC error."""

    def test_power_increases_with_sample_size(self):
        analysis = PowerAnalysis.two_sample(mean_a=8, mean_b=7, sd=2)
        analysis.set_simulations(N_TRIALS).set_seed(SEED)
        result = analysis.power_curve("sample_size", [10, 30, 60, 100])
        powers = result.powers
        assert all(a < b for a, b in zip(powers, powers[1:])), f"powers not increasing: {powers}"

    def test_power_increases_with_effect_size(self):
        scenarios = scenario_grid({"mean_a": MEAN_A, "sd": SD, "sample_size": 30}, "mean_b", [7.6, 7.0, 6.4])
        result = sweep(two_sample_normal, TwoSampleTTest(), scenarios, N_TRIALS, seed=SEED)
        powers = result.powers
        assert all(a < b for a, b in zip(powers, powers[1:])), f"powers not increasing: {powers}"

    def test_power_decreases_with_noise(self):
        analysis = PowerAnalysis.two_sample(mean_a=8, mean_b=7, sd=2)
        analysis.set_simulations(N_TRIALS).set_seed(SEED)
        result = analysis.power_curve("sd", [1.0, 2.0, 4.0], sample_size=30)
        powers = result.powers
        assert all(a > b for a, b in zip(powers, powers[1:])), f"powers not decreasing: {powers}"

    def test_power_bounded(self):
        analysis = PowerAnalysis.two_sample(mean_a=8, mean_b=7, sd=2)
        analysis.set_simulations(N_TRIALS).set_seed(SEED)
        for estimate in analysis.power_curve("sample_size", [2, 5, 500]):
            assert 0.0 <= estimate.power <= 1.0
