"""
Unit tests for the trial loop, estimate_power and sweep.
"""

import numpy as np
import pytest
from scipy import stats

from simpower import (
    Decision,
    ProgressReporter,
    Scenario,
    SimulationCancelled,
    TwoSampleTTest,
    estimate_power,
    scenario_grid,
    sweep,
    two_sample_normal,
)
from simpower.core.simulation import DEFAULT_SEED, TrialRunner, trial_generator
from simpower.errors import FitFailure, InvalidArgument, SamplingFailure
from tests.config import N_TRIALS_CHECK, SEED


def _always(value):
    return lambda sample: value


def _draw_uniform(scenario, rng):
    return rng.random()


class TestTrialGenerator:
    def test_depends_only_on_entropy_and_index(self):
        a = trial_generator(SEED, 3).random(5)
        b = trial_generator(SEED, 3).random(5)
        np.testing.assert_array_equal(a, b)

    def test_streams_differ_between_trials(self):
        assert trial_generator(SEED, 0).random() != trial_generator(SEED, 1).random()

    def test_streams_differ_between_seeds(self):
        assert trial_generator(SEED, 0).random() != trial_generator(SEED + 1, 0).random()


class TestTrialRunner:
    def test_iter_trials_order(self, two_sample_scenario):
        runner = TrialRunner(5, seed=SEED)
        trials = list(runner.iter_trials(two_sample_normal, TwoSampleTTest(), two_sample_scenario))
        assert [t.index for t in trials] == [0, 1, 2, 3, 4]
        assert all(t.p_value is not None for t in trials)

    def test_bare_boolean_rule(self, two_sample_scenario):
        runner = TrialRunner(3, seed=SEED)
        trials = list(runner.iter_trials(two_sample_normal, _always(True), two_sample_scenario))
        assert all(t.rejected for t in trials)
        assert all(np.isnan(t.statistic) for t in trials)

    def test_decision_fields_copied(self, two_sample_scenario):
        rule = _always(Decision(rejected=False, statistic=1.5, critical_value=2.0, p_value=0.2))
        trial = next(TrialRunner(1, seed=SEED).iter_trials(two_sample_normal, rule, two_sample_scenario))
        assert trial.statistic == 1.5
        assert trial.p_value == 0.2
        assert not trial.rejected

    def test_fresh_entropy_is_reused_within_runner(self):
        runner = TrialRunner(10, seed=None)
        scenario = Scenario.from_params(sample_size=1)
        first = [t.statistic for t in runner.iter_trials(_draw_uniform, lambda u: Decision(u > 0.5, u, 0.5), scenario)]
        second = [t.statistic for t in runner.iter_trials(_draw_uniform, lambda u: Decision(u > 0.5, u, 0.5), scenario)]
        assert first == second


    def test_numpy_bool_rule(self, two_sample_scenario):
        trial = next(TrialRunner(1, seed=SEED).iter_trials(two_sample_normal, _always(np.bool_(False)), two_sample_scenario))
        assert trial.rejected is False


class TestEstimatePower:
    def test_all_reject(self, two_sample_scenario):
        est = estimate_power(two_sample_normal, _always(True), two_sample_scenario, 10, seed=SEED)
        assert est.power == 1.0
        assert est.n_rejected == 10

    def test_none_reject(self, two_sample_scenario):
        est = estimate_power(two_sample_normal, _always(False), two_sample_scenario, 10, seed=SEED)
        assert est.power == 0.0

    def test_single_trial(self, two_sample_scenario):
        est = estimate_power(two_sample_normal, TwoSampleTTest(), two_sample_scenario, 1, seed=SEED)
        assert est.power in (0.0, 1.0)
        assert est.n_trials == 1

    @pytest.mark.parametrize("num_trials", [0, -5, 2.5, True])
    def test_invalid_num_trials(self, two_sample_scenario, num_trials):
        with pytest.raises(InvalidArgument):
            estimate_power(two_sample_normal, TwoSampleTTest(), two_sample_scenario, num_trials, seed=SEED)

    def test_invalid_seed(self, two_sample_scenario):
        with pytest.raises(InvalidArgument):
            estimate_power(two_sample_normal, TwoSampleTTest(), two_sample_scenario, 10, seed=-1)

    def test_not_a_scenario(self):
        with pytest.raises(InvalidArgument, match="Expected a Scenario"):
            estimate_power(two_sample_normal, TwoSampleTTest(), {"sample_size": 20}, 10)

    def test_bit_identical_with_seed(self, two_sample_scenario):
        a = estimate_power(two_sample_normal, TwoSampleTTest(), two_sample_scenario, N_TRIALS_CHECK, seed=SEED)
        b = estimate_power(two_sample_normal, TwoSampleTTest(), two_sample_scenario, N_TRIALS_CHECK, seed=SEED)
        assert a == b

    def test_default_seed_constant(self):
        assert DEFAULT_SEED == 2137

    def test_scenario_not_mutated(self, two_sample_scenario):
        before = dict(two_sample_scenario.params)
        estimate_power(two_sample_normal, TwoSampleTTest(), two_sample_scenario, 5, seed=SEED)
        assert dict(two_sample_scenario.params) == before


class TestFailures:
    def test_generator_error_is_sampling_failure(self, two_sample_scenario):
        calls = []

        def generator(scenario, rng):
            calls.append(1)
            if len(calls) == 4:
                raise RuntimeError("boom")
            return rng.random()

        with pytest.raises(SamplingFailure) as exc_info:
            estimate_power(generator, _always(True), two_sample_scenario, 10, seed=SEED)
        err = exc_info.value
        assert err.trial_index == 3
        assert err.scenario is two_sample_scenario
        assert isinstance(err.__cause__, RuntimeError)
        assert "trial=3" in str(err)

    def test_rule_error_is_fit_failure(self, two_sample_scenario):
        def rule(sample):
            raise np.linalg.LinAlgError("Singular matrix")

        with pytest.raises(FitFailure) as exc_info:
            estimate_power(two_sample_normal, rule, two_sample_scenario, 10, seed=SEED)
        assert exc_info.value.trial_index == 0

    def test_raw_scipy_result_is_invalid(self, two_sample_scenario):
        def rule(sample):
            return stats.ttest_ind(sample.group_a, sample.group_b)

        with pytest.raises(InvalidArgument, match="rejected") as exc_info:
            estimate_power(two_sample_normal, rule, two_sample_scenario, 10, seed=SEED)
        assert exc_info.value.trial_index == 0

    @pytest.mark.parametrize("outcome", [1, 0.0, None, "yes"])
    def test_non_boolean_outcome_is_invalid(self, two_sample_scenario, outcome):
        with pytest.raises(InvalidArgument):
            estimate_power(two_sample_normal, _always(outcome), two_sample_scenario, 5, seed=SEED)

    def test_library_errors_keep_their_type(self, two_sample_params):
        scenario = Scenario.from_params(sample_size=1, **two_sample_params)
        with pytest.raises(SamplingFailure) as exc_info:
            estimate_power(two_sample_normal, TwoSampleTTest(), scenario, 10, seed=SEED)
        assert exc_info.value.trial_index == 0
        assert exc_info.value.scenario is scenario

    def test_missing_axis_fails_before_trials(self):
        calls = []

        def generator(scenario, rng):
            calls.append(1)

        scenario = Scenario(name="no-size", params={"mean_a": 1})
        with pytest.raises(InvalidArgument):
            estimate_power(generator, _always(True), scenario, 10, seed=SEED)
        assert calls == []


class TestCancellationAndProgress:
    def test_cancel_check(self, two_sample_scenario):
        polls = []

        def cancel():
            polls.append(1)
            return len(polls) > 3

        with pytest.raises(SimulationCancelled):
            estimate_power(two_sample_normal, TwoSampleTTest(), two_sample_scenario, 10, seed=SEED, cancel_check=cancel)
        assert len(polls) == 4

    def test_progress_counts_trials(self, two_sample_scenario):
        updates = []
        reporter = ProgressReporter(20, callback=lambda c, t: updates.append((c, t)), update_every=1)
        estimate_power(two_sample_normal, TwoSampleTTest(), two_sample_scenario, 20, seed=SEED, progress=reporter)
        assert reporter.current == 20
        assert updates[-1] == (20, 20)

    def test_sweep_progress_total(self, two_sample_params):
        scenarios = scenario_grid(two_sample_params, "sample_size", [10, 20, 30])
        reporter = ProgressReporter(10, n_scenarios=3)
        result = sweep(two_sample_normal, TwoSampleTTest(), scenarios, 10, seed=SEED, progress=reporter)
        assert reporter.current == 30
        assert reporter.completed == list(result)
        assert reporter.active is None


class TestSweep:
    def test_order_preserved(self, two_sample_params):
        scenarios = scenario_grid(two_sample_params, "sample_size", [40, 10, 25])
        result = sweep(two_sample_normal, TwoSampleTTest(), scenarios, N_TRIALS_CHECK, seed=SEED)
        assert result.parameters == [40, 10, 25]
        assert [e.scenario for e in result] == scenarios

    def test_matches_estimate_power(self, two_sample_params):
        scenarios = scenario_grid(two_sample_params, "sample_size", [10, 20])
        result = sweep(two_sample_normal, TwoSampleTTest(), scenarios, N_TRIALS_CHECK, seed=SEED)
        for scenario, estimate in zip(scenarios, result):
            single = estimate_power(two_sample_normal, TwoSampleTTest(), scenario, N_TRIALS_CHECK, seed=SEED)
            assert estimate == single

    def test_empty(self):
        with pytest.raises(InvalidArgument):
            sweep(two_sample_normal, TwoSampleTTest(), [], 10, seed=SEED)

    def test_failure_aborts_whole_sweep(self, two_sample_params):
        scenarios = scenario_grid(two_sample_params, "sample_size", [10, 1, 30])
        with pytest.raises(SamplingFailure) as exc_info:
            sweep(two_sample_normal, TwoSampleTTest(), scenarios, 10, seed=SEED)
        assert exc_info.value.scenario == scenarios[1]

    def test_invalid_scenario_checked_up_front(self, two_sample_params):
        scenarios = scenario_grid(two_sample_params, "sample_size", [10, 20]) + ["bogus"]
        with pytest.raises(InvalidArgument):
            sweep(two_sample_normal, TwoSampleTTest(), scenarios, 10, seed=SEED)

    def test_cancel_between_scenarios(self, two_sample_params):
        scenarios = scenario_grid(two_sample_params, "sample_size", [10, 20])
        with pytest.raises(SimulationCancelled):
            sweep(two_sample_normal, TwoSampleTTest(), scenarios, 10, seed=SEED, cancel_check=lambda: True)
