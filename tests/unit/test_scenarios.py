"""Unit tests for simpower.core.scenarios."""

import pickle

import pytest

from simpower.core.scenarios import Scenario, scenario_grid, scenario_range
from simpower.errors import InvalidArgument


class TestScenario:
    def test_value_reads_axis(self):
        s = Scenario.from_params(sample_size=20, mean_a=8)
        assert s.value == 20
        assert s.name == "sample_size=20"

    def test_custom_axis(self):
        s = Scenario.from_params(axis="mean_b", mean_b=7.5, sample_size=20)
        assert s.value == 7.5
        assert s.name == "mean_b=7.5"

    def test_missing_axis_value_is_invalid(self):
        s = Scenario(name="broken", params={"mean_a": 1})
        with pytest.raises(InvalidArgument, match="sample_size"):
            s.value

    def test_params_are_read_only(self):
        s = Scenario.from_params(sample_size=20)
        with pytest.raises(TypeError):
            s.params["sample_size"] = 30

    def test_params_are_copied(self):
        source = {"sample_size": 20}
        s = Scenario(name="x", params=source)
        source["sample_size"] = 99
        assert s.value == 20

    def test_frozen(self):
        s = Scenario.from_params(sample_size=20)
        with pytest.raises(AttributeError):
            s.name = "other"

    def test_replace_returns_new_scenario(self):
        s = Scenario.from_params(sample_size=20, sd=2)
        t = s.replace(sample_size=40)
        assert t.value == 40
        assert t.name == "sample_size=40"
        assert t["sd"] == 2
        assert s.value == 20

    def test_mapping_access(self):
        s = Scenario.from_params(sample_size=20, sd=2)
        assert s["sd"] == 2
        assert s.get("missing", "default") == "default"
        assert "sd" in s
        assert "missing" not in s

    def test_equality_and_hash(self):
        a = Scenario.from_params(sample_size=20, sd=2)
        b = Scenario.from_params(sample_size=20, sd=2)
        assert a == b
        assert hash(a) == hash(b)

    def test_pickle_round_trip(self):
        s = Scenario.from_params(sample_size=20, sd=2)
        restored = pickle.loads(pickle.dumps(s))
        assert restored == s
        assert restored.params["sd"] == 2


class TestScenarioGrid:
    def test_order_preserved(self):
        scenarios = scenario_grid({"sd": 2}, "sample_size", [50, 10, 30])
        assert [s.value for s in scenarios] == [50, 10, 30]
        assert all(s["sd"] == 2 for s in scenarios)

    def test_empty_values_rejected(self):
        with pytest.raises(InvalidArgument):
            scenario_grid({}, "sample_size", [])

    def test_effect_axis(self):
        scenarios = scenario_grid({"sample_size": 20}, "mean_b", [7.0, 7.5])
        assert [s.axis for s in scenarios] == ["mean_b", "mean_b"]
        assert scenarios[1].name == "mean_b=7.5"


class TestScenarioRange:
    def test_inclusive_range(self):
        scenarios = scenario_range({"sd": 2}, 10, 100, 10)
        assert [s.value for s in scenarios] == list(range(10, 101, 10))

    def test_invalid_range(self):
        with pytest.raises(InvalidArgument):
            scenario_range({}, 100, 10, 10)

    def test_zero_step(self):
        with pytest.raises(InvalidArgument):
            scenario_range({}, 10, 100, 0)

    def test_many_points_warns(self):
        with pytest.warns(UserWarning, match="Large number"):
            scenario_range({}, 1, 200, 1)
