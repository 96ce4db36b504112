import unittest

from decision_engine.evaluator import (
    DecisionModel,
    DecisionModelError,
    DecisionVariable,
    UncertainInput,
    UnknownVariableError,
    additive_formula,
    build_variable_model,
    hiring_formula,
    resolve_formula,
    weighted_sum_formula,
)
from decision_engine.sampler import Sampler

HIRING_SAMPLES = {
    "salary": 100000.0,
    "benefits_multiplier": 1.25,
    "utilization_rate": 0.5,
    "ramp_up_discount": 0.5,
    "project_win_rate": 0.5,
    "avg_project_value": 40000.0,
}


class _ConstantNormal:
    def __init__(self, z):
        self.z = z
        self.calls = 0

    def next_normal(self):
        self.calls += 1
        return self.z


class TestUncertainInput(unittest.TestCase):
    def test_draw_without_bounds(self):
        item = UncertainInput(key="a", mean=2.0, std=0.5)
        self.assertEqual(item.draw(_ConstantNormal(2.0)), 3.0)

    def test_draw_clamps_to_bounds(self):
        item = UncertainInput(key="a", mean=10.0, std=5.0, lower=0.0, upper=20.0)
        self.assertEqual(item.draw(_ConstantNormal(3.0)), 20.0)
        self.assertEqual(item.draw(_ConstantNormal(-3.0)), 0.0)

    def test_zero_std_returns_mean(self):
        item = UncertainInput(key="a", mean=4.0, std=0.0)
        self.assertEqual(item.draw(Sampler.from_seed(1)), 4.0)


class TestDecisionVariable(unittest.TestCase):
    def test_std_is_quarter_of_range(self):
        variable = DecisionVariable(name="x", base=5.0, min=0.0, max=8.0)
        self.assertEqual(variable.std, 2.0)

    def test_with_base_keeps_bounds(self):
        variable = DecisionVariable(name="x", base=5.0, min=0.0, max=8.0, label="X")
        pinned = variable.with_base(0.0)
        self.assertEqual((pinned.base, pinned.min, pinned.max, pinned.label), (0.0, 0.0, 8.0, "X"))
        self.assertEqual(variable.base, 5.0)


class TestFormulas(unittest.TestCase):
    def test_weighted_sum(self):
        formula = weighted_sum_formula([("a", 2.0), ("b", -1.0)])
        self.assertEqual(formula({"a": 3.0, "b": 4.0}), 2.0)

    def test_weighted_sum_of_nothing_is_zero(self):
        self.assertEqual(weighted_sum_formula([])({}), 0.0)

    def test_hiring_formula(self):
        # cost 125000; projects 10; effective 7.5 + 1.25 = 8.75; revenue 8.75 * 0.5 * 40000
        self.assertAlmostEqual(hiring_formula(HIRING_SAMPLES), 175000.0 - 125000.0)

    def test_hiring_formula_missing_variable(self):
        samples = dict(HIRING_SAMPLES)
        del samples["salary"]
        with self.assertRaises(UnknownVariableError):
            hiring_formula(samples)

    def test_additive_formula(self):
        self.assertEqual(additive_formula({"a": 1.5, "b": 2.5}), 4.0)


class TestResolveFormula(unittest.TestCase):
    def test_auto_picks_hiring_when_complete(self):
        self.assertIs(resolve_formula("auto", HIRING_SAMPLES.keys()), hiring_formula)

    def test_auto_falls_back_to_additive(self):
        self.assertIs(resolve_formula("auto", ["revenue", "cost"]), additive_formula)

    def test_unknown_model(self):
        with self.assertRaises(DecisionModelError):
            resolve_formula("quadratic", ["a"])

    def test_explicit_hiring_requires_variables(self):
        with self.assertRaises(UnknownVariableError):
            resolve_formula("hiring", ["salary"])


class TestDecisionModel(unittest.TestCase):
    def test_every_input_draws_once_per_trial(self):
        sampler = _ConstantNormal(1.0)
        model = DecisionModel(
            inputs=(UncertainInput("a", 1.0, 0.0), UncertainInput("b", 2.0, 1.0)),
            formula=additive_formula,
        )
        self.assertEqual(model.evaluate_trial(sampler), 4.0)
        self.assertEqual(sampler.calls, 2)

    def test_build_variable_model_requires_variables(self):
        with self.assertRaises(DecisionModelError):
            build_variable_model([], additive_formula)


if __name__ == "__main__":
    unittest.main()
