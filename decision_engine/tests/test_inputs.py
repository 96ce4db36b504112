"""
Unit tests for request coercion.

The HTTP path never rejects input: every numeric field is clamped, NaN and
garbage map to the range minimum, and missing fields take defaults.
"""

import math
import unittest

from decision_engine.evaluator import DecisionModelError
from decision_engine.inputs import (
    Assumption,
    build_assumption_model,
    clamp,
    coerce_sim_request,
    is_truthy,
    parse_variables,
    to_number,
)


class TestClamp(unittest.TestCase):
    def test_nan_maps_to_min(self):
        self.assertEqual(clamp(math.nan, -5.0, 5.0), -5.0)

    def test_bounds(self):
        self.assertEqual(clamp(10.0, 0.0, 1.0), 1.0)
        self.assertEqual(clamp(-10.0, 0.0, 1.0), 0.0)
        self.assertEqual(clamp(math.inf, 0.0, 1.0), 1.0)

    def test_to_number(self):
        self.assertEqual(to_number(None, 3.0), 3.0)
        self.assertEqual(to_number("2.5", 0.0), 2.5)
        self.assertEqual(to_number(True, 0.0), 1.0)
        self.assertTrue(math.isnan(to_number("abc", 0.0)))
        self.assertTrue(math.isnan(to_number([1], 0.0)))

    def test_to_number_huge_integer_is_infinite(self):
        self.assertEqual(to_number(10**400, 0.0), math.inf)
        self.assertEqual(to_number(-(10**400), 0.0), -math.inf)

    def test_is_truthy(self):
        self.assertTrue(is_truthy([]))
        self.assertTrue(is_truthy({}))
        self.assertTrue(is_truthy("no"))
        self.assertTrue(is_truthy(2))
        self.assertFalse(is_truthy(""))
        self.assertFalse(is_truthy(0))
        self.assertFalse(is_truthy(None))
        self.assertFalse(is_truthy(float("nan")))


class TestCoerceSimRequest(unittest.TestCase):
    def test_defaults(self):
        request = coerce_sim_request({})
        self.assertEqual(request.iterations, 20000)
        self.assertEqual(request.threshold, 0.0)
        self.assertEqual(request.assumptions, [])
        self.assertIsNone(request.seed)

    def test_non_object_body(self):
        request = coerce_sim_request(["not", "an", "object"])
        self.assertEqual(request.iterations, 20000)

    def test_iterations_are_floored_and_clamped(self):
        self.assertEqual(coerce_sim_request({"iterations": 12345.9}).iterations, 12345)
        self.assertEqual(coerce_sim_request({"iterations": 10}).iterations, 1000)
        self.assertEqual(coerce_sim_request({"iterations": 1e9}).iterations, 300000)
        self.assertEqual(coerce_sim_request({"iterations": "abc"}).iterations, 1000)
        self.assertEqual(coerce_sim_request({"iterations": 10**400}).iterations, 300000)
        self.assertEqual(coerce_sim_request({"iterations": -(10**400)}).iterations, 1000)

    def test_threshold_clamped(self):
        self.assertEqual(coerce_sim_request({"threshold": 5000}).threshold, 1000.0)
        self.assertEqual(coerce_sim_request({"threshold": -5000}).threshold, -1000.0)
        self.assertEqual(coerce_sim_request({"threshold": "nope"}).threshold, -1000.0)

    def test_assumption_fields_clamped(self):
        request = coerce_sim_request(
            {
                "assumptions": [
                    {"name": "a", "mean": 5e9, "std": -3, "enabled": True, "direction": "sideways"},
                    {"name": "b", "mean": "x", "std": 2, "weight": -1, "direction": "negative"},
                ]
            }
        )
        a, b = request.assumptions
        self.assertEqual((a.mean, a.std, a.weight, a.direction, a.enabled), (1e6, 0.0, 1.0, "positive", True))
        self.assertEqual((b.mean, b.std, b.weight, b.direction, b.enabled), (-1e6, 2.0, 0.0, "negative", False))
        self.assertEqual(request.enabled, [a])

    def test_enabled_follows_json_truthiness(self):
        request = coerce_sim_request(
            {"assumptions": [{"name": "a", "enabled": []}, {"name": "b", "enabled": {}}, {"name": "c", "enabled": ""}]}
        )
        self.assertEqual([a.enabled for a in request.assumptions], [True, True, False])

    def test_huge_numbers_clamp_to_bounds(self):
        request = coerce_sim_request(
            {"threshold": -(10**400), "assumptions": [{"name": "a", "mean": 10**400, "std": 10**400, "weight": 10**400}]}
        )
        self.assertEqual(request.threshold, -1000.0)
        a = request.assumptions[0]
        self.assertEqual((a.mean, a.std, a.weight), (1e6, 1e6, 1e6))

    def test_non_object_assumptions_dropped(self):
        request = coerce_sim_request({"assumptions": [None, 3, {"name": "ok", "enabled": True}]})
        self.assertEqual([a.name for a in request.assumptions], ["ok"])
        self.assertEqual(coerce_sim_request({"assumptions": "nope"}).assumptions, [])

    def test_seed_only_when_number(self):
        self.assertEqual(coerce_sim_request({"seed": 7}).seed, 7)
        self.assertIsNone(coerce_sim_request({"seed": "7"}).seed)
        self.assertIsNone(coerce_sim_request({"seed": True}).seed)


class TestBuildAssumptionModel(unittest.TestCase):
    def test_only_enabled_assumptions(self):
        model = build_assumption_model(
            [
                Assumption(name="a", mean=1.0, std=0.0),
                Assumption(name="b", mean=1.0, std=0.0, enabled=False),
            ]
        )
        self.assertEqual(model.size, 1)

    def test_duplicate_names_get_unique_keys(self):
        model = build_assumption_model(
            [Assumption(name="same", mean=1.0, std=0.0), Assumption(name="same", mean=2.0, std=0.0)]
        )
        keys = [item.key for item in model.inputs]
        self.assertEqual(len(set(keys)), 2)

    def test_sign_and_weight(self):
        self.assertEqual(Assumption(name="a", mean=0, std=0, direction="negative").sign, -1)
        self.assertEqual(Assumption(name="a", mean=0, std=0).sign, 1)


class TestParseVariables(unittest.TestCase):
    def test_preserves_order_and_label(self):
        variables = parse_variables(
            {
                "salary": {"base": 100, "min": 90, "max": 120, "label": "Salary"},
                "rate": {"base": 0.5, "min": 0.4, "max": 0.6},
            }
        )
        self.assertEqual([v.name for v in variables], ["salary", "rate"])
        self.assertEqual(variables[0].label, "Salary")
        self.assertIsNone(variables[1].label)

    def test_empty_map_rejected(self):
        with self.assertRaises(DecisionModelError):
            parse_variables({})

    def test_missing_bound_rejected(self):
        with self.assertRaises(DecisionModelError):
            parse_variables({"x": {"base": 1, "min": 0}})


if __name__ == "__main__":
    unittest.main()
