"""Tests for the estimation rules of the different operators."""
from __future__ import annotations

import unittest

from relest import util
from relest import Attribute, Relation, AttributeNotFound, InvalidStatistic
from relest.estimator import Estimator, estimate_plan
from relest.relalg import AttrEqAttr, AttrEqValue, Join, Product, Project, Scan, Select


def _relation(tuple_count: int, **attributes: int) -> Relation:
    return Relation(tuple_count, [Attribute(attr, values) for attr, values in attributes.items()])


def _scan(name: str, tuple_count: int, **attributes: int) -> Scan:
    return Scan(name, _relation(tuple_count, **attributes))


def _stats(relation: Relation) -> list[tuple[str, int]]:
    return [(attr.name, attr.value_count) for attr in relation.attributes()]


class ScanEstimationTests(unittest.TestCase):
    def test_scan_copies_base_relation(self):
        base_relation = _relation(100, a=10, b=5, c=2)
        scan = Scan("R", base_relation)
        estimate_plan(scan)

        self.assertEqual(scan.output.tuple_count, 100)
        self.assertEqual(_stats(scan.output), [("a", 10), ("b", 5), ("c", 2)])
        for input_attr, output_attr in zip(base_relation.attributes(), scan.output.attributes()):
            self.assertIsNot(input_attr, output_attr)

    def test_scans_over_same_relation_are_independent(self):
        base_relation = _relation(100, a=10)
        first_scan, second_scan = Scan("R", base_relation), Scan("R", base_relation)
        estimate_plan(first_scan)
        estimate_plan(second_scan)

        first_scan.output.attributes()[0].value_count = 1
        self.assertEqual(second_scan.output.value_count("a"), 10)
        self.assertEqual(base_relation.value_count("a"), 10)


class ProjectEstimationTests(unittest.TestCase):
    def test_projection_order(self):
        plan = Project(_scan("R", 100, a=10, b=5, c=2), ["c", "a"])
        estimate_plan(plan)

        self.assertEqual(plan.output.tuple_count, 100)
        self.assertEqual(_stats(plan.output), [("c", 2), ("a", 10)])

    def test_unknown_attributes_are_omitted(self):
        plan = Project(_scan("R", 100, a=10), ["a", "z"])
        estimate_plan(plan)

        self.assertEqual(_stats(plan.output), [("a", 10)])

    def test_duplicate_attribute_names(self):
        plan = Project(Product(_scan("R", 10, a=10), _scan("S", 5, a=5)), ["a"])
        estimate_plan(plan)

        self.assertEqual(_stats(plan.output), [("a", 10), ("a", 5)])


class SelectEstimationTests(unittest.TestCase):
    def test_select_by_value(self):
        plan = Select(_scan("R", 105, a=10, b=5), AttrEqValue("a", "42"))
        estimate_plan(plan)

        self.assertEqual(plan.output.tuple_count, 10)
        self.assertEqual(_stats(plan.output), [("a", 1), ("b", 5)])

    def test_select_by_value_missing_attribute(self):
        plan = Select(_scan("R", 100, a=10), AttrEqValue("z", "1"))
        with self.assertRaises(AttributeNotFound):
            estimate_plan(plan)
        self.assertFalse(plan.is_estimated())

    def test_select_by_attribute(self):
        plan = Select(_scan("R", 1000, a=10, b=20, c=3), AttrEqAttr("a", "b"))
        estimate_plan(plan)

        self.assertEqual(plan.output.tuple_count, 50)
        self.assertEqual(_stats(plan.output), [("a", 10), ("b", 10), ("c", 3)])

    def test_select_by_attribute_missing_attribute(self):
        plan = Select(_scan("R", 1000, a=10), AttrEqAttr("a", "b"))
        with self.assertRaises(AttributeNotFound):
            estimate_plan(plan)

    def test_select_by_attribute_keeps_value_counts_positive(self):
        plan = Select(_scan("R", 100, a=1, b=5), AttrEqAttr("a", "b"))
        estimate_plan(plan)

        self.assertEqual(plan.output.tuple_count, 20)
        self.assertEqual(_stats(plan.output), [("a", 1), ("b", 1)])

    def test_select_by_attribute_rejects_zero_value_count(self):
        with self.assertRaises(InvalidStatistic):
            Select(_scan("R", 100, a=0, b=5), AttrEqAttr("a", "b"))

    def test_chained_selections(self):
        plan = Select(Select(_scan("R", 1000, a=10, b=4), AttrEqValue("a", "1")), AttrEqValue("b", "2"))
        estimate_plan(plan)

        self.assertEqual(plan.input_node.output.tuple_count, 100)
        self.assertEqual(plan.output.tuple_count, 25)
        self.assertEqual(_stats(plan.output), [("a", 1), ("b", 1)])


class ProductEstimationTests(unittest.TestCase):
    def test_binary_product(self):
        plan = Product(_scan("R", 100, a=10), _scan("S", 50, b=5, c=2))
        estimate_plan(plan)

        self.assertEqual(plan.output.tuple_count, 5000)
        self.assertEqual(_stats(plan.output), [("a", 10), ("b", 5), ("c", 2)])

    def test_nary_product(self):
        plan = Product(_scan("R", 10, a=10), _scan("S", 20, a=5), _scan("T", 3, b=3))
        estimate_plan(plan)

        self.assertEqual(plan.output.tuple_count, 600)
        self.assertEqual(_stats(plan.output), [("a", 10), ("a", 5), ("b", 3)])


class JoinEstimationTests(unittest.TestCase):
    def test_equi_join(self):
        plan = Join(_scan("R", 100, a=10, x=3), _scan("S", 50, b=5), AttrEqAttr("a", "b"))
        estimate_plan(plan)

        self.assertEqual(plan.output.tuple_count, 500)
        self.assertEqual(_stats(plan.output), [("a", 5), ("x", 3), ("b", 5)])

    def test_equi_join_with_swapped_predicate(self):
        plan = Join(_scan("R", 100, a=10, x=3), _scan("S", 50, b=5), AttrEqAttr("b", "a"))
        estimate_plan(plan)

        self.assertEqual(plan.output.tuple_count, 500)
        self.assertEqual(_stats(plan.output), [("a", 5), ("x", 3), ("b", 5)])

    def test_join_degenerates_to_selection_on_left_input(self):
        # both attributes are provided by the left input: the right input is discarded entirely
        left = Product(_scan("R", 100, a=10), _scan("S", 50, b=5))
        plan = Join(left, _scan("T", 20, c=4), AttrEqAttr("a", "b"))
        estimate_plan(plan)

        self.assertTrue(plan.right_input.is_estimated())
        self.assertEqual(plan.output.tuple_count, 500)
        self.assertEqual(_stats(plan.output), [("a", 5), ("b", 5)])

    def test_join_with_unknown_attribute(self):
        plan = Join(_scan("R", 100, a=10), _scan("S", 50, b=5), AttrEqAttr("a", "z"))
        with self.assertRaises(AttributeNotFound) as context:
            estimate_plan(plan)
        self.assertEqual(len(context.exception.schemas), 2)

    def test_join_attributes_only_in_right_input(self):
        plan = Join(_scan("R", 100, a=10), _scan("S", 50, b=5, c=2), AttrEqAttr("b", "c"))
        with self.assertRaises(AttributeNotFound):
            estimate_plan(plan)

    def test_join_keeps_value_counts_positive(self):
        plan = Join(_scan("R", 100, a=1), _scan("S", 50, b=5), AttrEqAttr("a", "b"))
        estimate_plan(plan)

        self.assertEqual(plan.output.tuple_count, 1000)
        self.assertTrue(all(attr.value_count >= 1 for attr in plan.output.attributes()))
        self.assertEqual(_stats(plan.output), [("a", 1), ("b", 1)])

    def test_join_rejects_zero_value_count(self):
        with self.assertRaises(InvalidStatistic):
            Join(_scan("R", 100, a=0), _scan("S", 50, b=5), AttrEqAttr("a", "b"))


class EstimatorTests(unittest.TestCase):
    def test_estimation_is_bottom_up(self):
        scan_r, scan_s = _scan("R", 100, a=10), _scan("S", 50, b=5)
        product = Product(scan_r, scan_s)
        plan = Project(Select(product, AttrEqValue("a", "5")), ["a", "b"])
        estimate_plan(plan)

        self.assertTrue(all(node.is_estimated() for node in plan.dfs_walk()))

    def test_already_estimated_children_are_reused(self):
        scan_r = _scan("R", 100, a=10)
        estimator = Estimator()
        estimator.estimate(scan_r)
        original_output = scan_r.output

        plan = Select(scan_r, AttrEqValue("a", "1"))
        estimator.estimate(plan)
        self.assertIs(scan_r.output, original_output)
        self.assertEqual(plan.output.tuple_count, 10)

    def test_double_estimation(self):
        scan_r = _scan("R", 100, a=10)
        estimator = Estimator()
        estimator.estimate(scan_r)
        with self.assertRaises(util.StateError):
            estimator.estimate(scan_r)

    def test_estimation_does_not_modify_inputs(self):
        scan_r = _scan("R", 100, a=10)
        plan = Select(scan_r, AttrEqValue("a", "1"))
        estimate_plan(plan)

        self.assertEqual(scan_r.output.value_count("a"), 10)
        self.assertEqual(scan_r.relation.value_count("a"), 10)


if __name__ == "__main__":
    unittest.main()
