"""The estimator computes the output statistics of each operator in a canonical query plan.

Estimation works bottom-up: an operator can only be estimated once all of its inputs have been estimated. The `Estimator`
takes care of this automatically and recurses into all inputs that do not have an output yet.

The estimation rules for the different operators are as follows (with *T(R)* denoting the tuple count of relation *R* and
*V(R, a)* the number of distinct values of attribute *a* in *R*):

- scans copy the statistics of their base relation
- projections keep the tuple count of their input and restrict the attributes
- selections of the form *a = c* produce *T(R) / V(R, a)* tuples and set *V(a)* to 1
- selections of the form *a = b* produce *T(R) / max(V(R, a), V(R, b))* tuples and set both value counts to the minimum
- products multiply the tuple counts of their inputs and concatenate the attributes
- joins of the form *a = b* produce *T(R) T(S) / max(V(R, a), V(S, b))* tuples and set both value counts to the minimum

All divisions are floor divisions. Since every attribute carries a value count of at least 1, they are always defined and
no estimate ever drives a value count to 0.
"""
from __future__ import annotations

import math
from collections.abc import Iterable

from . import util
from ._core import Attribute, Relation
from .errors import AttributeNotFound
from .relalg import AttrEqAttr, AttrEqValue, Join, Operator, Product, Project, Scan, Select


def _overwrite_value_counts(attributes: Iterable[Attribute], names: Iterable[str], value_count: int) -> list[Attribute]:
    names = set(names)
    return [attr.with_value_count(value_count) if attr.name in names else attr.copy() for attr in attributes]


class Estimator:
    """Computes and attaches the output relation of plan operators.

    Parameters
    ----------
    verbose : bool, optional
        Whether the estimator should log each computed output. Defaults to *False*.
    """

    def __init__(self, *, verbose: bool = False) -> None:
        self._log = util.make_logger(verbose, prefix=util.timestamp)

    def estimate(self, node: Operator) -> None:
        """Computes the output relation of an operator and stores it in the operator.

        All inputs of the operator that have not been estimated yet are estimated first.

        Parameters
        ----------
        node : Operator
            The operator to estimate

        Raises
        ------
        StateError
            If the operator has already been estimated
        AttributeNotFound
            If a predicate references an attribute that is not provided by the input(s)
        """
        if node.is_estimated():
            raise util.StateError(f"Operator '{node}' has already been estimated")
        for child in node.children():
            if not child.is_estimated():
                self.estimate(child)

        match node:
            case Scan():
                output = self._estimate_scan(node)
            case Project():
                output = self._estimate_project(node)
            case Select(predicate=AttrEqValue()):
                output = self._estimate_select_by_value(node)
            case Select(predicate=AttrEqAttr()):
                output = self._estimate_select_by_attribute(node)
            case Product():
                output = self._estimate_product(node)
            case Join():
                output = self._estimate_join(node)
            case _:
                raise util.LogicError(f"Unknown operator type: {type(node).__name__}")

        self._log("Estimated", node, "::", output.render())
        node.set_output(output)

    def _estimate_scan(self, node: Scan) -> Relation:
        return node.relation.copy()

    def _estimate_project(self, node: Project) -> Relation:
        input_relation = node.input_node.output
        output = Relation(input_relation.tuple_count)
        for name in node.attributes:
            # unknown attributes are silently dropped from the projection
            for attr in input_relation.attributes():
                if attr.name == name:
                    output.add_attribute(attr.copy())
        return output

    def _estimate_select_by_value(self, node: Select) -> Relation:
        input_relation = node.input_node.output
        attribute = node.predicate.attribute
        if not input_relation.contains(attribute):
            raise AttributeNotFound([attribute], [input_relation.render()])

        value_count = input_relation.value_count(attribute)
        tuple_count = input_relation.tuple_count // value_count
        return Relation(tuple_count, _overwrite_value_counts(input_relation.attributes(), [attribute], 1))

    def _estimate_select_by_attribute(self, node: Select) -> Relation:
        predicate = node.predicate
        return self._select_by_attribute(node.input_node.output, predicate.left, predicate.right)

    def _select_by_attribute(self, input_relation: Relation, left: str, right: str) -> Relation:
        if not input_relation.contains(left) or not input_relation.contains(right):
            raise AttributeNotFound([left, right], [input_relation.render()])

        left_values, right_values = input_relation.value_count(left), input_relation.value_count(right)
        max_values, min_values = max(left_values, right_values), min(left_values, right_values)
        tuple_count = input_relation.tuple_count // max_values
        return Relation(tuple_count, _overwrite_value_counts(input_relation.attributes(), [left, right], min_values))

    def _estimate_product(self, node: Product) -> Relation:
        inputs = [child.output for child in node.children()]
        output = Relation(math.prod(rel.tuple_count for rel in inputs))
        for rel in inputs:
            for attr in rel.attributes():
                output.add_attribute(attr.copy())
        return output

    def _estimate_join(self, node: Join) -> Relation:
        left_relation, right_relation = node.left_input.output, node.right_input.output
        first, second = node.predicate.left, node.predicate.right

        if left_relation.contains(first) and left_relation.contains(second):
            # Both attributes are already provided by the left input. The join degenerates to a selection on the left input
            # and the right input does not contribute to the output at all (neither tuples nor attributes).
            return self._select_by_attribute(left_relation, first, second)
        elif left_relation.contains(first) and right_relation.contains(second):
            return self._equi_join(left_relation, right_relation, first, second)
        elif left_relation.contains(second) and right_relation.contains(first):
            return self._equi_join(left_relation, right_relation, second, first)

        raise AttributeNotFound([first, second], [left_relation.render(), right_relation.render()])

    def _equi_join(self, left_relation: Relation, right_relation: Relation, left_attr: str, right_attr: str) -> Relation:
        left_values, right_values = left_relation.value_count(left_attr), right_relation.value_count(right_attr)
        max_values, min_values = max(left_values, right_values), min(left_values, right_values)

        tuple_count = left_relation.tuple_count * right_relation.tuple_count // max_values
        attributes = [*left_relation.attributes(), *right_relation.attributes()]
        return Relation(tuple_count, _overwrite_value_counts(attributes, [left_attr, right_attr], min_values))


def estimate_plan(root: Operator, *, verbose: bool = False) -> Operator:
    """Estimates all operators of a plan, starting at the leaves.

    Parameters
    ----------
    root : Operator
        The root node of the plan
    verbose : bool, optional
        Whether each computed output should be logged. Defaults to *False*.

    Returns
    -------
    Operator
        The root node. It is returned to allow for chaining, the plan is updated in-place.
    """
    Estimator(verbose=verbose).estimate(root)
    return root
