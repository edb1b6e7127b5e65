"""relalg provides the operators and predicates of canonical query plans.

The central component is the `Operator` class. All plan nodes inherit from it and there is a closed set of node types:
`Scan`, `Project`, `Select`, `Product` and `Join`. Each operator is immutable once it has been created, except for a single
*output* slot. The output describes the relation that is produced by the operator and is computed by the `estimator`
module. It can only be set once.

Predicates come in exactly two shapes: `AttrEqValue` compares an attribute to a literal value (``a="5"``) and `AttrEqAttr`
compares two attributes (``a=b``). Joins only support the latter form.

A typical canonical plan is a left-deep tree of the form

.. math:: \\pi_{a,b}(\\sigma_{a=5}(R \\times S))

which can be constructed as follows:

>>> from relest import Attribute, Relation
>>> r, s = Scan("R", Relation(100, [Attribute("a", 10)])), Scan("S", Relation(50, [Attribute("b", 5)]))
>>> plan = Project(Select(Product(r, s), AttrEqValue("a", "5")), ["a", "b"])
"""
from __future__ import annotations

import abc
import dataclasses
from collections.abc import Generator, Sequence
from typing import Optional

from . import util
from ._core import Relation


@dataclasses.dataclass(frozen=True)
class AttrEqValue:
    """Predicate that restricts an attribute to a specific literal value, e.g. ``a="5"``.

    Attributes
    ----------
    attribute : str
        The name of the attribute
    value : str
        The literal that the attribute has to be equal to
    """
    attribute: str
    value: str

    def attributes(self) -> tuple[str, ...]:
        """Provides the names of all attributes that are referenced by the predicate."""
        return (self.attribute,)

    def __json__(self) -> util.jsondict:
        return {"type": "value", "attribute": self.attribute, "value": self.value}

    def __str__(self) -> str:
        return f'{self.attribute}="{self.value}"'


@dataclasses.dataclass(frozen=True)
class AttrEqAttr:
    """Predicate that requires two attributes to have equal values, e.g. ``a=b``.

    Attributes
    ----------
    left : str
        The name of the first attribute
    right : str
        The name of the second attribute
    """
    left: str
    right: str

    def attributes(self) -> tuple[str, ...]:
        """Provides the names of all attributes that are referenced by the predicate."""
        return (self.left, self.right)

    def __json__(self) -> util.jsondict:
        return {"type": "attribute", "left": self.left, "right": self.right}

    def __str__(self) -> str:
        return f"{self.left}={self.right}"


Predicate = AttrEqValue | AttrEqAttr
"""Supertype of all predicates that can be used in selections."""


class Operator(abc.ABC):
    """Models a node of a canonical query plan. All specific operators like selections or joins inherit from it.

    Operators form a tree (each operator is the input of at most one parent). The output relation of each operator is
    empty when the operator is created and has to be computed by an `Estimator`.

    See Also
    --------
    relest.estimator.Estimator
    """
    def __init__(self) -> None:
        self._output: Optional[Relation] = None
        self._node_type = type(self).__name__
        self._hash_val = hash((self._node_type, self._recalc_hash_val()))

    @property
    def node_type(self) -> str:
        """Get the current operator as a string.

        Returns
        -------
        str
            The operator name
        """
        return self._node_type

    @property
    def output(self) -> Optional[Relation]:
        """Get the relation produced by this operator.

        Returns
        -------
        Optional[Relation]
            The output statistics, or *None* if the operator has not been estimated yet
        """
        return self._output

    def set_output(self, relation: Relation) -> None:
        """Stores the relation produced by this operator.

        Parameters
        ----------
        relation : Relation
            The output statistics

        Raises
        ------
        StateError
            If the output has already been set
        """
        if self._output is not None:
            raise util.StateError(f"Output of operator '{self}' has already been computed")
        self._output = relation

    def is_estimated(self) -> bool:
        """Checks, whether the output relation of this operator has already been computed."""
        return self._output is not None

    @abc.abstractmethod
    def children(self) -> Sequence[Operator]:
        """Provides all input nodes of the current operator.

        Returns
        -------
        Sequence[Operator]
            The input nodes. For scans, the sequence is empty, otherwise the children are provided from left to right.
        """
        raise NotImplementedError

    def relations(self) -> frozenset[str]:
        """Provides the names of all relations that are scanned in the subtree of the current node."""
        return frozenset(util.set_union(child.relations() for child in self.children()))

    def dfs_walk(self) -> Generator[Operator, None, None]:
        """Performs a depth-first search on the plan.

        Yields
        ------
        Generator[Operator, None, None]
            All nodes of the subtree induced by the current node, starting with the current node itself.
        """
        yield self
        for child in self.children():
            yield from child.dfs_walk()

    def inspect(self, *, _indentation: int = 0) -> str:
        """Provides a nice hierarchical string representation of the plan.

        The representation spans multiple lines and uses indentation to separate parent nodes from their children. If an
        operator has already been estimated, its output relation is included as well.

        Parameters
        ----------
        _indentation : int, optional
            Internal parameter that denotes how deeply recursed we are in the plan tree. Should not be modified by the user.

        Returns
        -------
        str
            A string representation of the plan
        """
        padding = " " * _indentation
        prefix = f"{padding}<- " if padding else ""
        description = str(self) if self._output is None else f"{self} :: {self._output.render()}"
        inspections = [prefix + description]
        for child in self.children():
            inspections.append(child.inspect(_indentation=_indentation + 2))
        return "\n".join(inspections)

    def __json__(self) -> util.jsondict:
        return {"node_type": self._node_type, "output": self._output,
                "children": list(self.children())} | self._json_fields()

    @abc.abstractmethod
    def _json_fields(self) -> util.jsondict:
        """Provides the JSON representation of all operator-specific attributes."""
        raise NotImplementedError

    @abc.abstractmethod
    def _recalc_hash_val(self) -> int:
        """Calculates the hash value of the current node, based on the attributes that are unique to the node type."""
        raise NotImplementedError

    def __hash__(self) -> int:
        return self._hash_val

    @abc.abstractmethod
    def __eq__(self, other: object) -> bool:
        raise NotImplementedError

    def __repr__(self) -> str:
        child_reprs = ", ".join(repr(child) for child in self.children())
        return f"{self.node_type}({child_reprs})"

    @abc.abstractmethod
    def __str__(self) -> str:
        raise NotImplementedError


class Scan(Operator):
    """A scan provides the tuples of a base relation from the catalog.

    Parameters
    ----------
    name : str
        The name of the relation in the catalog
    relation : Relation
        The statistics of the base relation. They are copied into the output of the scan upon estimation.
    """
    def __init__(self, name: str, relation: Relation) -> None:
        self._name = name
        self._relation = relation
        super().__init__()

    @property
    def name(self) -> str:
        """Get the name of the scanned relation."""
        return self._name

    @property
    def relation(self) -> Relation:
        """Get the statistics of the scanned base relation."""
        return self._relation

    def children(self) -> Sequence[Operator]:
        return []

    def relations(self) -> frozenset[str]:
        return frozenset((self._name,))

    def _json_fields(self) -> util.jsondict:
        return {"relation": self._name}

    def _recalc_hash_val(self) -> int:
        return hash(self._name)

    __hash__ = Operator.__hash__

    def __eq__(self, other: object) -> bool:
        return isinstance(other, type(self)) and self._name == other._name

    def __repr__(self) -> str:
        return f"Scan({self._name})"

    def __str__(self) -> str:
        return self._name


class Project(Operator):
    """A projection restricts its input to a list of attributes, in the given order.

    Duplicate elimination is not part of the projection.

    Parameters
    ----------
    input_node : Operator
        The tuples to project
    attributes : Sequence[str]
        The names of the attributes to keep
    """
    def __init__(self, input_node: Operator, attributes: Sequence[str]) -> None:
        self._input_node = input_node
        self._attributes = tuple(attributes)
        super().__init__()

    @property
    def input_node(self) -> Operator:
        """Get the operator providing the tuples to project."""
        return self._input_node

    @property
    def attributes(self) -> Sequence[str]:
        """Get the names of the attributes that should be kept.

        Returns
        -------
        Sequence[str]
            The attribute names in output order
        """
        return self._attributes

    def children(self) -> Sequence[Operator]:
        return [self._input_node]

    def _json_fields(self) -> util.jsondict:
        return {"attributes": list(self._attributes)}

    def _recalc_hash_val(self) -> int:
        return hash((self._input_node, self._attributes))

    __hash__ = Operator.__hash__

    def __eq__(self, other: object) -> bool:
        return (isinstance(other, type(self))
                and self._input_node == other._input_node and self._attributes == other._attributes)

    def __str__(self) -> str:
        return f"π ({', '.join(self._attributes)})"


class Select(Operator):
    """A selection filters the input relation based on an equality predicate.

    Parameters
    ----------
    input_node : Operator
        The tuples to filter
    predicate : Predicate
        The predicate that must be satisfied by all output tuples
    """
    def __init__(self, input_node: Operator, predicate: Predicate) -> None:
        self._input_node = input_node
        self._predicate = predicate
        super().__init__()

    @property
    def input_node(self) -> Operator:
        """Get the operator providing the tuples to filter."""
        return self._input_node

    @property
    def predicate(self) -> Predicate:
        """Get the predicate that must be satisfied by the output tuples."""
        return self._predicate

    def children(self) -> Sequence[Operator]:
        return [self._input_node]

    def _json_fields(self) -> util.jsondict:
        return {"predicate": self._predicate}

    def _recalc_hash_val(self) -> int:
        return hash((self._input_node, self._predicate))

    __hash__ = Operator.__hash__

    def __eq__(self, other: object) -> bool:
        return (isinstance(other, type(self))
                and self._input_node == other._input_node and self._predicate == other._predicate)

    def __str__(self) -> str:
        return f"σ ({self._predicate})"


class Product(Operator):
    """A product calculates the cartesian product between the tuples of all its inputs.

    Canonical plans only use binary products, but the operator supports an arbitrary number of inputs.

    Parameters
    ----------
    *inputs : Operator
        The input relations, at least two

    Raises
    ------
    ValueError
        If less than two inputs are given
    """
    def __init__(self, *inputs: Operator) -> None:
        if len(inputs) < 2:
            raise ValueError(f"Product requires at least two inputs, but {len(inputs)} were given")
        self._inputs = tuple(inputs)
        super().__init__()

    @property
    def left_input(self) -> Operator:
        """Get the first input of the product."""
        return self._inputs[0]

    @property
    def right_input(self) -> Operator:
        """Get the last input of the product."""
        return self._inputs[-1]

    def children(self) -> Sequence[Operator]:
        return list(self._inputs)

    def _json_fields(self) -> util.jsondict:
        return {}

    def _recalc_hash_val(self) -> int:
        return hash(self._inputs)

    __hash__ = Operator.__hash__

    def __eq__(self, other: object) -> bool:
        return isinstance(other, type(self)) and self._inputs == other._inputs

    def __str__(self) -> str:
        return "⨯"


class Join(Operator):
    """An equi-join combines the tuples of two inputs if two of their attributes are equal.

    Parameters
    ----------
    left_input : Operator
        Relation containing the first set of tuples
    right_input : Operator
        Relation containing the second set of tuples
    predicate : AttrEqAttr
        The join condition. The attributes are not bound to a specific side of the join.

    Raises
    ------
    TypeError
        If the predicate is not an attribute-attribute comparison
    """
    def __init__(self, left_input: Operator, right_input: Operator, predicate: AttrEqAttr) -> None:
        if not isinstance(predicate, AttrEqAttr):
            raise TypeError(f"Joins require an attribute comparison as predicate, not '{predicate}'")
        self._left_input = left_input
        self._right_input = right_input
        self._predicate = predicate
        super().__init__()

    @property
    def left_input(self) -> Operator:
        """Get the operator providing the first set of tuples."""
        return self._left_input

    @property
    def right_input(self) -> Operator:
        """Get the operator providing the second set of tuples."""
        return self._right_input

    @property
    def predicate(self) -> AttrEqAttr:
        """Get the condition that must be satisfied by all joined tuples."""
        return self._predicate

    def children(self) -> Sequence[Operator]:
        return [self._left_input, self._right_input]

    def _json_fields(self) -> util.jsondict:
        return {"predicate": self._predicate}

    def _recalc_hash_val(self) -> int:
        return hash((self._left_input, self._right_input, self._predicate))

    __hash__ = Operator.__hash__

    def __eq__(self, other: object) -> bool:
        return (isinstance(other, type(self))
                and self._left_input == other._left_input and self._right_input == other._right_input
                and self._predicate == other._predicate)

    def __str__(self) -> str:
        return f"⋈ ({self._predicate})"
