"""Fundamental statistics types: attributes with their distinct value counts and relations with their tuple counts.

Both types are mutable from a technical point-of-view, but should be treated as immutable once they have been handed out.
Whenever an attribute becomes part of a new relation, it is copied instead of shared. This ensures that updating the estimate
of one relation never affects the estimates of another one.
"""
from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Optional

from . import util
from .errors import AttributeNotFound, InvalidStatistic


class Attribute:
    """An attribute models a named column of a relation, along with the number of distinct values it takes.

    Two attributes describe the same column iff their names are equal. The value count is specific to the relation that
    contains the attribute.

    Parameters
    ----------
    name : str
        The column name
    value_count : int, optional
        The (estimated) number of distinct values. Defaults to 1.

    Raises
    ------
    InvalidStatistic
        If the value count is smaller than 1
    """

    __slots__ = ("_name", "_value_count")

    def __init__(self, name: str, value_count: int = 1) -> None:
        self._name = name
        self.value_count = value_count

    @property
    def name(self) -> str:
        """Get the name of the column.

        Returns
        -------
        str
            The name
        """
        return self._name

    @property
    def value_count(self) -> int:
        """Get the number of distinct values of the column. Always at least 1.

        Returns
        -------
        int
            The value count
        """
        return self._value_count

    @value_count.setter
    def value_count(self, value_count: int) -> None:
        if value_count < 1:
            raise InvalidStatistic(f"Value count of attribute '{self._name}' must be at least 1, but was {value_count}")
        self._value_count = value_count

    def copy(self) -> Attribute:
        """Creates an independent copy of the attribute."""
        return Attribute(self._name, self._value_count)

    def with_value_count(self, value_count: int) -> Attribute:
        """Creates a copy of the attribute that uses a different value count."""
        return Attribute(self._name, value_count)

    def __json__(self) -> util.jsondict:
        return {"name": self._name, "value_count": self._value_count}

    def __hash__(self) -> int:
        return hash(self._name)

    def __eq__(self, other: object) -> bool:
        return (isinstance(other, type(self))
                and self._name == other._name and self._value_count == other._value_count)

    def __repr__(self) -> str:
        return f"Attribute({self._name!r}, value_count={self._value_count})"

    def __str__(self) -> str:
        return f"{self._name}:{self._value_count}"


class Relation:
    """A relation is the output of a plan node, described by its tuple count and its attributes.

    Attributes are kept in insertion order and their names do not need to be unique. For example, the cross product of two
    relations that both contain an attribute *a* retains both attributes.

    Parameters
    ----------
    tuple_count : int
        The (estimated) number of tuples in the relation
    attributes : Iterable[Attribute], optional
        The attributes of the relation. They are used as-is and not copied.

    Raises
    ------
    InvalidStatistic
        If the tuple count is negative
    """

    def __init__(self, tuple_count: int, attributes: Iterable[Attribute] = ()) -> None:
        if tuple_count < 0:
            raise InvalidStatistic(f"Tuple count must not be negative, but was {tuple_count}")
        self._tuple_count = tuple_count
        self._attributes: list[Attribute] = list(attributes)

    @property
    def tuple_count(self) -> int:
        """Get the number of tuples in the relation.

        Returns
        -------
        int
            The tuple count
        """
        return self._tuple_count

    def attributes(self) -> Sequence[Attribute]:
        """Provides all attributes of the relation in their insertion order."""
        return tuple(self._attributes)

    def attribute_names(self) -> Sequence[str]:
        """Provides the names of all attributes in their insertion order. Duplicates are retained."""
        return tuple(attr.name for attr in self._attributes)

    def add_attribute(self, attribute: Attribute) -> None:
        """Appends an attribute to the relation. The attribute is not copied."""
        self._attributes.append(attribute)

    def lookup(self, name: str) -> Optional[Attribute]:
        """Searches for the first attribute with the given name.

        Parameters
        ----------
        name : str
            The attribute name

        Returns
        -------
        Optional[Attribute]
            The attribute, or *None* if the relation does not contain it
        """
        return next((attr for attr in self._attributes if attr.name == name), None)

    def contains(self, name: str) -> bool:
        """Checks, whether the relation provides an attribute of the given name."""
        return self.lookup(name) is not None

    def value_count(self, name: str) -> int:
        """Provides the value count of the first attribute with the given name.

        Raises
        ------
        AttributeNotFound
            If the relation does not contain an attribute of that name
        """
        attribute = self.lookup(name)
        if attribute is None:
            raise AttributeNotFound([name], [self.render()])
        return attribute.value_count

    def copy(self) -> Relation:
        """Creates a deep copy of the relation. All attributes are copied as well."""
        return Relation(self._tuple_count, [attr.copy() for attr in self._attributes])

    def render(self) -> str:
        """Provides a compact one-line description of the relation, e.g. ``[a:10, b:5] (100 tuples)``."""
        attributes = ", ".join(str(attr) for attr in self._attributes)
        return f"[{attributes}] ({self._tuple_count} tuples)"

    def __json__(self) -> util.jsondict:
        return {"tuple_count": self._tuple_count, "attributes": self._attributes}

    def __len__(self) -> int:
        return len(self._attributes)

    __hash__ = None

    def __eq__(self, other: object) -> bool:
        return (isinstance(other, type(self))
                and self._tuple_count == other._tuple_count and self._attributes == other._attributes)

    def __repr__(self) -> str:
        return f"Relation(tuple_count={self._tuple_count}, attributes={self._attributes!r})"

    def __str__(self) -> str:
        return self.render()
