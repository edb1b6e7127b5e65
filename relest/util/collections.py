"""Provides utilities to work with arbitrary collections like lists, sets and tuples."""

from __future__ import annotations

from collections.abc import Iterable

from .._base import T


def set_union(sets: Iterable[set[T] | frozenset[T]]) -> set[T]:
    """Computes the union of many sets.

    Parameters
    ----------
    sets : Iterable[set[T] | frozenset[T]]
        The sets to combine.

    Returns
    -------
    set[T]
        A set containing all elements of the input sets. Empty if no sets are given.
    """
    union_set: set[T] = set()
    for s in sets:
        union_set |= s
    return union_set
