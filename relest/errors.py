"""Errors that are raised while compiling canonical queries or estimating their statistics.

All errors are raised at the point of detection and abort the current parse or estimation. The only exception to this rule
is the `RelationNotFound` error during scan resolution in the compiler, which is downgraded to a warning unless strict
lookups are requested (see `parser.strict_relation_lookup`).
"""
from __future__ import annotations

from collections.abc import Iterable
from typing import Optional


class AttributeNotFound(LookupError):
    """Indicates that the estimator cannot locate a predicate attribute in the schemas it was given.

    Parameters
    ----------
    attributes : Iterable[str]
        The attribute names that were searched for
    schemas : Iterable[str]
        Rendered versions of all relations that have been searched
    """
    def __init__(self, attributes: Iterable[str], schemas: Iterable[str]) -> None:
        self.attributes = tuple(attributes)
        self.schemas = tuple(schemas)
        attr_str = " or ".join(self.attributes)
        schema_str = " or ".join(self.schemas)
        super().__init__(f"Attribute {attr_str} not found in {schema_str}")


class RelationNotFound(LookupError):
    """Indicates that the catalog does not contain a relation of the requested name."""
    def __init__(self, relation: str) -> None:
        self.relation = relation
        super().__init__(f"Relation '{relation}' not found in catalog")


class DuplicateRelation(ValueError):
    """Indicates that a query references the same relation twice (in its FROM clause or in JOIN lines)."""
    def __init__(self, relation: str) -> None:
        self.relation = relation
        super().__init__(f"Relation '{relation}' cannot be repeated in JOIN")


class QuerySyntaxError(ValueError):
    """Generic error for canonical query text that does not follow the grammar.

    Parameters
    ----------
    message : str
        A description of the problem
    line : Optional[str], optional
        The offending line of the query, if available
    """
    def __init__(self, message: str, line: Optional[str] = None) -> None:
        self.line = line
        super().__init__(message if line is None else f"{message}: '{line}'")


class MalformedClause(QuerySyntaxError):
    """Indicates that a clause is missing its keyword or is otherwise structurally broken."""


class MalformedPredicate(QuerySyntaxError):
    """Indicates that a JOIN or WHERE predicate does not match any of its allowed forms."""


class InvalidStatistic(ValueError):
    """Indicates that statistics are invalid, i.e. a negative tuple count or a value count smaller than 1."""
