"""The parser compiles canonical queries into left-deep operator trees.

A canonical query is line-oriented and has the following structure::

    SELECT <attribute>,<attribute>,...     or     SELECT *
    FROM <relation>,<relation>,...
    JOIN <relation> ON <attribute>=<attribute>,<attribute>=<attribute>,...
    WHERE <predicate>,<predicate>,...

where each WHERE predicate either has the form ``<attribute>="<value>"`` or ``<attribute>=<attribute>``. There can be an
arbitrary number of JOIN lines (including none). The WHERE line is optional, but it is only recognized as the very last line
of the query. All keywords are case-sensitive.

To form the canonical plan, a left-deep tree of cartesian products over scans of the FROM relations is built. Each JOIN line
adds a scan of its relation and one join per predicate. Afterwards, a chain of selections is built for the WHERE predicates
and the entire plan is wrapped in a single projection (unless all attributes are requested via ``SELECT *``).

Notes
-----
The parsing is unforgiving and may be sensitive to extraneous whitespace. Names and values have to consist of word
characters only. In particular, values that contain spaces or commas cannot be used in predicates.

Relations that are not contained in the catalog are skipped with a warning and the plan is built without them. This
behavior can be changed globally by setting `strict_relation_lookup`, or for individual parsers via their `strict`
parameter.
"""
from __future__ import annotations

import dataclasses
import io
import re
import warnings
from collections.abc import Sequence
from typing import Callable, Optional, TextIO

from . import util
from .catalog import Catalog
from .errors import DuplicateRelation, MalformedClause, MalformedPredicate, RelationNotFound
from .relalg import AttrEqAttr, AttrEqValue, Join, Operator, Predicate, Product, Project, Scan, Select

strict_relation_lookup: bool = False
"""Indicates whether relations that are missing from the catalog should abort the parsing process.

If this is disabled (the default), missing relations are reported as a warning and simply left out of the plan.
"""

_SelectPattern = re.compile(r"SELECT\s+(?P<attributes>.*)")
_FromPattern = re.compile(r"FROM\s+(?P<relations>.*)")
_JoinPattern = re.compile(r"JOIN\s+(?P<relation>\w+)\s*ON\s*(?P<predicates>.*)")
_WherePattern = re.compile(r"WHERE\s+(?P<predicates>.*)")
_ListSeparator = re.compile(r"\s*,\s*")
_NamePattern = re.compile(r"\w+")
_ValuePredicatePattern = re.compile(r'(?P<attribute>\w+)="(?P<value>\w+)"')
_AttributePredicatePattern = re.compile(r"(?P<left>\w+)=(?P<right>\w+)")


@dataclasses.dataclass
class ParserContext:
    """Mutable state that is shared between all steps of a single parsing run.

    Attributes
    ----------
    relations : set[str]
        The names of all relations that have been referenced by the query so far (in the FROM clause or in JOIN lines)
    """
    relations: set[str] = dataclasses.field(default_factory=set)

    def register(self, relation: str) -> bool:
        """Marks a relation as referenced.

        Returns
        -------
        bool
            Whether the relation was new, i.e. *False* if it has already been referenced before
        """
        if relation in self.relations:
            return False
        self.relations.add(relation)
        return True


def _split_list(text: str) -> list[str]:
    return [elem.strip() for elem in _ListSeparator.split(text.strip())]


class QueryParser:
    """Compiles canonical queries into operator trees.

    Parsers do not carry any state between calls to `parse`, so a single parser can be used for multiple queries.

    Parameters
    ----------
    catalog : Catalog
        The catalog to resolve relation names
    strict : Optional[bool], optional
        Whether relations that are missing from the catalog should raise a `RelationNotFound` error. If omitted, the global
        `strict_relation_lookup` setting is used.
    verbose : bool, optional
        Whether the parser should log skipped lines and relations. Defaults to *False*.
    """

    def __init__(self, catalog: Catalog, *, strict: Optional[bool] = None, verbose: bool = False) -> None:
        self._catalog = catalog
        self._strict = strict
        self._log: Callable = util.make_logger(verbose, prefix=util.timestamp)

    @property
    def strict(self) -> bool:
        """Get whether missing relations abort the parsing process."""
        return strict_relation_lookup if self._strict is None else self._strict

    def parse(self, query: str | TextIO) -> Operator:
        """Reads a canonical query and builds the corresponding plan.

        Parameters
        ----------
        query : str | TextIO
            The query text, or a stream to read it from

        Returns
        -------
        Operator
            The root node of the (not yet estimated) plan

        Raises
        ------
        MalformedClause
            If the SELECT or FROM line is missing or does not start with its keyword, or a JOIN line is broken
        MalformedPredicate
            If a JOIN or WHERE predicate is broken
        DuplicateRelation
            If a JOIN line references a relation that has already been used in the query
        RelationNotFound
            If strict lookups are enabled and a relation is not contained in the catalog, or if none of the FROM relations
            is contained in the catalog
        """
        stream = io.StringIO(query) if isinstance(query, str) else query
        lines = [line.rstrip("\r\n") for line in stream if line.strip()]
        if len(lines) < 2:
            raise MalformedClause("Query requires at least a SELECT and a FROM line")

        context = ParserContext()
        project_line, product_line, *remaining_lines = lines
        projection = self._parse_projection(project_line)
        plan = self._parse_product(product_line, context)

        if not remaining_lines:
            return plan if projection is None else Project(plan, projection)

        *join_lines, last_line = remaining_lines
        for line in join_lines:
            if not line.startswith("JOIN"):
                self._log("Skipping line", repr(line), "- expected JOIN")
                continue
            plan = self._parse_join(line, plan, context)

        if last_line.startswith("WHERE"):
            plan = self._parse_select(last_line, plan)
        elif last_line.startswith("JOIN"):
            plan = self._parse_join(last_line, plan, context)
        else:
            self._log("Skipping line", repr(last_line), "- expected JOIN or WHERE")

        return plan if projection is None else Project(plan, projection)

    def _parse_product(self, line: str, context: ParserContext) -> Operator:
        """Parses a "FROM ..." line into a left-deep tree of cartesian products."""
        match = _FromPattern.match(line)
        if not match:
            raise MalformedClause("Expected FROM clause", line)
        names = _split_list(match.group("relations"))
        if not all(_NamePattern.fullmatch(name) for name in names):
            raise MalformedClause("Invalid relation name in FROM clause", line)

        plan: Optional[Operator] = None
        for name in names:
            if not context.register(name):
                self._log("Skipping duplicate relation", name)
                continue
            scan = self._build_scan(name)
            if scan is None:
                continue
            plan = scan if plan is None else Product(plan, scan)

        if plan is None:
            # every relation was dropped, so there is nothing left to build a plan from
            raise RelationNotFound(names[-1])
        return plan

    def _parse_join(self, line: str, plan: Operator, context: ParserContext) -> Operator:
        """Parses a "JOIN ... ON ..." line into a chain of joins on top of the current plan."""
        match = _JoinPattern.match(line)
        if not match:
            raise MalformedClause("Expected JOIN <relation> ON <predicates>", line)

        relation = match.group("relation")
        if not context.register(relation):
            raise DuplicateRelation(relation)
        predicates = [self._parse_join_predicate(pred) for pred in _split_list(match.group("predicates"))]

        scan = self._build_scan(relation)
        if scan is None:
            return plan

        for predicate in predicates:
            plan = Join(plan, scan, predicate)
        return plan

    def _parse_join_predicate(self, predicate: str) -> AttrEqAttr:
        match = _AttributePredicatePattern.fullmatch(predicate)
        if not match:
            raise MalformedPredicate("Invalid JOIN predicate", predicate)
        return AttrEqAttr(match.group("left"), match.group("right"))

    def _parse_select(self, line: str, plan: Operator) -> Operator:
        """Parses a "WHERE ..." line into a chain of selections on top of the current plan."""
        match = _WherePattern.match(line)
        if not match:
            raise MalformedClause("Expected WHERE <predicates>", line)
        for predicate in _split_list(match.group("predicates")):
            plan = Select(plan, self._parse_where_predicate(predicate))
        return plan

    def _parse_where_predicate(self, predicate: str) -> Predicate:
        if match := _ValuePredicatePattern.fullmatch(predicate):
            return AttrEqValue(match.group("attribute"), match.group("value"))
        if match := _AttributePredicatePattern.fullmatch(predicate):
            return AttrEqAttr(match.group("left"), match.group("right"))
        raise MalformedPredicate("Invalid WHERE predicate", predicate)

    def _parse_projection(self, line: str) -> Optional[Sequence[str]]:
        """Parses a "SELECT ..." line into the projected attributes, or *None* for "SELECT *"."""
        match = _SelectPattern.match(line)
        if not match:
            raise MalformedClause("Expected SELECT clause", line)
        attributes = match.group("attributes").strip()
        if attributes == "*":
            return None

        names: Sequence[str] = _split_list(attributes)
        if not all(_NamePattern.fullmatch(name) for name in names):
            raise MalformedClause("Invalid attribute name in SELECT clause", line)
        return names

    def _build_scan(self, name: str) -> Optional[Scan]:
        """Builds a scan over a catalog relation. Missing relations are only raised for strict parsers, otherwise *None*."""
        try:
            return Scan(name, self._catalog.lookup(name))
        except RelationNotFound as e:
            if self.strict:
                raise
            warnings.warn(f"Skipping relation '{name}': {e}")
            return None


def parse_query(query: str | TextIO, catalog: Catalog, *, strict: Optional[bool] = None,
                verbose: bool = False) -> Operator:
    """Compiles a canonical query into a plan.

    This is a shortcut for creating a `QueryParser` and calling its `parse` method. See the parser for details.
    """
    return QueryParser(catalog, strict=strict, verbose=verbose).parse(query)
