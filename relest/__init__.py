"""relest - Statistics estimation for canonical relational algebra plans.

relest compiles queries of a simplified, line-oriented query language into *canonical* plans and estimates the size of the
output of each plan node. A canonical plan always has the same left-deep shape: cartesian products over scans of the base
relations, equi-joins for explicit JOIN lines, a chain of selections for the WHERE predicates and a single projection on
top. No alternative plans are considered and no query is ever executed.

On a high level, the project is structured as follows:

- the `relalg` module contains the plan operators and the predicates they use
- the `estimator` module computes the output statistics of each operator, based on the classical textbook formulas for
  selectivities of equality predicates
- the `parser` module compiles the query text into plans
- the `catalog` module provides the statistics of the base relations, which are referenced by name in the queries
- the `util` package contains helpers that are not specific to query plans

A typical workflow looks like this:

>>> import relest
>>> catalog = relest.StatisticsCatalog.load("stats.csv")
>>> plan = relest.parse_query("SELECT a,b\\nFROM R,S\\nWHERE a=\\"5\\"", catalog)
>>> relest.estimate_plan(plan)
>>> print(plan.inspect())
"""

from . import (
  catalog,
  estimator,
  parser,
  relalg,
  util
)
from ._core import Attribute, Relation
from .catalog import Catalog, StatisticsCatalog
from .errors import (
  AttributeNotFound, RelationNotFound, DuplicateRelation,
  QuerySyntaxError, MalformedClause, MalformedPredicate,
  InvalidStatistic
)
from .estimator import Estimator, estimate_plan
from .parser import QueryParser, parse_query
from .relalg import (
  Operator, Scan, Project, Select, Product, Join,
  Predicate, AttrEqValue, AttrEqAttr
)

__version__ = "0.3.0"

__all__ = [
  "catalog", "estimator", "parser", "relalg", "util",
  "Attribute", "Relation",
  "Catalog", "StatisticsCatalog",
  "AttributeNotFound", "RelationNotFound", "DuplicateRelation",
  "QuerySyntaxError", "MalformedClause", "MalformedPredicate", "InvalidStatistic",
  "Estimator", "estimate_plan",
  "QueryParser", "parse_query",
  "Operator", "Scan", "Project", "Select", "Product", "Join",
  "Predicate", "AttrEqValue", "AttrEqAttr"
]
