"""Command line interface to compile, estimate and print canonical queries."""
from __future__ import annotations

import argparse
import sys
import textwrap

from . import util
from .catalog import StatisticsCatalog
from .errors import AttributeNotFound, DuplicateRelation, InvalidStatistic, QuerySyntaxError, RelationNotFound
from .estimator import estimate_plan
from .parser import QueryParser


def main(argv: list[str] | None = None) -> int:
    description = textwrap.dedent("""
                                  Compile a canonical query and estimate the statistics of each plan node.

                                  The query is read from a file (or stdin if '-' is given). The statistics of the base
                                  relations are read from a catalog file in CSV or JSON format.
                                  """)
    parser = argparse.ArgumentParser(prog="relest", description=description)
    parser.add_argument("--catalog", "-c", required=True, help="Path to the catalog file. The format is inferred from the "
                        "file suffix (.csv or .json).")
    parser.add_argument("--json", action="store_true", help="Print the estimated plan as JSON instead of a tree.")
    parser.add_argument("--strict", action="store_true", help="Abort if a relation is not contained in the catalog, "
                        "instead of skipping it.")
    parser.add_argument("--verbose", action="store_true", help="Print progress information")
    parser.add_argument("query", help="File containing the canonical query. Use '-' to read from stdin.")

    args = parser.parse_args(argv)
    catalog = StatisticsCatalog.load(args.catalog)
    query_parser = QueryParser(catalog, strict=args.strict, verbose=args.verbose)

    try:
        if args.query == "-":
            plan = query_parser.parse(sys.stdin)
        else:
            with open(args.query, "r") as query_file:
                plan = query_parser.parse(query_file)
        estimate_plan(plan, verbose=args.verbose)
    except (QuerySyntaxError, DuplicateRelation, RelationNotFound, AttributeNotFound, InvalidStatistic) as e:
        util.print_stderr(f"{type(e).__name__}: {e}")
        return 1

    print(util.to_json(plan, indent=2) if args.json else plan.inspect())
    return 0


if __name__ == "__main__":
    sys.exit(main())
