#!/usr/bin/env python3
#
# This script shows the basic steps that are involved in estimating the statistics of a canonical query with relest.
#
# Requirements: run the script from the examples directory, so that the catalog and the query file can be found.
#

# Step 0: imports
# The main relest package provides access to all frequently-used parts of the library.
import relest

# Step 1: Catalog setup
# The catalog contains the tuple counts of all base relations and the number of distinct values of their attributes.
catalog = relest.StatisticsCatalog.load("stats.csv")

# Step 2: Query compilation
# The parser always produces the same canonical plan shape: products over scans, joins for JOIN lines, selections for the
# WHERE predicates and a single projection on top.
with open("query.txt", "r") as query_file:
    plan = relest.parse_query(query_file, catalog)

# Step 3: Estimation
# The estimator works bottom-up and attaches an output relation to each operator of the plan.
relest.estimate_plan(plan)

# Step 4: Inspection
# Each line of the output shows an operator along with its estimated output relation.
print(plan.inspect())
print("Estimated result size:", plan.output.tuple_count)
