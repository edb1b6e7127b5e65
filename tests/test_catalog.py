"""Tests for the in-memory catalog and its file formats."""
from __future__ import annotations

import json
import tempfile
import textwrap
import unittest
from pathlib import Path

from relest import Attribute, Relation, InvalidStatistic, RelationNotFound, StatisticsCatalog


class StatisticsCatalogTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tempdir = tempfile.TemporaryDirectory()
        self.workdir = Path(self._tempdir.name)

    def tearDown(self) -> None:
        self._tempdir.cleanup()

    def test_lookup(self):
        catalog = StatisticsCatalog({"R": Relation(100, [Attribute("a", 10)])})

        self.assertIn("R", catalog)
        self.assertEqual(catalog.lookup("R").tuple_count, 100)
        with self.assertRaises(RelationNotFound) as context:
            catalog.lookup("S")
        self.assertEqual(context.exception.relation, "S")

    def test_load_csv(self):
        csv_file = self.workdir / "stats.csv"
        csv_file.write_text(textwrap.dedent("""\
                                            relation,tuple_count,attribute,value_count
                                            R,100,a,10
                                            R,100,b,20
                                            S,50,c,5
                                            E,7,,
                                            """))
        catalog = StatisticsCatalog.load(csv_file)

        self.assertEqual(catalog.relations(), ["R", "S", "E"])
        self.assertEqual(catalog.lookup("R"), Relation(100, [Attribute("a", 10), Attribute("b", 20)]))
        self.assertEqual(catalog.lookup("S"), Relation(50, [Attribute("c", 5)]))
        self.assertEqual(catalog.lookup("E"), Relation(7))

    def test_load_json(self):
        json_file = self.workdir / "stats.json"
        json_file.write_text(json.dumps({
            "R": {"tuple_count": 100, "attributes": [{"name": "a", "value_count": 10}]},
            "E": {"tuple_count": 3}
        }))
        catalog = StatisticsCatalog.load(json_file)

        self.assertEqual(len(catalog), 2)
        self.assertEqual(catalog.lookup("R"), Relation(100, [Attribute("a", 10)]))
        self.assertEqual(catalog.lookup("E"), Relation(3))

    def test_load_zero_value_count(self):
        json_file = self.workdir / "stats.json"
        json_file.write_text(json.dumps({"R": {"tuple_count": 100, "attributes": [{"name": "a", "value_count": 0}]}}))
        with self.assertRaises(InvalidStatistic):
            StatisticsCatalog.load(json_file)

    def test_unsupported_format(self):
        with self.assertRaises(ValueError):
            StatisticsCatalog.load(self.workdir / "stats.txt")

    def test_df_export(self):
        catalog = StatisticsCatalog({"R": Relation(100, [Attribute("a", 10), Attribute("b", 20)]),
                                     "S": Relation(50, [Attribute("c", 5)])})
        df = catalog.as_df()

        self.assertEqual(list(df.columns), ["relation", "tuple_count", "attribute", "value_count"])
        self.assertEqual(len(df), 3)
        self.assertEqual(StatisticsCatalog.from_df(df).lookup("R"), catalog.lookup("R"))


if __name__ == "__main__":
    unittest.main()
