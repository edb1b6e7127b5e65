"""The catalog provides the statistics of all base relations that can be referenced in canonical queries.

The compiler only depends on the `Catalog` protocol, i.e. any object with a matching `lookup` method can be used. The
`StatisticsCatalog` is the default implementation. It keeps all relations in memory and can be populated programmatically
or loaded from CSV and JSON files.

CSV files contain one row per attribute::

    relation,tuple_count,attribute,value_count
    R,100,a,10
    S,50,b,5

JSON files map relation names to their statistics::

    {"R": {"tuple_count": 100, "attributes": [{"name": "a", "value_count": 10}]}}
"""
from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Protocol

import pandas as pd

from . import util
from ._core import Attribute, Relation
from .errors import RelationNotFound


class Catalog(Protocol):
    """A simplified model of a database catalog that resolves relation names to their statistics."""

    def lookup(self, name: str) -> Relation:
        """Provides the statistics of a base relation.

        Raises
        ------
        RelationNotFound
            If the catalog does not contain the relation
        """
        ...


class StatisticsCatalog:
    """In-memory catalog of base relations.

    Parameters
    ----------
    relations : Mapping[str, Relation], optional
        The initial relations of the catalog
    """

    @staticmethod
    def load_csv(path: str | Path, *, relation_col: str = "relation", tuples_col: str = "tuple_count",
                 attribute_col: str = "attribute", values_col: str = "value_count") -> StatisticsCatalog:
        """Loads a catalog from a CSV file that contains one row per attribute.

        The attributes of each relation are added in the order in which they appear in the file. Relations without
        attributes can be specified by leaving the attribute column empty. If the tuple count of a relation differs between
        rows, the first one is used.

        Parameters
        ----------
        path : str | Path
            The CSV file
        relation_col : str, optional
            The column containing the relation names. Defaults to *relation*.
        tuples_col : str, optional
            The column containing the tuple counts. Defaults to *tuple_count*.
        attribute_col : str, optional
            The column containing the attribute names. Defaults to *attribute*.
        values_col : str, optional
            The column containing the value counts. Defaults to *value_count*.

        Returns
        -------
        StatisticsCatalog
            The catalog

        Raises
        ------
        InvalidStatistic
            If a tuple count is negative or a value count is smaller than 1
        """
        df = util.read_df(path, dtype={relation_col: str, attribute_col: str})
        return StatisticsCatalog.from_df(df, relation_col=relation_col, tuples_col=tuples_col,
                                         attribute_col=attribute_col, values_col=values_col)

    @staticmethod
    def from_df(df: pd.DataFrame, *, relation_col: str = "relation", tuples_col: str = "tuple_count",
                attribute_col: str = "attribute", values_col: str = "value_count") -> StatisticsCatalog:
        """Creates a catalog from a data frame that contains one row per attribute.

        See Also
        --------
        load_csv : for the structure of the data frame
        """
        catalog = StatisticsCatalog()
        for relation_name, rows in df.groupby(relation_col, sort=False):
            relation = Relation(int(rows[tuples_col].iloc[0]))
            for _, row in rows.iterrows():
                if pd.isna(row[attribute_col]):
                    continue
                relation.add_attribute(Attribute(row[attribute_col], int(row[values_col])))
            catalog.add_relation(str(relation_name), relation)
        return catalog

    @staticmethod
    def load_json(path: str | Path) -> StatisticsCatalog:
        """Loads a catalog from a JSON file that maps relation names to their statistics.

        Parameters
        ----------
        path : str | Path
            The JSON file

        Returns
        -------
        StatisticsCatalog
            The catalog
        """
        with open(path, "r") as json_file:
            raw_catalog = json.load(json_file)

        catalog = StatisticsCatalog()
        for relation_name, raw_relation in raw_catalog.items():
            attributes = [Attribute(raw_attr["name"], raw_attr["value_count"])
                          for raw_attr in raw_relation.get("attributes", [])]
            catalog.add_relation(relation_name, Relation(raw_relation["tuple_count"], attributes))
        return catalog

    @staticmethod
    def load(path: str | Path) -> StatisticsCatalog:
        """Loads a catalog from a CSV or JSON file, depending on the file suffix.

        Raises
        ------
        ValueError
            If the file is neither a CSV nor a JSON file
        """
        suffix = Path(path).suffix.lower()
        if suffix == ".csv":
            return StatisticsCatalog.load_csv(path)
        elif suffix == ".json":
            return StatisticsCatalog.load_json(path)
        raise ValueError(f"Unsupported catalog format: '{suffix}'")

    def __init__(self, relations: Mapping[str, Relation] | None = None) -> None:
        self._relations: dict[str, Relation] = dict(relations) if relations else {}

    def add_relation(self, name: str, relation: Relation) -> None:
        """Registers a base relation. Existing relations of the same name are replaced."""
        self._relations[name] = relation

    def lookup(self, name: str) -> Relation:
        """Provides the statistics of a base relation.

        Raises
        ------
        RelationNotFound
            If the catalog does not contain the relation
        """
        try:
            return self._relations[name]
        except KeyError:
            raise RelationNotFound(name) from None

    def relations(self) -> Iterable[str]:
        """Provides the names of all relations in the catalog, in insertion order."""
        return list(self._relations.keys())

    def as_df(self) -> pd.DataFrame:
        """Exports the catalog into a data frame with one row per attribute.

        The columns follow the default structure of `load_csv`. Relations without attributes are exported with an empty
        attribute.
        """
        rows: list[dict] = []
        for name, relation in self._relations.items():
            if not len(relation):
                rows.append({"relation": name, "tuple_count": relation.tuple_count, "attribute": None, "value_count": None})
            for attr in relation.attributes():
                rows.append({"relation": name, "tuple_count": relation.tuple_count,
                             "attribute": attr.name, "value_count": attr.value_count})
        return util.as_df(rows)

    def __json__(self) -> util.jsondict:
        return dict(self._relations)

    def __contains__(self, name: object) -> bool:
        return name in self._relations

    def __len__(self) -> int:
        return len(self._relations)

    def __repr__(self) -> str:
        return f"StatisticsCatalog({', '.join(self._relations)})"
