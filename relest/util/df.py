"""Utilities to work with Pandas data frames"""

from __future__ import annotations

from collections.abc import Collection
from pathlib import Path
from typing import Any

import pandas as pd


def as_df(data: Collection[dict[Any, Any]]) -> pd.DataFrame:
    """Generates a new Pandas `DataFrame` from a collection of dictionaries.

    Each dictionary corresponds to one row of the data frame. All dictionaries have to consist of exactly the same keys,
    which become the columns of the data frame. The precise columns are inferred from the first dictionary.
    """
    if not data:
        return pd.DataFrame()
    data_template = next(iter(data))
    df_container: dict[str, list[Any]] = {col: [] for col in data_template.keys()}
    for row in data:
        for key in df_container.keys():
            df_container[key].append(row[key])
    return pd.DataFrame(df_container)


def read_df(path: str | Path, **kwargs) -> pd.DataFrame:
    """Reads a data frame from a CSV or JSON file. The format is inferred from the file suffix.

    All keyword arguments are passed to the respective Pandas reader.

    Raises
    ------
    ValueError
        If the file suffix is neither *.csv* nor *.json*
    """
    path = Path(path)
    match path.suffix.lower():
        case ".csv":
            return pd.read_csv(path, **kwargs)
        case ".json":
            return pd.read_json(path, **kwargs)
        case _:
            raise ValueError(f"Unsupported data frame format: '{path.suffix}'")
