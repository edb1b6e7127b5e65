"""Contains utilities to export plans and statistics to JSON more conveniently.

The `JsonizeEncoder` (accessed via `to_json`) transforms instances of any class to JSON, as long as the class provides a
`__json__` method. This method does not take any (required) parameters and returns a JSON-izeable representation of the
current instance, e.g. a `dict` or a `list`. All operators, predicates and statistics of relest implement it.

The inverse conversion is not supported since JSON does not store any type information.
"""

from __future__ import annotations

import abc
import dataclasses
import json
from typing import Any, Protocol, runtime_checkable

jsondict = dict
"""Type alias for a JSON-izeable dictionary."""


@runtime_checkable
class Jsonizable(Protocol):
    """Protocol to indicate that a certain class provides the `__json__` method."""

    @abc.abstractmethod
    def __json__(self) -> jsondict:
        raise NotImplementedError


class JsonizeEncoder(json.JSONEncoder):
    """The JsonizeEncoder transforms objects that provide a `__json__` method, as well as dataclass instances."""

    def default(self, obj: Any) -> Any:
        if isinstance(obj, Jsonizable):
            return obj.__json__()
        elif dataclasses.is_dataclass(obj) and not isinstance(obj, type):
            return dataclasses.asdict(obj)
        return json.JSONEncoder.default(self, obj)


def to_json(obj: Any, *args, **kwargs) -> str | None:
    """Transforms any object to a JSON string, while making use of the `JsonizeEncoder`.

    All arguments other than the object itself are passed to the default Python `json.dumps` function.
    """
    if obj is None:
        return None
    kwargs.pop("cls", None)
    return json.dumps(obj, *args, cls=JsonizeEncoder, **kwargs)

