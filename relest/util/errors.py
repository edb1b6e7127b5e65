"""Contains various general errors that extend Python's base errors."""
from __future__ import annotations


class LogicError(RuntimeError):
    """Generic error to indicate that an algorithmic assumption of relest was violated.

    As a rule of thumb, if the user supplies faulty input, a `ValueError` should be raised instead. Encountering a
    `LogicError` therefore indicates a bug in relest itself.
    """
    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)


class StateError(RuntimeError):
    """Indicates that an object is not in the right state to perform an operation."""
    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
