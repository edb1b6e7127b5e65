from __future__ import annotations

from typing import TypeVar

T = TypeVar("T")
"""Typed helpers use this generic type variable."""
