"""Small helpers shared by the model engine."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any


def find_from_one_or_many[T, R](value: T | list[T] | tuple[T, ...], func: Callable[[T], R | None]) -> R | None:
    """Apply ``func`` to a value, or to each element when the value is a list or tuple.

    Stops at the first element for which ``func`` returns something other than None.

    Args:
        value: Single value or sequence of values.
        func: Function applied to each value.

    Returns:
        First non-None result, or None if every call returned None.
    """
    if isinstance(value, (list, tuple)):
        items: list[Any] | tuple[Any, ...] = value
        for item in items:
            result = func(item)
            if result is not None:
                return result
        return None
    return func(value)  # type: ignore[arg-type]
