"""Model capability protocol.

Values are recognized as models by what they can do, not by class identity, so
models from independently imported modules interoperate.
"""

from __future__ import annotations

from typing import Any, Protocol, Self, get_origin, runtime_checkable


@runtime_checkable
class ModelLike(Protocol):
    """Change-tracked, serializable, type-tagged object."""

    @classmethod
    def create(cls, data: Any = None, *, is_deserializing: bool = False) -> Self: ...

    def is_of_type(self, name: str) -> bool: ...

    def serialize(self, options: Any = None, **kwargs: Any) -> dict[str, Any]: ...

    def is_changed(self) -> bool: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


def is_model(value: Any) -> bool:
    """Check whether a value is a model instance.

    Args:
        value: Value to check.

    Returns:
        True if value implements ModelLike and reports the root "Model" type.
    """
    return (
        not isinstance(value, type) and isinstance(value, ModelLike) and value.is_of_type("Model")
    )


def is_model_type(value_type: Any) -> bool:
    """Check whether a declared field type is a model class.

    Args:
        value_type: Declared type.

    Returns:
        True if value_type is a class implementing ModelLike.
    """
    return (
        isinstance(value_type, type)
        and get_origin(value_type) is None
        and issubclass(value_type, ModelLike)
    )
