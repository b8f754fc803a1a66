"""Type registry resolving wire type tags to model classes.

Usage:
    registry = ModelRegistry()

    class Shape(Model, registry=registry):
        pass

    @registry.register
    class Circle(Shape):
        radius = field(float)

    Shape.deserialize({"_type": "Circle", "radius": 2.0})  # -> Circle
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import overload

from modelcore.core.errors import UnknownTypeError


class ModelRegistry:
    """Mapping from type tag to model class, shared by one model hierarchy.

    Installed on a base model class (``registry=`` class keyword or
    ``set_registry``) and inherited by its subclasses.
    """

    def __init__(self) -> None:
        """Initialize empty model registry."""
        self._by_name: dict[str, type] = {}

    @overload
    def register(self, cls: type) -> type: ...

    @overload
    def register(self, cls: None = None, *, name: str | None = None) -> Callable[[type], type]: ...

    def register(
        self, cls: type | None = None, *, name: str | None = None
    ) -> type | Callable[[type], type]:
        """Register a model class under its type name.

        Supports three forms:
            @registry.register                  # bare decorator
            @registry.register(name="Legacy")   # explicit tag
            registry.register(Circle)           # plain call

        Args:
            cls: Model class to register, or None if called with arguments.
            name: Tag to register under (defaults to ``cls.get_name()``). Also
                becomes the tag the class serializes with.

        Returns:
            The class itself, or a decorator.

        Raises:
            RuntimeError: If the tag is already registered to a different class.
        """

        def decorator(c: type) -> type:
            tag = name if name is not None else c.get_name()  # type: ignore[attr-defined]
            existing = self._by_name.get(tag)
            if existing is not None and existing is not c:
                raise RuntimeError(f"Model name collision: {c} and {existing} both use '{tag}'")
            if tag != c.get_name():  # type: ignore[attr-defined]
                # registered tag is the wire tag
                c.__type_name__ = tag  # type: ignore[attr-defined]
            self._by_name[tag] = c
            return c

        if cls is None:
            return decorator
        return decorator(cls)

    def get(self, name: str) -> type | None:
        """Get a model class by tag, or None if not registered."""
        return self._by_name.get(name)

    def resolve(self, name: str) -> type:
        """Get a model class by tag.

        Raises:
            UnknownTypeError: If no class is registered under the tag.
        """
        model = self._by_name.get(name)
        if model is None:
            raise UnknownTypeError(f"Model not found (name: '{name}')")
        return model

    def is_registered(self, cls: type) -> bool:
        """Check whether a class is registered under any tag."""
        return any(c is cls for c in self._by_name.values())

    def names(self) -> list[str]:
        """Registered tags in registration order."""
        return list(self._by_name)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __len__(self) -> int:
        return len(self._by_name)

    def __iter__(self) -> Iterator[str]:
        return iter(self._by_name)
