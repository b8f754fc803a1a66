"""Model base class: field registry, value storage, serialization and change tracking.

Usage:
    registry = ModelRegistry()

    class Person(Model, registry=registry):
        name = field(str)
        emails = field(list[str], default=list)

    @registry.register
    class Employee(Person):
        team = field(str, serialized_name="department")

    alice = Employee(name="Alice", team="Platform")
    payload = alice.serialize()       # {"_type": "Employee", "name": "Alice", ...}
    copy = Person.deserialize(payload)  # -> Employee, not Person

    copy.team = "Infra"
    copy.is_changed()  # True
    copy.rollback()    # team is "Platform" again
"""

from __future__ import annotations

import logging
import warnings
from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
from dataclasses import replace
from types import MappingProxyType
from typing import Any, ClassVar, Self

from modelcore.config import get_settings
from modelcore.core.errors import DuplicateFieldError, RegistryMissingError, TypeMismatchError
from modelcore.core.model.field import Field, SerializeOptions
from modelcore.core.model.models import is_model
from modelcore.core.model.registry import ModelRegistry
from modelcore.core.types import MISSING
from modelcore.core.util import find_from_one_or_many

logger = logging.getLogger(__name__)

_INSTANCE_STATE = frozenset({"_field_values", "_saved_field_values", "_in_traversal"})


class Model:
    """Base class for change-tracked, polymorphically serializable entities.

    Class state:
        _fields: Read-only mapping of field name to Field, in declaration order.
            Each definition replaces it with an extended copy, so a subclass never
            mutates its parent's mapping.
        _registry: Registry resolving type tags, inherited by subclasses.

    Instance state:
        _field_values: Current typed value per field name.
        _saved_field_values: Value each field held before its first change since
            the last commit or rollback. None when nothing changed.

    Args:
        data: Mapping of field name to raw value (serialized names when deserializing).
        is_deserializing: Populate from a payload without recording changes or
            applying defaults.
        **values: Field values, merged over ``data``.

    Raises:
        TypeMismatchError: If data is not a mapping, or is tagged with another type
            (use ``create`` for tagged payloads).
    """

    _fields: ClassVar[Mapping[str, Field]] = MappingProxyType({})
    _registry: ClassVar[ModelRegistry | None] = None

    def __init_subclass__(
        cls,
        *,
        registry: ModelRegistry | None = None,
        type_name: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init_subclass__(**kwargs)
        if type_name is not None:
            cls.__type_name__ = type_name
        if registry is not None:
            cls._registry = registry

    def __init__(
        self,
        data: Mapping[str, Any] | None = None,
        /,
        *,
        is_deserializing: bool = False,
        **values: Any,
    ) -> None:
        self._field_values: dict[str, Any] = {}
        self._saved_field_values: dict[str, Any] | None = None
        self._in_traversal = False

        if values:
            if data is None:
                data = values
            elif isinstance(data, Mapping):
                data = {**data, **values}

        if data is not None:
            self._populate(data, is_deserializing=is_deserializing)

        if not is_deserializing:
            self._apply_defaults()

    # Construction

    @classmethod
    def create(cls, data: Any = None, *, is_deserializing: bool = False) -> Self:
        """Build an instance of this class (or of the subclass a payload is tagged with).

        - None: a fresh instance (defaults applied unless deserializing).
        - A model instance: returned as-is if it is of this type.
        - A mapping tagged with another type name: resolved through the registry
          and built as that class, which must be a subtype of this one.
        - Any other mapping: populated field by field, unknown keys ignored.

        Args:
            data: Raw value.
            is_deserializing: Whether data is a serialized payload.

        Returns:
            Model instance of this class or one of its subclasses.

        Raises:
            TypeMismatchError: If data is not a mapping, or is a model (or is tagged
                with a type) that is not a subtype of this class.
            RegistryMissingError: If a tag must be resolved and no registry is installed.
            UnknownTypeError: If the tag is not registered.
        """
        if data is None:
            return cls(is_deserializing=is_deserializing)

        if is_model(data):
            if not data.is_of_type(cls.get_name()):
                raise TypeMismatchError(
                    f"Type mismatch (expected: '{cls.get_name()}', provided: '{type(data).__name__}')"
                )
            return data  # type: ignore[no-any-return]

        if not isinstance(data, Mapping):
            raise TypeMismatchError(
                f"Type mismatch (model: '{cls.get_name()}', expected: 'mapping', "
                f"provided: '{type(data).__name__}')"
            )

        type_key = get_settings().type_key
        if type_key in data:
            tag = data[type_key]
            if not isinstance(tag, str):
                raise TypeMismatchError(
                    f"Type mismatch (model: '{cls.get_name()}', expected type tag string, "
                    f"provided: '{type(tag).__name__}')"
                )
            if tag != cls.get_name():
                model = cls.resolve_model(tag)
                payload = {key: value for key, value in data.items() if key != type_key}
                instance = model.create(payload, is_deserializing=is_deserializing)
                return cls.create(instance, is_deserializing=is_deserializing)

        return cls(data, is_deserializing=is_deserializing)

    @classmethod
    def deserialize(cls, data: Any) -> Self:
        """Build an instance from a serialized payload.

        Never applies defaults and never records changes.
        """
        return cls.create(data, is_deserializing=True)

    def clone(self) -> Self:
        """Deep copy through the wire representation."""
        return type(self).deserialize(self.serialize())

    def _populate(self, data: Any, *, is_deserializing: bool) -> None:
        cls = type(self)
        if not isinstance(data, Mapping):
            raise TypeMismatchError(
                f"Type mismatch (model: '{cls.get_name()}', expected: 'mapping', "
                f"provided: '{type(data).__name__}')"
            )

        type_key = get_settings().type_key
        for name, value in data.items():
            if name == type_key:
                if value != cls.get_name():
                    raise TypeMismatchError(
                        f"Type mismatch (expected: '{cls.get_name()}', provided: '{value}'); "
                        f"use {cls.__name__}.create() for tagged payloads"
                    )
                continue
            field = cls.get_field_by_serialized_name(name) if is_deserializing else cls.get_field(name)
            if field is None:
                logger.debug(f"Ignoring unknown field '{name}' for model {cls.get_name()}")
                continue
            self._set_field_value(field, value, is_deserializing=is_deserializing)

    def _apply_defaults(self) -> None:
        for field in type(self)._fields.values():
            if field.default is MISSING or self._field_values.get(field.name) is not None:
                continue
            value = field.resolve_default()
            if value is None:
                continue
            self._field_values[field.name] = field.create_value(value, self)

    # Field registry

    @classmethod
    def get_name(cls) -> str:
        """Type tag of this class (``type_name=`` class keyword, or the class name)."""
        return cls.__dict__.get("__type_name__", cls.__name__)  # type: ignore[no-any-return]

    @classmethod
    def define_field(cls, name: str, field: Field) -> Field:
        """Register a field on this class.

        Args:
            name: Field name, unique along the inheritance chain.
            field: Field descriptor.

        Returns:
            The registered field.

        Raises:
            DuplicateFieldError: If the name is already defined on this class or an ancestor.
            ValueError: If the name would shadow Model's own attributes.
        """
        if name in cls._fields:
            raise DuplicateFieldError(f"Field already exists (model: '{cls.get_name()}', name: '{name}')")
        if name in _INSTANCE_STATE or hasattr(Model, name):
            raise ValueError(f"Field name '{name}' is reserved by Model")

        field.bind(name)
        cls._fields = MappingProxyType({**cls._fields, name: field})
        if cls.__dict__.get(name) is not field:
            setattr(cls, name, field)
        return field

    @classmethod
    def set_field(cls, name: str, value_type: Any = Any, **options: Any) -> Field:
        """Create and register a field outside of the class body.

        Args:
            name: Field name.
            value_type: Declared type.
            **options: serialized_name, default, is_owned.

        Returns:
            The registered field.
        """
        return cls.define_field(name, Field(value_type, **options))

    @classmethod
    def get_field(cls, name: str) -> Field | None:
        """Get a field by declared name."""
        return cls._fields.get(name)

    @classmethod
    def get_field_by_serialized_name(cls, name: str) -> Field | None:
        """Get a field by its wire key (serialized name, or declared name if it has none)."""
        return cls.for_each_field(lambda field: field if field.wire_name == name else None)

    @classmethod
    def get_fields(cls) -> Mapping[str, Field]:
        """Read-only mapping of every field, inherited ones first."""
        return cls._fields

    @classmethod
    def for_each_field[R](cls, func: Callable[[Field], R | None]) -> R | None:
        """Call func on each field in declaration order.

        Returns:
            The first non-None result, which also stops the iteration.
        """
        for field in cls._fields.values():
            result = func(field)
            if result is not None:
                return result
        return None

    def for_each_submodel[R](self, func: Callable[[Any], R | None]) -> R | None:
        """Call func on each model held by a field, directly or inside a list.

        Returns:
            The first non-None result, which also stops the iteration.
        """

        def visit(field: Field) -> R | None:
            value = self._field_values.get(field.name)
            if value is None:
                return None
            return find_from_one_or_many(value, lambda item: func(item) if is_model(item) else None)

        return type(self).for_each_field(visit)

    # Type registry

    @classmethod
    def get_registry(cls) -> ModelRegistry:
        """Registry installed on this class or inherited from an ancestor.

        Raises:
            RegistryMissingError: If none is installed.
        """
        if cls._registry is None:
            raise RegistryMissingError(f"Registry not found (model: '{cls.get_name()}')")
        return cls._registry

    @classmethod
    def set_registry(cls, registry: ModelRegistry) -> None:
        """Install a registry on this class and, by inheritance, its subclasses."""
        own = cls.__dict__.get("_registry")
        if own is not None and own is not registry:
            warnings.warn(
                f"Replacing the registry installed on model {cls.get_name()}.",
                stacklevel=2,
            )
        cls._registry = registry

    @classmethod
    def resolve_model(cls, name: str) -> type[Model]:
        """Resolve a type tag through the registry.

        Raises:
            RegistryMissingError: If no registry is installed.
            UnknownTypeError: If the tag is not registered.
        """
        return cls.get_registry().resolve(name)

    def is_of_type(self, name: str) -> bool:
        """Check whether this instance's class, or an ancestor, has the given type name.

        "Model" always matches.
        """
        if name == "Model":
            return True
        return any(
            issubclass(klass, Model) and klass.get_name() == name for klass in type(self).__mro__
        )

    # Values

    def _get_field_value(self, field: Field) -> Any:
        return self._field_values.get(field.name)

    def _set_field_value(self, field: Field, value: Any, *, is_deserializing: bool = False) -> Any:
        value = field.create_value(value, self, is_deserializing=is_deserializing)
        if not is_deserializing:
            self._save_field_value(field)
        self._field_values[field.name] = value
        return value

    def _save_field_value(self, field: Field) -> None:
        if self._saved_field_values is None:
            self._saved_field_values = {}
        if field.name not in self._saved_field_values:
            self._saved_field_values[field.name] = self._field_values.get(field.name, MISSING)

    # Serialization

    def serialize(self, options: SerializeOptions | None = None, **kwargs: Any) -> dict[str, Any]:
        """Plain representation tagged with this class's type name.

        Args:
            options: Serialization policy. Built from kwargs when omitted.
            **kwargs: include_fields, include_changed_fields, include_undefined_fields,
                include_owned_fields (override fields of options when both are given).

        Returns:
            Mapping of wire key to plain value, plus the type tag.
        """
        if options is None:
            options = SerializeOptions(**kwargs)
        elif kwargs:
            options = replace(options, **kwargs)

        result: dict[str, Any] = {get_settings().type_key: type(self).get_name()}
        for field in type(self)._fields.values():
            if not (
                options.selects(field)
                or (options.include_changed_fields and self.field_is_changed(field))
                or (options.include_owned_fields and field.is_owned)
            ):
                continue
            value = field.serialize_value(self._field_values.get(field.name), options)
            if value is not MISSING:
                result[field.wire_name] = value
        return result

    # Change tracking

    @contextmanager
    def _traversal(self) -> Iterator[None]:
        self._in_traversal = True
        try:
            yield
        finally:
            self._in_traversal = False

    def commit(self) -> None:
        """Accept all pending changes here and in every reachable submodel."""
        if self._in_traversal:
            return
        self._saved_field_values = None
        with self._traversal():
            self.for_each_submodel(lambda submodel: submodel.commit())

    def rollback(self) -> None:
        """Restore every changed field here and in every reachable submodel."""
        if self._in_traversal:
            return
        if self._saved_field_values is not None:
            for name, value in self._saved_field_values.items():
                if value is MISSING:
                    self._field_values.pop(name, None)
                else:
                    self._field_values[name] = value
            logger.debug(
                f"Rolled back {len(self._saved_field_values)} field(s) of {type(self).get_name()}"
            )
            self._saved_field_values = None
        with self._traversal():
            self.for_each_submodel(lambda submodel: submodel.rollback())

    def is_changed(self) -> bool:
        """Check for pending changes here or in any reachable submodel."""
        if self._saved_field_values is not None:
            return True
        if self._in_traversal:
            return False
        with self._traversal():
            return self.for_each_submodel(lambda submodel: True if submodel.is_changed() else None) is True

    def field_is_changed(self, field: Field | str) -> bool:
        """Check whether one field changed since the last commit.

        True if the field was assigned, or if its value is (or contains) a model
        with pending changes.

        Raises:
            KeyError: If field is a name not defined on this model.
        """
        if isinstance(field, str):
            name = field
            found = type(self).get_field(name)
            if found is None:
                raise KeyError(f"Unknown field (model: '{type(self).get_name()}', name: '{name}')")
            field = found

        if self._saved_field_values is not None and field.name in self._saved_field_values:
            return True

        value = self._field_values.get(field.name)
        if value is None:
            return False
        changed = find_from_one_or_many(
            value, lambda item: True if is_model(item) and item.is_changed() else None
        )
        return changed is True

    def __repr__(self) -> str:
        values = ", ".join(
            f"{name}={self._field_values[name]!r}"
            for name in type(self)._fields
            if name in self._field_values
        )
        return f"{type(self).get_name()}({values})"
