"""Field descriptor and serialization options.

Usage:
    class Article(Model):
        title = field(str)
        slug = field(str, serialized_name="permalink")
        tags = field(list[str], default=list)
        author = field(Person, is_owned=True)
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, replace
from types import NoneType, UnionType
from typing import TYPE_CHECKING, Any, Union, get_args, get_origin

from pydantic import PydanticSchemaGenerationError, TypeAdapter, ValidationError

from modelcore.config import get_settings
from modelcore.core.errors import DefaultResolutionError, TypeMismatchError
from modelcore.core.mask.models import FieldMask, is_field_mask
from modelcore.core.model.models import is_model, is_model_type
from modelcore.core.types import MISSING

if TYPE_CHECKING:
    from modelcore.core.types import IncludeFields


def _strip_optional(value_type: Any) -> Any:
    """Reduce ``X | None`` to ``X``; a missing value is already represented by None."""
    if get_origin(value_type) not in (Union, UnionType):
        return value_type
    args = [arg for arg in get_args(value_type) if arg is not NoneType]
    if len(args) == 1:
        return args[0]
    if any(is_model_type(_strip_list(arg)) for arg in args):
        raise TypeError(f"Unions of model types are not supported (received: {value_type!r})")
    return value_type


def _strip_list(value_type: Any) -> Any:
    if get_origin(value_type) is list:
        args = get_args(value_type)
        return args[0] if args else Any
    return value_type


@dataclass(frozen=True, slots=True)
class SerializeOptions:
    """Field selection policy applied by ``Model.serialize``.

    A field is serialized if ANY of: ``include_fields`` selects it, it changed
    since the last commit and ``include_changed_fields`` is set, or it is owned
    and ``include_owned_fields`` is set.
    """

    include_fields: IncludeFields = True
    """True/False, a sequence of names, a FieldMask, or a predicate over Field."""

    include_changed_fields: bool = False
    """Also serialize fields changed since the last commit."""

    include_undefined_fields: bool = False
    """Emit None for fields without a value instead of omitting them."""

    include_owned_fields: bool = False
    """Also serialize fields declared with ``is_owned=True``."""

    def selects(self, field: Field) -> bool:
        """Check whether ``include_fields`` alone selects a field."""
        include = self.include_fields
        if include is True or include is False:
            return include
        if is_field_mask(include):
            return field.name in include.__field_mask__()  # type: ignore[union-attr]
        if callable(include):
            return bool(include(field))
        if isinstance(include, Sequence) and not isinstance(include, str):
            return field.name in include
        raise TypeError(f"Invalid include_fields value: {include!r}")

    def for_field(self, field: Field) -> SerializeOptions:
        """Options to pass down when serializing the value of ``field``.

        A FieldMask is narrowed to the field's sub-selection: a leaf selects
        everything below, and a field the mask does not select (serialized only
        because it changed or is owned) passes down an empty mask. Every other
        policy is passed through unchanged.
        """
        include = self.include_fields
        if not is_field_mask(include):
            return self
        subfields = include.__field_mask__().get(field.name)  # type: ignore[union-attr]
        if subfields is True:
            return replace(self, include_fields=True)
        return replace(self, include_fields=FieldMask(subfields))


class Field:
    """Declared field of a model class.

    A data descriptor: reading or assigning the attribute on a model instance goes
    through the model's value storage, so assignments are change-tracked.

    Args:
        value_type: Declared type. A Model subclass, ``list[ModelSubclass]`` (either
            optionally ``| None``), or any
            type pydantic can validate. Defaults to Any.
        serialized_name: Key used on the wire (defaults to the field name).
        default: Static value, or a zero-argument producer (which may itself return
            a producer).
        is_owned: Serialize even when not selected, if owned fields are requested.
    """

    __slots__ = ("name", "value_type", "serialized_name", "default", "is_owned", "_adapter")

    def __init__(
        self,
        value_type: Any = Any,
        *,
        serialized_name: str | None = None,
        default: Any = MISSING,
        is_owned: bool = False,
    ) -> None:
        self.name = ""
        self.value_type = _strip_optional(value_type)
        self.serialized_name = serialized_name
        self.default = default
        self.is_owned = is_owned
        self._adapter: TypeAdapter[Any] | None = None
        # rejects unions of models inside lists up front
        self._list_item_type()

    @property
    def wire_name(self) -> str:
        """Key used for this field in serialized payloads."""
        return self.serialized_name or self.name

    @property
    def model_type(self) -> type | None:
        """Model class held by this field (directly or as list items), if any."""
        if is_model_type(self.value_type):
            return self.value_type  # type: ignore[no-any-return]
        item_type = self._list_item_type()
        if item_type is not None and is_model_type(item_type):
            return item_type
        return None

    def _list_item_type(self) -> Any:
        if get_origin(self.value_type) is list:
            args = get_args(self.value_type)
            return _strip_optional(args[0]) if args else Any
        return None

    def _is_model_list(self) -> bool:
        item_type = self._list_item_type()
        return item_type is not None and is_model_type(item_type)

    def _get_adapter(self) -> TypeAdapter[Any]:
        if self._adapter is None:
            try:
                self._adapter = TypeAdapter(self.value_type)
            except PydanticSchemaGenerationError as e:
                raise TypeError(f"Unsupported type for field '{self.name}': {self.value_type!r}") from e
        return self._adapter

    def bind(self, name: str) -> None:
        """Attach the declared name. Called once when the field is defined on a model."""
        if self.name and self.name != name:
            raise ValueError(f"Field '{self.name}' cannot be rebound as '{name}'")
        self.name = name

    def create_value(self, raw: Any, owner: Any, *, is_deserializing: bool = False) -> Any:
        """Coerce a raw value into this field's typed representation.

        Args:
            raw: Raw value (None means "no value").
            owner: Model instance the value is assigned to.
            is_deserializing: Whether raw comes from a serialized payload.

        Returns:
            Typed value, possibly a newly constructed model or list of models.

        Raises:
            TypeMismatchError: If the value does not fit the declared type.
        """
        if raw is None:
            return None

        if is_model_type(self.value_type):
            return self.value_type.create(raw, is_deserializing=is_deserializing)

        if self._is_model_list():
            if not isinstance(raw, (list, tuple)):
                raise TypeMismatchError(
                    f"Type mismatch (field: '{self.name}', expected: 'list', "
                    f"provided: '{type(raw).__name__}')"
                )
            item_type = self._list_item_type()
            return [
                None if item is None else item_type.create(item, is_deserializing=is_deserializing)
                for item in raw
            ]

        try:
            return self._get_adapter().validate_python(
                raw,
                strict=get_settings().strict_scalars,
                context={"owner": owner, "field": self.name},
            )
        except ValidationError as e:
            raise TypeMismatchError(
                f"Type mismatch (field: '{self.name}', provided: '{type(raw).__name__}'): "
                f"{e.errors()[0]['msg']}"
            ) from e

    def serialize_value(self, value: Any, options: SerializeOptions) -> Any:
        """Turn a typed value into plain data.

        Args:
            value: Current typed value (None means "no value").
            options: Serialization policy, applied recursively to nested models.

        Returns:
            Plain value, or MISSING if the field should be omitted.
        """
        if value is None:
            return None if options.include_undefined_fields else MISSING

        nested = options.for_field(self)

        if is_model(value):
            return value.serialize(nested)

        if isinstance(value, list) and self._is_model_list():
            return [None if item is None else item.serialize(nested) for item in value]

        return self._get_adapter().dump_python(value, mode="json")

    def resolve_default(self) -> Any:
        """Resolve the declared default.

        Producers are called until the result is no longer callable, at most
        ``max_default_resolution_depth`` times.

        Returns:
            The default value, or None if the field has no default.

        Raises:
            DefaultResolutionError: If the producer chain does not settle in time.
        """
        value = self.default
        if value is MISSING:
            return None
        limit = get_settings().max_default_resolution_depth
        calls = 0
        while callable(value):
            if calls >= limit:
                raise DefaultResolutionError(
                    f"Default of field '{self.name}' still callable after {limit} calls"
                )
            value = value()
            calls += 1
        return value

    def __set_name__(self, owner: type, name: str) -> None:
        define_field = getattr(owner, "define_field", None)
        if define_field is None:
            raise TypeError(f"Field '{name}' must be declared on a Model subclass, not {owner.__name__}")
        define_field(name, self)

    def __get__(self, instance: Any, owner: type | None = None) -> Any:
        if instance is None:
            return self
        return instance._get_field_value(self)

    def __set__(self, instance: Any, value: Any) -> None:
        instance._set_field_value(self, value)

    def __repr__(self) -> str:
        type_name = getattr(self.value_type, "__name__", repr(self.value_type))
        return f"Field(name={self.name!r}, type={type_name})"


def field(
    value_type: Any = Any,
    *,
    serialized_name: str | None = None,
    default: Any = MISSING,
    is_owned: bool = False,
) -> Any:
    """Declare a field in a model class body.

    Args:
        value_type: Declared type of the field.
        serialized_name: Key used on the wire (defaults to the attribute name).
        default: Static value or zero-argument producer.
        is_owned: Serialize whenever owned fields are requested.

    Returns:
        A Field descriptor (typed as Any so it can be assigned to annotated attributes).

    Note:
        >>> class Person(Model):
        ...     name = field(str)
        ...     nickname = field(str, serialized_name="nick", default="")
    """
    return Field(
        value_type,
        serialized_name=serialized_name,
        default=default,
        is_owned=is_owned,
    )
