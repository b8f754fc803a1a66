"""modelcore: typed object modeling with field masks and change tracking.

Usage:
    from modelcore import FieldMask, Model, ModelRegistry, field

    registry = ModelRegistry()

    class Address(Model, registry=registry):
        city = field(str)

    @registry.register
    class Person(Model, registry=registry):
        name = field(str)
        address = field(Address)

    person = Person.deserialize({"_type": "Person", "name": "Ada", "address": {"city": "London"}})
    person.address.city = "Paris"
    person.is_changed()  # True, through the submodel

    mask = FieldMask({"name": True}) | FieldMask({"address": {"city": True}})
    person.serialize(include_fields=mask)
"""

__version__ = "0.1.0"

# Configuration
from modelcore.config import ModelSettings, get_settings

# Core primitives
from modelcore.core import (
    MISSING,
    DefaultResolutionError,
    DuplicateFieldError,
    Field,
    FieldMask,
    FieldMaskLike,
    IncompatibleMaskError,
    InvalidArgumentError,
    Model,
    ModelCoreError,
    ModelLike,
    ModelRegistry,
    RegistryMissingError,
    SerializeOptions,
    TypeMismatchError,
    UnknownTypeError,
    field,
    is_field_mask,
    is_model,
    is_model_type,
)

__all__ = [
    # Version
    "__version__",
    # Config
    "ModelSettings",
    "get_settings",
    # Mask
    "FieldMask",
    "FieldMaskLike",
    "is_field_mask",
    # Model
    "Model",
    "ModelLike",
    "ModelRegistry",
    "Field",
    "field",
    "SerializeOptions",
    "is_model",
    "is_model_type",
    "MISSING",
    # Errors
    "ModelCoreError",
    "InvalidArgumentError",
    "IncompatibleMaskError",
    "TypeMismatchError",
    "DuplicateFieldError",
    "UnknownTypeError",
    "RegistryMissingError",
    "DefaultResolutionError",
]
