"""Core functionalities: field masks, models, and their building blocks.

Architecture Note:
    mask/ is pure: selection trees and stateless set algebra over them.
    model/ holds the stateful entity base class plus the field descriptor and
    type registry it is configured with. Settings live in modelcore.config.
"""

from modelcore.core.errors import (
    DefaultResolutionError,
    DuplicateFieldError,
    IncompatibleMaskError,
    InvalidArgumentError,
    ModelCoreError,
    RegistryMissingError,
    TypeMismatchError,
    UnknownTypeError,
)
from modelcore.core.mask import (
    FieldMask,
    FieldMaskLike,
    copy_fields,
    includes_fields,
    is_field_mask,
    merge_fields,
    remove_fields,
)
from modelcore.core.model import (
    Field,
    Model,
    ModelLike,
    ModelRegistry,
    SerializeOptions,
    field,
    is_model,
    is_model_type,
)
from modelcore.core.types import MISSING, IncludeFields
from modelcore.core.util import find_from_one_or_many

__all__ = [
    # Types
    "MISSING",
    "IncludeFields",
    "find_from_one_or_many",
    # Errors
    "ModelCoreError",
    "InvalidArgumentError",
    "IncompatibleMaskError",
    "TypeMismatchError",
    "DuplicateFieldError",
    "UnknownTypeError",
    "RegistryMissingError",
    "DefaultResolutionError",
    # Mask
    "FieldMask",
    "FieldMaskLike",
    "is_field_mask",
    "copy_fields",
    "includes_fields",
    "merge_fields",
    "remove_fields",
    # Model
    "Model",
    "ModelLike",
    "ModelRegistry",
    "Field",
    "field",
    "SerializeOptions",
    "is_model",
    "is_model_type",
]
